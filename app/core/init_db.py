from loguru import logger
from app.core.db import engine, Base

# Import all models so SQLAlchemy registers them
from app.models.provider import Provider

def init_db():
    logger.info("Creating database tables")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
