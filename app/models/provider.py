import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Enum, JSON, func
from app.core.db import Base
from app.schemas.enums import ProviderCategory


def _empty_media():
    return {"images": [], "videos": []}


class Provider(Base):
    __tablename__ = "provider"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    category = Column(
        Enum(ProviderCategory, name="provider_category_enum"),
        nullable=False
    )

    min_price = Column(Integer, nullable=False)
    max_price = Column(Integer, nullable=False)

    country = Column(String, nullable=False)
    city = Column(String, nullable=False)
    postal_code = Column(String, nullable=False)
    street = Column(String, nullable=False)
    house_number = Column(String, nullable=False)

    phone_number = Column(String, nullable=True)
    instagram = Column(String, nullable=True)
    facebook = Column(String, nullable=True)
    tiktok = Column(String, nullable=True)

    # embedded document: {"images": [{"url", "isMain"}], "videos": [...]}
    media = Column(JSON, nullable=False, default=_empty_media)

    approved = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
