from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from dotenv import load_dotenv
load_dotenv()

from app.core.logging import setup_logging
from app.core.init_db import init_db
from app.core.errors import ProviderDirectoryError
from app.api.router import api_router

setup_logging()
logger.info("Starting provider directory backend")


app = FastAPI(
    title="Provider Directory Backend",
    version="0.1.0"
)


@app.exception_handler(ProviderDirectoryError)
async def domain_error_handler(request: Request, exc: ProviderDirectoryError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# All API routes (providers + media)
app.include_router(api_router)

# Init DB after app is created
init_db()

@app.get("/health")
def health():
    logger.debug("Health check hit")
    return {"status": "ok"}
