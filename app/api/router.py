from fastapi import APIRouter

from app.api import media
from app.api import providers

api_router = APIRouter()

# media first: /v1/providers/download must win over /v1/providers/{provider_id}
api_router.include_router(media.router)
api_router.include_router(providers.router)
