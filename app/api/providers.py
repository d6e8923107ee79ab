from typing import List, Optional

from fastapi import APIRouter, Depends
from loguru import logger

from app.core.auth import require_admin
from app.api.deps import get_cascade, get_provider_store
from app.models.provider import Provider
from app.schemas.media import ProviderMedia
from app.schemas.provider import (
    ProviderCreateRequest,
    ProviderResponse,
    ProviderUpdateRequest,
)
from app.services.cascade import ProviderCascade
from app.services.provider_store import ProviderStore

router = APIRouter(prefix="/v1/providers", tags=["providers"])


def _to_response(provider: Provider) -> ProviderResponse:
    return ProviderResponse(
        id=provider.id,
        name=provider.name,
        email=provider.email,
        category=provider.category,
        min_price=provider.min_price,
        max_price=provider.max_price,
        country=provider.country,
        city=provider.city,
        postal_code=provider.postal_code,
        street=provider.street,
        house_number=provider.house_number,
        phone_number=provider.phone_number,
        instagram=provider.instagram,
        facebook=provider.facebook,
        tiktok=provider.tiktok,
        media=ProviderMedia.from_document(provider.media),
        approved=provider.approved,
        created_at=provider.created_at,
        updated_at=provider.updated_at,
    )


# -------------------------------
# REGISTER (public)
# -------------------------------
@router.post("", response_model=ProviderResponse, status_code=201)
def register_provider(
    payload: ProviderCreateRequest,
    store: ProviderStore = Depends(get_provider_store),
):
    data = payload.model_dump(exclude={"media"})
    # re-normalize so a registration never lands without exactly one main image
    media = ProviderMedia.from_document(payload.media.to_document())
    if media.images:
        main_seen = False
        for item in media.images:
            item.is_main = item.is_main and not main_seen
            main_seen = main_seen or item.is_main
    data["media"] = media.to_document()

    provider = store.create(data)
    logger.info(
        f"[providers] registered id={provider.id} images={len(media.images)} videos={len(media.videos)}"
    )
    return _to_response(provider)


# -------------------------------
# ADMIN
# -------------------------------
@router.get("", response_model=List[ProviderResponse], dependencies=[Depends(require_admin)])
def list_providers(
    approved: Optional[bool] = None,
    store: ProviderStore = Depends(get_provider_store),
):
    return [_to_response(p) for p in store.list_all(approved=approved)]


@router.get("/{provider_id}", response_model=ProviderResponse, dependencies=[Depends(require_admin)])
def get_provider(
    provider_id: str,
    store: ProviderStore = Depends(get_provider_store),
):
    return _to_response(store.get(provider_id))


@router.patch("/{provider_id}", response_model=ProviderResponse, dependencies=[Depends(require_admin)])
def update_provider(
    provider_id: str,
    payload: ProviderUpdateRequest,
    cascade: ProviderCascade = Depends(get_cascade),
):
    changes = payload.model_dump(exclude_unset=True)
    return _to_response(cascade.update(provider_id, changes))


@router.delete("/{provider_id}", dependencies=[Depends(require_admin)])
def delete_provider(
    provider_id: str,
    cascade: ProviderCascade = Depends(get_cascade),
):
    result = cascade.delete(provider_id)
    return {
        "message": "Provider and associated media deleted successfully",
        "attempted": result.attempted,
        "failed": result.failed,
    }
