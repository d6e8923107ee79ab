import time

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from loguru import logger

from app.core.auth import require_admin
from app.core.config import ALLOWED_IMAGE_TYPES, ALLOWED_VIDEO_TYPES, UPLOAD_MAX_MB
from app.core.errors import ValidationError
from app.api.deps import get_media_manager, get_provider_store
from app.schemas.enums import MediaKind
from app.schemas.media import (
    ExportPlanResponse,
    ImageUrlRequest,
    MediaResponse,
    ProviderMedia,
    PurgeResponse,
    SetMainRequest,
)
from app.services.export import build_export_plan, plan_to_dicts
from app.services.media_lifecycle import MediaLifecycleManager
from app.services.object_store import ObjectStoreGateway, get_object_store
from app.services.provider_store import ProviderStore

router = APIRouter(prefix="/v1/providers", tags=["media"], dependencies=[Depends(require_admin)])


def _media_response(message: str, media: ProviderMedia) -> MediaResponse:
    return MediaResponse(message=message, images=media.images, videos=media.videos)


def _detect_media_type(file: UploadFile) -> MediaKind:
    if file.content_type:
        if file.content_type.startswith("video"):
            return MediaKind.video
        if file.content_type.startswith("image"):
            return MediaKind.image
    raise ValidationError(
        "Unsupported file type",
        details={"content_type": file.content_type},
    )


# -------------------------------
# DOWNLOAD PROXY
# -------------------------------
@router.get("/download")
def download_file(
    url: str = Query(..., min_length=1),
    object_store: ObjectStoreGateway = Depends(get_object_store),
):
    if not object_store.owns(url):
        raise ValidationError("URL does not point into the media bucket", details={"url": url})

    obj = object_store.fetch_bytes(url)

    headers = {}
    if obj.content_disposition:
        headers["Content-Disposition"] = obj.content_disposition

    return Response(content=obj.data, media_type=obj.content_type, headers=headers)


# -------------------------------
# IMAGES
# -------------------------------
@router.post("/{provider_id}/images", response_model=MediaResponse)
def add_image(
    provider_id: str,
    payload: ImageUrlRequest,
    manager: MediaLifecycleManager = Depends(get_media_manager),
):
    media = manager.attach(provider_id, payload.image_url)
    return _media_response("Image added successfully", media)


@router.put("/{provider_id}/images", response_model=MediaResponse)
def update_image(
    provider_id: str,
    payload: SetMainRequest,
    manager: MediaLifecycleManager = Depends(get_media_manager),
):
    media = manager.set_main(provider_id, payload.image_url, payload.is_main)
    return _media_response("Image updated successfully", media)


@router.delete("/{provider_id}/images", response_model=MediaResponse)
def delete_image(
    provider_id: str,
    payload: ImageUrlRequest,
    manager: MediaLifecycleManager = Depends(get_media_manager),
):
    media = manager.remove_one(provider_id, payload.image_url)
    return _media_response("Image deleted successfully", media)


# -------------------------------
# UPLOAD + ATTACH
# -------------------------------
@router.post("/{provider_id}/media/upload", response_model=MediaResponse)
async def upload_media(
    provider_id: str,
    file: UploadFile = File(...),
    manager: MediaLifecycleManager = Depends(get_media_manager),
    object_store: ObjectStoreGateway = Depends(get_object_store),
):
    kind = _detect_media_type(file)
    allowed = ALLOWED_IMAGE_TYPES if kind == MediaKind.image else ALLOWED_VIDEO_TYPES
    if file.content_type not in allowed:
        raise ValidationError(
            "Unsupported file type",
            details={"content_type": file.content_type, "allowed": list(allowed)},
        )

    data = await file.read()
    if len(data) > UPLOAD_MAX_MB * 1024 * 1024:
        raise ValidationError(f"File exceeds {UPLOAD_MAX_MB} MB", details={"size": len(data)})

    # fail before touching the bucket if the provider is gone
    manager.get_media(provider_id)

    path = f"providers/{provider_id}/{int(time.time() * 1000)}_{file.filename}"
    url = object_store.upload(path, data, file.content_type)
    logger.info(f"[media] uploaded provider={provider_id} kind={kind.value} path={path}")

    media = manager.attach(provider_id, url, kind)
    return _media_response(f"{kind.value.capitalize()} uploaded successfully", media)


# -------------------------------
# PURGE
# -------------------------------
@router.delete("/{provider_id}/media", response_model=PurgeResponse)
def delete_all_media(
    provider_id: str,
    manager: MediaLifecycleManager = Depends(get_media_manager),
):
    result = manager.purge_all(provider_id)
    message = "All media deleted successfully" if result.clean else "Media cleared; some files could not be removed from storage"
    return PurgeResponse(
        message=message,
        attempted=result.attempted,
        failed=result.failed,
        failed_urls=result.failed_urls,
    )


# -------------------------------
# EXPORT PLAN
# -------------------------------
@router.get("/{provider_id}/export", response_model=ExportPlanResponse)
def export_plan(
    provider_id: str,
    store: ProviderStore = Depends(get_provider_store),
):
    provider = store.get(provider_id)
    plan = build_export_plan(provider.name, ProviderMedia.from_document(provider.media))
    return ExportPlanResponse(provider_id=provider_id, total=len(plan), items=plan_to_dicts(plan))
