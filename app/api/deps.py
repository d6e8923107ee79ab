from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.cascade import ProviderCascade
from app.services.media_lifecycle import MediaLifecycleManager
from app.services.object_store import ObjectStoreGateway, get_object_store
from app.services.provider_store import ProviderStore


def get_provider_store(db: Session = Depends(get_db)) -> ProviderStore:
    return ProviderStore(db)


def get_media_manager(
    store: ProviderStore = Depends(get_provider_store),
    object_store: ObjectStoreGateway = Depends(get_object_store),
) -> MediaLifecycleManager:
    return MediaLifecycleManager(store, object_store)


def get_cascade(
    store: ProviderStore = Depends(get_provider_store),
    media: MediaLifecycleManager = Depends(get_media_manager),
) -> ProviderCascade:
    return ProviderCascade(store, media)
