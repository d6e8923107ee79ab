"""
Media lifecycle for a provider's ``images`` / ``videos`` lists.

Every operation is a single read-modify-write over one provider row.
Image lists always keep exactly one main item while non-empty; video lists
carry an optional main flag that is never promoted automatically.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Tuple

from loguru import logger

from app.core.config import PURGE_MAX_WORKERS
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.provider import Provider
from app.schemas.enums import MediaKind
from app.schemas.media import MediaItem, ProviderMedia
from app.services.object_store import ObjectStoreGateway
from app.services.provider_store import ProviderStore


@dataclass
class PurgeResult:
    attempted: int
    failed: int
    failed_urls: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """False when the record is consistent but the store kept orphans."""
        return self.failed == 0


def _items(media: ProviderMedia, kind: MediaKind) -> List[MediaItem]:
    return media.images if kind == MediaKind.image else media.videos


def _index_of(items: List[MediaItem], url: str) -> int:
    for i, item in enumerate(items):
        if item.url == url:
            return i
    return -1


class MediaLifecycleManager:
    def __init__(
        self,
        store: ProviderStore,
        object_store: ObjectStoreGateway,
        max_workers: int = PURGE_MAX_WORKERS,
    ):
        self.store = store
        self.object_store = object_store
        self.max_workers = max(1, max_workers)

    def _load(self, provider_id: str) -> Tuple[Provider, ProviderMedia]:
        provider = self.store.get(provider_id)
        return provider, ProviderMedia.from_document(provider.media)

    def _persist(self, provider: Provider, media: ProviderMedia) -> ProviderMedia:
        provider.media = media.to_document()
        self.store.save(provider)
        return media

    def get_media(self, provider_id: str) -> ProviderMedia:
        return self._load(provider_id)[1]

    def attach(self, provider_id: str, url: str, kind: MediaKind = MediaKind.image) -> ProviderMedia:
        url = (url or "").strip()
        if not url:
            raise ValidationError(f"{kind.value.capitalize()} URL is required")

        provider, media = self._load(provider_id)
        items = _items(media, kind)

        if _index_of(items, url) != -1:
            raise ConflictError(
                f"{kind.value.capitalize()} already attached",
                details={"provider_id": provider_id, "url": url},
            )

        # first image becomes main; videos never auto-promote
        is_main = kind == MediaKind.image and len(items) == 0
        items.append(MediaItem(url=url, is_main=is_main))

        logger.info(f"[media] attach provider={provider_id} kind={kind.value} main={is_main} url={url}")
        return self._persist(provider, media)

    def set_main(
        self,
        provider_id: str,
        url: str,
        is_main: bool = True,
        kind: MediaKind = MediaKind.image,
    ) -> ProviderMedia:
        if not isinstance(is_main, bool):
            raise ValidationError("isMain must be a boolean")

        provider, media = self._load(provider_id)
        items = _items(media, kind)

        idx = _index_of(items, url)
        if idx == -1:
            raise NotFoundError(
                f"{kind.value.capitalize()} not found",
                details={"provider_id": provider_id, "url": url},
            )

        if not is_main:
            if kind == MediaKind.image:
                raise ValidationError(
                    "The main image cannot be unset; mark another image as main instead",
                    details={"url": url},
                )
            items[idx].is_main = False
            return self._persist(provider, media)

        for item in items:
            item.is_main = False
        items[idx].is_main = True

        logger.info(f"[media] set-main provider={provider_id} kind={kind.value} url={url}")
        return self._persist(provider, media)

    def remove_one(self, provider_id: str, url: str, kind: MediaKind = MediaKind.image) -> ProviderMedia:
        provider, media = self._load(provider_id)
        items = _items(media, kind)

        idx = _index_of(items, url)
        if idx == -1:
            raise NotFoundError(
                f"{kind.value.capitalize()} not found",
                details={"provider_id": provider_id, "url": url},
            )

        removed = items.pop(idx)
        if kind == MediaKind.image and removed.is_main and items:
            items[0].is_main = True

        self._persist(provider, media)

        # record no longer references the object; a failed delete only leaves a store orphan
        if not self.object_store.delete(url):
            logger.warning(f"[media] store delete failed after removal provider={provider_id} url={url}")

        logger.info(f"[media] removed provider={provider_id} kind={kind.value} url={url} remaining={len(items)}")
        return media

    def purge_all(self, provider_id: str) -> PurgeResult:
        provider, media = self._load(provider_id)
        urls = media.all_urls()

        failed_urls: List[str] = []
        if urls:
            logger.info(
                f"[media] purge provider={provider_id} images={len(media.images)} videos={len(media.videos)}"
            )
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(urls))) as pool:
                outcomes = list(pool.map(self.object_store.delete, urls))
            failed_urls = [u for u, ok in zip(urls, outcomes) if not ok]

        media.images = []
        media.videos = []
        self._persist(provider, media)

        result = PurgeResult(attempted=len(urls), failed=len(failed_urls), failed_urls=failed_urls)
        if result.clean:
            logger.info(f"[media] purge complete provider={provider_id} attempted={result.attempted}")
        else:
            logger.warning(
                f"[media] purge left store orphans provider={provider_id} "
                f"attempted={result.attempted} failed={result.failed} urls={failed_urls}"
            )
        return result
