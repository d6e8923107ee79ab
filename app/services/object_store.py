"""
Object store gateway.

Thin wrapper over the Supabase Storage bucket that holds provider media.
Deletes never raise: a failed delete is logged and reported as ``False`` so
cascades can count it and move on. Fetches raise ``StorageError``.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import httpx
from loguru import logger
from supabase import Client, create_client

from app.core.config import (
    FETCH_TIMEOUT_SECONDS,
    STORAGE_BUCKET,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from app.core.errors import StorageError


@dataclass
class FetchedObject:
    content_type: str
    data: bytes
    content_disposition: Optional[str] = None


_SUPABASE: Client | None = None

def supabase_admin() -> Client:
    global _SUPABASE
    if _SUPABASE is not None:
        return _SUPABASE

    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")

    _SUPABASE = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
    return _SUPABASE


class ObjectStoreGateway:
    def __init__(
        self,
        client_factory: Callable[[], Client] = supabase_admin,
        bucket: str = STORAGE_BUCKET,
        base_url: str = SUPABASE_URL,
        http: Optional[httpx.Client] = None,
    ):
        self._client_factory = client_factory
        self.bucket = bucket
        self._base = urlparse(base_url)
        self._http = http or httpx.Client(timeout=FETCH_TIMEOUT_SECONDS, follow_redirects=True)

    def _storage(self):
        return self._client_factory().storage.from_(self.bucket)

    # ---------- urls ----------
    def path_from_url(self, url: str) -> Optional[str]:
        """Object path inside our bucket, or None if the url is not one of ours."""
        try:
            parsed = urlparse(url)
        except ValueError:
            # e.g. an unbalanced "[" in the host
            return None
        if parsed.netloc != self._base.netloc:
            return None

        for access in ("public", "sign", "authenticated"):
            marker = f"/storage/v1/object/{access}/{self.bucket}/"
            if marker in parsed.path:
                path = unquote(parsed.path.split(marker, 1)[1])
                return path or None
        return None

    def owns(self, url: str) -> bool:
        return self.path_from_url(url) is not None

    def public_url(self, path: str) -> str:
        return self._storage().get_public_url(path)

    # ---------- put ----------
    def upload(self, path: str, data: bytes, content_type: str) -> str:
        try:
            self._storage().upload(path, data, {"content-type": content_type})
        except Exception as e:
            raise StorageError(f"Upload failed: {e}", details={"path": path}) from e

        logger.info(f"[store] uploaded path={path} bytes={len(data)}")
        return self.public_url(path)

    # ---------- delete ----------
    def delete(self, url: str) -> bool:
        path = self.path_from_url(url)
        if path is None:
            logger.warning(f"[store] cannot delete url outside bucket={self.bucket}: {url}")
            return False

        try:
            self._storage().remove([path])
        except Exception:
            logger.exception(f"[store] delete failed path={path}")
            return False

        logger.info(f"[store] deleted path={path}")
        return True

    # ---------- get ----------
    def fetch_bytes(self, url: str) -> FetchedObject:
        try:
            resp = self._http.get(url)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise StorageError(f"Failed to fetch file: {e}", url=url) from e

        return FetchedObject(
            content_type=resp.headers.get("content-type", "application/octet-stream"),
            data=resp.content,
            content_disposition=resp.headers.get("content-disposition"),
        )


@lru_cache(maxsize=1)
def get_object_store() -> ObjectStoreGateway:
    return ObjectStoreGateway()
