"""Tests for the object store gateway."""

from unittest.mock import MagicMock

import httpx
import pytest

from app.core.errors import StorageError
from app.services.export import ProxyFetcher
from app.services.object_store import ObjectStoreGateway

BASE = "https://proj.supabase.test"
PUBLIC = f"{BASE}/storage/v1/object/public/providers/"


def _gateway(client=None, handler=None) -> ObjectStoreGateway:
    client = client or MagicMock()
    http = httpx.Client(transport=httpx.MockTransport(handler)) if handler else None
    return ObjectStoreGateway(client_factory=lambda: client, bucket="providers", base_url=BASE, http=http)


class TestUrls:
    """Tests for mapping urls to bucket paths."""

    def test_public_url_path(self) -> None:
        """Public urls map to their percent-decoded object path."""
        gw = _gateway()
        assert gw.path_from_url(f"{PUBLIC}providers/1/photo%20one.jpg") == "providers/1/photo one.jpg"
        assert gw.owns(f"{PUBLIC}x.jpg")

    def test_foreign_urls(self) -> None:
        """Other hosts and buckets are not ours."""
        gw = _gateway()
        assert gw.path_from_url("https://evil.test/storage/v1/object/public/providers/x.jpg") is None
        assert gw.path_from_url(f"{BASE}/storage/v1/object/public/other/x.jpg") is None
        assert not gw.owns(f"{PUBLIC}")

    def test_unparseable_url(self) -> None:
        """Urls urlparse rejects are treated as foreign."""
        gw = _gateway()
        assert gw.path_from_url("http://[broken/x.jpg") is None
        assert not gw.owns("http://[broken/x.jpg")


class TestDelete:
    """Tests for best-effort deletes."""

    def test_delete_removes_path(self) -> None:
        """Successful delete calls remove with the object path."""
        client = MagicMock()
        gw = _gateway(client)

        assert gw.delete(f"{PUBLIC}a/b.jpg") is True
        client.storage.from_.assert_called_with("providers")
        client.storage.from_.return_value.remove.assert_called_once_with(["a/b.jpg"])

    def test_delete_failure_returns_false(self) -> None:
        """Store errors are reduced to False."""
        client = MagicMock()
        client.storage.from_.return_value.remove.side_effect = RuntimeError("boom")

        assert _gateway(client).delete(f"{PUBLIC}a.jpg") is False

    def test_delete_foreign_url_returns_false(self) -> None:
        """Urls outside the bucket are never sent to the store."""
        client = MagicMock()
        assert _gateway(client).delete("https://elsewhere.test/a.jpg") is False
        client.storage.from_.return_value.remove.assert_not_called()

    def test_delete_unparseable_url_returns_false(self) -> None:
        """A malformed url is a failed delete, never an exception."""
        client = MagicMock()
        assert _gateway(client).delete("http://[broken/x.jpg") is False
        client.storage.from_.return_value.remove.assert_not_called()


class TestUpload:
    """Tests for uploads."""

    def test_upload_returns_public_url(self) -> None:
        """Upload stores the bytes and returns the public url."""
        client = MagicMock()
        bucket = client.storage.from_.return_value
        bucket.get_public_url.return_value = f"{PUBLIC}p/1.jpg"

        url = _gateway(client).upload("p/1.jpg", b"data", "image/jpeg")

        assert url == f"{PUBLIC}p/1.jpg"
        bucket.upload.assert_called_once_with("p/1.jpg", b"data", {"content-type": "image/jpeg"})

    def test_upload_failure_raises(self) -> None:
        """Upload errors surface as StorageError."""
        client = MagicMock()
        client.storage.from_.return_value.upload.side_effect = RuntimeError("quota")

        with pytest.raises(StorageError):
            _gateway(client).upload("p/1.jpg", b"data", "image/jpeg")


class TestFetch:
    """Tests for fetching bytes."""

    def test_fetch_bytes(self) -> None:
        """Content type and body are forwarded."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"jpeg", headers={"content-type": "image/jpeg"})

        obj = _gateway(handler=handler).fetch_bytes(f"{PUBLIC}a.jpg")
        assert obj.content_type == "image/jpeg"
        assert obj.data == b"jpeg"

    def test_fetch_error_status(self) -> None:
        """Non-2xx responses raise StorageError."""
        gw = _gateway(handler=lambda request: httpx.Response(404))
        with pytest.raises(StorageError):
            gw.fetch_bytes(f"{PUBLIC}a.jpg")

    def test_fetch_invalid_url(self) -> None:
        """Urls httpx cannot build raise StorageError."""
        gw = _gateway(handler=lambda request: httpx.Response(200))
        with pytest.raises(StorageError):
            gw.fetch_bytes("https://p.test/bad\x00.mp4")


class TestProxyFetcher:
    """Tests for fetching through the download proxy."""

    def test_fetch_goes_through_proxy(self) -> None:
        """The storage url is passed as a query parameter to the proxy."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, content=b"x", headers={"content-type": "video/mp4"})

        fetcher = ProxyFetcher("http://api.test/", http=httpx.Client(transport=httpx.MockTransport(handler)))
        obj = fetcher(f"{PUBLIC}v.mp4")

        assert obj.content_type == "video/mp4"
        assert seen[0].path == "/v1/providers/download"
        assert seen[0].params["url"] == f"{PUBLIC}v.mp4"

    def test_proxy_error(self) -> None:
        """Proxy failures raise StorageError."""
        fetcher = ProxyFetcher(
            "http://api.test",
            http=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500))),
        )
        with pytest.raises(StorageError):
            fetcher(f"{PUBLIC}v.mp4")
