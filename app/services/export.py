"""
Bulk export of a provider's media set.

Items are fetched strictly one after another through the download proxy,
handed to a delivery sink, and followed by a fixed pause before the next
fetch. The run is an explicit state machine driven by one loop:

    idle -> fetching(i) -> delivering(i) -> waiting -> fetching(i+1) -> ... -> done

A failed item is reported and skipped; the run always ends with a summary.
``cancel()`` stops the loop before the next fetch without interrupting a
fetch already in flight.
"""
from __future__ import annotations

import re
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional
from urllib.parse import unquote, urlparse

import httpx
from loguru import logger

from app.core.config import EXPORT_DELAY_SECONDS, FETCH_TIMEOUT_SECONDS
from app.core.errors import StorageError
from app.schemas.enums import ExportEventKind, ExportState, MediaKind
from app.schemas.media import ProviderMedia
from app.services.object_store import FetchedObject

DEFAULT_EXTENSIONS = {MediaKind.image: "jpg", MediaKind.video: "mp4"}

_EXT_RE = re.compile(r"^[a-z0-9]{1,5}$")


@dataclass
class ExportItem:
    url: str
    filename: str
    kind: MediaKind


@dataclass
class ExportEvent:
    kind: ExportEventKind
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "payload": self.payload}


@dataclass
class ExportStatus:
    state: ExportState = ExportState.idle
    current_filename: Optional[str] = None
    completed: int = 0
    total: int = 0


Fetcher = Callable[[str], FetchedObject]
Sink = Callable[[ExportItem, FetchedObject], None]


# ---------------------------
# Filenames
# ---------------------------

def extension_from_url(url: str, default: str) -> str:
    try:
        path = urlparse(url).path
    except ValueError:
        return default
    name = unquote(path).rsplit("/", 1)[-1]
    if "." in name:
        ext = name.rsplit(".", 1)[1].lower()
        if _EXT_RE.match(ext):
            return ext
    return default


def _safe_name(name: str) -> str:
    return re.sub(r"[\\/]+", "_", name).strip() or "provider"


def build_export_plan(provider_name: str, media: ProviderMedia) -> List[ExportItem]:
    """Images first, then videos, numbered from 1 within each kind."""
    base = _safe_name(provider_name)
    plan: List[ExportItem] = []
    for kind, items in ((MediaKind.image, media.images), (MediaKind.video, media.videos)):
        for index, item in enumerate(items, start=1):
            ext = extension_from_url(item.url, DEFAULT_EXTENSIONS[kind])
            plan.append(ExportItem(
                url=item.url,
                filename=f"{base}_{kind.value}_{index}.{ext}",
                kind=kind,
            ))
    return plan


# ---------------------------
# Fetchers / sinks
# ---------------------------

class ProxyFetcher:
    """Fetches through the service's download proxy so storage urls are never hit directly."""

    def __init__(self, api_url: str, token: Optional[str] = None, http: Optional[httpx.Client] = None):
        self.endpoint = f"{api_url.rstrip('/')}/v1/providers/download"
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = http or httpx.Client(timeout=FETCH_TIMEOUT_SECONDS, headers=headers)

    def __call__(self, url: str) -> FetchedObject:
        try:
            resp = self._http.get(self.endpoint, params={"url": url})
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise StorageError(f"Failed to download file: {e}", url=url) from e

        return FetchedObject(
            content_type=resp.headers.get("content-type", "application/octet-stream"),
            data=resp.content,
            content_disposition=resp.headers.get("content-disposition"),
        )


class DirectorySink:
    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def __call__(self, item: ExportItem, obj: FetchedObject) -> None:
        (self.directory / item.filename).write_bytes(obj.data)


# ---------------------------
# Sequencer
# ---------------------------

class ExportSequencer:
    def __init__(
        self,
        items: List[ExportItem],
        fetch: Fetcher,
        deliver: Sink,
        delay: float = EXPORT_DELAY_SECONDS,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.items = list(items)
        self._fetch = fetch
        self._deliver = deliver
        self.delay = delay
        self._sleep = sleep
        self._cancel = threading.Event()
        self.status = ExportStatus(total=len(self.items))

    def cancel(self) -> None:
        logger.info("[export] cancel requested")
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _wait(self) -> None:
        self.status.state = ExportState.waiting
        if self._sleep is not None:
            self._sleep(self.delay)
        else:
            # returns early on cancel
            self._cancel.wait(self.delay)

    def run(self) -> Iterator[ExportEvent]:
        total = len(self.items)
        succeeded = 0
        attempted = 0

        logger.info(f"[export] starting {total} file(s)")
        yield ExportEvent(ExportEventKind.started, {
            "total": total,
            "filenames": [i.filename for i in self.items],
        })

        for index, item in enumerate(self.items):
            if self.cancelled:
                break

            self.status.state = ExportState.fetching
            self.status.current_filename = item.filename
            logger.info(f"[export] downloading {item.filename} ({index + 1}/{total})")

            error: Optional[Exception] = None
            try:
                obj = self._fetch(item.url)
                self.status.state = ExportState.delivering
                self._deliver(item, obj)
            except (StorageError, OSError) as e:
                error = e
                logger.error(f"[export] failed {item.filename}: {e}")
            except Exception as e:
                # any single-item failure is reported, never fatal to the run
                error = e
                logger.exception(f"[export] unexpected failure on {item.filename}")
            else:
                succeeded += 1
            attempted += 1
            self.status.completed = succeeded

            if error is not None:
                yield ExportEvent(ExportEventKind.error, {
                    "filename": item.filename,
                    "url": item.url,
                    "message": str(error),
                })

            yield ExportEvent(ExportEventKind.progress, {
                "completed": succeeded,
                "attempted": attempted,
                "total": total,
                "filename": item.filename,
            })

            if index < total - 1 and not self.cancelled:
                self._wait()

        cancelled = self.cancelled and attempted < total
        self.status.state = ExportState.cancelled if cancelled else ExportState.done
        self.status.current_filename = None

        logger.info(f"[export] finished {succeeded}/{total} succeeded cancelled={cancelled}")
        yield ExportEvent(ExportEventKind.done, {
            "succeeded": succeeded,
            "failed": attempted - succeeded,
            "attempted": attempted,
            "total": total,
            "cancelled": cancelled,
        })


def plan_to_dicts(items: List[ExportItem]) -> List[Dict[str, Any]]:
    return [{**asdict(i), "kind": i.kind.value} for i in items]
