"""
Download every image and video of a provider into a local directory.

Files go through the service's download proxy one at a time, with a pause
between files. Ctrl+C stops the run before the next file.

    python scripts/export_provider_media.py <provider_id> --out ./export
"""
import argparse
import os
import signal
import sys
from pathlib import Path

import httpx
from loguru import logger

from app.core.config import EXPORT_DELAY_SECONDS, FETCH_TIMEOUT_SECONDS
from app.schemas.enums import ExportEventKind
from app.schemas.media import ProviderMedia
from app.services.export import DirectorySink, ExportSequencer, ProxyFetcher, build_export_plan


def main() -> int:
    parser = argparse.ArgumentParser(description="Export a provider's media set")
    parser.add_argument("provider_id")
    parser.add_argument("--api-url", default=os.getenv("API_URL", "http://localhost:8000"))
    parser.add_argument("--token", default=os.getenv("ADMIN_TOKEN"))
    parser.add_argument("--out", type=Path, default=Path("export"))
    parser.add_argument("--delay", type=float, default=EXPORT_DELAY_SECONDS)
    args = parser.parse_args()

    if not args.token:
        logger.error("Please provide an admin token (--token or ADMIN_TOKEN)")
        return 1

    http = httpx.Client(
        timeout=FETCH_TIMEOUT_SECONDS,
        headers={"Authorization": f"Bearer {args.token}"},
    )

    try:
        resp = http.get(f"{args.api_url.rstrip('/')}/v1/providers/{args.provider_id}")
        resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Could not load provider {args.provider_id}: {e}")
        return 1

    provider = resp.json()
    plan = build_export_plan(provider["name"], ProviderMedia.model_validate(provider["media"]))
    if not plan:
        logger.info(f"Provider {provider['name']} has no media")
        return 0

    sequencer = ExportSequencer(
        plan,
        fetch=ProxyFetcher(args.api_url, http=http),
        deliver=DirectorySink(args.out),
        delay=args.delay,
    )
    signal.signal(signal.SIGINT, lambda *_: sequencer.cancel())

    summary = {}
    for event in sequencer.run():
        if event.kind == ExportEventKind.progress:
            p = event.payload
            logger.info(f"{p['completed']}/{p['total']} {p['filename']}")
        elif event.kind == ExportEventKind.error:
            logger.warning(f"Error while downloading {event.payload['filename']}: {event.payload['message']}")
        elif event.kind == ExportEventKind.done:
            summary = event.payload

    logger.info(
        f"Done: {summary['succeeded']}/{summary['total']} file(s) saved to {args.out}"
        + (" (cancelled)" if summary["cancelled"] else "")
    )
    return 0 if summary["failed"] == 0 and not summary["cancelled"] else 2


if __name__ == "__main__":
    sys.exit(main())
