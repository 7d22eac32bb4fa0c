"""
Download per-set card data from the SWU-DB card API.

Writes one "<set>.json" file per set into the card data directory, which
the card catalog then reads locally. Run before first use and after each
new set release.
"""

import argparse
import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import httpx

from swuviewer.config import settings

logger = logging.getLogger(__name__)

DOWNLOAD_RETRIES = 3
RETRY_DELAY_SECONDS = 1.0
# Pause between sets to stay polite to the API
SET_DELAY_SECONDS = 1.0


class DownloadError(Exception):
    """Raised when a set cannot be downloaded after all retries."""

    pass


def set_download_url(set_code: str, api_url: str | None = None) -> str:
    base = (api_url or settings.card_api_url).rstrip("/")
    return f"{base}/{set_code.lower()}?pretty=true"


async def fetch_set_data(
    set_code: str,
    client: httpx.AsyncClient,
    retries: int = DOWNLOAD_RETRIES,
    retry_delay: float = RETRY_DELAY_SECONDS,
) -> Any:
    """
    Fetch one set's card data, retrying failed attempts.

    Raises:
        DownloadError: If every attempt fails
    """
    url = set_download_url(set_code)
    last_error: Exception | None = None

    for attempt in range(1, retries + 1):
        logger.info("Fetching %s (attempt %d)", url, attempt)
        try:
            response = await client.get(url, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            last_error = e
            logger.warning("Attempt %d for %s failed: %s", attempt, set_code, e)
            if attempt < retries:
                await asyncio.sleep(retry_delay * attempt)

    raise DownloadError(f"Failed to download set {set_code} after {retries} attempts: {last_error}")


def save_set_data(data: Any, set_code: str, output_dir: Path) -> Path:
    """Write set data as pretty-printed JSON; returns the written path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{set_code.lower()}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


async def run_download(
    sets: Sequence[str] | None = None,
    output_dir: Path | None = None,
    client: httpx.AsyncClient | None = None,
    set_delay: float = SET_DELAY_SECONDS,
    retry_delay: float = RETRY_DELAY_SECONDS,
) -> dict[str, Path]:
    """
    Download every set sequentially.

    A failing set is logged and skipped; the rest still download.

    Args:
        sets: Set codes to download. Defaults to the configured set order.
        output_dir: Destination directory. Defaults to the card data directory.
        client: HTTP client to use; one is created if not given
        set_delay: Pause between sets in seconds
        retry_delay: Base delay between retries of one set

    Returns:
        Dict mapping set code to written file path, for sets that succeeded
    """
    codes = list(settings.set_order if sets is None else sets)
    output_dir = Path(settings.card_data_url if output_dir is None else output_dir)

    written: dict[str, Path] = {}
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)

    try:
        for index, set_code in enumerate(codes):
            logger.info("Processing set %s...", set_code)
            try:
                data = await fetch_set_data(set_code, client, retry_delay=retry_delay)
                written[set_code] = save_set_data(data, set_code, output_dir)
                logger.info("Saved set %s to %s", set_code, written[set_code])
            except (DownloadError, OSError) as e:
                logger.error("Error processing set %s: %s", set_code, e)

            if set_delay > 0 and index < len(codes) - 1:
                await asyncio.sleep(set_delay)
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Finished downloading %d/%d sets", len(written), len(codes))
    return written


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Download SWU card data per set")
    parser.add_argument("sets", nargs="*", help="Set codes to download (default: all)")
    parser.add_argument("--output", type=Path, default=None, help="Output directory")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download(sets=args.sets or None, output_dir=args.output))


if __name__ == "__main__":
    main()
