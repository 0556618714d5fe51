"""
Download of the raw 5etools files the pipeline reads.

Fetches the class, fluff, race, background, feat and language files from the
5etools GitHub mirror into the raw directory. Files already present are kept
unless a forced refresh is requested.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from .classes import CLASS_NAMES


logger = logging.getLogger("charforge-data.fetch")


GITHUB_RAW_BASE = (
    "https://raw.githubusercontent.com/5etools-mirror-3/5etools-src/main/data"
)
DEFAULT_TIMEOUT = 30.0
MAX_RETRIES = 3
RETRY_BACKOFF = 2.0
DOWNLOAD_CONCURRENCY = 5

SINGLE_FILES = [
    "races.json",
    "fluff-races.json",
    "backgrounds.json",
    "fluff-backgrounds.json",
    "feats.json",
    "languages.json",
]


class FetchError(Exception):
    """Error downloading a raw data file."""

    pass


def raw_file_list(class_names: list[str] | None = None) -> list[str]:
    """Relative paths of every raw file the pipeline can use."""
    files: list[str] = []
    for name in CLASS_NAMES if class_names is None else class_names:
        files.append(f"class/class-{name}.json")
        files.append(f"class/fluff-class-{name}.json")
    return files + SINGLE_FILES


class RawDataFetcher:
    """Downloads raw 5etools JSON into ``raw_dir`` with bounded concurrency."""

    def __init__(
        self,
        raw_dir: Path,
        base_url: str = GITHUB_RAW_BASE,
        files: list[str] | None = None,
    ):
        self.raw_dir = Path(raw_dir)
        self.base_url = base_url.rstrip("/")
        self.files = files if files is not None else raw_file_list()
        self._client: httpx.AsyncClient | None = None

    async def fetch_all(self, force: bool = False) -> dict[str, bool]:
        """Download every file; returns relative path -> success.

        A failed file is logged and reported but does not stop the others.
        """
        self.raw_dir.mkdir(parents=True, exist_ok=True)
        semaphore = asyncio.Semaphore(DOWNLOAD_CONCURRENCY)

        async def _download_one(relative: str) -> bool:
            async with semaphore:
                target = self.raw_dir / relative
                if target.exists() and not force:
                    logger.debug(f"Keeping existing {relative}")
                    return True
                try:
                    data = await self._fetch_json(relative)
                except FetchError as e:
                    logger.warning(f"Failed to download {relative}: {e}")
                    return False
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(json.dumps(data, indent=2), encoding="utf-8")
                return True

        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
            self._client = client
            try:
                results = await asyncio.gather(
                    *(_download_one(f) for f in self.files), return_exceptions=True
                )
            finally:
                self._client = None

        outcome: dict[str, bool] = {}
        for relative, result in zip(self.files, results):
            if isinstance(result, Exception):
                logger.warning(f"Download task for {relative} failed: {result}")
                result = False
            outcome[relative] = result
        logger.info(
            f"Fetched raw data: {sum(outcome.values())}/{len(outcome)} files available"
        )
        return outcome

    async def _fetch_json(self, relative: str) -> dict[str, Any]:
        """
        Fetch one raw file as a JSON object.

        Connection problems, timeouts, rate limiting (429) and server errors
        are retried with exponential backoff; other HTTP errors, bodies that
        are not a JSON object and retries running out are permanent.

        Raises:
            FetchError: On a permanent failure.
        """
        url = f"{self.base_url}/{relative}"
        problem = "no attempt made"

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                response = await self._client.get(url)
            except httpx.TransportError as e:
                problem = f"{type(e).__name__}: {e}"
            else:
                status = response.status_code
                if status == 429 or status >= 500:
                    problem = f"HTTP {status}"
                elif status >= 400:
                    raise FetchError(f"{relative}: HTTP {status}")
                else:
                    return self._decode(relative, response)

            if attempt < MAX_RETRIES:
                wait = RETRY_BACKOFF ** (attempt - 1)
                logger.warning(
                    f"{relative}: {problem}, retrying in {wait}s "
                    f"(attempt {attempt}/{MAX_RETRIES})"
                )
                await asyncio.sleep(wait)

        raise FetchError(f"{relative}: gave up after {MAX_RETRIES} attempts ({problem})")

    @staticmethod
    def _decode(relative: str, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"{relative}: invalid JSON ({e})") from e
        if not isinstance(data, dict):
            raise FetchError(f"{relative}: top level is not a JSON object")
        return data


def fetch_raw_data(raw_dir: Path, force: bool = False) -> dict[str, bool]:
    """Synchronous wrapper around :meth:`RawDataFetcher.fetch_all`."""
    return asyncio.run(RawDataFetcher(raw_dir).fetch_all(force=force))


__all__ = [
    "FetchError",
    "GITHUB_RAW_BASE",
    "RawDataFetcher",
    "fetch_raw_data",
    "raw_file_list",
]
