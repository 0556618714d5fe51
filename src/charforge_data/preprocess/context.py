"""
Per-run state shared by the category processors.

A :class:`RunContext` owns the raw/output paths, a cache of parsed raw files,
the lazily built feat index and the documents written so far. A fresh
context is made for every pipeline run, so nothing leaks between runs or
between tests.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .joiner import TARGET_EDITION, FeatIndex, iter_records


logger = logging.getLogger("charforge-data.context")


class RawDataMissingError(Exception):
    """The raw input directory does not exist."""

    pass


class CategoryError(Exception):
    """A category's main raw file is missing or malformed."""

    pass


class RawFileError(Exception):
    """A single raw file could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RunContext:
    """Paths, parsed-file cache and feat index for one pipeline run."""

    def __init__(self, raw_dir: Path, out_dir: Path, edition: str = TARGET_EDITION):
        self.raw_dir = Path(raw_dir)
        self.out_dir = Path(out_dir)
        self.edition = edition
        self._files: dict[Path, dict[str, Any]] = {}
        self._feat_index: FeatIndex | None = None
        # Relative output path -> document written so far this run
        self.emitted: dict[str, Any] = {}

    def ensure_raw_dir(self) -> None:
        """Check the raw directory exists.

        Raises:
            RawDataMissingError: If the raw directory is absent.
        """
        if not self.raw_dir.is_dir():
            raise RawDataMissingError(f"Raw data not found at {self.raw_dir}")

    def read_json(self, relative: str | Path) -> dict[str, Any]:
        """Load a raw JSON document, caching it for the rest of the run.

        Raises:
            RawFileError: If the file is missing, unparsable or not an object.
        """
        path = self.raw_dir / relative
        if path in self._files:
            return self._files[path]
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise RawFileError(path, "file not found")
        except (OSError, UnicodeDecodeError) as e:
            raise RawFileError(path, f"unreadable: {e}") from e
        except json.JSONDecodeError as e:
            raise RawFileError(path, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RawFileError(path, "top level is not a JSON object")
        logger.debug(f"Parsed raw file {relative}")
        self._files[path] = data
        return data

    def read_optional(self, relative: str | Path) -> dict[str, Any]:
        """Like :meth:`read_json` but warns and returns ``{}`` on failure."""
        try:
            return self.read_json(relative)
        except RawFileError as e:
            logger.warning(f"Skipping optional raw file {relative}: {e.reason}")
            return {}

    def read_required(self, relative: str | Path, key: str) -> dict[str, Any]:
        """Load a category's main file, which must hold a ``key`` list.

        Raises:
            CategoryError: If the file is unusable.
        """
        try:
            data = self.read_json(relative)
        except RawFileError as e:
            raise CategoryError(str(e)) from e
        if not isinstance(data.get(key), list):
            raise CategoryError(f"{self.raw_dir / relative}: missing '{key}' list")
        return data

    @property
    def feat_index(self) -> FeatIndex:
        """Feat index built from ``feats.json`` on first use."""
        if self._feat_index is None:
            feats = self.read_optional("feats.json")
            self._feat_index = FeatIndex.from_records(iter_records(feats, "feat"))
            logger.debug(f"Indexed {len(self._feat_index)} feats")
        return self._feat_index


__all__ = [
    "CategoryError",
    "RawDataMissingError",
    "RawFileError",
    "RunContext",
]
