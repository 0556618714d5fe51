"""
Pipeline driver.

Runs each category processor against a fresh :class:`RunContext` and writes
the documents it returns under the output directory. A category that fails is
reported and the remaining categories still run; the source index, which runs
last, only sees what the others actually wrote. Per-item files a category no
longer produces are removed from its directory. The run as a whole succeeds
only if every category did.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from .backgrounds import process_backgrounds
from .classes import process_classes
from .context import CategoryError, RunContext
from .joiner import TARGET_EDITION
from .languages import process_languages
from .models import Artifacts, OutputModel
from .races import process_races
from .sources import process_sources


logger = logging.getLogger("charforge-data.pipeline")

Processor = Callable[[RunContext], Artifacts]

CATEGORIES: list[tuple[str, Processor]] = [
    ("classes", process_classes),
    ("races", process_races),
    ("backgrounds", process_backgrounds),
    ("languages", process_languages),
    ("sources", process_sources),
]

# Per-item subdirectories a category owns even when it writes nothing there
CATEGORY_DIRECTORIES: dict[str, tuple[str, ...]] = {
    "classes": ("classes",),
}


@dataclass
class CategoryResult:
    """Outcome of one category: the files it wrote or why it failed."""
    category: str
    files: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PipelineReport:
    results: list[CategoryResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failed(self) -> list[str]:
        return [result.category for result in self.results if not result.ok]


def to_jsonable(document: OutputModel | list[OutputModel]) -> Any:
    if isinstance(document, list):
        return [item.to_json_dict() for item in document]
    return document.to_json_dict()


def render_json(data: Any) -> str:
    """Pretty-print ``data`` the way every artifact is stored."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json(path: Path, data: Any) -> None:
    """Write ``data`` as JSON atomically (write to temp, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_suffix(path.suffix + ".tmp")
    try:
        temp_file.write_text(render_json(data), encoding="utf-8")
        temp_file.replace(path)
    except OSError:
        if temp_file.exists():
            temp_file.unlink()
        raise


class Pipeline:
    """Turns a raw 5etools data directory into flat lookup documents."""

    def __init__(
        self,
        raw_dir: Path,
        out_dir: Path,
        edition: str = TARGET_EDITION,
        categories: list[tuple[str, Processor]] | None = None,
    ):
        self.raw_dir = Path(raw_dir)
        self.out_dir = Path(out_dir)
        self.edition = edition
        self.categories = CATEGORIES if categories is None else categories

    def run(self) -> PipelineReport:
        """Process every category.

        Raises:
            RawDataMissingError: If the raw directory does not exist; nothing
                is written in that case.
        """
        ctx = RunContext(self.raw_dir, self.out_dir, edition=self.edition)
        ctx.ensure_raw_dir()

        logger.info("Preprocessing 5etools data...")
        logger.info(f"  Raw: {self.raw_dir}")
        logger.info(f"  Out: {self.out_dir}")

        report = PipelineReport()
        for category, processor in self.categories:
            report.results.append(self._run_category(ctx, category, processor))

        if report.ok:
            logger.info("Done!")
        else:
            logger.error(f"Preprocessing failed for: {', '.join(report.failed)}")
        return report

    def _run_category(self, ctx: RunContext, category: str, processor: Processor) -> CategoryResult:
        result = CategoryResult(category=category)
        try:
            artifacts = processor(ctx)
            for relative in sorted(artifacts):
                write_json(self.out_dir / relative, to_jsonable(artifacts[relative]))
                result.files.append(relative)
            ctx.emitted.update(artifacts)
            self._remove_stale(category, result.files)
        except CategoryError as e:
            logger.error(f"Category '{category}' failed: {e}")
            result.error = str(e)
        except Exception as e:
            logger.error(f"Category '{category}' failed: {e}", exc_info=True)
            result.error = str(e) or type(e).__name__
        return result

    def _remove_stale(self, category: str, written: list[str]) -> None:
        """Delete JSON files left by earlier runs in the category's directories.

        A category owns every subdirectory it writes into, so a per-item file
        it did not produce this run is out of date.
        """
        written_paths = {self.out_dir / relative for relative in written}
        directories = {path.parent for path in written_paths if path.parent != self.out_dir}
        directories.update(self.out_dir / d for d in CATEGORY_DIRECTORIES.get(category, ()))
        for directory in sorted(directories):
            for path in sorted(directory.glob("*.json")):
                if path not in written_paths:
                    logger.info(f"  removing stale {path.relative_to(self.out_dir)}")
                    path.unlink()


__all__ = [
    "CATEGORIES",
    "CategoryResult",
    "Pipeline",
    "PipelineReport",
    "render_json",
    "write_json",
]
