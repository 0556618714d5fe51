"""
Source-book index.

Lists every source code the character-creation wizard can offer as a filter:
the sources of the canonical classes, species variants and background
variants written earlier in the same run. A category that failed or was not
run contributes nothing.
"""

import logging
from typing import Any, Iterator

from .context import RunContext
from .models import Artifacts, BackgroundsDocument, ClassSummary, RacesDocument, SourcesDocument


logger = logging.getLogger("charforge-data.sources")


def emitted_sources(emitted: dict[str, Any]) -> Iterator[str]:
    """Yield the source of every class, race variant and background variant."""
    for summary in emitted.get("classes.json") or []:
        if isinstance(summary, ClassSummary):
            yield summary.source

    races = emitted.get("races.json")
    if isinstance(races, RacesDocument):
        for race in races.races:
            yield from (variant.source for variant in race.descriptions)

    backgrounds = emitted.get("backgrounds.json")
    if isinstance(backgrounds, BackgroundsDocument):
        for background in backgrounds.backgrounds:
            yield from (variant.source for variant in background.descriptions)


def process_sources(ctx: RunContext) -> Artifacts:
    """Build ``sources.json`` from the documents already emitted this run."""
    sources = sorted({source for source in emitted_sources(ctx.emitted) if source})
    logger.info(f"sources.json: {len(sources)} sources")
    return {"sources.json": SourcesDocument(sources=sources)}


__all__ = ["emitted_sources", "process_sources"]
