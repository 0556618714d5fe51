"""Languages processor: a sorted, de-duplicated list of language names."""

import logging

from .context import RunContext
from .joiner import iter_records, pick_by_priority
from .models import Artifacts, LanguagesDocument


logger = logging.getLogger("charforge-data.languages")


def process_languages(ctx: RunContext) -> Artifacts:
    """Build ``languages.json``.

    A language printed in several books is kept once, under the book with the
    highest :data:`~charforge_data.preprocess.joiner.SOURCE_PRIORITY`; only
    the names are emitted.
    """
    data = ctx.read_required("languages.json", "language")
    best = pick_by_priority(
        (record["name"], record.get("source"))
        for record in iter_records(data, "language")
        if record.get("name")
    )
    languages = sorted(best)
    logger.info(f"languages.json: {len(languages)} languages")
    return {"languages.json": LanguagesDocument(languages=languages)}


__all__ = ["process_languages"]
