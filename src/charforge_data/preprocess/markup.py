"""
Normalizer for 5etools inline reference markup.

Rules text in the raw dataset embeds references such as ``{@spell fireball}``,
``{@item longsword|phb}`` or ``{@filter display|spells|level=1}``. Spans can be
nested inside the display text of other spans, so stripping runs to a fixed
point: every pass removes the innermost layer only.
"""

import re
from typing import Any


# Passes allowed before a string is reported as non-converging
MAX_CLEAN_PASSES = 50

# {@tag display} or {@tag display|reference...} → display
_MARKUP_SPACED_RE = re.compile(r"\{@\w+\s+([^{}|]+)(?:\|[^{}]*)?\}")
# {@tagDISPLAY} or {@tagDISPLAY|reference...} → DISPLAY
_MARKUP_COMPACT_RE = re.compile(r"\{@[a-z]+([^a-z\s{}|][^{}|]*)(?:\|[^{}]*)?\}")
# Tags with no content: {@h} or {@i } → ""
_MARKUP_EMPTY_RE = re.compile(r"\{@\w+\s*\}")


class MarkupError(ValueError):
    """Raised when markup stripping does not reach a fixed point."""

    pass


def _strip_once(text: str) -> str:
    text = _MARKUP_SPACED_RE.sub(r"\1", text)
    text = _MARKUP_COMPACT_RE.sub(r"\1", text)
    return _MARKUP_EMPTY_RE.sub("", text)


def clean(text: str) -> str:
    """Strip all 5etools markup spans from ``text``, nested ones included.

    Raises:
        MarkupError: If the text still changes after ``MAX_CLEAN_PASSES``.
    """
    if not text:
        return ""
    current = text
    for _ in range(MAX_CLEAN_PASSES):
        stripped = _strip_once(current)
        if stripped == current:
            return current
        current = stripped
    raise MarkupError(
        f"Markup did not converge after {MAX_CLEAN_PASSES} passes: {text[:80]!r}"
    )


def clean_deep(value: Any) -> Any:
    """Apply :func:`clean` to every string reachable through lists and dicts."""
    if isinstance(value, str):
        return clean(value)
    if isinstance(value, list):
        return [clean_deep(item) for item in value]
    if isinstance(value, dict):
        return {key: clean_deep(item) for key, item in value.items()}
    return value


__all__ = [
    "MAX_CLEAN_PASSES",
    "MarkupError",
    "clean",
    "clean_deep",
]
