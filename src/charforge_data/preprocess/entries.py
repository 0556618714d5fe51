"""
Entry-tree extraction for 5etools rules text.

Raw ``entries`` arrays are loosely typed: plain strings, nested blocks,
sub-entries, table rows and named sections all appear side by side. They are
first parsed into explicit node variants and then rendered by exhaustive
visitors, so a shape that carries no text is an explicit ``Unknown`` node
rather than a silent fall-through.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Union

from .markup import clean


logger = logging.getLogger("charforge-data.entries")

PARAGRAPH_SEPARATOR = "\n\n"

_WHITESPACE_RE = re.compile(r"\s+")


# =============================================================================
# Node Variants
# =============================================================================

@dataclass(frozen=True)
class Text:
    """Leaf string, still carrying markup."""
    text: str


@dataclass(frozen=True)
class Block:
    """Node with an ``entries`` array; ``kind`` and ``name`` may be empty."""
    children: tuple["EntryNode", ...] = ()
    kind: str = ""
    name: str = ""


@dataclass(frozen=True)
class SubEntry:
    """Node whose ``entry`` field is itself an array of nodes."""
    children: tuple["EntryNode", ...] = ()


@dataclass(frozen=True)
class Row:
    """Table row; every cell renders as its own paragraph."""
    cells: tuple["EntryNode", ...] = ()


@dataclass(frozen=True)
class Unknown:
    """Any shape without extractable text (lists, tables, images, ...)."""
    raw: Any = field(default=None, compare=False)


EntryNode = Union[Text, Block, SubEntry, Row, Unknown]


# =============================================================================
# Parsing
# =============================================================================

def parse_entry(raw: Any) -> EntryNode:
    """Convert one raw JSON value into an :data:`EntryNode`."""
    if isinstance(raw, str):
        return Text(raw)
    if not isinstance(raw, dict):
        return Unknown(raw)

    parts: list[EntryNode] = []
    entries = raw.get("entries")
    entry = raw.get("entry")
    if isinstance(entries, list):
        parts.append(Block(
            children=parse_entries(entries),
            kind=str(raw.get("type", "")),
            name=str(raw.get("name", "") or ""),
        ))
    elif isinstance(entry, str):
        parts.append(Text(entry))
    elif isinstance(entry, list):
        parts.append(SubEntry(children=parse_entries(entry)))

    if raw.get("type") == "row" and isinstance(raw.get("row"), list):
        parts.append(Row(cells=parse_entries(raw["row"])))

    if not parts:
        return Unknown(raw)
    if len(parts) == 1:
        return parts[0]
    return Block(children=tuple(parts))


def parse_entries(raw: list[Any] | None) -> tuple[EntryNode, ...]:
    """Parse a raw entries array, preserving order."""
    return tuple(parse_entry(item) for item in raw or ())


# =============================================================================
# Rendering
# =============================================================================

def _paragraphs(node: EntryNode) -> list[str]:
    if isinstance(node, Text):
        text = clean(node.text)
        return [text] if text else []
    if isinstance(node, (Block, SubEntry)):
        return _paragraphs_of(node.children)
    if isinstance(node, Row):
        return _paragraphs_of(node.cells)
    if isinstance(node, Unknown):
        kind = node.raw.get("type", "?") if isinstance(node.raw, dict) else type(node.raw).__name__
        logger.debug(f"No text extracted from entry of type {kind!r}")
        return []
    raise TypeError(f"Unhandled entry node: {node!r}")


def _paragraphs_of(nodes: tuple[EntryNode, ...]) -> list[str]:
    result: list[str] = []
    for node in nodes:
        result.extend(_paragraphs(node))
    return result


def extract_paragraphs(entries: list[Any] | None) -> list[str]:
    """Linearize a raw entries array into cleaned, non-empty paragraphs."""
    return _paragraphs_of(parse_entries(entries))


def extract_entries(entries: list[Any] | None) -> str:
    """Render a raw entries array as blank-line separated plain text.

    Example:
        >>> extract_entries([{"type": "row", "row": ["a", {"entry": "b"}]}])
        'a\\n\\nb'
    """
    return PARAGRAPH_SEPARATOR.join(extract_paragraphs(entries))


def _feat_part(node: EntryNode) -> str:
    if isinstance(node, Text):
        return clean(node.text)
    if isinstance(node, Block) and node.kind == "entries" and node.name:
        sub = [clean(child.text) for child in node.children if isinstance(child, Text)]
        if sub:
            return f"{node.name}: {' '.join(sub)}"
    return ""


def extract_feat_description(entries: list[Any] | None) -> str:
    """Render feat text inline: one line, named sub-blocks as ``Name: text``.

    Only top-level strings, ``entry`` strings and the string children of
    named ``entries`` blocks contribute; whitespace is collapsed.
    """
    parts = [_feat_part(node) for node in parse_entries(entries)]
    return _WHITESPACE_RE.sub(" ", " ".join(parts)).strip()


__all__ = [
    "Block",
    "EntryNode",
    "Row",
    "SubEntry",
    "Text",
    "Unknown",
    "extract_entries",
    "extract_feat_description",
    "extract_paragraphs",
    "parse_entries",
    "parse_entry",
]
