"""
Record joining and cross-reference resolution.

Raw 5etools categories spread one logical entity over several records: one
per source book, one per edition, and separate "fluff" records holding the
narrative text. The helpers here group those records, pick the canonical
variant, merge narrative with mechanics per source and resolve the
``name|source`` feat references backgrounds carry.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, TypeVar

from .entries import extract_feat_description
from .models import ResolvedFeat


V = TypeVar("V")

TARGET_EDITION = "one"

# Higher wins when the same language appears in several books
SOURCE_PRIORITY: dict[str, int] = {
    "PHB": 100,
    "XPHB": 90,
    "ERLW": 80,
    "GGR": 70,
    "TCE": 60,
    "MPMM": 50,
}

# Keys that ask the player to choose instead of naming a language
_CHOICE_KEYS = ("anyStandard", "any")


# =============================================================================
# Grouping and Canonical Selection
# =============================================================================

def is_copy(record: dict[str, Any]) -> bool:
    """True for derived ``_copy`` records, which never count as canonical."""
    return bool(record.get("_copy"))


def group_by_name(
    records: Iterable[dict[str, Any]],
    predicate: Callable[[dict[str, Any]], bool] | None = None,
) -> dict[str, list[dict[str, Any]]]:
    """Group records by exact ``name`` in first-seen order.

    ``_copy`` records and records without a name are skipped, as is anything
    rejected by ``predicate``.
    """
    groups: dict[str, list[dict[str, Any]]] = {}
    for record in records:
        name = record.get("name")
        if not name or is_copy(record):
            continue
        if predicate is not None and not predicate(record):
            continue
        groups.setdefault(name, []).append(record)
    return groups


def matches_edition(record: dict[str, Any], edition: str = TARGET_EDITION) -> bool:
    """True when the record is tagged with ``edition`` or carries no tag."""
    tag = record.get("edition")
    return not tag or tag == edition


def select_canonical(
    records: list[dict[str, Any]], edition: str = TARGET_EDITION
) -> dict[str, Any] | None:
    """Prefer the first record tagged with ``edition``, else the first record."""
    for record in records:
        if record.get("edition") == edition:
            return record
    return records[0] if records else None


def fluff_for(name: str, fluff: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Narrative records whose name matches ``name`` case-insensitively."""
    wanted = name.lower()
    return [f for f in fluff if str(f.get("name", "")).lower() == wanted]


def merge_variants(
    name: str,
    mechanics: list[dict[str, Any]],
    fluff: Iterable[dict[str, Any]],
    build: Callable[[str, dict[str, Any] | None, dict[str, Any] | None], V],
    include_unmatched: bool = True,
) -> list[V]:
    """Join narrative and mechanical records of one entity per source.

    ``build(source, mech, fluff)`` makes one variant; either side may be None
    when only the other exists. Fluff-backed variants come first, in fluff
    order, followed by mechanical records whose source had no fluff (unless
    ``include_unmatched`` is False). Each source yields at most one variant.
    """
    variants: list[V] = []
    seen: set[str] = set()

    for fluff_record in fluff_for(name, fluff):
        source = fluff_record.get("source") or "Unknown"
        if source in seen:
            continue
        mech = next((m for m in mechanics if m.get("source") == fluff_record.get("source")), None)
        if mech is None and not include_unmatched:
            continue
        seen.add(source)
        variants.append(build(source, mech, fluff_record))

    if include_unmatched:
        for mech in mechanics:
            source = mech.get("source") or "Unknown"
            if source in seen:
                continue
            seen.add(source)
            variants.append(build(source, mech, None))

    return variants


# =============================================================================
# Feat References
# =============================================================================

def feat_key(name: str, source: str | None) -> str:
    return f"{name.lower()}|{(source or '').lower()}"


@dataclass
class FeatIndex:
    """Lookup of feat descriptions keyed by lowercased ``name|source``."""

    feats: dict[str, ResolvedFeat] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "FeatIndex":
        index = cls()
        for record in records:
            name, source = record.get("name"), record.get("source")
            if not name or not source:
                continue
            index.feats[feat_key(name, source)] = ResolvedFeat(
                name=name,
                source=source,
                description=extract_feat_description(record.get("entries") or []),
            )
        return index

    def get(self, key: str) -> ResolvedFeat | None:
        return self.feats.get(key)

    def __len__(self) -> int:
        return len(self.feats)


def parse_feat_ref(ref: str) -> str:
    """Turn ``"Magic Initiate; Cleric|XPHB"`` into ``"magic initiate|xphb"``."""
    raw_name, _, source = ref.partition("|")
    name = raw_name.split(";", 1)[0].strip()
    return feat_key(name, source.split("|", 1)[0])


def resolve_feat_refs(refs: Iterable[str], index: FeatIndex) -> list[ResolvedFeat]:
    """Resolve references against ``index``; unknown references are dropped."""
    resolved = []
    for ref in refs:
        feat = index.get(parse_feat_ref(ref))
        if feat is not None:
            resolved.append(feat)
    return resolved


def feat_refs_of(record: dict[str, Any]) -> list[str]:
    """The reference strings of a record's ``feats`` list (first key of each)."""
    refs = []
    for entry in record.get("feats") or []:
        if isinstance(entry, dict) and entry:
            refs.append(next(iter(entry)))
    return refs


# =============================================================================
# Flag Flattening and Priority
# =============================================================================

def _capitalize(key: str) -> str:
    return key[:1].upper() + key[1:]


def flatten_flags(
    flag_objects: Iterable[Any] | None,
    capitalize: bool = True,
    choices: bool = True,
) -> list[str]:
    """Flatten ``[{"common": true, "elvish": true}]`` style objects to names.

    The ``type`` key is never a name. With ``choices`` enabled an
    ``anyStandard`` or ``any`` key adds a ``"<n> of your choice"`` entry
    after the object's named flags, so ``{"common": true, "anyStandard": 1}``
    gives ``["Common", "1 of your choice"]``.
    """
    names: list[str] = []
    for obj in flag_objects or []:
        if not isinstance(obj, dict):
            continue
        for key, value in obj.items():
            if key == "type" or value is not True:
                continue
            names.append(_capitalize(key) if capitalize else key)
        if choices:
            choice = next((obj[k] for k in _CHOICE_KEYS if obj.get(k)), None)
            if choice is not None:
                names.append(f"{choice} of your choice")
    return names


def source_priority(source: str | None) -> int:
    return SOURCE_PRIORITY.get(source or "", 0)


def pick_by_priority(pairs: Iterable[tuple[str, str | None]]) -> dict[str, tuple[str | None, int]]:
    """Keep one ``(source, priority)`` per name, highest priority first seen."""
    best: dict[str, tuple[str | None, int]] = {}
    for name, source in pairs:
        priority = source_priority(source)
        if name not in best or priority > best[name][1]:
            best[name] = (source, priority)
    return best


def iter_records(document: dict[str, Any] | None, key: str) -> Iterator[dict[str, Any]]:
    """Yield the dict records stored under ``key`` of a raw document."""
    for record in (document or {}).get(key) or []:
        if isinstance(record, dict):
            yield record


__all__ = [
    "FeatIndex",
    "SOURCE_PRIORITY",
    "TARGET_EDITION",
    "feat_key",
    "feat_refs_of",
    "flatten_flags",
    "fluff_for",
    "group_by_name",
    "is_copy",
    "iter_records",
    "matches_edition",
    "merge_variants",
    "parse_feat_ref",
    "pick_by_priority",
    "resolve_feat_refs",
    "select_canonical",
    "source_priority",
]
