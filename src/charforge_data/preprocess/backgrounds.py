"""
Backgrounds processor.

Only backgrounds of the target edition (or untagged ones) are considered, and
only those with narrative text survive: a background without fluff has
nothing to show in the picker and is left out entirely.
"""

import logging
from typing import Any

from .context import RunContext
from .entries import extract_entries
from .joiner import (
    FeatIndex,
    feat_refs_of,
    flatten_flags,
    group_by_name,
    iter_records,
    matches_edition,
    merge_variants,
    resolve_feat_refs,
)
from .markup import clean
from .models import (
    AbilityBonusChoice,
    Artifacts,
    BackgroundEntry,
    BackgroundsDocument,
    BackgroundVariant,
)


logger = logging.getLogger("charforge-data.backgrounds")

EQUIPMENT_ITEM_NAME = "Equipment:"


def ability_choices(record: dict[str, Any]) -> list[AbilityBonusChoice] | None:
    """Weighted ability choices; ``count`` is the largest weight, default 1."""
    if record.get("ability") is None:
        return None
    choices = []
    for ability in record["ability"]:
        choose = ability.get("choose") if isinstance(ability, dict) else None
        weighted = (choose or {}).get("weighted") or {}
        weights = weighted.get("weights") or []
        choices.append(AbilityBonusChoice(
            from_=weighted.get("from") or [],
            count=max(weights, default=0) or 1,
            weights=weighted.get("weights"),
        ))
    return choices


def equipment_line(record: dict[str, Any]) -> list[str] | None:
    """The ``Equipment:`` item of the first list that has one."""
    for entry in record.get("entries") or []:
        if not isinstance(entry, dict) or entry.get("type") != "list":
            continue
        items = entry.get("items")
        if not isinstance(items, list):
            continue
        item = next(
            (i for i in items if isinstance(i, dict) and i.get("name") == EQUIPMENT_ITEM_NAME),
            None,
        )
        if item is not None and isinstance(item.get("entry"), str):
            return [clean(item["entry"])]
    return None


def background_mechanics(record: dict[str, Any], feat_index: FeatIndex) -> dict[str, Any]:
    """Mechanical fields of a background variant; empty lists become absent."""
    return {
        "ability_bonuses": ability_choices(record),
        "feats": resolve_feat_refs(feat_refs_of(record), feat_index) or None,
        "skill_proficiencies": flatten_flags(record.get("skillProficiencies")) or None,
        "tool_proficiencies": flatten_flags(record.get("toolProficiencies")) or None,
        "languages": flatten_flags(record.get("languageProficiencies")) or None,
        "equipment": equipment_line(record),
    }


def process_backgrounds(ctx: RunContext) -> Artifacts:
    """Build ``backgrounds.json`` from backgrounds, their fluff and feats."""
    data = ctx.read_required("backgrounds.json", "background")
    fluff = list(iter_records(ctx.read_optional("fluff-backgrounds.json"), "backgroundFluff"))
    feat_index = ctx.feat_index

    def build(source: str, mech: dict[str, Any] | None, fluff_record: dict[str, Any] | None):
        return BackgroundVariant(
            source=source,
            description=extract_entries(fluff_record.get("entries")) if fluff_record else "",
            **background_mechanics(mech or {}, feat_index),
        )

    groups = group_by_name(
        iter_records(data, "background"),
        predicate=lambda record: matches_edition(record, ctx.edition),
    )
    backgrounds: list[BackgroundEntry] = []
    for name, mechanics in groups.items():
        variants = merge_variants(name, mechanics, fluff, build, include_unmatched=False)
        described = [v for v in variants if v.description]
        if described:
            backgrounds.append(BackgroundEntry(name=name, descriptions=described))

    logger.info(f"backgrounds.json: {len(backgrounds)} backgrounds")
    return {"backgrounds.json": BackgroundsDocument(backgrounds=backgrounds)}


__all__ = [
    "ability_choices",
    "background_mechanics",
    "equipment_line",
    "process_backgrounds",
]
