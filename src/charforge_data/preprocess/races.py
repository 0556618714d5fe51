"""Races (species) processor."""

import logging
from typing import Any

from .context import RunContext
from .entries import extract_entries
from .joiner import flatten_flags, group_by_name, iter_records, merge_variants
from .markup import clean
from .models import Artifacts, RaceEntry, RacesDocument, RaceVariant, Speed


logger = logging.getLogger("charforge-data.races")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_speed(speed: Any) -> Speed | None:
    """Reduce a raw speed to walk/fly.

    A bare number is a walking speed. In object form ``fly: true`` means the
    creature flies at its walking speed.
    """
    if _is_number(speed):
        return Speed(walk=speed)
    if isinstance(speed, dict):
        fly = speed.get("fly")
        if fly is True:
            fly = speed.get("walk")
        elif not _is_number(fly):
            fly = None
        return Speed(walk=speed.get("walk"), fly=fly)
    return None


def trait_names(mech: dict[str, Any]) -> list[str]:
    """Names of the named sub-entries in a race's mechanical entries."""
    return [
        clean(str(entry["name"]))
        for entry in mech.get("entries") or []
        if isinstance(entry, dict) and entry.get("name")
    ]


def race_variant(
    source: str, mech: dict[str, Any] | None, fluff: dict[str, Any] | None
) -> RaceVariant:
    """Merge one source's fluff and mechanics; missing halves stay absent."""
    description = extract_entries(fluff.get("entries")) if fluff else ""
    if mech is None:
        return RaceVariant(source=source, description=description)

    languages = flatten_flags(mech.get("languageProficiencies"))
    traits = trait_names(mech)
    return RaceVariant(
        source=source,
        description=description,
        ability=mech.get("ability"),
        size=mech.get("size"),
        speed=normalize_speed(mech.get("speed")),
        languages=languages or None,
        traits=traits or None,
    )


def process_races(ctx: RunContext) -> Artifacts:
    """Build ``races.json``: one entry per species, one variant per source."""
    data = ctx.read_required("races.json", "race")
    fluff = list(iter_records(ctx.read_optional("fluff-races.json"), "raceFluff"))

    races: list[RaceEntry] = []
    for name, mechanics in group_by_name(iter_records(data, "race")).items():
        variants = merge_variants(name, mechanics, fluff, race_variant)
        if variants:
            races.append(RaceEntry(name=name, descriptions=variants))

    logger.info(f"races.json: {len(races)} races")
    return {"races.json": RacesDocument(races=races)}


__all__ = [
    "normalize_speed",
    "process_races",
    "race_variant",
    "trait_names",
]
