"""
Classes processor.

Each class lives in its own raw file holding every edition of the class, its
subclasses and the features of both, plus a separate fluff file with the
narrative text. The processor picks the canonical edition, keeps only the
features and subclasses printed in that edition's book and writes one summary
row per class and one detail file per class.
"""

import logging
from typing import Any, NamedTuple

from .context import RawFileError, RunContext
from .entries import extract_entries
from .joiner import iter_records, select_canonical
from .markup import clean, clean_deep
from .models import (
    Artifacts,
    ClassDetail,
    ClassFile,
    ClassSummary,
    FeatureRecord,
    SubclassDetail,
)


logger = logging.getLogger("charforge-data.classes")


class ClassProfile(NamedTuple):
    primary_ability: str
    complexity: str


CLASS_NAMES = [
    "artificer", "barbarian", "bard", "cleric", "druid", "fighter",
    "monk", "paladin", "ranger", "rogue", "sorcerer", "warlock", "wizard",
]

# Editorial ratings shown in the class picker; not derived from the rules data
CLASS_COMPLEXITY: dict[str, ClassProfile] = {
    "Artificer": ClassProfile("Intelligence", "High"),
    "Barbarian": ClassProfile("Strength", "Average"),
    "Bard": ClassProfile("Charisma", "High"),
    "Cleric": ClassProfile("Wisdom", "Average"),
    "Druid": ClassProfile("Wisdom", "High"),
    "Fighter": ClassProfile("Strength or Dexterity", "Low"),
    "Monk": ClassProfile("Dexterity and Wisdom", "High"),
    "Paladin": ClassProfile("Strength and Charisma", "Average"),
    "Ranger": ClassProfile("Dexterity and Wisdom", "Average"),
    "Rogue": ClassProfile("Dexterity", "Low"),
    "Sorcerer": ClassProfile("Charisma", "High"),
    "Warlock": ClassProfile("Charisma", "High"),
    "Wizard": ClassProfile("Intelligence", "Average"),
}
DEFAULT_PROFILE = ClassProfile("", "Average")

SUBCLASS_INTRO_LEVEL = 3
ITALIC_ASIDE_PREFIX = "{@i "


def class_profile(name: str) -> ClassProfile:
    return CLASS_COMPLEXITY.get(name, DEFAULT_PROFILE)


def _string_entries(feature: dict[str, Any]) -> list[str]:
    return [e for e in feature.get("entries") or [] if isinstance(e, str)]


def _feature_record(feature: dict[str, Any]) -> FeatureRecord:
    return FeatureRecord(
        name=feature["name"],
        level=feature.get("level") or 0,
        entries=[clean(e) for e in _string_entries(feature)],
    )


def class_description(fluff: dict[str, Any], source: str) -> str:
    """Narrative text from the first ``section`` block of the matching fluff."""
    record = next(
        (f for f in iter_records(fluff, "classFluff") if f.get("source") == source),
        None,
    )
    if not record:
        return ""
    section = next(
        (e for e in record.get("entries") or []
         if isinstance(e, dict) and e.get("type") == "section"),
        None,
    )
    if not section or not isinstance(section.get("entries"), list):
        return ""
    return extract_entries(section["entries"])


def class_features(data: dict[str, Any], source: str) -> list[FeatureRecord]:
    """Class-wide features printed in ``source``, ordered by level."""
    features = [
        _feature_record(f)
        for f in iter_records(data, "classFeature")
        if f.get("source") == source and f.get("classSource") == source
    ]
    return sorted(features, key=lambda f: f.level)


def subclass_detail(data: dict[str, Any], subclass: dict[str, Any], source: str) -> SubclassDetail:
    """Collect one subclass's features and split off its intro feature."""
    name = subclass["name"]
    short_name = subclass.get("shortName") or name
    raw_features = [
        f for f in iter_records(data, "subclassFeature")
        if f.get("source") == source
        and f.get("subclassSource") == source
        and f.get("subclassShortName") == short_name
    ]

    intro = next(
        (f for f in raw_features
         if f.get("name") == name and f.get("level") == SUBCLASS_INTRO_LEVEL),
        None,
    )
    description = ""
    if intro is not None:
        paragraphs = [
            clean(e) for e in _string_entries(intro)
            if not e.startswith(ITALIC_ASIDE_PREFIX)
        ]
        description = "\n\n".join(p for p in paragraphs if p)

    return SubclassDetail(
        name=name,
        source=subclass.get("source") or source,
        class_name=subclass.get("className"),
        description=description,
        features=[_feature_record(f) for f in raw_features if f.get("name") != name],
    )


def build_class(
    data: dict[str, Any], fluff: dict[str, Any], edition: str
) -> tuple[ClassSummary, ClassFile] | None:
    """Assemble the summary row and detail file for one raw class document."""
    canonical = select_canonical(list(iter_records(data, "class")), edition)
    if canonical is None:
        return None

    source = canonical["source"]
    profile = class_profile(canonical["name"])
    subclasses = [
        sc for sc in iter_records(data, "subclass")
        if sc.get("name") and sc.get("source") == source and sc.get("classSource") == source
    ]
    summary = ClassSummary(
        name=canonical["name"],
        source=source,
        primary_ability=profile.primary_ability,
        complexity=profile.complexity,
        hd=canonical.get("hd"),
        proficiency=canonical.get("proficiency"),
    )
    detail = ClassDetail(
        name=canonical["name"],
        source=source,
        description=class_description(fluff, source),
        primary_ability=profile.primary_ability,
        complexity=profile.complexity,
        hd=canonical.get("hd"),
        proficiency=canonical.get("proficiency"),
        starting_proficiencies=clean_deep(canonical.get("startingProficiencies")),
        subclasses=[sc["name"] for sc in subclasses],
        features=class_features(data, source),
    )
    subclass_map = {
        sc["name"].lower(): subclass_detail(data, sc, source) for sc in subclasses
    }
    return summary, ClassFile(detail=detail, subclasses=subclass_map)


def process_classes(ctx: RunContext, class_names: list[str] | None = None) -> Artifacts:
    """Build ``classes.json`` and ``classes/<name>.json`` for every class.

    A class whose raw file is missing or malformed is logged and skipped.
    """
    summaries: list[ClassSummary] = []
    artifacts: Artifacts = {}

    for name in CLASS_NAMES if class_names is None else class_names:
        try:
            data = ctx.read_json(f"class/class-{name}.json")
            fluff = ctx.read_optional(f"class/fluff-class-{name}.json")
            built = build_class(data, fluff, ctx.edition)
        except RawFileError as e:
            logger.warning(f"Skipping class '{name}': {e.reason}")
            continue
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping class '{name}': malformed data ({e})")
            continue
        if built is None:
            logger.warning(f"Skipping class '{name}': no class data")
            continue

        summary, class_file = built
        summaries.append(summary)
        artifacts[f"classes/{name}.json"] = class_file
        logger.info(
            f"  class: {summary.name} ({len(class_file.detail.subclasses)} subclasses, "
            f"{len(class_file.detail.features)} features)"
        )

    artifacts["classes.json"] = summaries
    return artifacts


__all__ = [
    "CLASS_COMPLEXITY",
    "CLASS_NAMES",
    "ClassProfile",
    "build_class",
    "class_description",
    "class_features",
    "class_profile",
    "process_classes",
    "subclass_detail",
]
