"""
Output documents written by the preprocessing pipeline.

Field names are snake_case in Python and camelCase in the emitted JSON, which
is what the lookup service and the character-creation frontend read. Fields
left as ``None`` are omitted from the output rather than written as null.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OutputModel(BaseModel):
    """Base class for every emitted document."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Classes
# =============================================================================

class FeatureRecord(OutputModel):
    """A class or subclass feature gained at a given level."""
    name: str
    level: int = Field(default=0, ge=0)
    entries: list[str] = Field(default_factory=list, description="Cleaned paragraphs")


class SubclassDetail(OutputModel):
    """A subclass with its intro text split out from its features."""
    name: str
    source: str
    class_name: str | None = None
    description: str = ""
    features: list[FeatureRecord] = Field(default_factory=list)


class ClassSummary(OutputModel):
    """One row of ``classes.json``."""
    name: str
    source: str
    primary_ability: str
    complexity: str
    hd: Any = None
    proficiency: Any = None


class ClassDetail(OutputModel):
    """The ``detail`` half of a per-class file."""
    name: str
    source: str
    description: str = ""
    primary_ability: str
    complexity: str
    hd: Any = None
    proficiency: Any = None
    starting_proficiencies: Any = None
    subclasses: list[str] = Field(default_factory=list, description="Subclass names")
    features: list[FeatureRecord] = Field(default_factory=list)


class ClassFile(OutputModel):
    """Contents of ``classes/<name>.json``."""
    detail: ClassDetail
    subclasses: dict[str, SubclassDetail] = Field(
        default_factory=dict,
        description="Lowercased subclass name -> subclass detail",
    )


# =============================================================================
# Races / Species
# =============================================================================

class Speed(OutputModel):
    walk: Any = None
    fly: Any = None


class RaceVariant(OutputModel):
    """One source's take on a species: prose plus mechanics when present."""
    source: str
    description: str = ""
    ability: Any = None
    size: Any = None
    speed: Speed | None = None
    languages: list[str] | None = None
    traits: list[str] | None = None


class RaceEntry(OutputModel):
    name: str
    descriptions: list[RaceVariant] = Field(default_factory=list)


class RacesDocument(OutputModel):
    races: list[RaceEntry] = Field(default_factory=list)


# =============================================================================
# Backgrounds
# =============================================================================

class ResolvedFeat(OutputModel):
    """A feat looked up through the run's feat index."""
    name: str
    source: str
    description: str = ""


class AbilityBonusChoice(OutputModel):
    """Weighted ability-score choice granted by a background."""
    from_: list[str] = Field(default_factory=list, alias="from")
    count: int = 1
    weights: list[int] | None = None


class BackgroundVariant(OutputModel):
    source: str
    description: str = ""
    ability_bonuses: list[AbilityBonusChoice] | None = None
    feats: list[ResolvedFeat] | None = None
    skill_proficiencies: list[str] | None = None
    tool_proficiencies: list[str] | None = None
    languages: list[str] | None = None
    equipment: list[str] | None = None


class BackgroundEntry(OutputModel):
    name: str
    descriptions: list[BackgroundVariant] = Field(default_factory=list)


class BackgroundsDocument(OutputModel):
    backgrounds: list[BackgroundEntry] = Field(default_factory=list)


# =============================================================================
# Languages / Sources
# =============================================================================

class LanguagesDocument(OutputModel):
    languages: list[str] = Field(default_factory=list)


class SourcesDocument(OutputModel):
    sources: list[str] = Field(default_factory=list)


# Relative output path -> document (a bare list for classes.json)
Artifacts = dict[str, OutputModel | list[OutputModel]]


__all__ = [
    "AbilityBonusChoice",
    "Artifacts",
    "BackgroundEntry",
    "BackgroundVariant",
    "BackgroundsDocument",
    "ClassDetail",
    "ClassFile",
    "ClassSummary",
    "FeatureRecord",
    "LanguagesDocument",
    "OutputModel",
    "RaceEntry",
    "RaceVariant",
    "RacesDocument",
    "ResolvedFeat",
    "SourcesDocument",
    "Speed",
    "SubclassDetail",
]
