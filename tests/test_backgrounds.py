"""
Tests for the backgrounds processor.
"""

import pytest

from charforge_data.preprocess.backgrounds import (
    ability_choices,
    equipment_line,
    process_backgrounds,
)
from charforge_data.preprocess.context import CategoryError, RunContext


# =============================================================================
# Sample 5etools Data Fixtures
# =============================================================================

SAMPLE_BACKGROUNDS = {
    "background": [
        {
            "name": "Acolyte",
            "source": "XPHB",
            "edition": "one",
            "ability": [{"choose": {"weighted": {
                "from": ["int", "wis", "cha"], "weights": [2, 1],
            }}}],
            "feats": [{"magic initiate; cleric|xphb": True}],
            "skillProficiencies": [{"insight": True, "religion": True}],
            "toolProficiencies": [{"calligrapher's supplies": True}],
            "entries": [
                {"type": "list", "style": "list-hang-notitle", "items": [
                    {"type": "item", "name": "Feat:", "entry": "{@feat Magic Initiate|XPHB}"},
                    {"type": "item", "name": "Equipment:",
                     "entry": "Choose A or B: (A) {@item Book|XPHB}, 8 GP; or (B) 50 GP"},
                ]},
            ],
        },
        {"name": "Acolyte", "source": "PHB", "edition": "classic",
         "languageProficiencies": [{"anyStandard": 2}]},
        {"name": "Sage", "source": "XPHB", "edition": "one",
         "languageProficiencies": [{"anyStandard": 1}]},
        {"name": "Hermit", "source": "XPHB", "edition": "one"},
        {"name": "Noble", "source": "XPHB", "edition": "one",
         "feats": [{"unknown feat|xphb": True}]},
    ]
}

SAMPLE_BACKGROUND_FLUFF = {
    "backgroundFluff": [
        {"name": "Acolyte", "source": "XPHB", "entries": ["You devoted yourself to a {@b temple}."]},
        {"name": "Acolyte", "source": "PHB", "entries": ["Legacy acolyte."]},
        {"name": "Sage", "source": "XPHB", "entries": []},
        {"name": "Sage", "source": "XYZ", "entries": ["Fluff with no mechanics."]},
        {"name": "Noble", "source": "XPHB", "entries": ["Raised in wealth."]},
    ]
}

SAMPLE_FEATS = {
    "feat": [
        {"name": "Magic Initiate", "source": "XPHB", "entries": [
            "You gain the following benefits.",
            {"type": "entries", "name": "Two Cantrips", "entries": ["Learn two cantrips."]},
        ]},
    ]
}


@pytest.fixture
def backgrounds_raw(write_raw):
    write_raw("backgrounds.json", SAMPLE_BACKGROUNDS)
    write_raw("fluff-backgrounds.json", SAMPLE_BACKGROUND_FLUFF)
    write_raw("feats.json", SAMPLE_FEATS)


class TestAbilityChoices:
    """Test weighted ability bonus extraction."""

    def test_weighted_choice(self):
        choices = ability_choices(SAMPLE_BACKGROUNDS["background"][0])
        assert [c.to_json_dict() for c in choices] == [
            {"from": ["int", "wis", "cha"], "count": 2, "weights": [2, 1]},
        ]

    def test_count_defaults_to_one(self):
        choices = ability_choices({"ability": [{"choose": {"weighted": {"from": ["str"]}}}]})
        assert choices[0].count == 1
        assert choices[0].weights is None

    def test_non_weighted_ability(self):
        choices = ability_choices({"ability": [{"str": 1}]})
        assert choices[0].to_json_dict() == {"from": [], "count": 1}

    def test_absent(self):
        assert ability_choices({}) is None


class TestEquipmentLine:
    """Test the equipment summary line."""

    def test_equipment_item_cleaned(self):
        assert equipment_line(SAMPLE_BACKGROUNDS["background"][0]) == [
            "Choose A or B: (A) Book, 8 GP; or (B) 50 GP"
        ]

    def test_no_list(self):
        assert equipment_line({"entries": ["prose"]}) is None

    def test_list_without_equipment_item(self):
        record = {"entries": [{"type": "list", "items": [{"name": "Feat:", "entry": "x"}]}]}
        assert equipment_line(record) is None


class TestProcessBackgrounds:
    """Test the backgrounds category over a raw directory."""

    def _run(self, raw_dir, out_dir):
        document = process_backgrounds(RunContext(raw_dir, out_dir))["backgrounds.json"]
        return {entry.name: entry for entry in document.backgrounds}

    def test_only_described_target_edition_backgrounds(self, raw_dir, out_dir, backgrounds_raw):
        backgrounds = self._run(raw_dir, out_dir)
        assert list(backgrounds) == ["Acolyte", "Noble"]
        assert [v.source for v in backgrounds["Acolyte"].descriptions] == ["XPHB"]

    def test_full_variant(self, raw_dir, out_dir, backgrounds_raw):
        variant = self._run(raw_dir, out_dir)["Acolyte"].descriptions[0]
        assert variant.to_json_dict() == {
            "source": "XPHB",
            "description": "You devoted yourself to a temple.",
            "abilityBonuses": [{"from": ["int", "wis", "cha"], "count": 2, "weights": [2, 1]}],
            "feats": [{
                "name": "Magic Initiate",
                "source": "XPHB",
                "description": "You gain the following benefits. Two Cantrips: Learn two cantrips.",
            }],
            "skillProficiencies": ["Insight", "Religion"],
            "toolProficiencies": ["Calligrapher's supplies"],
            "equipment": ["Choose A or B: (A) Book, 8 GP; or (B) 50 GP"],
        }

    def test_unresolved_feat_dropped(self, raw_dir, out_dir, backgrounds_raw):
        noble = self._run(raw_dir, out_dir)["Noble"].descriptions[0]
        assert noble.description == "Raised in wealth."
        assert noble.feats is None

    def test_empty_fluff_excludes_background(self, raw_dir, out_dir, backgrounds_raw):
        assert "Sage" not in self._run(raw_dir, out_dir)

    def test_without_feats_file(self, raw_dir, out_dir, write_raw):
        write_raw("backgrounds.json", SAMPLE_BACKGROUNDS)
        write_raw("fluff-backgrounds.json", SAMPLE_BACKGROUND_FLUFF)
        acolyte = self._run(raw_dir, out_dir)["Acolyte"].descriptions[0]
        assert acolyte.feats is None

    def test_without_fluff_file_nothing_survives(self, raw_dir, out_dir, write_raw):
        write_raw("backgrounds.json", SAMPLE_BACKGROUNDS)
        assert self._run(raw_dir, out_dir) == {}

    def test_missing_backgrounds_file_fails_category(self, raw_dir, out_dir):
        with pytest.raises(CategoryError):
            process_backgrounds(RunContext(raw_dir, out_dir))
