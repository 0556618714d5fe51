"""
Tests for the languages and source-index processors.
"""

import pytest

from charforge_data.preprocess.backgrounds import process_backgrounds
from charforge_data.preprocess.classes import process_classes
from charforge_data.preprocess.context import CategoryError, RunContext
from charforge_data.preprocess.languages import process_languages
from charforge_data.preprocess.races import process_races
from charforge_data.preprocess.sources import process_sources


SAMPLE_LANGUAGES = {
    "language": [
        {"name": "Gith", "source": "MPMM"},
        {"name": "Common", "source": "XPHB"},
        {"name": "Gith", "source": "TCE"},
        {"name": "Abyssal", "source": "PHB"},
        {"name": "Common", "source": "PHB"},
        {"source": "PHB"},
    ]
}


class TestProcessLanguages:
    """Test the languages category."""

    def test_sorted_unique_names(self, raw_dir, out_dir, write_raw):
        write_raw("languages.json", SAMPLE_LANGUAGES)
        document = process_languages(RunContext(raw_dir, out_dir))["languages.json"]
        assert document.to_json_dict() == {"languages": ["Abyssal", "Common", "Gith"]}

    def test_empty_list(self, raw_dir, out_dir, write_raw):
        write_raw("languages.json", {"language": []})
        document = process_languages(RunContext(raw_dir, out_dir))["languages.json"]
        assert document.languages == []

    def test_missing_file_fails_category(self, raw_dir, out_dir):
        with pytest.raises(CategoryError):
            process_languages(RunContext(raw_dir, out_dir))


class TestProcessSources:
    """Test the source-book index."""

    def _emit(self, ctx, *artifacts):
        for documents in artifacts:
            ctx.emitted.update(documents)

    def test_collects_emitted_class_race_and_background_sources(self, raw_dir, out_dir, write_raw):
        write_raw("class/class-fighter.json", {"class": [
            {"name": "Fighter", "source": "PHB"},
            {"name": "Fighter", "source": "XPHB", "edition": "one"},
        ]})
        write_raw("races.json", {"race": [
            {"name": "Elf", "source": "XPHB"},
            {"name": "Elf", "source": "MPMM", "_copy": {"name": "Elf"}},
            {"name": "Owlin", "source": "SCC"},
        ]})
        write_raw("backgrounds.json", {"background": [
            {"name": "Haunted One", "source": "VRGR"},
        ]})
        write_raw("fluff-backgrounds.json", {"backgroundFluff": [
            {"name": "Haunted One", "source": "VRGR", "entries": ["You faced horror."]},
        ]})

        ctx = RunContext(raw_dir, out_dir)
        self._emit(
            ctx,
            process_classes(ctx, ["fighter", "wizard"]),
            process_races(ctx),
            process_backgrounds(ctx),
        )
        document = process_sources(ctx)["sources.json"]

        assert document.sources == ["SCC", "VRGR", "XPHB"]

    def test_background_dropped_for_missing_fluff_adds_no_source(self, raw_dir, out_dir, write_raw):
        write_raw("backgrounds.json", {"background": [
            {"name": "Sage", "source": "XPHB", "edition": "one"},
        ]})

        ctx = RunContext(raw_dir, out_dir)
        backgrounds = process_backgrounds(ctx)
        self._emit(ctx, backgrounds)

        assert backgrounds["backgrounds.json"].backgrounds == []
        assert process_sources(ctx)["sources.json"].sources == []

    def test_every_emitted_race_edition_listed(self, raw_dir, out_dir, write_raw):
        write_raw("races.json", {"race": [
            {"name": "Elf", "source": "PHB", "edition": "classic"},
            {"name": "Elf", "source": "XPHB", "edition": "one"},
        ]})

        ctx = RunContext(raw_dir, out_dir)
        self._emit(ctx, process_races(ctx))

        assert process_sources(ctx)["sources.json"].sources == ["PHB", "XPHB"]

    def test_nothing_emitted(self, raw_dir, out_dir):
        document = process_sources(RunContext(raw_dir, out_dir))["sources.json"]
        assert document.sources == []
