"""
Rules-data preprocessing for charforge-data.

This module provides:
- Markup stripping for 5etools ``{@tag ...}`` references
- Entry-tree extraction into plain paragraphs
- Record joining across mechanics, fluff and feat files
- Per-category processors for classes, races, backgrounds and languages
- The Pipeline driver that writes the flat lookup documents
"""

from .context import CategoryError, RawDataMissingError, RawFileError, RunContext
from .entries import extract_entries, extract_feat_description, extract_paragraphs
from .fetch import FetchError, RawDataFetcher, fetch_raw_data
from .joiner import FeatIndex, SOURCE_PRIORITY, TARGET_EDITION
from .markup import MarkupError, clean, clean_deep
from .pipeline import CategoryResult, Pipeline, PipelineReport

__all__ = [
    # Driver
    "Pipeline",
    "PipelineReport",
    "CategoryResult",
    "RunContext",
    # Errors
    "CategoryError",
    "FetchError",
    "MarkupError",
    "RawDataMissingError",
    "RawFileError",
    # Text
    "clean",
    "clean_deep",
    "extract_entries",
    "extract_feat_description",
    "extract_paragraphs",
    # Joining
    "FeatIndex",
    "SOURCE_PRIORITY",
    "TARGET_EDITION",
    # Raw data
    "RawDataFetcher",
    "fetch_raw_data",
]
