"""
charforge-data - rules-data preprocessing for the character-creation app.
"""

from .config import Settings, load_settings
from .preprocess import Pipeline, PipelineReport

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("charforge-data")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = ["Pipeline", "PipelineReport", "Settings", "load_settings"]
