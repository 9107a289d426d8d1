"""
Configuration Module

Settings come from the environment (.env); constants hold the detection
patterns, affordance styles and thresholds of the form pipeline.
"""

from .settings import settings, get_settings, Settings
from .constants import CONFIDENCE_APPLY_THRESHOLD, PRIORITY_TAGS

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "CONFIDENCE_APPLY_THRESHOLD",
    "PRIORITY_TAGS",
]
