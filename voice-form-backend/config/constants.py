"""
Application Constants

Centralizes patterns, styles and timing values used by the form pipeline.
Avoids hardcoded values scattered throughout the codebase.

Usage:
    from config.constants import CONFIDENCE_APPLY_THRESHOLD, PRIORITY_TAGS
"""

import re

# =============================================================================
# Field Detection
# =============================================================================

# Placeholder tokens that mark a blank; stripped from converted regions
PLACEHOLDER_PATTERNS = [
    re.compile(r"_{3,}"),
    re.compile(r"\.{3,}"),
    re.compile(r"\(enter\)", re.IGNORECASE),
    re.compile(r"\(fill\)", re.IGNORECASE),
    re.compile(r"\(input\)", re.IGNORECASE),
    re.compile(r"\(image\)", re.IGNORECASE),
    re.compile(r"\(logo\)", re.IGNORECASE),
    re.compile(r"\(photo\)", re.IGNORECASE),
    re.compile(r"\[.*?\]"),
]

# Whitespace-only content counts as a blank but has nothing to strip
BLANK_PATTERN = re.compile(r"^\s*$")

# Tag categories in the order the transformer visits them
PRIORITY_TAGS = ["td", "th", "p", "span", "div"]

CELL_TAGS = {"td", "th"}


# =============================================================================
# Region Markup
# =============================================================================

REGION_ID_ATTR = "data-editable-id"
IMAGE_SLOT_ATTR = "data-image-slot-id"
ORIGINAL_TEXT_ATTR = "data-original"
ADDED_STYLES_ATTR = "data-editable-styles"
EDITABLE_CLASS = "editable"

# Applied only when the node does not already carry the property
REGION_DEFAULT_STYLES = {
    "min-width": "50px",
    "min-height": "20px",
    "cursor": "text",
}

INSERTED_IMAGE_STYLES = {
    "max-width": "100%",
    "height": "auto",
    "display": "block",
    "margin": "10px 0",
}

IMAGE_PLACEHOLDER_ALT = "Image placeholder - Right-click to add"

# Client-side hook: an unresolvable source renders as a dashed placeholder box
IMAGE_ONERROR_SCRIPT = (
    "this.style.border='2px dashed #ccc';"
    "this.style.backgroundColor='#f5f5f5';"
    "this.style.display='inline-block';"
    f"this.alt=this.alt||'{IMAGE_PLACEHOLDER_ALT}';"
    "this.style.minWidth='100px';"
    "this.style.minHeight='100px';"
)


# =============================================================================
# Visual Cues
# =============================================================================

FOCUS_STYLES = {
    "outline": "2px solid #00aaff",
    "background-color": "#e6f7ff",
}

LISTENING_BORDER = "2px dashed #ff6b6b"
LISTENING_CUE_SECONDS = 3.0

SUCCESS_FLASH_COLOR = "#e9ffe9"
SUCCESS_FLASH_SECONDS = 0.8


# =============================================================================
# Voice Interpretation
# =============================================================================

# Instructions are applied only when confidence is strictly above this
CONFIDENCE_APPLY_THRESHOLD = 0.5

# Degraded instruction confidence when the upstream output is unusable
FALLBACK_CONFIDENCE = 0.5

# Confidence assumed when the model omits the key
DEFAULT_MODEL_CONFIDENCE = 0.7


# =============================================================================
# Upload & Export
# =============================================================================

FORM_EXTENSIONS = (".html", ".xhtml", ".htm")

# Matches the form extension replaced in export file names
FORM_EXTENSION_PATTERN = re.compile(r"\.(x?html?)$", re.IGNORECASE)

PRINT_SETTLE_DELAY_MS = 250
