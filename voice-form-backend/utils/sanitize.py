"""
Input Sanitization Utilities

Validates uploaded file names and derives download names for exports.

Usage:
    from utils.sanitize import validate_form_filename, export_filename

    name = validate_form_filename(upload.filename)
    download = export_filename(name, "_filled.xlsx")
"""

import os
import re
from typing import Optional

from config.constants import FORM_EXTENSIONS, FORM_EXTENSION_PATTERN
from utils.logging import get_logger
from utils.exceptions import DocumentParsingError

logger = get_logger(__name__)


# =============================================================================
# File Names
# =============================================================================

def sanitize_filename(filename: Optional[str], default: str = "form") -> str:
    """
    Sanitize a filename to prevent path traversal and header injection.

    Args:
        filename: Client supplied file name
        default: Name used when nothing usable is left

    Returns:
        str: Base name made of safe characters only
    """
    if not filename:
        return default

    # Remove path components (both separators, uploads may come from Windows)
    filename = os.path.basename(filename.replace("\\", "/"))
    filename = filename.replace('\0', '')
    filename = re.sub(r'[^\w\.-]', '_', filename)

    return filename or default


def validate_form_filename(filename: Optional[str]) -> str:
    """
    Ensure an upload names an HTML or XHTML form.

    Args:
        filename: Client supplied file name

    Returns:
        str: Sanitized file name

    Raises:
        DocumentParsingError: If the extension is not .html, .xhtml or .htm
    """
    if not filename:
        raise DocumentParsingError("A file name is required")

    if not filename.lower().endswith(FORM_EXTENSIONS):
        logger.warning(f"Rejected upload with unsupported extension: {filename}")
        raise DocumentParsingError(
            "Only .html, .xhtml and .htm forms are supported",
            file_name=filename
        )

    return sanitize_filename(filename)


def export_filename(file_name: Optional[str], suffix: str) -> str:
    """
    Derive the download name of an export.

    "order.xhtml" with suffix "_filled.xlsx" becomes "order_filled.xlsx".
    Without a file name the result is "form" + suffix.

    Args:
        file_name: Name of the uploaded form
        suffix: Replacement for the form extension, e.g. "_filled.html"

    Returns:
        str: Download file name
    """
    if not file_name:
        return f"form{suffix}"
    return FORM_EXTENSION_PATTERN.sub(suffix, file_name)
