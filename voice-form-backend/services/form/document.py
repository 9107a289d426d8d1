"""
Form document parsing.

Uploaded forms are parsed with BeautifulSoup's html.parser; XHTML input is
treated as HTML, the way a browser's text/html parser would.
"""

from typing import List

from bs4 import BeautifulSoup, Tag

from utils.exceptions import DocumentParsingError
from utils.logging import get_logger
from utils.sanitize import validate_form_filename

logger = get_logger(__name__)


def parse_form_document(content: bytes, file_name: str) -> BeautifulSoup:
    """
    Validate and parse an uploaded form.

    Args:
        content: Raw upload bytes
        file_name: Client supplied file name (.html, .xhtml or .htm)

    Returns:
        BeautifulSoup: Parsed document

    Raises:
        DocumentParsingError: Unsupported extension or empty upload
    """
    validate_form_filename(file_name)

    if not content or not content.strip():
        raise DocumentParsingError("Uploaded form is empty", file_name=file_name)

    text = content.decode("utf-8", errors="replace")
    soup = BeautifulSoup(text, "html.parser")
    logger.debug(f"Parsed {file_name}: {len(text)} characters")
    return soup


def form_container(soup: BeautifulSoup) -> Tag:
    """Node whose children make up the visible form."""
    return soup.body or soup


def form_stylesheets(soup: BeautifulSoup) -> List[Tag]:
    """
    The form's own <style> and <link rel="stylesheet"> nodes that sit
    outside the form container, usually in <head>.
    """
    container = form_container(soup)
    if container is soup:
        return []

    sheets = []
    for tag in soup.find_all(["style", "link"]):
        if any(parent is container for parent in tag.parents):
            continue
        if tag.name == "link" and "stylesheet" not in _rel_values(tag):
            continue
        sheets.append(tag)
    return sheets


def _rel_values(tag: Tag) -> List[str]:
    rel = tag.get("rel", [])
    if isinstance(rel, str):
        rel = rel.split()
    return [value.lower() for value in rel]


def stylesheet_html(soup: BeautifulSoup) -> str:
    return "\n".join(str(tag) for tag in form_stylesheets(soup))


def container_html(soup: BeautifulSoup) -> str:
    """
    Serialize the children of the form container (its innerHTML), preceded
    by the form's stylesheets so the markup renders as uploaded.
    """
    return stylesheet_html(soup) + form_container(soup).decode_contents()
