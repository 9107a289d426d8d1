"""
HTML export.

Produces a standalone copy of the filled form with every editing
affordance removed. The live document is never modified: all work happens
on a re-parsed clone.
"""

import html
from typing import Dict, Optional

from bs4 import BeautifulSoup, Tag

from config.constants import (
    EDITABLE_CLASS,
    FOCUS_STYLES,
    IMAGE_SLOT_ATTR,
    LISTENING_BORDER,
    ORIGINAL_TEXT_ATTR,
    REGION_ID_ATTR,
    SUCCESS_FLASH_COLOR,
)
from services.form.document import form_container, stylesheet_html
from services.form.regions import strip_added_styles
from services.form.styles import get_style, set_style

# Cue styles that may still be showing when the export is taken
_TRANSIENT_STYLES = [
    *FOCUS_STYLES.items(),
    ("border", LISTENING_BORDER),
    ("background-color", SUCCESS_FLASH_COLOR),
]

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; padding: 20px; }}
    table {{ border-collapse: collapse; }}
    img {{ max-width: 100%; height: auto; }}
  </style>
{stylesheets}
</head>
<body>
{body}
</body>
</html>"""


def clone_document(soup: BeautifulSoup) -> BeautifulSoup:
    """Deep copy of a document, detached from the live tree."""
    return BeautifulSoup(str(soup), "html.parser")


def embed_images(container: Tag, image_map: Dict[str, str]) -> None:
    """Point every attached image at its data URL."""
    for region_id, data_url in image_map.items():
        node = container.find(attrs={REGION_ID_ATTR: region_id}) or container.find(
            attrs={IMAGE_SLOT_ATTR: region_id}
        )
        if node is None:
            continue
        img = node if node.name == "img" else node.find("img")
        if img is not None:
            img["src"] = data_url


def strip_editing(container: Tag) -> None:
    """Remove region markers, editability and affordance styles."""
    for tag in container.find_all(class_=EDITABLE_CLASS):
        classes = [name for name in tag.get("class", []) if name != EDITABLE_CLASS]
        if classes:
            tag["class"] = classes
        else:
            del tag["class"]
        for attr in ("contenteditable", REGION_ID_ATTR, ORIGINAL_TEXT_ATTR):
            if tag.has_attr(attr):
                del tag[attr]
        _strip_presentation(tag)

    for img in container.find_all(attrs={IMAGE_SLOT_ATTR: True}):
        del img[IMAGE_SLOT_ATTR]
        if img.has_attr("onerror"):
            del img["onerror"]
        _strip_presentation(img)


def _strip_presentation(tag: Tag) -> None:
    strip_added_styles(tag)
    for name, value in _TRANSIENT_STYLES:
        if get_style(tag, name) == value:
            set_style(tag, name, "")


def render_html_export(
    soup: BeautifulSoup,
    file_name: Optional[str] = None,
    image_map: Optional[Dict[str, str]] = None,
) -> str:
    """
    Serialize the filled form as a standalone HTML document.

    Args:
        soup: Live form document (left untouched)
        file_name: Upload name, used as the page title
        image_map: Region id -> data URL of attached images

    Returns:
        str: Complete HTML document
    """
    clone = clone_document(soup)
    container = form_container(clone)
    embed_images(container, image_map or {})
    strip_editing(container)

    return HTML_TEMPLATE.format(
        title=html.escape(file_name or "Form"),
        stylesheets=stylesheet_html(clone),
        body=container.decode_contents(),
    )
