"""
Print / PDF export.

Builds a print-formatted page that opens the platform print dialog (and
with it "Save as PDF") once layout has settled.
"""

import html
from typing import Dict, Optional

from bs4 import BeautifulSoup

from config.constants import EDITABLE_CLASS, PRINT_SETTLE_DELAY_MS
from services.export.html_export import clone_document, embed_images
from services.form.document import form_container, stylesheet_html
from services.form.styles import set_style

PRINT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    body {{ margin: 20px; font-family: Arial, sans-serif; }}
    table {{ border-collapse: collapse; width: 100%; }}
    .editable {{ border: none !important; outline: none !important; }}
    img {{ max-width: 100%; height: auto; }}
    @media print {{
      body {{ margin: 0; }}
      .no-print {{ display: none; }}
    }}
  </style>
{stylesheets}
</head>
<body>
{body}
<script>
  window.addEventListener("load", function () {{
    window.focus();
    setTimeout(function () {{ window.print(); }}, {delay});
  }});
</script>
</body>
</html>"""


def render_print_document(
    soup: BeautifulSoup,
    file_name: Optional[str] = None,
    image_map: Optional[Dict[str, str]] = None,
) -> str:
    """Clone the form, freeze its editables and wrap it for printing."""
    clone = clone_document(soup)
    container = form_container(clone)
    embed_images(container, image_map or {})

    for tag in container.find_all(class_=EDITABLE_CLASS):
        tag["contenteditable"] = "false"
        set_style(tag, "outline", "none")
        set_style(tag, "background-color", "transparent")

    return PRINT_TEMPLATE.format(
        title=html.escape(file_name or "Form"),
        stylesheets=stylesheet_html(clone),
        body=container.decode_contents(),
        delay=PRINT_SETTLE_DELAY_MS,
    )
