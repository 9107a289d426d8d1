"""
Export Pipeline

Stateless transforms over a session's document:
    - render_html_export: standalone HTML without editing affordances
    - render_xlsx_export: one sheet per table, or a field/value sheet
    - render_print_document: print-formatted page for "Save as PDF"

None of them modify the live document.
"""

from .html_export import render_html_export, clone_document
from .print_export import render_print_document
from .xlsx_export import render_xlsx_export, build_workbook

__all__ = [
    "render_html_export",
    "clone_document",
    "render_print_document",
    "render_xlsx_export",
    "build_workbook",
]
