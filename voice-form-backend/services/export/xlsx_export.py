"""
Spreadsheet export.

Every <table> in the form becomes its own worksheet (Sheet1, Sheet2, ...),
cell for cell, with colspan/rowspan turned into merged ranges. A form
without tables falls back to a single "FormData" sheet listing each
editable region's ordinal and trimmed value.
"""

import io
import re
from typing import List, Union

from bs4 import BeautifulSoup, Tag
from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from config.constants import EDITABLE_CLASS
from services.form.document import form_container
from utils.logging import get_logger

logger = get_logger(__name__)

# Browser caps on span attributes, and the widest sheet openpyxl can address
MAX_COLSPAN = 1000
MAX_ROWSPAN = 65534
MAX_COLUMNS = 18278

# Plain decimal numbers; leading zeros stay text ("007", zip codes)
_NUMBER_PATTERN = re.compile(r"-?(0|[1-9]\d*)(\.\d+)?")


def _cell_value(text: str) -> Union[str, int, float, None]:
    text = text.strip()
    if not text:
        return None
    if _NUMBER_PATTERN.fullmatch(text):
        return float(text) if "." in text else int(text)
    return text


def _span(cell: Tag, attr: str, limit: int) -> int:
    """Span attribute clamped to 1..limit; garbage counts as 1."""
    try:
        return min(limit, max(1, int(cell.get(attr, 1))))
    except (TypeError, ValueError):
        return 1


def _table_rows(table: Tag) -> List[Tag]:
    """Rows belonging to ``table`` itself, not to tables nested inside it."""
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def table_to_sheet(table: Tag, sheet: Worksheet) -> None:
    """Copy one HTML table into ``sheet``."""
    rows = _table_rows(table)
    occupied = set()
    for r, row in enumerate(rows):
        c = 0
        for cell in row.find_all(["td", "th"], recursive=False):
            while (r, c) in occupied:
                c += 1
            if c >= MAX_COLUMNS:
                logger.warning(f"Row {r + 1} truncated at column {MAX_COLUMNS}")
                break

            colspan = min(_span(cell, "colspan", MAX_COLSPAN), MAX_COLUMNS - c)
            # a span cannot reach past the last row of its table
            rowspan = min(_span(cell, "rowspan", MAX_ROWSPAN), len(rows) - r)

            value = _cell_value(cell.get_text())
            if value is not None:
                sheet.cell(row=r + 1, column=c + 1, value=value)
            if colspan > 1 or rowspan > 1:
                sheet.merge_cells(
                    start_row=r + 1,
                    start_column=c + 1,
                    end_row=r + rowspan,
                    end_column=c + colspan,
                )

            for dr in range(rowspan):
                for dc in range(colspan):
                    occupied.add((r + dr, c + dc))
            c += colspan


def build_workbook(soup: BeautifulSoup) -> Workbook:
    container = form_container(soup)
    workbook = Workbook()
    workbook.remove(workbook.active)

    tables = container.find_all("table")
    if tables:
        for index, table in enumerate(tables):
            table_to_sheet(table, workbook.create_sheet(f"Sheet{index + 1}"))
        logger.debug(f"Exported {len(tables)} table(s)")
    else:
        sheet = workbook.create_sheet("FormData")
        sheet.append(["Field", "Value"])
        for index, tag in enumerate(container.find_all(class_=EDITABLE_CLASS)):
            sheet.append([index + 1, tag.get_text().strip()])

    return workbook


def render_xlsx_export(soup: BeautifulSoup) -> bytes:
    """Serialize the filled form as .xlsx bytes."""
    output = io.BytesIO()
    build_workbook(soup).save(output)
    output.seek(0)
    return output.getvalue()
