"""
Tests for the Export Pipeline

Covers:
- HTML export: affordances removed, visible text kept, images re-embedded
- Spreadsheet export: one sheet per table, merged spans, FormData fallback
- Print export: frozen editables and the print trigger
- None of the exports touch the live document
"""

import io

from bs4 import BeautifulSoup
from openpyxl import load_workbook
from openpyxl.utils import get_column_letter

from config.constants import EDITABLE_CLASS, IMAGE_SLOT_ATTR, REGION_ID_ATTR
from services.export import (
    build_workbook,
    render_html_export,
    render_print_document,
    render_xlsx_export,
)
from services.export.xlsx_export import MAX_COLSPAN
from services.form.document import form_container, parse_form_document
from services.form.images import ImageAttachmentHandler
from services.form.regions import ImageSlot, InteractionContext, RegionEventRouter, TextRegion
from services.form.transformer import EditableTransformer


def _visible_text(soup: BeautifulSoup) -> str:
    return " ".join(form_container(soup).get_text().split())


def _filled(sample_soup, scheduler):
    """Transform the sample form and type into its first text region."""
    regions = {}
    EditableTransformer(regions).transform(form_container(sample_soup))
    company = next(r for r in regions.values() if isinstance(r, TextRegion) and r.tag.name == "p")
    company.set_text("Company: Acme")
    return regions, company


class TestHTMLExport:
    """Tests for the standalone HTML export."""

    def test_round_trip_keeps_text_without_affordances(self, sample_soup, scheduler):
        """Re-parsed export has the live text and no editing markers."""
        regions, company = _filled(sample_soup, scheduler)
        context = InteractionContext(scheduler=scheduler)
        RegionEventRouter().dispatch("focus", company, context)

        exported = BeautifulSoup(render_html_export(sample_soup, "order.html"), "html.parser")

        assert _visible_text(exported) == _visible_text(sample_soup)
        assert exported.find(attrs={"contenteditable": True}) is None
        assert exported.find(class_=EDITABLE_CLASS) is None
        assert exported.find(attrs={REGION_ID_ATTR: True}) is None
        assert exported.find(attrs={IMAGE_SLOT_ATTR: True}) is None
        assert exported.find(attrs={"onerror": True}) is None
        assert exported.find(attrs={"data-original": True}) is None
        assert "outline" not in str(exported)
        assert "min-width: 50px" not in str(exported)

    def test_standalone_document(self, sample_soup):
        output = render_html_export(sample_soup, "order.html")
        assert output.startswith("<!DOCTYPE html>")
        assert '<meta charset="UTF-8">' in output
        assert "<title>order.html</title>" in output

    def test_original_styles_kept(self):
        soup = BeautifulSoup('<body><p style="color: red">___</p></body>', "html.parser")
        EditableTransformer({}).transform(soup.body)

        exported = BeautifulSoup(render_html_export(soup), "html.parser")

        assert exported.body.p["style"] == "color: red"
        assert exported.title.get_text() == "Form"

    def test_head_stylesheet_carried(self):
        """The form's own CSS follows the markup into the HTML and print exports."""
        soup = BeautifulSoup(
            "<html><head><style>.box{border:1px solid red}</style></head>"
            "<body><p class='box'>Name ____</p></body></html>",
            "html.parser",
        )
        EditableTransformer({}).transform(soup.body)

        for page in (render_html_export(soup, "styled.html"), render_print_document(soup, "styled.html")):
            exported = BeautifulSoup(page, "html.parser")
            head_css = [style.get_text() for style in exported.head.find_all("style")]
            assert ".box{border:1px solid red}" in head_css

    def test_images_embedded(self, sample_soup, scheduler):
        regions, company = _filled(sample_soup, scheduler)
        slot = next(r for r in regions.values() if isinstance(r, ImageSlot))
        image_map = {}
        context = InteractionContext(scheduler=scheduler, image_target=slot)
        data_url = ImageAttachmentHandler(image_map).attach(context, "logo.png", b"png", "image/png")

        exported = BeautifulSoup(render_html_export(sample_soup, "order.html", image_map), "html.parser")

        assert exported.body.img["src"] == data_url

    def test_live_document_untouched(self, sample_soup, scheduler):
        _filled(sample_soup, scheduler)
        before = str(sample_soup)

        render_html_export(sample_soup, "order.html")
        render_print_document(sample_soup, "order.html")
        render_xlsx_export(sample_soup)

        assert str(sample_soup) == before


class TestSpreadsheetExport:
    """Tests for the .xlsx export."""

    def test_one_sheet_per_table(self):
        soup = BeautifulSoup(
            "<table><tr><td>a</td></tr></table><table><tr><td>b</td></tr></table>",
            "html.parser",
        )
        workbook = build_workbook(soup)

        assert workbook.sheetnames == ["Sheet1", "Sheet2"]
        assert workbook["Sheet2"]["A1"].value == "b"

    def test_cells_spans_and_numbers(self, sample_soup, scheduler):
        """Table text lands in cells; colspan becomes a merged range."""
        regions, _ = _filled(sample_soup, scheduler)
        quantity = next(r for r in regions.values() if r.tag.name == "td" and r.text == "")
        quantity.set_text("12")

        workbook = load_workbook(io.BytesIO(render_xlsx_export(sample_soup)))
        sheet = workbook["Sheet1"]

        assert sheet["A1"].value == "Item"
        assert sheet["B1"].value == "Qty"
        assert sheet["A2"].value == "Widget"
        assert sheet["B2"].value == 12
        assert "A3:B3" in [str(merged) for merged in sheet.merged_cells.ranges]

    def test_rowspan_shifts_following_cells(self):
        soup = BeautifulSoup(
            '<table><tr><td rowspan="2">Name</td><td>First</td></tr><tr><td>Last</td></tr></table>',
            "html.parser",
        )
        sheet = build_workbook(soup)["Sheet1"]

        assert sheet["B2"].value == "Last"
        assert "A1:A2" in [str(merged) for merged in sheet.merged_cells.ranges]

    def test_leading_zero_stays_text(self):
        soup = BeautifulSoup("<table><tr><td>007</td><td>3.5</td></tr></table>", "html.parser")
        sheet = build_workbook(soup)["Sheet1"]

        assert sheet["A1"].value == "007"
        assert sheet["B1"].value == 3.5

    def test_oversized_colspan_clamped(self):
        """Spans past the browser cap merge only up to the cap."""
        soup = BeautifulSoup('<table><tr><td colspan="20000">x</td><td>y</td></tr></table>', "html.parser")

        sheet = load_workbook(io.BytesIO(render_xlsx_export(soup)))["Sheet1"]

        assert [str(merged) for merged in sheet.merged_cells.ranges] == [f"A1:{get_column_letter(MAX_COLSPAN)}1"]
        assert sheet.cell(row=1, column=MAX_COLSPAN + 1).value == "y"

    def test_rowspan_stops_at_last_row(self):
        soup = BeautifulSoup(
            '<table><tr><td rowspan="100000" colspan="3">Notes</td></tr><tr></tr></table>',
            "html.parser",
        )
        sheet = build_workbook(soup)["Sheet1"]

        assert [str(merged) for merged in sheet.merged_cells.ranges] == ["A1:C2"]

    def test_invalid_span_counts_as_one(self):
        soup = BeautifulSoup('<table><tr><td colspan="-4">a</td><td rowspan="wide">b</td></tr></table>', "html.parser")
        sheet = build_workbook(soup)["Sheet1"]

        assert sheet["B1"].value == "b"
        assert not sheet.merged_cells.ranges

    def test_form_data_fallback(self, plain_form_html):
        """Without tables, one row per editable region with its ordinal."""
        soup = parse_form_document(plain_form_html.encode(), "plain.html")
        EditableTransformer({}).transform(form_container(soup))

        sheet = build_workbook(soup)["FormData"]
        rows = list(sheet.iter_rows(values_only=True))

        assert rows == [("Field", "Value"), (1, "Name:"), (2, "Email")]


class TestPrintExport:
    """Tests for the print/PDF page."""

    def test_editables_frozen(self, sample_soup, scheduler):
        _filled(sample_soup, scheduler)
        page = BeautifulSoup(render_print_document(sample_soup, "order.html"), "html.parser")

        editables = page.find_all(class_=EDITABLE_CLASS)
        assert editables
        for tag in editables:
            assert tag["contenteditable"] == "false"
            assert "outline: none" in tag["style"]
            assert "background-color: transparent" in tag["style"]

    def test_print_dialog_after_settle_delay(self, sample_soup):
        page = render_print_document(sample_soup, "order.html")

        assert "window.print()" in page
        assert "250" in page
        assert "@media print" in page
