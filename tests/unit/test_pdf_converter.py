"""
Unit tests for the Excel-to-PDF converter.
"""

from datetime import datetime

import fitz
import pytest

from doctoolkit.converters.pdf_converter import (
    ExcelToPdfConverter,
    PdfConversionResult,
    fit_text,
)
from tests.fixtures.sample_tables import write_workbook


@pytest.fixture
def converter():
    return ExcelToPdfConverter()


class TestExcelToPdfConverter:
    """Tests for ExcelToPdfConverter."""

    def test_can_handle(self):
        assert ExcelToPdfConverter.can_handle("report.xlsx")
        assert not ExcelToPdfConverter.can_handle("report.pdf")

    def test_one_page_per_small_sheet(self, tmp_path, converter):
        book = write_workbook(
            tmp_path / "book.xlsx",
            [["Name", "Qty"], ["Shirt", 3]],
            extra_sheets={"Second": [["Only header"]]},
        )
        out = str(tmp_path / "out.pdf")

        result = converter.convert([str(book)], out)

        assert isinstance(result, PdfConversionResult)
        assert result.page_count == 2
        assert "1 Excel files" in result.message
        with fitz.open(out) as doc:
            assert doc.page_count == 2
            assert doc[0].rect.width > doc[0].rect.height
            text = doc[0].get_text()
        assert "book.xlsx" in text
        assert "Sheet: Sheet1" in text
        assert "Shirt" in text

    def test_long_sheet_spills_onto_new_page(self, tmp_path, converter):
        rows = [["Row", "Value"]] + [[f"r{i}", i] for i in range(60)]
        book = write_workbook(tmp_path / "long.xlsx", rows)
        out = str(tmp_path / "long.pdf")

        result = converter.convert([str(book)], out)

        assert result.page_count == 2
        with fitz.open(out) as doc:
            continued = doc[1].get_text()
        # header repeated, rows capped at MAX_ROWS
        assert "Row" in continued
        assert "r48" in continued
        assert "r49" not in continued

    def test_dates_render_as_iso(self, tmp_path, converter):
        book = write_workbook(tmp_path / "d.xlsx", [["When"], [datetime(2024, 5, 1)]])
        out = str(tmp_path / "d.pdf")

        converter.convert([str(book)], out)

        with fitz.open(out) as doc:
            assert "2024-05-01" in doc[0].get_text()

    def test_multiple_workbooks(self, tmp_path, converter):
        a = write_workbook(tmp_path / "a.xlsx", [["A"]])
        b = write_workbook(tmp_path / "b.xlsx", [["B"]])
        out = str(tmp_path / "ab.pdf")

        result = converter.convert([str(a), str(b)], out)

        assert result.page_count == 2
        assert result.output_path == out

    def test_missing_workbook(self, tmp_path, converter):
        with pytest.raises(FileNotFoundError):
            converter.convert([str(tmp_path / "nope.xlsx")], str(tmp_path / "x.pdf"))


class TestFitText:
    """Tests for fit_text."""

    def test_short_text_unchanged(self):
        assert fit_text("abc", 70) == "abc"

    def test_long_text_is_clipped(self):
        clipped = fit_text("x" * 200, 70)

        assert 0 < len(clipped) < 200
        assert fitz.get_text_length(clipped, fontname="helv", fontsize=10) <= 70

    def test_newlines_flattened(self):
        assert "\n" not in fit_text("a\nb", 70)
