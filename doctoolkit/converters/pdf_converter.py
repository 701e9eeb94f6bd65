"""
Excel-to-PDF Converter

Renders every worksheet of one or more workbooks as a bordered grid on
landscape pages. Long sheets continue on new pages with the header row
repeated. Output is a preview, not a faithful print layout: columns and
rows are capped and cell text is clipped to the column width.
"""

import os
from dataclasses import dataclass
from datetime import date, datetime

from openpyxl import load_workbook


class ConversionError(Exception):
    """Raised when a source document cannot be converted."""
    pass


@dataclass
class PdfConversionResult:
    output_path: str
    page_count: int
    message: str


class ExcelToPdfConverter:
    """Converts Excel workbooks (.xlsx) into a single PDF."""

    SUPPORTED_EXTENSIONS = {".xlsx", ".xlsm"}

    PAPER = "letter-l"
    MARGIN = 40
    TABLE_TOP = 90
    CELL_PADDING = 5
    COLUMN_WIDTH = 80
    HEADER_HEIGHT = 20
    ROW_HEIGHT = 18
    DEFAULT_COLUMNS = 10
    MAX_COLUMNS = 15
    MAX_ROWS = 50
    FONT = "helv"
    FONT_SIZE = 10

    HEADER_FILL = (0.878, 0.878, 0.878)  # #e0e0e0
    HEADER_BORDER = (0, 0, 0)
    CELL_BORDER = (0.8, 0.8, 0.8)  # #cccccc
    TEXT_COLOR = (0, 0, 0)

    @staticmethod
    def can_handle(file_path: str) -> bool:
        _, ext = os.path.splitext(file_path.lower())
        return ext in ExcelToPdfConverter.SUPPORTED_EXTENSIONS

    def convert(self, excel_paths: list[str], output_path: str) -> PdfConversionResult:
        """
        Render the given workbooks into one PDF.

        Args:
            excel_paths: Workbooks to render, in page order.
            output_path: Destination PDF path.

        Returns:
            Output path and number of pages written.

        Raises:
            FileNotFoundError: If a workbook does not exist.
            ConversionError: If a workbook cannot be opened or rendered.
        """
        import fitz  # pymupdf

        doc = fitz.open()
        page_count = 0

        try:
            for excel_path in excel_paths:
                if not os.path.isfile(excel_path):
                    raise FileNotFoundError(f"Excel file not found: {excel_path}")
                file_name = os.path.basename(excel_path)

                try:
                    wb = load_workbook(excel_path, data_only=True)
                except Exception as e:
                    raise ConversionError(f"Cannot open {file_name}: {e}") from e

                for ws in wb.worksheets:
                    page_count += self._render_sheet(doc, file_name, ws)

            doc.save(output_path)
        finally:
            doc.close()

        return PdfConversionResult(
            output_path=output_path,
            page_count=page_count,
            message=(
                f"Successfully converted {len(excel_paths)} Excel files to PDF "
                f"with {page_count} pages"
            ),
        )

    def _render_sheet(self, doc, file_name: str, ws) -> int:
        """Draw one worksheet, returning the number of pages it used."""
        import fitz

        paper = fitz.paper_rect(self.PAPER)
        page = doc.new_page(width=paper.width, height=paper.height)
        pages = 1

        page.insert_text((self.MARGIN, self.MARGIN + 14), file_name, fontsize=14, fontname=self.FONT)
        page.insert_text((self.MARGIN, self.MARGIN + 32), f"Sheet: {ws.title}", fontsize=12, fontname=self.FONT)

        columns = min(ws.max_column or self.DEFAULT_COLUMNS, self.MAX_COLUMNS)
        header = [_cell_display(ws.cell(row=1, column=c + 1).value) for c in range(columns)]

        y = self._draw_header(page, header, self.TABLE_TOP)

        last_row = min(ws.max_row, self.MAX_ROWS)
        for r in range(2, last_row + 1):
            values = [_cell_display(ws.cell(row=r, column=c + 1).value) for c in range(columns)]
            x = self.MARGIN
            for value in values:
                rect = fitz.Rect(x, y, x + self.COLUMN_WIDTH, y + self.ROW_HEIGHT)
                page.draw_rect(rect, color=self.CELL_BORDER, width=0.5)
                self._draw_text(page, rect, value)
                x += self.COLUMN_WIDTH
            y += self.ROW_HEIGHT

            if y > paper.height - self.MARGIN:
                page = doc.new_page(width=paper.width, height=paper.height)
                pages += 1
                y = self._draw_header(page, header, self.TABLE_TOP)

        return pages

    def _draw_header(self, page, header: list[str], y: float) -> float:
        import fitz

        x = self.MARGIN
        for value in header:
            rect = fitz.Rect(x, y, x + self.COLUMN_WIDTH, y + self.HEADER_HEIGHT)
            page.draw_rect(rect, color=self.HEADER_BORDER, fill=self.HEADER_FILL, width=0.5)
            self._draw_text(page, rect, value)
            x += self.COLUMN_WIDTH
        return y + self.HEADER_HEIGHT

    def _draw_text(self, page, rect, text: str) -> None:
        if not text:
            return
        text = fit_text(text, rect.width - 2 * self.CELL_PADDING, self.FONT, self.FONT_SIZE)
        baseline = rect.y0 + self.CELL_PADDING + self.FONT_SIZE * 0.8
        page.insert_text(
            (rect.x0 + self.CELL_PADDING, baseline),
            text,
            fontsize=self.FONT_SIZE,
            fontname=self.FONT,
            color=self.TEXT_COLOR,
        )


def fit_text(text: str, max_width: float, fontname: str = "helv", fontsize: float = 10) -> str:
    """Truncate ``text`` so it renders no wider than ``max_width`` points."""
    import fitz

    text = text.replace("\n", " ")
    while text and fitz.get_text_length(text, fontname=fontname, fontsize=fontsize) > max_width:
        text = text[:-1]
    return text


def _cell_display(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
