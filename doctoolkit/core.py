"""
doctoolkit Core Engine

Ties the file collaborators to the pure transforms: reads workbooks,
runs the shipment reconciliation, and writes every kind of output the
toolkit produces. Progress goes to stderr, one tagged line per step.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

from . import reconciliation
from .converters.excel_io import ExcelReader, ExcelWriter, ReadRetryPolicy
from .converters.pdf_converter import ExcelToPdfConverter, PdfConversionResult
from .converters.word_converter import MarkdownToWordConverter
from .reconciliation import ReconciliationResult


@dataclass
class ShipmentProcessingResult:
    """Reconciliation result together with where it was written."""
    result: ReconciliationResult
    output_path: str

    def to_dict(self) -> dict:
        return {
            "success": True,
            "summary": self.result.summary.to_dict(),
            "output_path": self.output_path,
        }


class DocToolkit:
    """
    Main toolkit engine.

    Every public method takes file paths, does its work, and returns the
    output path or a result object. Errors propagate to the caller.
    """

    def __init__(self, retry_policy: Optional[ReadRetryPolicy] = None, quiet: bool = False):
        self.reader = ExcelReader(retry_policy=retry_policy)
        self.writer = ExcelWriter()
        self.pdf_converter = ExcelToPdfConverter()
        self.word_converter = MarkdownToWordConverter()
        self.quiet = quiet

    def read_excel_file(self, file_path: str) -> list[list]:
        """Read the first worksheet of a workbook as a row-major table."""
        self._say("READ", file_path)
        rows = self.reader.read_table(file_path)
        self._say("READ", f"{len(rows)} rows from first sheet")
        return rows

    def process_shipment_files(
        self,
        reference_path: str,
        data_paths: list[str],
        output_path: str,
        original_names: Optional[list[str]] = None,
    ) -> ShipmentProcessingResult:
        """
        Reconcile shipment files against a reference table and save the result.

        Args:
            reference_path: Workbook mapping descriptions to codes.
            data_paths: Shipment workbooks, processed in order.
            output_path: Destination .xlsx path.
            original_names: Display names for the data files (uploads are
                often staged under temporary names). Missing or blank entries
                fall back to the data file's own name.

        Returns:
            The reconciliation result and output path.

        Raises:
            ExcelReadError: If any workbook cannot be read.
            StructuralInputError: If a workbook does not yield a table.
        """
        original_names = original_names or []

        reference_table = self.read_excel_file(reference_path)

        data_tables = []
        labels = []
        for i, data_path in enumerate(data_paths):
            name = original_names[i] if i < len(original_names) else ""
            name = name.strip() or os.path.basename(data_path)
            self._say("FILE", f"{i + 1}/{len(data_paths)}: {name}")
            data_tables.append(self.read_excel_file(data_path))
            labels.append(reconciliation.source_label_from_filename(name))

        result = reconciliation.run(reference_table, data_tables, labels)
        self._say("LOOKUP", f"Lookup table built with {result.lookup_entries} entries")

        self.writer.write_table(output_path, result.rows)
        summary = result.summary
        self._say(
            "DONE",
            f"{summary.processed_files} files, {summary.total_items_processed} matched, "
            f"{len(summary.items_not_found)} not found, {summary.skipped_rows} skipped",
        )
        self._say("SAVED", output_path)

        return ShipmentProcessingResult(result=result, output_path=output_path)

    def write_tables_file(self, tables: list[list[list]], output_path: str) -> str:
        """Write each table to its own worksheet."""
        self._say("WRITE", f"{len(tables)} tables -> {output_path}")
        return self.writer.write_tables(output_path, tables)

    def write_json_to_excel(self, records, output_path: str) -> str:
        """Write a list of JSON records (or a JSON string) to a workbook."""
        self._say("WRITE", f"JSON records -> {output_path}")
        return self.writer.write_records(output_path, records)

    def merge_excel_files(
        self,
        excel_paths: list[str],
        output_path: str,
        include_file_name: bool = True,
        merge_mode: str = "sheets",
    ) -> str:
        self._say("MERGE", f"{len(excel_paths)} files ({merge_mode}) -> {output_path}")
        path = self.writer.merge_workbooks(
            excel_paths,
            output_path,
            include_file_name=include_file_name,
            merge_mode=merge_mode,
        )
        self._say("SAVED", path)
        return path

    def convert_excel_to_pdf(self, excel_paths: list[str], output_path: str) -> PdfConversionResult:
        for path in excel_paths:
            self._say("PDF", path)
        result = self.pdf_converter.convert(excel_paths, output_path)
        self._say("SAVED", f"{result.output_path} ({result.page_count} pages)")
        return result

    def markdown_to_word(self, markdown: str, output_path: str, tables_only: bool = False) -> str:
        """
        Convert Markdown text to a Word document.

        Args:
            markdown: Markdown source text.
            output_path: Destination .docx path.
            tables_only: Treat every blank-line separated block as a table.
        """
        self._say("WORD", output_path)
        if tables_only:
            return self.word_converter.convert_tables(markdown, output_path)
        return self.word_converter.convert(markdown, output_path)

    def text_to_word(self, data, output_path: str) -> str:
        """Write text (or JSON-serializable data) as plain Word paragraphs."""
        self._say("WORD", output_path)
        return self.word_converter.convert_text(data, output_path)

    @staticmethod
    def supported_formats() -> dict:
        """Return a dictionary of every supported input format per operation."""
        return {
            "Excel input": sorted(ExcelReader.SUPPORTED_EXTENSIONS),
            "Excel to PDF": sorted(ExcelToPdfConverter.SUPPORTED_EXTENSIONS),
            "Markdown to Word": sorted(MarkdownToWordConverter.SUPPORTED_EXTENSIONS),
            "Excel output": [".xlsx"],
        }

    def _say(self, tag: str, message: str) -> None:
        if not self.quiet:
            print(f"[{tag}] {message}", file=sys.stderr)
