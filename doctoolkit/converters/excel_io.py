"""
Excel reading and writing.

Reads the first worksheet of a workbook into a plain row-major table and
writes tables, JSON records and merged workbooks back out. ``.xlsx`` and
``.xlsm`` go through openpyxl, legacy ``.xls`` through xlrd.
"""

import json
import os
import time
from copy import copy
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time
from typing import Any, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter


class ExcelReadError(Exception):
    """Raised when a workbook cannot be read after all retry attempts."""
    pass


@dataclass(frozen=True)
class ReadRetryPolicy:
    """Bounded retry with a fixed pause between attempts."""
    max_attempts: int = 3
    delay_seconds: float = 0.1

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds cannot be negative, got {self.delay_seconds}")


def normalize_cell(value: Any) -> Any:
    """Convert a raw workbook cell value into a table cell."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dt_time):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class ExcelReader:
    """Reads the first worksheet of an Excel workbook as a list of rows."""

    SUPPORTED_EXTENSIONS = {".xlsx", ".xlsm", ".xls"}

    def __init__(self, retry_policy: Optional[ReadRetryPolicy] = None, sleep=time.sleep):
        """
        Args:
            retry_policy: Attempts and pause used on read failure.
            sleep: Pause function, replaceable in tests.
        """
        self.retry_policy = retry_policy or ReadRetryPolicy()
        self._sleep = sleep

    @staticmethod
    def can_handle(file_path: str) -> bool:
        _, ext = os.path.splitext(file_path.lower())
        return ext in ExcelReader.SUPPORTED_EXTENSIONS

    def read_table(self, file_path: str) -> list[list[Any]]:
        """
        Read the first worksheet of a workbook.

        Args:
            file_path: Path to the workbook.

        Returns:
            Row-major table; empty cells are ``""`` and dates ``YYYY-MM-DD``.

        Raises:
            ExcelReadError: If every attempt fails.
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.retry_policy.max_attempts + 1):
            try:
                return self._read_once(file_path)
            except Exception as e:
                last_error = e
                if attempt < self.retry_policy.max_attempts:
                    self._sleep(self.retry_policy.delay_seconds)

        raise ExcelReadError(
            f"Could not read {file_path} after {self.retry_policy.max_attempts} "
            f"attempt(s): {last_error}"
        ) from last_error

    def _read_once(self, file_path: str) -> list[list[Any]]:
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"File not found at path: {file_path}")

        _, ext = os.path.splitext(file_path.lower())
        if ext == ".xls":
            return _read_xls(file_path)
        if ext in (".xlsx", ".xlsm"):
            return _read_xlsx(file_path)
        raise ValueError(f"Unsupported Excel format: {ext}")


def _read_xlsx(file_path: str) -> list[list[Any]]:
    wb = load_workbook(file_path, read_only=True, data_only=True)
    try:
        if not wb.worksheets:
            raise ValueError("The workbook has no worksheets")
        ws = wb.worksheets[0]
        return [[normalize_cell(c) for c in row] for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_xls(file_path: str) -> list[list[Any]]:
    import xlrd

    book = xlrd.open_workbook(file_path)
    try:
        if book.nsheets == 0:
            raise ValueError("The workbook has no worksheets")
        sheet = book.sheet_by_index(0)
        rows = []
        for r in range(sheet.nrows):
            row = []
            for cell in sheet.row(r):
                if cell.ctype == xlrd.XL_CELL_DATE:
                    value = xlrd.xldate.xldate_as_datetime(cell.value, book.datemode)
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    value = None
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    value = bool(cell.value)
                else:
                    value = cell.value
                row.append(normalize_cell(value))
            rows.append(row)
        return rows
    finally:
        book.release_resources()


class ExcelWriter:
    """Writes tables and records to ``.xlsx`` workbooks."""

    MAX_SHEET_TITLE = 31
    RECORDS_SHEET_TITLE = "بيانات_مستخرجة"
    MERGED_SHEET_TITLE = "Merged Data"
    MERGE_MODES = ("sheets", "rows")

    @staticmethod
    def write_table(file_path: str, rows: list[list[Any]], sheet_name: str = "Sheet1") -> str:
        """Write one table to a single-sheet workbook and return the path."""
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name
        for row in rows:
            ws.append(list(row))
        wb.save(file_path)
        return file_path

    @staticmethod
    def write_tables(file_path: str, tables: list[list[list[Any]]]) -> str:
        """
        Write several tables to one workbook, one ``Table N`` sheet each.

        Empty tables are skipped but still consume their number.
        """
        wb = Workbook()
        wb.remove(wb.active)
        for index, table in enumerate(tables):
            if not table:
                continue
            ws = wb.create_sheet(f"Table {index + 1}")
            for row in table:
                ws.append(list(row))
        if not wb.worksheets:
            # openpyxl refuses to save a workbook without sheets
            wb.create_sheet("Table 1")
        wb.save(file_path)
        return file_path

    @staticmethod
    def write_records(file_path: str, records) -> str:
        """
        Write a list of dicts to a workbook with a formatted header row.

        Args:
            file_path: Output ``.xlsx`` path.
            records: List of dicts, or a JSON string encoding one. Column
                order follows the keys of the first record.

        Raises:
            ValueError: If ``records`` is not a list.
        """
        if isinstance(records, str):
            records = json.loads(records)
        if not isinstance(records, list):
            raise ValueError("JSON data must be an array")

        wb = Workbook()
        ws = wb.active
        ws.title = ExcelWriter.RECORDS_SHEET_TITLE

        if records:
            headers = list(records[0].keys())
            ws.append(headers)
            for item in records:
                ws.append([_record_value(item.get(h)) for h in headers])

            for cell in ws[1]:
                cell.font = Font(bold=True)
                cell.alignment = Alignment(vertical="center", horizontal="center")

            for col, header in enumerate(headers, start=1):
                longest = max(
                    [len(str(header))] + [len(str(item.get(header) or "")) for item in records]
                )
                ws.column_dimensions[get_column_letter(col)].width = longest + 3

        wb.save(file_path)
        return file_path

    @staticmethod
    def merge_workbooks(
        file_paths: list[str],
        output_path: str,
        include_file_name: bool = True,
        merge_mode: str = "sheets",
    ) -> str:
        """
        Merge several workbooks into one.

        Args:
            file_paths: Source ``.xlsx`` workbooks.
            output_path: Destination workbook.
            include_file_name: Prefix sheet names (``sheets`` mode) or insert a
                ``File: <name>`` row (``rows`` mode).
            merge_mode: ``sheets`` copies every worksheet into its own sheet;
                ``rows`` stacks every first worksheet into one sheet.

        Returns:
            The output path.
        """
        if merge_mode not in ExcelWriter.MERGE_MODES:
            raise ValueError(
                f"Unknown merge mode: {merge_mode}. Expected one of {ExcelWriter.MERGE_MODES}"
            )

        out = Workbook()
        out.remove(out.active)

        if merge_mode == "sheets":
            for path in file_paths:
                stem = os.path.splitext(os.path.basename(path))[0]
                src = load_workbook(path)
                try:
                    for ws in src.worksheets:
                        title = f"{stem}_{ws.title}" if include_file_name else ws.title
                        target = out.create_sheet(_safe_sheet_title(title))
                        for cells in ws.iter_rows():
                            _copy_row(cells, target, cells[0].row)
                        for letter, dim in ws.column_dimensions.items():
                            if dim.width:
                                target.column_dimensions[letter].width = dim.width
                finally:
                    src.close()
        else:
            target = out.create_sheet(ExcelWriter.MERGED_SHEET_TITLE)
            current_row = 1
            for path in file_paths:
                src = load_workbook(path)
                try:
                    ws = src.worksheets[0]
                    if include_file_name:
                        cell = target.cell(row=current_row, column=1, value=f"File: {os.path.basename(path)}")
                        cell.font = Font(bold=True)
                        current_row += 1
                    for cells in ws.iter_rows():
                        if all(c.value is None for c in cells):
                            continue
                        _copy_row(cells, target, current_row)
                        current_row += 1
                finally:
                    src.close()
                # blank separator row
                current_row += 1

        if not out.worksheets:
            out.create_sheet(ExcelWriter.MERGED_SHEET_TITLE)
        out.save(output_path)
        return output_path


def _record_value(value: Any) -> Any:
    if not value:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _copy_row(cells, target, target_row: int) -> None:
    for cell in cells:
        if cell.value is None and not cell.has_style:
            continue
        new = target.cell(row=target_row, column=cell.column, value=cell.value)
        if cell.has_style:
            new.font = copy(cell.font)
            new.fill = copy(cell.fill)
            new.border = copy(cell.border)
            new.alignment = copy(cell.alignment)
            new.protection = copy(cell.protection)
            new.number_format = cell.number_format


def _safe_sheet_title(title: str) -> str:
    cleaned = "".join("_" if c in '[]:*?/\\' else c for c in title)
    return cleaned[:ExcelWriter.MAX_SHEET_TITLE] or "Sheet"
