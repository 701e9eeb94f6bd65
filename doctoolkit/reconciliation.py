"""
Shipment reconciliation transform.

Joins shipment data tables against a reference table (description -> code)
the way a spreadsheet VLOOKUP would, and emits one normalized output table.
Pure computation: no file access, no printing, no shared state.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional


# Fixed layout of the shipment export this transform was built for.
HEADER_SKIP_COUNT = 7
DELETE_COLUMNS = (1, 3, 5)
# Column 5 is only deleted when the first data row is wider than this.
OPTIONAL_DELETE_MIN_WIDTH = 5

OUTPUT_HEADER = ["OLD HSCODE", "NEW HSCODE", "COO", "DES", "QTY", "AMOUNT", "shipmentnumber"]

_EXTENSION_RE = re.compile(r"\.[^.]+$")


class StructuralInputError(ValueError):
    """Raised when a supplied table is not a sequence of rows."""
    pass


@dataclass
class TableReconciliation:
    """Outcome of reconciling a single data table."""
    rows: list[list[Any]] = field(default_factory=list)
    matched: int = 0
    unmatched: list[str] = field(default_factory=list)
    skipped: int = 0  # malformed, short or empty-key rows dropped without output


@dataclass
class ReconciliationSummary:
    """Aggregate counters over every data table of a run."""
    processed_files: int = 0
    total_items_processed: int = 0
    items_not_found: list[str] = field(default_factory=list)
    skipped_rows: int = 0

    def to_dict(self) -> dict:
        return {
            "processed_files": self.processed_files,
            "total_items_processed": self.total_items_processed,
            "items_not_found": list(self.items_not_found),
            "skipped_rows": self.skipped_rows,
        }


@dataclass
class ReconciliationResult:
    """Output table (header row first) plus the run summary."""
    rows: list[list[Any]]
    summary: ReconciliationSummary
    lookup_entries: int = 0

    @property
    def data_rows(self) -> list[list[Any]]:
        """Reconciled rows without the header."""
        return self.rows[1:]


def normalize_key(value: Any) -> str:
    """Trim and upper-case a cell value for use as a lookup key."""
    return cell_text(value).strip().upper()


def cell_text(value: Any) -> str:
    """
    Render a cell value as text.

    Integral floats lose their trailing ``.0`` so that ``1000.0`` read from a
    workbook matches ``"1000"`` typed as text.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def source_label_from_filename(name: str) -> str:
    """Strip the extension and surrounding whitespace from a file name."""
    return _EXTENSION_RE.sub("", name).strip()


def build_lookup_index(reference_table: Sequence) -> dict[str, str]:
    """
    Build the description -> code index from a reference table.

    Column 0 holds the description, column 1 the code. Rows that are not
    lists of cells, lack either column, or have a blank description are
    skipped. A later row wins over an earlier one with the same normalized
    description.

    Args:
        reference_table: Row-major table as produced by the Excel reader.

    Returns:
        Mapping of normalized description to code text.

    Raises:
        StructuralInputError: If the table is not a sequence of rows.
    """
    _check_table(reference_table, "Reference table")

    index: dict[str, str] = {}
    for row in reference_table:
        if not _is_sequence(row) or len(row) < 2:
            continue
        if row[0] is None or row[1] is None:
            continue
        key = normalize_key(row[0])
        if key:
            index[key] = cell_text(row[1])
    return index


def preprocess_table(data_table: Sequence) -> list[list[Any]]:
    """
    Strip the fixed header block and the unused columns from a data table.

    The input table is left untouched; the returned rows are copies. Entries
    that are not lists of cells come back as ``None``.
    """
    working = [list(row) if _is_sequence(row) else None for row in data_table]

    if len(working) >= HEADER_SKIP_COUNT:
        working = working[HEADER_SKIP_COUNT:]

    first, second, optional = DELETE_COLUMNS
    _delete_column(working, first)
    _delete_column(working, second)
    if working and working[0] and len(working[0]) > OPTIONAL_DELETE_MIN_WIDTH:
        _delete_column(working, optional)

    return working


def reconcile(
    data_table: Sequence,
    source_label: str,
    lookup_index: dict[str, str],
) -> TableReconciliation:
    """
    Reconcile one shipment table against the lookup index.

    Args:
        data_table: Raw table as read from the shipment file.
        source_label: Identifier stamped on every emitted row (usually the
            original file name without extension).
        lookup_index: Index built by ``build_lookup_index``.

    Returns:
        The emitted rows with matched/unmatched/skipped counters.

    Raises:
        StructuralInputError: If the table is not a sequence of rows.
    """
    _check_table(data_table, f"Data table '{source_label}'")

    outcome = TableReconciliation()
    for row in preprocess_table(data_table):
        if not row or len(row) < 2:
            outcome.skipped += 1
            continue

        key = normalize_key(row[1]) if row[1] else ""
        if not key:
            outcome.skipped += 1
            continue

        new_code = lookup_index.get(key, "")
        outcome.rows.append([
            _column(row, 0),
            new_code,
            _column(row, 2),
            key,
            _column(row, 3),
            _column(row, 4),
            source_label,
        ])

        if new_code:
            outcome.matched += 1
        else:
            outcome.unmatched.append(key)

    return outcome


def run(
    reference_table: Sequence,
    data_tables: Sequence,
    source_labels: Sequence[str],
) -> ReconciliationResult:
    """
    Reconcile every data table against one reference table.

    Args:
        reference_table: Description -> code table.
        data_tables: Shipment tables, processed in order.
        source_labels: One label per data table.

    Returns:
        Combined output table (header first) and summary.

    Raises:
        StructuralInputError: If any table is not a sequence of rows.
        ValueError: If labels and data tables differ in number.
    """
    if len(source_labels) != len(data_tables):
        raise ValueError(
            f"Expected {len(data_tables)} source labels, got {len(source_labels)}"
        )

    lookup_index = build_lookup_index(reference_table)

    rows: list[list[Any]] = [list(OUTPUT_HEADER)]
    summary = ReconciliationSummary()

    for data_table, label in zip(data_tables, source_labels):
        outcome = reconcile(data_table, label, lookup_index)
        rows.extend(outcome.rows)
        summary.total_items_processed += outcome.matched
        summary.items_not_found.extend(outcome.unmatched)
        summary.skipped_rows += outcome.skipped
        summary.processed_files += 1

    return ReconciliationResult(rows=rows, summary=summary, lookup_entries=len(lookup_index))


def _check_table(table: Any, name: str) -> None:
    if not _is_sequence(table):
        raise StructuralInputError(
            f"{name} is not in the expected format (should be a list of rows)"
        )


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _delete_column(rows: list[Optional[list]], column: int) -> None:
    for row in rows:
        if row is not None and len(row) > column:
            del row[column]


def _column(row: list, position: int) -> Any:
    if len(row) > position and row[position]:
        return row[position]
    return ""
