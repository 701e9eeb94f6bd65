# Test fixtures
from .sample_tables import (
    SHIPMENT_HEADER_BLOCK,
    REFERENCE_TABLE,
    raw_shipment_row,
    make_shipment_table,
    write_workbook,
)

__all__ = [
    "SHIPMENT_HEADER_BLOCK",
    "REFERENCE_TABLE",
    "raw_shipment_row",
    "make_shipment_table",
    "write_workbook",
]
