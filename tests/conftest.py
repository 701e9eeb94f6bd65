"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path
import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from doctoolkit.converters.excel_io import ExcelReader, ExcelWriter, ReadRetryPolicy
from doctoolkit.core import DocToolkit
from doctoolkit.reconciliation import build_lookup_index
from tests.fixtures.sample_tables import (
    REFERENCE_TABLE,
    make_shipment_table,
    raw_shipment_row,
    write_workbook,
)


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "integration: mark as integration test")


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    calls = []

    def _sleep(seconds):
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep


@pytest.fixture
def reader(no_sleep):
    """Excel reader with the default retry policy and no real sleeping."""
    return ExcelReader(sleep=no_sleep)


@pytest.fixture
def writer():
    return ExcelWriter()


@pytest.fixture
def toolkit():
    """Quiet toolkit with a single read attempt."""
    return DocToolkit(retry_policy=ReadRetryPolicy(max_attempts=1, delay_seconds=0), quiet=True)


# ============================================================================
# Table Fixtures
# ============================================================================


@pytest.fixture
def reference_table():
    return [list(r) for r in REFERENCE_TABLE]


@pytest.fixture
def lookup_index(reference_table):
    return build_lookup_index(reference_table)


@pytest.fixture
def shipment_table():
    """Shipment table with two matching rows and one unknown description."""
    return make_shipment_table(
        raw_shipment_row("6205100000", "Shirt", "BD", 120, 1440.5),
        raw_shipment_row("6203000000", "trousers ", "TR", 40, 980),
        raw_shipment_row("9999000000", "Scarf", "IN", 15, 210),
    )


# ============================================================================
# Workbook Fixtures
# ============================================================================


@pytest.fixture
def reference_workbook(tmp_path, reference_table):
    return str(write_workbook(tmp_path / "reference.xlsx", reference_table))


@pytest.fixture
def shipment_workbook(tmp_path, shipment_table):
    return str(write_workbook(tmp_path / "SHP-0001.xlsx", shipment_table))
