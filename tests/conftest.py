"""Pytest configuration and shared fixtures."""

from typing import Optional
from unittest.mock import Mock

import pytest

from sheetbind.config import Settings
from sheetbind.outline import SourceBinding, TensorOutline
from sheetbind.sheets import InMemorySpreadsheet
from sheetbind.tables import identify_tables

SHEET = "default"


def make_tensor_outline(
    label: str,
    bindings: Optional[list[dict]] = None,
    indicator: bool = False,
) -> TensorOutline:
    """Build a tensor outline, optionally bounded as a 0/1 indicator."""
    return TensorOutline(
        label=label,
        bindings=[SourceBinding(**b) for b in bindings or []],
        is_integral=indicator,
        lower_bound=0 if indicator else "Dynamic",
        upper_bound=1 if indicator else "Dynamic",
    )


@pytest.fixture
def tensor_outline():
    """Factory for tensor outlines."""
    return make_tensor_outline


@pytest.fixture
def csv_spreadsheet():
    """Factory for single-sheet in-memory spreadsheets built from CSV text."""

    def _build(csv: str, sheet: str = SHEET) -> InMemorySpreadsheet:
        return InMemorySpreadsheet.for_csvs({sheet: csv})

    return _build


@pytest.fixture
def csv_tables(csv_spreadsheet):
    """Factory returning the tables detected in CSV text."""

    def _detect(csv: str):
        return identify_tables(csv_spreadsheet(csv))

    return _detect


@pytest.fixture
def mock_settings(tmp_path) -> Settings:
    """Create settings with test values."""
    creds_file = tmp_path / "credentials.json"
    token_file = tmp_path / "token.json"
    creds_file.write_text('{"installed": {"client_id": "test"}}')

    return Settings(
        google_credentials_path=creds_file,
        google_token_path=token_file,
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
        table_header_rows=2,
        max_snapshot_cells=1000,
    )


@pytest.fixture
def mock_sheets_service() -> Mock:
    """Create a mocked Google Sheets API service with one 10x5 sheet."""
    service = Mock()
    spreadsheets = service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {
        "sheets": [
            {
                "properties": {
                    "title": "Sheet1",
                    "sheetId": 0,
                    "gridProperties": {"rowCount": 10, "columnCount": 5},
                }
            }
        ]
    }
    spreadsheets.values.return_value.batchGet.return_value.execute.return_value = {
        "valueRanges": []
    }
    spreadsheets.values.return_value.batchUpdate.return_value.execute.return_value = {
        "totalUpdatedCells": 0
    }
    return service
