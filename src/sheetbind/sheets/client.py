"""Google Sheets API client."""

import logging
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import settings
from ..errors import SheetNotFoundError, SpreadsheetAccessError
from .base import Spreadsheet
from .models import Columns, ColumnsPatch, Range, to_value, trim_columns

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def load_credentials() -> Credentials:
    """Get or refresh OAuth2 credentials, running the consent flow if needed."""
    creds = None

    if settings.google_token_path.exists():
        creds = Credentials.from_authorized_user_file(str(settings.google_token_path), SCOPES)

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            if not settings.google_credentials_path.exists():
                raise FileNotFoundError(
                    f"Google credentials file not found at {settings.google_credentials_path}. "
                    "Please download it from Google Cloud Console."
                )
            flow = InstalledAppFlow.from_client_secrets_file(
                str(settings.google_credentials_path), SCOPES
            )
            creds = flow.run_local_server(port=0)

        # Save credentials for next run
        settings.google_token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings.google_token_path, "w") as token:
            token.write(creds.to_json())

    return creds


class GoogleSheetsSpreadsheet(Spreadsheet):
    """Spreadsheet interface over one Google Sheets document."""

    def __init__(self, spreadsheet_id: str, service=None):
        self.spreadsheet_id = spreadsheet_id
        self._service = service
        self._grid: Optional[dict[str, dict]] = None

    @property
    def service(self):
        """Get or create the Sheets API service."""
        if self._service is None:
            self._service = build("sheets", "v4", credentials=load_credentials())
        return self._service

    def _sheet_properties(self, refresh: bool = False) -> dict[str, dict]:
        """Return sheet properties (id and grid size) keyed by sheet title."""
        if self._grid is None or refresh:
            try:
                result = (
                    self.service.spreadsheets()
                    .get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties")
                    .execute()
                )
            except HttpError as e:
                raise SpreadsheetAccessError(f"Failed to get spreadsheet info: {e}") from e
            self._grid = {
                sheet["properties"]["title"]: {
                    "id": sheet["properties"]["sheetId"],
                    "row_count": sheet["properties"]["gridProperties"]["rowCount"],
                    "col_count": sheet["properties"]["gridProperties"]["columnCount"],
                }
                for sheet in result.get("sheets", [])
            }
        return self._grid

    def active_sheets(self) -> list[str]:
        return list(self._sheet_properties())

    def read_columns(self, ranges: list[Range]) -> list[Columns]:
        if not ranges:
            return []
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .batchGet(
                    spreadsheetId=self.spreadsheet_id,
                    ranges=[rg.a1 for rg in ranges],
                    majorDimension="COLUMNS",
                    valueRenderOption="UNFORMATTED_VALUE",
                )
                .execute()
            )
        except HttpError as e:
            raise SpreadsheetAccessError(f"Failed to read ranges: {e}") from e

        value_ranges = result.get("valueRanges", [])
        if len(value_ranges) != len(ranges):
            raise SpreadsheetAccessError(
                f"Expected {len(ranges)} value ranges, got {len(value_ranges)}"
            )
        groups = []
        for value_range in value_ranges:
            cols = [[to_value(v) for v in col] for col in value_range.get("values", [])]
            trim_columns(cols)
            groups.append(cols)
        logger.debug(f"Read {len(ranges)} range(s) from {self.spreadsheet_id}")
        return groups

    def update_columns(self, patches: list[ColumnsPatch]) -> None:
        if not patches:
            return
        self._ensure_capacity(patches)

        data = []
        for patch in patches:
            columns = _bounded_columns(patch)
            if not columns:
                continue
            data.append(
                {
                    "range": patch.range.a1,
                    "majorDimension": "COLUMNS",
                    "values": columns,
                }
            )
        if not data:
            return

        try:
            result = (
                self.service.spreadsheets()
                .values()
                .batchUpdate(
                    spreadsheetId=self.spreadsheet_id,
                    body={"valueInputOption": "RAW", "data": data},
                )
                .execute()
            )
        except HttpError as e:
            raise SpreadsheetAccessError(f"Failed to update ranges: {e}") from e
        logger.info(
            f"Updated {result.get('totalUpdatedCells', 0)} cell(s) in {self.spreadsheet_id}"
        )

    def _ensure_capacity(self, patches: list[ColumnsPatch]) -> None:
        """Append grid rows and columns so that every patch fits its sheet."""
        grid = self._sheet_properties(refresh=True)
        needed: dict[str, tuple[int, int]] = {}
        for patch in patches:
            props = grid.get(patch.range.sheet)
            if props is None:
                raise SheetNotFoundError(patch.range.sheet)
            columns = _bounded_columns(patch)
            height = max((len(c) for c in columns), default=0)
            bottom = (patch.range.top or 1) + height - 1
            right = (patch.range.left or 1) + len(columns) - 1
            rows, cols = needed.get(patch.range.sheet, (0, 0))
            needed[patch.range.sheet] = (max(rows, bottom), max(cols, right))

        requests = []
        for sheet, (rows, cols) in needed.items():
            props = grid[sheet]
            if rows > props["row_count"]:
                requests.append(
                    {
                        "appendDimension": {
                            "sheetId": props["id"],
                            "dimension": "ROWS",
                            "length": rows - props["row_count"],
                        }
                    }
                )
            if cols > props["col_count"]:
                requests.append(
                    {
                        "appendDimension": {
                            "sheetId": props["id"],
                            "dimension": "COLUMNS",
                            "length": cols - props["col_count"],
                        }
                    }
                )
        if not requests:
            return
        try:
            self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id, body={"requests": requests}
            ).execute()
        except HttpError as e:
            raise SpreadsheetAccessError(f"Failed to grow spreadsheet: {e}") from e
        self._grid = None
        logger.info(f"Grew {len(requests)} sheet dimension(s) in {self.spreadsheet_id}")


def _bounded_columns(patch: ColumnsPatch) -> Columns:
    """Clip a patch's columns to its range and pad them to a common height."""
    rg = patch.range
    columns = patch.columns
    if rg.width is not None:
        columns = columns[: rg.width]
    height = max((len(c) for c in columns), default=0)
    if rg.height is not None:
        height = min(height, rg.height)
    return [list(c[:height]) + [""] * (height - len(c[:height])) for c in columns]
