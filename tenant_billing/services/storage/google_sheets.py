"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the hosted storage backend because:
1. Landlords can view and export their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for one building)
- No transactions; a batch import is a single append call
- No server-side ordering (we sort in Python)
- No realtime feed; changes are announced through the in-process channel

The implementation follows the abstract interface, so we can swap
to a hosted database later without changing business logic.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from tenant_billing.config import GoogleSheetsSettings, get_settings
from tenant_billing.models.tenant import (
    ChangeType,
    NewTenant,
    TenantRecord,
    utc_now,
)
from tenant_billing.services.realtime import ChangeChannel
from tenant_billing.services.storage.interface import (
    ConnectionError,
    StorageError,
    TenantStorageInterface,
)


# Column mappings for Tenants sheet
TENANT_COLUMNS = [
    "id",
    "created_at",
    "name",
    "water",
    "electricity",
    "rent",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_tenants_sheet(self) -> gspread.Worksheet:
        """Get or create the Tenants worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.tenants_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.tenants_sheet_name,
                rows=1000,
                cols=len(TENANT_COLUMNS),
            )
            sheet.append_row(TENANT_COLUMNS)
        return sheet


class GoogleSheetsTenantStorage(TenantStorageInterface):
    """
    Google Sheets implementation of tenant storage.

    Tenants are stored one per row below a header row.
    Amounts are written as their shortest round-trip text.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        channel: Optional[ChangeChannel] = None,
    ):
        super().__init__(channel)
        self._client = client or GoogleSheetsClient()
        self._logger = structlog.get_logger(__name__)

    def _record_to_row(self, record: TenantRecord) -> list:
        """Convert a TenantRecord to a spreadsheet row."""
        return [
            str(record.id),
            record.created_at.isoformat(),
            record.name,
            repr(record.water),
            repr(record.electricity),
            repr(record.rent),
        ]

    def _row_to_record(self, row: list) -> TenantRecord:
        """Convert a spreadsheet row to a TenantRecord."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return TenantRecord(
            id=UUID(safe_get(0)),
            created_at=datetime.fromisoformat(safe_get(1)),
            name=safe_get(2),
            water=float(safe_get(3)),
            electricity=float(safe_get(4)),
            rent=float(safe_get(5)),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _read_rows(self) -> list[list]:
        """All data rows (header excluded). Reads are safe to retry."""
        sheet = self._client.get_tenants_sheet()
        return sheet.get_all_values()[1:]

    async def list_tenants(self) -> list[TenantRecord]:
        """List all tenants, newest first."""
        try:
            all_rows = self._read_rows()
        except Exception as e:
            raise StorageError(f"Failed to list tenants: {e}")

        records = []
        for row_number, row in enumerate(all_rows, start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                records.append(self._row_to_record(row))
            except ValueError as e:
                self._logger.warning(
                    "malformed_tenant_row",
                    row_number=row_number,
                    error=str(e),
                )

        # Later rows win ties, matching insertion order
        indexed = list(enumerate(records))
        indexed.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [record for _, record in indexed]

    async def insert_tenants(self, tenants: list[NewTenant]) -> list[TenantRecord]:
        """
        Append all tenants in one API call.

        Writes are not retried: a retry after a timeout could apply
        the same batch twice.
        """
        if not tenants:
            return []

        created_at = utc_now()
        records = [
            TenantRecord.from_new(tenant, created_at=created_at)
            for tenant in tenants
        ]

        try:
            sheet = self._client.get_tenants_sheet()
            sheet.append_rows(
                [self._record_to_row(record) for record in records],
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to insert tenants: {e}")

        await self._publish(ChangeType.INSERT, records)
        return records

    async def delete_tenant(self, tenant_id: UUID) -> bool:
        """Delete a tenant by ID."""
        try:
            sheet = self._client.get_tenants_sheet()
            all_rows = sheet.get_all_values()

            removed = None
            for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
                if row and row[0] == str(tenant_id):
                    removed = self._row_to_record(row)
                    sheet.delete_rows(idx)
                    break
        except Exception as e:
            raise StorageError(f"Failed to delete tenant: {e}")

        if removed is None:
            return False

        await self._publish(ChangeType.DELETE, [removed])
        return True
