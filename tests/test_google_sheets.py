"""Tests for the Google Sheets store (no real API calls)."""

import asyncio
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import gspread
import pytest

from tenant_billing.config import GoogleSheetsSettings
from tenant_billing.models.tenant import ChangeType, NewTenant
from tenant_billing.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTenantStorage,
    StorageError,
)
from tenant_billing.services.storage.google_sheets import TENANT_COLUMNS


def make_storage(rows=None):
    sheet = MagicMock()
    sheet.get_all_values.return_value = [TENANT_COLUMNS] + (rows or [])
    client = MagicMock()
    client.get_tenants_sheet.return_value = sheet
    return GoogleSheetsTenantStorage(client=client), sheet


def make_row(name, created_at="2024-01-01T00:00:00+00:00", amounts=("1.0", "2.0", "3.0")):
    return [str(uuid4()), created_at, name, *amounts]


class TestInsert:
    """Tests for insert_tenants."""

    def test_single_append_call(self):
        """Test a batch is written with one API call."""
        storage, sheet = make_storage()
        tenants = [
            NewTenant(name="Alice", water=0.1, electricity=80, rent=2000),
            NewTenant(name="Bob", water=1, electricity=2, rent=3),
        ]

        records = asyncio.run(storage.insert_tenants(tenants))

        sheet.append_rows.assert_called_once()
        rows = sheet.append_rows.call_args[0][0]
        assert sheet.append_rows.call_args[1]["value_input_option"] == "RAW"
        assert [row[2] for row in rows] == ["Alice", "Bob"]
        assert rows[0][3] == "0.1"
        assert rows[0][0] == str(records[0].id)

    def test_failure_raises_and_publishes_nothing(self):
        """Test an API error becomes StorageError and no event is sent."""
        storage, sheet = make_storage()
        sheet.append_rows.side_effect = Exception("quota exceeded")
        events = []
        storage.subscribe(events.append)

        with pytest.raises(StorageError, match="quota exceeded"):
            asyncio.run(storage.insert_tenants(
                [NewTenant(name="Alice", water=1, electricity=2, rent=3)]
            ))
        assert events == []

    def test_insert_publishes_event(self):
        """Test subscribers hear about new rows."""
        storage, _ = make_storage()
        events = []
        storage.subscribe(events.append)

        asyncio.run(storage.insert_tenants(
            [NewTenant(name="Alice", water=1, electricity=2, rent=3)]
        ))
        assert events[0].change_type == ChangeType.INSERT


class TestList:
    """Tests for list_tenants."""

    def test_newest_first(self):
        """Test rows are sorted by created_at descending."""
        storage, _ = make_storage([
            make_row("old", "2024-01-01T00:00:00+00:00"),
            make_row("new", "2024-03-01T00:00:00+00:00"),
            make_row("middle", "2024-02-01T00:00:00+00:00"),
        ])

        records = asyncio.run(storage.list_tenants())
        assert [r.name for r in records] == ["new", "middle", "old"]

    def test_ties_list_later_row_first(self):
        """Test rows with equal timestamps keep a stable order."""
        storage, _ = make_storage([make_row("A"), make_row("B")])

        records = asyncio.run(storage.list_tenants())
        assert [r.name for r in records] == ["B", "A"]

    def test_skips_blank_and_malformed_rows(self):
        """Test bad rows are skipped instead of failing the list."""
        storage, _ = make_storage([
            make_row("Alice"),
            [],
            ["", "", "", "", "", ""],
            ["not-a-uuid", "2024-01-01T00:00:00+00:00", "Bad", "1", "2", "3"],
            make_row("Bob", amounts=("x", "2", "3")),
        ])

        records = asyncio.run(storage.list_tenants())
        assert [r.name for r in records] == ["Alice"]

    def test_amounts_read_back_exactly(self):
        """Test amounts survive the text round trip."""
        storage, _ = make_storage([make_row("Alice", amounts=("0.1", "1e-07", "2130.0"))])

        (record,) = asyncio.run(storage.list_tenants())
        assert (record.water, record.electricity, record.rent) == (0.1, 1e-07, 2130.0)


class TestDelete:
    """Tests for delete_tenant."""

    def test_deletes_matching_row(self):
        """Test the right sheet row is removed."""
        rows = [make_row("Alice"), make_row("Bob")]
        storage, sheet = make_storage(rows)
        events = []
        storage.subscribe(events.append)

        target = rows[1][0]
        assert asyncio.run(storage.delete_tenant(UUID(target))) is True

        sheet.delete_rows.assert_called_once_with(3)
        assert events[0].change_type == ChangeType.DELETE
        assert events[0].records[0].name == "Bob"

    def test_missing_id(self):
        """Test deleting an unknown id changes nothing."""
        storage, sheet = make_storage([make_row("Alice")])

        assert asyncio.run(storage.delete_tenant(uuid4())) is False
        sheet.delete_rows.assert_not_called()

    def test_failure_raises(self):
        """Test an API error becomes StorageError."""
        rows = [make_row("Alice")]
        storage, sheet = make_storage(rows)
        sheet.delete_rows.side_effect = Exception("permission denied")

        with pytest.raises(StorageError, match="permission denied"):
            asyncio.run(storage.delete_tenant(UUID(rows[0][0])))


class TestClient:
    """Tests for GoogleSheetsClient sheet setup."""

    def test_creates_missing_sheet_with_header(self):
        """Test a missing Tenants sheet is created with the column header."""
        with pytest.warns(UserWarning):
            settings = GoogleSheetsSettings(
                credentials_path="missing-credentials.json",
                spreadsheet_id="sheet-id",
            )
        client = GoogleSheetsClient(settings)
        spreadsheet = MagicMock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("Tenants")
        client._spreadsheet = spreadsheet

        sheet = client.get_tenants_sheet()

        spreadsheet.add_worksheet.assert_called_once()
        sheet.append_row.assert_called_once_with(TENANT_COLUMNS)

    def test_existing_sheet_reused(self):
        """Test an existing sheet is returned as is."""
        with pytest.warns(UserWarning):
            settings = GoogleSheetsSettings(
                credentials_path="missing-credentials.json",
                spreadsheet_id="sheet-id",
            )
        client = GoogleSheetsClient(settings)
        spreadsheet = MagicMock()
        client._spreadsheet = spreadsheet

        assert client.get_tenants_sheet() is spreadsheet.worksheet.return_value
        spreadsheet.add_worksheet.assert_not_called()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
