"""
Tests for Tenant Billing

Test strategy:
1. Unit tests for individual components (models, ingestion)
2. Flow tests for the session against the in-memory store
3. No real API calls in tests (use mocks)
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from tenant_billing.audit import AuditLogger
from tenant_billing.config import AppSettings, Settings
from tenant_billing.models.tenant import (
    ChangeEvent,
    ChangeType,
    ChargeField,
    ImportResult,
    NewTenant,
    TenantRecord,
    ValidationIssue,
)
from tenant_billing.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestTenantModels:
    """Tests for tenant-related Pydantic models."""

    def test_new_tenant_creation(self):
        """Test NewTenant model creation."""
        tenant = NewTenant(name="Alice", water=50, electricity=80.5, rent=2000)
        assert tenant.name == "Alice"
        assert tenant.electricity == 80.5
        assert (tenant.water, tenant.rent) == (50.0, 2000.0)

    def test_new_tenant_keeps_whitespace(self):
        """Test that the name is stored exactly as given."""
        tenant = NewTenant(name="  Alice ", water=1, electricity=2, rent=3)
        assert tenant.name == "  Alice "

    def test_new_tenant_rejects_non_numeric_amount(self):
        """Test that amounts must be numbers."""
        with pytest.raises(ValueError):
            NewTenant(name="Alice", water="lots", electricity=1, rent=1)

    def test_record_from_new_assigns_identity(self):
        """Test TenantRecord.from_new gives an id and a timestamp."""
        created = datetime(2024, 5, 1, tzinfo=timezone.utc)
        record = TenantRecord.from_new(
            NewTenant(name="Bob", water=5, electricity=5, rent=5),
            created_at=created,
        )
        assert record.name == "Bob"
        assert record.created_at == created
        assert record.id is not None

    def test_record_ids_are_unique(self):
        """Test that every promoted record gets its own id."""
        tenant = NewTenant(name="Bob", water=5, electricity=5, rent=5)
        assert TenantRecord.from_new(tenant).id != TenantRecord.from_new(tenant).id

    def test_record_is_immutable(self):
        """Test that stored records cannot be edited in place."""
        record = TenantRecord(name="Bob", water=5, electricity=5, rent=5)
        with pytest.raises(ValueError):
            record.rent = 10

    def test_charge_field_order(self):
        """Test the amount columns are in CSV order."""
        assert [f.value for f in ChargeField] == ["water", "electricity", "rent"]


class TestValidationModels:
    """Tests for ValidationIssue and ImportResult."""

    def test_issue_describe_with_line(self):
        """Test line numbers prefix the message."""
        issue = ValidationIssue(
            line_number=3,
            field="water",
            issue_type="not_a_number",
            message="Water amount 'x' is not a number",
        )
        assert issue.describe() == "Line 3: Water amount 'x' is not a number"
        assert issue.severity == "error"

    def test_issue_describe_without_line(self):
        """Test form issues have no prefix."""
        issue = ValidationIssue(field="name", issue_type="missing", message="Name is required")
        assert issue.describe() == "Name is required"

    def test_issue_rejects_unknown_severity(self):
        """Test severity must be error, warning or info."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")

    def test_import_result_with_errors(self):
        """Test has_errors and can_import with an error issue."""
        result = ImportResult(
            records=[NewTenant(name="Bob", water=1, electricity=2, rent=3)],
            issues=[
                ValidationIssue(
                    line_number=2,
                    field="water",
                    issue_type="missing",
                    message="Water amount is required",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.can_import is False

    def test_import_result_warnings_only(self):
        """Test that warnings don't block an import."""
        result = ImportResult(
            records=[NewTenant(name="Bob", water=1, electricity=2, rent=3)],
            issues=[
                ValidationIssue(
                    field="content",
                    issue_type="note",
                    message="Header detected",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.can_import is True

    def test_import_result_empty_cannot_import(self):
        """Test that an import with no rows is never sent to the store."""
        assert ImportResult().can_import is False


class TestChangeEvent:
    """Tests for ChangeEvent."""

    def test_record_ids(self):
        """Test record_ids lists the affected rows."""
        records = [
            TenantRecord(name="A", water=1, electricity=1, rent=1),
            TenantRecord(name="B", water=2, electricity=2, rent=2),
        ]
        event = ChangeEvent(change_type=ChangeType.DELETE, records=records)
        assert event.record_ids == [records[0].id, records[1].id]
        assert event.table == "tenants"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TENANT_ADDED,
            description="Tenant added",
        )
        assert event.event_type == AuditEventType.TENANT_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TENANTS_IMPORTED,
            description="Imported 2 tenants",
            details={"count": 2},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "tenants_imported"
        assert log_dict["details"]["count"] == 2

    def test_builder_tenant_added(self):
        """Test AuditEventBuilder.tenant_added."""
        tenant_id = uuid4()
        correlation_id = uuid4()

        event = AuditEventBuilder.tenant_added(
            tenant_id=tenant_id,
            name="Alice",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TENANT_ADDED
        assert event.entity_id == tenant_id
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_tenant_added_long_name(self):
        """Test that very long names still fit the description limit."""
        event = AuditEventBuilder.tenant_added(tenant_id=uuid4(), name="x" * 1000)
        assert len(event.description) == 500

    def test_builder_refresh_failed(self):
        """Test AuditEventBuilder.refresh_failed."""
        event = AuditEventBuilder.refresh_failed("timeout")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "timeout"

    def test_builder_subscription(self):
        """Test subscribe and unsubscribe events."""
        assert (
            AuditEventBuilder.subscription_changed("tenants", True).event_type
            == AuditEventType.SUBSCRIBED
        )
        assert (
            AuditEventBuilder.subscription_changed("tenants", False).event_type
            == AuditEventType.UNSUBSCRIBED
        )


class TestAuditLogger:
    """Tests for AuditLogger level routing."""

    def test_severity_picks_log_level(self):
        """Test each severity goes to the matching logger method."""
        audit_logger = AuditLogger()
        audit_logger._logger = MagicMock()

        audit_logger.log_refresh_failed("boom")
        audit_logger.log_tenant_deleted(uuid4(), found=False)
        audit_logger.log_tenant_added(uuid4(), "Alice")
        audit_logger.log_list_refreshed(3)

        audit_logger._logger.error.assert_called_once()
        audit_logger._logger.warning.assert_called_once()
        audit_logger._logger.info.assert_called_once()
        audit_logger._logger.debug.assert_called_once()


class TestSettings:
    """Tests for application settings."""

    def test_defaults(self):
        """Test default import settings."""
        settings = AppSettings()
        assert settings.csv_header_mode in ("always", "detect")
        assert settings.max_import_rows >= 1

    def test_header_mode_must_be_known(self):
        """Test an unknown header mode is rejected."""
        with pytest.raises(ValueError):
            AppSettings(csv_header_mode="sometimes")

    def test_sub_settings_loaded_once(self):
        """Test the container builds each sub-settings object once."""
        settings = Settings()
        assert settings.app is settings.app

    def test_upload_size_in_bytes(self):
        """Test max_upload_size_bytes conversion."""
        assert AppSettings(max_upload_size_mb=2).max_upload_size_bytes == 2 * 1024 * 1024


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
