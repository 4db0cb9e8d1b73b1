"""
Activity Event Models for Tenant Billing

Every significant action in the system is described by an event
and written to the structured log. This provides:
1. Traceability of imports, additions and deletions
2. Debugging information when the store misbehaves
3. A record of what the user saw when something failed

DESIGN DECISION: Events are log lines only. Nothing here is persisted
to the store, and deleted tenants leave no trail in the data.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from tenant_billing.models.tenant import utc_now


class AuditEventType(str, Enum):
    """Types of events we log."""
    # Ingestion
    VALIDATION_FAILED = "validation_failed"
    IMPORT_REJECTED = "import_rejected"

    # Persistence
    TENANT_ADDED = "tenant_added"
    TENANTS_IMPORTED = "tenants_imported"
    TENANT_DELETED = "tenant_deleted"
    TENANT_NOT_FOUND = "tenant_not_found"

    # Listing and live updates
    LIST_REFRESHED = "list_refreshed"
    REFRESH_FAILED = "refresh_failed"
    CHANGE_RECEIVED = "change_received"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"

    # System events
    STORE_ERROR = "store_error"


class AuditSeverity(str, Enum):
    """Severity level for events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single activity event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'tenant', 'import')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import and its refresh)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build events with common patterns.

    Usage:
        event = AuditEventBuilder.tenant_added(tenant_id, name)
        event = AuditEventBuilder.tenants_imported(import_id, count, correlation_id)
    """

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="tenant",
            correlation_id=correlation_id,
            description=f"Tenant form rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(
        import_id: UUID,
        error_count: int,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="import",
            entity_id=import_id,
            correlation_id=correlation_id,
            description=f"CSV import rejected with {error_count} errors",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def tenant_added(
        tenant_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TENANT_ADDED,
            entity_type="tenant",
            entity_id=tenant_id,
            correlation_id=correlation_id,
            description=f"Tenant added: {name}"[:500],
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def tenants_imported(
        import_id: UUID,
        count: int,
        header_skipped: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TENANTS_IMPORTED,
            entity_type="import",
            entity_id=import_id,
            correlation_id=correlation_id,
            description=f"Imported {count} tenants from CSV",
            details={
                "count": count,
                "header_skipped": header_skipped,
            },
            is_user_action=True,
        )

    @staticmethod
    def tenant_deleted(
        tenant_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TENANT_DELETED,
            entity_type="tenant",
            entity_id=tenant_id,
            correlation_id=correlation_id,
            description="Tenant deleted",
            is_user_action=True,
        )

    @staticmethod
    def tenant_not_found(
        tenant_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TENANT_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="tenant",
            entity_id=tenant_id,
            correlation_id=correlation_id,
            description="Delete requested for a tenant that no longer exists",
            is_user_action=True,
        )

    @staticmethod
    def list_refreshed(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LIST_REFRESHED,
            severity=AuditSeverity.DEBUG,
            entity_type="tenant",
            description=f"Tenant list refreshed ({count} records)",
            details={"count": count},
        )

    @staticmethod
    def refresh_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFRESH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="tenant",
            description="Failed to fetch tenants; keeping the previous list",
            error_message=error_message,
        )

    @staticmethod
    def change_received(
        change_type: str,
        record_ids: list[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHANGE_RECEIVED,
            severity=AuditSeverity.DEBUG,
            entity_type="tenant",
            description=f"Store announced {change_type} of {len(record_ids)} rows",
            details={
                "change_type": change_type,
                "record_ids": [str(record_id) for record_id in record_ids],
            },
        )

    @staticmethod
    def subscription_changed(table: str, active: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.SUBSCRIBED if active else AuditEventType.UNSUBSCRIBED
            ),
            severity=AuditSeverity.DEBUG,
            description=f"{'Listening to' if active else 'Stopped listening to'} {table}",
            details={"table": table},
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Store error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )
