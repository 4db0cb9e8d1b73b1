"""
Data Models Package

This package contains all Pydantic models used in the Tenant Billing system.
All data flowing through the system must conform to these schemas.
"""

from tenant_billing.models.tenant import (
    ChangeEvent,
    ChangeType,
    ChargeField,
    ImportResult,
    NewTenant,
    TenantRecord,
    ValidationIssue,
    utc_now,
)
from tenant_billing.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Tenant models
    "ChangeEvent",
    "ChangeType",
    "ChargeField",
    "ImportResult",
    "NewTenant",
    "TenantRecord",
    "ValidationIssue",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
