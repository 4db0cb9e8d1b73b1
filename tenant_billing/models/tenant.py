"""
Core Data Models for Tenant Billing

These models define the schemas for all data flowing through the system.
They are designed to:
1. Give every record the same shape from form, CSV and store
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Records are plain pydantic models with float amounts.
Amounts are summed at full precision and only rounded for display.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Timezone-aware current time, used for store-assigned timestamps."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class ChargeField(str, Enum):
    """The three amount columns, in CSV order."""
    WATER = "water"
    ELECTRICITY = "electricity"
    RENT = "rent"


class ChangeType(str, Enum):
    """Kinds of change a store can announce."""
    INSERT = "insert"
    DELETE = "delete"


# =============================================================================
# TENANT RECORDS
# =============================================================================

class NewTenant(BaseModel):
    """
    A tenant row before the store has seen it.

    Produced by the ingestion module from form input or CSV lines.
    The name is kept exactly as given; the form path does not trim it.
    """

    name: str = Field(
        ...,
        description="Tenant name"
    )
    water: float = Field(
        ...,
        description="Water charge"
    )
    electricity: float = Field(
        ...,
        description="Electricity charge"
    )
    rent: float = Field(
        ...,
        description="Rent charge"
    )


class TenantRecord(NewTenant):
    """
    A tenant row as held by the store.

    `id` and `created_at` are assigned by the store on insert.
    Records are never edited in place; they are only created and deleted.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Store-assigned identifier"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the store created this record (UTC)"
    )

    @classmethod
    def from_new(
        cls,
        tenant: NewTenant,
        created_at: Optional[datetime] = None,
    ) -> "TenantRecord":
        """Promote a NewTenant to a stored record with a fresh id."""
        return cls(
            name=tenant.name,
            water=tenant.water,
            electricity=tenant.electricity,
            rent=tenant.rent,
            created_at=created_at or utc_now(),
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    line_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="1-based line in the imported text (None for form input)"
    )
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_a_number', 'column_count')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )

    def describe(self) -> str:
        """Message prefixed with its line number, if any."""
        if self.line_number is None:
            return self.message
        return f"Line {self.line_number}: {self.message}"


class ImportResult(BaseModel):
    """
    Result of validating (and possibly importing) a CSV document.

    An import is all-or-nothing: `records` only reach the store
    when there are no error-level issues.
    """

    import_id: UUID = Field(
        default_factory=uuid4
    )
    records: list[NewTenant] = Field(
        default_factory=list,
        description="Rows that passed validation, in file order"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All problems found, one per line and field"
    )
    header_skipped: bool = Field(
        default=False,
        description="Was the first line treated as a header?"
    )
    total_lines: int = Field(
        default=0,
        ge=0,
        description="Non-blank data lines examined"
    )
    imported_count: int = Field(
        default=0,
        ge=0,
        description="Rows actually written to the store"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def can_import(self) -> bool:
        """True when the batch may be handed to the store."""
        return bool(self.records) and not self.has_errors


# =============================================================================
# CHANGE NOTIFICATION
# =============================================================================

class ChangeEvent(BaseModel):
    """
    A change announced by a store.

    Carries the affected rows so listeners can update without
    re-reading the whole table.
    """

    event_id: UUID = Field(
        default_factory=uuid4
    )
    table: str = Field(
        default="tenants",
        description="Logical table the change applies to"
    )
    change_type: ChangeType
    records: list[TenantRecord] = Field(
        default_factory=list,
        description="Rows inserted or deleted"
    )
    occurred_at: datetime = Field(
        default_factory=utc_now
    )

    @property
    def record_ids(self) -> list[UUID]:
        return [record.id for record in self.records]
