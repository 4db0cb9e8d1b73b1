"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of imports, additions and deletions
2. Debugging capability when the store fails
3. Correlation of a user action with the refresh it caused

The audit logger:
- Writes structured JSON lines through structlog
- Never raises; logging must not break the main flow
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from tenant_billing.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)


class AuditLogger:
    """
    Central activity logging service.

    Turns AuditEvents into structured log lines. Nothing is persisted.
    """

    def __init__(self, logger_name: str = "tenant_billing.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected form submission."""
        self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_import_rejected(
        self,
        import_id: UUID,
        error_count: int,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected CSV import."""
        self.log(AuditEventBuilder.import_rejected(
            import_id=import_id,
            error_count=error_count,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_tenant_added(
        self,
        tenant_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.tenant_added(
            tenant_id=tenant_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_tenants_imported(
        self,
        import_id: UUID,
        count: int,
        header_skipped: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.tenants_imported(
            import_id=import_id,
            count=count,
            header_skipped=header_skipped,
            correlation_id=correlation_id,
        ))

    def log_tenant_deleted(
        self,
        tenant_id: UUID,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        if found:
            event = AuditEventBuilder.tenant_deleted(tenant_id, correlation_id)
        else:
            event = AuditEventBuilder.tenant_not_found(tenant_id, correlation_id)
        self.log(event)

    def log_list_refreshed(self, count: int) -> None:
        self.log(AuditEventBuilder.list_refreshed(count))

    def log_refresh_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.refresh_failed(error_message))

    def log_change_received(self, change_type: str, record_ids: list[UUID]) -> None:
        self.log(AuditEventBuilder.change_received(change_type, record_ids))

    def log_subscription(self, table: str, active: bool) -> None:
        self.log(AuditEventBuilder.subscription_changed(table, active))

    def log_store_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed store call."""
        self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a CSV import).
    Pass it through all subsequent operations.
    """
    return uuid4()
