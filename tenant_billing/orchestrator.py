"""
Main Orchestrator for Tenant Billing

This module ties together all the components and defines the
end-to-end flows for:
1. Add tenant (form → validate → insert → refresh)
2. Import tenants (CSV text or file → validate all lines → one insert → refresh)
3. Delete tenant (id → delete → refresh)
4. Live refresh (store change event → re-fetch or patch the list)

DESIGN DECISION: The session holds exactly one piece of state, the
current list of records. It is always replaced as a whole, never
edited in place, so readers never see a half-updated list.

Mutations are serialized per session: a second submit waits for the
first to finish instead of racing it.
"""

import asyncio
import weakref
from typing import Optional
from uuid import UUID

import structlog

from tenant_billing.audit import (
    AuditLogger,
    configure_logging,
    create_correlation_id,
)
from tenant_billing.config import AppSettings, get_settings
from tenant_billing.ingestion import (
    HeaderMode,
    ValidationError,
    decode_upload,
    validate_csv,
    validate_single,
)
from tenant_billing.models.tenant import ChangeEvent, ImportResult, TenantRecord
from tenant_billing.services.realtime import (
    ChangeCallback,
    Subscription,
    apply_change,
)
from tenant_billing.services.storage import (
    TENANTS_TABLE,
    GoogleSheetsClient,
    GoogleSheetsTenantStorage,
    InMemoryTenantStorage,
    StorageError,
    TenantStorageInterface,
)


class TenantSession:
    """
    One user's view of the tenant list.

    Flow for every mutation:
    1. Validate locally (ValidationError, nothing sent)
    2. Call the store once (StorageError surfaced verbatim)
    3. Re-fetch the list (a listening session does this from its own change event)

    `start()` subscribes to store changes so edits from other sessions
    show up too; `stop()` unsubscribes.
    """

    def __init__(
        self,
        storage: TenantStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._tenants: tuple[TenantRecord, ...] = ()
        self._subscription: Optional[Subscription] = None
        self._release: Optional[weakref.finalize] = None
        self._mutation_lock = asyncio.Lock()

    @property
    def tenants(self) -> tuple[TenantRecord, ...]:
        """Current records, newest first."""
        return self._tenants

    @property
    def is_listening(self) -> bool:
        return self._subscription is not None

    @property
    def header_mode(self) -> HeaderMode:
        return HeaderMode(self._settings.csv_header_mode)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def refresh(self) -> bool:
        """
        Re-fetch the list from the store.

        On failure the previous list is kept and False is returned.
        """
        try:
            records = await self._storage.list_tenants()
        except StorageError as e:
            self._audit_logger.log_refresh_failed(str(e))
            return False

        self._tenants = tuple(records)
        self._audit_logger.log_list_refreshed(len(records))
        return True

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_tenant(
        self,
        name: Optional[str],
        water: Optional[str],
        electricity: Optional[str],
        rent: Optional[str],
    ) -> TenantRecord:
        """
        Validate form input and store one tenant.

        Raises:
            ValidationError: if the input is rejected (nothing is stored)
            StorageError: if the store rejects the insert
        """
        correlation_id = create_correlation_id()

        try:
            tenant = validate_single(name, water, electricity, rent)
        except ValidationError as e:
            self._audit_logger.log_validation_failed(
                issues=[issue.model_dump(mode="json") for issue in e.issues],
                correlation_id=correlation_id,
            )
            raise

        async with self._mutation_lock:
            try:
                (record,) = await self._storage.insert_tenants([tenant])
            except StorageError as e:
                self._audit_logger.log_store_error("insert", str(e), correlation_id)
                raise

            self._audit_logger.log_tenant_added(record.id, record.name, correlation_id)
            await self._refresh_after_mutation()

        return record

    async def import_csv(self, content: str) -> ImportResult:
        """
        Validate a CSV document and store every row in one insert.

        If any line has an error nothing is stored and the returned
        result lists the problems. Otherwise `imported_count` is set.

        Raises:
            StorageError: if the store rejects the batch (nothing is stored)
        """
        correlation_id = create_correlation_id()

        result = validate_csv(
            content,
            header_mode=self.header_mode,
            max_rows=self._settings.max_import_rows,
        )

        if not result.can_import:
            self._audit_logger.log_import_rejected(
                import_id=result.import_id,
                error_count=result.error_count,
                issues=[issue.model_dump(mode="json") for issue in result.issues],
                correlation_id=correlation_id,
            )
            return result

        async with self._mutation_lock:
            try:
                records = await self._storage.insert_tenants(result.records)
            except StorageError as e:
                self._audit_logger.log_store_error("import", str(e), correlation_id)
                raise

            self._audit_logger.log_tenants_imported(
                import_id=result.import_id,
                count=len(records),
                header_skipped=result.header_skipped,
                correlation_id=correlation_id,
            )
            await self._refresh_after_mutation()

        return result.model_copy(update={"imported_count": len(records)})

    async def import_file(self, data: bytes) -> ImportResult:
        """
        Import an uploaded CSV file.

        Raises:
            IngestionError: if the file is too large or cannot be decoded
            StorageError: if the store rejects the batch
        """
        content = decode_upload(data, max_bytes=self._settings.max_upload_size_bytes)
        return await self.import_csv(content)

    async def delete_tenant(self, tenant_id: UUID) -> bool:
        """
        Delete a tenant by id.

        Returns False if no such tenant exists any more.

        Raises:
            StorageError: if the store rejects the delete
        """
        correlation_id = create_correlation_id()

        async with self._mutation_lock:
            try:
                found = await self._storage.delete_tenant(tenant_id)
            except StorageError as e:
                self._audit_logger.log_store_error("delete", str(e), correlation_id)
                raise

            self._audit_logger.log_tenant_deleted(tenant_id, found, correlation_id)
            await self._refresh_after_mutation()

        return found

    # -------------------------------------------------------------------------
    # Live updates
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """
        Load the list and start listening for store changes.

        The store only holds a weak reference to this session: if the
        session is dropped without `stop()`, its subscription is removed
        when it is garbage collected.
        """
        if self._subscription is None:
            self._subscription = self._storage.subscribe(_weak_listener(self))
            self._release = weakref.finalize(
                self, self._storage.unsubscribe, self._subscription
            )
            self._audit_logger.log_subscription(TENANTS_TABLE, active=True)
        await self.refresh()

    def stop(self) -> None:
        """Stop listening for store changes."""
        if self._subscription is not None:
            self._release()
            self._release = None
            self._subscription = None
            self._audit_logger.log_subscription(TENANTS_TABLE, active=False)

    async def _refresh_after_mutation(self) -> None:
        # A listening session has already refreshed from its own change event
        if not self.is_listening:
            await self.refresh()

    async def _on_change(self, event: ChangeEvent) -> None:
        self._audit_logger.log_change_received(
            event.change_type.value, event.record_ids
        )
        if self._settings.incremental_refresh:
            self._tenants = tuple(apply_change(self._tenants, event))
        else:
            await self.refresh()


def _weak_listener(session: TenantSession) -> ChangeCallback:
    """Change callback that does not keep `session` alive."""
    on_change = weakref.WeakMethod(session._on_change)

    async def listener(event: ChangeEvent) -> None:
        handler = on_change()
        if handler is not None:
            await handler(event)

    return listener


def create_storage(use_storage: bool = True) -> TenantStorageInterface:
    """
    Build the configured store.

    Falls back to in-memory storage when Google Sheets is not configured
    or `use_storage` is False.
    """
    if use_storage:
        try:
            return GoogleSheetsTenantStorage(
                GoogleSheetsClient(get_settings().google_sheets)
            )
        except Exception as e:
            # Storage not configured - continue in memory
            structlog.get_logger(__name__).warning(
                "storage_not_configured", error=str(e)
            )
    return InMemoryTenantStorage()


def create_app_components(
    use_storage: bool = True,
    storage: Optional[TenantStorageInterface] = None,
) -> tuple[TenantSession, TenantStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use Google Sheets storage.
                    Set to False to keep data in memory.
        storage: An existing store to share between sessions.

    Returns:
        (session, storage)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    storage = storage or create_storage(use_storage)
    session = TenantSession(
        storage=storage,
        audit_logger=AuditLogger(),
        settings=settings.app,
    )
    return session, storage
