"""
In-Memory Storage Implementation

Keeps tenants in a process-local list. Used by the tests and as the
fallback backend when Google Sheets is not configured, in which case
data lives only as long as the process.
"""

import itertools
from typing import Optional
from uuid import UUID

from tenant_billing.models.tenant import (
    ChangeType,
    NewTenant,
    TenantRecord,
    utc_now,
)
from tenant_billing.services.realtime import ChangeChannel
from tenant_billing.services.storage.interface import (
    StorageError,
    TenantStorageInterface,
)


class InMemoryTenantStorage(TenantStorageInterface):
    """
    Process-local tenant storage.

    Rows inserted in one call share a created_at; ties are ordered by
    insertion sequence so listings are stable.
    """

    def __init__(self, channel: Optional[ChangeChannel] = None):
        super().__init__(channel)
        self._rows: list[tuple[int, TenantRecord]] = []
        self._sequence = itertools.count()

    async def list_tenants(self) -> list[TenantRecord]:
        rows = sorted(
            self._rows,
            key=lambda row: (row[1].created_at, row[0]),
            reverse=True,
        )
        return [record for _, record in rows]

    async def insert_tenants(self, tenants: list[NewTenant]) -> list[TenantRecord]:
        if not tenants:
            return []

        created_at = utc_now()
        try:
            records = [
                TenantRecord.from_new(tenant, created_at=created_at)
                for tenant in tenants
            ]
        except ValueError as e:
            raise StorageError(f"Failed to insert tenants: {e}") from e

        # All records are built before any is stored
        self._rows = self._rows + [
            (next(self._sequence), record) for record in records
        ]
        await self._publish(ChangeType.INSERT, records)
        return records

    async def delete_tenant(self, tenant_id: UUID) -> bool:
        removed = [record for _, record in self._rows if record.id == tenant_id]
        if not removed:
            return False

        self._rows = [row for row in self._rows if row[1].id != tenant_id]
        await self._publish(ChangeType.DELETE, removed)
        return True
