"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally small: list, insert, delete and change
notification. Records are never updated in place.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from tenant_billing.models.tenant import (
    ChangeEvent,
    ChangeType,
    NewTenant,
    TenantRecord,
)
from tenant_billing.services.realtime import (
    ChangeCallback,
    ChangeChannel,
    Subscription,
)


TENANTS_TABLE = "tenants"


class TenantStorageInterface(ABC):
    """
    Abstract interface for tenant storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement the abstract methods. Change notification is shared:
    implementations call `_publish` after every successful mutation.
    """

    def __init__(self, channel: Optional[ChangeChannel] = None):
        self._channel = channel or ChangeChannel()

    @property
    def channel(self) -> ChangeChannel:
        return self._channel

    @abstractmethod
    async def list_tenants(self) -> list[TenantRecord]:
        """
        List all tenants, newest first.

        Returns:
            Records ordered by created_at descending

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def insert_tenants(self, tenants: list[NewTenant]) -> list[TenantRecord]:
        """
        Insert one or many tenants in a single operation.

        The store assigns id and created_at. If any row is rejected,
        none are stored.

        Args:
            tenants: Rows to insert

        Returns:
            The stored records, in input order

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def delete_tenant(self, tenant_id: UUID) -> bool:
        """
        Delete a tenant by ID.

        Args:
            tenant_id: The tenant's unique identifier

        Returns:
            True if a row was removed, False if none matched

        Raises:
            StorageError: If the delete fails
        """
        pass

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Call `callback` with a ChangeEvent after every insert or delete."""
        return self._channel.subscribe(TENANTS_TABLE, callback)

    def unsubscribe(self, subscription: Subscription) -> bool:
        return self._channel.unsubscribe(subscription)

    async def _publish(
        self,
        change_type: ChangeType,
        records: list[TenantRecord],
    ) -> None:
        await self._channel.publish(ChangeEvent(
            table=TENANTS_TABLE,
            change_type=change_type,
            records=records,
        ))


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
