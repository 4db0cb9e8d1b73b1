"""Services package."""

from tenant_billing.services.realtime import (
    ChangeChannel,
    Subscription,
    apply_change,
)
from tenant_billing.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsTenantStorage,
    InMemoryTenantStorage,
    StorageError,
    TenantStorageInterface,
)

__all__ = [
    # Realtime
    "ChangeChannel",
    "Subscription",
    "apply_change",
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsTenantStorage",
    "InMemoryTenantStorage",
    "StorageError",
    "TenantStorageInterface",
]
