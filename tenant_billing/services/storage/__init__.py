"""
Storage Services Package

Provides the abstract interface and concrete implementations for tenant storage.
Google Sheets is the hosted backend; the in-memory store backs tests and
unconfigured installs.
"""

from tenant_billing.services.storage.interface import (
    TENANTS_TABLE,
    ConnectionError,
    StorageError,
    TenantStorageInterface,
)
from tenant_billing.services.storage.memory import InMemoryTenantStorage
from tenant_billing.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTenantStorage,
)

__all__ = [
    # Interface
    "TENANTS_TABLE",
    "TenantStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "InMemoryTenantStorage",
    "GoogleSheetsClient",
    "GoogleSheetsTenantStorage",
]
