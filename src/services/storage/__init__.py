"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The ledger lives in a single key of a key-value medium (a JSON file on
disk by default), designed so the medium is swappable.
"""

from src.services.storage.interface import (
    AuditStorageInterface,
    KeyValueBackend,
    StorageError,
    StorageUnavailableError,
)
from src.services.storage.backends import (
    InMemoryBackend,
    JsonFileBackend,
    create_backend,
)
from src.services.storage.audit_log import (
    InMemoryAuditStorage,
    JsonLinesAuditStorage,
)
from src.services.storage.finance_storage import FinanceStorage, scoped_key

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueBackend",
    # Exceptions
    "StorageError",
    "StorageUnavailableError",
    # Backends
    "InMemoryBackend",
    "JsonFileBackend",
    "create_backend",
    # Audit trail
    "InMemoryAuditStorage",
    "JsonLinesAuditStorage",
    # Accessor
    "FinanceStorage",
    "scoped_key",
]
