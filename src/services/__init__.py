"""Services package."""

from src.services.storage import (
    AuditStorageInterface,
    FinanceStorage,
    InMemoryAuditStorage,
    InMemoryBackend,
    JsonFileBackend,
    JsonLinesAuditStorage,
    KeyValueBackend,
    StorageError,
    StorageUnavailableError,
    create_backend,
)

__all__ = [
    "AuditStorageInterface",
    "FinanceStorage",
    "InMemoryAuditStorage",
    "InMemoryBackend",
    "JsonFileBackend",
    "JsonLinesAuditStorage",
    "KeyValueBackend",
    "StorageError",
    "StorageUnavailableError",
    "create_backend",
]
