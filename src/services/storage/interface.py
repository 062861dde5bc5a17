"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap the JSON file for another key-value medium later
2. Use in-memory storage for testing
3. Keep the finance logic decoupled from where bytes are kept

The key-value interface is intentionally tiny - the whole ledger lives
under a single key, exactly like a browser's localStorage slot.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.audit import AuditEvent


class KeyValueBackend(ABC):
    """
    Synchronous string key-value medium.

    Implementations raise StorageUnavailableError when the medium cannot
    be reached. They never interpret the stored values.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key was never written

        Raises:
            StorageUnavailableError: If the medium cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageUnavailableError: If the medium cannot be written
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The backing medium cannot be read or written."""
    pass
