"""
Audit Trail Storage

Audit events are append-only. The file implementation writes one JSON
object per line so the trail can be tailed, grepped or loaded into a
dataframe without any tooling of ours.
"""

import json
from pathlib import Path
from typing import Union

import structlog
from pydantic import ValidationError

from src.models.audit import AuditEvent
from src.services.storage.interface import AuditStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class InMemoryAuditStorage(AuditStorageInterface):
    """Keeps events in a list; used in tests and when no file is configured."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]


class JsonLinesAuditStorage(AuditStorageInterface):
    """Appends events to a JSON-lines file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            # Don't raise - audit logging should not break the main flow
            logger.error("audit_write_failed", path=str(self._path), error=str(e))
            return False

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get recent events, newest first. Malformed lines are skipped."""
        if not self._path.exists():
            return []

        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in lines:
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError):
                continue

        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
