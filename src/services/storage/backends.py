"""
Key-Value Backends

Two media are supported:
- InMemoryBackend: a dict, lost when the process ends (tests, demos)
- JsonFileBackend: one JSON document on disk mapping keys to strings,
  the local equivalent of a browser's localStorage

TRADEOFFS:
- Last write wins; there is a single local writer
- Each write rewrites the whole document (fine for personal volumes)
- Writes go through a temporary file and an atomic rename, so a crash
  leaves either the old or the new document, never half of one
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

import structlog

from src.config import StorageSettings
from src.services.storage.interface import (
    KeyValueBackend,
    StorageUnavailableError,
)


logger = structlog.get_logger(__name__)


class InMemoryBackend(KeyValueBackend):
    """Process-local dict backend."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileBackend(KeyValueBackend):
    """
    JSON document on disk: {"finance_data": "<json string>", ...}.

    A document that is not a JSON object is treated as an empty medium and
    is overwritten on the next write.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load_document(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.warning("storage_document_corrupted", path=str(self._path), error=str(e))
            return {}
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {self._path}: {e}")

        try:
            document = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            logger.warning("storage_document_corrupted", path=str(self._path), error=str(e))
            return {}

        if not isinstance(document, dict):
            logger.warning(
                "storage_document_corrupted",
                path=str(self._path),
                error="document is not a JSON object",
            )
            return {}
        return document

    def get(self, key: str) -> Optional[str]:
        value = self._load_document().get(key)
        if value is None or isinstance(value, str):
            return value
        # Older documents may hold the value inline instead of as a string
        return json.dumps(value, ensure_ascii=False)

    def set(self, key: str, value: str) -> None:
        document = self._load_document()
        document[key] = value

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(document, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self._path}: {e}")


def create_backend(settings: StorageSettings) -> KeyValueBackend:
    """Build the backend selected in configuration."""
    if settings.backend == "memory":
        return InMemoryBackend()
    return JsonFileBackend(settings.data_file)
