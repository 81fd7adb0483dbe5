"""
Инфраструктурный слой контекста журнала операций.
"""

import threading
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..booking.infrastructure import read_json_list, write_json_atomic
from ..shared_kernel import StorageError
from .domain import AuditEntry
from .interfaces import IAuditLog


class InMemoryAuditLog(IAuditLog):
    """In-memory реализация журнала операций."""

    def __init__(self, entries: Optional[List[AuditEntry]] = None) -> None:
        self._entries: List[AuditEntry] = list(entries or [])
        self._lock = threading.Lock()

    def append(self, entry: AuditEntry) -> None:
        with self._lock:
            entries = self._entries + [entry.model_copy(deep=True)]
            self._write(entries)
            self._entries = entries

    def list_all(self) -> List[AuditEntry]:
        """Копии записей: сохраненные снимки не меняются снаружи."""
        return [entry.model_copy(deep=True) for entry in self._entries]

    def _write(self, entries: List[AuditEntry]) -> None:
        pass


class JsonFileAuditLog(InMemoryAuditLog):
    """Журнал операций, сохраняемый в JSON-файл после каждой записи."""

    def __init__(self, file_path: Union[str, Path]) -> None:
        self._file_path = Path(file_path)
        super().__init__(self._load_data())

    def _load_data(self) -> List[AuditEntry]:
        try:
            return [AuditEntry.model_validate(item) for item in read_json_list(self._file_path)]
        except (OSError, ValueError, PydanticValidationError) as e:
            raise StorageError(f"Failed to load audit log from {self._file_path}: {e}") from e

    def _write(self, entries: List[AuditEntry]) -> None:
        data = [entry.model_dump(mode="json") for entry in entries]
        try:
            write_json_atomic(self._file_path, data)
        except OSError as e:
            raise StorageError(f"Failed to write audit log to {self._file_path}: {e}") from e
