# ==============================================
# Backup Stores
# ==============================================
#
# PURPOSE:
#   Persistence boundary for BackupRecord. The manager only ever
#   calls these five methods, so swapping memory for MySQL
#   changes nothing above this layer.
#
# CLASSES:
# --------
# - BackupStore (abstract)
#     save(record) -> None          one call = whole snapshot or nothing
#     get(backup_id) -> BackupRecord | None
#     list_for_record(record_id) -> list[BackupRecord]   newest first
#     delete(backup_id) -> bool     True if a row was removed
#     record_ids() -> list          records that have at least one backup
#
# - MemoryBackupStore
#     Dict-backed; used by tests and the CLI when no DB is configured.
#
# ==============================================

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .backup_record import BackupRecord


class BackupStore(ABC):

    @abstractmethod
    def save(self, record: BackupRecord) -> None:
        ...

    @abstractmethod
    def get(self, backup_id: str) -> Optional[BackupRecord]:
        ...

    @abstractmethod
    def list_for_record(self, record_id) -> List[BackupRecord]:
        ...

    @abstractmethod
    def delete(self, backup_id: str) -> bool:
        ...

    @abstractmethod
    def record_ids(self) -> List[Any]:
        ...


class MemoryBackupStore(BackupStore):
    """
    In-process store.

    Records are copied in and out. Insertion order breaks ties between
    backups created within the same timestamp.
    """

    def __init__(self):
        self._records: Dict[str, Tuple[int, BackupRecord]] = {}
        self._sequence = 0

    def save(self, record: BackupRecord) -> None:
        if record.backup_id in self._records:
            raise ValueError(f"Backup '{record.backup_id}' already exists")
        self._sequence += 1
        self._records[record.backup_id] = (self._sequence, copy.deepcopy(record))

    def get(self, backup_id: str) -> Optional[BackupRecord]:
        entry = self._records.get(backup_id)
        return copy.deepcopy(entry[1]) if entry else None

    def list_for_record(self, record_id) -> List[BackupRecord]:
        entries = [entry for entry in self._records.values() if entry[1].record_id == record_id]
        entries.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return [copy.deepcopy(record) for _, record in entries]

    def delete(self, backup_id: str) -> bool:
        return self._records.pop(backup_id, None) is not None

    def record_ids(self) -> List[Any]:
        seen = []
        for _, record in self._records.values():
            if record.record_id not in seen:
                seen.append(record.record_id)
        return seen

    def __len__(self) -> int:
        return len(self._records)
