# ==============================================
# BackupManager
# ==============================================
#
# PURPOSE:
#   Snapshot field values before a clone overwrites them, and put
#   them back on request. Also applies the retention policy.
#
# CLASS: BackupManager
# --------------------
#
#   Constructor:
#   ------------
#   - __init__(provider, store, retention_days=30, max_count=100,
#              detector=None, clock=utc_now)
#       retention_days: backups older than this may be removed (0 = off)
#       max_count:      newest N per record are always kept (0 = off);
#                       with both set, a backup goes only when it fails both
#       detector:       FieldDetector whose cache is cleared on restore
#
#   Methods:
#   --------
#   - create_backup(record_id, actor_id, field_keys) -> backup_id
#       Raises BackupError; nothing is stored on failure.
#   - take_snapshot(record_id, actor_id, field_keys) -> BackupRecord
#       Same as create_backup, returns the stored record.
#   - get_backup(backup_id) -> BackupRecord | None
#   - list_backups(record_id) -> list[BackupSummary]    newest first
#   - restore_backup(backup_id) -> bool                 never raises
#   - delete_backup(backup_id) -> bool                  idempotent
#   - enforce_retention(record_id) -> int               number deleted
#   - cleanup_all() -> int
#
# BACKUP ID FORMAT:
# -----------------
#   backup_<record_id>_<unix timestamp>_<8 hex chars>
#
# ==============================================

import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from clone_fields.schema import Leaf, SchemaProvider, ValueNode, build_tree, copy_tree, to_raw
from .backup_record import BackupRecord, BackupSummary, utc_now
from .backup_store import BackupStore


class BackupError(RuntimeError):
    """A snapshot could not be read or stored."""


class BackupManager:
    """
    Creates, restores and prunes field snapshots.
    """

    def __init__(
        self,
        provider: SchemaProvider,
        store: BackupStore,
        retention_days: int = 30,
        max_count: int = 100,
        detector=None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.provider = provider
        self.store = store
        self.retention_days = max(0, int(retention_days))
        self.max_count = max(0, int(max_count))
        self.detector = detector
        self._clock = clock

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_backup(self, record_id, actor_id, field_keys: List[str]) -> str:
        """
        Snapshot the current values of field_keys on record_id.

        Args:
            record_id: Record to snapshot
            actor_id: Who triggered the backup
            field_keys: Exactly the fields to capture

        Returns:
            The new backup_id

        Raises:
            BackupError: If any value could not be read or the store failed
        """
        return self.take_snapshot(record_id, actor_id, field_keys).backup_id

    def take_snapshot(self, record_id, actor_id, field_keys: List[str]) -> BackupRecord:
        """
        Process:
        1. Read and serialise every requested field (all or nothing)
        2. Persist one BackupRecord with a single store call
        3. Apply retention for the record (failures only warn)
        """
        if not self.provider.record_exists(record_id):
            raise BackupError(f"Record {record_id} does not exist")

        snapshot: Dict[str, Any] = {}
        field_meta: Dict[str, Dict[str, str]] = {}

        for field_key in dict.fromkeys(field_keys):
            try:
                definition = self.provider.find_definition(record_id, field_key)
                raw = self.provider.value_of(record_id, field_key)
                snapshot[field_key] = to_raw(copy_tree(self._tree_of(definition, raw)))
            except Exception as e:
                raise BackupError(f"Could not read field '{field_key}' on record {record_id}: {e}") from e

            field_meta[field_key] = {
                "label": definition.label if definition else field_key,
                "type": definition.type if definition else "unknown",
            }

        created_at = self._clock()
        record = BackupRecord(
            backup_id=self._new_backup_id(record_id, created_at),
            record_id=record_id,
            actor_id=actor_id,
            snapshot=snapshot,
            created_at=created_at,
            field_meta=field_meta,
        )

        try:
            self.store.save(record)
        except Exception as e:
            raise BackupError(f"Could not store backup for record {record_id}: {e}") from e

        print(f"✓ Created backup {record.backup_id} ({record.field_count} fields)")

        try:
            self.enforce_retention(record_id)
        except Exception as e:
            print(f"⚠ Retention cleanup failed for record {record_id}: {e}")

        return record

    @staticmethod
    def _new_backup_id(record_id, created_at: datetime) -> str:
        return f"backup_{record_id}_{int(created_at.timestamp())}_{uuid.uuid4().hex[:8]}"

    @staticmethod
    def _tree_of(definition, raw) -> ValueNode:
        """
        Parse a stored value, keeping it as one leaf when its shape no
        longer matches the definition (legacy data, changed schema).
        """
        try:
            return build_tree(definition, raw)
        except ValueError:
            return Leaf(raw, definition)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_backup(self, backup_id: str) -> Optional[BackupRecord]:
        return self.store.get(backup_id)

    def list_backups(self, record_id) -> List[BackupSummary]:
        """Summaries of every backup of a record, newest first."""
        return [record.summary() for record in self.store.list_for_record(record_id)]

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def restore_backup(self, backup_id: str) -> bool:
        """
        Write a snapshot back onto its record.

        Every value tree is rebuilt before the first write. If a write
        fails, fields already written get their pre-restore values back.

        Returns:
            True if every field was restored, False otherwise
        """
        try:
            record = self.store.get(backup_id)
            if record is None:
                print(f"✗ Backup {backup_id} not found")
                return False

            record_id = record.record_id
            if not self.provider.record_exists(record_id):
                print(f"✗ Record {record_id} of backup {backup_id} no longer exists")
                return False

            restored = {}
            for field_key, raw in record.snapshot.items():
                definition = self.provider.find_definition(record_id, field_key)
                restored[field_key] = to_raw(copy_tree(self._tree_of(definition, raw)))

            current = {
                field_key: self.provider.value_of(record_id, field_key)
                for field_key in restored
            }
        except Exception as e:
            print(f"✗ Restore of {backup_id} failed before writing: {e}")
            return False

        written: List[str] = []
        for field_key, value in restored.items():
            try:
                ok = self.provider.set_value(record_id, field_key, value)
            except Exception as e:
                print(f"✗ Restore of '{field_key}' failed: {e}")
                ok = False

            if not ok:
                self._roll_back(record_id, written, current)
                return False
            written.append(field_key)

        if self.detector is not None:
            self.detector.invalidate(record_id)

        print(f"✓ Restored backup {backup_id} ({len(written)} fields)")
        return True

    def _roll_back(self, record_id, written: List[str], previous: Dict[str, Any]) -> None:
        for field_key in reversed(written):
            try:
                self.provider.set_value(record_id, field_key, previous[field_key])
            except Exception as e:
                print(f"⚠ Could not roll back '{field_key}' on record {record_id}: {e}")
        if self.detector is not None:
            self.detector.invalidate(record_id)

    # ------------------------------------------------------------------
    # Delete / retention
    # ------------------------------------------------------------------

    def delete_backup(self, backup_id: str) -> bool:
        """Delete a backup. An id that does not exist counts as deleted."""
        try:
            self.store.delete(backup_id)
            return True
        except Exception as e:
            print(f"✗ Could not delete backup {backup_id}: {e}")
            return False

    def enforce_retention(self, record_id) -> int:
        """
        Delete a record's backups that fall outside the policy.

        With both limits set, a backup goes only when it is older than
        retention_days AND outside the max_count newest, so nothing
        younger than the age threshold is ever removed. With one limit
        set (the other 0), that limit alone decides. Deletion runs
        oldest first.

        Returns:
            Number of backups deleted
        """
        backups = self.store.list_for_record(record_id)
        if not backups:
            return 0

        cutoff = None
        if self.retention_days > 0:
            cutoff = self._clock() - timedelta(days=self.retention_days)

        expired = [
            record for rank, record in enumerate(backups)
            if self._is_expired(rank, record, cutoff)
        ]

        deleted = 0
        for record in reversed(expired):
            if self.store.delete(record.backup_id):
                deleted += 1

        if deleted:
            print(f"✓ Retention removed {deleted} backup(s) of record {record_id}")
        return deleted

    def _is_expired(self, rank: int, record: BackupRecord, cutoff: Optional[datetime]) -> bool:
        over_count = self.max_count > 0 and rank >= self.max_count
        too_old = record.is_older_than(cutoff)

        if self.max_count > 0 and cutoff is not None:
            return over_count and too_old
        return over_count or too_old

    def cleanup_all(self) -> int:
        """Apply retention to every record that has backups."""
        total = 0
        for record_id in self.store.record_ids():
            total += self.enforce_retention(record_id)
        return total
