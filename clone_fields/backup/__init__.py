# ==============================================
# TOPIC 4: BACKUP & RESTORE
# ==============================================
#
# This package snapshots a record's field values before a clone
# changes them, restores snapshots, and prunes old ones.
#
# Modules:
# --------
# - backup_record.py       → BackupRecord / BackupSummary
# - backup_store.py        → BackupStore interface + in-memory store
# - mysql_backup_store.py  → Durable store on a MySQL table
# - backup_manager.py      → Create / list / restore / delete / retention
#
# ==============================================

from .backup_record import BackupRecord, BackupSummary, utc_now
from .backup_store import BackupStore, MemoryBackupStore
from .mysql_backup_store import MySQLBackupStore
from .backup_manager import BackupManager, BackupError

__all__ = [
    "BackupRecord",
    "BackupSummary",
    "utc_now",
    "BackupStore",
    "MemoryBackupStore",
    "MySQLBackupStore",
    "BackupManager",
    "BackupError",
]
