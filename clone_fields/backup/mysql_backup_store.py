# ==============================================
# MySQLBackupStore
# ==============================================
#
# PURPOSE:
#   Durable BackupStore on a MySQL table via MySQLClient.
#
# TABLE (created on ensure_table()):
# ----------------------------------
#   id           BIGINT AUTO_INCREMENT PRIMARY KEY
#   backup_id    VARCHAR(100) UNIQUE
#   record_id    VARCHAR(191)      → str(record_id), indexed
#   actor_id     VARCHAR(191) NULL
#   backup_data  LONGTEXT          → BackupRecord.to_dict() as JSON
#   field_count  INT
#   created_at   DATETIME(6)       → UTC, indexed
#
#   The JSON payload is the source of truth when reading a row
#   back; the other columns exist for lookups and sweeps.
#   Each save is a single INSERT, so a snapshot is stored whole
#   or not at all.
#
# ==============================================

import json
import re
from datetime import timezone
from typing import Any, List, Optional

from clone_fields.storage.mysql_client import MySQLClient
from .backup_record import BackupRecord
from .backup_store import BackupStore

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,63}$")


class MySQLBackupStore(BackupStore):

    def __init__(self, mysql_client: MySQLClient, table_name: str = "field_backups"):
        if not _IDENTIFIER.match(table_name):
            raise ValueError(f"Invalid table name: {table_name!r}")
        self.mysql_client = mysql_client
        self.table_name = table_name

    def ensure_table(self) -> None:
        """Create the backup table and its indexes if missing."""
        if self.mysql_client.table_exists(self.table_name):
            return

        self.mysql_client.execute(
            f"CREATE TABLE IF NOT EXISTS `{self.table_name}` ("
            "id BIGINT AUTO_INCREMENT PRIMARY KEY, "
            "backup_id VARCHAR(100) NOT NULL, "
            "record_id VARCHAR(191) NOT NULL, "
            "actor_id VARCHAR(191) NULL, "
            "backup_data LONGTEXT NOT NULL, "
            "field_count INT NOT NULL DEFAULT 0, "
            "created_at DATETIME(6) NOT NULL, "
            "UNIQUE KEY backup_id (backup_id), "
            "KEY record_id (record_id), "
            "KEY created_at (created_at)"
            ") DEFAULT CHARSET=utf8mb4"
        )
        print(f"✓ Created backup table '{self.table_name}'")

    def save(self, record: BackupRecord) -> None:
        created_at = record.created_at.astimezone(timezone.utc).replace(tzinfo=None)
        self.mysql_client.execute(
            f"INSERT INTO `{self.table_name}` "
            "(backup_id, record_id, actor_id, backup_data, field_count, created_at) "
            "VALUES (%s, %s, %s, %s, %s, %s)",
            (
                record.backup_id,
                str(record.record_id),
                None if record.actor_id is None else str(record.actor_id),
                json.dumps(record.to_dict(), default=str),
                record.field_count,
                created_at,
            )
        )

    def get(self, backup_id: str) -> Optional[BackupRecord]:
        row = self.mysql_client.fetch_one(
            f"SELECT backup_data FROM `{self.table_name}` WHERE backup_id = %s",
            (backup_id,)
        )
        if row is None:
            return None
        return self._to_record(row)

    def list_for_record(self, record_id) -> List[BackupRecord]:
        rows = self.mysql_client.fetch_all(
            f"SELECT backup_data FROM `{self.table_name}` "
            "WHERE record_id = %s ORDER BY created_at DESC, id DESC",
            (str(record_id),)
        )
        records = [self._to_record(row) for row in rows]
        # The column holds str(record_id); 1 and "1" share it
        return [record for record in records if record.record_id == record_id]

    def delete(self, backup_id: str) -> bool:
        affected = self.mysql_client.execute(
            f"DELETE FROM `{self.table_name}` WHERE backup_id = %s",
            (backup_id,)
        )
        return affected > 0

    def record_ids(self) -> List[Any]:
        """
        Distinct record ids with at least one backup, oldest first.

        Reads one payload per distinct record_id column value to get
        the id back with its original type.
        """
        rows = self.mysql_client.fetch_all(
            f"SELECT b.backup_data FROM `{self.table_name}` b "
            f"JOIN (SELECT MIN(id) AS id FROM `{self.table_name}` GROUP BY record_id) first_rows "
            "ON b.id = first_rows.id ORDER BY b.id"
        )
        return [self._to_record(row).record_id for row in rows]

    @staticmethod
    def _to_record(row: dict) -> BackupRecord:
        return BackupRecord.from_dict(json.loads(row["backup_data"]))
