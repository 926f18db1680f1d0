# ==============================================
# MySQLClient
# ==============================================
#
# PURPOSE:
#   Manages the MySQL connection used by the backup table.
#   Thin wrapper around PyMySQL: create the database on
#   connect, run parameterised statements, return rows as dicts.
#
# CLASS: MySQLClient
# ------------------
#   Stateful — holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database)
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection. Create database if it doesn't exist.
#
#   - disconnect() -> None
#
#   - table_exists(table_name: str) -> bool
#       Query INFORMATION_SCHEMA.
#
#   - execute(query: str, params: tuple = None) -> int
#       Execute a statement and commit. Return affected row count.
#
#   - fetch_all(query: str, params: tuple = None) -> list[dict]
#   - fetch_one(query: str, params: tuple = None) -> dict | None
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLClient(...) as db:` usage.
#
# ==============================================

from typing import Any, Optional, cast
import pymysql
import pymysql.cursors


class MySQLClient:
    def __init__(self, host, port, user, password, database):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    def connect(self) -> None:
        self.connection = pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            charset="utf8mb4",
        )
        cursor = self.connection.cursor()
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS {self.database}")
        cursor.execute(f"USE {self.database}")
        cursor.close()
        print("Connected to MySQL successfully.")

    def disconnect(self) -> None:
        if self.connection:
            self.connection.close()
            self.connection = None
            print("Disconnected from MySQL.")

    def _require_connection(self):
        if self.connection is None:
            raise RuntimeError("Not connected to MySQL")
        return self.connection

    def table_exists(self, table_name: str) -> bool:
        row = self.fetch_one(
            "SELECT COUNT(*) AS n FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s",
            (self.database, table_name)
        )
        if row is None:
            raise RuntimeError("COUNT query returned no rows")
        return row["n"] > 0

    def execute(self, query: str, params: tuple | None = None) -> int:
        # Execute a statement in its own transaction
        connection = self._require_connection()
        cursor = connection.cursor()
        try:
            affected = cursor.execute(query, params) if params is not None else cursor.execute(query)
            connection.commit()
            return affected
        except Exception:
            connection.rollback()
            raise
        finally:
            cursor.close()

    def fetch_all(self, query: str, params: tuple | None = None) -> list[dict]:
        connection = self._require_connection()
        cursor = connection.cursor(pymysql.cursors.DictCursor)
        try:
            if params is not None:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            return cast(list[dict[str, Any]], cursor.fetchall())
        finally:
            cursor.close()

    def fetch_one(self, query: str, params: tuple | None = None) -> Optional[dict]:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
