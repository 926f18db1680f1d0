# ==============================================
# STORAGE (MySQL + MongoDB)
# ==============================================
#
# Connection wrappers used by the concrete schema provider
# and backup store.
#
# Modules:
# --------
# - mysql_client.py    → MySQL connection (backup table)
# - mongo_client.py    → MongoDB connection (record field values)
#
# ==============================================

from .mysql_client import MySQLClient
from .mongo_client import MongoClient

__all__ = [
    "MySQLClient",
    "MongoClient",
]
