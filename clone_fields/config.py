# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - MySQLConfig (dataclass)      → backup table connection
#     host, port, user, password, database, backup_table
#
# - MongoConfig (dataclass)      → record values connection
#     host, port, user, password, database, records_collection
#
# - CloneDefaults (dataclass)    → defaults for options a request omits
#     create_backup: bool        (default True)
#     overwrite_existing: bool   (default False)
#     validate_data: bool        (default True)
#     copy_attachments: bool     (default True)
#
# - BackupConfig (dataclass)     → retention policy
#     retention_days: int       (default 30, 0 disables age cleanup)
#     max_count: int            (default 100, 0 disables count cleanup)
#
# - AppConfig (dataclass)
#     mysql, mongo, clone, backup, schema_dir,
#     enabled_content_types      (CLONE_ENABLED_CONTENT_TYPES, comma
#                                separated; empty allows every type)
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same instance on repeated calls.
#
# USAGE:
# ------
#   from clone_fields.config import get_config
#   config = get_config()
#   print(config.backup.retention_days)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path

from dotenv import load_dotenv

from clone_fields.cloning.options import normalize_bool


@dataclass
class MySQLConfig:
    """MySQL database configuration (backup table)."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"
    database: str = "clone_fields"
    backup_table: str = "field_backups"


@dataclass
class MongoConfig:
    """MongoDB database configuration (record field values)."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "clone_fields"
    records_collection: str = "records"


@dataclass
class CloneDefaults:
    """Option values used when a clone request does not carry them."""
    create_backup: bool = True
    overwrite_existing: bool = False
    validate_data: bool = True
    copy_attachments: bool = True


@dataclass
class BackupConfig:
    """Backup retention policy."""
    retention_days: int = 30
    max_count: int = 100


@dataclass
class AppConfig:
    """Main application configuration."""
    mysql: MySQLConfig = field(default_factory=MySQLConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)
    clone: CloneDefaults = field(default_factory=CloneDefaults)
    backup: BackupConfig = field(default_factory=BackupConfig)
    schema_dir: str = "schema/"
    enabled_content_types: List[str] = field(default_factory=list)


_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    mysql_config = MySQLConfig(
        host=os.getenv("MYSQL_HOST", "localhost"),
        port=int(os.getenv("MYSQL_PORT", "3306")),
        user=os.getenv("MYSQL_USER", "root"),
        password=os.getenv("MYSQL_PASSWORD", "root"),
        database=os.getenv("MYSQL_DATABASE", "clone_fields"),
        backup_table=os.getenv("BACKUP_TABLE", "field_backups")
    )

    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "clone_fields"),
        records_collection=os.getenv("RECORDS_COLLECTION", "records")
    )

    # Flags go through the same allow-list as request options,
    # so CLONE_CREATE_BACKUP=false really means False.
    clone_defaults = CloneDefaults(
        create_backup=normalize_bool(os.getenv("CLONE_CREATE_BACKUP"), True),
        overwrite_existing=normalize_bool(os.getenv("CLONE_OVERWRITE_EXISTING"), False),
        validate_data=normalize_bool(os.getenv("CLONE_VALIDATE_DATA"), True),
        copy_attachments=normalize_bool(os.getenv("CLONE_COPY_ATTACHMENTS"), True)
    )

    backup_config = BackupConfig(
        retention_days=max(0, int(os.getenv("BACKUP_RETENTION_DAYS", "30"))),
        max_count=max(0, int(os.getenv("BACKUP_MAX_COUNT", "100")))
    )

    _config_instance = AppConfig(
        mysql=mysql_config,
        mongo=mongo_config,
        clone=clone_defaults,
        backup=backup_config,
        schema_dir=os.getenv("SCHEMA_DIR", "schema/"),
        enabled_content_types=[
            name.strip()
            for name in os.getenv("CLONE_ENABLED_CONTENT_TYPES", "").split(",")
            if name.strip()
        ]
    )

    return _config_instance
