# ==============================================
# CloneService — Composition Root
# ==============================================
#
# PURPOSE:
#   Builds the detector, cloner and backup manager once, wires
#   them together, and exposes the request-level handlers that a
#   transport (CLI, web endpoint) calls. Callers use this class
#   only; everything else is internal.
#
# HOW THE PIECES CONNECT:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                      CloneService                        │
#   │                                                          │
#   │   SchemaProvider ◄──────────────┬───────────────┐        │
#   │        ▲                        │               │        │
#   │        │                        │               │        │
#   │   FieldDetector ◄── invalidate ─┤               │        │
#   │        ▲                        │               │        │
#   │        │                 FieldCloner ──► BackupManager   │
#   │        │                        │               │        │
#   │        │                        ▼               ▼        │
#   │        │                 EventDispatcher   BackupStore   │
#   │        │                   (audit line)                  │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: CloneService
# -------------------
#
#   Constructor:
#   ------------
#   - __init__(provider, backup_store=None, config=None,
#              authorizer=None, clients=None, resolver=None)
#   - from_config(config=None) -> CloneService
#       Connects MongoDB (values) and MySQL (backups), loads the
#       field-group registry from config.schema_dir. Reference
#       fields are checked against the same MongoDB database.
#
#   Handlers (return {"success", "data"} dicts, never raise):
#   ----------------------------------------------------------
#   - get_source_fields(source_record_id, target_record_id=None)
#   - get_field_statistics(record_id)
#   - validate_selection(source_record_id, target_record_id, field_keys)
#   - execute_clone(payload, actor_id=None)
#   - list_backups(record_id)
#   - restore_backup(backup_id)
#   - delete_backup(backup_id)
#   - cleanup_backups()
#
#   - close() / context manager: disconnect owned DB clients
#
# ==============================================

from typing import Any, Dict, List, Optional

from clone_fields.config import AppConfig, get_config
from clone_fields.schema import FieldGroupRegistry, MongoSchemaProvider, SchemaProvider
from clone_fields.storage import MongoClient, MySQLClient
from clone_fields.detection import FieldDetector
from clone_fields.cloning import (
    Authorizer,
    CloneEvent,
    CloneOptions,
    EventDispatcher,
    FieldCloner,
    MongoReferenceResolver,
    ReferenceResolver,
)
from clone_fields.backup import BackupManager, BackupStore, MemoryBackupStore, MySQLBackupStore
from clone_fields import transport


class CloneService:
    """
    Request-level entry point for field cloning and backups.
    """

    def __init__(
        self,
        provider: SchemaProvider,
        backup_store: Optional[BackupStore] = None,
        config: Optional[AppConfig] = None,
        authorizer: Optional[Authorizer] = None,
        clients: Optional[List[Any]] = None,
        resolver: Optional[ReferenceResolver] = None
    ):
        """
        Wire up all services around one schema provider.

        Args:
            provider: Field schema and value access
            backup_store: Where snapshots go; in-memory if None
            config: Application configuration. If None, loads from environment.
            authorizer: Write permission check for clones
            clients: DB clients owned by this service, closed by close()
            resolver: Existence checks for reference fields, none if None
        """
        self._config = config or get_config()
        self._clients = list(clients or [])

        self.defaults = CloneOptions(
            create_backup=self._config.clone.create_backup,
            overwrite_existing=self._config.clone.overwrite_existing,
            validate_data=self._config.clone.validate_data,
            copy_attachments=self._config.clone.copy_attachments,
        )

        # An empty store has len() == 0, so test against None
        if backup_store is None:
            backup_store = MemoryBackupStore()

        self.provider = provider
        self.detector = FieldDetector(provider)
        self.backup_manager = BackupManager(
            provider,
            backup_store,
            retention_days=self._config.backup.retention_days,
            max_count=self._config.backup.max_count,
            detector=self.detector,
        )
        self.dispatcher = EventDispatcher()
        self.dispatcher.subscribe(self._log_clone)
        self.cloner = FieldCloner(
            provider,
            self.detector,
            backup_manager=self.backup_manager,
            authorizer=authorizer,
            dispatcher=self.dispatcher,
            resolver=resolver,
            enabled_content_types=self._config.enabled_content_types,
        )

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None, authorizer: Optional[Authorizer] = None) -> "CloneService":
        """
        Build a service backed by MongoDB (values) and MySQL (backups).

        Process:
        1. Connect both databases
        2. Load field groups from config.schema_dir
        3. Make sure the records index and backup table exist

        If any step fails, both clients are disconnected before the
        error propagates.
        """
        config = config or get_config()

        mongo_client = MongoClient(
            host=config.mongo.host,
            port=config.mongo.port,
            database=config.mongo.database,
            user=config.mongo.user,
            password=config.mongo.password
        )
        mysql_client = MySQLClient(
            host=config.mysql.host,
            port=config.mysql.port,
            user=config.mysql.user,
            password=config.mysql.password,
            database=config.mysql.database
        )
        clients = [mongo_client, mysql_client]
        try:
            mongo_client.connect()
            mysql_client.connect()

            registry = FieldGroupRegistry(config.schema_dir)
            registry.load()

            provider = MongoSchemaProvider(registry, mongo_client, config.mongo.records_collection)
            provider.ensure_indexes()

            store = MySQLBackupStore(mysql_client, config.mysql.backup_table)
            store.ensure_table()

            resolver = MongoReferenceResolver(mongo_client, config.mongo.records_collection)
        except Exception as e:
            print(f"✗ Clone service setup failed: {e}")
            # disconnect() is a no-op on a client that never connected
            for client in reversed(clients):
                client.disconnect()
            raise

        print(f"✓ Clone service ready ({len(registry.all_groups())} field groups)")
        return cls(
            provider, store, config=config, authorizer=authorizer, clients=clients, resolver=resolver
        )

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def get_source_fields(self, source_record_id, target_record_id=None) -> Dict[str, Any]:
        """
        Fields available on a source record, with statistics.

        With a target, each field also carries will_overwrite.
        """
        try:
            source_record_id = transport.parse_record_id(source_record_id)
            if target_record_id is not None:
                target_record_id = transport.parse_record_id(target_record_id)
                groups = self.detector.compare_fields(source_record_id, target_record_id)
            else:
                groups = self.detector.list_fields(source_record_id)
            statistics = self.detector.field_statistics(source_record_id)
            return transport.encode_fields(groups, statistics)
        except Exception as e:
            print(f"✗ Failed to load fields: {e}")
            return transport.encode_failure(f"Failed to load field data: {e}")

    def get_field_statistics(self, record_id) -> Dict[str, Any]:
        try:
            record_id = transport.parse_record_id(record_id)
            return transport.encode_statistics(self.detector.field_statistics(record_id))
        except Exception as e:
            print(f"✗ Failed to compute statistics: {e}")
            return transport.encode_failure(f"Failed to compute statistics: {e}")

    def validate_selection(self, source_record_id, target_record_id, field_keys: List[str]) -> Dict[str, Any]:
        try:
            report = self.detector.validate_selection(
                transport.parse_record_id(source_record_id),
                transport.parse_record_id(target_record_id),
                list(dict.fromkeys(field_keys or [])),
            )
            return transport.encode_selection(report)
        except Exception as e:
            print(f"✗ Selection check failed: {e}")
            return transport.encode_failure(f"Validation failed: {e}")

    # ------------------------------------------------------------------
    # Cloning
    # ------------------------------------------------------------------

    def execute_clone(self, payload: Dict[str, Any], actor_id=None) -> Dict[str, Any]:
        """
        Decode, run and encode one clone request.

        Args:
            payload: Decoded JSON request body
            actor_id: Authenticated caller

        Returns:
            Encoded CloneResult, or a failure envelope for malformed payloads
        """
        try:
            request = transport.decode_clone_request(payload, actor_id, self.defaults)
        except ValueError as e:
            print(f"✗ Invalid clone request: {e}")
            return transport.encode_failure(f"Missing or invalid parameters: {e}")

        try:
            result = self.cloner.clone(request)
        except Exception as e:
            print(f"✗ Clone operation failed: {e}")
            return transport.encode_failure(f"Clone operation failed: {e}")

        return transport.encode_clone_result(result)

    @staticmethod
    def _log_clone(event: CloneEvent) -> None:
        backup = f", backup {event.backup_id}" if event.backup_id else ""
        print(
            f"✓ Cloned {len(event.cloned_fields)} field(s) "
            f"{event.source_record_id} → {event.target_record_id} "
            f"by {event.actor_id}{backup}"
        )

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def list_backups(self, record_id) -> Dict[str, Any]:
        try:
            record_id = transport.parse_record_id(record_id)
            return transport.encode_backup_list(record_id, self.backup_manager.list_backups(record_id))
        except Exception as e:
            print(f"✗ Failed to list backups: {e}")
            return transport.encode_failure(f"Failed to list backups: {e}")

    def restore_backup(self, backup_id: str) -> Dict[str, Any]:
        if not backup_id:
            return transport.encode_failure("Invalid backup ID")
        return transport.encode_restore(backup_id, self.backup_manager.restore_backup(backup_id))

    def delete_backup(self, backup_id: str) -> Dict[str, Any]:
        if not backup_id:
            return transport.encode_failure("Invalid backup ID")
        return transport.encode_delete(backup_id, self.backup_manager.delete_backup(backup_id))

    def cleanup_backups(self) -> Dict[str, Any]:
        try:
            return transport.encode_cleanup(self.backup_manager.cleanup_all())
        except Exception as e:
            print(f"✗ Backup cleanup failed: {e}")
            return transport.encode_failure(f"Backup cleanup failed: {e}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        for client in self._clients:
            client.disconnect()
        self._clients = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
