# ==============================================
# Tests for CloneService and the CLI
# ==============================================
#
# class TestCloneService: handlers return envelopes, never raise
# class TestFromConfig:   clients released when setup fails
# class TestCli:          argument parsing and dispatch
#
# ==============================================

import json

import pytest

from clone_fields import cli, clone_service
from clone_fields.backup import MemoryBackupStore
from clone_fields.config import AppConfig, CloneDefaults, BackupConfig
from clone_fields.clone_service import CloneService


class TestCloneService:

    def test_execute_clone_with_loose_options(self, service, store, provider):
        response = service.execute_clone(
            {
                "source_record_id": "1",
                "target_record_id": "2",
                "field_keys": ["field_price", "field_gallery"],
                "options": {"create_backup": "true", "overwrite_existing": "1"},
            },
            actor_id="editor",
        )

        assert response["success"] is True
        assert response["data"]["cloned_fields"] == ["field_price", "field_gallery"]
        assert response["data"]["backup_info"]["backup_id"].startswith("backup_2_")
        assert len(store) == 1
        assert provider.value_of(2, "field_price") == "100"

    def test_create_backup_false_string(self, service, store):
        response = service.execute_clone({
            "source_record_id": 1,
            "target_record_id": 2,
            "field_keys": ["field_gallery"],
            "options": {"create_backup": "false"},
        })
        assert response["success"] is True
        assert "backup_info" not in response["data"]
        assert len(store) == 0

    def test_config_defaults_apply(self, provider, store):
        config = AppConfig(clone=CloneDefaults(create_backup=False, overwrite_existing=True))
        service = CloneService(provider, store, config=config)

        response = service.execute_clone({"source_record_id": 1, "target_record_id": 2, "field_keys": ["field_price"]})

        assert response["data"]["cloned_fields"] == ["field_price"]
        assert len(store) == 0

    def test_retention_from_config(self, provider, store):
        config = AppConfig(backup=BackupConfig(retention_days=0, max_count=2))
        service = CloneService(provider, store, config=config)
        for _ in range(4):
            service.execute_clone({"source_record_id": 1, "target_record_id": 2, "field_keys": ["field_price"]})
        assert len(store) == 2

    def test_malformed_payload(self, service):
        response = service.execute_clone({"target_record_id": 2})
        assert response["success"] is False
        assert "invalid parameters" in response["data"]["message"]

    def test_rejected_clone(self, service):
        response = service.execute_clone({"source_record_id": 2, "target_record_id": 2, "field_keys": ["field_price"]})
        assert response["success"] is False
        assert response["data"]["message"] == "Source and target records must be different"

    def test_get_source_fields(self, service):
        response = service.get_source_fields("1", "2")

        assert response["success"] is True
        fields = response["data"]["field_groups"][0]["fields"]
        price = next(item for item in fields if item["key"] == "field_price")
        assert price["will_overwrite"] is True
        assert response["data"]["statistics"]["total_fields"] == 6

    def test_get_source_fields_bad_id(self, service):
        assert service.get_source_fields("")["success"] is False

    def test_statistics_and_selection(self, service):
        assert service.get_field_statistics(10)["data"]["total_fields"] == 0
        report = service.validate_selection(1, 2, ["field_price", "field_missing"])["data"]
        assert report["valid_fields"] == ["field_price"]
        assert report["has_conflicts"] is True

    def test_backup_handlers(self, service, provider):
        clone = service.execute_clone({
            "source_record_id": 1,
            "target_record_id": 2,
            "field_keys": ["field_price", "field_gallery"],
            "options": {"overwrite_existing": True},
        })
        backup_id = clone["data"]["backup_info"]["backup_id"]

        listing = service.list_backups(2)
        assert listing["data"]["count"] == 1
        assert listing["data"]["backups"][0]["backup_id"] == backup_id

        assert service.restore_backup(backup_id)["success"] is True
        assert provider.fields_of(2) == {"field_price": "50"}

        assert service.delete_backup(backup_id)["success"] is True
        assert service.list_backups(2)["data"]["count"] == 0
        assert service.restore_backup(backup_id)["success"] is False
        assert service.restore_backup("")["success"] is False

        assert service.cleanup_backups() == {
            "success": True,
            "data": {"deleted_count": 0, "message": "Deleted 0 old backup(s)"},
        }

    def test_audit_line_printed(self, service, capsys):
        service.execute_clone({"source_record_id": 1, "target_record_id": 2, "field_keys": ["field_gallery"]}, actor_id="editor")
        assert "Cloned 1 field(s) 1 → 2 by editor" in capsys.readouterr().out

    def test_close_disconnects_clients(self, provider, app_config):
        class Client:
            closed = False

            def disconnect(self):
                self.closed = True

        client = Client()
        with CloneService(provider, config=app_config, clients=[client]):
            pass
        assert client.closed

    def test_injected_empty_store_is_used(self, provider, app_config):
        store = MemoryBackupStore()
        service = CloneService(provider, store, config=app_config)

        assert service.backup_manager.store is store
        service.execute_clone({
            "source_record_id": 1,
            "target_record_id": 2,
            "field_keys": ["field_gallery"],
            "options": {"create_backup": True},
        })
        assert len(store) == 1

    def test_no_store_falls_back_to_memory(self, provider, app_config):
        service = CloneService(provider, config=app_config)
        assert isinstance(service.backup_manager.store, MemoryBackupStore)

    def test_warnings_in_response(self, provider, app_config):
        service = CloneService(provider, config=app_config)
        response = service.execute_clone({"source_record_id": 1, "target_record_id": 2, "field_keys": ["field_gallery"]})
        assert response["data"]["warnings"] == []

    def test_enabled_content_types_from_config(self, provider):
        service = CloneService(provider, config=AppConfig(enabled_content_types=["page"]))
        response = service.execute_clone({"source_record_id": 1, "target_record_id": 2, "field_keys": ["field_gallery"]})
        assert response["success"] is False
        assert "not enabled" in response["data"]["message"]


class FakeClient:
    fail_on_connect = False

    def __init__(self, **kwargs):
        self.settings = kwargs
        self.connected = False
        self.disconnected = False

    def connect(self):
        if self.fail_on_connect:
            raise ConnectionError("connection refused")
        self.connected = True

    def disconnect(self):
        self.disconnected = True


class TestFromConfig:

    def test_failed_mysql_connect_disconnects_mongo(self, monkeypatch, app_config, capsys):
        created = {}

        class FakeMongo(FakeClient):
            def __init__(self, **kwargs):
                super().__init__(**kwargs)
                created["mongo"] = self

        class FakeMySQL(FakeClient):
            fail_on_connect = True

            def __init__(self, **kwargs):
                super().__init__(**kwargs)
                created["mysql"] = self

        monkeypatch.setattr(clone_service, "MongoClient", FakeMongo)
        monkeypatch.setattr(clone_service, "MySQLClient", FakeMySQL)

        with pytest.raises(ConnectionError):
            CloneService.from_config(app_config)

        assert created["mongo"].connected
        assert created["mongo"].disconnected
        assert created["mysql"].disconnected
        assert "Clone service setup failed" in capsys.readouterr().out

    def test_failed_schema_load_disconnects_both(self, monkeypatch, tmp_path):
        created = []

        class Recording(FakeClient):
            def __init__(self, **kwargs):
                super().__init__(**kwargs)
                created.append(self)

        def broken_load(self):
            raise IOError("schema directory unreadable")

        monkeypatch.setattr(clone_service, "MongoClient", Recording)
        monkeypatch.setattr(clone_service, "MySQLClient", Recording)
        monkeypatch.setattr(clone_service.FieldGroupRegistry, "load", broken_load)

        with pytest.raises(IOError):
            CloneService.from_config(AppConfig(schema_dir=str(tmp_path)))

        assert len(created) == 2
        assert all(client.connected and client.disconnected for client in created)


class TestCli:

    def run(self, service, capsys, *argv):
        code = cli.main(list(argv), service_factory=lambda: service)
        out = capsys.readouterr().out
        # Status lines come before the JSON document
        return code, json.loads(out[out.index("{"):])

    def test_clone_command(self, service, capsys, provider):
        code, response = self.run(service, capsys, "clone", "1", "2", "field_price", "--overwrite", "--no-backup")

        assert code == 0
        assert response["data"]["cloned_fields"] == ["field_price"]
        assert "backup_info" not in response["data"]
        assert provider.value_of(2, "field_price") == "100"

    def test_clone_payload_leaves_unset_flags_out(self):
        args = cli.build_parser().parse_args(["clone", "1", "2", "field_price"])
        assert cli.clone_payload(args)["options"] == {}

    def test_rejected_clone_exit_code(self, service, capsys):
        code, response = self.run(service, capsys, "clone", "2", "2", "field_price")
        assert code == 1
        assert response["success"] is False

    def test_fields_and_backups(self, service, capsys):
        code, response = self.run(service, capsys, "fields", "1", "--target", "2")
        assert code == 0
        assert response["data"]["statistics"]["cloneable_fields"] == 5

        code, response = self.run(service, capsys, "backups", "2")
        assert response["data"]["count"] == 0

        code, response = self.run(service, capsys, "cleanup")
        assert response["data"]["deleted_count"] == 0

    def test_no_command(self, service, capsys):
        assert cli.main([], service_factory=lambda: service) == 1

    def test_unknown_argument(self, service):
        with pytest.raises(SystemExit):
            cli.main(["bogus"], service_factory=lambda: service)
