# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests. Everything runs against the
# in-memory provider and backup store; DB wrappers are tested
# with mocks in test_storage.py.
#
# RECORDS:
# --------
#   1   product, fully populated (source)
#   2   product, only price "50" (target)
#   3   product, no values
#   10  page, no field groups bound
#
# ==============================================

from datetime import datetime, timedelta, timezone

import pytest

from clone_fields.config import AppConfig
from clone_fields.schema import FieldDefinition, FieldGroup, Layout, MemorySchemaProvider
from clone_fields.detection import FieldDetector
from clone_fields.cloning import FieldCloner
from clone_fields.backup import BackupManager, MemoryBackupStore
from clone_fields.clone_service import CloneService


def product_group() -> FieldGroup:
    return FieldGroup(
        key="group_product",
        title="Product",
        content_types=["product"],
        fields=[
            FieldDefinition("field_price", "price", "Price", "text"),
            FieldDefinition(
                "field_gallery", "gallery", "Gallery", "repeater",
                sub_fields=[FieldDefinition("field_gallery_caption", "caption", "Caption", "text")],
            ),
            FieldDefinition(
                "field_details", "details", "Details", "group",
                sub_fields=[
                    FieldDefinition("field_details_weight", "weight", "Weight", "number", min=0),
                    FieldDefinition("field_details_sku", "sku", "SKU", "text"),
                ],
            ),
            FieldDefinition(
                "field_sections", "sections", "Sections", "flexible_content",
                layouts=[
                    Layout("layout_hero", "hero", "Hero", [
                        FieldDefinition("field_hero_title", "title", "Title", "text"),
                    ]),
                    Layout("layout_text", "text_block", "Text block", [
                        FieldDefinition("field_text_body", "body", "Body", "textarea"),
                    ]),
                ],
            ),
            FieldDefinition("field_contact", "contact_email", "Contact email", "email"),
            FieldDefinition("field_notice", "notice", "Notice", "message"),
        ],
    )


def source_values() -> dict:
    return {
        "field_price": "100",
        "field_gallery": [{"caption": "a"}, {"caption": "b"}],
        "field_details": {"weight": 2, "sku": "X1"},
        "field_sections": [
            {"_layout": "hero", "title": "Hello"},
            {"_layout": "text_block", "body": "Long text"},
        ],
        "field_contact": "sales@example.com",
    }


def make_provider(provider_class=MemorySchemaProvider, **kwargs) -> MemorySchemaProvider:
    provider = provider_class(**kwargs)
    provider.add_group(product_group())
    provider.add_group(FieldGroup(key="group_empty", title="Empty", content_types=["product"]))
    provider.add_record(1, "product", source_values())
    provider.add_record(2, "product", {"field_price": "50"})
    provider.add_record(3, "product", {})
    provider.add_record(10, "page", {"field_price": "1"})
    return provider


class FakeClock:
    """Controllable UTC clock for retention tests."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **delta):
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def provider():
    return make_provider()


@pytest.fixture
def detector(provider):
    return FieldDetector(provider)


@pytest.fixture
def store():
    return MemoryBackupStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backup_manager(provider, store, detector, clock):
    return BackupManager(provider, store, retention_days=30, max_count=100, detector=detector, clock=clock)


@pytest.fixture
def cloner(provider, detector, backup_manager):
    return FieldCloner(provider, detector, backup_manager=backup_manager)


@pytest.fixture
def app_config():
    return AppConfig()


@pytest.fixture
def service(provider, store, app_config):
    return CloneService(provider, store, config=app_config)
