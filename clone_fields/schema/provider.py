# ==============================================
# Schema Providers
# ==============================================
#
# PURPOSE:
#   The boundary to the field-group registry and the record
#   value store. Everything in detection/, cloning/ and backup/
#   reads and writes field values through this interface only.
#
# CLASSES:
# --------
# - SchemaProvider (abstract)
#     record_exists(record_id) -> bool
#     content_type_of(record_id) -> str | None
#     field_groups_for(content_type) -> list[FieldGroup]
#     value_of(record_id, field_key) -> value | None
#     set_value(record_id, field_key, value) -> bool   (None clears)
#
# - MemorySchemaProvider
#     Dict-backed records, groups registered in memory.
#
# - MongoSchemaProvider
#     Groups from a FieldGroupRegistry, values in a MongoDB
#     collection (see storage/mongo_client.py for document shape).
#
# ==============================================

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .field_types import FieldDefinition, FieldGroup
from .registry import FieldGroupRegistry


class SchemaProvider(ABC):
    """Read-only field schema plus per-record value access."""

    @abstractmethod
    def record_exists(self, record_id) -> bool:
        ...

    @abstractmethod
    def content_type_of(self, record_id) -> Optional[str]:
        ...

    @abstractmethod
    def field_groups_for(self, content_type: str) -> List[FieldGroup]:
        ...

    @abstractmethod
    def value_of(self, record_id, field_key: str) -> Any:
        ...

    @abstractmethod
    def set_value(self, record_id, field_key: str, value: Any) -> bool:
        ...

    def find_definition(self, record_id, field_key: str) -> Optional[FieldDefinition]:
        """
        Look up the top-level definition of a field on a record's content type.

        Returns:
            The FieldDefinition, or None if the record or field is unknown
        """
        content_type = self.content_type_of(record_id)
        if not content_type:
            return None
        for group in self.field_groups_for(content_type):
            definition = group.find(field_key)
            if definition is not None:
                return definition
        return None


class MemorySchemaProvider(SchemaProvider):
    """
    In-process provider. Records are {record_id: {"content_type", "fields"}}.

    Values are copied on the way in and out so callers never share
    nested lists/dicts with the store.
    """

    def __init__(self, groups: Optional[List[FieldGroup]] = None):
        self._groups: List[FieldGroup] = list(groups or [])
        self._records: Dict[Any, Dict[str, Any]] = {}

    def add_group(self, group: FieldGroup) -> None:
        self._groups.append(group)

    def add_record(self, record_id, content_type: str, fields: Optional[Dict[str, Any]] = None) -> None:
        self._records[record_id] = {
            "content_type": content_type,
            "fields": copy.deepcopy(fields or {}),
        }

    def fields_of(self, record_id) -> Dict[str, Any]:
        """Snapshot of every stored value on a record."""
        record = self._records.get(record_id)
        return copy.deepcopy(record["fields"]) if record else {}

    def record_exists(self, record_id) -> bool:
        return record_id in self._records

    def content_type_of(self, record_id) -> Optional[str]:
        record = self._records.get(record_id)
        return record["content_type"] if record else None

    def field_groups_for(self, content_type: str) -> List[FieldGroup]:
        return [group for group in self._groups if content_type in group.content_types]

    def value_of(self, record_id, field_key: str) -> Any:
        record = self._records.get(record_id)
        if record is None:
            return None
        return copy.deepcopy(record["fields"].get(field_key))

    def set_value(self, record_id, field_key: str, value: Any) -> bool:
        record = self._records.get(record_id)
        if record is None:
            return False
        if value is None:
            record["fields"].pop(field_key, None)
        else:
            record["fields"][field_key] = copy.deepcopy(value)
        return True


class MongoSchemaProvider(SchemaProvider):
    """
    Field groups from JSON files, values from MongoDB.

    Field keys are used as sub-document names under "fields", so a
    key that is empty, contains a dot or starts with "$" is refused
    with ValueError on read and write.
    """

    def __init__(self, registry: FieldGroupRegistry, mongo_client, collection_name: str = "records"):
        self.registry = registry
        self.mongo_client = mongo_client
        self.collection_name = collection_name

    def ensure_indexes(self) -> None:
        self.mongo_client.ensure_indexes(self.collection_name, ["content_type"])

    def _find(self, record_id, projection=None):
        return self.mongo_client.find_one(self.collection_name, {"_id": record_id}, projection)

    def record_exists(self, record_id) -> bool:
        return self._find(record_id, {"_id": 1}) is not None

    def content_type_of(self, record_id) -> Optional[str]:
        document = self._find(record_id, {"content_type": 1})
        if document is None:
            return None
        return document.get("content_type")

    def field_groups_for(self, content_type: str) -> List[FieldGroup]:
        return self.registry.field_groups_for(content_type)

    @staticmethod
    def _field_path(field_key: str) -> str:
        if not isinstance(field_key, str) or not field_key:
            raise ValueError(f"Invalid field key: {field_key!r}")
        if "." in field_key or field_key.startswith("$"):
            raise ValueError(f"Field key '{field_key}' cannot be stored in MongoDB")
        return f"fields.{field_key}"

    def value_of(self, record_id, field_key: str) -> Any:
        path = self._field_path(field_key)
        document = self._find(record_id, {path: 1})
        if document is None:
            return None
        return document.get("fields", {}).get(field_key)

    def set_value(self, record_id, field_key: str, value: Any) -> bool:
        path = self._field_path(field_key)
        if value is None:
            update = {"$unset": {path: ""}}
        else:
            update = {"$set": {path: value}}
        matched = self.mongo_client.update_one(self.collection_name, {"_id": record_id}, update)
        return matched == 1
