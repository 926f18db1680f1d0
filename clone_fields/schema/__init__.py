# ==============================================
# TOPIC 1: FIELD SCHEMA
# ==============================================
#
# This package describes what fields exist (definitions and
# groups), how a stored value is shaped (value trees), and the
# provider boundary that reads and writes record values.
#
# Modules:
# --------
# - field_types.py      → FieldDefinition, Layout, FieldGroup, FieldKind
# - value_tree.py       → Leaf / Rows / Group / Layouts + build/copy/to_raw
# - value_validator.py  → Type checks for scalar leaves (email, url, number, ...)
# - registry.py         → Field groups persisted as JSON files
# - provider.py         → SchemaProvider + memory and MongoDB implementations
#
# ==============================================

from .field_types import (
    FieldDefinition,
    FieldGroup,
    FieldKind,
    Layout,
    LAYOUT_KEY,
)
from .value_tree import (
    Leaf,
    Rows,
    Group,
    Layouts,
    LayoutRow,
    ValueNode,
    build_tree,
    copy_tree,
    to_raw,
    is_empty,
)
from .value_validator import ValueValidator
from .registry import FieldGroupRegistry
from .provider import SchemaProvider, MemorySchemaProvider, MongoSchemaProvider

__all__ = [
    "FieldDefinition",
    "FieldGroup",
    "FieldKind",
    "Layout",
    "LAYOUT_KEY",
    "Leaf",
    "Rows",
    "Group",
    "Layouts",
    "LayoutRow",
    "ValueNode",
    "build_tree",
    "copy_tree",
    "to_raw",
    "is_empty",
    "ValueValidator",
    "FieldGroupRegistry",
    "SchemaProvider",
    "MemorySchemaProvider",
    "MongoSchemaProvider",
]
