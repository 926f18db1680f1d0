# ==============================================
# Field Types (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes describing the field schema: what fields a
#   field group declares, how they nest, and which kinds are
#   structural. Read-only from the cloning core's perspective.
#
# ENUMS:
# ------
# - FieldKind(Enum): SCALAR, REPEATER, GROUP, FLEXIBLE_CONTENT, PRESENTATIONAL
#     Coarse classification of a field type string.
#
# CLASSES:
# --------
# - FieldDefinition (dataclass)
#     key, name, label, type, required, min, max, taxonomy,
#     sub_fields, layouts
#
# - Layout (dataclass)
#     One named layout of a flexible-content field.
#
# - FieldGroup (dataclass)
#     key, title, fields, content_types
#
#     All three have to_dict() / from_dict() for the JSON registry.
#
# ==============================================

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


REPEATER = "repeater"
GROUP = "group"
FLEXIBLE_CONTENT = "flexible_content"

STRUCTURAL_TYPES = {REPEATER, GROUP, FLEXIBLE_CONTENT}

# Display/layout only, they hold no value
NON_CLONEABLE_TYPES = {"message", "tab", "accordion"}

# Row marker for flexible-content values: {"_layout": "hero", "title": ...}
LAYOUT_KEY = "_layout"


class FieldKind(Enum):
    """
    Coarse classification of field type strings.

    - SCALAR: text, number, email, url, true_false, ... (and unknown types)
    - REPEATER / GROUP / FLEXIBLE_CONTENT: structural kinds with children
    - PRESENTATIONAL: message, tab, accordion
    """
    SCALAR = "scalar"
    REPEATER = "repeater"
    GROUP = "group"
    FLEXIBLE_CONTENT = "flexible_content"
    PRESENTATIONAL = "presentational"

    @classmethod
    def of(cls, field_type: str) -> "FieldKind":
        if field_type == REPEATER:
            return cls.REPEATER
        if field_type == GROUP:
            return cls.GROUP
        if field_type == FLEXIBLE_CONTENT:
            return cls.FLEXIBLE_CONTENT
        if field_type in NON_CLONEABLE_TYPES:
            return cls.PRESENTATIONAL
        return cls.SCALAR


@dataclass
class FieldDefinition:
    """
    Schema of a single field.

    `key` is globally unique and is what values are stored under.
    `name` is record-scoped and is what nested row values are keyed by.
    """

    key: str
    name: str
    label: str = ""
    type: str = "text"

    # --- Validation hints ---
    required: bool = False
    min: Optional[float] = None  # number / range
    max: Optional[float] = None

    # --- References ---
    taxonomy: Optional[str] = None  # taxonomy fields: which vocabulary the term ids belong to

    # --- Structure ---
    sub_fields: List["FieldDefinition"] = field(default_factory=list)  # repeater / group
    layouts: List["Layout"] = field(default_factory=list)  # flexible_content

    @property
    def kind(self) -> FieldKind:
        return FieldKind.of(self.type)

    @property
    def is_structural(self) -> bool:
        return self.type in STRUCTURAL_TYPES

    @property
    def is_cloneable(self) -> bool:
        return self.type not in NON_CLONEABLE_TYPES

    def layout_named(self, name: str) -> Optional["Layout"]:
        for layout in self.layouts:
            if layout.name == name:
                return layout
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "key": self.key,
            "name": self.name,
            "label": self.label,
            "type": self.type,
        }
        if self.required:
            data["required"] = True
        if self.min is not None:
            data["min"] = self.min
        if self.max is not None:
            data["max"] = self.max
        if self.taxonomy:
            data["taxonomy"] = self.taxonomy
        if self.sub_fields:
            data["sub_fields"] = [sub.to_dict() for sub in self.sub_fields]
        if self.layouts:
            data["layouts"] = [layout.to_dict() for layout in self.layouts]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldDefinition":
        """
        Build a definition (and its children) from registry JSON.

        Args:
            data: Dictionary with at least "key" and "name"

        Returns:
            A FieldDefinition instance
        """
        return cls(
            key=data["key"],
            name=data.get("name", data["key"]),
            label=data.get("label", ""),
            type=data.get("type", "text"),
            required=bool(data.get("required", False)),
            min=data.get("min"),
            max=data.get("max"),
            taxonomy=data.get("taxonomy"),
            sub_fields=[cls.from_dict(sub) for sub in data.get("sub_fields", [])],
            layouts=[Layout.from_dict(layout) for layout in data.get("layouts", [])],
        )


@dataclass
class Layout:
    """A named layout of a flexible-content field."""
    key: str
    name: str
    label: str = ""
    sub_fields: List[FieldDefinition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "label": self.label,
            "sub_fields": [sub.to_dict() for sub in self.sub_fields],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Layout":
        return cls(
            key=data.get("key", data["name"]),
            name=data["name"],
            label=data.get("label", ""),
            sub_fields=[FieldDefinition.from_dict(sub) for sub in data.get("sub_fields", [])],
        )


@dataclass
class FieldGroup:
    """
    Named, ordered collection of top-level fields bound to content types.
    """
    key: str
    title: str
    fields: List[FieldDefinition] = field(default_factory=list)
    content_types: List[str] = field(default_factory=list)

    def find(self, field_key: str) -> Optional[FieldDefinition]:
        """Find a top-level field of this group by key."""
        for definition in self.fields:
            if definition.key == field_key:
                return definition
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "content_types": list(self.content_types),
            "fields": [definition.to_dict() for definition in self.fields],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldGroup":
        return cls(
            key=data["key"],
            title=data.get("title", data["key"]),
            fields=[FieldDefinition.from_dict(item) for item in data.get("fields", [])],
            content_types=list(data.get("content_types", [])),
        )
