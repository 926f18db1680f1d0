# ==============================================
# Field Presence (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that hold what the detector found on a record:
#   which fields exist, whether they hold a value, and aggregate
#   counters for summaries.
#
# CLASSES:
# --------
# - FieldPresenceInfo   → has_value / will_overwrite for one (record, field)
# - DetectedField       → one top-level field as seen on a record
# - DetectedGroup       → a field group and its detected fields
# - FieldStatistics     → counters over all detected fields
# - SelectionReport     → pre-clone check of a field selection
#
#   All of them are computed, never persisted; to_dict() is for
#   JSON responses.
#
# ==============================================

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List


@dataclass(frozen=True)
class FieldPresenceInfo:
    """Presence of one field on one record."""
    has_value: bool = False
    will_overwrite: bool = False  # target already holds a non-empty value

    def to_dict(self) -> Dict[str, bool]:
        return {"has_value": self.has_value, "will_overwrite": self.will_overwrite}


@dataclass(frozen=True)
class DetectedField:
    """
    A top-level field of a record's content type.

    Structural fields are not expanded here: repeaters and flexible
    content only report how many rows they hold, groups how many
    sub-fields they declare.
    """

    # --- Identity (copied from the definition) ---
    key: str
    name: str
    label: str
    type: str

    # --- State on this record ---
    has_value: bool = False
    will_overwrite: bool = False
    is_cloneable: bool = True

    # --- Structure summary ---
    is_structural: bool = False
    row_count: int = 0
    sub_field_count: int = 0
    layout_names: List[str] = field(default_factory=list)

    @property
    def presence(self) -> FieldPresenceInfo:
        return FieldPresenceInfo(self.has_value, self.will_overwrite)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DetectedGroup:
    key: str
    title: str
    fields: List[DetectedField] = field(default_factory=list)

    def find(self, field_key: str):
        for detected in self.fields:
            if detected.key == field_key:
                return detected
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "fields": [detected.to_dict() for detected in self.fields],
        }


@dataclass
class FieldStatistics:
    """Counters over a record's detected fields. All zero when nothing is bound."""
    total_fields: int = 0
    cloneable_fields: int = 0
    fields_with_values: int = 0
    group_fields: int = 0
    repeater_fields: int = 0
    total_groups: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class SelectionReport:
    """
    Result of checking a field selection before cloning.

    - valid_fields: keys that exist on the source and can be cloned
    - conflicts:    valid keys whose target already holds a value
    - warnings:     human-readable reasons for dropped keys
    """
    valid_fields: List[str] = field(default_factory=list)
    conflicts: List[Dict[str, str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def can_proceed(self) -> bool:
        return bool(self.valid_fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid_fields": list(self.valid_fields),
            "conflicts": list(self.conflicts),
            "warnings": list(self.warnings),
            "has_conflicts": self.has_conflicts,
            "can_proceed": self.can_proceed,
        }
