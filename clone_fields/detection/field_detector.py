# ==============================================
# FieldDetector
# ==============================================
#
# PURPOSE:
#   Answer "what fields exist on record R, and in what state?"
#   without the caller knowing the schema. Walks the field groups
#   bound to the record's content type and reads each top-level
#   value through the schema provider.
#
# CLASS: FieldDetector
# --------------------
#   Stateful — caches detected groups per record id.
#
#   Constructor:
#   ------------
#   - __init__(provider: SchemaProvider, cache_size=256)
#       cache_size: records kept, least recently listed dropped first
#
#   Methods:
#   --------
#   - list_fields(record_id) -> list[DetectedGroup]
#       Unknown or invalid id, or no bound groups → [] (never an error).
#
#   - expand_repeater(definition, record_id, target_record_id=None)
#         -> list[dict[child_key, FieldPresenceInfo]]
#       Row-level presence of a repeater. Non-repeater input → [].
#
#   - field_statistics(record_id) -> FieldStatistics
#
#   - compare_fields(source_id, target_id) -> list[DetectedGroup]
#       Source listing with will_overwrite set from the target.
#
#   - validate_selection(source_id, target_id, field_keys) -> SelectionReport
#
#   - find_definition(record_id, field_key) -> FieldDefinition | None
#       Live schema lookup, bypasses the cache.
#
#   - invalidate(record_id=None) -> None
#       Drop one cached record, or everything when None.
#
#   The cache only serves read-side listings. Cloning re-reads
#   live values through the provider.
#
# ==============================================

from collections import OrderedDict
from dataclasses import replace
from typing import Any, Dict, List, Optional

from clone_fields.schema import FieldDefinition, FieldKind, SchemaProvider, is_empty
from .field_presence import (
    DetectedField,
    DetectedGroup,
    FieldPresenceInfo,
    FieldStatistics,
    SelectionReport,
)


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


class FieldDetector:
    """
    Discovers fields on records and summarises their state.
    """

    def __init__(self, provider: SchemaProvider, cache_size: int = 256):
        """
        Initialize the FieldDetector.

        Args:
            provider: Schema provider used for group lookups and value reads
            cache_size: Maximum number of records kept in the listing cache
        """
        self.provider = provider
        self.cache_size = max(1, int(cache_size))
        self._cache: "OrderedDict[Any, List[DetectedGroup]]" = OrderedDict()

    def list_fields(self, record_id) -> List[DetectedGroup]:
        """
        Detect every top-level field bound to a record.

        Process:
        1. Resolve the record's content type
        2. Fetch the field groups bound to it
        3. Read each top-level value and record presence

        Args:
            record_id: Record to inspect

        Returns:
            Detected groups in registry order; groups without fields are left out
        """
        if record_id is None or not _is_hashable(record_id):
            return []

        if record_id in self._cache:
            self._cache.move_to_end(record_id)
            return list(self._cache[record_id])

        if not self.provider.record_exists(record_id):
            return []

        content_type = self.provider.content_type_of(record_id)
        if not content_type:
            return []

        detected_groups = []
        for group in self.provider.field_groups_for(content_type):
            detected_fields = [
                self._detect_field(definition, record_id)
                for definition in group.fields
            ]
            if detected_fields:
                detected_groups.append(DetectedGroup(group.key, group.title, detected_fields))

        self._cache[record_id] = detected_groups
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        return list(detected_groups)

    def _detect_field(self, definition: FieldDefinition, record_id) -> DetectedField:
        value = self.provider.value_of(record_id, definition.key)
        kind = definition.kind

        row_count = 0
        if kind in (FieldKind.REPEATER, FieldKind.FLEXIBLE_CONTENT) and isinstance(value, list):
            row_count = len(value)

        sub_field_count = 0
        if kind in (FieldKind.REPEATER, FieldKind.GROUP):
            sub_field_count = len(definition.sub_fields)

        return DetectedField(
            key=definition.key,
            name=definition.name,
            label=definition.label,
            type=definition.type,
            has_value=not is_empty(value),
            is_cloneable=definition.is_cloneable,
            is_structural=definition.is_structural,
            row_count=row_count,
            sub_field_count=sub_field_count,
            layout_names=[layout.name for layout in definition.layouts],
        )

    def expand_repeater(
        self,
        definition: FieldDefinition,
        record_id,
        target_record_id=None
    ) -> List[Dict[str, FieldPresenceInfo]]:
        """
        Row-level presence for a repeater field.

        Each row maps child key → FieldPresenceInfo. When a target record
        is given, will_overwrite is set for children whose counterpart in
        the same target row holds a value.

        Args:
            definition: The repeater's definition
            record_id: Record to read rows from
            target_record_id: Optional record to compare against

        Returns:
            One mapping per row; [] for non-repeaters or empty values
        """
        if definition is None or definition.kind != FieldKind.REPEATER:
            return []

        rows = self.provider.value_of(record_id, definition.key)
        if not isinstance(rows, list):
            return []

        target_rows: List[Any] = []
        if target_record_id is not None:
            value = self.provider.value_of(target_record_id, definition.key)
            if isinstance(value, list):
                target_rows = value

        expanded = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                continue
            target_row = target_rows[index] if index < len(target_rows) else None
            if not isinstance(target_row, dict):
                target_row = {}

            expanded.append({
                child.key: FieldPresenceInfo(
                    has_value=not is_empty(self._row_value(row, child)),
                    will_overwrite=not is_empty(self._row_value(target_row, child)),
                )
                for child in definition.sub_fields
            })
        return expanded

    @staticmethod
    def _row_value(row: dict, child: FieldDefinition):
        # Rows are keyed by sub-field name; older data may use the key
        if child.name in row:
            return row[child.name]
        return row.get(child.key)

    def field_statistics(self, record_id) -> FieldStatistics:
        """
        Aggregate counters over list_fields(record_id).

        Returns:
            FieldStatistics, all zero when no groups are bound
        """
        stats = FieldStatistics()

        for group in self.list_fields(record_id):
            stats.total_groups += 1

            for detected in group.fields:
                stats.total_fields += 1
                if detected.is_cloneable:
                    stats.cloneable_fields += 1
                if detected.has_value:
                    stats.fields_with_values += 1
                if detected.type == "repeater":
                    stats.repeater_fields += 1
                elif detected.type == "group":
                    stats.group_fields += 1

        return stats

    def compare_fields(self, source_record_id, target_record_id) -> List[DetectedGroup]:
        """
        Source listing annotated with will_overwrite from the target.
        """
        target_values = {
            detected.key: detected.has_value
            for group in self.list_fields(target_record_id)
            for detected in group.fields
        }

        compared = []
        for group in self.list_fields(source_record_id):
            fields = [
                replace(detected, will_overwrite=target_values.get(detected.key, False))
                for detected in group.fields
            ]
            compared.append(DetectedGroup(group.key, group.title, fields))
        return compared

    def validate_selection(self, source_record_id, target_record_id, field_keys: List[str]) -> SelectionReport:
        """
        Check a field selection before cloning.

        Keys missing on the source or not cloneable become warnings;
        keys whose target already holds a value become conflicts.
        """
        report = SelectionReport()
        source_fields = self._index(self.list_fields(source_record_id))
        target_fields = self._index(self.list_fields(target_record_id))

        for field_key in field_keys:
            source_field = source_fields.get(field_key)
            if source_field is None:
                report.warnings.append(f"Field {field_key} not found in source record")
                continue

            if not source_field.is_cloneable:
                report.warnings.append(f"Field {source_field.label} ({field_key}) is not cloneable")
                continue

            target_field = target_fields.get(field_key)
            if target_field is not None and target_field.has_value:
                report.conflicts.append({
                    "field_key": field_key,
                    "field_label": source_field.label,
                    "field_type": source_field.type,
                })

            report.valid_fields.append(field_key)

        return report

    @staticmethod
    def _index(groups: List[DetectedGroup]) -> Dict[str, DetectedField]:
        return {detected.key: detected for group in groups for detected in group.fields}

    def find_definition(self, record_id, field_key: str) -> Optional[FieldDefinition]:
        return self.provider.find_definition(record_id, field_key)

    def invalidate(self, record_id=None) -> None:
        """
        Clear cached detection results.

        Args:
            record_id: Record to drop; None clears every cached record
        """
        if record_id is None:
            self._cache.clear()
        elif _is_hashable(record_id):
            self._cache.pop(record_id, None)

    def cached_records(self) -> List[Any]:
        return list(self._cache.keys())
