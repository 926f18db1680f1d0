# ==============================================
# Value Tree
# ==============================================
#
# PURPOSE:
#   Typed view of a stored field value. A raw value read from
#   the schema provider is parsed against its FieldDefinition
#   into one of four node kinds:
#
#     Leaf     → scalar value (or any value with no known schema)
#     Rows     → repeater: ordered rows, each {sub_field_name: node}
#     Group    → group: one {sub_field_name: node} mapping
#     Layouts  → flexible content: ordered (layout_name, {name: node}) rows
#
#   Cloning, snapshotting and restoring all go through the same
#   three functions: build_tree() → copy_tree() → to_raw().
#
# FUNCTIONS:
# ----------
# - is_empty(value) -> bool
# - build_tree(definition, raw) -> ValueNode
# - copy_tree(node) -> ValueNode
# - to_raw(node) -> Any
# - iter_leaves(node) -> Iterator[(definition, value, path)]
#
# ==============================================

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .field_types import FieldDefinition, FieldKind, LAYOUT_KEY


@dataclass
class Leaf:
    value: Any
    definition: Optional[FieldDefinition] = None


@dataclass
class Rows:
    definition: FieldDefinition
    rows: List[Dict[str, "ValueNode"]] = field(default_factory=list)


@dataclass
class Group:
    definition: FieldDefinition
    values: Dict[str, "ValueNode"] = field(default_factory=dict)


@dataclass
class LayoutRow:
    layout: str
    values: Dict[str, "ValueNode"] = field(default_factory=dict)


@dataclass
class Layouts:
    definition: FieldDefinition
    rows: List[LayoutRow] = field(default_factory=list)


ValueNode = Union[Leaf, Rows, Group, Layouts]


def is_empty(value: Any) -> bool:
    """
    True for None, "", [] and {}.

    0 and False are real values and are not empty.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, dict, tuple)):
        return len(value) == 0
    return False


def build_tree(definition: Optional[FieldDefinition], raw: Any) -> ValueNode:
    """
    Parse a raw stored value against its definition.

    Args:
        definition: Field schema, or None when the field is unknown
        raw: The value as stored by the schema provider

    Returns:
        A value tree node

    Raises:
        ValueError: If a structural value has the wrong shape
    """
    if raw is None or definition is None:
        return Leaf(raw, definition)

    kind = definition.kind

    if kind == FieldKind.REPEATER:
        if not isinstance(raw, list):
            raise ValueError(
                f"Repeater '{definition.key}' expects a list of rows, got {type(raw).__name__}"
            )
        rows = []
        for index, row in enumerate(raw):
            if not isinstance(row, dict):
                raise ValueError(f"Repeater '{definition.key}' row {index} is not a mapping")
            rows.append(_build_children(definition.sub_fields, row))
        return Rows(definition, rows)

    if kind == FieldKind.GROUP:
        if not isinstance(raw, dict):
            raise ValueError(
                f"Group '{definition.key}' expects a mapping, got {type(raw).__name__}"
            )
        return Group(definition, _build_children(definition.sub_fields, raw))

    if kind == FieldKind.FLEXIBLE_CONTENT:
        if not isinstance(raw, list):
            raise ValueError(
                f"Flexible content '{definition.key}' expects a list of rows, got {type(raw).__name__}"
            )
        layout_rows = []
        for index, row in enumerate(raw):
            if not isinstance(row, dict) or LAYOUT_KEY not in row:
                raise ValueError(
                    f"Flexible content '{definition.key}' row {index} has no '{LAYOUT_KEY}'"
                )
            layout_name = row[LAYOUT_KEY]
            layout = definition.layout_named(layout_name)
            sub_fields = layout.sub_fields if layout else []
            values = {k: v for k, v in row.items() if k != LAYOUT_KEY}
            layout_rows.append(LayoutRow(layout_name, _build_children(sub_fields, values)))
        return Layouts(definition, layout_rows)

    return Leaf(raw, definition)


def _build_children(sub_fields: List[FieldDefinition], values: Dict[str, Any]) -> Dict[str, ValueNode]:
    # Row values are keyed by sub-field name; accept the key too
    by_name = {}
    for sub in sub_fields:
        by_name[sub.name] = sub
        by_name.setdefault(sub.key, sub)
    return {
        name: build_tree(by_name.get(name), value)
        for name, value in values.items()
    }


def copy_tree(node: ValueNode) -> ValueNode:
    """
    Structural deep copy of a value tree.

    The copy shares no mutable state with the input, so writing it
    to another record cannot alias the source's rows.
    """
    if isinstance(node, Leaf):
        return Leaf(copy.deepcopy(node.value), node.definition)
    if isinstance(node, Rows):
        return Rows(node.definition, [_copy_children(row) for row in node.rows])
    if isinstance(node, Group):
        return Group(node.definition, _copy_children(node.values))
    if isinstance(node, Layouts):
        return Layouts(
            node.definition,
            [LayoutRow(row.layout, _copy_children(row.values)) for row in node.rows],
        )
    raise TypeError(f"Not a value tree node: {type(node).__name__}")


def _copy_children(values: Dict[str, ValueNode]) -> Dict[str, ValueNode]:
    return {name: copy_tree(child) for name, child in values.items()}


def to_raw(node: ValueNode) -> Any:
    """Convert a value tree back to the stored (JSON-shaped) form."""
    if isinstance(node, Leaf):
        return copy.deepcopy(node.value)
    if isinstance(node, Rows):
        return [_children_to_raw(row) for row in node.rows]
    if isinstance(node, Group):
        return _children_to_raw(node.values)
    if isinstance(node, Layouts):
        raw_rows = []
        for row in node.rows:
            raw_row = {LAYOUT_KEY: row.layout}
            raw_row.update(_children_to_raw(row.values))
            raw_rows.append(raw_row)
        return raw_rows
    raise TypeError(f"Not a value tree node: {type(node).__name__}")


def _children_to_raw(values: Dict[str, ValueNode]) -> Dict[str, Any]:
    return {name: to_raw(child) for name, child in values.items()}


def iter_leaves(node: ValueNode, path: str = "") -> Iterator[Tuple[Optional[FieldDefinition], Any, str]]:
    """
    Yield (definition, value, path) for every leaf in the tree.

    Paths use dot notation with row indexes:
        "gallery.0.caption", "sections.1.title"
    """
    if isinstance(node, Leaf):
        yield node.definition, node.value, path
    elif isinstance(node, Rows):
        for index, row in enumerate(node.rows):
            yield from _iter_children(row, f"{path}.{index}" if path else str(index))
    elif isinstance(node, Group):
        yield from _iter_children(node.values, path)
    elif isinstance(node, Layouts):
        for index, row in enumerate(node.rows):
            yield from _iter_children(row.values, f"{path}.{index}" if path else str(index))


def _iter_children(values: Dict[str, ValueNode], prefix: str):
    for name, child in values.items():
        yield from iter_leaves(child, f"{prefix}.{name}" if prefix else name)
