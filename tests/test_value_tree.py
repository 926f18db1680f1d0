# ==============================================
# Tests for Value Trees and Value Validation
# ==============================================
#
# class TestIsEmpty
# class TestBuildTree:      each node kind, shape errors
# class TestCopyTree:       copies share no mutable state
# class TestIterLeaves:     dotted paths with row indexes
# class TestValueValidator: required, email, url, number/range bounds
#
# ==============================================

import pytest

from clone_fields.schema import (
    FieldDefinition,
    Group,
    Layouts,
    Leaf,
    Rows,
    ValueValidator,
    build_tree,
    copy_tree,
    is_empty,
    to_raw,
)
from clone_fields.schema.value_tree import iter_leaves

from conftest import product_group, source_values


def definition(key):
    return product_group().find(key)


class TestIsEmpty:

    @pytest.mark.parametrize("value", [None, "", [], {}, ()])
    def test_empty(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, False, "0", " ", [None], {"a": None}, 0.0])
    def test_not_empty(self, value):
        assert not is_empty(value)


class TestBuildTree:

    def test_scalar_is_leaf(self):
        node = build_tree(definition("field_price"), "100")
        assert isinstance(node, Leaf)
        assert node.value == "100"

    def test_unknown_definition_is_verbatim_leaf(self):
        raw = {"anything": [1, 2]}
        node = build_tree(None, raw)
        assert isinstance(node, Leaf)
        assert to_raw(node) == raw

    def test_none_is_leaf_for_structural(self):
        node = build_tree(definition("field_gallery"), None)
        assert isinstance(node, Leaf)
        assert node.value is None

    def test_repeater_rows(self):
        node = build_tree(definition("field_gallery"), source_values()["field_gallery"])
        assert isinstance(node, Rows)
        assert len(node.rows) == 2
        assert node.rows[1]["caption"].value == "b"
        assert node.rows[1]["caption"].definition.key == "field_gallery_caption"

    def test_group_values(self):
        node = build_tree(definition("field_details"), {"weight": 2, "sku": "X1"})
        assert isinstance(node, Group)
        assert node.values["weight"].definition.type == "number"

    def test_flexible_content_layouts(self):
        node = build_tree(definition("field_sections"), source_values()["field_sections"])
        assert isinstance(node, Layouts)
        assert [row.layout for row in node.rows] == ["hero", "text_block"]
        assert node.rows[0].values["title"].value == "Hello"
        assert "_layout" not in node.rows[0].values

    def test_rows_keyed_by_field_key_are_accepted(self):
        node = build_tree(definition("field_gallery"), [{"field_gallery_caption": "x"}])
        assert node.rows[0]["field_gallery_caption"].definition.name == "caption"

    @pytest.mark.parametrize("key,raw", [
        ("field_gallery", "not a list"),
        ("field_gallery", ["not a row"]),
        ("field_details", ["not", "a", "mapping"]),
        ("field_sections", {"_layout": "hero"}),
        ("field_sections", [{"title": "no layout"}]),
    ])
    def test_wrong_shape_raises(self, key, raw):
        with pytest.raises(ValueError):
            build_tree(definition(key), raw)

    @pytest.mark.parametrize("key", ["field_price", "field_gallery", "field_details", "field_sections"])
    def test_to_raw_restores_stored_form(self, key):
        raw = source_values()[key]
        assert to_raw(build_tree(definition(key), raw)) == raw


class TestCopyTree:

    def test_copy_is_independent(self):
        raw = source_values()["field_gallery"]
        node = build_tree(definition("field_gallery"), raw)
        copied = copy_tree(node)

        copied.rows[0]["caption"].value = "changed"
        copied.rows.append({})

        assert node.rows[0]["caption"].value == "a"
        assert len(node.rows) == 2

    def test_copy_of_leaf_deep_copies_value(self):
        node = Leaf({"nested": [1]})
        copied = copy_tree(node)
        copied.value["nested"].append(2)
        assert node.value == {"nested": [1]}

    def test_not_a_node(self):
        with pytest.raises(TypeError):
            copy_tree({"raw": "dict"})


class TestIterLeaves:

    def test_paths(self):
        node = build_tree(definition("field_sections"), source_values()["field_sections"])
        paths = [path for _, _, path in iter_leaves(node)]
        assert paths == ["0.title", "1.body"]

    def test_group_paths(self):
        node = build_tree(definition("field_details"), {"weight": 2, "sku": "X1"})
        leaves = {path: value for _, value, path in iter_leaves(node)}
        assert leaves == {"weight": 2, "sku": "X1"}


class TestValueValidator:

    def test_no_definition_is_valid(self):
        assert ValueValidator.validate("whatever", None) == (True, "")

    def test_required(self):
        required = FieldDefinition("field_name", "name", "Name", "text", required=True)
        ok, reason = ValueValidator.validate("", required)
        assert not ok
        assert "required" in reason
        assert ValueValidator.validate("x", required)[0]

    def test_optional_empty_is_valid(self):
        assert ValueValidator.validate(None, definition("field_contact"))[0]

    @pytest.mark.parametrize("value,expected", [
        ("sales@example.com", True),
        ("not-an-email", False),
        (42, False),
    ])
    def test_email(self, value, expected):
        assert ValueValidator.validate(value, definition("field_contact"))[0] is expected

    @pytest.mark.parametrize("value,expected", [
        ("https://example.com/page", True),
        ("http://example.com", True),
        ("ftp://example.com", False),
        ("example.com", False),
    ])
    def test_url(self, value, expected):
        url = FieldDefinition("field_site", "site", "Site", "url")
        assert ValueValidator.validate(value, url)[0] is expected

    @pytest.mark.parametrize("value,expected", [
        (5, True),
        ("5.5", True),
        ("abc", False),
        (True, False),
        (-1, False),
        (11, False),
    ])
    def test_number_range(self, value, expected):
        bounded = FieldDefinition("field_score", "score", "Score", "range", min=0, max=10)
        assert ValueValidator.validate(value, bounded)[0] is expected

    def test_validate_tree_reports_path(self):
        node = build_tree(definition("field_details"), {"weight": -3, "sku": "X1"})
        ok, reason = ValueValidator.validate_tree(node)
        assert not ok
        assert reason.startswith("weight:")
