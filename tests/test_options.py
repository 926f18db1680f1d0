# ==============================================
# Tests for Clone Options
# ==============================================
#
# class TestNormalizeBool:
#     truthy / falsy literals, case and whitespace, fallback to default
#
# class TestOptionsFromMapping:
#     missing keys use defaults, loose values are normalised
#
# ==============================================

import pytest

from clone_fields.cloning import CloneOptions, normalize_bool, options_from_mapping


class TestNormalizeBool:

    @pytest.mark.parametrize("value", [True, 1, "1", "true", "TRUE", " yes ", "on", "On"])
    def test_truthy_literals(self, value):
        assert normalize_bool(value, False) is True

    @pytest.mark.parametrize("value", [False, 0, "0", "false", "False", "no", "off", ""])
    def test_falsy_literals(self, value):
        assert normalize_bool(value, True) is False

    @pytest.mark.parametrize("value", [None, "maybe", 2, -1, 0.5, [], {}])
    def test_unrecognised_values_fall_back_to_default(self, value):
        assert normalize_bool(value, True) is True
        assert normalize_bool(value, False) is False

    def test_false_string_is_never_truthy(self):
        # bool("false") would be True
        assert normalize_bool("false", True) is False


class TestOptionsFromMapping:

    def test_empty_mapping_uses_defaults(self):
        defaults = CloneOptions(create_backup=False, overwrite_existing=True, validate_data=False)
        assert options_from_mapping({}, defaults) == defaults
        assert options_from_mapping(None, defaults) == defaults

    def test_default_defaults(self):
        options = options_from_mapping({})
        assert options.create_backup is True
        assert options.overwrite_existing is False
        assert options.validate_data is True
        assert options.copy_attachments is True

    def test_copy_attachments_normalised(self):
        assert options_from_mapping({"copy_attachments": "off"}).copy_attachments is False
        assert options_from_mapping({"copy_attachments": "yes"}, CloneOptions(copy_attachments=False)).copy_attachments is True

    def test_loose_values_are_normalised(self):
        options = options_from_mapping({
            "create_backup": "0",
            "overwrite_existing": "true",
            "validate_data": 0,
        })
        assert options == CloneOptions(create_backup=False, overwrite_existing=True, validate_data=False)

    def test_unknown_value_keeps_default(self):
        options = options_from_mapping({"create_backup": "sometimes"}, CloneOptions(create_backup=False))
        assert options.create_backup is False

    def test_to_dict(self):
        assert CloneOptions().to_dict() == {
            "create_backup": True,
            "overwrite_existing": False,
            "validate_data": True,
            "copy_attachments": True,
        }
