import re
from typing import Any, Optional, Tuple
from urllib.parse import urlparse

from .field_types import FieldDefinition
from .value_tree import ValueNode, is_empty, iter_leaves


class ValueValidator:
    EMAIL_PATTERN = re.compile(
        r'^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$'
    )

    URL_SCHEMES = {"http", "https"}

    NUMERIC_TYPES = {"number", "range"}

    @classmethod
    def validate(cls, value: Any, definition: Optional[FieldDefinition]) -> Tuple[bool, str]:
        if definition is None:
            return True, ""

        if is_empty(value):
            if definition.required:
                return False, f"'{definition.label or definition.name}' is required"
            return True, ""

        field_type = definition.type

        if field_type == "email":
            if not isinstance(value, str) or not cls._is_email(value.strip()):
                return False, f"'{value}' is not a valid email address"

        if field_type == "url":
            if not isinstance(value, str) or not cls._is_url(value.strip()):
                return False, f"'{value}' is not a valid URL"

        if field_type in cls.NUMERIC_TYPES:
            number = cls._to_number(value)
            if number is None:
                return False, f"'{value}' is not numeric"
            if definition.min is not None and number < definition.min:
                return False, f"{number} is below the minimum {definition.min}"
            if definition.max is not None and number > definition.max:
                return False, f"{number} is above the maximum {definition.max}"

        return True, ""

    @classmethod
    def validate_tree(cls, node: ValueNode) -> Tuple[bool, str]:
        for definition, value, path in iter_leaves(node):
            ok, reason = cls.validate(value, definition)
            if not ok:
                return False, f"{path}: {reason}" if path else reason
        return True, ""

    @classmethod
    def _is_email(cls, value: str) -> bool:
        return bool(cls.EMAIL_PATTERN.match(value))

    @classmethod
    def _is_url(cls, value: str) -> bool:
        parsed = urlparse(value)
        return parsed.scheme in cls.URL_SCHEMES and bool(parsed.netloc)

    @classmethod
    def _to_number(cls, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return None
