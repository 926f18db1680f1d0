# ==============================================
# Clone Options
# ==============================================
#
# PURPOSE:
#   Turn loosely-typed option values (form posts, query strings,
#   env vars) into strict booleans before they reach the cloner.
#
#   Only explicit literals are accepted:
#     truthy → True, 1, "1", "true", "yes", "on"
#     falsy  → False, 0, "0", "false", "no", "off", ""
#   Strings are compared case-insensitively after stripping.
#   Anything else (None, "maybe", 2, ...) falls back to the default.
#
#   Plain truthiness is never used: bool("false") is True and
#   would silently disable backups.
#
# ==============================================

from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

TRUTHY_STRINGS = {"1", "true", "yes", "on"}
FALSY_STRINGS = {"0", "false", "no", "off", ""}


def normalize_bool(value: Any, default: bool) -> bool:
    """
    Normalize a loosely-typed flag to a strict boolean.

    Args:
        value: Raw option value
        default: Returned when the value is not a recognised literal

    Returns:
        bool
    """
    # bool is checked first: True == 1 but isinstance(True, int) too
    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return default

    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUTHY_STRINGS:
            return True
        if text in FALSY_STRINGS:
            return False

    return default


@dataclass(frozen=True)
class CloneOptions:
    """Strictly typed options for one clone."""
    create_backup: bool = True
    overwrite_existing: bool = False
    validate_data: bool = True
    copy_attachments: bool = True

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)


def options_from_mapping(raw: Optional[Mapping[str, Any]], defaults: Optional[CloneOptions] = None) -> CloneOptions:
    """
    Build CloneOptions from a raw mapping.

    Missing or unrecognised values take the matching default.

    Args:
        raw: Option mapping as decoded from the transport (may be None)
        defaults: Fallback options, CloneOptions() if not given

    Returns:
        CloneOptions
    """
    defaults = defaults or CloneOptions()
    raw = raw or {}

    return CloneOptions(
        create_backup=normalize_bool(raw.get("create_backup"), defaults.create_backup),
        overwrite_existing=normalize_bool(raw.get("overwrite_existing"), defaults.overwrite_existing),
        validate_data=normalize_bool(raw.get("validate_data"), defaults.validate_data),
        copy_attachments=normalize_bool(raw.get("copy_attachments"), defaults.copy_attachments),
    )
