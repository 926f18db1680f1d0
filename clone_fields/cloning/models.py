# ==============================================
# Clone Models (Data Classes)
# ==============================================
#
# PURPOSE:
#   Request and result types for one clone invocation.
#
# CLASSES:
# --------
# - CloneState      → VALIDATING / BACKING_UP / COPYING / FINALIZING
#                     plus terminals COMPLETED and REJECTED
# - CloneRequest    → what to copy, from where to where, with which options
# - FieldError      → one failed field (field_key None = request-level)
# - CloneResult     → outcome, produced once per clone, never persisted;
#                     warnings hold "<field_key>: <message>" lines for
#                     references dropped from otherwise cloned fields
#
# ==============================================

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .options import CloneOptions

SKIP_NO_SOURCE_VALUE = "no_source_value"
SKIP_TARGET_HAS_VALUE = "target_has_value"


class CloneState(Enum):
    VALIDATING = "validating"
    BACKING_UP = "backing_up"
    COPYING = "copying"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass
class CloneRequest:
    """
    One clone request.

    field_keys are de-duplicated on construction, first occurrence wins.
    """
    source_record_id: Any
    target_record_id: Any
    field_keys: List[str] = field(default_factory=list)
    options: CloneOptions = field(default_factory=CloneOptions)
    actor_id: Any = None

    def __post_init__(self):
        self.field_keys = list(dict.fromkeys(self.field_keys or []))


@dataclass
class FieldError:
    field_key: Optional[str]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"field_key": self.field_key, "reason": self.reason}


@dataclass
class CloneResult:
    """
    Outcome of FieldCloner.clone().

    success is True once validation (and the backup, when requested)
    passed, even if every field was skipped or some failed.
    """
    success: bool = False
    state: CloneState = CloneState.VALIDATING
    cloned_fields: List[str] = field(default_factory=list)
    skipped_fields: List[str] = field(default_factory=list)
    skip_reasons: Dict[str, str] = field(default_factory=dict)
    errors: List[FieldError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    backup_id: Optional[str] = None
    backup_created_at: Optional[datetime] = None
    message: str = ""

    def skip(self, field_key: str, reason: str) -> None:
        self.skipped_fields.append(field_key)
        self.skip_reasons[field_key] = reason

    def fail(self, field_key: Optional[str], reason: str) -> None:
        self.errors.append(FieldError(field_key, reason))

    def warn(self, field_key: str, message: str) -> None:
        self.warnings.append(f"{field_key}: {message}")

    @property
    def total_requested(self) -> int:
        return len(self.cloned_fields) + len(self.skipped_fields) + len(
            [error for error in self.errors if error.field_key is not None]
        )
