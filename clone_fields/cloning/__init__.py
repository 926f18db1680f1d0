# ==============================================
# TOPIC 3: CLONING
# ==============================================
#
# This package copies field values between records.
#
# Modules:
# --------
# - options.py        → normalize_bool, CloneOptions, options_from_mapping
# - models.py         → CloneRequest, CloneResult, FieldError, CloneState
# - authorization.py  → Authorizer + allow-all / access-list variants
# - events.py         → BeforeCloneEvent, CloneEvent, EventDispatcher
# - references.py     → ReferenceResolver + memory / Mongo variants,
#                        check_references
# - field_cloner.py   → FieldCloner state machine
#
# ==============================================

from .options import CloneOptions, normalize_bool, options_from_mapping
from .models import (
    CloneRequest,
    CloneResult,
    CloneState,
    FieldError,
    SKIP_NO_SOURCE_VALUE,
    SKIP_TARGET_HAS_VALUE,
)
from .authorization import Authorizer, AllowAllAuthorizer, AccessListAuthorizer
from .events import AFTER_CLONE, BEFORE_CLONE, BeforeCloneEvent, CloneEvent, EventDispatcher
from .references import (
    MemoryReferenceResolver,
    MongoReferenceResolver,
    ReferenceResolver,
    check_references,
)
from .field_cloner import FieldCloner

__all__ = [
    "CloneOptions",
    "normalize_bool",
    "options_from_mapping",
    "CloneRequest",
    "CloneResult",
    "CloneState",
    "FieldError",
    "SKIP_NO_SOURCE_VALUE",
    "SKIP_TARGET_HAS_VALUE",
    "Authorizer",
    "AllowAllAuthorizer",
    "AccessListAuthorizer",
    "AFTER_CLONE",
    "BEFORE_CLONE",
    "BeforeCloneEvent",
    "CloneEvent",
    "EventDispatcher",
    "ReferenceResolver",
    "MemoryReferenceResolver",
    "MongoReferenceResolver",
    "check_references",
    "FieldCloner",
]
