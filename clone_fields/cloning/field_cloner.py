# ==============================================
# FieldCloner
# ==============================================
#
# PURPOSE:
#   Copy selected field values from a source record to a target
#   record, one field at a time, with an optional backup first.
#
# STATE MACHINE (per clone() call):
#
#   VALIDATING ──fail──────────────────────────────► REJECTED
#       │
#       ▼ (create_backup)
#   BACKING_UP ──fail──────────────────────────────► REJECTED
#       │
#       ▼        emit BeforeCloneEvent
#   COPYING      each field independently:
#       │          source empty           → skipped (no_source_value)
#       │          target set, no overwrite → skipped (target_has_value)
#       │          build → validate → copy → check references → write
#       │          dropped references     → warnings, field still cloned
#       │          any failure            → errors, next field
#       ▼
#   FINALIZING   invalidate detector cache, emit CloneEvent
#       │
#       ▼
#   COMPLETED    success=True (even if nothing was copied)
#
#   REJECTED means nothing was written to the target.
#
# CLASS: FieldCloner
# ------------------
#   - __init__(provider, detector, backup_manager=None,
#              authorizer=None, dispatcher=None, resolver=None,
#              enabled_content_types=None)
#       resolver:              ReferenceResolver; no reference checks if None
#       enabled_content_types: content types cloning is allowed on;
#                              None or empty allows every type
#   - clone(request: CloneRequest) -> CloneResult     never raises
#
# ==============================================

from typing import Iterable, Optional

from clone_fields.schema import SchemaProvider, ValueValidator, build_tree, copy_tree, is_empty, to_raw
from clone_fields.detection import FieldDetector
from .authorization import Authorizer, AllowAllAuthorizer
from .events import BeforeCloneEvent, CloneEvent, EventDispatcher
from .models import (
    CloneRequest,
    CloneResult,
    CloneState,
    SKIP_NO_SOURCE_VALUE,
    SKIP_TARGET_HAS_VALUE,
)
from .references import ReferenceResolver, check_references


class FieldCloner:
    """
    Runs clone requests against a schema provider.
    """

    def __init__(
        self,
        provider: SchemaProvider,
        detector: FieldDetector,
        backup_manager=None,
        authorizer: Optional[Authorizer] = None,
        dispatcher: Optional[EventDispatcher] = None,
        resolver: Optional[ReferenceResolver] = None,
        enabled_content_types: Optional[Iterable[str]] = None
    ):
        """
        Initialize the FieldCloner.

        Args:
            provider: Reads and writes live field values
            detector: Its cache is cleared for the target after copying
            backup_manager: Required for requests with create_backup=True
            authorizer: Write permission check, AllowAllAuthorizer if None
            dispatcher: Receives a BeforeCloneEvent and a CloneEvent per clone
            resolver: Checks ids held by reference fields
            enabled_content_types: Content types cloning is allowed on
        """
        self.provider = provider
        self.detector = detector
        self.backup_manager = backup_manager
        self.authorizer = authorizer or AllowAllAuthorizer()
        self.dispatcher = dispatcher or EventDispatcher()
        self.resolver = resolver
        self.enabled_content_types = set(enabled_content_types or ())

    def clone(self, request: CloneRequest) -> CloneResult:
        """
        Execute one clone request.

        Args:
            request: What to copy and how

        Returns:
            CloneResult; state is COMPLETED or REJECTED
        """
        result = CloneResult(state=CloneState.VALIDATING)

        try:
            rejection = self._validate(request)
        except Exception as e:
            rejection = f"Validation failed: {e}"
        if rejection:
            return self._reject(result, rejection)

        if request.options.create_backup:
            result.state = CloneState.BACKING_UP
            if self.backup_manager is None:
                return self._reject(result, "Backup requested but no backup manager is configured")
            try:
                backup = self.backup_manager.take_snapshot(
                    request.target_record_id,
                    request.actor_id,
                    request.field_keys
                )
            except Exception as e:
                return self._reject(result, f"Backup failed, nothing was cloned: {e}")
            result.backup_id = backup.backup_id
            result.backup_created_at = backup.created_at

        self.dispatcher.emit(BeforeCloneEvent(
            source_record_id=request.source_record_id,
            target_record_id=request.target_record_id,
            field_keys=list(request.field_keys),
            options=request.options,
            actor_id=request.actor_id,
            backup_id=result.backup_id,
        ))

        result.state = CloneState.COPYING
        for field_key in request.field_keys:
            self._copy_field(request, field_key, result)

        result.state = CloneState.FINALIZING
        self._finalize(request, result)

        result.success = True
        result.state = CloneState.COMPLETED
        result.message = self._summary_message(result)
        return result

    def _validate(self, request: CloneRequest) -> Optional[str]:
        source_id = request.source_record_id
        target_id = request.target_record_id

        if source_id is None or target_id is None:
            return "Source and target records are required"
        if source_id == target_id:
            return "Source and target records must be different"
        if not request.field_keys:
            return "No fields selected for cloning"
        if not self.provider.record_exists(source_id):
            return f"Source record {source_id} does not exist"
        if not self.provider.record_exists(target_id):
            return f"Target record {target_id} does not exist"

        source_type = self.provider.content_type_of(source_id)
        target_type = self.provider.content_type_of(target_id)
        if source_type != target_type:
            return (
                f"Source and target must share a content type "
                f"('{source_type}' vs '{target_type}')"
            )
        if self.enabled_content_types and source_type not in self.enabled_content_types:
            return f"Cloning is not enabled for content type '{source_type}'"

        if not self.authorizer.can_write(request.actor_id, target_id):
            return f"Not allowed to edit record {target_id}"

        return None

    @staticmethod
    def _reject(result: CloneResult, message: str) -> CloneResult:
        result.success = False
        result.state = CloneState.REJECTED
        result.message = message
        result.fail(None, message)
        print(f"✗ Clone rejected: {message}")
        return result

    def _copy_field(self, request: CloneRequest, field_key: str, result: CloneResult) -> None:
        source_id = request.source_record_id
        target_id = request.target_record_id

        try:
            source_value = self.provider.value_of(source_id, field_key)
            if is_empty(source_value):
                result.skip(field_key, SKIP_NO_SOURCE_VALUE)
                return

            target_value = self.provider.value_of(target_id, field_key)
            if not is_empty(target_value) and not request.options.overwrite_existing:
                result.skip(field_key, SKIP_TARGET_HAS_VALUE)
                return

            definition = self.provider.find_definition(source_id, field_key)
            if definition is not None and not definition.is_cloneable:
                result.fail(field_key, f"Field type '{definition.type}' cannot be cloned")
                return

            tree = build_tree(definition, source_value)
            if request.options.validate_data:
                ok, reason = ValueValidator.validate_tree(tree)
                if not ok:
                    result.fail(field_key, f"Invalid value: {reason}")
                    return

            copied = copy_tree(tree)
            warnings = []
            if self.resolver is not None:
                warnings = check_references(copied, self.resolver, request.options.copy_attachments)

            # One write per top-level field: the whole tree or nothing
            if not self.provider.set_value(target_id, field_key, to_raw(copied)):
                result.fail(field_key, "Failed to write value to target record")
                return
        except Exception as e:
            result.fail(field_key, str(e))
            return

        result.cloned_fields.append(field_key)
        for warning in warnings:
            result.warn(field_key, warning)

    def _finalize(self, request: CloneRequest, result: CloneResult) -> None:
        try:
            self.detector.invalidate(request.target_record_id)
        except Exception as e:
            print(f"⚠ Could not clear field cache for record {request.target_record_id}: {e}")

        self.dispatcher.emit(CloneEvent(
            source_record_id=request.source_record_id,
            target_record_id=request.target_record_id,
            cloned_fields=list(result.cloned_fields),
            actor_id=request.actor_id,
            backup_id=result.backup_id,
            warnings=list(result.warnings),
        ))

    @staticmethod
    def _summary_message(result: CloneResult) -> str:
        cloned = len(result.cloned_fields)
        failed = len(result.errors)
        warned = len(result.warnings)

        if failed:
            message = f"Cloned {cloned} field(s) with {failed} error(s)"
            if warned:
                message += f" and {warned} warning(s)"
        else:
            message = f"Successfully cloned {cloned} field(s)"
            if warned:
                message += f" with {warned} warning(s)"

        if result.skipped_fields:
            message += f", {len(result.skipped_fields)} skipped"
        return message
