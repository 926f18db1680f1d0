# ==============================================
# Transport Encoding
# ==============================================
#
# PURPOSE:
#   Convert between JSON-shaped request/response payloads and the
#   typed objects used by the cloner and backup manager.
#
#   Every response has the same envelope:
#     {"success": bool, "data": {...}}
#
# FUNCTIONS:
# ----------
# - parse_record_id(value) -> int | str
# - decode_clone_request(payload, actor_id=None, defaults=None) -> CloneRequest
#     Raises ValueError for malformed payloads.
# - encode_clone_result(result) -> dict
# - encode_failure(message) -> dict
# - encode_fields / encode_statistics / encode_selection
# - encode_backup_list / encode_restore / encode_delete / encode_cleanup
#
# ==============================================

from typing import Any, Dict, List, Mapping, Optional

from clone_fields.backup import BackupSummary
from clone_fields.cloning import CloneOptions, CloneRequest, CloneResult, options_from_mapping
from clone_fields.detection import DetectedGroup, FieldStatistics, SelectionReport

# Older clients post "*_post_id"
_SOURCE_KEYS = ("source_record_id", "source_post_id")
_TARGET_KEYS = ("target_record_id", "target_post_id")


def parse_record_id(value: Any):
    """
    Normalise a record id from the wire.

    Digit-only strings become ints; other strings are stripped.
    Empty values and booleans are rejected.
    """
    if value is None or isinstance(value, bool):
        raise ValueError("Record id is required")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Record id is required")
        return int(text) if text.isdigit() else text
    raise ValueError(f"Invalid record id: {value!r}")


def _first_present(payload: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if payload.get(key) not in (None, ""):
            return payload[key]
    return None


def _parse_field_keys(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, (list, tuple)):
        raise ValueError("field_keys must be a list of strings")

    keys = []
    for item in raw:
        if not isinstance(item, str):
            raise ValueError(f"Invalid field key: {item!r}")
        key = item.strip()
        if key:
            keys.append(key)
    return keys


def decode_clone_request(
    payload: Mapping[str, Any],
    actor_id=None,
    defaults: Optional[CloneOptions] = None
) -> CloneRequest:
    """
    Build a CloneRequest from a decoded JSON payload.

    Args:
        payload: {"source_record_id", "target_record_id", "field_keys", "options"}
        actor_id: Authenticated caller, supplied by the transport
        defaults: Option values for anything the payload leaves out

    Returns:
        CloneRequest with strictly typed options

    Raises:
        ValueError: If the payload is not a mapping or ids/keys are malformed
    """
    if not isinstance(payload, Mapping):
        raise ValueError("Request payload must be an object")

    raw_options = payload.get("options") or {}
    if not isinstance(raw_options, Mapping):
        raise ValueError("options must be an object")

    return CloneRequest(
        source_record_id=parse_record_id(_first_present(payload, _SOURCE_KEYS)),
        target_record_id=parse_record_id(_first_present(payload, _TARGET_KEYS)),
        field_keys=_parse_field_keys(payload.get("field_keys")),
        options=options_from_mapping(raw_options, defaults),
        actor_id=actor_id,
    )


def encode_failure(message: str, **extra) -> Dict[str, Any]:
    data = {"message": message}
    data.update(extra)
    return {"success": False, "data": data}


def encode_clone_result(result: CloneResult) -> Dict[str, Any]:
    """
    JSON-shaped response for a clone.

    backup_info is present only when a backup was created;
    message is always included, errors, warnings and skip_reasons too.
    """
    field_errors = [error for error in result.errors if error.field_key is not None]

    data: Dict[str, Any] = {
        "cloned_count": len(result.cloned_fields),
        "skipped_count": len(result.skipped_fields),
        "cloned_fields": list(result.cloned_fields),
        "skipped_fields": list(result.skipped_fields),
        "skip_reasons": dict(result.skip_reasons),
        "errors": [error.to_dict() for error in result.errors],
        "warnings": list(result.warnings),
        "operation_summary": {
            "total_requested": result.total_requested,
            "successful": len(result.cloned_fields),
            "failed": len(field_errors),
        },
        "message": result.message,
        "state": result.state.value,
    }

    if result.backup_id:
        created_at = result.backup_created_at
        data["backup_info"] = {
            "backup_id": result.backup_id,
            "created_at": created_at.isoformat() if created_at else None,
        }

    return {"success": result.success, "data": data}


def encode_fields(groups: List[DetectedGroup], statistics: Optional[FieldStatistics] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"field_groups": [group.to_dict() for group in groups]}
    if statistics is not None:
        data["statistics"] = statistics.to_dict()
    return {"success": True, "data": data}


def encode_statistics(statistics: FieldStatistics) -> Dict[str, Any]:
    return {"success": True, "data": statistics.to_dict()}


def encode_selection(report: SelectionReport) -> Dict[str, Any]:
    return {"success": True, "data": report.to_dict()}


def encode_backup_list(record_id, backups: List[BackupSummary]) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "record_id": record_id,
            "count": len(backups),
            "backups": [backup.to_dict() for backup in backups],
        },
    }


def encode_restore(backup_id: str, restored: bool) -> Dict[str, Any]:
    if restored:
        return {"success": True, "data": {"backup_id": backup_id, "message": "Backup restored successfully"}}
    return encode_failure("Failed to restore backup", backup_id=backup_id)


def encode_delete(backup_id: str, deleted: bool) -> Dict[str, Any]:
    if deleted:
        return {"success": True, "data": {"backup_id": backup_id, "message": "Backup deleted successfully"}}
    return encode_failure("Failed to delete backup", backup_id=backup_id)


def encode_cleanup(deleted_count: int) -> Dict[str, Any]:
    return {
        "success": True,
        "data": {
            "deleted_count": deleted_count,
            "message": f"Deleted {deleted_count} old backup(s)",
        },
    }
