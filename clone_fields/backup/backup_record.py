# ==============================================
# Backup Records (Data Classes)
# ==============================================
#
# PURPOSE:
#   One snapshot of a record's field values, taken before a clone
#   overwrote them. Immutable once created.
#
# CLASSES:
# --------
# - BackupRecord
#     backup_id, record_id, actor_id, snapshot, created_at, field_meta
#     snapshot maps field_key → raw value (None = field was absent)
#     field_meta maps field_key → {"label", "type"} for display
#
# - BackupSummary
#     Listing view of a BackupRecord, without the values.
#
#   Both serialise to JSON-safe dicts; datetimes as ISO-8601 (UTC).
#
# ==============================================

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> datetime:
    """Accept a datetime or ISO-8601 string; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class BackupSummary:
    backup_id: str
    record_id: Any
    actor_id: Any
    created_at: datetime
    field_count: int = 0
    fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backup_id": self.backup_id,
            "record_id": self.record_id,
            "actor_id": self.actor_id,
            "created_at": self.created_at.isoformat(),
            "field_count": self.field_count,
            "fields": list(self.fields),
        }


@dataclass
class BackupRecord:
    """
    A stored snapshot.

    Values are kept in raw (stored) form so the record can be written
    as JSON as-is; restore rebuilds value trees from the live schema.
    """
    backup_id: str
    record_id: Any
    actor_id: Any
    snapshot: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    field_meta: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @property
    def field_count(self) -> int:
        return len(self.snapshot)

    @property
    def field_keys(self) -> List[str]:
        return list(self.snapshot.keys())

    def summary(self) -> BackupSummary:
        return BackupSummary(
            backup_id=self.backup_id,
            record_id=self.record_id,
            actor_id=self.actor_id,
            created_at=self.created_at,
            field_count=self.field_count,
            fields=self.field_keys,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "backup_id": self.backup_id,
            "record_id": self.record_id,
            "actor_id": self.actor_id,
            "created_at": self.created_at.isoformat(),
            "snapshot": copy.deepcopy(self.snapshot),
            "field_meta": copy.deepcopy(self.field_meta),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupRecord":
        """Reconstruct from a dictionary (loaded from JSON)."""
        return cls(
            backup_id=data["backup_id"],
            record_id=data["record_id"],
            actor_id=data.get("actor_id"),
            snapshot=copy.deepcopy(data.get("snapshot", {})),
            created_at=parse_timestamp(data["created_at"]),
            field_meta=copy.deepcopy(data.get("field_meta", {})),
        )

    def is_older_than(self, cutoff: Optional[datetime]) -> bool:
        return cutoff is not None and self.created_at < cutoff
