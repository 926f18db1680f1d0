# ==============================================
# Clone Events
# ==============================================
#
# PURPOSE:
#   Notify observers (audit, logging) around a clone. Listeners are
#   plain callables taking one event and subscribe per event name:
#
#     "before_clone" → BeforeCloneEvent, after validation and the
#                      backup, before the first field is written
#     "after_clone"  → CloneEvent, once copying has finished
#
#   A failing listener is reported and skipped; it never changes
#   the clone result and never stops the other listeners.
#
# ==============================================

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Dict, List, Optional

from .options import CloneOptions

BEFORE_CLONE = "before_clone"
AFTER_CLONE = "after_clone"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BeforeCloneEvent:
    name: ClassVar[str] = BEFORE_CLONE

    source_record_id: Any
    target_record_id: Any
    field_keys: List[str] = field(default_factory=list)
    options: CloneOptions = field(default_factory=CloneOptions)
    actor_id: Any = None
    backup_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class CloneEvent:
    name: ClassVar[str] = AFTER_CLONE

    source_record_id: Any
    target_record_id: Any
    cloned_fields: List[str] = field(default_factory=list)
    actor_id: Any = None
    backup_id: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    occurred_at: datetime = field(default_factory=_now)


Listener = Callable[[Any], None]


class EventDispatcher:

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def subscribe(self, listener: Listener, event_name: str = AFTER_CLONE) -> None:
        self._listeners.setdefault(event_name, []).append(listener)

    def unsubscribe(self, listener: Listener, event_name: str = AFTER_CLONE) -> None:
        listeners = self._listeners.get(event_name, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event) -> int:
        """
        Call every listener subscribed to event.name.

        Returns:
            Number of listeners that ran without raising
        """
        delivered = 0
        for listener in list(self._listeners.get(event.name, [])):
            try:
                listener(event)
                delivered += 1
            except Exception as e:
                print(f"⚠ Clone event listener failed ({event.name}): {e}")
        return delivered
