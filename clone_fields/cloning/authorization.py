# ==============================================
# Authorization
# ==============================================
#
# Answers "may this actor write to this record?" for the cloner.
#
# - Authorizer (abstract)  → can_write(actor_id, record_id) -> bool
# - AllowAllAuthorizer     → always True (CLI, tests)
# - AccessListAuthorizer   → explicit actor → record grants
#
# ==============================================

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional, Set


class Authorizer(ABC):

    @abstractmethod
    def can_write(self, actor_id, record_id) -> bool:
        ...


class AllowAllAuthorizer(Authorizer):

    def can_write(self, actor_id, record_id) -> bool:
        return True


class AccessListAuthorizer(Authorizer):
    """
    Grants per actor. An actor listed in `admins` may write anything.
    """

    def __init__(self, grants: Optional[Dict[Any, Iterable[Any]]] = None, admins: Optional[Iterable[Any]] = None):
        self._grants: Dict[Any, Set[Any]] = {
            actor: set(records) for actor, records in (grants or {}).items()
        }
        self._admins: Set[Any] = set(admins or [])

    def grant(self, actor_id, record_id) -> None:
        self._grants.setdefault(actor_id, set()).add(record_id)

    def revoke(self, actor_id, record_id) -> None:
        self._grants.get(actor_id, set()).discard(record_id)

    def can_write(self, actor_id, record_id) -> bool:
        if actor_id is None:
            return False
        if actor_id in self._admins:
            return True
        return record_id in self._grants.get(actor_id, set())
