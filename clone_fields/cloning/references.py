# ==============================================
# Reference Checks
# ==============================================
#
# PURPOSE:
#   Some field types store ids that point outside the record:
#
#     image, file                 → attachment ids (or {"ID": ...} dicts)
#     post_object, relationship   → record ids
#     taxonomy                    → term ids in definition.taxonomy
#     user                        → user ids
#
#   Before a copied value is written, every such leaf is checked
#   against a ReferenceResolver. Ids that no longer resolve are
#   dropped (a single id becomes None, lists keep only the ids that
#   resolve) and one warning is produced per dropped id. The field
#   itself is still cloned.
#
#   Attachment checks only run with copy_attachments on; with it off
#   attachment values are copied as they are.
#
# CLASSES:
# --------
# - ReferenceResolver (abstract)
# - MemoryReferenceResolver  → fixed id sets (tests, CLI fixtures)
# - MongoReferenceResolver   → _id lookups in MongoDB collections
#
# FUNCTION:
# ---------
# - check_references(node, resolver, copy_attachments=True) -> list[str]
#     Rewrites reference leaves of `node` in place, returns warnings.
#
# ==============================================

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from clone_fields.schema import Group, Layouts, Leaf, Rows, ValueNode

ATTACHMENT_TYPES = {"image", "file"}
RECORD_REFERENCE_TYPES = {"post_object", "relationship"}
TAXONOMY_TYPE = "taxonomy"
USER_TYPE = "user"


class ReferenceResolver(ABC):
    """Existence checks for ids stored in reference fields."""

    @abstractmethod
    def attachment_exists(self, attachment_id) -> bool:
        ...

    @abstractmethod
    def record_exists(self, record_id) -> bool:
        ...

    @abstractmethod
    def user_exists(self, user_id) -> bool:
        ...

    @abstractmethod
    def taxonomy_exists(self, taxonomy: str) -> bool:
        ...

    @abstractmethod
    def term_exists(self, term_id, taxonomy: str) -> bool:
        ...


class MemoryReferenceResolver(ReferenceResolver):

    def __init__(
        self,
        attachments: Iterable = (),
        records: Iterable = (),
        users: Iterable = (),
        terms: Optional[Dict[str, Iterable]] = None
    ):
        self.attachments = set(attachments)
        self.records = set(records)
        self.users = set(users)
        self.terms = {taxonomy: set(ids) for taxonomy, ids in (terms or {}).items()}

    def attachment_exists(self, attachment_id) -> bool:
        return attachment_id in self.attachments

    def record_exists(self, record_id) -> bool:
        return record_id in self.records

    def user_exists(self, user_id) -> bool:
        return user_id in self.users

    def taxonomy_exists(self, taxonomy: str) -> bool:
        return taxonomy in self.terms

    def term_exists(self, term_id, taxonomy: str) -> bool:
        return term_id in self.terms.get(taxonomy, set())


class MongoReferenceResolver(ReferenceResolver):
    """
    Looks ids up by _id in one collection per reference kind.
    Terms are documents {_id, taxonomy}.
    """

    def __init__(
        self,
        mongo_client,
        records_collection: str = "records",
        attachments_collection: str = "attachments",
        users_collection: str = "users",
        terms_collection: str = "terms"
    ):
        self.mongo_client = mongo_client
        self.records_collection = records_collection
        self.attachments_collection = attachments_collection
        self.users_collection = users_collection
        self.terms_collection = terms_collection

    def _exists(self, collection_name: str, query: Dict[str, Any]) -> bool:
        return self.mongo_client.find_one(collection_name, query, {"_id": 1}) is not None

    def attachment_exists(self, attachment_id) -> bool:
        return self._exists(self.attachments_collection, {"_id": attachment_id})

    def record_exists(self, record_id) -> bool:
        return self._exists(self.records_collection, {"_id": record_id})

    def user_exists(self, user_id) -> bool:
        return self._exists(self.users_collection, {"_id": user_id})

    def taxonomy_exists(self, taxonomy: str) -> bool:
        return self._exists(self.terms_collection, {"taxonomy": taxonomy})

    def term_exists(self, term_id, taxonomy: str) -> bool:
        return self._exists(self.terms_collection, {"_id": term_id, "taxonomy": taxonomy})


def check_references(node: ValueNode, resolver: ReferenceResolver, copy_attachments: bool = True) -> List[str]:
    """
    Drop ids that no longer resolve from every reference leaf.

    Args:
        node: Value tree to rewrite in place (pass a copy)
        resolver: Existence checks
        copy_attachments: When False, attachment leaves are left alone

    Returns:
        One warning per dropped id or unknown taxonomy
    """
    warnings: List[str] = []
    for leaf in _leaves(node):
        definition = leaf.definition
        if definition is None or leaf.value is None:
            continue

        field_type = definition.type
        if field_type in ATTACHMENT_TYPES:
            if copy_attachments:
                leaf.value = _check_attachment(leaf.value, resolver, warnings)
        elif field_type in RECORD_REFERENCE_TYPES:
            leaf.value = _check_ids(
                leaf.value, resolver.record_exists, "Referenced record ID {} not found", warnings
            )
        elif field_type == USER_TYPE:
            leaf.value = _check_ids(leaf.value, resolver.user_exists, "User ID {} not found", warnings)
        elif field_type == TAXONOMY_TYPE:
            leaf.value = _check_terms(leaf.value, definition.taxonomy, resolver, warnings)

    return warnings


def _leaves(node: ValueNode) -> Iterator[Leaf]:
    if isinstance(node, Leaf):
        yield node
    elif isinstance(node, Rows):
        for row in node.rows:
            for child in row.values():
                yield from _leaves(child)
    elif isinstance(node, Group):
        for child in node.values.values():
            yield from _leaves(child)
    elif isinstance(node, Layouts):
        for row in node.rows:
            for child in row.values.values():
                yield from _leaves(child)


def _as_id(value) -> Optional[int]:
    # Numeric ids only; bool is an int subclass and never an id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _check_attachment(value, resolver: ReferenceResolver, warnings: List[str]):
    if isinstance(value, dict):
        attachment_id = _as_id(value.get("ID", value.get("id")))
        if attachment_id is None:
            return value
        if resolver.attachment_exists(attachment_id):
            return value
        warnings.append(f"Attachment ID {attachment_id} not found")
        return None

    attachment_id = _as_id(value)
    if attachment_id is None:
        return value
    if resolver.attachment_exists(attachment_id):
        return attachment_id
    warnings.append(f"Attachment ID {attachment_id} not found")
    return None


def _check_ids(
    value,
    exists: Callable[[int], bool],
    message: str,
    warnings: List[str],
    skip_non_numeric: bool = False
):
    if isinstance(value, list):
        kept = []
        for item in value:
            ref_id = _as_id(item)
            if ref_id is not None and exists(ref_id):
                kept.append(ref_id)
            elif ref_id is not None or not skip_non_numeric:
                warnings.append(message.format(item))
        return kept

    ref_id = _as_id(value)
    if ref_id is None:
        return value
    if exists(ref_id):
        return ref_id
    warnings.append(message.format(ref_id))
    return None


def _check_terms(value, taxonomy: Optional[str], resolver: ReferenceResolver, warnings: List[str]):
    if not taxonomy or not resolver.taxonomy_exists(taxonomy):
        warnings.append(f"Taxonomy {taxonomy or '(none)'} does not exist")
        return value

    return _check_ids(
        value,
        lambda term_id: resolver.term_exists(term_id, taxonomy),
        f"Term ID {{}} not found in taxonomy {taxonomy}",
        warnings,
        skip_non_numeric=True,
    )
