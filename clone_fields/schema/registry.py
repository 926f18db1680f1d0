import json
from pathlib import Path
from typing import Dict, List

from .field_types import FieldGroup


# ==============================================
# FieldGroupRegistry
# ==============================================
#
# PURPOSE:
#   Keep field group definitions on disk as JSON so that a
#   schema provider can answer "which fields does content
#   type X have?" without a live CMS.
#
# FILE STRUCTURE:
# ---------------
#   schema/
#   ├── group_product.json   → {key, title, content_types, fields: [...]}
#   └── group_event.json     → one group per file, file name = group key
#
# CLASS: FieldGroupRegistry
# -------------------------
#   Stateful — holds the loaded groups keyed by group key.
#
#   Constructor:
#   ------------
#   - __init__(storage_dir: str = "schema/")
#       Create storage directory if it doesn't exist.
#
class FieldGroupRegistry:
    """
    Loads and saves field groups as JSON files.

    Files created:
    - <storage_dir>/<group_key>.json
    """

    def __init__(self, storage_dir: str = "schema/"):
        """
        Initialize the registry.

        Args:
            storage_dir: Directory holding one JSON file per field group
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._groups: Dict[str, FieldGroup] = {}

#   Methods:
#   --------
#   - load() -> int
#       Read every *.json file in the directory. Return group count.
#
#   - save_group(group: FieldGroup) -> None
#       Write one group to <key>.json and register it.
#
#   - register(group: FieldGroup) -> None
#       Register a group in memory only.
#
    def load(self) -> int:
        """
        Load all field groups from disk, replacing anything in memory.

        Returns:
            Number of groups loaded
        """
        self._groups = {}

        for path in sorted(self.storage_dir.glob("*.json")):
            with open(path, 'r') as f:
                data = json.load(f)

            # A file may hold a single group or a list of groups
            items = data if isinstance(data, list) else [data]
            for item in items:
                group = FieldGroup.from_dict(item)
                self._groups[group.key] = group

        print(f"Loaded {len(self._groups)} field groups from {self.storage_dir}")
        return len(self._groups)

    def save_group(self, group: FieldGroup) -> None:
        """
        Save a field group to disk and register it.

        Args:
            group: The group to persist
        """
        path = self.storage_dir / f"{group.key}.json"
        with open(path, 'w') as f:
            json.dump(group.to_dict(), f, indent=2)

        self._groups[group.key] = group
        print(f"Saved field group '{group.key}' to {path}")

    def register(self, group: FieldGroup) -> None:
        self._groups[group.key] = group

#   LOOKUPS:
#   - field_groups_for(content_type: str) -> list[FieldGroup]
#   - get(group_key: str) -> FieldGroup | None
#   - all_groups() -> list[FieldGroup]
#
    def field_groups_for(self, content_type: str) -> List[FieldGroup]:
        """
        Return the groups bound to a content type, in registration order.
        """
        return [
            group for group in self._groups.values()
            if content_type in group.content_types
        ]

    def get(self, group_key: str):
        return self._groups.get(group_key)

    def all_groups(self) -> List[FieldGroup]:
        return list(self._groups.values())

#   UTILITY:
#   - exists() -> bool
#       Check if any group files exist.
#
#   - clear() -> None
#       Delete all group files (for testing or reset).
#
    def exists(self) -> bool:
        return any(self.storage_dir.glob("*.json"))

    def clear(self) -> None:
        for path in self.storage_dir.glob("*.json"):
            path.unlink()
            print(f"🗑️  Deleted {path}")

        self._groups = {}
        print("All field groups cleared!")
