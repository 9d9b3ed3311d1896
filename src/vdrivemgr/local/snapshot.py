"""Item collection and parent/name indexes for TreeStore."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Iterable, Optional

from vdrivemgr.models import Item

ParentKey = Optional[str]


def name_key(name: str) -> str:
    """Case-insensitive key used by the sibling name index."""
    return name.casefold()


@dataclass(slots=True)
class ItemSnapshot:
    """
    In-memory item collection.

    Indexes:
        - items_by_id
        - children_by_parent_id (None = root, TRASH_ID = trash partition)
        - name_index_by_parent_id (casefolded name -> ids)

    Only `add_item`, `remove_item`, `rename` and `replace_parent` touch the
    indexes; callers must not assign `name`/`parent_id` on items directly.
    """

    items_by_id: dict[str, Item] = field(default_factory=dict)
    children_by_parent_id: dict[ParentKey, set[str]] = field(default_factory=dict)
    name_index_by_parent_id: dict[ParentKey, dict[str, list[str]]] = field(
        default_factory=dict
    )

    @classmethod
    def from_items(cls, items: Iterable[Item]) -> ItemSnapshot:
        snap = cls()
        for item in items:
            snap._insert_item(item)
        return snap

    def clone(self) -> ItemSnapshot:
        """Copy items and indexes so the clone can be read while the original mutates."""
        return ItemSnapshot.from_items(
            dataclasses.replace(item) for item in self.items_by_id.values()
        )

    # ----------------------------
    # Query helpers
    # ----------------------------
    def __len__(self) -> int:
        return len(self.items_by_id)

    def has(self, item_id: str) -> bool:
        return item_id in self.items_by_id

    def get(self, item_id: str) -> Item:
        return self.items_by_id[item_id]

    def list_children_ids(self, parent_id: ParentKey) -> list[str]:
        return list(self.children_by_parent_id.get(parent_id, set()))

    def ids_with_name(self, parent_id: ParentKey, name: str) -> list[str]:
        return list(self.name_index_by_parent_id.get(parent_id, {}).get(name_key(name), []))

    # ----------------------------
    # Mutation helpers (keep indexes consistent)
    # ----------------------------
    def add_item(self, item: Item) -> None:
        self._insert_item(item)

    def remove_item(self, item_id: str) -> None:
        """Remove an item from the collection and the indexes of its parent."""
        item = self.items_by_id.pop(item_id, None)
        if item is None:
            return
        self._remove_child_index(item.parent_id, item.name, item_id)

    def rename(self, item_id: str, new_name: str) -> None:
        item = self.items_by_id[item_id]
        if item.name == new_name:
            return
        self._remove_name_index(item.parent_id, item.name, item_id)
        self._add_name_index(item.parent_id, new_name, item_id)
        item.name = new_name

    def replace_parent(self, item_id: str, new_parent_id: ParentKey) -> None:
        item = self.items_by_id[item_id]
        self._remove_child_index(item.parent_id, item.name, item_id)
        item.parent_id = new_parent_id
        self._add_child_index(new_parent_id, item.name, item_id)

    # ----------------------------
    # Internal index maintenance
    # ----------------------------
    def _insert_item(self, item: Item) -> None:
        self.items_by_id[item.id] = item
        self._add_child_index(item.parent_id, item.name, item.id)

    def _add_child_index(self, parent: ParentKey, name: str, child: str) -> None:
        self.children_by_parent_id.setdefault(parent, set()).add(child)
        self._add_name_index(parent, name, child)

    def _remove_child_index(self, parent: ParentKey, name: str, child: str) -> None:
        children = self.children_by_parent_id.get(parent)
        if children is not None:
            children.discard(child)
            if not children:
                self.children_by_parent_id.pop(parent, None)
        self._remove_name_index(parent, name, child)

    def _add_name_index(self, parent: ParentKey, name: str, child: str) -> None:
        parent_map = self.name_index_by_parent_id.setdefault(parent, {})
        ids = parent_map.setdefault(name_key(name), [])
        if child not in ids:
            ids.append(child)

    def _remove_name_index(self, parent: ParentKey, name: str, child: str) -> None:
        parent_map = self.name_index_by_parent_id.get(parent)
        if not parent_map:
            return
        key = name_key(name)
        ids = parent_map.get(key)
        if not ids:
            return
        if child in ids:
            ids.remove(child)
        if not ids:
            parent_map.pop(key, None)
        if not parent_map:
            self.name_index_by_parent_id.pop(parent, None)
