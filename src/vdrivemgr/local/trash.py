"""Trash lifecycle: Live -> Trashed -> {Live | Purged}."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from vdrivemgr.errors import BrokenChainError, CycleDetectedError
from vdrivemgr.models import TRASH_ID, Item, is_file, is_folder

from .snapshot import ParentKey
from .tree_store import TreeStore

logger = logging.getLogger(__name__)


class ItemState(str, Enum):
    """Derived lifecycle state of an item (never stored)."""

    LIVE = "live"
    TRASHED = "trashed"
    PURGED = "purged"


@dataclass(frozen=True, slots=True)
class TrashEntry:
    """A top-level trash item plus subtree figures for display."""

    item: Item
    descendant_count: int
    total_size: int


class TrashManager:
    """Orchestrates trash operations over a TreeStore."""

    def __init__(self, store: TreeStore) -> None:
        self._store = store

    def state_of(self, item_id: str) -> ItemState:
        """
        Lifecycle state of an item. Unknown ids are PURGED.

        An item on a broken chain is reported TRASHED: it is not reachable
        from root.
        """
        if not self._store.has(item_id):
            return ItemState.PURGED
        try:
            in_trash = self._store.resolver.is_in_trash(item_id)
        except BrokenChainError:
            return ItemState.TRASHED
        return ItemState.TRASHED if in_trash else ItemState.LIVE

    def entries(self) -> list[TrashEntry]:
        """Top-level trash items, sorted by name then id."""
        result: list[TrashEntry] = []
        for item in self._store.list_children(TRASH_ID):
            descendants: set[str] = set()
            if is_folder(item):
                try:
                    descendants = self._store.resolver.descendants_of(item.id)
                except CycleDetectedError as exc:
                    logger.warning("Trash entry %s has a corrupted subtree: %s", item.id, exc)
            total = sum(
                self._store.get(i).size  # type: ignore[union-attr]
                for i in descendants | {item.id}
                if is_file(self._store.get(i))
            )
            result.append(
                TrashEntry(item=item, descendant_count=len(descendants), total_size=total)
            )
        return result

    def move_to_trash(self, item_ids: Iterable[str]) -> set[str]:
        return self._store.move_to_trash(item_ids)

    def restore(self, item_id: str, parent_id: ParentKey = None) -> Item:
        return self._store.restore(item_id, parent_id)

    def delete_permanently(self, item_id: str) -> set[str]:
        return self._store.delete_permanently(item_id)

    def empty_trash(self) -> set[str]:
        """Permanently delete every top-level trash item and its subtree."""
        return self._store.empty_trash()
