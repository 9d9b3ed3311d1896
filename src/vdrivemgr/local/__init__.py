"""Public exports for the in-memory tree."""

from __future__ import annotations

from .resolver import AncestorChain, SubtreeResolver
from .snapshot import ItemSnapshot
from .trash import ItemState, TrashEntry, TrashManager
from .tree_store import IntegrityIssue, TreeStore

__all__ = [
    "ItemSnapshot",
    "SubtreeResolver",
    "AncestorChain",
    "TreeStore",
    "IntegrityIssue",
    "TrashManager",
    "TrashEntry",
    "ItemState",
]
