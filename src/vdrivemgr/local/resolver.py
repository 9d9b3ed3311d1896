"""Bounded, read-only graph queries over an ItemSnapshot."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from vdrivemgr.errors import BrokenChainError, CycleDetectedError, NotFoundError
from vdrivemgr.models import TRASH_ID, is_folder

from .snapshot import ItemSnapshot


@dataclass(frozen=True, slots=True)
class AncestorChain:
    """
    Resolved path of an item.

    Attributes:
        entries: (id, name) pairs ordered from the root-most ancestor down to
            the item itself.
        in_trash: True when the walk ended at the trash sentinel rather than
            at root.
    """

    entries: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    in_trash: bool = False

    @property
    def top_id(self) -> str:
        return self.entries[0][0]


class SubtreeResolver:
    """
    Descendant/ancestor queries that never loop on a corrupted graph.

    Every walk carries a visited set and is bounded by the collection size.
    """

    def __init__(self, snapshot: ItemSnapshot) -> None:
        self._snapshot = snapshot

    def descendants_of(self, folder_id: str) -> set[str]:
        """
        Return ids of all items transitively parented under folder_id.

        Raises:
            NotFoundError: folder_id is not in the collection.
            CycleDetectedError: a node is reached twice or the walk exceeds
                the collection size.
        """
        snap = self._snapshot
        if not snap.has(folder_id):
            raise NotFoundError(f"Item does not exist: {folder_id}", details={"item_id": folder_id})

        bound = len(snap)
        found: set[str] = set()
        q: deque[str] = deque([folder_id])

        while q:
            cur = q.popleft()
            for child_id in snap.children_by_parent_id.get(cur, ()):
                if child_id == folder_id or child_id in found:
                    raise CycleDetectedError(
                        "Cycle detected below folder",
                        details={"item_id": folder_id, "at": child_id},
                    )
                found.add(child_id)
                if len(found) > bound:
                    raise CycleDetectedError(
                        "Descendant walk exceeded collection size",
                        details={"item_id": folder_id},
                    )
                q.append(child_id)

        return found

    def ancestor_chain(self, item_id: str) -> AncestorChain:
        """
        Walk parent pointers from item_id up to root or the trash sentinel.

        Raises:
            NotFoundError: item_id is not in the collection.
            BrokenChainError: missing parent, file used as parent, cycle, or a
                chain longer than the collection (details["reason"]).
        """
        snap = self._snapshot
        if not snap.has(item_id):
            raise NotFoundError(f"Item does not exist: {item_id}", details={"item_id": item_id})

        bound = len(snap)
        visited: set[str] = set()
        entries: list[tuple[str, str]] = []
        cur_id = item_id

        while True:
            if cur_id in visited:
                raise _broken(item_id, "cycle", cur_id)
            if len(visited) >= bound:
                raise _broken(item_id, "too_deep", cur_id)
            visited.add(cur_id)

            cur = snap.get(cur_id)
            entries.append((cur.id, cur.name))

            parent_id = cur.parent_id
            if parent_id is None:
                return AncestorChain(entries=tuple(reversed(entries)), in_trash=False)
            if parent_id == TRASH_ID:
                return AncestorChain(entries=tuple(reversed(entries)), in_trash=True)
            if not snap.has(parent_id):
                raise _broken(item_id, "missing_parent", parent_id)
            if not is_folder(snap.get(parent_id)):
                raise _broken(item_id, "parent_not_folder", parent_id)
            cur_id = parent_id

    def is_descendant_of(self, candidate_id: str, ancestor_id: str) -> bool:
        """
        True if ancestor_id appears strictly above candidate_id.

        Raises:
            CycleDetectedError: the upward walk revisits a node.
        """
        snap = self._snapshot
        visited: set[str] = set()
        cur_id = snap.get(candidate_id).parent_id if snap.has(candidate_id) else None

        while cur_id is not None and cur_id != TRASH_ID:
            if cur_id == ancestor_id:
                return True
            if cur_id in visited or len(visited) > len(snap):
                raise CycleDetectedError(
                    "Cycle detected above item",
                    details={"item_id": candidate_id, "at": cur_id},
                )
            visited.add(cur_id)
            if not snap.has(cur_id):
                return False
            cur_id = snap.get(cur_id).parent_id

        return False

    def is_in_trash(self, item_id: str) -> bool:
        """True if the item's chain ends at the trash sentinel (direct or transitive)."""
        return self.ancestor_chain(item_id).in_trash

    def is_live(self, item_id: str) -> bool:
        return not self.is_in_trash(item_id)


def _broken(item_id: str, reason: str, at: str) -> BrokenChainError:
    return BrokenChainError(
        f"Ancestor chain of {item_id} is broken ({reason})",
        details={"item_id": item_id, "reason": reason, "at": at},
    )
