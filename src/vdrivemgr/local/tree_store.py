"""TreeStore: the single owner of the item collection and its mutations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from vdrivemgr.errors import (
    BrokenChainError,
    InvalidStateError,
)
from vdrivemgr.models import (
    TRASH_ID,
    Content,
    FileItem,
    FolderItem,
    Item,
    UploadState,
    content_size,
    is_file,
    is_folder,
)
from vdrivemgr.options import DEFAULT_OPTIONS, NameScope, TreeOptions
from vdrivemgr.util.ids import new_item_id
from vdrivemgr.util.mime import determine_category, guess_mime_type, split_extension
from vdrivemgr.util.time import monotonic_touch, now_utc

from .resolver import SubtreeResolver
from .snapshot import ItemSnapshot, ParentKey
from .validators import (
    normalize_name,
    validate_exists,
    validate_in_trash,
    validate_is_file,
    validate_live_parent,
    validate_move_no_cycle,
    validate_unique_name,
    validate_upload_state,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IntegrityIssue:
    """A violated collection invariant, as reported by check_integrity()."""

    kind: str  # orphan | parent_not_folder | cycle | duplicate_name
    item_id: str
    detail: str = ""


class TreeStore:
    """
    Hierarchical item collection with invariant-checked mutations.

    Every mutation validates all of its preconditions before touching the
    snapshot, so a failing call leaves the collection unchanged. Expected
    failures are raised as vdrivemgr errors; FileManager turns them into
    OperationResult records.

    Trashing only reparents the top-level items to TRASH_ID. Descendants
    keep pointing at their (now trashed) parent and are in the trash
    transitively.
    """

    def __init__(
        self,
        snapshot: Optional[ItemSnapshot] = None,
        *,
        options: Optional[TreeOptions] = None,
    ) -> None:
        self._snapshot = snapshot if snapshot is not None else ItemSnapshot()
        self._resolver = SubtreeResolver(self._snapshot)
        self.options = options or DEFAULT_OPTIONS

    @classmethod
    def from_items(
        cls,
        items: Iterable[Item],
        *,
        options: Optional[TreeOptions] = None,
        repair: bool = True,
    ) -> TreeStore:
        """
        Build a store from loaded items.

        With repair=True, records that would break the tree are fixed: the
        trash sentinel and duplicate ids are dropped, and items with a
        dangling parent, a file parent, or on a cycle are moved to root. Live
        siblings with clashing names are renamed, keeping the earliest item.
        """
        unique: list[Item] = []
        seen: set[str] = set()
        for item in items:
            if repair and (item.id == TRASH_ID or item.id in seen):
                logger.warning("Dropping item with reserved or duplicate id: %s", item.id)
                continue
            seen.add(item.id)
            unique.append(item)

        store = cls(ItemSnapshot.from_items(unique), options=options)
        if repair:
            store._repair()
        return store

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def snapshot(self) -> ItemSnapshot:
        """Live snapshot; treat as read-only."""
        return self._snapshot

    @property
    def resolver(self) -> SubtreeResolver:
        return self._resolver

    def snapshot_copy(self) -> ItemSnapshot:
        return self._snapshot.clone()

    def __len__(self) -> int:
        return len(self._snapshot)

    def has(self, item_id: str) -> bool:
        return self._snapshot.has(item_id)

    def get(self, item_id: str) -> Item:
        return validate_exists(self._snapshot, item_id)

    def items(self) -> list[Item]:
        return list(self._snapshot.items_by_id.values())

    def list_children(self, parent_id: ParentKey) -> list[Item]:
        infos = [self._snapshot.get(cid) for cid in self._snapshot.list_children_ids(parent_id)]
        infos.sort(key=lambda x: (x.name, x.id))
        return infos

    # ----------------------------
    # Creation and uploads
    # ----------------------------
    def create_folder(self, name: str, parent_id: ParentKey = None) -> FolderItem:
        name = normalize_name(name)
        validate_live_parent(self._resolver, self._snapshot, parent_id)
        validate_unique_name(self._snapshot, parent_id, name, "folder", self.options.name_scope)

        now = now_utc()
        folder = FolderItem(
            id=new_item_id(),
            name=name,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        self._snapshot.add_item(folder)
        logger.debug("Created folder %s (%s) under %s", folder.id, name, parent_id)
        return folder

    def create_file(
        self,
        name: str,
        parent_id: ParentKey = None,
        *,
        size: Optional[int] = None,
        mime_type: Optional[str] = None,
        content: Optional[Content] = None,
    ) -> FileItem:
        """
        Register a file placeholder with upload_state in_progress(0).

        The upload is finished with replace_content(), or ends with
        fail_upload() / cancel_upload().
        """
        name = normalize_name(name)
        if size is None:
            size = content_size(content)
        if size < 0:
            raise ValueError("size must be >= 0")
        validate_live_parent(self._resolver, self._snapshot, parent_id)
        validate_unique_name(self._snapshot, parent_id, name, "file", self.options.name_scope)

        mime = mime_type or guess_mime_type(name)
        now = now_utc()
        info = FileItem(
            id=new_item_id(),
            name=name,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
            size=size,
            mime_type=mime,
            category=determine_category(name, mime),
            content=content,
            upload_state=UploadState.in_progress(0),
        )
        self._snapshot.add_item(info)
        logger.debug("Created file placeholder %s (%s) under %s", info.id, name, parent_id)
        return info

    def update_upload_progress(self, item_id: str, progress: int) -> FileItem:
        info = validate_is_file(self._snapshot, item_id)
        validate_upload_state(info, "in_progress")
        info.upload_state = UploadState.in_progress(progress)
        return info

    def fail_upload(self, item_id: str, reason: str) -> FileItem:
        """Mark an in-flight upload as failed; the placeholder stays visible."""
        info = validate_is_file(self._snapshot, item_id)
        validate_upload_state(info, "in_progress")
        info.upload_state = UploadState.failed(reason)
        logger.debug("Upload %s failed: %s", item_id, reason)
        return info

    def cancel_upload(self, item_id: str) -> str:
        """Remove an in-flight placeholder. Distinct from failure."""
        info = validate_is_file(self._snapshot, item_id)
        validate_upload_state(info, "in_progress")
        self._snapshot.remove_item(item_id)
        return item_id

    def dismiss_upload(self, item_id: str) -> str:
        """Remove a failed placeholder once the user has seen the error."""
        info = validate_is_file(self._snapshot, item_id)
        validate_upload_state(info, "failed")
        self._snapshot.remove_item(item_id)
        return item_id

    def replace_content(
        self,
        item_id: str,
        content: Content,
        size: Optional[int] = None,
        mime_type: Optional[str] = None,
    ) -> FileItem:
        """Attach content to a file and clear its upload state."""
        info = validate_is_file(self._snapshot, item_id)
        new_size = content_size(content) if size is None else size
        if new_size < 0:
            raise ValueError("size must be >= 0")

        info.content = content
        info.size = new_size
        if mime_type:
            info.mime_type = mime_type
        info.category = determine_category(info.name, info.mime_type)
        info.upload_state = None
        self._touch(info)
        return info

    # ----------------------------
    # Rename / move / favorite
    # ----------------------------
    def rename(self, item_id: str, new_name: str) -> Item:
        item = validate_exists(self._snapshot, item_id)
        name = normalize_name(new_name)

        if is_file(item) and self.options.preserve_extension_on_rename:
            _, ext = split_extension(item.name)
            if ext and not name.lower().endswith(ext.lower()):
                name = normalize_name(name + ext)

        if name == item.name:
            return item

        validate_unique_name(
            self._snapshot,
            item.parent_id,
            name,
            item.kind,
            self.options.name_scope,
            ignore_id=item_id,
        )
        self._snapshot.rename(item_id, name)
        if is_file(item):
            item.category = determine_category(name, item.mime_type)
        self._touch(item)
        return item

    def move(self, item_id: str, new_parent_id: ParentKey) -> Item:
        """Move a live item under another live folder (or root)."""
        item = validate_exists(self._snapshot, item_id)
        if self._in_trash_or_broken(item_id):
            raise InvalidStateError(
                f"Item is in the trash: {item_id}", details={"item_id": item_id}
            )
        validate_live_parent(self._resolver, self._snapshot, new_parent_id)
        validate_move_no_cycle(self._resolver, item_id, new_parent_id)

        if item.parent_id == new_parent_id:
            return item

        validate_unique_name(
            self._snapshot, new_parent_id, item.name, item.kind, self.options.name_scope
        )
        self._snapshot.replace_parent(item_id, new_parent_id)
        self._touch(item)
        return item

    def toggle_favorite(self, item_id: str) -> Item:
        item = validate_exists(self._snapshot, item_id)
        item.is_favorite = not item.is_favorite
        self._touch(item)
        return item

    # ----------------------------
    # Trash lifecycle
    # ----------------------------
    def move_to_trash(self, item_ids: Iterable[str]) -> set[str]:
        """
        Reparent the top-level requested items to TRASH_ID.

        Unknown ids and items already (transitively) in the trash are
        skipped. A requested item that lies below another requested item
        travels with its ancestor and keeps its parent_id.

        Returns:
            Ids actually reparented.
        """
        ancestors_by_id: dict[str, set[str]] = {}
        for item_id in dict.fromkeys(item_ids):
            if not self._snapshot.has(item_id):
                logger.debug("move_to_trash: skipping unknown id %s", item_id)
                continue
            try:
                chain = self._resolver.ancestor_chain(item_id)
            except BrokenChainError as exc:
                logger.warning("Trashing item with broken chain %s: %s", item_id, exc)
                ancestors_by_id[item_id] = set()
                continue
            if chain.in_trash:
                continue
            ancestors_by_id[item_id] = {eid for eid, _ in chain.entries[:-1]}

        requested = set(ancestors_by_id)
        moved = {
            item_id
            for item_id, ancestors in ancestors_by_id.items()
            if not ancestors & requested
        }

        for item_id in moved:
            self._snapshot.replace_parent(item_id, TRASH_ID)
            self._touch(self._snapshot.get(item_id))
        if moved:
            logger.debug("Moved %d item(s) to trash", len(moved))
        return moved

    def restore(self, item_id: str, parent_id: ParentKey = None) -> Item:
        """
        Reattach a top-level trash item (and so its whole subtree).

        Restores to root unless a live folder is given.
        """
        item = validate_in_trash(self._snapshot, item_id)
        validate_live_parent(self._resolver, self._snapshot, parent_id)
        validate_unique_name(
            self._snapshot, parent_id, item.name, item.kind, self.options.name_scope
        )
        self._snapshot.replace_parent(item_id, parent_id)
        self._touch(item)
        return item

    def delete_permanently(self, item_id: str) -> set[str]:
        """Remove a top-level trash item and all of its descendants."""
        removed = self._purge_set(item_id)
        for rid in removed:
            self._snapshot.remove_item(rid)
        logger.debug("Permanently deleted %d item(s) under %s", len(removed), item_id)
        return removed

    def empty_trash(self) -> set[str]:
        """
        Permanently delete every top-level trash item and its subtree.

        All subtrees are resolved before anything is removed, so a corrupted
        entry fails the whole call and leaves the trash as it was.
        """
        removed: set[str] = set()
        for item_id in self._snapshot.list_children_ids(TRASH_ID):
            removed |= self._purge_set(item_id)

        for rid in removed:
            self._snapshot.remove_item(rid)
        logger.debug("Emptied trash: %d item(s) removed", len(removed))
        return removed

    def _purge_set(self, item_id: str) -> set[str]:
        item = validate_in_trash(self._snapshot, item_id)
        removed = {item_id}
        if is_folder(item):
            removed |= self._resolver.descendants_of(item_id)
        return removed

    # ----------------------------
    # Integrity
    # ----------------------------
    def check_integrity(self) -> list[IntegrityIssue]:
        """Report every violated invariant (orphans, file parents, cycles, name clashes)."""
        issues: list[IntegrityIssue] = []
        for item in self._snapshot.items_by_id.values():
            try:
                self._resolver.ancestor_chain(item.id)
            except BrokenChainError as exc:
                reason = exc.details.get("reason", "")
                kind = {
                    "missing_parent": "orphan",
                    "parent_not_folder": "parent_not_folder",
                }.get(reason, "cycle")
                issues.append(IntegrityIssue(kind=kind, item_id=item.id, detail=str(exc)))

        for parent_id, name_map in self._snapshot.name_index_by_parent_id.items():
            if parent_id == TRASH_ID:
                continue
            for key, ids in name_map.items():
                kinds = [self._snapshot.get(i).kind for i in ids]
                if self.options.name_scope is NameScope.DIRECTORY:
                    clash = len(ids) > 1
                else:
                    clash = len(kinds) != len(set(kinds))
                if clash:
                    issues.extend(
                        IntegrityIssue(kind="duplicate_name", item_id=i, detail=key)
                        for i in sorted(ids)
                    )
        return issues

    # ----------------------------
    # Internals
    # ----------------------------
    def _touch(self, item: Item) -> None:
        item.updated_at = monotonic_touch(item.updated_at)

    def _in_trash_or_broken(self, item_id: str) -> bool:
        try:
            return self._resolver.is_in_trash(item_id)
        except BrokenChainError:
            return True

    def _repair(self) -> None:
        snap = self._snapshot
        for item in list(snap.items_by_id.values()):
            parent_id = item.parent_id
            if parent_id is None or parent_id == TRASH_ID:
                continue
            if not snap.has(parent_id):
                logger.warning("Item %s has missing parent %s; moving to root", item.id, parent_id)
                snap.replace_parent(item.id, None)
            elif not is_folder(snap.get(parent_id)):
                logger.warning("Item %s has file parent %s; moving to root", item.id, parent_id)
                snap.replace_parent(item.id, None)

        for item in list(snap.items_by_id.values()):
            try:
                self._resolver.ancestor_chain(item.id)
            except BrokenChainError as exc:
                # "at" is the node where the walk looped; cutting it breaks the cycle.
                target = exc.details.get("at", item.id)
                if not snap.has(target):
                    target = item.id
                logger.warning("Item %s is on a broken chain (%s); moving to root", target, exc)
                snap.replace_parent(target, None)

        self._dedupe_names()

    def _dedupe_names(self) -> None:
        """Rename later siblings that clash with an earlier one to "base (n)ext"."""
        snap = self._snapshot
        for parent_id, name_map in list(snap.name_index_by_parent_id.items()):
            if parent_id == TRASH_ID:
                continue
            for ids in [list(group) for group in name_map.values()]:
                if len(ids) < 2:
                    continue
                kept: list[Item] = []
                for item in sorted((snap.get(i) for i in ids), key=lambda i: (i.created_at, i.id)):
                    if not any(self._names_clash(item, other) for other in kept):
                        kept.append(item)
                        continue
                    new_name = self._free_name(parent_id, item)
                    logger.warning(
                        "Item %s clashes with a sibling named %r; renamed to %r",
                        item.id,
                        item.name,
                        new_name,
                    )
                    snap.rename(item.id, new_name)

    def _names_clash(self, item: Item, other: Item) -> bool:
        return self.options.name_scope is NameScope.DIRECTORY or item.kind == other.kind

    def _free_name(self, parent_id: ParentKey, item: Item) -> str:
        base, ext = split_extension(item.name) if is_file(item) else (item.name, "")
        n = 1
        while True:
            candidate = f"{base} ({n}){ext}"
            taken = (self._snapshot.get(i) for i in self._snapshot.ids_with_name(parent_id, candidate))
            if not any(self._names_clash(item, other) for other in taken):
                return candidate
            n += 1

