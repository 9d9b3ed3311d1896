"""Strict validation helpers for TreeStore."""

from __future__ import annotations

import re
from typing import Optional

from vdrivemgr.errors import (
    BrokenChainError,
    DuplicateNameError,
    InvalidNameError,
    InvalidStateError,
    NotAFileError,
    NotFoundError,
    NotInTrashError,
    ParentNotFoundError,
)
from vdrivemgr.models import TRASH_ID, FileItem, Item, is_file, is_folder
from vdrivemgr.options import NameScope

from .resolver import SubtreeResolver
from .snapshot import ItemSnapshot, ParentKey

RESERVED_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
RESERVED_NAMES: frozenset[str] = frozenset({".", ".."})


def normalize_name(name: str) -> str:
    """
    Trim and validate an item name.

    Raises:
        InvalidNameError: empty, "."/"..", or containing \\ / : * ? " < > |
    """
    if not isinstance(name, str):
        raise InvalidNameError("Name must be a string", details={"name": name})
    trimmed = name.strip()
    if not trimmed:
        raise InvalidNameError("Name must not be empty", details={"name": name})
    if trimmed in RESERVED_NAMES:
        raise InvalidNameError(f"Reserved name: {trimmed}", details={"name": trimmed})
    if RESERVED_CHARS_RE.search(trimmed):
        raise InvalidNameError(
            f"Name contains invalid characters: {trimmed}",
            details={"name": trimmed},
        )
    return trimmed


def validate_exists(snapshot: ItemSnapshot, item_id: str) -> Item:
    if not snapshot.has(item_id):
        raise NotFoundError(f"Item does not exist: {item_id}", details={"item_id": item_id})
    return snapshot.get(item_id)


def validate_is_file(snapshot: ItemSnapshot, item_id: str) -> FileItem:
    item = validate_exists(snapshot, item_id)
    if not is_file(item):
        raise NotAFileError(f"Item is not a file: {item_id}", details={"item_id": item_id})
    return item  # type: ignore[return-value]


def validate_live_parent(resolver: SubtreeResolver, snapshot: ItemSnapshot, parent_id: ParentKey) -> None:
    """Parent must be root, or an existing folder that is not in the trash."""
    if parent_id is None:
        return
    details = {"parent_id": parent_id}
    if parent_id == TRASH_ID or not snapshot.has(parent_id):
        raise ParentNotFoundError(f"Parent does not exist: {parent_id}", details=details)
    if not is_folder(snapshot.get(parent_id)):
        raise ParentNotFoundError(f"Parent must be a folder: {parent_id}", details=details)
    try:
        trashed = resolver.is_in_trash(parent_id)
    except BrokenChainError as exc:
        raise ParentNotFoundError(
            f"Parent is not reachable from root: {parent_id}", details=details, cause=exc
        ) from exc
    if trashed:
        raise ParentNotFoundError(f"Parent is in the trash: {parent_id}", details=details)


def validate_unique_name(
    snapshot: ItemSnapshot,
    parent_id: ParentKey,
    name: str,
    kind: str,
    scope: NameScope,
    *,
    ignore_id: Optional[str] = None,
) -> None:
    """
    Reject a name already used by a sibling (case-insensitive).

    The trash partition holds unrelated subtrees, so it is exempt.
    """
    if parent_id == TRASH_ID:
        return
    for other_id in snapshot.ids_with_name(parent_id, name):
        if other_id == ignore_id:
            continue
        other = snapshot.get(other_id)
        if scope is NameScope.DIRECTORY or other.kind == kind:
            raise DuplicateNameError(
                f"A {other.kind} named {other.name!r} already exists here",
                details={"name": name, "parent_id": parent_id, "item_id": other_id},
            )


def validate_in_trash(snapshot: ItemSnapshot, item_id: str) -> Item:
    """Item must sit directly in the trash partition."""
    item = validate_exists(snapshot, item_id)
    if item.parent_id != TRASH_ID:
        raise NotInTrashError(f"Item is not in the trash: {item_id}", details={"item_id": item_id})
    return item


def validate_move_no_cycle(resolver: SubtreeResolver, target_id: str, new_parent_id: ParentKey) -> None:
    """Reject moving a folder into itself or one of its descendants."""
    if new_parent_id is None:
        return
    if target_id == new_parent_id or resolver.is_descendant_of(new_parent_id, target_id):
        raise InvalidStateError(
            "Cannot move an item into its own subtree",
            details={"item_id": target_id, "parent_id": new_parent_id},
        )


def validate_upload_state(item: FileItem, expected: str) -> None:
    state = item.upload_state
    if state is None or state.status != expected:
        raise InvalidStateError(
            f"Upload of {item.id} is not {expected.replace('_', ' ')}",
            details={"item_id": item.id, "upload_state": state.status if state else None},
        )
