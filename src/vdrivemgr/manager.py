"""FileManager: TreeStore + persistence behind a typed-result API."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from vdrivemgr.errors import (
    ContentReadFailureError,
    StorageQuotaExceededError,
    VDriveMgrError,
    error_kind,
)
from vdrivemgr.local import ItemState, TrashEntry, TrashManager, TreeStore
from vdrivemgr.local.tree_store import IntegrityIssue
from vdrivemgr.local.validators import (
    normalize_name,
    validate_live_parent,
    validate_unique_name,
)
from vdrivemgr.models import Action, Content, FileItem, Item, OperationResult, is_file
from vdrivemgr.options import DEFAULT_OPTIONS, TreeOptions
from vdrivemgr.storage import MalformedSnapshotError, SnapshotStorage, decode_items, encode_items
from vdrivemgr.view import Crumb, ViewContext, breadcrumbs, is_resolvable, project_view

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[OperationResult], None]
ContentReader = Callable[[], Content]


class FileManager:
    """
    High-level entry point for a UI session.

    Policy:
        - Mutations never raise for expected conditions: every vdrivemgr
          error becomes OperationResult(status="failed").
        - After a successful mutation the snapshot is saved (autosave) and
          on_complete(result) is called.
        - Programming errors (e.g. negative sizes) still raise.
    """

    def __init__(
        self,
        storage: Optional[SnapshotStorage] = None,
        *,
        options: Optional[TreeOptions] = None,
        on_complete: Optional[CompletionCallback] = None,
        autosave: bool = True,
    ) -> None:
        self.options = options or DEFAULT_OPTIONS
        self._storage = storage
        self._on_complete = on_complete
        self._autosave = autosave
        self._set_store(TreeStore(options=self.options))

    @classmethod
    def from_store(
        cls,
        store: TreeStore,
        storage: Optional[SnapshotStorage] = None,
        *,
        on_complete: Optional[CompletionCallback] = None,
        autosave: bool = True,
    ) -> FileManager:
        """Create a manager around an existing store (useful for tests)."""
        obj = cls(storage, options=store.options, on_complete=on_complete, autosave=autosave)
        obj._set_store(store)
        return obj

    @property
    def store(self) -> TreeStore:
        return self._store

    @property
    def trash(self) -> TrashManager:
        return self._trash

    # ----------------------------
    # Persistence
    # ----------------------------
    def load(self) -> int:
        """
        Replace the collection with the stored snapshot.

        Invalid records are dropped; a blob that does not parse at all is
        discarded and the store starts empty.

        Returns:
            Number of items loaded.
        """
        items: list[Item] = []
        blob = self._storage.load_blob() if self._storage is not None else None
        if blob is not None:
            try:
                items = decode_items(blob)
            except MalformedSnapshotError as exc:
                logger.warning("Discarding malformed snapshot: %s", exc)
                self._storage.clear()  # type: ignore[union-attr]

        self._set_store(TreeStore.from_items(items, options=self.options))
        return len(self._store)

    def save(self) -> bool:
        """Persist the collection. Returns False if nothing could be stored."""
        if self._storage is None:
            return False
        blob = encode_items(
            self._store.items(),
            content_max_bytes=self.options.persist_content_max_bytes,
        )
        try:
            self._storage.save_blob(blob)
        except StorageQuotaExceededError as exc:
            logger.warning("Snapshot not saved: %s", exc)
            return False
        except OSError as exc:
            logger.warning("Snapshot not saved: %s", exc)
            return False
        return True

    # ----------------------------
    # Queries
    # ----------------------------
    def get(self, item_id: str) -> Optional[Item]:
        if not self._store.has(item_id):
            return None
        return self._store.get(item_id)

    def list_view(self, ctx: Optional[ViewContext] = None) -> list[Item]:
        return project_view(
            self._store.snapshot,
            ctx or ViewContext(),
            favorites_first=self.options.favorites_first,
        )

    def breadcrumbs(self, location: Optional[str]) -> list[Crumb]:
        return breadcrumbs(self._store.snapshot, location)

    def resolve_location(self, location: Optional[str]) -> Optional[str]:
        """Return location, or None (root) when it can no longer be reached."""
        if is_resolvable(self._store.snapshot, location):
            return location
        return None

    def trash_entries(self) -> list[TrashEntry]:
        return self._trash.entries()

    def state_of(self, item_id: str) -> ItemState:
        return self._trash.state_of(item_id)

    def check_integrity(self) -> list[IntegrityIssue]:
        return self._store.check_integrity()

    # ----------------------------
    # Mutations
    # ----------------------------
    def create_folder(self, name: str, parent_id: Optional[str] = None) -> OperationResult:
        return self._run(
            Action.CREATE_FOLDER,
            lambda: [self._store.create_folder(name, parent_id).id],
        )

    def create_file(
        self,
        name: str,
        parent_id: Optional[str] = None,
        *,
        size: Optional[int] = None,
        mime_type: Optional[str] = None,
        content: Optional[Content] = None,
    ) -> OperationResult:
        """Register an upload placeholder (phase one of an upload)."""
        return self._run(
            Action.CREATE_FILE,
            lambda: [
                self._store.create_file(
                    name, parent_id, size=size, mime_type=mime_type, content=content
                ).id
            ],
        )

    def update_upload_progress(self, item_id: str, progress: int) -> OperationResult:
        return self._run(
            Action.UPDATE_UPLOAD_PROGRESS,
            lambda: [self._store.update_upload_progress(item_id, progress).id],
            persist=False,
        )

    def fail_upload(self, item_id: str, reason: str) -> OperationResult:
        return self._run(Action.FAIL_UPLOAD, lambda: [self._store.fail_upload(item_id, reason).id])

    def cancel_upload(self, item_id: str) -> OperationResult:
        return self._run(Action.CANCEL_UPLOAD, lambda: [self._store.cancel_upload(item_id)])

    def dismiss_upload(self, item_id: str) -> OperationResult:
        return self._run(Action.DISMISS_UPLOAD, lambda: [self._store.dismiss_upload(item_id)])

    def replace_content(
        self,
        item_id: str,
        content: Content,
        size: Optional[int] = None,
        mime_type: Optional[str] = None,
    ) -> OperationResult:
        """Finish an upload (phase two) or replace a file's content."""
        return self._run(
            Action.REPLACE_CONTENT,
            lambda: [self._store.replace_content(item_id, content, size, mime_type).id],
        )

    def upload_file(
        self,
        name: str,
        read_content: ContentReader,
        parent_id: Optional[str] = None,
        *,
        mime_type: Optional[str] = None,
        overwrite: bool = False,
    ) -> OperationResult:
        """
        Run both upload phases synchronously.

        A placeholder is registered first; if read_content() fails the
        placeholder stays with a failed upload state and the result carries
        a ContentReadFailure. With overwrite=True a live file of the same
        name is moved to the trash first.
        """
        return self._run(
            Action.UPLOAD_FILE,
            lambda: self._upload(name, read_content, parent_id, mime_type, overwrite),
        )

    def rename(self, item_id: str, new_name: str) -> OperationResult:
        return self._run(Action.RENAME, lambda: [self._store.rename(item_id, new_name).id])

    def move(self, item_id: str, new_parent_id: Optional[str]) -> OperationResult:
        return self._run(Action.MOVE, lambda: [self._store.move(item_id, new_parent_id).id])

    def toggle_favorite(self, item_id: str) -> OperationResult:
        return self._run(Action.TOGGLE_FAVORITE, lambda: [self._store.toggle_favorite(item_id).id])

    def move_to_trash(self, item_ids: Iterable[str]) -> OperationResult:
        ids = list(item_ids)
        return self._run(Action.TRASH, lambda: sorted(self._trash.move_to_trash(ids)))

    def restore(self, item_id: str, parent_id: Optional[str] = None) -> OperationResult:
        return self._run(Action.RESTORE, lambda: [self._trash.restore(item_id, parent_id).id])

    def delete_permanently(self, item_id: str) -> OperationResult:
        return self._run(
            Action.DELETE_PERMANENT,
            lambda: sorted(self._trash.delete_permanently(item_id)),
        )

    def empty_trash(self) -> OperationResult:
        return self._run(Action.EMPTY_TRASH, lambda: sorted(self._trash.empty_trash()))

    # ----------------------------
    # Internals
    # ----------------------------
    def _set_store(self, store: TreeStore) -> None:
        self._store = store
        self._trash = TrashManager(store)

    def _run(
        self,
        action: Action,
        fn: Callable[[], list[str]],
        *,
        persist: bool = True,
    ) -> OperationResult:
        changed = True
        try:
            ids = fn()
            result = OperationResult(action=action.value, status="success", item_ids=list(ids))
        except VDriveMgrError as exc:
            # A failed read still leaves the failed placeholder behind.
            changed = isinstance(exc, ContentReadFailureError)
            result = _failed_result(action, exc)

        if persist and changed and self._autosave:
            result.persisted = self.save()

        if self._on_complete is not None:
            self._on_complete(result)
        return result

    def _upload(
        self,
        name: str,
        read_content: ContentReader,
        parent_id: Optional[str],
        mime_type: Optional[str],
        overwrite: bool,
    ) -> list[str]:
        clean = normalize_name(name)
        validate_live_parent(self._store.resolver, self._store.snapshot, parent_id)

        existing = self._find_live_file(parent_id, clean) if overwrite else None
        if existing is not None:
            # Check the rest of the directory before trashing anything.
            validate_unique_name(
                self._store.snapshot,
                parent_id,
                clean,
                "file",
                self.options.name_scope,
                ignore_id=existing.id,
            )
            self._store.move_to_trash([existing.id])
            logger.debug("Overwrite: moved %s to trash", existing.id)

        placeholder = self._store.create_file(clean, parent_id, mime_type=mime_type)
        try:
            content = read_content()
        except Exception as exc:
            reason = str(exc) or "Upload failed"
            self._store.fail_upload(placeholder.id, reason)
            raise ContentReadFailureError(
                f"Could not read content of {clean!r}: {reason}",
                details={"item_id": placeholder.id, "name": clean},
                cause=exc,
            ) from exc

        self._store.replace_content(placeholder.id, content, mime_type=mime_type)
        return [placeholder.id]

    def _find_live_file(self, parent_id: Optional[str], name: str) -> Optional[FileItem]:
        for item_id in self._store.snapshot.ids_with_name(parent_id, name):
            item = self._store.get(item_id)
            if is_file(item):
                return item  # type: ignore[return-value]
        return None


def _failed_result(action: Action, exc: VDriveMgrError) -> OperationResult:
    return OperationResult(
        action=action.value,
        status="failed",
        error_type=error_kind(exc).value,
        error_message=str(exc),
        error_details=dict(exc.details),
    )
