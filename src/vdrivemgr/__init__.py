"""vdrivemgr public API."""

from __future__ import annotations

import logging

from vdrivemgr.errors import (
    BrokenChainError,
    ContentReadFailureError,
    CycleDetectedError,
    DuplicateNameError,
    ErrorKind,
    InvalidNameError,
    InvalidStateError,
    NotAFileError,
    NotFoundError,
    NotInTrashError,
    ParentNotFoundError,
    StorageQuotaExceededError,
    VDriveMgrError,
    error_kind,
)
from vdrivemgr.local import (
    AncestorChain,
    ItemState,
    SubtreeResolver,
    TrashEntry,
    TrashManager,
    TreeStore,
)
from vdrivemgr.manager import FileManager
from vdrivemgr.models import (
    TRASH_ID,
    Action,
    FileCategory,
    FileItem,
    FolderItem,
    Item,
    OperationResult,
    UploadState,
)
from vdrivemgr.options import NameScope, TreeOptions
from vdrivemgr.storage import JsonFileStorage, MemoryStorage, SnapshotStorage
from vdrivemgr.view import Crumb, ViewContext, breadcrumbs, project_view

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "FileManager",
    "TreeStore",
    "TrashManager",
    "SubtreeResolver",
    # Config
    "TreeOptions",
    "NameScope",
    # Models
    "TRASH_ID",
    "Action",
    "FileCategory",
    "FileItem",
    "FolderItem",
    "Item",
    "UploadState",
    "OperationResult",
    "AncestorChain",
    "ItemState",
    "TrashEntry",
    # Views
    "ViewContext",
    "Crumb",
    "project_view",
    "breadcrumbs",
    # Storage
    "SnapshotStorage",
    "MemoryStorage",
    "JsonFileStorage",
    # Errors
    "VDriveMgrError",
    "InvalidNameError",
    "DuplicateNameError",
    "ParentNotFoundError",
    "NotFoundError",
    "NotInTrashError",
    "NotAFileError",
    "CycleDetectedError",
    "BrokenChainError",
    "InvalidStateError",
    "StorageQuotaExceededError",
    "ContentReadFailureError",
    "ErrorKind",
    "error_kind",
]
