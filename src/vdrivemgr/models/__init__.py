"""Public model exports for vdrivemgr."""

from __future__ import annotations

from .actions import Action
from .items import (
    TRASH_ID,
    Content,
    FileCategory,
    FileItem,
    FolderItem,
    Item,
    UploadState,
    content_size,
    is_file,
    is_folder,
)
from .results import OperationResult, OperationStatus

__all__ = [
    "TRASH_ID",
    "Action",
    "Content",
    "FileCategory",
    "FileItem",
    "FolderItem",
    "Item",
    "UploadState",
    "content_size",
    "is_file",
    "is_folder",
    "OperationStatus",
    "OperationResult",
]
