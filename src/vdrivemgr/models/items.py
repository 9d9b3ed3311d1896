"""Data model for virtual drive items (files and folders)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union

TRASH_ID: str = "__trash__"
"""Reserved parent_id marking the top of a trashed subtree. Never an item id."""

UploadStatus = Literal["in_progress", "failed"]
Content = Union[str, bytes]


class FileCategory(str, Enum):
    """Closed set of file categories derived from name and MIME type."""

    PDF = "pdf"
    IMAGE = "image"
    DOCUMENT = "document"
    AUDIO = "audio"
    VIDEO = "video"
    CODE = "code"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class UploadState:
    """
    Upload phase of a file placeholder.

    `None` on the item means there is no upload in flight.
    """

    status: UploadStatus
    progress: int = 0
    reason: Optional[str] = None

    @classmethod
    def in_progress(cls, progress: int = 0) -> UploadState:
        return cls(status="in_progress", progress=max(0, min(100, int(progress))))

    @classmethod
    def failed(cls, reason: str) -> UploadState:
        return cls(status="failed", progress=0, reason=reason)

    @property
    def is_in_progress(self) -> bool:
        return self.status == "in_progress"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"


@dataclass(slots=True)
class FolderItem:
    """A folder. Carries no fields beyond the shared base."""

    id: str
    name: str
    parent_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    is_favorite: bool = False

    kind: Literal["folder"] = field(default="folder", init=False)


@dataclass(slots=True)
class FileItem:
    """
    A file.

    Notes:
        - `content` may be absent while an upload is in flight, or after a
          reload when the content was too large to persist.
        - `category` is derived from name/mime_type by the store.
    """

    id: str
    name: str
    parent_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    is_favorite: bool = False

    size: int = 0
    mime_type: str = "application/octet-stream"
    category: FileCategory = FileCategory.OTHER
    content: Optional[Content] = None
    upload_state: Optional[UploadState] = None

    kind: Literal["file"] = field(default="file", init=False)


Item = Union[FileItem, FolderItem]


def is_file(item: Item) -> bool:
    return isinstance(item, FileItem)


def is_folder(item: Item) -> bool:
    return isinstance(item, FolderItem)


def content_size(content: Optional[Content]) -> int:
    """Size in bytes of a content payload (str is measured as UTF-8)."""
    if content is None:
        return 0
    if isinstance(content, bytes):
        return len(content)
    return len(content.encode("utf-8"))
