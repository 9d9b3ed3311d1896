"""Public storage exports."""

from __future__ import annotations

from .backends import DEFAULT_QUOTA_BYTES, JsonFileStorage, MemoryStorage, SnapshotStorage
from .schema import (
    INTERRUPTED_UPLOAD_REASON,
    FileRecord,
    FolderRecord,
    MalformedSnapshotError,
    decode_items,
    encode_items,
)

__all__ = [
    "SnapshotStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "DEFAULT_QUOTA_BYTES",
    "FileRecord",
    "FolderRecord",
    "MalformedSnapshotError",
    "INTERRUPTED_UPLOAD_REASON",
    "encode_items",
    "decode_items",
]
