"""Snapshot storages: where the JSON blob lives between sessions."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from vdrivemgr.errors import StorageQuotaExceededError

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_BYTES: int = 5 * 1024 * 1024


class SnapshotStorage(Protocol):
    """Persistence collaborator of FileManager."""

    def load_blob(self) -> Optional[str]:
        """Return the stored blob, or None if nothing was saved yet."""
        ...

    def save_blob(self, blob: str) -> None:
        """Store the blob. Raises StorageQuotaExceededError if it does not fit."""
        ...

    def clear(self) -> None:
        """Discard the stored blob."""
        ...


def _check_quota(blob: str, quota_bytes: Optional[int]) -> None:
    if quota_bytes is None:
        return
    size = len(blob.encode("utf-8"))
    if size > quota_bytes:
        raise StorageQuotaExceededError(
            "Snapshot exceeds storage quota",
            details={"size": size, "quota_bytes": quota_bytes},
        )


class MemoryStorage:
    """Keeps the blob in memory, with a browser-like quota."""

    def __init__(self, blob: Optional[str] = None, *, quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES) -> None:
        self._blob = blob
        self.quota_bytes = quota_bytes

    def load_blob(self) -> Optional[str]:
        return self._blob

    def save_blob(self, blob: str) -> None:
        _check_quota(blob, self.quota_bytes)
        self._blob = blob

    def clear(self) -> None:
        self._blob = None


class JsonFileStorage:
    """
    Stores the blob in a JSON file.

    Writes go to a temp file in the same directory and are moved into place
    with os.replace, so a crash never leaves a half-written snapshot.
    """

    def __init__(self, path: Union[str, os.PathLike[str]], *, quota_bytes: Optional[int] = None) -> None:
        self.path = Path(path)
        self.quota_bytes = quota_bytes

    def load_blob(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def save_blob(self, blob: str) -> None:
        _check_quota(blob, self.quota_bytes)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(blob)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Saved snapshot to %s (%d chars)", self.path, len(blob))

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
