"""Exception hierarchy and error-kind taxonomy for vdrivemgr."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class VDriveMgrError(Exception):
    """
    Base exception for vdrivemgr.

    Attributes:
        details: Optional structured information (offending item_id, name, ...).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidNameError(VDriveMgrError):
    """Raised when a name is empty, reserved, or contains forbidden characters."""


class DuplicateNameError(VDriveMgrError):
    """Raised when a live sibling already uses the (case-insensitive) name."""


class ParentNotFoundError(VDriveMgrError):
    """Raised when the requested parent is missing, not a folder, or not live."""


class NotFoundError(VDriveMgrError):
    """Raised when an item id is not in the collection."""


class NotInTrashError(VDriveMgrError):
    """Raised when restore/permanent delete targets an item outside the trash."""


class NotAFileError(VDriveMgrError):
    """Raised when a file-only operation targets a folder."""


class CycleDetectedError(VDriveMgrError):
    """Raised when a descendant walk revisits a node or exceeds the collection size."""


class BrokenChainError(VDriveMgrError):
    """Raised when an ancestor chain cannot be resolved up to root or trash."""


class InvalidStateError(VDriveMgrError):
    """Raised when an item is in the wrong phase for the requested operation."""


class StorageQuotaExceededError(VDriveMgrError):
    """Raised by snapshot storages when a blob does not fit the quota."""


class ContentReadFailureError(VDriveMgrError):
    """Raised when the content reader of an upload fails."""


class ErrorKind(str, Enum):
    """Stable error kinds exposed to callers (e.g. the UI layer)."""

    INVALID_NAME = "InvalidName"
    DUPLICATE_NAME = "DuplicateName"
    PARENT_NOT_FOUND = "ParentNotFound"
    NOT_FOUND = "NotFound"
    NOT_IN_TRASH = "NotInTrash"
    NOT_A_FILE = "NotAFile"
    CYCLE_DETECTED = "CycleDetected"
    BROKEN_CHAIN = "BrokenChain"
    INVALID_STATE = "InvalidState"
    STORAGE_QUOTA_EXCEEDED = "StorageQuotaExceeded"
    CONTENT_READ_FAILURE = "ContentReadFailure"
    UNKNOWN = "Unknown"


_KIND_BY_TYPE: dict[type[VDriveMgrError], ErrorKind] = {
    InvalidNameError: ErrorKind.INVALID_NAME,
    DuplicateNameError: ErrorKind.DUPLICATE_NAME,
    ParentNotFoundError: ErrorKind.PARENT_NOT_FOUND,
    NotFoundError: ErrorKind.NOT_FOUND,
    NotInTrashError: ErrorKind.NOT_IN_TRASH,
    NotAFileError: ErrorKind.NOT_A_FILE,
    CycleDetectedError: ErrorKind.CYCLE_DETECTED,
    BrokenChainError: ErrorKind.BROKEN_CHAIN,
    InvalidStateError: ErrorKind.INVALID_STATE,
    StorageQuotaExceededError: ErrorKind.STORAGE_QUOTA_EXCEEDED,
    ContentReadFailureError: ErrorKind.CONTENT_READ_FAILURE,
}


def error_kind(exc: BaseException) -> ErrorKind:
    """
    Map an exception to its ErrorKind.

    Subclasses resolve to the kind of their nearest mapped base class;
    anything outside the hierarchy maps to UNKNOWN.
    """
    for cls in type(exc).__mro__:
        kind = _KIND_BY_TYPE.get(cls)  # type: ignore[arg-type]
        if kind is not None:
            return kind
    return ErrorKind.UNKNOWN
