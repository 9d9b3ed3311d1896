"""Public error exports for vdrivemgr."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
