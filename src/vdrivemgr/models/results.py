"""Result model for FileManager mutations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

OperationStatus = Literal["success", "failed"]


@dataclass(slots=True)
class OperationResult:
    """
    Outcome of a single mutation.

    `item_ids` lists the ids created/changed/removed on success. On failure
    `error_type` holds the ErrorKind value and `error_details` the offending
    item_id/name, so the caller can render a message.
    """

    action: str
    status: OperationStatus

    item_ids: list[str] = field(default_factory=list)

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    persisted: bool = False

    @property
    def ok(self) -> bool:
        return self.status == "success"
