"""Snapshot codec: item records <-> JSON blob, validated with pydantic."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from typing import Annotated, Any, Iterable, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from vdrivemgr.errors import InvalidNameError, VDriveMgrError
from vdrivemgr.local.validators import normalize_name
from vdrivemgr.models import (
    FileCategory,
    FileItem,
    FolderItem,
    Item,
    UploadState,
    content_size,
)
from vdrivemgr.util.mime import guess_mime_type
from vdrivemgr.util.time import to_rfc3339

logger = logging.getLogger(__name__)

INTERRUPTED_UPLOAD_REASON = "Upload interrupted"


class MalformedSnapshotError(VDriveMgrError):
    """Raised when a persisted blob is not a JSON list of records."""


class _RecordBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(min_length=1)
    name: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_favorite: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        try:
            return normalize_name(value)
        except InvalidNameError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_serializer("created_at", "updated_at")
    def _dump_dt(self, value: datetime) -> str:
        return to_rfc3339(value)


class FolderRecord(_RecordBase):
    type: Literal["folder"]


class FileRecord(_RecordBase):
    type: Literal["file"]
    size: int = Field(default=0, ge=0)
    mime_type: Optional[str] = None
    file_category: FileCategory = FileCategory.OTHER
    content: Optional[str] = None
    content_encoding: Optional[Literal["base64"]] = None
    upload_progress: Optional[int] = Field(default=None, ge=0, le=100)
    is_uploading: bool = False
    error: Optional[str] = None


ItemRecord = Annotated[Union[FileRecord, FolderRecord], Field(discriminator="type")]

_RECORD_ADAPTER: TypeAdapter[Any] = TypeAdapter(ItemRecord)


# ----------------------------
# Encoding
# ----------------------------
def encode_items(items: Iterable[Item], *, content_max_bytes: int) -> str:
    """
    Serialize items to a JSON list.

    Metadata is always kept. File content is kept only when it is at most
    content_max_bytes; bytes content is stored as base64.
    """
    records = [_to_record(item, content_max_bytes).model_dump(
        mode="json", by_alias=True, exclude_none=True
    ) for item in items]
    return json.dumps(records, ensure_ascii=False)


def _to_record(item: Item, content_max_bytes: int) -> Union[FileRecord, FolderRecord]:
    base = dict(
        id=item.id,
        name=item.name,
        parent_id=item.parent_id,
        created_at=item.created_at,
        updated_at=item.updated_at,
        is_favorite=item.is_favorite,
    )
    if isinstance(item, FolderItem):
        return FolderRecord(type="folder", **base)

    content: Optional[str] = None
    encoding: Optional[str] = None
    if item.content is not None and content_size(item.content) <= content_max_bytes:
        if isinstance(item.content, bytes):
            content = base64.b64encode(item.content).decode("ascii")
            encoding = "base64"
        else:
            content = item.content

    state = item.upload_state
    return FileRecord(
        type="file",
        size=item.size,
        mime_type=item.mime_type,
        file_category=item.category,
        content=content,
        content_encoding=encoding,
        upload_progress=state.progress if state and state.is_in_progress else None,
        is_uploading=bool(state and state.is_in_progress),
        error=state.reason if state and state.is_failed else None,
        **base,
    )


# ----------------------------
# Decoding
# ----------------------------
def decode_items(blob: str) -> list[Item]:
    """
    Parse a JSON blob into items.

    Records failing validation are dropped (and logged). Uploads that were
    still in progress when the blob was written come back as failed.

    Raises:
        MalformedSnapshotError: the blob is not JSON or not a list.
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise MalformedSnapshotError("Snapshot is not valid JSON", cause=exc) from exc
    if not isinstance(data, list):
        raise MalformedSnapshotError(
            "Snapshot must be a JSON list", details={"type": type(data).__name__}
        )

    items: list[Item] = []
    for index, raw in enumerate(data):
        try:
            record = _RECORD_ADAPTER.validate_python(raw)
            items.append(_from_record(record))
        except ValidationError as exc:
            logger.warning(
                "Dropping invalid snapshot record #%d: %d error(s)", index, exc.error_count()
            )
        except (binascii.Error, ValueError) as exc:
            logger.warning("Dropping snapshot record #%d with bad content: %s", index, exc)
    return items


def _from_record(record: Union[FileRecord, FolderRecord]) -> Item:
    if isinstance(record, FolderRecord):
        return FolderItem(
            id=record.id,
            name=record.name,
            parent_id=record.parent_id,
            created_at=record.created_at,
            updated_at=record.updated_at,
            is_favorite=record.is_favorite,
        )

    content: Optional[Union[str, bytes]] = record.content
    if record.content is not None and record.content_encoding == "base64":
        content = base64.b64decode(record.content, validate=True)

    state: Optional[UploadState] = None
    if record.error:
        state = UploadState.failed(record.error)
    elif record.is_uploading:
        state = UploadState.failed(INTERRUPTED_UPLOAD_REASON)

    return FileItem(
        id=record.id,
        name=record.name,
        parent_id=record.parent_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
        is_favorite=record.is_favorite,
        size=record.size,
        mime_type=record.mime_type or guess_mime_type(record.name),
        category=record.file_category,
        content=content,
        upload_state=state,
    )
