"""Mutation actions reported in OperationResult."""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    """Supported mutations."""

    CREATE_FOLDER = "CREATE_FOLDER"
    CREATE_FILE = "CREATE_FILE"
    UPLOAD_FILE = "UPLOAD_FILE"
    UPDATE_UPLOAD_PROGRESS = "UPDATE_UPLOAD_PROGRESS"
    FAIL_UPLOAD = "FAIL_UPLOAD"
    CANCEL_UPLOAD = "CANCEL_UPLOAD"
    DISMISS_UPLOAD = "DISMISS_UPLOAD"
    REPLACE_CONTENT = "REPLACE_CONTENT"
    RENAME = "RENAME"
    MOVE = "MOVE"
    TRASH = "TRASH"
    RESTORE = "RESTORE"
    DELETE_PERMANENT = "DELETE_PERMANENT"
    EMPTY_TRASH = "EMPTY_TRASH"
    TOGGLE_FAVORITE = "TOGGLE_FAVORITE"
