from __future__ import annotations

import mimetypes
import re
from typing import Optional

from vdrivemgr.models.items import FileCategory

DEFAULT_MIME: str = "application/octet-stream"

_CODE_EXT_RE = re.compile(
    r"\.(js|jsx|ts|tsx|py|java|c|cpp|cs|rb|go|swift|kt|rs|php|html|htm|css|scss|sass"
    r"|less|json|xml|yaml|yml|toml|md|sh|bash|zsh|ps1|bat|sql|r|pl|lua|groovy|dart"
    r"|ipynb)$",
    re.IGNORECASE,
)
_DOCUMENT_EXT_RE = re.compile(
    r"\.(docx?|xlsx?|pptx?|txt|rtf|csv|odt|ods|odp)$",
    re.IGNORECASE,
)


def guess_mime_type(name: str) -> str:
    """Guess a MIME type from the file name, falling back to octet-stream."""
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed or DEFAULT_MIME


def split_extension(name: str) -> tuple[str, str]:
    """
    Split a name at its last '.' into (base, extension).

    A leading dot (".bashrc") is not an extension.
    """
    idx = name.rfind(".")
    if idx <= 0:
        return name, ""
    return name[:idx], name[idx:]


def determine_category(name: str, mime_type: Optional[str]) -> FileCategory:
    """
    Derive the FileCategory of a file from its name and MIME type.

    MIME prefixes win for media; code is detected by extension; text and
    office formats are documents. Markdown counts as code whatever its MIME type.
    """
    mime = (mime_type or "").lower()

    if mime.startswith("image/"):
        return FileCategory.IMAGE
    if mime == "application/pdf":
        return FileCategory.PDF
    if mime.startswith("audio/"):
        return FileCategory.AUDIO
    if mime.startswith("video/"):
        return FileCategory.VIDEO

    if _CODE_EXT_RE.search(name):
        return FileCategory.CODE

    if (
        mime.startswith("text/")
        or "document" in mime
        or "sheet" in mime
        or "presentation" in mime
        or _DOCUMENT_EXT_RE.search(name)
    ):
        return FileCategory.DOCUMENT

    return FileCategory.OTHER
