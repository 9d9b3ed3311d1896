"""Behaviour switches for TreeStore and FileManager."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NameScope(str, Enum):
    """Scope of sibling name uniqueness."""

    PER_KIND = "per_kind"  # a file and a folder may share a name
    DIRECTORY = "directory"  # unique across files and folders


@dataclass(frozen=True)
class TreeOptions:
    """
    Product policies that differ between deployments.

    Attributes:
        name_scope: Sibling uniqueness scope (always case-insensitive).
        preserve_extension_on_rename: Re-append a file's original extension
            to the base name supplied on rename.
        favorites_first: Default for sorting favorites ahead of other items.
        persist_content_max_bytes: Larger file content is session-only and
            is stripped from persisted snapshots.
    """

    name_scope: NameScope = NameScope.PER_KIND
    preserve_extension_on_rename: bool = False
    favorites_first: bool = False
    persist_content_max_bytes: int = 64 * 1024


DEFAULT_OPTIONS = TreeOptions()
