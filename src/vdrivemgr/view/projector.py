"""Pure projection of the item collection into an ordered listing."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Optional, Union

from vdrivemgr.local.snapshot import ItemSnapshot
from vdrivemgr.models import FileCategory, Item, is_file, is_folder

FILTER_ALL = "all"
FILTER_FAVORITES = "favorites"
FILTER_FOLDER = "folder"

CategoryFilter = Union[str, FileCategory]

_SPECIAL_FILTERS: frozenset[str] = frozenset({FILTER_ALL, FILTER_FAVORITES, FILTER_FOLDER})
_CATEGORY_VALUES: frozenset[str] = frozenset(c.value for c in FileCategory)


@dataclass(frozen=True)
class ViewContext:
    """
    What to show.

    Attributes:
        location: None for root, TRASH_ID for the trash view, or a folder id
            (a trashed folder can still be entered).
        search_query: Case-insensitive substring matched against names.
        category_filter: "all", "favorites", "folder", or a FileCategory.
        favorites_first: Overrides the store default when not None.
    """

    location: Optional[str] = None
    search_query: str = ""
    category_filter: CategoryFilter = FILTER_ALL
    favorites_first: Optional[bool] = None

    def __post_init__(self) -> None:
        value = _filter_value(self.category_filter)
        if value not in _SPECIAL_FILTERS and value not in _CATEGORY_VALUES:
            raise ValueError(f"Unknown category filter: {self.category_filter!r}")


def project_view(
    snapshot: ItemSnapshot,
    ctx: ViewContext,
    *,
    favorites_first: bool = False,
) -> list[Item]:
    """
    Select, filter and sort the children of ctx.location.

    No side effects; the same snapshot and context always give the same
    order (ties end on the item id).
    """
    items = [snapshot.get(cid) for cid in snapshot.list_children_ids(ctx.location)]

    query = ctx.search_query.casefold()
    if query:
        items = [i for i in items if query in i.name.casefold()]

    wanted = _filter_value(ctx.category_filter)
    items = [i for i in items if _matches_filter(i, wanted)]

    fav_first = favorites_first if ctx.favorites_first is None else ctx.favorites_first
    items.sort(key=lambda i: _sort_key(i, fav_first))
    return items


def _filter_value(value: CategoryFilter) -> str:
    return value.value if isinstance(value, FileCategory) else str(value)


def _matches_filter(item: Item, wanted: str) -> bool:
    if wanted == FILTER_ALL:
        return True
    if wanted == FILTER_FAVORITES:
        return item.is_favorite
    if wanted == FILTER_FOLDER:
        return is_folder(item)
    return is_file(item) and item.category.value == wanted  # type: ignore[union-attr]


def _sort_key(item: Item, favorites_first: bool) -> tuple:
    collated = unicodedata.normalize("NFKD", item.name).casefold()
    return (
        not item.is_favorite if favorites_first else False,
        0 if is_folder(item) else 1,
        collated,
        item.name,
        item.id,
    )
