"""Breadcrumb trail derived from ancestor chains."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from vdrivemgr.errors import BrokenChainError, NotFoundError
from vdrivemgr.local.resolver import SubtreeResolver
from vdrivemgr.local.snapshot import ItemSnapshot
from vdrivemgr.models import TRASH_ID

logger = logging.getLogger(__name__)

ROOT_LABEL = "Home"
TRASH_LABEL = "Trash"


@dataclass(frozen=True, slots=True)
class Crumb:
    """One breadcrumb. id is None for root and TRASH_ID for the trash."""

    id: Optional[str]
    name: str


ROOT_CRUMB = Crumb(id=None, name=ROOT_LABEL)
TRASH_CRUMB = Crumb(id=TRASH_ID, name=TRASH_LABEL)


def breadcrumbs(snapshot: ItemSnapshot, location: Optional[str]) -> list[Crumb]:
    """
    Trail from Home to location.

    A folder inside the trash gets a synthetic Trash crumb between Home and
    its top-level trashed ancestor. An unknown folder or broken chain
    collapses the trail to [Home]; the caller should navigate back to root.
    """
    if location is None:
        return [ROOT_CRUMB]
    if location == TRASH_ID:
        return [ROOT_CRUMB, TRASH_CRUMB]

    try:
        chain = SubtreeResolver(snapshot).ancestor_chain(location)
    except (BrokenChainError, NotFoundError) as exc:
        logger.warning("Cannot build breadcrumbs for %s: %s", location, exc)
        return [ROOT_CRUMB]

    trail = [ROOT_CRUMB]
    if chain.in_trash:
        trail.append(TRASH_CRUMB)
    trail.extend(Crumb(id=eid, name=name) for eid, name in chain.entries)
    return trail


def is_resolvable(snapshot: ItemSnapshot, location: Optional[str]) -> bool:
    """False when navigation to location must be reset to root."""
    if location is None or location == TRASH_ID:
        return True
    return len(breadcrumbs(snapshot, location)) > 1
