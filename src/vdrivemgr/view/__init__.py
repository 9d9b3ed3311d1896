"""Public view exports."""

from __future__ import annotations

from .breadcrumbs import ROOT_CRUMB, TRASH_CRUMB, Crumb, breadcrumbs, is_resolvable
from .projector import (
    FILTER_ALL,
    FILTER_FAVORITES,
    FILTER_FOLDER,
    ViewContext,
    project_view,
)

__all__ = [
    "ViewContext",
    "project_view",
    "FILTER_ALL",
    "FILTER_FAVORITES",
    "FILTER_FOLDER",
    "Crumb",
    "ROOT_CRUMB",
    "TRASH_CRUMB",
    "breadcrumbs",
    "is_resolvable",
]
