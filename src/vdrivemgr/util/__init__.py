from .ids import new_item_id, new_uuid
from .mime import DEFAULT_MIME, determine_category, guess_mime_type, split_extension
from .time import monotonic_touch, normalize_dt, now_utc, to_rfc3339

__all__ = [
    "new_uuid",
    "new_item_id",
    "DEFAULT_MIME",
    "determine_category",
    "guess_mime_type",
    "split_extension",
    "now_utc",
    "to_rfc3339",
    "normalize_dt",
    "monotonic_touch",
]
