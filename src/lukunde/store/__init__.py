"""Sheet collection and structural operations."""

from .links import build_share_link, sheet_id_from_link
from .sheet_store import SheetStore
from .split import NO_CLASS_LABEL, split_by_column

__all__ = [
    "SheetStore",
    "split_by_column",
    "NO_CLASS_LABEL",
    "build_share_link",
    "sheet_id_from_link",
]
