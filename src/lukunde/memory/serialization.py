"""Reading and writing the persisted sheet collection."""

import json
import logging
from typing import Any, Literal, Optional

from pydantic import ValidationError

from ..sheets.models import Sheet

logger = logging.getLogger(__name__)

Theme = Literal["light", "dark"]
THEMES = ("light", "dark")


def dump_sheets(sheets: list[Sheet]) -> str:
    """Serialize the collection as a JSON array of camelCase sheet objects."""
    return json.dumps([sheet.to_payload() for sheet in sheets], ensure_ascii=False)


def _load_entry(entry: Any, position: int) -> Optional[Sheet]:
    if not isinstance(entry, dict) or not entry.get("id"):
        logger.warning(f"Dropping malformed sheet record at position {position}")
        return None
    entry = dict(entry)
    entry.setdefault("name", "Sheet")
    try:
        sheet = Sheet.model_validate(entry)
    except ValidationError as e:
        logger.warning(
            f"Dropping sheet record {entry.get('id')!r}: {e.error_count()} validation errors"
        )
        return None
    return sheet.migrate_legacy_code()


def load_sheets(payload: Optional[str]) -> list[Sheet]:
    """
    Deserialize a stored collection.

    Malformed records (non-objects, missing ``id``, invalid fields) are
    dropped individually; an unreadable payload yields an empty list.
    Records written before edit/view codes existed are migrated.
    """
    if not payload:
        return []
    try:
        raw = json.loads(payload)
    except (TypeError, ValueError):
        logger.warning("Stored sheet collection is not valid JSON; starting empty")
        return []
    if not isinstance(raw, list):
        logger.warning("Stored sheet collection is not a list; starting empty")
        return []

    sheets = []
    seen: set[str] = set()
    for position, entry in enumerate(raw):
        sheet = _load_entry(entry, position)
        if sheet is None:
            continue
        if sheet.id in seen:
            logger.warning(f"Dropping duplicate sheet id {sheet.id}")
            continue
        seen.add(sheet.id)
        sheets.append(sheet)
    return sheets


def parse_theme(value: Optional[str], default: Theme = "light") -> Theme:
    return value if value in THEMES else default
