"""Access levels, sheet lock states and per-session grants."""

from datetime import timedelta
from enum import Enum
from typing import Optional

from ..errors import LukundeError


class AccessLevel(str, Enum):
    """What a session may do with a sheet."""

    NONE = "none"
    VIEW = "view"
    EDIT = "edit"


class SheetAccessState(str, Enum):
    """Lock state of a sheet, derived from its codes and the clock."""

    UNSET = "unset"  # No codes issued, everyone may edit
    ACTIVE = "active"  # Codes issued and not yet expired
    EXPIRED = "expired"  # Codes issued, expiration has passed


class ExpirationUnit(str, Enum):
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


_UNIT_DURATIONS = {
    ExpirationUnit.HOURS: timedelta(hours=1),
    ExpirationUnit.DAYS: timedelta(days=1),
    ExpirationUnit.WEEKS: timedelta(weeks=1),
    ExpirationUnit.MONTHS: timedelta(days=30),
}


def expiration_duration(value: int, unit: ExpirationUnit | str) -> timedelta:
    """Length of a code's validity window. A month counts as 30 days."""
    if value <= 0:
        raise LukundeError("A validade do código deve ser positiva.")
    return _UNIT_DURATIONS[ExpirationUnit(unit)] * value


class AccessSession:
    """Access levels granted to one running session, keyed by sheet id.

    Never persisted: a new session starts with no grants.
    """

    def __init__(self, session_id: str = "local"):
        self.session_id = session_id
        self._levels: dict[str, AccessLevel] = {}

    def get(self, sheet_id: str) -> Optional[AccessLevel]:
        return self._levels.get(sheet_id)

    def grant(self, sheet_id: str, level: AccessLevel) -> None:
        self._levels[sheet_id] = level

    def drop(self, sheet_id: str) -> bool:
        return self._levels.pop(sheet_id, None) is not None

    def snapshot(self) -> dict[str, AccessLevel]:
        return dict(self._levels)

    def __contains__(self, sheet_id: str) -> bool:
        return sheet_id in self._levels

    def __repr__(self) -> str:
        return f"AccessSession({self.session_id!r}, {len(self._levels)} grants)"
