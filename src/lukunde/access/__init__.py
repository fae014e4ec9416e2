"""Two-tier, time-limited access control for sheets."""

from .manager import AccessControlManager
from .models import (
    AccessLevel,
    AccessSession,
    ExpirationUnit,
    SheetAccessState,
    expiration_duration,
)

__all__ = [
    "AccessControlManager",
    "AccessLevel",
    "AccessSession",
    "ExpirationUnit",
    "SheetAccessState",
    "expiration_duration",
]
