"""Access-code issuance, expiration and per-session unlock tracking."""

import logging
import random
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..config import settings
from ..errors import AccessCodeExpiredError, IncorrectAccessCodeError, PermissionDeniedError
from ..sheets.models import Sheet
from .models import AccessLevel, AccessSession, SheetAccessState

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def _same_code(candidate: str, stored: Optional[str]) -> bool:
    return bool(stored) and candidate == stored.strip().upper()


class AccessControlManager:
    """
    Governs who may read or write a sheet.

    The sheet carries the codes and their expiration; the session carries
    what it has unlocked. Sheet updates are returned as new ``Sheet``
    objects; grants are written to the ``AccessSession`` passed in.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        code_length: Optional[int] = None,
    ):
        self.clock = clock or _utc_now
        self.code_length = code_length or settings.access_code_length

    def generate_code(self) -> str:
        """Short uppercase alphanumeric code; not a security token."""
        return "".join(random.choices(CODE_ALPHABET, k=self.code_length))

    def state(self, sheet: Sheet, now: Optional[datetime] = None) -> SheetAccessState:
        if not sheet.has_access_codes:
            return SheetAccessState.UNSET
        expiration = sheet.access_code_expiration
        if expiration is not None and (now or self.clock()) >= expiration:
            return SheetAccessState.EXPIRED
        return SheetAccessState.ACTIVE

    def level_for(self, sheet: Sheet, session: AccessSession) -> AccessLevel:
        """Resolve the session's level; unprotected sheets are editable by anyone."""
        if not sheet.has_access_codes:
            return AccessLevel.EDIT
        return session.get(sheet.id) or AccessLevel.NONE

    def can_edit(self, sheet: Sheet, session: AccessSession) -> bool:
        return self.level_for(sheet, session) == AccessLevel.EDIT

    def can_view(self, sheet: Sheet, session: AccessSession) -> bool:
        return self.level_for(sheet, session) != AccessLevel.NONE

    def require_edit(self, sheet: Sheet, session: AccessSession) -> None:
        if not self.can_edit(sheet, session):
            logger.warning(
                f"Session {session.session_id} denied edit on sheet {sheet.id}"
            )
            raise PermissionDeniedError()

    def require_view(self, sheet: Sheet, session: AccessSession) -> None:
        if not self.can_view(sheet, session):
            logger.warning(
                f"Session {session.session_id} denied read on sheet {sheet.id}"
            )
            raise PermissionDeniedError("Planilha bloqueada. Insira o código de acesso.")

    def issue_codes(
        self, sheet: Sheet, session: AccessSession, duration: timedelta
    ) -> Sheet:
        """Issue fresh edit and view codes; the issuer keeps edit access."""
        edit_code = self.generate_code()
        view_code = self.generate_code()
        while view_code == edit_code:
            view_code = self.generate_code()

        expires_at = self.clock() + duration
        updated = sheet.model_copy(
            update={
                "edit_code": edit_code,
                "view_code": view_code,
                "access_code_expiration": expires_at,
                "is_shared": True,
            }
        )
        session.grant(sheet.id, AccessLevel.EDIT)
        logger.info(f"Issued access codes for sheet {sheet.id}, expiring {expires_at.isoformat()}")
        return updated

    def revoke(self, sheet: Sheet) -> Sheet:
        """Remove all codes; the sheet becomes open to every session."""
        logger.info(f"Revoked access codes for sheet {sheet.id}")
        return sheet.model_copy(
            update={
                "edit_code": None,
                "view_code": None,
                "access_code": None,
                "access_code_expiration": None,
                "is_shared": False,
            }
        )

    def unlock(self, sheet: Sheet, session: AccessSession, code: str) -> AccessLevel:
        """
        Grant the level matching ``code`` to the session.

        Raises:
            AccessCodeExpiredError: The codes have expired, even if ``code`` matches.
            IncorrectAccessCodeError: ``code`` matches none of the sheet's codes.
        """
        state = self.state(sheet)
        if state == SheetAccessState.UNSET:
            return AccessLevel.EDIT
        if state == SheetAccessState.EXPIRED:
            logger.info(f"Unlock attempt on expired sheet {sheet.id}")
            raise AccessCodeExpiredError()

        candidate = code.strip().upper()
        if _same_code(candidate, sheet.edit_code):
            level = AccessLevel.EDIT
        elif _same_code(candidate, sheet.view_code):
            level = AccessLevel.VIEW
        elif _same_code(candidate, sheet.access_code):
            # Compatibility only: single code from before edit/view codes existed
            level = AccessLevel.EDIT
        else:
            logger.info(f"Incorrect code for sheet {sheet.id}")
            raise IncorrectAccessCodeError()

        session.grant(sheet.id, level)
        logger.info(f"Session {session.session_id} unlocked sheet {sheet.id} with {level.value} access")
        return level

    def simulate_lock(self, sheet: Sheet, session: AccessSession) -> None:
        """Forget this session's grant so the lock screen can be tried out."""
        session.drop(sheet.id)
