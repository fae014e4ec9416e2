"""Exception hierarchy for Lukunde.

Every rejection raised by the core carries a user-facing ``message`` and the
HTTP status the API layer answers with. State is never modified when one of
these is raised.

    LukundeError
    ├── ValidationFailedError
    ├── PermissionDeniedError
    ├── LastSheetError
    ├── SheetNotFoundError
    ├── InvalidColumnError
    ├── ColumnNotFoundError
    ├── InvalidIndexError
    └── AccessCodeError
        ├── AccessCodeExpiredError
        └── IncorrectAccessCodeError
"""

from typing import Optional


class LukundeError(Exception):
    """Base class for all user-facing rejections."""

    status_code: int = 400
    default_message: str = "Operação inválida."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(LukundeError):
    """A cell write was rejected by the column's validation rule."""

    status_code = 422
    default_message = "Valor inválido."

    def __init__(self, message: Optional[str] = None, column_index: Optional[int] = None):
        super().__init__(message)
        self.column_index = column_index


class PermissionDeniedError(LukundeError):
    """The session lacks the access level required for the operation."""

    status_code = 403
    default_message = "Sem permissão de edição para esta planilha."


class LastSheetError(LukundeError):
    """Deleting the only remaining sheet."""

    status_code = 409
    default_message = "Não é possível excluir a única planilha existente."


class SheetNotFoundError(LukundeError):
    status_code = 404
    default_message = "Planilha não encontrada."


class InvalidColumnError(LukundeError):
    default_message = "Coluna inválida"


class ColumnNotFoundError(LukundeError):
    default_message = "Coluna não encontrada."


class InvalidIndexError(LukundeError):
    default_message = "Posição inválida."


class AccessCodeError(LukundeError):
    status_code = 403


class AccessCodeExpiredError(AccessCodeError):
    default_message = "O código expirou. O administrador deve gerar um novo."


class IncorrectAccessCodeError(AccessCodeError):
    default_message = "Código incorreto."
