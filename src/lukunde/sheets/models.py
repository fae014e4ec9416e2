"""Data models for sheets and their attached rules."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Cells hold plain JSON scalars; an empty cell is "" or None.
CellValue = Union[str, bool, int, float, None]
SheetData = list[list[CellValue]]


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    """Base model serialized with the camelCase keys of the stored payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ConditionType(str, Enum):
    """Conditions a formatting rule can test."""

    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    EQ = "eq"
    CONTAINS = "contains"


class ValidationType(str, Enum):
    """Constraint kinds a validation rule can enforce."""

    NUMBER = "number"
    TEXT = "text"
    DATE = "date"
    LIST = "list"
    EMAIL = "email"


class ConditionalStyle(CamelModel):
    """Visual highlight applied to a matching cell."""

    name: str
    background_color: str
    color: str


PRESET_STYLES: list[ConditionalStyle] = [
    ConditionalStyle(name="Vermelho (Reprovado)", background_color="#FECACA", color="#991B1B"),
    ConditionalStyle(name="Verde (Aprovado)", background_color="#BBF7D0", color="#166534"),
    ConditionalStyle(name="Amarelo (Atenção)", background_color="#FEF08A", color="#854D0E"),
    ConditionalStyle(name="Azul (Destaque)", background_color="#BFDBFE", color="#1E40AF"),
]
FAIL_STYLE = PRESET_STYLES[0]
PASS_STYLE = PRESET_STYLES[1]


class ConditionalRule(CamelModel):
    """Column-scoped predicate mapped to a style."""

    id: str = Field(default_factory=new_id)
    column_index: int = Field(ge=0)
    condition: ConditionType
    value: Union[str, int, float]
    style: ConditionalStyle


class ValidationRule(CamelModel):
    """Column-scoped constraint gating accepted cell values."""

    id: str = Field(default_factory=new_id)
    column_index: int = Field(ge=0)
    type: ValidationType
    min: Optional[str] = None
    max: Optional[str] = None
    options: Optional[list[str]] = None  # For 'list' type
    error_message: Optional[str] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _bounds_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Sheet(CamelModel):
    """A named grid of cell values with its rules and access metadata."""

    id: str = Field(default_factory=new_id)
    name: str
    data: SheetData = Field(default_factory=list)
    conditional_formats: list[ConditionalRule] = Field(default_factory=list)
    validation_rules: list[ValidationRule] = Field(default_factory=list)
    edit_code: Optional[str] = None
    view_code: Optional[str] = None
    access_code: Optional[str] = None  # Legacy single code, see migrate_legacy_code
    access_code_expiration: Optional[datetime] = None
    is_shared: bool = False

    @field_validator("data", mode="before")
    @classmethod
    def _rows_not_null(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [row if row is not None else [] for row in value]
        return value

    @field_validator("conditional_formats", "validation_rules", mode="before")
    @classmethod
    def _rules_not_null(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("access_code_expiration", mode="before")
    @classmethod
    def _expiration_from_epoch_ms(cls, value: Any) -> Any:
        # The browser edition stored Date.now()-style millisecond timestamps
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return value

    @field_validator("access_code_expiration")
    @classmethod
    def _expiration_is_aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def header(self) -> list[CellValue]:
        """Row 0, or an empty list for an empty sheet."""
        return self.data[0] if self.data else []

    @property
    def has_access_codes(self) -> bool:
        return bool(self.edit_code or self.view_code)

    def validation_rule_for(self, column_index: int) -> Optional[ValidationRule]:
        for rule in self.validation_rules:
            if rule.column_index == column_index:
                return rule
        return None

    def migrate_legacy_code(self) -> "Sheet":
        """Promote a pre-two-tier ``accessCode`` to ``editCode``."""
        if self.access_code and not self.edit_code:
            return self.model_copy(update={"edit_code": self.access_code})
        return self


def empty_grid(rows: int, columns: int) -> SheetData:
    return [["" for _ in range(columns)] for _ in range(rows)]
