"""Ordered sheet collection and every operation that mutates it."""

import logging
from datetime import timedelta
from typing import Callable, Optional, Union

from ..access import AccessControlManager, AccessLevel, AccessSession
from ..config import settings
from ..errors import (
    InvalidIndexError,
    LastSheetError,
    SheetNotFoundError,
)
from ..rules import (
    add_conditional_rule,
    add_validation_rule,
    calculate_all_averages,
    check_write,
    column_letter_to_index,
    derive_average,
    find_grade_columns,
    remove_conditional_rule,
    remove_validation_rule,
)
from ..sheets.models import (
    CellValue,
    ConditionalRule,
    ConditionalStyle,
    ConditionType,
    Sheet,
    ValidationRule,
    ValidationType,
    empty_grid,
    new_id,
)
from .links import build_share_link, sheet_id_from_link
from .split import split_by_column

logger = logging.getLogger(__name__)

ChangeListener = Callable[[list[Sheet]], None]


class SheetStore:
    """
    Owns the ordered sheet collection and the active-sheet selection.

    All writes go through this class: it consults the AccessControlManager
    before destructive or revealing operations, runs the rule engine on
    cell writes, and notifies ``on_change`` after every committed change.
    Listener failures are logged and never undo the change.
    """

    def __init__(
        self,
        access: AccessControlManager,
        sheets: Optional[list[Sheet]] = None,
        on_change: Optional[ChangeListener] = None,
    ):
        self.access = access
        self._sheets: list[Sheet] = list(sheets or [])
        self._active_id: Optional[str] = self._sheets[0].id if self._sheets else None
        self._on_change = on_change

    # Queries

    @property
    def sheets(self) -> list[Sheet]:
        return list(self._sheets)

    @property
    def active_sheet_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active_sheet(self) -> Optional[Sheet]:
        if self._active_id is None:
            return None
        return self.get(self._active_id)

    def __len__(self) -> int:
        return len(self._sheets)

    def index_of(self, sheet_id: str) -> int:
        for index, sheet in enumerate(self._sheets):
            if sheet.id == sheet_id:
                return index
        raise SheetNotFoundError()

    def get(self, sheet_id: str) -> Sheet:
        return self._sheets[self.index_of(sheet_id)]

    def __contains__(self, sheet_id: str) -> bool:
        return any(sheet.id == sheet_id for sheet in self._sheets)

    # Selection

    def bootstrap(self, session: AccessSession, shared_sheet_id: Optional[str] = None) -> Sheet:
        """
        Make the store usable: create the first sheet when empty and make
        sure the active id points at a member.

        Args:
            session: Session that receives edit access to a created sheet
            shared_sheet_id: Sheet requested through a share link, if any
        """
        if not self._sheets:
            sheet = Sheet(
                name=settings.bootstrap_sheet_name,
                data=empty_grid(settings.bootstrap_rows, settings.bootstrap_columns),
            )
            self._sheets.append(sheet)
            self._active_id = sheet.id
            session.grant(sheet.id, AccessLevel.EDIT)
            logger.info(f"Bootstrapped empty store with sheet {sheet.id}")
            self._notify()
        elif shared_sheet_id and shared_sheet_id in self:
            self._active_id = shared_sheet_id
        elif self._active_id not in self:
            self._active_id = self._sheets[0].id
        return self.active_sheet

    def select(self, sheet_id: str) -> Sheet:
        """Make ``sheet_id`` active. Selecting never grants access."""
        sheet = self.get(sheet_id)
        self._active_id = sheet.id
        return sheet

    def select_from_link(self, link: str) -> Optional[Sheet]:
        sheet_id = sheet_id_from_link(link)
        if sheet_id is None or sheet_id not in self:
            logger.info(f"Share link does not point at a known sheet: {link}")
            return None
        return self.select(sheet_id)

    def share_link(self, sheet_id: str, base_url: Optional[str] = None) -> str:
        return build_share_link(self.get(sheet_id).id, base_url=base_url)

    # Structural operations

    def create(self, session: AccessSession, name: Optional[str] = None) -> Sheet:
        """Append a new empty sheet, activate it and give the creator edit access."""
        sheet = Sheet(name=name or f"Pauta {len(self._sheets) + 1}")
        self._sheets.append(sheet)
        self._active_id = sheet.id
        session.grant(sheet.id, AccessLevel.EDIT)
        logger.info(f"Created sheet {sheet.id} ({sheet.name})")
        self._notify()
        return sheet

    def add_sheets(self, session: AccessSession, sheets: list[Sheet]) -> list[Sheet]:
        """Append imported or derived sheets; the first one becomes active."""
        if not sheets:
            return []
        for sheet in sheets:
            self._sheets.append(sheet)
            session.grant(sheet.id, AccessLevel.EDIT)
        self._active_id = sheets[0].id
        logger.info(f"Added {len(sheets)} sheets")
        self._notify()
        return list(sheets)

    def duplicate(self, session: AccessSession, sheet_id: str) -> Sheet:
        """
        Copy a sheet, including its codes, and activate the copy.

        Data and rule lists are deep-copied. The copy is not re-locked: the
        copier keeps the same access level on it as on the original.
        """
        source = self.get(sheet_id)
        self.access.require_view(source, session)
        level = self.access.level_for(source, session)

        copy = source.model_copy(
            deep=True, update={"id": new_id(), "name": f"{source.name} (Cópia)"}
        )

        self._sheets.append(copy)
        self._active_id = copy.id
        session.grant(copy.id, level)
        logger.info(f"Duplicated sheet {source.id} as {copy.id}")
        self._notify()
        return copy

    def delete(self, session: AccessSession, sheet_id: str) -> None:
        """Remove a sheet. The last remaining sheet cannot be deleted."""
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        if len(self._sheets) <= 1:
            raise LastSheetError()

        self._sheets = [s for s in self._sheets if s.id != sheet_id]
        session.drop(sheet_id)
        if self._active_id == sheet_id:
            self._active_id = self._sheets[0].id
        logger.info(f"Deleted sheet {sheet_id}")
        self._notify()

    def rename(self, session: AccessSession, sheet_id: str, name: str) -> Sheet:
        """Rename a sheet; blank names are ignored."""
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        if not name or not name.strip():
            return sheet
        return self._replace(sheet.model_copy(update={"name": name.strip()}))

    def reorder(self, from_index: int, to_index: int) -> list[Sheet]:
        """Move the sheet at ``from_index`` to ``to_index`` in the current order."""
        count = len(self._sheets)
        if not (0 <= from_index < count and 0 <= to_index < count):
            raise InvalidIndexError()
        if from_index != to_index:
            sheet = self._sheets.pop(from_index)
            self._sheets.insert(to_index, sheet)
            logger.debug(f"Moved sheet {sheet.id} from {from_index} to {to_index}")
            self._notify()
        return self.sheets

    def split_by_column(
        self, session: AccessSession, sheet_id: str, column_index: int
    ) -> list[Sheet]:
        """Create one sheet per distinct value of ``column_index``."""
        source = self.get(sheet_id)
        self.access.require_view(source, session)
        if column_index < 0:
            raise InvalidIndexError()
        new_sheets = split_by_column(source, column_index)
        if new_sheets:
            self.add_sheets(session, new_sheets)
        logger.info(f"Split sheet {sheet_id} into {len(new_sheets)} sheets")
        return new_sheets

    # Cell writes

    def update_cell(
        self,
        session: AccessSession,
        sheet_id: str,
        row: int,
        column: int,
        value: CellValue,
    ) -> Sheet:
        """
        Write one cell.

        The column's validation rule runs first; a rejected value raises
        ValidationFailedError and leaves the sheet untouched. Accepted writes
        recompute the row's average when a grade column changed.
        """
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        if row < 0 or column < 0:
            raise InvalidIndexError()
        check_write(sheet, column, value)

        data = list(sheet.data)
        while len(data) <= row:
            data.append([])
        new_row = list(data[row])
        while len(new_row) <= column:
            new_row.append("")
        new_row[column] = value
        data[row] = new_row

        data[row] = derive_average(new_row, find_grade_columns(data[0]), column)
        return self._replace(sheet.model_copy(update={"data": data}))

    def calculate_averages(self, session: AccessSession, sheet_id: str) -> int:
        """Fill the "Média" column for every row; returns the rows updated."""
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        updated, count = calculate_all_averages(sheet)
        self._replace(updated)
        return count

    # Rules

    def add_conditional_format(
        self,
        session: AccessSession,
        sheet_id: str,
        column: Union[str, int],
        condition: ConditionType,
        value: Union[str, int, float],
        style: ConditionalStyle,
    ) -> ConditionalRule:
        """Add a formatting rule; ``column`` is a letter ("C") or a 0-based index."""
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        rule = ConditionalRule(
            column_index=self._column_index(column),
            condition=condition,
            value=value,
            style=style,
        )
        self._replace(add_conditional_rule(sheet, rule))
        return rule

    def remove_conditional_format(self, session: AccessSession, sheet_id: str, rule_id: str) -> bool:
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        updated, removed = remove_conditional_rule(sheet, rule_id)
        if removed:
            self._replace(updated)
        return removed

    def add_validation(
        self,
        session: AccessSession,
        sheet_id: str,
        column: Union[str, int],
        type: ValidationType,
        min: Optional[str] = None,
        max: Optional[str] = None,
        options: Optional[list[str]] = None,
        error_message: Optional[str] = None,
    ) -> ValidationRule:
        """Add a validation rule, replacing the one already on that column."""
        rule = ValidationRule(
            column_index=self._column_index(column),
            type=type,
            min=min or None,
            max=max or None,
            options=options if ValidationType(type) == ValidationType.LIST else None,
            error_message=error_message or None,
        )
        return self.install_validation_rule(session, sheet_id, rule)

    def install_validation_rule(
        self, session: AccessSession, sheet_id: str, rule: ValidationRule
    ) -> ValidationRule:
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        self._replace(add_validation_rule(sheet, rule))
        return rule

    def remove_validation(self, session: AccessSession, sheet_id: str, rule_id: str) -> bool:
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        updated, removed = remove_validation_rule(sheet, rule_id)
        if removed:
            self._replace(updated)
        return removed

    # Access control

    def issue_codes(
        self, session: AccessSession, sheet_id: str, duration: timedelta
    ) -> Sheet:
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        return self._replace(self.access.issue_codes(sheet, session, duration))

    def revoke_codes(self, session: AccessSession, sheet_id: str) -> Sheet:
        sheet = self.get(sheet_id)
        self.access.require_edit(sheet, session)
        return self._replace(self.access.revoke(sheet))

    def unlock(self, session: AccessSession, sheet_id: str, code: str) -> AccessLevel:
        return self.access.unlock(self.get(sheet_id), session, code)

    def simulate_lock(self, session: AccessSession, sheet_id: str) -> None:
        self.access.simulate_lock(self.get(sheet_id), session)

    # Internals

    @staticmethod
    def _column_index(column: Union[str, int]) -> int:
        if isinstance(column, int):
            if column < 0:
                raise InvalidIndexError()
            return column
        return column_letter_to_index(column)

    def _replace(self, sheet: Sheet) -> Sheet:
        self._sheets[self.index_of(sheet.id)] = sheet
        self._notify()
        return sheet

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.sheets)
        except Exception:
            logger.exception("Change listener failed; in-memory state kept")
