"""API routes for Lukunde."""

from typing import Any, Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..access import AccessLevel, AccessSession, expiration_duration
from ..config import settings
from ..errors import LukundeError
from ..llm import SuggestionPurpose
from ..rules import (
    DEFAULT_CLASS_OPTIONS,
    class_list_rule,
    find_header_index,
    parse_options,
    stringify,
    style_grid,
)
from ..sheets import (
    PRESET_STYLES,
    CellValue,
    ConditionalStyle,
    ConditionType,
    Sheet,
    ValidationType,
)
from ..workbook import export_workbook, read_workbook

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
_CODE_FIELDS = ("editCode", "viewCode", "accessCode")


def get_workspace():
    """Get the global workspace instance."""
    from .app import get_workspace as _get_workspace

    return _get_workspace()


def _http_error(e: LukundeError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


def _session(x_session_id: Optional[str]) -> AccessSession:
    return get_workspace().session(x_session_id)


def _sheet_summary(sheet: Sheet, session: AccessSession) -> dict[str, Any]:
    access = get_workspace().access
    return {
        "id": sheet.id,
        "name": sheet.name,
        "isShared": sheet.is_shared,
        "accessLevel": access.level_for(sheet, session).value,
        "accessState": access.state(sheet).value,
    }


def _sheet_view(sheet: Sheet, session: AccessSession) -> dict[str, Any]:
    """Sheet payload as this session may see it."""
    level = get_workspace().access.level_for(sheet, session)
    payload = sheet.to_payload()
    payload.update(_sheet_summary(sheet, session))

    if level != AccessLevel.EDIT:
        for field in _CODE_FIELDS:
            payload.pop(field, None)
    if level == AccessLevel.NONE:
        payload["data"] = []
        payload["styles"] = []
    else:
        payload["styles"] = [
            [style.to_payload() if style else None for style in row]
            for row in style_grid(sheet)
        ]
    return payload


class SheetCreateRequest(BaseModel):
    """Request to create a sheet."""

    name: Optional[str] = None


class RenameRequest(BaseModel):
    """Request to rename a sheet."""

    name: str


class ReorderRequest(BaseModel):
    """Request to move a sheet in the tab order."""

    from_index: int
    to_index: int


class SplitRequest(BaseModel):
    """Request to split a sheet by a class column.

    The column is given either by its confirmed header name or by index.
    """

    column_name: Optional[str] = None
    column_index: Optional[int] = None


class CellUpdateRequest(BaseModel):
    """Request to write one cell."""

    row: int
    column: int
    value: CellValue = None


class ConditionalFormatRequest(BaseModel):
    """Request to add a conditional formatting rule."""

    column: Union[str, int]
    condition: ConditionType
    value: Union[str, int, float]
    style_name: Optional[str] = None
    background_color: Optional[str] = None
    color: Optional[str] = None


class ValidationRuleRequest(BaseModel):
    """Request to add a validation rule."""

    column: Union[str, int]
    type: ValidationType
    min: Optional[str] = None
    max: Optional[str] = None
    options: Optional[str] = None  # Comma-separated, for 'list' type
    error_message: Optional[str] = None


class ClassValidationRequest(BaseModel):
    """Request to restrict a class column to a list of classes."""

    column_name: str
    options: str = DEFAULT_CLASS_OPTIONS


class ShareRequest(BaseModel):
    """Request to issue access codes."""

    value: int = Field(default_factory=lambda: settings.default_expiration_value)
    unit: str = Field(default_factory=lambda: settings.default_expiration_unit)


class UnlockRequest(BaseModel):
    code: str


class LinkResolveRequest(BaseModel):
    link: str


class SuggestionRequest(BaseModel):
    purpose: SuggestionPurpose = SuggestionPurpose.SPLIT


class AnalysisRequest(BaseModel):
    query: str


class ThemeRequest(BaseModel):
    theme: str


def _resolve_style(request: ConditionalFormatRequest) -> ConditionalStyle:
    for preset in PRESET_STYLES:
        if preset.name == request.style_name:
            return preset
    if request.background_color and request.color:
        return ConditionalStyle(
            name=request.style_name or "Personalizado",
            background_color=request.background_color,
            color=request.color,
        )
    if request.style_name:
        raise HTTPException(status_code=400, detail=f"Estilo desconhecido: {request.style_name}")
    return PRESET_STYLES[0]


# Health


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "lukunde"}


# Sheet collection


@router.get("/sheets")
async def list_sheets(x_session_id: Optional[str] = Header(default=None)):
    """List sheets in tab order."""
    workspace = get_workspace()
    session = _session(x_session_id)
    return {
        "activeSheetId": workspace.store.active_sheet_id,
        "sheets": [_sheet_summary(s, session) for s in workspace.store.sheets],
    }


@router.post("/sheets")
async def create_sheet(
    request: SheetCreateRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Create an empty sheet and make it active."""
    session = _session(x_session_id)
    sheet = get_workspace().store.create(session, request.name)
    return _sheet_view(sheet, session)


@router.post("/sheets/reorder")
async def reorder_sheets(request: ReorderRequest):
    """Move a sheet to another position."""
    try:
        sheets = get_workspace().store.reorder(request.from_index, request.to_index)
    except LukundeError as e:
        raise _http_error(e)
    return {"order": [s.id for s in sheets]}


@router.get("/sheets/{sheet_id}")
async def get_sheet(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Get one sheet with its computed cell styles."""
    session = _session(x_session_id)
    try:
        sheet = get_workspace().store.get(sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return _sheet_view(sheet, session)


@router.patch("/sheets/{sheet_id}")
async def rename_sheet(
    sheet_id: str, request: RenameRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Rename a sheet."""
    session = _session(x_session_id)
    try:
        sheet = get_workspace().store.rename(session, sheet_id, request.name)
    except LukundeError as e:
        raise _http_error(e)
    return _sheet_view(sheet, session)


@router.delete("/sheets/{sheet_id}")
async def delete_sheet(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Delete a sheet."""
    workspace = get_workspace()
    try:
        workspace.store.delete(_session(x_session_id), sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return {"status": "ok", "activeSheetId": workspace.store.active_sheet_id}


@router.post("/sheets/{sheet_id}/duplicate")
async def duplicate_sheet(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Copy a sheet and make the copy active."""
    session = _session(x_session_id)
    try:
        sheet = get_workspace().store.duplicate(session, sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return _sheet_view(sheet, session)


@router.post("/sheets/{sheet_id}/select")
async def select_sheet(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Make a sheet active. Locked sheets are returned without data."""
    session = _session(x_session_id)
    try:
        sheet = get_workspace().store.select(sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return _sheet_view(sheet, session)


@router.post("/sheets/{sheet_id}/split")
async def split_sheet(
    sheet_id: str, request: SplitRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Create one sheet per class found in a column."""
    store = get_workspace().store
    session = _session(x_session_id)
    try:
        column_index = request.column_index
        if request.column_name is not None:
            column_index = find_header_index(store.get(sheet_id).header, request.column_name)
        if column_index is None:
            raise LukundeError("Informe a coluna da turma.")
        new_sheets = store.split_by_column(session, sheet_id, column_index)
    except LukundeError as e:
        raise _http_error(e)
    return {
        "count": len(new_sheets),
        "sheets": [_sheet_summary(s, session) for s in new_sheets],
    }


# Cells


@router.put("/sheets/{sheet_id}/cells")
async def update_cell(
    sheet_id: str, request: CellUpdateRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Write one cell; the column's validation rule may reject it."""
    session = _session(x_session_id)
    try:
        sheet = get_workspace().store.update_cell(
            session, sheet_id, request.row, request.column, request.value
        )
    except LukundeError as e:
        raise _http_error(e)
    return {"row": sheet.data[request.row]}


@router.post("/sheets/{sheet_id}/averages")
async def calculate_averages(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Fill the average column for every student row."""
    store = get_workspace().store
    session = _session(x_session_id)
    try:
        count = store.calculate_averages(session, sheet_id)
        sheet = store.get(sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return {"updated": count, "sheet": _sheet_view(sheet, session)}


# Rules


@router.post("/sheets/{sheet_id}/conditional-formats")
async def add_conditional_format(
    sheet_id: str,
    request: ConditionalFormatRequest,
    x_session_id: Optional[str] = Header(default=None),
):
    """Add a conditional formatting rule."""
    try:
        rule = get_workspace().store.add_conditional_format(
            _session(x_session_id),
            sheet_id,
            request.column,
            request.condition,
            request.value,
            _resolve_style(request),
        )
    except LukundeError as e:
        raise _http_error(e)
    return rule.to_payload()


@router.delete("/sheets/{sheet_id}/conditional-formats/{rule_id}")
async def remove_conditional_format(
    sheet_id: str, rule_id: str, x_session_id: Optional[str] = Header(default=None)
):
    """Remove a conditional formatting rule."""
    try:
        removed = get_workspace().store.remove_conditional_format(
            _session(x_session_id), sheet_id, rule_id
        )
    except LukundeError as e:
        raise _http_error(e)
    if not removed:
        raise HTTPException(status_code=404, detail="Regra não encontrada.")
    return {"status": "ok"}


@router.post("/sheets/{sheet_id}/validation-rules")
async def add_validation_rule(
    sheet_id: str,
    request: ValidationRuleRequest,
    x_session_id: Optional[str] = Header(default=None),
):
    """Add a validation rule, replacing any rule on the same column."""
    options = parse_options(request.options) if request.options is not None else None
    try:
        rule = get_workspace().store.add_validation(
            _session(x_session_id),
            sheet_id,
            request.column,
            request.type,
            min=request.min,
            max=request.max,
            options=options,
            error_message=request.error_message,
        )
    except LukundeError as e:
        raise _http_error(e)
    return rule.to_payload()


@router.delete("/sheets/{sheet_id}/validation-rules/{rule_id}")
async def remove_validation_rule(
    sheet_id: str, rule_id: str, x_session_id: Optional[str] = Header(default=None)
):
    """Remove a validation rule."""
    try:
        removed = get_workspace().store.remove_validation(
            _session(x_session_id), sheet_id, rule_id
        )
    except LukundeError as e:
        raise _http_error(e)
    if not removed:
        raise HTTPException(status_code=404, detail="Regra não encontrada.")
    return {"status": "ok"}


@router.post("/sheets/{sheet_id}/class-validation")
async def setup_class_validation(
    sheet_id: str,
    request: ClassValidationRequest,
    x_session_id: Optional[str] = Header(default=None),
):
    """Restrict a confirmed class column to the given list of classes."""
    store = get_workspace().store
    try:
        column_index = find_header_index(store.get(sheet_id).header, request.column_name)
        rule = store.install_validation_rule(
            _session(x_session_id), sheet_id, class_list_rule(column_index, request.options)
        )
    except LukundeError as e:
        raise _http_error(e)
    return rule.to_payload()


# Access codes


@router.post("/sheets/{sheet_id}/share")
async def share_sheet(
    sheet_id: str, request: ShareRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Issue fresh edit and view codes with an expiration."""
    store = get_workspace().store
    try:
        duration = expiration_duration(request.value, request.unit)
        sheet = store.issue_codes(_session(x_session_id), sheet_id, duration)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unidade inválida: {request.unit}")
    except LukundeError as e:
        raise _http_error(e)
    return {
        "editCode": sheet.edit_code,
        "viewCode": sheet.view_code,
        "expiresAt": sheet.access_code_expiration.isoformat(),
        "link": store.share_link(sheet.id),
    }


@router.delete("/sheets/{sheet_id}/share")
async def revoke_sharing(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Remove all access codes from a sheet."""
    session = _session(x_session_id)
    try:
        sheet = get_workspace().store.revoke_codes(session, sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return _sheet_view(sheet, session)


@router.post("/sheets/{sheet_id}/unlock")
async def unlock_sheet(
    sheet_id: str, request: UnlockRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Unlock a protected sheet for this session with an access code."""
    try:
        level = get_workspace().store.unlock(_session(x_session_id), sheet_id, request.code)
    except LukundeError as e:
        raise _http_error(e)
    return {"accessLevel": level.value}


@router.post("/sheets/{sheet_id}/lock")
async def lock_sheet(sheet_id: str, x_session_id: Optional[str] = Header(default=None)):
    """Forget this session's grant on a sheet."""
    try:
        get_workspace().store.simulate_lock(_session(x_session_id), sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return {"status": "ok"}


@router.get("/sheets/{sheet_id}/link")
async def get_share_link(sheet_id: str):
    """Get the shareable link for a sheet."""
    try:
        link = get_workspace().store.share_link(sheet_id)
    except LukundeError as e:
        raise _http_error(e)
    return {"link": link}


@router.post("/links/resolve")
async def resolve_link(
    request: LinkResolveRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Activate the sheet a share link points at."""
    sheet = get_workspace().store.select_from_link(request.link)
    if sheet is None:
        raise HTTPException(status_code=404, detail="Planilha não encontrada.")
    return _sheet_view(sheet, _session(x_session_id))


# AI helpers


@router.post("/sheets/{sheet_id}/suggest-column")
async def suggest_class_column(
    sheet_id: str, request: SuggestionRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Suggest which header holds the class of each student."""
    workspace = get_workspace()
    try:
        sheet = workspace.store.get(sheet_id)
        workspace.access.require_view(sheet, _session(x_session_id))
    except LukundeError as e:
        raise _http_error(e)
    headers = [stringify(cell) for cell in sheet.header]
    suggestion = await workspace.suggester.propose(headers, request.purpose)
    return {"column": suggestion.column, "source": suggestion.source, "headers": headers}


@router.post("/sheets/{sheet_id}/analyze")
async def analyze_sheet(
    sheet_id: str, request: AnalysisRequest, x_session_id: Optional[str] = Header(default=None)
):
    """Answer a question about the sheet's data."""
    workspace = get_workspace()
    try:
        sheet = workspace.store.get(sheet_id)
        workspace.access.require_view(sheet, _session(x_session_id))
    except LukundeError as e:
        raise _http_error(e)
    answer = await workspace.analyst.analyze(sheet.data, request.query)
    return {"answer": answer}


# Workbook import/export


@router.post("/import")
async def import_workbook(request: Request, x_session_id: Optional[str] = Header(default=None)):
    """Import every worksheet of an xlsx body as new sheets."""
    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="Arquivo vazio.")
    try:
        sheets = read_workbook(body)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Arquivo inválido: {e}")

    session = _session(x_session_id)
    added = get_workspace().store.add_sheets(session, sheets)
    return {"count": len(added), "sheets": [_sheet_summary(s, session) for s in added]}


@router.get("/export")
async def export_sheets(
    sheet_id: Optional[str] = None, x_session_id: Optional[str] = Header(default=None)
):
    """Export one sheet, or every readable sheet, as an xlsx workbook."""
    workspace = get_workspace()
    session = _session(x_session_id)
    try:
        if sheet_id:
            sheet = workspace.store.get(sheet_id)
            workspace.access.require_view(sheet, session)
            sheets = [sheet]
        else:
            sheets = [s for s in workspace.store.sheets if workspace.access.can_view(s, session)]
    except LukundeError as e:
        raise _http_error(e)

    filename = f"{sheets[0].name}.xlsx" if sheet_id else "pautas.xlsx"
    return Response(
        content=export_workbook(sheets),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


# Preferences


@router.get("/theme")
async def get_theme():
    """Get the stored color theme."""
    return {"theme": get_workspace().theme}


@router.put("/theme")
async def set_theme(request: ThemeRequest):
    """Store the color theme; unknown values fall back to light."""
    theme = await get_workspace().set_theme(request.theme)
    return {"theme": theme}
