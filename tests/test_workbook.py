"""Tests for xlsx import and export."""

import io
from datetime import datetime

from openpyxl import Workbook, load_workbook

from lukunde.sheets import Sheet
from lukunde.workbook import export_workbook, read_workbook, sanitize_title


def _workbook_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestReadWorkbook:
    """Test importing worksheets as sheets."""

    def test_one_sheet_per_worksheet(self):
        wb = Workbook()
        ws = wb.active
        ws.title = "9ª A"
        ws.append(["Nome", "Nota 1", "Nota 2"])
        ws.append(["Ana", 7.5, 8])
        second = wb.create_sheet("9ª B")
        second.append(["Nome", "Nascimento"])
        second.append(["Rui", datetime(2010, 5, 4)])

        sheets = read_workbook(_workbook_bytes(wb))

        assert [s.name for s in sheets] == ["9ª A", "9ª B"]
        assert sheets[0].data == [["Nome", "Nota 1", "Nota 2"], ["Ana", 7.5, 8]]
        assert sheets[1].data[1] == ["Rui", "2010-05-04T00:00:00"]
        assert sheets[0].id != sheets[1].id
        assert sheets[0].conditional_formats == []
        assert sheets[0].edit_code is None

    def test_gaps_become_empty_strings(self):
        wb = Workbook()
        ws = wb.active
        ws["A1"] = "Nome"
        ws["C1"] = "Turma"
        ws["A3"] = "Ana"

        data = read_workbook(_workbook_bytes(wb))[0].data
        assert data == [["Nome", "", "Turma"], [], ["Ana"]]

    def test_reads_from_path(self, tmp_path):
        wb = Workbook()
        wb.active.append(["x"])
        path = tmp_path / "pautas.xlsx"
        wb.save(path)
        assert read_workbook(path)[0].data == [["x"]]


class TestExportWorkbook:
    """Test exporting sheets to xlsx."""

    def test_values_and_order_preserved(self):
        sheets = [
            Sheet(name="Pauta 1", data=[["Nome", "Média"], ["Ana", "7,8"], ["Rui", 9]]),
            Sheet(name="Pauta 2", data=[["Nome"], ["", "x"]]),
        ]
        wb = load_workbook(io.BytesIO(export_workbook(sheets)))

        assert wb.sheetnames == ["Pauta 1", "Pauta 2"]
        rows = list(wb["Pauta 1"].iter_rows(values_only=True))
        assert rows == [("Nome", "Média"), ("Ana", "7,8"), ("Rui", 9)]
        assert wb["Pauta 2"]["A2"].value is None
        assert wb["Pauta 2"]["B2"].value == "x"

    def test_titles_sanitized_and_unique(self):
        sheets = [Sheet(name="A/B"), Sheet(name="a b"), Sheet(name="[]"), Sheet(name="x" * 40)]
        wb = load_workbook(io.BytesIO(export_workbook(sheets)))
        assert wb.sheetnames == ["A B", "a b (1)", "Sheet", "x" * 31]

    def test_empty_export_still_valid(self):
        wb = load_workbook(io.BytesIO(export_workbook([])))
        assert wb.sheetnames == ["Sheet"]

    def test_round_trip_through_import(self):
        original = Sheet(name="Pauta", data=[["Nome", "Nota"], ["Ana", "7,5"]])
        restored = read_workbook(export_workbook([original]))[0]
        assert restored.name == "Pauta"
        assert restored.data == original.data

    def test_text_that_looks_like_a_formula_stays_text(self):
        original = Sheet(name="Pauta", data=[["Nome", "Obs"], ["Ana", "=1+1"], ["Rui", "007"]])
        restored = read_workbook(export_workbook([original]))[0]
        assert restored.data == original.data

        ws = load_workbook(io.BytesIO(export_workbook([original]))).active
        assert ws["B2"].data_type == "s"

    def test_blank_rows_keep_their_position(self):
        original = Sheet(name="Pauta", data=[["Nome"], [], ["Ana"]])
        ws = load_workbook(io.BytesIO(export_workbook([original]))).active
        assert ws["A3"].value == "Ana"


class TestSanitizeTitle:
    """Test worksheet title rules."""

    def test_sanitize(self):
        assert sanitize_title(" Turma: 1A? ") == "Turma  1A"
        assert sanitize_title("") == "Sheet"
        assert len(sanitize_title("y" * 50)) == 31
