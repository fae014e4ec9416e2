"""Tests for the command-line interface."""

import sys

import pytest
from openpyxl import Workbook, load_workbook

from lukunde import cli
from lukunde.api.workspace import Workspace
from lukunde.memory import SQLiteKeyValueStore


@pytest.fixture
def db_workspace(tmp_path, monkeypatch):
    """Point the CLI at a throwaway database."""
    db_path = tmp_path / "cli.db"
    monkeypatch.setattr(
        Workspace, "from_settings", classmethod(lambda cls: cls(SQLiteKeyValueStore(db_path)))
    )
    return db_path


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["lukunde", *args])
    cli.main()


class TestCli:
    """Test the list, import and export commands."""

    def test_list_bootstraps_store(self, db_workspace, monkeypatch, capsys):
        _run(monkeypatch, "list")
        assert "Pauta 1" in capsys.readouterr().out

    def test_import_then_export(self, db_workspace, tmp_path, monkeypatch, capsys):
        source = tmp_path / "in.xlsx"
        wb = Workbook()
        wb.active.title = "9ª A"
        wb.active.append(["Nome", "Turma"])
        wb.save(source)

        _run(monkeypatch, "import", str(source))
        assert "Importadas 1" in capsys.readouterr().out

        target = tmp_path / "out.xlsx"
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "export", str(target))
        assert exc_info.value.code == 0
        assert load_workbook(target).sheetnames == ["Pauta 1", "9ª A"]

    def test_export_unknown_sheet(self, db_workspace, tmp_path, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "export", str(tmp_path / "out.xlsx"), "--sheet", "missing")
        assert exc_info.value.code == 1
        assert "Planilha não encontrada." in capsys.readouterr().out

    def test_no_command_prints_help(self, monkeypatch):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch)
        assert exc_info.value.code == 1
