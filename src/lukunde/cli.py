"""Command-line interface for Lukunde."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Lukunde - School gradebook sheets with rules and access codes"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # List command
    subparsers.add_parser("list", help="List stored sheets")

    # Import command
    import_parser = subparsers.add_parser("import", help="Import an xlsx workbook")
    import_parser.add_argument("path", type=Path, help="Workbook to import")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export stored sheets to xlsx")
    export_parser.add_argument("path", type=Path, help="Destination workbook")
    export_parser.add_argument("--sheet", help="Export only the sheet with this id")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "list":
        asyncio.run(run_list())
    elif args.command == "import":
        asyncio.run(run_import(args.path))
    elif args.command == "export":
        sys.exit(asyncio.run(run_export(args.path, args.sheet)))
    else:
        parser.print_help()
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "lukunde.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


async def run_list():
    """Print every stored sheet in tab order."""
    from .api.workspace import Workspace

    workspace = Workspace.from_settings()
    await workspace.initialize()
    try:
        for index, sheet in enumerate(workspace.store.sheets):
            marker = "*" if sheet.id == workspace.store.active_sheet_id else " "
            shared = " [compartilhada]" if sheet.is_shared else ""
            print(f"{marker} {index + 1}. {sheet.name} ({len(sheet.data)} linhas) {sheet.id}{shared}")
    finally:
        await workspace.shutdown()


async def run_import(path: Path):
    """Add every worksheet of a workbook to the stored sheets."""
    from .api.workspace import Workspace
    from .workbook import read_workbook

    workspace = Workspace.from_settings()
    await workspace.initialize()
    try:
        sheets = read_workbook(path)
        workspace.store.add_sheets(workspace.session(), sheets)
        print(f"Importadas {len(sheets)} planilhas de {path}")
    finally:
        await workspace.shutdown()


async def run_export(path: Path, sheet_id: Optional[str] = None) -> int:
    """Write stored sheets to a workbook; returns the process exit code."""
    from .api.workspace import Workspace
    from .errors import LukundeError
    from .workbook import export_workbook

    workspace = Workspace.from_settings()
    await workspace.initialize()
    try:
        sheets = [workspace.store.get(sheet_id)] if sheet_id else workspace.store.sheets
    except LukundeError as e:
        print(f"Erro: {e.message}")
        return 1
    finally:
        await workspace.shutdown()

    path.write_bytes(export_workbook(sheets))
    print(f"Exportadas {len(sheets)} planilhas para {path}")
    return 0


if __name__ == "__main__":
    main()
