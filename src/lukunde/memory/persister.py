"""Fire-and-forget persistence of the sheet collection and theme."""

import asyncio
import logging
from typing import Optional

from ..config import settings
from ..sheets.models import Sheet
from .serialization import Theme, dump_sheets, load_sheets, parse_theme
from .store import KeyValueStore

logger = logging.getLogger(__name__)


class SheetPersister:
    """
    Writes the sheet collection to a key-value store after every change.

    ``schedule`` never raises and never blocks the caller on a running
    event loop: the write runs as a background task and its failure is only
    logged. Each write stores the most recent snapshot, so writes that
    finish out of order still leave the latest state behind.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        sheets_key: Optional[str] = None,
        theme_key: Optional[str] = None,
    ):
        self.kv_store = kv_store
        self.sheets_key = sheets_key or settings.sheets_storage_key
        self.theme_key = theme_key or settings.theme_storage_key
        self._latest: Optional[str] = None
        self._pending: set[asyncio.Task] = set()

    async def load(self) -> list[Sheet]:
        try:
            payload = await self.kv_store.get(self.sheets_key)
        except Exception:
            logger.exception("Failed to read stored sheets; starting empty")
            return []
        sheets = load_sheets(payload)
        logger.info(f"Loaded {len(sheets)} sheets from storage")
        return sheets

    def schedule(self, sheets: list[Sheet]) -> None:
        """Persist ``sheets`` in the background."""
        try:
            self._latest = dump_sheets(sheets)
        except Exception:
            logger.exception("Failed to serialize sheets; skipping save")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._write())
            return

        task = loop.create_task(self._write())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _write(self) -> None:
        payload = self._latest
        if payload is None:
            return
        try:
            await self.kv_store.set(self.sheets_key, payload)
            logger.debug(f"Saved sheet collection ({len(payload)} chars)")
        except Exception:
            logger.exception("Failed to save sheets; in-memory state kept")

    async def load_theme(self) -> Theme:
        try:
            return parse_theme(await self.kv_store.get(self.theme_key))
        except Exception:
            logger.exception("Failed to read theme preference")
            return parse_theme(None)

    async def save_theme(self, theme: Theme) -> Theme:
        theme = parse_theme(theme)
        try:
            await self.kv_store.set(self.theme_key, theme)
        except Exception:
            logger.exception("Failed to save theme preference")
        return theme
