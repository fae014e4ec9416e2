"""Process-wide state served by the API."""

import logging
from typing import Optional

from ..access import AccessControlManager, AccessSession
from ..llm import ColumnSuggester, LLMClient, SheetAnalyst, create_llm_client
from ..memory import KeyValueStore, SheetPersister, SQLiteKeyValueStore, Theme
from ..store import SheetStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "local"


class Workspace:
    """
    Wires the sheet store to persistence, access control and the AI helpers.

    The store is rebuilt from storage by ``initialize``; every committed
    change is scheduled for saving through the persister.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        llm_client: Optional[LLMClient] = None,
        access: Optional[AccessControlManager] = None,
    ):
        self.kv_store = kv_store
        self.persister = SheetPersister(kv_store)
        self.access = access or AccessControlManager()
        self.store = SheetStore(self.access, on_change=self.persister.schedule)
        self.suggester = ColumnSuggester(llm_client)
        self.analyst = SheetAnalyst(llm_client)
        self.theme: Theme = "light"
        self._sessions: dict[str, AccessSession] = {}

    @classmethod
    def from_settings(cls) -> "Workspace":
        return cls(SQLiteKeyValueStore(), llm_client=create_llm_client())

    async def initialize(self):
        """Open storage, load the saved sheets and make sure one exists."""
        await self.kv_store.initialize()
        sheets = await self.persister.load()
        self.store = SheetStore(self.access, sheets, on_change=self.persister.schedule)
        self.store.bootstrap(self.session(DEFAULT_SESSION_ID))
        self.theme = await self.persister.load_theme()
        logger.info(f"Workspace ready with {len(self.store)} sheets")

    async def shutdown(self):
        await self.persister.flush()
        await self.kv_store.close()

    def session(self, session_id: Optional[str] = None) -> AccessSession:
        """Return the session for ``session_id``, creating it on first use."""
        session_id = session_id or DEFAULT_SESSION_ID
        if session_id not in self._sessions:
            self._sessions[session_id] = AccessSession(session_id)
        return self._sessions[session_id]

    async def set_theme(self, theme: Theme) -> Theme:
        self.theme = await self.persister.save_theme(theme)
        return self.theme
