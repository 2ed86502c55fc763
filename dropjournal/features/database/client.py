"""
Database Client - Unified access to the journal stores.

Selects the backend from STORAGE_BACKEND ("supabase" or "memory") and
exposes one store per concern.

Usage:
    db = get_database_client()
    entry = db.entries.create(owner_id, question, answer)
    analyses = db.analyses.list_by_owner(owner_id)
"""

import logging
from functools import lru_cache
from typing import Optional

from dropjournal.core.config import settings
from dropjournal.features.database.base import AnalysisStore, ChatStore, EntryStore
from dropjournal.features.database.memory import (
    MemoryAnalysisStore,
    MemoryChatStore,
    MemoryCursorStore,
    MemoryDatabase,
    MemoryEntryStore,
)
from dropjournal.features.questions.sequencer import CursorStore

logger = logging.getLogger("DropJournal.Database")


class DatabaseClient:
    """Bundle of the stores used by the service."""

    def __init__(
        self,
        entries: EntryStore,
        chat: ChatStore,
        analyses: AnalysisStore,
        question_cursor: Optional[CursorStore] = None,
        backend: str = "custom",
    ):
        self.entries = entries
        self.chat = chat
        self.analyses = analyses
        self.question_cursor = question_cursor
        self.backend = backend

    @classmethod
    def in_memory(cls, db: Optional[MemoryDatabase] = None, persist_cursor: bool = False) -> "DatabaseClient":
        db = db or MemoryDatabase()
        return cls(
            entries=MemoryEntryStore(db),
            chat=MemoryChatStore(db),
            analyses=MemoryAnalysisStore(db),
            question_cursor=MemoryCursorStore(db) if persist_cursor else None,
            backend="memory",
        )

    @classmethod
    def supabase(cls, persist_cursor: bool = False) -> "DatabaseClient":
        from dropjournal.core.database import get_supabase
        from dropjournal.features.database.repositories import (
            AnalysesRepository,
            ChatMessagesRepository,
            EntriesRepository,
            QuestionCursorRepository,
        )

        client = get_supabase()
        return cls(
            entries=EntriesRepository(client),
            chat=ChatMessagesRepository(client),
            analyses=AnalysesRepository(client),
            question_cursor=QuestionCursorRepository(client) if persist_cursor else None,
            backend="supabase",
        )


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    """Get the singleton database client for the configured backend."""
    persist_cursor = settings.QUESTION_CURSOR_BACKEND != "memory"
    if settings.STORAGE_BACKEND == "memory":
        client = DatabaseClient.in_memory(persist_cursor=persist_cursor)
    else:
        client = DatabaseClient.supabase(persist_cursor=persist_cursor)
    logger.info(f"Database client initialized with {client.backend} backend")
    return client
