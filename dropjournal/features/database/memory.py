"""
In-memory store backend.

Used for local development (STORAGE_BACKEND=memory) and tests. All tables
share one MemoryDatabase guarded by a single lock, which makes
commit_analysis atomic the same way the Postgres function is.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from dropjournal.features.database.base import AnalysisStore, ChatStore, EntryStore
from dropjournal.features.database.models import Analysis, ChatMessage, Entry
from dropjournal.features.questions.sequencer import CursorStore
from dropjournal.shared.errors import BacklogConflict, NotFound

logger = logging.getLogger("DropJournal.Database.Memory")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryDatabase:
    """Tables and id sequences for the in-memory backend."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.entries: Dict[int, Entry] = {}
        self.chat_messages: Dict[int, ChatMessage] = {}
        self.analyses: Dict[int, Analysis] = {}
        self.last_analyzed_at: Dict[int, datetime] = {}
        self.question_cursor: Optional[int] = None
        self._sequences: Dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self._sequences[table] = self._sequences.get(table, 0) + 1
        return self._sequences[table]


class MemoryEntryStore(EntryStore):

    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def create(self, owner_id, question_text, answer_text, question_id=None) -> Entry:
        with self.db.lock:
            entry = Entry(
                id=self.db.next_id("entries"),
                owner_id=owner_id,
                question_id=question_id,
                question_text=question_text,
                answer_text=answer_text,
                created_at=_now(),
            )
            self.db.entries[entry.id] = entry
            return entry.model_copy()

    def list_by_owner(self, owner_id: int) -> List[Entry]:
        with self.db.lock:
            owned = [e for e in self.db.entries.values() if e.owner_id == owner_id]
        return [e.model_copy() for e in sorted(owned, key=lambda e: (e.created_at, e.id), reverse=True)]

    def get(self, owner_id: int, entry_id: int) -> Entry:
        with self.db.lock:
            entry = self.db.entries.get(entry_id)
            if entry is None or entry.owner_id != owner_id:
                raise NotFound("Entry not found", resource_type="entry", resource_id=entry_id)
            return entry.model_copy()

    def get_by_share_token(self, share_token: str) -> Entry:
        with self.db.lock:
            for entry in self.db.entries.values():
                if entry.share_public and entry.share_token == share_token:
                    return entry.model_copy()
        raise NotFound("Entry not found", resource_type="entry")

    def set_sharing(self, owner_id, entry_id, share_public, share_token) -> Entry:
        with self.db.lock:
            entry = self.db.entries.get(entry_id)
            if entry is None or entry.owner_id != owner_id:
                raise NotFound("Entry not found", resource_type="entry", resource_id=entry_id)
            entry.share_public = share_public
            entry.share_token = share_token
            return entry.model_copy()

    def list_unanalyzed(self, owner_id: int) -> List[Entry]:
        with self.db.lock:
            pending = [
                e for e in self.db.entries.values()
                if e.owner_id == owner_id and e.analyzed_at is None
            ]
        return [e.model_copy() for e in sorted(pending, key=lambda e: (e.created_at, e.id))]

    def count_unanalyzed(self, owner_id: int) -> int:
        with self.db.lock:
            return sum(
                1 for e in self.db.entries.values()
                if e.owner_id == owner_id and e.analyzed_at is None
            )

    def mark_analyzed(self, owner_id: int, entry_ids: Iterable[int], at: datetime) -> int:
        marked = 0
        with self.db.lock:
            for entry_id in entry_ids:
                entry = self.db.entries.get(entry_id)
                if entry and entry.owner_id == owner_id and entry.analyzed_at is None:
                    entry.analyzed_at = at
                    marked += 1
        return marked


class MemoryChatStore(ChatStore):

    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def add(self, owner_id, entry_id, content, is_bot=False) -> ChatMessage:
        with self.db.lock:
            message = ChatMessage(
                id=self.db.next_id("chat_messages"),
                entry_id=entry_id,
                owner_id=owner_id,
                content=content,
                is_bot=is_bot,
                created_at=_now(),
            )
            self.db.chat_messages[message.id] = message
            return message.model_copy()

    def list_for_entry(self, entry_id: int) -> List[ChatMessage]:
        return self.list_for_entries([entry_id]).get(entry_id, [])

    def list_for_entries(self, entry_ids: Iterable[int]) -> Dict[int, List[ChatMessage]]:
        wanted = set(entry_ids)
        transcripts: Dict[int, List[ChatMessage]] = {}
        with self.db.lock:
            # ids are assigned in insertion order
            for message in sorted(self.db.chat_messages.values(), key=lambda m: m.id):
                if message.entry_id in wanted:
                    transcripts.setdefault(message.entry_id, []).append(message.model_copy())
        return transcripts


class MemoryAnalysisStore(AnalysisStore):

    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def create(self, owner_id: int, content: str, entry_count: int) -> Analysis:
        with self.db.lock:
            analysis = Analysis(
                id=self.db.next_id("analyses"),
                owner_id=owner_id,
                content=content,
                entry_count=entry_count,
                created_at=_now(),
            )
            self.db.analyses[analysis.id] = analysis
            return analysis.model_copy()

    def list_by_owner(self, owner_id: int) -> List[Analysis]:
        with self.db.lock:
            owned = [a for a in self.db.analyses.values() if a.owner_id == owner_id]
        return [a.model_copy() for a in sorted(owned, key=lambda a: (a.created_at, a.id), reverse=True)]

    def get_by_owner_and_id(self, owner_id: int, analysis_id: int) -> Analysis:
        with self.db.lock:
            analysis = self.db.analyses.get(analysis_id)
            if analysis is None or analysis.owner_id != owner_id:
                raise NotFound("Analysis not found", resource_type="analysis", resource_id=analysis_id)
            return analysis.model_copy()

    def set_last_analyzed_at(self, owner_id: int, at: datetime) -> None:
        with self.db.lock:
            self.db.last_analyzed_at[owner_id] = at

    def get_last_analyzed_at(self, owner_id: int) -> Optional[datetime]:
        with self.db.lock:
            return self.db.last_analyzed_at.get(owner_id)

    def commit_analysis(self, owner_id: int, entry_ids: List[int], content: str, at: datetime) -> Analysis:
        with self.db.lock:
            for entry_id in entry_ids:
                entry = self.db.entries.get(entry_id)
                if entry is None or entry.owner_id != owner_id or entry.analyzed_at is not None:
                    raise BacklogConflict(
                        "Entries in this batch were already analyzed",
                        details={"entry_id": entry_id},
                    )

            analysis = self.create(owner_id, content, len(entry_ids))
            for entry_id in entry_ids:
                self.db.entries[entry_id].analyzed_at = at
            self.db.last_analyzed_at[owner_id] = at

        logger.info(f"Committed analysis {analysis.id} over {len(entry_ids)} entries for user {owner_id}")
        return analysis


class MemoryCursorStore(CursorStore):

    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def load(self) -> Optional[int]:
        return self.db.question_cursor

    def save(self, cursor: int) -> None:
        self.db.question_cursor = cursor
