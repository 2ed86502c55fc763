"""
Entries Repository - Journal entry data access operations.

Handles:
- Creating entries and listing a user's journal
- Public sharing by share token
- The analyzed_at watermark used by the analysis pipeline
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from dropjournal.features.database.base import EntryStore
from dropjournal.features.database.models import Entry
from dropjournal.shared.errors import NotFound, ServiceUnavailable

logger = logging.getLogger("DropJournal.Database.Entries")


class EntriesRepository(EntryStore):
    """Repository for journal entry operations."""

    TABLE = "entries"

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def create(
        self,
        owner_id: int,
        question_text: str,
        answer_text: str,
        question_id: Optional[int] = None,
    ) -> Entry:
        payload = {
            "user_id": owner_id,
            "question_id": question_id,
            "question": question_text,
            "answer": answer_text,
            "is_public": False,
            "share_id": None,
        }
        try:
            result = self.client.table(self.TABLE).insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating entry for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not save entry") from e

        entry = Entry.from_row(result.data[0])
        logger.info(f"Entry created: {entry.id}")
        return entry

    def list_by_owner(self, owner_id: int) -> List[Entry]:
        try:
            result = self.client.table(self.TABLE).select("*").eq(
                "user_id", owner_id
            ).order("created_at", desc=True).order("id", desc=True).execute()
        except Exception as e:
            logger.error(f"Error listing entries for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not load entries") from e
        return [Entry.from_row(row) for row in result.data or []]

    def get(self, owner_id: int, entry_id: int) -> Entry:
        try:
            result = self.client.table(self.TABLE).select("*").eq(
                "id", entry_id
            ).eq("user_id", owner_id).execute()
        except Exception as e:
            logger.error(f"Error fetching entry {entry_id}: {e}")
            raise ServiceUnavailable("Could not load entry") from e

        if not result.data:
            raise NotFound("Entry not found", resource_type="entry", resource_id=entry_id)
        return Entry.from_row(result.data[0])

    def get_by_share_token(self, share_token: str) -> Entry:
        try:
            result = self.client.table(self.TABLE).select("*").eq(
                "share_id", share_token
            ).eq("is_public", True).execute()
        except Exception as e:
            logger.error(f"Error fetching shared entry: {e}")
            raise ServiceUnavailable("Could not load entry") from e

        if not result.data:
            raise NotFound("Entry not found", resource_type="entry")
        return Entry.from_row(result.data[0])

    def set_sharing(self, owner_id: int, entry_id: int, share_public: bool, share_token: Optional[str]) -> Entry:
        try:
            result = self.client.table(self.TABLE).update({
                "is_public": share_public,
                "share_id": share_token,
            }).eq("id", entry_id).eq("user_id", owner_id).execute()
        except Exception as e:
            logger.error(f"Error updating sharing for entry {entry_id}: {e}")
            raise ServiceUnavailable("Could not update entry") from e

        if not result.data:
            raise NotFound("Entry not found", resource_type="entry", resource_id=entry_id)
        logger.info(f"Entry {entry_id} sharing set to {share_public}")
        return Entry.from_row(result.data[0])

    def list_unanalyzed(self, owner_id: int) -> List[Entry]:
        try:
            result = self.client.table(self.TABLE).select("*").eq(
                "user_id", owner_id
            ).is_("analyzed_at", "null").order("created_at").order("id").execute()
        except Exception as e:
            logger.error(f"Error listing unanalyzed entries for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not load entries") from e
        return [Entry.from_row(row) for row in result.data or []]

    def count_unanalyzed(self, owner_id: int) -> int:
        try:
            result = self.client.table(self.TABLE).select("id", count="exact").eq(
                "user_id", owner_id
            ).is_("analyzed_at", "null").execute()
        except Exception as e:
            logger.error(f"Error counting unanalyzed entries for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not count entries") from e
        return result.count or 0

    def mark_analyzed(self, owner_id: int, entry_ids: Iterable[int], at: datetime) -> int:
        ids = list(entry_ids)
        if not ids:
            return 0
        try:
            result = self.client.table(self.TABLE).update({
                "analyzed_at": at.isoformat(),
            }).eq("user_id", owner_id).in_("id", ids).is_("analyzed_at", "null").execute()
        except Exception as e:
            logger.error(f"Error marking entries analyzed for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not update entries") from e
        return len(result.data or [])
