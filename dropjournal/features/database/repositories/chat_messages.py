"""Chat Messages Repository - companion transcripts attached to entries."""

import logging
from typing import Dict, Iterable, List

from dropjournal.features.database.base import ChatStore
from dropjournal.features.database.models import ChatMessage
from dropjournal.shared.errors import ServiceUnavailable

logger = logging.getLogger("DropJournal.Database.ChatMessages")


class ChatMessagesRepository(ChatStore):
    """Repository for chat message operations."""

    TABLE = "chat_messages"

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def add(self, owner_id: int, entry_id: int, content: str, is_bot: bool = False) -> ChatMessage:
        try:
            result = self.client.table(self.TABLE).insert({
                "user_id": owner_id,
                "entry_id": entry_id,
                "content": content,
                "is_bot": is_bot,
            }).execute()
        except Exception as e:
            logger.error(f"Error storing chat message for entry {entry_id}: {e}")
            raise ServiceUnavailable("Could not save message") from e
        return ChatMessage.from_row(result.data[0])

    def list_for_entry(self, entry_id: int) -> List[ChatMessage]:
        return self.list_for_entries([entry_id]).get(entry_id, [])

    def list_for_entries(self, entry_ids: Iterable[int]) -> Dict[int, List[ChatMessage]]:
        ids = list(entry_ids)
        if not ids:
            return {}
        try:
            result = self.client.table(self.TABLE).select("*").in_(
                "entry_id", ids
            ).order("created_at").order("id").execute()
        except Exception as e:
            logger.error(f"Error loading transcripts for {len(ids)} entries: {e}")
            raise ServiceUnavailable("Could not load chat messages") from e

        transcripts: Dict[int, List[ChatMessage]] = {}
        for row in result.data or []:
            message = ChatMessage.from_row(row)
            transcripts.setdefault(message.entry_id, []).append(message)
        return transcripts
