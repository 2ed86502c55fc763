"""Question Cursor Repository - the single-row durable sequencer cursor."""

import logging
from typing import Optional

from dropjournal.features.questions.sequencer import CursorStore
from dropjournal.shared.errors import ServiceUnavailable

logger = logging.getLogger("DropJournal.Database.QuestionCursor")

CURSOR_ROW_ID = 1


class QuestionCursorRepository(CursorStore):
    """Stores the cursor in question_cursor(id = 1)."""

    TABLE = "question_cursor"

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def load(self) -> Optional[int]:
        try:
            result = self.client.table(self.TABLE).select("current_index").eq(
                "id", CURSOR_ROW_ID
            ).execute()
        except Exception as e:
            logger.error(f"Error loading question cursor: {e}")
            raise ServiceUnavailable("Could not load question cursor") from e

        if not result.data:
            return None
        return result.data[0]["current_index"]

    def save(self, cursor: int) -> None:
        try:
            self.client.table(self.TABLE).upsert({
                "id": CURSOR_ROW_ID,
                "current_index": cursor,
            }).execute()
        except Exception as e:
            logger.error(f"Error saving question cursor: {e}")
            raise ServiceUnavailable("Could not save question cursor") from e
