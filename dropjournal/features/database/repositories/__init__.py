"""Database Repositories - Supabase data access."""

from dropjournal.features.database.repositories.entries import EntriesRepository
from dropjournal.features.database.repositories.chat_messages import ChatMessagesRepository
from dropjournal.features.database.repositories.analyses import AnalysesRepository
from dropjournal.features.database.repositories.question_cursor import QuestionCursorRepository

__all__ = [
    "EntriesRepository",
    "ChatMessagesRepository",
    "AnalysesRepository",
    "QuestionCursorRepository",
]
