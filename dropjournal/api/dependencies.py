from functools import lru_cache
from typing import Optional

from fastapi import Header

from dropjournal.features.analysis import AnalysisPipeline, ClaudeAnalysisGenerator
from dropjournal.features.chat import CompanionChatService
from dropjournal.features.database import DatabaseClient, get_database_client
from dropjournal.features.questions import QuestionSequencer, SheetsQuestionSource
from dropjournal.shared.errors import Unauthorized


@lru_cache(maxsize=1)
def get_database() -> DatabaseClient:
    """Provide the singleton store bundle for request handlers."""
    return get_database_client()


@lru_cache(maxsize=1)
def get_sequencer() -> QuestionSequencer:
    """Provide the process-wide question sequencer; every user shares its cursor."""
    return QuestionSequencer(SheetsQuestionSource(), cursor_store=get_database().question_cursor)


@lru_cache(maxsize=1)
def get_pipeline() -> AnalysisPipeline:
    """Provide the singleton analysis pipeline (it owns the per-user locks)."""
    db = get_database()
    return AnalysisPipeline(db.entries, db.chat, db.analyses, ClaudeAnalysisGenerator())


@lru_cache(maxsize=1)
def get_chat_service() -> CompanionChatService:
    db = get_database()
    return CompanionChatService(db.entries, db.chat)


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> int:
    """Caller identity as forwarded by the auth layer in X-User-Id."""
    if not x_user_id or not x_user_id.strip().isdigit() or int(x_user_id) < 1:
        raise Unauthorized("Missing or invalid X-User-Id header")
    return int(x_user_id)
