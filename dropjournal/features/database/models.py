"""Journal records shared by the stores, the pipeline and the API."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, TypeAdapter

# PostgREST trims trailing zeros from fractional seconds, so fractions of any
# precision (and a trailing Z) must parse
_TIMESTAMP = TypeAdapter(Optional[datetime])


def parse_timestamp(value: Any) -> Optional[datetime]:
    return _TIMESTAMP.validate_python(value)


class Entry(BaseModel):
    """One day's answer. `analyzed_at` is None until an analysis consumes it."""
    id: int
    owner_id: int
    question_id: Optional[int] = None
    question_text: str
    answer_text: str
    created_at: datetime
    share_public: bool = False
    share_token: Optional[str] = None
    analyzed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Entry":
        return cls(
            id=row["id"],
            owner_id=row["user_id"],
            question_id=row.get("question_id"),
            question_text=row["question"],
            answer_text=row["answer"],
            created_at=parse_timestamp(row["created_at"]),
            share_public=bool(row.get("is_public")),
            share_token=row.get("share_id"),
            analyzed_at=parse_timestamp(row.get("analyzed_at")),
        )


class ChatMessage(BaseModel):
    id: int
    entry_id: int
    owner_id: int
    content: str
    is_bot: bool = False
    created_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ChatMessage":
        return cls(
            id=row["id"],
            entry_id=row["entry_id"],
            owner_id=row["user_id"],
            content=row["content"],
            is_bot=bool(row.get("is_bot")),
            created_at=parse_timestamp(row["created_at"]),
        )


class Analysis(BaseModel):
    """Narrative over a batch of entries. `entry_count` is fixed at creation."""
    id: int
    owner_id: int
    content: str
    entry_count: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Analysis":
        return cls(
            id=row["id"],
            owner_id=row["user_id"],
            content=row["content"],
            entry_count=row["entry_count"],
            created_at=parse_timestamp(row["created_at"]),
        )
