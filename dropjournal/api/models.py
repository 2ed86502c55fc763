from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from dropjournal.features.database.models import Analysis, ChatMessage, Entry
from dropjournal.features.questions.models import Question

# =========================================================================
# QUESTION MODELS
# =========================================================================

class QuestionResponse(BaseModel):
    id: int
    text: str
    source: str = "sheet"  # 'sheet' or 'fallback'

    @classmethod
    def from_question(cls, question: Question) -> "QuestionResponse":
        return cls(**question.to_dict())

class ResetCursorRequest(BaseModel):
    # Checked by the sequencer, so bools and strings reach it uncoerced
    index: Any

class ResetCursorResponse(BaseModel):
    status: str
    index: int

# =========================================================================
# ENTRY MODELS
# =========================================================================

class CreateEntryRequest(BaseModel):
    question_id: Optional[int] = None
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    # Echo of QuestionResponse.source
    source: Literal["sheet", "fallback"] = "sheet"

    @property
    def sheet_question_id(self) -> Optional[int]:
        """Fallback prompt IDs index the local prompt list, not the sheet."""
        return None if self.source == "fallback" else self.question_id

class ShareEntryRequest(BaseModel):
    is_public: bool

class EntryResponse(BaseModel):
    id: int
    question_id: Optional[int] = None
    question: str
    answer: str
    created_at: datetime
    is_public: bool = False
    share_id: Optional[str] = None
    analyzed: bool = False

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryResponse":
        return cls(
            id=entry.id,
            question_id=entry.question_id,
            question=entry.question_text,
            answer=entry.answer_text,
            created_at=entry.created_at,
            is_public=entry.share_public,
            share_id=entry.share_token,
            analyzed=entry.analyzed_at is not None,
        )

class SharedEntryResponse(BaseModel):
    """Public view of a shared entry; carries no owner information."""
    question: str
    answer: str
    created_at: datetime

# =========================================================================
# CHAT MODELS
# =========================================================================

class ChatMessageRequest(BaseModel):
    content: str = Field(..., min_length=1)

class ChatMessageResponse(BaseModel):
    id: int
    entry_id: int
    content: str
    is_bot: bool
    created_at: datetime

    @classmethod
    def from_message(cls, message: ChatMessage) -> "ChatMessageResponse":
        return cls(
            id=message.id,
            entry_id=message.entry_id,
            content=message.content,
            is_bot=message.is_bot,
            created_at=message.created_at,
        )

class ChatExchangeResponse(BaseModel):
    messages: List[ChatMessageResponse]

# =========================================================================
# TRANSCRIPTION MODELS
# =========================================================================

class TranscribeRequest(BaseModel):
    audio: str = Field(..., min_length=1, description="Base64-encoded audio")

class TranscribeResponse(BaseModel):
    text: str

# =========================================================================
# ANALYSIS MODELS
# =========================================================================

class AnalysisCountResponse(BaseModel):
    count: int
    threshold: int

class AnalysisResponse(BaseModel):
    id: int
    content: str
    entry_count: int
    created_at: datetime

    @classmethod
    def from_analysis(cls, analysis: Analysis) -> "AnalysisResponse":
        return cls(
            id=analysis.id,
            content=analysis.content,
            entry_count=analysis.entry_count,
            created_at=analysis.created_at,
        )
