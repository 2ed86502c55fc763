"""
Daily question feature.

- Question sheet adapter (Google Sheets)
- Local fallback prompts
- The shared question sequencer
"""

from dropjournal.features.questions.fallback import fallback_question
from dropjournal.features.questions.models import Question, MalformedQuestionRow, parse_row
from dropjournal.features.questions.sequencer import CursorStore, QuestionSequencer
from dropjournal.features.questions.source import QuestionSource, SheetsQuestionSource

__all__ = [
    "fallback_question",
    "Question",
    "MalformedQuestionRow",
    "parse_row",
    "CursorStore",
    "QuestionSequencer",
    "QuestionSource",
    "SheetsQuestionSource",
]
