"""
Question Sequencer

Maps "today" onto a question by walking a single, application-wide cursor
through the question sheet, one question per call to advance_and_get().

Two kinds of trouble are told apart:
- the sheet has no row for the cursor: the list is finite and we walked off
  the end, so the sequence restarts at question 1;
- the sheet cannot be read at all, or the cursor store is down: an outage,
  so today's prompt comes from the local fallback set and the cursor stays
  where it was.

Every read-modify-write of the cursor happens under one asyncio.Lock. The
cursor is kept in memory and, when a CursorStore is configured, mirrored to
it so it survives restarts.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Optional

from dropjournal.core.tracing import get_tracer
from dropjournal.features.questions.fallback import fallback_question
from dropjournal.features.questions.models import Question
from dropjournal.features.questions.source import QuestionSource
from dropjournal.shared.errors import (
    InvalidArgument,
    NotFound,
    ServiceUnavailable,
    SourceExhausted,
    SourceUnavailable,
)

logger = logging.getLogger("DropJournal.Questions.Sequencer")
tracer = get_tracer(__name__)

FIRST_QUESTION_ID = 1


class CursorStore(ABC):
    """Durable home for the sequencer cursor."""

    @abstractmethod
    def load(self) -> Optional[int]:
        """Stored cursor, or None if nothing has been stored yet."""

    @abstractmethod
    def save(self, cursor: int) -> None:
        """Persist the cursor."""


def validate_cursor(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument("Question index must be an integer", details={"index": repr(value)})
    if value < FIRST_QUESTION_ID:
        raise InvalidArgument("Question index must be greater than 0", details={"index": value})
    return value


class QuestionSequencer:
    """Owns the shared question cursor."""

    def __init__(
        self,
        source: QuestionSource,
        cursor_store: Optional[CursorStore] = None,
        fallback: Callable[[Optional[date]], Question] = fallback_question,
    ) -> None:
        self.source = source
        self.cursor_store = cursor_store
        self.fallback = fallback
        self._lock = asyncio.Lock()
        self._cursor: Optional[int] = None

    @property
    def cursor(self) -> int:
        """Current cursor value, loading it from the store on first access."""
        if self._cursor is None:
            stored = self.cursor_store.load() if self.cursor_store else None
            self._cursor = stored if stored and stored >= FIRST_QUESTION_ID else FIRST_QUESTION_ID
        return self._cursor

    def _write_cursor(self, value: int) -> None:
        # Store first: a failed save leaves the in-memory value untouched
        if self.cursor_store:
            self.cursor_store.save(value)
        self._cursor = value

    async def advance_and_get(self, day: Optional[date] = None) -> Question:
        """
        Return today's question and move the cursor past it.

        Falls back to the local prompt for `day` (default today) when the
        sheet or the cursor store is unreachable; the cursor is not touched
        in that case.

        Raises:
            SourceExhausted: neither the cursor's row nor row 1 exists.
        """
        with tracer.start_as_current_span("questions.advance_and_get") as span:
            async with self._lock:
                try:
                    lookup_id = self.cursor
                    span.set_attribute("question.cursor", lookup_id)

                    question = await self.source.fetch_row(lookup_id)
                    if question is None:
                        logger.info(f"No question with ID {lookup_id}, restarting sequence at {FIRST_QUESTION_ID}")
                        lookup_id = FIRST_QUESTION_ID
                        question = await self.source.fetch_row(lookup_id)

                    if question is None:
                        self._write_cursor(FIRST_QUESTION_ID)
                        raise SourceExhausted(f"Could not find question with ID {FIRST_QUESTION_ID}")

                    self._write_cursor(lookup_id + 1)
                except SourceUnavailable as exc:
                    logger.warning(f"Question source unavailable, serving fallback prompt: {exc.message}")
                    span.set_attribute("question.fallback", True)
                    return self.fallback(day)
                except ServiceUnavailable as exc:
                    logger.error(f"Question cursor store unavailable, serving fallback prompt: {exc.message}")
                    span.set_attribute("question.fallback", True)
                    return self.fallback(day)

                logger.info(f"Serving question {question.id}, cursor now {self._cursor}")
                return question

    async def get_current(self) -> Question:
        """
        Look up the question at the cursor without moving it.

        Raises:
            SourceUnavailable: the sheet could not be read (no fallback here).
            NotFound: the sheet has no row for the cursor.
        """
        lookup_id = self.cursor
        question = await self.source.fetch_row(lookup_id)
        if question is None:
            raise NotFound(f"Could not find question with ID {lookup_id}", resource_type="question", resource_id=lookup_id)
        return question

    async def set_cursor(self, index: int) -> None:
        """Point the cursor at `index`; the next advance_and_get() serves that question."""
        validate_cursor(index)
        async with self._lock:
            self._write_cursor(index)
        logger.info(f"Question cursor set to {index}")

    async def reset_for_testing(self) -> None:
        async with self._lock:
            self._write_cursor(FIRST_QUESTION_ID)
