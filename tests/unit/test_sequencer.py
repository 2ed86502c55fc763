"""Tests for the shared question sequencer."""

import asyncio
from datetime import date

import pytest

from conftest import FakeQuestionSource
from dropjournal.features.database.memory import MemoryCursorStore, MemoryDatabase
from dropjournal.features.questions import QuestionSequencer
from dropjournal.features.questions.sequencer import CursorStore
from dropjournal.shared.constants import FALLBACK_QUESTIONS
from dropjournal.shared.errors import (
    InvalidArgument,
    NotFound,
    ServiceUnavailable,
    SourceExhausted,
    SourceUnavailable,
)


def serve(sequencer, times, day=None):
    async def _serve():
        return [await sequencer.advance_and_get(day) for _ in range(times)]
    return asyncio.run(_serve())


class TestAdvanceAndGet:

    def test_serves_questions_in_order(self, sequencer):
        """Consecutive calls walk the sheet one ID at a time."""
        questions = serve(sequencer, 3)
        assert [q.id for q in questions] == [1, 2, 3]
        assert sequencer.cursor == 4

    def test_wraps_to_first_question_past_the_end(self, sequencer):
        """A cursor past the last row restarts at ID 1 and moves on to 2."""
        questions = serve(sequencer, 5)
        assert [q.id for q in questions] == [1, 2, 3, 1, 2]
        assert sequencer.cursor == 3

    def test_outage_serves_fallback_and_keeps_cursor(self, question_source, sequencer):
        serve(sequencer, 1)
        question_source.fail = True

        question = serve(sequencer, 1, day=date(2024, 1, 4))[0]

        assert question.is_fallback
        assert question.text == FALLBACK_QUESTIONS[4]
        assert sequencer.cursor == 2

    def test_resumes_sequence_after_outage(self, question_source, sequencer):
        serve(sequencer, 1)
        question_source.fail = True
        serve(sequencer, 2)
        question_source.fail = False

        assert serve(sequencer, 1)[0].id == 2

    def test_exhausted_when_first_question_missing(self):
        sequencer = QuestionSequencer(FakeQuestionSource({}))
        asyncio.run(sequencer.set_cursor(5))

        with pytest.raises(SourceExhausted):
            serve(sequencer, 1)
        assert sequencer.cursor == 1

    def test_concurrent_calls_serve_distinct_questions(self, sequencer):
        async def _race():
            return await asyncio.gather(*(sequencer.advance_and_get() for _ in range(3)))

        questions = asyncio.run(_race())
        assert sorted(q.id for q in questions) == [1, 2, 3]
        assert sequencer.cursor == 4


class TestGetCurrent:

    def test_does_not_move_cursor(self, sequencer):
        serve(sequencer, 1)
        first = asyncio.run(sequencer.get_current())
        second = asyncio.run(sequencer.get_current())
        assert first.id == second.id == 2
        assert sequencer.cursor == 2

    def test_missing_row_is_not_found(self, sequencer):
        asyncio.run(sequencer.set_cursor(9))
        with pytest.raises(NotFound):
            asyncio.run(sequencer.get_current())
        assert sequencer.cursor == 9

    def test_outage_is_surfaced(self, question_source, sequencer):
        question_source.fail = True
        with pytest.raises(SourceUnavailable):
            asyncio.run(sequencer.get_current())


class TestSetCursor:

    def test_next_advance_serves_the_chosen_question(self, sequencer):
        asyncio.run(sequencer.set_cursor(3))
        assert serve(sequencer, 1)[0].id == 3

    @pytest.mark.parametrize("value", [0, -1, True, "2", 2.0, None])
    def test_rejects_invalid_values(self, sequencer, value):
        serve(sequencer, 1)
        with pytest.raises(InvalidArgument):
            asyncio.run(sequencer.set_cursor(value))
        assert sequencer.cursor == 2

    def test_reset_for_testing(self, sequencer):
        serve(sequencer, 2)
        asyncio.run(sequencer.reset_for_testing())
        assert sequencer.cursor == 1


class TestPersistedCursor:

    def test_cursor_survives_a_new_sequencer(self, question_source):
        db = MemoryDatabase()
        first = QuestionSequencer(question_source, cursor_store=MemoryCursorStore(db))
        serve(first, 2)

        second = QuestionSequencer(question_source, cursor_store=MemoryCursorStore(db))
        assert second.cursor == 3
        assert serve(second, 1)[0].id == 3

    def test_fallback_does_not_persist(self, question_source):
        db = MemoryDatabase()
        question_source.fail = True
        sequencer = QuestionSequencer(question_source, cursor_store=MemoryCursorStore(db))
        serve(sequencer, 1)
        assert db.question_cursor is None

class BrokenCursorStore(CursorStore):
    """Cursor store whose backend is down for loads, saves or both."""

    def __init__(self, stored=None, fail_load=True, fail_save=True):
        self.stored = stored
        self.fail_load = fail_load
        self.fail_save = fail_save

    def load(self):
        if self.fail_load:
            raise ServiceUnavailable("Could not load question cursor")
        return self.stored

    def save(self, cursor):
        if self.fail_save:
            raise ServiceUnavailable("Could not save question cursor")
        self.stored = cursor


class TestCursorStoreOutage:

    def test_load_failure_serves_fallback(self, question_source):
        sequencer = QuestionSequencer(question_source, cursor_store=BrokenCursorStore())

        question = serve(sequencer, 1, day=date(2024, 1, 4))[0]

        assert question.is_fallback
        assert question.text == FALLBACK_QUESTIONS[4]
        assert question_source.lookups == []

    def test_save_failure_serves_fallback_and_keeps_cursor(self, question_source):
        store = BrokenCursorStore(stored=2, fail_load=False)
        sequencer = QuestionSequencer(question_source, cursor_store=store)

        question = serve(sequencer, 1, day=date(2024, 1, 4))[0]

        assert question.is_fallback
        assert sequencer.cursor == 2
        assert store.stored == 2

    def test_sequence_resumes_once_store_recovers(self, question_source):
        store = BrokenCursorStore(stored=2, fail_load=False)
        sequencer = QuestionSequencer(question_source, cursor_store=store)
        serve(sequencer, 1)

        store.fail_save = False

        assert serve(sequencer, 1)[0].id == 2
        assert store.stored == 3
