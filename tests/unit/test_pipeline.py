"""Tests for the threshold-gated analysis pipeline."""

import asyncio

import pytest

from conftest import FIXED_NOW, FakeGenerator, add_entries
from dropjournal.features.analysis import AnalysisPipeline, PipelineState
from dropjournal.shared.errors import BacklogConflict, GenerationFailed, NotFound, ServiceUnavailable

OWNER = 1
OTHER_OWNER = 2


def make_pipeline(db, generator, timeout=5.0) -> AnalysisPipeline:
    return AnalysisPipeline(db.entries, db.chat, db.analyses, generator, timeout=timeout, clock=lambda: FIXED_NOW)


class TestThreshold:

    def test_below_threshold_is_rejected_without_side_effects(self, db, pipeline, generator):
        add_entries(db, OWNER, 6)

        outcome = asyncio.run(pipeline.run(OWNER))

        assert outcome.rejected
        assert outcome.state == PipelineState.REJECTED
        assert outcome.count == 6
        assert outcome.threshold == 7
        assert generator.batches == []
        assert db.analyses.list_by_owner(OWNER) == []
        assert pipeline.count_unanalyzed(OWNER) == 6

    def test_zero_entries_is_rejected(self, pipeline):
        outcome = asyncio.run(pipeline.run(OWNER))
        assert outcome.rejected
        assert outcome.count == 0

    def test_other_users_entries_do_not_count(self, db, pipeline):
        add_entries(db, OTHER_OWNER, 10)
        add_entries(db, OWNER, 3)
        assert asyncio.run(pipeline.run(OWNER)).count == 3


class TestSuccessfulRun:

    def test_exactly_threshold_entries(self, db, pipeline, generator):
        add_entries(db, OWNER, 7)

        outcome = asyncio.run(pipeline.run(OWNER))

        assert outcome.state == PipelineState.DONE
        assert outcome.analysis.entry_count == 7
        assert outcome.analysis.content == generator.content
        assert pipeline.count_unanalyzed(OWNER) == 0
        assert all(e.analyzed_at == FIXED_NOW for e in db.entries.list_by_owner(OWNER))
        assert db.analyses.get_last_analyzed_at(OWNER) == FIXED_NOW

    def test_second_run_is_rejected(self, db, pipeline):
        add_entries(db, OWNER, 7)
        asyncio.run(pipeline.run(OWNER))

        outcome = asyncio.run(pipeline.run(OWNER))

        assert outcome.rejected
        assert outcome.count == 0
        assert len(pipeline.list_analyses(OWNER)) == 1

    def test_whole_backlog_is_analyzed(self, db, pipeline, generator):
        add_entries(db, OWNER, 12)
        outcome = asyncio.run(pipeline.run(OWNER))
        assert outcome.analysis.entry_count == 12
        assert len(generator.batches[0]) == 12

    def test_batch_is_oldest_first_with_transcripts(self, db, pipeline, generator):
        entries = add_entries(db, OWNER, 7)
        db.chat.add(OWNER, entries[0].id, "I felt proud", is_bot=False)
        db.chat.add(OWNER, entries[0].id, "Tell me more!", is_bot=True)

        asyncio.run(pipeline.run(OWNER))

        batch = generator.batches[0]
        assert [item.question for item in batch] == [e.question_text for e in entries]
        assert batch[0].transcript == [
            {"role": "user", "content": "I felt proud"},
            {"role": "assistant", "content": "Tell me more!"},
        ]
        assert batch[1].transcript == []

    def test_get_analysis_is_scoped_to_owner(self, db, pipeline):
        add_entries(db, OWNER, 7)
        analysis = asyncio.run(pipeline.run(OWNER)).analysis

        assert pipeline.get_analysis(OWNER, analysis.id).id == analysis.id
        with pytest.raises(NotFound):
            pipeline.get_analysis(OTHER_OWNER, analysis.id)


class TestFailures:

    def test_generation_failure_writes_nothing(self, db):
        add_entries(db, OWNER, 10)
        pipeline = make_pipeline(db, FakeGenerator(fail=True))

        with pytest.raises(GenerationFailed):
            asyncio.run(pipeline.run(OWNER))

        assert pipeline.count_unanalyzed(OWNER) == 10
        assert pipeline.list_analyses(OWNER) == []
        assert db.analyses.get_last_analyzed_at(OWNER) is None

    def test_retry_after_failure_uses_full_backlog(self, db):
        add_entries(db, OWNER, 10)
        generator = FakeGenerator(fail=True)
        pipeline = make_pipeline(db, generator)
        with pytest.raises(GenerationFailed):
            asyncio.run(pipeline.run(OWNER))

        generator.fail = False
        outcome = asyncio.run(pipeline.run(OWNER))

        assert outcome.analysis.entry_count == 10

    def test_timeout_is_generation_failure(self, db):
        add_entries(db, OWNER, 7)
        pipeline = make_pipeline(db, FakeGenerator(delay=1.0), timeout=0.01)

        with pytest.raises(GenerationFailed):
            asyncio.run(pipeline.run(OWNER))
        assert pipeline.count_unanalyzed(OWNER) == 7

    def test_blank_content_is_generation_failure(self, db):
        add_entries(db, OWNER, 7)
        pipeline = make_pipeline(db, FakeGenerator(content="   "))

        with pytest.raises(GenerationFailed):
            asyncio.run(pipeline.run(OWNER))
        assert pipeline.count_unanalyzed(OWNER) == 7

    def test_unexpected_generator_error_is_wrapped(self, db):
        class BrokenGenerator(FakeGenerator):
            async def generate(self, batch):
                raise KeyError("content")

        add_entries(db, OWNER, 7)
        with pytest.raises(GenerationFailed):
            asyncio.run(make_pipeline(db, BrokenGenerator()).run(OWNER))


class TestConcurrency:

    def test_concurrent_runs_produce_one_analysis(self, db):
        add_entries(db, OWNER, 7)
        generator = FakeGenerator(delay=0.05)
        pipeline = make_pipeline(db, generator)

        async def _race():
            return await asyncio.gather(pipeline.run(OWNER), pipeline.run(OWNER))

        outcomes = asyncio.run(_race())

        states = sorted(o.state.value for o in outcomes)
        assert states == [PipelineState.DONE.value, PipelineState.REJECTED.value]
        assert len(pipeline.list_analyses(OWNER)) == 1
        assert len(generator.batches) == 1
        done = next(o for o in outcomes if o.state == PipelineState.DONE)
        assert done.analysis.entry_count == 7
        assert pipeline.count_unanalyzed(OWNER) == 0

    def test_different_users_run_independently(self, db):
        add_entries(db, OWNER, 7)
        add_entries(db, OTHER_OWNER, 7)
        pipeline = make_pipeline(db, FakeGenerator(delay=0.05))

        async def _both():
            return await asyncio.gather(pipeline.run(OWNER), pipeline.run(OTHER_OWNER))

        outcomes = asyncio.run(_both())

        assert all(o.state == PipelineState.DONE for o in outcomes)
        assert {o.analysis.owner_id for o in outcomes} == {OWNER, OTHER_OWNER}


class FlakyEntryStore:
    """Wraps an entry store and fails the named read with a store outage."""

    def __init__(self, inner, fail_on):
        self.inner = inner
        self.fail_on = fail_on

    def __getattr__(self, name):
        if name == self.fail_on:
            def _down(*args, **kwargs):
                raise ServiceUnavailable("Could not load entries")
            return _down
        return getattr(self.inner, name)


class TestStoreFailures:

    @pytest.mark.parametrize("fail_on", ["count_unanalyzed", "list_unanalyzed"])
    def test_store_outage_writes_nothing(self, db, fail_on):
        add_entries(db, OWNER, 7)
        generator = FakeGenerator()
        pipeline = AnalysisPipeline(
            FlakyEntryStore(db.entries, fail_on), db.chat, db.analyses, generator,
            timeout=5.0, clock=lambda: FIXED_NOW,
        )

        with pytest.raises(ServiceUnavailable):
            asyncio.run(pipeline.run(OWNER))

        assert generator.batches == []
        assert db.analyses.list_by_owner(OWNER) == []
        assert db.analyses.get_last_analyzed_at(OWNER) is None
        assert db.entries.count_unanalyzed(OWNER) == 7

    def test_batch_consumed_elsewhere_is_conflict(self, db):
        entries = add_entries(db, OWNER, 7)

        class RacingGenerator(FakeGenerator):
            async def generate(self, batch):
                # Another worker watermarks one entry while we generate
                db.entries.mark_analyzed(OWNER, [entries[0].id], FIXED_NOW)
                return await super().generate(batch)

        pipeline = make_pipeline(db, RacingGenerator())

        with pytest.raises(BacklogConflict):
            asyncio.run(pipeline.run(OWNER))

        assert pipeline.list_analyses(OWNER) == []
        assert db.analyses.get_last_analyzed_at(OWNER) is None
        assert pipeline.count_unanalyzed(OWNER) == 6
