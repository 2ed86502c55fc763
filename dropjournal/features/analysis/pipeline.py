"""
==============================================================================
UNANALYZED-ENTRY ANALYSIS PIPELINE
==============================================================================

Folds a user's backlog of not-yet-analyzed entries into one Analysis:

    IDLE -> COUNTING -> REJECTED                          (fewer than 7 entries)
                     -> FETCHING -> GENERATING -> FAILED  (provider error/timeout)
                                               -> COMMITTING -> DONE

Guarantees:
- At most one run per user at a time (per-user asyncio.Lock). Runs for
  different users proceed independently.
- Nothing is written before generation succeeds; a FAILED run is safe to
  retry from scratch.
- The commit (analysis record, entry watermarks, last-analysis timestamp)
  is one store transaction. The store refuses it with BacklogConflict if any
  entry of the batch was watermarked in the meantime.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from dropjournal.core.config import settings
from dropjournal.core.tracing import get_tracer
from dropjournal.features.analysis.generator import AnalysisBatchItem, AnalysisGenerator
from dropjournal.features.database.base import AnalysisStore, ChatStore, EntryStore
from dropjournal.features.database.models import Analysis
from dropjournal.shared.constants import ANALYSIS_THRESHOLD
from dropjournal.shared.errors import GenerationFailed

logger = logging.getLogger("DropJournal.Analysis.Pipeline")
tracer = get_tracer(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    COUNTING = "counting"
    REJECTED = "rejected"
    FETCHING = "fetching"
    GENERATING = "generating"
    FAILED = "failed"
    COMMITTING = "committing"
    DONE = "done"


@dataclass
class PipelineOutcome:
    """Result of one run: DONE with an analysis, or REJECTED with the current count."""
    state: PipelineState
    count: int
    threshold: int = ANALYSIS_THRESHOLD
    analysis: Optional[Analysis] = None

    @property
    def rejected(self) -> bool:
        return self.state == PipelineState.REJECTED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisPipeline:
    """Threshold-gated batch analysis over a user's unanalyzed entries."""

    THRESHOLD = ANALYSIS_THRESHOLD

    def __init__(
        self,
        entries: EntryStore,
        chat: ChatStore,
        analyses: AnalysisStore,
        generator: AnalysisGenerator,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.entries = entries
        self.chat = chat
        self.analyses = analyses
        self.generator = generator
        self.timeout = timeout if timeout is not None else settings.ANALYSIS_TIMEOUT_SECONDS
        self.clock = clock
        self._user_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, owner_id: int) -> asyncio.Lock:
        lock = self._user_locks.get(owner_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[owner_id] = lock
        return lock

    def is_running(self, owner_id: int) -> bool:
        lock = self._user_locks.get(owner_id)
        return lock is not None and lock.locked()

    # =========================================================================
    # READS
    # =========================================================================

    def count_unanalyzed(self, owner_id: int) -> int:
        return self.entries.count_unanalyzed(owner_id)

    def list_analyses(self, owner_id: int) -> List[Analysis]:
        return self.analyses.list_by_owner(owner_id)

    def get_analysis(self, owner_id: int, analysis_id: int) -> Analysis:
        return self.analyses.get_by_owner_and_id(owner_id, analysis_id)

    # =========================================================================
    # RUN
    # =========================================================================

    async def run(self, owner_id: int) -> PipelineOutcome:
        """
        Analyze the user's backlog if it has reached the threshold.

        Returns:
            PipelineOutcome in state DONE (with the new analysis) or REJECTED.

        Raises:
            ServiceUnavailable: the store failed while counting, fetching or committing.
            GenerationFailed: the generator failed or exceeded the timeout.
            BacklogConflict: another process consumed part of the batch first.
        """
        with tracer.start_as_current_span("analysis.run") as span:
            span.set_attribute("analysis.owner_id", owner_id)
            async with self._lock_for(owner_id):
                return await self._run_locked(owner_id, span)

    async def _run_locked(self, owner_id: int, span) -> PipelineOutcome:
        self._enter(span, owner_id, PipelineState.COUNTING)
        count = self.entries.count_unanalyzed(owner_id)
        if count < self.THRESHOLD:
            logger.info(f"User {owner_id} has {count}/{self.THRESHOLD} unanalyzed entries, not analyzing")
            return PipelineOutcome(state=PipelineState.REJECTED, count=count)

        self._enter(span, owner_id, PipelineState.FETCHING)
        backlog = self.entries.list_unanalyzed(owner_id)
        if len(backlog) < self.THRESHOLD:
            return PipelineOutcome(state=PipelineState.REJECTED, count=len(backlog))

        entry_ids = [entry.id for entry in backlog]
        transcripts = self.chat.list_for_entries(entry_ids)
        batch = [AnalysisBatchItem.from_entry(entry, transcripts.get(entry.id)) for entry in backlog]
        span.set_attribute("analysis.entry_count", len(batch))

        self._enter(span, owner_id, PipelineState.GENERATING)
        logger.info(f"Generating analysis for user {owner_id} over {len(batch)} entries")
        try:
            content = await self._generate(owner_id, batch)
        except GenerationFailed:
            self._enter(span, owner_id, PipelineState.FAILED)
            raise

        self._enter(span, owner_id, PipelineState.COMMITTING)
        analysis = self.analyses.commit_analysis(owner_id, entry_ids, content, self.clock())

        self._enter(span, owner_id, PipelineState.DONE)
        logger.info(
            f"Analysis {analysis.id} created for user {owner_id}",
            extra={"owner_id": owner_id, "entry_count": analysis.entry_count, "state": PipelineState.DONE.value},
        )
        return PipelineOutcome(state=PipelineState.DONE, count=len(batch), analysis=analysis)

    def _enter(self, span, owner_id: int, state: PipelineState) -> None:
        span.set_attribute("analysis.state", state.value)
        logger.debug(f"Analysis run for user {owner_id}: {state.value}")

    async def _generate(self, owner_id: int, batch: List[AnalysisBatchItem]) -> str:
        try:
            content = await asyncio.wait_for(self.generator.generate(batch), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error(f"Analysis generation for user {owner_id} timed out after {self.timeout}s")
            raise GenerationFailed(
                "Analysis generation timed out",
                details={"timeout_seconds": self.timeout},
            ) from exc
        except GenerationFailed:
            logger.error(f"Analysis generation failed for user {owner_id}")
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.error(f"Analysis generator error for user {owner_id}: {exc}", exc_info=True)
            raise GenerationFailed("Analysis generation failed", details={"reason": str(exc)}) from exc

        if not content or not content.strip():
            raise GenerationFailed("Analysis generation returned no content")
        return content.strip()
