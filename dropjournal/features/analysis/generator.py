"""
Analysis Generator Adapters

Turn a batch of (question, answer, transcript) items into one narrative.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from dropjournal.features.analysis.prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from dropjournal.features.database.models import ChatMessage, Entry
from dropjournal.services.anthropic_client import ClaudeTextClient
from dropjournal.shared.errors import GenerationFailed

logger = logging.getLogger("DropJournal.Analysis.Generator")


@dataclass
class AnalysisBatchItem:
    """One entry as the generator sees it."""
    question: str
    answer: str
    created_at: datetime
    transcript: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: Entry, messages: Optional[List[ChatMessage]] = None) -> "AnalysisBatchItem":
        return cls(
            question=entry.question_text,
            answer=entry.answer_text,
            created_at=entry.created_at,
            transcript=[
                {"role": "assistant" if m.is_bot else "user", "content": m.content}
                for m in messages or []
            ],
        )


class AnalysisGenerator(ABC):

    @abstractmethod
    async def generate(self, batch: List[AnalysisBatchItem]) -> str:
        """
        Produce the narrative for `batch`.

        Raises:
            GenerationFailed: the provider could not produce text.
        """


class ClaudeAnalysisGenerator(AnalysisGenerator):
    """Narrative analysis written by Claude."""

    def __init__(self, text_client: Optional[ClaudeTextClient] = None) -> None:
        self.text_client = text_client or ClaudeTextClient(max_tokens=1500, temperature=0.7)

    async def generate(self, batch: List[AnalysisBatchItem]) -> str:
        prompt = build_analysis_prompt(batch)
        logger.info(f"Requesting analysis over {len(batch)} entries ({len(prompt)} prompt chars)")

        try:
            return await self.text_client.complete(
                system=ANALYSIS_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except RuntimeError as exc:
            raise GenerationFailed("Analysis generation failed", details={"reason": str(exc)}) from exc
