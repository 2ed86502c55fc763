"""
Shared fixtures for the journal service tests.

External providers (question sheet, Claude, Whisper) are replaced by small
fakes implementing the same adapter contracts; storage uses the in-memory
backend.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from dropjournal.api import dependencies
from dropjournal.features.analysis import AnalysisBatchItem, AnalysisGenerator, AnalysisPipeline
from dropjournal.features.chat import CompanionChatService
from dropjournal.features.database import DatabaseClient
from dropjournal.features.questions import Question, QuestionSequencer, QuestionSource
from dropjournal.shared.errors import GenerationFailed, SourceUnavailable

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeQuestionSource(QuestionSource):
    """Question sheet stand-in. Set `fail` to simulate an outage."""

    def __init__(self, rows: Optional[Dict[int, str]] = None, fail: bool = False):
        self.rows = dict(rows or {})
        self.fail = fail
        self.lookups: List[int] = []

    async def fetch_row(self, question_id: int) -> Optional[Question]:
        self.lookups.append(question_id)
        if self.fail:
            raise SourceUnavailable("sheet down")
        text = self.rows.get(question_id)
        return Question(id=question_id, text=text) if text else None

    async def fetch_all(self) -> List[Question]:
        if self.fail:
            raise SourceUnavailable("sheet down")
        return [Question(id=i, text=t) for i, t in sorted(self.rows.items())]


class FakeGenerator(AnalysisGenerator):
    """Records every batch; fails or stalls on demand."""

    def __init__(self, content: str = "You wrote a lot about growth.", fail: bool = False, delay: float = 0.0):
        self.content = content
        self.fail = fail
        self.delay = delay
        self.batches: List[List[AnalysisBatchItem]] = []

    async def generate(self, batch: List[AnalysisBatchItem]) -> str:
        self.batches.append(batch)
        await asyncio.sleep(self.delay)
        if self.fail:
            raise GenerationFailed("provider error")
        return self.content


class FakeTextClient:
    """ClaudeTextClient stand-in for the companion."""

    def __init__(self, reply: str = "That sounds meaningful. What made it stand out?", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.calls: List[dict] = []

    async def complete(self, system: str, messages: List[Dict[str, str]]) -> str:
        self.calls.append({"system": system, "messages": messages})
        if self.fail:
            raise RuntimeError("All Claude model attempts failed")
        return self.reply


def add_entries(db: DatabaseClient, owner_id: int, count: int) -> list:
    return [
        db.entries.create(owner_id, f"Question {i}", f"Answer {i}", question_id=i + 1)
        for i in range(count)
    ]


@pytest.fixture
def db() -> DatabaseClient:
    return DatabaseClient.in_memory()


@pytest.fixture
def question_source() -> FakeQuestionSource:
    return FakeQuestionSource({1: "What made you smile?", 2: "What did you learn?", 3: "What are you grateful for?"})


@pytest.fixture
def sequencer(question_source) -> QuestionSequencer:
    return QuestionSequencer(question_source)


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def pipeline(db, generator) -> AnalysisPipeline:
    return AnalysisPipeline(
        db.entries, db.chat, db.analyses, generator,
        timeout=5.0,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def chat_service(db, text_client) -> CompanionChatService:
    return CompanionChatService(db.entries, db.chat, text_client=text_client, timeout=5.0)


@pytest.fixture
def api_client(db, sequencer, pipeline, chat_service):
    """TestClient wired to the in-memory stores and fake providers."""
    from dropjournal.main import app

    app.dependency_overrides[dependencies.get_database] = lambda: db
    app.dependency_overrides[dependencies.get_sequencer] = lambda: sequencer
    app.dependency_overrides[dependencies.get_pipeline] = lambda: pipeline
    app.dependency_overrides[dependencies.get_chat_service] = lambda: chat_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
