"""Tests for question row parsing, the fallback prompts and the Sheets adapter."""

import asyncio
from datetime import date

import httpx
import pytest

from dropjournal.features.questions import MalformedQuestionRow, fallback_question, parse_row
from dropjournal.features.questions import source as source_module
from dropjournal.features.questions.source import SheetsQuestionSource
from dropjournal.shared.constants import FALLBACK_QUESTIONS
from dropjournal.shared.errors import SourceUnavailable


class TestParseRow:

    def test_string_id(self):
        question = parse_row(["4", "  What surprised you?  "])
        assert question.id == 4
        assert question.text == "What surprised you?"
        assert not question.is_fallback

    def test_numeric_id(self):
        assert parse_row([7, "Who helped you?"]).id == 7

    @pytest.mark.parametrize("row", [
        [],
        ["1"],
        ["abc", "text"],
        ["0", "text"],
        ["-3", "text"],
        ["2", "   "],
        "1,text",
        None,
    ])
    def test_malformed_rows(self, row):
        with pytest.raises(MalformedQuestionRow):
            parse_row(row)


class TestFallbackQuestion:

    def test_keyed_by_day_of_year(self):
        question = fallback_question(date(2024, 1, 3))
        assert question.is_fallback
        assert question.id == 4
        assert question.text == FALLBACK_QUESTIONS[3]

    def test_cycles_through_prompts(self):
        day = date(2024, 1, len(FALLBACK_QUESTIONS))
        assert fallback_question(day).text == FALLBACK_QUESTIONS[0]

    def test_same_day_of_year_same_prompt(self):
        assert fallback_question(date(2023, 2, 1)).text == fallback_question(date(2024, 2, 1)).text

    def test_same_day_same_prompt(self):
        assert fallback_question(date(2024, 5, 17)) == fallback_question(date(2024, 5, 17))


def _sheet_source(monkeypatch, handler) -> SheetsQuestionSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    async def _get_client():
        return client

    monkeypatch.setattr(source_module.http_client_manager, "get_client", _get_client)
    return SheetsQuestionSource(spreadsheet_id="sheet-123", value_range="A2:B", api_key="test-key")


class TestSheetsQuestionSource:

    def test_fetch_row_by_id(self, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"values": [["1", "First?"], ["2", "Second?"]]})

        source = _sheet_source(monkeypatch, handler)
        question = asyncio.run(source.fetch_row(2))

        assert question.text == "Second?"
        assert "sheet-123/values/A2:B" in seen["url"]
        assert "key=test-key" in seen["url"]

    def test_missing_row_is_none(self, monkeypatch):
        source = _sheet_source(monkeypatch, lambda r: httpx.Response(200, json={"values": [["1", "First?"]]}))
        assert asyncio.run(source.fetch_row(5)) is None

    def test_empty_sheet_has_no_values_key(self, monkeypatch):
        source = _sheet_source(monkeypatch, lambda r: httpx.Response(200, json={"range": "A2:B"}))
        assert asyncio.run(source.fetch_all()) == []

    def test_fetch_all_skips_malformed_rows(self, monkeypatch):
        values = [["1", "First?"], ["x", "Broken"], ["3", "Third?"]]
        source = _sheet_source(monkeypatch, lambda r: httpx.Response(200, json={"values": values}))
        assert [q.id for q in asyncio.run(source.fetch_all())] == [1, 3]

    def test_malformed_matching_row_is_unavailable(self, monkeypatch):
        source = _sheet_source(monkeypatch, lambda r: httpx.Response(200, json={"values": [["1", ""]]}))
        with pytest.raises(SourceUnavailable):
            asyncio.run(source.fetch_row(1))

    def test_http_error_is_unavailable(self, monkeypatch):
        source = _sheet_source(monkeypatch, lambda r: httpx.Response(403, json={"error": "forbidden"}))
        with pytest.raises(SourceUnavailable):
            asyncio.run(source.fetch_row(1))

    def test_invalid_json_is_unavailable(self, monkeypatch):
        source = _sheet_source(monkeypatch, lambda r: httpx.Response(200, content=b"<html>"))
        with pytest.raises(SourceUnavailable):
            asyncio.run(source.fetch_row(1))

    def test_unconfigured_sheet_is_unavailable(self):
        source = SheetsQuestionSource(spreadsheet_id="", api_key="k")
        source.spreadsheet_id = None
        with pytest.raises(SourceUnavailable):
            asyncio.run(source.fetch_row(1))
