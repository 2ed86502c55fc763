"""
Question Source Adapters

The daily questions live in a Google Sheet: question IDs in column A,
question text in column B, data starting at row 2. Adapters expose two
reads and report transport, auth and response-shape problems as
SourceUnavailable, distinct from a row simply not existing (None).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from dropjournal.core.config import settings
from dropjournal.features.questions.models import (
    MalformedQuestionRow,
    Question,
    parse_row,
    parse_row_id,
)
from dropjournal.services.http_client import http_client_manager
from dropjournal.shared.errors import SourceUnavailable

logger = logging.getLogger("DropJournal.Questions.Source")

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class QuestionSource(ABC):
    """Read-only access to the numbered question list."""

    @abstractmethod
    async def fetch_row(self, question_id: int) -> Optional[Question]:
        """
        Look up one question.

        Returns:
            The Question, or None when no row carries this ID.

        Raises:
            SourceUnavailable: on any transport, auth or response-shape failure.
        """

    @abstractmethod
    async def fetch_all(self) -> List[Question]:
        """All well-formed questions, in sheet order."""


class SheetsQuestionSource(QuestionSource):
    """Questions from a Google Sheet through the Sheets v4 REST API."""

    def __init__(
        self,
        spreadsheet_id: Optional[str] = None,
        value_range: Optional[str] = None,
        client_email: Optional[str] = None,
        private_key: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id or settings.GOOGLE_SHEETS_ID
        self.value_range = value_range or settings.GOOGLE_SHEETS_RANGE
        self.client_email = client_email or settings.GOOGLE_SHEETS_CLIENT_EMAIL
        self.private_key = private_key or settings.GOOGLE_SHEETS_PRIVATE_KEY
        self.api_key = api_key or settings.GOOGLE_SHEETS_API_KEY
        self.timeout = timeout
        self._credentials: Optional[service_account.Credentials] = None

    async def fetch_row(self, question_id: int) -> Optional[Question]:
        for row in await self._get_values():
            if isinstance(row, (list, tuple)) and row and parse_row_id(row[0]) == question_id:
                try:
                    return parse_row(row)
                except MalformedQuestionRow as exc:
                    raise SourceUnavailable(f"Malformed question row: {exc}") from exc
        return None

    async def fetch_all(self) -> List[Question]:
        questions = []
        for row in await self._get_values():
            try:
                questions.append(parse_row(row))
            except MalformedQuestionRow as exc:
                logger.warning(f"Skipping sheet row: {exc}")
        return questions

    # -------------------------------------------------------------------------

    async def _get_values(self) -> List[Any]:
        if not self.spreadsheet_id:
            raise SourceUnavailable("GOOGLE_SHEETS_ID is not configured")

        url = f"{SHEETS_API_BASE}/{self.spreadsheet_id}/values/{self.value_range}"
        params = {}
        headers = {}
        if self.api_key:
            params["key"] = self.api_key
        else:
            headers["Authorization"] = f"Bearer {await self._access_token()}"

        client = await http_client_manager.get_client()
        try:
            response = await client.get(url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailable(
                f"Question sheet returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Question sheet unreachable: {exc}") from exc
        except ValueError as exc:
            raise SourceUnavailable("Question sheet returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise SourceUnavailable("Question sheet response is not an object")

        # The API omits "values" entirely for an empty range
        values = payload.get("values", [])
        if not isinstance(values, list):
            raise SourceUnavailable("Question sheet 'values' is not a list")
        return values

    async def _access_token(self) -> str:
        if not self.client_email or not self.private_key:
            raise SourceUnavailable("Google Sheets credentials are not configured")

        try:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_info(
                    {
                        "type": "service_account",
                        "client_email": self.client_email,
                        "private_key": self.private_key,
                        "token_uri": GOOGLE_TOKEN_URI,
                    },
                    scopes=SHEETS_SCOPES,
                )
            if not self._credentials.valid:
                # google-auth refreshes synchronously
                await asyncio.to_thread(self._credentials.refresh, GoogleAuthRequest())
        except (GoogleAuthError, ValueError) as exc:
            raise SourceUnavailable(f"Google Sheets authentication failed: {exc}") from exc

        return self._credentials.token
