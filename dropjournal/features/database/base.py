"""
Store contracts.

Two backends implement these: Supabase (repositories/) and the in-memory
reference store (memory.py). Store failures surface as ServiceUnavailable,
missing or foreign records as NotFound.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from dropjournal.features.database.models import Analysis, ChatMessage, Entry


class EntryStore(ABC):

    @abstractmethod
    def create(
        self,
        owner_id: int,
        question_text: str,
        answer_text: str,
        question_id: Optional[int] = None,
    ) -> Entry:
        ...

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> List[Entry]:
        """All of the owner's entries, newest first."""

    @abstractmethod
    def get(self, owner_id: int, entry_id: int) -> Entry:
        ...

    @abstractmethod
    def get_by_share_token(self, share_token: str) -> Entry:
        """A public entry by its share token."""

    @abstractmethod
    def set_sharing(self, owner_id: int, entry_id: int, share_public: bool, share_token: Optional[str]) -> Entry:
        ...

    @abstractmethod
    def list_unanalyzed(self, owner_id: int) -> List[Entry]:
        """Entries with no watermark, oldest first."""

    @abstractmethod
    def count_unanalyzed(self, owner_id: int) -> int:
        ...

    @abstractmethod
    def mark_analyzed(self, owner_id: int, entry_ids: Iterable[int], at: datetime) -> int:
        """
        Set the watermark on those of `entry_ids` that have none yet.

        Idempotent; returns how many entries were newly marked.
        """


class ChatStore(ABC):

    @abstractmethod
    def add(self, owner_id: int, entry_id: int, content: str, is_bot: bool = False) -> ChatMessage:
        ...

    @abstractmethod
    def list_for_entry(self, entry_id: int) -> List[ChatMessage]:
        """Transcript of one entry, oldest first."""

    @abstractmethod
    def list_for_entries(self, entry_ids: Iterable[int]) -> Dict[int, List[ChatMessage]]:
        ...


class AnalysisStore(ABC):

    @abstractmethod
    def create(self, owner_id: int, content: str, entry_count: int) -> Analysis:
        ...

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> List[Analysis]:
        """Newest first."""

    @abstractmethod
    def get_by_owner_and_id(self, owner_id: int, analysis_id: int) -> Analysis:
        ...

    @abstractmethod
    def set_last_analyzed_at(self, owner_id: int, at: datetime) -> None:
        ...

    @abstractmethod
    def get_last_analyzed_at(self, owner_id: int) -> Optional[datetime]:
        ...

    @abstractmethod
    def commit_analysis(self, owner_id: int, entry_ids: List[int], content: str, at: datetime) -> Analysis:
        """
        In one transaction: create the analysis with entry_count=len(entry_ids),
        watermark every entry in the batch, and record `at` as the owner's
        last analysis time.

        Raises:
            BacklogConflict: an entry in the batch is missing, foreign or
                already watermarked; nothing is written.
        """
