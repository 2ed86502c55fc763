"""
Analyses Repository - Analysis records and per-user analysis state.

The commit of a finished analysis goes through the `commit_analysis`
Postgres function (see migrations/), which creates the record, watermarks
the batch and stamps user_analysis_state in a single transaction.
"""

import logging
from datetime import datetime
from typing import List, Optional

from dropjournal.features.database.base import AnalysisStore
from dropjournal.features.database.models import Analysis, parse_timestamp
from dropjournal.shared.errors import BacklogConflict, NotFound, ServiceUnavailable

logger = logging.getLogger("DropJournal.Database.Analyses")

# SQLSTATE raised by commit_analysis when the batch is stale; PostgREST maps PT409 to HTTP 409
BACKLOG_CONFLICT_SQLSTATE = "PT409"


class AnalysesRepository(AnalysisStore):
    """Repository for analysis operations."""

    TABLE = "analyses"
    STATE_TABLE = "user_analysis_state"

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def create(self, owner_id: int, content: str, entry_count: int) -> Analysis:
        try:
            result = self.client.table(self.TABLE).insert({
                "user_id": owner_id,
                "content": content,
                "entry_count": entry_count,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating analysis for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not save analysis") from e
        return Analysis.from_row(result.data[0])

    def list_by_owner(self, owner_id: int) -> List[Analysis]:
        try:
            result = self.client.table(self.TABLE).select("*").eq(
                "user_id", owner_id
            ).order("created_at", desc=True).order("id", desc=True).execute()
        except Exception as e:
            logger.error(f"Error listing analyses for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not load analyses") from e
        return [Analysis.from_row(row) for row in result.data or []]

    def get_by_owner_and_id(self, owner_id: int, analysis_id: int) -> Analysis:
        try:
            result = self.client.table(self.TABLE).select("*").eq(
                "id", analysis_id
            ).eq("user_id", owner_id).execute()
        except Exception as e:
            logger.error(f"Error fetching analysis {analysis_id}: {e}")
            raise ServiceUnavailable("Could not load analysis") from e

        if not result.data:
            raise NotFound("Analysis not found", resource_type="analysis", resource_id=analysis_id)
        return Analysis.from_row(result.data[0])

    def set_last_analyzed_at(self, owner_id: int, at: datetime) -> None:
        try:
            self.client.table(self.STATE_TABLE).upsert({
                "user_id": owner_id,
                "last_analyzed_at": at.isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Error updating analysis state for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not update analysis state") from e

    def get_last_analyzed_at(self, owner_id: int) -> Optional[datetime]:
        try:
            result = self.client.table(self.STATE_TABLE).select("last_analyzed_at").eq(
                "user_id", owner_id
            ).execute()
        except Exception as e:
            logger.error(f"Error reading analysis state for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not load analysis state") from e

        if not result.data:
            return None
        return parse_timestamp(result.data[0].get("last_analyzed_at"))

    def commit_analysis(self, owner_id: int, entry_ids: List[int], content: str, at: datetime) -> Analysis:
        try:
            result = self.client.rpc("commit_analysis", {
                "p_user_id": owner_id,
                "p_entry_ids": list(entry_ids),
                "p_content": content,
                "p_analyzed_at": at.isoformat(),
            }).execute()
        except Exception as e:
            if getattr(e, "code", None) == BACKLOG_CONFLICT_SQLSTATE:
                logger.warning(f"Analysis commit refused for user {owner_id}: batch already analyzed")
                raise BacklogConflict("Entries in this batch were already analyzed") from e
            logger.error(f"Error committing analysis for user {owner_id}: {e}")
            raise ServiceUnavailable("Could not save analysis") from e

        # A function returning a single row comes back as an object, not a list
        row = result.data[0] if isinstance(result.data, list) else result.data
        analysis = Analysis.from_row(row)
        logger.info(f"Committed analysis {analysis.id} over {len(entry_ids)} entries for user {owner_id}")
        return analysis
