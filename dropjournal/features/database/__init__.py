"""
Database Feature Module - journal data access.

Usage:
    from dropjournal.features.database import get_database_client

    db = get_database_client()
    count = db.entries.count_unanalyzed(owner_id)
"""

from dropjournal.features.database.client import DatabaseClient, get_database_client
from dropjournal.features.database.models import Analysis, ChatMessage, Entry

__all__ = [
    "DatabaseClient",
    "get_database_client",
    "Analysis",
    "ChatMessage",
    "Entry",
]
