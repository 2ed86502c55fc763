"""
Entry API Routes

Journal entries are private to their owner unless shared. Sharing mints an
unguessable token; the public read by token needs no caller identity.
"""

import logging
import secrets
from typing import List

from fastapi import APIRouter, Depends

from dropjournal.api.dependencies import get_current_user_id, get_database
from dropjournal.api.models import (
    CreateEntryRequest,
    EntryResponse,
    ShareEntryRequest,
    SharedEntryResponse,
)
from dropjournal.features.database import DatabaseClient

router = APIRouter(tags=["Entries"])
logger = logging.getLogger("DropJournal.API.Entries")


def new_share_token() -> str:
    return secrets.token_urlsafe(16)


@router.get("/entries", response_model=List[EntryResponse])
async def list_entries(
    user_id: int = Depends(get_current_user_id),
    db: DatabaseClient = Depends(get_database),
) -> List[EntryResponse]:
    return [EntryResponse.from_entry(entry) for entry in db.entries.list_by_owner(user_id)]


@router.post("/entries", response_model=EntryResponse, status_code=201)
async def create_entry(
    request: CreateEntryRequest,
    user_id: int = Depends(get_current_user_id),
    db: DatabaseClient = Depends(get_database),
) -> EntryResponse:
    entry = db.entries.create(
        user_id,
        question_text=request.question,
        answer_text=request.answer,
        question_id=request.sheet_question_id,
    )
    logger.info(f"Entry {entry.id} created for user {user_id}")
    return EntryResponse.from_entry(entry)


@router.patch("/entries/{entry_id}/share", response_model=EntryResponse)
async def set_entry_sharing(
    entry_id: int,
    request: ShareEntryRequest,
    user_id: int = Depends(get_current_user_id),
    db: DatabaseClient = Depends(get_database),
) -> EntryResponse:
    """Make an entry public (minting a fresh token) or private (dropping it)."""
    token = new_share_token() if request.is_public else None
    entry = db.entries.set_sharing(user_id, entry_id, request.is_public, token)
    return EntryResponse.from_entry(entry)


@router.get("/shared/{share_token}", response_model=SharedEntryResponse)
async def get_shared_entry(
    share_token: str,
    db: DatabaseClient = Depends(get_database),
) -> SharedEntryResponse:
    entry = db.entries.get_by_share_token(share_token)
    return SharedEntryResponse(
        question=entry.question_text,
        answer=entry.answer_text,
        created_at=entry.created_at,
    )
