"""
Question API Routes

- GET  /question          today's prompt; advances the shared cursor
- GET  /question/current  the prompt at the cursor, without advancing
- POST /question/reset    point the cursor at a given question ID
                          (disabled unless QUESTION_RESET_ENABLED is set)
"""

import logging

from fastapi import APIRouter, Depends

from dropjournal.api.dependencies import get_current_user_id, get_sequencer
from dropjournal.api.models import QuestionResponse, ResetCursorRequest, ResetCursorResponse
from dropjournal.core.config import settings
from dropjournal.features.questions import QuestionSequencer
from dropjournal.shared.errors import Forbidden

router = APIRouter(tags=["Questions"])
logger = logging.getLogger("DropJournal.API.Questions")


@router.get("/question", response_model=QuestionResponse)
async def get_daily_question(
    user_id: int = Depends(get_current_user_id),
    sequencer: QuestionSequencer = Depends(get_sequencer),
) -> QuestionResponse:
    """Serve the next question in the sequence (or the day's fallback prompt)."""
    question = await sequencer.advance_and_get()
    logger.info(f"User {user_id} served question {question.id} ({question.source})")
    return QuestionResponse.from_question(question)


@router.get("/question/current", response_model=QuestionResponse)
async def get_current_question(
    user_id: int = Depends(get_current_user_id),
    sequencer: QuestionSequencer = Depends(get_sequencer),
) -> QuestionResponse:
    question = await sequencer.get_current()
    return QuestionResponse.from_question(question)


@router.post("/question/reset", response_model=ResetCursorResponse)
async def reset_question_cursor(
    request: ResetCursorRequest,
    user_id: int = Depends(get_current_user_id),
    sequencer: QuestionSequencer = Depends(get_sequencer),
) -> ResetCursorResponse:
    """
    Administrative override of the shared cursor.

    The cursor is shared by every user, so the route is off unless
    QUESTION_RESET_ENABLED is set. Deployments that enable it must restrict
    it to operators at the auth layer in front of the service.
    """
    if not settings.QUESTION_RESET_ENABLED:
        logger.warning(f"User {user_id} tried to reset the question cursor while reset is disabled")
        raise Forbidden("Question cursor reset is disabled")
    await sequencer.set_cursor(request.index)
    logger.info(f"User {user_id} reset question cursor to {request.index}")
    return ResetCursorResponse(status="ok", index=request.index)
