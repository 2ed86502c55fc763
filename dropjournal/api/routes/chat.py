import logging

from fastapi import APIRouter, Depends

from dropjournal.api.dependencies import get_chat_service, get_current_user_id
from dropjournal.api.models import ChatExchangeResponse, ChatMessageRequest, ChatMessageResponse
from dropjournal.features.chat import CompanionChatService

router = APIRouter(tags=["Chat"])
logger = logging.getLogger("DropJournal.API.Chat")


@router.get("/entries/{entry_id}/chat", response_model=ChatExchangeResponse)
async def get_entry_chat(
    entry_id: int,
    user_id: int = Depends(get_current_user_id),
    chat: CompanionChatService = Depends(get_chat_service),
) -> ChatExchangeResponse:
    messages = chat.list_messages(user_id, entry_id)
    return ChatExchangeResponse(messages=[ChatMessageResponse.from_message(m) for m in messages])


@router.post("/entries/{entry_id}/chat", response_model=ChatExchangeResponse)
async def post_entry_chat(
    entry_id: int,
    request: ChatMessageRequest,
    user_id: int = Depends(get_current_user_id),
    chat: CompanionChatService = Depends(get_chat_service),
) -> ChatExchangeResponse:
    """Post a message; the response holds it plus the companion's reply when one was produced."""
    messages = await chat.post_message(user_id, entry_id, request.content)
    return ChatExchangeResponse(messages=[ChatMessageResponse.from_message(m) for m in messages])
