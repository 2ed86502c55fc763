"""
Companion Chat Service

Each entry carries a short conversation with the companion. Posting a
message stores it, asks Claude for a reply in the companion persona, and
stores the reply. A failed reply never loses the user's message.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from dropjournal.core.config import settings
from dropjournal.features.database.base import ChatStore, EntryStore
from dropjournal.features.database.models import ChatMessage, Entry
from dropjournal.services.anthropic_client import ClaudeTextClient
from dropjournal.shared.constants import COMPANION_NAME

logger = logging.getLogger("DropJournal.Chat")

COMPANION_SYSTEM_PROMPT = f"""You are {COMPANION_NAME}, a friendly and empathetic AI companion. \
Chat with the user like a close friend or trusted therapist, mixing encouraging words, \
affirmations, and questions for deeper probing. Keep your responses concise but meaningful."""


def build_companion_system_prompt(entry: Entry) -> str:
    return (
        f"{COMPANION_SYSTEM_PROMPT}\n\n"
        f"Today's journal question was: \"{entry.question_text}\"\n"
        f"The user answered: \"{entry.answer_text}\""
    )


def to_conversation(messages: List[ChatMessage]) -> List[Dict[str, str]]:
    """Map a transcript onto alternating user/assistant turns, user first."""
    turns: List[Dict[str, str]] = []
    for message in messages:
        role = "assistant" if message.is_bot else "user"
        if not turns and role == "assistant":
            continue
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += f"\n\n{message.content}"
        else:
            turns.append({"role": role, "content": message.content})
    return turns


class CompanionChatService:
    """Conversation with the companion about one entry."""

    def __init__(
        self,
        entries: EntryStore,
        chat: ChatStore,
        text_client: Optional[ClaudeTextClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.entries = entries
        self.chat = chat
        self.text_client = text_client or ClaudeTextClient(max_tokens=300, temperature=0.7)
        self.timeout = timeout if timeout is not None else settings.CHAT_TIMEOUT_SECONDS

    def list_messages(self, owner_id: int, entry_id: int) -> List[ChatMessage]:
        self.entries.get(owner_id, entry_id)
        return self.chat.list_for_entry(entry_id)

    async def post_message(self, owner_id: int, entry_id: int, content: str) -> List[ChatMessage]:
        """
        Store the user's message and, if the companion answers, its reply.

        Returns:
            [user_message] or [user_message, companion_reply]
        """
        entry = self.entries.get(owner_id, entry_id)
        user_message = self.chat.add(owner_id, entry_id, content, is_bot=False)

        conversation = to_conversation(self.chat.list_for_entry(entry_id))
        try:
            reply = await asyncio.wait_for(
                self.text_client.complete(
                    system=build_companion_system_prompt(entry),
                    messages=conversation,
                ),
                timeout=self.timeout,
            )
        except (RuntimeError, asyncio.TimeoutError) as exc:
            logger.error(f"Companion reply failed for entry {entry_id}: {exc}")
            return [user_message]

        bot_message = self.chat.add(owner_id, entry_id, reply, is_bot=True)
        return [user_message, bot_message]
