"""Companion chat feature - per-entry conversations with the journaling companion."""

from dropjournal.features.chat.service import CompanionChatService, to_conversation

__all__ = [
    "CompanionChatService",
    "to_conversation",
]
