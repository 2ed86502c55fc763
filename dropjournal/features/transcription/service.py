"""Speech-to-text for voice answers."""

import base64
import binascii
import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from dropjournal.core.config import settings
from dropjournal.services.openai_client import get_openai_client
from dropjournal.shared.errors import InvalidArgument, TranscriptionFailed

logger = logging.getLogger("DropJournal.Transcription")

# Browsers record MediaRecorder audio as webm/opus
AUDIO_FILENAME = "answer.webm"
AUDIO_CONTENT_TYPE = "audio/webm"


def decode_audio(audio_b64: str) -> bytes:
    try:
        audio = base64.b64decode(audio_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidArgument("Audio must be base64-encoded") from exc
    if not audio:
        raise InvalidArgument("Audio is empty")
    return audio


async def transcribe_audio(audio_b64: str, client: Optional[AsyncOpenAI] = None) -> str:
    """Decode base64 audio and return the recognized text."""
    audio = decode_audio(audio_b64)

    try:
        client = client or get_openai_client()
        transcription = await client.audio.transcriptions.create(
            model=settings.WHISPER_MODEL,
            file=(AUDIO_FILENAME, audio, AUDIO_CONTENT_TYPE),
        )
    except (OpenAIError, ValueError) as exc:
        logger.error(f"Transcription error: {exc}")
        raise TranscriptionFailed("Failed to transcribe audio") from exc

    logger.info(f"Transcribed {len(audio)} bytes of audio")
    return transcription.text
