from fastapi import APIRouter, Depends

from dropjournal.api.dependencies import get_current_user_id
from dropjournal.api.models import TranscribeRequest, TranscribeResponse
from dropjournal.features.transcription import transcribe_audio

router = APIRouter(tags=["Transcription"])


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(
    request: TranscribeRequest,
    user_id: int = Depends(get_current_user_id),
) -> TranscribeResponse:
    """Speech-to-text for voice answers."""
    text = await transcribe_audio(request.audio)
    return TranscribeResponse(text=text)
