"""Voice answer transcription."""

from dropjournal.features.transcription.service import decode_audio, transcribe_audio

__all__ = [
    "decode_audio",
    "transcribe_audio",
]
