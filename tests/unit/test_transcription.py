"""Tests for voice answer transcription."""

import asyncio
import base64
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from dropjournal.features.transcription import decode_audio, transcribe_audio
from dropjournal.shared.errors import InvalidArgument, TranscriptionFailed


class FakeTranscriptions:

    def __init__(self, text="I went for a walk", error=None):
        self.text = text
        self.error = error
        self.requests = []

    async def create(self, model, file):
        self.requests.append({"model": model, "file": file})
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def fake_openai(transcriptions):
    return SimpleNamespace(audio=SimpleNamespace(transcriptions=transcriptions))


AUDIO_B64 = base64.b64encode(b"\x1aE\xdf\xa3 fake webm").decode()


def test_transcribes_decoded_audio():
    transcriptions = FakeTranscriptions()

    text = asyncio.run(transcribe_audio(AUDIO_B64, client=fake_openai(transcriptions)))

    assert text == "I went for a walk"
    filename, payload, content_type = transcriptions.requests[0]["file"]
    assert payload == b"\x1aE\xdf\xa3 fake webm"
    assert content_type == "audio/webm"


@pytest.mark.parametrize("value", ["not base64!", "", "===="])
def test_invalid_audio_is_rejected(value):
    with pytest.raises(InvalidArgument):
        decode_audio(value)


def test_provider_error_is_transcription_failure():
    transcriptions = FakeTranscriptions(error=OpenAIError("quota exceeded"))
    with pytest.raises(TranscriptionFailed):
        asyncio.run(transcribe_audio(AUDIO_B64, client=fake_openai(transcriptions)))
