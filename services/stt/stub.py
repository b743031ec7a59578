"""
Stub STT backend for testing and offline development.

Deterministic, fast, and never touches the network.
"""

from .base import RawTranscription, TranscriptionBackend, TranscriptionRequest


class StubTranscriptionBackend(TranscriptionBackend):
    """
    Deterministic fake STT for testing and CI.

    Converts audio to a fixed response based on audio length.
    """

    name = "stub"

    async def transcribe(self, request: TranscriptionRequest, extension: str) -> RawTranscription:
        # One word per 100 bytes, one second per 1000 bytes
        audio_len = len(request.audio)
        word_count = max(1, audio_len // 100)
        text = " ".join(f"woord_{i}" for i in range(word_count))

        return RawTranscription(text=text, duration_seconds=audio_len / 1000)
