"""
Speech-to-Text service exports.

Clean interface for call sites to import STT components.
"""

from .base import (
    RawTranscription,
    TranscriptionBackend,
    TranscriptionRequest,
    TranscriptionResult,
)
from .client import MAX_AUDIO_BYTES, TranscriptionClient, estimate_transcription_cost
from .formats import extension_for_mime_type, is_supported_audio_format
from .groq import GroqWhisperBackend
from .stub import StubTranscriptionBackend

__all__ = [
    "RawTranscription",
    "TranscriptionBackend",
    "TranscriptionRequest",
    "TranscriptionResult",
    "TranscriptionClient",
    "estimate_transcription_cost",
    "MAX_AUDIO_BYTES",
    "extension_for_mime_type",
    "is_supported_audio_format",
    "GroqWhisperBackend",
    "StubTranscriptionBackend",
]
