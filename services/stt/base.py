"""
Speech-to-Text (STT) abstract interface.

Role: Audio → text transformation only.

Rules:
- Pure transformation (no state mutation)
- Backends perform exactly one remote call and raise ServiceError on failure
- Retrying, validation and accounting belong to TranscriptionClient
- Silence is a success with empty text, not an error
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from reliability.errors import ErrorKind


@dataclass(frozen=True)
class TranscriptionRequest:
    """Speech-to-Text request."""

    audio: bytes                     # Raw audio bytes
    mime_type: str = "audio/wav"
    language: str = "nl"
    prompt: Optional[str] = None     # Vocabulary hint for the model
    temperature: float = 0.0         # 0.0-1.0


@dataclass(frozen=True)
class RawTranscription:
    """Backend output for one successful call."""

    text: str
    duration_seconds: Optional[float] = None


@dataclass(frozen=True)
class TranscriptionResult:
    """Speech-to-Text outcome."""

    success: bool
    text: str = ""
    duration_seconds: Optional[float] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    attempts: int = 0


class TranscriptionBackend(ABC):
    """
    Abstract STT boundary.
    The transcription client depends ONLY on this interface.
    """

    name = "transcription"

    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest, extension: str) -> RawTranscription:
        """
        Transcribe audio to text.

        Args:
            request: validated request
            extension: file extension the service should see (m4a, wav, ...)

        Raises:
            ServiceError: classified failure of this attempt
        """
        raise NotImplementedError
