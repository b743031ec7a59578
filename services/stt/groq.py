"""
Groq Whisper STT backend.

POSTs multipart audio to {base_url}/audio/transcriptions
(OpenAI-compatible). One call per invocation; failures are raised as
classified ServiceErrors.
"""

import logging
from typing import Optional

import httpx

from reliability.errors import EmptyResultError, ServiceError, StructuralError, kind_for_status
from .base import RawTranscription, TranscriptionBackend, TranscriptionRequest


logger = logging.getLogger(__name__)

USER_AGENT = "ClinicalScribe/1.0 (Medical Software; Python httpx)"

_WAF_MARKERS = ("cloudflare", "access denied", "network settings")


def looks_like_waf_block(body: Optional[str]) -> bool:
    """True when a 403 body reads like an anti-bot network filter."""
    if not body:
        return False
    lowered = body.lower()
    return any(marker in lowered for marker in _WAF_MARKERS)


def _response_text(response) -> Optional[str]:
    text = getattr(response, "text", None)
    return text if isinstance(text, str) else None


class GroqWhisperBackend(TranscriptionBackend):
    """
    Hosted Whisper transcription over httpx.

    Requires GROQ_API_KEY. The key is sent as a bearer header and never logged.
    """

    name = "groq"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.groq.com/openai/v1",
        model: str = "whisper-large-v3-turbo",
        timeout: float = 120.0,
    ):
        if not api_key:
            raise ValueError("GroqWhisperBackend requires an API key")
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/audio/transcriptions"

    def _build_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "User-Agent": USER_AGENT,
        }

    def _build_form(self, request: TranscriptionRequest) -> dict:
        data = {
            "model": self.model,
            "language": request.language,
            "response_format": "verbose_json",
            "temperature": str(request.temperature),
        }
        if request.prompt:
            data["prompt"] = request.prompt
        return data

    async def transcribe(self, request: TranscriptionRequest, extension: str) -> RawTranscription:
        files = {"file": (f"audio.{extension}", request.audio, request.mime_type)}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    data=self._build_form(request),
                    files=files,
                    headers=self._build_headers(),
                )
                response.raise_for_status()
                payload = response.json()

        except httpx.TimeoutException as e:
            raise ServiceError(
                "transient_service",
                f"Groq transcription timed out after {self.timeout}s",
                detail=str(e),
            ) from e

        except httpx.HTTPStatusError as e:
            raise self._status_error(e.response) from e

        except httpx.RequestError as e:
            raise ServiceError(
                "transient_service",
                f"Groq network error: {type(e).__name__}",
                detail=str(e),
            ) from e

        except ValueError as e:
            raise EmptyResultError("Groq returned a response that is not valid JSON") from e

        return self._parse_transcription(payload)

    @staticmethod
    def _status_error(response) -> ServiceError:
        status = response.status_code
        body = _response_text(response)

        if status == 403:
            if looks_like_waf_block(body):
                logger.error("Groq 403 looks like a network filter block, not a credential problem")
                return ServiceError(
                    "auth_or_waf_blocked",
                    "Groq request blocked by an anti-bot network filter (403)",
                    status_code=status,
                    detail=body,
                    waf_blocked=True,
                )
            return ServiceError(
                "auth_or_waf_blocked",
                "Groq API key invalid or lacks transcription permission (403)",
                status_code=status,
                detail=body,
            )

        if status == 401:
            return ServiceError(
                "auth_or_waf_blocked",
                "Groq API key missing or invalid (401)",
                status_code=status,
                detail=body,
            )

        if status == 400:
            return StructuralError(
                "Groq rejected the audio upload (400)",
                status_code=status,
                detail=body,
            )

        if status == 429:
            return ServiceError("rate_limited", "Groq rate limit exceeded (429)", status_code=status, detail=body)

        return ServiceError(
            kind_for_status(status),
            f"Groq service error ({status})",
            status_code=status,
            detail=body,
        )

    @staticmethod
    def _parse_transcription(payload) -> RawTranscription:
        if isinstance(payload, str):
            return RawTranscription(text=payload.strip())

        if not isinstance(payload, dict):
            raise EmptyResultError("Groq returned an unexpected transcription payload")

        text = payload.get("text")
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise EmptyResultError("Groq transcription text is not a string")

        duration = payload.get("duration")
        if not isinstance(duration, (int, float)) or isinstance(duration, bool):
            duration = None

        return RawTranscription(text=text.strip(), duration_seconds=duration)
