"""
Public core operations.

Thin functions over an explicit ScribeContext so that any host (HTTP
routes, scripts, tests) calls the same code path.
"""

from typing import Optional, Sequence

from inference import CompletionRequest, CompletionResult
from infra.bootstrap import ScribeContext
from services.stt import TranscriptionRequest, TranscriptionResult
from structuring import ClinicalSections, parse_clinical_text as _parse_clinical_text


async def generate_content(
    context: ScribeContext,
    system_prompt: str,
    user_prompt: str,
    *,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    stop_sequences: Sequence[str] = (),
    top_p: float = 1.0,
    section_type: Optional[str] = None,
    user: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CompletionResult:
    """Generate text with the context's completion client. Never raises for service failures."""
    request = CompletionRequest(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        model=model or context.config.openai_model,
        temperature=temperature,
        max_tokens=max_tokens,
        stop_sequences=tuple(stop_sequences),
        top_p=top_p,
        section_type=section_type,
        user=user,
    )
    return await context.completion.generate(request, timeout=timeout)


async def transcribe(
    context: ScribeContext,
    audio: bytes,
    *,
    mime_type: str = "audio/wav",
    language: str = "nl",
    prompt: Optional[str] = None,
    temperature: float = 0.0,
    timeout: Optional[float] = None,
) -> TranscriptionResult:
    """Transcribe audio with the context's transcription client. Never raises for service failures."""
    request = TranscriptionRequest(
        audio=audio,
        mime_type=mime_type,
        language=language,
        prompt=prompt,
        temperature=temperature,
    )
    return await context.transcription.transcribe(request, timeout=timeout)


def parse_clinical_text(raw_text: str) -> ClinicalSections:
    """Structure HHSB text. Pure; never raises."""
    return _parse_clinical_text(raw_text)
