"""
HTTP routes for generation, transcription and structuring.

Endpoints:
- POST /api/generate             text generation
- GET  /api/generate/health      completion client health
- POST /api/transcribe           multipart audio upload
- GET  /api/transcribe           transcription service status
- POST /api/structure/hhsb       HHSB parsing
- POST /api/structure/soep       SOEP parsing
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from infra.bootstrap import ScribeContext
from infra.health import HealthChecker
from structuring import completeness_percentage, is_complete, parse_soep_text

from . import core

# Setup logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scribe"])

STATUS_FOR_KIND = {
    "structural": 400,
    "auth_or_waf_blocked": 401,
    "rate_limited": 429,
    "transient_service": 503,
    "empty_result": 502,
}


class GenerateBody(BaseModel):
    """Text generation request."""

    system_prompt: str = Field(..., alias="systemPrompt")
    user_prompt: str = Field(..., alias="userPrompt")
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = Field(None, alias="maxTokens")
    stop: List[str] = Field(default_factory=list)
    section_type: Optional[str] = Field(None, alias="sectionType")

    model_config = ConfigDict(populate_by_name=True)


class StructureBody(BaseModel):
    text: str = ""


def get_context(request: Request) -> ScribeContext:
    return request.app.state.context


def _raise_for_failure(error_kind: Optional[str], error: Optional[str]) -> None:
    status_code = STATUS_FOR_KIND.get(error_kind or "", 500)
    raise HTTPException(
        status_code=status_code,
        detail={"error": error or "Unknown error", "errorKind": error_kind},
    )


@router.post("/generate")
async def generate(body: GenerateBody, request: Request):
    """Generate content; demo content is returned when no key is configured."""
    context = get_context(request)
    result = await core.generate_content(
        context,
        body.system_prompt,
        body.user_prompt,
        model=body.model,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
        stop_sequences=body.stop,
        section_type=body.section_type,
    )

    if not result.success:
        _raise_for_failure(result.error_kind, result.error)

    return {
        "success": True,
        "data": {
            "content": result.content,
            "model": result.model,
            "usage": result.usage.model_dump() if result.usage else None,
            "mode": result.error_kind or "live",
        },
    }


@router.get("/generate/health")
async def generate_health(request: Request):
    context = get_context(request)
    checker = HealthChecker(context, start_time=request.app.state.start_time)
    return {
        **checker.to_dict(checker.check()),
        "completion": context.completion.health_info(),
    }


@router.post("/transcribe")
async def transcribe(
    request: Request,
    audio: UploadFile = File(...),
    language: str = Form("nl"),
    prompt: Optional[str] = Form(None),
    temperature: float = Form(0.0),
):
    """Transcribe one uploaded audio file."""
    context = get_context(request)
    limit = context.transcription.max_audio_bytes
    if audio.size is not None and audio.size > limit:
        _raise_for_failure("structural", f"Audio file too large: {audio.size} bytes exceeds the {limit} byte limit")

    data = await audio.read()
    logger.info(f"Received audio upload: {audio.filename} ({len(data)} bytes, {audio.content_type})")

    result = await core.transcribe(
        context,
        data,
        mime_type=audio.content_type or "audio/wav",
        language=language,
        prompt=prompt,
        temperature=temperature,
    )

    if not result.success:
        _raise_for_failure(result.error_kind, result.error)

    return {
        "success": True,
        "transcript": result.text,
        "duration": result.duration_seconds,
        "attempts": result.attempts,
    }


@router.get("/transcribe")
async def transcribe_status(request: Request):
    context = get_context(request)
    return {
        "status": "Transcription API is running",
        "supportedFormats": ["m4a", "mp4", "mp3", "webm", "ogg", "flac", "wav"],
        **context.transcription.status(),
    }


@router.post("/structure/hhsb")
async def structure_hhsb(body: StructureBody):
    sections = core.parse_clinical_text(body.text)
    return {
        **sections.to_dict(),
        "complete": is_complete(sections),
        "completeness": completeness_percentage(sections),
    }


@router.post("/structure/soep")
async def structure_soep(body: StructureBody):
    return parse_soep_text(body.text).to_dict()
