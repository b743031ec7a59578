"""
tests/stt/test_transcription_client.py

Tests for TranscriptionClient.

Verifies:
✔ Empty audio, bad temperature and non-audio MIME types are structural
✔ Missing credential reports "not configured" without a backend call
✔ 401/403 abort after one attempt; WAF blocks are named as such
✔ 429 and 5xx are retried with backoff; exhaustion is a network failure
✔ Silence is a success with empty text
✔ Cost of each call is recorded in the transcription monitor
"""

from unittest.mock import AsyncMock

import pytest

from reliability import RetryPolicy, ServiceError, StructuralError, UsageMonitor
from services.stt import (
    RawTranscription,
    StubTranscriptionBackend,
    TranscriptionClient,
    TranscriptionRequest,
    estimate_transcription_cost,
)
from services.stt.base import TranscriptionBackend


AUDIO = b"\x00\x01" * 400


class ScriptedBackend(TranscriptionBackend):
    name = "scripted"
    model = "whisper-large-v3-turbo"

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def transcribe(self, request, extension):
        self.calls.append((request, extension))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_client(backend):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    client = TranscriptionClient(
        backend=backend,
        usage_monitor=UsageMonitor(name="transcription"),
        retry_policy=RetryPolicy(max_attempts=3, base_delay_seconds=2.0),
        sleep=fake_sleep,
    )
    return client, sleeps


def unauthorized():
    return ServiceError("auth_or_waf_blocked", "Groq API key missing or invalid (401)", status_code=401)


def waf_blocked():
    return ServiceError(
        "auth_or_waf_blocked",
        "Groq request blocked by an anti-bot network filter (403)",
        status_code=403,
        waf_blocked=True,
    )


def unavailable():
    return ServiceError("transient_service", "Groq service error (503)", status_code=503)


# ─────────────────────────────────────────────────────
# Validation
# ─────────────────────────────────────────────────────


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_fields", [
        {"audio": b""},
        {"audio": AUDIO, "temperature": 1.5},
        {"audio": AUDIO, "temperature": -0.1},
        {"audio": AUDIO, "mime_type": "text/plain"},
    ])
    async def test_structural(self, request_fields):
        backend = ScriptedBackend()
        client, _ = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(**request_fields))

        assert not result.success
        assert result.error_kind == "structural"
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_oversized_audio_rejected(self):
        backend = ScriptedBackend()
        client = TranscriptionClient(backend=backend, max_audio_bytes=len(AUDIO) - 1)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.error_kind == "structural"
        assert "too large" in result.error
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_audio_at_limit_accepted(self):
        backend = ScriptedBackend(RawTranscription(text="ok", duration_seconds=1.0))
        client = TranscriptionClient(backend=backend, max_audio_bytes=len(AUDIO))

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.success

    def test_default_limit_is_100_mb(self):
        assert TranscriptionClient(backend=None).max_audio_bytes == 100 * 1024 * 1024

    @pytest.mark.asyncio
    async def test_unknown_audio_type_sent_as_m4a(self):
        backend = ScriptedBackend(RawTranscription(text="hallo", duration_seconds=1.0))
        client, _ = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO, mime_type="audio/x-unknown"))

        assert result.success
        assert backend.calls[0][1] == "m4a"

    @pytest.mark.asyncio
    async def test_not_configured(self):
        client, _ = make_client(None)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert not result.success
        assert result.error_kind == "auth_or_waf_blocked"
        assert "not configured" in result.error
        assert client.usage_monitor.snapshot().request_count == 0


# ─────────────────────────────────────────────────────
# Retry behaviour
# ─────────────────────────────────────────────────────


class TestRetries:
    @pytest.mark.asyncio
    async def test_unauthorized_aborts_immediately(self):
        backend = ScriptedBackend(unauthorized())
        client, sleeps = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.error_kind == "auth_or_waf_blocked"
        assert result.attempts == 1
        assert "Authorization failure" in result.error
        assert "API key was rejected" in result.error
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_waf_block_named(self):
        backend = ScriptedBackend(waf_blocked())
        client, _ = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.attempts == 1
        assert "anti-bot network filter" in result.error

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self):
        backend = ScriptedBackend(
            ServiceError("rate_limited", "Groq rate limit exceeded (429)", status_code=429),
            RawTranscription(text="Pijn in de knie", duration_seconds=4.0),
        )
        client, sleeps = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.success
        assert result.text == "Pijn in de knie"
        assert result.attempts == 2
        assert len(sleeps) == 1
        assert 2.0 <= sleeps[0] <= 2.2

    @pytest.mark.asyncio
    async def test_exhaustion_is_network_failure(self):
        backend = ScriptedBackend(unavailable(), unavailable(), unavailable())
        client, sleeps = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert not result.success
        assert result.error_kind == "transient_service"
        assert result.attempts == 3
        assert "Network failure" in result.error
        assert len(sleeps) == 2

    @pytest.mark.asyncio
    async def test_bad_upload_not_retried(self):
        backend = ScriptedBackend(StructuralError("Groq rejected the audio upload (400)", status_code=400))
        client, _ = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.error_kind == "structural"
        assert result.attempts == 1


# ─────────────────────────────────────────────────────
# Results & accounting
# ─────────────────────────────────────────────────────


class TestResults:
    @pytest.mark.asyncio
    async def test_silence_is_success(self):
        backend = ScriptedBackend(RawTranscription(text="", duration_seconds=3.0))
        client, _ = make_client(backend)

        result = await client.transcribe(TranscriptionRequest(audio=AUDIO))

        assert result.success
        assert result.text == ""
        assert result.error_kind is None

    @pytest.mark.asyncio
    async def test_cost_recorded(self):
        backend = ScriptedBackend(RawTranscription(text="ok", duration_seconds=100.0))
        client, _ = make_client(backend)

        await client.transcribe(TranscriptionRequest(audio=AUDIO))

        metrics = client.usage_monitor.snapshot()
        assert metrics.request_count == 1
        assert metrics.total_cost == pytest.approx(0.001)
        assert metrics.error_count == 0

    @pytest.mark.asyncio
    async def test_failures_recorded(self):
        client, _ = make_client(ScriptedBackend(unauthorized()))
        await client.transcribe(TranscriptionRequest(audio=AUDIO))
        assert client.usage_monitor.snapshot().error_count == 1

    @pytest.mark.asyncio
    async def test_stub_backend_end_to_end(self):
        client, _ = make_client(StubTranscriptionBackend())

        result = await client.transcribe(TranscriptionRequest(audio=b"x" * 250))

        assert result.success
        assert result.text == "woord_0 woord_1"
        assert result.duration_seconds == pytest.approx(0.25)

    def test_estimate_cost(self):
        assert estimate_transcription_cost(60) == pytest.approx(0.0006)
        assert estimate_transcription_cost(None) == 0.0

    def test_status(self):
        client, _ = make_client(StubTranscriptionBackend())
        status = client.status()
        assert status["configured"] is True
        assert status["backend"] == "stub"
