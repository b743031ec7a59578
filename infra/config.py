"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults. Values are
read once at startup; a missing API key switches the matching service
into its degraded mode instead of failing.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

from inference import CompletionBackend, OpenAIChatBackend, DEFAULT_MODEL
from services.stt import GroqWhisperBackend, StubTranscriptionBackend, TranscriptionBackend
from services.stt.client import MAX_AUDIO_BYTES


logger = logging.getLogger(__name__)

STTBackendType = Literal["groq", "stub"]

ENV_PATH = Path(__file__).resolve().parent.parent / ".env"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}, using {default}")
        return default


@dataclass(frozen=True)
class InfraConfig:
    """Infrastructure configuration from environment."""

    # Text generation
    openai_api_key: Optional[str]
    openai_org_id: Optional[str]
    openai_base_url: str
    openai_model: str
    openai_timeout_ms: int
    openai_max_retries: int
    openai_retry_base_delay_ms: int
    openai_default_max_tokens: int
    rate_limit_requests: int
    rate_limit_window_ms: int

    # STT
    stt_backend: STTBackendType
    groq_api_key: Optional[str]
    groq_base_url: str
    groq_model: str
    groq_timeout_ms: int
    groq_max_retries: int
    groq_retry_base_delay_ms: int
    max_audio_bytes: int

    environment: str

    @classmethod
    def from_env(cls, env_file: Optional[Path] = ENV_PATH) -> "InfraConfig":
        """
        Load configuration from environment variables.

        A `.env` file next to the project is loaded first when present;
        real environment variables win over it.
        """
        if env_file is not None:
            load_dotenv(env_file)

        return cls(
            # Text generation
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_org_id=os.getenv("OPENAI_ORG_ID") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
            openai_timeout_ms=_int_env("OPENAI_TIMEOUT", 30000),
            openai_max_retries=_int_env("OPENAI_MAX_RETRIES", 3),
            openai_retry_base_delay_ms=_int_env("OPENAI_RETRY_BASE_DELAY", 1000),
            openai_default_max_tokens=_int_env("OPENAI_DEFAULT_MAX_TOKENS", 2000),
            rate_limit_requests=_int_env("OPENAI_RATE_LIMIT_REQUESTS", 100),
            rate_limit_window_ms=_int_env("OPENAI_RATE_LIMIT_WINDOW", 60000),

            # STT Configuration
            stt_backend=os.getenv("STT_BACKEND", "groq"),  # type: ignore
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            groq_base_url=os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
            groq_model=os.getenv("GROQ_TRANSCRIPTION_MODEL", "whisper-large-v3-turbo"),
            groq_timeout_ms=_int_env("GROQ_TIMEOUT", 120000),
            groq_max_retries=_int_env("GROQ_MAX_RETRIES", 3),
            groq_retry_base_delay_ms=_int_env("GROQ_RETRY_BASE_DELAY", 2000),
            max_audio_bytes=_int_env("MAX_AUDIO_BYTES", MAX_AUDIO_BYTES),

            environment=os.getenv("ENVIRONMENT", "development"),
        )

    @property
    def demo_mode(self) -> bool:
        return not self.openai_api_key

    def create_completion_backend(self) -> Optional[CompletionBackend]:
        """Create the text-generation backend, or None for demo mode."""
        if not self.openai_api_key:
            return None
        return OpenAIChatBackend(
            api_key=self.openai_api_key,
            base_url=self.openai_base_url,
            organization=self.openai_org_id,
            timeout=self.openai_timeout_ms / 1000,
        )

    def create_transcription_backend(self) -> Optional[TranscriptionBackend]:
        """Create the STT backend, or None when Groq is selected without a key."""
        if self.stt_backend == "stub":
            return StubTranscriptionBackend()

        if not self.groq_api_key:
            return None
        return GroqWhisperBackend(
            api_key=self.groq_api_key,
            base_url=self.groq_base_url,
            model=self.groq_model,
            timeout=self.groq_timeout_ms / 1000,
        )
