from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, NonNegativeInt

from reliability.errors import ErrorKind


DEFAULT_MODEL = "gpt-4.1-mini"
DEMO_MODEL = "demo"


class TokenUsage(BaseModel):
    """Token accounting reported by the service."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: NonNegativeInt
    completion_tokens: NonNegativeInt
    total_tokens: NonNegativeInt


@dataclass(frozen=True)
class CompletionRequest:
    system_prompt: str
    user_prompt: str
    model: str = DEFAULT_MODEL
    temperature: Optional[float] = None      # None -> default temperature
    max_tokens: Optional[int] = None         # None -> configured default
    stop_sequences: Tuple[str, ...] = ()
    top_p: float = 1.0
    section_type: Optional[str] = None       # selects demo content in fallback mode
    user: Optional[str] = None


@dataclass(frozen=True)
class RawCompletion:
    """Unvalidated backend output; the client decides if it is usable."""

    content: str
    model: str
    usage: Optional[dict] = None


@dataclass(frozen=True)
class CompletionResult:
    success: bool
    content: str = ""
    model: str = ""
    usage: Optional[TokenUsage] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
