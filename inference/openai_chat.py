"""
OpenAI-compatible chat completions backend.

One call to POST {base_url}/chat/completions per invocation. Every
failure is raised as a classified ServiceError; retrying is the
caller's job.
"""

import logging
from typing import Dict, Optional

import httpx

from reliability.errors import EmptyResultError, ServiceError, kind_for_status
from .base import CompletionBackend
from .types import CompletionRequest, RawCompletion


logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    400: "Invalid request to OpenAI API",
    401: "Invalid OpenAI API key",
    402: "Insufficient OpenAI credits",
    429: "OpenAI rate limit exceeded, retries are handled automatically",
    503: "OpenAI service temporarily unavailable",
}


def message_for_status(status_code: int) -> str:
    if status_code in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[status_code]
    if status_code == 403:
        return "Access to the OpenAI API was refused"
    if status_code >= 500:
        return f"OpenAI service error ({status_code})"
    return f"OpenAI API error ({status_code})"


def _response_text(response) -> Optional[str]:
    text = getattr(response, "text", None)
    return text if isinstance(text, str) else None


class OpenAIChatBackend(CompletionBackend):
    """
    Chat completions over httpx.

    Credentials are sent as headers and never logged.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        organization: Optional[str] = None,
        timeout: float = 30.0,
    ):
        if not api_key:
            raise ValueError("OpenAIChatBackend requires an API key")
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.organization = organization
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    @staticmethod
    def _build_payload(request: CompletionRequest) -> dict:
        payload = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "top_p": request.top_p,
        }
        if request.stop_sequences:
            payload["stop"] = list(request.stop_sequences)
        if request.user:
            payload["user"] = request.user
        return payload

    async def complete(self, request: CompletionRequest) -> RawCompletion:
        payload = self._build_payload(request)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url, json=payload, headers=self._build_headers()
                )
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException as e:
            raise ServiceError(
                "transient_service",
                f"OpenAI request timed out after {self.timeout}s",
                detail=str(e),
            ) from e

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ServiceError(
                kind_for_status(status),
                message_for_status(status),
                status_code=status,
                detail=_response_text(e.response),
            ) from e

        except httpx.RequestError as e:
            raise ServiceError(
                "transient_service",
                f"Could not reach OpenAI API: {type(e).__name__}",
                detail=str(e),
            ) from e

        except ValueError as e:
            raise EmptyResultError("OpenAI returned a response that is not valid JSON") from e

        return self._parse_completion(data, request)

    @staticmethod
    def _parse_completion(data, request: CompletionRequest) -> RawCompletion:
        try:
            message = data["choices"][0]["message"]
            content = message.get("content")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise EmptyResultError("OpenAI response contained no choices") from e

        if not isinstance(content, str):
            raise EmptyResultError("OpenAI response contained no message content")

        return RawCompletion(
            content=content,
            model=data.get("model") or request.model,
            usage=data.get("usage"),
        )
