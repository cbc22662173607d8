"""Base provider adapter interface."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel, Field

from ..errors import ProviderError, ProviderErrorKind
from .prompts import build_system_prompt, build_user_prompt
from .schemas import GenerationRequest, ProviderConfig, ProviderKind


class WireRequest(BaseModel):
    """A fully built HTTP request for one provider call."""

    method: str = "POST"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    json_body: dict[str, Any] = Field(default_factory=dict)


class ProviderAdapter(ABC):
    """Translates generic generation requests into one backend's wire format.

    Subclasses declare their defaults as class attributes and implement
    ``build_request`` and ``extract_text``. Status-code mapping and JSON
    decoding are shared.
    """

    kind: ClassVar[ProviderKind]
    display_name: ClassVar[str] = ""
    default_endpoint: ClassVar[str | None] = None
    default_model: ClassVar[str | None] = None
    default_api_version: ClassVar[str | None] = None
    max_tokens: ClassVar[int] = 1024

    def endpoint(self, config: ProviderConfig) -> str:
        endpoint = config.endpoint or self.default_endpoint
        if not endpoint:
            raise ProviderError(
                ProviderErrorKind.NETWORK_ERROR,
                f"no API endpoint configured for {self.kind.value}",
            )
        return endpoint.rstrip("/")

    def model(self, config: ProviderConfig) -> str:
        model = config.model_name or self.default_model
        if not model:
            raise ProviderError(
                ProviderErrorKind.NETWORK_ERROR,
                f"no model name configured for {self.kind.value}",
            )
        return model

    def api_version(self, config: ProviderConfig) -> str | None:
        return config.api_version or self.default_api_version

    def require_api_key(self, config: ProviderConfig) -> str:
        if not config.api_key:
            raise ProviderError(
                ProviderErrorKind.AUTH_FAILURE,
                f"API key not configured for {self.kind.value}",
            )
        return config.api_key

    def messages(self, request: GenerationRequest) -> list[dict[str, str]]:
        """Chat-style message list used by most backends."""
        return [
            {"role": "system", "content": build_system_prompt(request)},
            {"role": "user", "content": build_user_prompt(request)},
        ]

    @abstractmethod
    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        """Build the backend-specific HTTP request."""

    @abstractmethod
    def extract_text(self, data: dict[str, Any]) -> str:
        """Pull the model's text out of a decoded 2xx response body."""

    def parse_response(self, response: httpx.Response) -> str:
        """Map an HTTP response to raw model text or raise ``ProviderError``."""
        if response.status_code >= 400:
            raise self.error_for_status(response)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE, "response is not valid JSON"
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE, "response is not a JSON object"
            )

        try:
            text = self.extract_text(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE,
                f"missing field in {self.kind.value} response: {e}",
            ) from e

        if not isinstance(text, str):
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE, "model output is not text"
            )
        return text

    def error_for_status(self, response: httpx.Response) -> ProviderError:
        detail = f"HTTP {response.status_code}"
        message = self.error_message(response)
        if message:
            detail = f"{detail}: {message}"

        status = response.status_code
        if status in (401, 403):
            kind = ProviderErrorKind.AUTH_FAILURE
        elif status == 429:
            kind = ProviderErrorKind.RATE_LIMITED
        elif status in (408, 504):
            kind = ProviderErrorKind.TIMEOUT
        else:
            kind = ProviderErrorKind.NETWORK_ERROR
        return ProviderError(kind, detail)

    @staticmethod
    def error_message(response: httpx.Response) -> str:
        """Best-effort extraction of a provider's error message."""
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            return response.text[:200]

        if isinstance(data, dict):
            error = data.get("error", data)
            if isinstance(error, dict):
                return str(error.get("message") or error.get("msg") or "")[:200]
            if isinstance(error, str):
                return error[:200]
        return ""

    def describe(self, config: ProviderConfig) -> str:
        name = self.display_name or self.kind.value
        return f"{name} ({config.model_name or self.default_model or 'default model'})"
