"""Google AI (Gemini) adapter for the Generative Language API."""

from __future__ import annotations

from typing import Any

from .base import ProviderAdapter, WireRequest
from .prompts import build_system_prompt, build_user_prompt
from .schemas import GenerationRequest, ProviderConfig, ProviderKind


class GoogleAIAdapter(ProviderAdapter):
    """Adapter for ``models/{model}:generateContent``.

    The API version is a path segment (``v1beta`` by default) and the key is
    sent in the ``x-goog-api-key`` header.
    """

    kind = ProviderKind.GOOGLE_AI
    display_name = "Google AI (Gemini)"
    default_endpoint = "https://generativelanguage.googleapis.com"
    default_model = "gemini-1.5-flash"
    default_api_version = "v1beta"

    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        headers = {
            "x-goog-api-key": self.require_api_key(config),
            "Content-Type": "application/json",
        }
        url = (
            f"{self.endpoint(config)}/{self.api_version(config)}"
            f"/models/{self.model(config)}:generateContent"
        )
        body = {
            "systemInstruction": {"parts": [{"text": build_system_prompt(request)}]},
            "contents": [
                {"role": "user", "parts": [{"text": build_user_prompt(request)}]}
            ],
            "generationConfig": {
                "temperature": 0.3,
                "maxOutputTokens": self.max_tokens,
            },
        }
        return WireRequest(url=url, headers=headers, json_body=body)

    def extract_text(self, data: dict[str, Any]) -> str:
        candidate = data["candidates"][0]
        parts = candidate["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
