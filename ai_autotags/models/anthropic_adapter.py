"""Anthropic Claude adapter.

Anthropic uses a different API format than OpenAI, so it needs its own adapter.
"""

from __future__ import annotations

from typing import Any

from .base import ProviderAdapter, WireRequest
from .prompts import build_system_prompt, build_user_prompt
from .schemas import GenerationRequest, ProviderConfig, ProviderKind


class AnthropicAdapter(ProviderAdapter):
    """Adapter for Anthropic's Messages API.

    Handles the different API format that Anthropic uses:
    - Different headers (x-api-key instead of Authorization)
    - Different endpoint (/v1/messages instead of /v1/chat/completions)
    - Requires anthropic-version header
    - System prompt is a top-level field, not a message
    """

    kind = ProviderKind.ANTHROPIC
    display_name = "Anthropic Claude"
    default_endpoint = "https://api.anthropic.com/v1/messages"
    default_model = "claude-3-haiku-20240307"
    default_api_version = "2023-06-01"

    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        headers = {
            "x-api-key": self.require_api_key(config),
            "anthropic-version": self.api_version(config) or "",
            "content-type": "application/json",
        }

        json_data = {
            "model": self.model(config),
            "system": build_system_prompt(request),
            "messages": [{"role": "user", "content": build_user_prompt(request)}],
            "max_tokens": self.max_tokens,
        }

        return WireRequest(url=self.endpoint(config), headers=headers, json_body=json_data)

    def extract_text(self, data: dict[str, Any]) -> str:
        # Content is a list of typed blocks; only text blocks matter here
        text = ""
        for content_item in data["content"]:
            if content_item.get("type") == "text":
                text += content_item.get("text", "")
        return text
