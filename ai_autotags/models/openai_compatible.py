"""Adapters for providers speaking the OpenAI chat-completions format.

This covers:
- OpenAI
- Deepseek
- Moonshot AI
- Zhipu AI (GLM)
- iFlytek Spark (Xunfei) HTTP API
- OpenRouter
- Any other OpenAI-compatible endpoint ("custom")
"""

from __future__ import annotations

from typing import Any

from ..errors import ProviderError, ProviderErrorKind
from .base import ProviderAdapter, WireRequest
from .schemas import GenerationRequest, ProviderConfig, ProviderKind


class OpenAICompatibleAdapter(ProviderAdapter):
    """Chat-completions adapter with Bearer authentication.

    Subclasses only change their defaults; the endpoint in the config is the
    full chat-completions URL.

    Examples:
        adapter = DeepseekAdapter()
        wire = adapter.build_request(
            GenerationRequest(text="Notes about Rust lifetimes"),
            ProviderConfig(provider="deepseek", api_key="sk-..."),
        )
    """

    kind = ProviderKind.OPENAI
    display_name = "OpenAI"
    default_endpoint = "https://api.openai.com/v1/chat/completions"
    default_model = "gpt-4o-mini"
    temperature = 0.3

    def headers(self, config: ProviderConfig) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.require_api_key(config)}",
            "Content-Type": "application/json",
        }

    def body(self, request: GenerationRequest, config: ProviderConfig) -> dict[str, Any]:
        return {
            "model": self.model(config),
            "messages": self.messages(request),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        headers = self.headers(config)
        return WireRequest(
            url=self.endpoint(config),
            headers=headers,
            json_body=self.body(request, config),
        )

    def extract_text(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]


class OpenAIAdapter(OpenAICompatibleAdapter):
    pass


class DeepseekAdapter(OpenAICompatibleAdapter):
    kind = ProviderKind.DEEPSEEK
    display_name = "Deepseek"
    default_endpoint = "https://api.deepseek.com/v1/chat/completions"
    default_model = "deepseek-chat"


class MoonshotAdapter(OpenAICompatibleAdapter):
    kind = ProviderKind.MOONSHOT
    display_name = "Moonshot AI"
    default_endpoint = "https://api.moonshot.cn/v1/chat/completions"
    default_model = "moonshot-v1-8k"


class ZhipuAdapter(OpenAICompatibleAdapter):
    kind = ProviderKind.ZHIPU
    display_name = "Zhipu AI"
    default_endpoint = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
    default_model = "glm-4-flash"


class XunfeiAdapter(OpenAICompatibleAdapter):
    """iFlytek Spark; the API key is the ``APIPassword`` from the console."""

    kind = ProviderKind.XUNFEI
    display_name = "iFlytek Spark"
    default_endpoint = "https://spark-api-open.xf-yun.com/v1/chat/completions"
    default_model = "generalv3.5"

    def extract_text(self, data: dict[str, Any]) -> str:
        # Spark reports failures with HTTP 200 and a non-zero code.
        code = data.get("code", 0)
        if code:
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE,
                f"Spark error {code}: {data.get('message', '')}",
            )
        return super().extract_text(data)


class OpenRouterAdapter(OpenAICompatibleAdapter):
    kind = ProviderKind.OPENROUTER
    display_name = "OpenRouter"
    default_endpoint = "https://openrouter.ai/api/v1/chat/completions"
    default_model = "openai/gpt-4o-mini"

    def headers(self, config: ProviderConfig) -> dict[str, str]:
        headers = super().headers(config)
        headers["X-Title"] = "ai-autotags"
        return headers


class CustomAdapter(OpenAICompatibleAdapter):
    """User-supplied OpenAI-compatible endpoint; endpoint and model required."""

    kind = ProviderKind.CUSTOM
    display_name = "Custom endpoint"
    default_endpoint = None
    default_model = None
