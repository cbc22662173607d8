"""Alibaba Tongyi Qianwen adapter for the native DashScope API."""

from __future__ import annotations

from typing import Any

from .base import ProviderAdapter, WireRequest
from .schemas import GenerationRequest, ProviderConfig, ProviderKind


class TongyiAdapter(ProviderAdapter):
    """DashScope text-generation adapter.

    Messages go under ``input`` and sampling options under ``parameters``.
    With ``result_format=message`` the answer comes back in
    ``output.choices``; older models only fill ``output.text``.
    """

    kind = ProviderKind.TONGYI
    display_name = "Tongyi Qianwen"
    default_endpoint = (
        "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation"
    )
    default_model = "qwen-turbo"

    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        headers = {
            "Authorization": f"Bearer {self.require_api_key(config)}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model(config),
            "input": {"messages": self.messages(request)},
            "parameters": {
                "result_format": "message",
                "max_tokens": self.max_tokens,
                "temperature": 0.3,
            },
        }
        return WireRequest(url=self.endpoint(config), headers=headers, json_body=body)

    def extract_text(self, data: dict[str, Any]) -> str:
        output = data["output"]
        if output.get("choices"):
            return output["choices"][0]["message"]["content"]
        return output["text"]
