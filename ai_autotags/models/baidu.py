"""Baidu ERNIE (Wenxin Workshop) adapter."""

from __future__ import annotations

from typing import Any

import httpx

from ..errors import ProviderError, ProviderErrorKind
from .base import ProviderAdapter, WireRequest
from .prompts import build_system_prompt, build_user_prompt
from .schemas import GenerationRequest, ProviderConfig, ProviderKind

# Wenxin answers errors with HTTP 200 and an ``error_code`` in the body.
_AUTH_ERROR_CODES = {6, 13, 14, 100, 110, 111}
_RATE_LIMIT_ERROR_CODES = {4, 17, 18, 19, 336501, 336502}


class BaiduAdapter(ProviderAdapter):
    """Adapter for the Wenxin chat endpoint.

    ``model_name`` is the endpoint suffix of the model (``completions`` for
    ERNIE-Bot, ``completions_pro`` for ERNIE 4.0, ...). The API key is the
    OAuth access token and travels as a query parameter.
    """

    kind = ProviderKind.BAIDU
    display_name = "Baidu ERNIE"
    default_endpoint = "https://aip.baidubce.com/rpc/2.0/ai_custom/v1/wenxinworkshop/chat"
    default_model = "completions"

    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        token = self.require_api_key(config)
        return WireRequest(
            url=f"{self.endpoint(config)}/{self.model(config)}",
            headers={"Content-Type": "application/json"},
            params={"access_token": token},
            json_body={
                "system": build_system_prompt(request),
                "messages": [{"role": "user", "content": build_user_prompt(request)}],
                "temperature": 0.3,
            },
        )

    def parse_response(self, response: httpx.Response) -> str:
        if response.status_code < 400:
            try:
                data = response.json()
            except ValueError:
                data = None
            if isinstance(data, dict) and data.get("error_code"):
                raise self._error_for_code(data)
        return super().parse_response(response)

    def extract_text(self, data: dict[str, Any]) -> str:
        return data["result"]

    @staticmethod
    def _error_for_code(data: dict[str, Any]) -> ProviderError:
        code = data["error_code"]
        detail = f"error {code}: {data.get('error_msg', '')}"
        if code in _AUTH_ERROR_CODES:
            return ProviderError(ProviderErrorKind.AUTH_FAILURE, detail)
        if code in _RATE_LIMIT_ERROR_CODES:
            return ProviderError(ProviderErrorKind.RATE_LIMITED, detail)
        return ProviderError(ProviderErrorKind.MALFORMED_RESPONSE, detail)
