"""Azure OpenAI adapter.

Azure serves OpenAI models from per-resource deployments, so the URL is built
from the resource endpoint, the deployment name and an ``api-version`` query
parameter, and the key goes in an ``api-key`` header.
"""

from __future__ import annotations

from .base import WireRequest
from .openai_compatible import OpenAICompatibleAdapter
from .schemas import GenerationRequest, ProviderConfig, ProviderKind


class AzureOpenAIAdapter(OpenAICompatibleAdapter):
    """Adapter for Azure OpenAI deployments.

    ``endpoint`` is the resource URL (``https://<name>.openai.azure.com``) and
    ``model_name`` is the deployment name.
    """

    kind = ProviderKind.AZURE_OPENAI
    display_name = "Azure OpenAI"
    default_endpoint = None
    default_model = "gpt-4o-mini"
    default_api_version = "2024-02-01"

    def build_request(
        self, request: GenerationRequest, config: ProviderConfig
    ) -> WireRequest:
        headers = {
            "api-key": self.require_api_key(config),
            "Content-Type": "application/json",
        }
        deployment = self.model(config)
        body = self.body(request, config)
        # The deployment selects the model; the body field is ignored by Azure.
        body.pop("model", None)

        return WireRequest(
            url=f"{self.endpoint(config)}/openai/deployments/{deployment}/chat/completions",
            headers=headers,
            params={"api-version": self.api_version(config) or ""},
            json_body=body,
        )
