"""Registry mapping provider kinds to adapters.

Adding a backend means writing a ``ProviderAdapter`` subclass and registering
it here; the service looks adapters up by ``ProviderKind`` only.
"""

from __future__ import annotations

from .anthropic_adapter import AnthropicAdapter
from .azure_openai import AzureOpenAIAdapter
from .baidu import BaiduAdapter
from .base import ProviderAdapter
from .google_ai import GoogleAIAdapter
from .openai_compatible import (
    CustomAdapter,
    DeepseekAdapter,
    MoonshotAdapter,
    OpenAIAdapter,
    OpenRouterAdapter,
    XunfeiAdapter,
    ZhipuAdapter,
)
from .schemas import ProviderKind
from .tongyi import TongyiAdapter


class AdapterRegistry:
    """Holds one adapter instance per provider kind.

    Examples:
        registry = AdapterRegistry.default()
        adapter = registry.get(ProviderKind.DEEPSEEK)

        # Swap in a different implementation for one backend
        registry.register(MyGatewayAdapter())
    """

    def __init__(self) -> None:
        self.adapters: dict[ProviderKind, ProviderAdapter] = {}

    @classmethod
    def default(cls) -> AdapterRegistry:
        registry = cls()
        for adapter_cls in DEFAULT_ADAPTERS:
            registry.register(adapter_cls())
        return registry

    def register(self, adapter: ProviderAdapter) -> None:
        """Register (or replace) the adapter for ``adapter.kind``."""
        self.adapters[adapter.kind] = adapter

    def get(self, kind: ProviderKind | str) -> ProviderAdapter:
        kind = ProviderKind(kind)
        adapter = self.adapters.get(kind)
        if adapter is None:
            available = ", ".join(k.value for k in self.adapters)
            raise ValueError(f"No adapter for provider '{kind.value}'. Available: {available}")
        return adapter

    def list_providers(self) -> list[str]:
        return [kind.value for kind in self.adapters]

    def get_provider_info(self, kind: ProviderKind | str) -> dict[str, str | None]:
        """Defaults declared by the adapter, for display next to overrides."""
        adapter = self.get(kind)
        return {
            "provider": adapter.kind.value,
            "name": adapter.display_name,
            "endpoint": adapter.default_endpoint,
            "model": adapter.default_model,
            "api_version": adapter.default_api_version,
        }


DEFAULT_ADAPTERS: tuple[type[ProviderAdapter], ...] = (
    OpenAIAdapter,
    AnthropicAdapter,
    AzureOpenAIAdapter,
    GoogleAIAdapter,
    BaiduAdapter,
    XunfeiAdapter,
    ZhipuAdapter,
    MoonshotAdapter,
    DeepseekAdapter,
    OpenRouterAdapter,
    TongyiAdapter,
    CustomAdapter,
)
