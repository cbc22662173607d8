"""Provider adapters and the models they exchange."""

from .anthropic_adapter import AnthropicAdapter
from .azure_openai import AzureOpenAIAdapter
from .baidu import BaiduAdapter
from .base import ProviderAdapter, WireRequest
from .connection_pool import HTTPConnectionPool
from .google_ai import GoogleAIAdapter
from .openai_compatible import (
    CustomAdapter,
    DeepseekAdapter,
    MoonshotAdapter,
    OpenAIAdapter,
    OpenAICompatibleAdapter,
    OpenRouterAdapter,
    XunfeiAdapter,
    ZhipuAdapter,
)
from .registry import AdapterRegistry
from .schemas import (
    ConnectionTestResult,
    GeneratedProperties,
    GenerationRequest,
    MergeResult,
    ProviderConfig,
    ProviderKind,
    RequestKind,
)
from .tongyi import TongyiAdapter

__all__ = [
    "AdapterRegistry",
    "AnthropicAdapter",
    "AzureOpenAIAdapter",
    "BaiduAdapter",
    "ConnectionTestResult",
    "CustomAdapter",
    "DeepseekAdapter",
    "GeneratedProperties",
    "GenerationRequest",
    "GoogleAIAdapter",
    "HTTPConnectionPool",
    "MergeResult",
    "MoonshotAdapter",
    "OpenAIAdapter",
    "OpenAICompatibleAdapter",
    "OpenRouterAdapter",
    "ProviderAdapter",
    "ProviderConfig",
    "ProviderKind",
    "RequestKind",
    "TongyiAdapter",
    "WireRequest",
    "XunfeiAdapter",
    "ZhipuAdapter",
]
