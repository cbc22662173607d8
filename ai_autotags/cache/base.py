"""Cache interface and key generation."""

from __future__ import annotations

import hashlib
import json
from typing import Protocol

from ..models.schemas import GeneratedProperties, ProviderConfig, RequestKind


class ResultCache(Protocol):
    """Async key/value store for generation results.

    ``get`` returns ``None`` for both missing and expired keys.
    """

    async def get(self, key: str) -> GeneratedProperties | None: ...

    async def put(self, key: str, value: GeneratedProperties) -> None: ...

    async def invalidate_all(self) -> int: ...

    def get_stats(self) -> dict: ...


def make_cache_key(
    text: str,
    request_kind: RequestKind,
    config: ProviderConfig,
    tag_count: int,
    model: str | None = None,
) -> str:
    """Deterministic fingerprint of everything that shapes a result.

    The API key and timeout are left out: they change how a request is sent,
    not what comes back.
    """
    key_parts = [
        text,
        request_kind.value,
        config.provider.value,
        json.dumps(
            {
                "model": model or config.model_name,
                "endpoint": config.endpoint,
                "api_version": config.api_version,
                "tag_count": tag_count,
            },
            sort_keys=True,
        ),
    ]
    key_str = "\x1f".join(key_parts)
    return hashlib.sha256(key_str.encode("utf-8")).hexdigest()
