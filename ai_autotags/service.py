"""AI orchestration service.

Owns the result cache, picks the adapter for the configured provider, sends
the request through the shared connection pool and turns the model's answer
into tags or properties. Provider and parse failures stop here: callers get
an empty result plus a readable ``last_error``, never an exception.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .cache import MemoryCache, ResultCache, make_cache_key
from .errors import InputError, ParseError, ProviderError, ProviderErrorKind
from .models.base import ProviderAdapter
from .models.connection_pool import HTTPConnectionPool
from .models.prompts import DEFAULT_MAX_INPUT_CHARS, truncate
from .models.registry import AdapterRegistry
from .models.schemas import (
    ConnectionTestResult,
    GeneratedProperties,
    GenerationRequest,
    ProviderConfig,
)
from .parsing import parse_properties, parse_tags
from .telemetry import trace_span

logger = logging.getLogger(__name__)

CONNECTION_TEST_TEXT = "Connection test: a short note about testing."


class AIService:
    """Generates tags and properties for note text.

    Examples:
        service = AIService(ProviderConfig(provider="deepseek", api_key="sk-..."))
        tags = await service.fetch_tags("A tutorial on Kubernetes operators")
        if not tags:
            print(service.last_error)
    """

    def __init__(
        self,
        config: ProviderConfig,
        tag_count: int = 5,
        cache: ResultCache | None = None,
        enable_cache: bool = True,
        registry: AdapterRegistry | None = None,
        connection_pool: HTTPConnectionPool | None = None,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ):
        self.config = config
        self.tag_count = tag_count
        self.cache: ResultCache = cache if cache is not None else MemoryCache()
        self.enable_cache = enable_cache
        self.registry = registry or AdapterRegistry.default()
        self.pool = connection_pool or HTTPConnectionPool()
        self.max_input_chars = max_input_chars
        self.last_error: str | None = None

    @property
    def adapter(self) -> ProviderAdapter:
        return self.registry.get(self.config.provider)

    async def update_config(
        self, config: ProviderConfig, tag_count: int | None = None
    ) -> bool:
        """Switch provider settings; drops cached results if anything changed.

        Returns:
            True if the cache was invalidated
        """
        changed = config != self.config or (
            tag_count is not None and tag_count != self.tag_count
        )
        self.config = config
        if tag_count is not None:
            self.tag_count = tag_count
        if changed:
            removed = await self.cache.invalidate_all()
            logger.info(
                f"Provider configuration changed to {config.provider.value}, "
                f"dropped {removed} cached results"
            )
        return changed

    async def fetch_tags(self, text: str) -> list[str]:
        """Generate tags for ``text``.

        Returns an empty list when generation fails; ``last_error`` says why.

        Raises:
            InputError: If ``text`` is empty
        """
        properties = await self._generate(text, wants_all_properties=False)
        return properties.tags if properties else []

    async def fetch_properties(self, text: str) -> GeneratedProperties | None:
        """Generate the full property set for ``text``.

        Raises:
            InputError: If ``text`` is empty
        """
        return await self._generate(text, wants_all_properties=True)

    async def test_connection(self) -> ConnectionTestResult:
        """Send a minimal request to the active provider."""
        adapter = self.adapter
        request = GenerationRequest(text=CONNECTION_TEST_TEXT, tag_count=1)
        try:
            raw = await self._call(adapter, request)
        except ProviderError as e:
            logger.warning(f"Connection test failed: {e}")
            return ConnectionTestResult(success=False, message=e.user_message())

        logger.info(f"Connection test succeeded, model answered {raw[:40]!r}")
        return ConnectionTestResult(
            success=True,
            message=f"Connected to {adapter.describe(self.config)}",
        )

    async def _generate(
        self, text: str, wants_all_properties: bool
    ) -> GeneratedProperties | None:
        if not text or not text.strip():
            raise InputError("Text to analyze is empty")

        request = GenerationRequest(
            text=truncate(text, self.max_input_chars),
            tag_count=self.tag_count,
            wants_all_properties=wants_all_properties,
        )
        adapter = self.adapter
        key = make_cache_key(
            text,
            request.kind,
            self.config,
            self.tag_count,
            model=self.config.model_name or adapter.default_model,
        )

        if self.enable_cache:
            cached = await self.cache.get(key)
            if cached is not None:
                self.last_error = None
                return cached

        try:
            raw = await self._call(adapter, request)
            if wants_all_properties:
                result = parse_properties(raw, self.tag_count)
            else:
                result = GeneratedProperties(tags=parse_tags(raw, self.tag_count))
        except ProviderError as e:
            logger.error(f"{adapter.kind.value} request failed: {e}")
            self.last_error = e.user_message()
            return None
        except ParseError as e:
            logger.warning(f"Could not parse {adapter.kind.value} output: {e}")
            self.last_error = f"Could not understand the model's answer ({e})"
            return None

        self.last_error = None
        if self.enable_cache and result.is_usable:
            await self.cache.put(key, result)
        return result

    async def _call(self, adapter: ProviderAdapter, request: GenerationRequest) -> str:
        """One HTTP round trip, bounded by the configured timeout."""
        wire = adapter.build_request(request, self.config)
        timeout = self.config.timeout_seconds

        with trace_span(
            "provider.generate",
            provider=adapter.kind.value,
            request_kind=request.kind.value,
        ):
            try:
                response = await asyncio.wait_for(self.pool.send(wire, timeout), timeout)
            except (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException) as e:
                raise ProviderError(
                    ProviderErrorKind.TIMEOUT,
                    f"no answer within {self.config.timeout_ms} ms",
                ) from e
            except httpx.HTTPError as e:
                raise ProviderError(ProviderErrorKind.NETWORK_ERROR, str(e) or type(e).__name__) from e

        return adapter.parse_response(response)

    async def close(self) -> None:
        await self.pool.close()
