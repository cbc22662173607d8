"""Telemetry and observability using Pydantic Logfire."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import logfire
from pydantic import BaseModel

logger = logging.getLogger(__name__)

_configured = False


class TelemetryConfig(BaseModel):
    """Configuration for telemetry."""

    enabled: bool = False
    service_name: str = "ai-autotags"
    environment: str = "development"
    logfire_token: str | None = None
    send_to_logfire: bool = False  # Set to True to send to Logfire cloud


def configure_telemetry(config: TelemetryConfig) -> None:
    """Configure Logfire telemetry.

    Spans from ``trace_span`` are only recorded after this has run with
    ``enabled=True``.
    """
    global _configured

    if not config.enabled:
        logger.info("Telemetry disabled")
        _configured = False
        return

    logfire.configure(
        service_name=config.service_name,
        environment=config.environment,
        token=config.logfire_token if config.send_to_logfire else None,
        send_to_logfire=config.send_to_logfire,
        console=logfire.ConsoleOptions(
            colors="auto",
            verbose=config.environment == "development",
        ),
    )
    _configured = True

    logger.info(
        f"Logfire telemetry configured: service={config.service_name}, "
        f"env={config.environment}, cloud={'enabled' if config.send_to_logfire else 'disabled'}"
    )


def instrument_all() -> None:
    """Auto-instrument HTTPX (provider calls) and Redis (cache).

    Call after ``configure_telemetry()``.
    """
    if not _configured:
        return

    try:
        logfire.instrument_httpx()
        logger.debug("Logfire instrumentation enabled for HTTPX")
    except ImportError as e:
        logger.warning(f"Could not instrument HTTPX: {e}")

    try:
        logfire.instrument_redis()
        logger.debug("Logfire instrumentation enabled for Redis")
    except ImportError as e:
        logger.warning(f"Could not instrument Redis: {e}")


def telemetry_enabled() -> bool:
    return _configured


@contextmanager
def trace_span(name: str, **attrs: Any) -> Iterator[None]:
    """Create a telemetry span for tracing operations.

    Args:
        name: Span name
        **attrs: Additional span attributes
    """
    if not _configured:
        yield
        return

    with logfire.span(name, **attrs):
        yield
