"""Configuration validation.

Checks the settings before any provider is called so a misconfiguration
fails with one message listing every problem.
"""

import logging

from ai_autotags.models.registry import AdapterRegistry
from ai_autotags.models.schemas import ProviderKind
from ai_autotags.settings import AppSettings

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


def validate_settings(
    settings: AppSettings, registry: AdapterRegistry | None = None
) -> None:
    """Validate all critical configuration settings.

    Args:
        settings: Settings instance to validate
        registry: Adapters whose defaults fill unset endpoints and models

    Raises:
        ConfigurationError: If any validation check fails
    """
    errors: list[str] = []
    registry = registry or AdapterRegistry.default()
    provider = settings.provider.value

    # Validate provider configuration
    if not settings.api_key:
        errors.append(f"API_KEY must be set for provider '{provider}'")

    try:
        adapter = registry.get(settings.provider)
    except ValueError as e:
        errors.append(str(e))
    else:
        if not settings.api_endpoint and not adapter.default_endpoint:
            errors.append(f"API_ENDPOINT must be set for provider '{provider}'")
        if not settings.model_name and not adapter.default_model:
            errors.append(f"MODEL_NAME must be set for provider '{provider}'")

    if settings.provider is ProviderKind.AZURE_OPENAI and settings.api_endpoint:
        if not settings.api_endpoint.startswith(("http://", "https://")):
            errors.append(
                f"API_ENDPOINT must be an http(s) URL, got '{settings.api_endpoint}'"
            )

    # Validate generation limits
    if not 1 <= settings.tag_count <= 10:
        errors.append(f"TAG_COUNT must be between 1 and 10, got {settings.tag_count}")

    if settings.timeout_ms <= 0:
        errors.append(f"TIMEOUT_MS must be > 0, got {settings.timeout_ms}")

    if settings.max_existing_tags <= 0:
        errors.append(
            f"MAX_EXISTING_TAGS must be > 0, got {settings.max_existing_tags}"
        )

    if settings.max_input_chars <= 0:
        errors.append(f"MAX_INPUT_CHARS must be > 0, got {settings.max_input_chars}")

    # Validate cache configuration
    if settings.enable_cache:
        if settings.cache_ttl_ms <= 0:
            errors.append(f"CACHE_TTL_MS must be > 0, got {settings.cache_ttl_ms}")
        if settings.cache_backend == "redis" and not settings.redis_url:
            errors.append("REDIS_URL must be set when CACHE_BACKEND is 'redis'")

    # Validate telemetry configuration
    if settings.telemetry_enabled:
        if settings.logfire_send_to_cloud and not settings.logfire_token:
            errors.append(
                "LOGFIRE_TOKEN must be set when LOGFIRE_SEND_TO_CLOUD is true"
            )

    # Raise error if any validations failed
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(
            f"  - {error}" for error in errors
        )
        raise ConfigurationError(error_msg)

    logger.info("Configuration validation passed")
