"""Tests for settings loading, saved configurations and validation."""

from unittest.mock import patch

import pytest

from ai_autotags.config_validator import ConfigurationError, validate_settings
from ai_autotags.models.schemas import ProviderKind
from ai_autotags.settings import AppSettings
from ai_autotags.triggers import AutoTrigger


def test_defaults():
    with patch.dict("os.environ", {}, clear=True):
        settings = AppSettings(_env_file=None)

    assert settings.provider is ProviderKind.OPENAI
    assert settings.tag_count == 5
    assert settings.timeout_ms == 30000
    assert settings.enable_cache is True
    assert settings.cache_ttl_ms == 3600000
    assert settings.generate_properties is False
    assert settings.auto_execute_trigger is AutoTrigger.ON_SAVE
    assert settings.saved_configurations == []


def test_environment_overrides():
    with patch.dict(
        "os.environ",
        {
            "AUTOTAGS_PROVIDER": "deepseek",
            "AUTOTAGS_API_KEY": "sk-test",
            "AUTOTAGS_TAG_COUNT": "3",
            "AUTOTAGS_CACHE_BACKEND": "redis",
            "AUTOTAGS_AUTO_EXECUTE_TRIGGER": "after-modify",
        },
        clear=True,
    ):
        settings = AppSettings(_env_file=None)

    assert settings.provider is ProviderKind.DEEPSEEK
    assert settings.api_key == "sk-test"
    assert settings.tag_count == 3
    assert settings.cache_backend == "redis"
    assert settings.auto_execute_trigger is AutoTrigger.AFTER_MODIFY


def test_saved_configurations_from_json_env():
    with patch.dict(
        "os.environ",
        {
            "AUTOTAGS_SAVED_CONFIGURATIONS": (
                '[{"name": "work", "provider": "anthropic", "api_key": "sk-ant"}]'
            ),
        },
        clear=True,
    ):
        settings = AppSettings(_env_file=None)

    assert len(settings.saved_configurations) == 1
    assert settings.saved_configurations[0].provider is ProviderKind.ANTHROPIC


def test_provider_config_maps_blank_overrides_to_defaults():
    settings = AppSettings(_env_file=None, provider="zhipu", api_key="k", model_name="  ")

    config = settings.provider_config()

    assert config.provider is ProviderKind.ZHIPU
    assert config.model_name is None
    assert config.endpoint is None


def test_from_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "provider: google-ai\napi_key: g-key\ntag_count: 4\ngenerate_properties: true\n",
        encoding="utf-8",
    )

    with patch.dict("os.environ", {}, clear=True):
        settings = AppSettings.from_yaml(path)

    assert settings.provider is ProviderKind.GOOGLE_AI
    assert settings.tag_count == 4
    assert settings.generate_properties is True


def test_from_yaml_rejects_non_mapping(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        AppSettings.from_yaml(path)


class TestSavedConfigurations:
    def test_save_load_delete(self):
        settings = AppSettings(
            _env_file=None, provider="moonshot", api_key="ms-key", model_name="moonshot-v1-32k"
        )
        settings.save_configuration("kimi")

        settings.provider = ProviderKind.OPENAI
        settings.api_key = "other"
        settings.model_name = ""

        loaded = settings.load_configuration("kimi")

        assert loaded.name == "kimi"
        assert settings.provider is ProviderKind.MOONSHOT
        assert settings.api_key == "ms-key"
        assert settings.model_name == "moonshot-v1-32k"

        assert settings.delete_configuration("kimi") is True
        assert settings.delete_configuration("kimi") is False
        assert settings.saved_configurations == []

    def test_same_name_replaces(self):
        settings = AppSettings(_env_file=None, api_key="one")
        settings.save_configuration("main")
        settings.api_key = "two"
        settings.save_configuration("main")

        assert len(settings.saved_configurations) == 1
        assert settings.saved_configurations[0].api_key == "two"

    def test_load_unknown(self):
        settings = AppSettings(_env_file=None)

        with pytest.raises(KeyError):
            settings.load_configuration("missing")

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(_env_file=None).save_configuration("  ")


class TestValidation:
    def test_valid(self):
        validate_settings(AppSettings(_env_file=None, api_key="sk-test"))

    def test_missing_api_key(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = AppSettings(_env_file=None)

        with pytest.raises(ConfigurationError) as exc_info:
            validate_settings(settings)

        assert "API_KEY must be set for provider 'openai'" in str(exc_info.value)

    def test_custom_provider_needs_endpoint_and_model(self):
        settings = AppSettings(_env_file=None, provider="custom", api_key="k")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_settings(settings)

        message = str(exc_info.value)
        assert "API_ENDPOINT must be set" in message
        assert "MODEL_NAME must be set" in message

    def test_azure_needs_endpoint(self):
        settings = AppSettings(_env_file=None, provider="azure-openai", api_key="k")

        with pytest.raises(ConfigurationError, match="API_ENDPOINT must be set"):
            validate_settings(settings)

    def test_collects_every_problem(self):
        settings = AppSettings(
            _env_file=None,
            api_key="k",
            tag_count=0,
            timeout_ms=0,
            cache_backend="redis",
            redis_url="",
        )

        with pytest.raises(ConfigurationError) as exc_info:
            validate_settings(settings)

        message = str(exc_info.value)
        assert "TAG_COUNT must be between 1 and 10" in message
        assert "TIMEOUT_MS must be > 0" in message
        assert "REDIS_URL must be set" in message

    def test_logfire_cloud_needs_token(self):
        settings = AppSettings(
            _env_file=None, api_key="k", telemetry_enabled=True, logfire_send_to_cloud=True
        )

        with pytest.raises(ConfigurationError, match="LOGFIRE_TOKEN"):
            validate_settings(settings)
