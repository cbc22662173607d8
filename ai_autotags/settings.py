from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.schemas import ProviderConfig, ProviderKind
from .telemetry import TelemetryConfig
from .triggers import AutoTrigger


class SavedAPIConfig(BaseModel):
    """Named provider profile the user can switch back to."""

    name: str
    provider: ProviderKind = ProviderKind.OPENAI
    api_key: str = ""
    api_endpoint: str = ""
    model_name: str = ""
    api_version: str = ""
    timeout_ms: int = 30000
    generate_properties: bool = False

    model_config = {"protected_namespaces": ()}


class AppSettings(BaseSettings):
    """Application configuration."""

    # Provider
    api_key: str = ""
    provider: ProviderKind = ProviderKind.OPENAI
    api_endpoint: str = ""
    model_name: str = ""
    api_version: str = ""
    timeout_ms: int = 30000

    # Generation
    tag_count: int = 5
    generate_properties: bool = False
    max_existing_tags: int = 5
    max_input_chars: int = 8000

    # Result cache
    enable_cache: bool = True
    cache_ttl_ms: int = 3600000
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "autotags:"

    # Automatic processing
    auto_execute: bool = False
    auto_execute_trigger: AutoTrigger = AutoTrigger.ON_SAVE
    auto_tagging_paused: bool = False

    saved_configurations: list[SavedAPIConfig] = Field(default_factory=list)

    # Telemetry settings (Logfire)
    telemetry_enabled: bool = False
    telemetry_service_name: str = "ai-autotags"
    telemetry_environment: str = "development"
    logfire_token: str | None = None
    logfire_send_to_cloud: bool = False

    model_config = SettingsConfigDict(
        env_prefix="AUTOTAGS_",
        env_parse_none_str="none",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    @field_validator("saved_configurations", mode="before")
    @classmethod
    def parse_saved_configurations(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            if not v.strip():
                return []
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                return []
            return parsed if isinstance(parsed, list) else [parsed]
        return v

    @field_validator("api_endpoint", "model_name", "api_version", mode="before")
    @classmethod
    def none_to_blank(cls, v):
        return "" if v is None else v

    @classmethod
    def from_yaml(cls, path: Path | str) -> AppSettings:
        """Load settings from a YAML file; environment values fill the gaps."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping of settings")
        return cls(**data)

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_ms / 1000

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider=self.provider,
            api_key=self.api_key,
            endpoint=self.api_endpoint,
            model_name=self.model_name,
            api_version=self.api_version,
            timeout_ms=self.timeout_ms,
        )

    def telemetry_config(self) -> TelemetryConfig:
        return TelemetryConfig(
            enabled=self.telemetry_enabled,
            service_name=self.telemetry_service_name,
            environment=self.telemetry_environment,
            logfire_token=self.logfire_token,
            send_to_logfire=self.logfire_send_to_cloud,
        )

    def save_configuration(self, name: str) -> SavedAPIConfig:
        """Store the current provider settings under ``name``.

        An existing profile with the same name is replaced.
        """
        name = name.strip()
        if not name:
            raise ValueError("Configuration name cannot be empty")

        saved = SavedAPIConfig(
            name=name,
            provider=self.provider,
            api_key=self.api_key,
            api_endpoint=self.api_endpoint,
            model_name=self.model_name,
            api_version=self.api_version,
            timeout_ms=self.timeout_ms,
            generate_properties=self.generate_properties,
        )
        self.saved_configurations = [
            c for c in self.saved_configurations if c.name != name
        ] + [saved]
        return saved

    def load_configuration(self, name: str) -> SavedAPIConfig:
        """Make a saved profile the active provider settings.

        Raises:
            KeyError: If no profile has that name
        """
        for saved in self.saved_configurations:
            if saved.name == name:
                self.provider = saved.provider
                self.api_key = saved.api_key
                self.api_endpoint = saved.api_endpoint
                self.model_name = saved.model_name
                self.api_version = saved.api_version
                self.timeout_ms = saved.timeout_ms
                self.generate_properties = saved.generate_properties
                return saved
        raise KeyError(f"No saved configuration named {name!r}")

    def delete_configuration(self, name: str) -> bool:
        remaining = [c for c in self.saved_configurations if c.name != name]
        deleted = len(remaining) != len(self.saved_configurations)
        self.saved_configurations = remaining
        return deleted
