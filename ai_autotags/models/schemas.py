"""Request, config and result models shared by adapters and the service."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..tagging import unique_tags


class ProviderKind(str, Enum):
    """Closed set of supported AI backends."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    AZURE_OPENAI = "azure-openai"
    GOOGLE_AI = "google-ai"
    BAIDU = "baidu"
    XUNFEI = "xunfei"
    ZHIPU = "zhipu"
    MOONSHOT = "moonshot"
    DEEPSEEK = "deepseek"
    OPENROUTER = "openrouter"
    TONGYI = "tongyi"
    CUSTOM = "custom"


class RequestKind(str, Enum):
    TAGS = "tags"
    PROPERTIES = "properties"


class GenerationRequest(BaseModel):
    """Generic request every adapter translates into its wire format."""

    text: str
    tag_count: int = Field(default=5, ge=1, le=10)
    wants_all_properties: bool = False

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Text cannot be empty")
        return v

    @property
    def kind(self) -> RequestKind:
        return RequestKind.PROPERTIES if self.wants_all_properties else RequestKind.TAGS


class ProviderConfig(BaseModel):
    """Connection settings for the active provider.

    Empty overrides are normalized to ``None`` so adapters fall back to their
    own defaults.
    """

    model_config = ConfigDict(
        frozen=True, str_strip_whitespace=True, protected_namespaces=()
    )

    provider: ProviderKind = ProviderKind.OPENAI
    api_key: str = ""
    endpoint: str | None = None
    model_name: str | None = None
    api_version: str | None = None
    timeout_ms: int = Field(default=30000, gt=0)

    @field_validator("endpoint", "model_name", "api_version", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class GeneratedProperties(BaseModel):
    """Structured result of a generation call."""

    tags: list[str] = Field(default_factory=list)
    title: str | None = None
    author: str | None = None
    date: str | None = None
    source: str | None = None
    url: str | None = None
    aliases: list[str] = Field(default_factory=list)
    summary: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        elif not isinstance(v, (list, tuple)):
            v = [str(v)]
        return unique_tags(v)

    @field_validator("aliases", mode="before")
    @classmethod
    def clean_aliases(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        elif not isinstance(v, (list, tuple)):
            v = [str(v)]
        seen: set[str] = set()
        aliases = []
        for item in v:
            alias = str(item).strip()
            if alias and alias.casefold() not in seen:
                seen.add(alias.casefold())
                aliases.append(alias)
        return aliases

    @field_validator("title", "author", "date", "source", "url", "summary", mode="before")
    @classmethod
    def blank_scalar_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def is_usable(self) -> bool:
        return bool(self.tags)


class ConnectionTestResult(BaseModel):
    success: bool
    message: str


class MergeResult(BaseModel):
    """Outcome of one frontmatter merge."""

    updated: bool
    message: str
