"""Error taxonomy for the tagging pipeline."""

from __future__ import annotations

from enum import Enum


class AutoTagsError(Exception):
    """Base class for all pipeline errors."""


class InputError(AutoTagsError):
    """Raised when a request is rejected before any network call."""


class ProviderErrorKind(str, Enum):
    AUTH_FAILURE = "AuthFailure"
    RATE_LIMITED = "RateLimited"
    TIMEOUT = "Timeout"
    MALFORMED_RESPONSE = "MalformedResponse"
    NETWORK_ERROR = "NetworkError"


_USER_MESSAGES = {
    ProviderErrorKind.AUTH_FAILURE: "Authentication failed, check the API key",
    ProviderErrorKind.RATE_LIMITED: "Rate limited by the provider, try again later",
    ProviderErrorKind.TIMEOUT: "The request timed out",
    ProviderErrorKind.MALFORMED_RESPONSE: "The provider returned an unexpected response",
    ProviderErrorKind.NETWORK_ERROR: "Could not reach the provider",
}


class ProviderError(AutoTagsError):
    """Raised by adapters and the HTTP layer when a provider call fails."""

    def __init__(self, kind: ProviderErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    def user_message(self) -> str:
        """Readable description safe to show outside the core."""
        message = _USER_MESSAGES[self.kind]
        if self.detail:
            return f"{message} ({self.detail})"
        return message


class ParseError(AutoTagsError):
    """Raised when model output cannot be interpreted, even heuristically."""


class FrontmatterError(AutoTagsError):
    """Raised when an existing frontmatter block cannot be parsed."""
