"""Provider error taxonomy.

The search collaborator never sees SDK exceptions: adapters translate them
into these classes. ``retryable`` says whether the retry helper may try
again; everything else fails the search at once (and the orchestrator
falls back to synthetic candidates).
"""

from typing import ClassVar

__all__ = [
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ContentFilterError",
    "ContextLengthError",
    "TransientError",
    "RETRYABLE_ERRORS",
]


class ProviderError(Exception):
    """Any failure talking to the LLM provider."""

    retryable: ClassVar[bool] = False


class RateLimitError(ProviderError):
    """Provider throttled the request (HTTP 429).

    Attributes:
        retry_after_seconds: Wait suggested by the provider, when it sent one.
    """

    retryable = True

    def __init__(self, message: str, retry_after_seconds: float | None = None):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class AuthenticationError(ProviderError):
    """Missing, invalid or revoked API key."""


class ContentFilterError(ProviderError):
    """Prompt or completion blocked by the provider's safety filter."""


class ContextLengthError(ProviderError):
    """Prompt too long for the routed model."""


class TransientError(ProviderError):
    """Network failure, timeout or 5xx."""

    retryable = True


RETRYABLE_ERRORS: tuple[type[ProviderError], ...] = (RateLimitError, TransientError)
