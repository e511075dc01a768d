"""Error taxonomy raised by the Gemini gateway."""

from __future__ import annotations

from infinite_wiki.core.parsing import MalformedResponseError

MISSING_KEY_MESSAGE = "API_KEY is not configured."


class GeminiServiceError(RuntimeError):
    """Base class for gateway failures surfaced to the controllers."""


class ConfigurationError(GeminiServiceError):
    """No API credential is configured; raised before any network attempt."""

    def __init__(self, message: str = MISSING_KEY_MESSAGE) -> None:
        super().__init__(message)


class GenerationError(GeminiServiceError):
    """A remote call or its validation failed; the message carries the operation prefix."""


def describe_error(error: BaseException | None) -> str:
    if error is None:
        return "An unknown error occurred."
    return str(error) or "An unknown error occurred."


__all__ = [
    "MISSING_KEY_MESSAGE",
    "GeminiServiceError",
    "ConfigurationError",
    "GenerationError",
    "MalformedResponseError",
    "describe_error",
]
