"""Remote model gateway."""

from .errors import (
    ConfigurationError,
    GeminiServiceError,
    GenerationError,
    MalformedResponseError,
)
from .gemini_service import GeminiService

__all__ = [
    "ConfigurationError",
    "GeminiService",
    "GeminiServiceError",
    "GenerationError",
    "MalformedResponseError",
]
