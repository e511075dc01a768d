"""State for the script writer view."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Optional

from infinite_wiki.core.models import ScriptResult

from ..services.errors import describe_error
from ..services.gemini_service import GeminiService
from ...utils.observability import get_logger

DEFAULT_WORD = "love"
DEFAULT_LANGUAGE = "Hebrew"


@dataclass(frozen=True)
class WriterSnapshot:
    word: str = DEFAULT_WORD
    language: str = DEFAULT_LANGUAGE
    result: Optional[ScriptResult] = None
    is_loading: bool = False
    error: Optional[str] = None


class WriterController:
    def __init__(self, service: GeminiService) -> None:
        self.service = service
        self._lock = threading.Lock()
        self._state = WriterSnapshot()
        self._logger = get_logger(__name__).bind(component="writer_controller")

    def snapshot(self) -> WriterSnapshot:
        with self._lock:
            return self._state

    def write(self, word: str, language: str) -> WriterSnapshot:
        """Look up ``word`` in ``language``; blank input or a busy view is a no-op."""

        word = (word or "").strip()
        language = (language or "").strip()
        with self._lock:
            if not word or not language or self._state.is_loading:
                return self._state
            self._state = WriterSnapshot(word=word, language=language, is_loading=True)

        try:
            result = self.service.get_script_for_word(word, language)
        except Exception as exc:
            message = describe_error(exc)
            self._logger.error(
                "Script lookup failed",
                context={"word": word, "language": language, "error": message},
            )
            with self._lock:
                self._state = replace(self._state, is_loading=False, error=message)
                return self._state

        with self._lock:
            self._state = replace(self._state, is_loading=False, result=result)
            return self._state


__all__ = ["WriterController", "WriterSnapshot", "DEFAULT_WORD", "DEFAULT_LANGUAGE"]
