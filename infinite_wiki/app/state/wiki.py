"""State machine behind the definition browser.

A topic load clears the previous definition, art and concepts, then starts
three fetches on a small thread pool. Each fetch remembers the generation it
was started for; once the topic changes again, anything it produces is
dropped instead of applied. The remote calls themselves are not cancelled.
"""

from __future__ import annotations

import concurrent.futures
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Tuple

from infinite_wiki.core.models import AsciiArtData, CulturalConcept
from infinite_wiki.core.topics import (
    clean_word,
    create_fallback_art,
    pick_random_topic,
    same_topic,
)

from ..services.errors import describe_error
from ..services.gemini_service import ERROR_PREFIX, GeminiService
from ...utils.observability import get_logger
from ...utils.telemetry import StructuredTelemetry

MODES = ("wiki", "miner", "writer")


@dataclass(frozen=True)
class WikiSnapshot:
    """Immutable view of the controller state handed to renderers."""

    topic: str
    mode: str = "wiki"
    generation: int = 0
    content: str = ""
    is_loading: bool = False
    error: Optional[str] = None
    art: Optional[AsciiArtData] = None
    art_received_at: Optional[float] = None
    concepts: Tuple[CulturalConcept, ...] = ()
    concepts_loading: bool = False
    concepts_error: Optional[str] = None
    generation_time_ms: Optional[float] = None

    @property
    def art_pending(self) -> bool:
        return self.mode == "wiki" and self.art is None and self.generation > 0

    @property
    def settled(self) -> bool:
        """True once the definition, art and concepts have all finished."""

        return not self.is_loading and not self.concepts_loading and not self.art_pending


SnapshotListener = Callable[[WikiSnapshot], None]


class WikiController:
    """Owns the wiki-mode state for one user session."""

    def __init__(
        self,
        service: GeminiService,
        *,
        initial_topic: str = "Hypertext",
        random_from_model: bool = False,
        listener: Optional[SnapshotListener] = None,
        telemetry: Optional[StructuredTelemetry] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        time_fn: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.service = service
        self.random_from_model = random_from_model
        self.telemetry = telemetry or StructuredTelemetry()
        self._listener = listener
        self._time_fn = time_fn
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=3, thread_name_prefix="wiki-fetch"
        )
        self._lock = threading.RLock()
        self._settled = threading.Condition(self._lock)
        self._state = WikiSnapshot(topic=initial_topic)
        self._logger = get_logger(__name__).bind(component="wiki_controller")

    # State access ----------------------------------------------------------
    def snapshot(self) -> WikiSnapshot:
        with self._lock:
            return self._state

    @property
    def topic(self) -> str:
        return self.snapshot().topic

    @property
    def mode(self) -> str:
        return self.snapshot().mode

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current generation settles; False on timeout."""

        with self._settled:
            return self._settled.wait_for(lambda: self._state.settled, timeout=timeout)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def _update(self, generation: Optional[int] = None, **changes: Any) -> bool:
        """Apply ``changes`` unless ``generation`` has been superseded."""

        with self._lock:
            if generation is not None and generation != self._state.generation:
                return False
            self._state = replace(self._state, **changes)
            snapshot = self._state
            listener = self._listener
            self._settled.notify_all()
        if listener is not None:
            listener(snapshot)
        return True

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._state.generation and self._state.mode == "wiki"

    # Transitions -----------------------------------------------------------
    def load(self, topic: Optional[str] = None) -> int:
        """Start fetching everything for ``topic`` (default: the current one)."""

        with self._lock:
            topic = (topic or self._state.topic).strip()
            generation = self._state.generation + 1
            superseded = self._state.is_loading or self._state.concepts_loading
            self._state = WikiSnapshot(
                topic=topic,
                mode="wiki",
                generation=generation,
                is_loading=True,
                concepts_loading=True,
            )
            # The trace must change together with the generation.
            trace_id = self.telemetry.start_trace(topic)
            if superseded:
                self.telemetry.increment("fetch.superseded")
            snapshot = self._state
            listener = self._listener
        if listener is not None:
            listener(snapshot)

        started = self._time_fn()
        self._logger.info(
            "Loading topic",
            context={"topic": topic, "generation": generation},
        )

        self._executor.submit(self._fetch_art, topic, generation, trace_id)
        self._executor.submit(self._fetch_concepts, topic, generation, trace_id)
        self._executor.submit(self._fetch_definition, topic, generation, trace_id, started)
        return generation

    def set_topic(self, topic: str) -> Optional[int]:
        new_topic = (topic or "").strip()
        if not new_topic:
            return None
        if same_topic(new_topic, self.topic) and self.mode == "wiki" and self.snapshot().generation:
            return None
        return self.load(new_topic)

    def handle_search(self, query: str) -> Optional[int]:
        return self.set_topic(query)

    def handle_word_click(self, word: str) -> Optional[int]:
        """Navigate to a clicked word once its punctuation is stripped."""

        return self.set_topic(clean_word(word))

    def handle_random(self) -> int:
        current = self.topic
        topic: Optional[str] = None
        if self.random_from_model:
            try:
                topic = clean_word(self.service.get_random_word())
            except Exception as exc:
                self._logger.warning(
                    "Random word from model failed; using curated list",
                    context={"error": describe_error(exc)},
                )
            if topic and same_topic(topic, current):
                topic = None
        if not topic:
            topic = pick_random_topic(current)
        return self.load(topic)

    def set_mode(self, mode: str) -> Optional[int]:
        """Switch views; entering the wiki view reloads the current topic."""

        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}")
        if mode == "wiki":
            return self.load()
        with self._lock:
            # Leaving the wiki view supersedes any in-flight fetch.
            self._state = replace(
                self._state,
                mode=mode,
                generation=self._state.generation + 1,
                is_loading=False,
                concepts_loading=False,
            )
            snapshot = self._state
            listener = self._listener
            self._settled.notify_all()
        if listener is not None:
            listener(snapshot)
        return None

    # Fetches -----------------------------------------------------------------
    def _fetch_art(self, topic: str, generation: int, trace_id: int) -> None:
        with self.telemetry.timer("art.generate", {"topic": topic}, trace_id=trace_id):
            try:
                art = self.service.generate_ascii_art(topic)
            except Exception as exc:
                if not self._is_current(generation):
                    return
                self._logger.error(
                    "Failed to generate ASCII art",
                    context={"topic": topic, "error": describe_error(exc)},
                )
                self.telemetry.increment("art.fallback")
                art = create_fallback_art(topic)
        self._update(generation, art=art, art_received_at=self._time_fn())

    def _fetch_concepts(self, topic: str, generation: int, trace_id: int) -> None:
        with self.telemetry.timer("concepts.fetch", {"topic": topic}, trace_id=trace_id):
            try:
                concepts = self.service.get_cross_cultural_concepts(topic)
            except Exception as exc:
                if self._is_current(generation):
                    self._logger.error(
                        "Failed to get cultural concepts",
                        context={"topic": topic, "error": describe_error(exc)},
                    )
                self._update(
                    generation,
                    concepts_loading=False,
                    concepts_error=describe_error(exc),
                )
                return
        self._update(generation, concepts=tuple(concepts), concepts_loading=False)

    def _fetch_definition(
        self,
        topic: str,
        generation: int,
        trace_id: int,
        started: float,
    ) -> None:
        content = ""
        error: Optional[str] = None
        stream = self.service.stream_definition(topic)
        with self.telemetry.timer("definition.stream", {"topic": topic}, trace_id=trace_id) as meta:
            try:
                for chunk in stream:
                    if not self._is_current(generation):
                        break
                    if chunk.startswith(ERROR_PREFIX):
                        raise RuntimeError(chunk)
                    content += chunk
                    self.telemetry.increment("definition.chunks")
                    self._update(generation, content=content)
            except Exception as exc:
                error = describe_error(exc)
                if self._is_current(generation):
                    self._logger.error(
                        "Definition stream failed",
                        context={"topic": topic, "error": error},
                    )
            finally:
                close = getattr(stream, "close", None)
                if callable(close):
                    close()
            meta["chars"] = len(content)

        elapsed_ms = (self._time_fn() - started) * 1000.0
        if error is not None:
            self._update(
                generation,
                error=error,
                content="",
                is_loading=False,
                generation_time_ms=elapsed_ms,
            )
        else:
            self._update(generation, is_loading=False, generation_time_ms=elapsed_ms)


__all__ = ["WikiController", "WikiSnapshot", "SnapshotListener", "MODES"]
