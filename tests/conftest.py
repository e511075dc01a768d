import concurrent.futures
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from infinite_wiki.core.models import AsciiArtData, CulturalConcept


class FakeResponse:
    def __init__(self, text: Optional[str]) -> None:
        self.text = text


class FakeModels:
    """Scripted stand-in for ``genai.Client().models``.

    ``responses`` feeds ``generate_content`` in order; ``stream`` feeds every
    ``generate_content_stream`` call. Exceptions in either list are raised at
    the matching point.
    """

    def __init__(
        self,
        responses: Optional[Iterable[Any]] = None,
        stream: Optional[Iterable[Any]] = None,
    ) -> None:
        self.responses: List[Any] = list(responses or [])
        self.stream_items: List[Any] = list(stream or [])
        self.calls: List[Dict[str, Any]] = []
        self.stream_calls: List[Dict[str, Any]] = []

    def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.responses:
            raise AssertionError("Unexpected generate_content call")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return FakeResponse(item)

    def generate_content_stream(self, *, model, contents, config):
        self.stream_calls.append({"model": model, "contents": contents, "config": config})
        items = list(self.stream_items)

        def _iterate():
            for item in items:
                if isinstance(item, BaseException):
                    raise item
                yield FakeResponse(item)

        return _iterate()

    @property
    def total_calls(self) -> int:
        return len(self.calls) + len(self.stream_calls)


class FakeClient:
    def __init__(self, models: FakeModels) -> None:
        self.models = models


class ImmediateExecutor(concurrent.futures.Executor):
    """Executor running submitted work inline, for deterministic ordering."""

    def submit(self, fn, /, *args, **kwargs):
        future: concurrent.futures.Future = concurrent.futures.Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)
        return future


class ScriptedService:
    """Controller-facing service double keyed by topic."""

    def __init__(
        self,
        *,
        chunks: Optional[Dict[str, List[str]]] = None,
        stream_error: Optional[Exception] = None,
        art: Optional[AsciiArtData] = None,
        art_error: Optional[Exception] = None,
        concepts: Optional[List[CulturalConcept]] = None,
        concepts_error: Optional[Exception] = None,
        random_word: Optional[str] = None,
        random_error: Optional[Exception] = None,
        gates: Optional[Dict[str, threading.Event]] = None,
        art_for: Optional[Dict[str, Any]] = None,
        concepts_for: Optional[Dict[str, List[CulturalConcept]]] = None,
        holds: Optional[Dict[str, threading.Event]] = None,
    ) -> None:
        self.chunks = chunks or {}
        self.stream_error = stream_error
        self.art = art or AsciiArtData(art="<*>")
        self.art_error = art_error
        self.concepts = concepts or []
        self.concepts_error = concepts_error
        self.random_word = random_word
        self.random_error = random_error
        self.gates = gates or {}
        # Per-topic art (or an exception to raise) and concepts.
        self.art_for = art_for or {}
        self.concepts_for = concepts_for or {}
        # Art and concept calls for these topics wait on the event first.
        self.holds = holds or {}
        self.streamed: List[str] = []
        self.yielded: List[str] = []

    def stream_definition(self, topic: str):
        self.streamed.append(topic)
        for index, chunk in enumerate(self.chunks.get(topic, [f"{topic} is a thing."])):
            gate = self.gates.get(topic)
            if gate is not None and index > 0:
                gate.wait(timeout=5)
            self.yielded.append(chunk)
            yield chunk
        if self.stream_error is not None:
            yield f"Error: Could not generate content for \"{topic}\". {self.stream_error}"
            raise self.stream_error

    def _hold(self, topic: str) -> None:
        hold = self.holds.get(topic)
        if hold is not None:
            hold.wait(timeout=5)

    def generate_ascii_art(self, topic: str) -> AsciiArtData:
        self._hold(topic)
        art = self.art_for.get(topic, self.art)
        if isinstance(art, Exception):
            raise art
        if self.art_error is not None:
            raise self.art_error
        return art

    def get_cross_cultural_concepts(self, topic: str) -> List[CulturalConcept]:
        self._hold(topic)
        if self.concepts_error is not None:
            raise self.concepts_error
        return list(self.concepts_for.get(topic, self.concepts))

    def get_random_word(self) -> str:
        if self.random_error is not None:
            raise self.random_error
        return self.random_word or ""


@pytest.fixture
def fake_models() -> FakeModels:
    return FakeModels()


@pytest.fixture
def immediate_executor() -> ImmediateExecutor:
    return ImmediateExecutor()
