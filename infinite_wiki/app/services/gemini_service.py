"""Gateway to the hosted Gemini models.

Every public operation checks for a credential before touching the network,
validates the loosely-typed JSON the model returns against the shape the
views expect, and converts any failure into a single prefixed
:class:`GenerationError`. Failures are also logged with structured context,
counted, and timed.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Union

from google import genai
from google.genai import types

from infinite_wiki.core.models import (
    AsciiArtData,
    CulturalConcept,
    PhonosemanticResult,
    ScriptResult,
    SearchFilters,
)
from infinite_wiki.core.parsing import (
    MalformedResponseError,
    parse_json,
    parse_json_array,
    parse_json_object,
)
from infinite_wiki.core import prompts

from ..config import GatewaySettings
from .errors import (
    MISSING_KEY_MESSAGE,
    ConfigurationError,
    GenerationError,
    describe_error,
)
from ...utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    start_span,
)

ERROR_PREFIX = "Error:"
STREAM_MISSING_KEY_FRAGMENT = (
    "Error: API_KEY is not configured. Please check your environment variables to continue."
)
ART_MAX_ATTEMPTS = 2

_STRING = types.Schema(type=types.Type.STRING)

CULTURAL_CONCEPTS_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "term": types.Schema(
                type=types.Type.STRING,
                description="The name of the cultural concept.",
            ),
            "culture": types.Schema(
                type=types.Type.STRING,
                description="The culture of origin for the concept (e.g., Japanese, Greek).",
            ),
        },
        required=["term", "culture"],
    ),
)

_RESULT_FIELDS = (
    "language",
    "script",
    "lemma",
    "romanization",
    "IPA",
    "gloss",
    "etymology",
    "source_url",
    "cultural_tags",
    "semantic_cluster",
)

PHONOSEMANTIC_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "results": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    name: (
                        types.Schema(type=types.Type.ARRAY, items=_STRING)
                        if name == "cultural_tags"
                        else _STRING
                    )
                    for name in _RESULT_FIELDS
                },
                required=list(_RESULT_FIELDS),
            ),
        ),
    },
)

SCRIPT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={name: _STRING for name in ("script", "romanization", "ipa", "note")},
    required=["script", "romanization", "ipa", "note"],
)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class GeminiService:
    """Builds prompts, calls the model and validates what comes back."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        client: Optional[Any] = None,
        settings: Optional[GatewaySettings] = None,
    ) -> None:
        self._api_key = (api_key or "").strip() or None
        self._client = client
        self.settings = settings or GatewaySettings()
        self._logger = get_logger(__name__).bind(component="gemini_service")

        self._metric_requests = create_counter(
            "gemini_requests_total",
            "Total requests issued to the Gemini API.",
            label_names=("operation",),
        )
        self._metric_failures = create_counter(
            "gemini_request_failures_total",
            "Gemini requests that raised or failed validation.",
            label_names=("operation",),
        )
        self._metric_duration = create_histogram(
            "gemini_request_seconds",
            "Latency of Gemini requests.",
            label_names=("operation",),
        )

        if not self._api_key:
            self._logger.error(
                "API_KEY environment variable is not set; the application will not be able "
                "to connect to the Gemini API."
            )

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    # Internal helpers ------------------------------------------------------
    def _require_key(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def _config(
        self,
        *,
        json_output: bool = False,
        schema: Optional[types.Schema] = None,
        thinking: bool = False,
    ) -> types.GenerateContentConfig:
        options: dict[str, Any] = {}
        if json_output or schema is not None:
            options["response_mime_type"] = "application/json"
        if schema is not None:
            options["response_schema"] = schema
        if not thinking:
            options["thinking_config"] = types.ThinkingConfig(thinking_budget=0)
        return types.GenerateContentConfig(**options)

    @contextmanager
    def _instrument(self, operation: str, **attributes: Any) -> Iterator[Any]:
        self._metric_requests.labels(operation=operation).inc()
        with self._metric_duration.labels(operation=operation).time():
            with start_span(f"gemini.{operation}", attributes) as span:
                try:
                    yield span
                except Exception:
                    self._metric_failures.labels(operation=operation).inc()
                    raise

    def _generate(self, model: str, prompt: str, config: types.GenerateContentConfig) -> str:
        response = self._get_client().models.generate_content(
            model=model,
            contents=prompt,
            config=config,
        )
        return (getattr(response, "text", None) or "").strip()

    # Public API ------------------------------------------------------------
    def stream_definition(self, topic: str) -> Iterator[str]:
        """Yield definition fragments for ``topic`` in receipt order.

        Without a credential a single ``Error:`` fragment is yielded and the
        stream ends. A remote failure yields an ``Error:`` fragment and then
        raises :class:`GenerationError` with the underlying message.
        """

        if not self.is_configured:
            yield STREAM_MISSING_KEY_FRAGMENT
            return

        operation = "stream_definition"
        self._metric_requests.labels(operation=operation).inc()
        started = time.perf_counter()
        chunks = 0
        try:
            stream = self._get_client().models.generate_content_stream(
                model=self.settings.text_model,
                contents=prompts.definition_prompt(topic),
                config=self._config(),
            )
            for chunk in stream:
                text = getattr(chunk, "text", None)
                if text:
                    chunks += 1
                    yield text
        except Exception as exc:
            self._metric_failures.labels(operation=operation).inc()
            message = describe_error(exc)
            self._logger.error(
                "Error streaming from Gemini",
                context={"topic": topic, "chunks": chunks, "error": message},
            )
            yield f'{ERROR_PREFIX} Could not generate content for "{topic}". {message}'
            raise GenerationError(message) from exc
        finally:
            self._metric_duration.labels(operation=operation).observe(
                time.perf_counter() - started
            )

        self._logger.debug(
            "Definition stream finished",
            context={"topic": topic, "chunks": chunks},
        )

    def get_random_word(self) -> str:
        self._require_key()
        try:
            with self._instrument("get_random_word"):
                return self._generate(
                    self.settings.text_model,
                    prompts.RANDOM_WORD_PROMPT,
                    self._config(),
                )
        except Exception as exc:
            self._logger.error(
                "Error getting random word from Gemini",
                context={"error": describe_error(exc)},
            )
            raise GenerationError(f"Could not get random word: {describe_error(exc)}") from exc

    def generate_ascii_art(self, topic: str) -> AsciiArtData:
        """Return art for ``topic``, retrying once on any failure."""

        self._require_key()
        prompt = prompts.ascii_art_prompt(topic, include_text=self.settings.art_text)
        config = self._config(json_output=True, thinking=self.settings.art_thinking)

        last_error: Optional[Exception] = None
        for attempt in range(1, ART_MAX_ATTEMPTS + 1):
            try:
                with self._instrument("generate_ascii_art", topic=topic, attempt=attempt):
                    raw = self._generate(self.settings.art_model, prompt, config)
                    self._logger.debug(
                        "Raw art response",
                        context={"attempt": attempt, "max_attempts": ART_MAX_ATTEMPTS, "raw": raw},
                    )
                    return self._validate_art(raw)
            except Exception as exc:
                last_error = exc
                self._logger.warning(
                    "ASCII art attempt failed",
                    context={
                        "topic": topic,
                        "attempt": attempt,
                        "max_attempts": ART_MAX_ATTEMPTS,
                        "error": describe_error(exc),
                    },
                )

        self._logger.error(
            "All retry attempts failed for ASCII art generation",
            context={"topic": topic},
        )
        raise GenerationError(
            f"Could not generate ASCII art after {ART_MAX_ATTEMPTS} attempts: "
            f"{describe_error(last_error)}"
        ) from last_error

    def _validate_art(self, raw: str) -> AsciiArtData:
        payload = parse_json_object(raw)
        art = payload.get("art")
        if not isinstance(art, str) or not art.strip():
            raise MalformedResponseError("Invalid or empty ASCII art in response")
        text = payload.get("text") if self.settings.art_text else None
        if not isinstance(text, str) or not text.strip():
            text = None
        return AsciiArtData(art=art, text=text)

    def get_cross_cultural_concepts(self, topic: str) -> List[CulturalConcept]:
        self._require_key()
        try:
            with self._instrument("get_cross_cultural_concepts", topic=topic) as span:
                raw = self._generate(
                    self.settings.art_model,
                    prompts.cultural_concepts_prompt(topic),
                    self._config(schema=CULTURAL_CONCEPTS_SCHEMA),
                )
                items = parse_json_array(raw)
                concepts = [
                    CulturalConcept.from_payload(item)
                    for item in items
                    if isinstance(item, Mapping)
                ]
                concepts = [concept for concept in concepts if concept.term]
                add_span_attributes(span, {"concepts.count": len(concepts)})
                return concepts
        except Exception as exc:
            self._logger.error(
                "Error fetching cross-cultural concepts",
                context={"topic": topic, "error": describe_error(exc)},
            )
            raise GenerationError(
                f"Could not fetch cultural concepts: {describe_error(exc)}"
            ) from exc

    def perform_phonosemantic_search(
        self,
        filters: Union[SearchFilters, Mapping[str, Any]],
    ) -> List[PhonosemanticResult]:
        self._require_key()
        try:
            if not isinstance(filters, SearchFilters):
                filters = SearchFilters(**dict(filters))
            with self._instrument("perform_phonosemantic_search", **filters.as_dict()) as span:
                raw = self._generate(
                    self.settings.art_model,
                    prompts.phonosemantic_prompt(filters),
                    self._config(schema=PHONOSEMANTIC_SCHEMA),
                )
                data = parse_json(raw)
                if not isinstance(data, dict) or not isinstance(data.get("results"), list):
                    raise MalformedResponseError("Invalid response format from API.")
                results = [
                    PhonosemanticResult.from_payload(item)
                    for item in data["results"]
                    if isinstance(item, Mapping)
                ]
                add_span_attributes(span, {"results.count": len(results)})
                return results
        except Exception as exc:
            self._logger.error(
                "Error in phonosemantic search",
                context={
                    "filters": (
                        filters.as_dict() if isinstance(filters, SearchFilters) else dict(filters)
                    ),
                    "error": describe_error(exc),
                },
            )
            raise GenerationError(
                f"Could not perform phonosemantic search: {describe_error(exc)}"
            ) from exc

    def get_script_for_word(self, word: str, language: str) -> ScriptResult:
        self._require_key()
        try:
            with self._instrument("get_script_for_word", word=word, language=language):
                raw = self._generate(
                    self.settings.art_model,
                    prompts.script_prompt(word, language),
                    self._config(schema=SCRIPT_SCHEMA),
                )
                payload = parse_json_object(raw)
                if not payload.get("script"):
                    raise MalformedResponseError(
                        f'Could not find a representation for "{word}" in {language}.'
                    )
                return ScriptResult(
                    language=language,
                    word=word,
                    script=_as_text(payload.get("script")),
                    romanization=_as_text(payload.get("romanization")),
                    ipa=_as_text(payload.get("ipa")),
                    note=_as_text(payload.get("note")),
                )
        except Exception as exc:
            self._logger.error(
                "Error in get_script_for_word",
                context={"word": word, "language": language, "error": describe_error(exc)},
            )
            raise GenerationError(
                f'Could not get script for "{word}" in {language}: {describe_error(exc)}'
            ) from exc


__all__ = [
    "GeminiService",
    "ERROR_PREFIX",
    "STREAM_MISSING_KEY_FRAGMENT",
    "ART_MAX_ATTEMPTS",
]
