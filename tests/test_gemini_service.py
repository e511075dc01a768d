"""Behavioural tests for :mod:`infinite_wiki.app.services.gemini_service`."""

from __future__ import annotations

import json
import logging

import pytest

from conftest import FakeClient, FakeModels
from infinite_wiki.app.config import GatewaySettings
from infinite_wiki.app.services.errors import ConfigurationError, GenerationError
from infinite_wiki.app.services.gemini_service import (
    ART_MAX_ATTEMPTS,
    STREAM_MISSING_KEY_FRAGMENT,
    GeminiService,
)
from infinite_wiki.core.models import AsciiArtData, SearchFilters


def make_service(models: FakeModels, **settings) -> GeminiService:
    return GeminiService(
        "test-key",
        client=FakeClient(models),
        settings=GatewaySettings(**settings),
    )


def _result(**overrides):
    payload = {
        "language": "Arabic",
        "script": "Arabic",
        "lemma": "هواء",
        "romanization": "hawāʾ",
        "IPA": "ha.waːʔ",
        "gloss": "air, breath",
        "etymology": "From Proto-Semitic *haw-.",
        "source_url": "https://en.wiktionary.org/wiki/هواء",
        "cultural_tags": ["breath", "spirit"],
        "semantic_cluster": "breath/voice",
    }
    payload.update(overrides)
    return payload


# Missing credential -----------------------------------------------------------
def test_every_operation_fails_fast_without_a_key(fake_models: FakeModels) -> None:
    service = GeminiService(None, client=FakeClient(fake_models))

    assert list(service.stream_definition("Entropy")) == [STREAM_MISSING_KEY_FRAGMENT]
    for call in (
        service.get_random_word,
        lambda: service.generate_ascii_art("Entropy"),
        lambda: service.get_cross_cultural_concepts("Entropy"),
        lambda: service.perform_phonosemantic_search(SearchFilters()),
        lambda: service.get_script_for_word("love", "Hebrew"),
    ):
        with pytest.raises(ConfigurationError, match="API_KEY is not configured."):
            call()

    assert fake_models.total_calls == 0


def test_blank_key_counts_as_missing(fake_models: FakeModels) -> None:
    service = GeminiService("   ", client=FakeClient(fake_models))

    assert service.is_configured is False
    with pytest.raises(ConfigurationError):
        service.get_random_word()


def test_missing_key_is_logged_at_construction(caplog) -> None:
    caplog.set_level(logging.ERROR, logger="infinite_wiki.app.services.gemini_service")

    GeminiService(None)

    assert any("API_KEY environment variable is not set" in r.message for r in caplog.records)


# Definition stream ------------------------------------------------------------
def test_stream_definition_yields_chunks_in_order_and_skips_empty() -> None:
    models = FakeModels(stream=["Entropy ", "", None, "is disorder."])
    service = make_service(models)

    assert list(service.stream_definition("Entropy")) == ["Entropy ", "is disorder."]
    call = models.stream_calls[0]
    assert call["model"] == "gemini-2.5-flash-lite"
    assert '"Entropy"' in call["contents"]
    assert call["config"].thinking_config.thinking_budget == 0


def test_stream_definition_failure_yields_error_fragment_then_raises() -> None:
    models = FakeModels(stream=["Partial ", RuntimeError("socket closed")])
    service = make_service(models)
    stream = service.stream_definition("Flux")

    assert next(stream) == "Partial "
    assert next(stream) == 'Error: Could not generate content for "Flux". socket closed'
    with pytest.raises(GenerationError, match="socket closed"):
        next(stream)


# Random word ------------------------------------------------------------------
def test_get_random_word_trims_the_response() -> None:
    models = FakeModels(responses=["  Palimpsest \n"])

    assert make_service(models).get_random_word() == "Palimpsest"
    assert len(models.calls) == 1


def test_get_random_word_wraps_remote_errors_without_retry() -> None:
    models = FakeModels(responses=[RuntimeError("quota exceeded"), "unused"])

    with pytest.raises(GenerationError, match="^Could not get random word: quota exceeded$"):
        make_service(models).get_random_word()
    assert len(models.calls) == 1


# ASCII art --------------------------------------------------------------------
def test_generate_ascii_art_unwraps_fenced_json() -> None:
    models = FakeModels(responses=['```json\n{"art":"X"}\n```'])

    art = make_service(models).generate_ascii_art("Spiral")

    assert art == AsciiArtData(art="X")
    config = models.calls[0]["config"]
    assert config.response_mime_type == "application/json"
    assert config.thinking_config.thinking_budget == 0
    assert models.calls[0]["model"] == "gemini-2.5-flash"


def test_generate_ascii_art_retries_once_after_invalid_payload() -> None:
    models = FakeModels(responses=['{"art": "   "}', '{"art": "/\\\\"}'])

    art = make_service(models).generate_ascii_art("Rise")

    assert art.art == "/\\"
    assert len(models.calls) == 2


@pytest.mark.parametrize(
    "first, second",
    [
        ("not json at all", RuntimeError("backend unavailable")),
        ('{"text": "no art"}', '{"art": 42}'),
    ],
)
def test_generate_ascii_art_raises_after_exactly_two_attempts(first, second) -> None:
    models = FakeModels(responses=[first, second, '{"art": "never reached"}'])

    with pytest.raises(GenerationError, match=f"after {ART_MAX_ATTEMPTS} attempts"):
        make_service(models).generate_ascii_art("Void")

    assert len(models.calls) == ART_MAX_ATTEMPTS == 2


def test_generate_ascii_art_keeps_text_only_when_enabled() -> None:
    payload = json.dumps({"art": "*", "text": "VOID"})

    plain = make_service(FakeModels(responses=[payload])).generate_ascii_art("Void")
    models = FakeModels(responses=[payload])
    titled = make_service(models, art_text=True, art_thinking=True).generate_ascii_art("Void")

    assert plain.text is None
    assert titled.text == "VOID"
    assert titled.full_text() == "*\n\nVOID"
    assert models.calls[0]["config"].thinking_config is None
    assert '"text"' in models.calls[0]["contents"]


# Cultural concepts ------------------------------------------------------------
def test_get_cross_cultural_concepts_parses_array() -> None:
    payload = json.dumps(
        [
            {"term": "Wabi-sabi", "culture": "Japanese"},
            {"term": "Hygge", "culture": "Danish"},
            "stray",
            {"term": "", "culture": "Unknown"},
        ]
    )
    models = FakeModels(responses=[f"```json\n{payload}\n```"])

    concepts = make_service(models).get_cross_cultural_concepts("Balance")

    assert [(c.term, c.culture) for c in concepts] == [
        ("Wabi-sabi", "Japanese"),
        ("Hygge", "Danish"),
    ]
    assert models.calls[0]["config"].response_schema is not None


def test_get_cross_cultural_concepts_rejects_non_array() -> None:
    models = FakeModels(responses=['{"term": "Hygge", "culture": "Danish"}'])

    with pytest.raises(GenerationError, match="^Could not fetch cultural concepts: "):
        make_service(models).get_cross_cultural_concepts("Comfort")


# Phonosemantic search -----------------------------------------------------------
def test_phonosemantic_search_builds_prompt_from_filters() -> None:
    models = FakeModels(responses=[json.dumps({"results": [_result()]})])
    filters = SearchFilters(position="initial", languages="Arabic, Hebrew", fuzzy=True)

    results = make_service(models).perform_phonosemantic_search(filters)

    prompt = models.calls[0]["contents"]
    assert "**initial** position" in prompt
    assert "**Arabic, Hebrew**" in prompt
    assert "ENABLED" in prompt
    assert results[0].ipa == "ha.waːʔ"
    assert results[0].cultural_tags == ["breath", "spirit"]
    assert results[0].cluster == "breath/voice"


def test_phonosemantic_search_accepts_mapping_filters() -> None:
    models = FakeModels(responses=['{"results": []}'])

    make_service(models).perform_phonosemantic_search(
        {"position": "final", "languages": "Sanskrit", "fuzzy": False}
    )

    assert "DISABLED: Match the motif strictly." in models.calls[0]["contents"]


def test_phonosemantic_search_returns_empty_results_untouched() -> None:
    models = FakeModels(responses=['```json\n{"results": []}\n```'])

    assert make_service(models).perform_phonosemantic_search(SearchFilters()) == []


@pytest.mark.parametrize("payload", ['{"matches": []}', '{"results": "none"}', "[]"])
def test_phonosemantic_search_requires_results_array(payload: str) -> None:
    models = FakeModels(responses=[payload])

    with pytest.raises(
        GenerationError,
        match="^Could not perform phonosemantic search: Invalid response format from API.$",
    ):
        make_service(models).perform_phonosemantic_search(SearchFilters())


def test_search_filters_reject_unknown_position() -> None:
    with pytest.raises(ValueError, match="Unknown motif position"):
        SearchFilters(position="penultimate")


# Script writer ------------------------------------------------------------------
def test_get_script_for_word_returns_full_result() -> None:
    payload = {"script": "אהבה", "romanization": "ahava", "ipa": "a.ha.ˈva", "note": "Common noun."}
    models = FakeModels(responses=[json.dumps(payload)])

    result = make_service(models).get_script_for_word("love", "Hebrew")

    assert result.script == "אהבה"
    assert result.word == "love"
    assert result.language == "Hebrew"
    assert result.note == "Common noun."


def test_get_script_for_word_treats_null_script_as_missing() -> None:
    payload = {"script": None, "romanization": None, "ipa": None, "note": None}
    models = FakeModels(responses=[json.dumps(payload)])

    with pytest.raises(GenerationError) as excinfo:
        make_service(models).get_script_for_word("blorft", "Latin")

    assert str(excinfo.value) == (
        'Could not get script for "blorft" in Latin: '
        'Could not find a representation for "blorft" in Latin.'
    )


def test_gateway_failures_are_logged_with_context(caplog) -> None:
    caplog.set_level(logging.ERROR, logger="infinite_wiki.app.services.gemini_service")
    models = FakeModels(responses=[RuntimeError("boom")])

    with pytest.raises(GenerationError):
        make_service(models).get_cross_cultural_concepts("Echo")

    messages = [record.message for record in caplog.records]
    assert any(
        "Error fetching cross-cultural concepts" in message and '"topic": "Echo"' in message
        for message in messages
    )


@pytest.mark.parametrize(
    "filters",
    [
        {"position": "middle", "languages": "Hebrew", "fuzzy": False},
        {"position": "any", "languages": "Hebrew", "strict": True},
    ],
)
def test_phonosemantic_search_wraps_invalid_filter_mappings(filters) -> None:
    models = FakeModels(responses=['{"results": []}'])

    with pytest.raises(GenerationError, match="^Could not perform phonosemantic search: "):
        make_service(models).perform_phonosemantic_search(filters)

    assert models.total_calls == 0
