import random

import pytest

from infinite_wiki.core.topics import (
    CURATED_TOPICS,
    clean_word,
    create_fallback_art,
    pick_random_topic,
    same_topic,
)


def test_curated_topics_are_unique_and_non_empty() -> None:
    assert CURATED_TOPICS
    assert len(CURATED_TOPICS) == len(set(CURATED_TOPICS))
    assert all(topic.strip() for topic in CURATED_TOPICS)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("entropy,", "entropy"),
        ("(quantum)", "quantum"),
        ('"echo!"', "echo"),
        ("  flux;  ", "flux"),
        ("self-reference", "self-reference"),
        (None, ""),
    ],
)
def test_clean_word_strips_punctuation(raw, expected) -> None:
    assert clean_word(raw) == expected


def test_same_topic_ignores_case_and_whitespace() -> None:
    assert same_topic(" Entropy", "entropy ")
    assert not same_topic("Entropy", "Enthalpy")


def test_pick_random_topic_never_returns_current() -> None:
    topics = ["Alpha", "Beta"]
    rng = random.Random(7)

    picks = {pick_random_topic("alpha", topics=topics, rng=rng) for _ in range(50)}

    assert picks == {"Beta"}


def test_pick_random_topic_wraps_on_collision_with_last_entry() -> None:
    class LastIndex:
        def randrange(self, stop: int) -> int:
            return stop - 1

    assert pick_random_topic("Gamma", topics=["Alpha", "Beta", "Gamma"], rng=LastIndex()) == "Alpha"


def test_pick_random_topic_requires_candidates() -> None:
    with pytest.raises(ValueError):
        pick_random_topic("Alpha", topics=[])


def test_fallback_art_boxes_short_topic() -> None:
    art = create_fallback_art("Flux")

    assert art.art == "┌──────┐\n│ Flux │\n└──────┘"
    assert art.text is None


def test_fallback_art_truncates_long_topic() -> None:
    topic = "Intertextuality and metafiction"

    lines = create_fallback_art(topic).art.split("\n")

    assert lines[1] == "│ Intertextuality a... │"
    assert len(lines[0]) == len(lines[1]) == len(lines[2])
