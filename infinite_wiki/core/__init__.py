"""Core value types and pure helpers for Infinite Wiki."""

from .models import (
    DEFAULT_MINER_LANGUAGES,
    MOTIF_POSITIONS,
    UNCATEGORIZED_CLUSTER,
    AsciiArtData,
    CulturalConcept,
    PhonosemanticResult,
    ScriptResult,
    SearchFilters,
)
from .parsing import (
    MalformedResponseError,
    parse_json,
    parse_json_array,
    parse_json_object,
    strip_code_fence,
)
from .topics import (
    CURATED_TOPICS,
    clean_word,
    create_fallback_art,
    pick_random_topic,
    same_topic,
)

__all__ = [
    "AsciiArtData",
    "CulturalConcept",
    "PhonosemanticResult",
    "ScriptResult",
    "SearchFilters",
    "DEFAULT_MINER_LANGUAGES",
    "MOTIF_POSITIONS",
    "UNCATEGORIZED_CLUSTER",
    "MalformedResponseError",
    "parse_json",
    "parse_json_array",
    "parse_json_object",
    "strip_code_fence",
    "CURATED_TOPICS",
    "clean_word",
    "create_fallback_art",
    "pick_random_topic",
    "same_topic",
]
