"""Value records exchanged between the gateway and the controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

MOTIF_POSITIONS = ("any", "initial", "medial", "final")
DEFAULT_MINER_LANGUAGES = "Sanskrit, Hebrew, Arabic, Proto-Indo-European"
UNCATEGORIZED_CLUSTER = "Uncategorized"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class AsciiArtData:
    """Stylized text art for a topic, with optional blocky title text."""

    art: str
    text: Optional[str] = None

    def full_text(self) -> str:
        if self.text:
            return f"{self.art}\n\n{self.text}"
        return self.art


@dataclass(frozen=True)
class CulturalConcept:
    term: str
    culture: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CulturalConcept":
        return cls(term=_text(payload.get("term")).strip(), culture=_text(payload.get("culture")).strip())


@dataclass(frozen=True)
class PhonosemanticResult:
    """One lexical hit from the motif search."""

    language: str
    script: str
    lemma: str
    romanization: str
    ipa: str
    gloss: str
    etymology: str
    source_url: str
    cultural_tags: List[str] = field(default_factory=list)
    semantic_cluster: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PhonosemanticResult":
        tags = payload.get("cultural_tags") or []
        if isinstance(tags, str):
            tags = [tags]
        return cls(
            language=_text(payload.get("language")),
            script=_text(payload.get("script")),
            lemma=_text(payload.get("lemma")),
            romanization=_text(payload.get("romanization")),
            ipa=_text(payload.get("IPA", payload.get("ipa"))),
            gloss=_text(payload.get("gloss")),
            etymology=_text(payload.get("etymology")),
            source_url=_text(payload.get("source_url")),
            cultural_tags=[str(tag) for tag in tags if tag],
            semantic_cluster=_text(payload.get("semantic_cluster")),
        )

    @property
    def cluster(self) -> str:
        return self.semantic_cluster or UNCATEGORIZED_CLUSTER


@dataclass(frozen=True)
class ScriptResult:
    language: str
    word: str
    script: str
    romanization: str
    ipa: str
    note: str


@dataclass(frozen=True)
class SearchFilters:
    """Filters for the motif search form."""

    position: str = "any"
    languages: str = DEFAULT_MINER_LANGUAGES
    fuzzy: bool = False

    def __post_init__(self) -> None:
        if self.position not in MOTIF_POSITIONS:
            raise ValueError(
                f"Unknown motif position {self.position!r}; expected one of {', '.join(MOTIF_POSITIONS)}"
            )

    def as_dict(self) -> Dict[str, Any]:
        return {"position": self.position, "languages": self.languages, "fuzzy": self.fuzzy}


__all__ = [
    "AsciiArtData",
    "CulturalConcept",
    "PhonosemanticResult",
    "ScriptResult",
    "SearchFilters",
    "MOTIF_POSITIONS",
    "DEFAULT_MINER_LANGUAGES",
    "UNCATEGORIZED_CLUSTER",
]
