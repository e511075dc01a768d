"""Pure rendering helpers turning controller snapshots into UI payloads."""

from __future__ import annotations

import re
from html import escape
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from infinite_wiki.core.models import AsciiArtData, CulturalConcept, PhonosemanticResult
from infinite_wiki.core.topics import clean_word

from ..state.miner import MinerSnapshot
from ..state.wiki import WikiSnapshot
from ..state.writer import WriterSnapshot

ART_CHAR_INTERVAL = 0.005
ART_PLACEHOLDER = "*"
CURSOR = "|"
LINK_LABEL = "link"

_TITLES = {
    "wiki": "INFINITE WIKI",
    "miner": "PHONOSEMANTIC MINER",
    "writer": "SCRIPT WRITER",
}

_SPLIT_RE = re.compile(r"(\s+)")


def mode_title(mode: str) -> str:
    return _TITLES.get(mode, _TITLES["wiki"])


def render_header(mode: str) -> str:
    return f"<h1 class='iw-title'>{escape(mode_title(mode))}</h1>"


def render_error(title: str, message: str) -> str:
    return (
        "<div class='iw-error' role='alert'>"
        f"<p class='iw-error-title'>{escape(title)}</p>"
        f"<p>{escape(message)}</p>"
        "</div>"
    )


def render_skeleton() -> str:
    bars = "".join(
        f"<div class='iw-skeleton-bar' style='width: {width}'></div>"
        for width in ("100%", "83.33%", "100%", "75%", "66.66%")
    )
    return f"<div class='iw-skeleton' aria-label='Loading content...' role='progressbar'>{bars}</div>"


# Definition -----------------------------------------------------------------
def split_interactive(content: str) -> List[Tuple[str, bool]]:
    """Split ``content`` into tokens, flagging the ones that can be clicked.

    Whitespace runs are kept as their own tokens so the text reflows
    unchanged; a token is clickable when something survives punctuation
    stripping.
    """

    tokens: List[Tuple[str, bool]] = []
    for token in _SPLIT_RE.split(content or ""):
        if not token:
            continue
        clickable = not token.isspace() and bool(clean_word(token))
        tokens.append((token, clickable))
    return tokens


def definition_tokens(content: str) -> List[Tuple[str, Optional[str]]]:
    """HighlightedText payload; selecting a labelled token navigates to it."""

    return [
        (token, LINK_LABEL if clickable else None)
        for token, clickable in split_interactive(content)
    ]


def token_from_selection(value: Any) -> str:
    """Extract the clicked text from a HighlightedText selection value."""

    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    elif isinstance(value, Mapping):
        value = value.get("token") or value.get("value") or ""
    return str(value or "")


def show_interactive_definition(snapshot: WikiSnapshot) -> bool:
    return bool(snapshot.content) and not snapshot.is_loading and not snapshot.error


def render_definition(snapshot: WikiSnapshot) -> str:
    """Status/streaming area above the clickable definition."""

    if snapshot.error:
        return render_error("An Error Occurred", snapshot.error)
    if snapshot.is_loading and not snapshot.content:
        return render_skeleton()
    if snapshot.is_loading:
        return (
            f"<p class='iw-definition'>{escape(snapshot.content)}"
            f"<span class='iw-cursor'>{CURSOR}</span></p>"
        )
    if not snapshot.content:
        return "<p class='iw-muted'>Content could not be generated.</p>"
    return ""


def render_topic(topic: str) -> str:
    return f"<h2 class='iw-topic'>{escape(topic)}</h2>"


# Art ------------------------------------------------------------------------
def typed_prefix(text: str, elapsed: float, interval: float = ART_CHAR_INTERVAL) -> str:
    """Return the part of ``text`` typed after ``elapsed`` seconds."""

    if interval <= 0:
        return text
    count = int(max(0.0, elapsed) / interval)
    return text[:count]


def art_fully_typed(
    art: Optional[AsciiArtData],
    elapsed: float,
    interval: float = ART_CHAR_INTERVAL,
) -> bool:
    if art is None:
        return False
    text = art.full_text()
    return len(typed_prefix(text, elapsed, interval)) >= len(text)


def render_art(
    art: Optional[AsciiArtData],
    topic: str,
    elapsed: Optional[float] = None,
    interval: float = ART_CHAR_INTERVAL,
) -> str:
    """Render the art block, typing it out while ``elapsed`` is short.

    ``elapsed=None`` shows the finished art.
    """

    label = escape(f"ASCII art for {topic}", quote=True)
    if art is None:
        body = ART_PLACEHOLDER
    else:
        text = art.full_text()
        shown = text if elapsed is None else typed_prefix(text, elapsed, interval)
        body = escape(shown)
        if len(shown) < len(text):
            body += f"<span class='iw-cursor'>{CURSOR}</span>"
    return f"<pre class='iw-ascii-art' aria-label=\"{label}\">{body}</pre>"


# Cultural concepts ------------------------------------------------------------
def concept_tokens(concepts: Sequence[CulturalConcept]) -> List[Tuple[str, Optional[str]]]:
    """HighlightedText payload labelling each term with its culture."""

    tokens: List[Tuple[str, Optional[str]]] = []
    for index, concept in enumerate(concepts):
        if index:
            tokens.append((", ", None))
        tokens.append((concept.term, concept.culture or None))
    return tokens


def show_concepts(snapshot: WikiSnapshot) -> bool:
    # Failures hide the section instead of showing a banner.
    return (
        not snapshot.concepts_loading
        and not snapshot.concepts_error
        and bool(snapshot.concepts)
    )


def render_concepts_status(snapshot: WikiSnapshot) -> str:
    if snapshot.concepts_loading:
        return "<p class='iw-concepts-loading' aria-live='polite'>Finding cultural connections...</p>"
    if show_concepts(snapshot):
        return "<h3 class='iw-concepts-title'>Cultural Lenses</h3>"
    return ""


def render_footer(mode: str, generation_time_ms: Optional[float]) -> str:
    text = "Infinite Wiki · Generated by Gemini"
    if mode == "wiki" and generation_time_ms:
        text += f" · {round(generation_time_ms)}ms"
    return f"<p class='iw-footer'>{escape(text)}</p>"


# Miner ------------------------------------------------------------------------
def render_result_card(result: PhonosemanticResult) -> str:
    parts: List[str] = ["<article class='iw-result-card'>", "<header>"]
    parts.append(f"<h4 class='iw-lemma'>{escape(result.romanization)}</h4>")
    if result.script and result.lemma != result.romanization:
        lang = escape(result.language[:2].lower(), quote=True)
        parts.append(f"<span class='iw-script' lang='{lang}'>({escape(result.lemma)})</span>")
    if result.ipa:
        parts.append(f"<span class='iw-ipa'>[{escape(result.ipa)}]</span>")
    parts.append("</header>")
    parts.append(
        f"<p><strong>({escape(result.language)})</strong>: {escape(result.gloss)}</p>"
    )
    if result.etymology:
        parts.append(f"<p><strong>Etymology:</strong> {escape(result.etymology)}</p>")
    if result.cultural_tags:
        parts.append(f"<p class='iw-tags'>Tags: {escape(', '.join(result.cultural_tags))}</p>")
    if result.source_url:
        href = escape(result.source_url, quote=True)
        parts.append(
            f"<a class='iw-source' href=\"{href}\" target='_blank' rel='noopener noreferrer'>Source</a>"
        )
    parts.append("</article>")
    return "".join(parts)


def render_results(
    snapshot: MinerSnapshot,
    grouped: Mapping[str, Sequence[PhonosemanticResult]],
) -> str:
    if snapshot.is_loading:
        return render_skeleton()
    if snapshot.error:
        return render_error("A Search Error Occurred", snapshot.error)
    if not snapshot.searched:
        return "<p class='iw-muted'>Adjust the filters and press Search.</p>"
    if not grouped:
        return "<p class='iw-muted'>No results found. Try adjusting your filters.</p>"

    sections: List[str] = []
    for cluster, items in grouped.items():
        cards = "".join(render_result_card(item) for item in items)
        sections.append(
            f"<section class='iw-result-cluster'><h3>{escape(cluster)}</h3>{cards}</section>"
        )
    return "".join(sections)


# Writer -----------------------------------------------------------------------
def render_script_result(snapshot: WriterSnapshot) -> str:
    if snapshot.is_loading:
        return render_skeleton()
    if snapshot.error:
        return render_error("An Error Occurred", snapshot.error)
    result = snapshot.result
    if result is None:
        return ""
    lang = escape(result.language[:2].lower(), quote=True)
    return (
        "<div class='iw-script-result'>"
        f"<p class='iw-result-script' lang='{lang}'>{escape(result.script)}</p>"
        "<div class='iw-result-details'>"
        f"<p><strong>{escape(result.romanization)}</strong> [{escape(result.ipa)}]</p>"
        f"<p class='iw-note'><em>{escape(result.note)}</em></p>"
        "</div></div>"
    )


def render_miner_status(snapshot: MinerSnapshot) -> str:
    if snapshot.is_loading:
        return "Searching..."
    if snapshot.error:
        return "Search failed."
    if snapshot.searched:
        return f"{len(snapshot.results)} result(s)."
    return ""


def summarize_snapshot(snapshot: WikiSnapshot) -> Dict[str, Any]:
    """Compact description of a wiki snapshot, used in log context."""

    return {
        "topic": snapshot.topic,
        "generation": snapshot.generation,
        "chars": len(snapshot.content),
        "loading": snapshot.is_loading,
        "has_art": snapshot.art is not None,
        "concepts": len(snapshot.concepts),
        "error": snapshot.error,
    }


__all__ = [
    "ART_CHAR_INTERVAL",
    "ART_PLACEHOLDER",
    "CURSOR",
    "LINK_LABEL",
    "art_fully_typed",
    "concept_tokens",
    "definition_tokens",
    "mode_title",
    "render_art",
    "render_concepts_status",
    "render_definition",
    "render_error",
    "render_footer",
    "render_header",
    "render_miner_status",
    "render_result_card",
    "render_results",
    "render_script_result",
    "render_skeleton",
    "render_topic",
    "show_concepts",
    "show_interactive_definition",
    "split_interactive",
    "summarize_snapshot",
    "token_from_selection",
    "typed_prefix",
]
