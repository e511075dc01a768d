"""User interface assembly for the Gradio front-end."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

import gradio as gr

from infinite_wiki.core.models import DEFAULT_MINER_LANGUAGES, MOTIF_POSITIONS, SearchFilters

from ..config import AppSettings
from ..services.gemini_service import GeminiService
from ..state.miner import MinerController, MinerSnapshot
from ..state.wiki import WikiController, WikiSnapshot
from ..state.writer import DEFAULT_LANGUAGE, DEFAULT_WORD, WriterController, WriterSnapshot
from ...utils.observability import get_logger
from . import components

POLL_INTERVAL = 0.1

_logger = get_logger(__name__).bind(component="gradio_ui")


@dataclass
class Session:
    """Controllers owned by one browser session."""

    wiki: WikiController
    miner: MinerController
    writer: WriterController


def _make_session_factory(
    service: GeminiService,
    settings: AppSettings,
    new_session: Optional[Callable[[], Session]] = None,
) -> Callable[[Optional[Session]], Session]:
    def ensure(session: Optional[Session]) -> Session:
        if session is not None:
            return session
        if new_session is not None:
            return new_session()
        return Session(
            wiki=WikiController(
                service,
                initial_topic=settings.initial_topic,
                random_from_model=settings.random_from_model,
            ),
            miner=MinerController(service),
            writer=WriterController(service),
        )

    return ensure


def _close_session(session: Optional[Session]) -> None:
    """Release the thread pool of a session Gradio has expired."""

    if session is not None:
        session.wiki.close()


def _wiki_outputs(
    session: Session,
    snapshot: WikiSnapshot,
    now: float,
    *,
    clear_search: bool = False,
) -> Tuple[Any, ...]:
    art_elapsed = None
    if snapshot.art is not None and snapshot.art_received_at is not None:
        art_elapsed = now - snapshot.art_received_at
    busy = snapshot.is_loading
    show_definition = components.show_interactive_definition(snapshot)
    show_concepts = components.show_concepts(snapshot)
    return (
        session,
        components.render_header(snapshot.mode),
        components.render_art(snapshot.art, snapshot.topic, art_elapsed),
        components.render_topic(snapshot.topic),
        components.render_definition(snapshot),
        gr.update(
            value=components.definition_tokens(snapshot.content) if show_definition else [],
            visible=show_definition,
        ),
        components.render_concepts_status(snapshot),
        gr.update(
            value=components.concept_tokens(snapshot.concepts) if show_concepts else [],
            visible=show_concepts,
        ),
        components.render_footer(snapshot.mode, snapshot.generation_time_ms),
        gr.update(value="", interactive=not busy)
        if clear_search
        else gr.update(interactive=not busy),
        gr.update(interactive=not busy),
    )


def _stream_wiki(
    session: Session,
    start: Callable[[WikiController], Optional[int]],
    *,
    clear_search: bool = False,
) -> Iterator[Tuple[Any, ...]]:
    """Apply a transition, then re-render until its generation settles.

    The loop stops early when another event supersedes the generation; that
    event's own handler takes over rendering.
    """

    generation = start(session.wiki)
    if generation is None:
        yield _wiki_outputs(
            session,
            session.wiki.snapshot(),
            time.perf_counter(),
            clear_search=clear_search,
        )
        return

    while True:
        snapshot = session.wiki.snapshot()
        now = time.perf_counter()
        yield _wiki_outputs(session, snapshot, now, clear_search=clear_search)
        if snapshot.generation != generation:
            return
        if snapshot.settled:
            elapsed = now - (snapshot.art_received_at or now)
            if components.art_fully_typed(snapshot.art, elapsed):
                _logger.info(
                    "Topic rendered",
                    context=components.summarize_snapshot(snapshot),
                )
                return
        time.sleep(POLL_INTERVAL)


INTERFACE_CSS = """
.iw-container {max-width: 860px; margin: 0 auto;}
.iw-title {text-align: center; letter-spacing: 0.2em; text-transform: uppercase;}
.iw-ascii-art {font-family: monospace; line-height: 1.1; white-space: pre; overflow-x: auto; text-align: center; min-height: 2rem;}
.iw-topic {text-transform: capitalize; margin-bottom: 1.5rem;}
.iw-definition {margin: 0; line-height: 1.6;}
.iw-cursor {animation: iw-blink 1s step-start infinite;}
@keyframes iw-blink {50% {opacity: 0;}}
.iw-error {border: 1px solid #cc0000; padding: 1rem; color: #cc0000; margin-top: 1rem;}
.iw-error p {margin: 0;}
.iw-error-title {font-weight: 700; margin-bottom: 0.5rem !important;}
.iw-skeleton-bar {height: 1rem; background-color: #e0e0e0; margin-bottom: 0.75rem;}
.iw-muted {color: #888; padding: 2rem 0;}
.iw-concepts-loading {color: #888; font-style: italic;}
.iw-concepts-title {margin-bottom: 0.25rem;}
.iw-result-cluster h3 {text-transform: capitalize; border-bottom: 1px solid #ddd;}
.iw-result-card {border: 1px solid rgba(15, 23, 42, 0.08); border-radius: 10px; padding: 12px 14px; margin-bottom: 12px;}
.iw-result-card header {display: flex; gap: 8px; align-items: baseline; flex-wrap: wrap;}
.iw-lemma {margin: 0;}
.iw-ipa, .iw-tags {color: #475569;}
.iw-script-result {text-align: center; margin-top: 1.5rem;}
.iw-result-script {font-size: 3rem; margin: 0;}
.iw-note {color: #475569;}
.iw-footer {text-align: center; color: #888; font-size: 0.85rem;}
"""


def create_interface(
    service: GeminiService,
    settings: AppSettings,
    *,
    new_session: Optional[Callable[[], Session]] = None,
) -> gr.Blocks:
    """Construct the interactive Gradio Blocks UI.

    Each browser session lazily gets its own controllers from ``new_session``
    (or default ones built around ``service``).
    """

    ensure_session = _make_session_factory(service, settings, new_session)
    initial = WikiSnapshot(topic=settings.initial_topic)

    with gr.Blocks(
        title="Infinite Wiki",
        theme=gr.themes.Soft(),
        css=INTERFACE_CSS,
    ) as interface:
        session_state = gr.State(None, delete_callback=_close_session)

        with gr.Column(elem_classes=["iw-container"]):
            header_html = gr.HTML(components.render_header("wiki"))

            with gr.Tabs():
                with gr.Tab("Infinite Wiki") as wiki_tab:
                    art_html = gr.HTML(components.render_art(None, initial.topic))
                    with gr.Row():
                        search_box = gr.Textbox(
                            placeholder="Search",
                            show_label=False,
                            lines=1,
                            scale=4,
                        )
                        random_btn = gr.Button("Random", scale=1)
                    topic_html = gr.HTML(components.render_topic(initial.topic))
                    definition_html = gr.HTML(components.render_skeleton())
                    definition_words = gr.HighlightedText(
                        value=[],
                        combine_adjacent=False,
                        show_legend=False,
                        show_label=False,
                        color_map={components.LINK_LABEL: "#eef2ff"},
                        visible=False,
                    )
                    concepts_html = gr.HTML("")
                    concept_words = gr.HighlightedText(
                        value=[],
                        combine_adjacent=False,
                        show_legend=False,
                        show_label=False,
                        visible=False,
                    )

                with gr.Tab("Phonosemantic Miner") as miner_tab:
                    with gr.Row():
                        languages_box = gr.Textbox(
                            value=DEFAULT_MINER_LANGUAGES,
                            label="Languages",
                            placeholder="e.g., Arabic, Hebrew",
                            scale=3,
                        )
                        position_dropdown = gr.Dropdown(
                            choices=[(name.title(), name) for name in MOTIF_POSITIONS],
                            value="any",
                            label="Motif Position",
                            scale=1,
                        )
                        fuzzy_checkbox = gr.Checkbox(value=False, label="Fuzzy Match", scale=1)
                    miner_btn = gr.Button("Search", variant="primary")
                    miner_status = gr.Markdown("")
                    miner_results = gr.HTML(components.render_results(MinerSnapshot(), {}))

                with gr.Tab("Script Writer") as writer_tab:
                    with gr.Row():
                        word_box = gr.Textbox(
                            value=DEFAULT_WORD,
                            label="Word / Concept",
                            placeholder="e.g., love",
                        )
                        language_box = gr.Textbox(
                            value=DEFAULT_LANGUAGE,
                            label="Language",
                            placeholder="e.g., Hebrew",
                        )
                    writer_btn = gr.Button("Write", variant="primary")
                    writer_html = gr.HTML("")

            footer_html = gr.HTML(components.render_footer("wiki", None))

        wiki_outputs = [
            session_state,
            header_html,
            art_html,
            topic_html,
            definition_html,
            definition_words,
            concepts_html,
            concept_words,
            footer_html,
            search_box,
            random_btn,
        ]

        # Wiki handlers --------------------------------------------------------
        def on_load(session: Optional[Session]):
            yield from _stream_wiki(ensure_session(session), lambda wiki: wiki.load())

        def on_search(session: Optional[Session], query: str):
            yield from _stream_wiki(
                ensure_session(session),
                lambda wiki: wiki.handle_search(query),
                clear_search=True,
            )

        def on_random(session: Optional[Session]):
            yield from _stream_wiki(ensure_session(session), lambda wiki: wiki.handle_random())

        def on_word_select(session: Optional[Session], evt: gr.SelectData):
            word = components.token_from_selection(evt.value)
            yield from _stream_wiki(
                ensure_session(session),
                lambda wiki: wiki.handle_word_click(word),
            )

        def on_wiki_tab(session: Optional[Session]):
            yield from _stream_wiki(ensure_session(session), lambda wiki: wiki.set_mode("wiki"))

        def _leave_wiki(mode: str):
            def handler(session: Optional[Session]):
                session = ensure_session(session)
                session.wiki.set_mode(mode)
                return (
                    session,
                    components.render_header(mode),
                    components.render_footer(mode, None),
                )

            return handler

        interface.load(on_load, inputs=[session_state], outputs=wiki_outputs)
        search_box.submit(
            on_search,
            inputs=[session_state, search_box],
            outputs=wiki_outputs,
        )
        random_btn.click(on_random, inputs=[session_state], outputs=wiki_outputs)
        definition_words.select(on_word_select, inputs=[session_state], outputs=wiki_outputs)
        concept_words.select(on_word_select, inputs=[session_state], outputs=wiki_outputs)
        wiki_tab.select(on_wiki_tab, inputs=[session_state], outputs=wiki_outputs)
        miner_tab.select(
            _leave_wiki("miner"),
            inputs=[session_state],
            outputs=[session_state, header_html, footer_html],
        )
        writer_tab.select(
            _leave_wiki("writer"),
            inputs=[session_state],
            outputs=[session_state, header_html, footer_html],
        )

        # Miner handlers -------------------------------------------------------
        def on_miner_search(
            session: Optional[Session],
            languages: str,
            position: str,
            fuzzy: bool,
        ):
            session = ensure_session(session)
            miner = session.miner
            try:
                filters = SearchFilters(
                    position=position or "any",
                    languages=(languages or "").strip(),
                    fuzzy=bool(fuzzy),
                )
            except ValueError as exc:
                yield (
                    session,
                    "",
                    components.render_error("A Search Error Occurred", str(exc)),
                    gr.update(value="Search", interactive=True),
                )
                return

            state = miner.begin(filters)
            yield (
                session,
                components.render_miner_status(state),
                components.render_results(state, {}),
                gr.update(value="Searching...", interactive=False),
            )
            state = miner.run()
            yield (
                session,
                components.render_miner_status(state),
                components.render_results(state, miner.grouped()),
                gr.update(value="Search", interactive=True),
            )

        miner_btn.click(
            on_miner_search,
            inputs=[session_state, languages_box, position_dropdown, fuzzy_checkbox],
            outputs=[session_state, miner_status, miner_results, miner_btn],
        )

        # Writer handlers ------------------------------------------------------
        def on_write(session: Optional[Session], word: str, language: str):
            session = ensure_session(session)
            writer = session.writer
            if (word or "").strip() and (language or "").strip():
                pending = WriterSnapshot(
                    word=word.strip(),
                    language=language.strip(),
                    is_loading=True,
                )
                yield (
                    session,
                    components.render_script_result(pending),
                    gr.update(value="Writing...", interactive=False),
                )
            state = writer.write(word, language)
            yield (
                session,
                components.render_script_result(state),
                gr.update(value="Write", interactive=True),
            )

        writer_inputs = [session_state, word_box, language_box]
        writer_outputs = [session_state, writer_html, writer_btn]
        writer_btn.click(on_write, inputs=writer_inputs, outputs=writer_outputs)
        word_box.submit(on_write, inputs=writer_inputs, outputs=writer_outputs)
        language_box.submit(on_write, inputs=writer_inputs, outputs=writer_outputs)

    return interface


__all__ = ["create_interface", "Session", "INTERFACE_CSS", "POLL_INTERVAL"]
