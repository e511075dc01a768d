import gradio as gr
import pytest

from conftest import FakeClient, FakeModels, ImmediateExecutor
from infinite_wiki.app.app import InfiniteWikiApp
from infinite_wiki.app.config import AppSettings, GatewaySettings
from infinite_wiki.app.state.miner import MinerController
from infinite_wiki.app.state.wiki import WikiController
from infinite_wiki.app.state.writer import WriterController
from infinite_wiki.app.ui.gradio import Session, _close_session, _stream_wiki
from infinite_wiki.utils.telemetry import StructuredTelemetry


def make_app(models: FakeModels, **overrides) -> InfiniteWikiApp:
    settings = AppSettings(api_key="test-key", **overrides)
    return InfiniteWikiApp(settings, client=FakeClient(models))


def test_facade_wires_service_from_settings() -> None:
    settings = AppSettings(
        api_key="test-key",
        gateway=GatewaySettings(text_model="text-x", art_model="art-y"),
        initial_topic="Entropy",
        random_from_model=True,
    )

    app = InfiniteWikiApp(settings, client=FakeClient(FakeModels()))
    wiki = app.create_wiki_controller(executor=ImmediateExecutor())

    assert app.service.is_configured
    assert app.service.settings.text_model == "text-x"
    assert isinstance(wiki, WikiController)
    assert wiki.topic == "Entropy"
    assert wiki.random_from_model is True
    assert isinstance(app.create_miner_controller(), MinerController)
    assert isinstance(app.create_writer_controller(), WriterController)


def test_session_holds_independent_controllers() -> None:
    app = make_app(FakeModels())

    first = app.create_session()
    second = app.create_session()

    assert isinstance(first, Session)
    assert first.wiki is not second.wiki
    assert first.miner is not second.miner
    first.wiki.close()
    second.wiki.close()


def test_wiki_controller_loads_through_the_gateway() -> None:
    models = FakeModels(
        responses=['{"art": "*"}', '[{"term": "Hygge", "culture": "Danish"}]'],
        stream=["Flux ", "is change."],
    )
    app = make_app(models)
    telemetry = StructuredTelemetry()
    wiki = app.create_wiki_controller(executor=ImmediateExecutor(), telemetry=telemetry)

    wiki.load("Flux")

    snapshot = wiki.snapshot()
    assert snapshot.content == "Flux is change."
    assert snapshot.art.art == "*"
    assert [c.term for c in snapshot.concepts] == ["Hygge"]
    assert telemetry.snapshot()["name"] == "Flux"


def _session(models: FakeModels) -> Session:
    app = make_app(models)
    return Session(
        wiki=app.create_wiki_controller(executor=ImmediateExecutor()),
        miner=app.create_miner_controller(),
        writer=app.create_writer_controller(),
    )


def test_stream_wiki_renders_until_settled() -> None:
    models = FakeModels(
        responses=['{"art": "*"}', '[{"term": "Hygge", "culture": "Danish"}]'],
        stream=["Flux ", "is change."],
    )
    session = _session(models)

    frames = list(_stream_wiki(session, lambda wiki: wiki.load("Flux"), clear_search=True))

    assert frames
    last = frames[-1]
    assert len(last) == 11
    assert last[0] is session
    assert "Flux" in last[3]
    assert last[5]["visible"] is True
    assert ("Flux", "link") in last[5]["value"]
    assert last[7]["value"] == [("Hygge", "Danish")]
    assert "Generated by Gemini" in last[8]
    assert last[9]["value"] == ""
    assert last[10]["interactive"] is True


def test_stream_wiki_renders_once_for_ignored_search() -> None:
    models = FakeModels(responses=['{"art": "*"}', "[]"], stream=["Flux."])
    session = _session(models)
    session.wiki.load("Flux")

    frames = list(_stream_wiki(session, lambda wiki: wiki.handle_search("flux")))

    assert len(frames) == 1
    assert models.total_calls == 3


def test_create_gradio_interface_builds_blocks() -> None:
    app = make_app(FakeModels())

    interface = app.create_gradio_interface()

    assert isinstance(interface, gr.Blocks)


def test_expired_session_releases_the_wiki_thread_pool() -> None:
    app = make_app(FakeModels())
    session = app.create_session()

    _close_session(session)
    _close_session(None)

    with pytest.raises(RuntimeError):
        session.wiki.load("Flux")
