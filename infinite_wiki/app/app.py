"""Application wiring for Infinite Wiki."""

from __future__ import annotations

from typing import Any, Optional

if __package__ in {None, ""}:
    import sys
    from pathlib import Path

    repo_root = Path(__file__).resolve().parents[2]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from infinite_wiki.app.config import AppSettings
from infinite_wiki.app.services.gemini_service import GeminiService
from infinite_wiki.app.state.miner import MinerController
from infinite_wiki.app.state.wiki import WikiController
from infinite_wiki.app.state.writer import WriterController
from infinite_wiki.app.ui.gradio import Session, create_interface
from infinite_wiki.utils.logging_config import configure_logging
from infinite_wiki.utils.observability import get_logger
from infinite_wiki.utils.telemetry import StructuredTelemetry, TelemetryLogger


class InfiniteWikiApp:
    """High-level application facade bundling dependencies."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        service: Optional[GeminiService] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.settings = settings or AppSettings.from_env()
        self._logger = get_logger(__name__).bind(component="app_facade")
        self.service = service or GeminiService(
            self.settings.api_key,
            client=client,
            settings=self.settings.gateway,
        )
        self._logger.info(
            "Application dependencies wired",
            context={
                "configured": self.service.is_configured,
                "text_model": self.settings.gateway.text_model,
                "art_model": self.settings.gateway.art_model,
                "initial_topic": self.settings.initial_topic,
            },
        )

    # Controller factories ------------------------------------------------------
    def create_wiki_controller(self, **kwargs: Any) -> WikiController:
        telemetry = kwargs.pop("telemetry", None) or StructuredTelemetry(
            listeners=[TelemetryLogger()]
        )
        kwargs.setdefault("initial_topic", self.settings.initial_topic)
        kwargs.setdefault("random_from_model", self.settings.random_from_model)
        return WikiController(self.service, telemetry=telemetry, **kwargs)

    def create_miner_controller(self) -> MinerController:
        return MinerController(self.service)

    def create_writer_controller(self) -> WriterController:
        return WriterController(self.service)

    def create_session(self) -> Session:
        return Session(
            wiki=self.create_wiki_controller(),
            miner=self.create_miner_controller(),
            writer=self.create_writer_controller(),
        )

    def create_gradio_interface(self):
        return create_interface(self.service, self.settings, new_session=self.create_session)


def main() -> None:
    configure_logging()
    app = InfiniteWikiApp()
    interface = app.create_gradio_interface()
    interface.queue().launch(
        server_name=app.settings.server_name,
        server_port=app.settings.server_port,
        share=app.settings.share,
    )


__all__ = ["InfiniteWikiApp", "main"]


if __name__ == "__main__":
    main()
