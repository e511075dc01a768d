"""Environment-driven settings for the gateway and the interface."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_TEXT_MODEL = "gemini-2.5-flash-lite"
DEFAULT_ART_MODEL = "gemini-2.5-flash"
DEFAULT_INITIAL_TOPIC = "Hypertext"


def _flag(env: Mapping[str, str], name: str) -> bool:
    value = env.get(name, "")
    if not value:
        return False
    return str(value).strip().lower() in _TRUTHY


def _text(env: Mapping[str, str], name: str, default: str) -> str:
    value = str(env.get(name, "") or "").strip()
    return value or default


@dataclass(frozen=True)
class GatewaySettings:
    """Model selection and art-direction toggles for :class:`GeminiService`."""

    text_model: str = DEFAULT_TEXT_MODEL
    art_model: str = DEFAULT_ART_MODEL
    # Slower, higher-quality art when the model may think first.
    art_thinking: bool = False
    # Also request the topic drawn as blocky lettering.
    art_text: bool = False


@dataclass(frozen=True)
class AppSettings:
    api_key: Optional[str] = None
    gateway: GatewaySettings = field(default_factory=GatewaySettings)
    initial_topic: str = DEFAULT_INITIAL_TOPIC
    random_from_model: bool = False
    share: bool = False
    server_name: str = "0.0.0.0"
    server_port: int = 7860

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppSettings":
        env = os.environ if env is None else env
        api_key = (env.get("API_KEY") or env.get("GEMINI_API_KEY") or "").strip() or None
        gateway = GatewaySettings(
            text_model=_text(env, "INFINITE_WIKI_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            art_model=_text(env, "INFINITE_WIKI_ART_MODEL", DEFAULT_ART_MODEL),
            art_thinking=_flag(env, "INFINITE_WIKI_ART_THINKING"),
            art_text=_flag(env, "INFINITE_WIKI_ART_TEXT"),
        )
        try:
            port = int(env.get("INFINITE_WIKI_PORT", "") or 7860)
        except ValueError:
            port = 7860
        return cls(
            api_key=api_key,
            gateway=gateway,
            initial_topic=_text(env, "INFINITE_WIKI_INITIAL_TOPIC", DEFAULT_INITIAL_TOPIC),
            random_from_model=_flag(env, "INFINITE_WIKI_RANDOM_FROM_MODEL"),
            share=_flag(env, "INFINITE_WIKI_SHARE"),
            server_port=port,
        )


__all__ = ["AppSettings", "GatewaySettings"]
