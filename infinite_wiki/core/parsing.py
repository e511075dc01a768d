"""Unwrapping and shape checks for model JSON payloads."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


class MalformedResponseError(ValueError):
    """Raised when a model response fails shape or content validation."""


def strip_code_fence(raw: str) -> str:
    """Return ``raw`` trimmed, without a surrounding ```` ```json ```` fence."""

    text = (raw or "").strip()
    match = _FENCE_RE.match(text)
    if match and match.group(1):
        return match.group(1).strip()
    return text


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Response is not valid JSON: {exc.msg}") from exc


def parse_json_object(raw: str) -> Dict[str, Any]:
    text = strip_code_fence(raw)
    if not text.startswith("{") or not text.endswith("}"):
        raise MalformedResponseError("Response is not a valid JSON object")
    payload = _loads(text)
    if not isinstance(payload, dict):
        raise MalformedResponseError("Response is not a valid JSON object")
    return payload


def parse_json_array(raw: str) -> List[Any]:
    payload = _loads(strip_code_fence(raw))
    if not isinstance(payload, list):
        raise MalformedResponseError("Response is not a valid array.")
    return payload


def parse_json(raw: str) -> Any:
    return _loads(strip_code_fence(raw))


__all__ = [
    "MalformedResponseError",
    "strip_code_fence",
    "parse_json",
    "parse_json_array",
    "parse_json_object",
]
