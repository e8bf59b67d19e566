"""Turn raw generator text into parsed JSON.

The generator is told to answer with JSON only but regularly wraps the payload
in markdown fences or returns nothing at all. Everything returned from here is
still untrusted and must go through schema validation.
"""
from __future__ import annotations

import json
import re
from typing import Any, Optional

from .errors import EmptyResponse, MalformedResponse

_FENCED_BLOCK = re.compile(r"^```[\w+-]*[ \t]*\r?\n?(?P<body>.*?)\r?\n?```$", re.DOTALL)
_OPENING_FENCE = re.compile(r"^```[\w+-]*")
_CLOSING_FENCE = re.compile(r"```$")


def strip_code_fences(content: str) -> str:
    """Remove an enclosing markdown fence, or an unpaired one at either end.

    Fences inside the payload, such as a code sample quoted in a comment, are kept.
    """
    text = content.strip()
    match = _FENCED_BLOCK.match(text)
    if match:
        return match.group("body").strip()
    text = _OPENING_FENCE.sub("", text, count=1).strip()
    return _CLOSING_FENCE.sub("", text, count=1).strip()


def sanitize_response(raw: Optional[str]) -> Any:
    if raw is None or not raw.strip():
        raise EmptyResponse("Generator returned an empty response")
    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise MalformedResponse("Generator response held only code fences")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"Generator response is not valid JSON: {exc.msg}") from exc


__all__ = ["sanitize_response", "strip_code_fences"]
