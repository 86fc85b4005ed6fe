"""
Utility helpers
"""

from __future__ import annotations

import json
import re
from typing import Any, List

_SENTENCE_RGX = re.compile(r"[^.!?]+[.!?]+")


def get_short_description(text: str | None, max_sentences: int = 2) -> str:
    """Return at most the first `max_sentences` sentences of `text`.

    A sentence is a run of non-terminator characters followed by one or more
    of `.`, `!` or `?`. Text without any terminator comes back unchanged.
    """
    if not text:
        return ""
    sentences = _SENTENCE_RGX.findall(text)
    if not sentences:
        return text
    return " ".join(s.strip() for s in sentences[:max_sentences]).strip()


def load_json_or_none(raw: str | bytes | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


def unique(seq: List[Any]) -> List[Any]:
    seen: set[Any] = set()
    out: List[Any] = []
    for x in seq:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out
