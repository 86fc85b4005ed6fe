# routine_bot/llm_service.py
"""
Chat completion client
──────────────────────
POSTs the whole transcript to an OpenAI-compatible chat completions endpoint
and returns the single assistant reply. Every failure (network error, timeout,
non-2xx status, unexpected body) surfaces as CompletionError so callers only
have one thing to catch.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import get_config
from .enums import FailureKind
from .errors import CompletionError

log = logging.getLogger(__name__)


def _extract_reply(data: Any) -> Optional[str]:
    """choices[0].message.content if it is a non-empty string, else None."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str) or not content:
        return None
    return content


class ChatCompletionClient:
    """Service class for the chat completion endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        cfg = get_config()
        # Supplied out of band, never validated before use.
        self.api_key = cfg.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or cfg.CHAT_MODEL
        self.max_tokens = max_tokens or cfg.CHAT_MAX_TOKENS
        self.endpoint = endpoint or cfg.CHAT_API_URL
        self.timeout = timeout or cfg.CHAT_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def build_payload(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
        }

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send the conversation and return the assistant reply text."""
        payload = self.build_payload(messages)
        log.debug(f"CHAT_REQUEST | endpoint={self.endpoint} | model={self.model} | messages={len(messages)}")

        try:
            response = requests.post(
                self.endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            log.error(f"CHAT_TIMEOUT | endpoint={self.endpoint} | timeout={self.timeout}s")
            raise CompletionError(FailureKind.TRANSPORT, "timeout") from e
        except requests.exceptions.RequestException as e:
            log.error(f"CHAT_TRANSPORT_ERROR | endpoint={self.endpoint} | error={e}")
            raise CompletionError(FailureKind.TRANSPORT, str(e)) from e

        if not response.ok:
            log.error(f"CHAT_HTTP_ERROR | status={response.status_code} | body={response.text[:300]}")
            raise CompletionError(FailureKind.TRANSPORT, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            log.error(f"CHAT_DECODE_ERROR | body={response.text[:300]}")
            raise CompletionError(FailureKind.MALFORMED, "response body is not JSON") from e

        reply = _extract_reply(data)
        if reply is None:
            log.error(f"CHAT_MALFORMED_RESPONSE | keys={list(data.keys()) if isinstance(data, dict) else type(data).__name__}")
            raise CompletionError(FailureKind.MALFORMED, "no reply at choices[0].message.content")

        return reply
