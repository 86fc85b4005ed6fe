# routine_bot/state_manager.py
"""
Selection & Chat State Manager
==============================

Owns the two collections behind the page:

- the Selection: ordered, unique-by-id list of catalog products, persisted to
  the selection store after every mutation and restored at startup;
- the Transcript: append-only chat turns for the current routine session,
  kept in memory only.

One instance lives for the whole page session (see ``create_app``). Mutations
are serialised with a lock; the lock is released while a completion request
is on the wire, and a second completion is refused until the first returns.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional, Protocol

from .enums import FailureKind, Role, SelectionAction
from .errors import CompletionError, EmptySelectionError, ProductNotFoundError, RequestInFlightError
from .models import CompletionResult, Product, Turn, same_id
from .prompts import SYSTEM_PROMPT, build_routine_request
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("state_manager")


class SelectionStore(Protocol):
    def load(self) -> List[Product]: ...

    def save(self, products: List[Product]) -> bool: ...


class CompletionClient(Protocol):
    def complete(self, messages: List[Dict[str, str]]) -> str: ...


class RoutineStateManager:
    def __init__(self, store: SelectionStore, chat_client: CompletionClient) -> None:
        self.store = store
        self.chat_client = chat_client
        self._lock = threading.RLock()
        self._selection: List[Product] = list(store.load())
        self._transcript: List[Turn] = []
        self._in_flight = False
        smart_log.selection_changed(SelectionAction.RESTORED.value, size=len(self._selection))

    # ────────────────────────────────────────────────────────
    # Selection
    # ────────────────────────────────────────────────────────

    @property
    def selection(self) -> List[Product]:
        with self._lock:
            return list(self._selection)

    def selected_ids(self) -> List[str]:
        with self._lock:
            return [str(p.id) for p in self._selection]

    def is_selected(self, product_id: Any) -> bool:
        with self._lock:
            return any(same_id(p.id, product_id) for p in self._selection)

    def toggle_selection(self, product_id: Any, products: List[Product]) -> SelectionAction:
        """Remove the product if selected, otherwise append it from `products`."""
        with self._lock:
            index = self._index_of(product_id)
            if index is not None:
                del self._selection[index]
                action = SelectionAction.REMOVED
            else:
                product = next((p for p in products if same_id(p.id, product_id)), None)
                if product is None:
                    raise ProductNotFoundError(product_id)
                self._selection.append(product)
                action = SelectionAction.ADDED
            self._persist(action, product_id)
            return action

    def remove_selection(self, product_id: Any) -> bool:
        with self._lock:
            index = self._index_of(product_id)
            if index is None:
                return False
            del self._selection[index]
            self._persist(SelectionAction.REMOVED, product_id)
            return True

    def clear_selection(self) -> None:
        with self._lock:
            self._selection = []
            self._persist(SelectionAction.CLEARED)

    def _index_of(self, product_id: Any) -> Optional[int]:
        for i, p in enumerate(self._selection):
            if same_id(p.id, product_id):
                return i
        return None

    def _persist(self, action: SelectionAction, product_id: Any = None) -> None:
        # A failed write leaves the in-memory selection authoritative.
        if not self.store.save(self._selection):
            smart_log.warning("SELECTION_NOT_PERSISTED", details=f"action={action.value}")
        smart_log.selection_changed(action.value, product_id, len(self._selection))

    # ────────────────────────────────────────────────────────
    # Transcript
    # ────────────────────────────────────────────────────────

    @property
    def transcript(self) -> List[Turn]:
        with self._lock:
            return list(self._transcript)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def begin_routine_session(self, selection: Optional[List[Product]] = None) -> List[Turn]:
        """Reset the transcript to the system instruction plus the selection summary."""
        with self._lock:
            products = self._selection if selection is None else selection
            if not products:
                raise EmptySelectionError("Select at least one product before generating a routine")
            if self._in_flight:
                raise RequestInFlightError("A reply is still being generated")

            self._transcript = [
                Turn(Role.SYSTEM, SYSTEM_PROMPT),
                Turn(Role.USER, build_routine_request(products)),
            ]
            smart_log.session_started(len(products))
            return list(self._transcript)

    def append_user_turn(self, text: str) -> Optional[List[Turn]]:
        """Append a follow-up question; blank input is ignored and returns None.

        Raises RequestInFlightError while a reply is pending, so a reply always
        follows the turn it answers.
        """
        question = (text or "").strip()
        if not question:
            return None
        with self._lock:
            if self._in_flight:
                raise RequestInFlightError("A reply is still being generated")
            self._transcript.append(Turn(Role.USER, question))
            return list(self._transcript)

    def request_completion(self) -> CompletionResult:
        """Send the transcript; append the reply on success, leave it untouched on failure."""
        with self._lock:
            if self._in_flight:
                smart_log.completion_failed(FailureKind.BUSY.value)
                return CompletionResult.failed(FailureKind.BUSY, "completion already in flight")
            if not self._transcript:
                smart_log.completion_failed(FailureKind.NO_SESSION.value)
                return CompletionResult.failed(FailureKind.NO_SESSION, "no routine session started")
            self._in_flight = True
            messages = [t.to_dict() for t in self._transcript]

        start = time.time()
        smart_log.completion_start(len(messages))
        reply: Optional[str] = None
        try:
            reply = self.chat_client.complete(messages)
        except CompletionError as e:
            smart_log.completion_failed(e.kind.value, str(e))
            return CompletionResult.failed(e.kind, str(e))
        finally:
            with self._lock:
                if reply is not None:
                    self._transcript.append(Turn(Role.ASSISTANT, reply))
                self._in_flight = False

        smart_log.completion_done(len(reply), time.time() - start)
        return CompletionResult.success(reply)
