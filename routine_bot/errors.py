"""
Exception hierarchy shared by the state manager, the catalog source,
the chat client and the routes.
"""

from __future__ import annotations

from .enums import FailureKind


class RoutineBotError(Exception):
    """Base class for every error raised by routine_bot."""


class CatalogError(RoutineBotError):
    """The product catalog could not be fetched or parsed."""


class ProductNotFoundError(RoutineBotError):
    def __init__(self, product_id: object) -> None:
        super().__init__(f"Unknown product id: {product_id!r}")
        self.product_id = product_id


class EmptySelectionError(RoutineBotError):
    """A routine was requested with nothing selected."""


class RequestInFlightError(RoutineBotError):
    """A completion request is already outstanding."""


class CompletionError(RoutineBotError):
    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
