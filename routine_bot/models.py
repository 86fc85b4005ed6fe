"""
Dataclass models for catalog products, chat turns and completion results.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .enums import FailureKind, Role

PRODUCT_FIELDS = ("id", "name", "brand", "category", "image", "description")


def same_id(a: Any, b: Any) -> bool:
    """Catalog ids are ints in JSON but strings in the page, compare loosely."""
    return str(a) == str(b)


@dataclass(frozen=True)
class Product:
    """Read-only catalog record. Missing fields are kept as empty strings."""
    id: Any
    name: str = ""
    brand: str = ""
    category: str = ""
    image: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        values = {}
        for key in PRODUCT_FIELDS[1:]:
            raw = data.get(key)
            values[key] = "" if raw is None else str(raw)
        return cls(id=data.get("id", ""), **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Turn:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of one completion request. `text` is set iff it succeeded."""
    text: Optional[str] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, text: str) -> "CompletionResult":
        return cls(text=text)

    @classmethod
    def failed(cls, kind: FailureKind, error: str | None = None) -> "CompletionResult":
        return cls(failure=kind, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "text": self.text,
            "failure": self.failure.value if self.failure else None,
        }
