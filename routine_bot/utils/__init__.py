# routine_bot/utils/__init__.py
"""
Expose helpers at package-level for convenience:

    from routine_bot.utils import get_short_description
"""

from .helpers import (  # noqa: F401
    get_short_description,
    load_json_or_none,
    unique,
)

__all__ = [
    "get_short_description",
    "load_json_or_none",
    "unique",
]
