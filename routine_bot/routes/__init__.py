# routine_bot/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `routine_bot/routes/<name>.py`
with the variable name **bp** and it will be discovered &
registered when `register_routes(app)` is called.

The app factory (routine_bot.__init__.py) stores shared
objects like `state` and `catalog` into `app.extensions`
so the individual route modules can reach them through
the accessors below.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import List

from flask import Blueprint, Flask, current_app

from ..catalog import CatalogSource
from ..state_manager import RoutineStateManager

log = logging.getLogger(__name__)


def register_routes(app: Flask) -> List[str]:
    registered: List[str] = []
    for _, name, _ in pkgutil.iter_modules(__path__):
        module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        bp: Blueprint | None = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp)
            registered.append(name)
            log.info(f"REGISTER_ROUTES | blueprint={name} | url_prefix={bp.url_prefix or '/'}")
    return registered


def get_state() -> RoutineStateManager:
    return current_app.extensions["state"]


def get_catalog() -> CatalogSource:
    return current_app.extensions["catalog"]
