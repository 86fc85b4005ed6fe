"""
Routine Bot Application Factory
===============================

Wires together:
- redis_manager.py (persisted product selection)
- catalog.py (product catalog source)
- llm_service.py (chat completion client)
- state_manager.py (selection + transcript for the page session)
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Optional

from flask import Flask
from flask_cors import CORS

from .catalog import CatalogSource
from .config import get_config
from .llm_service import ChatCompletionClient
from .redis_manager import RedisSelectionStore
from .state_manager import CompletionClient, RoutineStateManager, SelectionStore

log = logging.getLogger(__name__)

__version__ = "1.0.0"


def create_app(
    config_name: Optional[str] = None,
    *,
    selection_store: Optional[SelectionStore] = None,
    chat_client: Optional[CompletionClient] = None,
    catalog: Optional[CatalogSource] = None,
) -> Flask:
    """
    App factory.

    INITIALIZATION ORDER:
    1. Selection store (Redis) & health check
    2. Catalog source and chat completion client
    3. State manager (restores the persisted selection)
    4. Routes and error handlers

    Collaborators can be injected, which is how the tests avoid Redis and the
    network.
    """
    cfg = get_config(config_name)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = cfg.SECRET_KEY
    app.config["JSON_SORT_KEYS"] = cfg.JSON_SORT_KEYS
    app.config["TESTING"] = getattr(cfg, "TESTING", False)

    if cfg.CORS_ALLOW_ORIGINS:
        allowed_origins = [o.strip() for o in cfg.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
    else:
        allowed_origins = ["*"]

    CORS(
        app,
        resources={r"/api/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # STEP 1: Selection store
    # ────────────────────────────────────────────────────────
    log.info("INIT_REDIS | starting Redis connection")
    store = selection_store or RedisSelectionStore(cfg=cfg)
    health = store.health_check() if hasattr(store, "health_check") else {"ping_success": True}
    if not health.get("ping_success", False):
        log.error(f"INIT_REDIS_FAILED | health={health}")
        raise RuntimeError(f"Redis connection failed: {health.get('error')}")
    log.info(f"INIT_REDIS_SUCCESS | latency_ms={health.get('latency_ms', 'unknown')}")
    app.extensions["selection_store"] = store

    # ────────────────────────────────────────────────────────
    # STEP 2: Catalog + chat client
    # ────────────────────────────────────────────────────────
    app.extensions["catalog"] = catalog or CatalogSource(cfg.catalog_location, timeout=cfg.CATALOG_TIMEOUT_SECONDS)
    client = chat_client or ChatCompletionClient(
        cfg.OPENAI_API_KEY,
        model=cfg.CHAT_MODEL,
        max_tokens=cfg.CHAT_MAX_TOKENS,
        endpoint=cfg.CHAT_API_URL,
        timeout=cfg.CHAT_TIMEOUT_SECONDS,
    )
    if not cfg.OPENAI_API_KEY and chat_client is None:
        log.warning("INIT_CHAT_CLIENT | OPENAI_API_KEY is empty, completions will fail until it is set")

    # ────────────────────────────────────────────────────────
    # STEP 3: State manager for this page session
    # ────────────────────────────────────────────────────────
    app.extensions["state"] = RoutineStateManager(store, client)
    log.info(f"INIT_STATE | restored_selection={len(app.extensions['state'].selection)}")

    # ────────────────────────────────────────────────────────
    # STEP 4: Routes
    # ────────────────────────────────────────────────────────
    from .routes import register_routes
    registered = register_routes(app)
    log.info(f"REGISTER_ROUTES_SUCCESS | blueprints={registered}")

    @app.errorhandler(500)
    def handle_internal_error(error):
        log.error(f"INTERNAL_ERROR | error={error}", exc_info=True)
        return {
            "error": "Internal server error",
            "timestamp": datetime.now().isoformat(),
            "details": str(error) if app.debug else "Contact support",
        }, 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return {
            "error": "Endpoint not found",
            "timestamp": datetime.now().isoformat(),
        }, 404

    app.version = os.getenv("APP_VERSION", __version__)
    log.info(f"APP_INIT_COMPLETE | config={type(cfg).__name__} | version={app.version}")
    return app
