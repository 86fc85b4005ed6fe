#!/usr/bin/env python3
"""
Routine Bot Application Entry Point
- Works under both Gunicorn (WSGI import) and python CLI.
- Ensures logging is initialized exactly once per process.
- Aligns Flask app logger with root logger for consistent output.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Tuple

from dotenv import load_dotenv
from flask import request

# Load env before any other imports that might read it
load_dotenv()

# Local imports after env load
from routine_bot import create_app  # noqa: E402
from routine_bot.logging_setup import setup_logging  # noqa: E402
from routine_bot.utils.smart_logger import LogLevel  # noqa: E402


def _to_python_level(level: LogLevel) -> int:
    mapping = {
        "MINIMAL": logging.WARNING,
        "STANDARD": logging.INFO,
        "DETAILED": logging.DEBUG,
        "DEBUG": logging.DEBUG,
    }
    return mapping.get(level.name, logging.INFO)


def validate_environment(strict: bool) -> None:
    """
    Validate critical env vars.
    - If strict=True: exit on missing vars (CLI path).
    - If strict=False: log a warning (WSGI path) so the pod can come up and serve /health.
    """
    required = {
        "OPENAI_API_KEY": "chat completion requests",
        "REDIS_HOST": "selection storage",
    }
    missing = [f"{k} (required for {v})" for k, v in required.items() if not os.getenv(k)]

    if missing:
        msg = "Missing required environment variables: " + ", ".join(missing)
        if strict:
            print("Error:", msg)
            sys.exit(1)
        else:
            logging.getLogger(__name__).warning(msg)


def _wire_app_logger(app, log_level: LogLevel) -> None:
    """Make Flask's app.logger flow into the root logger."""
    if app.logger.handlers:
        app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(_to_python_level(log_level))


def create_application(strict_env: bool = False):
    validate_environment(strict=strict_env)

    log_level = setup_logging()
    app = create_app()
    _wire_app_logger(app, log_level)

    @app.before_request
    def _log_request():
        app.logger.info("→ %s %s", request.method, request.path)

    return app


def _resolve_server_config() -> Tuple[str, int, bool]:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))

    flask_debug = os.getenv("FLASK_DEBUG", "").lower()
    if flask_debug in ("1", "true", "yes", "on"):
        debug = True
    elif flask_debug in ("0", "false", "no", "off"):
        debug = False
    else:
        debug = os.getenv("APP_ENV", "development").lower() == "development"

    return host, port, debug


def _print_startup_info(host: str, port: int, debug: bool, log_level: LogLevel) -> None:
    print("Routine Bot Starting")
    print("=" * 60)
    print(f"Server:       http://{host}:{port}")
    print(f"Health check: http://{host}:{port}/health")
    print(f"Environment:  {os.getenv('APP_ENV', 'development')}")
    print(f"Debug mode:   {debug}")
    print(f"Log level:    {log_level.name}")
    print(f"Process ID:   {os.getpid()}")
    print("=" * 60)


def main() -> None:
    app = create_application(strict_env=True)
    log_level = setup_logging()

    host, port, debug = _resolve_server_config()
    _print_startup_info(host, port, debug, log_level)

    try:
        app.run(
            host=host,
            port=port,
            debug=debug,
            use_reloader=False,  # a reloader would build a second state manager
            threaded=True,
        )
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")


if __name__ == "__main__":
    main()
else:
    # WSGI entrypoint for Gunicorn: `gunicorn run:app`
    app = create_application(strict_env=False)
