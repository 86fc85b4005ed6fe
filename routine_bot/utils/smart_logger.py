# routine_bot/utils/smart_logger.py
"""
Smart, modular logging for the routine bot.
Provides clean, contextual one-line logs with configurable verbosity levels.
"""

import logging
import os
import sys
from typing import Any, Dict, Optional
from enum import Enum


class LogLevel(Enum):
    MINIMAL = 1      # Only critical flow events
    STANDARD = 2     # Key decisions and state changes
    DETAILED = 3     # Include data sizes and timing
    DEBUG = 4        # Everything including API calls


class SmartLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    def _clean_log(self, level: str, emoji: str, category: str, message: str, **kwargs):
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items() if v is not None])
        if details:
            full_message = f"{emoji} {category} | {message} | {details}"
        else:
            full_message = f"{emoji} {category} | {message}"

        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # FLOW EVENTS
    # ═══════════════════════════════════════════════════════════

    def selection_changed(self, action: str, product_id: Any = None, size: int = 0):
        """Log a selection mutation"""
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🛍️", "SELECTION", action, product=product_id, size=size)

    def session_started(self, product_count: int):
        """Log the start of a routine generation session"""
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "🚀", "ROUTINE_SESSION", "started", products=product_count)

    def completion_start(self, turns: int):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "📡", "COMPLETION", "requested", turns=turns)

    def completion_done(self, reply_chars: int, elapsed_time: Optional[float] = None):
        if not self._should_log(LogLevel.MINIMAL):
            return
        extras: Dict[str, Any] = {"chars": reply_chars}
        if elapsed_time is not None:
            extras["time"] = f"{elapsed_time:.3f}s"
        self._clean_log("info", "✅", "COMPLETION", "received", **extras)

    def completion_failed(self, kind: str, error_msg: Optional[str] = None):
        # Failures are always logged regardless of level
        self._clean_log("warning", "❌", "COMPLETION", "failed", kind=kind, msg=error_msg)

    # ═══════════════════════════════════════════════════════════
    # DETAILED EVENTS
    # ═══════════════════════════════════════════════════════════

    def catalog_loaded(self, source: str, count: int, duration_ms: Optional[int] = None):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("debug", "🧴", "CATALOG", "loaded", source=source, count=count, duration_ms=duration_ms)

    def warning(self, warning_type: str, details: Optional[str] = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("warning", "⚠️", "WARNING", warning_type, details=details)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, SmartLogger] = {}


def get_smart_logger(module_name: str, level: LogLevel = None) -> SmartLogger:
    """Get or create a smart logger for a module"""
    if module_name not in _loggers:
        default_level = getattr(LogLevel, os.getenv("BOT_LOG_LEVEL", "STANDARD").upper(), LogLevel.STANDARD)
        _loggers[module_name] = SmartLogger(module_name, level or default_level)

    if level:
        _loggers[module_name].set_level(level)

    return _loggers[module_name]


def configure_logging(level: LogLevel = LogLevel.STANDARD,
                      format_string: str = None,
                      silence_external: bool = True):
    """Configure the entire logging system"""
    if not format_string:
        format_string = "%(asctime)s | %(message)s"

    logging.basicConfig(
        level=logging.DEBUG if level == LogLevel.DEBUG else logging.INFO,
        format=format_string,
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if silence_external:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    for smart_logger in _loggers.values():
        smart_logger.set_level(level)
