import logging, os, sys

from .utils.smart_logger import LogLevel, configure_logging

_LOGGING_INITIALIZED = False  # process-level guard


def resolve_bot_log_level() -> LogLevel:
    desired = os.getenv("BOT_LOG_LEVEL", "STANDARD").upper()
    valid = {lvl.name for lvl in LogLevel}
    if desired not in valid:
        print(f"Warning: Invalid BOT_LOG_LEVEL '{desired}'. Valid options: {', '.join(sorted(valid))}")
        return LogLevel.STANDARD
    return LogLevel[desired]


def setup_logging() -> LogLevel:
    """Idempotent: won't add duplicate handlers if called multiple times."""
    global _LOGGING_INITIALIZED
    bot_level = resolve_bot_log_level()
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    if not _LOGGING_INITIALIZED:
        root = logging.getLogger()
        if not root.handlers:
            configure_logging(
                level=bot_level,
                format_string="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                silence_external=True,
            )
        _LOGGING_INITIALIZED = True

    logging.captureWarnings(True)

    for name in (
        "routine_bot",                  # whole package
        "routine_bot.state_manager",    # selection / transcript events
        "routine_bot.llm_service",      # completion calls
        "gunicorn.error",
        "gunicorn.access",
    ):
        logging.getLogger(name).setLevel(level)

    return bot_level
