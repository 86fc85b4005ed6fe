"""
Environment driven configuration for the routine bot.
One config class per environment, picked by APP_ENV.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

log = logging.getLogger(__name__)


class BaseConfig:
    SECRET_KEY: str = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    JSON_SORT_KEYS: bool = False

    # Redis (selection storage)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB: int = int(os.getenv("REDIS_DB", 0))
    REDIS_DECODE_RESPONSES: bool = True
    SELECTION_KEY: str = os.getenv("SELECTION_KEY", "selectedProducts")

    # Chat completion endpoint. The key is passed through as-is.
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    CHAT_API_URL: str = os.getenv("CHAT_API_URL", "https://api.openai.com/v1/chat/completions")
    CHAT_MODEL: str = os.getenv("CHAT_MODEL", "gpt-4o")
    CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "400"))
    CHAT_TIMEOUT_SECONDS: float = float(os.getenv("CHAT_TIMEOUT_SECONDS", "30"))

    # Product catalog: CATALOG_URL wins over CATALOG_PATH when both are set
    CATALOG_URL: str = os.getenv("CATALOG_URL", "").strip()
    CATALOG_PATH: str = os.getenv("CATALOG_PATH", str(BASE_DIR / "data" / "products.json"))
    CATALOG_TIMEOUT_SECONDS: float = float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10"))

    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "").strip()

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def catalog_location(self) -> str:
        return self.CATALOG_URL or self.CATALOG_PATH


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False


class TestingConfig(BaseConfig):
    TESTING: bool = True
    REDIS_DB: int = 15
    SELECTION_KEY: str = "test:selectedProducts"


def get_config(env: str | None = None) -> BaseConfig:
    """Get configuration instance directly - no complex manager."""
    env = (env or os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development"))).lower()
    mapping = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = mapping.get(env, DevelopmentConfig)
    cfg = config_class()

    if not hasattr(get_config, "_logged_startup"):
        log.info(f"⚙️ CONFIG_STARTUP | env={env} | config_class={config_class.__name__}")
        log.info(f"🤖 CHAT_CONFIG | model={cfg.CHAT_MODEL} | max_tokens={cfg.CHAT_MAX_TOKENS} | timeout={cfg.CHAT_TIMEOUT_SECONDS}s")
        log.info(f"💾 REDIS_CONFIG | host={cfg.REDIS_HOST} | port={cfg.REDIS_PORT} | db={cfg.REDIS_DB} | key={cfg.SELECTION_KEY}")
        log.info(f"🧴 CATALOG_CONFIG | location={cfg.catalog_location}")
        get_config._logged_startup = True
    return cfg
