"""
Redis Selection Store
=====================

Durable key-value storage for the product selection. A single fixed key holds
a JSON array of full product records, written after every mutation and read
once at startup.

Reads never raise: an absent key, a Redis error or a value that does not parse
as a list of product objects all come back as an empty selection.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List

import redis
from redis.exceptions import RedisError

from .config import BaseConfig, get_config
from .models import Product
from .utils.helpers import load_json_or_none

log = logging.getLogger(__name__)


class RedisSelectionStore:
    """Persist the ordered selection under one Redis key."""

    def __init__(self, client: redis.Redis | None = None, key: str | None = None, cfg: BaseConfig | None = None):
        cfg = cfg or get_config()
        self.redis: redis.Redis = client or redis.Redis(
            host=cfg.REDIS_HOST,
            port=cfg.REDIS_PORT,
            db=cfg.REDIS_DB,
            decode_responses=cfg.REDIS_DECODE_RESPONSES,
            socket_timeout=10,
            socket_connect_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        self.key = key or cfg.SELECTION_KEY

    def health_check(self) -> Dict[str, Any]:
        start = time.time()
        try:
            self.redis.ping()
            return {
                "ping_success": True,
                "latency_ms": int((time.time() - start) * 1000),
            }
        except Exception as e:  # noqa: BLE001
            log.error(f"REDIS_HEALTH_CHECK_FAILED | error={e}")
            return {"ping_success": False, "error": str(e)}

    def load(self) -> List[Product]:
        try:
            raw = self.redis.get(self.key)
        except RedisError as e:
            log.error(f"SELECTION_LOAD_ERROR | key={self.key} | error={e}")
            return []

        if raw is None:
            log.info(f"SELECTION_LOAD_EMPTY | key={self.key}")
            return []

        products = self.parse(raw)
        if products is None:
            log.warning(f"SELECTION_LOAD_CORRUPT | key={self.key} | size_bytes={len(raw)}")
            return []

        log.info(f"SELECTION_LOADED | key={self.key} | count={len(products)}")
        return products

    @staticmethod
    def parse(raw: str | bytes) -> List[Product] | None:
        """Decode a stored value; None when it is not a list of product objects."""
        data = load_json_or_none(raw)
        if not isinstance(data, list):
            return None

        products: List[Product] = []
        seen: set[str] = set()
        for entry in data:
            if not isinstance(entry, dict) or "id" not in entry:
                return None
            product = Product.from_dict(entry)
            if str(product.id) in seen:
                continue
            seen.add(str(product.id))
            products.append(product)
        return products

    def save(self, products: List[Product]) -> bool:
        payload = json.dumps([p.to_dict() for p in products], ensure_ascii=False)
        try:
            result = self.redis.set(self.key, payload)
        except RedisError as e:
            log.error(f"SELECTION_SAVE_ERROR | key={self.key} | count={len(products)} | error={e}")
            return False

        log.debug(f"SELECTION_SAVED | key={self.key} | count={len(products)}")
        return bool(result)
