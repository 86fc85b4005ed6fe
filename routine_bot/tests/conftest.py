from __future__ import annotations

import json
from typing import Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from routine_bot import create_app
from routine_bot.catalog import CatalogSource
from routine_bot.enums import FailureKind
from routine_bot.errors import CompletionError
from routine_bot.models import Product
from routine_bot.redis_manager import RedisSelectionStore

SELECTION_KEY = "test:selectedProducts"

CATALOG = {
    "products": [
        {"id": 1, "name": "Gentle Cleanser", "brand": "CeraVe", "category": "skincare",
         "image": "a.jpg", "description": "Cleans gently. Keeps the barrier intact. Fragrance free."},
        {"id": 2, "name": "Matte Foundation", "brand": "Maybelline", "category": "makeup",
         "image": "b.jpg", "description": "Lightweight coverage"},
        {"id": 3, "name": "Night Cream", "brand": "Garnier", "category": "skincare",
         "image": "c.jpg", "description": "Rich night cream! Wake up hydrated?"},
    ]
}


class FakeRedis:
    """Just enough of redis.Redis for the selection store."""

    def __init__(self, data: Optional[Dict[str, str]] = None, fail: bool = False) -> None:
        self.data: Dict[str, str] = dict(data or {})
        self.fail = fail

    def ping(self) -> bool:
        if self.fail:
            raise RedisConnectionError("down")
        return True

    def get(self, key: str) -> Optional[str]:
        if self.fail:
            raise RedisConnectionError("down")
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        if self.fail:
            raise RedisConnectionError("down")
        self.data[key] = value
        return True


class FakeChatClient:
    def __init__(self, replies: Optional[List[object]] = None) -> None:
        # Each entry is either reply text or an exception to raise.
        self.replies = list(replies or [])
        self.calls: List[List[Dict[str, str]]] = []

    def complete(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append([dict(m) for m in messages])
        if not self.replies:
            raise CompletionError(FailureKind.TRANSPORT, "no reply scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def store(fake_redis: FakeRedis) -> RedisSelectionStore:
    return RedisSelectionStore(client=fake_redis, key=SELECTION_KEY)


@pytest.fixture()
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture()
def catalog_file(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps(CATALOG), encoding="utf-8")
    return path


@pytest.fixture()
def products() -> List[Product]:
    return [Product.from_dict(p) for p in CATALOG["products"]]


@pytest.fixture()
def app(store, chat_client, catalog_file):
    app = create_app(
        "testing",
        selection_store=store,
        chat_client=chat_client,
        catalog=CatalogSource(str(catalog_file)),
    )
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(app):
    with app.test_client() as c:
        yield c
