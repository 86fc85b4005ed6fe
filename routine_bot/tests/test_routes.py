from __future__ import annotations

import json

import pytest
from markupsafe import escape

from routine_bot import create_app
from routine_bot.catalog import CatalogSource
from routine_bot.enums import FailureKind
from routine_bot.errors import CompletionError
from routine_bot.render import (
    CATALOG_ERROR_MESSAGE,
    CONNECTION_ERROR_MESSAGE,
    EMPTY_SELECTION_ERROR,
    BUSY_MESSAGE,
    FOLLOW_UP_FAILED_MESSAGE,
    NO_SESSION_MESSAGE,
    ROUTINE_FAILED_MESSAGE,
)

from conftest import SELECTION_KEY, FakeChatClient


def _toggle(client, product_id, category="skincare"):
    return client.post("/api/selection/toggle", json={"product_id": product_id, "category": category})


def _select_and_generate(client, chat_client, reply="Morning: cleanse.\nNight: cream."):
    chat_client.replies.append(reply)
    _toggle(client, 1)
    return client.post("/api/routine")


# ─────────────────────────────────────────────────────────────
# Products & selection
# ─────────────────────────────────────────────────────────────

def test_filter_by_category_renders_only_matching_cards(client):
    resp = client.get("/api/products?category=skincare")
    assert resp.status_code == 200
    body = resp.get_json()
    assert [p["id"] for p in body["products"]] == [1, 3]
    assert "Gentle Cleanser" in body["html"]
    assert "Night Cream" in body["html"]
    assert "Matte Foundation" not in body["html"]


def test_products_without_category_show_placeholder(client):
    body = client.get("/api/products").get_json()
    assert body["count"] == 0
    assert "Select a category to view products" in body["html"]


def test_catalog_failure_is_visible(store, chat_client, tmp_path):
    app = create_app(
        "testing",
        selection_store=store,
        chat_client=chat_client,
        catalog=CatalogSource(str(tmp_path / "missing.json")),
    )
    resp = app.test_client().get("/api/products?category=skincare")
    assert resp.status_code == 502
    body = resp.get_json()
    assert body["error"] == CATALOG_ERROR_MESSAGE
    assert str(escape(CATALOG_ERROR_MESSAGE)) in body["html"]


def test_toggle_twice_persists_empty_selection(client, fake_redis):
    first = _toggle(client, 1).get_json()
    assert first["selected_ids"] == ["1"]
    assert 'class="product-card selected" data-id="1"' in first["grid_html"]
    assert "Gentle Cleanser" in first["selected_html"]

    second = _toggle(client, 1).get_json()
    assert second["selected_ids"] == []
    assert "product-card selected" not in second["grid_html"]
    assert json.loads(fake_redis.data[SELECTION_KEY]) == []


def test_toggle_validation(client):
    assert client.post("/api/selection/toggle", json={}).status_code == 400
    assert _toggle(client, 42).status_code == 404


def test_toggle_of_product_cleared_meanwhile_is_not_found(app, client, monkeypatch):
    state = app.extensions["state"]
    # Looks selected at check time, gone by the time the toggle runs.
    monkeypatch.setattr(state, "is_selected", lambda product_id: True)

    resp = _toggle(client, 1)

    assert resp.status_code == 404
    assert state.selection == []


def test_selected_from_other_category_stays_listed(client):
    _toggle(client, 2, category="makeup")
    body = client.get("/api/selection").get_json()
    assert [p["id"] for p in body["products"]] == [2]

    grid = client.get("/api/products?category=skincare").get_json()["html"]
    assert "product-card selected" not in grid


def test_remove_and_clear(client, fake_redis):
    _toggle(client, 1)
    _toggle(client, 3)

    removed = client.post("/api/selection/remove", json={"product_id": 1, "category": "skincare"}).get_json()
    assert removed["selected_ids"] == ["3"]

    cleared = client.post("/api/selection/clear", json={"category": "skincare"}).get_json()
    assert cleared["selected_ids"] == []
    assert "clearSelectedProducts" not in cleared["selected_html"]
    assert "product-card selected" not in cleared["grid_html"]
    assert json.loads(fake_redis.data[SELECTION_KEY]) == []


# ─────────────────────────────────────────────────────────────
# Routine & chat
# ─────────────────────────────────────────────────────────────

def test_generate_with_empty_selection(client, chat_client):
    resp = client.post("/api/routine")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == EMPTY_SELECTION_ERROR
    assert chat_client.calls == []


def test_generate_routine_success(client, chat_client):
    resp = _select_and_generate(client, chat_client)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert "Morning: cleanse.<br>Night: cream." in body["html"]
    assert "helpful beauty advisor" not in body["html"]
    assert [m["role"] for m in chat_client.calls[0]] == ["system", "user"]


@pytest.mark.parametrize(
    "kind,message",
    [(FailureKind.MALFORMED, ROUTINE_FAILED_MESSAGE), (FailureKind.TRANSPORT, CONNECTION_ERROR_MESSAGE)],
)
def test_generate_routine_failure(client, chat_client, kind, message):
    resp = _select_and_generate(client, chat_client, reply=CompletionError(kind, "boom"))
    assert resp.status_code == 502
    body = resp.get_json()
    assert body["error"] == message
    assert body["failure"] == kind.value

    transcript = client.get("/api/chat/transcript").get_json()["turns"]
    assert [t["role"] for t in transcript] == ["system", "user"]


def test_follow_up_flow(client, chat_client):
    _select_and_generate(client, chat_client)

    typing = client.post("/api/chat/turn", json={"message": "  Daily? "})
    assert typing.status_code == 200
    assert "chat-typing-indicator" in typing.get_json()["html"]

    chat_client.replies.append("Yes, daily.")
    done = client.post("/api/chat/complete").get_json()
    assert "chat-typing-indicator" not in done["html"]
    assert done["html"].index("Daily?") < done["html"].index("Yes, daily.")
    assert chat_client.calls[1][-1] == {"role": "user", "content": "Daily?"}


def test_follow_up_failure_keeps_transcript(client, chat_client):
    _select_and_generate(client, chat_client)
    client.post("/api/chat/turn", json={"message": "Daily?"})
    chat_client.replies.append(CompletionError(FailureKind.MALFORMED, "empty"))

    resp = client.post("/api/chat/complete")
    assert resp.status_code == 502
    body = resp.get_json()
    assert body["error"] == FOLLOW_UP_FAILED_MESSAGE
    assert str(escape(FOLLOW_UP_FAILED_MESSAGE)) in body["html"]
    turns = client.get("/api/chat/transcript").get_json()["turns"]
    assert [t["role"] for t in turns] == ["system", "user", "assistant", "user"]


def test_follow_up_while_reply_pending_is_busy(app, client, chat_client):
    _select_and_generate(client, chat_client)
    app.extensions["state"]._in_flight = True

    resp = client.post("/api/chat/turn", json={"message": "Daily?"})

    assert resp.status_code == 409
    assert resp.get_json()["error"] == BUSY_MESSAGE
    app.extensions["state"]._in_flight = False
    assert len(client.get("/api/chat/transcript").get_json()["turns"]) == 3


def test_complete_before_any_session(client, chat_client):
    resp = client.post("/api/chat/complete")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == NO_SESSION_MESSAGE
    assert chat_client.calls == []


def test_blank_follow_up_is_ignored(client, chat_client):
    _select_and_generate(client, chat_client)
    assert client.post("/api/chat/turn", json={"message": "   "}).status_code == 204
    assert len(client.get("/api/chat/transcript").get_json()["turns"]) == 3


# ─────────────────────────────────────────────────────────────
# Page & health
# ─────────────────────────────────────────────────────────────

def test_index_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert '<option value="skincare">' in html
    assert "No products selected." in html
    assert "__GRID_HTML__" not in html


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


def test_unknown_endpoint_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Endpoint not found"


def test_restored_selection_is_rendered_on_load(fake_redis, catalog_file):
    fake_redis.data[SELECTION_KEY] = json.dumps([{"id": 3, "name": "Night Cream", "category": "skincare"}])
    from routine_bot.redis_manager import RedisSelectionStore

    app = create_app(
        "testing",
        selection_store=RedisSelectionStore(client=fake_redis, key=SELECTION_KEY),
        chat_client=FakeChatClient(),
        catalog=CatalogSource(str(catalog_file)),
    )
    html = app.test_client().get("/").get_data(as_text=True)
    assert "Night Cream" in html
    assert 'id="clearSelectedProducts"' in html
