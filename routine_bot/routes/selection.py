# routine_bot/routes/selection.py
"""
Selection endpoints.

Every mutation answers with both re-rendered fragments (grid for the
category the page is showing, selected list) so the page never has to work
out what changed.

POST body for toggle/remove/clear:
{
  "product_id": 3,          # toggle/remove only
  "category": "cleanser"    # category currently shown, may be empty
}
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, Response, jsonify, request

from ..errors import CatalogError, ProductNotFoundError
from ..render import CATALOG_ERROR_MESSAGE, render_placeholder, render_product_grid, render_selected_list
from . import get_catalog, get_state

log = logging.getLogger(__name__)
bp = Blueprint("selection", __name__, url_prefix="/api/selection")


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _fragments(category: str) -> tuple[Dict[str, Any], int]:
    state = get_state()
    selection = state.selection
    body: Dict[str, Any] = {
        "selected_ids": state.selected_ids(),
        "selected_html": render_selected_list(selection),
    }
    try:
        products = get_catalog().load_category(category)
    except CatalogError as exc:
        log.error(f"SELECTION_GRID_RENDER_FAILED | category={category} | error={exc}")
        body["grid_html"] = render_placeholder(CATALOG_ERROR_MESSAGE)
        body["error"] = CATALOG_ERROR_MESSAGE
        return body, 502

    body["grid_html"] = render_product_grid(products, selection, category)
    return body, 200


@bp.get("")
def get_selection() -> tuple[Response, int]:
    state = get_state()
    selection = state.selection
    return jsonify({
        "products": [p.to_dict() for p in selection],
        "selected_html": render_selected_list(selection),
    }), 200


@bp.post("/toggle")
def toggle() -> tuple[Response, int]:
    data = _payload()
    product_id = data.get("product_id")
    category = str(data.get("category") or "")
    if product_id in (None, ""):
        return jsonify({"error": "Missing product_id"}), 400

    state = get_state()
    # Deselecting needs no catalog; another request may still clear the
    # product before the toggle runs, which then surfaces as not found.
    catalog = []
    if not state.is_selected(product_id):
        try:
            catalog = get_catalog().load()
        except CatalogError as exc:
            log.error(f"SELECTION_TOGGLE_CATALOG_FAILED | product={product_id} | error={exc}")
            return jsonify({"error": CATALOG_ERROR_MESSAGE}), 502
    try:
        state.toggle_selection(product_id, catalog)
    except ProductNotFoundError as exc:
        log.warning(f"SELECTION_TOGGLE_NOT_FOUND | product={product_id}")
        return jsonify({"error": str(exc)}), 404

    body, status = _fragments(category)
    return jsonify(body), status


@bp.post("/remove")
def remove() -> tuple[Response, int]:
    data = _payload()
    product_id = data.get("product_id")
    if product_id in (None, ""):
        return jsonify({"error": "Missing product_id"}), 400

    get_state().remove_selection(product_id)
    body, status = _fragments(str(data.get("category") or ""))
    return jsonify(body), status


@bp.post("/clear")
def clear() -> tuple[Response, int]:
    data = _payload()
    get_state().clear_selection()
    body, status = _fragments(str(data.get("category") or ""))
    return jsonify(body), status
