# routine_bot/routes/products.py
"""
GET /api/products?category=<name> – product grid fragment for one category.

The catalog is read fresh on every call. A catalog failure is rendered into
the grid as a visible message and answered with 502.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, jsonify, request

from ..errors import CatalogError
from ..render import CATALOG_ERROR_MESSAGE, render_placeholder, render_product_grid
from . import get_catalog, get_state

log = logging.getLogger(__name__)
bp = Blueprint("products", __name__, url_prefix="/api")


@bp.get("/products")
def list_products() -> tuple[Response, int]:
    category = (request.args.get("category") or "").strip()
    try:
        products = get_catalog().load_category(category)
    except CatalogError as exc:
        log.error(f"PRODUCTS_LOAD_FAILED | category={category} | error={exc}")
        return jsonify({
            "error": CATALOG_ERROR_MESSAGE,
            "html": render_placeholder(CATALOG_ERROR_MESSAGE),
        }), 502

    state = get_state()
    return jsonify({
        "category": category,
        "count": len(products),
        "products": [p.to_dict() for p in products],
        "html": render_product_grid(products, state.selection, category),
    }), 200
