# routine_bot/routes/page.py
"""
GET / – the product picker page.

The shell is rendered once with the current selection; after that the script
swaps in fragments from the /api endpoints. Each container gets a single
delegated click listener.
"""

from __future__ import annotations

import json
import logging

from flask import Blueprint, Response

from ..errors import CatalogError
from ..render import (
    CATALOG_ERROR_MESSAGE,
    CONNECTION_ERROR_MESSAGE,
    NO_CATEGORY_MESSAGE,
    ROUTINE_LOADING_MESSAGE,
    render_category_options,
    render_notice,
    render_placeholder,
    render_selected_list,
)
from . import get_catalog, get_state

log = logging.getLogger(__name__)
bp = Blueprint("page", __name__)

# Client-side fallbacks for when a request never gets an answer.
_NOTICES = {
    "loading": render_placeholder(ROUTINE_LOADING_MESSAGE),
    "connection": render_notice(CONNECTION_ERROR_MESSAGE),
    "catalog": render_placeholder(CATALOG_ERROR_MESSAGE),
}


@bp.route("/", methods=["GET"])
def index() -> Response:
    state = get_state()
    try:
        categories = get_catalog().categories()
        grid_html = render_placeholder(NO_CATEGORY_MESSAGE)
    except CatalogError as exc:
        log.error(f"PAGE_CATEGORIES_FAILED | error={exc}")
        categories = []
        grid_html = render_placeholder(CATALOG_ERROR_MESSAGE)

    html = _build_html_page(
        category_options=render_category_options(categories),
        grid_html=grid_html,
        selected_html=render_selected_list(state.selection),
    )
    return Response(html, mimetype="text/html; charset=utf-8")


def _build_html_page(*, category_options: str, grid_html: str, selected_html: str) -> str:
    return (
        _PAGE_TEMPLATE
        .replace("__CATEGORY_OPTIONS__", category_options)
        .replace("__GRID_HTML__", grid_html)
        .replace("__SELECTED_HTML__", selected_html)
        .replace("__NOTICES_JSON__", json.dumps(_NOTICES))
    )


_PAGE_TEMPLATE = """
<!doctype html>
<html lang="en" dir="ltr">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Routine Builder</title>
    <style>
      :root {
        --brand-red: #ff003b;
        --brand-gold: #e3a535;
        --border: #ccc;
      }
      * { box-sizing: border-box; }
      body { margin: 0; font-family: system-ui, -apple-system, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; color: #333; }
      .wrap { max-width: 1200px; margin: 0 auto; padding: 16px; }
      .search-section select { width: 100%; padding: 12px; font-size: 16px; border: 2px solid #000; border-radius: 8px; }
      .products-grid { display: flex; flex-wrap: wrap; gap: 16px; margin: 24px 0; }
      .product-card { position: relative; flex: 0 1 calc(33.333% - 11px); border: 1px solid var(--border); border-radius: 8px; padding: 12px; display: flex; gap: 12px; cursor: pointer; }
      .product-card.selected { border: 2px solid var(--brand-red); box-shadow: 0 0 0 3px #ff003b22; }
      .product-card img { width: 96px; height: 96px; object-fit: contain; }
      .product-desc-overlay { position: absolute; inset: 0; background: #fffffff2; padding: 12px; overflow: auto; border-radius: 8px; }
      .placeholder-message { width: 100%; text-align: center; padding: 32px; color: #666; }
      .selected-products { border: 2px solid #000; border-radius: 8px; padding: 16px; margin-bottom: 24px; }
      .selected-product-item { display: inline-flex; gap: 8px; align-items: center; border: 1px solid var(--border); border-radius: 6px; padding: 6px 10px; margin: 4px; }
      #clearSelectedProducts, .generate-btn, .chat-form button { background: var(--brand-red); color: #fff; border: none; padding: 10px 18px; border-radius: 6px; cursor: pointer; font-weight: 500; }
      button:disabled { opacity: .5; cursor: not-allowed; }
      .chatbox { border: 2px solid #000; border-radius: 8px; padding: 16px; }
      .chat-window { min-height: 200px; max-height: 480px; overflow-y: auto; display: flex; flex-direction: column; gap: 8px; padding: 8px 0; }
      .chat-message { max-width: 80%; padding: 10px 14px; border-radius: 12px; line-height: 1.5; }
      .chat-message.user { align-self: flex-end; background: var(--brand-red); color: #fff; }
      .chat-message.assistant { align-self: flex-start; background: #f2f2f2; }
      .chat-notice { color: #a00; }
      .chat-typing-indicator { align-self: flex-start; padding: 10px 14px; background: #f2f2f2; border-radius: 12px; }
      .chat-typing-dot { display: inline-block; width: 6px; height: 6px; margin: 0 2px; border-radius: 50%; background: #999; animation: blink 1.2s infinite; }
      .chat-typing-dot:nth-child(2) { animation-delay: .2s; }
      .chat-typing-dot:nth-child(3) { animation-delay: .4s; }
      @keyframes blink { 0%, 80%, 100% { opacity: .2; } 40% { opacity: 1; } }
      .chat-form { display: flex; gap: 8px; margin-top: 12px; }
      .chat-form input { flex: 1; padding: 10px 12px; border: 1px solid var(--border); border-radius: 8px; font-size: 14px; }
    </style>
  </head>
  <body>
    <div class="wrap">
      <header><h1>Smart Routine &amp; Product Advisor</h1></header>

      <div class="search-section">
        <select id="categoryFilter">__CATEGORY_OPTIONS__</select>
      </div>

      <div id="productsContainer" class="products-grid">__GRID_HTML__</div>

      <section class="selected-products">
        <h2>Selected Products</h2>
        <div id="selectedProductsList">__SELECTED_HTML__</div>
        <button type="button" id="generateRoutine" class="generate-btn">Generate Routine</button>
      </section>

      <section class="chatbox">
        <h2>Let's Build Your Routine</h2>
        <div id="chatWindow" class="chat-window" aria-live="polite"></div>
        <form id="chatForm" class="chat-form">
          <input id="userInput" type="text" placeholder="Ask me about products or routines…" autocomplete="off" required />
          <button type="submit" id="sendBtn">Send</button>
        </form>
      </section>
    </div>

    <script>
      const NOTICES = __NOTICES_JSON__;
      const categoryFilter = document.getElementById('categoryFilter');
      const productsContainer = document.getElementById('productsContainer');
      const selectedProductsList = document.getElementById('selectedProductsList');
      const generateBtn = document.getElementById('generateRoutine');
      const chatForm = document.getElementById('chatForm');
      const chatWindow = document.getElementById('chatWindow');
      const userInput = document.getElementById('userInput');
      const sendBtn = document.getElementById('sendBtn');

      let busy = false;

      function setBusy(value) {
        busy = value;
        generateBtn.disabled = value;
        sendBtn.disabled = value;
      }

      async function callApi(url, options) {
        const res = await fetch(url, Object.assign({ headers: { 'Content-Type': 'application/json' } }, options || {}));
        if (res.status === 204) return { status: 204, body: null };
        let body = null;
        try { body = await res.json(); } catch (e) { body = null; }
        return { status: res.status, body };
      }

      function post(url, payload) {
        return callApi(url, { method: 'POST', body: JSON.stringify(payload || {}) });
      }

      function applySelection(body) {
        if (!body) return;
        if (body.grid_html !== undefined) productsContainer.innerHTML = body.grid_html;
        if (body.selected_html !== undefined) selectedProductsList.innerHTML = body.selected_html;
      }

      function showChatError() {
        chatWindow.innerHTML = NOTICES.connection;
      }

      function scrollToLatest() {
        const last = chatWindow.lastElementChild;
        if (last) last.scrollIntoView({ behavior: 'smooth', block: 'start' });
      }

      categoryFilter.addEventListener('change', async () => {
        try {
          const { body } = await callApi('/api/products?category=' + encodeURIComponent(categoryFilter.value));
          if (body && body.html !== undefined) productsContainer.innerHTML = body.html;
        } catch (e) {
          productsContainer.innerHTML = NOTICES.catalog;
        }
      });

      // One listener for the whole grid; cards are re-rendered wholesale.
      productsContainer.addEventListener('click', async (event) => {
        const card = event.target.closest('.product-card');
        if (!card) return;

        const toggle = event.target.closest('.product-desc-toggle');
        const close = event.target.closest('.product-desc-close');
        if (toggle || close) {
          const overlay = card.querySelector('.product-desc-overlay');
          const btn = card.querySelector('.product-desc-toggle');
          const open = overlay.hidden;
          overlay.hidden = !open;
          btn.setAttribute('aria-expanded', open ? 'true' : 'false');
          btn.textContent = open ? 'Hide Description' : 'Show Description';
          return;
        }
        if (event.target.closest('.product-desc-overlay')) return;

        try {
          const { body } = await post('/api/selection/toggle', { product_id: card.dataset.id, category: categoryFilter.value });
          applySelection(body);
        } catch (e) {
          productsContainer.innerHTML = NOTICES.catalog;
        }
      });

      selectedProductsList.addEventListener('click', async (event) => {
        let result = null;
        if (event.target.closest('#clearSelectedProducts')) {
          result = await post('/api/selection/clear', { category: categoryFilter.value });
        } else if (event.target.closest('.selected-product-remove')) {
          const item = event.target.closest('.selected-product-item');
          result = await post('/api/selection/remove', { product_id: item.dataset.id, category: categoryFilter.value });
        }
        if (result) applySelection(result.body);
      });

      generateBtn.addEventListener('click', async () => {
        if (busy) return;
        setBusy(true);
        const chatbox = document.querySelector('.chatbox');
        if (chatbox) chatbox.scrollIntoView({ behavior: 'smooth', block: 'center' });
        chatWindow.innerHTML = NOTICES.loading;
        try {
          const { body } = await post('/api/routine');
          if (body && body.html !== undefined) chatWindow.innerHTML = body.html;
          else showChatError();
          scrollToLatest();
        } catch (e) {
          showChatError();
        } finally {
          setBusy(false);
        }
      });

      chatForm.addEventListener('submit', async (event) => {
        event.preventDefault();
        if (busy) return;
        const text = userInput.value.trim();
        if (!text) return;
        userInput.value = '';
        setBusy(true);
        try {
          const turn = await post('/api/chat/turn', { message: text });
          if (turn.status === 204) return;
          if (turn.body && turn.body.html !== undefined) chatWindow.innerHTML = turn.body.html;
          chatWindow.scrollTop = chatWindow.scrollHeight;
          if (turn.status !== 200) return;

          // The reply (or error) render replaces the typing indicator.
          const reply = await post('/api/chat/complete');
          if (reply.body && reply.body.html !== undefined) chatWindow.innerHTML = reply.body.html;
          else showChatError();
          scrollToLatest();
        } catch (e) {
          const typing = chatWindow.querySelector('.chat-typing-indicator');
          if (typing) typing.remove();
          chatWindow.insertAdjacentHTML('beforeend', NOTICES.connection);
        } finally {
          setBusy(false);
        }
      });
    </script>
  </body>
</html>
"""
