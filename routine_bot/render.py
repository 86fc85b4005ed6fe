# routine_bot/render.py
"""
HTML fragment renderers.

Each function is a pure projection of the state it is given: no module state,
no reads from the state manager. The page swaps the returned fragments into
stable containers and handles clicks with one delegated listener per
container, so nothing here attaches behaviour.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from markupsafe import Markup, escape

from .enums import Role
from .models import Product, Turn, same_id
from .utils.helpers import get_short_description

NO_CATEGORY_MESSAGE = "Select a category to view products"
EMPTY_CATEGORY_MESSAGE = "No products found in this category."
EMPTY_SELECTION_MESSAGE = "No products selected."

ROUTINE_LOADING_MESSAGE = "Generating your personalized routine..."
EMPTY_SELECTION_ERROR = "Please select at least one product to generate a routine."
ROUTINE_FAILED_MESSAGE = "Sorry, I couldn't generate a routine. Please try again."
FOLLOW_UP_FAILED_MESSAGE = "Sorry, I couldn't answer that. Please try again."
CONNECTION_ERROR_MESSAGE = "There was an error connecting to the AI. Please try again later."
BUSY_MESSAGE = "Please wait for the current reply to finish."
NO_SESSION_MESSAGE = "Generate a routine before asking a question."
CATALOG_ERROR_MESSAGE = "Sorry, we couldn't load products right now. Please try again later."


def render_placeholder(message: str) -> str:
    return f'<div class="placeholder-message">{escape(message)}</div>'


def render_notice(message: str) -> str:
    return f'<div class="chat-notice">{escape(message)}</div>'


def _multiline(text: str) -> Markup:
    return escape(text).replace("\n", Markup("<br>"))


def render_product_card(product: Product, selected: bool) -> str:
    pid = escape(str(product.id))
    short_desc = escape(get_short_description(product.description))
    css = "product-card selected" if selected else "product-card"
    return f"""
    <div class="{css}" data-id="{pid}" aria-pressed="{'true' if selected else 'false'}">
      <img src="{escape(product.image)}" alt="{escape(product.name)}">
      <div class="product-info">
        <h3>{escape(product.name)}</h3>
        <p>{escape(product.brand)}</p>
        <button type="button" class="product-desc-toggle" data-id="{pid}" aria-expanded="false">Show Description</button>
      </div>
      <div class="product-desc-overlay" hidden>
        <div>
          <strong>Description:</strong><br>
          {short_desc}
          <br><br>
          <button type="button" class="product-desc-close" aria-label="Close description">Close</button>
        </div>
      </div>
    </div>"""


def render_product_grid(products: List[Product], selection: Iterable[Product], category: str = "") -> str:
    """Cards for the filtered products; a card is highlighted iff its id is selected."""
    if not category:
        return render_placeholder(NO_CATEGORY_MESSAGE)
    if not products:
        return render_placeholder(EMPTY_CATEGORY_MESSAGE)
    chosen = list(selection)
    return "".join(
        render_product_card(p, any(same_id(s.id, p.id) for s in chosen))
        for p in products
    )


def render_selected_list(selection: List[Product]) -> str:
    if not selection:
        return render_placeholder(EMPTY_SELECTION_MESSAGE)
    items = "".join(
        f"""
      <div class="selected-product-item" data-id="{escape(str(p.id))}">
        <span>{escape(p.name)}</span>
        <button type="button" class="selected-product-remove" title="Remove" aria-label="Remove {escape(p.name)}">&times;</button>
      </div>"""
        for p in selection
    )
    return items + '\n      <button type="button" id="clearSelectedProducts">Clear All</button>'


TYPING_INDICATOR = """
    <div class="chat-typing-indicator">
      <span class="chat-typing-dots">
        <span class="chat-typing-dot"></span>
        <span class="chat-typing-dot"></span>
        <span class="chat-typing-dot"></span>
      </span>
    </div>"""


def render_transcript(turns: List[Turn], *, typing: bool = False, notice: Optional[str] = None) -> str:
    """User and assistant bubbles in order; system turns are never shown."""
    parts = [
        f'<div class="chat-message {turn.role.value}">{_multiline(turn.content)}</div>'
        for turn in turns
        if turn.role in (Role.USER, Role.ASSISTANT)
    ]
    if notice:
        parts.append(render_notice(notice))
    if typing:
        parts.append(TYPING_INDICATOR)
    return "".join(parts)


def render_category_options(categories: List[str], current: str = "") -> str:
    options = ['<option value="" disabled{}>Choose a Category</option>'.format("" if current else " selected")]
    for c in categories:
        sel = " selected" if c == current else ""
        options.append(f'<option value="{escape(c)}"{sel}>{escape(c)}</option>')
    return "".join(options)
