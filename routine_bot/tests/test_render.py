from __future__ import annotations

from routine_bot.enums import Role
from routine_bot.models import Product, Turn
from routine_bot.render import (
    EMPTY_CATEGORY_MESSAGE,
    EMPTY_SELECTION_MESSAGE,
    NO_CATEGORY_MESSAGE,
    render_category_options,
    render_product_grid,
    render_selected_list,
    render_transcript,
)


def test_grid_marks_only_selected_cards(products):
    html = render_product_grid(products, [products[2]], "skincare")
    assert html.count('class="product-card selected"') == 1
    assert 'class="product-card selected" data-id="3"' in html
    assert 'class="product-card" data-id="1"' in html


def test_grid_overlay_is_closed_and_holds_short_description(products):
    html = render_product_grid([products[0]], [], "skincare")
    assert 'aria-expanded="false"' in html
    assert "<div class=\"product-desc-overlay\" hidden>" in html
    assert "Cleans gently. Keeps the barrier intact." in html
    assert "Fragrance free." not in html


def test_grid_placeholders(products):
    assert NO_CATEGORY_MESSAGE in render_product_grid(products, [], "")
    assert EMPTY_CATEGORY_MESSAGE in render_product_grid([], [], "suncare")


def test_grid_escapes_catalog_text():
    p = Product(id=5, name="<script>x</script>", brand="A & B")
    html = render_product_grid([p], [], "any")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "A &amp; B" in html


def test_selected_list_empty_has_no_clear_all():
    html = render_selected_list([])
    assert EMPTY_SELECTION_MESSAGE in html
    assert "clearSelectedProducts" not in html


def test_selected_list_has_remove_controls_and_clear_all(products):
    html = render_selected_list([products[2], products[0]])
    assert html.count("selected-product-remove") == 2
    assert html.index('data-id="3"') < html.index('data-id="1"')
    assert 'id="clearSelectedProducts"' in html


def test_transcript_hides_system_turns_and_keeps_order():
    turns = [
        Turn(Role.SYSTEM, "secret instructions"),
        Turn(Role.USER, "products..."),
        Turn(Role.ASSISTANT, "Step 1\nStep 2"),
    ]
    html = render_transcript(turns)
    assert "secret instructions" not in html
    assert html.index("chat-message user") < html.index("chat-message assistant")
    assert "Step 1<br>Step 2" in html
    assert "chat-typing-indicator" not in html


def test_transcript_typing_indicator_and_notice():
    turns = [Turn(Role.USER, "a <b>question</b>")]
    assert "chat-typing-indicator" in render_transcript(turns, typing=True)
    html = render_transcript(turns, notice="Sorry")
    assert "&lt;b&gt;question&lt;/b&gt;" in html
    assert '<div class="chat-notice">Sorry</div>' in html


def test_category_options_mark_current():
    html = render_category_options(["skincare", "makeup"], "makeup")
    assert '<option value="makeup" selected>' in html
    assert '<option value="skincare">' in html
