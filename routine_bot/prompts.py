# routine_bot/prompts.py
"""Prompt text for routine generation sessions."""

from __future__ import annotations

import json
from typing import Dict, List

from .models import Product
from .utils.helpers import get_short_description

SYSTEM_PROMPT = (
    "You are a helpful beauty advisor. Only answer questions about the generated routine, "
    "skincare, haircare, makeup, fragrance, or other beauty topics. "
    "If asked about anything else, politely decline."
)

ROUTINE_REQUEST = "Please generate a personalized routine using these products."


def summarize_products(products: List[Product]) -> List[Dict[str, str]]:
    return [
        {
            "name": p.name,
            "brand": p.brand,
            "category": p.category,
            "description": get_short_description(p.description),
        }
        for p in products
    ]


def build_routine_request(products: List[Product]) -> str:
    summary = json.dumps(summarize_products(products), indent=2, ensure_ascii=False)
    return f"Here are the selected products:\n{summary}\n{ROUTINE_REQUEST}"
