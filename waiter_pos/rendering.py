"""Rendering helpers for menu rows and cart lines."""

from __future__ import annotations

from rich.text import Text

from waiter_pos.constant import CATEGORY_BEVERAGE, CATEGORY_FILTERS, CATEGORY_FOOD
from waiter_pos.models import CartEntry, MenuItem


def badge_style(category: str) -> str:
    """Return a consistent badge style for category tags."""
    if category == CATEGORY_FOOD:
        return "bold #0b1f0f on #5fbf72"
    if category == CATEGORY_BEVERAGE:
        return "bold #ffffff on #2f6db5"
    return "bold #ffffff on #b23a48"


def category_badge(category: str) -> str:
    return category[:1].upper() or "?"


def format_menu_row(item: MenuItem, in_cart: int) -> Text:
    """Render one menu result with its aggregate cart count."""
    text = Text()
    text.append(category_badge(item.category), style=badge_style(item.category))
    text.append(f" {item.full_name}")
    if item.category_type:
        text.append(f" ({item.category_type})", style="dim")
    if in_cart:
        text.append(f"  x{in_cart}", style="bold")
    return text


def format_cart_line(entry: CartEntry) -> Text:
    text = Text()
    text.append(category_badge(entry.item.category), style=badge_style(entry.item.category))
    text.append(f" {entry.quantity} x {entry.item.full_name}")
    if entry.note:
        text.append(f"\n      [{entry.note}]", style="white")
    return text


def format_category_tabs(selected: str) -> Text:
    """Render the category filter row, highlighting the active tab."""
    text = Text()
    for idx, category in enumerate(CATEGORY_FILTERS):
        if idx > 0:
            text.append(" ")
        if category == selected:
            text.append(f"[{category}]", style="bold reverse")
        else:
            text.append(f" {category} ", style="dim")
    return text
