"""Cart engine.

A cart is an immutable tuple of ``CartEntry``. Every operation returns a new
tuple, so a snapshot handed to the UI never changes underneath it.

Lines are keyed by ``(code, note)``: the same item with the same note text
collapses into one line, any difference in note text starts a new line.
"""

from __future__ import annotations

from dataclasses import replace

from waiter_pos.errors import ValidationError
from waiter_pos.models import Cart, CartEntry, MenuItem

EMPTY_CART: Cart = ()


def _find_line(cart: Cart, code: str, note: str) -> int | None:
    for idx, entry in enumerate(cart):
        if entry.item.code == code and entry.note == note:
            return idx
    return None


def add_or_merge(cart: Cart, item: MenuItem, note: str = "", qty: int = 1) -> Cart:
    """Add ``qty`` of ``item`` with ``note``, merging into a matching line."""
    if qty < 1:
        raise ValidationError("Quantity must be at least 1.")
    note = note or ""

    idx = _find_line(cart, item.code, note)
    if idx is None:
        return cart + (CartEntry(item=item, quantity=qty, note=note),)

    existing = cart[idx]
    return cart[:idx] + (replace(existing, quantity=existing.quantity + qty),) + cart[idx + 1 :]


def decrement(cart: Cart, code: str) -> Cart:
    """Take one unit of ``code`` off the cart.

    When several notes exist for the code, the most recently added line is
    decremented. A line reaching zero is removed.
    """
    for idx in range(len(cart) - 1, -1, -1):
        entry = cart[idx]
        if entry.item.code != code:
            continue
        if entry.quantity <= 1:
            return cart[:idx] + cart[idx + 1 :]
        return cart[:idx] + (replace(entry, quantity=entry.quantity - 1),) + cart[idx + 1 :]
    return cart


def change_line_quantity(cart: Cart, code: str, note: str, delta: int) -> Cart:
    """Step one line up or down, never below 1. Used on the review screen."""
    idx = _find_line(cart, code, note)
    if idx is None:
        return cart
    entry = cart[idx]
    quantity = max(1, entry.quantity + delta)
    if quantity == entry.quantity:
        return cart
    return cart[:idx] + (replace(entry, quantity=quantity),) + cart[idx + 1 :]


def total_quantity(cart: Cart) -> int:
    return sum(entry.quantity for entry in cart)


def quantity_for_code(cart: Cart, code: str) -> int:
    """Aggregate count shown next to a menu item, across all of its notes."""
    return sum(entry.quantity for entry in cart if entry.item.code == code)


def clear(cart: Cart) -> Cart:
    return EMPTY_CART
