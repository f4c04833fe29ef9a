"""Domain models for waiter-pos."""

from __future__ import annotations

from dataclasses import dataclass

from waiter_pos.config import DEFAULT_TABLE_NUMBER


@dataclass(frozen=True)
class MenuItem:
    """A sellable catalog item.

    ``code`` is the business identifier. ``id`` is assigned by the backend and
    may change between refreshes, so nothing outside display keys on it.
    """

    id: int
    code: str
    full_name: str
    category_type: str
    category: str


@dataclass(frozen=True)
class CartEntry:
    """One cart line. Lines merge when both code and note are identical."""

    item: MenuItem
    quantity: int
    note: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.item.code, self.note)


Cart = tuple[CartEntry, ...]


@dataclass(frozen=True)
class Session:
    """Device and waiter state needed for menu and order calls."""

    device_id: str
    activated: bool = False
    waiter_id: str | None = None
    endpoint: str = ""
    table_number: str = DEFAULT_TABLE_NUMBER

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint) and bool(self.waiter_id)


@dataclass(frozen=True)
class OrderLine:
    """An order row as sent to the backend."""

    code: str
    full_name: str
    category: str
    category_type: str
    note: str
    quantity: int


@dataclass(frozen=True)
class Order:
    """Submission projection of a cart."""

    waiter_id: str
    table_number: int
    customer_name: str
    lines: tuple[OrderLine, ...]


@dataclass(frozen=True)
class ActivationResult:
    activated: bool
    message: str


@dataclass(frozen=True)
class Ack:
    """Backend acknowledgement for a saved order."""

    status_code: int
    body: str
