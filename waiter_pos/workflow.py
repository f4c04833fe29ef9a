"""Ordering workflow: the stage machine the UI drives.

The UI only issues intents and renders what this object exposes. Session and
menu state are injected, and saved at each boundary call.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum

from waiter_pos import cart as cart_ops
from waiter_pos.activation import ActivationGate
from waiter_pos.config import DEFAULT_TABLE_NUMBER
from waiter_pos.constant import CATEGORY_ALL
from waiter_pos.errors import ConfigurationError, ValidationError, WorkflowError
from waiter_pos.menu import MenuCache, filter_items
from waiter_pos.models import Ack, ActivationResult, Cart, MenuItem, Session
from waiter_pos.orders import OrderSubmitter, build_order
from waiter_pos.session import SessionStore

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    AWAITING_ACTIVATION = "awaiting_activation"
    AWAITING_SESSION = "awaiting_session"
    AWAITING_TABLE = "awaiting_table"
    BROWSING = "browsing"
    REVIEWING_ORDER = "reviewing_order"


class Event(str, Enum):
    ACTIVATED = "activated"
    SESSION_CONFIGURED = "session_configured"
    SESSION_CLEARED = "session_cleared"
    TABLE_SELECTED = "table_selected"
    TABLE_CHANGE_REQUESTED = "table_change_requested"
    REVIEW_REQUESTED = "review_requested"
    REVIEW_CANCELLED = "review_cancelled"
    ORDER_SUBMITTED = "order_submitted"


TRANSITIONS: dict[tuple[Stage, Event], Stage] = {
    (Stage.AWAITING_ACTIVATION, Event.ACTIVATED): Stage.AWAITING_SESSION,
    (Stage.AWAITING_SESSION, Event.SESSION_CONFIGURED): Stage.AWAITING_TABLE,
    (Stage.AWAITING_TABLE, Event.SESSION_CLEARED): Stage.AWAITING_SESSION,
    (Stage.BROWSING, Event.SESSION_CLEARED): Stage.AWAITING_SESSION,
    (Stage.REVIEWING_ORDER, Event.SESSION_CLEARED): Stage.AWAITING_SESSION,
    (Stage.AWAITING_TABLE, Event.TABLE_SELECTED): Stage.BROWSING,
    (Stage.BROWSING, Event.TABLE_CHANGE_REQUESTED): Stage.AWAITING_TABLE,
    (Stage.BROWSING, Event.REVIEW_REQUESTED): Stage.REVIEWING_ORDER,
    (Stage.REVIEWING_ORDER, Event.REVIEW_CANCELLED): Stage.BROWSING,
    (Stage.REVIEWING_ORDER, Event.ORDER_SUBMITTED): Stage.AWAITING_TABLE,
}

_MENU_STAGES = {Stage.BROWSING, Stage.REVIEWING_ORDER}


class OrderingWorkflow:
    """Owns the cart and the current stage for one waiter screen."""

    def __init__(
        self,
        sessions: SessionStore,
        menu: MenuCache,
        gate: ActivationGate,
        submitter: OrderSubmitter,
    ) -> None:
        self.sessions = sessions
        self.menu = menu
        self.gate = gate
        self.submitter = submitter

        self.session: Session = sessions.load()
        self.cart: Cart = cart_ops.EMPTY_CART
        self.customer_name = ""
        self.stage = Stage.AWAITING_ACTIVATION
        self.submitting = False
        self._settle()

    # -- stage machine -------------------------------------------------

    def _fire(self, event: Event) -> None:
        target = TRANSITIONS.get((self.stage, event))
        if target is None:
            raise WorkflowError(f"Cannot handle {event.value} while {self.stage.value}.")
        logger.debug("stage %s --%s--> %s", self.stage.value, event.value, target.value)
        self.stage = target

    def _settle(self) -> None:
        """Advance past every gate the session already satisfies."""
        if self.stage is Stage.AWAITING_ACTIVATION and self.session.activated:
            self._fire(Event.ACTIVATED)
        if self.stage is Stage.AWAITING_SESSION and self.session.is_configured:
            self._fire(Event.SESSION_CONFIGURED)

    def _require_idle(self) -> None:
        if self.submitting:
            raise WorkflowError("An order is being sent. Please wait.")

    def _require_stage(self, *stages: Stage) -> None:
        self._require_idle()
        if self.stage not in stages:
            names = ", ".join(stage.value for stage in stages)
            raise WorkflowError(f"Not available while {self.stage.value} (expected {names}).")

    def _require_configured(self) -> None:
        if not self.session.is_configured:
            raise ConfigurationError("Access denied. Please set the waiter code and server IP.")

    # -- activation and session ----------------------------------------

    def activate(self) -> ActivationResult:
        if not self.session.endpoint:
            raise ConfigurationError("Server IP is not set. Please configure it.")
        result = self.gate.activate(self.session.endpoint, self.session.device_id)
        self.session = replace(self.session, activated=result.activated)
        self._settle()
        return result

    def configure(self, waiter_id: str | None = None, endpoint: str | None = None) -> Session:
        """Save whichever of waiter code and endpoint are given."""
        self._require_idle()
        if waiter_id is not None:
            self.session = self.sessions.save_waiter(self.session, waiter_id)
        if endpoint is not None:
            self.session = self.sessions.save_endpoint(self.session, endpoint)
        self._settle()
        return self.session

    def clear_waiter(self) -> None:
        self._require_idle()
        self.session = self.sessions.clear_waiter(self.session)
        self._on_session_cleared()

    def clear_endpoint(self) -> None:
        """Forget the server, and the menu that came from it."""
        self._require_idle()
        self.session = self.sessions.clear_endpoint(self.session)
        self.menu.clear()
        self._on_session_cleared()

    def _on_session_cleared(self) -> None:
        if self.stage in (Stage.AWAITING_TABLE, Stage.BROWSING, Stage.REVIEWING_ORDER):
            self._fire(Event.SESSION_CLEARED)

    # -- table -----------------------------------------------------------

    def select_table(self, table_number: str) -> None:
        self._require_stage(Stage.AWAITING_TABLE)
        self._require_configured()
        table_number = (table_number or "").strip() or DEFAULT_TABLE_NUMBER
        if not table_number.isdigit():
            raise ValidationError("Table number must be digits only.")
        self.session = replace(self.session, table_number=table_number)
        self._fire(Event.TABLE_SELECTED)

    def change_table(self) -> None:
        self._require_stage(Stage.BROWSING)
        self.cart = cart_ops.clear(self.cart)
        self.customer_name = ""
        self._fire(Event.TABLE_CHANGE_REQUESTED)

    # -- menu ------------------------------------------------------------

    def load_menu(self) -> tuple[MenuItem, ...]:
        """First-access policy: show the cache, fetch only when it is empty."""
        self._require_stage(*_MENU_STAGES)
        self._require_configured()
        return self.menu.ensure_loaded(self.session.endpoint)

    def refresh_menu(self) -> tuple[MenuItem, ...]:
        self._require_stage(*_MENU_STAGES)
        self._require_configured()
        return self.menu.refresh(self.session.endpoint)

    def visible_items(self, category: str = CATEGORY_ALL, search_text: str = "") -> list[MenuItem]:
        return filter_items(self.menu.items, category, search_text)

    # -- cart ------------------------------------------------------------

    def add_item(self, item: MenuItem, note: str = "", qty: int = 1) -> Cart:
        self._require_stage(Stage.BROWSING)
        self._require_configured()
        self.cart = cart_ops.add_or_merge(self.cart, item, note, qty)
        return self.cart

    def remove_item(self, code: str) -> Cart:
        self._require_stage(Stage.BROWSING)
        self.cart = cart_ops.decrement(self.cart, code)
        return self.cart

    def adjust_line(self, code: str, note: str, delta: int) -> Cart:
        self._require_stage(Stage.REVIEWING_ORDER)
        self.cart = cart_ops.change_line_quantity(self.cart, code, note, delta)
        return self.cart

    def clear_order(self) -> Cart:
        self._require_stage(Stage.BROWSING)
        self.cart = cart_ops.clear(self.cart)
        return self.cart

    def quantity_for(self, code: str) -> int:
        return cart_ops.quantity_for_code(self.cart, code)

    @property
    def total_quantity(self) -> int:
        return cart_ops.total_quantity(self.cart)

    @property
    def can_review(self) -> bool:
        return self.stage is Stage.BROWSING and self.total_quantity > 0

    # -- review and submit ---------------------------------------------

    def review(self) -> None:
        self._require_stage(Stage.BROWSING)
        if self.total_quantity <= 0:
            raise ValidationError("Add at least one item before continuing.")
        self._fire(Event.REVIEW_REQUESTED)

    def back_to_menu(self) -> None:
        self._require_stage(Stage.REVIEWING_ORDER)
        self._fire(Event.REVIEW_CANCELLED)

    def submit(self, customer_name: str) -> Ack:
        """Submit once. On failure the cart and customer name stay for a retry.

        Cart, stage and session intents raise ``WorkflowError`` until the
        request returns, so the cart cleared afterwards is the one that was sent.
        """
        self._require_stage(Stage.REVIEWING_ORDER)
        self._require_configured()
        sent = self.cart
        order = build_order(sent, self.session, customer_name)
        self.customer_name = customer_name

        self.submitting = True
        try:
            ack = self.submitter.submit(order, self.session.endpoint)
        finally:
            self.submitting = False

        if self.cart is not sent or self.stage is not Stage.REVIEWING_ORDER:
            logger.warning("Order sent but the cart moved on (stage %s); leaving it as is", self.stage.value)
            return ack
        self.cart = cart_ops.clear(self.cart)
        self.customer_name = ""
        self._fire(Event.ORDER_SUBMITTED)
        return ack
