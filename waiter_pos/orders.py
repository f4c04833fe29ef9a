"""Order submission: project the cart into the backend payload and send it."""

from __future__ import annotations

import logging
from typing import Any

from waiter_pos.api import BackendClient, response_body
from waiter_pos.errors import SubmissionError, TransportError, ValidationError
from waiter_pos.models import Ack, Cart, Order, OrderLine, Session

logger = logging.getLogger(__name__)


def build_order(cart: Cart, session: Session, customer_name: str) -> Order:
    """Build the submission projection, validating before any network call.

    Lines keep the category recorded when the item was added, so a menu
    refresh in between cannot change what gets submitted.
    """
    customer_name = (customer_name or "").strip()
    if not customer_name:
        raise ValidationError("Please enter a customer name.")
    if not cart:
        raise ValidationError("The order is empty.")
    if not session.waiter_id:
        raise ValidationError("Waiter code is not set.")

    try:
        table_number = int(str(session.table_number).strip())
    except ValueError:
        raise ValidationError(f"Table number {session.table_number!r} is not a number.") from None

    lines = tuple(
        OrderLine(
            code=entry.item.code,
            full_name=entry.item.full_name,
            category=entry.item.category,
            category_type=entry.item.category_type,
            note=entry.note,
            quantity=entry.quantity,
        )
        for entry in cart
    )
    return Order(
        waiter_id=session.waiter_id,
        table_number=table_number,
        customer_name=customer_name,
        lines=lines,
    )


def order_payload(order: Order) -> dict[str, Any]:
    """Serialize an order to the ``/order/save`` JSON body."""
    return {
        "waiterCode": order.waiter_id,
        "tableNumber": order.table_number,
        "customerName": order.customer_name,
        "orderDetails": [
            {
                "code": line.code,
                "fullName": line.full_name,
                "category": line.category,
                "categoryType": line.category_type,
                "note": line.note,
                "quantity": line.quantity,
            }
            for line in order.lines
        ],
    }


class OrderSubmitter:
    """Send orders once. There are no automatic retries and no idempotency key."""

    def __init__(self, client_factory=BackendClient) -> None:
        self.client_factory = client_factory

    def submit(self, order: Order, endpoint: str) -> Ack:
        client = self.client_factory(endpoint)
        try:
            response = client.save_order(order_payload(order))
        except TransportError as exc:
            logger.error("Order for table %s failed: %s", order.table_number, exc)
            raise SubmissionError(
                f"Failed to submit the order: {exc}", status_code=exc.status_code, body=exc.body
            ) from exc

        logger.info(
            "Order for table %s submitted (%d lines, status %s)",
            order.table_number,
            len(order.lines),
            response.status_code,
        )
        return Ack(status_code=response.status_code, body=response_body(response))
