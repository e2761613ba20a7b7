"""
Order Lifecycle State Machine
=============================

This module owns order status. Nothing else in the application writes
`Order.status`; every write goes through `_record_status`, which appends the
matching timeline entry in the same unit of work, so status and timeline
can never disagree.

States:
-------
    pending -> confirmed -> preparing -> ready -> out_for_delivery -> delivered
       |           |
       +-----------+--> cancelled

`cancelled` and `delivered` are terminal.

Transitions:
------------
- **create_order**: always enters `pending`.
- **confirm_order**: `pending` -> `confirmed`, only with an utterance that
  says yes in the order's language (English accepted as fallback). A
  mismatch leaves the order untouched.
- **cancel_order**: `pending`/`confirmed` -> `cancelled`.
- **advance_order**: merchant progression, one step at a time along
  confirmed -> preparing -> ready -> out_for_delivery -> delivered. It can
  never move an order into `confirmed`.

Callers own the transaction: these functions mutate the ORM objects and the
caller commits (or rolls back) once.

Error Handling:
---------------
- InvalidTransitionError: the order's current state does not allow the move.
- ConfirmationMismatchError: the utterance was not a yes.
Both derive from OrderLifecycleError and leave the order unchanged.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from ..models import Order, OrderItem, OrderTimelineEntry
from ..nlu import lexicon
from ..schemas.commands import ProcessedCommand
from .item_resolver import ResolvedItem

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

# Merchant-driven progression: current status -> the only allowed next status
PROGRESSION: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.DELIVERED,
}

DEFAULT_CANCEL_REASON = "Cancelled by user"


class OrderLifecycleError(Exception):
    """Base class for rejected lifecycle operations."""


class InvalidTransitionError(OrderLifecycleError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from '{current}' to '{target}'")


class ConfirmationMismatchError(OrderLifecycleError):
    def __init__(self, utterance: str, language: str):
        self.utterance = utterance
        self.language = language
        super().__init__("Confirmation utterance did not match an affirmative answer")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _record_status(order: Order, status: OrderStatus, note: Optional[str], actor: Optional[str]) -> None:
    """The only place Order.status is written."""
    order.status = status.value
    order.timeline.append(OrderTimelineEntry(
        status=status.value,
        timestamp=_now(),
        note=note,
        updated_by=actor,
    ))


def current_status(order: Order) -> OrderStatus:
    return OrderStatus(order.status)


# =============================================================================
# Creation
# =============================================================================

def build_order_items(
    items: Iterable[ResolvedItem],
    voice_command: Optional[str] = None,
    language: Optional[str] = None,
    dialect: Optional[str] = None,
) -> Tuple[list, float]:
    """OrderItem rows for resolved items, plus the order total."""
    rows = []
    total = 0.0
    for item in items:
        rows.append(OrderItem(
            product=item.product,
            product_name=item.product.name,
            quantity=item.quantity,
            unit=item.unit,
            price=item.price,
            line_total=item.line_total,
            voice_command=voice_command,
            language=language,
            dialect=dialect,
        ))
        total += item.line_total
    return rows, round(total, 2)


def create_order(
    db: Session,
    user_id: str,
    items: Iterable[ResolvedItem],
    command: Optional[ProcessedCommand],
    original_command: str,
    language: str,
    dialect: str = "standard",
    merchant_id: Optional[str] = None,
    delivery: Optional[dict] = None,
    payment: Optional[dict] = None,
    device_id: Optional[str] = None,
    is_offline: bool = False,
    synced: bool = True,
    actor: Optional[str] = None,
) -> Order:
    """
    Add a new pending order to the session.

    The item list may be empty for offline placeholders that are filled
    later by the sync reconciler. The caller commits.
    """
    rows, total = build_order_items(items, original_command, language, dialect)
    delivery = delivery or {}
    payment = payment or {}
    if merchant_id is None and rows:
        merchant_id = rows[0].product.merchant_id if rows[0].product else None

    order = Order(
        user_id=user_id,
        merchant_id=merchant_id,
        total_amount=total,
        original_command=original_command,
        language=language,
        dialect=dialect,
        processed_command=command.to_wire() if command else None,
        confirmation_required=True,
        confirmed=False,
        is_offline=is_offline,
        synced=synced,
        sync_time=_now() if is_offline and synced else None,
        device_id=device_id,
        delivery_address=delivery.get("address"),
        delivery_time=delivery.get("time"),
        delivery_instructions=delivery.get("instructions"),
        payment_method=payment.get("method"),
        payment_split_count=payment.get("split_count"),
        payment_status="pending",
    )
    order.items.extend(rows)
    _record_status(order, OrderStatus.PENDING, "Order created via voice command", actor or user_id)
    db.add(order)
    logger.info("Created order for user %s with %d items, total %.2f", user_id, len(rows), total)
    return order


def fill_order_items(order: Order, items: Iterable[ResolvedItem]) -> None:
    """Attach items to an order that was created without any (offline placeholder)."""
    if current_status(order) != OrderStatus.PENDING:
        raise InvalidTransitionError(order.status, OrderStatus.PENDING.value)
    rows, total = build_order_items(items, order.original_command, order.language, order.dialect)
    order.items.extend(rows)
    order.total_amount = round((order.total_amount or 0.0) + total, 2)
    if order.merchant_id is None and rows and rows[0].product:
        order.merchant_id = rows[0].product.merchant_id


# =============================================================================
# Voice transitions
# =============================================================================

def confirm_order(
    order: Order,
    utterance: str,
    language: str,
    dialect: str = "standard",
    actor: Optional[str] = None,
) -> Order:
    status = current_status(order)
    if status != OrderStatus.PENDING:
        raise InvalidTransitionError(status.value, OrderStatus.CONFIRMED.value)

    if not lexicon.is_affirmative(utterance, language, dialect):
        logger.info("Order %s confirmation rejected for language %s", order.id, language)
        raise ConfirmationMismatchError(utterance, language)

    logger.info("Order %s confirmed by voice in %s", order.id, language)
    logger.debug(
        "Order %s confirmation audit: original command %r, confirmation %r",
        order.id, order.original_command, utterance,
    )
    order.confirmed = True
    order.confirmation_command = utterance
    order.confirmation_time = _now()
    _record_status(order, OrderStatus.CONFIRMED, "Order confirmed via voice command", actor or order.user_id)
    return order


def cancel_order(
    order: Order,
    reason: Optional[str] = None,
    utterance: Optional[str] = None,
    actor: Optional[str] = None,
) -> Order:
    status = current_status(order)
    if status not in CANCELLABLE_STATES:
        raise InvalidTransitionError(status.value, OrderStatus.CANCELLED.value)

    if utterance:
        order.cancellation_command = utterance
    _record_status(order, OrderStatus.CANCELLED, reason or DEFAULT_CANCEL_REASON, actor or order.user_id)
    logger.info("Order %s cancelled from %s", order.id, status.value)
    return order


# =============================================================================
# Merchant progression
# =============================================================================

def advance_order(
    order: Order,
    target: OrderStatus,
    actor: str,
    note: Optional[str] = None,
) -> Order:
    status = current_status(order)
    if PROGRESSION.get(status) != target:
        raise InvalidTransitionError(status.value, target.value)

    _record_status(order, target, note or f"Order {target.value.replace('_', ' ')}", actor)
    logger.info("Order %s advanced %s -> %s by %s", order.id, status.value, target.value, actor)
    return order
