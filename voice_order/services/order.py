"""
Voice Order Service for Voice Order
===================================

This module ties the NLU pipeline, the dialogue context, the item resolver
and the lifecycle state machine together for the order endpoints.

Key Functions:
--------------
- create_voice_order: process an utterance and create an order when the
  command is a confident order
- confirm_voice_order / cancel_voice_order: voice-driven transitions
- update_order_status: merchant-driven progression
- get_user_order / list_user_orders: reads scoped to the owning user

Create Flow:
------------
1. Process the utterance (local rules when a device id is present).
   A failing online back-end yields an apologetic, degraded result.
2. Merge the command into the conversation context.
3. A "no"/"cancel" resets the context and stops here, before any catalog
   lookup.
4. With a device id, store a pending placeholder order without items; the
   offline sync reconciler fills it later.
5. An actionable order command (type order, confidence >= threshold)
   resolves items from the accumulated context and creates a pending order;
   the reply asks the user to confirm it.
6. Anything else gets a templated reply and no side effect.

Delivery and payment details come from the request first, then from the
spoken slots; payment falls back to DEFAULT_PAYMENT_METHOD.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .. import config
from ..models import Order
from ..nlu import responses
from ..nlu.classifier import is_actionable
from ..nlu.constants import Locale
from ..nlu.context import is_reset, merge
from ..nlu.processor import process_command
from ..nlu.remote import NLUServiceError
from ..nlu.slot_extractor import normalize_payment_method
from ..schemas.commands import CommandType, DialogueContext, ExtractedSlots, ProcessedCommand
from .catalog import CatalogLookup, SqlCatalog
from .item_resolver import resolve_items
from .order_lifecycle import (
    OrderStatus,
    advance_order,
    cancel_order,
    confirm_order,
    create_order,
)


logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


@dataclass
class VoiceOrderResult:
    command: Optional[ProcessedCommand]
    order: Optional[Order]
    voice_response: str
    context: DialogueContext
    degraded: bool = False


def delivery_details(slots: ExtractedSlots, delivery_address: Optional[str]) -> dict:
    delivery = slots.delivery.model_dump() if slots.delivery else {}
    if delivery_address:
        delivery["address"] = delivery_address
    return delivery


def payment_details(slots: ExtractedSlots, payment_method: Optional[str]) -> dict:
    payment = slots.payment.model_dump() if slots.payment else {}
    if payment_method:
        payment["method"] = normalize_payment_method(payment_method)
    if not payment.get("method"):
        payment["method"] = config.DEFAULT_PAYMENT_METHOD
    return payment


def create_voice_order(
    db: Session,
    user_id: str,
    utterance: str,
    locale: Locale,
    context: Optional[DialogueContext] = None,
    device_id: Optional[str] = None,
    delivery_address: Optional[str] = None,
    payment_method: Optional[str] = None,
    catalog: Optional[CatalogLookup] = None,
) -> VoiceOrderResult:
    context = context or DialogueContext()
    language, dialect = locale.language, locale.dialect

    try:
        command = process_command(utterance, locale, context, device_id)
    except NLUServiceError as e:
        logger.warning("NLU failed for user %s, answering with apology: %s", user_id, e)
        return VoiceOrderResult(
            command=None,
            order=None,
            voice_response=responses.apology_response(language, dialect),
            context=context,
            degraded=True,
        )

    merged = merge(context, command)

    if is_reset(command):
        logger.info("User %s reset the conversation", user_id)
        return VoiceOrderResult(command, None, responses.generate_response(command, language, dialect), merged)

    if device_id and command.type not in (CommandType.GENERAL, CommandType.CONFIRMATION):
        slots = merged.slots()
        order = create_order(
            db,
            user_id=user_id,
            items=[],
            command=command,
            original_command=utterance,
            language=language,
            dialect=dialect,
            delivery=delivery_details(slots, delivery_address),
            payment=payment_details(slots, payment_method),
            device_id=device_id,
            is_offline=True,
            synced=False,
        )
        db.commit()
        db.refresh(order)
        logger.info("Stored offline placeholder order %s for device %s", order.id, device_id)
        return VoiceOrderResult(
            command, order, responses.get_template("offline_saved", language, dialect), merged,
        )

    if is_actionable(command):
        slots = merged.slots()
        catalog = catalog or SqlCatalog(db)
        items = resolve_items(catalog, slots)
        if not items:
            product = slots.product.name if slots.product and slots.product.name else "that"
            return VoiceOrderResult(
                command,
                None,
                responses.get_template("no_match", language, dialect).format(product=product),
                merged,
            )

        order = create_order(
            db,
            user_id=user_id,
            items=items,
            command=command,
            original_command=utterance,
            language=language,
            dialect=dialect,
            delivery=delivery_details(slots, delivery_address),
            payment=payment_details(slots, payment_method),
        )
        db.commit()
        db.refresh(order)
        # The next utterance starts a new conversation
        return VoiceOrderResult(
            command,
            order,
            responses.confirmation_prompt(order, language, dialect),
            DialogueContext(),
        )

    reply = responses.generate_response(command, language, dialect, previous_command=context.previous_command)
    return VoiceOrderResult(command, None, reply, merged)


# =============================================================================
# Reads
# =============================================================================

def get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def get_user_order(db: Session, user_id: str, order_id: int) -> Order:
    """An order owned by `user_id`; other users' orders look missing."""
    order = db.get(Order, order_id)
    if order is None or order.user_id != user_id:
        raise OrderNotFoundError(order_id)
    return order


def list_user_orders(
    db: Session,
    user_id: str,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Order], int]:
    query = db.query(Order).filter(Order.user_id == user_id)
    if status:
        query = query.filter(Order.status == status)
    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return orders, total


# =============================================================================
# Transitions
# =============================================================================

def confirm_voice_order(
    db: Session,
    user_id: str,
    order_id: int,
    utterance: str,
    language: str,
    dialect: str = "standard",
) -> Order:
    order = get_user_order(db, user_id, order_id)
    confirm_order(order, utterance, language, dialect, actor=user_id)
    db.commit()
    db.refresh(order)
    return order


def cancel_voice_order(
    db: Session,
    user_id: str,
    order_id: int,
    reason: Optional[str] = None,
    utterance: Optional[str] = None,
) -> Order:
    order = get_user_order(db, user_id, order_id)
    cancel_order(order, reason=reason, utterance=utterance, actor=user_id)
    db.commit()
    db.refresh(order)
    return order


def update_order_status(
    db: Session,
    order_id: int,
    status: OrderStatus,
    actor: str,
    note: Optional[str] = None,
) -> Order:
    """Merchant move: the next progression step, or a cancellation."""
    order = get_order(db, order_id)
    if status == OrderStatus.CANCELLED:
        cancel_order(order, reason=note, actor=actor)
    else:
        advance_order(order, status, actor=actor, note=note)
    db.commit()
    db.refresh(order)
    return order
