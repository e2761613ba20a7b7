"""
Offline Sync Reconciler
=======================

Replays the voice commands an offline device queued and turns them into real
orders against the live catalog.

Reconciliation Rules:
---------------------
- Entries are processed one at a time, in queue order.
- Each entry is re-run through the local rule engine and the item resolver,
  exactly as it would have been processed online.
- At least one resolved item: the order is created (or, when the entry names
  the placeholder created while offline, that placeholder is filled) and
  marked synced with the device id and sync time. The merchant comes from
  the first resolved product.
- Zero resolved items: the entry is dropped and only counted.
- An entry whose placeholder is already synced is skipped, so a re-sent
  entry never produces a second order.
- A failure on one entry is rolled back and counted; the rest of the batch
  still runs.

The caller removes synced entries from the device queue. Re-sending the same
stale batch would otherwise create its orders again.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Order
from ..nlu import responses
from ..nlu.classifier import interpret
from ..nlu.constants import Locale
from .catalog import CatalogLookup, SqlCatalog
from .item_resolver import resolve_items
from .order_lifecycle import OrderLifecycleError, create_order, fill_order_items
from .order import delivery_details, payment_details

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedOrder:
    voice_command: str
    language: str = "english"
    dialect: str = "standard"
    order_id: Optional[int] = None


@dataclass
class SyncResult:
    orders: List[Order] = field(default_factory=list)
    dropped: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def synced_count(self) -> int:
        return len(self.orders)

    @property
    def message(self) -> str:
        return responses.sync_message(self.synced_count)


def _placeholder(db: Session, user_id: str, device_id: str, order_id: Optional[int]) -> Optional[Order]:
    if order_id is None:
        return None
    order = db.get(Order, order_id)
    if order is None or order.user_id != user_id or order.device_id != device_id:
        return None
    return order


def _sync_one(
    db: Session,
    user_id: str,
    device_id: str,
    entry: QueuedOrder,
    catalog: CatalogLookup,
) -> Optional[Order]:
    """Materialize one queued entry. Returns None when nothing resolved."""
    placeholder = _placeholder(db, user_id, device_id, entry.order_id)

    command = interpret(entry.voice_command, Locale(entry.language, entry.dialect))
    slots = command.extracted
    items = resolve_items(catalog, slots)
    if not items:
        logger.info("Dropping queued order from device %s: no catalog match", device_id)
        return None

    now = datetime.now(timezone.utc)
    if placeholder is not None:
        fill_order_items(placeholder, items)
        placeholder.processed_command = command.to_wire()
        order = placeholder
    else:
        order = create_order(
            db,
            user_id=user_id,
            items=items,
            command=command,
            original_command=entry.voice_command,
            language=entry.language,
            dialect=entry.dialect,
            delivery=delivery_details(slots, None),
            payment=payment_details(slots, None),
            device_id=device_id,
            is_offline=True,
        )

    order.is_offline = True
    order.synced = True
    order.sync_time = now
    order.device_id = device_id
    order.merchant_id = items[0].product.merchant_id
    return order


def sync_offline_orders(
    db: Session,
    user_id: str,
    device_id: str,
    queued: Sequence[QueuedOrder],
    catalog: Optional[CatalogLookup] = None,
) -> SyncResult:
    catalog = catalog or SqlCatalog(db)
    result = SyncResult()

    for index, entry in enumerate(queued):
        try:
            if entry.order_id is not None:
                existing = _placeholder(db, user_id, device_id, entry.order_id)
                if existing is not None and existing.synced:
                    logger.info("Queued entry %d refers to already synced order %s, skipping", index, existing.id)
                    result.skipped += 1
                    continue

            order = _sync_one(db, user_id, device_id, entry, catalog)
            if order is None:
                result.dropped += 1
                continue
            db.commit()
            db.refresh(order)
            result.orders.append(order)
        except (SQLAlchemyError, OrderLifecycleError) as e:
            db.rollback()
            result.failed += 1
            logger.error("Failed to sync queued entry %d from device %s: %s", index, device_id, e)

    logger.info(
        "Synced %d orders from device %s (dropped=%d failed=%d skipped=%d)",
        result.synced_count, device_id, result.dropped, result.failed, result.skipped,
    )
    return result
