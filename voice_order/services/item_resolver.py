"""
Item Resolution Service
=======================

Maps an extracted product slot onto a concrete catalog product. Used both by
online order creation and by the offline sync reconciler, so a command
resolves to the same item whichever path it takes.

Resolution Rules:
-----------------
- Search the catalog by the spoken product name, applying the slot's
  category and price ceiling as catalog filters.
- Take the first product the catalog returns. There is no ranking beyond
  the catalog's own order.
- Quantity is the spoken value; a range resolves to its lower bound; no
  quantity at all resolves to 1.
- A missing unit is inherited from the catalog product.
- No match means no item. The caller leaves it out of the order.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..models import Product
from ..schemas.commands import ExtractedSlots, ProductSlot, QuantitySlot
from .catalog import CatalogLookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedItem:
    product: Product
    quantity: float
    unit: str
    price: float

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.price, 2)


def resolve_quantity(quantity: Optional[QuantitySlot]) -> float:
    if quantity is None:
        return 1.0
    if quantity.value:
        return float(quantity.value)
    if quantity.min:
        return float(quantity.min)
    return 1.0


def resolve(
    catalog: CatalogLookup,
    product_slot: Optional[ProductSlot],
    quantity_slot: Optional[QuantitySlot] = None,
) -> Optional[ResolvedItem]:
    if product_slot is None or not product_slot.name:
        return None

    candidates = catalog.search(
        product_slot.name,
        category=product_slot.category,
        max_price=product_slot.max_price,
    )
    if not candidates:
        logger.info("No catalog match for '%s', omitting item", product_slot.name)
        return None

    product = candidates[0]
    unit = (quantity_slot.unit if quantity_slot and quantity_slot.unit else None) or product.unit
    item = ResolvedItem(
        product=product,
        quantity=resolve_quantity(quantity_slot),
        unit=unit,
        price=product.price,
    )
    logger.debug(
        "Resolved '%s' to product %s (%s %s)",
        product_slot.name, product.id, item.quantity, item.unit,
    )
    return item


def resolve_items(catalog: CatalogLookup, slots: ExtractedSlots) -> List[ResolvedItem]:
    """Resolve the order lines described by a set of slots."""
    item = resolve(catalog, slots.product, slots.quantity)
    return [item] if item else []
