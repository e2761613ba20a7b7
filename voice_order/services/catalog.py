"""
Catalog lookup used by the item resolver.

The ordering core only ever reads the catalog through `CatalogLookup`, so
tests and other storage back-ends can plug in their own implementation.
`SqlCatalog` serves it from the `products` table.
"""

import logging
from typing import Iterable, List, Optional, Protocol

from sqlalchemy.orm import Session

from ..models import Product

logger = logging.getLogger(__name__)


class CatalogLookup(Protocol):
    def search(
        self,
        term: str,
        category: Optional[str] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        """Active products matching `term`, in the catalog's own order."""
        ...


def _searchable_texts(product: Product) -> Iterable[str]:
    yield product.name or ""
    for alt in product.alternative_names or []:
        yield alt.get("name") or ""
    for entry in product.voice_patterns or []:
        if entry.get("is_active", True):
            yield from entry.get("patterns") or []


def matches_term(product: Product, term: str) -> bool:
    """Case-insensitive substring match on name, alternative names and voice patterns."""
    needle = term.strip().lower()
    if not needle:
        return False
    return any(needle in text.lower() for text in _searchable_texts(product))


class SqlCatalog:
    """CatalogLookup over the products table."""

    def __init__(self, db: Session):
        self.db = db

    def search(
        self,
        term: str,
        category: Optional[str] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        query = self.db.query(Product).filter(Product.is_active.is_(True))
        if category:
            query = query.filter(Product.category.ilike(f"%{category.strip()}%"))
        if max_price is not None:
            query = query.filter(Product.price <= max_price)

        # Alternative names and voice patterns live in JSON columns, so the
        # text match runs here rather than in SQL
        results = [p for p in query.order_by(Product.id).all() if matches_term(p, term)]
        logger.debug("Catalog search '%s' returned %d products", term, len(results))
        return results
