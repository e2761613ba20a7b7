"""
Services Package for Voice Order
================================

This package contains the business logic behind the API routes. Services
receive their dependencies (database sessions, catalog lookups, connection
registries) from the caller instead of creating them.

Available Services:
-------------------
- **catalog**: Catalog lookup contract and its SQL implementation
- **item_resolver**: Spoken product slot -> catalog product
- **order_lifecycle**: Order status state machine and timeline
- **order**: Voice order creation, confirmation, cancellation and reads
- **offline_sync**: Reconciliation of orders queued on offline devices
- **session**: In-memory dialogue context store
- **notifications**: WebSocket delivery with persisted fallback

Usage:
------
    from voice_order.services.order import create_voice_order
    from voice_order.services.offline_sync import sync_offline_orders, QueuedOrder

Or import the entire module:

    from voice_order.services import order, offline_sync
"""

from . import catalog
from . import item_resolver
from . import order_lifecycle
from . import order
from . import offline_sync
from . import session
from . import notifications

__all__ = [
    "catalog",
    "item_resolver",
    "order_lifecycle",
    "order",
    "offline_sync",
    "session",
    "notifications",
]
