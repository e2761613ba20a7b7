"""
Routes Package for Voice Order
==============================

This package contains all API route definitions organized by domain. Each
module defines a FastAPI APIRouter with related endpoints grouped together.

- orders.py: Voice order creation, confirmation, cancellation, offline sync,
  listing and merchant status progression
- voice.py: Dialogue-only voice command processing
- notifications.py: Stored notifications and the notification WebSocket

Router Registration:
--------------------
All routers are registered in main.py under /api/v1:

    api_v1_router = APIRouter(prefix="/api/v1")
    api_v1_router.include_router(orders_router)

Route Dependencies:
-------------------
- get_db: Database session
- get_current_user_id: Customer identity from the X-User-ID header
- verify_merchant_credentials: Merchant authentication
- limiter.limit(): Rate limiting on the voice endpoints

Error Handling:
---------------
Routes translate service exceptions into HTTPException:
- 400: Bad request (confirmation mismatch, device mismatch)
- 401: Unauthorized
- 404: Not found
- 409: Invalid order status transition
- 429: Too many requests (rate limited)
- 503: Service unavailable (merchant auth not configured)
"""

from .orders import orders_router, limiter
from .voice import voice_router
from .notifications import notifications_router

__all__ = [
    "orders_router",
    "voice_router",
    "notifications_router",
    "limiter",
]
