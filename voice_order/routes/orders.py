"""
Order Routes for Voice Order
============================

This module contains the customer-facing order endpoints and the merchant
status endpoint.

Endpoints:
----------
- POST /orders/voice: Create an order from a spoken command
- POST /orders/sync: Replay a device's offline queue
- GET /orders: List the current user's orders
- GET /orders/{id}: Get one of the current user's orders
- POST /orders/{id}/confirm: Confirm a pending order by voice
- POST /orders/{id}/cancel: Cancel a pending or confirmed order
- PATCH /orders/{id}/status: Merchant status progression (HTTP Basic)

Conversation Flow:
------------------
1. The client sends an utterance to /orders/voice, optionally with a
   session_id that ties successive utterances together.
2. While the accumulated command is not a confident order, the reply asks
   for what is missing and no order is created.
3. Once it is, a pending order is created and the reply reads it back.
4. The client sends the user's answer to /orders/{id}/confirm.

Error Mapping:
--------------
- 400: Confirmation utterance was not affirmative; X-Device-ID mismatch
- 401: Missing X-User-ID / invalid merchant credentials
- 404: Unknown order, or an order owned by another user
- 409: Transition not allowed from the order's current status
- 429: Too many requests (rate limited)

Notifications:
--------------
Status changes are pushed to the order owner through the notification
service, in a BackgroundTask after the response is sent.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..auth import get_current_user_id, get_device_id, verify_merchant_credentials
from ..config import RATE_LIMIT_ENABLED, get_rate_limit_voice
from ..db import get_db
from ..nlu import responses
from ..nlu.constants import Locale
from ..nlu.context import is_reset
from ..schemas.orders import (
    CancelOrderRequest,
    ConfirmOrderRequest,
    OrderActionResponse,
    OrderListResponse,
    OrderOut,
    OrderStatusUpdate,
    OrderSummaryOut,
    SyncOrdersRequest,
    SyncOrdersResponse,
    VoiceOrderRequest,
    VoiceOrderResponse,
)
from ..services import session as session_store
from ..services.notifications import NotificationService
from ..services.offline_sync import QueuedOrder, sync_offline_orders
from ..services.order import (
    OrderNotFoundError,
    cancel_voice_order,
    confirm_voice_order,
    create_voice_order,
    get_user_order,
    list_user_orders,
    update_order_status,
)
from ..services.order_lifecycle import (
    ConfirmationMismatchError,
    InvalidTransitionError,
    OrderStatus,
)
from .notifications import get_notification_service


logger = logging.getLogger(__name__)

# Router definition
orders_router = APIRouter(prefix="/orders", tags=["Orders"])


# =============================================================================
# Rate Limiting Setup
# =============================================================================

def get_user_id_or_ip(request: Request) -> str:
    """Rate limit per user when the gateway identified one, else per IP."""
    user_id = request.headers.get("X-User-ID")
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_user_id_or_ip, enabled=RATE_LIMIT_ENABLED)


# =============================================================================
# Helper Functions
# =============================================================================

def _order_not_found(e: OrderNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _invalid_transition(e: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# =============================================================================
# Voice Order Endpoints
# =============================================================================

@orders_router.post("/voice", response_model=VoiceOrderResponse)
@limiter.limit(get_rate_limit_voice)
def create_order_from_voice(
    request: Request,
    req: VoiceOrderRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> VoiceOrderResponse:
    """
    Process a spoken command and create an order when it is a confident order.

    The order is created in `pending` status; the voice response asks the
    user to confirm it.
    """
    context = session_store.get_context(user_id, req.session_id) if req.session_id else None

    result = create_voice_order(
        db,
        user_id=user_id,
        utterance=req.voice_command,
        locale=Locale(req.language, req.dialect),
        context=context,
        device_id=req.device_id,
        delivery_address=req.delivery_address,
        payment_method=req.payment_method,
    )

    if req.session_id:
        if result.command is not None and is_reset(result.command):
            session_store.clear_context(user_id, req.session_id)
        else:
            session_store.save_context(user_id, req.session_id, result.context)

    order_out = None
    if result.order is not None:
        order_out = OrderOut.model_validate(result.order)
        background_tasks.add_task(
            notifier.notify_order_status, user_id, result.order.id, result.order.status,
        )
        logger.info("Created order %s for user %s from voice", result.order.id, user_id)

    return VoiceOrderResponse(
        order=order_out,
        voice_response=result.voice_response,
        processed_command=result.command.to_wire() if result.command else None,
        requires_confirmation=bool(result.order is not None and result.order.items),
        degraded=result.degraded,
    )


@orders_router.post("/sync", response_model=SyncOrdersResponse)
def sync_orders(
    req: SyncOrdersRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    device_id: str = Depends(get_device_id),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> SyncOrdersResponse:
    """
    Replay the orders a device queued while offline.

    Entries are processed in order; one failing entry does not stop the rest.
    """
    if device_id != req.device_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Device-ID does not match the request body",
        )

    queued = [
        QueuedOrder(
            voice_command=entry.voice_command,
            language=entry.language,
            dialect=entry.dialect,
            order_id=entry.order_id,
        )
        for entry in req.orders
    ]
    result = sync_offline_orders(db, user_id, req.device_id, queued)

    if result.orders:
        background_tasks.add_task(
            notifier.notify_offline_sync, user_id, [o.id for o in result.orders],
        )

    return SyncOrdersResponse(
        orders=[OrderOut.model_validate(o) for o in result.orders],
        synced_count=result.synced_count,
        dropped_count=result.dropped,
        failed_count=result.failed,
        skipped_count=result.skipped,
        message=result.message,
    )


# =============================================================================
# Order Reads
# =============================================================================

@orders_router.get("", response_model=OrderListResponse)
def list_orders(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> OrderListResponse:
    """
    Return a paginated list of the user's orders, newest first.
    """
    orders, total = list_user_orders(
        db,
        user_id,
        status=status_filter.value if status_filter else None,
        page=page,
        page_size=page_size,
    )
    items = [OrderSummaryOut.model_validate(o) for o in orders]
    has_next = (page - 1) * page_size + len(items) < total

    return OrderListResponse(
        items=items,
        page=page,
        page_size=page_size,
        total=total,
        has_next=has_next,
    )


@orders_router.get("/{order_id}", response_model=OrderOut)
def get_order_detail(
    order_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> OrderOut:
    try:
        order = get_user_order(db, user_id, order_id)
    except OrderNotFoundError as e:
        raise _order_not_found(e)
    return OrderOut.model_validate(order)


# =============================================================================
# Order Transitions
# =============================================================================

@orders_router.post("/{order_id}/confirm", response_model=OrderActionResponse)
@limiter.limit(get_rate_limit_voice)
def confirm_order_by_voice(
    request: Request,
    order_id: int,
    req: ConfirmOrderRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> OrderActionResponse:
    """
    Confirm a pending order with a spoken "yes".

    The utterance must contain an affirmative word for the given language and
    dialect and no negative word; otherwise the order is left unchanged.
    """
    try:
        order = confirm_voice_order(
            db, user_id, order_id, req.confirmation_command, req.language, req.dialect,
        )
    except OrderNotFoundError as e:
        raise _order_not_found(e)
    except ConfirmationMismatchError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Order confirmation failed",
        )
    except InvalidTransitionError as e:
        raise _invalid_transition(e)

    background_tasks.add_task(notifier.notify_order_status, user_id, order.id, order.status)

    return OrderActionResponse(
        order=OrderOut.model_validate(order),
        voice_response=responses.confirmed_response(order, req.language, req.dialect),
        message="Order confirmed",
    )


@orders_router.post("/{order_id}/cancel", response_model=OrderActionResponse)
def cancel_order_by_voice(
    order_id: int,
    req: CancelOrderRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> OrderActionResponse:
    try:
        order = cancel_voice_order(db, user_id, order_id, reason=req.reason, utterance=req.voice_command)
    except OrderNotFoundError as e:
        raise _order_not_found(e)
    except InvalidTransitionError as e:
        raise _invalid_transition(e)

    background_tasks.add_task(notifier.notify_order_status, user_id, order.id, order.status)

    return OrderActionResponse(
        order=OrderOut.model_validate(order),
        voice_response=responses.cancelled_response(order, req.language, req.dialect),
        message="Order cancelled",
    )


@orders_router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    req: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    merchant: str = Depends(verify_merchant_credentials),
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> OrderOut:
    """
    Move an order along its lifecycle (merchant only).

    Only the next step of the progression, or cancellation from
    pending/confirmed, is accepted.
    """
    try:
        order = update_order_status(db, order_id, req.status, actor=merchant, note=req.note)
    except OrderNotFoundError as e:
        raise _order_not_found(e)
    except InvalidTransitionError as e:
        raise _invalid_transition(e)

    logger.info("Merchant %s moved order %s to %s", merchant, order.id, order.status)
    background_tasks.add_task(notifier.notify_order_status, order.user_id, order.id, order.status)
    return OrderOut.model_validate(order)
