"""
Notification Routes for Voice Order
===================================

Endpoints:
----------
- GET /notifications: Stored notifications for the current user
- POST /notifications/read: Mark notifications as read
- WS /notifications/ws?user_id=...: Live notification stream

Live Delivery:
--------------
A client that keeps the WebSocket open receives order updates as JSON
messages. While the socket is closed, the same notifications are stored and
can be fetched with GET /notifications.

The connection registry lives on `app.state.connections` and is created at
startup (see main.py). Other routes send through `get_notification_service`,
usually from a BackgroundTask so the HTTP response is not delayed.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request, WebSocket
from sqlalchemy.orm import Session
from starlette.websockets import WebSocketDisconnect

from .. import db as db_module
from ..auth import get_current_user_id
from ..db import get_db
from ..schemas.notifications import MarkReadRequest, MarkReadResponse, NotificationOut
from ..services.notifications import (
    ConnectionRegistry,
    NotificationService,
    list_notifications,
    mark_read,
)


logger = logging.getLogger(__name__)

# Router definition
notifications_router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _new_session() -> Session:
    # Looked up per call so a replaced SessionLocal is honored
    return db_module.SessionLocal()


def get_notification_service(request: Request) -> NotificationService:
    registry: ConnectionRegistry = request.app.state.connections
    return NotificationService(registry, _new_session)


# =============================================================================
# Stored Notifications
# =============================================================================

@notifications_router.get("", response_model=List[NotificationOut])
def get_notifications(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    unread_only: bool = Query(True),
    limit: int = Query(50, ge=1, le=200),
) -> List[NotificationOut]:
    notifications = list_notifications(db, user_id, unread_only=unread_only, limit=limit)
    return [NotificationOut.model_validate(n) for n in notifications]


@notifications_router.post("/read", response_model=MarkReadResponse)
def read_notifications(
    req: MarkReadRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> MarkReadResponse:
    updated = mark_read(db, user_id, req.ids)
    logger.info("Marked %d notifications read for user %s", updated, user_id)
    return MarkReadResponse(updated=updated)


# =============================================================================
# WebSocket
# =============================================================================

@notifications_router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, user_id: str = Query(..., min_length=1)):
    """
    Hold a notification connection open for `user_id`.

    Incoming messages are only used as keep-alives; "ping" is answered with
    "pong".
    """
    registry: ConnectionRegistry = websocket.app.state.connections
    await websocket.accept()
    registry.connect(user_id, websocket)
    try:
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("Notification socket closed by client for user %s", user_id)
    finally:
        registry.disconnect(user_id, websocket)
