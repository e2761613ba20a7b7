"""
Notification Service for Voice Order
====================================

Pushes order updates to users over WebSocket and keeps a persisted copy for
users who are not connected.

Delivery Contract:
------------------
- If the user has an open connection, the notification is sent on it.
- Otherwise (or if the send fails) it is stored in the `notifications`
  table, where the client fetches it later via GET /notifications.

Connection Registry:
--------------------
`ConnectionRegistry` maps user id -> WebSocket. A connection is registered
when the socket is accepted and removed when it closes or a send on it
fails. The application creates one registry at startup and keeps it on
`app.state`; nothing here is a module global.

Notification Types:
-------------------
- order_status: an order changed status
- offline_sync: a batch of offline orders was synced
- voice_interaction: the reply to a processed voice command
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from fastapi import WebSocket
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.websockets import WebSocketDisconnect

from ..models import Notification

logger = logging.getLogger(__name__)


ORDER_STATUS_MESSAGES = {
    "pending": "Your order has been placed and is awaiting confirmation",
    "confirmed": "Your order has been confirmed",
    "preparing": "Your order is being prepared",
    "ready": "Your order is ready",
    "out_for_delivery": "Your order is out for delivery",
    "delivered": "Your order has been delivered",
    "cancelled": "Your order has been cancelled",
}


class ConnectionRegistry:
    """Open WebSocket per user id."""

    def __init__(self):
        self._connections: Dict[str, WebSocket] = {}
        self._lock = threading.Lock()

    def connect(self, user_id: str, websocket: WebSocket) -> None:
        with self._lock:
            self._connections[user_id] = websocket
        logger.info("WebSocket connected for user %s", user_id)

    def disconnect(self, user_id: str, websocket: Optional[WebSocket] = None) -> None:
        """Remove the user's connection; if `websocket` is given, only if it is still the current one."""
        with self._lock:
            current = self._connections.get(user_id)
            if current is not None and (websocket is None or current is websocket):
                del self._connections[user_id]
                logger.info("WebSocket disconnected for user %s", user_id)

    def get(self, user_id: str) -> Optional[WebSocket]:
        with self._lock:
            return self._connections.get(user_id)

    def is_connected(self, user_id: str) -> bool:
        return self.get(user_id) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


class NotificationService:
    """Send-if-connected, else persist."""

    def __init__(self, registry: ConnectionRegistry, session_factory: Callable[[], Session]):
        self.registry = registry
        self.session_factory = session_factory

    async def notify(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Returns True if delivered live, False if it was stored instead."""
        payload = {"type": type, "title": title, "message": message, "data": data or {}}

        websocket = self.registry.get(user_id)
        if websocket is not None:
            try:
                await websocket.send_json(payload)
                return True
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.warning("WebSocket send failed for user %s: %s", user_id, e)
                self.registry.disconnect(user_id, websocket)

        self._store(user_id, type, title, message, data)
        return False

    def _store(self, user_id: str, type: str, title: str, message: str, data: Optional[Dict[str, Any]]) -> None:
        db = self.session_factory()
        try:
            db.add(Notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                data=data or {},
            ))
            db.commit()
            logger.debug("Stored %s notification for user %s", type, user_id)
        except SQLAlchemyError:
            db.rollback()
            logger.error("Failed to store notification for user %s", user_id)
            raise
        finally:
            db.close()

    async def notify_order_status(self, user_id: str, order_id: int, status: str) -> bool:
        message = ORDER_STATUS_MESSAGES.get(status, f"Your order status is now {status}")
        return await self.notify(
            user_id,
            "order_status",
            "Order Update",
            f"{message} (order #{order_id})",
            {"order_id": order_id, "status": status},
        )

    async def notify_offline_sync(self, user_id: str, order_ids: List[int]) -> bool:
        return await self.notify(
            user_id,
            "offline_sync",
            "Offline Orders Synced",
            f"Successfully synced {len(order_ids)} offline orders",
            {"order_ids": order_ids},
        )

    async def notify_voice_interaction(self, user_id: str, command: Dict[str, Any], response: str) -> bool:
        return await self.notify(
            user_id,
            "voice_interaction",
            "Voice Command Processed",
            response,
            {"command": command},
        )


# =============================================================================
# Stored notifications
# =============================================================================

def list_notifications(db: Session, user_id: str, unread_only: bool = True, limit: int = 50) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    return query.order_by(Notification.id.desc()).limit(limit).all()


def mark_read(db: Session, user_id: str, notification_ids: Optional[List[int]] = None) -> int:
    """Mark the given (or all) of the user's notifications read. Returns the count."""
    query = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read.is_(False),
    )
    if notification_ids:
        query = query.filter(Notification.id.in_(notification_ids))
    count = query.update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return count
