"""
Order Schemas for Voice Order
=============================

This module defines Pydantic models for the voice order endpoints: the
request bodies for creating, confirming, cancelling and syncing orders, and
the order representations returned to clients.

Endpoint Coverage:
------------------
- POST /orders/voice: VoiceOrderRequest -> VoiceOrderResponse
- POST /orders/{id}/confirm: ConfirmOrderRequest -> OrderActionResponse
- POST /orders/{id}/cancel: CancelOrderRequest -> OrderActionResponse
- POST /orders/sync: SyncOrdersRequest -> SyncOrdersResponse
- GET /orders: OrderListResponse
- GET /orders/{id}: OrderOut
- PATCH /orders/{id}/status: OrderStatusUpdate -> OrderOut

Order Lifecycle:
----------------
pending -> confirmed -> preparing -> ready -> out_for_delivery -> delivered,
with pending/confirmed -> cancelled. See services/order_lifecycle.py.

Data Model:
-----------
The ORM order keeps its voice, offline, delivery and payment details as flat
columns. OrderOut regroups them into nested blocks (`voice_order`,
`offline_mode`, `delivery`, `payment`) so clients see one sub-record per
concern.

Field Naming:
-------------
API fields are snake_case. The stored processed command is returned as-is,
in the camelCase wire format of the NLU contract. Queued offline orders
accept both `voice_command` and `voiceCommand`.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .. import config
from ..services.order_lifecycle import OrderStatus


def _check_language(value: str) -> str:
    value = (value or "english").strip().lower()
    if value not in config.SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language '{value}'")
    return value


def _check_dialect(value: str) -> str:
    value = (value or "standard").strip().lower()
    if value not in config.DIALECTS:
        raise ValueError(f"Unsupported dialect '{value}'")
    return value


class LocaleFields(BaseModel):
    """Language and dialect of an utterance, validated against the supported set."""
    language: str = "english"
    dialect: str = "standard"

    @field_validator("language", mode="before")
    @classmethod
    def validate_language(cls, v):
        return _check_language(v)

    @field_validator("dialect", mode="before")
    @classmethod
    def validate_dialect(cls, v):
        return _check_dialect(v)


# =============================================================================
# Order output
# =============================================================================

class OrderItemOut(BaseModel):
    """
    One line of an order.

    Attributes:
        product_id: Catalog product the line resolved to
        product_name: Product name at the time of ordering
        quantity / unit: Resolved amount
        price: Unit price snapshot
        line_total: quantity * price
        voice_command / language / dialect: Utterance the line came from
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: float
    unit: str
    price: float
    line_total: float
    voice_command: Optional[str] = None
    language: Optional[str] = None
    dialect: Optional[str] = None


class TimelineEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    timestamp: datetime
    note: Optional[str] = None
    updated_by: Optional[str] = None


class VoiceConfirmationOut(BaseModel):
    required: bool = True
    confirmed: bool = False
    confirmation_command: Optional[str] = None
    confirmation_time: Optional[datetime] = None


class VoiceOrderOut(BaseModel):
    original_command: Optional[str] = None
    language: Optional[str] = None
    dialect: Optional[str] = None
    processed_command: Optional[Dict[str, Any]] = None
    confirmation: VoiceConfirmationOut
    cancellation_command: Optional[str] = None


class OfflineModeOut(BaseModel):
    is_offline: bool = False
    synced: bool = True
    sync_time: Optional[datetime] = None
    device_id: Optional[str] = None


class DeliveryOut(BaseModel):
    address: Optional[str] = None
    time: Optional[str] = None
    instructions: Optional[str] = None


class PaymentOut(BaseModel):
    method: Optional[str] = None
    split_count: Optional[int] = None
    status: Optional[str] = None


class OrderOut(BaseModel):
    """
    Full order representation.

    Built from an ORM Order; the flat columns are regrouped into nested
    sub-records by the before-validator.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    merchant_id: Optional[str] = None
    status: str
    total_amount: float
    items: List[OrderItemOut]
    timeline: List[TimelineEntryOut]
    voice_order: VoiceOrderOut
    offline_mode: OfflineModeOut
    delivery: DeliveryOut
    payment: PaymentOut
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def group_order_columns(cls, data):
        """Regroup flat ORM columns into the nested blocks."""
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "user_id": data.user_id,
            "merchant_id": data.merchant_id,
            "status": data.status,
            "total_amount": data.total_amount,
            "items": list(data.items),
            "timeline": list(data.timeline),
            "voice_order": {
                "original_command": data.original_command,
                "language": data.language,
                "dialect": data.dialect,
                "processed_command": data.processed_command,
                "confirmation": {
                    "required": data.confirmation_required,
                    "confirmed": data.confirmed,
                    "confirmation_command": data.confirmation_command,
                    "confirmation_time": data.confirmation_time,
                },
                "cancellation_command": data.cancellation_command,
            },
            "offline_mode": {
                "is_offline": data.is_offline,
                "synced": data.synced,
                "sync_time": data.sync_time,
                "device_id": data.device_id,
            },
            "delivery": {
                "address": data.delivery_address,
                "time": data.delivery_time,
                "instructions": data.delivery_instructions,
            },
            "payment": {
                "method": data.payment_method,
                "split_count": data.payment_split_count,
                "status": data.payment_status,
            },
            "created_at": data.created_at,
            "updated_at": data.updated_at,
        }


class OrderSummaryOut(BaseModel):
    """Order row for list views."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    total_amount: float
    item_count: int
    is_offline: bool = False
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def count_items(cls, data):
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "status": data.status,
            "total_amount": data.total_amount,
            "item_count": len(data.items),
            "is_offline": data.is_offline,
            "created_at": data.created_at,
        }


class OrderListResponse(BaseModel):
    """
    Paginated response for order listing.

    Example:
        {
            "items": [...],
            "page": 1,
            "page_size": 20,
            "total": 57,
            "has_next": true
        }
    """
    items: List[OrderSummaryOut]
    page: int
    page_size: int
    total: int
    has_next: bool


# =============================================================================
# Requests and responses
# =============================================================================

class VoiceOrderRequest(LocaleFields):
    """
    Create an order from a spoken command.

    `session_id` ties successive utterances into one conversation; without it
    every utterance stands alone. `device_id` marks the request as coming
    from an offline-capable device and switches to the local rule engine.
    """
    voice_command: str = Field(..., min_length=1, max_length=config.MAX_COMMAND_LENGTH)
    device_id: Optional[str] = None
    session_id: Optional[str] = None
    delivery_address: Optional[str] = None
    payment_method: Optional[str] = None

    @field_validator("voice_command")
    @classmethod
    def strip_command(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("voice_command must not be blank")
        return v


class VoiceOrderResponse(BaseModel):
    order: Optional[OrderOut] = None
    voice_response: str
    processed_command: Optional[Dict[str, Any]] = None
    requires_confirmation: bool = False
    degraded: bool = False


class ConfirmOrderRequest(LocaleFields):
    confirmation_command: str = Field(..., min_length=1, max_length=config.MAX_COMMAND_LENGTH)


class CancelOrderRequest(LocaleFields):
    reason: Optional[str] = Field(None, max_length=500)
    voice_command: Optional[str] = Field(None, max_length=config.MAX_COMMAND_LENGTH)


class OrderActionResponse(BaseModel):
    order: OrderOut
    voice_response: str
    message: str


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: Optional[str] = Field(None, max_length=500)


class QueuedOrderIn(LocaleFields):
    """One entry of a device's offline queue."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    voice_command: str = Field(..., min_length=1, max_length=config.MAX_COMMAND_LENGTH)
    order_id: Optional[int] = None


class SyncOrdersRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    device_id: str = Field(..., min_length=1)
    orders: List[QueuedOrderIn]


class SyncOrdersResponse(BaseModel):
    orders: List[OrderOut]
    synced_count: int
    dropped_count: int
    failed_count: int
    skipped_count: int
    message: str
