"""
Schemas Package for Voice Order
===============================

This package contains all Pydantic models used for command representation,
API request validation and response serialization.

Schema Organization:
--------------------
- **commands.py**: ProcessedCommand, its slots and the DialogueContext.
  Shared by the NLU pipeline and the API; depends on nothing else in the
  project.
- **orders.py**: Order request/response schemas
- **voice.py**: Voice command (dialogue) schemas
- **notifications.py**: Stored notification schemas

Naming Conventions:
-------------------
- *Out: Response models (e.g., OrderOut) - what API returns
- *Request: Request bodies (e.g., VoiceOrderRequest)
- *Response: Composite response structures (e.g., SyncOrdersResponse)

Usage:
------
    from voice_order.schemas import ProcessedCommand, DialogueContext
    from voice_order.schemas.orders import OrderOut, VoiceOrderRequest

Only the command types are re-exported here; the API schemas import the
service layer and are imported from their modules directly.
"""

from .commands import (
    CommandType,
    ConfirmationType,
    DeliverySlot,
    DialogueContext,
    ExtractedSlots,
    GeneralType,
    PaymentSlot,
    ProcessedCommand,
    ProductSlot,
    QuantityKind,
    QuantitySlot,
)

__all__ = [
    "CommandType",
    "ConfirmationType",
    "DeliverySlot",
    "DialogueContext",
    "ExtractedSlots",
    "GeneralType",
    "PaymentSlot",
    "ProcessedCommand",
    "ProductSlot",
    "QuantityKind",
    "QuantitySlot",
]
