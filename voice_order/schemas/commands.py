"""
Command Schemas for Voice Order
===============================

This module defines the structured intent produced for every utterance,
regardless of which extractor produced it. The local rule engine, the remote
NLU service and the OpenAI back-end all yield a `ProcessedCommand`, so the
rest of the pipeline never needs to know where a command came from.

Wire Format:
------------
Commands are serialized with camelCase keys, matching the remote NLU
contract:

    {
        "type": "order",
        "confidence": 1.0,
        "extracted": {
            "product": {"name": "rice"},
            "quantity": {"kind": "exact", "value": 2, "unit": "kg"},
            "delivery": {"address": "12 MG Road", "time": "tomorrow evening"},
            "payment": {"method": "cash_on_delivery"}
        },
        "originalCommand": "order 2 kg of rice ..."
    }

Both snake_case and camelCase keys are accepted on input. The quantity
discriminator is also accepted under the key "type", which is what older
NLU deployments send.

Invariant:
----------
Exactly one of `extracted`, `general_type`, `confirmation_type` is populated
for a given command type. Remote payloads are normalized on the way in so
the invariant holds for every command, not only locally produced ones.

Commands are frozen: a new utterance always produces a new command.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CommandType(str, Enum):
    ORDER = "order"
    PRODUCT = "product"
    CONFIRMATION = "confirmation"
    GENERAL = "general"
    CLARIFICATION = "clarification"
    UNKNOWN = "unknown"


class GeneralType(str, Enum):
    HELP = "help"
    CANCEL = "cancel"
    REPEAT = "repeat"


class ConfirmationType(str, Enum):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"


class QuantityKind(str, Enum):
    EXACT = "exact"
    APPROXIMATE = "approximate"
    RANGE = "range"


class CommandModel(BaseModel):
    """Base for all command value objects: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ProductSlot(CommandModel):
    name: Optional[str] = None
    category: Optional[str] = None
    max_price: Optional[float] = None


class QuantitySlot(CommandModel):
    kind: QuantityKind = QuantityKind.EXACT
    value: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    unit: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_type_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "kind" not in data and "type" in data:
            data = dict(data)
            data["kind"] = data.pop("type")
        return data


class DeliverySlot(CommandModel):
    address: Optional[str] = None
    time: Optional[str] = None
    instructions: Optional[str] = None


class PaymentSlot(CommandModel):
    method: Optional[str] = None
    split_count: Optional[int] = None


class ExtractedSlots(CommandModel):
    product: Optional[ProductSlot] = None
    quantity: Optional[QuantitySlot] = None
    delivery: Optional[DeliverySlot] = None
    payment: Optional[PaymentSlot] = None

    def populated(self) -> dict:
        """Slot name -> slot for every slot that is present."""
        return {
            name: getattr(self, name)
            for name in ("product", "quantity", "delivery", "payment")
            if getattr(self, name) is not None
        }

    def is_empty(self) -> bool:
        return not self.populated()


class ProcessedCommand(CommandModel):
    type: CommandType
    confidence: float = Field(ge=0.0, le=1.0)
    extracted: ExtractedSlots = Field(default_factory=ExtractedSlots)
    general_type: Optional[GeneralType] = None
    confirmation_type: Optional[ConfirmationType] = None
    original_command: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_payload(cls, data: Any) -> Any:
        """Drop fields that do not belong to the command's type."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("extracted") is None:
            data.pop("extracted", None)

        command_type = data.get("type")
        if isinstance(command_type, Enum):
            command_type = command_type.value

        if command_type != CommandType.GENERAL.value:
            data.pop("general_type", None)
            data.pop("generalType", None)
        if command_type != CommandType.CONFIRMATION.value:
            data.pop("confirmation_type", None)
            data.pop("confirmationType", None)
        if command_type in (CommandType.GENERAL.value, CommandType.CONFIRMATION.value):
            data.pop("extracted", None)
        return data

    def to_wire(self) -> dict:
        """JSON-ready camelCase dict, as sent to clients and stored on orders."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DialogueContext(CommandModel):
    """Slots accumulated over one ordering conversation."""
    product: Optional[ProductSlot] = None
    quantity: Optional[QuantitySlot] = None
    delivery: Optional[DeliverySlot] = None
    payment: Optional[PaymentSlot] = None
    previous_command: Optional[str] = None

    def slots(self) -> ExtractedSlots:
        return ExtractedSlots(
            product=self.product,
            quantity=self.quantity,
            delivery=self.delivery,
            payment=self.payment,
        )

    def is_empty(self) -> bool:
        return self.slots().is_empty() and not self.previous_command
