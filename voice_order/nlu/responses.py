"""
Voice Response Generation
=========================

Turns a ProcessedCommand (or an order) into the sentence spoken back to the
user. Templates are keyed by language and dialect; a missing language,
dialect or template falls back to standard English so every command always
gets an answer.

Template Keys:
--------------
- help / cancel / repeat: general commands
- yes / no / maybe: confirmation replies
- order_summary: read-back of an order command, ends with a question
- product: a bare product mention, asks for the quantity
- clarification: mid-conversation turn that was not understood
- unknown: anything else
- apology: the NLU back-end failed
- confirm_prompt / confirmed: order confirmation flow
- order_cancelled: after a successful cancel
- offline_saved: order captured on an offline device
- no_match: the spoken product is not in the catalog
"""

import logging
from typing import Dict, Optional

from ..models import Order
from ..schemas.commands import CommandType, ProcessedCommand, QuantityKind, QuantitySlot

logger = logging.getLogger(__name__)


RESPONSE_TEMPLATES: Dict[str, Dict[str, Dict[str, str]]] = {
    "english": {
        "standard": {
            "help": (
                "I can help you place an order. You can say things like "
                "'order 2 kg of rice', 'deliver to 12 MG Road', or 'pay by cash'."
            ),
            "cancel": "Order cancelled. Is there anything else I can help you with?",
            "repeat": "I heard: {command}",
            "yes": "Great! I'll proceed with your order.",
            "no": "I'll cancel that. Would you like to try something else?",
            "maybe": "Would you like me to explain the order details again?",
            "order_summary": "I understood you want to order {details}. Is that correct?",
            "product": "How much {product} would you like?",
            "clarification": "I'm not sure I understood correctly. Could you please repeat your order?",
            "unknown": "I didn't quite understand that. Could you please try again?",
            "apology": "I apologize, but I had trouble processing that. Could you please try again?",
            "confirm_prompt": (
                "Please confirm your order: {items}. Total amount: ₹{total}. "
                "Say yes to confirm or no to cancel."
            ),
            "confirmed": (
                "Order confirmed successfully. Your order number is {order_id}. "
                "Thank you for shopping with us!"
            ),
            "order_cancelled": "Your order {order_id} has been cancelled.",
            "offline_saved": (
                "Your order has been saved on this device and will be placed "
                "as soon as you are back online."
            ),
            "no_match": "Sorry, I couldn't find {product} in the store. Could you try another product?",
        },
        "colloquial": {
            "yes": "Super! Going ahead with your order.",
            "unknown": "Sorry, didn't get that. Say it once more?",
        },
    },
    "hindi": {
        "standard": {
            "help": (
                "मैं आपका ऑर्डर देने में मदद कर सकता हूँ। आप कह सकते हैं "
                "'2 किलो चावल ऑर्डर करो' या 'नकद भुगतान'।"
            ),
            "cancel": "ऑर्डर रद्द कर दिया गया। क्या मैं और कुछ मदद कर सकता हूँ?",
            "repeat": "मैंने सुना: {command}",
            "yes": "बहुत अच्छा! मैं आपका ऑर्डर आगे बढ़ा रहा हूँ।",
            "no": "ठीक है, मैं इसे रद्द कर रहा हूँ। क्या आप कुछ और चाहेंगे?",
            "maybe": "क्या मैं ऑर्डर की जानकारी फिर से बताऊँ?",
            "order_summary": "आप {details} ऑर्डर करना चाहते हैं। क्या यह सही है?",
            "clarification": "मुझे ठीक से समझ नहीं आया। क्या आप अपना ऑर्डर दोबारा बता सकते हैं?",
            "unknown": "मैं समझ नहीं पाया। कृपया फिर से कोशिश करें।",
            "apology": "माफ़ कीजिए, कुछ गड़बड़ हो गई। कृपया फिर से कोशिश करें।",
            "confirm_prompt": (
                "कृपया अपना ऑर्डर पक्का करें: {items}। कुल राशि: ₹{total}। "
                "पक्का करने के लिए हाँ कहें या रद्द करने के लिए नहीं।"
            ),
            "confirmed": "ऑर्डर पक्का हो गया। आपका ऑर्डर नंबर {order_id} है। धन्यवाद!",
            "offline_saved": "आपका ऑर्डर सेव हो गया है। इंटरनेट आते ही ऑर्डर दे दिया जाएगा।",
            "no_match": "माफ़ कीजिए, {product} दुकान में नहीं मिला। कोई और सामान बताइए।",
        },
        "colloquial": {
            "yes": "बढ़िया! ऑर्डर कर देते हैं।",
            "unknown": "समझ नहीं आया भैया, एक बार फिर बोलो?",
        },
    },
}

PAYMENT_LABELS = {
    "cash_on_delivery": "cash on delivery",
    "upi": "UPI",
    "card": "card",
}


def get_template(key: str, language: str = "english", dialect: str = "standard") -> str:
    """Template lookup with dialect -> standard -> English fallback."""
    for lang, dia in ((language, dialect), (language, "standard"), ("english", dialect), ("english", "standard")):
        template = RESPONSE_TEMPLATES.get(lang, {}).get(dia, {}).get(key)
        if template:
            return template
    raise KeyError(key)


def format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def describe_quantity(quantity: Optional[QuantitySlot]) -> str:
    if quantity is None:
        return ""
    unit = quantity.unit or ""
    if quantity.kind == QuantityKind.RANGE:
        amount = f"{format_number(quantity.min)} to {format_number(quantity.max)}"
    elif quantity.kind == QuantityKind.APPROXIMATE:
        amount = f"about {format_number(quantity.value)}"
    else:
        amount = format_number(quantity.value)
    return f"{amount} {unit}".strip()


def describe_order_command(command: ProcessedCommand) -> str:
    extracted = command.extracted
    parts = []
    amount = describe_quantity(extracted.quantity)
    product = extracted.product.name if extracted.product else None
    if amount and product:
        parts.append(f"{amount} of {product}")
    elif product or amount:
        parts.append(product or amount)
    else:
        parts.append("your items")

    delivery = extracted.delivery
    if delivery and delivery.address:
        parts.append(f"delivered to {delivery.address}")
    if delivery and delivery.time:
        parts.append(f"by {delivery.time}")
    payment = extracted.payment
    if payment and payment.method:
        parts.append(f"paid by {PAYMENT_LABELS.get(payment.method, payment.method)}")
    if payment and payment.split_count:
        parts.append(f"split into {payment.split_count} parts")
    return " ".join(parts)


def generate_response(
    command: ProcessedCommand,
    language: str = "english",
    dialect: str = "standard",
    previous_command: Optional[str] = None,
) -> str:
    """
    The spoken reply for one processed command.

    "repeat" reads back `previous_command` when the conversation has one.
    """
    if command.type == CommandType.GENERAL and command.general_type:
        template = get_template(command.general_type.value, language, dialect)
        return template.format(command=previous_command or command.original_command or "")
    if command.type == CommandType.CONFIRMATION and command.confirmation_type:
        return get_template(command.confirmation_type.value, language, dialect)
    if command.type == CommandType.ORDER:
        details = describe_order_command(command)
        return get_template("order_summary", language, dialect).format(details=details)
    if command.type == CommandType.PRODUCT and command.extracted.product:
        return get_template("product", language, dialect).format(product=command.extracted.product.name)
    if command.type == CommandType.CLARIFICATION:
        return get_template("clarification", language, dialect)
    return get_template("unknown", language, dialect)


def apology_response(language: str = "english", dialect: str = "standard") -> str:
    return get_template("apology", language, dialect)


def confirmation_prompt(order: Order, language: str = "english", dialect: str = "standard") -> str:
    """Read the order back and ask for a yes/no."""
    lines = []
    for item in order.items:
        name = item.product.get_voice_name(language, dialect) if item.product else item.product_name
        unit = per_unit = item.unit
        # Localized unit names only apply to the catalog's own unit
        if item.product is not None and item.product.unit == item.unit:
            unit = item.product.get_voice_unit(language, dialect, item.quantity)
            per_unit = item.product.get_voice_unit(language, dialect)
        lines.append(
            f"{format_number(item.quantity)} {unit} of {name} "
            f"at ₹{item.price:.2f} per {per_unit}"
        )
    items = ", ".join(lines) if lines else "no items yet"
    return get_template("confirm_prompt", language, dialect).format(
        items=items,
        total=f"{order.total_amount:.2f}",
    )


def confirmed_response(order: Order, language: str = "english", dialect: str = "standard") -> str:
    return get_template("confirmed", language, dialect).format(order_id=order.id)


def cancelled_response(order: Order, language: str = "english", dialect: str = "standard") -> str:
    return get_template("order_cancelled", language, dialect).format(order_id=order.id)


def sync_message(count: int) -> str:
    return f"{count} orders synced successfully"
