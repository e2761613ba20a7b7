"""
Slot extraction: utterance + locale -> RawSlots.

Pure and deterministic. Every slot family is described by a table of
`SlotPattern` rows evaluated in order; within one (slot, field) group the
first row that yields a value wins. Adding a phrasing means adding a row.

Clause captures (addresses, times, product names ...) end where the next
clause keyword starts, so "deliver to 12 MG Road by tomorrow" yields the
address "12 MG Road" and the time "tomorrow".
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Match, Optional, Pattern

from ..schemas.commands import (
    ConfirmationType,
    DeliverySlot,
    ExtractedSlots,
    GeneralType,
    PaymentSlot,
    ProductSlot,
    QuantityKind,
    QuantitySlot,
)
from . import lexicon
from .constants import DEFAULT_LOCALE, NUMBER_WORDS, UNIT_ALIASES, Locale


# =============================================================================
# Vocabulary
# =============================================================================

NUM = r"(?:\d+(?:\.\d+)?|(?:" + "|".join(NUMBER_WORDS) + r")\b)"

# Longest alternatives first
UNIT = (
    r"(?:kilograms?|kilos?|kgs?|grams?|gms?|g|millilitres?|milliliters?|ml|"
    r"litres?|liters?|ltrs?|l|pieces?|pcs?|units?|nos?|dozens?|packets?|packs?)"
)

POLITENESS = r"(?:please|pls|plz|thanks|thank\s+you|thankyou|kindly)"
DELIVERY_VERB = r"(?:deliver(?:ed|y)?|ship(?:ped)?|send|sent|bring)"
PAYMENT_WORD = r"(?:pay|paid|paying|payment|split|divide)"
DAY_HINT = (
    r"(?:today|tomorrow|tonight|monday|tuesday|wednesday|thursday|friday|"
    r"saturday|sunday|weekend|next\s+\w+|the\s+\d{1,2}(?:st|nd|rd|th)?\b|"
    r"\d{1,2}(?:st|nd|rd|th)\b)"
)
CLOCK_HINT = r"(?:\d{1,2}(?::\d{2})?\s*(?:am|pm|o'?clock)\b|noon|midnight)"
INSTRUCTIONS_LEAD = r"(?:delivery|shipping)\s+(?:instructions?|notes?)"

_END = r"|\s*[.!?](?:\s|$)|\s*$"


def _stop(*keywords: str, comma: bool = False) -> str:
    """Lookahead that ends a lazy clause capture before the next keyword."""
    words = "|".join(keywords + (POLITENESS,))
    comma_stop = r"|\s*," if comma else ""
    return r"(?=\s*,?\s+(?:and\s+)?(?:" + words + r")\b" + comma_stop + _END + ")"


ADDRESS_STOP = _stop(
    r"by", r"before", r"on\s+" + DAY_HINT, r"at\s+" + CLOCK_HINT,
    PAYMENT_WORD, INSTRUCTIONS_LEAD,
)
TIME_STOP = _stop(PAYMENT_WORD, DELIVERY_VERB, r"to", INSTRUCTIONS_LEAD, comma=True)
INSTRUCTIONS_STOP = _stop(PAYMENT_WORD)
PAYMENT_STOP = _stop(r"split", r"divide", DELIVERY_VERB, comma=True)
PRODUCT_STOP = _stop(
    DELIVERY_VERB, PAYMENT_WORD, r"from", r"in", r"under", r"below", r"within",
    r"max(?:imum)?", r"by", r"before", r"at", r"on", r"for",
    comma=True,
)
CATEGORY_STOP = _stop(DELIVERY_VERB, PAYMENT_WORD, r"under", r"below", r"by", comma=True)

_FLAGS = re.IGNORECASE

_TRAILING_POLITENESS = re.compile(r"(?:[\s,]+" + POLITENESS + r")+[\s,.!?]*$", _FLAGS)
_APPROX_PREFIX = re.compile(r"(?:about|around|approximately|approx|roughly|nearly|between|from)\s+$", _FLAGS)
_RANGE_PREFIX = re.compile(NUM + r"\s*(?:and|to|-)\s*$", _FLAGS)
_QUANTITY_PHRASE = re.compile(
    r"^(?:(?:about|around|approximately|approx|roughly|nearly|between|from)\s+)?"
    + NUM + r"(?:\s*(?:and|to|-)\s*" + NUM + r")?\s*(?:" + UNIT + r"\b)?\s*(?:of\s+)?",
    _FLAGS,
)
_TRAILING_QUANTITY = re.compile(r"\s+" + NUM + r"\s*" + UNIT + r"$", _FLAGS)
_LEADING_FILLER = re.compile(r"^(?:me|us|a|an|the|some|of)\s+", _FLAGS)
# A capture that starts with a preposition is a destination, not a product
_PREPOSITION_START = re.compile(r"^(?:to|at|for|by|on|in|from|with)\b", _FLAGS)


# =============================================================================
# Value helpers
# =============================================================================

def parse_number(token: str) -> Optional[float]:
    token = token.strip().lower()
    if token in NUMBER_WORDS:
        return float(NUMBER_WORDS[token])
    try:
        return float(token)
    except ValueError:
        return None


def normalize_unit(token: str) -> str:
    return UNIT_ALIASES.get(token.strip().lower(), token.strip().lower())


def normalize_payment_method(raw: str) -> str:
    """cash -> cash_on_delivery, upi -> upi, card -> card, else passthrough."""
    value = raw.strip().lower()
    if "cash" in value or value == "cod":
        return "cash_on_delivery"
    if "upi" in value:
        return "upi"
    if "card" in value:
        return "card"
    return value


def clean_capture(value: str) -> Optional[str]:
    """Trim whitespace, trailing punctuation and politeness words."""
    value = _TRAILING_POLITENESS.sub("", value.strip())
    value = value.strip(" ,.!?")
    return value or None


def clean_product_name(value: str) -> Optional[str]:
    name = value.strip()
    for _ in range(2):
        name = _LEADING_FILLER.sub("", name)
        name = _QUANTITY_PHRASE.sub("", name)
    name = _TRAILING_QUANTITY.sub("", name)
    if _PREPOSITION_START.match(name):
        return None
    return clean_capture(name)


# =============================================================================
# Extractor functions
# =============================================================================
# Each takes the regex match and the full text and returns the fields it
# contributes to its slot, or None to let the next match/pattern try.

def _exact_quantity(match: Match, text: str) -> Optional[Dict[str, Any]]:
    prefix = text[:match.start()]
    # Amounts qualified as approximate or as a range belong to the later rows
    if _APPROX_PREFIX.search(prefix) or _RANGE_PREFIX.search(prefix):
        return None
    if re.match(r"\s*(?:and|to|-)\s*" + NUM, text[match.end():], _FLAGS):
        return None
    return {
        "kind": QuantityKind.EXACT,
        "value": parse_number(match.group("value")),
        "unit": normalize_unit(match.group("unit")),
    }


def _approximate_quantity(match: Match, text: str) -> Dict[str, Any]:
    return {
        "kind": QuantityKind.APPROXIMATE,
        "value": parse_number(match.group("value")),
        "unit": normalize_unit(match.group("unit")),
    }


def _range_quantity(match: Match, text: str) -> Dict[str, Any]:
    low = parse_number(match.group("min"))
    high = parse_number(match.group("max"))
    if low is not None and high is not None and low > high:
        low, high = high, low
    return {
        "kind": QuantityKind.RANGE,
        "min": low,
        "max": high,
        "unit": normalize_unit(match.group("unit")),
    }


def _capture(group: str) -> Callable[[Match, str], Optional[Dict[str, Any]]]:
    def extractor(match: Match, text: str) -> Optional[Dict[str, Any]]:
        value = clean_capture(match.group(group))
        return {group: value} if value else None
    return extractor


def _payment_method(match: Match, text: str) -> Optional[Dict[str, Any]]:
    value = clean_capture(match.group("method"))
    return {"method": normalize_payment_method(value)} if value else None


def _split_count(match: Match, text: str) -> Optional[Dict[str, Any]]:
    count = parse_number(match.group("count"))
    if count is None or count < 1:
        return None
    return {"split_count": int(count)}


def _product_name(match: Match, text: str) -> Optional[Dict[str, Any]]:
    name = clean_product_name(match.group("name"))
    return {"name": name} if name else None


def _max_price(match: Match, text: str) -> Dict[str, Any]:
    return {"max_price": float(match.group("price"))}


# =============================================================================
# Pattern table
# =============================================================================

@dataclass(frozen=True)
class SlotPattern:
    slot: str
    field: str
    pattern: Pattern
    extractor: Callable[[Match, str], Optional[Dict[str, Any]]]


def _row(slot: str, field: str, regex: str, extractor) -> SlotPattern:
    return SlotPattern(slot, field, re.compile(regex, _FLAGS), extractor)


SLOT_PATTERNS: List[SlotPattern] = [
    # Quantity: exact, then approximate, then range
    _row("quantity", "amount",
         r"\b(?P<value>" + NUM + r")\s*(?P<unit>" + UNIT + r")\b",
         _exact_quantity),
    _row("quantity", "amount",
         r"\b(?:about|around|approximately|approx|roughly|nearly)\s+"
         r"(?P<value>" + NUM + r")\s*(?P<unit>" + UNIT + r")\b",
         _approximate_quantity),
    _row("quantity", "amount",
         r"(?:\b(?:between|from)\s+)?\b(?P<min>" + NUM + r")\s*(?:and|to|-)\s*"
         r"(?P<max>" + NUM + r")\s*(?P<unit>" + UNIT + r")\b",
         _range_quantity),

    # Delivery
    _row("delivery", "address",
         r"\b" + DELIVERY_VERB + r"\s+(?:(?:it|them|this|the\s+order)\s+)?"
         r"(?:to|at(?!\s+" + CLOCK_HINT + r"))\s+(?P<address>.+?)" + ADDRESS_STOP,
         _capture("address")),
    _row("delivery", "address",
         r"\b(?:my\s+)?address\s+(?:is\s+|:\s*)?(?P<address>.+?)" + ADDRESS_STOP,
         _capture("address")),
    _row("delivery", "time",
         r"\b" + DELIVERY_VERB + r"\b(?:(?!\b" + PAYMENT_WORD + r"\b).)*?"
         r"\b(?:by|before|on(?=\s+" + DAY_HINT + r")|at(?=\s+" + CLOCK_HINT + r"))"
         r"\s+(?P<time>.+?)" + TIME_STOP,
         _capture("time")),
    _row("delivery", "instructions",
         r"\b" + INSTRUCTIONS_LEAD + r"\s*(?:is\s+|are\s+|:\s*)?(?P<instructions>.+?)"
         + INSTRUCTIONS_STOP,
         _capture("instructions")),

    # Payment
    _row("payment", "method",
         r"\b(?:pay|paid|paying|payment)\s+(?:by|using|with|through|via|in)\s+"
         r"(?P<method>.+?)" + PAYMENT_STOP,
         _payment_method),
    _row("payment", "method",
         r"\bpay\s+(?P<method>cash|upi|card)\b",
         _payment_method),
    _row("payment", "split_count",
         r"\b(?:split|divide)\s+(?:the\s+)?(?:payment|bill|amount|cost)\s+"
         r"(?:into|in|by|between)\s+(?P<count>" + NUM + r")",
         _split_count),

    # Product
    _row("product", "name",
         r"(?<!\bthe\s)(?<!\bmy\s)(?<!\bthis\s)(?<!\byour\s)"
         r"\b(?:get|buy|order|purchase)\s+(?P<name>.+?)" + PRODUCT_STOP,
         _product_name),
    _row("product", "category",
         r"\b(?:from|in|under)\s+(?:the\s+)?(?:category|section)\s+(?P<category>.+?)"
         + CATEGORY_STOP,
         _capture("category")),
    _row("product", "category",
         r"\b(?:from|in)\s+(?:the\s+)?(?P<category>[^\s,]+(?:\s+[^\s,]+)?)\s+(?:category|section)\b",
         _capture("category")),
    _row("product", "max_price",
         r"\b(?:under|below|max(?:imum)?|within)\s+(?:the\s+)?(?:price|cost|budget)\s+"
         r"(?:of\s+)?(?:rs\.?\s*|₹\s*|inr\s*)?(?P<price>\d+(?:\.\d+)?)",
         _max_price),
    _row("product", "max_price",
         r"\b(?:under|below|less\s+than|max(?:imum)?|within|up\s*to)\s+"
         r"(?:rs\.?\s*|₹\s*|inr\s*)(?P<price>\d+(?:\.\d+)?)",
         _max_price),
    _row("product", "max_price",
         r"\b(?:under|below|less\s+than|within|up\s*to)\s+(?P<price>\d+(?:\.\d+)?)\s*"
         r"(?:rs|rupees|inr)\b",
         _max_price),
]


# =============================================================================
# Extraction
# =============================================================================

@dataclass(frozen=True)
class RawSlots:
    """Everything the extractor found in one utterance."""
    utterance: str
    locale: Locale
    extracted: ExtractedSlots
    general_type: Optional[GeneralType] = None
    confirmation_type: Optional[ConfirmationType] = None


def _first_value(row: SlotPattern, text: str) -> Optional[Dict[str, Any]]:
    for match in row.pattern.finditer(text):
        value = row.extractor(match, text)
        if value:
            return value
    return None


def _build_slots(fields: Dict[str, Dict[str, Any]]) -> ExtractedSlots:
    product = fields.get("product", {})
    delivery = fields.get("delivery", {})
    payment = fields.get("payment", {})
    return ExtractedSlots(
        # category and price ceiling only qualify a named product
        product=ProductSlot(**product) if product.get("name") else None,
        quantity=QuantitySlot(**fields["quantity"]) if "quantity" in fields else None,
        delivery=DeliverySlot(**delivery) if delivery else None,
        payment=PaymentSlot(**payment) if payment else None,
    )


def extract(utterance: str, locale: Locale = DEFAULT_LOCALE) -> RawSlots:
    """Run every pattern family over the utterance."""
    text = " ".join((utterance or "").split())

    fields: Dict[str, Dict[str, Any]] = {}
    claimed = set()
    for row in SLOT_PATTERNS:
        key = (row.slot, row.field)
        if key in claimed:
            continue
        value = _first_value(row, text)
        if value:
            claimed.add(key)
            fields.setdefault(row.slot, {}).update(value)

    return RawSlots(
        utterance=text,
        locale=locale,
        extracted=_build_slots(fields),
        general_type=lexicon.match_general(text, locale),
        confirmation_type=lexicon.match_confirmation(text, locale),
    )
