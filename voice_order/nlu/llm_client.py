"""
OpenAI back-end for command processing.

Asks a chat model to answer with the same ProcessedCommand JSON the remote
NLU service produces. The client is created on first use so the rest of the
application runs without an API key.
"""

import json
import logging
import os
from typing import Optional

from openai import OpenAI, OpenAIError

from .. import config
from ..schemas.commands import ProcessedCommand
from .constants import Locale
from .context import DialogueContext
from .remote import NLUServiceError, build_request, parse_command

logger = logging.getLogger(__name__)

_client: Optional[OpenAI] = None

SYSTEM_PROMPT = """
You are the language understanding step of a voice ordering system for a
neighbourhood store in India. Customers speak in Hindi, Tamil, Kannada,
Bhojpuri, Bengali, Marathi, Gujarati or English, in a standard or colloquial
dialect, often mixing English words in.

You receive JSON: {"text": ..., "language": ..., "dialect": ..., "context": {...}}.
"context" holds what the customer already said earlier in the conversation.

Answer with ONLY a JSON object of this shape:
{
  "type": "order" | "product" | "confirmation" | "general" | "clarification" | "unknown",
  "confidence": number between 0 and 1,
  "extracted": {
    "product": {"name": string, "category": string, "maxPrice": number},
    "quantity": {"kind": "exact" | "approximate" | "range", "value": number,
                 "min": number, "max": number, "unit": "kg" | "g" | "l" | "ml" | "piece" | "dozen" | "pack"},
    "delivery": {"address": string, "time": string, "instructions": string},
    "payment": {"method": "cash_on_delivery" | "upi" | "card" | string, "splitCount": number}
  },
  "generalType": "help" | "cancel" | "repeat",
  "confirmationType": "yes" | "no" | "maybe"
}

Rules:
- Omit slots you did not hear. Translate product names to English.
- confidence adds 0.3 for product, 0.3 for quantity, 0.2 for delivery and 0.2 for payment.
- A whole-utterance yes/no/maybe is a "confirmation" with confidence 1.0 and no "extracted".
- help/cancel/repeat is "general" with confidence 1.0 and no "extracted".
- Use "order" when a quantity, delivery or payment was heard; "product" for a bare product name.
""".strip()


def get_client() -> OpenAI:
    global _client
    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise NLUServiceError("OPENAI_API_KEY is not configured")
        _client = OpenAI(api_key=api_key)
    return _client


def process_with_openai(
    text: str,
    locale: Locale,
    context: Optional[DialogueContext] = None,
    model: Optional[str] = None,
) -> ProcessedCommand:
    model = model or config.OPENAI_MODEL
    request = build_request(text, locale, context)

    try:
        completion = get_client().chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(request, ensure_ascii=False)},
            ],
            response_format={"type": "json_object"},
            max_tokens=config.OPENAI_MAX_TOKENS,
            temperature=config.OPENAI_TEMPERATURE,
        )
    except OpenAIError as e:
        logger.error("OpenAI request failed: %s", e)
        raise NLUServiceError("OpenAI request failed") from e

    content = completion.choices[0].message.content or ""
    logger.debug("OpenAI raw response: %s", content)
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("OpenAI returned invalid JSON: %s", e)
        raise NLUServiceError("OpenAI returned invalid JSON") from e

    return parse_command(payload, text)
