"""
Intent classification: RawSlots -> ProcessedCommand.

This is the single place that decides what an utterance means. Whole-utterance
general/confirmation matches win outright with full confidence; everything else
is scored by which order slots were recognized.
"""

import logging
from typing import Optional

from .. import config
from ..schemas.commands import CommandType, ExtractedSlots, ProcessedCommand
from .constants import (
    CLARIFICATION_CONFIDENCE,
    CLARIFICATION_THRESHOLD,
    DEFAULT_LOCALE,
    SLOT_WEIGHTS,
    WHOLE_UTTERANCE_CONFIDENCE,
    Locale,
)
from .context import DialogueContext
from .slot_extractor import RawSlots, extract

logger = logging.getLogger(__name__)


def score(extracted: ExtractedSlots) -> float:
    """Sum of the weights of the populated slots, capped at 1.0."""
    total = sum(SLOT_WEIGHTS[name] for name in extracted.populated())
    return round(min(total, 1.0), 2)


def classify(raw: RawSlots, context: Optional[DialogueContext] = None) -> ProcessedCommand:
    if raw.general_type is not None:
        return ProcessedCommand(
            type=CommandType.GENERAL,
            confidence=WHOLE_UTTERANCE_CONFIDENCE,
            general_type=raw.general_type,
            original_command=raw.utterance,
        )
    if raw.confirmation_type is not None:
        return ProcessedCommand(
            type=CommandType.CONFIRMATION,
            confidence=WHOLE_UTTERANCE_CONFIDENCE,
            confirmation_type=raw.confirmation_type,
            original_command=raw.utterance,
        )

    extracted = raw.extracted
    confidence = score(extracted)

    if extracted.quantity or extracted.delivery or extracted.payment:
        command_type = CommandType.ORDER
    elif extracted.product:
        command_type = CommandType.PRODUCT
    else:
        command_type = CommandType.UNKNOWN

    if confidence < CLARIFICATION_THRESHOLD and context is not None and context.previous_command:
        logger.debug("Low confidence %.2f mid-conversation, asking for clarification", confidence)
        command_type = CommandType.CLARIFICATION
        confidence = CLARIFICATION_CONFIDENCE

    return ProcessedCommand(
        type=command_type,
        confidence=confidence,
        extracted=extracted,
        original_command=raw.utterance,
    )


def interpret(
    utterance: str,
    locale: Locale = DEFAULT_LOCALE,
    context: Optional[DialogueContext] = None,
) -> ProcessedCommand:
    """The offline rule engine: extract then classify."""
    return classify(extract(utterance, locale), context)


def is_actionable(command: ProcessedCommand) -> bool:
    """Only a confident `order` command may resolve items and create an order."""
    return (
        command.type == CommandType.ORDER
        and command.confidence >= config.ORDER_CONFIDENCE_THRESHOLD
    )
