"""
Natural language understanding for voice orders.

Pipeline:
    slot_extractor.extract  -> RawSlots
    classifier.classify     -> ProcessedCommand
    context.merge           -> DialogueContext

`processor.process_command` picks the back-end (local rules, remote HTTP
service or OpenAI); `responses` turns commands and orders into spoken text.
"""

from .classifier import classify, interpret, is_actionable
from .constants import DEFAULT_LOCALE, Locale
from .context import DialogueContext, is_reset, merge
from .processor import process_command
from .remote import NLUServiceError
from .slot_extractor import RawSlots, extract

__all__ = [
    "DEFAULT_LOCALE",
    "DialogueContext",
    "Locale",
    "NLUServiceError",
    "RawSlots",
    "classify",
    "extract",
    "interpret",
    "is_actionable",
    "is_reset",
    "merge",
    "process_command",
]
