"""
Dialogue context accumulation across conversational turns.

`merge` never mutates its input: it returns a new context where every slot
the command populated replaces the old one, and `previous_command` becomes
the command's utterance. A "no" or "cancel" clears everything.
"""

from typing import Optional

from ..schemas.commands import (
    CommandType,
    ConfirmationType,
    DialogueContext,
    GeneralType,
    ProcessedCommand,
)

__all__ = ["DialogueContext", "is_reset", "merge"]


def is_reset(command: ProcessedCommand) -> bool:
    """True for an explicit rejection or a general cancel."""
    if command.type == CommandType.CONFIRMATION:
        return command.confirmation_type == ConfirmationType.NO
    if command.type == CommandType.GENERAL:
        return command.general_type == GeneralType.CANCEL
    return False


def merge(context: Optional[DialogueContext], command: ProcessedCommand) -> DialogueContext:
    if context is None:
        context = DialogueContext()
    if is_reset(command):
        return DialogueContext()

    update = dict(command.extracted.populated())
    update["previous_command"] = command.original_command
    return context.model_copy(update=update)
