"""
Entry point of the NLU pipeline.

Chooses the back-end for an utterance: the local rule engine when the
request comes from an offline device, when offline mode is forced, or when
NLU_BACKEND is "rules"; otherwise the remote HTTP service or OpenAI. Every
back-end returns the same ProcessedCommand shape.
"""

import logging
from typing import Optional

from .. import config
from ..schemas.commands import ProcessedCommand
from . import llm_client, remote
from .classifier import interpret
from .constants import Locale
from .context import DialogueContext
from .remote import NLUServiceError

logger = logging.getLogger(__name__)

BACKEND_RULES = "rules"
BACKEND_HTTP = "http"
BACKEND_OPENAI = "openai"


def use_offline_engine(device_id: Optional[str] = None) -> bool:
    return bool(device_id) or config.OFFLINE_MODE_ENABLED or config.NLU_BACKEND == BACKEND_RULES


def process_command(
    text: str,
    locale: Locale,
    context: Optional[DialogueContext] = None,
    device_id: Optional[str] = None,
) -> ProcessedCommand:
    """
    Process one utterance.

    Raises:
        NLUServiceError: The online back-end failed. Never raised offline.
    """
    if use_offline_engine(device_id):
        command = interpret(text, locale, context)
        logger.info(
            "Processed command offline: type=%s confidence=%.2f",
            command.type.value, command.confidence,
        )
        return command

    if config.NLU_BACKEND == BACKEND_HTTP:
        command = remote.process_remote(text, locale, context)
    elif config.NLU_BACKEND == BACKEND_OPENAI:
        command = llm_client.process_with_openai(text, locale, context)
    else:
        raise NLUServiceError(f"Unknown NLU backend: {config.NLU_BACKEND}")

    logger.info(
        "Processed command via %s: type=%s confidence=%.2f",
        config.NLU_BACKEND, command.type.value, command.confidence,
    )
    return command
