"""
Client for the remote NLU service.

The service receives {text, language, dialect, context} and answers with a
ProcessedCommand JSON. A failed call is never retried: the caller turns
NLUServiceError into an apologetic reply right away.
"""

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from .. import config
from ..schemas.commands import ProcessedCommand
from .constants import Locale
from .context import DialogueContext

logger = logging.getLogger(__name__)


class NLUServiceError(Exception):
    """Raised when an NLU back-end fails or returns an unusable answer."""


def build_request(text: str, locale: Locale, context: Optional[DialogueContext]) -> dict:
    return {
        "text": text,
        "language": locale.language,
        "dialect": locale.dialect,
        "context": context.model_dump(mode="json", by_alias=True, exclude_none=True) if context else {},
    }


def parse_command(payload: dict, text: str) -> ProcessedCommand:
    """Validate a back-end answer into a ProcessedCommand."""
    if not isinstance(payload, dict):
        raise NLUServiceError("NLU response is not a JSON object")
    try:
        command = ProcessedCommand.model_validate(payload)
    except ValidationError as e:
        raise NLUServiceError(f"Invalid NLU response: {e.error_count()} validation errors") from e
    return command.model_copy(update={"original_command": text})


def process_remote(
    text: str,
    locale: Locale,
    context: Optional[DialogueContext] = None,
) -> ProcessedCommand:
    if not config.NLU_API_URL:
        raise NLUServiceError("NLU_API_URL is not configured")

    headers = {"Content-Type": "application/json"}
    if config.NLU_API_KEY:
        headers["Authorization"] = f"Bearer {config.NLU_API_KEY}"

    logger.debug("Calling remote NLU for language=%s dialect=%s", locale.language, locale.dialect)
    try:
        response = requests.post(
            f"{config.NLU_API_URL}/process",
            json=build_request(text, locale, context),
            headers=headers,
            timeout=config.NLU_REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        logger.error("Remote NLU request failed: %s", e)
        raise NLUServiceError("Remote NLU request failed") from e
    except ValueError as e:
        logger.error("Remote NLU returned invalid JSON: %s", e)
        raise NLUServiceError("Remote NLU returned invalid JSON") from e

    return parse_command(payload, text)
