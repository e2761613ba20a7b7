"""
Voice Command Schemas
=====================

Request/response models for POST /voice/command, which processes one
utterance inside a dialogue session without creating an order. The client
shows the accumulated context and decides when to place the order.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .. import config
from .orders import LocaleFields


class VoiceCommandRequest(LocaleFields):
    text: str = Field(..., min_length=1, max_length=config.MAX_COMMAND_LENGTH)
    session_id: str = Field(..., min_length=1, max_length=100)
    device_id: Optional[str] = None


class VoiceCommandResponse(BaseModel):
    processed_command: Optional[Dict[str, Any]] = None
    voice_response: str
    context: Dict[str, Any]
    ready_to_order: bool = False
    degraded: bool = False
