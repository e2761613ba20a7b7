"""
Voice Command Routes for Voice Order
====================================

Endpoints:
----------
- POST /voice/command: Process one utterance within a dialogue session

Unlike POST /orders/voice, this endpoint never creates an order. It returns
the processed command, the spoken reply and the context accumulated so far,
so a client can drive the conversation itself and place the order once
`ready_to_order` is true.

Session Management:
-------------------
The context is kept per (user, session_id) in the in-memory session store
(services/session.py). A "no" or "cancel" clears it.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from ..auth import get_current_user_id
from ..config import get_rate_limit_voice
from ..nlu import responses
from ..nlu.classifier import is_actionable
from ..nlu.constants import Locale
from ..nlu.context import is_reset, merge
from ..nlu.processor import process_command
from ..nlu.remote import NLUServiceError
from ..schemas.voice import VoiceCommandRequest, VoiceCommandResponse
from ..services import session as session_store
from ..services.notifications import NotificationService
from .notifications import get_notification_service
from .orders import limiter


logger = logging.getLogger(__name__)

# Router definition
voice_router = APIRouter(prefix="/voice", tags=["Voice"])


@voice_router.post("/command", response_model=VoiceCommandResponse)
@limiter.limit(get_rate_limit_voice)
def voice_command(
    request: Request,
    req: VoiceCommandRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    notifier: NotificationService = Depends(get_notification_service),
) -> VoiceCommandResponse:
    context = session_store.get_context(user_id, req.session_id)

    try:
        command = process_command(req.text, Locale(req.language, req.dialect), context, req.device_id)
    except NLUServiceError as e:
        logger.warning("Voice command degraded for user %s: %s", user_id, e)
        return VoiceCommandResponse(
            processed_command=None,
            voice_response=responses.apology_response(req.language, req.dialect),
            context=context.model_dump(mode="json", by_alias=True, exclude_none=True),
            degraded=True,
        )

    merged = merge(context, command)
    if is_reset(command):
        session_store.clear_context(user_id, req.session_id)
    else:
        session_store.save_context(user_id, req.session_id, merged)

    reply = responses.generate_response(
        command, req.language, req.dialect, previous_command=context.previous_command,
    )
    wire = command.to_wire()
    background_tasks.add_task(notifier.notify_voice_interaction, user_id, wire, reply)

    return VoiceCommandResponse(
        processed_command=wire,
        voice_response=reply,
        context=merged.model_dump(mode="json", by_alias=True, exclude_none=True),
        ready_to_order=is_actionable(command),
    )
