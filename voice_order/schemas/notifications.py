"""Stored notification schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    read: bool
    created_at: Optional[datetime] = None


class MarkReadRequest(BaseModel):
    # None marks every unread notification
    ids: Optional[List[int]] = None


class MarkReadResponse(BaseModel):
    updated: int
