"""
Notification models. One notification per (incident, official) pair,
created by the fan-out on incident creation.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str = ""
    type: str = ""
    incident_id: str = Field(..., description="Weak reference; survives incident deletion")
    recipient_email: str
    read: bool = False
    created_at: Optional[datetime] = None


class NotificationReadRequest(BaseModel):
    read: bool = Field(..., description="New read flag")
