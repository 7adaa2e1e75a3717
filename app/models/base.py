"""
Pydantic base models for request/response validation.

DESIGN PRINCIPLE:
- Models should reflect data structure, not business logic
- Keep models simple and focused on validation
- Authorization and status rules live in services, not here
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseResponse(BaseModel):
    """
    Base response model for API responses that carry no entity.
    """
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
