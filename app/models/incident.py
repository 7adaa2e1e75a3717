"""
Pydantic models for incidents and their comment threads.
These models handle validation for responses and JSON request bodies.
Multipart incident creation is validated in the incident service.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict
from enum import Enum

from app.models.base import utc_now
from app.models.user import PersonSnapshot


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(str, Enum):
    """
    Incident lifecycle states. PENDING is initial.
    REJECTED is only writable when ALLOW_REJECTED_STATUS is enabled.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    address: str = Field(..., description="Postal address or best-effort description")
    coordinates: Optional[Coordinates] = None


class Comment(BaseModel):
    """One entry in an incident's append-only comment thread."""
    id: str
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    author: PersonSnapshot


class CommentCreate(BaseModel):
    """Model for adding a comment. Blank content is rejected by the service."""
    content: str = Field(..., max_length=2000)


class StatusUpdateRequest(BaseModel):
    # Plain str: unknown values must surface as invalid_argument, not a 422.
    status: str = Field(..., description="pending | in_progress | resolved")


class StatusChange(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None


class IncidentResponse(BaseModel):
    """
    Model for incident responses (what API returns).
    """
    id: str = Field(..., description="Firestore document ID")
    title: str
    location: Location
    type: str
    severity: str
    status: str = Field(default=IncidentStatus.PENDING.value)
    description: str = ""
    photo_url: Optional[str] = None
    reported_by: PersonSnapshot
    comments: List[Comment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[StatusChange] = None
    status_history: List[Dict] = Field(default_factory=list, description="Status transition audit trail")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "a1b2c3",
                "title": "Bus stalled at junction",
                "location": {"address": "Main Street, City Center", "coordinates": {"lat": 12.97, "lng": 77.59}},
                "type": "Breakdown",
                "severity": "high",
                "status": "pending",
                "description": "Route 42 bus blocking two lanes.",
                "photo_url": None,
                "reported_by": {"id": "u1", "name": "Asha", "email": "asha@example.com"},
                "comments": [],
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        }


class IncidentListResponse(BaseModel):
    incidents: List[IncidentResponse]
    total: int
    page: int
    limit: int
    total_pages: int
