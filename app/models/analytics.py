"""
Analytics models for the officials' dashboard.
"""

from pydantic import BaseModel, Field
from typing import List

from app.models.incident import IncidentResponse


class TypeCount(BaseModel):
    type: str
    count: int


class SeverityCount(BaseModel):
    severity: str
    count: int


class StatusCount(BaseModel):
    status: str
    count: int


class IncidentAnalytics(BaseModel):
    total_incidents: int = 0
    by_type: List[TypeCount] = Field(default_factory=list)
    by_severity: List[SeverityCount] = Field(default_factory=list)
    by_status: List[StatusCount] = Field(default_factory=list)
    recent_incidents: List[IncidentResponse] = Field(default_factory=list)
