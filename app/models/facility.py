"""Nearby-help facility models (static reference data)."""

from pydantic import BaseModel, Field
from typing import List, Optional


class Hospital(BaseModel):
    id: str
    name: str
    type: str
    contact: str
    location: str
    area: str
    emergency_services: bool = True
    ambulance_number: Optional[str] = None
    estimated_distance: Optional[str] = None


class FacilityOfficial(BaseModel):
    id: str
    name: str
    designation: str
    contact: str
    jurisdiction: str
    area: str
    response_time: Optional[str] = None


class MedicalCamp(BaseModel):
    id: str
    name: str
    location: str
    area: str
    capacity: int
    services: List[str] = Field(default_factory=list)
    contact: str
    estimated_distance: Optional[str] = None


class FacilityLookupResponse(BaseModel):
    area: str = Field(..., description="Matched area, or 'unknown' when nothing matched")
    hospitals: List[Hospital] = Field(default_factory=list)
    officials: List[FacilityOfficial] = Field(default_factory=list)
    medical_camps: List[MedicalCamp] = Field(default_factory=list)
