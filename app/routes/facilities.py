"""
Facility endpoints - nearby help for a free-text location.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.models.facility import FacilityLookupResponse
from app.models.user import Principal
from app.services.authorization import Action, require
from app.services.facility_locator import lookup_facilities
from app.utils.security import get_current_principal

router = APIRouter(prefix="/facilities", tags=["Facilities"])


@router.get("", response_model=FacilityLookupResponse)
async def get_facilities(
    location: Optional[str] = Query(None, description="Incident address or area text"),
    principal: Principal = Depends(get_current_principal),
):
    """
    Hospitals, officials and medical camps near a location.

    Unrecognized locations return every facility rather than none.
    """
    require(principal, Action.LOOKUP_FACILITIES)
    return lookup_facilities(location or "")
