"""
Analytics endpoints - dashboard figures for officials.
"""

from fastapi import APIRouter, Depends

from app.models.analytics import IncidentAnalytics
from app.models.user import Principal
from app.services.analytics_service import get_analytics_service
from app.utils.security import get_current_principal

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("", response_model=IncidentAnalytics)
async def get_analytics(principal: Principal = Depends(get_current_principal)):
    return get_analytics_service().get_incident_analytics(principal)
