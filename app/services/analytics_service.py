"""
Analytics Service - incident counts for the officials' dashboard.
"""

from collections import Counter
from typing import Dict, List, Optional
import logging

from app.models.analytics import IncidentAnalytics, SeverityCount, StatusCount, TypeCount
from app.models.user import Principal
from app.services.authorization import Action, require
from app.services.incident_service import IncidentService, get_incident_service, incident_from_dict

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10


def _distribution(incidents: List[Dict], field: str) -> List[tuple]:
    """(value, count) pairs, most common first, ties by value."""
    counts = Counter(str(i.get(field) or "") for i in incidents)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


class AnalyticsService:
    """Service for generating incident analytics."""

    def __init__(self, incident_service: Optional[IncidentService] = None):
        self.incident_service = incident_service or get_incident_service()

    def get_incident_analytics(self, principal: Principal) -> IncidentAnalytics:
        """
        Totals, distributions by type/severity/status, and the newest incidents.
        """
        require(principal, Action.VIEW_ANALYTICS)

        incidents = self.incident_service.stream_incidents()

        return IncidentAnalytics(
            total_incidents=len(incidents),
            by_type=[TypeCount(type=v, count=c) for v, c in _distribution(incidents, "type")],
            by_severity=[SeverityCount(severity=v, count=c) for v, c in _distribution(incidents, "severity")],
            by_status=[StatusCount(status=v, count=c) for v, c in _distribution(incidents, "status")],
            recent_incidents=[incident_from_dict(i) for i in incidents[:RECENT_LIMIT]],
        )


# Global service instance
_analytics_service = None


def get_analytics_service() -> AnalyticsService:
    """Get or create AnalyticsService singleton."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service
