"""
Status Workflow Engine - incident status transitions.

DESIGN PRINCIPLES:
- Any valid status may be written from any state (no forbidden edges)
- No terminal lock: a resolved incident can be reopened
- Unknown status values are rejected before authorization runs
- All transitions logged in status_history with who made them
"""

from datetime import datetime
from typing import Dict, List, Optional
import logging

from app.core.errors import InvalidArgument
from app.core.settings import settings
from app.models.incident import IncidentStatus

logger = logging.getLogger(__name__)


class StatusWorkflowEngine:
    """
    Validates requested statuses and builds audit entries.

    Rules:
    - pending, in_progress, resolved are always writable
    - rejected is writable only when allow_rejected is set
    - same-status writes are accepted (they still refresh updated_at)
    """

    INITIAL_STATUS = IncidentStatus.PENDING

    CANONICAL_STATUSES: List[IncidentStatus] = [
        IncidentStatus.PENDING,
        IncidentStatus.IN_PROGRESS,
        IncidentStatus.RESOLVED,
    ]

    def __init__(self, allow_rejected: Optional[bool] = None):
        if allow_rejected is None:
            allow_rejected = settings.ALLOW_REJECTED_STATUS
        self.allow_rejected = allow_rejected

    def valid_statuses(self) -> List[str]:
        statuses = [s.value for s in self.CANONICAL_STATUSES]
        if self.allow_rejected:
            statuses.append(IncidentStatus.REJECTED.value)
        return statuses

    def is_valid_status(self, status: Optional[str]) -> bool:
        return isinstance(status, str) and status in self.valid_statuses()

    def validate(self, status: Optional[str]) -> IncidentStatus:
        """
        Return the parsed status or raise InvalidArgument.
        """
        if not status:
            raise InvalidArgument("Status is required")
        if not self.is_valid_status(status):
            raise InvalidArgument(
                f"Invalid status value: {status!r}. Allowed: {self.valid_statuses()}"
            )
        return IncidentStatus(status)

    @staticmethod
    def create_status_history_entry(
        from_status: str,
        to_status: str,
        changed_by: str,
        timestamp: datetime,
    ) -> Dict:
        """
        Create a status history entry for the audit trail.

        Timestamps are explicit (not SERVER_TIMESTAMP): Firestore rejects
        sentinels inside array elements.
        """
        return {
            "from": from_status,
            "to": to_status,
            "changed_by": changed_by,
            "timestamp": timestamp,
        }
