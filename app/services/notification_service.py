"""
Notification Service - official alerts for new incidents.

DESIGN NOTE:
- fan_out() runs once, synchronously, after the incident document exists
- Officials are read at that moment; later officials are never backfilled
- Failures are logged and swallowed; the incident stays created
  (accepted eventual-consistency gap, no two-phase commit, no retry)
- One document per (incident, official) with a deterministic id, so a
  repeated batch overwrites instead of duplicating
"""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.config.firebase import get_db
from app.core.errors import NotFound
from app.core.settings import settings
from app.models.notification import NotificationResponse
from app.models.user import Principal
from app.services.authorization import Action, require
from app.services.user_service import UserService, get_user_service
from app.utils.firestore_helpers import where_filter, snapshot_to_dict, to_datetime

logger = logging.getLogger(__name__)

# Firestore caps a write batch at 500 operations
BATCH_LIMIT = 500


class NotificationService:
    """Service for notification fan-out and the officials' inbox."""

    COLLECTION = "notifications"

    def __init__(self, db=None, user_service: Optional[UserService] = None):
        self.db = db if db is not None else get_db()
        self.user_service = user_service or get_user_service()
        self.timeout = settings.FIRESTORE_TIMEOUT_SECONDS

    @staticmethod
    def notification_id(incident_id: str, recipient_email: str) -> str:
        digest = hashlib.sha256(recipient_email.strip().lower().encode()).hexdigest()[:16]
        return f"{incident_id}_{digest}"

    @staticmethod
    def build_notification(incident: Dict, recipient_email: str, created_at: datetime) -> Dict:
        incident_type = incident.get("type", "")
        severity = incident.get("severity", "")
        address = (incident.get("location") or {}).get("address", "")
        return {
            "title": f"New Incident: {incident.get('title', '')}",
            "message": f"{incident_type} - {severity} severity reported at {address}",
            "type": f"{incident_type} - {severity} severity",
            "incident_id": incident["id"],
            "recipient_email": recipient_email,
            "read": False,
            "created_at": created_at,
        }

    def fan_out(self, incident: Dict) -> int:
        """
        Create one unread notification per current official.

        Args:
            incident: the committed incident dict (must carry its id)

        Returns:
            Number of notifications written (0 when nothing was written)
        """
        incident_id = incident.get("id")
        if not incident_id:
            # Never write notifications that point at nothing
            logger.error("Fan-out skipped: incident has no id")
            return 0

        try:
            officials = self.user_service.list_officials()
        except Exception as e:
            logger.error(f"Fan-out for incident {incident_id} failed reading officials: {e}", exc_info=True)
            return 0

        if not officials:
            logger.info(f"No officials to notify for incident {incident_id}")
            return 0

        now = datetime.now(timezone.utc)
        collection = self.db.collection(self.COLLECTION)
        written = 0
        for start in range(0, len(officials), BATCH_LIMIT):
            chunk = officials[start:start + BATCH_LIMIT]
            batch = self.db.batch()
            for official in chunk:
                email = official["email"]
                ref = collection.document(self.notification_id(incident_id, email))
                batch.set(ref, self.build_notification(incident, email, now))
            try:
                batch.commit(timeout=self.timeout)
                written += len(chunk)
            except Exception as e:
                logger.error(
                    f"Notification batch for incident {incident_id} failed "
                    f"({written}/{len(officials)} already written): {e}",
                    exc_info=True,
                )
                return written

        logger.info(f"📣 Notified {written} official(s) of incident {incident_id}")
        return written

    def list_notifications(self, principal: Principal) -> List[NotificationResponse]:
        """
        The caller's own notifications, newest first.
        """
        require(principal, Action.LIST_NOTIFICATIONS)

        query = where_filter(self.db.collection(self.COLLECTION), "recipient_email", "==", principal.email)
        notifications = [snapshot_to_dict(doc) for doc in query.stream(timeout=self.timeout)]
        # Sorted here rather than with order_by to avoid needing a composite index
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        notifications.sort(key=lambda n: to_datetime(n.get("created_at")) or epoch, reverse=True)

        return [NotificationResponse(**n) for n in notifications]

    def mark_read(self, principal: Principal, notification_id: str, read: bool = True) -> NotificationResponse:
        """
        Set the read flag on one of the caller's notifications.
        Setting the same value twice is a no-op, not an error.
        """
        require(principal, Action.UPDATE_NOTIFICATION)

        doc_ref = self.db.collection(self.COLLECTION).document(notification_id)
        doc = doc_ref.get(timeout=self.timeout)
        if not doc.exists:
            raise NotFound("Notification not found")

        notification = snapshot_to_dict(doc)
        require(principal, Action.UPDATE_NOTIFICATION, notification)

        if notification.get("read") != read:
            doc_ref.update({"read": read}, timeout=self.timeout)
            notification["read"] = read
            logger.info(f"Notification {notification_id} marked read={read} by {principal.email}")

        return NotificationResponse(**notification)


# Global service instance
_notification_service = None


def get_notification_service() -> NotificationService:
    """Get or create NotificationService singleton."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
