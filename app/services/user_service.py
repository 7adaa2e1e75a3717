"""
User Service - read-only access to users in Firestore.

Users are created and maintained by the authentication collaborator.
This service only reads them: to resolve the request principal and to
find the officials a new incident should notify.
"""

from app.config.firebase import get_db
from app.core.settings import settings
from app.models.user import Principal, UserType
from app.utils.firestore_helpers import where_filter, snapshot_to_dict
from typing import Optional, Dict, List
import logging

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user lookups in Firestore.
    """

    COLLECTION = "users"

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()
        self.timeout = settings.FIRESTORE_TIMEOUT_SECONDS

    def get_user(self, user_id: str) -> Optional[Dict]:
        """
        Get user by document ID.

        Returns:
            User dict or None if not found
        """
        if not user_id:
            return None
        doc = self.db.collection(self.COLLECTION).document(user_id).get(timeout=self.timeout)
        if not doc.exists:
            return None
        return snapshot_to_dict(doc)

    def get_principal(self, user_id: str) -> Optional[Principal]:
        """Resolve a user id into a Principal, or None when unknown."""
        user = self.get_user(user_id)
        if user is None or not user.get("email"):
            return None
        return Principal(
            id=user["id"],
            email=user["email"],
            name=user.get("name") or "",
            user_type=UserType.parse(user.get("user_type")),
        )

    def list_officials(self) -> List[Dict]:
        """
        Current set of officials (notification recipients).
        Read at call time; there is no caching, so new officials are picked up
        by the next fan-out and never backfilled.
        """
        users_ref = self.db.collection(self.COLLECTION)
        query = where_filter(users_ref, "user_type", "==", UserType.OFFICIAL.value)
        officials = []
        for doc in query.stream(timeout=self.timeout):
            data = snapshot_to_dict(doc)
            if data.get("email"):
                officials.append(data)
        return officials


# Global service instance
_user_service = None


def get_user_service() -> UserService:
    """Get or create UserService singleton."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
