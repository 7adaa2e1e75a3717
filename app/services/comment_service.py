"""
Comment Service - append-only comment threads embedded in incidents.
"""

from firebase_admin import firestore
from google.api_core import exceptions as gcloud_exceptions
from app.config.firebase import get_db
from app.core.errors import InvalidArgument, NotFound
from app.core.settings import settings
from app.models.incident import Comment
from app.models.user import Principal
from app.services.authorization import Action, require
from datetime import datetime, timezone
from typing import List
import logging
import uuid

logger = logging.getLogger(__name__)


class CommentService:
    """Service for managing comments on incidents."""

    COLLECTION = "incidents"

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()
        self.timeout = settings.FIRESTORE_TIMEOUT_SECONDS

    def add_comment(self, principal: Principal, incident_id: str, content: str) -> Comment:
        """
        Append a comment to an incident's thread.

        The append is a server-side ArrayUnion, so concurrent comments on the
        same incident never overwrite each other.

        Args:
            principal: Comment author
            incident_id: Incident to comment on
            content: Comment text (blank is rejected)

        Returns:
            The created Comment
        """
        content = content.strip() if isinstance(content, str) else ""
        if not content:
            raise InvalidArgument("Comment content is required")

        require(principal, Action.ADD_COMMENT)

        comment = Comment(
            id=uuid.uuid4().hex,
            content=content,
            created_at=datetime.now(timezone.utc),
            author=principal.snapshot(),
        )

        doc_ref = self.db.collection(self.COLLECTION).document(incident_id)
        try:
            doc_ref.update(
                {
                    "comments": firestore.ArrayUnion([comment.model_dump()]),
                    "updated_at": comment.created_at,
                },
                timeout=self.timeout,
            )
        except gcloud_exceptions.NotFound:
            raise NotFound("Incident not found")

        logger.info(f"💬 Comment {comment.id} added to incident {incident_id} by {principal.email}")
        return comment

    def get_comments(self, principal: Principal, incident_id: str) -> List[Comment]:
        """
        Full thread for an incident in append (chronological) order.
        """
        require(principal, Action.LIST_COMMENTS)

        doc = self.db.collection(self.COLLECTION).document(incident_id).get(timeout=self.timeout)
        if not doc.exists:
            raise NotFound("Incident not found")

        return [Comment(**c) for c in (doc.to_dict() or {}).get("comments") or []]


# Global service instance
_comment_service = None


def get_comment_service() -> CommentService:
    """Get or create CommentService singleton."""
    global _comment_service
    if _comment_service is None:
        _comment_service = CommentService()
    return _comment_service
