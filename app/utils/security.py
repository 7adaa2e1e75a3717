"""
Principal resolution for incoming requests.

Session issuance lives outside this service: the auth gateway authenticates
the caller and forwards the user id in the X-User-ID header. We only look the
user up (read-only) to learn their email, name and role.
"""

import logging
from typing import Optional

from fastapi import Header

from app.core.errors import Unauthenticated
from app.models.user import Principal
from app.services.user_service import get_user_service

logger = logging.getLogger(__name__)


def resolve_principal(user_id: Optional[str]) -> Optional[Principal]:
    """
    Look up the principal for a user id.

    Returns None when the id is blank or no such user exists.
    """
    if not user_id or not user_id.strip():
        return None
    principal = get_user_service().get_principal(user_id.strip())
    if principal is None:
        logger.warning(f"Unknown principal id presented: {user_id}")
    return principal


async def get_current_principal(
    user_id: Optional[str] = Header(None, alias="X-User-ID", description="Authenticated user ID")
) -> Principal:
    """FastAPI dependency: the caller, or 401."""
    principal = resolve_principal(user_id)
    if principal is None:
        raise Unauthenticated("Not authenticated")
    return principal
