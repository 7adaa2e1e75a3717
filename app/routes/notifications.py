"""
Notification endpoints - officials' inbox. Clients poll; there is no push.
"""

from typing import List
import logging

from fastapi import APIRouter, Depends

from app.models.notification import NotificationReadRequest, NotificationResponse
from app.models.user import Principal
from app.services.notification_service import get_notification_service
from app.utils.security import get_current_principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(principal: Principal = Depends(get_current_principal)):
    """
    The calling official's notifications, newest first.
    """
    return get_notification_service().list_notifications(principal)


@router.patch("/{notification_id}", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    request: NotificationReadRequest,
    principal: Principal = Depends(get_current_principal),
):
    """
    Set the read flag on one of the caller's notifications. Idempotent.
    """
    return get_notification_service().mark_read(principal, notification_id, request.read)
