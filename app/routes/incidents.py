"""
Incident endpoints - report, browse, triage and discuss incidents.

Authorization and validation are service-level decisions; domain errors
propagate to the app-wide handler which renders {"kind", "detail"}.
"""

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Header, Query, Response, UploadFile, status

from app.core.errors import IncidentDeskError
from app.models.base import BaseResponse
from app.models.facility import FacilityLookupResponse
from app.models.incident import (
    Comment,
    CommentCreate,
    IncidentListResponse,
    IncidentResponse,
    StatusUpdateRequest,
)
from app.models.user import Principal
from app.services.authorization import Action, require
from app.services.comment_service import get_comment_service
from app.services.facility_locator import lookup_facilities
from app.services.incident_service import get_incident_service
from app.services.photo_storage.base import PhotoUpload
from app.utils.security import get_current_principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/incidents", tags=["Incidents"])


@router.post("", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
async def create_incident(
    response: Response,
    title: Optional[str] = Form(None),
    location: Optional[str] = Form(None, description="Address text"),
    formatted_address: Optional[str] = Form(None, description="Geocoded address chosen on the client; overrides location"),
    type: Optional[str] = Form(None, description="Incident category"),
    severity: Optional[str] = Form(None, description="low | medium | high | critical"),
    description: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    photo: Optional[UploadFile] = File(None),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    principal: Principal = Depends(get_current_principal),
):
    """
    Report a new incident (multipart form).

    This endpoint:
    1. Validates the form fields and optional photo
    2. Stores the incident in Firestore
    3. Notifies every official (best-effort)

    A retry carrying the same Idempotency-Key returns the original incident
    with 200 instead of creating a second one.
    """
    logger.info(f"📝 POST /incidents - {principal.email}: type={type}, severity={severity}")

    upload = None
    if photo is not None and photo.filename:
        upload = PhotoUpload(
            data=await photo.read(),
            content_type=photo.content_type or "",
            filename=photo.filename,
        )

    try:
        incident, created = get_incident_service().create_incident(
            principal,
            title=title,
            address=formatted_address or location,
            incident_type=type,
            severity=severity,
            description=description,
            latitude=latitude,
            longitude=longitude,
            photo=upload,
            idempotency_key=idempotency_key,
        )
    except IncidentDeskError:
        raise
    except Exception as e:
        logger.error(f"❌ POST /incidents - Incident creation failed: {str(e)}", exc_info=True)
        # Base domain error: rendered by the app handler as kind "internal", 500
        raise IncidentDeskError(f"Incident creation failed: {str(e)}")

    if not created:
        response.status_code = status.HTTP_200_OK
    return incident


@router.get("", response_model=IncidentListResponse)
async def list_incidents(
    page: Optional[int] = Query(None, description="1-based page number (default 1)"),
    limit: Optional[int] = Query(None, description="Page size (default 10, max 100)"),
    search: Optional[str] = Query(None, description="Matches title, description or address"),
    owner_only: bool = Query(False, description="Only incidents reported by the caller"),
    principal: Principal = Depends(get_current_principal),
):
    """
    Paginated incidents, newest first.
    """
    return get_incident_service().list_incidents(
        principal, page=page, limit=limit, search=search, owner_only=owner_only
    )


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(incident_id: str, principal: Principal = Depends(get_current_principal)):
    return get_incident_service().get_incident(principal, incident_id)


@router.delete("/{incident_id}", response_model=BaseResponse)
async def delete_incident(incident_id: str, principal: Principal = Depends(get_current_principal)):
    """
    Delete an incident. Allowed for its reporter and for officials/admins.
    """
    get_incident_service().delete_incident(principal, incident_id)
    return BaseResponse(message="Incident deleted successfully")


@router.patch("/{incident_id}/status", response_model=IncidentResponse)
async def update_incident_status(
    incident_id: str,
    request: StatusUpdateRequest,
    principal: Principal = Depends(get_current_principal),
):
    """
    Set incident status (officials and admins only).
    """
    return get_incident_service().update_status(principal, incident_id, request.status)


@router.post("/{incident_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    incident_id: str,
    comment: CommentCreate,
    principal: Principal = Depends(get_current_principal),
):
    """
    Append a comment to the incident's thread.
    """
    return get_comment_service().add_comment(principal, incident_id, comment.content)


@router.get("/{incident_id}/comments", response_model=List[Comment])
async def get_comments(incident_id: str, principal: Principal = Depends(get_current_principal)):
    """
    Full comment thread in the order comments were added.
    """
    return get_comment_service().get_comments(principal, incident_id)


@router.get("/{incident_id}/facilities", response_model=FacilityLookupResponse)
async def get_incident_facilities(incident_id: str, principal: Principal = Depends(get_current_principal)):
    """
    Nearby hospitals, officials and medical camps for the incident's address.
    """
    require(principal, Action.LOOKUP_FACILITIES)
    incident = get_incident_service().get_incident(principal, incident_id)
    return lookup_facilities(incident.location.address)
