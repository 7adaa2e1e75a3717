"""
Incident service - business logic for incident reports.
Handles Firestore CRUD operations for incidents.

DESIGN NOTE:
- Validation happens before any write (fail fast, no partial writes)
- Every command consults the authorization policy before touching the store
- Creation is guarded by an optional idempotency key so a client retry
  neither double-creates nor double-notifies
- Reverse geocoding is best-effort; a failed lookup never blocks creation
- Notification fan-out runs last and can never fail the create call
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as gcloud_exceptions

from app.config.firebase import get_db
from app.core.errors import InvalidArgument, NotFound
from app.core.settings import settings
from app.models.incident import (
    Comment,
    Coordinates,
    IncidentListResponse,
    IncidentResponse,
    Location,
    Severity,
    StatusChange,
)
from app.models.user import PersonSnapshot, Principal
from app.services.authorization import Action, require
from app.services.geocoding.resolver import ADDRESS_UNAVAILABLE, resolve_address
from app.services.notification_service import NotificationService, get_notification_service
from app.services.photo_storage.base import PhotoUpload, validate_photo
from app.services.photo_storage.resolver import get_photo_storage
from app.services.status_workflow import StatusWorkflowEngine
from app.utils.firestore_helpers import snapshot_to_dict, to_datetime

logger = logging.getLogger(__name__)

_IDEMPOTENCY_NAMESPACE = uuid.UUID("6f1c1f0e-3b7a-4d55-9c1e-2a7d3c9b8e41")
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def incident_from_dict(data: Dict) -> IncidentResponse:
    """
    Convert a stored incident document into the response model.
    Tolerates partially-populated legacy documents.
    """
    location = data.get("location") or {}
    coordinates = location.get("coordinates")
    reporter = data.get("reported_by") or {}
    created_at = to_datetime(data.get("created_at")) or _EPOCH
    updated_by = data.get("updated_by")

    return IncidentResponse(
        id=data["id"],
        title=str(data.get("title") or ""),
        location=Location(
            address=str(location.get("address") or ""),
            coordinates=Coordinates(**coordinates) if coordinates else None,
        ),
        type=str(data.get("type") or ""),
        severity=str(data.get("severity") or ""),
        status=str(data.get("status") or StatusWorkflowEngine.INITIAL_STATUS.value),
        description=str(data.get("description") or ""),
        photo_url=data.get("photo_url"),
        reported_by=PersonSnapshot(
            id=reporter.get("id"),
            name=reporter.get("name") or "",
            email=reporter.get("email") or "",
        ),
        comments=[Comment(**c) for c in data.get("comments") or []],
        created_at=created_at,
        updated_at=to_datetime(data.get("updated_at")) or created_at,
        updated_by=StatusChange(**updated_by) if updated_by else None,
        status_history=data.get("status_history") or [],
    )


class IncidentService:
    """Incident commands and queries."""

    COLLECTION = "incidents"

    def __init__(
        self,
        db=None,
        notification_service: Optional[NotificationService] = None,
        workflow: Optional[StatusWorkflowEngine] = None,
    ):
        self.db = db if db is not None else get_db()
        self.notification_service = notification_service or get_notification_service()
        self.workflow = workflow or StatusWorkflowEngine()
        self.timeout = settings.FIRESTORE_TIMEOUT_SECONDS

    @property
    def collection(self):
        return self.db.collection(self.COLLECTION)

    @staticmethod
    def idempotent_id(principal: Principal, idempotency_key: str) -> str:
        """Same principal + same key -> same document id."""
        return uuid.uuid5(_IDEMPOTENCY_NAMESPACE, f"{principal.id}:{idempotency_key}").hex[:20]

    def _load(self, incident_id: str) -> Dict:
        if not incident_id or not incident_id.strip():
            raise InvalidArgument("Incident ID is required")
        doc = self.collection.document(incident_id).get(timeout=self.timeout)
        if not doc.exists:
            raise NotFound("Incident not found")
        return snapshot_to_dict(doc)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_incident(
        self,
        principal: Principal,
        title: Optional[str],
        address: Optional[str],
        incident_type: Optional[str],
        severity: Optional[str],
        description: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        photo: Optional[PhotoUpload] = None,
        idempotency_key: Optional[str] = None,
    ) -> Tuple[IncidentResponse, bool]:
        """
        Create a new incident and notify officials.

        Flow:
        1. Validate input (nothing is written on failure)
        2. Authorize
        3. Return the existing incident on an idempotent retry (no fan-out)
        4. Reverse-geocode when only coordinates were sent (best-effort)
        5. Store the photo
        6. Create the document (fails if the id already exists); a photo
           stored for a create that did not land is deleted again
        7. Fan out notifications (never fails the call)

        Returns:
            (incident, created) - created is False for an idempotent replay
        """
        title = _clean(title)
        address = _clean(address)
        incident_type = _clean(incident_type)
        severity = _clean(severity).lower()

        missing = [
            name for name, value in (("title", title), ("type", incident_type), ("severity", severity))
            if not value
        ]
        if missing:
            raise InvalidArgument(f"Missing required fields: {', '.join(missing)}")
        if severity not in [s.value for s in Severity]:
            raise InvalidArgument(
                f"Invalid severity: {severity!r}. Allowed: {[s.value for s in Severity]}"
            )

        coordinates = None
        if (latitude is None) != (longitude is None):
            raise InvalidArgument("Latitude and longitude must be provided together")
        if latitude is not None:
            if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
                raise InvalidArgument("Coordinates out of range")
            coordinates = {"lat": float(latitude), "lng": float(longitude)}

        if not address and coordinates is None:
            raise InvalidArgument("Location is required")

        if photo is not None:
            validate_photo(photo.data, photo.content_type, settings.MAX_PHOTO_BYTES)

        require(principal, Action.CREATE_INCIDENT)

        if idempotency_key and idempotency_key.strip():
            doc_ref = self.collection.document(self.idempotent_id(principal, idempotency_key.strip()))
            existing = doc_ref.get(timeout=self.timeout)
            if existing.exists:
                logger.info(f"Idempotent replay of incident {existing.id}; skipping create and fan-out")
                return incident_from_dict(snapshot_to_dict(existing)), False
        else:
            doc_ref = self.collection.document()

        if not address:
            address = resolve_address(coordinates["lat"], coordinates["lng"]) or ""
            if not address:
                logger.warning(
                    f"Reverse geocoding unavailable for ({coordinates['lat']}, {coordinates['lng']}); "
                    f"storing placeholder address"
                )
                address = ADDRESS_UNAVAILABLE

        photo_store = None
        photo_url = None
        if photo is not None:
            photo_store = get_photo_storage()
            photo_url = photo_store.store_photo(photo.data, photo.content_type, photo.filename)

        now = datetime.now(timezone.utc)
        initial_status = StatusWorkflowEngine.INITIAL_STATUS.value
        incident = {
            "title": title,
            "location": {"address": address, "coordinates": coordinates},
            "type": incident_type,
            "severity": severity,
            "status": initial_status,
            "description": _clean(description),
            "photo_url": photo_url,
            "reported_by": principal.snapshot().model_dump(),
            "comments": [],
            "created_at": now,
            "updated_at": now,
            "updated_by": None,
            "status_history": [
                StatusWorkflowEngine.create_status_history_entry("", initial_status, "system", now)
            ],
        }

        try:
            doc_ref.create(incident, timeout=self.timeout)
        except gcloud_exceptions.AlreadyExists:
            # Lost a race with a concurrent retry carrying the same key
            logger.info(f"Incident {doc_ref.id} created concurrently; returning existing record")
            if photo_url:
                photo_store.delete_photo(photo_url)
            return incident_from_dict(self._load(doc_ref.id)), False
        except Exception as e:
            logger.error(f"Failed to save incident to Firestore: {e}", exc_info=True)
            if photo_url:
                photo_store.delete_photo(photo_url)
            raise

        incident["id"] = doc_ref.id
        logger.info(f"✅ Incident {doc_ref.id} created by {principal.email} ({incident_type}, {severity})")

        self.notification_service.fan_out(incident)

        return incident_from_dict(incident), True

    def delete_incident(self, principal: Principal, incident_id: str) -> None:
        """
        Delete an incident (owner, official or admin).
        Notifications that reference it are left in place.
        """
        incident = self._load(incident_id)
        require(principal, Action.DELETE_INCIDENT, incident)

        self.collection.document(incident_id).delete(timeout=self.timeout)
        logger.info(f"🗑️ Incident {incident_id} deleted by {principal.email}")

    def update_status(self, principal: Principal, incident_id: str, status: Optional[str]) -> IncidentResponse:
        """
        Set an incident's status (official/admin only).

        The requested value is validated before authorization. Any valid
        status may be written from any state; last write wins.
        """
        new_status = self.workflow.validate(status)
        require(principal, Action.UPDATE_STATUS)

        current = self._load(incident_id)
        now = datetime.now(timezone.utc)
        changed_by = principal.email
        entry = StatusWorkflowEngine.create_status_history_entry(
            from_status=current.get("status", ""),
            to_status=new_status.value,
            changed_by=changed_by,
            timestamp=now,
        )

        doc_ref = self.collection.document(incident_id)
        try:
            doc_ref.update(
                {
                    "status": new_status.value,
                    "updated_at": now,
                    "updated_by": {"email": principal.email, "name": principal.name},
                    "status_history": firestore.ArrayUnion([entry]),
                },
                timeout=self.timeout,
            )
        except gcloud_exceptions.NotFound:
            raise NotFound("Incident not found")

        logger.info(
            f"✅ Incident {incident_id} status {current.get('status')} → {new_status.value} by {changed_by}"
        )
        return incident_from_dict(self._load(incident_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_incident(self, principal: Principal, incident_id: str) -> IncidentResponse:
        require(principal, Action.LIST_INCIDENTS)
        return incident_from_dict(self._load(incident_id))

    def stream_incidents(self, owner_email: Optional[str] = None) -> List[Dict]:
        """
        All incidents (optionally one owner's), newest first.

        Owner emails match case-insensitively, the same way the
        authorization policy decides ownership.
        """
        incidents = [snapshot_to_dict(doc) for doc in self.collection.stream(timeout=self.timeout)]
        if owner_email:
            owner = owner_email.strip().lower()
            incidents = [
                i for i in incidents
                if str((i.get("reported_by") or {}).get("email") or "").strip().lower() == owner
            ]
        # Sorted here rather than with order_by to avoid needing a composite index
        incidents.sort(key=lambda i: to_datetime(i.get("created_at")) or _EPOCH, reverse=True)
        return incidents

    @staticmethod
    def matches_search(incident: Dict, search: str) -> bool:
        """Case-insensitive substring match on title, description or address."""
        needle = search.lower()
        haystacks = (
            incident.get("title"),
            incident.get("description"),
            (incident.get("location") or {}).get("address"),
        )
        return any(needle in str(h).lower() for h in haystacks if h)

    def list_incidents(
        self,
        principal: Principal,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        owner_only: bool = False,
    ) -> IncidentListResponse:
        """
        Search, filter and paginate incidents, newest first.

        page/limit default to 1/DEFAULT_PAGE_SIZE, are clamped to >= 1, and
        limit is capped at MAX_PAGE_SIZE. A page past the end returns no
        incidents but still reports the correct total.
        """
        require(principal, Action.LIST_INCIDENTS)

        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else settings.DEFAULT_PAGE_SIZE
        limit = min(limit, settings.MAX_PAGE_SIZE)

        incidents = self.stream_incidents(owner_email=principal.email if owner_only else None)

        search = _clean(search)
        if search:
            incidents = [i for i in incidents if self.matches_search(i, search)]

        total = len(incidents)
        skip = (page - 1) * limit
        page_items = incidents[skip:skip + limit]

        return IncidentListResponse(
            incidents=[incident_from_dict(i) for i in page_items],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )


# Global service instance
_incident_service = None


def get_incident_service() -> IncidentService:
    """Get or create IncidentService singleton."""
    global _incident_service
    if _incident_service is None:
        _incident_service = IncidentService()
    return _incident_service
