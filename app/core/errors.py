"""
Error taxonomy for the incident core.

Every error carries a stable machine-readable ``kind`` and a human-readable
message. Routes do not translate these by hand; ``app.main`` registers a
single exception handler that renders them as ``{"kind", "detail"}``.
"""

from fastapi import status


class IncidentDeskError(Exception):
    """Base class for all domain errors raised by services."""

    kind: str = "internal"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.message}


class Unauthenticated(IncidentDeskError):
    """No principal accompanies the request."""
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(IncidentDeskError):
    """Principal lacks permission for the action/resource."""
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(IncidentDeskError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgument(IncidentDeskError):
    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(IncidentDeskError):
    # Reserved for optimistic locking; nothing raises it yet.
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class DependencyError(IncidentDeskError):
    """
    An external collaborator (geocoder, photo store, notification batch write)
    failed. Absorbed where the core operation can still succeed.
    """
    kind = "dependency"
    status_code = status.HTTP_502_BAD_GATEWAY
