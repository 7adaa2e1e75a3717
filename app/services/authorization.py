"""
Authorization Policy - the single place role checks live.

DESIGN PRINCIPLES:
- decide() is pure: (principal, action, resource) -> Decision, no I/O
- Routes and services never compare user_type inline; they call require()
- A denial always raises; nothing partially applies
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from app.core.errors import Forbidden, Unauthenticated
from app.models.user import Principal, UserType


class Action(str, Enum):
    CREATE_INCIDENT = "create_incident"
    LIST_INCIDENTS = "list_incidents"
    DELETE_INCIDENT = "delete_incident"
    UPDATE_STATUS = "update_status"
    ADD_COMMENT = "add_comment"
    LIST_COMMENTS = "list_comments"
    LIST_NOTIFICATIONS = "list_notifications"
    UPDATE_NOTIFICATION = "update_notification"
    LOOKUP_FACILITIES = "lookup_facilities"
    VIEW_ANALYTICS = "view_analytics"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)

TRIAGE_ROLES = frozenset({UserType.OFFICIAL, UserType.ADMIN})

# Actions any authenticated principal may perform
_OPEN_ACTIONS = frozenset({
    Action.CREATE_INCIDENT,
    Action.LIST_INCIDENTS,
    Action.ADD_COMMENT,
    Action.LIST_COMMENTS,
    Action.LOOKUP_FACILITIES,
})


def _field(resource: Any, *path: str) -> Optional[Any]:
    """Read a nested field from a dict or a pydantic model."""
    current = resource
    for key in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
    return current


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def decide(principal: Optional[Principal], action: Action, resource: Any = None) -> Decision:
    """
    Map (principal, action, resource) to allow/deny.

    Resource shapes: an incident (needs reported_by.email) for DELETE_INCIDENT,
    a notification (needs recipient_email) for UPDATE_NOTIFICATION.
    """
    if principal is None:
        return Decision(False, "Not authenticated")

    if action in _OPEN_ACTIONS:
        return ALLOW

    if action == Action.DELETE_INCIDENT:
        if principal.user_type in TRIAGE_ROLES:
            return ALLOW
        if _same_email(principal.email, _field(resource, "reported_by", "email")):
            return ALLOW
        return Decision(False, "Not authorized to delete this incident")

    if action == Action.UPDATE_STATUS:
        if principal.user_type in TRIAGE_ROLES:
            return ALLOW
        return Decision(False, "Not authorized to update incident status")

    if action in (Action.LIST_NOTIFICATIONS, Action.VIEW_ANALYTICS):
        if principal.user_type == UserType.OFFICIAL:
            return ALLOW
        return Decision(False, "Only officials may access this resource")

    if action == Action.UPDATE_NOTIFICATION:
        if principal.user_type != UserType.OFFICIAL:
            return Decision(False, "Only officials may access this resource")
        if resource is not None and not _same_email(principal.email, _field(resource, "recipient_email")):
            return Decision(False, "Notification belongs to another recipient")
        return ALLOW

    return Decision(False, f"Unknown action: {action}")


def require(principal: Optional[Principal], action: Action, resource: Any = None) -> Principal:
    """Raise on deny; return the principal on allow."""
    if principal is None:
        raise Unauthenticated("Not authenticated")
    decision = decide(principal, action, resource)
    if not decision:
        raise Forbidden(decision.reason)
    return principal
