"""
Tests for the authorization policy.

decide() is pure, so these tests never touch the database.
"""

import pytest

from app.core.errors import Forbidden, Unauthenticated
from app.models.user import Principal, UserType
from app.services.authorization import Action, decide, require


def make_principal(user_type: UserType, email: str = "someone@example.com") -> Principal:
    return Principal(id="p1", email=email, name="Someone", user_type=user_type)


PUBLIC = make_principal(UserType.PUBLIC, "alice@example.com")
OFFICIAL = make_principal(UserType.OFFICIAL, "olga@transit.gov")
ADMIN = make_principal(UserType.ADMIN, "ada@transit.gov")


class TestOpenActions:

    @pytest.mark.parametrize("action", [
        Action.CREATE_INCIDENT,
        Action.LIST_INCIDENTS,
        Action.ADD_COMMENT,
        Action.LIST_COMMENTS,
        Action.LOOKUP_FACILITIES,
    ])
    @pytest.mark.parametrize("principal", [PUBLIC, OFFICIAL, ADMIN])
    def test_any_authenticated_principal_is_allowed(self, principal, action):
        assert decide(principal, action).allowed is True

    def test_missing_principal_is_denied(self):
        decision = decide(None, Action.LIST_INCIDENTS)
        assert not decision
        assert decision.reason == "Not authenticated"


class TestDeleteIncident:

    def test_owner_may_delete(self):
        incident = {"reported_by": {"email": "alice@example.com"}}
        assert decide(PUBLIC, Action.DELETE_INCIDENT, incident)

    def test_owner_email_compared_case_insensitively(self):
        incident = {"reported_by": {"email": "  ALICE@Example.com "}}
        assert decide(PUBLIC, Action.DELETE_INCIDENT, incident)

    def test_other_public_user_may_not_delete(self):
        incident = {"reported_by": {"email": "bob@example.com"}}
        assert not decide(PUBLIC, Action.DELETE_INCIDENT, incident)

    @pytest.mark.parametrize("principal", [OFFICIAL, ADMIN])
    def test_triage_roles_may_delete_anything(self, principal):
        incident = {"reported_by": {"email": "bob@example.com"}}
        assert decide(principal, Action.DELETE_INCIDENT, incident)

    def test_incident_without_reporter_only_deletable_by_triage(self):
        assert not decide(PUBLIC, Action.DELETE_INCIDENT, {})
        assert decide(OFFICIAL, Action.DELETE_INCIDENT, {})


class TestStatusUpdate:

    def test_public_denied(self):
        assert not decide(PUBLIC, Action.UPDATE_STATUS)

    @pytest.mark.parametrize("principal", [OFFICIAL, ADMIN])
    def test_official_and_admin_allowed(self, principal):
        assert decide(principal, Action.UPDATE_STATUS)


class TestOfficialOnly:

    @pytest.mark.parametrize("action", [Action.LIST_NOTIFICATIONS, Action.VIEW_ANALYTICS])
    def test_only_officials(self, action):
        assert decide(OFFICIAL, action)
        assert not decide(PUBLIC, action)
        assert not decide(ADMIN, action)

    def test_update_own_notification(self):
        assert decide(OFFICIAL, Action.UPDATE_NOTIFICATION, {"recipient_email": "OLGA@transit.gov"})

    def test_update_someone_elses_notification_denied(self):
        decision = decide(OFFICIAL, Action.UPDATE_NOTIFICATION, {"recipient_email": "omar@transit.gov"})
        assert not decision
        assert "another recipient" in decision.reason

    def test_public_cannot_update_notifications(self):
        assert not decide(PUBLIC, Action.UPDATE_NOTIFICATION, {"recipient_email": "alice@example.com"})


class TestRequire:

    def test_returns_principal_on_allow(self):
        assert require(OFFICIAL, Action.UPDATE_STATUS) is OFFICIAL

    def test_raises_forbidden_on_deny(self):
        with pytest.raises(Forbidden):
            require(PUBLIC, Action.UPDATE_STATUS)

    def test_raises_unauthenticated_without_principal(self):
        with pytest.raises(Unauthenticated):
            require(None, Action.CREATE_INCIDENT)


class TestUserType:

    @pytest.mark.parametrize("raw", [None, "", "user", "superuser"])
    def test_unknown_roles_are_public(self, raw):
        assert UserType.parse(raw) == UserType.PUBLIC

    def test_parse_is_case_insensitive(self):
        assert UserType.parse(" Official ") == UserType.OFFICIAL
