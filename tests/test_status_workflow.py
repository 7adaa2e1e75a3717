"""
Tests for status validation and the status-history audit entries.
"""

from datetime import datetime, timezone

import pytest

from app.core.errors import InvalidArgument
from app.models.incident import IncidentStatus
from app.services.status_workflow import StatusWorkflowEngine


class TestValidate:

    @pytest.mark.parametrize("status", ["pending", "in_progress", "resolved"])
    def test_canonical_statuses_accepted(self, status):
        assert StatusWorkflowEngine(allow_rejected=False).validate(status) == IncidentStatus(status)

    @pytest.mark.parametrize("status", [None, "", "closed", "RESOLVED", "in progress"])
    def test_invalid_statuses_rejected(self, status):
        with pytest.raises(InvalidArgument):
            StatusWorkflowEngine(allow_rejected=False).validate(status)

    def test_rejected_disabled_by_default(self):
        engine = StatusWorkflowEngine()
        assert "rejected" not in engine.valid_statuses()
        with pytest.raises(InvalidArgument):
            engine.validate("rejected")

    def test_rejected_allowed_when_enabled(self):
        engine = StatusWorkflowEngine(allow_rejected=True)
        assert engine.validate("rejected") == IncidentStatus.REJECTED

    def test_error_lists_allowed_values(self):
        with pytest.raises(InvalidArgument) as exc_info:
            StatusWorkflowEngine(allow_rejected=False).validate("closed")
        assert "in_progress" in exc_info.value.message


class TestHistoryEntry:

    def test_entry_shape(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        entry = StatusWorkflowEngine.create_status_history_entry("pending", "resolved", "olga@transit.gov", ts)
        assert entry == {
            "from": "pending",
            "to": "resolved",
            "changed_by": "olga@transit.gov",
            "timestamp": ts,
        }
