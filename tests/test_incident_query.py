"""
Tests for listing, searching and paginating incidents.
"""

import pytest

from app.core.errors import NotFound


@pytest.fixture
def fifteen_incidents(seed_incident):
    return [seed_incident(f"inc-{i:02d}", minutes=i) for i in range(15)]


class TestPagination:

    def test_defaults(self, alice, incidents, fifteen_incidents):
        result = incidents.list_incidents(alice)
        assert (result.page, result.limit, result.total, result.total_pages) == (1, 10, 15, 2)
        assert len(result.incidents) == 10

    def test_second_page_holds_the_remainder(self, alice, incidents, fifteen_incidents):
        result = incidents.list_incidents(alice, page=2, limit=10)
        assert len(result.incidents) == 5
        assert result.total == 15
        assert result.total_pages == 2

    def test_newest_first(self, alice, incidents, fifteen_incidents):
        result = incidents.list_incidents(alice, limit=3)
        assert [i.id for i in result.incidents] == ["inc-14", "inc-13", "inc-12"]

    def test_page_past_end_is_empty_but_total_correct(self, alice, incidents, fifteen_incidents):
        result = incidents.list_incidents(alice, page=5, limit=10)
        assert result.incidents == []
        assert result.total == 15

    @pytest.mark.parametrize("page,limit", [(0, 0), (-3, -1), (None, None)])
    def test_non_positive_values_fall_back_to_defaults(self, alice, incidents, fifteen_incidents, page, limit):
        result = incidents.list_incidents(alice, page=page, limit=limit)
        assert (result.page, result.limit) == (1, 10)

    def test_limit_capped(self, alice, incidents, fifteen_incidents):
        result = incidents.list_incidents(alice, limit=5000)
        assert result.limit == 100
        assert len(result.incidents) == 15
        assert result.total_pages == 1

    def test_empty_store(self, alice, incidents):
        result = incidents.list_incidents(alice)
        assert result.incidents == []
        assert result.total == 0
        assert result.total_pages == 0


class TestSearch:

    def test_search_round_trip_on_title(self, alice, incidents, make_incident):
        created = make_incident(alice, title="Overhead wire down near depot")
        make_incident(alice, title="Bus late")

        result = incidents.list_incidents(alice, search="WIRE DOWN")

        assert [i.id for i in result.incidents] == [created.id]
        assert result.total == 1

    def test_search_matches_description_and_address(self, alice, incidents, seed_incident):
        seed_incident("by-description", description="Escalator stuck at platform 3")
        seed_incident("by-address", location={"address": "Harbour Ferry Terminal", "coordinates": None})
        seed_incident("unrelated")

        assert [i.id for i in incidents.list_incidents(alice, search="escalator").incidents] == ["by-description"]
        assert [i.id for i in incidents.list_incidents(alice, search="ferry").incidents] == ["by-address"]

    def test_search_does_not_match_type_or_reporter(self, alice, incidents, seed_incident):
        seed_incident("one", type="Flooding")
        assert incidents.list_incidents(alice, search="flooding").total == 0
        assert incidents.list_incidents(alice, search="alice").total == 0

    def test_blank_search_ignored(self, alice, incidents, fifteen_incidents):
        assert incidents.list_incidents(alice, search="   ").total == 15

    def test_pagination_applies_after_search(self, alice, incidents, seed_incident):
        for i in range(12):
            seed_incident(f"tram-{i}", minutes=i, title=f"Tram delay {i}")
        seed_incident("bus", minutes=99, title="Bus delay")

        result = incidents.list_incidents(alice, search="tram", page=2, limit=10)

        assert result.total == 12
        assert [i.id for i in result.incidents] == ["tram-1", "tram-0"]


class TestOwnerFilter:

    def test_owner_only(self, alice, bob, incidents, seed_incident):
        seed_incident("mine", owner="u-alice")
        seed_incident("theirs", owner="u-bob")

        result = incidents.list_incidents(alice, owner_only=True)

        assert [i.id for i in result.incidents] == ["mine"]
        assert incidents.list_incidents(bob).total == 2

    def test_owner_email_matches_case_insensitively(self, alice, incidents, seed_incident):
        seed_incident(
            "mixed-case",
            reported_by={"id": "u-alice", "name": "Alice Public", "email": " ALICE@Example.com"},
        )
        seed_incident("theirs", owner="u-bob")

        result = incidents.list_incidents(alice, owner_only=True)

        assert [i.id for i in result.incidents] == ["mixed-case"]
        # Same rule the delete authorization uses for ownership
        incidents.delete_incident(alice, "mixed-case")


class TestGetIncident:

    def test_get_existing(self, alice, incidents, seed_incident):
        seed_incident("inc-1", title="Platform flooding")
        assert incidents.get_incident(alice, "inc-1").title == "Platform flooding"

    def test_get_missing(self, alice, incidents):
        with pytest.raises(NotFound):
            incidents.get_incident(alice, "missing")
