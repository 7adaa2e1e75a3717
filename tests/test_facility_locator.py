"""
Tests for the keyword-based facility locator.
"""

import pytest

from app.core.errors import InvalidArgument
from app.services.facility_locator import (
    HOSPITALS,
    MEDICAL_CAMPS,
    OFFICIALS,
    UNKNOWN_AREA,
    find_area,
    lookup_facilities,
)


class TestFindArea:

    @pytest.mark.parametrize("location,area", [
        ("123 Main Street, City Center", "city center"),
        ("  CENTRAL station ", "city center"),
        ("Downtown Plaza", "downtown"),
        ("Business District", "downtown"),
        ("Lake View Apartments", "suburb"),
        ("Residential Block 9", "suburb"),
        ("7 Random Alley", UNKNOWN_AREA),
    ])
    def test_classification(self, location, area):
        assert find_area(location) == area

    def test_first_area_in_order_wins(self):
        # "park road" (downtown) is checked before "park" (suburb)
        assert find_area("Park Road") == "downtown"
        # "city" (city center) is checked before "suburb"
        assert find_area("City Suburb") == "city center"


class TestLookupFacilities:

    def test_filters_to_matched_area(self):
        result = lookup_facilities("Main Street")

        assert result.area == "city center"
        assert [h.name for h in result.hospitals] == ["City General Hospital"]
        assert [o.name for o in result.officials] == ["Dr. Sarah Johnson"]
        assert [c.name for c in result.medical_camps] == ["Central Emergency Camp"]

    def test_annotations(self):
        result = lookup_facilities("Lake View")

        assert all(h.estimated_distance == "< 5 km" for h in result.hospitals)
        assert all(c.estimated_distance == "< 3 km" for c in result.medical_camps)
        assert all(o.response_time == "10-15 minutes" for o in result.officials)

    def test_unknown_area_returns_everything(self):
        result = lookup_facilities("7 Random Alley")

        assert result.area == UNKNOWN_AREA
        assert len(result.hospitals) == len(HOSPITALS)
        assert len(result.officials) == len(OFFICIALS)
        assert len(result.medical_camps) == len(MEDICAL_CAMPS)

    def test_deterministic(self):
        assert lookup_facilities("Park Road") == lookup_facilities("Park Road")

    @pytest.mark.parametrize("location", ["", "   ", None])
    def test_blank_location_rejected(self, location):
        with pytest.raises(InvalidArgument):
            lookup_facilities(location)
