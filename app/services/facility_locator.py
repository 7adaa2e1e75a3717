"""
Facility Locator - nearby help for an incident location.

Coarse keyword classification, not geodesic distance:
1. normalize the location text (lowercase, trim)
2. first area (in AREA_KEYWORDS order) with a keyword contained in the text wins
3. no match -> "unknown" -> every facility is returned (fail-open)
4. otherwise each catalog is filtered to the matched area
5. results are annotated with fixed distance / response-time placeholders

CRITICAL: This is a deterministic function - same input always produces
same output. Catalog data is static reference data, not live geodata.
"""

import logging
from typing import Dict, List, Tuple

from app.core.errors import InvalidArgument
from app.models.facility import FacilityLookupResponse, FacilityOfficial, Hospital, MedicalCamp

logger = logging.getLogger(__name__)

UNKNOWN_AREA = "unknown"

HOSPITAL_DISTANCE = "< 5 km"
MEDICAL_CAMP_DISTANCE = "< 3 km"
OFFICIAL_RESPONSE_TIME = "10-15 minutes"

# Checked in this order; the first area with any matching keyword wins.
AREA_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("city center", ["central", "city", "main street", "center"]),
    ("downtown", ["downtown", "park road", "business"]),
    ("suburb", ["suburb", "lake view", "residential", "park"]),
]

HOSPITALS: List[Dict] = [
    {
        "id": "1",
        "name": "City General Hospital",
        "type": "Government",
        "contact": "1234567890",
        "location": "Main Street, City Center",
        "area": "City Center",
        "emergency_services": True,
        "ambulance_number": "102",
    },
    {
        "id": "2",
        "name": "St. Johns Medical Center",
        "type": "Private",
        "contact": "9876543210",
        "location": "Park Road, Downtown",
        "area": "Downtown",
        "emergency_services": True,
        "ambulance_number": "104",
    },
    {
        "id": "3",
        "name": "Metro Hospital",
        "type": "Private",
        "contact": "5555666677",
        "location": "Lake View Road, Suburb",
        "area": "Suburb",
        "emergency_services": True,
        "ambulance_number": "105",
    },
]

OFFICIALS: List[Dict] = [
    {
        "id": "1",
        "name": "Dr. Sarah Johnson",
        "designation": "Chief Medical Officer",
        "contact": "5555555555",
        "jurisdiction": "City Central",
        "area": "City Center",
    },
    {
        "id": "2",
        "name": "Mr. Robert Smith",
        "designation": "Emergency Response Director",
        "contact": "6666666666",
        "jurisdiction": "Metropolitan Area",
        "area": "Downtown",
    },
    {
        "id": "3",
        "name": "Ms. Emily Brown",
        "designation": "Public Health Director",
        "contact": "7777888899",
        "jurisdiction": "Suburban District",
        "area": "Suburb",
    },
]

MEDICAL_CAMPS: List[Dict] = [
    {
        "id": "1",
        "name": "Central Emergency Camp",
        "location": "City Stadium",
        "area": "City Center",
        "capacity": 200,
        "services": ["First Aid", "Emergency Care", "Vaccination"],
        "contact": "7777777777",
    },
    {
        "id": "2",
        "name": "Downtown Medical Unit",
        "location": "Community Center",
        "area": "Downtown",
        "capacity": 150,
        "services": ["Basic Medical Care", "Testing", "Pharmacy"],
        "contact": "8888888888",
    },
    {
        "id": "3",
        "name": "Suburban Relief Camp",
        "location": "Public Park",
        "area": "Suburb",
        "capacity": 100,
        "services": ["First Aid", "Basic Care"],
        "contact": "9999900000",
    },
]


def normalize_location(location: str) -> str:
    return (location or "").lower().strip()


def find_area(location: str) -> str:
    """
    Classify free-text location into a coarse area, or UNKNOWN_AREA.

    Examples:
    - "123 Main Street, City Center" → "city center"
    - "Park Road" → "downtown" (downtown is checked before suburb's "park")
    - "7 Random Alley" → "unknown"
    """
    normalized = normalize_location(location)
    for area, keywords in AREA_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return area
    return UNKNOWN_AREA


def _in_area(entries: List[Dict], area: str) -> List[Dict]:
    if area == UNKNOWN_AREA:
        return list(entries)
    return [entry for entry in entries if normalize_location(entry["area"]) == area]


def lookup_facilities(location: str) -> FacilityLookupResponse:
    """
    Hospitals, officials and medical camps for a location text.

    Raises:
        InvalidArgument: blank location
    """
    if not location or not location.strip():
        raise InvalidArgument("Location is required")

    area = find_area(location)
    if area == UNKNOWN_AREA:
        logger.info(f"No area matched for location {location!r}; returning all facilities")

    return FacilityLookupResponse(
        area=area,
        hospitals=[
            Hospital(**h, estimated_distance=HOSPITAL_DISTANCE) for h in _in_area(HOSPITALS, area)
        ],
        officials=[
            FacilityOfficial(**o, response_time=OFFICIAL_RESPONSE_TIME) for o in _in_area(OFFICIALS, area)
        ],
        medical_camps=[
            MedicalCamp(**c, estimated_distance=MEDICAL_CAMP_DISTANCE) for c in _in_area(MEDICAL_CAMPS, area)
        ],
    )
