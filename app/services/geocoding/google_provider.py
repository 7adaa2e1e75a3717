import logging
from typing import Any, Dict, Optional

from .base import GeocodingProvider

logger = logging.getLogger(__name__)


class GoogleMapsProvider(GeocodingProvider):
    """
    Google Maps Geocoding API.
    Opt-in: GEOCODING_PROVIDER=google plus GOOGLE_MAPS_API_KEY.
    """

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: Optional[str], timeout: Optional[float] = None):
        super().__init__(timeout)
        self.api_key = api_key

    def request_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return {"latlng": f"{latitude},{longitude}", "key": self.api_key}

    def parse_address(self, payload: Dict[str, Any]) -> Optional[str]:
        api_status = payload.get("status", "OK")
        if api_status != "OK":
            # ZERO_RESULTS is normal over water; anything else is worth a look
            log = logger.info if api_status == "ZERO_RESULTS" else logger.warning
            log(f"Google reverse-geocode status {api_status}: {payload.get('error_message', '')}")
            return None

        results = payload.get("results") or []
        return results[0].get("formatted_address") if results else None

    def lookup_address(self, latitude: float, longitude: float) -> Optional[str]:
        if not self.api_key:
            logger.info("GoogleMapsProvider called without API key; skipping lookup")
            return None
        return super().lookup_address(latitude, longitude)
