import logging
from typing import Any, Dict, Optional

from app.core.settings import settings
from .base import GeocodingProvider, join_parts

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim. No API key; the usage policy requires an
    identifying User-Agent on every request.
    """

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(self, user_agent: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.user_agent = user_agent or settings.GEOCODING_USER_AGENT

    def request_headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent}

    def request_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return {
            "lat": f"{latitude:.6f}",
            "lon": f"{longitude:.6f}",
            "format": "jsonv2",
            "addressdetails": 1,
        }

    def parse_address(self, payload: Dict[str, Any]) -> Optional[str]:
        if payload.get("error"):
            logger.info(f"Nominatim has no address here: {payload['error']}")
            return None
        if payload.get("display_name"):
            return payload["display_name"]

        # Sparse areas sometimes come back without display_name
        address = payload.get("address") or {}
        return join_parts(
            address.get("road"),
            address.get("suburb") or address.get("neighbourhood"),
            address.get("city") or address.get("town") or address.get("village"),
        )
