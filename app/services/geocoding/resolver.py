import logging
from typing import Optional

from app.core.settings import settings
from .base import GeocodingProvider
from .nominatim_provider import NominatimProvider
from .google_provider import GoogleMapsProvider

logger = logging.getLogger(__name__)

# Stored in place of an address when coordinates could not be resolved
ADDRESS_UNAVAILABLE = "Address unavailable"

_provider_instance: Optional[GeocodingProvider] = None


def get_geocoding_provider() -> GeocodingProvider:
    """
    Nominatim unless GEOCODING_PROVIDER=google and a Google key is configured.
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    wants_google = (settings.GEOCODING_PROVIDER or "").lower() == "google"
    if wants_google and settings.GOOGLE_MAPS_API_KEY:
        _provider_instance = GoogleMapsProvider(api_key=settings.GOOGLE_MAPS_API_KEY)
    else:
        if wants_google:
            logger.warning("GEOCODING_PROVIDER=google but GOOGLE_MAPS_API_KEY is unset; using Nominatim")
        _provider_instance = NominatimProvider()

    logger.info(f"Geocoding provider: {_provider_instance.name}")
    return _provider_instance


def resolve_address(latitude: float, longitude: float) -> Optional[str]:
    """
    Best-effort coordinates -> address line, or None. Never raises.
    """
    try:
        return get_geocoding_provider().lookup_address(latitude, longitude)
    except Exception as e:
        logger.warning(f"Reverse geocoding raised unexpectedly: {e}", exc_info=True)
        return None
