"""
Reverse geocoding for incidents reported with GPS coordinates only.

A provider turns (lat, lng) into one address line. lookup_address() returns
the text or None and never raises, so a slow or failing geocoder can never
block incident creation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from app.core.settings import settings

logger = logging.getLogger(__name__)


class GeocodingProvider(ABC):
    """
    Subclasses describe the request and how to read the response;
    the HTTP call, timeout and failure handling live here.
    """

    name = "base"
    BASE_URL = ""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else settings.GEOCODING_TIMEOUT_SECONDS

    @abstractmethod
    def request_params(self, latitude: float, longitude: float) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def parse_address(self, payload: Dict[str, Any]) -> Optional[str]:
        raise NotImplementedError

    def request_headers(self) -> Dict[str, str]:
        return {}

    def lookup_address(self, latitude: float, longitude: float) -> Optional[str]:
        try:
            resp = requests.get(
                self.BASE_URL,
                params=self.request_params(latitude, longitude),
                headers=self.request_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{self.name} reverse-geocode request failed: {e}")
            return None

        if resp.status_code != 200:
            logger.warning(f"{self.name} reverse-geocode returned HTTP {resp.status_code}")
            return None

        try:
            address = self.parse_address(resp.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"{self.name} reverse-geocode response unreadable: {e}")
            return None

        if address and address.strip():
            return address.strip()
        return None


def join_parts(*parts: Optional[str]) -> Optional[str]:
    """Join the non-blank parts with ", "; None when nothing is left."""
    cleaned = [p.strip() for p in parts if p and p.strip()]
    return ", ".join(cleaned) or None
