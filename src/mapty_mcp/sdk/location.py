"""
Location provider collaborators.

A provider answers "where is the user right now?" or raises
LocationUnavailable.
"""

import logging
from typing import Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_URL = "https://ipapi.co/json/"


class LocationUnavailable(RuntimeError):
    """The current position could not be obtained."""


class StaticLocationProvider:
    """Provider for coordinates the client already knows (e.g. browser geolocation)."""

    def __init__(self, latitude: float, longitude: float):
        self._coords = (latitude, longitude)

    def get_current_location(self) -> Tuple[float, float]:
        return self._coords


class IpLocationProvider:
    """
    Approximate the user's position from their public IP address.

    Expects a JSON response carrying ``latitude`` and ``longitude``
    (ipapi.co format); ``lat``/``lon`` (ip-api.com format) are accepted too.
    """

    def __init__(self, url: str = DEFAULT_LOCATION_URL, timeout: float = 5.0):
        self._url = url
        self._timeout = timeout
        self._session = requests.Session()

    def get_current_location(self) -> Tuple[float, float]:
        """
        Look up the current position.

        Returns:
            (latitude, longitude)

        Raises:
            LocationUnavailable: On network errors or a response without coordinates
        """
        try:
            response = self._session.get(self._url, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise LocationUnavailable(f"Could not get your position: {e}") from e

        lat = data.get("latitude", data.get("lat"))
        lng = data.get("longitude", data.get("lon"))
        if lat is None or lng is None:
            reason = data.get("reason") or data.get("message") or "no coordinates in response"
            raise LocationUnavailable(f"Could not get your position: {reason}")

        try:
            return float(lat), float(lng)
        except (TypeError, ValueError) as e:
            raise LocationUnavailable(f"Could not get your position: {e}") from e
