"""Tests for sdk/location.py — static and IP-based location providers."""

from unittest.mock import Mock, patch

import pytest
import requests

from mapty_mcp.sdk.location import (
    IpLocationProvider,
    LocationUnavailable,
    StaticLocationProvider,
)


def _response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


class TestStaticLocationProvider:
    def test_returns_coords(self):
        assert StaticLocationProvider(48.85, 2.35).get_current_location() == (48.85, 2.35)


class TestIpLocationProvider:
    def test_ipapi_format(self):
        provider = IpLocationProvider(url="https://geo.test/json/", timeout=2)
        with patch.object(provider._session, "get") as mock_get:
            mock_get.return_value = _response({"latitude": 48.85, "longitude": 2.35})
            assert provider.get_current_location() == (48.85, 2.35)
            mock_get.assert_called_once_with("https://geo.test/json/", timeout=2)

    def test_ip_api_format(self):
        provider = IpLocationProvider()
        with patch.object(provider._session, "get") as mock_get:
            mock_get.return_value = _response({"lat": "40.4", "lon": "-3.7"})
            assert provider.get_current_location() == (40.4, -3.7)

    def test_network_error(self):
        provider = IpLocationProvider()
        with patch.object(provider._session, "get") as mock_get:
            mock_get.side_effect = requests.ConnectionError("offline")
            with pytest.raises(LocationUnavailable, match="Could not get your position"):
                provider.get_current_location()

    def test_http_error(self):
        provider = IpLocationProvider()
        with patch.object(provider._session, "get") as mock_get:
            response = _response({})
            response.raise_for_status.side_effect = requests.HTTPError("429")
            mock_get.return_value = response
            with pytest.raises(LocationUnavailable):
                provider.get_current_location()

    def test_missing_coordinates(self):
        provider = IpLocationProvider()
        with patch.object(provider._session, "get") as mock_get:
            mock_get.return_value = _response({"error": True, "reason": "RateLimited"})
            with pytest.raises(LocationUnavailable, match="RateLimited"):
                provider.get_current_location()

    def test_invalid_json(self):
        provider = IpLocationProvider()
        with patch.object(provider._session, "get") as mock_get:
            response = _response(None)
            response.json.side_effect = ValueError("no json")
            mock_get.return_value = response
            with pytest.raises(LocationUnavailable):
                provider.get_current_location()

    def test_is_runtime_error(self):
        assert issubclass(LocationUnavailable, RuntimeError)
