"""
Shared utility functions for the map workout log.

Form parsing and formatting helpers used across modules.
"""

import json
import math


def parse_form_number(raw) -> float:
    """Read a form field the way a browser number input coerces it.

    Blank input reads as 0, anything unparseable as NaN, so both fail a
    positivity check downstream.

    Args:
        raw: Field value (usually a string; numbers pass through)

    Returns:
        The parsed float, 0.0 or NaN
    """
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


def format_number(value: float) -> str:
    """Format a number without a trailing ".0" for integral values.

    Args:
        value: Number to format

    Returns:
        Formatted string like "5", "5.5" or "-12"
    """
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_coords(coords) -> str:
    """Format a (lat, lng) pair as "48.8500, 2.3500"."""
    lat, lng = coords
    return f"{lat:.4f}, {lng:.4f}"


def google_maps_url(coords) -> str:
    """Google Maps link centered on the given coordinates."""
    lat, lng = coords
    return f"https://www.google.com/maps/@{lat},{lng}"


def error_json(error: str, error_code: str, **details) -> str:
    """JSON error payload returned by tools instead of raising."""
    payload = {"error": error, "error_code": error_code}
    payload.update({k: v for k, v in details.items() if v is not None})
    return json.dumps(payload, indent=2)
