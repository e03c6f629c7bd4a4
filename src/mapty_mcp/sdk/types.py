"""
Map workout log types, enums, and constants.

All activity codes, glyphs, and magic values live here.
"""

from enum import Enum


class ActivityKind(str, Enum):
    """Activity discriminant carried by every workout record."""
    RUNNING = "running"
    CYCLING = "cycling"


class SessionState(str, Enum):
    """Session controller states."""
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"


# prettier month names for workout descriptions
MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Key under which the whole collection is stored
STORE_KEY = "workouts"

MAP_ZOOM_LEVEL = 15

ACTIVITY_GLYPHS = {
    ActivityKind.RUNNING: "🏃‍♂️",
    ActivityKind.CYCLING: "🚴‍♀️",
}

# Activity-specific form field, keyed by kind
METRIC_FIELDS = {
    ActivityKind.RUNNING: "cadence",
    ActivityKind.CYCLING: "elevation",
}

FORM_FIELDS = ("type", "distance", "duration", "cadence", "elevation")

# Marker popup options
POPUP_OPTIONS = {
    "maxWidth": 250,
    "minWidth": 100,
    "autoClose": False,
    "closeOnClick": False,
}

TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)

# User-friendly activity names accepted by the tools
ACTIVITY_ALIASES = {
    "running": ActivityKind.RUNNING,
    "run": ActivityKind.RUNNING,
    "cycling": ActivityKind.CYCLING,
    "bike": ActivityKind.CYCLING,
    "ride": ActivityKind.CYCLING,
}
