"""
Collaborators for the workout session.

Stores, location providers and rendering/input surfaces. Each one is a
narrow interface the session controller is handed at construction.
"""

from mapty_mcp.sdk.location import (
    IpLocationProvider,
    LocationUnavailable,
    StaticLocationProvider,
)
from mapty_mcp.sdk.store import FileStore, KeyValueStore, MemoryStore, StoreWriteError
from mapty_mcp.sdk.surface import InputForm, ListEntry, MapSurface, Marker
from mapty_mcp.sdk.types import (
    ActivityKind,
    SessionState,
    MAP_ZOOM_LEVEL,
    STORE_KEY,
)

__all__ = [
    "IpLocationProvider",
    "LocationUnavailable",
    "StaticLocationProvider",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "StoreWriteError",
    "InputForm",
    "ListEntry",
    "MapSurface",
    "Marker",
    "ActivityKind",
    "SessionState",
    "MAP_ZOOM_LEVEL",
    "STORE_KEY",
]
