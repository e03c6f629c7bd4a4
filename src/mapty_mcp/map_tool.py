"""
Map tools for the workout MCP server.

Load the map on the user's position, inspect what is drawn, and pan to a
logged workout.
"""

import json
import logging

from fastmcp import Context

from mapty_mcp.session_factory import create_location_provider, get_session
from mapty_mcp.sdk.location import LocationUnavailable
from mapty_mcp.utils import error_json, format_coords, google_maps_url

logger = logging.getLogger(__name__)


def register_tools(app):
    """Register map tools with the MCP app."""

    @app.tool()
    async def load_map(
        ctx: Context,
        latitude: float = None,
        longitude: float = None,
    ) -> str:
        """
        Load the map centered on the user's current position.

        Pass the position if the client knows it (e.g. browser geolocation);
        otherwise it is looked up from the public IP address. Until the map
        is loaded no location can be picked, but logged workouts are still
        listed.

        Args:
            latitude: Current latitude in degrees (optional)
            longitude: Current longitude in degrees (optional)

        Returns:
            JSON with the map center, zoom and already listed workouts
        """
        session = get_session(ctx)
        try:
            provider = create_location_provider(latitude, longitude)
        except ValueError as e:
            return error_json(str(e), "INVALID_INPUT", fields=["latitude", "longitude"])

        try:
            center = session.controller.load_map(provider)
        except LocationUnavailable as e:
            return error_json(
                str(e),
                "LOCATION_UNAVAILABLE",
                hint="Pass latitude and longitude explicitly to load the map.",
                workouts=[entry.to_dict() for entry in session.surface.list_entries],
            )

        return json.dumps({
            "success": True,
            "center": list(center),
            "center_text": format_coords(center),
            "zoom": session.surface.zoom,
            "google_maps": google_maps_url(center),
            "workouts": [entry.to_dict() for entry in session.surface.list_entries],
            "note": "Restored workouts are listed but have no map marker.",
        }, indent=2)

    @app.tool()
    async def get_map_view(ctx: Context) -> str:
        """
        Get everything currently rendered for this session.

        Returns:
            JSON with map center/zoom, markers with popups, the workout list
            (newest first), the session state and the workout form
        """
        session = get_session(ctx)
        return json.dumps(session.view(), indent=2)

    @app.tool()
    async def focus_workout(ctx: Context, workout_id: str) -> str:
        """
        Pan the map to a workout, as when clicking its list entry.

        Does nothing if the workout is unknown or the map is not loaded yet.

        Args:
            workout_id: Workout ID from the workout list

        Returns:
            JSON with the new map center, or a note that nothing moved
        """
        session = get_session(ctx)
        record = session.controller.list_entry_clicked(workout_id)
        if record is None:
            return json.dumps({
                "success": False,
                "moved": False,
                "map_loaded": session.controller.map_loaded,
                "note": "Unknown workout or map not loaded; the map did not move.",
            }, indent=2)

        return json.dumps({
            "success": True,
            "moved": True,
            "workout_id": record.id,
            "description": record.description,
            "center": list(session.surface.center),
            "zoom": session.surface.zoom,
        }, indent=2)

    return app
