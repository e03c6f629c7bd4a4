"""
Workout logging tools for the map MCP server.

Pick a location, fill the workout form, submit it, and manage the log.
"""

import json
import logging

from fastmcp import Context

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

from mapty_mcp.api.model import InvalidInput, to_dict
from mapty_mcp.session_factory import drop_session, get_session
from mapty_mcp.sdk.types import ACTIVITY_ALIASES
from mapty_mcp.utils import error_json

STORE_WARNING = "Workout logged but could not be saved; it will be lost when the server stops."


def _workout_summary(record) -> dict:
    data = to_dict(record)
    if record.is_running:
        data["pace"] = f"{record.pace_min_per_km:.2f} min/km"
    else:
        data["speed"] = f"{record.speed_km_per_h:.2f} km/h"
    return data


def register_tools(app):
    """Register workout logging tools with the MCP app."""

    @app.tool()
    async def pick_location(ctx: Context, latitude: float, longitude: float) -> str:
        """
        Pick a location on the map for a new workout.

        Opens the workout form. Picking again before submitting just moves
        the pending location.

        Args:
            latitude: Latitude in degrees (-90 to 90)
            longitude: Longitude in degrees (-180 to 180)

        Returns:
            JSON with the pending location and form state
        """
        session = get_session(ctx)
        try:
            coords = session.surface.click((latitude, longitude))
        except InvalidInput as e:
            return error_json(str(e), "INVALID_INPUT", fields=list(e.fields))
        except RuntimeError as e:
            return error_json(str(e), "NO_ACTIVE_MAP")

        return json.dumps({
            "success": True,
            "pending_location": list(coords),
            "form": session.form.to_dict(),
        }, indent=2)

    @app.tool()
    async def set_activity_kind(ctx: Context, kind: str) -> str:
        """
        Switch the workout form between running and cycling.

        Running asks for cadence, cycling for elevation gain.

        Args:
            kind: Activity type - one of: running, run, cycling, bike, ride

        Returns:
            JSON with the selected type and the visible metric field
        """
        session = get_session(ctx)
        try:
            visible = session.form.set_kind(kind)
        except ValueError as e:
            return error_json(str(e), "INVALID_INPUT", fields=["type"])

        return json.dumps({
            "success": True,
            "type": session.form.snapshot()["type"],
            "visible_metric_field": visible,
        }, indent=2)

    @app.tool()
    async def submit_workout(
        ctx: Context,
        type: str,
        distance: str,
        duration: str,
        cadence: str = "",
        elevation: str = "",
    ) -> str:
        """
        Submit the workout form for the picked location.

        Distance and duration must be positive; running also needs a
        positive cadence. Elevation gain for cycling may be zero or negative.
        On invalid input the form stays open with the pending location.

        Args:
            type: Activity type - running or cycling
            distance: Distance in km
            duration: Duration in minutes
            cadence: Steps per minute (running)
            elevation: Elevation gain in meters (cycling)

        Returns:
            JSON with the logged workout, its marker and list entry
        """
        session = get_session(ctx)
        resolved = ACTIVITY_ALIASES.get(str(type).lower())
        if resolved is None:
            return error_json(
                f"Unknown activity type '{type}'. Use: {', '.join(ACTIVITY_ALIASES.keys())}",
                "INVALID_INPUT",
                fields=["type"],
            )

        if session.form.snapshot()["type"] != resolved.value:
            session.form.set_kind(resolved.value)
        session.form.fill(distance=distance, duration=duration, cadence=cadence, elevation=elevation)

        try:
            record = session.form.submit()
        except InvalidInput as e:
            return error_json(
                str(e), "INVALID_INPUT",
                fields=list(e.fields),
                form=session.form.to_dict(),
            )
        except RuntimeError as e:
            return error_json(str(e), "NO_PENDING_LOCATION")

        result = {
            "success": True,
            "workout": _workout_summary(record),
            "marker": session.surface.markers[-1].to_dict(),
            "list_entry": session.surface.list_entries[0].to_dict(),
        }
        if not session.controller.persisted:
            result["warning"] = STORE_WARNING
        return json.dumps(result, indent=2)

    @app.tool()
    async def cancel_workout(ctx: Context) -> str:
        """
        Close the workout form without logging anything.

        Returns:
            JSON confirmation
        """
        session = get_session(ctx)
        session.controller.cancel()
        return json.dumps({"success": True, "state": session.controller.state.value}, indent=2)

    @app.tool()
    async def list_workouts(ctx: Context) -> str:
        """
        List all logged workouts, oldest first.

        Returns:
            JSON with workouts including derived pace or speed
        """
        session = get_session(ctx)
        workouts = [_workout_summary(r) for r in session.controller.workouts]
        return json.dumps({"count": len(workouts), "workouts": workouts}, indent=2)

    @app.tool()
    async def reset_workouts(ctx: Context) -> str:
        """
        Delete all logged workouts and restart the session.

        The map has to be loaded again afterwards.

        Returns:
            JSON confirmation
        """
        session = get_session(ctx)
        count = len(session.controller.workouts)
        cleared = session.controller.reset()
        drop_session(ctx)
        logger.info(f"Reset session, {count} workouts removed")
        result = {"success": True, "removed": count}
        if not cleared:
            result["warning"] = "Could not clear the workout store; old workouts may return next launch."
        return json.dumps(result, indent=2)

    @app.tool()
    async def get_available_features(ctx: Context) -> str:
        """
        Get list of available map workout tools.

        Returns:
            JSON with available feature categories
        """
        features = {
            "app": "Map Workout Log",
            "map": [
                "load_map - Center the map on your position",
                "get_map_view - Markers, workout list, form and session state",
                "focus_workout - Pan the map to a logged workout",
            ],
            "workouts": [
                "pick_location - Pick a spot on the map and open the form",
                "set_activity_kind - Switch between running and cycling",
                "submit_workout - Log the workout for the picked spot",
                "cancel_workout - Close the form",
                "list_workouts - All logged workouts with pace/speed",
                "reset_workouts - Delete everything and start over",
            ],
            "notes": [
                "Workouts persist across sessions",
                "Workouts restored from storage are listed but not drawn on the map",
            ],
        }
        return json.dumps(features, indent=2)

    return app
