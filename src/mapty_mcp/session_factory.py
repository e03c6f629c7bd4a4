"""
Session factory for the map workout MCP server.

Builds and caches one wired map session per MCP connection.

Session Persistence:
- Controllers and surfaces live in memory, keyed by ctx.session_id; the
  least recently used ones are evicted past MAPTY_MAX_SESSIONS
- All sessions share one workout collection over a JSON key-value file
  (MAPTY_STORE_PATH), so no session overwrites another's workouts and a
  new session lists what earlier ones logged
"""

import logging
import os
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastmcp import Context

from mapty_mcp.api.collection import WorkoutCollection
from mapty_mcp.api.controller import SessionController
from mapty_mcp.sdk.location import DEFAULT_LOCATION_URL, IpLocationProvider, StaticLocationProvider
from mapty_mcp.sdk.store import FileStore, KeyValueStore
from mapty_mcp.sdk.surface import InputForm, MapSurface

logger = logging.getLogger(__name__)


STORE_PATH = Path(os.environ.get("MAPTY_STORE_PATH", "~/.mapty/storage.json")).expanduser()
LOCATION_URL = os.environ.get("MAPTY_LOCATION_URL", DEFAULT_LOCATION_URL)
LOCATION_TIMEOUT = float(os.environ.get("MAPTY_LOCATION_TIMEOUT", "5"))
MAX_SESSIONS = int(os.environ.get("MAPTY_MAX_SESSIONS", "100"))

DEFAULT_SESSION_ID = "default"

_sessions: "OrderedDict[str, MapSession]" = OrderedDict()
_collection: Optional[WorkoutCollection] = None


@dataclass
class MapSession:
    """A controller together with the surfaces it drives."""
    controller: SessionController
    surface: MapSurface
    form: InputForm

    def view(self) -> dict:
        """Everything a client needs to draw the session."""
        view = self.surface.snapshot()
        view["state"] = self.controller.state.value
        view["pending_location"] = (
            list(self.controller.pending_coords) if self.controller.pending_coords else None
        )
        view["form"] = self.form.to_dict()
        return view


def create_session(
    store: KeyValueStore = None,
    collection: WorkoutCollection = None,
) -> MapSession:
    """
    Wire collaborators to a new controller and start it.

    The form's submit and activity-change events are routed to the
    controller here; map picks are routed when the map loads.

    Args:
        store: Key-value store holding the persisted workouts
        collection: Collection to share with other sessions (overrides store)

    Returns:
        Started MapSession with persisted workouts listed
    """
    if collection is None:
        if store is None:
            raise ValueError("create_session needs a store or a collection")
        collection = WorkoutCollection(store)

    surface = MapSurface()
    form = InputForm()
    controller = SessionController(collection, surface, form)

    form.on_submit(controller.submit)
    form.on_activity_kind_changed(controller.activity_kind_changed)

    controller.start()
    return MapSession(controller=controller, surface=surface, form=form)


def create_location_provider(latitude: float = None, longitude: float = None):
    """Use client-supplied coordinates when given, otherwise IP geolocation.

    Raises:
        ValueError: If only one of latitude/longitude is given
    """
    if (latitude is None) != (longitude is None):
        raise ValueError("Pass both latitude and longitude, or neither")
    if latitude is not None:
        return StaticLocationProvider(latitude, longitude)
    return IpLocationProvider(url=LOCATION_URL, timeout=LOCATION_TIMEOUT)


def get_collection() -> WorkoutCollection:
    """The process-wide workout collection over the configured store."""
    global _collection
    if _collection is None:
        _collection = WorkoutCollection(FileStore(STORE_PATH))
    return _collection


def _get_session_id(ctx: Context) -> str:
    try:
        session_id = ctx.session_id
    except (RuntimeError, AttributeError):
        # session_id not available (not in request context)
        return DEFAULT_SESSION_ID
    return session_id or DEFAULT_SESSION_ID


def get_session(ctx: Context) -> MapSession:
    """
    Get the map session for this MCP connection, creating it on first use.

    Usage in tools:
        @app.tool()
        async def list_workouts(ctx: Context) -> str:
            session = get_session(ctx)
            return json.dumps(session.view())

    Args:
        ctx: FastMCP Context (automatically injected by framework)

    Returns:
        The connection's MapSession
    """
    session_id = _get_session_id(ctx)
    session = _sessions.get(session_id)
    if session is not None:
        _sessions.move_to_end(session_id)
        return session

    session = create_session(collection=get_collection())
    _sessions[session_id] = session
    while len(_sessions) > MAX_SESSIONS:
        evicted, _ = _sessions.popitem(last=False)
        logger.info(f"Evicted idle map session {evicted}")
    return session


def drop_session(ctx: Context) -> None:
    """Forget the connection's session; the next call starts a fresh one."""
    _sessions.pop(_get_session_id(ctx), None)
