"""
Shared pytest fixtures for map workout MCP testing.
"""
import json
from datetime import datetime

import pytest
from unittest.mock import Mock, patch

# Monkey-patch: production uses fastmcp.FastMCP, tests use mcp.server.fastmcp.
# Patch fastmcp.Context to match mcp.server.fastmcp.Context so tools work
# with the test FastMCP.
import fastmcp
from mcp.server.fastmcp import server as mcp_server
fastmcp.Context = mcp_server.Context

from mcp.server.fastmcp import FastMCP

from mapty_mcp.api.collection import WorkoutCollection
from mapty_mcp.api.controller import SessionController
from mapty_mcp.api.model import create_cycling, create_running
from mapty_mcp.sdk.store import MemoryStore
from mapty_mcp.sdk.surface import InputForm, MapSurface
from mapty_mcp.session_factory import create_session


PARIS = (48.85, 2.35)
APRIL_12 = datetime(2026, 4, 12, 9, 30)


def get_tool_result_text(result):
    """Extract text from tool result.

    FastMCP call_tool returns a tuple (list_of_TextContent, metadata_dict).
    This helper extracts the text from the first TextContent item.
    """
    if isinstance(result, tuple) and len(result) > 0:
        result = result[0]
    if isinstance(result, list) and len(result) > 0:
        if hasattr(result[0], 'text'):
            return result[0].text
    return str(result)


def get_tool_result_json(result):
    return json.loads(get_tool_result_text(result))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def collection(store):
    return WorkoutCollection(store)


@pytest.fixture
def running_record():
    return create_running(PARIS, 5, 25, 178, created_at=APRIL_12)


@pytest.fixture
def cycling_record():
    return create_cycling((45.76, 4.83), 27, 95, 523, created_at=APRIL_12)


@pytest.fixture
def mock_surface():
    """Rendering surface double that records requests."""
    surface = Mock(spec=MapSurface)
    surface.is_initialized = True
    return surface


@pytest.fixture
def mock_form():
    form = Mock(spec=InputForm)
    form.metric_field = "cadence"
    return form


@pytest.fixture
def controller(collection, mock_surface, mock_form):
    return SessionController(collection, mock_surface, mock_form)


@pytest.fixture
def map_session(store):
    """A wired session over an in-memory store, map not loaded yet."""
    return create_session(store)


@pytest.fixture
def loaded_session(map_session):
    """A wired session with the map centered on Paris."""
    provider = Mock()
    provider.get_current_location.return_value = PARIS
    map_session.controller.load_map(provider)
    return map_session


@pytest.fixture
def mock_get_session(map_session):
    """Patch session_factory.get_session in all tool modules.

    Yields the mock function so tests can swap the returned session.
    """
    get_session_fn = Mock(return_value=map_session)

    modules_to_patch = [
        "mapty_mcp.map_tool",
        "mapty_mcp.workouts",
    ]

    patchers = []
    for module in modules_to_patch:
        p = patch(f"{module}.get_session", get_session_fn)
        p.start()
        patchers.append(p)

    yield get_session_fn

    for p in patchers:
        p.stop()


def create_test_app(module):
    """Helper to create a FastMCP app with a specific module registered."""
    app = FastMCP(f"Test Map Workouts {module.__name__}")
    app = module.register_tools(app)
    return app
