"""
In-memory rendering and input surfaces.

MapSurface stands in for the map widget plus the workout list next to it;
InputForm stands in for the workout form. Both only keep state and fire
callbacks, the MCP tools serialize them for the client.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from mapty_mcp.sdk.types import (
    ACTIVITY_ALIASES,
    ACTIVITY_GLYPHS,
    FORM_FIELDS,
    METRIC_FIELDS,
    POPUP_OPTIONS,
    TILE_ATTRIBUTION,
    TILE_URL,
    ActivityKind,
)
from mapty_mcp.utils import format_number

logger = logging.getLogger(__name__)

Coords = Tuple[float, float]


@dataclass
class Marker:
    """A map marker with an always-open popup."""
    coords: Coords
    glyph: str
    label: str
    class_name: str

    def to_dict(self) -> dict:
        return {
            "coords": list(self.coords),
            "popup": f"{self.glyph} {self.label}",
            "class_name": self.class_name,
            **POPUP_OPTIONS,
        }


@dataclass
class ListEntry:
    """One row of the workout list."""
    workout_id: str
    kind: str
    title: str
    details: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "workout_id": self.workout_id,
            "kind": self.kind,
            "title": self.title,
            "details": self.details,
            "text": " | ".join(
                f"{d['icon']} {d['value']} {d['unit']}" for d in self.details
            ),
        }


def build_list_entry(record) -> ListEntry:
    """Summarize a record as distance, duration and its two activity metrics."""
    kind = ActivityKind(record.kind)
    details = [
        {"icon": ACTIVITY_GLYPHS[kind], "value": format_number(record.distance_km), "unit": "km"},
        {"icon": "⏱", "value": format_number(record.duration_min), "unit": "min"},
    ]
    if kind == ActivityKind.RUNNING:
        details += [
            {"icon": "⚡️", "value": f"{record.pace_min_per_km:.2f}", "unit": "min/km"},
            {"icon": "🦶🏼", "value": format_number(record.cadence_steps_per_min), "unit": "spm"},
        ]
    else:
        details += [
            {"icon": "⚡️", "value": f"{record.speed_km_per_h:.2f}", "unit": "km/h"},
            {"icon": "⛰", "value": format_number(record.elevation_gain_m), "unit": "m"},
        ]
    return ListEntry(
        workout_id=record.id,
        kind=kind.value,
        title=record.description,
        details=details,
    )


class MapSurface:
    """
    Map view plus workout list.

    The map part only exists after initialize(); the list part is usable
    from the start so persisted workouts can be listed without a map.
    """

    def __init__(self):
        self._center: Optional[Coords] = None
        self._zoom: Optional[int] = None
        self._pick_handler: Optional[Callable[[Coords], object]] = None
        self.markers: List[Marker] = []
        self.list_entries: List[ListEntry] = []

    @property
    def is_initialized(self) -> bool:
        return self._center is not None

    @property
    def center(self) -> Optional[Coords]:
        return self._center

    @property
    def zoom(self) -> Optional[int]:
        return self._zoom

    def initialize(self, center: Coords, zoom: int) -> None:
        self._center = tuple(center)
        self._zoom = zoom

    def on_location_picked(self, handler: Callable[[Coords], object]) -> None:
        self._pick_handler = handler

    def click(self, coords: Coords):
        """Deliver a location-pick event to the registered handler."""
        if not self.is_initialized or self._pick_handler is None:
            raise RuntimeError("Map is not loaded. Call load_map() first.")
        return self._pick_handler(tuple(coords))

    def place_marker(self, coords: Coords, glyph: str, label: str, class_name: str = "") -> Marker:
        if not self.is_initialized:
            raise RuntimeError("Cannot place a marker before the map is loaded")
        marker = Marker(coords=tuple(coords), glyph=glyph, label=label, class_name=class_name)
        self.markers.append(marker)
        return marker

    def recenter(self, coords: Coords, zoom: int) -> None:
        if not self.is_initialized:
            raise RuntimeError("Cannot recenter before the map is loaded")
        self._center = tuple(coords)
        self._zoom = zoom

    def append_list_entry(self, record) -> ListEntry:
        entry = build_list_entry(record)
        # Newest entries sit right under the form
        self.list_entries.insert(0, entry)
        return entry

    def clear(self) -> None:
        """Drop the map context and everything rendered."""
        self._center = None
        self._zoom = None
        self._pick_handler = None
        self.markers = []
        self.list_entries = []

    def snapshot(self) -> dict:
        return {
            "map_loaded": self.is_initialized,
            "center": list(self._center) if self._center else None,
            "zoom": self._zoom,
            "tiles": {"url": TILE_URL, "attribution": TILE_ATTRIBUTION} if self.is_initialized else None,
            "markers": [m.to_dict() for m in self.markers],
            "workouts": [e.to_dict() for e in self.list_entries],
        }


class InputForm:
    """
    The workout form: raw text fields, visibility and two events.

    Values are kept as the user typed them; parsing belongs to the
    controller.
    """

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._is_open = False
        self._focused: Optional[str] = None
        self._metric_field = METRIC_FIELDS[ActivityKind.RUNNING]
        self._submit_handler: Optional[Callable[[dict], object]] = None
        self._kind_handler: Optional[Callable[[str], object]] = None
        self.clear()

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def focused(self) -> Optional[str]:
        return self._focused

    @property
    def metric_field(self) -> str:
        """The activity-specific field currently shown (cadence or elevation)."""
        return self._metric_field

    def on_submit(self, handler: Callable[[dict], object]) -> None:
        self._submit_handler = handler

    def on_activity_kind_changed(self, handler: Callable[[str], object]) -> None:
        self._kind_handler = handler

    def open(self) -> None:
        self._is_open = True
        self._focused = "distance"

    def close(self) -> None:
        """Hide the form and clear the numeric inputs."""
        self._is_open = False
        self._focused = None
        self.clear()

    def clear(self) -> None:
        kind = self._values.get("type", ActivityKind.RUNNING.value)
        self._values = {name: "" for name in FORM_FIELDS}
        self._values["type"] = kind

    def fill(self, **values) -> None:
        for name, value in values.items():
            if name not in FORM_FIELDS:
                raise ValueError(f"Unknown form field '{name}'. Use: {', '.join(FORM_FIELDS)}")
            if value is None:
                continue
            self._values[name] = str(value)

    def toggle_metric_field(self) -> None:
        self._metric_field = "elevation" if self._metric_field == "cadence" else "cadence"

    def set_kind(self, kind: str):
        """Select the activity type and emit the change event."""
        resolved = ACTIVITY_ALIASES.get(str(kind).lower())
        if resolved is None:
            raise ValueError(
                f"Unknown activity type '{kind}'. Use: {', '.join(ACTIVITY_ALIASES.keys())}"
            )
        self._values["type"] = resolved.value
        if self._kind_handler is not None:
            return self._kind_handler(resolved.value)
        return None

    def snapshot(self) -> dict:
        return dict(self._values)

    def submit(self):
        """Emit the submit event with the current raw values."""
        if self._submit_handler is None:
            raise RuntimeError("Form has no submit handler")
        return self._submit_handler(self.snapshot())

    def to_dict(self) -> dict:
        return {
            "open": self._is_open,
            "focused": self._focused,
            "visible_metric_field": self._metric_field,
            "values": self.snapshot(),
        }
