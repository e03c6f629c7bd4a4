"""
Session controller: the event-driven state machine of a map session.

Events come in one at a time (map load, location pick, form submit,
activity change, list click, cancel, reset). The controller validates,
builds records, appends them to the collection and asks the surfaces to
render. Collaborators are injected; wiring their callbacks to the
controller is the caller's job.
"""

import logging
from typing import List, Optional, Tuple

from mapty_mcp.api.collection import CorruptStore, WorkoutCollection
from mapty_mcp.api.model import (
    InvalidInput,
    WorkoutRecord,
    all_finite,
    all_positive,
    create_workout,
    validate_coords,
)
from mapty_mcp.sdk.location import LocationUnavailable
from mapty_mcp.sdk.surface import InputForm, MapSurface
from mapty_mcp.sdk.types import (
    ACTIVITY_ALIASES,
    ACTIVITY_GLYPHS,
    MAP_ZOOM_LEVEL,
    METRIC_FIELDS,
    ActivityKind,
    SessionState,
)
from mapty_mcp.utils import google_maps_url, parse_form_number

logger = logging.getLogger(__name__)


class SessionController:
    """Orchestrates one map session over a workout collection."""

    def __init__(
        self,
        collection: WorkoutCollection,
        surface: MapSurface,
        form: InputForm,
        zoom_level: int = MAP_ZOOM_LEVEL,
    ):
        self._collection = collection
        self._surface = surface
        self._form = form
        self._zoom_level = zoom_level
        self._state = SessionState.IDLE
        self._pending_coords: Optional[Tuple[float, float]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def pending_coords(self) -> Optional[Tuple[float, float]]:
        return self._pending_coords

    @property
    def workouts(self) -> tuple:
        return self._collection.records

    @property
    def map_loaded(self) -> bool:
        return self._surface.is_initialized

    @property
    def persisted(self) -> bool:
        """Whether the last write to the store succeeded."""
        return self._collection.is_persisted

    # ── Startup ──────────────────────────────────────────────────────

    def start(self) -> List[WorkoutRecord]:
        """Restore persisted workouts and list them.

        Restored workouts get list entries only; markers need a live map.
        A corrupt store is discarded and the session starts empty. A
        collection another session already loaded is listed as it is.
        """
        if self._collection.is_loaded:
            restored = list(self._collection.records)
        else:
            try:
                restored = self._collection.restore()
            except CorruptStore as e:
                logger.warning(f"Discarding stored workouts: {e}")
                self._collection.discard()
                restored = []

        for record in restored:
            self._surface.append_list_entry(record)

        self._state = SessionState.IDLE
        self._pending_coords = None
        if restored:
            logger.info(f"Restored {len(restored)} workouts")
        return restored

    def load_map(self, location_provider) -> Tuple[float, float]:
        """Center the map on the current location and accept picks.

        Raises:
            LocationUnavailable: If the provider cannot locate the user;
                the map stays inactive
        """
        try:
            coords = validate_coords(location_provider.get_current_location())
        except InvalidInput as e:
            raise LocationUnavailable(f"Could not get your position: {e}") from e
        except LocationUnavailable as e:
            logger.warning(str(e))
            raise

        logger.info(google_maps_url(coords))
        self._surface.initialize(coords, self._zoom_level)
        self._surface.on_location_picked(self.location_picked)
        return coords

    # ── Events ───────────────────────────────────────────────────────

    def location_picked(self, coords) -> Tuple[float, float]:
        """Remember the picked location and open the form."""
        if not self._surface.is_initialized:
            raise RuntimeError("Map is not loaded. Call load_map() first.")
        self._pending_coords = validate_coords(coords)
        self._form.open()
        self._state = SessionState.AWAITING_INPUT
        return self._pending_coords

    def submit(self, raw_fields: dict) -> WorkoutRecord:
        """Validate the form snapshot and log the workout.

        Raises:
            RuntimeError: If no location is pending
            InvalidInput: If a field fails validation; the form stays open
        """
        if self._state != SessionState.AWAITING_INPUT or self._pending_coords is None:
            raise RuntimeError("No location picked. Click on the map first.")

        kind = ACTIVITY_ALIASES.get(str(raw_fields.get("type", "")).lower())
        if kind is None:
            raise InvalidInput(f"Unknown activity type '{raw_fields.get('type')}'", ("type",))

        distance = parse_form_number(raw_fields.get("distance"))
        duration = parse_form_number(raw_fields.get("duration"))
        metric_field = METRIC_FIELDS[kind]
        metric = parse_form_number(raw_fields.get(metric_field))

        if not all_positive(distance, duration) or (
            kind == ActivityKind.RUNNING and not all_positive(metric)
        ):
            raise InvalidInput("Inputs have to be positive numbers!", self._bad_fields(
                distance=distance, duration=duration, **{metric_field: metric}
            ))
        if not all_finite(metric):
            raise InvalidInput("Elevation gain has to be a number!", (metric_field,))

        record = create_workout(kind, self._pending_coords, distance, duration, metric)
        self._collection.append(record)

        self._surface.place_marker(
            record.coords,
            glyph=ACTIVITY_GLYPHS[kind],
            label=record.description,
            class_name=f"{kind.value}-popup",
        )
        self._surface.append_list_entry(record)
        self._form.close()

        self._pending_coords = None
        self._state = SessionState.IDLE
        logger.info(f"Logged {record.description} ({record.id})")
        return record

    @staticmethod
    def _bad_fields(**values) -> tuple:
        bad = []
        for name, value in values.items():
            if name == "elevation":
                if not all_finite(value):
                    bad.append(name)
            elif not all_positive(value):
                bad.append(name)
        return tuple(bad)

    def activity_kind_changed(self, kind: str) -> str:
        """Swap the cadence/elevation field to match the selected activity."""
        resolved = ActivityKind(kind)
        if self._form.metric_field != METRIC_FIELDS[resolved]:
            self._form.toggle_metric_field()
        return self._form.metric_field

    def cancel(self) -> None:
        """Close the form without logging anything."""
        self._form.close()
        self._pending_coords = None
        self._state = SessionState.IDLE

    def list_entry_clicked(self, record_id: str) -> Optional[WorkoutRecord]:
        """Pan the map to a workout.

        No-op (returns None) for unknown ids or while no map is loaded.
        """
        record = self._collection.find(record_id)
        if record is None or not self._surface.is_initialized:
            return None
        self._surface.recenter(record.coords, self._zoom_level)
        return record

    def reset(self) -> bool:
        """Clear persisted workouts and return to a freshly launched session.

        Returns:
            True if the stored workouts were removed
        """
        cleared = self._collection.reset()
        self._surface.clear()
        self._form.close()
        self._pending_coords = None
        self._state = SessionState.IDLE
        return cleared
