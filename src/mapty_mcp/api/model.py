"""
Workout records for the map log.

A record is one frozen shape tagged by ``kind``; running records carry a
cadence, cycling records an elevation gain. Derived metrics are
properties, so they always agree with the stored inputs.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from mapty_mcp.sdk.types import MONTHS, ActivityKind

logger = logging.getLogger(__name__)

# Relative tolerance when comparing stored derived values with recomputed ones
DERIVED_TOLERANCE = 1e-9


class InvalidInput(ValueError):
    """User-correctable input error: a field failed its range check."""

    def __init__(self, message: str, fields: Tuple[str, ...] = ()):
        super().__init__(message)
        self.fields = tuple(fields)


@dataclass(frozen=True)
class WorkoutRecord:
    """A logged workout. Never mutated after creation."""
    id: str
    kind: ActivityKind
    created_at: datetime
    coords: Tuple[float, float]
    distance_km: float
    duration_min: float
    description: str
    cadence_steps_per_min: Optional[float] = None
    elevation_gain_m: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self.kind == ActivityKind.RUNNING

    @property
    def pace_min_per_km(self) -> Optional[float]:
        if not self.is_running:
            return None
        return self.duration_min / self.distance_km

    @property
    def speed_km_per_h(self) -> Optional[float]:
        if self.is_running:
            return None
        return self.distance_km / (self.duration_min / 60)

    @property
    def metric(self) -> float:
        """The activity-specific input (cadence or elevation gain)."""
        return self.cadence_steps_per_min if self.is_running else self.elevation_gain_m


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range (json.loads keeps them exact)
        return False


def all_positive(*values) -> bool:
    """True if every value is a finite number greater than zero."""
    return all(_is_number(v) and _is_finite(v) and v > 0 for v in values)


def all_finite(*values) -> bool:
    """True if every value is a finite number."""
    return all(_is_number(v) and _is_finite(v) for v in values)


def validate_coords(coords) -> Tuple[float, float]:
    """Check a (lat, lng) pair and return it as a tuple of floats.

    Raises:
        InvalidInput: If the pair is malformed or out of geographic range
    """
    try:
        lat, lng = coords
    except (TypeError, ValueError):
        raise InvalidInput("Coordinates must be a (latitude, longitude) pair", ("coords",))
    if not all_finite(lat, lng):
        raise InvalidInput("Coordinates must be finite numbers", ("coords",))
    if not -90 <= lat <= 90:
        raise InvalidInput(f"Latitude {lat} is outside [-90, 90]", ("coords",))
    if not -180 <= lng <= 180:
        raise InvalidInput(f"Longitude {lng} is outside [-180, 180]", ("coords",))
    return float(lat), float(lng)


def _require_positive(**values) -> None:
    bad = tuple(name for name, v in values.items() if not all_positive(v))
    if bad:
        raise InvalidInput("Inputs have to be positive numbers!", bad)


def describe(kind: ActivityKind, created_at: datetime) -> str:
    """Human label like "Running on April 12"."""
    kind = ActivityKind(kind)
    return f"{kind.value.capitalize()} on {MONTHS[created_at.month - 1]} {created_at.day}"


def new_workout_id() -> str:
    return uuid.uuid4().hex


def create_running(
    coords,
    distance_km: float,
    duration_min: float,
    cadence: float,
    created_at: datetime = None,
    record_id: str = None,
) -> WorkoutRecord:
    """Build a running record.

    Raises:
        InvalidInput: If distance, duration or cadence is not a positive
            finite number, or coords are out of range
    """
    _require_positive(distance=distance_km, duration=duration_min, cadence=cadence)
    coords = validate_coords(coords)
    created_at = created_at or datetime.now()
    return WorkoutRecord(
        id=record_id or new_workout_id(),
        kind=ActivityKind.RUNNING,
        created_at=created_at,
        coords=coords,
        distance_km=float(distance_km),
        duration_min=float(duration_min),
        description=describe(ActivityKind.RUNNING, created_at),
        cadence_steps_per_min=float(cadence),
    )


def create_cycling(
    coords,
    distance_km: float,
    duration_min: float,
    elevation_gain_m: float,
    created_at: datetime = None,
    record_id: str = None,
) -> WorkoutRecord:
    """Build a cycling record.

    Elevation gain may be zero or negative (net descent) but must be finite.

    Raises:
        InvalidInput: If distance or duration is not a positive finite
            number, elevation is not finite, or coords are out of range
    """
    _require_positive(distance=distance_km, duration=duration_min)
    if not all_finite(elevation_gain_m):
        raise InvalidInput("Elevation gain has to be a number!", ("elevation",))
    coords = validate_coords(coords)
    created_at = created_at or datetime.now()
    return WorkoutRecord(
        id=record_id or new_workout_id(),
        kind=ActivityKind.CYCLING,
        created_at=created_at,
        coords=coords,
        distance_km=float(distance_km),
        duration_min=float(duration_min),
        description=describe(ActivityKind.CYCLING, created_at),
        elevation_gain_m=float(elevation_gain_m),
    )


def create_workout(kind, coords, distance_km, duration_min, metric, **kwargs) -> WorkoutRecord:
    """Dispatch to the constructor for ``kind``."""
    try:
        kind = ActivityKind(kind)
    except ValueError:
        raise InvalidInput(f"Unknown activity type '{kind}'", ("type",))
    if kind == ActivityKind.RUNNING:
        return create_running(coords, distance_km, duration_min, metric, **kwargs)
    return create_cycling(coords, distance_km, duration_min, metric, **kwargs)


# ── Serialization ────────────────────────────────────────────────────


def to_dict(record: WorkoutRecord) -> dict:
    """Flat JSON-ready representation of a record."""
    data = {
        "kind": record.kind.value,
        "id": record.id,
        "createdAt": record.created_at.isoformat(),
        "coordinates": list(record.coords),
        "distanceKm": record.distance_km,
        "durationMin": record.duration_min,
        "description": record.description,
    }
    if record.is_running:
        data["cadenceStepsPerMin"] = record.cadence_steps_per_min
        data["paceMinPerKm"] = record.pace_min_per_km
    else:
        data["elevationGainM"] = record.elevation_gain_m
        data["speedKmPerH"] = record.speed_km_per_h
    return data


def _pick(data: dict, *keys):
    # Earlier stores used short field names (type, coords, distance, ...)
    for key in keys:
        if key in data:
            return data[key]
    return None


def _parse_created_at(value) -> datetime:
    if not isinstance(value, str) or not value:
        raise InvalidInput("createdAt must be an ISO 8601 timestamp", ("createdAt",))
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidInput(f"Invalid createdAt '{value}'", ("createdAt",))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed


def _check_derived(record: WorkoutRecord, data: dict) -> None:
    if record.is_running:
        name, stored, actual = "paceMinPerKm", _pick(data, "paceMinPerKm", "pace"), record.pace_min_per_km
    else:
        name, stored, actual = "speedKmPerH", _pick(data, "speedKmPerH", "speed"), record.speed_km_per_h
    if stored is None:
        return
    if not _is_number(stored) or not math.isclose(stored, actual, rel_tol=DERIVED_TOLERANCE):
        logger.warning(
            f"Workout {record.id}: stored {name}={stored!r} disagrees with inputs, "
            f"using recomputed {actual!r}"
        )


def from_dict(data: dict) -> WorkoutRecord:
    """Rebuild a record from its stored form.

    Inputs are re-validated through the same constructors used at
    creation; derived metrics and the description are recomputed rather
    than read back.

    Raises:
        InvalidInput: If any field is missing or fails validation
    """
    if not isinstance(data, dict):
        raise InvalidInput("Workout entry must be an object")

    record_id = data.get("id")
    if not isinstance(record_id, str) or not record_id:
        raise InvalidInput("Workout id must be a non-empty string", ("id",))

    kind = _pick(data, "kind", "type")
    created_at = _parse_created_at(_pick(data, "createdAt", "date"))
    coords = _pick(data, "coordinates", "coords")
    distance = _pick(data, "distanceKm", "distance")
    duration = _pick(data, "durationMin", "duration")
    if kind == ActivityKind.RUNNING.value:
        metric = _pick(data, "cadenceStepsPerMin", "cadence")
    else:
        metric = _pick(data, "elevationGainM", "elevationGain")

    record = create_workout(
        kind, coords, distance, duration, metric,
        created_at=created_at, record_id=record_id,
    )
    _check_derived(record, data)
    return record
