"""
Workout domain for the map log.

Modules:
    model      — What is a workout?      (records, validation, serialization)
    collection — What has been logged?   (ordered list + persistence bridge)
    controller — What happens next?      (session state machine)
"""

# Model
from mapty_mcp.api.model import (
    InvalidInput,
    WorkoutRecord,
    all_positive,
    create_cycling,
    create_running,
    create_workout,
    describe,
    from_dict,
    to_dict,
)

# Collection
from mapty_mcp.api.collection import CorruptStore, WorkoutCollection

# Controller
from mapty_mcp.api.controller import SessionController

__all__ = [
    # Model
    "InvalidInput", "WorkoutRecord", "all_positive",
    "create_running", "create_cycling", "create_workout", "describe",
    "from_dict", "to_dict",
    # Collection
    "CorruptStore", "WorkoutCollection",
    # Controller
    "SessionController",
]
