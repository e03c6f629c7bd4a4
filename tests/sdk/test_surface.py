"""Tests for sdk/surface.py — map surface, list entries and the form."""

from unittest.mock import Mock

import pytest

from mapty_mcp.sdk.surface import InputForm, MapSurface, build_list_entry
from tests.conftest import PARIS


class TestBuildListEntry:
    def test_running(self, running_record):
        entry = build_list_entry(running_record)
        assert entry.workout_id == running_record.id
        assert entry.title == "Running on April 12"
        assert [(d["value"], d["unit"]) for d in entry.details] == [
            ("5", "km"), ("25", "min"), ("5.00", "min/km"), ("178", "spm"),
        ]
        assert entry.details[0]["icon"] == "🏃‍♂️"

    def test_cycling(self, cycling_record):
        entry = build_list_entry(cycling_record)
        assert [(d["value"], d["unit"]) for d in entry.details] == [
            ("27", "km"), ("95", "min"), ("17.05", "km/h"), ("523", "m"),
        ]
        assert entry.to_dict()["kind"] == "cycling"

    def test_text(self, running_record):
        text = build_list_entry(running_record).to_dict()["text"]
        assert "5 km" in text and "5.00 min/km" in text


class TestMapSurface:
    def test_not_initialized(self):
        surface = MapSurface()
        assert surface.is_initialized is False
        with pytest.raises(RuntimeError):
            surface.click(PARIS)
        with pytest.raises(RuntimeError):
            surface.place_marker(PARIS, "x", "y")
        with pytest.raises(RuntimeError):
            surface.recenter(PARIS, 15)

    def test_click_dispatches(self):
        surface = MapSurface()
        surface.initialize(PARIS, 15)
        handler = Mock(return_value="picked")
        surface.on_location_picked(handler)
        assert surface.click([1.0, 2.0]) == "picked"
        handler.assert_called_once_with((1.0, 2.0))

    def test_list_is_newest_first(self, running_record, cycling_record):
        surface = MapSurface()
        surface.append_list_entry(running_record)
        surface.append_list_entry(cycling_record)
        assert [e.workout_id for e in surface.list_entries] == [cycling_record.id, running_record.id]

    def test_marker_popup(self):
        surface = MapSurface()
        surface.initialize(PARIS, 15)
        marker = surface.place_marker(PARIS, "🏃‍♂️", "Running on April 12", "running-popup")
        data = marker.to_dict()
        assert data["popup"] == "🏃‍♂️ Running on April 12"
        assert data["autoClose"] is False
        assert data["maxWidth"] == 250

    def test_clear(self, running_record):
        surface = MapSurface()
        surface.initialize(PARIS, 15)
        surface.append_list_entry(running_record)
        surface.clear()
        assert surface.is_initialized is False
        assert surface.list_entries == []

    def test_snapshot(self, running_record):
        surface = MapSurface()
        surface.append_list_entry(running_record)
        snap = surface.snapshot()
        assert snap["map_loaded"] is False
        assert snap["tiles"] is None
        assert snap["workouts"][0]["title"] == "Running on April 12"


class TestInputForm:
    def test_open_focuses_distance(self):
        form = InputForm()
        form.open()
        assert form.is_open is True
        assert form.focused == "distance"

    def test_close_clears_values_keeps_type(self):
        form = InputForm()
        form.set_kind("cycling")
        form.fill(distance="10", elevation="5")
        form.open()
        form.close()
        assert form.is_open is False
        assert form.snapshot() == {
            "type": "cycling", "distance": "", "duration": "", "cadence": "", "elevation": "",
        }

    def test_fill_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown form field"):
            InputForm().fill(pace="5")

    def test_fill_skips_none(self):
        form = InputForm()
        form.fill(distance=5, duration=None)
        assert form.snapshot()["distance"] == "5"
        assert form.snapshot()["duration"] == ""

    def test_submit_emits_snapshot(self):
        form = InputForm()
        handler = Mock(return_value="record")
        form.on_submit(handler)
        form.fill(distance="5")
        assert form.submit() == "record"
        assert handler.call_args[0][0]["distance"] == "5"

    def test_submit_without_handler(self):
        with pytest.raises(RuntimeError):
            InputForm().submit()

    def test_set_kind_emits_resolved_kind(self):
        form = InputForm()
        handler = Mock(return_value="elevation")
        form.on_activity_kind_changed(handler)
        assert form.set_kind("Bike") == "elevation"
        handler.assert_called_once_with("cycling")

    def test_set_kind_unknown(self):
        with pytest.raises(ValueError, match="Unknown activity type"):
            InputForm().set_kind("swim")

    def test_toggle_metric_field(self):
        form = InputForm()
        assert form.metric_field == "cadence"
        form.toggle_metric_field()
        assert form.metric_field == "elevation"
