"""Test configuration models."""

import pytest
from pydantic import ValidationError

from isle_erosion.environment import (
    PRESETS,
    ErosionSessionState,
    IslandConfig,
    PauseWindow,
    SimulationConfig,
)


class TestSimulationConfig:
    """Test simulation config validation and preset resolution."""

    def test_defaults(self):
        config = SimulationConfig(phrase="hello")

        assert config.preset == "classic"
        assert config.max_time == 1800
        assert config.island.layers == 3
        assert config.erosion_config().initial_phase_count == 2

    def test_phrase_needs_letters(self):
        with pytest.raises(ValidationError):
            SimulationConfig(phrase="?!")
        with pytest.raises(ValidationError):
            SimulationConfig(phrase="")

    def test_preset_with_overrides(self):
        config = SimulationConfig(
            phrase="hello",
            preset="brisk",
            erosion={"initial_phase_count": 3, "selection_offset": [25, 25]},
        )
        erosion = config.erosion_config()

        assert erosion.initial_percentage == PRESETS["brisk"]["initial_percentage"]
        assert erosion.initial_phase_count == 3
        assert erosion.selection_offset == (25, 25)

    def test_grid_size_centers_selection(self):
        config = SimulationConfig(phrase="hello", grid_size=51)
        assert config.erosion_config().selection_offset == (25, 25)

    def test_unknown_preset_fails_on_resolve(self):
        config = SimulationConfig(phrase="hello", preset="monsoon")
        with pytest.raises(ValueError, match="monsoon"):
            config.erosion_config()

    def test_from_dict(self):
        """Nested sections load from plain dictionaries as YAML produces them."""
        config = SimulationConfig(**{
            "phrase": "hello",
            "island": {"layers": 2, "initial_erosion": 0.1},
            "pause_windows": [{"start": 5, "duration": 10}],
        })

        assert config.island.layers == 2
        assert config.pause_windows == [PauseWindow(start=5, duration=10)]


class TestIslandConfig:
    def test_layer_bounds(self):
        with pytest.raises(ValidationError):
            IslandConfig(layers=0)
        with pytest.raises(ValidationError):
            IslandConfig(layers=6)

    def test_erosion_bounds(self):
        with pytest.raises(ValidationError):
            IslandConfig(initial_erosion=1.0)


class TestPauseWindow:
    def test_duration_positive(self):
        with pytest.raises(ValidationError):
            PauseWindow(start=0, duration=0)


def test_session_state_defaults():
    state = ErosionSessionState()
    assert not state.active
    assert not state.paused
    assert state.phase == 0
    assert not state.round_failed
