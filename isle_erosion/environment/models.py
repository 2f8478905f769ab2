"""
Pydantic models for the environment layer.

Configuration, session state, lifecycle events and simulation results. The
logic classes (ErosionController, InMemoryIsland, schedulers) live in their
own modules.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator

from ..erosion.models import Cell
from ..erosion.grid import center_offset


# Type aliases
EventType = Literal[
    "erosion-started",
    "erosion-stopped",
    "erosion-paused",
    "erosion-unpaused",
    "cells-flashing",
    "cells-eroded",
    "path-eroded",
]
ErosionStage = Literal["idle", "cycle_pending", "flashing", "final_warning", "paused", "stopped"]
Outcome = Literal["completed", "failed", "timeout"]


class ErosionConfig(BaseModel):
    """
    Timing and intensity of live erosion.

    Phases below `initial_phase_count` use the slow initial interval and
    percentage; later phases use the standard ones. Erosion starts slow and
    accelerates.
    """
    initial_interval: float = Field(15.0, gt=0)  # seconds
    initial_percentage: float = Field(0.05, gt=0, le=1)
    standard_interval: float = Field(10.0, gt=0)
    standard_percentage: float = Field(0.10, gt=0, le=1)
    initial_phase_count: int = Field(2, ge=0)
    flash_duration: float = Field(3.0, ge=0)  # warning before cells are removed
    final_warning_duration: float = Field(10.0, ge=0)  # warning before the path goes
    # Where the path origin sits in the player's view grid. Selected cells
    # arrive in view coordinates and are shifted back by this offset.
    selection_offset: Tuple[int, int] = (0, 0)

    @model_validator(mode="after")
    def _check_acceleration(self) -> "ErosionConfig":
        if self.standard_percentage < self.initial_percentage:
            raise ValueError("standard_percentage must not be lower than initial_percentage")
        if self.standard_interval > self.initial_interval:
            raise ValueError("standard_interval must not be longer than initial_interval")
        return self

    @classmethod
    def from_preset(cls, name: str = "classic", **overrides) -> "ErosionConfig":
        """
        Build a config from a named preset with optional overrides.

        Raises:
            ValueError: If the preset is unknown
        """
        if name not in PRESETS:
            raise ValueError(f"Unknown erosion preset '{name}' (choose from {', '.join(PRESETS)})")
        return cls(**{**PRESETS[name], **overrides})

    def is_initial_phase(self, phase: int) -> bool:
        return phase < self.initial_phase_count

    def interval_for(self, phase: int) -> float:
        """Seconds to wait before the cycle of the given phase."""
        return self.initial_interval if self.is_initial_phase(phase) else self.standard_interval

    def percentage_for(self, phase: int) -> float:
        """Share of erodable cells removed in the given phase."""
        return self.initial_percentage if self.is_initial_phase(phase) else self.standard_percentage


# Two rate tables have shipped with the game. "classic" is the default.
PRESETS: Dict[str, Dict] = {
    "classic": {
        "initial_interval": 15.0,
        "initial_percentage": 0.05,
        "standard_interval": 10.0,
        "standard_percentage": 0.10,
        "initial_phase_count": 2,
    },
    "brisk": {
        "initial_interval": 15.0,
        "initial_percentage": 0.07,
        "standard_interval": 10.0,
        "standard_percentage": 0.14,
        "initial_phase_count": 1,
    },
}


class ErosionSessionState(BaseModel):
    """Mutable state of one erosion round."""
    active: bool = False
    paused: bool = False
    phase: int = Field(0, ge=0)
    cycle_count: int = Field(0, ge=0)
    final_warning_active: bool = False
    round_failed: bool = False


class ErosionEvent(BaseModel):
    """A lifecycle signal emitted by the controller."""
    type: EventType
    cells: List[Cell] = Field(default_factory=list)
    timestamp: float = 0.0  # scheduler clock, seconds
    cycle: int = 0
    phase: int = 0


class IslandConfig(BaseModel):
    """How a new island is grown around its path."""
    layers: int = Field(3, ge=1, le=5)
    initial_erosion: float = Field(0.25, ge=0, lt=1)
    apply_layer3_pattern: bool = True
    max_distance: int = Field(25, ge=1)  # path stays within a 51x51 grid


class PauseWindow(BaseModel):
    """A span of simulated time during which erosion is paused."""
    start: float = Field(..., ge=0)
    duration: float = Field(..., gt=0)


class SimulationConfig(BaseModel):
    """Configuration for a simulated round."""
    phrase: str = Field(..., min_length=1)
    seed: Optional[int] = None
    preset: str = "classic"
    erosion: Dict[str, Any] = Field(default_factory=dict)  # overrides on top of the preset
    island: IslandConfig = Field(default_factory=IslandConfig)
    complete_after: Optional[float] = Field(None, ge=0)  # player solves the round at this time
    pause_windows: List[PauseWindow] = Field(default_factory=list)
    max_time: float = Field(1800.0, gt=0)
    step: float = Field(1.0, gt=0)  # clock granularity of the run loop
    # Side of the square view grid the path is centered in. Derives the
    # selection offset unless the erosion overrides set one explicitly.
    grid_size: Optional[int] = Field(None, ge=1)

    @field_validator("phrase")
    @classmethod
    def _has_letters(cls, value: str) -> str:
        if not any(ch.isalnum() for ch in value):
            raise ValueError("phrase must contain at least one letter or digit")
        return value

    def erosion_config(self) -> ErosionConfig:
        """Resolve the preset plus overrides into an ErosionConfig."""
        overrides = dict(self.erosion)
        if self.grid_size is not None and "selection_offset" not in overrides:
            offset = center_offset(self.grid_size)
            overrides["selection_offset"] = (offset, offset)
        return ErosionConfig.from_preset(self.preset, **overrides)


class SimulationResult(BaseModel):
    """Result of a simulated round."""
    config: SimulationConfig
    outcome: Outcome
    end_reason: str = ""
    path: str = ""
    duration_seconds: float = 0.0  # simulated time
    cycles: int = 0
    initial_land: int = 0
    final_land: int = 0
    initial_grid: str = ""
    final_grid: str = ""
    events: List[ErosionEvent] = Field(default_factory=list)
