"""Erosion runtime: controller, grid collaborator, timers and simulation."""

from .models import (
    EventType,
    ErosionStage,
    Outcome,
    ErosionConfig,
    PRESETS,
    ErosionSessionState,
    ErosionEvent,
    IslandConfig,
    PauseWindow,
    SimulationConfig,
    SimulationResult,
)
from .scheduler import Scheduler, TimerHandle, ManualScheduler, AsyncioScheduler, ArmedTimer
from .island import IslandGrid, InMemoryIsland
from .controller import ErosionController
from .builder import LETTER_DISTRIBUTION, parse_letters, generate_path, grow_land, build_island, create_island
from .simulation import setup_round, run_simulation

__all__ = [
    "EventType",
    "ErosionStage",
    "Outcome",
    "ErosionConfig",
    "PRESETS",
    "ErosionSessionState",
    "ErosionEvent",
    "IslandConfig",
    "PauseWindow",
    "SimulationConfig",
    "SimulationResult",
    "Scheduler",
    "TimerHandle",
    "ManualScheduler",
    "AsyncioScheduler",
    "ArmedTimer",
    "IslandGrid",
    "InMemoryIsland",
    "ErosionController",
    "LETTER_DISTRIBUTION",
    "parse_letters",
    "generate_path",
    "grow_land",
    "build_island",
    "create_island",
    "setup_round",
    "run_simulation",
]
