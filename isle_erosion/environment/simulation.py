"""
Simulated erosion rounds.

Runs the controller against an in-memory island on a virtual clock, so a
full round (minutes of game time) completes instantly and reproducibly.
"""

import logging
from typing import Callable, List, Optional, Tuple

from .builder import create_island
from .controller import ErosionController
from .models import ErosionEvent, SimulationConfig, SimulationResult
from .island import InMemoryIsland
from .scheduler import ManualScheduler, Scheduler
from ..utils.grid_visualizer import render_island

logger = logging.getLogger(__name__)


def setup_round(
    config: SimulationConfig,
    scheduler: Scheduler,
) -> Tuple[InMemoryIsland, ErosionController]:
    """
    Build the island and its controller for a round.

    The island view offset and the controller selection offset both come
    from the resolved erosion config, so selections round-trip.
    """
    erosion = config.erosion_config()
    island = create_island(
        config.phrase,
        config.island,
        seed=config.seed,
        view_offset=erosion.selection_offset,
    )
    controller = ErosionController(
        grid=island,
        config=erosion,
        scheduler=scheduler,
        seed=config.seed,
    )
    return island, controller


def run_simulation(
    config: SimulationConfig,
    on_event: Optional[Callable[[ErosionEvent], None]] = None,
) -> SimulationResult:
    """
    Play one round of erosion to its end.

    The round ends when the path erodes (failed), when the player completes
    it at `complete_after` (completed), or at `max_time` (timeout).

    Args:
        config: Simulation configuration
        on_event: Optional callback for every controller event

    Returns:
        SimulationResult with the event log and final island
    """
    scheduler = ManualScheduler()
    island, controller = setup_round(config, scheduler)

    events: List[ErosionEvent] = []
    controller.subscribe(events.append)
    if on_event:
        controller.subscribe(on_event)

    initial_land = island.land_count
    initial_grid = render_island(island.get_land_cells(), island.path)

    if config.complete_after is not None:
        def complete() -> None:
            island.mark_completed(is_correct=True)
            controller.notify_round_completed(True)

        scheduler.call_later(config.complete_after, complete)

    for window in config.pause_windows:
        scheduler.call_later(window.start, controller.pause)
        scheduler.call_later(window.start + window.duration, controller.unpause)

    logger.info(f"Simulating round for '{island.letters()}' ({initial_land} cells)")
    controller.start()

    while controller.is_active() and scheduler.now() < config.max_time:
        scheduler.advance(min(config.step, config.max_time - scheduler.now()))

    if controller.state.round_failed:
        outcome, end_reason = "failed", "Path eroded: the sea has risen too high"
    elif island.is_round_completed_correctly():
        outcome, end_reason = "completed", "Phrase completed"
    else:
        outcome, end_reason = "timeout", f"Time limit reached ({config.max_time:g}s)"
        controller.stop()

    return SimulationResult(
        config=config,
        outcome=outcome,
        end_reason=end_reason,
        path=island.letters(),
        duration_seconds=scheduler.now(),
        cycles=controller.state.cycle_count,
        initial_land=initial_land,
        final_land=island.land_count,
        initial_grid=initial_grid,
        final_grid=render_island(island.get_land_cells(), island.path),
        events=events,
    )
