"""
Timed erosion of an island.

The controller runs erosion cycles on a timer. Each cycle finds the land
cells bordering water, picks a share of them, flashes them as a warning and
then removes them. Early phases are slow; later phases erode faster. When
nothing but the path is left and the round is unsolved, the path itself
flashes for a final warning and then sinks, ending the round.

Cycles never overlap: the next cycle is armed only after the previous
removal commits, so every analysis sees the land left by the last cycle.
"""

import logging
import math
import random
import threading
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..erosion.models import Cell, Coord
from ..erosion.adjacency import identify_erodable_cells
from ..erosion.grid import normalize_selection
from ..erosion.selection import select_cells_to_erode
from .island import IslandGrid
from .models import ErosionConfig, ErosionEvent, ErosionSessionState, ErosionStage, EventType
from .scheduler import ArmedTimer, ManualScheduler, Scheduler

logger = logging.getLogger(__name__)

EventListener = Callable[[ErosionEvent], None]


class ErosionController(BaseModel):
    """
    State machine driving erosion for one island.

    Stages: idle -> cycle_pending <-> flashing -> final_warning -> stopped.
    Pausing from any running stage moves to paused; unpausing returns to
    cycle_pending. Every timer callback re-checks the active/paused flags,
    so a fire that races a pause or stop has no effect.

    Attributes:
        grid: Collaborator owning the land, path and selection
        config: Erosion timing and intensity
        scheduler: Timer source; a ManualScheduler if not given
        seed: Optional random seed for reproducible selections
        state: Current session state
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    grid: IslandGrid
    config: ErosionConfig = Field(default_factory=ErosionConfig)
    scheduler: Optional[Scheduler] = None
    seed: Optional[int] = None
    state: ErosionSessionState = Field(default_factory=ErosionSessionState)

    _rng: random.Random = PrivateAttr(default=None)
    _lock: Any = PrivateAttr(default_factory=threading.RLock)
    _cycle_timer: ArmedTimer = PrivateAttr(default=None)
    _final_warning_timer: ArmedTimer = PrivateAttr(default=None)
    _flashing: Dict[Coord, Cell] = PrivateAttr(default_factory=dict)
    _listeners: List[EventListener] = PrivateAttr(default_factory=list)
    _stage: ErosionStage = PrivateAttr(default="idle")

    def model_post_init(self, __context) -> None:
        """Set up the random source and the two timer slots."""
        if self.scheduler is None:
            self.scheduler = ManualScheduler()
        self._rng = random.Random(self.seed)
        self._cycle_timer = ArmedTimer(self.scheduler, "cycle")
        self._final_warning_timer = ArmedTimer(self.scheduler, "final-warning")

    # --- Public API ---

    @property
    def stage(self) -> ErosionStage:
        return self._stage

    @property
    def flashing_cells(self) -> List[Cell]:
        """Cells currently in their warning window."""
        return list(self._flashing.values())

    @property
    def next_cycle_at(self) -> Optional[float]:
        """Scheduler time of the armed cycle timer, if any."""
        return self._cycle_timer.due

    @property
    def final_warning_at(self) -> Optional[float]:
        return self._final_warning_timer.due

    def is_active(self) -> bool:
        return self.state.active

    def is_paused(self) -> bool:
        return self.state.paused

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback for lifecycle events."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        """Start erosion for a new round. Does nothing if already running."""
        with self._lock:
            if self.state.active:
                return

            logger.info("Starting island erosion")
            self.state = ErosionSessionState(active=True)
            self._flashing.clear()
            self._stage = "cycle_pending"
            self.schedule_next_cycle()
            self._emit("erosion-started")

    def stop(self) -> None:
        """Stop erosion, cancelling timers and any pending warning. Idempotent."""
        with self._lock:
            if not self.state.active:
                return

            logger.info("Stopping island erosion")
            self.state.active = False
            self.state.paused = False
            self._cancel_timers()
            self._clear_flashing()
            self._stage = "stopped"
            self._emit("erosion-stopped")

    def pause(self) -> None:
        """
        Pause erosion.

        Cells mid-warning are released rather than removed, and the pending
        countdown is forfeited.
        """
        with self._lock:
            if not self.state.active or self.state.paused:
                return

            logger.info(f"Pausing erosion (phase {self.state.phase + 1})")
            self.state.paused = True
            self._cancel_timers()
            self._clear_flashing()
            self._stage = "paused"
            self._emit("erosion-paused")

    def unpause(self) -> None:
        """Resume erosion with a fresh cycle interval."""
        with self._lock:
            if not self.state.active or not self.state.paused:
                return

            logger.info("Resuming erosion")
            self.state.paused = False
            self.state.final_warning_active = False
            self._stage = "cycle_pending"
            self.schedule_next_cycle()
            self._emit("erosion-unpaused")

    def notify_round_completed(self, is_correct: bool) -> None:
        """A correctly solved round ends erosion immediately."""
        if is_correct:
            logger.info("Round completed correctly")
            self.stop()

    def schedule_next_cycle(self) -> None:
        """Arm the cycle timer for the current phase, replacing any armed one."""
        with self._lock:
            if not self.state.active or self.state.paused:
                return

            interval = self.config.interval_for(self.state.phase)
            logger.debug(
                f"Scheduling next erosion in {interval:g}s (phase {self.state.phase + 1})"
            )
            self._stage = "cycle_pending"
            self._cycle_timer.arm(interval, self.perform_cycle)

    def perform_cycle(self) -> None:
        """
        Run one erosion cycle. Collaborator failures skip the cycle.

        Does nothing while a batch or the path is still flashing; the
        pending removal owns the cycle until it commits.
        """
        with self._lock:
            if not self.state.active or self.state.paused:
                return
            if self._stage in ("flashing", "final_warning"):
                logger.debug(f"Cycle requested during '{self._stage}', ignoring")
                return

            try:
                self._run_cycle()
            except Exception:
                logger.exception(f"Erosion cycle #{self.state.cycle_count} failed, rescheduling")
                self._clear_flashing()
                self.schedule_next_cycle()

    # --- Cycle internals ---

    def _run_cycle(self) -> None:
        if self.grid.is_round_completed_correctly():
            logger.info("Phrase already completed, stopping erosion")
            self.stop()
            return

        self.state.cycle_count += 1
        phase = self.state.phase
        is_initial = self.config.is_initial_phase(phase)
        percentage = self.config.percentage_for(phase)

        land = self.grid.get_land_cells()
        if not land:
            logger.warning(f"No land cells available for cycle #{self.state.cycle_count}, skipping")
            self.schedule_next_cycle()
            return

        selected = normalize_selection(self.grid.get_selected_cells(), self.config.selection_offset)
        erodable = identify_erodable_cells(
            land,
            self.grid.get_path_cells(),
            excluded_cells=selected,
            in_flight_cells=self._flashing,
        )

        if not erodable:
            logger.info("No erodable cells remaining, preparing to erode the path")
            self._prepare_path_erosion()
            return

        count = max(1, math.ceil(len(erodable) * percentage))
        cells = select_cells_to_erode(erodable, count, rng=self._rng)
        logger.info(
            f"Erosion cycle #{self.state.cycle_count} (phase {phase + 1}): "
            f"eroding {len(cells)} of {len(erodable)} erodable cells"
        )

        self._start_flashing(cells)
        self._stage = "flashing"
        self._cycle_timer.arm(
            self.config.flash_duration,
            lambda: self._commit_cycle(cells, is_initial),
        )

    def _commit_cycle(self, cells: List[Cell], is_initial: bool) -> None:
        with self._lock:
            if not self.state.active or self.state.paused:
                return

            try:
                self._remove_cells(cells)
            except Exception:
                logger.exception(f"Removing {len(cells)} cells failed, releasing them")
                self._clear_flashing()

            if is_initial:
                self.state.phase += 1
            self.schedule_next_cycle()

    def _prepare_path_erosion(self) -> None:
        if self.state.final_warning_active:
            return

        path = self.grid.get_path_cells()
        logger.info(
            f"Final warning: {len(path)} path cells will erode in "
            f"{self.config.final_warning_duration:g}s"
        )
        self._start_flashing(path)
        self._final_warning_timer.arm(
            self.config.final_warning_duration,
            lambda: self._erode_path(path),
        )
        # Only once the timer is armed; a failed flash retries next cycle
        self.state.final_warning_active = True
        self._stage = "final_warning"

    def _erode_path(self, path: List[Cell]) -> None:
        with self._lock:
            if not self.state.active or self.state.paused:
                return

            logger.info("Final warning expired, eroding path cells")
            try:
                self._remove_cells(path)
            except Exception:
                logger.exception("Removing path cells failed")
            self.state.round_failed = True
            self._emit("path-eroded", path)
            self.stop()

    # --- Helpers ---

    def _start_flashing(self, cells: List[Cell]) -> None:
        self.grid.start_flashing(cells)
        for cell in cells:
            self._flashing[cell.key] = cell
        self._emit("cells-flashing", cells)

    def _clear_flashing(self) -> None:
        self._flashing.clear()
        try:
            self.grid.stop_flashing()
        except Exception:
            logger.exception("Grid failed to stop flashing")

    def _remove_cells(self, cells: List[Cell]) -> None:
        self.grid.remove_cells(cells)
        for cell in cells:
            self._flashing.pop(cell.key, None)
        self._emit("cells-eroded", cells)

    def _cancel_timers(self) -> None:
        self._cycle_timer.cancel()
        self._final_warning_timer.cancel()

    def _emit(self, event_type: EventType, cells: Optional[List[Cell]] = None) -> None:
        event = ErosionEvent(
            type=event_type,
            cells=list(cells or []),
            timestamp=self.scheduler.now(),
            cycle=self.state.cycle_count,
            phase=self.state.phase,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed on '{event_type}' event")

    def get_state(self) -> Dict:
        """Current controller state as a dictionary."""
        return {
            **self.state.model_dump(),
            "stage": self._stage,
            "flashing": len(self._flashing),
            "next_cycle_at": self.next_cycle_at,
            "final_warning_at": self.final_warning_at,
        }
