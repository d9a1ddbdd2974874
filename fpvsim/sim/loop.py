"""Fixed timestep simulation loop with logging."""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Callable, Any
import json
import logging
import time

from .config import SimConfig
from .drone import ControlInputs, KinematicSnapshot
from .race import Checkpoint, CollisionResult, RaceState
from .session import GameMode, GameSession

logger = logging.getLogger(__name__)

Pilot = Callable[[KinematicSnapshot, Checkpoint | None], tuple[str, ControlInputs]]


@dataclass
class RunResult:
    """Final scoring after simulation completes."""

    time_elapsed: float = 0.0
    checkpoints_passed: int = 0
    checkpoints_total: int = 0
    completed: bool = False
    race_time: float | None = None
    best_time: float | None = None
    out_of_bounds: bool = False
    termination_reason: str = ""


class SimClock:
    """Simulated time source, so race timing follows ticks rather than the wall."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def advance(self, dt: float) -> None:
        self.now += dt

    def __call__(self) -> float:
        return self.now


class TickLogger:
    """Logs each tick for replay and debugging."""

    def __init__(self, log_dir: Path | None = None):
        self.log_dir = log_dir
        self.entries: list[dict[str, Any]] = []
        self.config_snapshot: dict[str, Any] | None = None
        self.result: dict[str, Any] | None = None

    def set_config(self, config: Any) -> None:
        """Store config snapshot for the log."""
        self.config_snapshot = asdict(config)

    def set_result(self, result: RunResult) -> None:
        """Store the run outcome for the log."""
        self.result = asdict(result)

    def log_tick(
        self,
        tick: int,
        time: float,
        snapshot: KinematicSnapshot,
        pilot_state: str,
        controls: ControlInputs,
        collision: CollisionResult | None = None,
    ) -> None:
        """Log a single tick."""
        entry: dict[str, Any] = {
            "tick": tick,
            "t": round(time, 4),
            "state": {
                "position": [round(v, 3) for v in snapshot.position],
                "rotation": [round(v, 3) for v in snapshot.rotation],
                "velocity": [round(v, 3) for v in snapshot.velocity],
                "speed": round(snapshot.speed, 3),
            },
            "pilot": pilot_state,
            "controls": {
                "throttle": round(controls.throttle, 3),
                "pitch": round(controls.pitch, 3),
                "roll": round(controls.roll, 3),
                "yaw": round(controls.yaw, 3),
            },
        }
        if collision is not None and (collision.passed or collision.completed):
            entry["race"] = {
                "checkpoint": collision.checkpoint.id if collision.checkpoint else None,
                "completed": collision.completed,
                "elapsed": collision.elapsed_time,
            }
        self.entries.append(entry)

    def save(self, filename: str) -> Path | None:
        """Write config, outcome, race events and ticks to ``log_dir/filename``."""
        if self.log_dir is None:
            return None

        self.log_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.log_dir / filename
        events = [{"tick": e["tick"], "t": e["t"], **e["race"]} for e in self.entries if "race" in e]
        filepath.write_text(
            json.dumps(
                {
                    "config": self.config_snapshot,
                    "result": self.result,
                    "race_events": events,
                    "tick_count": len(self.entries),
                    "ticks": self.entries,
                },
                indent=2,
            )
        )
        return filepath


def is_out_of_bounds(position: tuple[float, float, float], config: SimConfig) -> bool:
    """Check if the drone is outside the world bounds."""
    for value, lo, hi in zip(position, config.bounds_min, config.bounds_max):
        if value < lo or value > hi:
            return True
    return False


def run_simulation(
    config: SimConfig,
    session: GameSession,
    pilot: Pilot,
    mode: GameMode = GameMode.ROUTE,
    tick_logger: TickLogger | None = None,
    realtime: bool = False,
) -> tuple[RunResult, KinematicSnapshot]:
    """
    Run the simulation loop.

    Args:
        config: Simulation configuration
        session: Session owning the drone and the course
        pilot: Function that takes (snapshot, target checkpoint) and returns (state, controls)
        mode: Route runs the timed course, free flight just flies until timeout
        tick_logger: Optional tick logger
        realtime: If True, sleep to maintain real-time speed

    Returns:
        Tuple of (RunResult, final KinematicSnapshot)

    Race timing runs on a simulated clock for the duration of the call. The
    track's own clock is put back afterwards, and an unfinished race keeps
    its elapsed time on it.
    """
    track = session.track
    clock = SimClock()
    host_clock = track.clock
    track.clock = clock
    try:
        result, snapshot = _run_ticks(config, session, pilot, mode, clock, tick_logger, realtime)
    finally:
        track.clock = host_clock
        if track.state == RaceState.RACING:
            track.start_time = host_clock() - (clock() - track.start_time)

    if tick_logger:
        tick_logger.set_result(result)
    return result, snapshot


def _run_ticks(
    config: SimConfig,
    session: GameSession,
    pilot: Pilot,
    mode: GameMode,
    clock: SimClock,
    tick_logger: TickLogger | None,
    realtime: bool,
) -> tuple[RunResult, KinematicSnapshot]:
    dt = config.dt
    tick = 0
    sim_time = 0.0
    snapshot = session.start(mode)

    result = RunResult(checkpoints_total=session.track.checkpoints_total())

    if tick_logger:
        tick_logger.set_config(config)

    wall_start = time.perf_counter()

    while True:
        # Check termination conditions
        if mode == GameMode.ROUTE and session.track.is_complete():
            result.completed = True
            result.termination_reason = "course_complete"
            break

        if sim_time >= config.max_time:
            result.termination_reason = "timeout"
            break

        if is_out_of_bounds(snapshot.position, config):
            result.out_of_bounds = True
            result.termination_reason = "out_of_bounds"
            break

        target = session.track.current_checkpoint() if mode == GameMode.ROUTE else None
        pilot_state, controls = pilot(snapshot, target)

        # Physics, then race check against the new position
        clock.advance(dt)
        frame = session.step(controls, dt)
        snapshot = frame.snapshot

        if tick_logger:
            tick_logger.log_tick(tick, sim_time, snapshot, pilot_state, controls, frame.collision)

        if frame.collision is not None and frame.collision.completed and frame.collision.passed:
            result.race_time = frame.collision.elapsed_time

        # Advance time
        tick += 1
        sim_time += dt

        # Real-time pacing
        if realtime:
            target_wall = wall_start + sim_time
            now = time.perf_counter()
            if now < target_wall:
                time.sleep(target_wall - now)

    session.pause()
    logger.info(
        "Run finished: %s after %.2fs (%d/%d checkpoints)",
        result.termination_reason,
        sim_time,
        session.track.checkpoints_passed(),
        result.checkpoints_total,
    )

    # Finalize result
    result.time_elapsed = sim_time
    result.checkpoints_passed = session.track.checkpoints_passed()
    result.best_time = session.track.best_time()

    return result, snapshot
