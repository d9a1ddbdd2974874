"""Game session: one drone and one course driven frame by frame."""

from dataclasses import dataclass
from enum import Enum
import logging
import math

from .drone import ControlInputs, FlightIntegrator, KinematicSnapshot
from .race import CollisionResult, RaceTrack

logger = logging.getLogger(__name__)


class GameMode(Enum):
    """What the player is doing."""

    FREEFLY = "freefly"
    ROUTE = "route"


@dataclass(frozen=True)
class FrameResult:
    """Everything the host needs after one frame."""

    snapshot: KinematicSnapshot
    collision: CollisionResult | None = None  # None outside route mode or while paused


def format_time(seconds: float) -> str:
    """Format a duration as MM:SS for the HUD."""
    total = max(0, int(seconds))
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"


class GameSession:
    """
    Owns the flight integrator and race track for one player.

    The session is paused until ``start`` is called. In route mode it pauses
    itself as soon as the finish checkpoint is captured.
    """

    def __init__(
        self,
        flight: FlightIntegrator | None = None,
        track: RaceTrack | None = None,
    ):
        self.flight = flight or FlightIntegrator()
        self.track = track or RaceTrack()
        self.mode = GameMode.FREEFLY
        self.is_playing = False
        self.game_time = 0.0
        self.last_result: CollisionResult | None = None

    def start(self, mode: GameMode) -> KinematicSnapshot:
        """Begin a new flight in ``mode`` from the spawn point."""
        self.mode = mode
        self.game_time = 0.0
        self.last_result = None
        self.flight.reset()
        if mode == GameMode.ROUTE:
            self.track.start_race()
        else:
            self.track.reset()
        self.is_playing = True
        logger.info("Session started in %s mode", mode.value)
        return self.flight.snapshot()

    def pause(self) -> None:
        """Freeze the simulation."""
        self.is_playing = False

    def resume(self) -> None:
        """Continue a paused simulation."""
        self.is_playing = True

    def stop(self) -> None:
        """Leave the flight: drone back to spawn, course cleared, not playing."""
        self.is_playing = False
        self.game_time = 0.0
        self.last_result = None
        self.flight.reset()
        self.track.reset()

    def step(self, controls: ControlInputs, dt: float) -> FrameResult:
        """Advance one frame. A paused session returns the frozen state."""
        if not self.is_playing:
            return FrameResult(snapshot=self.flight.snapshot())

        snapshot = self.flight.update(controls, dt)
        if math.isfinite(dt) and dt > 0:
            self.game_time += dt

        if self.mode != GameMode.ROUTE:
            return FrameResult(snapshot=snapshot)

        collision = self.track.check_collision(snapshot.position)
        self.last_result = collision
        if collision.completed:
            self.pause()
        return FrameResult(snapshot=snapshot, collision=collision)
