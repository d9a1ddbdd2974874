"""Checkpoint course and the race state machine."""

from dataclasses import FrozenInstanceError, dataclass, replace
from enum import Enum, auto
from typing import Callable, Sequence
import logging
import math
import time

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]

DEFAULT_CHECKPOINT_RADIUS = 5.0

# Route through the city, in flying order. The last entry is the finish line.
DEFAULT_COURSE: tuple[Vec3, ...] = (
    (0.0, 8.0, -15.0),
    (20.0, 12.0, -25.0),
    (-15.0, 6.0, -35.0),
    (10.0, 15.0, -50.0),
    (-25.0, 8.0, -60.0),
    (5.0, 20.0, -75.0),
    (-10.0, 5.0, -85.0),
    (0.0, 10.0, -100.0),
)


@dataclass
class Checkpoint:
    """A capture sphere the drone must fly through."""

    id: str
    position: Vec3
    radius: float = DEFAULT_CHECKPOINT_RADIUS
    passed: bool = False
    is_finish: bool = False

    def __setattr__(self, name: str, value) -> None:
        # Geometry is fixed once set; only the race flags change.
        if name in ("id", "position", "radius") and name in self.__dict__:
            raise FrozenInstanceError(f"cannot assign to field {name!r}")
        super().__setattr__(name, value)

    def distance_to(self, position: Sequence[float]) -> float:
        """Euclidean distance from ``position`` to the checkpoint centre."""
        dx = position[0] - self.position[0]
        dy = position[1] - self.position[1]
        dz = position[2] - self.position[2]
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def contains(self, position: Sequence[float]) -> bool:
        """Check if ``position`` is inside the capture sphere (boundary included)."""
        return self.distance_to(position) <= self.radius


@dataclass(frozen=True)
class CollisionResult:
    """Outcome of one check_collision call."""

    passed: bool = False
    checkpoint: Checkpoint | None = None
    completed: bool = False
    elapsed_time: float | None = None  # seconds, only set on the finishing capture


class RaceState(Enum):
    """Lifecycle of a race."""

    IDLE = auto()  # Not started, or reset
    RACING = auto()  # Timer running, targeting checkpoints[current_index]
    FINISHED = auto()  # Finish checkpoint captured


def build_course(
    positions: Sequence[Vec3],
    radius: float = DEFAULT_CHECKPOINT_RADIUS,
) -> list[Checkpoint]:
    """Build checkpoints from positions, flagging the last one as the finish."""
    last = len(positions) - 1
    return [
        Checkpoint(
            id=f"checkpoint-{i}",
            position=tuple(float(v) for v in pos),
            radius=radius,
            is_finish=i == last,
        )
        for i, pos in enumerate(positions)
    ]


class RaceTrack:
    """
    Ordered checkpoint course with a lap timer.

    Only the checkpoint at ``current_index`` can be captured; flying through
    any other checkpoint does nothing. The best completion time survives
    restarts and resets for the lifetime of the object.
    """

    def __init__(
        self,
        checkpoints: Sequence[Checkpoint] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if checkpoints is None:
            checkpoints = build_course(DEFAULT_COURSE)
        checkpoints = [replace(cp) for cp in checkpoints]
        if not checkpoints:
            raise ValueError("course needs at least one checkpoint")
        for cp in checkpoints[:-1]:
            if cp.is_finish:
                raise ValueError(f"only the last checkpoint may be the finish, got {cp.id}")
        for cp in checkpoints:
            if cp.radius <= 0:
                raise ValueError(f"checkpoint radius must be positive, got {cp.radius} for {cp.id}")
        checkpoints[-1].is_finish = True

        self.checkpoints = checkpoints
        self.clock = clock
        self.current_index = 0
        self.start_time: float | None = None
        self.state = RaceState.IDLE
        self._best_time: float | None = None

    def start_race(self) -> None:
        """Clear progress and start the timer."""
        self._clear_progress()
        self.start_time = self.clock()
        self.state = RaceState.RACING
        logger.info("Race started: %d checkpoints", len(self.checkpoints))

    def reset(self) -> None:
        """Clear progress without starting the timer."""
        self._clear_progress()
        self.start_time = None
        self.state = RaceState.IDLE

    def _clear_progress(self) -> None:
        self.current_index = 0
        for cp in self.checkpoints:
            cp.passed = False

    def check_collision(self, position: Sequence[float]) -> CollisionResult:
        """Test ``position`` against the current target and advance on capture."""
        if self.state == RaceState.FINISHED:
            return CollisionResult(passed=False, completed=True)
        if self.state == RaceState.IDLE:
            return CollisionResult()

        checkpoint = self.checkpoints[self.current_index]
        if not checkpoint.contains(position):
            return CollisionResult()

        checkpoint.passed = True
        self.current_index += 1

        if checkpoint.is_finish:
            self.state = RaceState.FINISHED
            elapsed = self.clock() - self.start_time
            if self._best_time is None or elapsed < self._best_time:
                self._best_time = elapsed
                logger.info("Race completed in %.3fs (new best)", elapsed)
            else:
                logger.info("Race completed in %.3fs (best %.3fs)", elapsed, self._best_time)
            return CollisionResult(
                passed=True,
                checkpoint=replace(checkpoint),
                completed=True,
                elapsed_time=elapsed,
            )

        logger.info(
            "Checkpoint passed: %s (%d/%d)",
            checkpoint.id,
            self.current_index,
            len(self.checkpoints),
        )
        return CollisionResult(passed=True, checkpoint=replace(checkpoint), completed=False)

    def current_checkpoint(self) -> Checkpoint | None:
        """Copy of the current target checkpoint, or None if the course is complete."""
        if self.current_index >= len(self.checkpoints):
            return None
        return replace(self.checkpoints[self.current_index])

    def all_checkpoints(self) -> tuple[Checkpoint, ...]:
        """Copies of every checkpoint in course order."""
        return tuple(replace(cp) for cp in self.checkpoints)

    def progress(self) -> float:
        """Fraction of the course completed, in [0, 1]."""
        return self.current_index / len(self.checkpoints)

    def best_time(self) -> float | None:
        """Fastest completion time in seconds, or None before the first finish."""
        return self._best_time

    def is_complete(self) -> bool:
        """Check if the finish checkpoint has been captured."""
        return self.state == RaceState.FINISHED

    def checkpoints_passed(self) -> int:
        """Number of checkpoints captured in the current run."""
        return self.current_index

    def checkpoints_total(self) -> int:
        """Total number of checkpoints in the course."""
        return len(self.checkpoints)
