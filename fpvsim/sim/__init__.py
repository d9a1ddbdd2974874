"""Core simulation module: flight integrator, race track and session."""

from .config import FlightConfig, SimConfig
from .drone import ControlInputs, DroneKinematics, FlightIntegrator, KinematicSnapshot
from .race import Checkpoint, CollisionResult, RaceState, RaceTrack, build_course
from .session import FrameResult, GameMode, GameSession, format_time
from .loop import RunResult, SimClock, TickLogger, run_simulation

__all__ = [
    "FlightConfig",
    "SimConfig",
    "ControlInputs",
    "DroneKinematics",
    "FlightIntegrator",
    "KinematicSnapshot",
    "Checkpoint",
    "CollisionResult",
    "RaceState",
    "RaceTrack",
    "build_course",
    "FrameResult",
    "GameMode",
    "GameSession",
    "format_time",
    "RunResult",
    "SimClock",
    "TickLogger",
    "run_simulation",
]
