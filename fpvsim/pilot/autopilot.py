"""Waypoint autopilot that flies the arcade model through checkpoints."""

from enum import Enum, auto
from dataclasses import dataclass
import math

from fpvsim.sim.config import FlightConfig
from fpvsim.sim.drone import ControlInputs, KinematicSnapshot
from fpvsim.sim.race import Checkpoint


class PilotMode(Enum):
    """States for the autopilot."""

    HOVER = auto()  # No target, hold position level
    TRACK = auto()  # Steering toward the current checkpoint


@dataclass
class PilotConfig:
    """
    Tunable gains for the waypoint autopilot.

    Horizontal and vertical loops are PD on position error; attitude is
    steered with stick inputs proportional to the tilt error.
    """

    # Horizontal (X/Z) position loop
    horizontal_kp: float = 0.5  # m/s² per m of error
    horizontal_kd: float = 1.0  # m/s² per m/s of velocity
    tilt_limit: float = 0.35  # rad, stay well inside the airframe limit

    # Vertical loop
    vertical_kp: float = 1.2
    vertical_kd: float = 1.6

    # Attitude
    attitude_gain: float = 3.0  # stick per rad of tilt error
    yaw_gain: float = 1.0  # stick per rad of heading error

    def __post_init__(self) -> None:
        if not 0 < self.tilt_limit < math.pi / 2:
            raise ValueError(f"tilt_limit must be in (0, pi/2), got {self.tilt_limit}")
        if self.attitude_gain <= 0:
            raise ValueError(f"attitude_gain must be positive, got {self.attitude_gain}")


class WaypointPilot:
    """
    Two-state autopilot: HOVER when there is nothing to chase, TRACK otherwise.

    Heading is held at zero yaw so the body up axis maps simply onto world
    axes: positive roll pushes toward -X, positive pitch toward +Z.
    """

    def __init__(self, flight: FlightConfig | None = None, config: PilotConfig | None = None):
        self.flight = flight or FlightConfig()
        self.config = config or PilotConfig()
        self.state = PilotMode.HOVER
        self.hold_position: tuple[float, float, float] | None = None

    def reset(self) -> None:
        """Forget the hover anchor and go back to HOVER."""
        self.state = PilotMode.HOVER
        self.hold_position = None

    def step(
        self, snapshot: KinematicSnapshot, target: Checkpoint | None
    ) -> tuple[str, ControlInputs]:
        """Return (state_name, controls) for this frame."""
        if target is None:
            if self.state != PilotMode.HOVER or self.hold_position is None:
                self.hold_position = snapshot.position
            self.state = PilotMode.HOVER
            goal = self.hold_position
        else:
            self.state = PilotMode.TRACK
            self.hold_position = None
            goal = target.position

        return self.state.name, self._steer_to(snapshot, goal)

    def _steer_to(self, snapshot: KinematicSnapshot, goal: tuple[float, float, float]) -> ControlInputs:
        cfg = self.config
        g = abs(self.flight.gravity)
        x, y, z = snapshot.position
        vx, vy, vz = snapshot.velocity
        pitch, yaw, roll = snapshot.rotation

        # Desired horizontal acceleration -> desired tilt
        ax = cfg.horizontal_kp * (goal[0] - x) - cfg.horizontal_kd * vx
        az = cfg.horizontal_kp * (goal[2] - z) - cfg.horizontal_kd * vz
        roll_target = _clamp(-math.atan2(ax, g), -cfg.tilt_limit, cfg.tilt_limit)
        pitch_target = _clamp(math.atan2(az, g), -cfg.tilt_limit, cfg.tilt_limit)

        # Vertical: thrust to cancel gravity plus the PD correction, scaled for tilt
        ay = cfg.vertical_kp * (goal[1] - y) - cfg.vertical_kd * vy
        tilt_factor = max(0.2, math.cos(pitch) * math.cos(roll))
        thrust = self.flight.mass * (g + ay) / tilt_factor
        throttle = thrust / self.flight.max_thrust if self.flight.max_thrust > 0 else 0.0

        return ControlInputs(
            throttle=throttle,
            pitch=cfg.attitude_gain * (pitch_target - pitch),
            roll=cfg.attitude_gain * (roll_target - roll),
            yaw=-cfg.yaw_gain * yaw,
        ).clamped()


def _clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))
