"""Drone kinematic state and the arcade flight integrator."""

from dataclasses import dataclass, field
import logging
import math

import numpy as np

from .config import FlightConfig

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


def _clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max, mapping NaN to zero first."""
    if math.isnan(value):
        value = 0.0
    return max(min_val, min(max_val, value))


@dataclass(frozen=True)
class ControlInputs:
    """Normalized stick inputs for one frame."""

    throttle: float = 0.0  # [0, 1]
    pitch: float = 0.0  # [-1, 1]
    roll: float = 0.0  # [-1, 1]
    yaw: float = 0.0  # [-1, 1]

    def clamped(self) -> "ControlInputs":
        """Return a copy with every axis clamped to its range (NaN -> 0)."""
        return ControlInputs(
            throttle=_clamp(self.throttle, 0.0, 1.0),
            pitch=_clamp(self.pitch, -1.0, 1.0),
            roll=_clamp(self.roll, -1.0, 1.0),
            yaw=_clamp(self.yaw, -1.0, 1.0),
        )


@dataclass
class DroneKinematics:
    """Mutable kinematic state, owned by a FlightIntegrator.

    rotation and angular_velocity are ordered (pitch, yaw, roll), i.e. about
    the X, Y and Z axes.
    """

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def copy(self) -> "DroneKinematics":
        """Return a deep copy of this state."""
        return DroneKinematics(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            acceleration=self.acceleration.copy(),
            rotation=self.rotation.copy(),
            angular_velocity=self.angular_velocity.copy(),
        )


@dataclass(frozen=True)
class KinematicSnapshot:
    """Value copy of the drone state handed to callers each frame."""

    position: Vec3
    rotation: Vec3  # (pitch, yaw, roll)
    velocity: Vec3
    speed: float


def _as_vec3(arr: np.ndarray) -> Vec3:
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def rotation_matrix(pitch: float, yaw: float, roll: float) -> np.ndarray:
    """Rotation matrix for intrinsic XYZ Euler angles (Rx @ Ry @ Rz)."""
    cx, sx = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    cz, sz = math.cos(roll), math.sin(roll)

    rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rx @ ry @ rz


def body_up(rotation: np.ndarray) -> np.ndarray:
    """World-frame direction of the drone's local +Y axis."""
    return rotation_matrix(*rotation)[:, 1]


class FlightIntegrator:
    """Explicit Euler integrator for the arcade quadcopter model.

    Attitude is driven directly by the sticks: angular velocity is the stick
    deflection times ``rotation_gain`` every frame, not the result of torques.
    Thrust acts along the drone's up axis, so tilting converts part of it into
    horizontal acceleration.

    Usage:
        flight = FlightIntegrator()
        snap = flight.update(ControlInputs(throttle=0.8, pitch=-0.2), dt=1 / 60)
    """

    def __init__(self, config: FlightConfig | None = None):
        self.config = config or FlightConfig()
        self.state = DroneKinematics()
        self.thrust = 0.0
        self.reset()
        logger.debug("Flight integrator ready: %s", self.config)

    @property
    def kinematics(self) -> DroneKinematics:
        """Copy of the internal state (callers cannot mutate the original)."""
        return self.state.copy()

    def hover_throttle(self) -> float:
        """Throttle whose thrust exactly cancels gravity when level."""
        if self.config.max_thrust == 0:
            return 1.0
        return _clamp(self.config.weight / self.config.max_thrust, 0.0, 1.0)

    def snapshot(self) -> KinematicSnapshot:
        """Current state as plain values, without advancing time."""
        return KinematicSnapshot(
            position=_as_vec3(self.state.position),
            rotation=_as_vec3(self.state.rotation),
            velocity=_as_vec3(self.state.velocity),
            speed=float(np.linalg.norm(self.state.velocity)),
        )

    def reset(self, position: Vec3 | None = None) -> None:
        """Put the drone back at ``position`` (default: spawn) at rest, level."""
        spawn = self.config.spawn_position if position is None else position
        self.state.position = np.array(spawn, dtype=float)
        self.state.velocity = np.zeros(3)
        self.state.acceleration = np.zeros(3)
        self.state.rotation = np.zeros(3)
        self.state.angular_velocity = np.zeros(3)
        self.thrust = 0.0

    def update(self, controls: ControlInputs, dt: float) -> KinematicSnapshot:
        """Advance the state by ``dt`` seconds and return a snapshot.

        A non-positive or non-finite ``dt`` leaves the state untouched.
        """
        if not math.isfinite(dt) or dt <= 0:
            return self.snapshot()

        cfg = self.config
        s = self.state
        controls = controls.clamped()

        self.thrust = controls.throttle * cfg.max_thrust

        # Gravity
        forces = np.array([0.0, cfg.mass * cfg.gravity, 0.0])

        # Thrust along the body up axis
        forces += self.thrust * body_up(s.rotation)

        # Quadratic drag opposing motion
        speed = float(np.linalg.norm(s.velocity))
        if speed > 0:
            drag_magnitude = 0.5 * cfg.air_density * cfg.drag_coefficient * speed * speed
            forces -= (s.velocity / speed) * drag_magnitude

        s.acceleration = forces / cfg.mass

        s.velocity = s.velocity + s.acceleration * dt
        speed = float(np.linalg.norm(s.velocity))
        if speed > cfg.max_speed:
            s.velocity = s.velocity * (cfg.max_speed / speed)

        s.position = s.position + s.velocity * dt

        # Ground plane: no penetration, upward motion kept as-is
        if s.position[1] < cfg.ground_clearance:
            s.position[1] = cfg.ground_clearance
            s.velocity[1] = max(0.0, s.velocity[1])

        # Attitude straight from the sticks
        s.angular_velocity = np.array([controls.pitch, controls.yaw, controls.roll]) * cfg.rotation_gain
        s.rotation = s.rotation + s.angular_velocity * dt
        s.rotation[0] = _clamp(s.rotation[0], -cfg.max_tilt, cfg.max_tilt)
        s.rotation[2] = _clamp(s.rotation[2], -cfg.max_tilt, cfg.max_tilt)

        return self.snapshot()
