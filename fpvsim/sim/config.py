"""Flight model and simulation loop configuration."""

from dataclasses import dataclass
import math


@dataclass
class FlightConfig:
    """Physical constants and handling limits for the arcade flight model."""

    # Airframe
    mass: float = 1.5  # kg
    max_thrust: float = 20.0  # N at full throttle
    drag_coefficient: float = 0.1
    gravity: float = -9.81  # m/s², along world Y (negative = down)
    air_density: float = 1.225  # kg/m³

    # Limits
    max_speed: float = 50.0  # m/s, hard clamp on |velocity|
    ground_clearance: float = 0.5  # m, lowest allowed position.y
    max_tilt: float = math.pi / 3  # rad, pitch/roll clamp

    # Handling
    rotation_gain: float = 2.0  # rad/s per unit stick input

    spawn_position: tuple[float, float, float] = (0.0, 10.0, 0.0)

    def __post_init__(self) -> None:
        if self.mass <= 0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.max_thrust < 0:
            raise ValueError(f"max_thrust must be non-negative, got {self.max_thrust}")
        if self.drag_coefficient < 0:
            raise ValueError(f"drag_coefficient must be non-negative, got {self.drag_coefficient}")
        if self.gravity > 0:
            raise ValueError(f"gravity must point down (<= 0), got {self.gravity}")
        if self.max_speed <= 0:
            raise ValueError(f"max_speed must be positive, got {self.max_speed}")
        if not 0 < self.max_tilt < math.pi / 2:
            raise ValueError(f"max_tilt must be in (0, pi/2), got {self.max_tilt}")
        if len(self.spawn_position) != 3:
            raise ValueError("spawn_position must have 3 components")
        self.spawn_position = tuple(float(v) for v in self.spawn_position)

    @property
    def weight(self) -> float:
        """Magnitude of the gravity force (N)."""
        return self.mass * abs(self.gravity)


@dataclass
class SimConfig:
    """Configuration for the headless simulation loop."""

    # Timing
    hz: int = 60  # Tick rate (Hz)

    # World bounds, Y up; the course runs toward -Z
    bounds_min: tuple[float, float, float] = (-150.0, 0.0, -200.0)
    bounds_max: tuple[float, float, float] = (150.0, 120.0, 50.0)

    # Termination
    max_time: float = 120.0  # Max simulation time (seconds)

    def __post_init__(self) -> None:
        if self.hz <= 0:
            raise ValueError(f"hz must be positive, got {self.hz}")
        if self.max_time <= 0:
            raise ValueError(f"max_time must be positive, got {self.max_time}")
        if any(lo > hi for lo, hi in zip(self.bounds_min, self.bounds_max)):
            raise ValueError("bounds_min must not exceed bounds_max")

    @property
    def dt(self) -> float:
        """Time step in seconds."""
        return 1.0 / self.hz
