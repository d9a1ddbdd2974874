"""Map raw stick axes to normalized flight control inputs."""

from dataclasses import dataclass

from fpvsim.sim.drone import ControlInputs


@dataclass(frozen=True)
class StickState:
    """Raw axes from a gamepad or on-screen joystick.

    Axes are in [-1, 1] with screen convention: pushing a stick up gives a
    negative Y.
    """

    left_x: float = 0.0  # yaw
    left_y: float = 0.0  # throttle
    right_x: float = 0.0  # roll
    right_y: float = 0.0  # pitch


@dataclass(frozen=True)
class ControlSettings:
    """Player handling preferences."""

    sensitivity: float = 1.0  # Multiplier on pitch/roll/yaw
    invert_pitch: bool = False

    def __post_init__(self) -> None:
        if self.sensitivity <= 0:
            raise ValueError(f"sensitivity must be positive, got {self.sensitivity}")


def clamp_controls(controls: ControlInputs) -> ControlInputs:
    """Clamp every axis into its contract range; NaN becomes 0."""
    return controls.clamped()


def map_sticks(sticks: StickState, settings: ControlSettings | None = None) -> ControlInputs:
    """
    Mode 2 mapping: left stick throttle/yaw, right stick pitch/roll.

    Left stick centred is half throttle, fully up is full throttle. Pushing
    the right stick up pitches forward (positive pitch) unless inverted.
    """
    settings = settings or ControlSettings()

    throttle = max(0.0, (1.0 - sticks.left_y) / 2.0)
    pitch = -sticks.right_y
    if settings.invert_pitch:
        pitch = -pitch

    return clamp_controls(
        ControlInputs(
            throttle=throttle,
            pitch=pitch * settings.sensitivity,
            roll=sticks.right_x * settings.sensitivity,
            yaw=sticks.left_x * settings.sensitivity,
        )
    )
