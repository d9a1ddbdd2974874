"""Control input mapping."""

from .mapping import ControlSettings, StickState, clamp_controls, map_sticks

__all__ = ["ControlSettings", "StickState", "clamp_controls", "map_sticks"]
