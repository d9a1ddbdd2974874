"""Pilot module - autonomous flying for headless runs."""

from .autopilot import PilotConfig, PilotMode, WaypointPilot

__all__ = ["PilotConfig", "PilotMode", "WaypointPilot"]
