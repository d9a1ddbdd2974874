"""Shared fixtures."""

import pytest

from fpvsim.sim.drone import FlightIntegrator
from fpvsim.sim.race import RaceTrack


class FakeClock:
    """Manually advanced clock for race timing."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def track(clock: FakeClock) -> RaceTrack:
    """Default course with a controllable clock."""
    return RaceTrack(clock=clock)


@pytest.fixture
def flight() -> FlightIntegrator:
    return FlightIntegrator()
