"""Tests for the headless simulation loop and tick log."""

import json

import pytest

from fpvsim.pilot import WaypointPilot
from fpvsim.sim.config import SimConfig
from fpvsim.sim.drone import ControlInputs, FlightIntegrator
from fpvsim.sim.loop import SimClock, TickLogger, is_out_of_bounds, run_simulation
from fpvsim.sim.race import Checkpoint, RaceTrack
from fpvsim.sim.session import GameMode, GameSession


def spawn_finish_session() -> GameSession:
    track = RaceTrack([Checkpoint(id="finish", position=(0.0, 10.0, 0.0), radius=5.0)])
    return GameSession(FlightIntegrator(), track)


def hover_pilot(snapshot, target):
    return "HOVER", ControlInputs(throttle=FlightIntegrator().hover_throttle())


def climb_pilot(snapshot, target):
    return "CLIMB", ControlInputs(throttle=1.0)


class TestSimConfig:
    """Test SimConfig validation."""

    def test_dt(self) -> None:
        assert SimConfig(hz=50).dt == pytest.approx(0.02)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"hz": 0},
            {"max_time": 0.0},
            {"bounds_min": (0, 0, 0), "bounds_max": (-1, 1, 1)},
        ],
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            SimConfig(**kwargs)


def test_sim_clock() -> None:
    clock = SimClock()
    clock.advance(0.5)
    clock.advance(0.25)
    assert clock() == pytest.approx(0.75)


def test_out_of_bounds() -> None:
    config = SimConfig(bounds_min=(-1.0, 0.0, -1.0), bounds_max=(1.0, 2.0, 1.0))
    assert not is_out_of_bounds((0.0, 1.0, 0.0), config)
    assert is_out_of_bounds((0.0, 2.5, 0.0), config)
    assert is_out_of_bounds((-1.5, 1.0, 0.0), config)


class TestRunSimulation:
    """Test termination reasons and results."""

    def test_course_complete(self) -> None:
        config = SimConfig(hz=60)
        result, final = run_simulation(config, spawn_finish_session(), hover_pilot)

        assert result.completed
        assert result.termination_reason == "course_complete"
        assert result.checkpoints_passed == 1
        assert result.checkpoints_total == 1
        assert result.race_time == pytest.approx(config.dt)
        assert result.best_time == pytest.approx(config.dt)
        assert result.time_elapsed == pytest.approx(config.dt)

    def test_freefly_times_out(self) -> None:
        config = SimConfig(hz=30, max_time=1.0)
        session = GameSession()

        result, final = run_simulation(config, session, hover_pilot, mode=GameMode.FREEFLY)

        assert not result.completed
        assert result.termination_reason == "timeout"
        assert 1.0 <= result.time_elapsed < 1.1
        assert result.race_time is None
        assert final.position[1] == pytest.approx(10.0, abs=1e-6)
        assert not session.is_playing

    def test_out_of_bounds_termination(self) -> None:
        config = SimConfig(hz=60, max_time=10.0, bounds_max=(150.0, 12.0, 50.0))

        result, final = run_simulation(config, GameSession(), climb_pilot)

        assert result.out_of_bounds
        assert result.termination_reason == "out_of_bounds"
        assert final.position[1] > 12.0

    def test_best_time_across_runs(self) -> None:
        config = SimConfig(hz=60)
        session = spawn_finish_session()

        run_simulation(config, session, hover_pilot)
        result, _ = run_simulation(config, session, hover_pilot)

        assert result.best_time == pytest.approx(config.dt)

    def test_autopilot_completes_default_course(self) -> None:
        config = SimConfig(hz=60, max_time=60.0)
        session = GameSession()
        pilot = WaypointPilot(session.flight.config)

        result, _ = run_simulation(config, session, pilot.step)

        assert result.completed
        assert result.termination_reason == "course_complete"
        assert result.checkpoints_passed == result.checkpoints_total == 8
        assert 0.0 < result.race_time < config.max_time
        assert result.best_time == result.race_time


class TestHostClock:
    """The track keeps its own clock across headless runs."""

    def test_clock_restored(self) -> None:
        session = GameSession()
        original = session.track.clock

        run_simulation(SimConfig(hz=10, max_time=0.1), session, hover_pilot)

        assert session.track.clock is original

    def test_clock_restored_when_pilot_raises(self, clock) -> None:
        session = GameSession(track=RaceTrack(clock=clock))

        def broken_pilot(snapshot, target):
            raise RuntimeError("stick disconnected")

        with pytest.raises(RuntimeError):
            run_simulation(SimConfig(), session, broken_pilot)

        assert session.track.clock is clock

    def test_unfinished_race_continues_on_host_clock(self, clock) -> None:
        track = RaceTrack(
            [
                Checkpoint(id="spawn", position=(0.0, 10.0, 0.0), radius=5.0),
                Checkpoint(id="far", position=(0.0, 10.0, -100.0), radius=5.0),
            ],
            clock=clock,
        )
        session = GameSession(FlightIntegrator(), track)

        result, _ = run_simulation(SimConfig(hz=4, max_time=1.0), session, hover_pilot)
        assert result.termination_reason == "timeout"
        assert result.checkpoints_passed == 1

        clock.tick(2.0)
        finish = track.check_collision((0.0, 10.0, -100.0))

        assert finish.completed
        assert finish.elapsed_time == pytest.approx(3.0)


class TestTickLogger:
    """Test the JSON tick log."""

    def test_entries_and_save(self, tmp_path) -> None:
        tick_logger = TickLogger(tmp_path / "logs")
        config = SimConfig(hz=60)

        run_simulation(config, spawn_finish_session(), hover_pilot, tick_logger=tick_logger)
        path = tick_logger.save("run.json")

        data = json.loads(path.read_text())
        assert data["config"]["hz"] == 60
        assert data["tick_count"] == len(data["ticks"]) == 1
        tick = data["ticks"][0]
        assert tick["pilot"] == "HOVER"
        assert tick["state"]["position"] == [0.0, 10.0, 0.0]
        assert tick["race"] == {"checkpoint": "finish", "completed": True, "elapsed": pytest.approx(1 / 60)}
        assert data["race_events"] == [{"tick": 0, "t": 0.0, **tick["race"]}]
        assert data["result"]["termination_reason"] == "course_complete"
        assert data["result"]["checkpoints_passed"] == 1

    def test_save_without_dir(self) -> None:
        assert TickLogger().save("run.json") is None

    def test_ground_floor_in_log(self) -> None:
        tick_logger = TickLogger()
        config = SimConfig(hz=30, max_time=3.0)

        run_simulation(
            config,
            GameSession(),
            lambda snap, target: ("DROP", ControlInputs()),
            mode=GameMode.FREEFLY,
            tick_logger=tick_logger,
        )

        assert all(t["state"]["position"][1] >= 0.5 for t in tick_logger.entries)
        assert tick_logger.entries[-1]["state"]["position"][1] == 0.5
