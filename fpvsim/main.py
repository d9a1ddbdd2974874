"""
fpvsim - headless FPV drone runs.

Flies the default checkpoint course (or free flight) with the waypoint
autopilot and reports the result.
"""

from datetime import datetime
from pathlib import Path
import argparse
import logging

from fpvsim.pilot import WaypointPilot
from fpvsim.sim import (
    FlightConfig,
    FlightIntegrator,
    GameMode,
    GameSession,
    RaceTrack,
    SimConfig,
    TickLogger,
    format_time,
    run_simulation,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Headless FPV drone flight and race runs")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in GameMode],
        default=GameMode.ROUTE.value,
        help="route: timed checkpoint course, freefly: hover until timeout",
    )
    parser.add_argument("--hz", type=int, default=60, help="Simulation tick rate")
    parser.add_argument("--max-time", type=float, default=120.0, help="Timeout per run (seconds)")
    parser.add_argument("--laps", type=int, default=1, help="Number of runs of the course")
    parser.add_argument("--log-dir", type=Path, default=None, help="Write a JSON tick log per run here")
    parser.add_argument("--realtime", action="store_true", help="Pace the loop to wall-clock time")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the configured number of laps and return a process exit code."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    mode = GameMode(args.mode)
    config = SimConfig(hz=args.hz, max_time=args.max_time)
    flight_config = FlightConfig()

    session = GameSession(FlightIntegrator(flight_config), RaceTrack())
    pilot = WaypointPilot(flight_config)

    print("=" * 50)
    print(f"FPVSIM - {'ROUTE CHALLENGE' if mode == GameMode.ROUTE else 'FREE FLIGHT'}")
    print("=" * 50)
    print(f"\nConfig:")
    print(f"  Hz: {config.hz}")
    print(f"  Max time: {config.max_time}s")
    if mode == GameMode.ROUTE:
        print(f"\nCourse: {session.track.checkpoints_total()} checkpoints")
        for cp in session.track.all_checkpoints():
            finish = " (finish)" if cp.is_finish else ""
            print(f"  {cp.id}: {cp.position} r={cp.radius}{finish}")

    completed = mode != GameMode.ROUTE
    for lap in range(1, args.laps + 1):
        print(f"\nRun {lap}/{args.laps}...")
        print("-" * 50)

        pilot.reset()
        tick_logger = TickLogger(args.log_dir) if args.log_dir else None
        result, final = run_simulation(
            config=config,
            session=session,
            pilot=pilot.step,
            mode=mode,
            tick_logger=tick_logger,
            realtime=args.realtime,
        )

        print(f"  Completed: {result.completed}")
        print(f"  Sim time: {format_time(result.time_elapsed)} ({result.time_elapsed:.2f}s)")
        print(f"  Checkpoints: {result.checkpoints_passed}/{result.checkpoints_total}")
        if result.race_time is not None:
            print(f"  Race time: {result.race_time:.2f}s")
        if result.best_time is not None:
            print(f"  Best time: {result.best_time:.2f}s")
        print(f"  Termination: {result.termination_reason}")
        x, y, z = final.position
        print(f"  Final position: ({x:.1f}, {y:.1f}, {z:.1f})")

        if tick_logger:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_path = tick_logger.save(f"run_{timestamp}_{lap}.json")
            print(f"  Log saved: {log_path}")

        if mode == GameMode.ROUTE:
            completed = result.completed

    return 0 if completed else 1


if __name__ == "__main__":
    raise SystemExit(main())
