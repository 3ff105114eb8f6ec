"""
TSR Flight Simulation - CLI

The single entry point for running a flight or a full mission, writing
telemetry CSV and generating plots.
"""

import argparse
from dataclasses import replace
import json
import logging
import os
import sys

from .config import ConfigError, RocketConfig, create_default_config, create_default_rocket
from .events import RecordingEventSink
from .main import run_full_mission, run_simulation
from .plotting import generate_all_plots, plot_full_mission
from .state import display_phase

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="tsr-sim",
        description="Two-stage rocket ascent, orbit and recovery simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default="plots",
        help="Directory to save output plots and CSV"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress verbose output"
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip plot generation"
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Write telemetry CSV into the output directory"
    )
    parser.add_argument(
        "--full-mission",
        action="store_true",
        help="Fly the stack, then track orbiter and booster after separation"
    )
    parser.add_argument(
        "--rocket",
        type=str,
        default=None,
        help="JSON file describing the vehicle (stage1/stage2 mappings)"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=None,
        help="Integration time step in seconds (default from config)"
    )
    parser.add_argument(
        "--max-time",
        type=float,
        default=None,
        help="Maximum simulated time in seconds (default from config)"
    )
    parser.add_argument(
        "--landing-reserve",
        type=float,
        default=0.0,
        help="Stage-1 propellant (kg) held back for booster recovery"
    )
    parser.add_argument(
        "--stop-on-orbit",
        action="store_true",
        help="End the run once a stable orbit is reached"
    )
    return parser.parse_args(argv)


def load_rocket(path: str) -> RocketConfig:
    """Read a RocketConfig from a JSON file."""
    with open(path) as fh:
        data = json.load(fh)
    return RocketConfig.from_dict(data)


def build_config(args):
    """SimulationConfig with command-line overrides applied."""
    overrides = {
        'booster_landing_reserve_kg': args.landing_reserve,
        'stop_on_orbit': args.stop_on_orbit,
        'verbose': not args.quiet,
    }
    if args.dt is not None:
        overrides['dt'] = args.dt
    if args.max_time is not None:
        overrides['max_time'] = args.max_time
    return replace(create_default_config(), **overrides)


def _resolve_dir(path: str) -> str:
    return path if os.path.isabs(path) else os.path.join(os.getcwd(), path)


def main(argv=None):
    """Main execution flow."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        rocket = load_rocket(args.rocket) if args.rocket else create_default_rocket()
        config = build_config(args)
    except (OSError, json.JSONDecodeError, ConfigError) as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"\n[ERROR] Invalid configuration: {e}")
        sys.exit(2)

    out_dir = _resolve_dir(args.output_dir)
    sink = RecordingEventSink()

    try:
        if args.full_mission:
            result = run_full_mission(rocket, config, event_sink=sink, verbose=not args.quiet)
            final_state = result.orbiter_final_state
            print("\n" + "=" * 60)
            print("MISSION SUMMARY")
            print("=" * 60)
            print(f"Ascent:  {result.ascent_reason}")
            print(f"Orbiter: {result.orbiter_reason}")
            print(f"Booster: {result.booster_reason} "
                  f"(recovery {result.booster_final_state.recovery_percentage:.0f} %)")
            print(f"Events:  {', '.join(sink.keys) or 'none'}")
            print("=" * 60 + "\n")

            if args.csv:
                result.ascent_log.to_csv(os.path.join(out_dir, "ascent.csv"))
                result.orbiter_log.to_csv(os.path.join(out_dir, "orbiter.csv"))
                result.booster_log.to_csv(os.path.join(out_dir, "booster.csv"))
            if not args.no_plots:
                logger.info(f"Generating plots in {out_dir}")
                generate_all_plots(result.ascent_log, out_dir)
                plot_full_mission(result, out_dir)
        else:
            final_state, log, reason = run_simulation(rocket, config, event_sink=sink,
                                                      verbose=not args.quiet)
            print("\n" + "=" * 60)
            print("SIMULATION SUMMARY")
            print("=" * 60)
            print(f"Termination reason: {reason}")
            print(f"Final phase: {display_phase(final_state).label}")
            print(f"Final time: {final_state.time:.2f} s")
            print(f"Max altitude: {final_state.max_altitude/1000:.2f} km")
            print(f"Max velocity: {final_state.max_velocity:.2f} m/s")
            print(f"Events: {', '.join(sink.keys) or 'none'}")
            print("=" * 60 + "\n")

            if args.csv:
                log.to_csv(os.path.join(out_dir, "telemetry.csv"))
            if not args.no_plots and len(log.time) > 0:
                logger.info(f"Generating plots in {out_dir}")
                generate_all_plots(log, out_dir)

    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        print(f"\n[ERROR] Simulation failed: {e}")
        sys.exit(1)

    return final_state


if __name__ == "__main__":
    main()
