"""
Starship Flight Simulation - CLI

The single entry point for running a scripted mission, exporting telemetry
and choosing the physics options.

Usage:
    python -m starship_sim.cli --speed 10 --csv output/mission.csv
"""

import argparse
import dataclasses
import logging
import sys

from . import constants as C
from .config import GRAVITY_MODELS, create_default_config
from .main import run_mission

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Starship Flight Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=C.FRAME_DT,
        help="Frame interval passed to the mission manager (s)"
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Simulation speed multiplier (clamped to [0.1, 100])"
    )
    parser.add_argument(
        "--max-time",
        type=float,
        default=C.MAX_MISSION_TIME,
        help="Mission time limit (s)"
    )
    parser.add_argument(
        "--separation-altitude",
        type=float,
        default=C.SCRIPT_SEPARATION_ALTITUDE,
        help="Booster altitude that triggers stage separation (m)"
    )
    parser.add_argument(
        "--catch-altitude",
        type=float,
        default=C.SCRIPT_CATCH_ALTITUDE,
        help="Altitude below which the landing is handed to the tower (m)"
    )
    parser.add_argument(
        "--no-catch",
        action="store_true",
        help="Land on the ground instead of attempting a tower catch"
    )
    parser.add_argument(
        "--no-landing",
        action="store_true",
        help="Never start the booster landing sequence"
    )
    parser.add_argument(
        "--gravity",
        choices=GRAVITY_MODELS,
        default="constant",
        help="Gravity model"
    )
    parser.add_argument(
        "--wind",
        action="store_true",
        help="Enable the wind and gust disturbance model"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for wind and tower tracking error"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Run physics validation checks every tick"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Write the telemetry log to this CSV file"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress verbose output"
    )
    return parser.parse_args(argv)


def build_config(args):
    """Create a SimulationConfig from parsed arguments."""
    return dataclasses.replace(
        create_default_config(),
        simulation_speed=float(min(max(args.speed, C.MIN_SIMULATION_SPEED), C.MAX_SIMULATION_SPEED)),
        gravity_model=args.gravity,
        enable_wind=args.wind,
        random_seed=args.seed,
        validate_state=args.validate,
        verbose=not args.quiet,
    )


def main(argv=None) -> int:
    """Main execution flow."""
    args = parse_args(argv)

    # Configure verbosity
    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    if args.dt <= 0 or args.speed <= 0:
        logger.error(f"Frame interval and speed must be positive (dt={args.dt}, speed={args.speed})")
        return 2

    config = build_config(args)
    try:
        logger.info("Starting mission...")
        result = run_mission(
            config,
            frame_dt=args.dt,
            max_time=args.max_time,
            separation_altitude=args.separation_altitude,
            catch_altitude=None if args.no_catch else args.catch_altitude,
            land=not args.no_landing,
        )
        if args.csv:
            result.log.to_csv(args.csv)
            logger.info(f"Telemetry written to {args.csv}")
    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        return 1

    logger.info(f"Outcome: {result.reason} ({result.final_phase.name})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
