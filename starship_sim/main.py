"""
Starship Flight Simulation - Headless Mission Runner

This module scripts a complete mission on top of the MissionManager:
- Launch, then stage separation once the stack passes a set altitude
- Booster landing sequence once the return has reached its approach and
  the booster is past apogee
- Tower catch once the landing burn brings the booster low over the pad
- Per-frame telemetry logging with CSV export

It stands in for the interactive front end: the same commands a user
would issue are issued here from simple altitude and sub-phase triggers.
"""

import csv
from dataclasses import dataclass, field
import logging
import os
import time
from typing import List, Optional

from . import constants as C
from .config import SimulationConfig, create_default_config
from .guidance import LandingPhase, ReturnPhase
from .mission_manager import MissionManager, MissionPhase
from .types import Telemetry

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass
class SimulationLog:
    """Container for logged mission telemetry (one row per frame)."""
    time: List[float] = field(default_factory=list)
    phase: List[str] = field(default_factory=list)
    # Booster
    booster_altitude: List[float] = field(default_factory=list)      # km
    booster_downrange: List[float] = field(default_factory=list)     # km
    booster_crossrange: List[float] = field(default_factory=list)    # km
    booster_speed: List[float] = field(default_factory=list)         # m/s
    booster_vertical_velocity: List[float] = field(default_factory=list)  # m/s
    booster_acceleration: List[float] = field(default_factory=list)  # m/s²
    booster_attitude: List[float] = field(default_factory=list)      # deg
    booster_propellant: List[float] = field(default_factory=list)    # kg
    booster_throttle: List[float] = field(default_factory=list)
    booster_heat_shield: List[float] = field(default_factory=list)   # K
    booster_phase: List[str] = field(default_factory=list)
    # Upper stage
    upper_altitude: List[float] = field(default_factory=list)        # km
    upper_downrange: List[float] = field(default_factory=list)       # km
    upper_speed: List[float] = field(default_factory=list)           # m/s
    upper_acceleration: List[float] = field(default_factory=list)    # m/s²
    upper_propellant: List[float] = field(default_factory=list)      # kg
    upper_throttle: List[float] = field(default_factory=list)
    upper_heat_shield: List[float] = field(default_factory=list)     # K
    upper_phase: List[str] = field(default_factory=list)
    # Recovery
    arm_height: List[float] = field(default_factory=list)            # m
    arm_width: List[float] = field(default_factory=list)             # m
    return_phase: List[str] = field(default_factory=list)
    landing_phase: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.time)

    def append(self, telemetry: Telemetry):
        """Log data from one telemetry snapshot."""
        booster = telemetry['booster']
        upper = telemetry['upper_stage']
        catch = telemetry['catch']

        self.time.append(telemetry['mission_time'])
        self.phase.append(telemetry['phase'])

        self.booster_altitude.append(booster['altitude_km'])
        self.booster_downrange.append(booster['position'][0] / 1000)
        self.booster_crossrange.append(booster['position'][2] / 1000)
        self.booster_speed.append(booster['speed'])
        self.booster_vertical_velocity.append(float(booster['velocity'][1]))
        self.booster_acceleration.append(booster['acceleration_magnitude'])
        self.booster_attitude.append(booster['attitude_deg'])
        self.booster_propellant.append(booster['propellant'])
        self.booster_throttle.append(booster['throttle'])
        self.booster_heat_shield.append(booster['heat_shield_temperature'])
        self.booster_phase.append(booster['phase'])

        self.upper_altitude.append(upper['altitude_km'])
        self.upper_downrange.append(upper['position'][0] / 1000)
        self.upper_speed.append(upper['speed'])
        self.upper_acceleration.append(upper['acceleration_magnitude'])
        self.upper_propellant.append(upper['propellant'])
        self.upper_throttle.append(upper['throttle'])
        self.upper_heat_shield.append(upper['heat_shield_temperature'])
        self.upper_phase.append(upper['phase'])

        self.arm_height.append(catch['arm_height'])
        self.arm_width.append(catch['arm_width'])
        self.return_phase.append(telemetry['return_phase'] or '')
        self.landing_phase.append(telemetry['landing_phase'] or '')

    def to_csv(self, filename: str):
        """Write logged telemetry to CSV for offline analysis."""
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        columns = [
            ('time', self.time), ('phase', self.phase),
            ('booster_altitude_km', self.booster_altitude),
            ('booster_downrange_km', self.booster_downrange),
            ('booster_crossrange_km', self.booster_crossrange),
            ('booster_speed', self.booster_speed),
            ('booster_vertical_velocity', self.booster_vertical_velocity),
            ('booster_acceleration', self.booster_acceleration),
            ('booster_attitude_deg', self.booster_attitude),
            ('booster_propellant_kg', self.booster_propellant),
            ('booster_throttle', self.booster_throttle),
            ('booster_heat_shield_K', self.booster_heat_shield),
            ('booster_phase', self.booster_phase),
            ('upper_altitude_km', self.upper_altitude),
            ('upper_downrange_km', self.upper_downrange),
            ('upper_speed', self.upper_speed),
            ('upper_acceleration', self.upper_acceleration),
            ('upper_propellant_kg', self.upper_propellant),
            ('upper_throttle', self.upper_throttle),
            ('upper_heat_shield_K', self.upper_heat_shield),
            ('upper_phase', self.upper_phase),
            ('arm_height_m', self.arm_height),
            ('arm_width_m', self.arm_width),
            ('return_phase', self.return_phase),
            ('landing_phase', self.landing_phase),
        ]

        with open(filename, 'w', newline='') as fh:
            writer = csv.writer(fh)
            writer.writerow([name for name, _ in columns])
            for i in range(len(self.time)):
                writer.writerow([values[i] for _, values in columns])


@dataclass
class MissionResult:
    """Outcome of a scripted headless mission."""
    log: SimulationLog
    final_telemetry: Telemetry
    reason: str
    final_phase: MissionPhase
    mission_time: float
    separation_time: Optional[float] = None
    landing_start_time: Optional[float] = None
    catch_start_time: Optional[float] = None
    landing_complete: bool = False
    hard_landing: bool = False
    caught: bool = False
    catch_failed: bool = False
    orbit_inserted: bool = False
    max_booster_altitude: float = 0.0  # m
    max_upper_stage_altitude: float = 0.0  # m


def _print_status(telemetry: Telemetry):
    """Print a formatted status row."""
    booster = telemetry['booster']
    upper = telemetry['upper_stage']
    msg = (f"{telemetry['mission_time_str']:>12} | {booster['altitude_km']:9.2f} | "
           f"{booster['speed']:8.1f} | {upper['altitude_km']:9.2f} | "
           f"{upper['speed']:8.1f} | {telemetry['phase']:<18} | {booster['phase']:<16}")
    print(msg)
    logger.debug(msg)


def _check_termination(mission: MissionManager, max_time: float) -> Optional[str]:
    if mission.current_phase == MissionPhase.MISSION_COMPLETE:
        return "Mission complete"
    if mission.mission_time >= max_time:
        return "Time limit reached"
    if mission.landing_complete and mission.current_phase == MissionPhase.BOOSTER_LANDING:
        return "Booster landed"
    if mission.catch_controller.failed:
        return "Catch failed"
    if not mission.booster.active and not mission.upper_stage.active:
        return "All vehicles inactive"
    return None


def run_mission(config: SimulationConfig = None,
                frame_dt: float = C.FRAME_DT,
                max_time: float = C.MAX_MISSION_TIME,
                separation_altitude: float = C.SCRIPT_SEPARATION_ALTITUDE,
                catch_altitude: Optional[float] = C.SCRIPT_CATCH_ALTITUDE,
                land: bool = True,
                verbose: bool = None) -> MissionResult:
    """
    Run a scripted mission from liftoff to recovery.

    Args:
        config: Simulation configuration (default created if None)
        frame_dt: Wall-clock frame interval passed to MissionManager.update (s)
        max_time: Mission time limit (s)
        separation_altitude: Booster altitude that triggers stage separation (m)
        catch_altitude: Altitude below which the landing is handed to the
            tower during the landing burn; None lands on the ground instead
        land: Start the landing sequence once the return reaches its approach
            and the booster starts to descend
        verbose: Print status rows (defaults to config.verbose)

    Returns:
        MissionResult with the telemetry log and outcome flags
    """
    if config is None:
        config = create_default_config()
    if verbose is None:
        verbose = config.verbose
    if frame_dt <= 0:
        raise ValueError(f"Frame interval must be positive, got {frame_dt}")

    mission = MissionManager(config)
    log = SimulationLog()
    result_times = {'separation': None, 'landing': None, 'catch': None}
    max_booster_alt = 0.0
    max_upper_alt = 0.0

    if verbose:
        print("\n" + "=" * 90)
        print("STARSHIP MISSION SIMULATION")
        print("=" * 90)
        print(f"{'Time':>12} | {'Bst km':>9} | {'Bst m/s':>8} | {'Ship km':>9} | "
              f"{'Ship m/s':>8} | {'Phase':<18} | {'Booster':<16}")
        print("-" * 90)

    mission.start_launch()
    telemetry = mission.get_telemetry()
    log.append(telemetry)
    start_wall = time.time()
    last_status = -C.STATUS_INTERVAL
    reason = None

    while reason is None:
        telemetry = mission.update(frame_dt)
        log.append(telemetry)
        max_booster_alt = max(max_booster_alt, mission.booster.altitude)
        max_upper_alt = max(max_upper_alt, mission.upper_stage.altitude)

        phase = mission.current_phase
        if phase == MissionPhase.ASCENT and mission.booster.altitude >= separation_altitude:
            if mission.trigger_stage_separation():
                result_times['separation'] = mission.mission_time

        elif (phase == MissionPhase.BOOSTER_RETURN and land
              and mission.return_guidance.phase in (ReturnPhase.APPROACH, ReturnPhase.FINAL)
              and mission.booster.velocity[1] < 0.0):
            if mission.start_landing_sequence():
                result_times['landing'] = mission.mission_time

        elif (phase == MissionPhase.BOOSTER_LANDING and catch_altitude is not None
              and mission.booster.active
              and mission.landing_guidance.phase == LandingPhase.LANDING
              and mission.booster.altitude < catch_altitude):
            if mission.start_mechazilla_catch():
                result_times['catch'] = mission.mission_time

        if verbose and mission.mission_time - last_status >= C.STATUS_INTERVAL:
            _print_status(telemetry)
            last_status = mission.mission_time

        reason = _check_termination(mission, max_time)

    elapsed = time.time() - start_wall
    logger.info(f"Mission finished: {reason} at {mission.mission_time_str} "
                f"({len(log)} frames in {elapsed:.2f}s)")

    result = MissionResult(
        log=log,
        final_telemetry=telemetry,
        reason=reason,
        final_phase=mission.current_phase,
        mission_time=mission.mission_time,
        separation_time=result_times['separation'],
        landing_start_time=result_times['landing'],
        catch_start_time=result_times['catch'],
        landing_complete=mission.landing_complete,
        hard_landing=mission.hard_landing,
        caught=mission.catch_successful,
        catch_failed=mission.catch_controller.failed,
        orbit_inserted=mission.orbit_inserted,
        max_booster_altitude=max_booster_alt,
        max_upper_stage_altitude=max_upper_alt,
    )

    if verbose:
        print("\n" + "=" * 90)
        print("MISSION SUMMARY")
        print("=" * 90)
        print(f"Outcome:        {reason}")
        print(f"Mission time:   {mission.mission_time_str}")
        print(f"Final phase:    {mission.current_phase.name}")
        print(f"Booster apogee: {max_booster_alt / 1000:.1f} km")
        print(f"Ship max alt:   {max_upper_alt / 1000:.1f} km"
              f"{' (orbit)' if mission.orbit_inserted else ''}")
        print(f"Landing:        {'complete' if result.landing_complete else 'not complete'}"
              f"{' (HARD)' if result.hard_landing else ''}")
        print(f"Catch:          {'caught' if result.caught else 'failed' if result.catch_failed else 'n/a'}")
        print(f"Frames:         {len(log):,} | Wall Time: {elapsed:.2f}s")
        print("=" * 90)

    return result


if __name__ == "__main__":
    run_mission()
