"""
Starship Mission Manager

This module owns one simulation run: the two vehicles, their guidance, the
catch tower, the wind model and the mission clock. It defines the discrete
mission phases and the rules for moving between them.

Transitions:
  - READY -> LAUNCH:                    start_launch() command
  - LAUNCH -> ASCENT:                   booster clears the tower (30 m)
  - ASCENT -> STAGE_SEPARATION:         trigger_stage_separation() command
  - STAGE_SEPARATION -> BOOSTER_RETURN: separation timer expires (3 s)
  - BOOSTER_RETURN -> BOOSTER_LANDING:  start_landing_sequence() command
  - BOOSTER_LANDING -> MECHAZILLA_CATCH: start_mechazilla_catch() command
  - MECHAZILLA_CATCH -> MISSION_COMPLETE: booster caught, or catch tick
    budget exhausted (ground contact during the catch fails the attempt)

After separation the upper stage flies its own STARSHIP_ASCENT sub-flow
until orbit insertion or propellant exhaustion, alongside the booster.
"""

from enum import Enum, auto
import logging
from typing import Optional

import numpy as np

from . import constants as C
from .config import SimulationConfig, create_default_config
from .forces import compute_gravity_acceleration, compute_total_force
from .frames import WORLD_UP, attitude_angle_deg, body_up_axis
from .guidance import (
    AscentGuidance,
    BoosterLandingGuidance,
    BoosterReturnGuidance,
    UpperStageGuidance,
    angular_damping_rate,
    apply_command,
    ground_effect_force,
    make_command,
)
from .integrators import StepResult, semi_implicit_euler_step, split_time_step
from .mass import compute_moment_of_inertia
from .orbital import local_to_geocentric, orbit_summary
from .recovery import CatchApproachGuidance, CatchController
from .state import Vehicle, create_vehicle_set
from .thermal import update_heat_shield
from .types import GuidanceCommand, Telemetry, VehicleTelemetry
from .utils import WindModel, format_mission_time
from .validation import ValidationError, validate_vehicles

logger = logging.getLogger(__name__)


class MissionPhase(Enum):
    READY = auto()
    LAUNCH = auto()
    ASCENT = auto()
    STAGE_SEPARATION = auto()
    BOOSTER_RETURN = auto()
    STARSHIP_ASCENT = auto()        # Upper-stage sub-flow label (per vehicle)
    BOOSTER_LANDING = auto()
    MECHAZILLA_CATCH = auto()
    MISSION_COMPLETE = auto()


# Phases integrated with the finer step ceiling
TERMINAL_PHASES = (MissionPhase.BOOSTER_LANDING, MissionPhase.MECHAZILLA_CATCH)


class MissionManager:
    """
    Drives the mission state machine and integrates both vehicles.

    Example:
        >>> mission = MissionManager()
        >>> mission.start_launch()
        >>> telemetry = mission.update(1.0)
    """

    def __init__(self, config: SimulationConfig = None):
        self.config = config or create_default_config()
        self.reset()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def reset(self) -> None:
        """Reinitialise vehicles, controllers, timers, wind and the catch tower."""
        self.simulation_speed = self.config.simulation_speed
        self._reset_flight()
        logger.debug("Mission reset")

    def _reset_flight(self) -> None:
        cfg = self.config
        self.vehicles = create_vehicle_set(cfg)
        self.current_phase = MissionPhase.READY
        self.mission_time = 0.0
        self.separation_timer = 0.0
        self.catch_ticks = 0
        self.catch_impact_speed: Optional[float] = None
        self.tower_position = np.array(cfg.tower_position, dtype=np.float64)

        self.ascent_guidance = AscentGuidance(cfg)
        self.upper_stage_guidance = UpperStageGuidance(cfg)
        self.return_guidance = BoosterReturnGuidance(self.tower_position, cfg)
        self.landing_guidance = BoosterLandingGuidance(self.tower_position, cfg)
        self.catch_guidance = CatchApproachGuidance(cfg)
        self.catch_controller = CatchController(cfg)
        self.wind = WindModel(cfg.wind_mean_speed, cfg.wind_gust_max, cfg.random_seed)

        self.return_started = False
        self.landing_started = False
        self.catch_started = False
        self.orbit_inserted = False
        self.booster_phase = "stacked"
        self.upper_stage_phase = "stacked"
        self.orbit_at_insertion: Optional[dict] = None

    def get_phase(self) -> MissionPhase:
        return self.current_phase

    @property
    def booster(self) -> Vehicle:
        return self.vehicles.booster

    @property
    def upper_stage(self) -> Vehicle:
        return self.vehicles.upper_stage

    @property
    def mission_time_str(self) -> str:
        return format_mission_time(self.mission_time)

    def _enter_phase(self, phase: MissionPhase) -> None:
        logger.info(
            f"{self.mission_time_str} Phase: {self.current_phase.name} -> {phase.name}"
        )
        self.current_phase = phase

    def _reject(self, command: str) -> bool:
        logger.debug(f"Ignoring {command} in phase {self.current_phase.name}")
        return False

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def start_launch(self) -> bool:
        """READY -> LAUNCH: fresh vehicles, clock at zero, booster at full throttle."""
        if self.current_phase != MissionPhase.READY:
            return self._reject("start_launch")
        self._reset_flight()
        self.booster.set_throttle(self.config.launch_throttle)
        self.booster_phase = "launch"
        self._enter_phase(MissionPhase.LAUNCH)
        return True

    def trigger_stage_separation(self) -> bool:
        """ASCENT -> STAGE_SEPARATION: release the upper stage from the booster."""
        if self.current_phase != MissionPhase.ASCENT:
            return self._reject("trigger_stage_separation")
        cfg = self.config
        booster, upper = self.booster, self.upper_stage

        upper.position = booster.position + body_up_axis(booster.orientation) * cfg.stack_offset
        upper.velocity = booster.velocity + cfg.separation_upper_impulse * WORLD_UP
        upper.orientation = booster.orientation.copy()
        upper.angular_velocity = booster.angular_velocity.copy()
        upper.active = True
        booster.payload_mass = 0.0
        booster.velocity = booster.velocity + cfg.separation_booster_impulse * WORLD_UP

        booster.set_throttle(0.0)
        upper.set_throttle(C.SEPARATION_UPPER_THROTTLE)
        self.separation_timer = cfg.separation_duration
        self.booster_phase = "separation"
        self.upper_stage_phase = "separation"

        logger.info(
            f"Stage separation at {booster.altitude / 1000:.2f} km, "
            f"v={booster.speed:.0f} m/s"
        )
        self._enter_phase(MissionPhase.STAGE_SEPARATION)
        return True

    def start_landing_sequence(self) -> bool:
        """BOOSTER_RETURN -> BOOSTER_LANDING."""
        if self.current_phase != MissionPhase.BOOSTER_RETURN:
            return self._reject("start_landing_sequence")
        self.landing_guidance.start(self.booster)
        self.landing_started = True
        self._enter_phase(MissionPhase.BOOSTER_LANDING)
        return True

    def start_mechazilla_catch(self) -> bool:
        """BOOSTER_LANDING -> MECHAZILLA_CATCH: hand the booster to the tower."""
        if self.current_phase != MissionPhase.BOOSTER_LANDING:
            return self._reject("start_mechazilla_catch")
        self.catch_controller.reset()
        self.catch_guidance.reset()
        self.catch_ticks = 0
        self.catch_started = True
        self._enter_phase(MissionPhase.MECHAZILLA_CATCH)
        if not self.booster.active:
            self.catch_controller.abort("booster already landed")
        else:
            self.catch_controller.start_catch_sequence(self.booster.position)
            self.booster_phase = "catch_approach"
        return True

    def set_simulation_speed(self, multiplier: float) -> float:
        """
        Set the simulation speed multiplier.

        Values outside [0.1, 100] are clamped with a warning.

        Raises:
            ValueError: If multiplier is not a positive finite number
        """
        if not np.isfinite(multiplier) or multiplier <= 0:
            raise ValueError(f"Simulation speed must be positive and finite, got {multiplier}")
        clamped = float(np.clip(multiplier, C.MIN_SIMULATION_SPEED, C.MAX_SIMULATION_SPEED))
        if clamped != multiplier:
            logger.warning(f"Simulation speed {multiplier} clamped to {clamped}")
        self.simulation_speed = clamped
        return clamped

    # =========================================================================
    # TICK
    # =========================================================================

    def update(self, dt: float) -> Telemetry:
        """
        Advance the mission by one frame.

        The frame interval is scaled by the speed multiplier and split into
        equal sub-steps no larger than the integration ceiling for the
        current phase.

        Args:
            dt: Wall-clock frame interval (s)

        Returns:
            Telemetry snapshot after the frame

        Raises:
            ValueError: If dt < 0
            ValidationError: If per-tick validation is enabled and fails
        """
        if dt < 0:
            raise ValueError(f"Time step dt must be non-negative, got {dt}")
        if dt == 0 or self.current_phase == MissionPhase.READY:
            return self.get_telemetry()

        max_dt = (self.config.terminal_max_dt if self.current_phase in TERMINAL_PHASES
                  else self.config.max_dt)
        steps, sub_dt = split_time_step(dt * self.simulation_speed, max_dt)
        for _ in range(steps):
            self._step(sub_dt)

        if self.current_phase == MissionPhase.MECHAZILLA_CATCH:
            self.catch_ticks += 1
            budget = self.config.catch_tick_budget
            if budget is not None and self.catch_ticks >= budget:
                logger.info(f"Catch tick budget of {budget} exhausted")
                self._enter_phase(MissionPhase.MISSION_COMPLETE)

        return self.get_telemetry()

    def _step(self, dt: float) -> None:
        self.mission_time += dt
        wind = None
        if self.config.enable_wind:
            self.wind.update(dt)
            wind = self.wind.velocity()

        if self.current_phase in (MissionPhase.LAUNCH, MissionPhase.ASCENT):
            self._step_stack(dt, wind)
        else:
            if self.current_phase == MissionPhase.STAGE_SEPARATION:
                self._step_separation(dt, wind)
            else:
                if self.booster.active:
                    self._step_booster(dt, wind)
                if self.upper_stage.active:
                    self._step_upper_stage(dt, wind)

        if self.config.validate_state:
            try:
                validate_vehicles(self.vehicles)
            except ValidationError as e:
                logger.error(f"{self.mission_time_str} State validation failed: {e}")
                raise

    def _fly(self, vehicle: Vehicle, command: GuidanceCommand, dt: float,
             wind: Optional[np.ndarray], extra_force: Optional[np.ndarray] = None) -> StepResult:
        """Apply a command, integrate one step and update heating and peaks."""
        apply_command(vehicle, command)
        forces = compute_total_force(vehicle, self.config, wind)
        total = forces['total'] if extra_force is None else forces['total'] + extra_force
        angular = (command['angular_acceleration']
                   + forces['torque'] / compute_moment_of_inertia(vehicle))

        result = semi_implicit_euler_step(vehicle, total, angular, dt)

        heating = update_heat_shield(vehicle, dt, self.config.heating_coefficient,
                                     self.config.sutton_graves_k)
        vehicle.record_peaks(forces['dynamic_pressure'],
                             float(np.linalg.norm(vehicle.acceleration)),
                             heating['heat_flux'])
        return result

    def _coast_command(self, vehicle: Vehicle, throttle: float = 0.0, phase: str = "coast") -> GuidanceCommand:
        return make_command(
            throttle=throttle,
            angular_acceleration=-angular_damping_rate(vehicle) * vehicle.angular_velocity,
            phase=phase,
        )

    def _sync_stack(self) -> None:
        """Carry the inactive upper stage on top of the booster."""
        booster, upper = self.booster, self.upper_stage
        upper.position = booster.position + body_up_axis(booster.orientation) * self.config.stack_offset
        upper.velocity = booster.velocity.copy()
        upper.acceleration = booster.acceleration.copy()
        upper.orientation = booster.orientation.copy()
        upper.angular_velocity = booster.angular_velocity.copy()

    def _step_stack(self, dt: float, wind: Optional[np.ndarray]) -> None:
        ascent = self.current_phase == MissionPhase.ASCENT
        command = self.ascent_guidance.update(self.booster, ascent, dt)
        self.booster_phase = command['phase']
        self._fly(self.booster, command, dt, wind)
        self._sync_stack()

        if not ascent and self.booster.altitude > self.config.ascent_transition_altitude:
            self._enter_phase(MissionPhase.ASCENT)

    def _step_separation(self, dt: float, wind: Optional[np.ndarray]) -> None:
        booster, upper = self.booster, self.upper_stage
        fraction = max(0.0, self.separation_timer) / self.config.separation_duration
        booster_push = booster.mass * C.SEPARATION_BOOSTER_PUSH * fraction * WORLD_UP
        upper_push = upper.mass * C.SEPARATION_UPPER_PUSH * fraction * WORLD_UP

        self._fly(booster, self._coast_command(booster, phase="separation"), dt, wind, booster_push)
        self._fly(upper, self._coast_command(upper, C.SEPARATION_UPPER_THROTTLE, "separation"),
                  dt, wind, upper_push)

        self.separation_timer -= dt
        if self.separation_timer <= 0.0:
            self._complete_separation()

    def _complete_separation(self) -> None:
        self.upper_stage.set_throttle(1.0)
        self.upper_stage_guidance.start()
        self.upper_stage_phase = MissionPhase.STARSHIP_ASCENT.name.lower()
        self.return_guidance.start(self.booster)
        self.return_started = True
        self.booster_phase = "coast"
        logger.info(
            f"Separation complete: booster {self.booster.altitude / 1000:.2f} km, "
            f"upper stage {self.upper_stage.altitude / 1000:.2f} km"
        )
        self._enter_phase(MissionPhase.BOOSTER_RETURN)

    def _step_booster(self, dt: float, wind: Optional[np.ndarray]) -> None:
        booster = self.booster
        phase = self.current_phase

        if phase == MissionPhase.BOOSTER_RETURN:
            command = self.return_guidance.update(booster, dt)
            self.booster_phase = command['phase']
            self._fly(booster, command, dt, wind)

        elif phase == MissionPhase.BOOSTER_LANDING:
            command = self.landing_guidance.update(booster, dt)
            self.booster_phase = command['phase']
            g = compute_gravity_acceleration(booster.altitude, self.config.gravity_model)
            result = self._fly(booster, command, dt, wind, ground_effect_force(booster, g))
            if result.touchdown:
                self.landing_guidance.notify_touchdown(result.impact_speed)
            if self.landing_guidance.landing_complete:
                booster.deactivate()
                self.booster_phase = "landed"

        elif phase == MissionPhase.MECHAZILLA_CATCH:
            command = self.catch_guidance.update(booster, self.catch_controller.catch_point(), dt)
            result = self._fly(booster, command, dt, wind)
            if result.touchdown:
                self.catch_impact_speed = result.impact_speed
                self.catch_controller.abort(
                    f"booster hit the ground at {result.impact_speed:.1f} m/s")
                booster.deactivate()
                self.booster_phase = "crashed"
                return
            status = self.catch_controller.update(dt, booster.position, booster.velocity)
            if status['caught']:
                booster.deactivate()
                self.booster_phase = "caught"
                self._enter_phase(MissionPhase.MISSION_COMPLETE)

        else:
            self._fly(booster, self._coast_command(booster), dt, wind)
            self.booster_phase = "coast"

    def _step_upper_stage(self, dt: float, wind: Optional[np.ndarray]) -> None:
        upper = self.upper_stage
        command = self.upper_stage_guidance.update(upper, dt)

        if self.upper_stage_guidance.cutoff_reason == "orbit" and not self.orbit_inserted:
            self._orbit_insertion()
            return

        descending = upper.velocity[1] < 0.0 and upper.altitude < C.AERO_DISABLE_ALTITUDE
        upper.surfaces['flaps'].update(descending, dt)
        self.upper_stage_phase = command['phase']
        self._fly(upper, command, dt, wind)

    def _orbit_insertion(self) -> None:
        upper = self.upper_stage
        self.orbit_inserted = True
        self.orbit_at_insertion = orbit_summary(*local_to_geocentric(upper.position, upper.velocity))
        upper.deactivate()
        self.upper_stage_phase = "orbit"
        logger.info(
            f"{self.mission_time_str} Orbit insertion at {upper.altitude / 1000:.1f} km, "
            f"v={upper.speed:.0f} m/s, propellant {upper.propellant:.0f} kg"
        )

    # =========================================================================
    # TELEMETRY
    # =========================================================================

    @property
    def landing_complete(self) -> bool:
        return self.landing_guidance.landing_complete

    @property
    def hard_landing(self) -> bool:
        return self.landing_guidance.hard_landing

    @property
    def catch_successful(self) -> bool:
        return self.catch_controller.caught

    def _vehicle_telemetry(self, vehicle: Vehicle, phase: str) -> VehicleTelemetry:
        return {
            'name': vehicle.name,
            'active': vehicle.active,
            'phase': phase,
            'position': vehicle.position.copy(),
            'velocity': vehicle.velocity.copy(),
            'acceleration': vehicle.acceleration.copy(),
            'orientation': vehicle.orientation.copy(),
            'altitude_km': vehicle.altitude / 1000.0,
            'speed': vehicle.speed,
            'acceleration_magnitude': float(np.linalg.norm(vehicle.acceleration)),
            'attitude_deg': attitude_angle_deg(vehicle.orientation),
            'propellant': vehicle.propellant,
            'propellant_fraction': vehicle.propellant_fraction,
            'throttle': vehicle.throttle,
            'heat_shield_temperature': vehicle.heat_shield.temperature,
            'max_dynamic_pressure': vehicle.max_dynamic_pressure,
            'max_acceleration': vehicle.max_acceleration,
            'max_heating_rate': vehicle.max_heating_rate,
        }

    def get_telemetry(self) -> Telemetry:
        """Snapshot of the whole mission."""
        upper = self.upper_stage
        if self.orbit_at_insertion is not None:
            orbit = self.orbit_at_insertion
        else:
            orbit = orbit_summary(*local_to_geocentric(upper.position, upper.velocity))
        return {
            'phase': self.current_phase.name,
            'mission_time': self.mission_time,
            'mission_time_str': self.mission_time_str,
            'simulation_speed': self.simulation_speed,
            'return_phase': self.return_guidance.phase.name if self.return_started else None,
            'landing_phase': self.landing_guidance.phase.name if self.landing_started else None,
            'landing_complete': self.landing_complete,
            'hard_landing': self.hard_landing,
            'booster': self._vehicle_telemetry(self.booster, self.booster_phase),
            'upper_stage': self._vehicle_telemetry(upper, self.upper_stage_phase),
            'catch': self.catch_controller.status(),
            'upper_stage_orbit': orbit,
        }
