"""
Guidance module implementing the phase-aware control laws for both stages:
ascent pitch program, upper-stage ascent, booster return
(coast/flip/burn/approach), the generic approach/final landing controller
and the multi-phase booster landing controller with deployable surfaces.

Every law returns a GuidanceCommand. All mutable guidance state (PIDs,
sub-phase, timers) lives in the guidance objects, which are rebuilt at
phase entry and at reset.
"""

from enum import Enum, auto
import logging
from typing import Optional

import numpy as np

from . import constants as C
from .config import SimulationConfig, create_default_config
from .forces import compute_gravity_acceleration, thrust_coefficient
from .frames import (
    WORLD_UP,
    attitude_for_direction,
    horizontal_component,
    horizontal_xz,
    normalize,
    wrap_angle,
)
from .pid import (
    create_attitude_pid,
    create_horizontal_position_pid,
    create_vertical_velocity_pid,
)
from .state import Vehicle
from .types import GuidanceCommand

logger = logging.getLogger(__name__)


class ReturnPhase(Enum):
    COAST = auto()
    FLIP = auto()
    BURN = auto()
    APPROACH = auto()
    FINAL = auto()


class LandingPhase(Enum):
    COAST = auto()
    BOOSTBACK = auto()
    ENTRY = auto()
    DESCENT = auto()
    LANDING = auto()
    TOUCHDOWN = auto()


# =============================================================================
# HELPER FUNCTIONS (stateless)
# =============================================================================

def make_command(throttle: float = 0.0, gimbal=None, surface_deflection=None,
                 attitude_setpoint=None, angular_acceleration=None,
                 phase: str = "") -> GuidanceCommand:
    """Build a GuidanceCommand with zeroed defaults."""
    return {
        'throttle': float(np.clip(throttle, 0.0, 1.0)),
        'gimbal': np.zeros(2) if gimbal is None else np.asarray(gimbal, dtype=np.float64),
        'surface_deflection': (np.zeros(2) if surface_deflection is None
                               else np.asarray(surface_deflection, dtype=np.float64)),
        'attitude_setpoint': (None if attitude_setpoint is None
                              else np.asarray(attitude_setpoint, dtype=np.float64)),
        'angular_acceleration': (np.zeros(3) if angular_acceleration is None
                                 else np.asarray(angular_acceleration, dtype=np.float64)),
        'phase': phase,
    }


def apply_command(vehicle: Vehicle, command: GuidanceCommand) -> None:
    """Write a command into the vehicle's actuator fields (throttle invariants enforced)."""
    vehicle.set_throttle(command['throttle'])
    vehicle.set_gimbal(command['gimbal'])
    vehicle.surface_deflection = np.clip(command['surface_deflection'], -1.0, 1.0)


def angular_damping_rate(vehicle: Vehicle) -> float:
    """Angular rate damping (1/s), raised by deployed grid fins."""
    return C.ANGULAR_DAMPING + C.FIN_ANGULAR_DAMPING * vehicle.surface_deployment('grid_fins')


def retrograde_attitude(vehicle: Vehicle) -> np.ndarray:
    """Orientation with the thrust axis opposing the velocity vector."""
    return attitude_for_direction(-vehicle.velocity)


def ascent_pitch(altitude: float, config: SimulationConfig) -> float:
    """
    Open-loop pitch program (rad).

    Zero below the program start altitude, then growing linearly with
    altitude up to the configured maximum.
    """
    if altitude <= config.pitch_program_start_altitude:
        return 0.0
    return min(config.pitch_program_max,
               (altitude - config.pitch_program_start_altitude) * C.PITCH_PROGRAM_RATE)


def boostback_attitude(vehicle: Vehicle, target: np.ndarray) -> np.ndarray:
    """
    Attitude leaning the thrust axis toward the return target.

    The lean equals the line-of-sight angle to the target from vertical,
    limited to RETURN_MAX_TILT.
    """
    to_target = horizontal_component(target - vehicle.position)
    distance = float(np.linalg.norm(to_target))
    if distance < C.ZERO_TOLERANCE:
        return np.zeros(3)
    tilt = min(C.RETURN_MAX_TILT, np.arctan2(distance, max(vehicle.altitude, 1.0)))
    direction = np.cos(tilt) * WORLD_UP + np.sin(tilt) * to_target / distance
    return attitude_for_direction(direction)


def hover_slam_velocity(altitude: float, g: float, touchdown_speed: float) -> float:
    """
    Target vertical velocity for a hover-slam profile (m/s, negative = down).

    v = -sqrt(2 * k * g * h), never slower than the touchdown speed.
    """
    h = max(0.0, altitude)
    return min(-touchdown_speed, -np.sqrt(2.0 * C.HOVER_SLAM_DECEL_FRACTION * g * h))


def hover_slam_throttle(vehicle: Vehicle, g: float, touchdown_speed: float) -> float:
    """
    Throttle that slows the descent to the touchdown speed exactly at the ground.

    a = (v^2 - v_td^2) / (2 * h),  throttle = m * (g + a) / T_available

    Drag is ignored, so the estimate errs toward braking early. The result
    is not clipped: values above 1 mean the burn can no longer stop in time.
    """
    available = vehicle.max_thrust * thrust_coefficient(vehicle.altitude)
    if available <= 0.0:
        return 0.0
    h = max(vehicle.altitude, C.HOVER_SLAM_MIN_ALTITUDE)
    descent_rate = max(0.0, -float(vehicle.velocity[1]))
    deceleration = max(0.0, descent_rate ** 2 - touchdown_speed ** 2) / (2.0 * h)
    return vehicle.mass * (g + deceleration) / available


def ground_effect_force(vehicle: Vehicle, g: float) -> np.ndarray:
    """
    Extra upward force from ground effect close to the pad (N).

    F = 0.2 * (1 - h / 20) * throttle * g * m for h below 20 m.
    """
    h = vehicle.altitude
    if h >= C.GROUND_EFFECT_ALTITUDE or h < 0.0 or vehicle.throttle <= 0.0:
        return np.zeros(3)
    factor = C.GROUND_EFFECT_GAIN * (1.0 - h / C.GROUND_EFFECT_ALTITUDE)
    return factor * vehicle.throttle * g * vehicle.mass * WORLD_UP


# =============================================================================
# ATTITUDE CONTROL
# =============================================================================

class AttitudeController:
    """
    Attitude PID whose output is an angular-velocity correction.

    The correction is applied as angular acceleration
    (ATTITUDE_RATE_GAIN * output) on top of rate damping. With no setpoint
    the vehicle only damps its rates.
    """

    def __init__(self, config: SimulationConfig = None):
        self.pid = create_attitude_pid(config)

    def reset(self) -> None:
        self.pid.reset()

    def compute(self, vehicle: Vehicle, setpoint: Optional[np.ndarray],
                dt: float) -> np.ndarray:
        damping = -angular_damping_rate(vehicle) * vehicle.angular_velocity
        if setpoint is None:
            return damping
        error = wrap_angle(np.asarray(setpoint) - vehicle.orientation)
        correction = self.pid.update(error, dt)
        return C.ATTITUDE_RATE_GAIN * correction + damping


# =============================================================================
# ASCENT
# =============================================================================

class AscentGuidance:
    """Launch and ascent of the stacked vehicle: fixed throttle plus pitch program."""

    def __init__(self, config: SimulationConfig = None):
        self.config = config or create_default_config()
        self.attitude = AttitudeController(self.config)

    def reset(self) -> None:
        self.attitude.reset()

    def update(self, vehicle: Vehicle, ascent: bool, dt: float) -> GuidanceCommand:
        """
        Args:
            vehicle: Booster carrying the upper stage
            ascent: False during LAUNCH, True during ASCENT
            dt: Time step (s)
        """
        if not ascent:
            throttle = self.config.launch_throttle
            setpoint = np.zeros(3)
        else:
            throttle = self.config.ascent_throttle
            setpoint = np.array([0.0, 0.0, ascent_pitch(vehicle.altitude, self.config)])
        return make_command(
            throttle=throttle,
            attitude_setpoint=setpoint,
            angular_acceleration=self.attitude.compute(vehicle, setpoint, dt),
            phase="ascent" if ascent else "launch",
        )


class UpperStageGuidance:
    """
    Upper-stage ascent after separation: full throttle until the orbit
    altitude is reached or the tanks run dry, attitude held by damping.
    """

    def __init__(self, config: SimulationConfig = None):
        self.config = config or create_default_config()
        self.ascending = False
        self.cutoff_reason: Optional[str] = None

    def start(self) -> None:
        self.ascending = True
        self.cutoff_reason = None

    def update(self, vehicle: Vehicle, dt: float) -> GuidanceCommand:
        if self.ascending:
            if vehicle.altitude > self.config.orbit_altitude:
                self.ascending = False
                self.cutoff_reason = "orbit"
            elif not vehicle.has_propellant:
                self.ascending = False
                self.cutoff_reason = "propellant"
        return make_command(
            throttle=1.0 if self.ascending else 0.0,
            angular_acceleration=-angular_damping_rate(vehicle) * vehicle.angular_velocity,
            phase="starship_ascent" if self.ascending else "coast",
        )


# =============================================================================
# APPROACH / FINAL LANDING CONTROLLER
# =============================================================================

class ApproachGuidance:
    """
    Generic two-stage landing controller.

    APPROACH: bounded descent rate proportional to altitude, heading toward
    the target and control surface steering.
    FINAL: hover at HOVER_ALTITUDE, then descend at touchdown speed with
    gimbal steering and a vertical attitude.
    """

    def __init__(self, target: np.ndarray, config: SimulationConfig = None):
        self.config = config or create_default_config()
        self.target = np.asarray(target, dtype=np.float64)
        self.vertical_pid = create_vertical_velocity_pid(self.config)
        self.horizontal_pid = create_horizontal_position_pid(self.config)
        self.attitude = AttitudeController(self.config)
        self.phase = ReturnPhase.APPROACH

    def reset(self) -> None:
        self.vertical_pid.reset()
        self.horizontal_pid.reset()
        self.attitude.reset()
        self.phase = ReturnPhase.APPROACH

    def target_descent_rate(self, altitude: float) -> float:
        """Target vertical velocity for the current phase (m/s, negative = down)."""
        if self.phase == ReturnPhase.APPROACH:
            return max(-C.APPROACH_MAX_DESCENT_RATE, -altitude / C.APPROACH_DESCENT_DIVISOR)
        hover = self.config.hover_altitude
        if altitude > hover:
            return -min(C.HOVER_MAX_DESCENT_RATE, (altitude - hover) / 2.0)
        return -self.config.touchdown_speed

    def update(self, vehicle: Vehicle, dt: float) -> GuidanceCommand:
        h = vehicle.altitude
        if self.phase == ReturnPhase.APPROACH and h < self.config.approach_final_altitude:
            self.phase = ReturnPhase.FINAL
            self.vertical_pid.reset()
            self.horizontal_pid.reset()
            logger.info(f"Approach -> final at {h:.0f} m")

        self.vertical_pid.setpoint = self.target_descent_rate(h)
        adjustment = self.vertical_pid.compute(vehicle.velocity[1], dt)
        throttle = float(np.clip(C.APPROACH_BASE_THROTTLE + adjustment, 0.0, 1.0))

        steering = self.horizontal_pid.update(
            horizontal_xz(self.target) - horizontal_xz(vehicle.position), dt)

        if self.phase == ReturnPhase.APPROACH:
            offset = self.target - vehicle.position
            heading = float(np.arctan2(offset[0], offset[2]))
            setpoint = np.array([0.0, heading, 0.0])
            gimbal = np.zeros(2)
            surface = steering * C.APPROACH_FIN_GAIN
        else:
            setpoint = np.zeros(3)
            gimbal = steering * C.FINAL_GIMBAL_GAIN
            surface = np.zeros(2)

        return make_command(
            throttle=throttle,
            gimbal=gimbal,
            surface_deflection=surface,
            attitude_setpoint=setpoint,
            angular_acceleration=self.attitude.compute(vehicle, setpoint, dt),
            phase=self.phase.name.lower(),
        )


# =============================================================================
# BOOSTER RETURN
# =============================================================================

class BoosterReturnGuidance:
    """
    Time-gated return sequence: coast -> flip -> burn -> approach.

    During flip and burn the attitude setpoint slews toward the boostback
    attitude at a fixed fraction of the remaining error per second.
    """

    def __init__(self, target: np.ndarray = None, config: SimulationConfig = None):
        self.config = config or create_default_config()
        if target is None:
            target = np.array(self.config.tower_position)
        self.target = np.asarray(target, dtype=np.float64)
        self.approach = ApproachGuidance(self.target, self.config)
        self.attitude = AttitudeController(self.config)
        self.phase = ReturnPhase.COAST
        self.phase_time = 0.0
        self.setpoint = np.zeros(3)

    def start(self, vehicle: Vehicle) -> None:
        """Initialise the sequence at the end of stage separation."""
        self.phase = ReturnPhase.COAST
        self.phase_time = 0.0
        self.setpoint = vehicle.orientation.copy()
        self.attitude.reset()
        self.approach.reset()
        logger.info(f"Booster return started at {vehicle.altitude:.0f} m")

    def _enter(self, phase: ReturnPhase) -> None:
        logger.info(f"Booster return: {self.phase.name} -> {phase.name}")
        self.phase = phase
        self.phase_time = 0.0

    def _slew(self, vehicle: Vehicle, rate: float, dt: float) -> np.ndarray:
        goal = boostback_attitude(vehicle, self.target)
        step = wrap_angle(goal - self.setpoint) * min(1.0, rate * dt)
        self.setpoint = wrap_angle(self.setpoint + step)
        return self.setpoint

    def update(self, vehicle: Vehicle, dt: float) -> GuidanceCommand:
        self.phase_time += dt
        cfg = self.config

        if self.phase == ReturnPhase.COAST and self.phase_time >= cfg.return_coast_duration:
            self._enter(ReturnPhase.FLIP)
        elif self.phase == ReturnPhase.FLIP and self.phase_time >= cfg.return_flip_duration:
            self._enter(ReturnPhase.BURN)
        elif self.phase == ReturnPhase.BURN and self.phase_time >= cfg.return_burn_duration:
            self._enter(ReturnPhase.APPROACH)
            self.approach.reset()

        if self.phase in (ReturnPhase.APPROACH, ReturnPhase.FINAL):
            command = self.approach.update(vehicle, dt)
            self.phase = self.approach.phase
            return command

        if self.phase == ReturnPhase.COAST:
            throttle = 0.0
            setpoint = self.setpoint
        elif self.phase == ReturnPhase.FLIP:
            throttle = cfg.return_flip_throttle
            setpoint = self._slew(vehicle, C.RETURN_FLIP_SLEW_RATE, dt)
        else:
            throttle = cfg.return_burn_throttle
            setpoint = self._slew(vehicle, C.RETURN_BURN_SLEW_RATE, dt)

        return make_command(
            throttle=throttle,
            attitude_setpoint=setpoint,
            angular_acceleration=self.attitude.compute(vehicle, setpoint, dt),
            phase=self.phase.name.lower(),
        )


# =============================================================================
# BOOSTER LANDING
# =============================================================================

class BoosterLandingGuidance:
    """
    Multi-phase booster landing controller.

    Sub-phases advance in fixed order by altitude threshold or elapsed time,
    whichever comes first, one transition per update. Each sub-phase picks a
    base throttle, a vertical-velocity target, an attitude target and a
    horizontal steering channel (grid fins at altitude, gimbal near the
    ground). Grid fins and legs deploy and stow by altitude window.

    The landing burn lights at the burn altitude or earlier, once the
    hover-slam throttle reaches the ignition threshold, and never runs
    below that throttle.
    """

    BASE_THROTTLE = {
        LandingPhase.COAST: C.LANDING_THROTTLE_COAST,
        LandingPhase.BOOSTBACK: C.LANDING_THROTTLE_BOOSTBACK,
        LandingPhase.ENTRY: C.LANDING_THROTTLE_ENTRY,
        LandingPhase.DESCENT: C.LANDING_THROTTLE_DESCENT,
        LandingPhase.LANDING: C.LANDING_THROTTLE_LANDING,
        LandingPhase.TOUCHDOWN: C.LANDING_THROTTLE_TOUCHDOWN,
    }

    def __init__(self, target: np.ndarray = None, config: SimulationConfig = None):
        self.config = config or create_default_config()
        if target is None:
            target = np.array(self.config.tower_position)
        self.target = np.asarray(target, dtype=np.float64)
        self.vertical_pid = create_vertical_velocity_pid(self.config)
        self.horizontal_pid = create_horizontal_position_pid(self.config)
        self.attitude = AttitudeController(self.config)
        self.phase = LandingPhase.COAST
        self.phase_time = 0.0
        self.touched_down = False
        self.touchdown_speed: Optional[float] = None
        self.landing_complete = False
        self.hard_landing = False

    def start(self, vehicle: Vehicle) -> None:
        """Begin the landing sequence from the coast sub-phase."""
        self.phase = LandingPhase.COAST
        self.phase_time = 0.0
        self.touched_down = False
        self.touchdown_speed = None
        self.landing_complete = False
        self.hard_landing = False
        self._reset_controllers()
        logger.info(f"Landing sequence started at {vehicle.altitude:.0f} m")

    def _reset_controllers(self) -> None:
        self.vertical_pid.reset()
        self.horizontal_pid.reset()
        self.horizontal_pid.kp = self.config.horizontal_kp
        self.attitude.reset()

    def _enter(self, phase: LandingPhase, altitude: float) -> None:
        logger.info(f"Landing: {self.phase.name} -> {phase.name} at {altitude:.0f} m")
        self.phase = phase
        self.phase_time = 0.0
        self._reset_controllers()

    def advance_phase(self, altitude: float, burn_throttle: float = 0.0) -> LandingPhase:
        """
        Apply at most one sub-phase transition for the current altitude and timer.

        burn_throttle is the hover-slam throttle the vehicle would need right
        now; the landing burn lights above its altitude once that reaches the
        ignition threshold.
        """
        cfg = self.config
        t = self.phase_time
        if self.phase == LandingPhase.COAST:
            if altitude <= cfg.landing_boostback_altitude:
                self._enter(LandingPhase.BOOSTBACK, altitude)
        elif self.phase == LandingPhase.BOOSTBACK:
            if t > cfg.landing_boostback_duration or altitude <= cfg.landing_entry_altitude:
                self._enter(LandingPhase.ENTRY, altitude)
        elif self.phase == LandingPhase.ENTRY:
            if t > cfg.landing_entry_duration or altitude <= cfg.landing_descent_altitude:
                self._enter(LandingPhase.DESCENT, altitude)
        elif self.phase == LandingPhase.DESCENT:
            if altitude <= cfg.landing_burn_altitude or burn_throttle >= cfg.landing_ignition_throttle:
                self._enter(LandingPhase.LANDING, altitude)
        elif self.phase == LandingPhase.LANDING:
            if altitude <= 0.0:
                self._enter(LandingPhase.TOUCHDOWN, altitude)
        return self.phase

    def update_deployables(self, vehicle: Vehicle, dt: float) -> None:
        """Deploy or stow grid fins and legs according to their altitude windows."""
        h = vehicle.altitude
        fins = vehicle.surfaces.get('grid_fins')
        if fins is not None:
            fins.update(self.config.grid_fin_min_altitude <= h <= self.config.grid_fin_max_altitude, dt)
        legs = vehicle.surfaces.get('legs')
        if legs is not None:
            legs.update(h <= self.config.leg_deploy_altitude, dt)

    def notify_touchdown(self, impact_speed: float) -> None:
        """Record first ground contact and flag a hard landing."""
        if self.touched_down:
            return
        self.touched_down = True
        self.touchdown_speed = impact_speed
        if impact_speed > self.config.hard_landing_speed:
            self.hard_landing = True
            logger.warning(f"Hard landing: impact speed {impact_speed:.1f} m/s")
        else:
            logger.info(f"Touchdown at {impact_speed:.1f} m/s")

    def _touchdown_base_throttle(self) -> float:
        if self.phase_time > C.TOUCHDOWN_SETTLE_TIME:
            return 0.0
        return C.LANDING_THROTTLE_TOUCHDOWN * max(0.0, 1.0 - C.TOUCHDOWN_THROTTLE_DECAY * self.phase_time)

    def update(self, vehicle: Vehicle, dt: float) -> GuidanceCommand:
        self.phase_time += dt
        self.update_deployables(vehicle, dt)
        h = vehicle.altitude
        g = compute_gravity_acceleration(h, self.config.gravity_model)
        burn_throttle = hover_slam_throttle(vehicle, g, self.config.touchdown_speed)
        self.advance_phase(h, burn_throttle)

        fin_effectiveness = vehicle.surface_deployment('grid_fins')
        throttle = self.BASE_THROTTLE[self.phase]
        vertical_target = None
        gimbal = np.zeros(2)
        surface = np.zeros(2)
        setpoint = np.zeros(3)
        target_error = horizontal_xz(self.target) - horizontal_xz(vehicle.position)

        if self.phase == LandingPhase.COAST:
            if vehicle.speed > C.RETROGRADE_MIN_SPEED:
                setpoint = retrograde_attitude(vehicle)

        elif self.phase == LandingPhase.BOOSTBACK:
            v_h = horizontal_component(vehicle.velocity)
            speed_h = float(np.linalg.norm(v_h))
            if speed_h > C.ZERO_TOLERANCE:
                tilt = min(C.RETURN_MAX_TILT, speed_h * C.BOOSTBACK_TILT_GAIN)
                direction = np.cos(tilt) * WORLD_UP - np.sin(tilt) * v_h / speed_h
                setpoint = attitude_for_direction(direction)

        elif self.phase == LandingPhase.ENTRY:
            if vehicle.speed > C.RETROGRADE_MIN_SPEED:
                setpoint = retrograde_attitude(vehicle)
            vertical_target = C.ENTRY_TARGET_VELOCITY

        elif self.phase == LandingPhase.DESCENT:
            if fin_effectiveness > C.FIN_STEERING_MIN_EFFECTIVENESS:
                steering = self.horizontal_pid.update(target_error, dt)
                surface = steering / self.config.horizontal_limit * fin_effectiveness
                lean = C.FIN_STEERING_GAIN * fin_effectiveness * steering
                setpoint = attitude_for_direction(WORLD_UP + np.array([lean[0], 0.0, lean[1]]))

        elif self.phase == LandingPhase.LANDING:
            throttle = max(throttle, burn_throttle)
            vertical_target = hover_slam_velocity(h, g, self.config.touchdown_speed)
            schedule = 1.0 - min(1.0, max(0.0, h) / C.LANDING_KP_SCHEDULE_ALTITUDE)
            self.horizontal_pid.kp = C.LANDING_KP_BASE + C.LANDING_KP_SCHEDULE * schedule
            steering = self.horizontal_pid.update(target_error, dt)
            gimbal = np.clip(steering * C.LANDING_GIMBAL_GAIN, -1.0, 1.0)
            tilt = vehicle.gimbal_limit * C.LANDING_TILT_FRACTION
            setpoint = np.array([gimbal[1] * tilt, 0.0, -gimbal[0] * tilt])

        else:
            throttle = self._touchdown_base_throttle()
            vertical_target = hover_slam_velocity(h, g, self.config.touchdown_speed)
            if (self.phase_time > C.TOUCHDOWN_SETTLE_TIME
                    and h <= C.LANDED_ALTITUDE_TOLERANCE
                    and abs(vehicle.velocity[1]) < C.LANDED_VELOCITY_TOLERANCE
                    and not self.landing_complete):
                self.landing_complete = True
                logger.info("Booster landing complete")

        if vertical_target is not None:
            self.vertical_pid.setpoint = vertical_target
            throttle += self.vertical_pid.compute(vehicle.velocity[1], dt)
        if self.phase == LandingPhase.TOUCHDOWN and self.phase_time > C.TOUCHDOWN_SETTLE_TIME:
            throttle = 0.0

        return make_command(
            throttle=float(np.clip(throttle, 0.0, 1.0)),
            gimbal=gimbal,
            surface_deflection=surface,
            attitude_setpoint=setpoint,
            angular_acceleration=self.attitude.compute(vehicle, setpoint, dt),
            phase=self.phase.name.lower(),
        )
