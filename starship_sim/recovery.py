"""
Booster recovery helpers for the tower catch:

- CatchController: tower-side tracking, arm servo and the binary catch
  outcome check.
- CatchApproachGuidance: booster-side terminal rendezvous that flies the
  booster to the arms' catch point at a bounded speed.
"""

import logging
from typing import Optional

import numpy as np

from . import constants as C
from .config import SimulationConfig, create_default_config
from .forces import compute_gravity_acceleration, thrust_coefficient
from .frames import WORLD_UP, attitude_for_direction, horizontal_xz, normalize
from .guidance import AttitudeController, make_command
from .state import Vehicle
from .types import CatchStatus, GuidanceCommand

logger = logging.getLogger(__name__)


class CatchController:
    """
    Catch tower ("Mechazilla") arms.

    The tower tracks the booster once it is within tracking range, with a
    small uniform tracking error sampled once per acquisition. The arms
    servo vertically to the booster's catch points at a bounded rate, and
    once in position close horizontally while checking alignment. The
    outcome is decided when the arms are fully closed: caught if both
    vertical and horizontal speeds are below their limits, failed
    otherwise. A booster that drops below the ground altitude fails the
    attempt whether or not the tower is tracking it. Both outcomes are
    terminal until reset().
    """

    def __init__(self, config: SimulationConfig = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or create_default_config()
        self.tower_position = np.array(self.config.tower_position, dtype=np.float64)
        self.catch_point_offset = C.CATCH_POINT_FRACTION * self.config.booster_length
        self.min_arm_height = C.ARM_MIN_HEIGHT
        self.max_arm_height = self.config.tower_height - C.ARM_MIN_HEIGHT
        self._external_rng = rng
        self.reset()

    def reset(self) -> None:
        """Open the arms, return them to the start height and clear all flags."""
        if self._external_rng is not None:
            self.rng = self._external_rng
        else:
            self.rng = np.random.default_rng(self.config.random_seed)
        self.arm_height = self.config.arm_start_height
        self.arm_width = C.ARM_OPEN_WIDTH
        self.tracking = False
        self.tracking_error = np.zeros(3)
        self.in_position = False
        self.catch_in_progress = False
        self.caught = False
        self.failed = False
        self.failure_reason: Optional[str] = None

    @property
    def arm_position(self) -> np.ndarray:
        """Catch point of the arms in the world frame."""
        return np.array([self.tower_position[0], self.arm_height, self.tower_position[2]])

    def status(self) -> CatchStatus:
        return {
            'arm_height': float(self.arm_height),
            'arm_width': float(self.arm_width),
            'arm_position': self.arm_position,
            'tracking': self.tracking,
            'in_position': self.in_position,
            'catch_in_progress': self.catch_in_progress,
            'caught': self.caught,
            'failed': self.failed,
        }

    def catch_point(self) -> np.ndarray:
        """Where the booster base must be for its catch points to meet the arms."""
        return np.array([self.tower_position[0],
                         self.arm_height - self.catch_point_offset,
                         self.tower_position[2]])

    def start_catch_sequence(self, position: np.ndarray) -> None:
        """Arm the tower for a catch attempt, acquiring the booster if in range."""
        self._update_tracking(np.asarray(position, dtype=np.float64))
        logger.info(
            f"Catch sequence started: booster at {np.linalg.norm(position - self.tower_position):.0f} m, "
            f"tracking={'yes' if self.tracking else 'no'}"
        )

    def _update_tracking(self, position: np.ndarray) -> None:
        distance = float(np.linalg.norm(position - self.tower_position))
        if distance <= self.config.catch_tracking_range:
            if not self.tracking:
                accuracy = self.config.catch_tracking_accuracy
                self.tracking_error = self.rng.uniform(-accuracy, accuracy, size=3)
                self.tracking = True
                logger.info(f"Tower tracking acquired at {distance:.0f} m")
        elif self.tracking:
            self.tracking = False
            logger.info(f"Tower tracking lost at {distance:.0f} m")

    def abort(self, reason: str) -> None:
        """Terminate the attempt as failed (no-op once an outcome exists)."""
        if not (self.caught or self.failed):
            self._fail(reason)

    def _fail(self, reason: str) -> None:
        self.failed = True
        self.catch_in_progress = False
        self.failure_reason = reason
        logger.warning(f"Catch failed: {reason}")

    def update(self, dt: float, position: np.ndarray, velocity: np.ndarray) -> CatchStatus:
        """
        Advance the tower by one step.

        Args:
            dt: Time step (s)
            position: Booster base position (m)
            velocity: Booster velocity (m/s)

        Returns:
            CatchStatus snapshot

        Raises:
            ValueError: If dt <= 0
        """
        if dt <= 0:
            raise ValueError(f"Time step dt must be positive, got {dt}")
        if self.caught or self.failed:
            return self.status()

        position = np.asarray(position, dtype=np.float64)
        velocity = np.asarray(velocity, dtype=np.float64)
        self._update_tracking(position)
        if position[1] < C.CATCH_GROUND_ALTITUDE:
            distance = float(np.linalg.norm(horizontal_xz(position) - horizontal_xz(self.tower_position)))
            self._fail(f"booster reached the ground {distance:.1f} m from the tower")
            return self.status()
        if not self.tracking:
            return self.status()

        tracked = position + self.tracking_error
        target_height = tracked[1] + self.catch_point_offset
        max_step = self.config.arm_height_speed * dt
        step = float(np.clip(target_height - self.arm_height, -max_step, max_step))
        self.arm_height = float(np.clip(self.arm_height + step,
                                        self.min_arm_height, self.max_arm_height))
        self.in_position = abs(self.arm_height - target_height) < C.ARM_POSITION_TOLERANCE

        if self.in_position and not self.catch_in_progress:
            self.catch_in_progress = True
            logger.info(f"Arms in position at {self.arm_height:.1f} m, closing")

        if self.catch_in_progress:
            self._attempt_catch(tracked, velocity, dt)
        return self.status()

    def _attempt_catch(self, tracked: np.ndarray, velocity: np.ndarray, dt: float) -> None:
        horizontal_error = float(np.linalg.norm(horizontal_xz(tracked) - horizontal_xz(self.tower_position)))
        catch_height = tracked[1] + self.catch_point_offset
        height_error = abs(catch_height - self.arm_height)
        aligned_horizontally = horizontal_error < C.CATCH_HORIZONTAL_TOLERANCE
        aligned_vertically = height_error < C.CATCH_VERTICAL_TOLERANCE

        if aligned_horizontally and aligned_vertically:
            self.arm_width = max(C.ARM_CLOSED_WIDTH,
                                 self.arm_width - self.config.arm_closing_speed * dt)
            if self.arm_width <= C.ARM_CLOSED_WIDTH:
                vertical_speed = abs(float(velocity[1]))
                horizontal_speed = float(np.linalg.norm(horizontal_xz(velocity)))
                if (vertical_speed < self.config.catch_max_vertical_speed
                        and horizontal_speed < self.config.catch_max_horizontal_speed):
                    self.caught = True
                    self.catch_in_progress = False
                    logger.info(
                        f"Booster caught: vy={vertical_speed:.2f} m/s, "
                        f"vh={horizontal_speed:.2f} m/s"
                    )
                else:
                    self._fail(
                        f"arms closed too fast for the booster "
                        f"(vy={vertical_speed:.2f} m/s, vh={horizontal_speed:.2f} m/s)"
                    )
        elif not aligned_vertically and catch_height < self.arm_height - C.CATCH_MISS_MARGIN:
            # Compared at the catch points: the base sits 56.8 m below them
            self._fail(f"booster fell {self.arm_height - catch_height:.1f} m below the arms")


def compute_catch_guidance(vehicle: Vehicle, catch_point: np.ndarray, g: float) -> dict:
    """
    Rendezvous command flying the booster base to the catch point.

    desired speed = min(5, 0.1 * d) along the line of sight
    response gain = min(2, 1 + 0.01 * d)
    a_cmd = (v_desired - v) * response, magnitude limited to 5 m/s^2
    F = m * (a_cmd + g * up)

    Args:
        vehicle: Booster state
        catch_point: Target base position (m)
        g: Local gravitational acceleration (m/s^2)

    Returns:
        dict with acceleration (m/s^2), thrust_direction (unit vector),
        throttle (0..1), distance (m) and complete flag
    """
    offset = np.asarray(catch_point, dtype=np.float64) - vehicle.position
    distance = float(np.linalg.norm(offset))
    desired_velocity = normalize(offset) * min(C.CATCH_APPROACH_MAX_SPEED,
                                               C.CATCH_APPROACH_SPEED_GAIN * distance)
    response = min(2.0, 1.0 + 0.01 * distance)
    acceleration = (desired_velocity - vehicle.velocity) * response
    norm = np.linalg.norm(acceleration)
    if norm > C.CATCH_APPROACH_ACCEL_LIMIT:
        acceleration = acceleration * (C.CATCH_APPROACH_ACCEL_LIMIT / norm)

    required = vehicle.mass * (acceleration + g * WORLD_UP)
    available = vehicle.max_thrust * thrust_coefficient(vehicle.altitude)
    throttle = float(np.linalg.norm(required)) / available if available > 0.0 else 0.0

    return {
        'acceleration': acceleration,
        'thrust_direction': normalize(required),
        'throttle': float(np.clip(throttle, 0.0, 1.0)),
        'distance': distance,
        'complete': distance < C.CATCH_APPROACH_COMPLETE_DISTANCE,
    }


class CatchApproachGuidance:
    """
    Terminal rendezvous guidance for the booster during the catch.

    The commanded acceleration plus gravity compensation gives the thrust
    vector; its magnitude sets the throttle and its direction the attitude
    setpoint.
    """

    def __init__(self, config: SimulationConfig = None):
        self.config = config or create_default_config()
        self.attitude = AttitudeController(self.config)
        self.complete = False

    def reset(self) -> None:
        self.attitude.reset()
        self.complete = False

    def update(self, vehicle: Vehicle, catch_point: np.ndarray, dt: float) -> GuidanceCommand:
        g = compute_gravity_acceleration(vehicle.altitude, self.config.gravity_model)
        guidance = compute_catch_guidance(vehicle, catch_point, g)
        if guidance['complete'] and not self.complete:
            self.complete = True
            logger.info(f"Catch approach complete, {guidance['distance']:.1f} m from the catch point")

        setpoint = attitude_for_direction(guidance['thrust_direction'])
        return make_command(
            throttle=guidance['throttle'],
            attitude_setpoint=setpoint,
            angular_acceleration=self.attitude.compute(vehicle, setpoint, dt),
            phase="catch_approach",
        )
