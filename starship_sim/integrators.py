"""
Starship Flight Simulation - Numerical Integration

This module implements the semi-implicit Euler integrator for a vehicle's
translational and rotational state, the ground-contact clamp, and the
sub-step splitting used to honour the integration ceiling at any
simulation speed.
"""

import math
from typing import NamedTuple, Tuple

import numpy as np

from . import constants as C
from .frames import wrap_angle
from .mass import consume_propellant
from .state import Vehicle


class StepResult(NamedTuple):
    """Outcome of one integration step."""
    touchdown: bool  # Ground contact occurred this step
    impact_speed: float  # Vertical speed at contact before the clamp (m/s)
    propellant_used: float  # kg
    dt: float  # Step actually integrated (s)


def split_time_step(dt: float, max_dt: float = C.DT_MAX) -> Tuple[int, float]:
    """
    Split a frame interval into equal sub-steps no larger than max_dt.

    Args:
        dt: Frame interval (s), >= 0
        max_dt: Integration ceiling (s), > 0

    Returns:
        (number of sub-steps, sub-step length); (0, 0.0) for a zero interval
    """
    if max_dt <= 0:
        raise ValueError(f"Integration ceiling must be positive, got {max_dt}")
    if dt < 0:
        raise ValueError(f"Time step dt must be non-negative, got {dt}")
    if dt == 0:
        return 0, 0.0
    n = max(1, int(math.ceil(dt / max_dt - 1e-9)))
    return n, dt / n


def apply_ground_contact(vehicle: Vehicle) -> Tuple[bool, float]:
    """
    Clamp a vehicle that has sunk below the ground.

    Inelastic stop: altitude 0, zero velocity, acceleration and angular
    velocity.

    Returns:
        (touchdown, vertical impact speed before the clamp)
    """
    if vehicle.position[1] >= 0.0:
        return False, 0.0
    impact_speed = abs(float(vehicle.velocity[1]))
    vehicle.position = np.array([vehicle.position[0], 0.0, vehicle.position[2]])
    vehicle.velocity = np.zeros(3)
    vehicle.acceleration = np.zeros(3)
    vehicle.angular_velocity = np.zeros(3)
    return True, impact_speed


def semi_implicit_euler_step(vehicle: Vehicle, force: np.ndarray,
                             angular_acceleration: np.ndarray, dt: float,
                             max_dt: float = C.DT_MAX) -> StepResult:
    """
    Advance one vehicle by a single semi-implicit Euler step.

    a = F / m
    v += a * dt
    x += v * dt            (uses the updated velocity)
    w += alpha * dt
    theta += w * dt

    Propellant is consumed at the current throttle for the same interval.

    Args:
        vehicle: Vehicle to mutate (must be active)
        force: Net force in the world frame (N)
        angular_acceleration: Net angular acceleration (rad/s^2)
        dt: Time step (s), capped at max_dt
        max_dt: Stability ceiling (s)

    Returns:
        StepResult with touchdown information

    Raises:
        ValueError: If dt <= 0, the vehicle is inactive or inputs are malformed
    """
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")
    if not vehicle.active:
        raise ValueError(f"Cannot integrate inactive vehicle '{vehicle.name}'")
    force = np.asarray(force, dtype=np.float64)
    angular_acceleration = np.asarray(angular_acceleration, dtype=np.float64)
    if force.shape != (3,):
        raise ValueError(f"Force must have shape (3,), got {force.shape}")
    if angular_acceleration.shape != (3,):
        raise ValueError(
            f"Angular acceleration must have shape (3,), got {angular_acceleration.shape}")
    if np.any(np.isnan(force)) or np.any(np.isnan(angular_acceleration)):
        raise ValueError("Force or angular acceleration contains NaN values")

    dt = min(dt, max_dt)

    acceleration = force / vehicle.mass
    vehicle.acceleration = acceleration
    vehicle.velocity = vehicle.velocity + acceleration * dt
    vehicle.position = vehicle.position + vehicle.velocity * dt

    vehicle.angular_velocity = vehicle.angular_velocity + angular_acceleration * dt
    vehicle.orientation = wrap_angle(vehicle.orientation + vehicle.angular_velocity * dt)

    used = consume_propellant(vehicle, dt)
    touchdown, impact_speed = apply_ground_contact(vehicle)
    return StepResult(touchdown=touchdown, impact_speed=impact_speed,
                      propellant_used=used, dt=dt)
