"""
Starship Flight Simulation - Force Computations

This module implements all force calculations for a single vehicle:
- Gravity (constant or inverse-square, selectable)
- Thrust (throttle, gimbal and atmospheric back-pressure)
- Atmospheric drag (deployable surfaces and angle of attack raise Cd)
- Control surface lift and its torque about the centre of mass
- Wind disturbance

The model is vehicle-agnostic: every term depends only on the vehicle's
own fields.
"""

from typing import Optional, Tuple

import numpy as np

from . import constants as C
from .atmosphere import density, pressure_ratio
from .config import SimulationConfig, create_default_config
from .frames import WORLD_UP, body_up_axis, normalize, rotate_body_to_world
from .state import Vehicle
from .types import ForceBreakdown


# =============================================================================
# GRAVITY
# =============================================================================

def compute_gravity_acceleration(altitude: float, model: str = "constant") -> float:
    """
    Gravitational acceleration magnitude at altitude (m/s^2).

    Args:
        altitude: Altitude above the surface (m)
        model: "constant" (9.81) or "inverse_square" (mu / (R + h)^2)

    Raises:
        ValueError: If the model name is unknown
    """
    if model == "constant":
        return C.G_CONSTANT
    if model == "inverse_square":
        r = max(C.R_EARTH + altitude, C.R_EARTH * 0.5)
        return C.MU_EARTH / (r * r)
    raise ValueError(f"Unknown gravity model: {model!r}")


def compute_gravity_force(vehicle: Vehicle, model: str = "constant") -> np.ndarray:
    """Gravity force vector (N), pointing down the world Y axis."""
    g = compute_gravity_acceleration(vehicle.altitude, model)
    return -vehicle.mass * g * WORLD_UP


# =============================================================================
# THRUST
# =============================================================================

def thrust_coefficient(altitude: float) -> float:
    """
    Atmospheric correction factor on rated thrust.

    Thrust grows as back-pressure drops:
        k = min(1.1, 1 + 0.2 * (1 - P / P0))
    """
    ratio = pressure_ratio(altitude)
    return min(C.THRUST_COEFFICIENT_MAX, 1.0 + C.THRUST_PRESSURE_GAIN * (1.0 - ratio))


def compute_thrust_direction(vehicle: Vehicle) -> np.ndarray:
    """
    Unit thrust direction in the world frame.

    The gimbal deflects the body up axis linearly (small-angle):
    body direction = normalize([gx * k, 1, gz * k]).
    """
    gx, gz = vehicle.gimbal
    body_dir = normalize(np.array([gx * C.GIMBAL_LATERAL_GAIN, 1.0, gz * C.GIMBAL_LATERAL_GAIN]))
    return rotate_body_to_world(body_dir, vehicle.orientation)


def compute_thrust_force(vehicle: Vehicle) -> np.ndarray:
    """
    Thrust force vector (N).

    |T| = T_max * throttle * k(altitude); zero unless the vehicle is active,
    throttled up and still has propellant.
    """
    if not vehicle.active or vehicle.throttle <= 0.0 or not vehicle.has_propellant:
        return np.zeros(3)
    magnitude = vehicle.max_thrust * vehicle.throttle * thrust_coefficient(vehicle.altitude)
    return magnitude * compute_thrust_direction(vehicle)


# =============================================================================
# AERODYNAMICS
# =============================================================================

def compute_dynamic_pressure(rho: float, velocity: np.ndarray) -> float:
    """q = 0.5 * rho * |v|^2 (Pa)."""
    speed = np.linalg.norm(velocity)
    return 0.5 * rho * speed * speed


def compute_angle_of_attack(vehicle: Vehicle) -> float:
    """
    Angle between the body axis line and the velocity vector (rad, 0..pi/2).

    Tail-first flight along the axis counts as zero angle of attack.
    """
    v_hat = normalize(vehicle.velocity)
    if not np.any(v_hat):
        return 0.0
    cos_alpha = abs(float(np.dot(body_up_axis(vehicle.orientation), v_hat)))
    return float(np.arccos(np.clip(cos_alpha, 0.0, 1.0)))


def effective_drag_coefficient(vehicle: Vehicle) -> float:
    """
    Cd raised by deployed surfaces and angle of attack.

    Cd_eff = Cd * (1 + sum(deployment * contribution)) * (1 + 2 sin^2(alpha))
    """
    surface_factor = 1.0 + sum(s.deployment * s.drag_contribution
                               for s in vehicle.surfaces.values())
    alpha = compute_angle_of_attack(vehicle)
    aoa_factor = 1.0 + C.AOA_DRAG_FACTOR * np.sin(alpha) ** 2
    return vehicle.drag_coefficient * surface_factor * aoa_factor


def compute_drag_force(vehicle: Vehicle, rho: float) -> np.ndarray:
    """
    Atmospheric drag (N), opposing the velocity vector.

    F = -0.5 * rho * |v|^2 * Cd_eff * A * v_hat
    """
    v_hat = normalize(vehicle.velocity)
    if not np.any(v_hat) or rho <= 0.0:
        return np.zeros(3)
    q = compute_dynamic_pressure(rho, vehicle.velocity)
    return -q * effective_drag_coefficient(vehicle) * vehicle.reference_area * v_hat


def compute_control_surface_force(vehicle: Vehicle, rho: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Lift from deflected control surfaces and its torque about the CoM.

    The lateral deflection command is projected perpendicular to the
    velocity and scaled by dynamic pressure and deployed surface area.
    Surfaces sit half a vehicle length above the centre of mass.

    Returns:
        (force (N), torque (N·m))
    """
    v_hat = normalize(vehicle.velocity)
    deployed_area = sum(s.deployment * s.area for s in vehicle.surfaces.values())
    if not np.any(v_hat) or deployed_area <= 0.0 or rho <= 0.0:
        return np.zeros(3), np.zeros(3)

    command = np.array([vehicle.surface_deflection[0], 0.0, vehicle.surface_deflection[1]])
    perpendicular = command - np.dot(command, v_hat) * v_hat
    if np.linalg.norm(perpendicular) < C.ZERO_TOLERANCE:
        return np.zeros(3), np.zeros(3)

    q = compute_dynamic_pressure(rho, vehicle.velocity)
    force = q * deployed_area * C.CL_SURFACE * perpendicular
    lever_arm = 0.5 * vehicle.length * body_up_axis(vehicle.orientation)
    return force, np.cross(lever_arm, force)


def compute_wind_force(vehicle: Vehicle, rho: float,
                       wind_velocity: Optional[np.ndarray]) -> np.ndarray:
    """
    Wind disturbance force (N): F = 0.5 * rho * Cd * A * |w| * w.

    Ignored in thin air (rho below WIND_MIN_DENSITY).
    """
    if wind_velocity is None or rho <= C.WIND_MIN_DENSITY:
        return np.zeros(3)
    w = np.asarray(wind_velocity, dtype=np.float64)
    return 0.5 * rho * vehicle.drag_coefficient * vehicle.reference_area * np.linalg.norm(w) * w


# =============================================================================
# TOTAL
# =============================================================================

def compute_total_force(vehicle: Vehicle, config: SimulationConfig = None,
                        wind_velocity: Optional[np.ndarray] = None) -> ForceBreakdown:
    """
    Sum all forces acting on one vehicle.

    Args:
        vehicle: Vehicle to evaluate (must be active)
        config: Simulation configuration (gravity model, aero toggle)
        wind_velocity: Optional wind vector (m/s)

    Returns:
        ForceBreakdown with each component, the total and the control torque

    Raises:
        ValueError: If the vehicle is inactive
    """
    if not vehicle.active:
        raise ValueError(f"Cannot compute forces for inactive vehicle '{vehicle.name}'")
    if config is None:
        config = create_default_config()

    gravity = compute_gravity_force(vehicle, config.gravity_model)
    thrust = compute_thrust_force(vehicle)

    aero_on = config.enable_aerodynamics and vehicle.altitude < C.AERO_DISABLE_ALTITUDE
    rho = density(vehicle.altitude) if aero_on else 0.0
    if aero_on:
        drag = compute_drag_force(vehicle, rho)
        lift, torque = compute_control_surface_force(vehicle, rho)
        wind = compute_wind_force(vehicle, rho, wind_velocity)
    else:
        drag = np.zeros(3)
        lift = np.zeros(3)
        torque = np.zeros(3)
        wind = np.zeros(3)

    total = gravity + thrust + drag + lift + wind

    return {
        'gravity': gravity,
        'thrust': thrust,
        'drag': drag,
        'lift': lift,
        'wind': wind,
        'total': total,
        'torque': torque,
        'gravity_magnitude': float(np.linalg.norm(gravity)),
        'thrust_magnitude': float(np.linalg.norm(thrust)),
        'drag_magnitude': float(np.linalg.norm(drag)),
        'lift_magnitude': float(np.linalg.norm(lift)),
        'dynamic_pressure': float(compute_dynamic_pressure(rho, vehicle.velocity)),
        'density': float(rho),
    }
