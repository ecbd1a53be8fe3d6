"""
Starship Flight Simulation - Propellant consumption and mass properties.
"""

import numpy as np

from . import constants as C
from .atmosphere import pressure_ratio
from .state import Vehicle


def effective_isp(vehicle: Vehicle, altitude: float) -> float:
    """
    Specific impulse interpolated between sea level and vacuum (s).

    Isp = Isp_sl + (Isp_vac - Isp_sl) * (1 - P / P0)
    """
    ratio = pressure_ratio(altitude)
    return vehicle.isp_sl + (vehicle.isp_vac - vehicle.isp_sl) * (1.0 - ratio)


def compute_mass_flow_rate(vehicle: Vehicle, altitude: float = None) -> float:
    """
    Propellant mass flow rate (kg/s, positive while burning).

    mdot = T_max * throttle / (Isp * g0)

    Returns 0 for an inactive vehicle, zero throttle or empty tanks.
    """
    if not vehicle.active or vehicle.throttle <= 0.0 or not vehicle.has_propellant:
        return 0.0
    if altitude is None:
        altitude = vehicle.altitude
    isp = effective_isp(vehicle, altitude)
    throttle = float(np.clip(vehicle.throttle, 0.0, 1.0))
    return vehicle.max_thrust * throttle / (isp * C.G0)


def consume_propellant(vehicle: Vehicle, dt: float) -> float:
    """
    Burn propellant for one step.

    Propellant never drops below zero; on exhaustion the throttle is cut so
    the engine invariants hold.

    Returns:
        Propellant consumed this step (kg)
    """
    mdot = compute_mass_flow_rate(vehicle)
    if mdot <= 0.0:
        return 0.0
    burned = min(vehicle.propellant, mdot * dt)
    vehicle.propellant = max(0.0, vehicle.propellant - burned)
    if vehicle.propellant <= 0.0:
        vehicle.throttle = 0.0
    return burned


def is_propellant_exhausted(vehicle: Vehicle) -> bool:
    """True once the tanks are empty."""
    return vehicle.propellant <= 0.0


def compute_moment_of_inertia(vehicle: Vehicle) -> float:
    """
    Transverse moment of inertia of a uniform slender rod (kg·m²).

    I = m L² / 12, floored so angular accelerations stay finite.
    """
    return max(C.MIN_MASS, vehicle.mass * vehicle.length ** 2 / 12.0)
