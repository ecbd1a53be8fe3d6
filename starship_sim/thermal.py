"""
Starship Flight Simulation - Aerothermal Heating Model

Heat shield temperature proxy driven by a v^3 sqrt(rho) heating law,
altitude-dependent radiative cooling and an ambient-temperature floor,
plus the Sutton-Graves stagnation heat flux used for the peak heating
watermark.
"""

import logging

import numpy as np

from . import constants as C
from .atmosphere import density, temperature
from .state import Vehicle

logger = logging.getLogger(__name__)


def stagnation_heating_rate(rho: float, v: float, k: float = C.SUTTON_GRAVES_K) -> float:
    """
    Stagnation-point convective heat flux (W/m^2).

    q_dot = k * sqrt(rho) * V^3
    """
    if rho <= 0.0 or v <= 0.0:
        return 0.0
    return k * np.sqrt(rho) * v ** 3


def heat_shield_heating(rho: float, v: float, coefficient: float = C.HEATING_COEFFICIENT) -> float:
    """Heat shield temperature rise rate (K/s): c * v^3 * sqrt(rho)."""
    if rho <= 0.0 or v <= 0.0:
        return 0.0
    return coefficient * v ** 3 * np.sqrt(rho)


def heat_shield_cooling(altitude: float, cooling_rate: float) -> float:
    """
    Radiative cooling rate (K/s), fading out toward the cooling ceiling.

    cooling = rate * (1 - min(1, h / 100 km))
    """
    fraction = min(1.0, max(0.0, altitude) / C.HEAT_SHIELD_COOLING_CEILING)
    return cooling_rate * (1.0 - fraction)


def update_heat_shield(vehicle: Vehicle, dt: float,
                       coefficient: float = C.HEATING_COEFFICIENT,
                       sutton_graves_k: float = C.SUTTON_GRAVES_K) -> dict:
    """
    Advance the heat shield temperature by one step.

    The temperature never falls below the local ambient air temperature.
    An over-temperature excursion is logged once and flagged on the shield.

    Args:
        vehicle: Vehicle whose heat shield is updated
        dt: Time step (s)
        coefficient: Heating law coefficient
        sutton_graves_k: Stagnation heat flux constant

    Returns:
        dict with heating (K/s), cooling (K/s), heat_flux (W/m^2), temperature (K)
    """
    shield = vehicle.heat_shield
    h = vehicle.altitude
    rho = density(h)
    speed = vehicle.speed

    heating = heat_shield_heating(rho, speed, coefficient)
    cooling = heat_shield_cooling(h, shield.cooling_rate)
    ambient = temperature(h)
    shield.temperature = max(ambient, shield.temperature + (heating - cooling) * dt)

    if shield.temperature > shield.max_temperature:
        if not shield.overheated:
            logger.warning(
                f"{vehicle.name} heat shield over temperature: "
                f"{shield.temperature:.0f} K > {shield.max_temperature:.0f} K"
            )
        shield.overheated = True
    else:
        shield.overheated = False

    return {
        'heating': heating,
        'cooling': cooling,
        'heat_flux': stagnation_heating_rate(rho, speed, sutton_graves_k),
        'temperature': shield.temperature,
    }
