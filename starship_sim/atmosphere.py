"""
Starship Flight Simulation - Atmosphere Model

Pure functions of altitude:
- Density: exponential scale-height model up to 50 km, continued with a
  shorter upper scale height above (continuous, strictly decreasing)
- Temperature: layered troposphere / stratosphere / mesosphere profile
- Pressure: ideal gas law from density and temperature

Altitudes below sea level are valid inputs. They are floored at
ATM_MIN_ALTITUDE so every real altitude returns finite positive values.
"""

import numpy as np

from . import constants as C
from .types import AtmosphereProperties


def _clamp_altitude(altitude: float) -> float:
    h = float(altitude)
    if not np.isfinite(h):
        raise ValueError(f"Altitude must be finite, got {altitude}")
    return max(C.ATM_MIN_ALTITUDE, h)


def density(altitude: float) -> float:
    """
    Air density at altitude.

    rho = rho_0 * exp(-h / H)                       h <= 50 km
    rho = rho_50 * exp(-(h - 50 km) / H_upper)      h >  50 km

    Args:
        altitude: Geometric altitude above sea level (m)

    Returns:
        Density (kg/m^3), always > 0
    """
    h = _clamp_altitude(altitude)
    if h <= C.ATM_EXPONENTIAL_CEILING:
        return float(C.RHO_0 * np.exp(-h / C.H_SCALE))
    rho_ceiling = C.RHO_0 * np.exp(-C.ATM_EXPONENTIAL_CEILING / C.H_SCALE)
    return float(rho_ceiling * np.exp(-(h - C.ATM_EXPONENTIAL_CEILING) / C.H_SCALE_UPPER))


def temperature(altitude: float) -> float:
    """
    Layered temperature profile (K).

    Troposphere lapse to 11 km, isothermal to 20 km, warming to the
    stratopause at 50 km, then cooling down to a mesopause floor.
    """
    h = _clamp_altitude(altitude)
    t_tropopause = C.ATM_T0 + C.LAPSE_TROPOSPHERE * C.TROPOPAUSE_ALTITUDE
    if h <= C.TROPOPAUSE_ALTITUDE:
        return float(C.ATM_T0 + C.LAPSE_TROPOSPHERE * h)
    if h <= C.STRATOSPHERE_ISOTHERMAL_TOP:
        return float(t_tropopause)
    t_stratopause = t_tropopause + C.LAPSE_STRATOSPHERE * (
        C.STRATOPAUSE_ALTITUDE - C.STRATOSPHERE_ISOTHERMAL_TOP)
    if h <= C.STRATOPAUSE_ALTITUDE:
        return float(t_tropopause + C.LAPSE_STRATOSPHERE * (h - C.STRATOSPHERE_ISOTHERMAL_TOP))
    t = t_stratopause + C.LAPSE_MESOSPHERE * (h - C.STRATOPAUSE_ALTITUDE)
    return float(max(C.ATM_T_MIN, t))


def pressure(altitude: float) -> float:
    """Static pressure (Pa) from the ideal gas law, P = rho * R * T."""
    return float(density(altitude) * C.R_GAS * temperature(altitude))


def speed_of_sound(altitude: float) -> float:
    """Speed of sound (m/s)."""
    return float(np.sqrt(C.GAMMA * C.R_GAS * temperature(altitude)))


def pressure_ratio(altitude: float) -> float:
    """Ambient pressure relative to the sea-level model value, clamped to [0, 1]."""
    p_sl = C.RHO_0 * C.R_GAS * C.ATM_T0
    return float(np.clip(pressure(altitude) / p_sl, 0.0, 1.0))


def compute_atmosphere_properties(altitude: float) -> AtmosphereProperties:
    """
    Compute all atmospheric properties at once.

    Args:
        altitude: Geometric altitude above sea level (m)

    Returns:
        AtmosphereProperties dict (temperature, pressure, density, speed_of_sound)
    """
    T = temperature(altitude)
    rho = density(altitude)
    return {
        'temperature': T,
        'pressure': float(rho * C.R_GAS * T),
        'density': rho,
        'speed_of_sound': float(np.sqrt(C.GAMMA * C.R_GAS * T)),
    }
