"""
Starship Flight Simulation - Orbital Mechanics Helper

Two-body Keplerian utilities around a spherical Earth:
- State vectors <-> classical orbital elements
- Kepler's equation (Newton-Raphson) and analytic propagation
- Hohmann transfer and circular insertion budgets
- Mapping of the local launch frame into a geocentric frame

These helpers feed telemetry only; the flight integrator stays in the
local flat frame.

Degenerate geometries are handled explicitly:
- circular orbit: argument of periapsis 0, anomaly measured from the node
- equatorial orbit: RAAN 0, angles measured from the +X axis
- radial (zero angular momentum) trajectory: all angles 0
"""

from typing import NamedTuple, Tuple

import numpy as np

from . import constants as C
from .types import HohmannTransfer

TWO_PI = 2.0 * np.pi
ELEMENT_TOLERANCE = 1e-10
KEPLER_TOLERANCE = 1e-8
KEPLER_MAX_ITERATIONS = 50


class OrbitalElements(NamedTuple):
    """Classical orbital elements (angles in radians)."""
    semi_major_axis: float  # m (0 when parabolic)
    eccentricity: float
    inclination: float
    raan: float  # Right ascension of the ascending node
    argument_of_periapsis: float
    true_anomaly: float


def circular_velocity(r: float, mu: float = C.MU_EARTH) -> float:
    """Circular orbit speed v = sqrt(mu / r) (m/s)."""
    if r <= 0:
        raise ValueError(f"Orbital radius must be positive, got {r}")
    return float(np.sqrt(mu / r))


def orbital_period(a: float, mu: float = C.MU_EARTH) -> float:
    """
    Orbital period T = 2 pi sqrt(a^3 / mu) (s).

    Returns 0.0 for unbound trajectories (a <= 0).
    """
    if a <= 0:
        return 0.0
    return float(TWO_PI * np.sqrt(a ** 3 / mu))


def state_to_elements(r: np.ndarray, v: np.ndarray,
                      mu: float = C.MU_EARTH) -> OrbitalElements:
    """
    Convert a geocentric state to classical orbital elements.

    h = r x v, n = z_hat x h, e_vec = (v x h) / mu - r / |r|,
    a = -mu / (2 E) with E = v^2 / 2 - mu / r.

    Args:
        r: Geocentric position (m)
        v: Geocentric velocity (m/s)
        mu: Gravitational parameter (m^3/s^2)

    Returns:
        OrbitalElements

    Raises:
        ValueError: If |r| is zero
    """
    r = np.asarray(r, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    r_mag = float(np.linalg.norm(r))
    if r_mag < ELEMENT_TOLERANCE:
        raise ValueError("Position vector must be nonzero")
    v_mag = float(np.linalg.norm(v))

    h = np.cross(r, v)
    h_mag = float(np.linalg.norm(h))
    node = np.cross(np.array([0.0, 0.0, 1.0]), h)
    n_mag = float(np.linalg.norm(node))

    e_vec = np.cross(v, h) / mu - r / r_mag
    e = float(np.linalg.norm(e_vec))

    energy = 0.5 * v_mag ** 2 - mu / r_mag
    a = -mu / (2.0 * energy) if abs(energy) > ELEMENT_TOLERANCE else 0.0

    if h_mag < ELEMENT_TOLERANCE:
        return OrbitalElements(a, e, 0.0, 0.0, 0.0, 0.0)

    inclination = float(np.arccos(np.clip(h[2] / h_mag, -1.0, 1.0)))
    raan = float(np.arctan2(node[1], node[0]) % TWO_PI) if n_mag > ELEMENT_TOLERANCE else 0.0

    if e > ELEMENT_TOLERANCE:
        if n_mag > ELEMENT_TOLERANCE:
            omega = float(np.arccos(np.clip(np.dot(node, e_vec) / (n_mag * e), -1.0, 1.0)))
            if e_vec[2] < 0.0:
                omega = TWO_PI - omega
        else:
            omega = float(np.arctan2(e_vec[1], e_vec[0]) % TWO_PI)
        nu = float(np.arccos(np.clip(np.dot(e_vec, r) / (e * r_mag), -1.0, 1.0)))
        if np.dot(r, v) < 0.0:
            nu = TWO_PI - nu
    else:
        omega = 0.0
        if n_mag > ELEMENT_TOLERANCE:
            nu = float(np.arccos(np.clip(np.dot(node, r) / (n_mag * r_mag), -1.0, 1.0)))
            if r[2] < 0.0:
                nu = TWO_PI - nu
        else:
            nu = float(np.arctan2(r[1], r[0]) % TWO_PI)

    return OrbitalElements(a, e, inclination, raan, omega, nu)


def elements_to_state(elements: OrbitalElements,
                      mu: float = C.MU_EARTH) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert orbital elements to a geocentric state (r, v).

    Perifocal position and velocity are rotated by the 3-1-3 sequence
    (RAAN, inclination, argument of periapsis).

    Raises:
        ValueError: If the semi-latus rectum is not positive
    """
    a, e, inc, raan, omega, nu = elements
    p = a * (1.0 - e * e)
    if p <= ELEMENT_TOLERANCE:
        raise ValueError(f"Degenerate orbit: semi-latus rectum {p:.3e} m")

    r_mag = p / (1.0 + e * np.cos(nu))
    r_pqw = r_mag * np.array([np.cos(nu), np.sin(nu), 0.0])
    v_pqw = np.sqrt(mu / p) * np.array([-np.sin(nu), e + np.cos(nu), 0.0])

    cos_o, sin_o = np.cos(raan), np.sin(raan)
    cos_i, sin_i = np.cos(inc), np.sin(inc)
    cos_w, sin_w = np.cos(omega), np.sin(omega)
    rotation = np.array([
        [cos_o * cos_w - sin_o * sin_w * cos_i, -cos_o * sin_w - sin_o * cos_w * cos_i, sin_o * sin_i],
        [sin_o * cos_w + cos_o * sin_w * cos_i, -sin_o * sin_w + cos_o * cos_w * cos_i, -cos_o * sin_i],
        [sin_w * sin_i, cos_w * sin_i, cos_i],
    ])
    return rotation @ r_pqw, rotation @ v_pqw


def solve_kepler(mean_anomaly: float, e: float,
                 tolerance: float = KEPLER_TOLERANCE) -> float:
    """
    Solve Kepler's equation M = E - e sin(E) for the eccentric anomaly.

    Newton-Raphson iteration starting from E = M (E = pi for e > 0.8).

    Raises:
        ValueError: If the orbit is not elliptic (e outside [0, 1))
    """
    if not 0.0 <= e < 1.0:
        raise ValueError(f"Kepler's equation requires 0 <= e < 1, got {e}")
    m = float(np.mod(mean_anomaly, TWO_PI))
    E = np.pi if e > 0.8 else m
    for _ in range(KEPLER_MAX_ITERATIONS):
        delta = (E - e * np.sin(E) - m) / (1.0 - e * np.cos(E))
        E -= delta
        if abs(delta) < tolerance:
            break
    return float(E)


def true_to_mean_anomaly(nu: float, e: float) -> float:
    E = 2.0 * np.arctan2(np.sqrt(1.0 - e) * np.sin(nu / 2.0),
                         np.sqrt(1.0 + e) * np.cos(nu / 2.0))
    return float(E - e * np.sin(E))


def propagate(elements: OrbitalElements, dt: float,
              mu: float = C.MU_EARTH) -> OrbitalElements:
    """
    Advance an elliptic orbit by dt seconds along its Keplerian path.

    Only the true anomaly changes; the shape and orientation are fixed.
    """
    a, e = elements.semi_major_axis, elements.eccentricity
    if a <= 0 or e >= 1.0:
        raise ValueError(f"Propagation requires a bound orbit, got a={a:.1f} m, e={e:.4f}")
    n = np.sqrt(mu / a ** 3)
    M = true_to_mean_anomaly(elements.true_anomaly, e) + n * dt
    E = solve_kepler(M, e)
    nu = 2.0 * np.arctan2(np.sqrt(1.0 + e) * np.sin(E / 2.0),
                          np.sqrt(1.0 - e) * np.cos(E / 2.0))
    return elements._replace(true_anomaly=float(nu % TWO_PI))


def hohmann_transfer(r1: float, r2: float, mu: float = C.MU_EARTH) -> HohmannTransfer:
    """
    Two-impulse Hohmann transfer between circular coplanar orbits.

    a_t = (r1 + r2) / 2
    dv1 = |sqrt(mu (2/r1 - 1/a_t)) - sqrt(mu/r1)|
    dv2 = |sqrt(mu/r2) - sqrt(mu (2/r2 - 1/a_t))|
    t = pi sqrt(a_t^3 / mu)

    Args:
        r1: Initial orbit radius (m)
        r2: Final orbit radius (m)
    """
    if r1 <= 0 or r2 <= 0:
        raise ValueError(f"Orbit radii must be positive, got r1={r1}, r2={r2}")
    a_t = 0.5 * (r1 + r2)
    delta_v1 = abs(np.sqrt(mu * (2.0 / r1 - 1.0 / a_t)) - np.sqrt(mu / r1))
    delta_v2 = abs(np.sqrt(mu / r2) - np.sqrt(mu * (2.0 / r2 - 1.0 / a_t)))
    return {
        'delta_v1': float(delta_v1),
        'delta_v2': float(delta_v2),
        'total_delta_v': float(delta_v1 + delta_v2),
        'transfer_time': float(np.pi * np.sqrt(a_t ** 3 / mu)),
        'transfer_semi_major_axis': float(a_t),
        'transfer_eccentricity': float(abs(r2 - r1) / (r1 + r2)),
    }


def orbital_insertion(altitude: float, mu: float = C.MU_EARTH) -> dict:
    """
    Circular insertion budget at the given altitude.

    The delta-v is the full circular speed (Earth rotation and launch
    latitude are ignored).
    """
    r = C.R_EARTH + altitude
    v_orbit = circular_velocity(r, mu)
    return {
        'delta_v': v_orbit,
        'orbital_velocity': v_orbit,
        'orbital_period': orbital_period(r, mu),
    }


def local_to_geocentric(position: np.ndarray,
                        velocity: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Map the local launch frame into a geocentric frame.

    The pad sits on the geocentric +X axis at one Earth radius; local up
    maps to +X, downrange to +Y and crossrange to +Z, so a downrange
    ascent yields a prograde equatorial orbit.
    """
    position = np.asarray(position, dtype=np.float64)
    velocity = np.asarray(velocity, dtype=np.float64)
    r = np.array([C.R_EARTH + position[1], position[0], position[2]])
    v = np.array([velocity[1], velocity[0], velocity[2]])
    return r, v


def orbit_summary(r: np.ndarray, v: np.ndarray, mu: float = C.MU_EARTH) -> dict:
    """
    Orbit summary for telemetry from a geocentric state.

    Returns:
        dict with semi_major_axis, eccentricity, inclination_deg,
        periapsis_altitude, apoapsis_altitude, period, specific_energy, bound
    """
    r = np.asarray(r, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    elements = state_to_elements(r, v, mu)
    energy = 0.5 * float(np.dot(v, v)) - mu / float(np.linalg.norm(r))
    a, e = elements.semi_major_axis, elements.eccentricity
    bound = energy < 0.0 and a > 0.0

    if bound:
        periapsis = a * (1.0 - e) - C.R_EARTH
        apoapsis = a * (1.0 + e) - C.R_EARTH
    else:
        periapsis = float(np.linalg.norm(r)) - C.R_EARTH
        apoapsis = 0.0

    return {
        'semi_major_axis': a,
        'eccentricity': e,
        'inclination_deg': float(np.degrees(elements.inclination)),
        'periapsis_altitude': float(periapsis),
        'apoapsis_altitude': float(apoapsis),
        'period': orbital_period(a, mu) if bound else 0.0,
        'specific_energy': float(energy),
        'bound': bool(bound),
    }
