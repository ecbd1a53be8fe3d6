"""
Starship Flight Simulation - Validation Checks

This module implements per-tick physics validation checks:
- Finite state vectors
- Propellant within [0, capacity]
- Throttle within [0, 1] and zero without propellant
- Positive total mass
- Velocity and angular velocity within reasonable bounds

Each check raises ValidationError on violation.
"""

from typing import Optional, Tuple

import numpy as np

from . import constants as C
from .state import Vehicle, VehicleSet


class ValidationError(Exception):
    """Raised when a physics validation check fails."""
    pass


def check_state_finite(vehicle: Vehicle) -> bool:
    """
    Verify that every state vector of the vehicle is finite.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for field in ('position', 'velocity', 'acceleration', 'orientation', 'angular_velocity'):
        value = getattr(vehicle, field)
        if not np.all(np.isfinite(value)):
            raise ValidationError(f"{vehicle.name}: non-finite {field} {value}")
    return True


def check_propellant_bounds(vehicle: Vehicle) -> bool:
    """Propellant must stay within [0, capacity]."""
    if not 0.0 <= vehicle.propellant <= vehicle.propellant_capacity + C.ZERO_TOLERANCE:
        raise ValidationError(
            f"{vehicle.name}: propellant {vehicle.propellant:.1f} kg outside "
            f"[0, {vehicle.propellant_capacity:.1f}] kg"
        )
    return True


def check_throttle_bounds(vehicle: Vehicle) -> bool:
    """Throttle must lie in [0, 1] and be zero without propellant."""
    if not 0.0 <= vehicle.throttle <= 1.0:
        raise ValidationError(f"{vehicle.name}: throttle {vehicle.throttle:.3f} outside [0, 1]")
    if vehicle.throttle > 0.0 and not vehicle.has_propellant:
        raise ValidationError(
            f"{vehicle.name}: throttle {vehicle.throttle:.3f} with no propellant"
        )
    return True


def check_mass_valid(vehicle: Vehicle) -> bool:
    """
    Check that mass is physically valid.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    if vehicle.mass <= 0.0:
        raise ValidationError(f"{vehicle.name}: non-positive mass {vehicle.mass:.3f} kg")
    if vehicle.dry_mass <= 0.0:
        raise ValidationError(f"{vehicle.name}: non-positive dry mass {vehicle.dry_mass:.3f} kg")
    return True


def check_velocity_reasonable(vehicle: Vehicle) -> bool:
    """
    Check that linear and angular velocity are within reasonable bounds.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    v_mag = float(np.linalg.norm(vehicle.velocity))
    if v_mag > C.MAX_REASONABLE_SPEED:
        raise ValidationError(
            f"{vehicle.name}: velocity exceeds reasonable bounds: |v| = {v_mag:.2f} m/s, "
            f"max = {C.MAX_REASONABLE_SPEED:.2f} m/s"
        )
    omega_mag = float(np.linalg.norm(vehicle.angular_velocity))
    if omega_mag > C.MAX_REASONABLE_ANGULAR_RATE:
        raise ValidationError(
            f"{vehicle.name}: angular velocity exceeds reasonable bounds: "
            f"|ω| = {omega_mag:.4f} rad/s ({np.degrees(omega_mag):.2f} deg/s)"
        )
    return True


def validate_vehicle(vehicle: Vehicle, abort_on_error: bool = True) -> Tuple[bool, Optional[str]]:
    """
    Perform all validation checks on a vehicle.

    Args:
        vehicle: Vehicle to validate
        abort_on_error: If True, raise exception on first error
    """
    try:
        check_state_finite(vehicle)
        check_propellant_bounds(vehicle)
        check_throttle_bounds(vehicle)
        check_mass_valid(vehicle)
        check_velocity_reasonable(vehicle)
        return True, None
    except ValidationError as e:
        if abort_on_error:
            raise
        return False, str(e)


def validate_vehicles(vehicles: VehicleSet) -> bool:
    """Validate both stages; raises ValidationError on the first violation."""
    for vehicle in (vehicles.booster, vehicles.upper_stage):
        validate_vehicle(vehicle)
    return True


def run_validation_suite(vehicle: Vehicle) -> dict:
    """
    Run all validation checks and return results.

    Returns:
        Dictionary of check name -> 'PASS' or 'FAIL: ...', plus all_passed
    """
    results = {'all_passed': True}
    checks = [
        ('state_finite', check_state_finite),
        ('propellant_bounds', check_propellant_bounds),
        ('throttle_bounds', check_throttle_bounds),
        ('mass_valid', check_mass_valid),
        ('velocity_reasonable', check_velocity_reasonable),
    ]
    for name, check in checks:
        try:
            check(vehicle)
            results[name] = 'PASS'
        except ValidationError as e:
            results[name] = f'FAIL: {e}'
            results['all_passed'] = False
    return results
