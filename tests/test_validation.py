import pytest
import numpy as np

from starship_sim import validation
from starship_sim import constants as C
from starship_sim.state import create_booster, create_vehicle_set


@pytest.fixture
def booster():
    return create_booster()


# ============================================================================
# check_state_finite tests
# ============================================================================

def test_check_state_finite(booster):
    assert validation.check_state_finite(booster)


def test_check_state_finite_nan(booster):
    booster.velocity = np.array([np.nan, 0.0, 0.0])
    with pytest.raises(validation.ValidationError):
        validation.check_state_finite(booster)


def test_check_state_finite_inf_orientation(booster):
    booster.orientation = np.array([0.0, np.inf, 0.0])
    with pytest.raises(validation.ValidationError):
        validation.check_state_finite(booster)


# ============================================================================
# propellant and throttle
# ============================================================================

def test_check_propellant_bounds(booster):
    assert validation.check_propellant_bounds(booster)
    booster.propellant = -1.0
    with pytest.raises(validation.ValidationError):
        validation.check_propellant_bounds(booster)
    booster.propellant = booster.propellant_capacity * 1.1
    with pytest.raises(validation.ValidationError):
        validation.check_propellant_bounds(booster)


def test_check_throttle_bounds(booster):
    booster.throttle = 0.5
    assert validation.check_throttle_bounds(booster)
    booster.throttle = 1.2
    with pytest.raises(validation.ValidationError):
        validation.check_throttle_bounds(booster)


def test_check_throttle_without_propellant(booster):
    booster.propellant = 0.0
    booster.throttle = 0.3
    with pytest.raises(validation.ValidationError):
        validation.check_throttle_bounds(booster)


# ============================================================================
# mass and velocity
# ============================================================================

def test_check_mass_valid(booster):
    assert validation.check_mass_valid(booster)
    booster.dry_mass = 0.0
    with pytest.raises(validation.ValidationError):
        validation.check_mass_valid(booster)


def test_check_velocity_reasonable(booster):
    booster.velocity = np.array([7000.0, 0.0, 0.0])
    assert validation.check_velocity_reasonable(booster)
    booster.velocity = np.array([C.MAX_REASONABLE_SPEED + 1.0, 0.0, 0.0])
    with pytest.raises(validation.ValidationError):
        validation.check_velocity_reasonable(booster)


def test_check_angular_velocity_reasonable(booster):
    booster.angular_velocity = np.array([0.0, 0.0, C.MAX_REASONABLE_ANGULAR_RATE * 2])
    with pytest.raises(validation.ValidationError):
        validation.check_velocity_reasonable(booster)


# ============================================================================
# aggregate checks
# ============================================================================

def test_validate_vehicle_no_abort(booster):
    booster.propellant = -10.0
    ok, message = validation.validate_vehicle(booster, abort_on_error=False)
    assert not ok
    assert "propellant" in message


def test_validate_vehicle_abort(booster):
    booster.propellant = -10.0
    with pytest.raises(validation.ValidationError):
        validation.validate_vehicle(booster)


def test_validate_vehicles():
    vehicles = create_vehicle_set()
    assert validation.validate_vehicles(vehicles)
    vehicles.upper_stage.velocity = np.array([np.nan, 0.0, 0.0])
    with pytest.raises(validation.ValidationError):
        validation.validate_vehicles(vehicles)


def test_run_validation_suite(booster):
    results = validation.run_validation_suite(booster)
    assert results['all_passed']
    assert results['mass_valid'] == 'PASS'

    booster.throttle = 2.0
    results = validation.run_validation_suite(booster)
    assert not results['all_passed']
    assert results['throttle_bounds'].startswith('FAIL')
    assert results['state_finite'] == 'PASS'
