import pytest
import numpy as np

from starship_sim import constants as C
from starship_sim.config import create_test_config
from starship_sim.state import (
    DeployableSurface,
    Vehicle,
    create_booster,
    create_upper_stage,
    create_vehicle_set,
)


@pytest.fixture
def vehicles():
    return create_vehicle_set(create_test_config())


def test_vehicle_set_initial_configuration(vehicles):
    booster, upper = vehicles.booster, vehicles.upper_stage
    assert booster.active
    assert not upper.active
    assert booster.payload_mass == pytest.approx(upper.dry_mass + upper.propellant)
    assert booster.propellant == booster.propellant_capacity
    assert upper.altitude == pytest.approx(booster.altitude + C.STACK_OFFSET)
    assert vehicles.active_vehicles() == [booster]


def test_stack_mass(vehicles):
    expected = (C.BOOSTER_DRY_MASS + C.BOOSTER_PROPELLANT_MASS
                + C.UPPER_STAGE_DRY_MASS + C.UPPER_STAGE_PROPELLANT_MASS)
    assert vehicles.booster.mass == pytest.approx(expected)


def test_surfaces_created():
    assert set(create_booster().surfaces) == {'grid_fins', 'legs'}
    assert set(create_upper_stage().surfaces) == {'flaps'}


def test_vehicle_arrays_are_float():
    v = Vehicle(position=[1, 2, 3])
    assert isinstance(v.position, np.ndarray)
    assert v.position.dtype == np.float64


def test_mass_floored():
    v = Vehicle(dry_mass=0.0)
    assert v.mass == C.MIN_MASS


def test_set_throttle_invariants():
    booster = create_booster()
    assert booster.set_throttle(1.5) == 1.0
    assert booster.set_throttle(-0.5) == 0.0
    booster.propellant = 0.0
    assert booster.set_throttle(0.8) == 0.0
    booster.propellant = 100.0
    booster.deactivate()
    assert booster.set_throttle(0.8) == 0.0


def test_gimbal_clamped():
    booster = create_booster()
    booster.set_gimbal(np.array([3.0, -2.0]))
    np.testing.assert_array_equal(booster.gimbal, [1.0, -1.0])


def test_deployable_surface_monotonic_and_bounded():
    surface = DeployableSurface(rate=0.3)
    values = [surface.update(True, 1.0) for _ in range(5)]
    assert values == sorted(values)
    assert surface.deployment == 1.0
    assert surface.is_deployed
    for _ in range(5):
        surface.update(False, 1.0)
    assert surface.deployment == 0.0


def test_record_peaks_never_decrease():
    booster = create_booster()
    booster.record_peaks(1000.0, 20.0, 5.0)
    booster.record_peaks(500.0, 10.0, 1.0)
    assert booster.max_dynamic_pressure == 1000.0
    assert booster.max_acceleration == 20.0
    assert booster.max_heating_rate == 5.0


def test_propellant_fraction():
    booster = create_booster()
    booster.propellant = booster.propellant_capacity / 4
    assert booster.propellant_fraction == pytest.approx(0.25)
    assert Vehicle().propellant_fraction == 0.0


def test_copy_is_deep():
    booster = create_booster()
    clone = booster.copy()
    clone.position[1] = 500.0
    clone.surfaces['grid_fins'].deployment = 1.0
    clone.heat_shield.temperature = 1000.0
    assert booster.position[1] == pytest.approx(C.BOOSTER_PAD_HEIGHT)
    assert booster.surfaces['grid_fins'].deployment == 0.0
    assert booster.heat_shield.temperature == pytest.approx(C.ATM_T0)


def test_str():
    assert "booster" in str(create_booster())
