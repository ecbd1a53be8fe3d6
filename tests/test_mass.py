import pytest
import numpy as np

from starship_sim import constants as C
from starship_sim import mass
from starship_sim.forces import compute_thrust_force
from starship_sim.state import Vehicle, create_booster


def test_effective_isp_sea_level_and_vacuum():
    booster = create_booster()
    assert mass.effective_isp(booster, 0.0) == pytest.approx(C.BOOSTER_ISP_SL)
    assert mass.effective_isp(booster, 200000.0) == pytest.approx(C.BOOSTER_ISP_VAC, abs=0.01)


def test_mass_flow_rate():
    booster = create_booster()
    booster.set_throttle(1.0)
    expected = C.BOOSTER_MAX_THRUST / (C.BOOSTER_ISP_SL * C.G0)
    assert mass.compute_mass_flow_rate(booster, 0.0) == pytest.approx(expected)


def test_mass_flow_zero_when_idle():
    booster = create_booster()
    assert mass.compute_mass_flow_rate(booster) == 0.0
    booster.set_throttle(1.0)
    booster.deactivate()
    assert mass.compute_mass_flow_rate(booster) == 0.0


def test_mass_monotonically_decreases_while_burning():
    booster = create_booster()
    booster.set_throttle(1.0)
    masses = [booster.mass]
    for _ in range(50):
        mass.consume_propellant(booster, 0.1)
        masses.append(booster.mass)
    assert all(b <= a for a, b in zip(masses, masses[1:]))
    assert masses[-1] < masses[0]


def test_exhaustion_cuts_thrust():
    v = Vehicle(name="small", dry_mass=1000.0, propellant=10.0, propellant_capacity=10.0,
                max_thrust=1e6, position=np.array([0.0, 100.0, 0.0]))
    v.set_throttle(1.0)
    burned = mass.consume_propellant(v, 1.0)
    assert burned == pytest.approx(10.0)
    assert v.propellant == 0.0
    assert v.throttle == 0.0
    assert mass.is_propellant_exhausted(v)
    np.testing.assert_array_equal(compute_thrust_force(v), np.zeros(3))

    # Throttle stays at zero once dry
    assert v.set_throttle(1.0) == 0.0


def test_moment_of_inertia():
    v = Vehicle(dry_mass=1200.0, length=10.0)
    assert mass.compute_moment_of_inertia(v) == pytest.approx(1200.0 * 100.0 / 12.0)
    assert mass.compute_moment_of_inertia(Vehicle(dry_mass=0.0, length=0.0)) >= C.MIN_MASS
