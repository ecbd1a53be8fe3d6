import pytest
import numpy as np

from starship_sim import constants as C
from starship_sim import orbital
from starship_sim.orbital import OrbitalElements

LEO_RADIUS = C.R_EARTH + 200000.0


def test_circular_velocity_leo():
    assert orbital.circular_velocity(LEO_RADIUS) == pytest.approx(7788.0, abs=5.0)
    with pytest.raises(ValueError):
        orbital.circular_velocity(0.0)


def test_orbital_period():
    assert orbital.orbital_period(LEO_RADIUS) == pytest.approx(5310.0, abs=20.0)
    assert orbital.orbital_period(0.0) == 0.0
    assert orbital.orbital_period(-1e7) == 0.0


def test_circular_equatorial_elements():
    v = orbital.circular_velocity(LEO_RADIUS)
    elements = orbital.state_to_elements(np.array([LEO_RADIUS, 0.0, 0.0]),
                                         np.array([0.0, v, 0.0]))
    assert elements.semi_major_axis == pytest.approx(LEO_RADIUS, rel=1e-9)
    assert elements.eccentricity == pytest.approx(0.0, abs=1e-9)
    assert elements.inclination == pytest.approx(0.0)
    assert elements.raan == 0.0
    assert elements.argument_of_periapsis == 0.0
    assert elements.true_anomaly == pytest.approx(0.0)


def test_radial_trajectory_has_no_nan():
    elements = orbital.state_to_elements(np.array([C.R_EARTH, 0.0, 0.0]),
                                         np.array([100.0, 0.0, 0.0]))
    assert all(np.isfinite(value) for value in elements)
    assert elements.inclination == 0.0
    assert elements.true_anomaly == 0.0


def test_zero_position_rejected():
    with pytest.raises(ValueError):
        orbital.state_to_elements(np.zeros(3), np.array([1.0, 0.0, 0.0]))


def test_elements_state_round_trip():
    original = OrbitalElements(7.0e6, 0.1, 0.5, 1.0, 0.7, 2.0)
    r, v = orbital.elements_to_state(original)
    recovered = orbital.state_to_elements(r, v)
    np.testing.assert_allclose(recovered, original, rtol=1e-7)


def test_elements_to_state_degenerate():
    with pytest.raises(ValueError):
        orbital.elements_to_state(OrbitalElements(0.0, 0.0, 0.0, 0.0, 0.0, 0.0))


def test_solve_kepler_satisfies_equation():
    for e in (0.0, 0.3, 0.9):
        M = 1.2
        E = orbital.solve_kepler(M, e)
        assert E - e * np.sin(E) == pytest.approx(M, abs=1e-8)


def test_solve_kepler_rejects_open_orbits():
    with pytest.raises(ValueError):
        orbital.solve_kepler(1.0, 1.0)
    with pytest.raises(ValueError):
        orbital.solve_kepler(1.0, -0.1)


def test_propagate_full_period_returns_to_start():
    elements = OrbitalElements(7.0e6, 0.05, 0.3, 0.2, 0.4, 1.0)
    period = orbital.orbital_period(elements.semi_major_axis)
    after = orbital.propagate(elements, period)
    assert after.true_anomaly == pytest.approx(1.0, abs=1e-6)
    assert after.semi_major_axis == elements.semi_major_axis

    half = orbital.propagate(OrbitalElements(7.0e6, 0.0, 0.0, 0.0, 0.0, 0.0), period / 2)
    assert half.true_anomaly == pytest.approx(np.pi, abs=1e-6)


def test_propagate_requires_bound_orbit():
    with pytest.raises(ValueError):
        orbital.propagate(OrbitalElements(-7.0e6, 1.5, 0.0, 0.0, 0.0, 0.0), 10.0)


def test_hohmann_leo_to_geo():
    result = orbital.hohmann_transfer(6678e3, 42164e3)
    assert result['total_delta_v'] == pytest.approx(3893.0, abs=20.0)
    assert result['delta_v1'] > result['delta_v2']
    assert result['transfer_time'] == pytest.approx(5.3 * 3600, rel=0.05)
    assert result['transfer_semi_major_axis'] == pytest.approx((6678e3 + 42164e3) / 2)
    with pytest.raises(ValueError):
        orbital.hohmann_transfer(0.0, 42164e3)


def test_hohmann_same_orbit_is_free():
    result = orbital.hohmann_transfer(LEO_RADIUS, LEO_RADIUS)
    assert result['total_delta_v'] == pytest.approx(0.0, abs=1e-9)
    assert result['transfer_eccentricity'] == 0.0


def test_orbital_insertion():
    result = orbital.orbital_insertion(200000.0)
    assert result['orbital_velocity'] == pytest.approx(orbital.circular_velocity(LEO_RADIUS))
    assert result['delta_v'] == result['orbital_velocity']
    assert result['orbital_period'] > 5000.0


def test_local_to_geocentric_mapping():
    r, v = orbital.local_to_geocentric(np.array([1000.0, 5000.0, 20.0]),
                                       np.array([300.0, 100.0, 1.0]))
    np.testing.assert_allclose(r, [C.R_EARTH + 5000.0, 1000.0, 20.0])
    np.testing.assert_allclose(v, [100.0, 300.0, 1.0])


def test_orbit_summary_circular_insertion():
    v = orbital.circular_velocity(LEO_RADIUS)
    r_geo, v_geo = orbital.local_to_geocentric(np.array([0.0, 200000.0, 0.0]),
                                               np.array([v, 0.0, 0.0]))
    summary = orbital.orbit_summary(r_geo, v_geo)
    assert summary['bound']
    assert summary['periapsis_altitude'] == pytest.approx(200000.0, abs=1.0)
    assert summary['apoapsis_altitude'] == pytest.approx(200000.0, abs=1.0)
    assert summary['inclination_deg'] == pytest.approx(0.0)
    assert summary['specific_energy'] < 0


def test_orbit_summary_escape():
    summary = orbital.orbit_summary(np.array([LEO_RADIUS, 0.0, 0.0]),
                                    np.array([0.0, 12000.0, 0.0]))
    assert not summary['bound']
    assert summary['period'] == 0.0
    assert summary['specific_energy'] > 0
