import pytest
import numpy as np

from starship_sim import forces, constants as C
from starship_sim.config import create_test_config
from starship_sim.state import Vehicle, create_booster


def flying_vehicle(altitude=1000.0, velocity=(0.0, 0.0, 0.0), **kwargs):
    return Vehicle(name="test", dry_mass=10000.0, length=20.0, reference_area=10.0,
                   position=np.array([0.0, altitude, 0.0]),
                   velocity=np.array(velocity, dtype=float), **kwargs)


# ============================================================================
# Gravity
# ============================================================================

def test_gravity_constant():
    assert forces.compute_gravity_acceleration(0.0) == C.G_CONSTANT
    assert forces.compute_gravity_acceleration(1e6) == C.G_CONSTANT


def test_gravity_inverse_square():
    g0 = forces.compute_gravity_acceleration(0.0, "inverse_square")
    assert g0 == pytest.approx(C.MU_EARTH / C.R_EARTH ** 2)
    assert forces.compute_gravity_acceleration(400000.0, "inverse_square") < g0


def test_gravity_unknown_model():
    with pytest.raises(ValueError):
        forces.compute_gravity_acceleration(0.0, "flat")


def test_gravity_force_points_down():
    v = flying_vehicle()
    F = forces.compute_gravity_force(v)
    assert F.shape == (3,)
    assert F[1] == pytest.approx(-v.mass * C.G_CONSTANT)
    assert F[0] == 0.0 and F[2] == 0.0


# ============================================================================
# Thrust
# ============================================================================

def test_thrust_off():
    booster = create_booster()
    np.testing.assert_array_equal(forces.compute_thrust_force(booster), np.zeros(3))


def test_thrust_upright_sea_level():
    booster = create_booster()
    booster.set_throttle(0.5)
    F = forces.compute_thrust_force(booster)
    assert F[1] == pytest.approx(0.5 * C.BOOSTER_MAX_THRUST, rel=1e-4)
    assert abs(F[0]) < 1e-6 and abs(F[2]) < 1e-6


def test_thrust_coefficient_bounds():
    assert forces.thrust_coefficient(0.0) == pytest.approx(1.0)
    assert forces.thrust_coefficient(300000.0) == pytest.approx(C.THRUST_COEFFICIENT_MAX)


def test_gimbal_deflects_thrust():
    booster = create_booster()
    booster.set_throttle(1.0)
    booster.set_gimbal(np.array([1.0, 0.0]))
    direction = forces.compute_thrust_direction(booster)
    assert np.linalg.norm(direction) == pytest.approx(1.0)
    assert direction[0] > 0


# ============================================================================
# Aerodynamics
# ============================================================================

def test_drag_zero_velocity():
    v = flying_vehicle()
    np.testing.assert_array_equal(forces.compute_drag_force(v, 1.0), np.zeros(3))


def test_drag_opposes_velocity():
    v = flying_vehicle(velocity=(0.0, -100.0, 0.0))
    rho = 1.0
    F = forces.compute_drag_force(v, rho)
    assert F[1] > 0
    assert F[1] == pytest.approx(0.5 * rho * 100.0 ** 2 * v.drag_coefficient * v.reference_area)


def test_angle_of_attack():
    v = flying_vehicle(velocity=(0.0, -100.0, 0.0))
    assert forces.compute_angle_of_attack(v) == pytest.approx(0.0)
    v.velocity = np.array([100.0, 0.0, 0.0])
    assert forces.compute_angle_of_attack(v) == pytest.approx(np.pi / 2)


def test_deployed_surfaces_raise_drag_coefficient():
    booster = create_booster()
    booster.velocity = np.array([0.0, -100.0, 0.0])
    stowed = forces.effective_drag_coefficient(booster)
    booster.surfaces['grid_fins'].deployment = 1.0
    deployed = forces.effective_drag_coefficient(booster)
    assert deployed == pytest.approx(stowed * (1.0 + C.GRID_FIN_DRAG_CONTRIBUTION))


def test_control_surface_force_needs_deployment():
    booster = create_booster()
    booster.velocity = np.array([0.0, -200.0, 0.0])
    booster.surface_deflection = np.array([1.0, 0.0])
    F, M = forces.compute_control_surface_force(booster, 0.5)
    np.testing.assert_array_equal(F, np.zeros(3))

    booster.surfaces['grid_fins'].deployment = 1.0
    F, M = forces.compute_control_surface_force(booster, 0.5)
    assert F[0] > 0
    assert np.linalg.norm(M) > 0


def test_wind_force_ignored_in_thin_air():
    v = flying_vehicle()
    wind = np.array([10.0, 0.0, 0.0])
    assert forces.compute_wind_force(v, 1.0, wind)[0] > 0
    np.testing.assert_array_equal(forces.compute_wind_force(v, 1e-5, wind), np.zeros(3))
    np.testing.assert_array_equal(forces.compute_wind_force(v, 1.0, None), np.zeros(3))


# ============================================================================
# Total
# ============================================================================

def test_total_force_sums_components():
    v = flying_vehicle(velocity=(50.0, 100.0, 0.0))
    result = forces.compute_total_force(v, create_test_config())
    expected = result['gravity'] + result['thrust'] + result['drag'] + result['lift'] + result['wind']
    np.testing.assert_allclose(result['total'], expected)
    assert result['dynamic_pressure'] > 0
    assert result['density'] == pytest.approx(forces.density(1000.0))


def test_total_force_vacuum_has_no_aero():
    v = flying_vehicle(altitude=150000.0, velocity=(7000.0, 0.0, 0.0))
    result = forces.compute_total_force(v, create_test_config())
    assert result['drag_magnitude'] == 0.0
    assert result['dynamic_pressure'] == 0.0
    np.testing.assert_allclose(result['total'], result['gravity'])


def test_total_force_aero_toggle():
    v = flying_vehicle(velocity=(0.0, 100.0, 0.0))
    result = forces.compute_total_force(v, create_test_config(enable_aerodynamics=False))
    assert result['drag_magnitude'] == 0.0


def test_total_force_inactive_vehicle():
    v = flying_vehicle()
    v.deactivate()
    with pytest.raises(ValueError):
        forces.compute_total_force(v)
