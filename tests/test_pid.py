import pytest
import numpy as np

from starship_sim import constants as C
from starship_sim.pid import (
    PIDController,
    create_attitude_pid,
    create_horizontal_position_pid,
    create_vertical_velocity_pid,
)


class TestScalarPID:
    def setup_method(self):
        self.pid = PIDController(kp=1.0, ki=0.5, kd=0.0, max_output=0.3)

    def test_proportional_response(self):
        pid = PIDController(kp=0.1, ki=0.0, kd=0.0, max_output=10.0)
        assert pid.update(2.0, 0.1) == pytest.approx(0.2)

    def test_output_bounded(self):
        for _ in range(100):
            out = self.pid.update(1000.0, 0.1)
            assert -0.3 <= out <= 0.3
        out = self.pid.update(-1000.0, 0.1)
        assert out == pytest.approx(-0.3)

    def test_integral_bounded(self):
        for _ in range(1000):
            self.pid.update(50.0, 0.1)
        assert abs(self.pid.integral) <= 0.3

    def test_derivative_term(self):
        pid = PIDController(kp=0.0, ki=0.0, kd=1.0, max_output=100.0)
        pid.update(0.0, 0.1)
        assert pid.update(1.0, 0.1) == pytest.approx(10.0)

    def test_compute_uses_setpoint(self):
        self.pid.setpoint = -50.0
        out = self.pid.compute(-80.0, 0.05)
        assert out > 0

    def test_reset(self):
        self.pid.setpoint = 3.0
        self.pid.update(1.0, 0.1)
        self.pid.reset()
        assert self.pid.integral == 0.0
        assert self.pid.previous_error == 0.0
        assert self.pid.setpoint == 0.0

    def test_dt_must_be_positive(self):
        with pytest.raises(ValueError):
            self.pid.update(1.0, 0.0)
        with pytest.raises(ValueError):
            self.pid.update(1.0, -0.1)

    def test_vector_error_rejected(self):
        with pytest.raises(ValueError):
            self.pid.update(np.array([1.0, 2.0]), 0.1)


class TestVectorPID:
    def setup_method(self):
        self.pid = PIDController(kp=1.0, ki=0.1, kd=0.0, max_output=0.2, dimensions=2)

    def test_magnitude_clamped_direction_preserved(self):
        out = self.pid.update(np.array([30.0, 40.0]), 0.1)
        assert np.linalg.norm(out) == pytest.approx(0.2)
        np.testing.assert_allclose(out / np.linalg.norm(out), [0.6, 0.8])

    def test_integral_bounded(self):
        for _ in range(500):
            self.pid.update(np.array([10.0, -10.0]), 0.1)
        assert np.linalg.norm(self.pid.integral) <= 0.2 + 1e-12

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            self.pid.update(np.array([1.0, 2.0, 3.0]), 0.1)


def test_invalid_construction():
    with pytest.raises(ValueError):
        PIDController(1.0, 0.0, 0.0, max_output=0.0)
    with pytest.raises(ValueError):
        PIDController(1.0, 0.0, 0.0, max_output=1.0, dimensions=4)


def test_factories_use_configured_gains():
    vertical = create_vertical_velocity_pid()
    assert vertical.kp == C.VERTICAL_PID_KP
    assert vertical.max_output == C.VERTICAL_PID_LIMIT
    assert create_horizontal_position_pid().dimensions == 2
    assert create_attitude_pid().dimensions == 3
