"""
Starship Flight Simulation - PID Controller

General-purpose PID controller used by the guidance layer:
- Scalar (1 axis) or vector (2D / 3D) error signals
- Anti-windup by clamping the accumulated integral to the output bound
- Output saturation; vector outputs are rescaled by magnitude so the
  commanded direction is preserved

Example:
    >>> pid = PIDController(kp=0.2, ki=0.01, kd=0.1, max_output=0.3)
    >>> pid.setpoint = -50.0
    >>> adjustment = pid.compute(current=-80.0, dt=0.05)
"""

from typing import Union

import numpy as np

from .config import SimulationConfig, create_default_config

Signal = Union[float, np.ndarray]


def _clamp_magnitude(value: np.ndarray, limit: float) -> np.ndarray:
    """Rescale a vector whose length exceeds limit back onto the limit."""
    norm = np.linalg.norm(value)
    if norm > limit and norm > 0.0:
        return value * (limit / norm)
    return value


class PIDController:
    """
    Proportional-integral-derivative controller.

    u = kp * e + ki * integral(e) + kd * de/dt

    Attributes:
        kp, ki, kd: Controller gains (constant)
        max_output: Symmetric output bound; also bounds the integral
        dimensions: 1 for scalar control, 2 or 3 for vector control
        setpoint: Target value used by compute()
    """

    def __init__(self, kp: float, ki: float, kd: float, max_output: float,
                 dimensions: int = 1):
        if max_output <= 0:
            raise ValueError(f"max_output must be positive, got {max_output}")
        if dimensions not in (1, 2, 3):
            raise ValueError(f"dimensions must be 1, 2 or 3, got {dimensions}")
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.max_output = max_output
        self.dimensions = dimensions
        self.reset()

    def _zero(self) -> Signal:
        return 0.0 if self.dimensions == 1 else np.zeros(self.dimensions)

    def reset(self) -> None:
        """Zero the integral, previous error and setpoint."""
        self.integral = self._zero()
        self.previous_error = self._zero()
        self.setpoint = self._zero()

    def _as_signal(self, value) -> Signal:
        if self.dimensions == 1:
            value = np.asarray(value, dtype=np.float64)
            if value.shape not in ((), (1,)):
                raise ValueError(f"Scalar PID expects a scalar error, got shape {value.shape}")
            return float(value.reshape(()))
        value = np.asarray(value, dtype=np.float64)
        if value.shape != (self.dimensions,):
            raise ValueError(
                f"PID error must have shape ({self.dimensions},), got {value.shape}")
        return value

    def update(self, error, dt: float) -> Signal:
        """
        Compute the control output for an error signal.

        Args:
            error: Current error (setpoint - measurement)
            dt: Time step (s)

        Returns:
            Saturated control output (float or ndarray)

        Raises:
            ValueError: If dt <= 0 or the error shape does not match
        """
        if dt <= 0:
            raise ValueError(f"PID time step dt must be positive, got {dt}")
        error = self._as_signal(error)

        proportional = self.kp * error

        if self.dimensions == 1:
            self.integral = float(np.clip(self.integral + error * dt,
                                          -self.max_output, self.max_output))
        else:
            self.integral = _clamp_magnitude(self.integral + error * dt, self.max_output)
        integral_term = self.ki * self.integral

        derivative = self.kd * (error - self.previous_error) / dt
        self.previous_error = error

        output = proportional + integral_term + derivative
        if self.dimensions == 1:
            return float(np.clip(output, -self.max_output, self.max_output))
        return _clamp_magnitude(output, self.max_output)

    def compute(self, current, dt: float) -> Signal:
        """Update against the stored setpoint: error = setpoint - current."""
        return self.update(self.setpoint - self._as_signal(current), dt)


def create_vertical_velocity_pid(config: SimulationConfig = None) -> PIDController:
    """Scalar PID mapping vertical-velocity error to a throttle adjustment."""
    cfg = config or create_default_config()
    return PIDController(cfg.vertical_kp, cfg.vertical_ki, cfg.vertical_kd,
                         cfg.vertical_limit)


def create_horizontal_position_pid(config: SimulationConfig = None) -> PIDController:
    """2D PID mapping horizontal (X, Z) position error to a steering command."""
    cfg = config or create_default_config()
    return PIDController(cfg.horizontal_kp, cfg.horizontal_ki, cfg.horizontal_kd,
                         cfg.horizontal_limit, dimensions=2)


def create_attitude_pid(config: SimulationConfig = None) -> PIDController:
    """3D PID mapping attitude error to an angular-velocity correction."""
    cfg = config or create_default_config()
    return PIDController(cfg.attitude_kp, cfg.attitude_ki, cfg.attitude_kd,
                         cfg.attitude_limit, dimensions=3)
