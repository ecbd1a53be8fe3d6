"""
Starship Flight Simulation - Reference Frame Transformations

This module implements the Euler-angle attitude representation and the
body-to-world transformations used by the force model and guidance.

Convention: orientation = [x, y, z] angles in radians, applied in XYZ order
so that R = Rx(x) @ Ry(y) @ Rz(z). The body "up" axis (thrust axis) is +Y.
With y = 0, a positive z tilts the nose toward -X and a positive x tilts it
toward +Z. All functions return new arrays and never mutate their inputs.
"""

import numpy as np

from . import constants as C

WORLD_UP = np.array([0.0, 1.0, 0.0])


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Normalize a vector to unit length.

    Args:
        v: Vector of any dimension

    Returns:
        Unit vector, or a zero vector if the input is degenerate
    """
    v = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm < C.ZERO_TOLERANCE:
        return np.zeros_like(v)
    return v / norm


def wrap_angle(angle):
    """Wrap an angle (or array of angles) to [-pi, pi)."""
    return (np.asarray(angle, dtype=np.float64) + np.pi) % (2.0 * np.pi) - np.pi


def euler_to_rotation_matrix(angles: np.ndarray) -> np.ndarray:
    """
    Convert XYZ Euler angles to a 3x3 body-to-world rotation matrix.

    Args:
        angles: Orientation [x, y, z] (rad)

    Returns:
        3x3 rotation matrix R = Rx @ Ry @ Rz
    """
    ax, ay, az = angles
    cx, sx = np.cos(ax), np.sin(ax)
    cy, sy = np.cos(ay), np.sin(ay)
    cz, sz = np.cos(az), np.sin(az)

    rx = np.array([[1.0, 0.0, 0.0],
                   [0.0, cx, -sx],
                   [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy],
                   [0.0, 1.0, 0.0],
                   [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0],
                   [sz, cz, 0.0],
                   [0.0, 0.0, 1.0]])
    return rx @ ry @ rz


def rotate_body_to_world(v_body: np.ndarray, angles: np.ndarray) -> np.ndarray:
    """Rotate a body-frame vector into the world frame."""
    return euler_to_rotation_matrix(angles) @ np.asarray(v_body, dtype=np.float64)


def body_up_axis(angles: np.ndarray) -> np.ndarray:
    """Unit vector of the vehicle's long (thrust) axis in the world frame."""
    return rotate_body_to_world(WORLD_UP, angles)


def attitude_for_direction(direction: np.ndarray, yaw: float = 0.0) -> np.ndarray:
    """
    Orientation whose body up axis points along the given direction.

    Solves R @ [0, 1, 0] = d with the y angle held at `yaw` = 0:
        z = -asin(d_x),  x = atan2(d_z, d_y)

    Args:
        direction: Desired thrust axis in the world frame (any length)
        yaw: Roll about the long axis carried through unchanged (rad)

    Returns:
        Orientation [x, y, z] (rad); upright for a degenerate direction
    """
    d = normalize(direction)
    if not np.any(d):
        return np.array([0.0, yaw, 0.0])
    az = -np.arcsin(np.clip(d[0], -1.0, 1.0))
    ax = np.arctan2(d[2], d[1])
    return np.array([ax, yaw, az])


def tilt_from_vertical(angles: np.ndarray) -> float:
    """Angle between the body up axis and world up (rad)."""
    up = body_up_axis(angles)
    return float(np.arccos(np.clip(up[1], -1.0, 1.0)))


def attitude_angle_deg(angles: np.ndarray) -> float:
    """Elevation of the body axis above the horizon (deg, 90 = upright)."""
    return 90.0 - float(np.degrees(tilt_from_vertical(angles)))


def horizontal_component(v: np.ndarray) -> np.ndarray:
    """Project a world vector onto the horizontal (X, Z) plane."""
    return np.array([v[0], 0.0, v[2]])


def horizontal_xz(v: np.ndarray) -> np.ndarray:
    """Horizontal (X, Z) components of a world vector as a 2-vector."""
    return np.array([v[0], v[2]])
