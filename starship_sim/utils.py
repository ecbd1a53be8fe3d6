"""
Starship Flight Simulation - Utility Functions

Shared helpers: the wind/gust disturbance model, mission clock formatting
and small interpolation helpers.
"""

from typing import Optional

import numpy as np

from . import constants as C


class WindModel:
    """
    Slowly varying horizontal wind with intermittent gusts.

    The direction performs a random walk, a gust of up to `gust_max` m/s is
    triggered at an average of WIND_GUST_RATE per second and otherwise decays
    geometrically. Randomness comes from a seeded numpy Generator so runs are
    reproducible.
    """

    def __init__(self, mean_speed: float = C.WIND_MEAN_SPEED,
                 gust_max: float = C.WIND_GUST_MAX,
                 seed: Optional[int] = None):
        self.mean_speed = mean_speed
        self.gust_max = gust_max
        self.reset(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        self.rng = np.random.default_rng(seed)
        self.direction = float(self.rng.uniform(0.0, 2.0 * np.pi))
        self.gust = 0.0

    def update(self, dt: float) -> None:
        """Advance the wind state by dt seconds."""
        self.direction += float(self.rng.uniform(-0.5, 0.5)) * C.WIND_DIRECTION_DRIFT * dt
        if self.rng.random() < C.WIND_GUST_RATE * dt:
            self.gust = float(self.rng.uniform(0.0, self.gust_max))
        else:
            self.gust *= C.WIND_GUST_DECAY ** dt

    @property
    def speed(self) -> float:
        return self.mean_speed + self.gust

    def velocity(self) -> np.ndarray:
        """Wind velocity vector in the world frame (m/s, horizontal)."""
        return self.speed * np.array([np.cos(self.direction), 0.0, np.sin(self.direction)])


def format_mission_time(seconds: float) -> str:
    """
    Format mission elapsed time as "T+ HH:MM:SS".

    Args:
        seconds: Mission elapsed time (s); negative values are shown as T+ 00:00:00
    """
    total = int(round(max(0.0, seconds), 6))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    return f"T+ {hours:02d}:{minutes:02d}:{secs:02d}"
