"""
Starship Flight Simulation - Type Definitions

This module provides TypedDict definitions for structured return types,
improving type safety and IDE support.
"""

from typing import Optional, TypedDict

import numpy as np
from numpy.typing import NDArray


class AtmosphereProperties(TypedDict):
    """Return type for atmosphere model output."""
    temperature: float  # Temperature (K)
    pressure: float  # Pressure (Pa)
    density: float  # Density (kg/m³)
    speed_of_sound: float  # Speed of sound (m/s)


class ForceBreakdown(TypedDict):
    """Return type for force computation details (local flat world frame)."""
    gravity: NDArray[np.float64]  # Gravity force vector (N)
    thrust: NDArray[np.float64]  # Thrust force vector (N)
    drag: NDArray[np.float64]  # Drag force vector (N)
    lift: NDArray[np.float64]  # Control surface force vector (N)
    wind: NDArray[np.float64]  # Wind disturbance force vector (N)
    total: NDArray[np.float64]  # Total force vector (N)
    torque: NDArray[np.float64]  # Aerodynamic control torque about the CoM (N·m)
    gravity_magnitude: float  # Gravity force magnitude (N)
    thrust_magnitude: float  # Thrust force magnitude (N)
    drag_magnitude: float  # Drag force magnitude (N)
    lift_magnitude: float  # Control surface force magnitude (N)
    dynamic_pressure: float  # Dynamic pressure (Pa)
    density: float  # Local air density (kg/m³)


class GuidanceCommand(TypedDict):
    """Return type for every guidance law."""
    throttle: float  # Throttle command (0.0 to 1.0)
    gimbal: NDArray[np.float64]  # Gimbal command [x, z], normalised to [-1, 1]
    surface_deflection: NDArray[np.float64]  # Control surface lateral command [x, z]
    attitude_setpoint: Optional[NDArray[np.float64]]  # Target orientation (rad), None = hold
    angular_acceleration: NDArray[np.float64]  # Commanded angular acceleration (rad/s²)
    phase: str  # Guidance sub-phase label


class CatchStatus(TypedDict):
    """Return type for the catch controller update."""
    arm_height: float  # Arm vertical position (m)
    arm_width: float  # Arm horizontal opening (m)
    arm_position: NDArray[np.float64]  # Arm catch point in the world frame (m)
    tracking: bool  # Booster tracked by the tower
    in_position: bool  # Arms at the catch-point height
    catch_in_progress: bool  # Arms closing
    caught: bool  # Terminal success flag
    failed: bool  # Terminal failure flag


class VehicleTelemetry(TypedDict):
    """Per-vehicle telemetry snapshot."""
    name: str
    active: bool
    phase: str  # Per-vehicle flight phase label
    position: NDArray[np.float64]  # m
    velocity: NDArray[np.float64]  # m/s
    acceleration: NDArray[np.float64]  # m/s²
    orientation: NDArray[np.float64]  # rad
    altitude_km: float  # km
    speed: float  # m/s
    acceleration_magnitude: float  # m/s²
    attitude_deg: float  # Body axis elevation above horizon (deg)
    propellant: float  # kg
    propellant_fraction: float  # 0..1
    throttle: float  # 0..1
    heat_shield_temperature: float  # K
    max_dynamic_pressure: float  # Pa
    max_acceleration: float  # m/s²
    max_heating_rate: float  # W/m²


class Telemetry(TypedDict):
    """Return type for MissionManager.update()."""
    phase: str  # Top-level mission phase name
    mission_time: float  # Mission elapsed time (s)
    mission_time_str: str  # "T+ HH:MM:SS"
    simulation_speed: float  # Speed multiplier
    return_phase: Optional[str]  # Booster return sub-phase
    landing_phase: Optional[str]  # Booster landing sub-phase
    landing_complete: bool
    hard_landing: bool
    booster: VehicleTelemetry
    upper_stage: VehicleTelemetry
    catch: CatchStatus
    upper_stage_orbit: dict  # Orbit summary of the upper stage


class HohmannTransfer(TypedDict):
    """Return type for Hohmann transfer calculation."""
    delta_v1: float  # First burn (m/s)
    delta_v2: float  # Second burn (m/s)
    total_delta_v: float  # m/s
    transfer_time: float  # Half transfer-orbit period (s)
    transfer_semi_major_axis: float  # m
    transfer_eccentricity: float
