"""
Starship Flight Simulation - Vehicle State

This module defines the vehicle record mutated by the force model and
integrator, its deployable control surfaces and heat shield, and the typed
VehicleSet owned by the mission manager. No vehicle state lives anywhere
else.
"""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from . import constants as C
from .config import SimulationConfig, create_default_config
from .frames import attitude_angle_deg


@dataclass
class DeployableSurface:
    """
    A grid fin set, landing leg set or flap set.

    Attributes:
        deployment: Deployment fraction (0 = stowed, 1 = fully deployed)
        rate: Deployment rate (fraction per second)
        drag_contribution: Relative Cd increase at full deployment
        area: Control surface area providing lift (m^2)
    """
    deployment: float = 0.0
    rate: float = 0.2
    drag_contribution: float = 0.0
    area: float = 0.0

    def update(self, deploy: bool, dt: float) -> float:
        """Move the deployment fraction toward open or stowed at the configured rate."""
        if deploy:
            self.deployment = min(1.0, self.deployment + self.rate * dt)
        else:
            self.deployment = max(0.0, self.deployment - self.rate * dt)
        return self.deployment

    @property
    def is_deployed(self) -> bool:
        return self.deployment >= 0.99


@dataclass
class HeatShield:
    """Heat shield thermal state (temperature proxy for thermal load)."""
    temperature: float = C.ATM_T0  # K
    max_temperature: float = 2000.0  # K
    cooling_rate: float = 5.0  # K/s
    overheated: bool = False


@dataclass
class Vehicle:
    """
    One stage of the launch vehicle.

    Position is the base of the vehicle in the local world frame
    (X downrange, Y up, Z crossrange). Orientation is XYZ Euler angles.

    Attributes:
        name: Vehicle identifier ("booster" or "upper_stage")
        dry_mass: Structural mass (kg)
        propellant_capacity: Full propellant load (kg)
        propellant: Remaining propellant (kg)
        payload_mass: Attached mass carried during stacked flight (kg)
        position, velocity, acceleration: World-frame vectors (m, m/s, m/s^2)
        orientation: Euler angles [x, y, z] (rad)
        angular_velocity: Euler angle rates (rad/s)
        throttle: Engine throttle (0..1)
        gimbal: Gimbal command [x, z] normalised to [-1, 1]
        surface_deflection: Lateral control surface command [x, z]
        active: Whether the vehicle participates in the simulation
    """

    name: str = "vehicle"
    dry_mass: float = 1000.0
    propellant_capacity: float = 0.0
    propellant: float = 0.0
    payload_mass: float = 0.0

    max_thrust: float = 0.0
    isp_sl: float = C.BOOSTER_ISP_SL
    isp_vac: float = C.BOOSTER_ISP_VAC
    drag_coefficient: float = 0.8
    reference_area: float = 10.0
    length: float = 10.0
    gimbal_limit: float = C.BOOSTER_GIMBAL_LIMIT

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    throttle: float = 0.0
    gimbal: np.ndarray = field(default_factory=lambda: np.zeros(2))
    surface_deflection: np.ndarray = field(default_factory=lambda: np.zeros(2))

    surfaces: Dict[str, DeployableSurface] = field(default_factory=dict)
    heat_shield: HeatShield = field(default_factory=HeatShield)
    active: bool = True

    # Performance watermarks (never decrease within a run)
    max_dynamic_pressure: float = 0.0
    max_acceleration: float = 0.0
    max_heating_rate: float = 0.0

    def __post_init__(self):
        """Ensure arrays are numpy arrays with correct dtype."""
        for attr in ['position', 'velocity', 'acceleration', 'orientation',
                     'angular_velocity', 'gimbal', 'surface_deflection']:
            setattr(self, attr, np.asarray(getattr(self, attr), dtype=np.float64))

    @property
    def mass(self) -> float:
        """Total mass used for force integration (kg), floored above zero."""
        return max(C.MIN_MASS, self.dry_mass + self.propellant + self.payload_mass)

    @property
    def altitude(self) -> float:
        return float(self.position[1])

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def propellant_fraction(self) -> float:
        if self.propellant_capacity <= 0.0:
            return 0.0
        return self.propellant / self.propellant_capacity

    @property
    def has_propellant(self) -> bool:
        return self.propellant > 0.0

    def surface_deployment(self, name: str) -> float:
        """Deployment fraction of a named surface, 0.0 if the vehicle has none."""
        surface = self.surfaces.get(name)
        return surface.deployment if surface is not None else 0.0

    def set_throttle(self, value: float) -> float:
        """
        Set the throttle, enforcing the engine invariants.

        Throttle is clamped to [0, 1] and forced to zero while the vehicle is
        inactive or out of propellant.
        """
        if not self.active or not self.has_propellant:
            self.throttle = 0.0
        else:
            self.throttle = float(np.clip(value, 0.0, 1.0))
        return self.throttle

    def set_gimbal(self, command: np.ndarray) -> None:
        """Set the gimbal command, clamped to the normalised [-1, 1] range."""
        self.gimbal = np.clip(np.asarray(command, dtype=np.float64), -1.0, 1.0)

    def record_peaks(self, dynamic_pressure: float, acceleration: float,
                     heating_rate: float = 0.0) -> None:
        """Update the performance watermarks."""
        self.max_dynamic_pressure = max(self.max_dynamic_pressure, dynamic_pressure)
        self.max_acceleration = max(self.max_acceleration, acceleration)
        self.max_heating_rate = max(self.max_heating_rate, heating_rate)

    def deactivate(self) -> None:
        """Remove the vehicle from the simulation without discarding its record."""
        self.active = False
        self.throttle = 0.0

    def copy(self) -> 'Vehicle':
        """Create a deep copy of the vehicle."""
        return Vehicle(
            name=self.name,
            dry_mass=self.dry_mass,
            propellant_capacity=self.propellant_capacity,
            propellant=self.propellant,
            payload_mass=self.payload_mass,
            max_thrust=self.max_thrust,
            isp_sl=self.isp_sl,
            isp_vac=self.isp_vac,
            drag_coefficient=self.drag_coefficient,
            reference_area=self.reference_area,
            length=self.length,
            gimbal_limit=self.gimbal_limit,
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            acceleration=self.acceleration.copy(),
            orientation=self.orientation.copy(),
            angular_velocity=self.angular_velocity.copy(),
            throttle=self.throttle,
            gimbal=self.gimbal.copy(),
            surface_deflection=self.surface_deflection.copy(),
            surfaces={k: DeployableSurface(s.deployment, s.rate, s.drag_contribution, s.area)
                      for k, s in self.surfaces.items()},
            heat_shield=HeatShield(self.heat_shield.temperature,
                                   self.heat_shield.max_temperature,
                                   self.heat_shield.cooling_rate,
                                   self.heat_shield.overheated),
            active=self.active,
            max_dynamic_pressure=self.max_dynamic_pressure,
            max_acceleration=self.max_acceleration,
            max_heating_rate=self.max_heating_rate,
        )

    def __str__(self) -> str:
        """Human-readable state summary."""
        return (
            f"Vehicle({self.name}, "
            f"alt={self.altitude/1000:.2f}km, "
            f"v={self.speed:.1f}m/s, "
            f"att={attitude_angle_deg(self.orientation):.1f}deg, "
            f"prop={self.propellant:.0f}kg)"
        )


@dataclass
class VehicleSet:
    """The vehicles owned by one simulation run."""
    booster: Vehicle
    upper_stage: Vehicle

    def active_vehicles(self):
        return [v for v in (self.booster, self.upper_stage) if v.active]


def create_booster(config: SimulationConfig = None) -> Vehicle:
    """
    Create the booster on the pad.

    Returns:
        Booster with full propellant, stowed surfaces, engines off.
    """
    cfg = config or create_default_config()
    return Vehicle(
        name="booster",
        dry_mass=cfg.booster_dry_mass,
        propellant_capacity=cfg.booster_propellant_mass,
        propellant=cfg.booster_propellant_mass,
        max_thrust=cfg.booster_max_thrust,
        isp_sl=cfg.booster_isp_sl,
        isp_vac=cfg.booster_isp_vac,
        drag_coefficient=cfg.booster_drag_coefficient,
        reference_area=cfg.booster_reference_area,
        length=cfg.booster_length,
        gimbal_limit=cfg.booster_gimbal_limit,
        position=np.array([0.0, C.BOOSTER_PAD_HEIGHT, 0.0]),
        surfaces={
            'grid_fins': DeployableSurface(rate=C.GRID_FIN_DEPLOY_RATE,
                                           drag_contribution=C.GRID_FIN_DRAG_CONTRIBUTION,
                                           area=C.GRID_FIN_AREA),
            'legs': DeployableSurface(rate=C.LEG_DEPLOY_RATE),
        },
        heat_shield=HeatShield(max_temperature=C.BOOSTER_HEAT_SHIELD_MAX_TEMP,
                               cooling_rate=C.BOOSTER_HEAT_SHIELD_COOLING),
    )


def create_upper_stage(config: SimulationConfig = None) -> Vehicle:
    """Create the upper stage stacked on the booster (inactive until separation)."""
    cfg = config or create_default_config()
    return Vehicle(
        name="upper_stage",
        dry_mass=cfg.upper_stage_dry_mass,
        propellant_capacity=cfg.upper_stage_propellant_mass,
        propellant=cfg.upper_stage_propellant_mass,
        max_thrust=cfg.upper_stage_max_thrust,
        isp_sl=cfg.upper_stage_isp_sl,
        isp_vac=cfg.upper_stage_isp_vac,
        drag_coefficient=cfg.upper_stage_drag_coefficient,
        reference_area=cfg.upper_stage_reference_area,
        length=cfg.upper_stage_length,
        gimbal_limit=C.UPPER_STAGE_GIMBAL_LIMIT,
        position=np.array([0.0, C.BOOSTER_PAD_HEIGHT + cfg.stack_offset, 0.0]),
        surfaces={
            'flaps': DeployableSurface(rate=C.FLAP_DEPLOY_RATE,
                                       drag_contribution=C.FLAP_DRAG_CONTRIBUTION,
                                       area=C.FLAP_AREA),
        },
        heat_shield=HeatShield(max_temperature=C.UPPER_STAGE_HEAT_SHIELD_MAX_TEMP,
                               cooling_rate=C.UPPER_STAGE_HEAT_SHIELD_COOLING),
        active=False,
    )


def create_vehicle_set(config: SimulationConfig = None) -> VehicleSet:
    """Create both vehicles in the stacked launch configuration."""
    cfg = config or create_default_config()
    booster = create_booster(cfg)
    upper = create_upper_stage(cfg)
    booster.payload_mass = upper.dry_mass + upper.propellant
    return VehicleSet(booster=booster, upper_stage=upper)
