"""
Starship Flight Simulation Package

A tick-driven Python simulation of a two-stage reusable launch vehicle:
launch, ascent, stage separation, booster return, booster landing and
tower catch recovery.

Modules:
    - constants: Physical constants, vehicle parameters and thresholds
    - config: Frozen SimulationConfig with overridable defaults
    - frames: Euler-angle attitude helpers
    - atmosphere: Exponential density and layered temperature model
    - state: Vehicle records, deployable surfaces and heat shields
    - forces: Gravity, thrust, drag, control surface and wind forces
    - mass: Propellant flow and effective specific impulse
    - integrators: Semi-implicit Euler step with ground clamp
    - pid: Scalar and vector PID controller
    - guidance: Ascent, booster return and landing guidance
    - recovery: Catch tower controller and rendezvous guidance
    - thermal: Heat shield heating model
    - orbital: Two-body orbital mechanics helpers
    - mission_manager: Mission phase state machine
    - validation: Physics validation checks
    - main: Headless scripted mission runner
"""

from .config import SimulationConfig, create_default_config, create_test_config
from .main import MissionResult, SimulationLog, run_mission
from .mission_manager import MissionManager, MissionPhase
from .recovery import CatchController
from .state import Vehicle, VehicleSet, create_vehicle_set

__version__ = "1.0.0"
__author__ = "Starship Simulation Team"

__all__ = [
    'SimulationConfig',
    'create_default_config',
    'create_test_config',
    'MissionManager',
    'MissionPhase',
    'CatchController',
    'Vehicle',
    'VehicleSet',
    'create_vehicle_set',
    'run_mission',
    'MissionResult',
    'SimulationLog',
]
