"""
Starship Flight Simulation - Configuration

This module provides a SimulationConfig dataclass for dependency injection,
allowing vehicle masses, thrust levels, PID gains and phase thresholds to be
overridden at initialization without modifying global constants.

Optional physics features (wind, per-tick validation, catch tick budget)
default to OFF so the nominal mission is deterministic.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from . import constants as C

GRAVITY_MODELS = ("constant", "inverse_square")


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration for simulation parameters.

    Using frozen=True ensures configs cannot be accidentally modified.
    Create new configs via dataclass replace() if needed.

    Section grouping:
      1. Simulation timing
      2. Gravity / aerodynamics
      3. Booster
      4. Upper stage
      5. Ascent & separation
      6. Booster return
      7. Booster landing
      8. PID gains
      9. Catch tower
     10. Thermal
     11. Wind
     12. Validation / misc
    """

    # ── 1. Simulation timing ─────────────────────────────────────────────
    max_dt: float = C.DT_MAX
    terminal_max_dt: float = C.DT_MAX_TERMINAL
    simulation_speed: float = 1.0

    # ── 2. Gravity / aerodynamics ────────────────────────────────────────
    # "constant" (9.81 m/s²) or "inverse_square" (mu / (R + h)²)
    gravity_model: str = "constant"
    enable_aerodynamics: bool = True

    # ── 3. Booster ───────────────────────────────────────────────────────
    booster_dry_mass: float = C.BOOSTER_DRY_MASS
    booster_propellant_mass: float = C.BOOSTER_PROPELLANT_MASS
    booster_max_thrust: float = C.BOOSTER_MAX_THRUST
    booster_isp_sl: float = C.BOOSTER_ISP_SL
    booster_isp_vac: float = C.BOOSTER_ISP_VAC
    booster_drag_coefficient: float = C.BOOSTER_DRAG_COEFFICIENT
    booster_reference_area: float = C.BOOSTER_REFERENCE_AREA
    booster_length: float = C.BOOSTER_LENGTH
    booster_gimbal_limit: float = C.BOOSTER_GIMBAL_LIMIT

    # ── 4. Upper stage ───────────────────────────────────────────────────
    upper_stage_dry_mass: float = C.UPPER_STAGE_DRY_MASS
    upper_stage_propellant_mass: float = C.UPPER_STAGE_PROPELLANT_MASS
    upper_stage_max_thrust: float = C.UPPER_STAGE_MAX_THRUST
    upper_stage_isp_sl: float = C.UPPER_STAGE_ISP_SL
    upper_stage_isp_vac: float = C.UPPER_STAGE_ISP_VAC
    upper_stage_drag_coefficient: float = C.UPPER_STAGE_DRAG_COEFFICIENT
    upper_stage_reference_area: float = C.UPPER_STAGE_REFERENCE_AREA
    upper_stage_length: float = C.UPPER_STAGE_LENGTH

    # ── 5. Ascent & separation ───────────────────────────────────────────
    launch_throttle: float = C.LAUNCH_THROTTLE
    ascent_throttle: float = C.ASCENT_THROTTLE
    ascent_transition_altitude: float = C.ASCENT_TRANSITION_ALTITUDE
    pitch_program_start_altitude: float = C.PITCH_PROGRAM_START_ALTITUDE
    pitch_program_max: float = C.PITCH_PROGRAM_MAX
    stack_offset: float = C.STACK_OFFSET
    separation_duration: float = C.SEPARATION_DURATION
    separation_booster_impulse: float = C.SEPARATION_BOOSTER_IMPULSE
    separation_upper_impulse: float = C.SEPARATION_UPPER_IMPULSE
    orbit_altitude: float = C.ORBIT_ALTITUDE

    # ── 6. Booster return ────────────────────────────────────────────────
    tower_position: Tuple[float, float, float] = tuple(C.TOWER_POSITION)
    return_coast_duration: float = C.RETURN_COAST_DURATION
    return_flip_duration: float = C.RETURN_FLIP_DURATION
    return_burn_duration: float = C.RETURN_BURN_DURATION
    return_flip_throttle: float = C.RETURN_FLIP_THROTTLE
    return_burn_throttle: float = C.RETURN_BURN_THROTTLE
    approach_final_altitude: float = C.APPROACH_FINAL_ALTITUDE
    hover_altitude: float = C.HOVER_ALTITUDE
    touchdown_speed: float = C.TOUCHDOWN_SPEED

    # ── 7. Booster landing ───────────────────────────────────────────────
    landing_boostback_altitude: float = C.LANDING_BOOSTBACK_ALTITUDE
    landing_entry_altitude: float = C.LANDING_ENTRY_ALTITUDE
    landing_descent_altitude: float = C.LANDING_DESCENT_ALTITUDE
    landing_burn_altitude: float = C.LANDING_BURN_ALTITUDE
    landing_boostback_duration: float = C.LANDING_BOOSTBACK_DURATION
    landing_entry_duration: float = C.LANDING_ENTRY_DURATION
    landing_ignition_throttle: float = C.LANDING_IGNITION_THROTTLE
    grid_fin_min_altitude: float = C.GRID_FIN_MIN_ALTITUDE
    grid_fin_max_altitude: float = C.GRID_FIN_MAX_ALTITUDE
    leg_deploy_altitude: float = C.LEG_DEPLOY_ALTITUDE
    hard_landing_speed: float = C.HARD_LANDING_SPEED

    # ── 8. PID gains ─────────────────────────────────────────────────────
    vertical_kp: float = C.VERTICAL_PID_KP
    vertical_ki: float = C.VERTICAL_PID_KI
    vertical_kd: float = C.VERTICAL_PID_KD
    vertical_limit: float = C.VERTICAL_PID_LIMIT
    horizontal_kp: float = C.HORIZONTAL_PID_KP
    horizontal_ki: float = C.HORIZONTAL_PID_KI
    horizontal_kd: float = C.HORIZONTAL_PID_KD
    horizontal_limit: float = C.HORIZONTAL_PID_LIMIT
    attitude_kp: float = C.ATTITUDE_PID_KP
    attitude_ki: float = C.ATTITUDE_PID_KI
    attitude_kd: float = C.ATTITUDE_PID_KD
    attitude_limit: float = C.ATTITUDE_PID_LIMIT

    # ── 9. Catch tower ───────────────────────────────────────────────────
    tower_height: float = C.TOWER_HEIGHT
    arm_start_height: float = C.ARM_START_HEIGHT
    arm_height_speed: float = C.ARM_HEIGHT_SPEED
    arm_closing_speed: float = C.ARM_CLOSING_SPEED
    catch_tracking_range: float = C.CATCH_TRACKING_RANGE
    catch_tracking_accuracy: float = C.CATCH_TRACKING_ACCURACY
    catch_max_vertical_speed: float = C.CATCH_MAX_VERTICAL_SPEED
    catch_max_horizontal_speed: float = C.CATCH_MAX_HORIZONTAL_SPEED
    # Force MISSION_COMPLETE after this many catch ticks (None = wait for catch)
    catch_tick_budget: Optional[int] = None

    # ── 10. Thermal ──────────────────────────────────────────────────────
    heating_coefficient: float = C.HEATING_COEFFICIENT
    sutton_graves_k: float = C.SUTTON_GRAVES_K

    # ── 11. Wind ─────────────────────────────────────────────────────────
    enable_wind: bool = False
    wind_mean_speed: float = C.WIND_MEAN_SPEED
    wind_gust_max: float = C.WIND_GUST_MAX

    # ── 12. Validation / misc ────────────────────────────────────────────
    validate_state: bool = False
    random_seed: Optional[int] = 42
    verbose: bool = True

    def __post_init__(self):
        if self.gravity_model not in GRAVITY_MODELS:
            raise ValueError(
                f"gravity_model must be one of {GRAVITY_MODELS}, got {self.gravity_model!r}"
            )
        if self.max_dt <= 0 or self.terminal_max_dt <= 0:
            raise ValueError(
                f"Integration ceilings must be positive, got {self.max_dt}, {self.terminal_max_dt}"
            )


def create_default_config() -> SimulationConfig:
    """Create a SimulationConfig with default values from constants."""
    return SimulationConfig()


def create_test_config(**overrides) -> SimulationConfig:
    """Create a quiet config suitable for testing.

    Any keyword arg accepted by SimulationConfig can be passed as an override.
    """
    defaults = dict(verbose=False, validate_state=True)
    defaults.update(overrides)
    return SimulationConfig(**defaults)
