"""
Starship Flight Simulation - Physical Constants and Vehicle Parameters

This module defines the physical constants, Earth parameters, vehicle
specifications, guidance gains and phase thresholds used throughout the
simulation. Every tunable value here is mirrored by a field of
SimulationConfig so callers can override it without touching globals.

World frame: X downrange, Y up (altitude), Z crossrange, origin at the pad.
"""

import numpy as np

# =============================================================================
# EARTH PARAMETERS
# =============================================================================

# Gravitational parameter (m^3/s^2)
MU_EARTH = 3.986004418e14

# Earth mean radius (m)
R_EARTH = 6.371e6

# Constant-gravity model acceleration (m/s^2)
G_CONSTANT = 9.81

# Standard gravity for specific impulse conversion (m/s^2)
G0 = 9.80665

# =============================================================================
# ATMOSPHERE
# =============================================================================

RHO_0 = 1.225           # Sea level density (kg/m^3)
H_SCALE = 8500.0        # Lower atmosphere scale height (m)
H_SCALE_UPPER = 6500.0  # Scale height above the exponential region (m)
ATM_EXPONENTIAL_CEILING = 50000.0  # Top of the single-scale-height region (m)
ATM_MIN_ALTITUDE = -20000.0        # Floor applied to below-sea-level inputs (m)

ATM_T0 = 288.15          # Sea level temperature (K)
ATM_P0 = 101325.0        # Sea level reference pressure (Pa)
ATM_T_MIN = 186.87       # Mesopause temperature floor (K)
R_GAS = 287.05287        # Specific gas constant for dry air (J/(kg·K))
GAMMA = 1.4              # Ratio of specific heats

# Layer boundaries (m) and lapse rates (K/m)
TROPOPAUSE_ALTITUDE = 11000.0
STRATOSPHERE_ISOTHERMAL_TOP = 20000.0
STRATOPAUSE_ALTITUDE = 50000.0
LAPSE_TROPOSPHERE = -0.0065
LAPSE_STRATOSPHERE = 0.001
LAPSE_MESOSPHERE = -0.0025

# Above this altitude aerodynamic forces are zeroed (effectively vacuum)
AERO_DISABLE_ALTITUDE = 120000.0  # m
# Wind forces are ignored below this density (kg/m^3)
WIND_MIN_DENSITY = 0.001

# =============================================================================
# NUMERICAL
# =============================================================================

ZERO_TOLERANCE = 1e-10  # Near-zero check for divisions/normalizations
MIN_MASS = 1.0          # Total mass floor (kg)
DT_MAX = 0.1            # Integration step ceiling (s)
DT_MAX_TERMINAL = 0.05  # Ceiling during landing and catch (s)
MIN_SIMULATION_SPEED = 0.1
MAX_SIMULATION_SPEED = 100.0
MAX_REASONABLE_SPEED = 15000.0        # Validation bound on |v| (m/s)
MAX_REASONABLE_ANGULAR_RATE = 10.0    # Validation bound on |omega| (rad/s)

# =============================================================================
# BOOSTER (Super Heavy class)
# =============================================================================

BOOSTER_DRY_MASS = 200000.0          # kg
BOOSTER_PROPELLANT_MASS = 3400000.0  # kg
BOOSTER_MAX_THRUST = 72.0e6          # N (33 engines, sea level)
BOOSTER_ISP_SL = 330.0               # s
BOOSTER_ISP_VAC = 360.0              # s
BOOSTER_DRAG_COEFFICIENT = 0.8
BOOSTER_REFERENCE_AREA = 100.0       # m^2
BOOSTER_LENGTH = 71.0                # m
BOOSTER_GIMBAL_LIMIT = np.radians(10.0)  # rad

GRID_FIN_DRAG_CONTRIBUTION = 0.2
GRID_FIN_DEPLOY_RATE = 0.2   # fraction per second
GRID_FIN_AREA = 16.0         # m^2 (four fins)
LEG_DEPLOY_RATE = 0.3        # fraction per second

BOOSTER_HEAT_SHIELD_MAX_TEMP = 2000.0  # K
BOOSTER_HEAT_SHIELD_COOLING = 5.0      # K/s

# =============================================================================
# UPPER STAGE (Starship class)
# =============================================================================

UPPER_STAGE_DRY_MASS = 100000.0          # kg
UPPER_STAGE_PROPELLANT_MASS = 1200000.0  # kg
UPPER_STAGE_MAX_THRUST = 15.0e6          # N (6 engines)
UPPER_STAGE_ISP_SL = 330.0               # s
UPPER_STAGE_ISP_VAC = 380.0              # s
UPPER_STAGE_DRAG_COEFFICIENT = 0.82
UPPER_STAGE_REFERENCE_AREA = np.pi * 4.5 ** 2  # m^2 (9 m diameter)
UPPER_STAGE_LENGTH = 50.0                # m
UPPER_STAGE_GIMBAL_LIMIT = np.radians(15.0)  # rad

FLAP_DRAG_CONTRIBUTION = 0.3
FLAP_DEPLOY_RATE = 0.25      # fraction per second
FLAP_AREA = 40.0             # m^2

UPPER_STAGE_HEAT_SHIELD_MAX_TEMP = 1800.0  # K
UPPER_STAGE_HEAT_SHIELD_COOLING = 4.0      # K/s

# =============================================================================
# PROPULSION / AERODYNAMICS
# =============================================================================

GIMBAL_LATERAL_GAIN = 0.1      # Lateral thrust fraction per unit gimbal
THRUST_COEFFICIENT_MAX = 1.1   # Vacuum thrust gain cap
THRUST_PRESSURE_GAIN = 0.2     # Thrust gain per unit pressure drop
AOA_DRAG_FACTOR = 2.0          # Cd multiplier slope on sin^2(alpha)
CL_SURFACE = 0.5               # Control surface lift coefficient per unit deflection

# =============================================================================
# LAUNCH & ASCENT
# =============================================================================

BOOSTER_PAD_HEIGHT = 0.1       # m (initial booster base height)
STACK_OFFSET = 60.65           # m (upper stage base above booster base)
LAUNCH_THROTTLE = 1.0
ASCENT_THROTTLE = 0.9
ASCENT_TRANSITION_ALTITUDE = 30.0   # m
PITCH_PROGRAM_START_ALTITUDE = 500.0  # m
PITCH_PROGRAM_RATE = 1.0 / 10000.0    # rad per metre above start
PITCH_PROGRAM_MAX = 0.2               # rad

# =============================================================================
# STAGE SEPARATION
# =============================================================================

SEPARATION_DURATION = 3.0          # s
SEPARATION_BOOSTER_IMPULSE = -2.0  # m/s (vertical)
SEPARATION_UPPER_IMPULSE = 3.0     # m/s (vertical)
SEPARATION_BOOSTER_PUSH = -0.5     # m/s^2 at start of the timer
SEPARATION_UPPER_PUSH = 0.8        # m/s^2 at start of the timer
SEPARATION_UPPER_THROTTLE = 0.9
ORBIT_ALTITUDE = 200000.0          # m (upper stage cutoff altitude)

# =============================================================================
# BOOSTER RETURN
# =============================================================================

TOWER_POSITION = np.array([-120.0, 0.0, 0.0])  # Catch tower / landing target (m)
RETURN_COAST_DURATION = 10.0   # s
RETURN_FLIP_DURATION = 5.0     # s
RETURN_BURN_DURATION = 15.0    # s
RETURN_FLIP_THROTTLE = 0.2
RETURN_BURN_THROTTLE = 0.6
RETURN_FLIP_SLEW_RATE = 0.8    # fraction of attitude error per second
RETURN_BURN_SLEW_RATE = 0.5
RETURN_MAX_TILT = np.pi / 4    # rad

APPROACH_FINAL_ALTITUDE = 2500.0   # m
APPROACH_MAX_DESCENT_RATE = 50.0   # m/s
APPROACH_DESCENT_DIVISOR = 20.0    # s (target rate = h / divisor)
APPROACH_BASE_THROTTLE = 0.5
APPROACH_FIN_GAIN = 0.1
FINAL_GIMBAL_GAIN = 0.05
HOVER_ALTITUDE = 50.0              # m
HOVER_MAX_DESCENT_RATE = 20.0      # m/s
TOUCHDOWN_SPEED = 2.0              # m/s

# =============================================================================
# BOOSTER LANDING
# =============================================================================

LANDING_BOOSTBACK_ALTITUDE = 65000.0  # m
LANDING_ENTRY_ALTITUDE = 40000.0      # m
LANDING_DESCENT_ALTITUDE = 20000.0    # m
LANDING_BURN_ALTITUDE = 3000.0        # m
LANDING_BOOSTBACK_DURATION = 20.0     # s
LANDING_ENTRY_DURATION = 15.0         # s
LANDING_START_THROTTLE = 0.3
LANDING_IGNITION_THROTTLE = 0.8     # hover-slam throttle that lights the landing burn early
HOVER_SLAM_MIN_ALTITUDE = 1.0       # m, floor on the stopping distance

LANDING_THROTTLE_COAST = 0.0
LANDING_THROTTLE_BOOSTBACK = 0.6
LANDING_THROTTLE_ENTRY = 0.4
LANDING_THROTTLE_DESCENT = 0.0
LANDING_THROTTLE_LANDING = 0.3
LANDING_THROTTLE_TOUCHDOWN = 0.2
TOUCHDOWN_THROTTLE_DECAY = 0.5      # per second
TOUCHDOWN_SETTLE_TIME = 3.0         # s

ENTRY_TARGET_VELOCITY = -50.0       # m/s
HOVER_SLAM_DECEL_FRACTION = 0.5
RETROGRADE_MIN_SPEED = 10.0         # m/s
BOOSTBACK_TILT_GAIN = 0.01          # rad per m/s of horizontal velocity
FIN_STEERING_MIN_EFFECTIVENESS = 0.1
FIN_STEERING_GAIN = 0.1
LANDING_GIMBAL_GAIN = 5.0
LANDING_TILT_FRACTION = 0.3         # fraction of gimbal authority used as tilt
LANDING_KP_BASE = 0.1
LANDING_KP_SCHEDULE = 0.2
LANDING_KP_SCHEDULE_ALTITUDE = 1000.0  # m

GRID_FIN_MIN_ALTITUDE = 1000.0      # m
GRID_FIN_MAX_ALTITUDE = 60000.0     # m
LEG_DEPLOY_ALTITUDE = 1000.0        # m

GROUND_EFFECT_ALTITUDE = 20.0       # m
GROUND_EFFECT_GAIN = 0.2
LANDED_ALTITUDE_TOLERANCE = 0.1     # m
LANDED_VELOCITY_TOLERANCE = 0.1     # m/s
HARD_LANDING_SPEED = 5.0            # m/s

# =============================================================================
# ATTITUDE DYNAMICS
# =============================================================================

ATTITUDE_RATE_GAIN = 10.0     # 1/s, attitude PID output to angular acceleration
ANGULAR_DAMPING = 1.0         # 1/s
FIN_ANGULAR_DAMPING = 2.0     # 1/s at full grid fin deployment

# =============================================================================
# PID GAINS
# =============================================================================

VERTICAL_PID_KP = 0.2
VERTICAL_PID_KI = 0.01
VERTICAL_PID_KD = 0.1
VERTICAL_PID_LIMIT = 0.3

HORIZONTAL_PID_KP = 0.1
HORIZONTAL_PID_KI = 0.005
HORIZONTAL_PID_KD = 0.05
HORIZONTAL_PID_LIMIT = 0.2

ATTITUDE_PID_KP = 0.5
ATTITUDE_PID_KI = 0.01
ATTITUDE_PID_KD = 0.2
ATTITUDE_PID_LIMIT = 0.1

# =============================================================================
# CATCH TOWER (Mechazilla)
# =============================================================================

TOWER_HEIGHT = 146.0               # m
ARM_START_HEIGHT = 100.0           # m
ARM_OPEN_WIDTH = 15.0              # m
ARM_CLOSED_WIDTH = 5.0             # m
ARM_MIN_HEIGHT = 10.0              # m
ARM_HEIGHT_SPEED = 2.0             # m/s
ARM_CLOSING_SPEED = 1.0            # m/s
ARM_POSITION_TOLERANCE = 1.0       # m
CATCH_POINT_FRACTION = 0.8         # catch points at 80 % of booster length
CATCH_TRACKING_RANGE = 1000.0      # m
CATCH_TRACKING_ACCURACY = 0.1      # m (uniform error bound per axis)
CATCH_HORIZONTAL_TOLERANCE = 5.0   # m
CATCH_VERTICAL_TOLERANCE = 2.0     # m
CATCH_MAX_VERTICAL_SPEED = 2.0     # m/s
CATCH_MAX_HORIZONTAL_SPEED = 1.0   # m/s
CATCH_MISS_MARGIN = 5.0            # m below the arms
CATCH_GROUND_ALTITUDE = 10.0       # m

CATCH_APPROACH_MAX_SPEED = 5.0     # m/s
CATCH_APPROACH_SPEED_GAIN = 0.1    # 1/s
CATCH_APPROACH_ACCEL_LIMIT = 5.0   # m/s^2
CATCH_APPROACH_COMPLETE_DISTANCE = 10.0  # m

# =============================================================================
# THERMAL
# =============================================================================

HEATING_COEFFICIENT = 1e-10        # K/s per (m/s)^3 sqrt(kg/m^3)
HEAT_SHIELD_COOLING_CEILING = 100000.0  # m (no radiative cooling above)
SUTTON_GRAVES_K = 1.83e-4          # W/m^2 stagnation heating constant

# =============================================================================
# WIND
# =============================================================================

WIND_MEAN_SPEED = 5.0             # m/s
WIND_DIRECTION_DRIFT = 0.1        # rad/s random-walk scale
WIND_GUST_MAX = 5.0               # m/s
WIND_GUST_RATE = 0.1              # expected gusts per second
WIND_GUST_DECAY = 0.6             # fraction of gust retained per second

# =============================================================================
# HEADLESS MISSION SCRIPT
# =============================================================================

FRAME_DT = 0.1                    # Frame interval of the scripted run (s)
MAX_MISSION_TIME = 1500.0         # s
SCRIPT_SEPARATION_ALTITUDE = 10000.0  # Trigger separation above this (m)
SCRIPT_CATCH_ALTITUDE = 300.0     # Hand over to the tower below this (m)
STATUS_INTERVAL = 10.0            # Status row period (s)

# =============================================================================

def print_config():
    """Print configuration summary."""
    print("="*60)
    print("Starship Flight Simulation Configuration")
    print("="*60)
    stack = (BOOSTER_DRY_MASS + BOOSTER_PROPELLANT_MASS
             + UPPER_STAGE_DRY_MASS + UPPER_STAGE_PROPELLANT_MASS)
    print(f"Stack liftoff mass: {stack:,.0f} kg")
    print(f"Booster thrust: {BOOSTER_MAX_THRUST/1e6:.1f} MN")
    print(f"Upper stage thrust: {UPPER_STAGE_MAX_THRUST/1e6:.1f} MN")
    print(f"Liftoff TWR: {BOOSTER_MAX_THRUST / (stack * G_CONSTANT):.2f}")
    print(f"Tower position: {TOWER_POSITION}")
    print(f"Integration ceiling: {DT_MAX} s ({DT_MAX_TERMINAL} s terminal)")
    print("="*60)
