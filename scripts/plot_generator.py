"""
Starship Mission Visualization Module.

Plots of a logged headless mission: both vehicles' altitude, speed,
propellant and throttle histories, heat shield temperatures, the booster
landing profile and the catch tower arm motion.
"""

import os
import sys
from pathlib import Path
from dataclasses import dataclass
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for batch processing
import matplotlib.pyplot as plt
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from starship_sim.main import run_mission


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class MissionData:
    """Container for logged mission series as numpy arrays.

    Attributes:
        time: Mission time (s)
        phase: Top-level mission phase name per frame
        booster_altitude, upper_altitude: Altitude (km)
        booster_downrange, upper_downrange: Downrange distance (km)
        booster_speed, upper_speed: Speed (m/s)
        booster_vertical_velocity: Booster vertical velocity (m/s)
        booster_propellant, upper_propellant: Propellant mass (kg)
        booster_throttle, upper_throttle: Throttle (0..1)
        booster_heat_shield, upper_heat_shield: Heat shield temperature (K)
        arm_height, arm_width: Catch arm state (m)
    """
    time: np.ndarray
    phase: List[str]
    booster_altitude: np.ndarray
    upper_altitude: np.ndarray
    booster_downrange: np.ndarray
    upper_downrange: np.ndarray
    booster_speed: np.ndarray
    upper_speed: np.ndarray
    booster_vertical_velocity: np.ndarray
    booster_propellant: np.ndarray
    upper_propellant: np.ndarray
    booster_throttle: np.ndarray
    upper_throttle: np.ndarray
    booster_heat_shield: np.ndarray
    upper_heat_shield: np.ndarray
    arm_height: np.ndarray
    arm_width: np.ndarray


# =============================================================================
# Configuration
# =============================================================================

def configure_plot_style() -> None:
    """Configure matplotlib defaults for the mission plots."""
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'figure.dpi': 100,
        'savefig.dpi': 150,
        'axes.grid': True,
        'axes.axisbelow': True,
        'grid.alpha': 0.3,
        'font.size': 11,
        'axes.titlesize': 13,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'lines.linewidth': 1.8,
    })


# =============================================================================
# Data Processing
# =============================================================================

def extract_log_data(log) -> MissionData:
    """Convert a SimulationLog into numpy arrays for plotting."""
    if len(log.time) == 0:
        raise ValueError("Cannot plot an empty simulation log")
    return MissionData(
        time=np.array(log.time),
        phase=list(log.phase),
        booster_altitude=np.array(log.booster_altitude),
        upper_altitude=np.array(log.upper_altitude),
        booster_downrange=np.array(log.booster_downrange),
        upper_downrange=np.array(log.upper_downrange),
        booster_speed=np.array(log.booster_speed),
        upper_speed=np.array(log.upper_speed),
        booster_vertical_velocity=np.array(log.booster_vertical_velocity),
        booster_propellant=np.array(log.booster_propellant),
        upper_propellant=np.array(log.upper_propellant),
        booster_throttle=np.array(log.booster_throttle),
        upper_throttle=np.array(log.upper_throttle),
        booster_heat_shield=np.array(log.booster_heat_shield),
        upper_heat_shield=np.array(log.upper_heat_shield),
        arm_height=np.array(log.arm_height),
        arm_width=np.array(log.arm_width),
    )


def _find_phase_index(data: MissionData, phase: str) -> Optional[int]:
    """First frame index in the given mission phase, None if never reached."""
    for i, name in enumerate(data.phase):
        if name == phase:
            return i
    return None


def _mark_separation(ax, data: MissionData) -> None:
    idx = _find_phase_index(data, 'STAGE_SEPARATION')
    if idx is not None:
        ax.axvline(data.time[idx], color='gray', linestyle='--', alpha=0.7,
                   label=f'Separation (T+{data.time[idx]:.0f} s)')


def _save(fig, output_dir: str, name: str) -> str:
    plt.tight_layout()
    path = os.path.join(output_dir, name)
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    return path


# =============================================================================
# Plots
# =============================================================================

def plot_altitude_profile(data: MissionData, output_dir: str) -> str:
    """Altitude of both vehicles vs time."""
    fig, ax = plt.subplots()
    ax.plot(data.time, data.booster_altitude, 'b-', label='Booster')
    ax.plot(data.time, data.upper_altitude, 'r-', label='Upper stage')
    _mark_separation(ax, data)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Altitude Profile', fontweight='bold')
    ax.legend(loc='upper left')
    ax.set_ylim(0, None)
    return _save(fig, output_dir, '01_altitude_profile.png')


def plot_velocity_profile(data: MissionData, output_dir: str) -> str:
    fig, ax = plt.subplots()
    ax.plot(data.time, data.booster_speed, 'b-', label='Booster')
    ax.plot(data.time, data.upper_speed, 'r-', label='Upper stage')
    _mark_separation(ax, data)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Speed (m/s)')
    ax.set_title('Speed Profile', fontweight='bold')
    ax.legend(loc='upper left')
    return _save(fig, output_dir, '02_velocity_profile.png')


def plot_trajectory(data: MissionData, output_dir: str) -> str:
    """Altitude vs downrange for both vehicles."""
    fig, ax = plt.subplots()
    ax.plot(data.booster_downrange, data.booster_altitude, 'b-', label='Booster')
    ax.plot(data.upper_downrange, data.upper_altitude, 'r-', label='Upper stage')
    ax.scatter([0.0], [0.0], c='green', s=80, marker='^', zorder=5, label='Launch pad')
    ax.set_xlabel('Downrange (km)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Trajectory', fontweight='bold')
    ax.legend(loc='upper left')
    return _save(fig, output_dir, '03_trajectory.png')


def plot_propellant(data: MissionData, output_dir: str) -> str:
    fig, ax = plt.subplots()
    ax.plot(data.time, data.booster_propellant / 1000, 'b-', label='Booster')
    ax.plot(data.time, data.upper_propellant / 1000, 'r-', label='Upper stage')
    _mark_separation(ax, data)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Propellant (t)')
    ax.set_title('Propellant Remaining', fontweight='bold')
    ax.legend(loc='upper right')
    ax.set_ylim(0, None)
    return _save(fig, output_dir, '04_propellant.png')


def plot_throttle_history(data: MissionData, output_dir: str) -> str:
    fig, ax = plt.subplots()
    ax.step(data.time, data.booster_throttle, 'b-', where='post', label='Booster')
    ax.step(data.time, data.upper_throttle, 'r-', where='post', label='Upper stage')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Throttle')
    ax.set_title('Throttle Commands', fontweight='bold')
    ax.set_ylim(-0.05, 1.05)
    ax.legend(loc='upper right')
    return _save(fig, output_dir, '05_throttle.png')


def plot_heat_shield(data: MissionData, output_dir: str) -> str:
    fig, ax = plt.subplots()
    ax.plot(data.time, data.booster_heat_shield, 'b-', label='Booster')
    ax.plot(data.time, data.upper_heat_shield, 'r-', label='Upper stage')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Temperature (K)')
    ax.set_title('Heat Shield Temperature', fontweight='bold')
    ax.legend(loc='upper left')
    return _save(fig, output_dir, '06_heat_shield.png')


def plot_booster_landing(data: MissionData, output_dir: str) -> str:
    """Booster vertical velocity against altitude after separation."""
    start = _find_phase_index(data, 'BOOSTER_RETURN') or 0
    fig, ax = plt.subplots()
    ax.plot(data.booster_vertical_velocity[start:], data.booster_altitude[start:] * 1000, 'b-')
    ax.axvline(0.0, color='gray', linewidth=0.8)
    ax.set_xlabel('Vertical velocity (m/s)')
    ax.set_ylabel('Altitude (m)')
    ax.set_title('Booster Descent Profile', fontweight='bold')
    ax.set_ylim(0, None)
    return _save(fig, output_dir, '07_booster_landing.png')


def plot_catch_arms(data: MissionData, output_dir: str) -> str:
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True)
    ax1.plot(data.time, data.arm_height, 'k-', label='Arm height')
    ax1.plot(data.time, data.booster_altitude * 1000 + 56.8, 'b--', alpha=0.6,
             label='Booster catch points')
    ax1.set_ylabel('Height (m)')
    ax1.set_ylim(0, 160)
    ax1.legend(loc='upper right')
    ax1.set_title('Catch Tower Arms', fontweight='bold')
    ax2.plot(data.time, data.arm_width, 'k-')
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Arm opening (m)')
    return _save(fig, output_dir, '08_catch_arms.png')


def generate_all_plots(log, output_dir: str = "plots") -> List[str]:
    """Generate all mission plots.

    Args:
        log: SimulationLog from run_mission
        output_dir: Directory to save plots (created if it doesn't exist)

    Returns:
        List of paths to saved plot files

    Example:
        >>> from starship_sim.main import run_mission
        >>> from scripts.plot_generator import generate_all_plots
        >>> result = run_mission()
        >>> plot_files = generate_all_plots(result.log, "output/plots")
    """
    os.makedirs(output_dir, exist_ok=True)
    configure_plot_style()
    data = extract_log_data(log)

    plot_functions = [
        plot_altitude_profile,
        plot_velocity_profile,
        plot_trajectory,
        plot_propellant,
        plot_throttle_history,
        plot_heat_shield,
        plot_booster_landing,
        plot_catch_arms,
    ]

    saved_files = []
    for plot_func in plot_functions:
        try:
            saved_files.append(plot_func(data, output_dir))
        except Exception as e:
            print(f"Warning: Failed to generate {plot_func.__name__}: {e}")
    return saved_files


def main() -> None:
    """Run the scripted mission and generate all plots."""
    print("=" * 70)
    print("  Starship Mission Visualization")
    print("=" * 70)

    result = run_mission(verbose=True)
    print(f"\nOutcome: {result.reason}")

    output_dir = "plots"
    saved_files = generate_all_plots(result.log, output_dir)
    print(f"\nGenerated {len(saved_files)} plots in {output_dir}/")


if __name__ == "__main__":
    main()
