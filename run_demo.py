"""Demo script: run the scripted mission and print both vehicles' phase timelines."""
import numpy as np

from starship_sim.main import run_mission

result = run_mission(verbose=True)
log = result.log


def print_timeline(title, altitudes, speeds, phases):
    print(f"\n===== {title} =====")
    times = np.array(log.time)
    alts = np.array(altitudes)
    vels = np.array(speeds)
    print(f"Peak altitude: {np.max(alts):.2f} km")
    print(f"Final altitude: {alts[-1]:.2f} km | Final speed: {vels[-1]:.1f} m/s")
    prev_phase = None
    for i, phase in enumerate(phases):
        if phase != prev_phase:
            print(f"  t={times[i]:8.1f}s | Alt={alts[i]:8.2f} km | "
                  f"V={vels[i]:8.1f} m/s | Phase: {phase}")
            prev_phase = phase


if len(log) > 0:
    print_timeline("BOOSTER", log.booster_altitude, log.booster_speed, log.booster_phase)
    print_timeline("UPPER STAGE", log.upper_altitude, log.upper_speed, log.upper_phase)

print()
print(f"Outcome: {result.reason}")
print(f"Landing complete: {result.landing_complete} | Hard landing: {result.hard_landing}")
print(f"Caught: {result.caught} | Catch failed: {result.catch_failed}")
