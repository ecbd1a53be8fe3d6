import csv

import pytest

from starship_sim import constants as C
from starship_sim import main
from starship_sim.config import create_test_config
from starship_sim.mission_manager import MissionManager, MissionPhase


@pytest.fixture(scope="module")
def short_mission():
    # Long enough to reach separation and start the booster return
    return main.run_mission(create_test_config(), max_time=100.0, verbose=False)


def test_run_mission_reaches_separation(short_mission):
    assert short_mission.reason == "Time limit reached"
    assert short_mission.separation_time is not None
    assert 30.0 < short_mission.separation_time < 100.0
    assert short_mission.max_upper_stage_altitude > short_mission.max_booster_altitude
    assert not short_mission.caught
    assert not short_mission.catch_failed


def test_run_mission_log(short_mission):
    log = short_mission.log
    assert len(log) > 0
    assert log.time == sorted(log.time)
    assert log.phase[0] == 'LAUNCH'
    assert 'STAGE_SEPARATION' in log.phase
    assert short_mission.final_phase in (MissionPhase.BOOSTER_RETURN, MissionPhase.BOOSTER_LANDING)


def test_simulation_log_append():
    log = main.SimulationLog()
    telemetry = MissionManager(create_test_config()).get_telemetry()
    log.append(telemetry)
    log.append(telemetry)
    assert len(log) == 2
    assert log.phase == ['READY', 'READY']
    assert log.booster_altitude[0] == pytest.approx(telemetry['booster']['altitude_km'])
    assert log.return_phase[0] == ''


def test_simulation_log_to_csv(tmp_path):
    log = main.SimulationLog()
    mission = MissionManager(create_test_config())
    mission.start_launch()
    for _ in range(3):
        log.append(mission.update(0.1))

    path = tmp_path / "out" / "mission.csv"
    log.to_csv(str(path))
    with open(path, newline='') as fh:
        rows = list(csv.reader(fh))
    assert rows[0][0] == 'time'
    assert 'arm_width_m' in rows[0]
    assert len(rows) == 4


def test_check_termination_time_limit():
    mission = MissionManager(create_test_config())
    assert main._check_termination(mission, max_time=10.0) is None
    assert main._check_termination(mission, max_time=0.0) == "Time limit reached"


def test_invalid_frame_interval():
    with pytest.raises(ValueError):
        main.run_mission(create_test_config(), frame_dt=0.0)


# ============================================================================
# Full recovery runs
# ============================================================================

@pytest.fixture(scope="module")
def landing_mission():
    return main.run_mission(create_test_config(), catch_altitude=None, verbose=False)


@pytest.fixture(scope="module")
def catch_mission():
    return main.run_mission(create_test_config(), verbose=False)


def test_landing_starts_past_apogee(landing_mission):
    log = landing_mission.log
    assert landing_mission.landing_start_time is not None
    start = log.time.index(landing_mission.landing_start_time)
    assert log.booster_vertical_velocity[start] < 0.0
    assert log.booster_vertical_velocity[start - 1] < 50.0


def test_entry_burn_is_flown(landing_mission):
    log = landing_mission.log
    entry = [i for i, phase in enumerate(log.landing_phase) if phase == 'ENTRY']
    assert entry
    assert log.time[entry[-1]] - log.time[entry[0]] > 5.0
    assert max(log.booster_throttle[i] for i in entry) > 0.0
    assert 'DESCENT' in log.landing_phase
    assert 'LANDING' in log.landing_phase


def test_landing_run_touches_down(landing_mission):
    assert landing_mission.reason == "Booster landed"
    assert landing_mission.landing_complete or landing_mission.hard_landing
    assert landing_mission.landing_complete
    assert not landing_mission.hard_landing
    assert 'TOUCHDOWN' in landing_mission.log.landing_phase
    assert landing_mission.catch_start_time is None
    assert landing_mission.final_telemetry['booster']['altitude_km'] == pytest.approx(0.0, abs=1e-4)


def test_catch_run_reaches_an_outcome(catch_mission):
    assert catch_mission.landing_start_time is not None
    assert catch_mission.catch_start_time is not None
    assert catch_mission.caught or catch_mission.catch_failed
    assert catch_mission.reason in ("Mission complete", "Catch failed")
    assert catch_mission.mission_time < C.MAX_MISSION_TIME
