"""
Tests for the mission phase state machine.
"""

import pytest
import numpy as np

from starship_sim import constants as C
from starship_sim.config import create_test_config
from starship_sim.guidance import ReturnPhase
from starship_sim.mission_manager import MissionManager, MissionPhase
from starship_sim.validation import ValidationError


@pytest.fixture
def mission():
    return MissionManager(create_test_config())


def fly_to_ascent(mission):
    mission.start_launch()
    for _ in range(10):
        mission.update(1.0)
    return mission


# ============================================================================
# Launch to separation scenario
# ============================================================================

class TestLaunchToSeparation:
    """Liftoff, ascent and stage separation with default vehicles."""

    @classmethod
    def setup_class(cls):
        cls.mission = MissionManager(create_test_config())
        assert cls.mission.start_launch()
        cls.telemetry = [cls.mission.update(1.0) for _ in range(10)]
        cls.ascent_altitude = cls.mission.booster.altitude

    def test_reaches_ascent(self):
        assert self.telemetry[-1]['phase'] == 'ASCENT'
        assert self.ascent_altitude > 0

    def test_liftoff_altitude(self):
        # Stack TWR is about 1.5
        assert 150.0 < self.ascent_altitude < 350.0

    def test_upper_stage_carried(self):
        upper = self.mission.upper_stage
        assert not upper.active
        assert upper.altitude == pytest.approx(self.ascent_altitude + C.STACK_OFFSET, abs=1.0)

    def test_mission_clock(self):
        assert self.mission.mission_time == pytest.approx(10.0)
        assert self.telemetry[-1]['mission_time_str'] == "T+ 00:00:10"

    def test_booster_burns_propellant(self):
        assert self.mission.booster.propellant < C.BOOSTER_PROPELLANT_MASS

    def test_separation_sequence(self):
        mission = self.mission
        assert mission.trigger_stage_separation()
        assert mission.get_phase() == MissionPhase.STAGE_SEPARATION
        assert mission.upper_stage.active
        assert mission.booster.payload_mass == 0.0
        assert mission.booster.throttle == 0.0

        for _ in range(4):
            telemetry = mission.update(1.0)
        assert mission.get_phase() == MissionPhase.BOOSTER_RETURN
        assert mission.upper_stage.altitude > mission.booster.altitude
        assert telemetry['upper_stage']['phase'] == 'starship_ascent'
        assert telemetry['return_phase'] == ReturnPhase.COAST.name
        assert mission.upper_stage.throttle == 1.0


# ============================================================================
# Phase guards
# ============================================================================

def test_commands_rejected_in_ready(mission):
    assert not mission.trigger_stage_separation()
    assert not mission.start_landing_sequence()
    assert not mission.start_mechazilla_catch()
    assert mission.get_phase() == MissionPhase.READY


def test_ready_update_does_nothing(mission):
    telemetry = mission.update(1.0)
    assert telemetry['phase'] == 'READY'
    assert telemetry['mission_time'] == 0.0
    assert mission.booster.altitude == pytest.approx(C.BOOSTER_PAD_HEIGHT)


def test_launch_only_from_ready(mission):
    assert mission.start_launch()
    assert not mission.start_launch()
    assert mission.get_phase() == MissionPhase.LAUNCH


def test_separation_requires_ascent(mission):
    mission.start_launch()
    assert not mission.trigger_stage_separation()
    assert mission.get_phase() == MissionPhase.LAUNCH


def test_landing_requires_return(mission):
    fly_to_ascent(mission)
    assert not mission.start_landing_sequence()
    assert not mission.start_mechazilla_catch()
    assert mission.get_phase() == MissionPhase.ASCENT


def test_launch_to_ascent_transition(mission):
    mission.start_launch()
    mission.update(0.1)
    assert mission.get_phase() == MissionPhase.LAUNCH
    while mission.booster.altitude <= C.ASCENT_TRANSITION_ALTITUDE:
        mission.update(0.5)
    assert mission.get_phase() == MissionPhase.ASCENT


# ============================================================================
# Tick behaviour
# ============================================================================

def test_negative_dt_rejected(mission):
    mission.start_launch()
    with pytest.raises(ValueError):
        mission.update(-0.1)


def test_zero_dt_is_noop(mission):
    mission.start_launch()
    before = mission.booster.position.copy()
    mission.update(0.0)
    np.testing.assert_array_equal(mission.booster.position, before)
    assert mission.mission_time == 0.0


def test_speed_multiplier_substeps(mission):
    mission.start_launch()
    mission.set_simulation_speed(10.0)
    mission.update(0.1)
    assert mission.mission_time == pytest.approx(1.0)


def test_speed_clamped(mission):
    assert mission.set_simulation_speed(1000.0) == C.MAX_SIMULATION_SPEED
    assert mission.set_simulation_speed(0.01) == C.MIN_SIMULATION_SPEED
    assert mission.set_simulation_speed(5.0) == 5.0


@pytest.mark.parametrize("bad", [0.0, -1.0, float('nan'), float('inf')])
def test_speed_rejects_invalid(mission, bad):
    with pytest.raises(ValueError):
        mission.set_simulation_speed(bad)


def test_validation_failure_propagates(mission):
    mission.start_launch()
    mission.booster.propellant = -5.0
    with pytest.raises(ValidationError):
        mission.update(0.1)


# ============================================================================
# Reset
# ============================================================================

def test_reset_restores_initial_state(mission):
    fly_to_ascent(mission)
    mission.set_simulation_speed(20.0)
    mission.reset()
    assert mission.get_phase() == MissionPhase.READY
    assert mission.mission_time == 0.0
    assert mission.simulation_speed == mission.config.simulation_speed
    assert mission.booster.altitude == pytest.approx(C.BOOSTER_PAD_HEIGHT)
    assert mission.booster.propellant == C.BOOSTER_PROPELLANT_MASS
    assert mission.ascent_guidance.attitude.pid.integral is not None
    np.testing.assert_array_equal(mission.ascent_guidance.attitude.pid.integral, np.zeros(3))
    assert not mission.catch_controller.tracking


# ============================================================================
# Catch phase
# ============================================================================

def force_landing_phase(mission):
    mission.start_launch()
    mission.current_phase = MissionPhase.BOOSTER_LANDING
    mission.booster.payload_mass = 0.0
    mission.booster.position = np.array([C.TOWER_POSITION[0], 43.2, 0.0])
    mission.booster.velocity = np.zeros(3)


def test_catch_tick_budget_completes_mission():
    mission = MissionManager(create_test_config(catch_tick_budget=3))
    force_landing_phase(mission)
    assert mission.start_mechazilla_catch()
    assert mission.get_phase() == MissionPhase.MECHAZILLA_CATCH
    assert mission.catch_controller.tracking
    for _ in range(3):
        mission.update(0.05)
    assert mission.get_phase() == MissionPhase.MISSION_COMPLETE
    assert mission.catch_ticks == 3


def test_ground_impact_during_catch_fails(mission):
    force_landing_phase(mission)
    booster = mission.booster
    booster.propellant = 0.0
    booster.position = np.array([C.TOWER_POSITION[0] + 3000.0, 0.5, 0.0])
    booster.velocity = np.array([0.0, -30.0, 0.0])
    assert mission.start_mechazilla_catch()
    assert not mission.catch_controller.tracking

    mission.update(0.05)
    assert mission.catch_controller.failed
    assert not mission.catch_successful
    assert "hit the ground" in mission.catch_controller.failure_reason
    assert mission.catch_impact_speed > 25.0
    assert not booster.active
    assert mission.get_telemetry()['booster']['phase'] == "crashed"


def test_catch_after_landing_fails(mission):
    force_landing_phase(mission)
    mission.booster.deactivate()
    assert mission.start_mechazilla_catch()
    assert mission.catch_controller.failed
    assert not mission.catch_successful


# ============================================================================
# Telemetry
# ============================================================================

def test_telemetry_format(mission):
    mission.start_launch()
    telemetry = mission.update(0.5)
    expected_keys = {
        'phase', 'mission_time', 'mission_time_str', 'simulation_speed',
        'return_phase', 'landing_phase', 'landing_complete', 'hard_landing',
        'booster', 'upper_stage', 'catch', 'upper_stage_orbit',
    }
    assert expected_keys <= set(telemetry)
    assert telemetry['phase'] == 'LAUNCH'
    assert telemetry['return_phase'] is None
    assert telemetry['landing_phase'] is None

    booster = telemetry['booster']
    assert booster['name'] == 'booster'
    assert booster['altitude_km'] == pytest.approx(mission.booster.altitude / 1000.0)
    assert booster['throttle'] == pytest.approx(C.LAUNCH_THROTTLE)
    assert booster['attitude_deg'] == pytest.approx(90.0, abs=1.0)
    assert telemetry['upper_stage']['phase'] == 'stacked'
    assert telemetry['catch']['arm_height'] == C.ARM_START_HEIGHT
    assert 'bound' in telemetry['upper_stage_orbit']

    # Telemetry holds copies, not live references
    booster['position'][1] = -1.0
    assert mission.booster.altitude > 0
