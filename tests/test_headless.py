import pytest
from starship_sim import main
from starship_sim.config import create_test_config


def test_headless_run():
    # Ensure simulation runs without plotting or GUI
    result = main.run_mission(create_test_config(), max_time=1.0, verbose=False)
    # Allow one extra frame for floating-point time accumulation
    assert result.mission_time <= 1.0 + 0.15
    assert isinstance(result.reason, str)
    assert len(result.log) > 0
    assert result.separation_time is None


def test_headless_verbose_output(capsys):
    main.run_mission(create_test_config(), max_time=0.5, verbose=True)
    out = capsys.readouterr().out
    assert "MISSION SUMMARY" in out
    assert "Time limit reached" in out
