"""
Unit tests for plot generation functionality.

Runs a short headless mission and checks that every plot file is written.
"""

import os
import sys
import tempfile
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from scripts.plot_generator import extract_log_data, generate_all_plots
from starship_sim.config import create_test_config
from starship_sim.main import SimulationLog, run_mission

EXPECTED_PLOTS = [
    '01_altitude_profile.png',
    '02_velocity_profile.png',
    '03_trajectory.png',
    '04_propellant.png',
    '05_throttle.png',
    '06_heat_shield.png',
    '07_booster_landing.png',
    '08_catch_arms.png',
]


class TestPlotGeneration(unittest.TestCase):
    """Test plot generation with a short mission log."""

    @classmethod
    def setUpClass(cls):
        cls.result = run_mission(create_test_config(), max_time=5.0, verbose=False)

    def test_extract_log_data(self):
        data = extract_log_data(self.result.log)
        self.assertEqual(len(data.time), len(self.result.log))
        self.assertEqual(len(data.arm_height), len(data.time))

    def test_empty_log_rejected(self):
        with self.assertRaises(ValueError):
            extract_log_data(SimulationLog())

    def test_generate_all_plots(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output_dir = os.path.join(tmpdir, 'plots')
            files = generate_all_plots(self.result.log, output_dir)
            self.assertEqual([os.path.basename(f) for f in files], EXPECTED_PLOTS)
            for path in files:
                self.assertTrue(os.path.exists(path))
                self.assertGreater(os.path.getsize(path), 0)


if __name__ == '__main__':
    unittest.main()
