"""
Unit tests for plot generation functionality.

Tests that plots are created correctly and files are generated
from real (short) simulation logs.
"""

import os
import tempfile
import unittest

import numpy as np

from tsr_sim.config import create_default_rocket, create_test_config
from tsr_sim.main import FullMissionResult, SimulationLog, run_simulation
from tsr_sim.plotting import (
    PHASE_ORDER,
    TrajectoryData,
    extract_log_data,
    generate_all_plots,
    plot_full_mission,
)


class TestExtractLogData(unittest.TestCase):
    """Test data extraction from simulation log."""

    @classmethod
    def setUpClass(cls):
        cls.state, cls.log, _ = run_simulation(config=create_test_config(max_time=5.0))

    def test_returns_trajectory_data(self):
        data = extract_log_data(self.log)
        self.assertIsInstance(data, TrajectoryData)

    def test_arrays_match_log_length(self):
        data = extract_log_data(self.log)
        self.assertEqual(len(data.time), len(self.log.time))
        self.assertEqual(len(data.phase_index), len(self.log.time))
        self.assertTrue(np.allclose(data.altitude, self.log.altitude))

    def test_phase_index(self):
        data = extract_log_data(self.log)
        self.assertEqual(PHASE_ORDER[data.phase_index[0]], "PRE_LAUNCH")
        self.assertEqual(PHASE_ORDER[data.phase_index[-1]], "BURNING")

    def test_empty_log_rejected(self):
        with self.assertRaises(ValueError):
            extract_log_data(SimulationLog())


class TestPlotGeneration(unittest.TestCase):
    """Test plot file generation."""

    @classmethod
    def setUpClass(cls):
        cls.state, cls.log, _ = run_simulation(config=create_test_config(max_time=10.0))

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = self.temp_dir.name

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_generate_all_plots_creates_files(self):
        paths = generate_all_plots(self.log, self.output_dir)
        self.assertEqual(len(paths), 9)
        for path in paths:
            self.assertTrue(os.path.exists(path), f"Missing plot: {path}")
            self.assertGreater(os.path.getsize(path), 0)

    def test_expected_file_names(self):
        paths = generate_all_plots(self.log, self.output_dir)
        names = {os.path.basename(p) for p in paths}
        self.assertIn('01_altitude_profile.png', names)
        self.assertIn('08_phase_timeline.png', names)
        self.assertIn('09_predicted_apogee.png', names)

    def test_output_dir_created(self):
        nested = os.path.join(self.output_dir, "nested", "plots")
        generate_all_plots(self.log, nested)
        self.assertTrue(os.path.isdir(nested))

    def test_prediction_plot_skipped_without_predictions(self):
        log = SimulationLog()
        log.append(self.state, create_default_rocket())
        paths = generate_all_plots(log, self.output_dir)
        names = {os.path.basename(p) for p in paths}
        self.assertNotIn('09_predicted_apogee.png', names)
        self.assertEqual(len(paths), 8)

    def test_full_mission_plots(self):
        result = FullMissionResult(
            ascent_log=self.log, ascent_final_state=self.state, ascent_reason="STAGE SEPARATION",
            separation_time=self.state.time,
            orbiter_log=self.log, orbiter_final_state=self.state, orbiter_reason="done",
            booster_log=self.log, booster_final_state=self.state, booster_reason="done",
        )
        paths = plot_full_mission(result, self.output_dir)
        names = {os.path.basename(p) for p in paths}
        self.assertEqual(names, {'20_mission_altitude.png', '21_mission_velocity.png',
                                 '22_booster_landing_zoom.png'})

    def test_full_mission_plots_without_booster(self):
        result = FullMissionResult(
            ascent_log=self.log, ascent_final_state=self.state, ascent_reason="max time",
            separation_time=None,
            orbiter_log=SimulationLog(), orbiter_final_state=self.state, orbiter_reason="max time",
            booster_log=SimulationLog(), booster_final_state=self.state, booster_reason="max time",
        )
        paths = plot_full_mission(result, self.output_dir)
        self.assertEqual(len(paths), 2)


if __name__ == '__main__':
    unittest.main()
