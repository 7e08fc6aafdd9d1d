"""
Tests for the run report: results.txt, .mat snapshots and figures.
"""

import os
import shutil
import sys
import tempfile
import unittest

import numpy as np
import scipy.io as sio

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

from helpers import PlantStub, make_control_settings, make_settings
from qlearning_ems.report import RunReport, resample
from qlearning_ems.training import Trainer


class TestResample(unittest.TestCase):

    def test_one_hertz_grid(self):
        continuous = {'time': np.array([0.1, 0.5, 1.0, 1.0, 2.0]),
                      'SOC_battery': np.array([0.7, 0.68, 0.66, 0.66, 0.62])}
        data = resample(continuous)
        np.testing.assert_allclose(data['time'], [0.1, 1.1])
        np.testing.assert_allclose(data['SOC_battery'], [0.7, 0.656])

    def test_empty(self):
        data = resample({'time': np.zeros(0), 'P_FC': np.zeros(0)})
        self.assertEqual(data['P_FC'].size, 0)


class TestRunReport(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_artifacts_of_a_run(self):
        settings = make_settings(max_episodes=2)
        report = RunReport(self.tmp, settings)
        trainer = Trainer(settings, make_control_settings(), simulator=PlantStub(fault_on_reset={2}),
                          seed=3, reporter=report)
        trainer.run()
        report.close()

        files = set(os.listdir(self.tmp))
        for name in ('results.txt', 'Q_episode1.mat', 'Q_visited_episode1.mat', 'Data_episode1.mat', 'episode1.png'):
            self.assertIn(name, files)
        self.assertNotIn('Q_episode2.mat', files)

        Q = sio.loadmat(os.path.join(self.tmp, 'Q_episode1.mat'))['Q']
        self.assertEqual(Q.shape, trainer.q_table.shape)

        with open(os.path.join(self.tmp, 'results.txt')) as f:
            text = f.read()
        self.assertIn('Episode 1 completed', text)
        self.assertIn('Episode 2 stopped (error)', text)
        self.assertIn('epsilon_decay: 0.9', text)


if __name__ == "__main__":
    unittest.main()
