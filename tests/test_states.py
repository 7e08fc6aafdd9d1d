"""
Tests for the state lattice and the nearest-state search.
"""

import os
import sys
import unittest

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from qlearning_ems.errors import ConfigurationError
from qlearning_ems.states import (DECREASE, HOLD, INCREASE, N_ACTIONS, SOC_LEVELS,
                                  StateLattice, action_deltas, level_sets)


ALL_WEIGHTS = {'soc': 1, 'p_fc': 1, 'p_batt': 1, 'steady': 1}


class TestLevelSets(unittest.TestCase):

    def test_full_lattice_size(self):
        lattice = StateLattice.from_weights(ALL_WEIGHTS)
        self.assertEqual(len(lattice), 2 * 8 * 2 * 13)
        self.assertEqual(lattice.shape, (2, 8, 2, 13))

    def test_disabled_features_collapse_to_placeholder(self):
        lattice = StateLattice.from_weights({'soc': 1, 'p_fc': 0, 'p_batt': 0, 'steady': 0})
        self.assertEqual(len(lattice), len(SOC_LEVELS))
        self.assertTrue(np.all(lattice.states[:, :3] == 0))

    def test_soc_weight_zero_rejected(self):
        with self.assertRaises(ConfigurationError):
            level_sets({'soc': 0, 'p_fc': 1})

    def test_single_soc_level_rejected(self):
        with self.assertRaises(ConfigurationError):
            StateLattice([[0], [0], [0], [0.5]])

    def test_wrong_number_of_level_sets(self):
        with self.assertRaises(ConfigurationError):
            StateLattice([[0], [0.4, 0.8]])


class TestLatticeOrder(unittest.TestCase):

    def setUp(self):
        self.lattice = StateLattice([[5, 8], [-0.5, 0.5], [0.7, 0.9], [0.4, 0.7, 1.0]])

    def test_soc_is_innermost(self):
        np.testing.assert_array_equal(self.lattice[0], [5, -0.5, 0.7, 0.4])
        np.testing.assert_array_equal(self.lattice[1], [5, -0.5, 0.7, 0.7])
        np.testing.assert_array_equal(self.lattice[3], [5, -0.5, 0.9, 0.4])
        np.testing.assert_array_equal(self.lattice[12], [8, -0.5, 0.7, 0.4])

    def test_states_are_read_only(self):
        with self.assertRaises(ValueError):
            self.lattice.states[0, 0] = 1.0


class TestNearest(unittest.TestCase):

    def setUp(self):
        self.lattice = StateLattice([[5, 8], [-0.5, 0.5], [0.7, 0.9], [0.4, 0.7, 1.0]])

    def test_exact_match_returns_its_index(self):
        for index in range(len(self.lattice)):
            self.assertEqual(self.lattice.nearest(self.lattice[index]), index)

    def test_index_in_range(self):
        rng = np.random.default_rng(0)
        for _ in range(50):
            obs = rng.uniform(-3, 10, size=4)
            index = self.lattice.nearest(obs)
            self.assertTrue(0 <= index < len(self.lattice))

    def test_closest_entry(self):
        self.assertEqual(self.lattice.nearest([0, 0.4, 0.75, 0.68]), 7)

    def test_tie_goes_to_first_entry(self):
        lattice = StateLattice([[0], [0], [0], [0.4, 0.6]])
        self.assertEqual(lattice.nearest([0, 0, 0, 0.5]), 0)

    def test_observation_untouched(self):
        obs = np.array([3.0, 0.1, 0.8, 0.55])
        self.lattice.nearest(obs)
        np.testing.assert_array_equal(obs, [3.0, 0.1, 0.8, 0.55])


class TestActions(unittest.TestCase):

    def test_deltas(self):
        deltas = action_deltas(0.2)
        self.assertEqual(len(deltas), N_ACTIONS)
        self.assertEqual(deltas[HOLD], 0.0)
        self.assertAlmostEqual(deltas[DECREASE], -0.2)
        self.assertAlmostEqual(deltas[INCREASE], 0.2)


if __name__ == "__main__":
    unittest.main()
