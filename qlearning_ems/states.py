# -*- coding: utf-8 -*-
"""
Discretized states and actions of the Q-learning agent.

A state is a 4-vector (Time_steady, P_batt, P_FC, SOC) in p.u. Each feature has
its own ordered list of levels; the state lattice is the cartesian product of
the four lists. A feature that is not rewarded collapses to a single level.
"""

import itertools

import numpy as np

from qlearning_ems.errors import ConfigurationError


#==============================================================================
# States
#==============================================================================

FEATURES = ['Time_steady', 'P_batt', 'P_FC', 'SOC']
STEADY, P_BATT, P_FC, SOC = range(len(FEATURES))

# Level of a feature that is not considered
PLACEHOLDER_LEVELS = [0]

TIME_STEADY_LEVELS = [5, 8]  # For how long is the input the same ? (iterations)
P_BATT_LEVELS = [-1, -0.8, -0.55, -0.25, 0.25, 0.55, 0.8, 1]
P_FC_LEVELS = [0.7, 0.9]  # Centered on 0.8: P_FC < 0.8 is good, else bad
SOC_LEVELS = list(np.linspace(0.4, 1, 13))


#==============================================================================
# Actions
#==============================================================================

# The only action of the EMS on the grid is on the FC current.
# Column order of the Q-table: hold first, so that ties favour a constant input.
HOLD, DECREASE, INCREASE = 0, 1, 2
ACTION_NAMES = ['hold', 'decrease', 'increase']
N_ACTIONS = len(ACTION_NAMES)


def action_deltas(dI_FC=0.2):
    """Signed FC current step [p.u.] of each action."""
    return np.array([0.0, -dI_FC, dI_FC])


def level_sets(weights):
    """Levels of each feature, given the reward weights.

    A zero weight removes the corresponding reward term, so its state dimension
    collapses to the placeholder level. The SOC is always controlled.
    """
    if weights.get('soc', 0) == 0:
        raise ConfigurationError('SOC must be controlled, weight cannot be equal to 0')

    levels = [PLACEHOLDER_LEVELS, PLACEHOLDER_LEVELS, PLACEHOLDER_LEVELS, SOC_LEVELS]
    if weights.get('steady', 0) != 0:
        levels[STEADY] = TIME_STEADY_LEVELS
    if weights.get('p_batt', 0) != 0:
        levels[P_BATT] = P_BATT_LEVELS
    if weights.get('p_fc', 0) != 0:
        levels[P_FC] = P_FC_LEVELS

    return [list(l) for l in levels]


def nearest(observation, states):
    """Index of the lattice entry closest to the observation.

    Squared euclidean distance; ties go to the first entry in lattice order.
    The observation itself is left untouched.
    """
    diff = states - np.asarray(observation, dtype=float)
    return int(np.argmin(np.sum(diff ** 2, axis=1)))


class StateLattice:
    """Ordered enumeration of every discretized state."""

    def __init__(self, levels):
        if len(levels) != len(FEATURES):
            raise ConfigurationError('Expected {} level sets, got {}'.format(len(FEATURES), len(levels)))
        if len(levels[SOC]) < 2:
            raise ConfigurationError('SOC must be controlled, at least 2 levels are required')

        self.levels = [list(l) for l in levels]
        # Nesting order: Time_steady (outer) -> P_batt -> P_FC -> SOC (inner)
        self.states = np.array(list(itertools.product(*self.levels)), dtype=float)
        self.states.setflags(write=False)

    @classmethod
    def from_weights(cls, weights):
        return cls(level_sets(weights))

    def __len__(self):
        return self.states.shape[0]

    def __getitem__(self, index):
        return self.states[index]

    @property
    def shape(self):
        return tuple(len(l) for l in self.levels)

    def nearest(self, observation):
        return nearest(observation, self.states)
