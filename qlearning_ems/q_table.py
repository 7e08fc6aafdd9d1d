# -*- coding: utf-8 -*-
"""
Q-table and visit counts, updated with the "average Q factor" step size.
"""

import numpy as np
import scipy.io as sio

from qlearning_ems.errors import ConfigurationError
from qlearning_ems.states import N_ACTIONS


class QTable:
    """Q-values (lines: states, columns: actions) and how often each pair was updated."""

    def __init__(self, n_states, n_actions=N_ACTIONS, Q=None, Q_visited=None):
        shape = (n_states, n_actions)

        self.Q = np.zeros(shape) if Q is None else np.array(Q, dtype=float)
        self.Q_visited = np.zeros(shape, dtype=np.int64) if Q_visited is None else np.array(Q_visited, dtype=np.int64)

        for name, table in (('Q', self.Q), ('Q_visited', self.Q_visited)):
            if table.shape != shape:
                raise ConfigurationError('{} of shape {} does not match {} states x {} actions'.format(
                    name, table.shape, n_states, n_actions))
        if np.any(self.Q_visited < 0):
            raise ConfigurationError('Visit counts cannot be negative')

    @classmethod
    def load(cls, q_path, n_states, visited_path=None):
        """Resume from the .mat snapshots of a previous run."""
        Q = sio.loadmat(q_path)['Q']
        Q_visited = sio.loadmat(visited_path)['Q_visited'] if visited_path else None
        return cls(n_states, Q=Q, Q_visited=Q_visited)

    @property
    def shape(self):
        return self.Q.shape

    def row(self, s):
        return self.Q[s]

    def update(self, s, a, reward, s_new, discount, system_on=True):
        """One-step update of Q[s, a] with step size 1 / (visits + 1).

        Nothing is written to Q when the system is off, but the pair is always
        counted as visited.
        """
        # Read the next state before writing (s and s_new may be the same line)
        target = reward + discount * np.max(self.Q[s_new])

        if system_on:
            step = 1.0 / (self.Q_visited[s, a] + 1)
            self.Q[s, a] = self.Q[s, a] + step * (target - self.Q[s, a])

        self.Q_visited[s, a] += 1

        return self.Q[s, a]

    def snapshot(self):
        return self.Q.copy(), self.Q_visited.copy()
