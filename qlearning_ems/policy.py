# -*- coding: utf-8 -*-
"""
Action selection: epsilon-greedy with sequences of forced constant actions.

During the decay phase the agent can trigger a sequence of consecutive "hold"
actions, to learn the value of keeping the FC input constant.
"""

import numpy as np

from qlearning_ems.errors import ConfigurationError
from qlearning_ems.states import HOLD, N_ACTIONS


# Origin of a selected action, with the value plotted for it
EXPLOITATION = 'exploitation'
EXPLORATION = 'exploration'
FORCED_STEADY = 'forced_steady'

DISPLAY_VALUES = {EXPLOITATION: 0.2, EXPLORATION: 0.0, FORCED_STEADY: -0.2}


class EpsilonGreedyPolicy:

    def __init__(self, epsilon, epsilon_decay, success_rate=1.0,
                 forced_steady_probability=0.0, forced_steady_length=8, rng=None):
        if not 0 < epsilon_decay <= 1:
            raise ConfigurationError('epsilon_decay must be in (0, 1], got {}'.format(epsilon_decay))
        if forced_steady_length < 1:
            raise ConfigurationError('forced_steady_length must be at least 1')

        self.epsilon = float(epsilon)
        self.epsilon_decay = float(epsilon_decay)
        self.success_rate = float(success_rate)
        self.forced_steady_probability = float(forced_steady_probability)
        self.forced_steady_length = int(forced_steady_length)
        self.rng = rng if rng is not None else np.random.default_rng()

        # Remaining actions of the current forced sequence (0 = free selection)
        self.steady_counter = 0

    @property
    def forced_steady(self):
        return self.steady_counter > 0

    def reset(self):
        """Start of an episode: drop any pending forced sequence."""
        self.steady_counter = 0

    def select(self, q_values):
        """Pick an action for a row of the Q-table.

        Returns (action index, origin of the action).
        """
        if self.steady_counter > 0:
            self.steady_counter -= 1
            return HOLD, FORCED_STEADY

        q_values = np.asarray(q_values)

        # EITHER 1) pick the best action according to the Q-table (EXPLOITATION)
        if (self.rng.random() >= min(1.0, self.epsilon)
                and self.rng.random() <= self.success_rate  # simulated execution noise
                and not np.all(q_values == q_values[0])):   # no preference yet: explore
            return int(np.argmax(q_values)), EXPLOITATION

        # OR 2) explore
        if self.rng.random() < 1 - self.forced_steady_probability:
            return int(self.rng.integers(N_ACTIONS)), EXPLORATION

        # Trigger a sequence of consecutive constant actions, this one included
        self.steady_counter = self.forced_steady_length - 1
        return HOLD, FORCED_STEADY

    def decay(self):
        self.epsilon = self.epsilon * self.epsilon_decay
        return self.epsilon
