# -*- coding: utf-8 -*-
"""
Training run: settings validation and the loop over episodes.

Everything a run mutates (Q-table, visit counts, random generator, plant
context, simulator) is owned by its Trainer, so independent trainers do not
interfere.
"""

import math

import numpy as np

from qlearning_ems.episode import EpisodeController, EpisodeOutcome
from qlearning_ems.errors import ConfigurationError
from qlearning_ems.policy import EpsilonGreedyPolicy
from qlearning_ems.q_table import QTable
from qlearning_ems.reward import RewardFunction
from qlearning_ems.simulator import GymSimulator
from qlearning_ems.states import StateLattice, action_deltas


def _require(condition, message):
    if not condition:
        raise ConfigurationError(message)


def check_settings(settings, control_settings):
    """Raise ConfigurationError on settings that cannot be trained with."""
    weights = settings['weights']

    _require(weights.get('soc', 0) > 0, 'SOC must be controlled, weight must be positive')
    _require(settings['max_episodes'] >= 0, 'max_episodes cannot be negative')
    _require(settings['iteration_time'] > 0, 'iteration_time must be positive')
    _require(settings['total_time'] >= settings['iteration_time'],
             'total_time ({}) is shorter than one iteration ({})'.format(settings['total_time'], settings['iteration_time']))
    _require(0 < settings['epsilon_decay'] <= 1, 'epsilon_decay must be in (0, 1]')
    _require(settings['epsilon'] >= 0, 'epsilon cannot be negative')
    _require(0 <= settings['discount'] <= 1, 'discount must be in [0, 1]')
    _require(0 <= settings['success_rate'] <= 1, 'success_rate must be in [0, 1]')

    bounds = control_settings['constraints']['I_FC']
    _require(bounds['min'] <= bounds['max'], 'I_FC bounds are inverted')
    band = control_settings['references']['soc']
    _require(band['min'] < band['max'], 'SOC reference band is empty')
    _require(len(control_settings['initial_conditions']) > 0, 'At least one initial condition is required')


class Trainer:

    def __init__(self, settings, control_settings, simulator=None, seed=None, reporter=None, verbose=False):
        check_settings(settings, control_settings)

        self.settings = settings
        self.control_settings = control_settings
        self.reporter = reporter

        weights = settings['weights']
        exploration = control_settings['exploration']
        learning = control_settings['learning']
        constraints = control_settings['constraints']

        #==============================================================================
        # States and actions
        #==============================================================================
        self.lattice = StateLattice.from_weights(weights)
        self.deltas = action_deltas(control_settings['actions']['dI_FC'])

        #==============================================================================
        # Agent
        #==============================================================================
        if settings.get('q_table_file'):
            self.q_table = QTable.load(settings['q_table_file'], len(self.lattice), settings.get('q_visited_file'))
        else:
            self.q_table = QTable(len(self.lattice))

        # One generator for the whole run, never re-seeded
        self.rng = np.random.default_rng(seed)

        # Forced constant sequences only make sense when steadiness is rewarded
        forced_probability = exploration['forced_steady_probability'] if weights.get('steady', 0) != 0 else 0.0
        self.policy = EpsilonGreedyPolicy(settings['epsilon'],
                                          settings['epsilon_decay'],
                                          success_rate=settings['success_rate'],
                                          forced_steady_probability=forced_probability,
                                          forced_steady_length=exploration['forced_steady_length'],
                                          rng=self.rng)

        band = control_settings['references']['soc']
        self.reward_fn = RewardFunction(weights,
                                        soc_band=(band['min'], band['max']),
                                        p_fc_target=control_settings['references']['p_fc'],
                                        steady_run=exploration['forced_steady_length'])

        #==============================================================================
        # Plant
        #==============================================================================
        self.simulator = simulator if simulator is not None else GymSimulator(settings)

        self.controller = EpisodeController(self.lattice, self.policy, self.q_table, self.reward_fn,
                                            self.simulator, self.deltas,
                                            total_time=settings['total_time'],
                                            iteration_time=settings['iteration_time'],
                                            discount=settings['discount'],
                                            soc_min=constraints['soc']['min'],
                                            t_stop_learning=learning['t_stop'],
                                            idle_load=learning['idle_load'],
                                            idle_battery_power=learning['idle_battery_power'],
                                            I_FC_bounds=(constraints['I_FC']['min'], constraints['I_FC']['max']),
                                            verbose=verbose)
        self.results = []

    @property
    def maxit(self):
        return int(math.floor(self.settings['total_time'] / self.settings['iteration_time']))

    def initial_condition(self, episode):
        conditions = self.control_settings['initial_conditions']
        return dict(conditions[episode % len(conditions)])

    def run_episode(self, episode):
        result = self.controller.run(episode, self.initial_condition(episode))
        self.results.append(result)

        print('Episode number %i: %s, epsilon %2.3f' % (episode, result.outcome.value, result.epsilon))

        if self.reporter is not None:
            if result.outcome is EpisodeOutcome.COMPLETED:
                self.reporter.episode_completed(result, self.q_table)
            else:
                self.reporter.episode_failed(result)
        return result

    def run(self):
        for episode in range(1, self.settings['max_episodes'] + 1):
            self.run_episode(episode)
        return self.results
