# -*- coding: utf-8 -*-
"""
One training episode: the iteration loop between the agent and the plant.

Running -> Completed | LowSOC | Error
"""

import math
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from qlearning_ems.errors import SimulatorFault
from qlearning_ems.policy import DISPLAY_VALUES, EXPLOITATION
from qlearning_ems.simulator import PlantContext
from qlearning_ems.states import HOLD


TABLE_KEYS = ('P_FC', 'P_Batt', 'SOC_battery', 'Load_profile', 'Setpoint_I_FC',
              'isExploitationAction', 'Stack_efficiency',
              'reward_SOC', 'reward_P_FC', 'reward_P_batt', 'reward_Steady', 'reward')

CONTINUOUS_KEYS = ('time', 'P_FC', 'P_Batt', 'SOC_battery', 'Load_profile', 'Stack_efficiency')

# Reward term -> column of the episode table
REWARD_COLUMNS = {'soc': 'reward_SOC', 'p_fc': 'reward_P_FC', 'p_batt': 'reward_P_batt', 'steady': 'reward_Steady'}

# Trajectory key of the plant -> key of the continuous data
TRAJECTORY_COLUMNS = {'time': 'time', 'P_FC': 'P_FC', 'P_batt': 'P_Batt', 'SOC': 'SOC_battery',
                      'Load_profile': 'Load_profile', 'Stack_efficiency': 'Stack_efficiency'}


class EpisodeOutcome(Enum):
    COMPLETED = 'completed'
    LOW_SOC = 'low_soc'
    ERROR = 'error'


def new_states_tab(maxit, iteration_time):
    """Discretized data of one episode, one line per iteration plus the initial state."""
    tab = {'time': np.arange(maxit + 1) * iteration_time}
    for key in TABLE_KEYS:
        tab[key] = np.zeros(maxit + 1)
    tab['state_index'] = np.full(maxit + 1, -1, dtype=np.int64)
    tab['action'] = np.full(maxit + 1, -1, dtype=np.int64)
    return tab


@dataclass
class EpisodeResult:
    episode: int
    outcome: EpisodeOutcome
    iterations: int
    maxit: int
    n_exploitation: int
    epsilon: float
    states_tab: dict
    continuous: dict = field(default_factory=dict)
    t_simulator: float = 0.0
    t_total: float = 0.0
    reason: str = ''

    @property
    def ratio_exploitation(self):
        return 100.0 * self.n_exploitation / self.maxit if self.maxit else 0.0


class EpisodeController:
    """Drives the agent through one episode.

    The Q-table is the only object modified here that outlives the episode;
    buffers, counters and the plant context are rebuilt at each run().
    """

    def __init__(self, lattice, policy, q_table, reward_fn, simulator, deltas,
                 total_time, iteration_time, discount,
                 soc_min=0.1, t_stop_learning=6.0, idle_load=0.0, idle_battery_power=0.7,
                 I_FC_bounds=(0.0, 1.8), verbose=False):
        self.lattice = lattice
        self.policy = policy
        self.q_table = q_table
        self.reward_fn = reward_fn
        self.simulator = simulator
        self.deltas = np.asarray(deltas, dtype=float)

        self.iteration_time = iteration_time
        self.maxit = int(math.floor(total_time / iteration_time))
        self.discount = discount

        # Break the episode if SOC < soc_min
        self.soc_min = soc_min

        # Stop learning t_stop_learning seconds after the system turns off
        self.load_buffer_length = max(1, int(math.floor(t_stop_learning / iteration_time)))
        self.idle_load = idle_load
        self.idle_battery_power = idle_battery_power

        self.I_FC_bounds = I_FC_bounds
        self.verbose = verbose

    def _simulator_call(self, method, *args):
        """Any failure of the plant is a fault of the episode."""
        try:
            return method(*args)
        except Exception as e:
            raise SimulatorFault('{}: {}'.format(type(e).__name__, e)) from e

    def _system_on(self, load_buffer, observation):
        idle = all(load == self.idle_load for load in load_buffer)
        return not (idle and observation.P_batt < self.idle_battery_power)

    def run(self, episode, initial_condition):
        t_start = time.process_time()
        t_simulator = 0.0

        maxit = self.maxit
        tab = new_states_tab(maxit, self.iteration_time)
        continuous = {key: [] for key in CONTINUOUS_KEYS}

        context = PlantContext(I_FC=initial_condition.get('I_FC', 0.0),
                               load_profile=initial_condition.get('load_profile', 10),
                               I_FC_min=self.I_FC_bounds[0],
                               I_FC_max=self.I_FC_bounds[1])
        self.policy.reset()

        # Initialized to 1 to learn at launching
        load_buffer = deque([1.0] * self.load_buffer_length, maxlen=self.load_buffer_length)

        time_steady = 0
        n_exploitation = 0
        iterations = 0
        outcome = EpisodeOutcome.COMPLETED
        reason = ''
        handle = None

        try:
            handle = self._simulator_call(self.simulator.reset, initial_condition)
            obs = handle.observation
            state = np.array([time_steady, obs.P_batt, obs.P_FC, obs.SOC])
            self._record(tab, 0, obs, context)

            for h in range(1, maxit + 1):
                if self.verbose:
                    print('Episode n.%i, iteration n.%i/%i' % (episode, h, maxit))

                # Interpolate the state within the discretization (ONLY to choose the action)
                s = self.lattice.nearest(state)

                a, origin = self.policy.select(self.q_table.row(s))
                if origin == EXPLOITATION:
                    n_exploitation += 1

                # Number of constant actions in a row, for both exploration and exploitation
                time_steady = time_steady + 1 if a == HOLD else 0

                t_step = time.process_time()
                result = self._simulator_call(self.simulator.step, handle, self.deltas[a], self.iteration_time, context)
                t_simulator += time.process_time() - t_step

                if not result.ok:
                    outcome = EpisodeOutcome.ERROR
                    reason = result.fault
                    break

                obs = result.observation
                self._record(tab, h, obs, context)
                tab['isExploitationAction'][h] = DISPLAY_VALUES[origin]
                tab['state_index'][h] = s
                tab['action'][h] = a
                self._append_continuous(continuous, obs)

                load_buffer.append(obs.Load_profile)
                system_on = self._system_on(load_buffer, obs)

                if obs.SOC < self.soc_min:
                    # Epsilon still decays, but nothing is learned from this step
                    self.policy.decay()
                    outcome = EpisodeOutcome.LOW_SOC
                    reason = 'SOC too close to 0 ({:.3f})'.format(obs.SOC)
                    break

                # Average battery power on the step (low pass for what is faster than the agent)
                state = np.array([time_steady, obs.P_batt_mean, obs.P_FC, obs.SOC])
                s_new = self.lattice.nearest(state)

                reward, terms = self.reward_fn(self.lattice[s_new], a)
                tab['reward'][h] = reward
                for term, value in terms.items():
                    tab[REWARD_COLUMNS[term]][h] = value

                self.q_table.update(s, a, reward, s_new, self.discount, system_on)
                self.policy.decay()
                iterations = h

                if self.verbose:
                    print('SOC %3.3f, state index %i, reward %2.2f' % (obs.SOC, s, reward))

        except SimulatorFault as e:
            outcome = EpisodeOutcome.ERROR
            reason = str(e)

        finally:
            if handle is not None:
                try:
                    self._simulator_call(self.simulator.close, handle)
                except SimulatorFault as e:
                    outcome = EpisodeOutcome.ERROR
                    reason = reason or str(e)

        if outcome is EpisodeOutcome.ERROR:
            print('Episode n.%i: error occurred, go to next episode (%s)' % (episode, reason))
            try:
                self._simulator_call(self.simulator.reload)
            except SimulatorFault as e:
                # The next reset rebuilds the plant and reports its own fault
                print('Episode n.%i: simulator reload failed (%s)' % (episode, e))

        return EpisodeResult(episode=episode,
                             outcome=outcome,
                             iterations=iterations,
                             maxit=maxit,
                             n_exploitation=n_exploitation,
                             epsilon=self.policy.epsilon,
                             states_tab=tab,
                             continuous={key: np.concatenate(values) if values else np.zeros(0)
                                         for key, values in continuous.items()},
                             t_simulator=t_simulator,
                             t_total=time.process_time() - t_start,
                             reason=reason)

    def _record(self, tab, g, obs, context):
        tab['P_FC'][g] = obs.P_FC
        tab['P_Batt'][g] = obs.P_batt
        tab['SOC_battery'][g] = obs.SOC
        tab['Load_profile'][g] = obs.Load_profile
        tab['Stack_efficiency'][g] = obs.Stack_efficiency
        tab['Setpoint_I_FC'][g] = context.I_FC

    def _append_continuous(self, continuous, obs):
        if obs.trajectory is None:
            return
        for key, column in TRAJECTORY_COLUMNS.items():
            if key in obs.trajectory:
                continuous[column].append(np.asarray(obs.trajectory[key], dtype=float))
