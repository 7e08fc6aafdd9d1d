# -*- coding: utf-8 -*-
"""
Results of a training run: results.txt, per-episode .mat snapshots and figures.
"""

import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
import scipy.io as sio


def resample(continuous, period=1.0):
    """Resample the continuous data of an episode on a regular time grid."""
    t = np.asarray(continuous.get('time', []), dtype=float)
    if t.size == 0:
        return {key: np.zeros(0) for key in continuous}

    # Sub-step trajectories share their boundary samples
    t, index = np.unique(t, return_index=True)
    n_points = int(np.floor((t[-1] - t[0]) / period + 1e-9)) + 1
    grid = t[0] + period * np.arange(n_points)

    data = {'time': grid}
    for key, values in continuous.items():
        if key == 'time':
            continue
        data[key] = np.interp(grid, t, np.asarray(values, dtype=float)[index])
    return data


def save_episode(path, episode, result, q_table):
    Q, Q_visited = q_table.snapshot()
    sio.savemat(os.path.join(path, 'Q_episode%i.mat' % episode), {'Q': Q})
    sio.savemat(os.path.join(path, 'Q_visited_episode%i.mat' % episode), {'Q_visited': Q_visited})
    sio.savemat(os.path.join(path, 'Data_episode%i.mat' % episode),
                {'systemStatesTab': result.states_tab, 'resampledData': resample(result.continuous)})


def plot_episode(path, episode, result):
    tab = result.states_tab
    t = tab['time']

    fig, ax = plt.subplots(4, 1, sharex=True, figsize=(10, 10))

    ax[0].plot(t, tab['SOC_battery'], label='SOC')
    ax[0].plot(t, tab['isExploitationAction'], '.', label='exploitation (0.2) / forced steady (-0.2)')
    ax[0].set_ylabel('[-]')
    ax[0].legend(loc='upper right')

    ax[1].plot(t, tab['reward'], 'k', label='reward')
    ax[1].plot(t, tab['P_Batt'], label='P_batt')
    ax[1].set_ylabel('[p.u.]')
    ax[1].legend(loc='upper right')

    ax[2].plot(t, tab['Setpoint_I_FC'], label='I_FC setpoint')
    ax[2].plot(t, tab['P_FC'], label='P_FC')
    ax[2].plot(t, tab['Load_profile'], label='Load')
    ax[2].set_ylabel('[p.u.]')
    ax[2].legend(loc='upper right')

    for key in ('reward_SOC', 'reward_P_FC', 'reward_P_batt', 'reward_Steady'):
        if np.any(tab[key]):
            ax[3].plot(t, tab[key], label=key)
    ax[3].set_ylabel('Reward terms')
    ax[3].set_xlabel('Time [s]')
    ax[3].legend(loc='upper right')

    fig.suptitle('Episode %i' % episode)
    fig.savefig(os.path.join(path, 'episode%i.png' % episode))
    plt.close(fig)


class RunReport:
    """Writes everything a run produces into result_path."""

    def __init__(self, result_path, settings, plot=True):
        self.result_path = result_path
        self.plot = plot
        os.makedirs(result_path, exist_ok=True)

        self.file = open(os.path.join(result_path, 'results.txt'), 'w')
        self.file.write('Q-learning EMS, training run\n')
        for key in ('max_episodes', 'total_time', 'iteration_time', 'learn_rate', 'epsilon',
                    'epsilon_decay', 'discount', 'success_rate', 'weights'):
            self.file.write('%s: %s\n' % (key, settings.get(key)))
        self.file.write('\n')
        self.file.flush()

    def episode_completed(self, result, q_table):
        tab = result.states_tab
        ratio_simulator = 100.0 * result.t_simulator / result.t_total if result.t_total > 0 else 0.0
        self.file.write('Episode %i completed: %i iterations, exploitation %2.1f%%, epsilon %g\n'
                        % (result.episode, result.iterations, result.ratio_exploitation, result.epsilon))
        self.file.write('    mean reward %2.3f, final SOC %2.3f\n'
                        % (np.mean(tab['reward'][1:]), tab['SOC_battery'][-1]))
        self.file.write('    simulator time %2.2f s, episode time %2.2f s, simulator/total %2.1f%%\n'
                        % (result.t_simulator, result.t_total, ratio_simulator))
        self.file.flush()

        save_episode(self.result_path, result.episode, result, q_table)
        if self.plot:
            plot_episode(self.result_path, result.episode, result)

    def episode_failed(self, result):
        self.file.write('Episode %i stopped (%s) after %i/%i iterations: %s\n'
                        % (result.episode, result.outcome.value, result.iterations, result.maxit, result.reason))
        self.file.flush()

    def close(self):
        self.file.close()
