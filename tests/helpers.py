"""
In-memory simulators and settings shared by the tests.
"""

import copy
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from qlearning_ems.errors import SimulatorFault
from qlearning_ems.simulator import Observation, Simulator, SimulatorHandle, StepResult


FAULT = 'fault'
RAISE = 'raise'


def make_obs(P_batt=0.5, P_FC=0.7, SOC=0.7, load=1.0):
    return Observation(P_FC=P_FC, P_batt=P_batt, SOC=SOC, Load_profile=load)


class ScriptedSimulator(Simulator):
    """Replays a list of observations, one per step.

    FAULT in the script returns a fault result, RAISE raises SimulatorFault and
    an exception instance is raised as is.
    Once the script is exhausted the last observation is repeated.
    """

    def __init__(self, initial, script, close_error=None):
        self.close_error = close_error
        self.initial = initial
        self.script = list(script)
        self.step_calls = 0
        self.reset_calls = 0
        self.close_calls = 0
        self.reload_calls = 0
        self.deltas = []

    def reset(self, initial_condition):
        self.reset_calls += 1
        self.position = 0
        return SimulatorHandle(plant=None, observation=self.initial)

    def step(self, handle, action_delta, duration, context):
        self.step_calls += 1
        self.deltas.append(action_delta)
        context.apply(action_delta)

        entry = self.script[min(self.position, len(self.script) - 1)]
        self.position += 1
        if entry == FAULT:
            return StepResult.Fault('scripted fault')
        if entry == RAISE:
            raise SimulatorFault('scripted exception')
        if isinstance(entry, Exception):
            raise entry
        handle.time += duration
        return StepResult.Ok(entry)

    def close(self, handle):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error

    def reload(self):
        self.reload_calls += 1


class PlantStub(Simulator):
    """Battery fed by the FC command and a constant load, integrated with explicit Euler."""

    def __init__(self, load=0.9, E_batt=900.0, fault_on_reset=()):
        self.load = load
        self.E_batt = E_batt
        self.fault_on_reset = set(fault_on_reset)
        self.reset_calls = 0
        self.reload_calls = 0

    def reset(self, initial_condition):
        self.reset_calls += 1
        self.SOC = initial_condition['soc']
        self.P_FC = initial_condition.get('I_FC', 0.0)
        return SimulatorHandle(plant=self, observation=self._observation())

    def _observation(self):
        return Observation(P_FC=self.P_FC, P_batt=self.load - self.P_FC, SOC=self.SOC, Load_profile=self.load)

    def step(self, handle, action_delta, duration, context):
        if self.reset_calls in self.fault_on_reset:
            return StepResult.Fault('faulty episode')
        self.P_FC = context.apply(action_delta)
        self.SOC = min(1.0, self.SOC - (self.load - self.P_FC) * duration / self.E_batt)
        return StepResult.Ok(self._observation())

    def reload(self):
        self.reload_calls += 1


SETTINGS = {
    'max_episodes': 3,
    'total_time': 20,
    'iteration_time': 2,
    'learn_rate': 0.1,
    'epsilon': 1,
    'epsilon_decay': 0.9,
    'discount': 0.9,
    'success_rate': 1,
    'weights': {'soc': 1, 'p_fc': 1, 'p_batt': 1, 'steady': 1},
    'parent_folder': 'results',
    'sub_folder': 'training',
    'q_table_file': None,
    'q_visited_file': None,
}

CONTROL_SETTINGS = {
    'actions': {'dI_FC': 0.2},
    'references': {'soc': {'min': 0.6, 'max': 0.8}, 'p_fc': 0.8},
    'constraints': {'I_FC': {'min': 0.0, 'max': 1.8}, 'soc': {'min': 0.1}},
    'learning': {'t_stop': 6, 'idle_load': 0, 'idle_battery_power': 0.7},
    'exploration': {'forced_steady_probability': 0.15, 'forced_steady_length': 8},
    'initial_conditions': [{'soc': 0.7, 'I_FC': 0.5, 'load_profile': 10},
                           {'soc': 0.5, 'I_FC': 0.5, 'load_profile': 10}],
}


def make_settings(**overrides):
    settings = copy.deepcopy(SETTINGS)
    settings.update(overrides)
    return settings


def make_control_settings():
    return copy.deepcopy(CONTROL_SETTINGS)
