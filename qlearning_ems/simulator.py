# -*- coding: utf-8 -*-
"""
Interface between the learning agent and the plant simulator.

The inputs exported to the plant (FC current command, load profile) live in a
PlantContext owned by one training run, and are handed to the simulator at
each step. A step returns a StepResult: either an observation or a fault.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from qlearning_ems.errors import SimulatorFault


@dataclass
class Observation:
    """Plant outputs at the end of a control step (p.u.)."""

    P_FC: float
    P_batt: float
    SOC: float
    Load_profile: float
    Stack_efficiency: float = 0.0
    # Raw time series over the step: time, P_FC, P_batt, SOC, Load_profile, Stack_efficiency
    trajectory: Optional[dict] = None

    @property
    def P_batt_mean(self):
        """Battery power averaged over the step (filters what is faster than the agent)."""
        if self.trajectory is not None and len(self.trajectory.get('P_batt', [])) > 0:
            return float(np.mean(self.trajectory['P_batt']))
        return self.P_batt


@dataclass
class StepResult:
    observation: Optional[Observation] = None
    fault: Optional[str] = None

    @property
    def ok(self):
        return self.fault is None

    @classmethod
    def Ok(cls, observation):
        return cls(observation=observation)

    @classmethod
    def Fault(cls, reason):
        return cls(fault=str(reason))


@dataclass
class PlantContext:
    """Inputs exported to the plant for one training run."""

    I_FC: float = 0.0
    load_profile: int = 10
    I_FC_min: float = 0.0
    I_FC_max: float = 1.8

    def apply(self, delta):
        # Keep the command in bounds (redundant with the plant limiters, but accelerates convergence)
        self.I_FC = float(np.clip(self.I_FC + delta, self.I_FC_min, self.I_FC_max))
        return self.I_FC

    def as_input(self):
        return np.array([self.I_FC, self.load_profile], dtype=float)


@dataclass
class SimulatorHandle:
    plant: object
    observation: Observation
    time: float = 0.0
    extra: dict = field(default_factory=dict)


class Simulator:
    """Contract of a plant simulator.

    reset(initial_condition) -> SimulatorHandle (carries the initial observation)
    step(handle, action_delta, duration, context) -> StepResult
    close(handle)
    reload() -> rebuild a clean plant after a fault
    """

    def reset(self, initial_condition):
        raise NotImplementedError

    def step(self, handle, action_delta, duration, context):
        raise NotImplementedError

    def close(self, handle):
        pass

    def reload(self):
        pass


def _dc_grid_factory(settings):
    from gym_dcgrid.envs import DCGrid
    return DCGrid(sett=settings)


class GymSimulator(Simulator):
    """Simulator backed by a gym environment of the DC grid."""

    def __init__(self, settings=None, env_factory=None):
        self.settings = settings if settings is not None else {}
        self.env_factory = env_factory if env_factory is not None else _dc_grid_factory
        self.env = None

    def _observation(self, info):
        return Observation(P_FC=info['P_FC'],
                           P_batt=info['P_batt'],
                           SOC=info['SOC'],
                           Load_profile=info['Load_profile'],
                           Stack_efficiency=info['Stack_efficiency'],
                           trajectory=info.get('trajectory'))

    def reset(self, initial_condition):
        try:
            if self.env is None:
                self.env = self.env_factory(self.settings)
            _, info = self.env.reset(options=dict(initial_condition))
        except Exception as e:
            raise SimulatorFault('Reset failed: {}'.format(e)) from e
        return SimulatorHandle(plant=self.env, observation=self._observation(info), time=info.get('time', 0.0))

    def step(self, handle, action_delta, duration, context):
        context.apply(action_delta)
        try:
            _, _, _, _, info = handle.plant.step(context.as_input(), duration)
        except Exception as e:
            return StepResult.Fault('{}: {}'.format(type(e).__name__, e))

        handle.time = info.get('time', handle.time + duration)
        return StepResult.Ok(self._observation(info))

    def close(self, handle):
        if handle is not None:
            handle.plant.close()

    def reload(self):
        # Drop the plant instance, a fresh one is built at the next reset
        env, self.env = self.env, None
        if env is not None:
            env.close()
