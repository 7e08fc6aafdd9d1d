# -*- coding: utf-8 -*-
"""
DC grid environment: a fuel cell and a battery share a bus supplying a load.

The supply of the load is ensured by the hardware loop (the battery takes
whatever the fuel cell does not deliver). The only input of the environment is
the FC current command at the bus interface.
"""

import gym
from gym import spaces
import numpy as np

from gym_dcgrid.envs.ParamFile_DCgrid import p
from gym_dcgrid.envs.DCGrid_Utils import build_integrator, load_profile
from qlearning_ems.errors import SimulatorFault


TRAJECTORY_KEYS = ('time', 'P_FC', 'P_batt', 'SOC', 'Load_profile', 'Stack_efficiency')


class DCGrid(gym.Env):

	def __init__(self, sett=None, init_soc=p['SOC_init'], init_I_FC=p['I_FC_init'], load_profile_code=p['load_profile']):

		#==============================================================================
		# Environment Setting
		#==============================================================================
		self.sett = sett if sett is not None else {}

		# Control step (can be overridden at each call of step)
		self.dt = self.sett.get('iteration_time', 1.0)

		# Integration sub-step
		self.solver_dt = p['solver_dt']

		#==============================================================================
		# Simulation Setup
		#==============================================================================

		# Integrator over one sub-step and output function (casadi)
		self.F, self.helper = build_integrator(p, self.solver_dt)

		#==============================================================================
		# Initial conditions
		#==============================================================================

		self._set_initial_condition(init_soc, init_I_FC, load_profile_code)


	def _set_initial_condition(self, soc, I_FC, load_profile_code):

		self.time = 0.0
		self.episode_step = 0
		self.load_profile_code = int(load_profile_code)

		self.I_FC_ref = float(np.clip(I_FC, p['I_FC_min'], p['I_FC_max']))
		self.state = np.array([self.I_FC_ref, float(soc)])
		self.P_load = load_profile(self.load_profile_code, self.time, p['load_idle'])

		self._update_outputs()


	def _update_outputs(self):

		res = self.helper(x=self.state, p=[self.I_FC_ref, self.P_load])
		y = res['y'].full().ravel()

		self.I_FC = float(self.state[0])
		self.SOC = float(self.state[1])
		self.P_FC = float(y[0])
		self.P_batt = float(y[1])
		self.Stack_efficiency = float(y[2])

		#==============================================================================
		# GYM Internal information
		#==============================================================================
		self.info = dict()
		self.info['time'] = self.time
		self.info['I_FC'] = self.I_FC
		self.info['I_FC_ref'] = self.I_FC_ref
		self.info['P_FC'] = self.P_FC
		self.info['P_batt'] = self.P_batt
		self.info['SOC'] = self.SOC
		self.info['Load_profile'] = self.P_load
		self.info['Stack_efficiency'] = self.Stack_efficiency


	def _get_obs(self):
		return np.array([self.P_FC, self.P_batt, self.SOC, self.P_load, self.Stack_efficiency], dtype=np.float32)


	@property
	def observation_space(self):
		return spaces.Box(low=p['obs_low'], high=p['obs_high'], dtype=np.float32)

	@property
	def action_space(self):
		return spaces.Box(dtype=np.float32, low=p['I_FC_min'], high=p['I_FC_max'], shape=(1,))


	def step(self, action, duration=None):

		"""
		action,  FC current command [p.u.], optionally followed by the load profile code
		duration,  length of the control step [s], defaults to the iteration time
		"""

		action = np.atleast_1d(np.asarray(action, dtype=float))
		self.I_FC_ref = float(np.clip(action[0], p['I_FC_min'], p['I_FC_max']))
		if action.size > 1:
			self.load_profile_code = int(action[1])

		if duration is None:
			duration = self.dt
		n_sub = max(1, int(round(duration / self.solver_dt)))

		trajectory = {key: np.zeros(n_sub) for key in TRAJECTORY_KEYS}

		for k in range(n_sub):

			self.P_load = load_profile(self.load_profile_code, self.time, p['load_idle'])

			Fk = self.F(x0=self.state, p=[self.I_FC_ref, self.P_load])
			self.state = Fk['xf'].full().ravel()
			self.time += self.solver_dt

			if not np.all(np.isfinite(self.state)):
				raise SimulatorFault('Non-finite plant state at t={:.1f}s'.format(self.time))

			self._update_outputs()

			trajectory['time'][k] = self.time
			trajectory['P_FC'][k] = self.P_FC
			trajectory['P_batt'][k] = self.P_batt
			trajectory['SOC'][k] = self.SOC
			trajectory['Load_profile'][k] = self.P_load
			trajectory['Stack_efficiency'][k] = self.Stack_efficiency

		self.episode_step += 1
		self.info['trajectory'] = trajectory

		# The reward is computed by the learning agent, not by the plant
		reward = 0.0
		terminated = bool(self.SOC <= 0)

		return self._get_obs(), reward, terminated, False, self.info


	def render(self):
		pass


	def reset(self, *, seed=None, options=None):
		super().reset(seed=seed)

		options = options or {}
		self._set_initial_condition(options.get('soc', p['SOC_init']),
									options.get('I_FC', p['I_FC_init']),
									options.get('load_profile', p['load_profile']))

		return self._get_obs(), self.info
