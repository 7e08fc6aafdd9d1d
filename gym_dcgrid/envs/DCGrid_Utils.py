# -*- coding: utf-8 -*-
"""
DC grid plant equations (casadi) and load profiles.

States  x = [I_FC, SOC]
Inputs  u = [I_FC_ref, P_load]
Outputs y = [P_FC, P_batt, Stack_efficiency]
"""
import numpy as np
import casadi as ca


def dae_dc_grid_casadi(x, u, p):

  #==============================================================================
  # Parse out states and inputs
  #==============================================================================

  I_FC = x[0]
  SOC = x[1]

  I_FC_ref = u[0]
  P_load = u[1]

  #==============================================================================
  # Power balance on the bus
  #==============================================================================

  # The hardware loop always supplies the load: the battery takes the difference
  P_FC = I_FC * p['V_bus']
  P_batt = P_load - P_FC

  # A full battery cannot absorb the FC surplus
  P_batt = ca.if_else(ca.logic_and(SOC >= p['SOC_max'], P_batt < 0), 0, P_batt)

  eta_FC = p['eta_FC_max'] - p['eta_FC_slope'] * I_FC

  #==============================================================================
  # Dynamics
  #==============================================================================

  dI_FC = (I_FC_ref - I_FC) / p['tau_FC']   # first order lag of the FC current loop
  dSOC = -P_batt / p['E_batt']

  x_dot = ca.vertcat(dI_FC, dSOC)
  y = ca.vertcat(P_FC, P_batt, eta_FC)

  return x_dot, y


def build_integrator(p, dt):
  # Input: Parameter sets, p
  #        Integration horizon, dt [s]

  x = ca.SX.sym("x", 2)
  u = ca.SX.sym("u", 2)

  x_dot, y = dae_dc_grid_casadi(x, u, p)

  dae = {'x': x, 'p': u, 'ode': x_dot}
  opts = {}
  opts["abstol"] = p['abstol']
  opts["reltol"] = p['reltol']
  F = ca.integrator('F', 'cvodes', dae, 0.0, dt, opts)

  helper = ca.Function('helper', [x, u], [y], ['x', 'p'], ['y'])

  return F, helper


#==============================================================================
# Load profiles
#==============================================================================

# Code of each profile, as selected by the training script
LOAD_PROFILES = {
  1: '50% constant load',
  2: 'Full load',
  4: 'Pulse 5sec',
  5: 'Pulse 60sec',
  7: 'Sinus period 5sec',
  8: 'Sinus period 60sec',
  10: 'Realistic load',
}

# Realistic profile: working cycles separated by switched-off periods
REALISTIC_CYCLE = 600.0
REALISTIC_OFF = 90.0


def pulse(t, period, low=0.2, high=1.0):
  return high if (t % period) < period / 2.0 else low


def sinus(t, period, mean=0.5, amplitude=0.4):
  return mean + amplitude * np.sin(2 * np.pi * t / period)


def realistic_load(t, idle=0.0):

  tc = t % REALISTIC_CYCLE
  if tc >= REALISTIC_CYCLE - REALISTIC_OFF:
    return idle

  base = 0.45 + 0.2 * np.sin(2 * np.pi * t / 137.0) + 0.1 * np.sin(2 * np.pi * t / 23.0)
  # short acceleration peaks the FC cannot follow
  peak = 0.35 if (t % 41.0) < 4.0 else 0.0

  return float(np.clip(base + peak, 0.05, 1.2))


def load_profile(code, t, idle=0.0):

  if code == 1:
    return 0.5
  elif code == 2:
    return 1.0
  elif code == 4:
    return pulse(t, 5.0)
  elif code == 5:
    return pulse(t, 60.0)
  elif code == 7:
    return float(sinus(t, 5.0))
  elif code == 8:
    return float(sinus(t, 60.0))
  elif code == 10:
    return realistic_load(t, idle)
  else:
    raise ValueError('Unknown load profile code: {}'.format(code))
