# -*- coding: utf-8 -*-
"""
Parameter set of the DC grid plant (fuel cell + battery on a common bus).

Everything is in p.u., the base being the nominal load power.
"""
import numpy as np

p={}


#==============================================================================
# Bus
#==============================================================================

p['V_bus'] = 1.0            # Bus voltage, regulated by the hardware loop [p.u.]


#==============================================================================
# Fuel cell (seen at the bus side of its DC/DC converter)
#==============================================================================

p['tau_FC'] = 10.0          # Time constant of the FC current loop [s] (slow dynamics)
p['I_FC_min'] = 0.0         # Lower bound of the FC current command [p.u.]
p['I_FC_max'] = 1.8         # Upper bound of the FC current command [p.u.]
p['I_FC_init'] = 0.5        # FC current at the start of an episode [p.u.]

# Stack efficiency, decreasing linearly with the FC loading
p['eta_FC_max'] = 0.60
p['eta_FC_slope'] = 0.15 / p['I_FC_max']


#==============================================================================
# Battery
#==============================================================================

p['E_batt'] = 900.0         # Usable energy [p.u. x s] (1 p.u. deficit during 90s = 10% SOC)
p['SOC_max'] = 1.0
p['SOC_init'] = 0.7


#==============================================================================
# Load
#==============================================================================

p['load_profile'] = 10      # Realistic load profile (see DCGrid_Utils.load_profile)
p['load_idle'] = 0.0        # Load value when the system is switched off


#==============================================================================
# Solver
#==============================================================================

p['solver_dt'] = 0.1        # Integration sub-step inside one control iteration [s]
p['abstol'] = 1e-6
p['reltol'] = 1e-6


#==============================================================================
# Observation bounds (gym spaces)
#==============================================================================

# P_FC, P_batt, SOC, Load_profile, Stack_efficiency
p['obs_low'] = np.array([0.0, -p['I_FC_max'] * p['V_bus'], 0.0, 0.0, 0.0], dtype=np.float32)
p['obs_high'] = np.array([p['I_FC_max'] * p['V_bus'], 2.0, 1.0, 2.0, 1.0], dtype=np.float32)
