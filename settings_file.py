# -*- coding: utf-8 -*-


# TRAINING settings
settings={}
settings['max_episodes']=50

# time horizon of an episode and control step [s]
settings['total_time']=1800
settings['iteration_time']=2.6

settings['learn_rate']=0.1 # not used by the update (adaptive step size), reported only
settings['epsilon']=2 # > 1: pure exploration until epsilon decays below 1
settings['epsilon_decay']=0.99994
settings['discount']=0.999
settings['success_rate']=1 # probability that an exploitation action is executed

# reward weights, 0 disables the term and the corresponding state dimension
settings['weights']={}
settings['weights']['soc']=1 # must be > 0
settings['weights']['p_fc']=1
settings['weights']['p_batt']=1
settings['weights']['steady']=1

# results are written in parent_folder/sub_folder
settings['parent_folder']='results'
settings['sub_folder']='training'

# resume from a previous run (.mat files), None to start from zero
settings['q_table_file']=None
settings['q_visited_file']=None


control_settings={}

# FC current command step [p.u.]
control_settings['actions']={}
control_settings['actions']['dI_FC']=0.2

#references
control_settings['references']={}
control_settings['references']['soc']={}
control_settings['references']['soc']['min']=0.6
control_settings['references']['soc']['max']=0.8
control_settings['references']['p_fc']=0.8

# constraints
control_settings['constraints']={}
control_settings['constraints']['I_FC']={}
control_settings['constraints']['I_FC']['min']=0.0
control_settings['constraints']['I_FC']['max']=1.8
control_settings['constraints']['soc']={}
control_settings['constraints']['soc']['min']=0.1 # the episode ends below this SOC

# no learning when the system is off
control_settings['learning']={}
control_settings['learning']['t_stop']=6 # [s] without load before learning stops
control_settings['learning']['idle_load']=0
control_settings['learning']['idle_battery_power']=0.7

# sequences of forced constant actions during exploration
control_settings['exploration']={}
control_settings['exploration']['forced_steady_probability']=0.15
control_settings['exploration']['forced_steady_length']=8

# initial conditions, cycled over the episodes
control_settings['initial_conditions']=[
    {'soc': 0.7, 'I_FC': 0.5, 'load_profile': 10},
    {'soc': 1.0, 'I_FC': 0.5, 'load_profile': 10},
    {'soc': 0.3, 'I_FC': 0.5, 'load_profile': 10},
    {'soc': 0.85, 'I_FC': 0.5, 'load_profile': 10},
    {'soc': 0.5, 'I_FC': 0.5, 'load_profile': 10},
]
