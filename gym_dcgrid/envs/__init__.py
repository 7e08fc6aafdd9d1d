from gym_dcgrid.envs.dc_grid_env import DCGrid
