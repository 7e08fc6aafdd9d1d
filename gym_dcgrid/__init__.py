from gym.envs.registration import register

register(
    id='DCGrid-v0',
    entry_point='gym_dcgrid.envs:DCGrid',
)
