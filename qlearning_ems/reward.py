# -*- coding: utf-8 -*-
"""
Multi-objective reward of the EMS.

Goal 1: Ensure the power supply at any time (done by the hardware).
Goal 2: Maintain the battery SOC in [SOCmin; SOCmax].
Goal 3: Minimize the fuel consumption (keep the FC loading low).
Goal 3bis: Minimize the stress on components (low battery power, constant FC input).

Each term is evaluated on the discretized state reached after the action.
"""

from qlearning_ems.states import HOLD, P_BATT, P_FC, SOC, STEADY


TERMS = ('soc', 'p_fc', 'p_batt', 'steady')


def reward_soc(soc, soc_min=0.6, soc_max=0.8):
    if soc_min <= soc <= soc_max:
        return 1.0
    distance = soc_min - soc if soc < soc_min else soc - soc_max
    return -distance / (soc_max - soc_min)


def reward_p_fc(p_fc, target=0.8):
    return 1.0 if p_fc <= target else -1.0


def reward_p_batt(p_batt):
    # The battery should only supply the fast transients
    return 1.0 - 2.0 * abs(p_batt)


def reward_steady(time_steady, action, full_run=8):
    if action != HOLD:
        return 0.0
    return min(time_steady, full_run) / float(full_run)


class RewardFunction:
    """Weighted sum of the enabled reward terms.

    A term with a zero weight is never computed: its state dimension does not
    exist in the lattice. The SOC term is always enabled.
    """

    def __init__(self, weights, soc_band=(0.6, 0.8), p_fc_target=0.8, steady_run=8):
        self.weights = {term: float(weights.get(term, 0)) for term in TERMS}
        self.enabled = {term: term == 'soc' or self.weights[term] != 0 for term in TERMS}
        self.soc_band = soc_band
        self.p_fc_target = p_fc_target
        self.steady_run = steady_run

    def terms(self, state, action):
        """Value of every enabled term for a discretized state and the action taken."""
        terms = {'soc': reward_soc(state[SOC], *self.soc_band)}
        if self.enabled['p_fc']:
            terms['p_fc'] = reward_p_fc(state[P_FC], self.p_fc_target)
        if self.enabled['p_batt']:
            terms['p_batt'] = reward_p_batt(state[P_BATT])
        if self.enabled['steady']:
            terms['steady'] = reward_steady(state[STEADY], action, self.steady_run)
        return terms

    def combine(self, terms):
        return sum(self.weights[term] * value for term, value in terms.items() if self.enabled[term])

    def __call__(self, state, action):
        terms = self.terms(state, action)
        return self.combine(terms), terms
