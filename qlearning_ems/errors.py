# -*- coding: utf-8 -*-


class ConfigurationError(Exception):
    """Invalid training settings. Raised before any episode runs."""


class SimulatorFault(Exception):
    """Failure of the plant simulator during an episode."""
