# -*- coding: utf-8 -*-
"""
Tabular Q-learning energy management for a fuel-cell / battery DC grid.
"""

__version__ = '0.1.0'
