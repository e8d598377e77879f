"""
DCA Projection Simulator (dca-sim)

Projects Dollar-Cost-Averaging plans across a multi-asset portfolio under
low, mid and high fixed-return scenarios, with optional trading fees,
dividends (cash or reinvested) and periodic rebalancing.

Projections are deterministic; no market data is fetched.
"""

__version__ = "0.1.0"
__author__ = "DCA Sim Team"
