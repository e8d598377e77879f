"""
Simulation module for the DCA projection simulator.

Provides the projection engine, summary metrics, multi-portfolio
comparison and report generation.
"""

from dca_sim.simulation.engine import (
    DCAEngine,
    SimulationState,
    monthly_rate,
    normalize_weights,
    simulate,
    simulate_all_scenarios,
)
from dca_sim.simulation.metrics import calculate_metrics, calculate_roi, ProjectionMetrics
from dca_sim.simulation.compare import compare_portfolios, PortfolioComparison
from dca_sim.simulation.report import generate_report

__all__ = [
    "DCAEngine",
    "SimulationState",
    "monthly_rate",
    "normalize_weights",
    "simulate",
    "simulate_all_scenarios",
    "calculate_metrics",
    "calculate_roi",
    "ProjectionMetrics",
    "compare_portfolios",
    "PortfolioComparison",
    "generate_report",
]
