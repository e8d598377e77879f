"""
Analytics module for the DCA projection simulator.

Provides allocation checks and drift analysis against target weights.
"""

from dca_sim.analytics.allocation import (
    allocation_is_balanced,
    allocation_tolerance,
    calculate_drift,
    calculate_final_drift,
    normalize_allocations,
    summarize_drift,
    total_allocation,
)

__all__ = [
    "allocation_is_balanced",
    "allocation_tolerance",
    "calculate_drift",
    "calculate_final_drift",
    "normalize_allocations",
    "summarize_drift",
    "total_allocation",
]
