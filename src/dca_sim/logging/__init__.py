"""
Decision logging module for the DCA projection simulator.

Provides append-only decision logging for audit and reproducibility.
"""

from dca_sim.logging.decision_log import (
    DecisionLogger,
    log_action,
    get_logger,
)

__all__ = [
    "DecisionLogger",
    "log_action",
    "get_logger",
]
