"""
Multi-portfolio comparison.

Runs every portfolio under every scenario and picks, per scenario, the
portfolios with the highest and lowest ROI.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from dca_sim.models import PortfolioConfig, SamplingMode, Scenario, SimulationResult
from dca_sim.simulation.engine import simulate_all_scenarios
from dca_sim.simulation.metrics import calculate_roi, is_defined


logger = logging.getLogger(__name__)


@dataclass
class ScenarioRanking:
    """
    Best and worst portfolio for one scenario.

    Attributes:
        scenario: Scenario ranked
        roi_by_portfolio: ROI (%) per portfolio id, in portfolio order
        best: Portfolio id with the highest ROI (None if no ROI is defined)
        worst: Portfolio id with the lowest ROI (None if no ROI is defined)
    """
    scenario: Scenario
    roi_by_portfolio: dict[str, float]
    best: Optional[str] = None
    worst: Optional[str] = None


@dataclass
class PortfolioComparison:
    """Results of comparing several portfolios across all scenarios."""
    portfolio_ids: list[str]
    results: dict[str, dict[Scenario, SimulationResult]] = field(default_factory=dict)
    rankings: dict[Scenario, ScenarioRanking] = field(default_factory=dict)

    def get_result(self, portfolio_id: str, scenario: Scenario) -> SimulationResult:
        """Result for one (portfolio, scenario) pair."""
        return self.results[portfolio_id][scenario]


def rank_by_roi(roi_by_portfolio: dict[str, float]) -> tuple[Optional[str], Optional[str]]:
    """
    Find the portfolios with the highest and lowest ROI.

    Scans in insertion order with strict comparisons, so ties keep the
    first portfolio encountered. Undefined ROIs are skipped.

    Args:
        roi_by_portfolio: ROI (%) per portfolio id

    Returns:
        Tuple of (best portfolio id, worst portfolio id)
    """
    best: Optional[str] = None
    worst: Optional[str] = None

    for portfolio_id, roi in roi_by_portfolio.items():
        if not is_defined(roi):
            continue
        if best is None or roi > roi_by_portfolio[best]:
            best = portfolio_id
        if worst is None or roi < roi_by_portfolio[worst]:
            worst = portfolio_id

    return best, worst


def compare_portfolios(
    portfolios: list[PortfolioConfig],
    sampling: SamplingMode = SamplingMode.YEARLY,
) -> PortfolioComparison:
    """
    Simulate each portfolio under each scenario and rank them by ROI.

    Args:
        portfolios: Portfolios to compare (ids must be unique)
        sampling: Which months are recorded as result rows

    Returns:
        PortfolioComparison with all results and per-scenario rankings

    Raises:
        ValueError: If no portfolios are given or ids are duplicated
    """
    if not portfolios:
        raise ValueError("At least one portfolio is required")

    portfolio_ids = [p.portfolio_id for p in portfolios]
    if len(set(portfolio_ids)) != len(portfolio_ids):
        raise ValueError(f"Duplicate portfolio ids: {portfolio_ids}")

    comparison = PortfolioComparison(portfolio_ids=portfolio_ids)

    for portfolio in portfolios:
        comparison.results[portfolio.portfolio_id] = simulate_all_scenarios(
            portfolio, sampling=sampling
        )

    for scenario in Scenario:
        roi_by_portfolio = {}
        for portfolio_id in portfolio_ids:
            result = comparison.results[portfolio_id][scenario]
            roi_by_portfolio[portfolio_id] = calculate_roi(
                result.final_value, result.total_invested
            )

        best, worst = rank_by_roi(roi_by_portfolio)
        comparison.rankings[scenario] = ScenarioRanking(
            scenario=scenario,
            roi_by_portfolio=roi_by_portfolio,
            best=best,
            worst=worst,
        )

    logger.info(
        f"Compared {len(portfolios)} portfolios across {len(Scenario)} scenarios"
    )

    return comparison
