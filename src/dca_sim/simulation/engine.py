"""
Core projection engine for DCA portfolio simulations.

Walks the horizon month by month and applies, in order: dividend accrual,
rebalancing, contribution, growth and cash-dividend accumulation, then
records sampled snapshots. Every run is a pure function of its inputs.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import math

import numpy as np

from dca_sim.models import (
    Asset,
    PortfolioConfig,
    ProjectionRow,
    SamplingMode,
    Scenario,
    SimulationResult,
)
from dca_sim.analytics.allocation import allocation_is_balanced, total_allocation


logger = logging.getLogger(__name__)


def _finite(value, default: float = 0.0) -> float:
    """Coerce a possibly missing or non-numeric value to a finite float."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def normalize_weights(assets: list[Asset]) -> list[float]:
    """
    Convert allocation percentages into fractional weights.

    Missing or non-numeric allocations count as 0. When the allocations sum
    to zero the divisor falls back to 1, so every weight is 0 instead of
    raising.

    Args:
        assets: Assets in configuration order

    Returns:
        Weights parallel to assets, summing to 1 whenever the raw sum is positive
    """
    pcts = [_finite(a.alloc_pct) for a in assets]
    sum_pct = sum(pcts)
    divisor = sum_pct if sum_pct != 0 else 1.0
    return [p / divisor for p in pcts]


def monthly_rate(annual_percent: float) -> float:
    """
    Convert an annual percentage return into the equivalent monthly rate.

    monthly = (1 + annual/100) ** (1/12) - 1. Annual losses beyond -100%
    are capped at a total loss.

    Args:
        annual_percent: Annual return in percent (e.g. 12 for 12%)

    Returns:
        Monthly compounding rate as a fraction
    """
    base = max(0.0, 1.0 + _finite(annual_percent) / 100.0)
    return base ** (1.0 / 12.0) - 1.0


@dataclass
class SimulationState:
    """Mutable state of a single projection run."""
    month: int
    values: np.ndarray
    total_cash_dividends: float = 0.0
    total_gross_dividends: float = 0.0
    rebalance_count: int = 0
    rows: list[ProjectionRow] = field(default_factory=list)

    @property
    def total_value(self) -> float:
        """Sum of all asset values."""
        return float(self.values.sum())


class DCAEngine:
    """
    Deterministic DCA projection engine for one portfolio.

    Scenario-independent inputs (weights, fee factor, dividend rates) are
    resolved once at construction; each call to run() starts from a fresh
    state, so one engine can serve all three scenarios.
    """

    def __init__(
        self,
        config: PortfolioConfig,
        sampling: SamplingMode = SamplingMode.YEARLY,
    ):
        """
        Initialize the projection engine.

        Args:
            config: Portfolio configuration
            sampling: Which months are recorded as result rows
        """
        self.config = config
        self.sampling = sampling

        self.weights = np.array(normalize_weights(config.assets), dtype=float)
        self.total_months = config.total_months
        self.monthly_budget = max(0.0, _finite(config.monthly_budget))
        self.rebalance_frequency = max(1, int(_finite(config.rebalance_frequency, 1.0)))

        if config.enable_fees:
            self.fee_factor = 1.0 - _finite(config.trade_fee_pct) / 100.0
        else:
            self.fee_factor = 1.0

        self.monthly_yield = _finite(config.dividend_yield_pct) / 100.0 / 12.0
        self.net_dividend_factor = 1.0 - _finite(config.withhold_tax_pct) / 100.0

        self.warnings = self._check_allocation()

    def _check_allocation(self) -> list[str]:
        """Collect non-fatal allocation issues and log them."""
        warnings = []
        sum_pct = total_allocation(self.config.assets)

        if not self.config.assets:
            warnings.append("Portfolio has no assets")
        elif sum_pct == 0:
            warnings.append("Allocations sum to 0%; no contributions will be invested")
        elif not allocation_is_balanced(self.config.assets):
            warnings.append(
                f"Allocations sum to {sum_pct:.2f}%, not 100%; weights were normalized"
            )

        for message in warnings:
            logger.warning(f"{self.config.portfolio_id}: {message}")

        return warnings

    def monthly_rates(self, scenario: Scenario) -> np.ndarray:
        """Monthly growth rate per asset for a scenario."""
        return np.array(
            [monthly_rate(a.rate_for(scenario)) for a in self.config.assets],
            dtype=float,
        )

    def initialize_state(self) -> SimulationState:
        """Create the month-zero state with every asset at zero value."""
        return SimulationState(
            month=0,
            values=np.zeros(len(self.config.assets), dtype=float),
        )

    def accrue_dividends(self, state: SimulationState) -> tuple[float, float]:
        """
        Accrue one month of dividends on current asset values.

        Args:
            state: Current simulation state

        Returns:
            Tuple of (gross dividends, net dividends after withholding)
        """
        if not self.config.enable_dividends:
            return 0.0, 0.0

        gross = float((state.values * self.monthly_yield).sum())
        net = gross * self.net_dividend_factor
        return gross, net

    def should_rebalance(self, month: int) -> bool:
        """Whether the given 1-based month is a rebalance month."""
        return (
            self.config.enable_rebalancing
            and month > 1
            and month % self.rebalance_frequency == 0
        )

    def rebalance(self, state: SimulationState) -> None:
        """Reset asset values to the target weights of the current total."""
        state.values = state.total_value * self.weights

    def contribute(self, state: SimulationState, net_dividends: float = 0.0) -> None:
        """
        Add one month's contribution to each asset.

        The budget is split by target weight and reduced by the trading fee.
        With DRIP enabled, net dividends are redistributed by target weight
        as well, without the fee.

        Args:
            state: Current simulation state
            net_dividends: Net dividends accrued this month
        """
        contributions = self.monthly_budget * self.weights * self.fee_factor
        if self.config.enable_dividends and self.config.drip:
            contributions = contributions + net_dividends * self.weights
        state.values = state.values + contributions

    def step(self, state: SimulationState, rates: np.ndarray) -> Optional[ProjectionRow]:
        """
        Advance the state by one month.

        Args:
            state: Current simulation state (mutated)
            rates: Monthly growth rate per asset

        Returns:
            The recorded row if this month is sampled, else None
        """
        state.month += 1
        month = state.month

        gross, net = self.accrue_dividends(state)
        state.total_gross_dividends += gross

        rebalanced = self.should_rebalance(month)
        if rebalanced:
            self.rebalance(state)
            state.rebalance_count += 1

        self.contribute(state, net)
        state.values = state.values * (1.0 + rates)

        if self.config.enable_dividends and not self.config.drip:
            state.total_cash_dividends += net

        if not self._is_sampled(month):
            return None

        row = ProjectionRow(
            month=month,
            asset_values=[float(v) for v in state.values],
            total=state.total_value,
            cash_dividends=state.total_cash_dividends,
            dividend=gross,
            rebalanced=rebalanced,
        )
        state.rows.append(row)
        return row

    def _is_sampled(self, month: int) -> bool:
        if self.sampling == SamplingMode.MONTHLY:
            return True
        return month % 12 == 0 or month == self.total_months

    def run(self, scenario: Scenario | str) -> SimulationResult:
        """
        Project the portfolio under one scenario.

        Args:
            scenario: Scenario enum or its string value ("low", "mid", "high")

        Returns:
            SimulationResult with sampled rows and summary aggregates
        """
        scenario = Scenario(scenario)
        rates = self.monthly_rates(scenario)
        state = self.initialize_state()

        for _ in range(self.total_months):
            self.step(state, rates)

        # Fee adjustment applied once to the aggregate; exact while fees are uniform
        total_invested = self.total_months * self.monthly_budget * self.fee_factor

        logger.debug(
            f"{self.config.portfolio_id} [{scenario.value}]: "
            f"{self.total_months} months, final value {state.total_value:,.2f}"
        )

        return SimulationResult(
            portfolio_id=self.config.portfolio_id,
            scenario=scenario,
            asset_names=self.config.asset_names,
            weights=[float(w) for w in self.weights],
            rows=state.rows,
            total_invested=total_invested,
            final_value=state.total_value,
            total_cash_dividends=state.total_cash_dividends,
            total_gross_dividends=state.total_gross_dividends,
            rebalance_count=state.rebalance_count,
            final_values=[float(v) for v in state.values],
            warnings=list(self.warnings),
        )


def simulate(
    config: PortfolioConfig,
    scenario: Scenario | str,
    sampling: SamplingMode = SamplingMode.YEARLY,
) -> SimulationResult:
    """
    Run a single projection.

    Args:
        config: Portfolio configuration
        scenario: Scenario to project
        sampling: Which months are recorded as result rows

    Returns:
        SimulationResult for the (portfolio, scenario) pair
    """
    return DCAEngine(config, sampling=sampling).run(scenario)


def simulate_all_scenarios(
    config: PortfolioConfig,
    sampling: SamplingMode = SamplingMode.YEARLY,
) -> dict[Scenario, SimulationResult]:
    """
    Project a portfolio under the low, mid and high scenarios.

    Args:
        config: Portfolio configuration
        sampling: Which months are recorded as result rows

    Returns:
        Dictionary mapping Scenario -> SimulationResult, in scenario order
    """
    engine = DCAEngine(config, sampling=sampling)
    return {scenario: engine.run(scenario) for scenario in Scenario}
