"""
Core data models for the DCA projection simulator.

This module defines the fundamental data structures used throughout the system,
including assets, portfolio configurations, projection rows and results.
Monetary amounts and rates are plain floats; rates are percentages unless
noted otherwise.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Scenario(Enum):
    """Annual return assumption selected for a projection run."""
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class PeriodMode(Enum):
    """Unit of the projection horizon input."""
    MONTHS = "months"
    YEARS = "years"


class SamplingMode(Enum):
    """Which simulated months are recorded as result rows."""
    YEARLY = "yearly"    # Year boundaries plus the final month
    MONTHLY = "monthly"  # Every month


class ActionType(Enum):
    """Types of logged actions for the decision log."""
    CONFIG_LOADED = "CONFIG_LOADED"
    PROJECTION_RUN = "PROJECTION_RUN"
    PORTFOLIOS_COMPARED = "PORTFOLIOS_COMPARED"
    PROJECTION_EXPORTED = "PROJECTION_EXPORTED"
    ALLOCATION_NORMALIZED = "ALLOCATION_NORMALIZED"


# Column names used by result rows; asset names may not collide with these
RESERVED_COLUMNS = ("month", "total", "cash_dividends", "dividend", "rebalanced")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


@dataclass
class Asset:
    """
    One holding in a portfolio.

    Attributes:
        name: Display label, unique within its portfolio
        alloc_pct: Target allocation in percentage points
        low: Annual return (%) under the low scenario
        mid: Annual return (%) under the mid scenario
        high: Annual return (%) under the high scenario
    """
    name: str
    alloc_pct: float
    low: float
    mid: float
    high: float

    def rate_for(self, scenario: Scenario) -> float:
        """Annual return (%) for the given scenario."""
        return getattr(self, scenario.value)


@dataclass
class PortfolioConfig:
    """
    A complete, independently simulatable DCA plan.

    Attributes:
        portfolio_id: Display identifier for the portfolio
        monthly_budget: Nominal contribution per month
        period_mode: Whether period_input counts months or years
        period_input: Horizon length in period_mode units
        assets: Ordered holdings (order only affects display)
        enable_fees: Apply trade_fee_pct to each contribution
        trade_fee_pct: Trading fee (%) deducted from contributions
        enable_dividends: Accrue dividends on asset values
        dividend_yield_pct: Annual dividend yield (%)
        withhold_tax_pct: Withholding tax (%) on dividends
        drip: Reinvest net dividends instead of holding them as cash
        enable_rebalancing: Reset to target weights periodically
        rebalance_frequency: Months between rebalances
        output_dir: Directory for report and export files
    """
    portfolio_id: str = "Portfolio 1"
    monthly_budget: float = 10000.0
    period_mode: PeriodMode = PeriodMode.YEARS
    period_input: int = 10
    assets: list[Asset] = field(default_factory=list)
    enable_fees: bool = False
    trade_fee_pct: float = 0.5
    enable_dividends: bool = False
    dividend_yield_pct: float = 2.0
    withhold_tax_pct: float = 10.0
    drip: bool = True
    enable_rebalancing: bool = False
    rebalance_frequency: int = 12
    output_dir: str = "output"

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for asset in self.assets:
            if asset.name in RESERVED_COLUMNS:
                raise ConfigurationError(
                    f"Asset name '{asset.name}' is reserved for result columns"
                )
            if asset.name in seen:
                raise ConfigurationError(f"Duplicate asset name: {asset.name}")
            seen.add(asset.name)

    @property
    def total_months(self) -> int:
        """Effective horizon in months (never less than 1)."""
        months = self.period_input * 12 if self.period_mode == PeriodMode.YEARS else self.period_input
        return max(1, int(months))

    @property
    def asset_names(self) -> list[str]:
        """Asset names in configuration order."""
        return [a.name for a in self.assets]


@dataclass
class ProjectionRow:
    """
    Snapshot of a portfolio at one sampled month.

    Attributes:
        month: 1-based month index
        asset_values: Value per asset, parallel to the config's asset list
        total: Sum of asset values
        cash_dividends: Cumulative net dividends held as cash
        dividend: Gross dividend accrued in this month
        rebalanced: Whether this month was a rebalance month
    """
    month: int
    asset_values: list[float]
    total: float
    cash_dividends: float
    dividend: float
    rebalanced: bool

    def to_record(self, asset_names: list[str]) -> dict:
        """Flatten into a uniform-keyed record for tabular export."""
        record: dict = {"month": self.month}
        for name, value in zip(asset_names, self.asset_values):
            record[name] = value
        record["total"] = self.total
        record["cash_dividends"] = self.cash_dividends
        record["dividend"] = self.dividend
        record["rebalanced"] = self.rebalanced
        return record


@dataclass
class SimulationResult:
    """
    Output of one (portfolio, scenario) projection.

    Attributes:
        portfolio_id: Portfolio the result belongs to
        scenario: Scenario that was simulated
        asset_names: Asset names, parallel to each row's asset_values
        weights: Normalized target weights used for the run
        rows: Sampled snapshots in month order
        total_invested: Nominal contributions, fee-adjusted in aggregate
        final_value: Sum of asset values after the final month
        total_cash_dividends: Net dividends not reinvested
        total_gross_dividends: Dividends accrued before withholding
        rebalance_count: Number of rebalance months
        final_values: Value per asset after the final month
        warnings: Non-fatal issues found in the configuration
    """
    portfolio_id: str
    scenario: Scenario
    asset_names: list[str]
    weights: list[float]
    rows: list[ProjectionRow]
    total_invested: float
    final_value: float
    total_cash_dividends: float
    total_gross_dividends: float = 0.0
    rebalance_count: int = 0
    final_values: list[float] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_months(self) -> int:
        """Number of months simulated."""
        return self.rows[-1].month if self.rows else 0

    def records(self) -> list[dict]:
        """Rows as uniform-keyed records in stable column order."""
        return [row.to_record(self.asset_names) for row in self.rows]


@dataclass
class AssetSummary:
    """
    Per-asset outcome for a single projection.

    Attributes:
        name: Asset name
        weight: Normalized target weight (0-1)
        invested: Contributions attributed to this asset
        final_value: Value after the final month
        profit: final_value - invested
        roi_pct: Return on investment (%), NaN when nothing was invested
    """
    name: str
    weight: float
    invested: float
    final_value: float
    profit: float
    roi_pct: float


@dataclass
class DecisionLogEntry:
    """
    Entry for the append-only decision log.

    Attributes:
        timestamp: When the action occurred
        action_type: Type of action
        portfolio_id: Portfolio involved (if applicable)
        details: JSON-serializable details dictionary
    """
    timestamp: datetime
    action_type: ActionType
    portfolio_id: Optional[str]
    details: dict

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        portfolio_id: Optional[str],
        details: dict,
    ) -> "DecisionLogEntry":
        """Factory method with auto-generated timestamp."""
        return cls(
            timestamp=datetime.now(),
            action_type=action_type,
            portfolio_id=portfolio_id,
            details=details,
        )


@dataclass
class AllocationDrift:
    """
    Drift of one asset from its target weight at a sampled month.

    Attributes:
        name: Asset name
        current_weight: Share of the portfolio total (0-1)
        target_weight: Normalized target weight (0-1)
        absolute_drift: current_weight - target_weight
        exceeds_threshold: Whether drift exceeds the configured threshold
    """
    name: str
    current_weight: float
    target_weight: float
    absolute_drift: float
    exceeds_threshold: bool
