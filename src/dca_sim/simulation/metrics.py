"""
Summary metrics for projection results.

Calculates the headline figures shown for each scenario:
- Profit (final value minus total invested)
- ROI, undefined (NaN) when nothing was invested
- Annualized growth of the final value over invested capital
- Per-asset invested / final value breakdown
"""

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
import math

from dca_sim.models import AssetSummary, SimulationResult


def calculate_roi(final_value: float, total_invested: float) -> float:
    """
    Return on investment in percent.

    Args:
        final_value: Value at the end of the horizon
        total_invested: Capital contributed over the horizon

    Returns:
        (final_value - total_invested) / total_invested * 100, or NaN when
        total_invested is zero
    """
    if total_invested == 0:
        return math.nan
    return (final_value - total_invested) / total_invested * 100.0


def is_defined(value: float) -> bool:
    """Whether a metric holds a usable (finite) number."""
    return value is not None and math.isfinite(value)


def format_percent(value: float, signed: bool = False) -> str:
    """Format a percentage for display, using N/A for undefined values."""
    if not is_defined(value):
        return "N/A"
    return f"{value:+.2f}%" if signed else f"{value:.2f}%"


def format_currency(value: float, signed: bool = False) -> str:
    """Format a currency amount with thousands separators and no decimals."""
    if not is_defined(value):
        return "N/A"
    return f"{value:+,.0f}" if signed else f"{value:,.0f}"


def summarize_assets(result: SimulationResult) -> list[AssetSummary]:
    """
    Break a projection down by asset.

    Invested capital per asset is budget x weight x months with the same
    aggregate fee adjustment as the portfolio total, so the per-asset
    amounts add up to total_invested whenever the weights sum to 1.

    Args:
        result: Projection result

    Returns:
        AssetSummary per asset in configuration order
    """
    weight_sum = sum(result.weights)
    summaries = []
    for name, weight, final_value in zip(result.asset_names, result.weights, result.final_values):
        invested = result.total_invested * weight if weight_sum > 0 else 0.0
        summaries.append(
            AssetSummary(
                name=name,
                weight=weight,
                invested=invested,
                final_value=final_value,
                profit=final_value - invested,
                roi_pct=calculate_roi(final_value, invested),
            )
        )
    return summaries


@dataclass
class ProjectionMetrics:
    """Container for projection summary metrics."""

    portfolio_id: str
    scenario: str
    months: int

    total_invested: float
    final_value: float
    profit: float
    roi_pct: float
    annualized_return_pct: float

    total_cash_dividends: float
    total_gross_dividends: float
    rebalance_count: int

    assets: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary, mapping undefined values to None."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, float) and not math.isfinite(value):
                data[key] = None
        for asset in data["assets"]:
            for key, value in asset.items():
                if isinstance(value, float) and not math.isfinite(value):
                    asset[key] = None
        return data

    def to_json(self, path: Path) -> None:
        """Save metrics to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_json(cls, path: Path) -> "ProjectionMetrics":
        """Load metrics from JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        for key in ("roi_pct", "annualized_return_pct"):
            if data.get(key) is None:
                data[key] = math.nan
        for asset in data.get("assets", []):
            if asset.get("roi_pct") is None:
                asset["roi_pct"] = math.nan
        return cls(**data)


def calculate_metrics(result: SimulationResult) -> ProjectionMetrics:
    """
    Calculate summary metrics from a projection result.

    Args:
        result: Projection result

    Returns:
        ProjectionMetrics for the result
    """
    months = result.total_months
    roi = calculate_roi(result.final_value, result.total_invested)

    # Growth multiple spread over the horizon; contributions arrive gradually
    # so this understates the money-weighted return
    years = months / 12
    if years > 0 and result.total_invested > 0 and result.final_value > 0:
        annualized = ((result.final_value / result.total_invested) ** (1 / years) - 1) * 100
    else:
        annualized = math.nan

    return ProjectionMetrics(
        portfolio_id=result.portfolio_id,
        scenario=result.scenario.value,
        months=months,
        total_invested=result.total_invested,
        final_value=result.final_value,
        profit=result.final_value - result.total_invested,
        roi_pct=roi,
        annualized_return_pct=annualized,
        total_cash_dividends=result.total_cash_dividends,
        total_gross_dividends=result.total_gross_dividends,
        rebalance_count=result.rebalance_count,
        assets=[asdict(s) for s in summarize_assets(result)],
    )
