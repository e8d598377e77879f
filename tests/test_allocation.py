"""
Tests for allocation checks and drift analysis.
"""

import pytest

from dca_sim.analytics import (
    allocation_is_balanced,
    allocation_tolerance,
    calculate_drift,
    calculate_final_drift,
    normalize_allocations,
    summarize_drift,
    total_allocation,
)
from dca_sim.models import Asset, PeriodMode, PortfolioConfig, ProjectionRow, Scenario
from dca_sim.simulation.engine import simulate


class TestAllocationTotals:
    """Tests for allocation sums."""

    def test_total_allocation(self, sample_assets: list[Asset]):
        """Test allocations are summed."""
        assert total_allocation(sample_assets) == pytest.approx(100.0)

    def test_non_numeric_ignored(self):
        """Test NaN and missing allocations count as 0."""
        assets = [
            Asset(name="A", alloc_pct=float("nan"), low=1.0, mid=2.0, high=3.0),
            Asset(name="B", alloc_pct=None, low=1.0, mid=2.0, high=3.0),
            Asset(name="C", alloc_pct=25.0, low=1.0, mid=2.0, high=3.0),
        ]

        assert total_allocation(assets) == 25.0

    def test_is_balanced(self, sample_assets: list[Asset]):
        """Test balance check against 100%."""
        assert allocation_is_balanced(sample_assets)

        sample_assets[0].alloc_pct = 49.0
        assert not allocation_is_balanced(sample_assets)

    def test_tolerance_scales_with_asset_count(self, sample_assets: list[Asset]):
        """Test the rounding slack is a hundredth of a point per asset."""
        assert allocation_tolerance(sample_assets) == pytest.approx(0.03)
        assert allocation_tolerance([]) == pytest.approx(0.01)

    def test_normalized_thirds_are_balanced(self):
        """Test allocations rescaled to 100% pass the balance check."""
        assets = [
            Asset(name=name, alloc_pct=1.0, low=1.0, mid=2.0, high=3.0)
            for name in ("A", "B", "C")
        ]

        normalized = normalize_allocations(assets)

        assert total_allocation(normalized) == pytest.approx(99.99)
        assert allocation_is_balanced(normalized)
        normalized[0].alloc_pct = 32.33
        assert not allocation_is_balanced(normalized)


class TestNormalizeAllocations:
    """Tests for rescaling allocations to 100%."""

    def test_rescales_to_hundred(self):
        """Test allocations are rescaled and rounded to 2 decimals."""
        assets = [
            Asset(name="A", alloc_pct=1.0, low=1.0, mid=2.0, high=3.0),
            Asset(name="B", alloc_pct=1.0, low=1.0, mid=2.0, high=3.0),
            Asset(name="C", alloc_pct=1.0, low=1.0, mid=2.0, high=3.0),
        ]

        normalized = normalize_allocations(assets)

        assert [a.alloc_pct for a in normalized] == [33.33, 33.33, 33.33]
        assert [a.name for a in normalized] == ["A", "B", "C"]
        assert normalized[0].mid == 2.0

    def test_input_not_modified(self):
        """Test the original assets are left untouched."""
        assets = [
            Asset(name="A", alloc_pct=30.0, low=1.0, mid=2.0, high=3.0),
            Asset(name="B", alloc_pct=10.0, low=1.0, mid=2.0, high=3.0),
        ]

        normalized = normalize_allocations(assets)

        assert [a.alloc_pct for a in normalized] == [75.0, 25.0]
        assert [a.alloc_pct for a in assets] == [30.0, 10.0]

    def test_zero_sum_unchanged(self):
        """Test a zero sum leaves allocations as they are."""
        assets = [Asset(name="A", alloc_pct=0.0, low=1.0, mid=2.0, high=3.0)]

        normalized = normalize_allocations(assets)

        assert normalized == assets
        assert normalized[0] is not assets[0]


class TestDrift:
    """Tests for drift from target weights."""

    def test_drift_sorted_and_flagged(self):
        """Test drift is measured per asset and sorted by magnitude."""
        row = ProjectionRow(
            month=12,
            asset_values=[700.0, 250.0, 50.0],
            total=1000.0,
            cash_dividends=0.0,
            dividend=0.0,
            rebalanced=False,
        )

        drifts = calculate_drift(row, ["A", "B", "C"], [0.5, 0.3, 0.2])

        assert [d.name for d in drifts] == ["A", "C", "B"]
        assert drifts[0].absolute_drift == pytest.approx(0.2)
        assert drifts[0].exceeds_threshold
        assert drifts[1].absolute_drift == pytest.approx(-0.15)
        assert not drifts[2].exceeds_threshold

    def test_zero_total(self):
        """Test an empty row reports zero current weights."""
        row = ProjectionRow(
            month=1,
            asset_values=[0.0],
            total=0.0,
            cash_dividends=0.0,
            dividend=0.0,
            rebalanced=False,
        )

        drifts = calculate_drift(row, ["A"], [1.0])

        assert drifts[0].current_weight == 0.0
        assert drifts[0].absolute_drift == pytest.approx(-1.0)

    def test_rebalanced_projection_has_no_drift(self):
        """Test a projection rebalanced in its final month sits near target weights."""
        config = PortfolioConfig(
            portfolio_id="REB",
            monthly_budget=1000.0,
            period_mode=PeriodMode.MONTHS,
            period_input=12,
            assets=[
                Asset(name="FAST", alloc_pct=50.0, low=30.0, mid=30.0, high=30.0),
                Asset(name="SLOW", alloc_pct=50.0, low=0.0, mid=0.0, high=0.0),
            ],
            enable_rebalancing=True,
            rebalance_frequency=12,
        )

        rebalanced = calculate_final_drift(simulate(config, Scenario.MID))
        config.enable_rebalancing = False
        drifted = calculate_final_drift(simulate(config, Scenario.MID))

        max_rebalanced = max(abs(d.absolute_drift) for d in rebalanced)
        max_drifted = max(abs(d.absolute_drift) for d in drifted)
        assert max_rebalanced < max_drifted
        assert max_rebalanced < 0.02

    def test_summarize_drift(self):
        """Test drift summary statistics."""
        row = ProjectionRow(
            month=12,
            asset_values=[700.0, 300.0],
            total=1000.0,
            cash_dividends=0.0,
            dividend=0.0,
            rebalanced=False,
        )

        summary = summarize_drift(calculate_drift(row, ["A", "B"], [0.5, 0.5]))

        assert summary["total_assets"] == 2
        assert summary["assets_exceeding_threshold"] == 2
        assert summary["active_share"] == pytest.approx(0.2)
        assert summary["max_absolute_drift"] == pytest.approx(0.2)

    def test_summarize_empty(self):
        """Test an empty drift list summarizes to zeros."""
        summary = summarize_drift([])

        assert summary["total_assets"] == 0
        assert summary["max_absolute_drift"] == 0.0
