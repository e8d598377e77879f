"""
Tests for report generation.
"""

from pathlib import Path

import pytest

from dca_sim.data import load_projection
from dca_sim.models import Asset, PeriodMode, PortfolioConfig, Scenario
from dca_sim.simulation.compare import compare_portfolios
from dca_sim.simulation.report import generate_report


def make_portfolio(portfolio_id: str, rate: float) -> PortfolioConfig:
    """Single-asset portfolio over two years."""
    return PortfolioConfig(
        portfolio_id=portfolio_id,
        monthly_budget=1000.0,
        period_mode=PeriodMode.YEARS,
        period_input=2,
        assets=[Asset(name="ONLY", alloc_pct=100.0, low=rate, mid=rate, high=rate)],
    )


class TestGenerateReport:
    """Tests for the generate_report function."""

    def test_writes_bundle(self, tmp_path: Path):
        """Test the report, metrics, summary and one CSV per projection are written."""
        portfolios = [make_portfolio("Solo", 5.0)]

        paths = generate_report(compare_portfolios(portfolios), portfolios, tmp_path)

        for key in ("report", "metrics", "summary"):
            assert paths[key].exists()
        for scenario in Scenario:
            assert paths[f"Solo:{scenario.value}"] == tmp_path / f"dca_solo_{scenario.value}.csv"

    def test_clashing_ids_get_separate_files(self, tmp_path: Path):
        """Test ids that slug to the same name do not overwrite each other's CSVs."""
        portfolios = [make_portfolio("Growth Fund", 2.0), make_portfolio("growth-fund", 9.0)]
        comparison = compare_portfolios(portfolios)

        paths = generate_report(comparison, portfolios, tmp_path)

        first = paths["Growth Fund:mid"]
        second = paths["growth-fund:mid"]
        assert first != second
        assert first.name == "dca_growth_fund_mid.csv"
        assert second.name == "dca_growth_fund_2_mid.csv"
        assert load_projection(first)["total"].iloc[-1] == pytest.approx(
            comparison.get_result("Growth Fund", Scenario.MID).final_value
        )
        assert load_projection(second)["total"].iloc[-1] == pytest.approx(
            comparison.get_result("growth-fund", Scenario.MID).final_value
        )
