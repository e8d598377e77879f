"""
Pytest fixtures for the DCA projection simulator tests.

Provides common portfolios and utilities used across test modules.
"""

from pathlib import Path

import pytest
import yaml

from dca_sim.models import Asset, PeriodMode, PortfolioConfig


@pytest.fixture(autouse=True)
def clear_output_override(monkeypatch):
    """Keep a developer's output directory override out of the tests."""
    monkeypatch.delenv("DCA_SIM_OUTPUT_DIR", raising=False)


@pytest.fixture
def single_asset_config() -> PortfolioConfig:
    """One asset at 100%, 12% mid return, 10,000 per month for 12 months."""
    return PortfolioConfig(
        portfolio_id="SINGLE",
        monthly_budget=10000.0,
        period_mode=PeriodMode.MONTHS,
        period_input=12,
        assets=[Asset(name="EQUITY", alloc_pct=100.0, low=6.0, mid=12.0, high=18.0)],
    )


@pytest.fixture
def sample_assets() -> list[Asset]:
    """Three assets with a 50/30/20 split and differing returns."""
    return [
        Asset(name="S&P500", alloc_pct=50.0, low=10.0, mid=10.0, high=10.0),
        Asset(name="NASDAQ100", alloc_pct=30.0, low=10.0, mid=12.5, high=15.0),
        Asset(name="BOND", alloc_pct=20.0, low=4.0, mid=4.0, high=4.0),
    ]


@pytest.fixture
def sample_portfolio_config(sample_assets: list[Asset]) -> PortfolioConfig:
    """Default-style portfolio over 10 years."""
    return PortfolioConfig(
        portfolio_id="TEST001",
        monthly_budget=10000.0,
        period_mode=PeriodMode.YEARS,
        period_input=10,
        assets=sample_assets,
    )


@pytest.fixture
def two_asset_config() -> PortfolioConfig:
    """Two assets 50/50 with identical returns over 5 years."""
    return PortfolioConfig(
        portfolio_id="HALF",
        monthly_budget=1000.0,
        period_mode=PeriodMode.YEARS,
        period_input=5,
        assets=[
            Asset(name="A", alloc_pct=50.0, low=5.0, mid=8.0, high=11.0),
            Asset(name="B", alloc_pct=50.0, low=5.0, mid=8.0, high=11.0),
        ],
    )


@pytest.fixture
def dividend_config() -> PortfolioConfig:
    """One flat asset paying a 12% yield (1% a month), 100 per month for 3 months."""
    return PortfolioConfig(
        portfolio_id="DIV",
        monthly_budget=100.0,
        period_mode=PeriodMode.MONTHS,
        period_input=3,
        assets=[Asset(name="FLAT", alloc_pct=100.0, low=0.0, mid=0.0, high=0.0)],
        enable_dividends=True,
        dividend_yield_pct=12.0,
        withhold_tax_pct=0.0,
        drip=False,
    )


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def config_file(temp_output_dir: Path) -> Path:
    """Single-portfolio YAML configuration file."""
    path = temp_output_dir / "portfolio.yaml"
    raw = {
        "portfolio_id": "YAML001",
        "monthly_budget": 5000,
        "period_mode": "years",
        "period_input": 2,
        "assets": [
            {"name": "STOCKS", "alloc_pct": 60, "low": 5, "mid": 8, "high": 11},
            {"name": "BONDS", "alloc_pct": 40, "low": 2, "mid": 3, "high": 4},
        ],
        "enable_dividends": True,
        "dividend_yield_pct": 3.0,
        "drip": False,
        "output_dir": str(temp_output_dir / "output"),
    }
    with open(path, "w") as f:
        yaml.dump(raw, f)
    return path


@pytest.fixture
def multi_config_file(temp_output_dir: Path) -> Path:
    """YAML configuration file with three portfolios."""
    path = temp_output_dir / "portfolios.yaml"
    raw = {
        "portfolios": [
            {
                "portfolio_id": "Conservative",
                "monthly_budget": 1000,
                "period_input": 5,
                "assets": [{"name": "BOND", "alloc_pct": 100, "low": 2, "mid": 3, "high": 4}],
            },
            {
                "portfolio_id": "Balanced",
                "monthly_budget": 1000,
                "period_input": 5,
                "assets": [
                    {"name": "BOND", "alloc_pct": 50, "low": 2, "mid": 3, "high": 4},
                    {"name": "EQUITY", "alloc_pct": 50, "low": 1, "mid": 9, "high": 14},
                ],
            },
            {
                "portfolio_id": "Growth",
                "monthly_budget": 1000,
                "period_input": 5,
                "assets": [{"name": "EQUITY", "alloc_pct": 100, "low": 1, "mid": 9, "high": 14}],
            },
        ],
    }
    for entry in raw["portfolios"]:
        entry["output_dir"] = str(temp_output_dir / "output")
    with open(path, "w") as f:
        yaml.dump(raw, f)
    return path
