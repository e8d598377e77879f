"""
Tests for the append-only decision log.
"""

import json
from pathlib import Path

from dca_sim.logging import DecisionLogger, get_logger, log_action
from dca_sim.models import ActionType, PortfolioConfig, Scenario
from dca_sim.simulation.compare import compare_portfolios
from dca_sim.simulation.engine import simulate


class TestDecisionLogger:
    """Tests for the DecisionLogger class."""

    def test_creates_parent_directory(self, tmp_path: Path):
        """Test the log directory is created on construction."""
        logger = DecisionLogger(tmp_path / "logs" / "decision_log.jsonl")

        assert logger.log_path.parent.exists()
        assert logger.read_log() == []

    def test_config_loaded_one_entry_per_portfolio(
        self,
        tmp_path: Path,
        sample_portfolio_config: PortfolioConfig,
        two_asset_config: PortfolioConfig,
    ):
        """Test configuration loads are logged per portfolio."""
        logger = DecisionLogger(tmp_path / "log.jsonl")

        logger.log_config_loaded([sample_portfolio_config, two_asset_config], "portfolios.yaml")
        entries = logger.read_log()

        assert [e.portfolio_id for e in entries] == ["TEST001", "HALF"]
        assert all(e.action_type == ActionType.CONFIG_LOADED for e in entries)
        assert entries[0].details["total_months"] == 120
        assert entries[1].details["assets"] == ["A", "B"]

    def test_entries_are_json_lines(self, tmp_path: Path, single_asset_config: PortfolioConfig):
        """Test each action is appended as one JSON object per line."""
        logger = DecisionLogger(tmp_path / "log.jsonl")
        result = simulate(single_asset_config, Scenario.MID)

        logger.log_projection_run(result)
        logger.log_projection_exported(result, tmp_path / "out.csv")

        lines = logger.log_path.read_text().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["action_type"] == "PROJECTION_RUN"
        assert first["details"]["scenario"] == "mid"
        assert first["details"]["total_invested"] == 120000.0
        assert json.loads(lines[1])["details"]["output_path"] == str(tmp_path / "out.csv")

    def test_log_comparison(self, tmp_path: Path, sample_portfolio_config, two_asset_config):
        """Test comparisons are logged without a portfolio id."""
        logger = DecisionLogger(tmp_path / "log.jsonl")

        logger.log_portfolios_compared(compare_portfolios([sample_portfolio_config, two_asset_config]))
        entry = logger.read_log()[0]

        assert entry.portfolio_id is None
        assert entry.details["portfolio_ids"] == ["TEST001", "HALF"]
        assert set(entry.details["rankings"]) == {"low", "mid", "high"}

    def test_log_allocation_normalized(self, tmp_path: Path, sample_assets):
        """Test allocations before and after are recorded by name."""
        logger = DecisionLogger(tmp_path / "log.jsonl")

        logger.log_allocation_normalized("TEST001", sample_assets, sample_assets)
        entry = logger.read_log()[0]

        assert entry.details["before"]["NASDAQ100"] == 30.0

    def test_filters(self, tmp_path: Path, sample_portfolio_config, two_asset_config):
        """Test filtering by portfolio and action type."""
        logger = DecisionLogger(tmp_path / "log.jsonl")
        logger.log_config_loaded([sample_portfolio_config, two_asset_config], "p.yaml")
        logger.log_projection_run(simulate(two_asset_config, Scenario.LOW))

        assert len(logger.filter_by_portfolio("HALF")) == 2
        assert len(logger.filter_by_action_type(ActionType.PROJECTION_RUN)) == 1
        assert logger.filter_by_portfolio("MISSING") == []

    def test_log_is_append_only(self, tmp_path: Path, two_asset_config: PortfolioConfig):
        """Test a new logger on the same file keeps earlier entries."""
        path = tmp_path / "log.jsonl"
        DecisionLogger(path).log_config_loaded([two_asset_config], "a.yaml")
        DecisionLogger(path).log_config_loaded([two_asset_config], "b.yaml")

        entries = DecisionLogger(path).read_log()

        assert [e.details["config_path"] for e in entries] == ["a.yaml", "b.yaml"]


class TestGlobalLogger:
    """Tests for the module-level logger helpers."""

    def test_log_action(self, tmp_path: Path):
        """Test log_action writes through the global logger."""
        path = tmp_path / "global.jsonl"

        log_action(ActionType.PROJECTION_EXPORTED, "P1", {"where": tmp_path}, log_path=path)

        entries = get_logger(path).read_log()
        assert entries[0].portfolio_id == "P1"
        assert entries[0].details["where"] == str(tmp_path)
