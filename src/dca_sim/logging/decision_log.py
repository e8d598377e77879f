"""
Append-only decision logging for the DCA projection simulator.

Configuration loads, projection runs, comparisons and exports are logged
with timestamps so a set of outputs can be traced back to its inputs.
"""

import json
from datetime import datetime, date
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING

from dca_sim.models import (
    ActionType,
    Asset,
    DecisionLogEntry,
    PortfolioConfig,
    SimulationResult,
)

if TYPE_CHECKING:
    from dca_sim.simulation.compare import PortfolioComparison


class DecisionLogger:
    """
    Append-only decision logger.

    Writes all decisions to a JSONL file for audit purposes.
    Each line is a complete JSON object representing one action.
    """

    def __init__(self, log_path: str | Path):
        """
        Initialize the decision logger.

        Args:
            log_path: Path to the log file (will be created if not exists)
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, entry: DecisionLogEntry) -> None:
        """
        Write a decision log entry.

        Args:
            entry: DecisionLogEntry to write
        """
        record = {
            "timestamp": entry.timestamp.isoformat(),
            "action_type": entry.action_type.value,
            "portfolio_id": entry.portfolio_id,
            "details": entry.details,
        }

        with open(self.log_path, "a") as f:
            f.write(json.dumps(record, cls=LogEncoder) + "\n")

    def log_config_loaded(
        self,
        portfolios: list[PortfolioConfig],
        config_path: str,
    ) -> None:
        """
        Log configuration loading.

        Args:
            portfolios: Loaded portfolio configurations
            config_path: Path to configuration file
        """
        for config in portfolios:
            details = {
                "config_path": config_path,
                "monthly_budget": config.monthly_budget,
                "total_months": config.total_months,
                "assets": config.asset_names,
                "features": {
                    "fees": config.enable_fees,
                    "dividends": config.enable_dividends,
                    "drip": config.drip,
                    "rebalancing": config.enable_rebalancing,
                },
            }

            entry = DecisionLogEntry.create(
                action_type=ActionType.CONFIG_LOADED,
                portfolio_id=config.portfolio_id,
                details=details,
            )
            self.log(entry)

    def log_projection_run(self, result: SimulationResult) -> None:
        """
        Log a completed projection.

        Args:
            result: Projection result
        """
        details = {
            "scenario": result.scenario.value,
            "months": result.total_months,
            "total_invested": result.total_invested,
            "final_value": result.final_value,
            "total_cash_dividends": result.total_cash_dividends,
            "rebalance_count": result.rebalance_count,
            "warnings": result.warnings,
        }

        entry = DecisionLogEntry.create(
            action_type=ActionType.PROJECTION_RUN,
            portfolio_id=result.portfolio_id,
            details=details,
        )
        self.log(entry)

    def log_portfolios_compared(self, comparison: "PortfolioComparison") -> None:
        """
        Log a multi-portfolio comparison.

        Args:
            comparison: Comparison result
        """
        details = {
            "portfolio_ids": comparison.portfolio_ids,
            "rankings": {
                scenario.value: {
                    "best": ranking.best,
                    "worst": ranking.worst,
                }
                for scenario, ranking in comparison.rankings.items()
            },
        }

        entry = DecisionLogEntry.create(
            action_type=ActionType.PORTFOLIOS_COMPARED,
            portfolio_id=None,
            details=details,
        )
        self.log(entry)

    def log_projection_exported(
        self,
        result: SimulationResult,
        output_path: str | Path,
    ) -> None:
        """
        Log a CSV export.

        Args:
            result: Exported projection
            output_path: File written
        """
        details = {
            "scenario": result.scenario.value,
            "rows": len(result.rows),
            "output_path": str(output_path),
        }

        entry = DecisionLogEntry.create(
            action_type=ActionType.PROJECTION_EXPORTED,
            portfolio_id=result.portfolio_id,
            details=details,
        )
        self.log(entry)

    def log_allocation_normalized(
        self,
        portfolio_id: str,
        before: list[Asset],
        after: list[Asset],
    ) -> None:
        """
        Log an allocation rescale.

        Args:
            portfolio_id: Portfolio identifier
            before: Assets before normalization
            after: Assets after normalization
        """
        details = {
            "before": {a.name: a.alloc_pct for a in before},
            "after": {a.name: a.alloc_pct for a in after},
        }

        entry = DecisionLogEntry.create(
            action_type=ActionType.ALLOCATION_NORMALIZED,
            portfolio_id=portfolio_id,
            details=details,
        )
        self.log(entry)

    def read_log(self) -> list[DecisionLogEntry]:
        """
        Read all entries from the log file.

        Returns:
            List of DecisionLogEntry objects
        """
        if not self.log_path.exists():
            return []

        entries = []
        with open(self.log_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                record = json.loads(line)
                entries.append(
                    DecisionLogEntry(
                        timestamp=datetime.fromisoformat(record["timestamp"]),
                        action_type=ActionType(record["action_type"]),
                        portfolio_id=record.get("portfolio_id"),
                        details=record.get("details", {}),
                    )
                )

        return entries

    def filter_by_portfolio(
        self,
        portfolio_id: str,
    ) -> list[DecisionLogEntry]:
        """
        Get log entries for a specific portfolio.

        Args:
            portfolio_id: Portfolio to filter by

        Returns:
            Filtered list of entries
        """
        return [e for e in self.read_log() if e.portfolio_id == portfolio_id]

    def filter_by_action_type(
        self,
        action_type: ActionType,
    ) -> list[DecisionLogEntry]:
        """
        Get log entries of a specific action type.

        Args:
            action_type: Action type to filter by

        Returns:
            Filtered list of entries
        """
        return [e for e in self.read_log() if e.action_type == action_type]


class LogEncoder(json.JSONEncoder):
    """JSON encoder that handles enums, dates and paths."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


# Global logger instance (initialized on first use)
_global_logger: Optional[DecisionLogger] = None


def get_logger(log_path: Optional[str | Path] = None) -> DecisionLogger:
    """
    Get or create the global decision logger.

    Args:
        log_path: Optional path to initialize logger (required on first call)

    Returns:
        DecisionLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if log_path is None:
            log_path = "output/decision_log.jsonl"
        _global_logger = DecisionLogger(log_path)
    elif log_path is not None:
        # Allow reinitializing with new path
        _global_logger = DecisionLogger(log_path)

    return _global_logger


def log_action(
    action_type: ActionType,
    portfolio_id: Optional[str],
    details: dict,
    log_path: Optional[str | Path] = None,
) -> None:
    """
    Convenience function to log an action.

    Args:
        action_type: Type of action
        portfolio_id: Portfolio identifier (optional)
        details: Action details dictionary
        log_path: Optional path to log file
    """
    logger = get_logger(log_path)
    entry = DecisionLogEntry.create(
        action_type=action_type,
        portfolio_id=portfolio_id,
        details=details,
    )
    logger.log(entry)
