"""
Configuration loading and management for the DCA projection simulator.

This module handles loading portfolio configurations from YAML files,
the shared default values, and sanitizing raw values at the edit boundary.
The dictionary form produced by portfolio_to_dict is also what the
share-link codec serializes.
"""

import math
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from dca_sim.models import (
    Asset,
    ConfigurationError,
    PeriodMode,
    PortfolioConfig,
)


OUTPUT_DIR_ENV_VAR = "DCA_SIM_OUTPUT_DIR"

DEFAULTS: dict[str, Any] = {
    "portfolio_id": "Portfolio 1",
    "monthly_budget": 10000.0,
    "period_mode": "years",
    "period_input": 10,
    "enable_fees": False,
    "trade_fee_pct": 0.5,
    "enable_dividends": False,
    "dividend_yield_pct": 2.0,
    "withhold_tax_pct": 10.0,
    "drip": True,
    "enable_rebalancing": False,
    "rebalance_frequency": 12,
    "output_dir": "output",
}

# Rates used for assets added without explicit values
NEW_ASSET_RATES = (8.0, 10.0, 12.0)

__all__ = [
    "ConfigurationError",
    "DEFAULTS",
    "default_assets",
    "new_asset",
    "load_portfolio_config",
    "load_portfolios",
    "portfolio_from_dict",
    "portfolio_to_dict",
    "create_default_config",
    "write_config",
    "write_portfolios",
]


def default_assets() -> list[Asset]:
    """Starting asset list for a new portfolio."""
    return [
        Asset(name="S&P500", alloc_pct=50.0, low=10.0, mid=10.0, high=10.0),
        Asset(name="NASDAQ100", alloc_pct=30.0, low=10.0, mid=12.5, high=15.0),
        Asset(name="BOND", alloc_pct=20.0, low=4.0, mid=4.0, high=4.0),
    ]


def new_asset(existing: list[Asset]) -> Asset:
    """
    Create a placeholder asset to append to an existing list.

    The name is ASSET_<n>, where n is one past the number of existing
    assets, bumped further if that name is already taken.

    Args:
        existing: Assets already in the portfolio

    Returns:
        New Asset with zero allocation and default rates
    """
    taken = {a.name for a in existing}
    n = len(existing) + 1
    while f"ASSET_{n}" in taken:
        n += 1
    low, mid, high = NEW_ASSET_RATES
    return Asset(name=f"ASSET_{n}", alloc_pct=0.0, low=low, mid=mid, high=high)


def load_portfolio_config(config_path: str | Path) -> PortfolioConfig:
    """
    Load a single portfolio configuration from a YAML file.

    If the file holds a `portfolios:` list, the first entry is returned.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        PortfolioConfig object with sanitized settings

    Raises:
        ConfigurationError: If the file cannot be loaded or is invalid
    """
    portfolios = load_portfolios(config_path)
    return portfolios[0]


def load_portfolios(config_path: str | Path) -> list[PortfolioConfig]:
    """
    Load one or more portfolio configurations from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        List of PortfolioConfig objects (at least one)

    Raises:
        ConfigurationError: If the file cannot be loaded or is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    if "portfolios" in raw_config:
        raw_list = raw_config["portfolios"]
        if not isinstance(raw_list, list) or not raw_list:
            raise ConfigurationError("portfolios must be a non-empty list")
        portfolios = []
        for index, raw in enumerate(raw_list, start=1):
            if not isinstance(raw, dict):
                raise ConfigurationError(f"Portfolio entry {index} must be a mapping")
            raw = dict(raw)
            raw.setdefault("portfolio_id", f"Portfolio {index}")
            portfolios.append(portfolio_from_dict(raw))
    else:
        portfolios = [portfolio_from_dict(raw_config)]

    override = os.environ.get(OUTPUT_DIR_ENV_VAR)
    if override:
        for portfolio in portfolios:
            portfolio.output_dir = override

    return portfolios


def portfolio_from_dict(raw: dict[str, Any]) -> PortfolioConfig:
    """
    Build a PortfolioConfig from a raw dictionary.

    Missing keys take the documented defaults. Numeric values are clamped
    at the edit boundary instead of rejected.

    Args:
        raw: Dictionary loaded from YAML or a share link

    Returns:
        Sanitized PortfolioConfig

    Raises:
        ConfigurationError: If period_mode is unknown or asset names clash
    """
    def get(key: str) -> Any:
        return raw.get(key, DEFAULTS[key])

    raw_mode = str(get("period_mode")).strip().lower()
    try:
        period_mode = PeriodMode(raw_mode)
    except ValueError:
        raise ConfigurationError(
            f"Invalid period_mode: {raw_mode}. Expected 'months' or 'years'"
        )

    if "assets" in raw:
        raw_assets = raw["assets"] or []
        if not isinstance(raw_assets, list):
            raise ConfigurationError("assets must be a list")
        assets = [_parse_asset(a, i) for i, a in enumerate(raw_assets, start=1)]
    else:
        assets = default_assets()

    return PortfolioConfig(
        portfolio_id=str(get("portfolio_id")),
        monthly_budget=_parse_number(get("monthly_budget"), min_val=0.0),
        period_mode=period_mode,
        period_input=int(_parse_number(get("period_input"), min_val=1.0)),
        assets=assets,
        enable_fees=_parse_bool(get("enable_fees")),
        trade_fee_pct=_parse_number(get("trade_fee_pct"), min_val=0.0),
        enable_dividends=_parse_bool(get("enable_dividends")),
        dividend_yield_pct=_parse_number(get("dividend_yield_pct"), min_val=0.0),
        withhold_tax_pct=_parse_number(get("withhold_tax_pct"), min_val=0.0),
        drip=_parse_bool(get("drip")),
        enable_rebalancing=_parse_bool(get("enable_rebalancing")),
        rebalance_frequency=int(_parse_number(get("rebalance_frequency"), min_val=1.0)),
        output_dir=str(get("output_dir")),
    )


def portfolio_to_dict(config: PortfolioConfig) -> dict[str, Any]:
    """
    Convert a PortfolioConfig into its plain dictionary form.

    Args:
        config: The configuration to convert

    Returns:
        Dictionary accepted by portfolio_from_dict
    """
    return {
        "portfolio_id": config.portfolio_id,
        "monthly_budget": config.monthly_budget,
        "period_mode": config.period_mode.value,
        "period_input": config.period_input,
        "assets": [
            {
                "name": a.name,
                "alloc_pct": a.alloc_pct,
                "low": a.low,
                "mid": a.mid,
                "high": a.high,
            }
            for a in config.assets
        ],
        "enable_fees": config.enable_fees,
        "trade_fee_pct": config.trade_fee_pct,
        "enable_dividends": config.enable_dividends,
        "dividend_yield_pct": config.dividend_yield_pct,
        "withhold_tax_pct": config.withhold_tax_pct,
        "drip": config.drip,
        "enable_rebalancing": config.enable_rebalancing,
        "rebalance_frequency": config.rebalance_frequency,
        "output_dir": config.output_dir,
    }


def _parse_asset(raw: Any, index: int) -> Asset:
    """
    Parse one asset entry.

    Args:
        raw: Mapping with name, alloc_pct, low, mid, high
        index: 1-based position, used for a fallback name

    Returns:
        Asset with negative allocation and rates clamped to 0

    Raises:
        ConfigurationError: If the entry is not a mapping
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Asset entry {index} must be a mapping")

    low, mid, high = NEW_ASSET_RATES
    return Asset(
        name=str(raw.get("name") or f"ASSET_{index}"),
        alloc_pct=_parse_number(raw.get("alloc_pct", 0), min_val=0.0),
        low=_parse_number(raw.get("low", low), min_val=0.0),
        mid=_parse_number(raw.get("mid", mid), min_val=0.0),
        high=_parse_number(raw.get("high", high), min_val=0.0),
    )


def _parse_number(value: Any, min_val: Optional[float] = None) -> float:
    """
    Parse a numeric value, treating garbage as 0 and clamping at min_val.

    Args:
        value: The value to parse
        min_val: Minimum allowed value (inclusive)

    Returns:
        Finite float
    """
    if isinstance(value, bool):
        number = float(value)
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = 0.0

    if not math.isfinite(number):
        number = 0.0

    if min_val is not None and number < min_val:
        number = min_val

    return number


def _parse_bool(value: Any) -> bool:
    """Parse a boolean flag from YAML or URL-decoded values."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def create_default_config(
    portfolio_id: str = "Portfolio 1",
    output_path: str | Path | None = None,
) -> PortfolioConfig:
    """
    Create a portfolio config with default parameters.

    Useful for programmatic configuration without a YAML file.

    Args:
        portfolio_id: Portfolio identifier
        output_path: Optional path to write config YAML

    Returns:
        PortfolioConfig with default assets and settings
    """
    config = portfolio_from_dict({"portfolio_id": portfolio_id})

    if output_path:
        write_config(config, output_path)

    return config


def write_config(config: PortfolioConfig, output_path: str | Path) -> None:
    """
    Write a PortfolioConfig to a YAML file.

    Args:
        config: The configuration to write
        output_path: Path to write the YAML file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.dump(portfolio_to_dict(config), f, default_flow_style=False, sort_keys=False)


def write_portfolios(portfolios: list[PortfolioConfig], output_path: str | Path) -> None:
    """
    Write several portfolios to one YAML file under a `portfolios:` list.

    A single portfolio is written as a plain mapping, like write_config.

    Args:
        portfolios: Configurations to write
        output_path: Path to write the YAML file
    """
    if len(portfolios) == 1:
        write_config(portfolios[0], output_path)
        return

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"portfolios": [portfolio_to_dict(p) for p in portfolios]}
    with open(output_path, "w") as f:
        yaml.dump(payload, f, default_flow_style=False, sort_keys=False)
