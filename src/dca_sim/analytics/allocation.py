"""
Allocation checks and drift analysis.

This module inspects a portfolio's target allocation (totals, balance,
rescaling to 100%) and measures how far simulated asset values have
drifted from their target weights.
"""

import math
from typing import Optional

from dca_sim.models import AllocationDrift, Asset, ProjectionRow, SimulationResult


# Rounding each allocation to 2 decimals moves the total by at most this much per asset
ALLOCATION_TOLERANCE_PER_ASSET = 0.01


def total_allocation(assets: list[Asset]) -> float:
    """
    Sum of allocation percentages, treating non-numeric values as 0.

    Args:
        assets: Portfolio assets

    Returns:
        Total allocation in percentage points
    """
    total = 0.0
    for asset in assets:
        try:
            pct = float(asset.alloc_pct)
        except (TypeError, ValueError):
            continue
        if math.isfinite(pct):
            total += pct
    return total


def allocation_tolerance(assets: list[Asset]) -> float:
    """Slack allowed around 100% for allocations rounded to 2 decimals."""
    return ALLOCATION_TOLERANCE_PER_ASSET * max(1, len(assets))


def allocation_is_balanced(assets: list[Asset], tolerance: Optional[float] = None) -> bool:
    """
    Whether allocations add up to 100%.

    Args:
        assets: Portfolio assets
        tolerance: Allowed distance from 100 in percentage points; defaults
            to allocation_tolerance(assets), so normalized allocations count
            as balanced

    Returns:
        True if the total is within tolerance of 100
    """
    if tolerance is None:
        tolerance = allocation_tolerance(assets)
    return abs(total_allocation(assets) - 100.0) <= tolerance


def normalize_allocations(assets: list[Asset]) -> list[Asset]:
    """
    Rescale allocations so they add up to 100%.

    Each allocation is rounded to 2 decimals, so the new total can be off
    by a few hundredths. When the total is zero the assets are returned
    unchanged.

    Args:
        assets: Portfolio assets

    Returns:
        New list of Asset objects; the input is not modified
    """
    total = total_allocation(assets)
    if total == 0:
        return [Asset(a.name, a.alloc_pct, a.low, a.mid, a.high) for a in assets]

    normalized = []
    for asset in assets:
        try:
            pct = float(asset.alloc_pct)
        except (TypeError, ValueError):
            pct = 0.0
        if not math.isfinite(pct):
            pct = 0.0
        normalized.append(
            Asset(
                name=asset.name,
                alloc_pct=round(pct / total * 100, 2),
                low=asset.low,
                mid=asset.mid,
                high=asset.high,
            )
        )
    return normalized


def calculate_drift(
    row: ProjectionRow,
    asset_names: list[str],
    target_weights: list[float],
    drift_threshold: float = 0.05,
) -> list[AllocationDrift]:
    """
    Calculate drift from target weights for one sampled row.

    Args:
        row: Projection row with per-asset values
        asset_names: Names parallel to row.asset_values
        target_weights: Normalized target weights parallel to asset_names
        drift_threshold: Absolute drift above which an asset is flagged

    Returns:
        AllocationDrift per asset, sorted by drift magnitude descending
    """
    drifts = []
    for name, value, target in zip(asset_names, row.asset_values, target_weights):
        current = value / row.total if row.total > 0 else 0.0
        absolute = current - target
        drifts.append(
            AllocationDrift(
                name=name,
                current_weight=current,
                target_weight=target,
                absolute_drift=absolute,
                exceeds_threshold=abs(absolute) > drift_threshold,
            )
        )

    drifts.sort(key=lambda d: abs(d.absolute_drift), reverse=True)
    return drifts


def calculate_final_drift(
    result: SimulationResult,
    drift_threshold: float = 0.05,
) -> list[AllocationDrift]:
    """
    Calculate drift at the last sampled month of a projection.

    Args:
        result: Projection result
        drift_threshold: Absolute drift above which an asset is flagged

    Returns:
        AllocationDrift per asset (empty if the result has no rows)
    """
    if not result.rows:
        return []
    return calculate_drift(result.rows[-1], result.asset_names, result.weights, drift_threshold)


def summarize_drift(drifts: list[AllocationDrift]) -> dict:
    """
    Generate summary statistics for drift analysis.

    Args:
        drifts: List of drift analyses

    Returns:
        Dictionary with summary statistics
    """
    exceeding = [d for d in drifts if d.exceeds_threshold]

    return {
        "total_assets": len(drifts),
        "assets_exceeding_threshold": len(exceeding),
        "exceeding_assets": [d.name for d in exceeding],
        "active_share": sum(abs(d.absolute_drift) for d in drifts) / 2,
        "max_absolute_drift": max((abs(d.absolute_drift) for d in drifts), default=0.0),
    }
