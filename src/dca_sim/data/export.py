"""
Saving and loading projection results as CSV.

Handles output of sampled projection rows and scenario summaries, and
re-reading exported projections for validation.
"""

import re
from pathlib import Path
from typing import Iterable

import pandas as pd

from dca_sim.models import SimulationResult
from dca_sim.data.schemas import FileSchema, PROJECTION_SCHEMA, SUMMARY_SCHEMA


class ExportError(Exception):
    """Raised when an export cannot be written, loaded or is invalid."""
    pass


def records_to_dataframe(records: list[dict]) -> pd.DataFrame:
    """
    Build a DataFrame from uniform-keyed records.

    Column order follows the keys of the first record.

    Args:
        records: Records sharing the same keys

    Returns:
        DataFrame with one row per record
    """
    if not records:
        return pd.DataFrame()
    return pd.DataFrame(records, columns=list(records[0].keys()))


def projection_to_dataframe(result: SimulationResult) -> pd.DataFrame:
    """
    Convert projection rows to a DataFrame.

    Columns: month, one column per asset in configuration order, total,
    cash_dividends, dividend, rebalanced.

    Args:
        result: Projection result

    Returns:
        DataFrame with one row per sampled month
    """
    columns = ["month", *result.asset_names, "total", "cash_dividends", "dividend", "rebalanced"]
    return pd.DataFrame(result.records(), columns=columns)


def make_csv(records: list[dict]) -> str:
    """
    Render records as delimited text.

    The first line holds the keys of the first record; each following line
    holds one record's values in the same key order.

    Args:
        records: Records sharing the same keys

    Returns:
        CSV text, or an empty string when there are no records
    """
    if not records:
        return ""
    return records_to_dataframe(records).to_csv(index=False, lineterminator="\n")


def portfolio_slug(portfolio_id: str) -> str:
    """Lowercase file-name stem for a portfolio id."""
    return re.sub(r"[^a-z0-9]+", "_", portfolio_id.lower()).strip("_") or "portfolio"


def export_filename(portfolio_id: str, scenario: str, slug: str | None = None) -> str:
    """File name for one exported projection, e.g. dca_portfolio_1_mid.csv."""
    return f"dca_{slug or portfolio_slug(portfolio_id)}_{scenario}.csv"


def unique_slugs(portfolio_ids: list[str]) -> dict[str, str]:
    """
    Assign each portfolio a distinct file-name stem.

    Ids such as "Growth Fund" and "growth-fund" slug to the same stem; later
    ones get their 1-based position appended (then a counter) until the stem
    is free.

    Args:
        portfolio_ids: Portfolio ids in display order

    Returns:
        Dictionary mapping portfolio id -> slug
    """
    slugs: dict[str, str] = {}
    taken: set[str] = set()
    for index, portfolio_id in enumerate(portfolio_ids, start=1):
        base = portfolio_slug(portfolio_id)
        slug = base
        n = index
        while slug in taken:
            slug = f"{base}_{n}"
            n += 1
        taken.add(slug)
        slugs[portfolio_id] = slug
    return slugs


def save_projection(
    result: SimulationResult,
    output_path: str | Path,
) -> Path:
    """
    Save projection rows to CSV file.

    Args:
        result: Projection result to save
        output_path: Path for output CSV file

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = projection_to_dataframe(result)
    df.to_csv(output_path, index=False)

    return output_path


def save_summary(
    results: Iterable[SimulationResult],
    output_path: str | Path,
) -> Path:
    """
    Save headline figures for several projections to CSV file.

    Args:
        results: Projection results, one row each
        output_path: Path for output CSV file

    Returns:
        Path to the saved file
    """
    from dca_sim.simulation.metrics import calculate_metrics

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    records = []
    for result in results:
        metrics = calculate_metrics(result)
        records.append({
            "portfolio_id": metrics.portfolio_id,
            "scenario": metrics.scenario,
            "months": metrics.months,
            "total_invested": metrics.total_invested,
            "final_value": metrics.final_value,
            "profit": metrics.profit,
            "roi_pct": metrics.roi_pct,
            "total_cash_dividends": metrics.total_cash_dividends,
        })

    df = pd.DataFrame(records, columns=SUMMARY_SCHEMA.all_columns)
    df.to_csv(output_path, index=False)

    return output_path


def load_projection(file_path: str | Path) -> pd.DataFrame:
    """
    Load an exported projection from CSV file.

    Args:
        file_path: Path to a file written by save_projection

    Returns:
        DataFrame with the fixed columns cast to their schema dtypes

    Raises:
        ExportError: If the file cannot be loaded or is invalid
    """
    df = _load_csv(Path(file_path), PROJECTION_SCHEMA)

    try:
        df = df.astype(PROJECTION_SCHEMA.dtypes)
    except (ValueError, TypeError) as e:
        raise ExportError(f"File {file_path} has invalid column values: {e}")

    return df


def asset_columns(df: pd.DataFrame) -> list[str]:
    """Asset columns of a loaded projection, in file order."""
    fixed = set(PROJECTION_SCHEMA.all_columns)
    return [c for c in df.columns if c not in fixed]


def _load_csv(file_path: Path, schema: FileSchema) -> pd.DataFrame:
    """
    Load a CSV file and validate against schema.

    Args:
        file_path: Path to CSV file
        schema: Expected file schema

    Returns:
        Loaded DataFrame

    Raises:
        ExportError: If file cannot be loaded or has missing columns
    """
    if not file_path.exists():
        raise ExportError(f"File not found: {file_path}")

    try:
        df = pd.read_csv(file_path)
    except Exception as e:
        raise ExportError(f"Failed to load CSV file {file_path}: {e}")

    is_valid, missing = schema.validate_columns(df.columns.tolist())
    if not is_valid:
        raise ExportError(
            f"File {file_path} is missing required columns: {missing}"
        )

    return df
