"""
Command-line interface for the DCA projection simulator.

Provides commands for:
- init-config: Write a default portfolio configuration
- project: Project portfolios under all scenarios and write a report
- compare: Rank several portfolios by ROI per scenario
- export: Save one projection's rows as CSV
- normalize: Rescale allocations to 100%
- share / unshare: Convert configurations to and from share links
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from dca_sim import __version__
from dca_sim.config import (
    ConfigurationError,
    create_default_config,
    load_portfolios,
    write_portfolios,
)
from dca_sim.models import PortfolioConfig, SamplingMode, Scenario
from dca_sim.analytics import allocation_is_balanced, normalize_allocations, total_allocation
from dca_sim.data import ExportError, save_projection
from dca_sim.data.export import export_filename
from dca_sim.logging import get_logger
from dca_sim.sharing import (
    ShareLinkError,
    build_share_url,
    encode_portfolios,
    token_from_url,
)
from dca_sim.sharing.codec import decode_portfolios_strict
from dca_sim.simulation import compare_portfolios, generate_report, simulate
from dca_sim.simulation.report import generate_quick_summary


def _load(config: str) -> list[PortfolioConfig]:
    """Load portfolios from a YAML file, exiting on configuration errors."""
    try:
        return load_portfolios(config)
    except ConfigurationError as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="dca-sim")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """
    DCA Projection Simulator.

    Projects Dollar-Cost-Averaging plans for multi-asset portfolios under
    low, mid and high fixed-return scenarios.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


@main.command("init-config")
@click.option(
    "--output", "-o",
    required=True,
    type=click.Path(),
    help="Path of the YAML file to write",
)
@click.option(
    "--portfolio-id", "-i",
    default="Portfolio 1",
    help="Portfolio identifier",
)
def init_config(output: str, portfolio_id: str):
    """
    Write a default portfolio configuration.

    The file contains the default budget, horizon and asset mix and can be
    edited before running a projection.
    """
    create_default_config(portfolio_id=portfolio_id, output_path=output)
    click.echo(f"Configuration written: {output}")


@main.command()
@click.option(
    "--config", "-c",
    required=True,
    type=click.Path(exists=True),
    help="Path to portfolio configuration YAML file",
)
@click.option(
    "--output-dir", "-o",
    type=click.Path(),
    default=None,
    help="Output directory. Defaults to the first portfolio's output_dir.",
)
@click.option(
    "--monthly", is_flag=True,
    help="Record every month instead of year boundaries",
)
def project(config: str, output_dir: Optional[str], monthly: bool):
    """
    Project portfolios under all scenarios.

    Writes a markdown report, metrics JSON, a summary CSV and one CSV per
    portfolio and scenario.
    """
    portfolios = _load(config)
    sampling = SamplingMode.MONTHLY if monthly else SamplingMode.YEARLY

    out_dir = Path(output_dir or portfolios[0].output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    logger = get_logger(out_dir / "decision_log.jsonl")
    logger.log_config_loaded(portfolios, config)

    try:
        comparison = compare_portfolios(portfolios, sampling=sampling)
    except ValueError as e:
        click.echo(f"Error running projection: {e}", err=True)
        sys.exit(1)

    for portfolio_id in comparison.portfolio_ids:
        for result in comparison.results[portfolio_id].values():
            logger.log_projection_run(result)

    paths = generate_report(comparison, portfolios, out_dir)

    click.echo(generate_quick_summary(comparison))
    click.echo(f"Report saved: {paths['report']}")
    click.echo(f"Metrics saved: {paths['metrics']}")
    click.echo(f"Summary saved: {paths['summary']}")


@main.command()
@click.option(
    "--config", "-c",
    required=True,
    type=click.Path(exists=True),
    help="Path to a YAML file with a portfolios list",
)
@click.option(
    "--output-dir", "-o",
    type=click.Path(),
    default=None,
    help="Directory for the decision log. Defaults to the first portfolio's output_dir.",
)
def compare(config: str, output_dir: Optional[str]):
    """
    Rank portfolios by ROI for each scenario.

    Ties keep the portfolio listed first. Portfolios with nothing invested
    have an undefined ROI and are left out of the ranking.
    """
    portfolios = _load(config)

    out_dir = Path(output_dir or portfolios[0].output_dir)
    logger = get_logger(out_dir / "decision_log.jsonl")
    logger.log_config_loaded(portfolios, config)

    try:
        comparison = compare_portfolios(portfolios)
    except ValueError as e:
        click.echo(f"Error comparing portfolios: {e}", err=True)
        sys.exit(1)

    logger.log_portfolios_compared(comparison)

    click.echo(generate_quick_summary(comparison))


@main.command()
@click.option(
    "--config", "-c",
    required=True,
    type=click.Path(exists=True),
    help="Path to portfolio configuration YAML file",
)
@click.option(
    "--scenario", "-s",
    type=click.Choice([s.value for s in Scenario]),
    default=Scenario.MID.value,
    help="Scenario to export",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Output CSV path. Defaults to <output_dir>/dca_<portfolio>_<scenario>.csv",
)
@click.option(
    "--monthly", is_flag=True,
    help="Record every month instead of year boundaries",
)
def export(config: str, scenario: str, output: Optional[str], monthly: bool):
    """
    Export one portfolio's projection rows as CSV.

    Uses the first portfolio in the configuration file.
    """
    portfolio = _load(config)[0]
    sampling = SamplingMode.MONTHLY if monthly else SamplingMode.YEARLY

    result = simulate(portfolio, scenario, sampling=sampling)

    output_path = Path(output) if output else (
        Path(portfolio.output_dir) / export_filename(portfolio.portfolio_id, scenario)
    )
    try:
        save_projection(result, output_path)
    except (OSError, ExportError) as e:
        click.echo(f"Error writing export: {e}", err=True)
        sys.exit(1)

    logger = get_logger(output_path.parent / "decision_log.jsonl")
    logger.log_projection_exported(result, output_path)

    click.echo(f"Exported {len(result.rows)} rows: {output_path}")


@main.command()
@click.option(
    "--config", "-c",
    required=True,
    type=click.Path(exists=True),
    help="Path to portfolio configuration YAML file",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Where to write the normalized config. Defaults to overwriting --config.",
)
def normalize(config: str, output: Optional[str]):
    """
    Rescale asset allocations so they add up to 100%.

    Each portfolio in the file is rescaled independently. Portfolios whose
    allocations sum to 0% are left unchanged.
    """
    portfolios = _load(config)
    changed = False

    for portfolio in portfolios:
        before = list(portfolio.assets)
        total = total_allocation(before)
        click.echo(f"{portfolio.portfolio_id}: allocation total {total:.1f}%")

        if total == 0:
            click.echo("  Allocations sum to 0%; nothing to normalize.")
            continue
        if allocation_is_balanced(before):
            click.echo("  Allocations already add up to 100%.")
            continue

        portfolio.assets = normalize_allocations(before)
        changed = True

        logger = get_logger(Path(portfolio.output_dir) / "decision_log.jsonl")
        logger.log_allocation_normalized(portfolio.portfolio_id, before, portfolio.assets)

        for asset in portfolio.assets:
            click.echo(f"  {asset.name}: {asset.alloc_pct:.2f}%")

    if not changed:
        return

    output_path = Path(output or config)
    write_portfolios(portfolios, output_path)
    click.echo(f"Configuration written: {output_path}")


@main.command()
@click.option(
    "--config", "-c",
    required=True,
    type=click.Path(exists=True),
    help="Path to portfolio configuration YAML file",
)
@click.option(
    "--base-url", "-u",
    default=None,
    help="Page URL to attach the token to. Prints the bare token if omitted.",
)
def share(config: str, base_url: Optional[str]):
    """Print a share token (or URL) for the configured portfolios."""
    portfolios = _load(config)
    if base_url:
        click.echo(build_share_url(base_url, portfolios))
    else:
        click.echo(encode_portfolios(portfolios))


@main.command()
@click.argument("token_or_url")
@click.option(
    "--output", "-o",
    required=True,
    type=click.Path(),
    help="Path of the YAML file to write",
)
def unshare(token_or_url: str, output: str):
    """
    Decode a share token or URL back into a configuration file.

    Links carrying several portfolios produce a `portfolios:` list.
    """
    token = token_from_url(token_or_url) if "#" in token_or_url else token_or_url
    try:
        portfolios = decode_portfolios_strict(token or "")
    except ShareLinkError as e:
        click.echo(f"Error decoding share link: {e}", err=True)
        sys.exit(1)

    write_portfolios(portfolios, output)
    click.echo(f"Configuration written: {output} ({len(portfolios)} portfolio(s))")


if __name__ == "__main__":
    main()
