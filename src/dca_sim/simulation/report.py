"""
Report generation for projection results.

Generates human-readable markdown reports, JSON metric files and CSV
exports summarizing every portfolio under every scenario.
"""

import json
from datetime import datetime
from pathlib import Path

from dca_sim import __version__
from dca_sim.models import PortfolioConfig, Scenario, SimulationResult
from dca_sim.analytics import calculate_final_drift
from dca_sim.data.export import export_filename, save_projection, save_summary, unique_slugs
from dca_sim.simulation.compare import PortfolioComparison
from dca_sim.simulation.metrics import (
    calculate_metrics,
    format_currency,
    format_percent,
    summarize_assets,
)


def generate_report(
    comparison: PortfolioComparison,
    portfolios: list[PortfolioConfig],
    output_dir: str | Path,
) -> dict[str, Path]:
    """
    Generate complete projection report.

    Creates:
    - run_report.md: Human-readable markdown summary
    - metrics.json: Machine-readable metrics for every projection
    - summary.csv: Headline figures per portfolio and scenario
    - dca_<portfolio>_<scenario>.csv: Sampled rows per projection

    Args:
        comparison: Results for all portfolios and scenarios
        portfolios: Configurations the comparison was run on
        output_dir: Directory to save outputs

    Returns:
        Dictionary mapping output type to file path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}
    all_results = [
        comparison.get_result(portfolio_id, scenario)
        for portfolio_id in comparison.portfolio_ids
        for scenario in Scenario
    ]

    metrics_path = output_dir / "metrics.json"
    with open(metrics_path, "w") as f:
        json.dump([calculate_metrics(r).to_dict() for r in all_results], f, indent=2)
    paths["metrics"] = metrics_path

    paths["summary"] = save_summary(all_results, output_dir / "summary.csv")

    slugs = unique_slugs(comparison.portfolio_ids)
    for result in all_results:
        filename = export_filename(
            result.portfolio_id, result.scenario.value, slug=slugs[result.portfolio_id]
        )
        paths[f"{result.portfolio_id}:{result.scenario.value}"] = save_projection(
            result, output_dir / filename
        )

    report_path = output_dir / "run_report.md"
    with open(report_path, "w") as f:
        f.write(_generate_markdown_report(comparison, portfolios))
    paths["report"] = report_path

    return paths


def _generate_markdown_report(
    comparison: PortfolioComparison,
    portfolios: list[PortfolioConfig],
) -> str:
    """Generate markdown report content."""
    lines = [
        "# DCA Projection Report",
        "",
        f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Portfolios:** {len(portfolios)}",
        "",
    ]

    if len(portfolios) > 1:
        lines.extend([
            "---",
            "",
            "## Comparison",
            "",
            "| Scenario | Highest ROI | Lowest ROI |",
            "|----------|-------------|------------|",
        ])
        for scenario, ranking in comparison.rankings.items():
            lines.append(
                f"| {scenario.value.capitalize()} | {ranking.best or 'N/A'} | {ranking.worst or 'N/A'} |"
            )
        lines.append("")

    for config in portfolios:
        lines.extend(_portfolio_section(comparison, config))

    lines.extend([
        "---",
        "",
        "## Assumptions & Limitations",
        "",
        "1. **Fixed Returns**: Each scenario compounds a constant annual rate; "
        "no volatility or sequence risk is modeled.",
        "",
        "2. **Fees**: Total invested applies the trading fee to the aggregate "
        "contribution, which matches a per-month ledger only while the fee is uniform.",
        "",
        "3. **Taxes**: Only a flat withholding rate on dividends is modeled.",
        "",
        "---",
        "",
        f"*Report generated by dca-sim v{__version__}*",
    ])

    return "\n".join(lines)


def _portfolio_section(
    comparison: PortfolioComparison,
    config: PortfolioConfig,
) -> list[str]:
    lines = [
        "---",
        "",
        f"## {config.portfolio_id}",
        "",
        f"| Setting | Value |",
        f"|---------|-------|",
        f"| Monthly Budget | {format_currency(config.monthly_budget)} |",
        f"| Horizon | {config.total_months} months |",
        f"| Fees | {f'{config.trade_fee_pct}%' if config.enable_fees else 'off'} |",
        f"| Dividends | {_dividend_label(config)} |",
        f"| Rebalancing | {f'every {config.rebalance_frequency} months' if config.enable_rebalancing else 'off'} |",
        "",
        "| Scenario | Invested | Final Value | Profit | ROI | Cash Dividends |",
        "|----------|----------|-------------|--------|-----|----------------|",
    ]

    results = comparison.results[config.portfolio_id]
    for scenario, result in results.items():
        metrics = calculate_metrics(result)
        lines.append(
            f"| {scenario.value.capitalize()} | {format_currency(metrics.total_invested)} | "
            f"{format_currency(metrics.final_value)} | {format_currency(metrics.profit, signed=True)} | "
            f"{format_percent(metrics.roi_pct, signed=True)} | "
            f"{format_currency(metrics.total_cash_dividends)} |"
        )
    lines.append("")

    warnings = results[Scenario.MID].warnings
    if warnings:
        lines.append("**Warnings:**")
        for warning in warnings:
            lines.append(f"- {warning}")
        lines.append("")

    lines.extend(_asset_table(results[Scenario.MID]))
    return lines


def _asset_table(result: SimulationResult) -> list[str]:
    lines = [
        f"### Assets ({result.scenario.value} scenario)",
        "",
        "| Asset | Weight | Invested | Final Value | Profit | ROI | Drift |",
        "|-------|--------|----------|-------------|--------|-----|-------|",
    ]
    drift = {d.name: d for d in calculate_final_drift(result)}
    for summary in summarize_assets(result):
        asset_drift = drift.get(summary.name)
        drift_label = f"{asset_drift.absolute_drift:+.2%}" if asset_drift else "N/A"
        lines.append(
            f"| {summary.name} | {summary.weight:.2%} | {format_currency(summary.invested)} | "
            f"{format_currency(summary.final_value)} | {format_currency(summary.profit, signed=True)} | "
            f"{format_percent(summary.roi_pct, signed=True)} | {drift_label} |"
        )
    lines.append("")
    return lines


def _dividend_label(config: PortfolioConfig) -> str:
    if not config.enable_dividends:
        return "off"
    mode = "reinvested" if config.drip else "paid as cash"
    return f"{config.dividend_yield_pct}% yield, {config.withhold_tax_pct}% withholding, {mode}"


def generate_quick_summary(comparison: PortfolioComparison) -> str:
    """
    Generate a quick text summary for console output.

    Args:
        comparison: Results for all portfolios and scenarios

    Returns:
        Formatted summary string
    """
    lines = []
    for portfolio_id in comparison.portfolio_ids:
        lines.extend([
            f"\n{'='*60}",
            f"  Projection Summary: {portfolio_id}",
            f"{'='*60}",
            "",
        ])
        for scenario, result in comparison.results[portfolio_id].items():
            metrics = calculate_metrics(result)
            lines.extend([
                f"  [{scenario.value.upper()}]",
                f"  Invested:    {format_currency(metrics.total_invested):>16}",
                f"  Final:       {format_currency(metrics.final_value):>16}",
                f"  Profit:      {format_currency(metrics.profit, signed=True):>16}",
                f"  ROI:         {format_percent(metrics.roi_pct, signed=True):>16}",
            ])
            if result.total_cash_dividends:
                lines.append(f"  Cash Divs:   {format_currency(metrics.total_cash_dividends):>16}")
            lines.append("")

        for warning in comparison.results[portfolio_id][Scenario.MID].warnings:
            lines.append(f"  WARNING: {warning}")

    if len(comparison.portfolio_ids) > 1:
        lines.extend([f"\n{'='*60}", "  Best / Worst ROI", f"{'='*60}", ""])
        for scenario, ranking in comparison.rankings.items():
            lines.append(
                f"  {scenario.value.upper():<6} best: {ranking.best or 'N/A'}"
                f"   worst: {ranking.worst or 'N/A'}"
            )

    lines.append(f"{'='*60}\n")

    return "\n".join(lines)
