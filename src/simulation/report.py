# /src/simulation/report.py
"""
Report generation for Monte Carlo simulations.
"""

import logging
import os
from typing import Dict, Any, Optional

from rich.console import Console
from rich.table import Table

from src.simulation.montecarlo import SimulationResult
from src.simulation.summary import Trend
from src.simulation.utils import format_time_horizon

logger = logging.getLogger(__name__)

TREND_SYMBOLS = {
    Trend.UPWARD: "📈 Upward",
    Trend.DOWNWARD: "📉 Downward",
    Trend.STABLE: "↔️ Stable",
}

TREND_MESSAGES = {
    Trend.UPWARD: "Gold prices are expected to rise over the forecast period.",
    Trend.DOWNWARD: "Gold prices are expected to fall during the forecast period.",
    Trend.STABLE: "Gold prices are likely to remain stable throughout the forecast.",
}


def format_price(value: float, currency: str = "JOD") -> str:
    return f"{value:.2f} {currency}" if currency else f"{value:.2f}"


def format_market(result: SimulationResult) -> str:
    """Display name of where the prices came from: "Souq" for a market, the file name for a CSV."""
    if result.market:
        return result.market.capitalize()
    if result.source:
        return os.path.basename(result.source)
    return "n/a"


def build_simulation_report(result: SimulationResult, currency: str = "JOD") -> Dict[str, Any]:
    """
    Build a display-ready report for one simulation run.

    Args:
        result: The simulation run to report on
        currency: Currency label appended to prices

    Returns:
        dict: Formatted summary, final day overview and run details.
    """
    summary = result.summary
    request = result.request
    annual_drift, annual_volatility = result.estimate.annualized()
    probabilities = result.statistics.get("probabilities", {})
    percentiles = result.statistics.get("percentiles", {})

    report = {
        "summary": {
            "market": format_market(result),
            "initial_price": format_price(request.s0, currency),
            "drift": f"{result.estimate.mu:.5f}",
            "volatility": f"{result.estimate.sigma:.5f}",
            "annualized_drift": f"{annual_drift:.4f}",
            "annualized_volatility": f"{annual_volatility:.4f}",
            "trend": TREND_SYMBOLS[summary.trend],
            "outlook": TREND_MESSAGES[summary.trend],
        },
        "final_day": {
            "max_price": format_price(summary.max_final, currency),
            "min_price": format_price(summary.min_final, currency),
            "avg_price": format_price(summary.mean_final, currency),
        },
        "details": {
            "duration": f"{request.horizon_days} days",
            "horizon_label": format_time_horizon(request.horizon_days),
            "paths": str(request.path_count),
            "confidence": f"{result.confidence:g}%" if result.confidence is not None else "n/a",
        },
    }

    if percentiles:
        report["final_day"]["range_p5_p95"] = (
            f"{percentiles['p5']:.2f} - {percentiles['p95']:.2f} {currency}".rstrip()
        )
    if probabilities:
        report["final_day"]["prob_increase"] = f"{probabilities['increase'] * 100:.1f}%"

    return report


def render_simulation_report(report: Dict[str, Any], console: Optional[Console] = None) -> Console:
    """
    Print a simulation report as rich tables.

    Args:
        report: Output of build_simulation_report
        console: Console to print to, a new one if omitted

    Returns:
        The console that was printed to
    """
    console = console or Console()

    sections = [
        ("📊 Simulation Summary", "summary", {
            "market": "Market",
            "initial_price": "Initial Price (S₀)",
            "drift": "Drift (μ)",
            "volatility": "Volatility (σ)",
            "annualized_drift": "Annualized Drift",
            "annualized_volatility": "Annualized Volatility",
            "trend": "Trend",
            "outlook": "Outlook",
        }),
        ("📈 Final Day Price Overview", "final_day", {
            "max_price": "Max Price",
            "min_price": "Min Price",
            "avg_price": "Avg Price",
            "range_p5_p95": "5%-95% Range",
            "prob_increase": "Prob↑",
        }),
        ("🛠 Simulation Details", "details", {
            "duration": "Duration",
            "horizon_label": "Horizon",
            "paths": "Paths",
            "confidence": "Confidence",
        }),
    ]

    for title, key, labels in sections:
        table = Table(title=title)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right", style="green")
        for field, label in labels.items():
            if field in report.get(key, {}):
                table.add_row(label, report[key][field])
        console.print(table)

    return console
