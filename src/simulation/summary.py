"""
Summaries of simulated price paths.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any

import numpy as np
from scipy.stats import skew, kurtosis

from src.simulation.errors import InvalidParameterError
from src.simulation.utils import UPWARD_TREND_FACTOR, DOWNWARD_TREND_FACTOR, require_finite

logger = logging.getLogger(__name__)


class Trend(Enum):
    UPWARD = "Upward"
    DOWNWARD = "Downward"
    STABLE = "Stable"


@dataclass(frozen=True)
class SimulationSummary:
    max_final: float
    min_final: float
    mean_final: float
    trend: Trend


def final_prices(matrix: np.ndarray) -> np.ndarray:
    """Return the terminal price of every path (the last column)."""
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise InvalidParameterError(f"Path matrix must be a non-empty 2-D array, got shape {matrix.shape}")
    return matrix[:, -1]


def classify_trend(mean_final: float, s0: float) -> Trend:
    """
    Classify the expected terminal price against the initial price.

    Both bands are strict: a mean of exactly s0 * 1.01 is still Stable.
    """
    if mean_final > s0 * UPWARD_TREND_FACTOR:
        return Trend.UPWARD
    elif mean_final < s0 * DOWNWARD_TREND_FACTOR:
        return Trend.DOWNWARD
    return Trend.STABLE


def summarize(matrix: np.ndarray, s0: float) -> SimulationSummary:
    """
    Reduce a path matrix to terminal price statistics and a trend label.

    Args:
        matrix: Simulated paths, one row per path
        s0: Initial price the paths started from

    Returns:
        SimulationSummary over the final column
    """
    s0 = require_finite("s0", s0)
    finals = final_prices(matrix)

    max_final = float(np.max(finals))
    min_final = float(np.min(finals))
    # Summation rounding can push the mean of near-identical values past the extremes
    mean_final = float(np.clip(np.mean(finals), min_final, max_final))

    return SimulationSummary(
        max_final=max_final,
        min_final=min_final,
        mean_final=mean_final,
        trend=classify_trend(mean_final, s0),
    )


def describe_final_prices(finals: np.ndarray, s0: float) -> Dict[str, Any]:
    """
    Calculate descriptive statistics for the terminal prices.

    Args:
        finals: Terminal price of every path
        s0: Initial price, used for the probability metrics

    Returns:
        Dictionary of statistics, percentiles and probabilities
    """
    finals = np.asarray(finals, dtype=np.float64)
    if finals.size == 0:
        raise InvalidParameterError("Cannot describe an empty set of final prices")

    std = float(np.std(finals))
    percentiles = np.percentile(finals, [5, 25, 50, 75, 95])

    stats = {
        "mean": float(np.mean(finals)),
        "median": float(percentiles[2]),
        "std": std,
        "min": float(np.min(finals)),
        "max": float(np.max(finals)),
        "q1": float(percentiles[1]),
        "q3": float(percentiles[3]),
        # Higher moments are undefined for a degenerate distribution
        "skew": float(skew(finals)) if std > 0 else 0.0,
        "kurtosis": float(kurtosis(finals)) if std > 0 else 0.0,
        "percentiles": {
            "p5": float(percentiles[0]),
            "p50": float(percentiles[2]),
            "p95": float(percentiles[4]),
        },
        "probabilities": {
            "increase": float(np.mean(finals > s0)),
            "up_5pct": float(np.mean(finals > s0 * 1.05)),
            "down_5pct": float(np.mean(finals < s0 * 0.95)),
        },
    }
    return stats
