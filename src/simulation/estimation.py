"""
Drift and Volatility Estimation
===============================

Turns a historical price series into the per-step drift (mu) and volatility
(sigma) consumed by the path simulator. Both are first-order moments of the
log returns.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
import pandas as pd

from src.simulation.errors import InsufficientDataError, InvalidParameterError
from src.simulation.utils import TRADING_DAYS_PER_YEAR

logger = logging.getLogger(__name__)

PriceSeries = Union[Sequence[float], np.ndarray, pd.Series]


@dataclass(frozen=True)
class Estimate:
    """Per-step drift and volatility of a price series."""

    mu: float
    sigma: float

    def annualized(self, trading_days: int = TRADING_DAYS_PER_YEAR) -> Tuple[float, float]:
        """Scale the per-step moments to a yearly horizon."""
        return self.mu * trading_days, self.sigma * float(np.sqrt(trading_days))


def as_price_array(prices: PriceSeries) -> np.ndarray:
    """
    Convert a price series into a validated float64 array.

    Raises:
        InsufficientDataError: fewer than two prices
        InvalidParameterError: any price is non-finite or not strictly positive
    """
    if isinstance(prices, pd.Series):
        prices = prices.to_numpy()
    values = np.asarray(prices, dtype=np.float64).ravel()

    if values.size < 2:
        raise InsufficientDataError(
            f"At least 2 prices are needed to compute a log return, got {values.size}"
        )
    if not np.all(np.isfinite(values)) or np.any(values <= 0):
        raise InvalidParameterError("Price series must contain only finite, strictly positive values")

    return values


def log_returns(prices: PriceSeries) -> np.ndarray:
    """Compute r[i] = ln(prices[i] / prices[i-1]) for i = 1..n-1."""
    values = as_price_array(prices)
    return np.log(values[1:] / values[:-1])


def estimate(prices: PriceSeries) -> Estimate:
    """
    Estimate drift and volatility from a chronological price series.

    Both moments are population moments: sigma divides by n, not n - 1.

    Args:
        prices: Chronological prices, at least two, all strictly positive

    Returns:
        Estimate with the mean and standard deviation of the log returns
    """
    returns = log_returns(prices)

    mu = float(np.mean(returns))
    sigma = float(np.std(returns, ddof=0))

    logger.debug(f"Estimated mu={mu:.6f}, sigma={sigma:.6f} from {returns.size} log returns")
    return Estimate(mu=mu, sigma=sigma)
