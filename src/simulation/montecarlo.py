"""
Monte Carlo Price Simulator
===========================

Ties the pieces together: estimate drift and volatility from the loaded price
history, simulate GBM paths from the last observed price, then summarize the
terminal distribution.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np

from src.data.loader import PriceLoader
from src.simulation.errors import InvalidParameterError
from src.simulation.estimation import Estimate, PriceSeries, as_price_array, estimate
from src.simulation.models import SimulationRequest, UniformSource, simulate_request
from src.simulation.parallel import run_parallel_simulation
from src.simulation.summary import SimulationSummary, describe_final_prices, final_prices, summarize
from src.simulation.utils import (
    DEFAULT_CONFIDENCE, DEFAULT_HORIZON_DAYS, DEFAULT_PATH_COUNT, require_finite, require_positive_int
)

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunParameters:
    """
    User-facing parameters of a simulation run.

    ``confidence`` is carried through to the report only; no statistic uses it.
    """

    horizon_days: int = DEFAULT_HORIZON_DAYS
    path_count: int = DEFAULT_PATH_COUNT
    confidence: Optional[float] = DEFAULT_CONFIDENCE

    def __post_init__(self):
        object.__setattr__(self, "horizon_days", require_positive_int("horizon_days", self.horizon_days))
        object.__setattr__(self, "path_count", require_positive_int("path_count", self.path_count))
        if self.confidence is not None:
            confidence = require_finite("confidence", self.confidence)
            if not 0 < confidence <= 100:
                raise InvalidParameterError(f"confidence must be in (0, 100], got {confidence}")
            object.__setattr__(self, "confidence", confidence)


@dataclass
class SimulationResult:
    """Everything one simulation run produced."""

    estimate: Estimate
    request: SimulationRequest
    paths: np.ndarray
    summary: SimulationSummary
    statistics: Dict[str, Any] = field(default_factory=dict)
    confidence: Optional[float] = None
    market: Optional[str] = None
    source: Optional[str] = None

    @property
    def s0(self) -> float:
        return self.request.s0


def run_simulation(prices: PriceSeries, horizon_days: int, path_count: int,
                   confidence: Optional[float] = None,
                   random_source: Optional[UniformSource] = None,
                   seed: Optional[int] = None,
                   max_workers: Optional[int] = None,
                   market: Optional[str] = None,
                   source: Optional[str] = None) -> SimulationResult:
    """
    Run the full estimate -> simulate -> summarize chain on a price series.

    Args:
        prices: Chronological price history; its last value is S0
        horizon_days: Number of simulated days, including day 0
        path_count: Number of simulated paths
        confidence: Display-only confidence percentage
        random_source: Uniform generator for single-threaded runs
        seed: Seed for the chunked parallel runner, ignored when random_source is given
        max_workers: Worker threads for the chunked runner
        market: Name of the market the prices belong to, if any
        source: Label describing where the prices came from

    Returns:
        SimulationResult for this run
    """
    values = as_price_array(prices)
    fitted = estimate(values)
    s0 = float(values[-1])

    request = SimulationRequest.from_estimate(s0, fitted, horizon_days, path_count)

    logger.info(f"Current price: {s0:.2f}")
    logger.info(f"Daily drift: {fitted.mu:.5f}")
    logger.info(f"Daily volatility: {fitted.sigma:.5f}")
    logger.info(f"Running {request.path_count} simulations for {request.horizon_days}-day horizon")

    if random_source is not None:
        paths = simulate_request(request, random_source)
    elif seed is not None or max_workers is not None:
        paths = run_parallel_simulation(request, max_workers=max_workers, seed=seed)
    else:
        paths = simulate_request(request)

    summary = summarize(paths, s0)
    statistics = describe_final_prices(final_prices(paths), s0)

    return SimulationResult(
        estimate=fitted,
        request=request,
        paths=paths,
        summary=summary,
        statistics=statistics,
        confidence=confidence,
        market=market,
        source=source,
    )


class MonteCarloSimulator:
    """
    Runs simulations against the series held by a PriceLoader.

    The simulator keeps no results between runs; every call to ``run``
    returns a fresh SimulationResult.
    """

    def __init__(self, loader: PriceLoader, random_source: Optional[UniformSource] = None,
                 random_seed: Optional[int] = None, max_workers: Optional[int] = None):
        """
        Initialize the Monte Carlo simulator.

        Args:
            loader: Price loader supplying the history
            random_source: Uniform generator injected into every run
            random_seed: Seed for reproducible chunked runs
            max_workers: Maximum number of threads for chunked runs
        """
        self.loader = loader
        self.random_source = random_source
        self.random_seed = random_seed
        self.max_workers = max_workers

    def calibrate(self) -> Estimate:
        """Estimate drift and volatility from the loaded history."""
        fitted = estimate(self.loader.prices)
        logger.info(f"Model calibration from {self.loader.source} completed successfully.")
        return fitted

    def run(self, params: Optional[RunParameters] = None) -> SimulationResult:
        """Run one simulation with the given parameters."""
        if params is None:
            params = RunParameters()

        return run_simulation(
            self.loader.prices,
            horizon_days=params.horizon_days,
            path_count=params.path_count,
            confidence=params.confidence,
            random_source=self.random_source,
            seed=self.random_seed,
            max_workers=self.max_workers,
            market=self.loader.market,
            source=self.loader.source,
        )
