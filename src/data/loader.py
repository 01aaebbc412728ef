"""
Price loader with an explicit lifecycle.

A loader starts NOT_LOADED and only hands out prices once something has been
loaded into it. Asking for prices early raises DataNotReadyError instead of
returning an empty series.
"""

import logging
import os
from enum import Enum
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from markets import get_market_prices
from src.simulation.errors import DataNotReadyError, InsufficientDataError, PriceSourceError
from src.simulation.estimation import as_price_array

logger = logging.getLogger(__name__)

DEFAULT_PRICE_COLUMN = "Price_JOD"


class LoaderState(Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"


class PriceLoader:
    """
    Holds one chronological price series and the state of its loading.
    """

    def __init__(self):
        self._state = LoaderState.NOT_LOADED
        self._prices: Optional[np.ndarray] = None
        self.source: Optional[str] = None
        self.market: Optional[str] = None

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is LoaderState.LOADED

    @property
    def prices(self) -> np.ndarray:
        """The loaded price series as a read-only array."""
        if not self.is_loaded:
            raise DataNotReadyError("Price data not loaded yet")
        return self._prices

    @property
    def last_price(self) -> float:
        """The most recent observed price, used as the simulation's S0."""
        return float(self.prices[-1])

    def load(self, prices: Sequence[float], source: str = "memory",
             market: Optional[str] = None) -> "PriceLoader":
        """
        Load an in-memory price series.

        Args:
            prices: Chronological prices, at least two, all strictly positive
            source: Label describing where the prices came from
            market: Name of the market the prices belong to, if any

        Returns:
            The loader itself, now LOADED
        """
        values = as_price_array(prices).copy()
        values.setflags(write=False)

        self._prices = values
        self._state = LoaderState.LOADED
        self.source = source
        self.market = market
        logger.info(f"Loaded {values.size} prices from {source}")
        return self

    def load_market(self, market: str) -> "PriceLoader":
        """Load the static price table for a named market."""
        key = market.strip().lower()
        return self.load(get_market_prices(key), source=f"market:{key}", market=key)

    def load_csv(self, path: str, column: str = DEFAULT_PRICE_COLUMN) -> "PriceLoader":
        """
        Load prices from a CSV file with a header row.

        Cells in ``column`` that are not numeric are dropped, keeping the
        order of the remaining rows.
        """
        if not os.path.isfile(path):
            raise PriceSourceError(f"Price file not found: {path}")

        try:
            df = pd.read_csv(path)
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            raise PriceSourceError(f"Could not parse price file {path}: {e}") from e

        if column not in df.columns:
            raise PriceSourceError(
                f"Column '{column}' not found in {path}. Available columns: {', '.join(map(str, df.columns))}"
            )

        series = pd.to_numeric(df[column], errors="coerce").dropna()
        dropped = len(df) - len(series)
        if dropped:
            logger.warning(f"Dropped {dropped} non-numeric rows from column '{column}' in {path}")

        if len(series) < 2:
            raise InsufficientDataError(
                f"Price file {path} has {len(series)} usable prices in column '{column}', need at least 2"
            )

        return self.load(series.to_numpy(), source=path)

    def reset(self) -> None:
        """Drop the loaded series and return to NOT_LOADED."""
        self._prices = None
        self._state = LoaderState.NOT_LOADED
        self.source = None
        self.market = None
