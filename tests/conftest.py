import numpy as np
import pytest

from src.data.loader import PriceLoader


class FixedUniformSource:
    """Uniform source that always returns the same draw and records its calls."""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def uniform(self, low, high, size):
        self.calls.append((low, high, size))
        return np.full(size, self.value, dtype=np.float64)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def constant_prices():
    return [100.0, 100.0, 100.0]


@pytest.fixture
def souq_prices():
    return [41.25, 41.30, 41.50, 41.60, 41.45, 41.80, 41.90, 42.00]


@pytest.fixture
def loaded_loader(souq_prices):
    return PriceLoader().load(souq_prices, source="test")


@pytest.fixture
def fixed_source():
    return FixedUniformSource
