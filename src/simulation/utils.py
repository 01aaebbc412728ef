"""
Utilities for Monte Carlo Simulation
===================================

Shared defaults, device handles and small validation helpers used across the
simulation package.
"""

import os
import math
import numbers
import logging

from device_coordinator import get_device, get_dtype
from src.simulation.errors import InvalidParameterError

# Set up device
DEVICE = get_device()
TORCH_DTYPE = get_dtype()

# Configure logging
logger = logging.getLogger(__name__)
logger.debug(f"Using device: {DEVICE.type.upper()}")

# Use half the CPUs to avoid system overload
CPU_COUNT = max(1, (os.cpu_count() or 4) // 2)

DEFAULT_HORIZON_DAYS = 30
DEFAULT_PATH_COUNT = 100
DEFAULT_CONFIDENCE = 95
TRADING_DAYS_PER_YEAR = 252

# Below this many matrix cells the torch path is not worth the transfer cost
GPU_PATH_THRESHOLD = 5000

# Trend bands around the initial price
UPWARD_TREND_FACTOR = 1.01
DOWNWARD_TREND_FACTOR = 0.99

# Parallel runs: chunks per worker and the smallest chunk worth a thread
CHUNKS_PER_WORKER = 2
MIN_CHUNK_PATHS = 250


def require_positive_int(name: str, value) -> int:
    """
    Validate that a count-like parameter is an integer >= 1.

    Args:
        name: Parameter name used in the error message
        value: Value to validate

    Returns:
        The value as a plain int
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidParameterError(f"{name} must be >= 1, got {value}")
    return int(value)


def require_finite(name: str, value) -> float:
    """Validate that a parameter is a finite real number."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value}")
    return value


def optimal_chunk_size(total_size: int, num_workers: int) -> int:
    """
    Paths per chunk when splitting a run across workers.

    Aims for two chunks per worker, but never goes below MIN_CHUNK_PATHS so
    that thread overhead stays small next to the simulation itself.

    Args:
        total_size: Total number of paths to simulate
        num_workers: Number of available workers

    Returns:
        Number of paths per chunk
    """
    num_workers = max(1, num_workers)
    per_chunk = -(-total_size // (num_workers * CHUNKS_PER_WORKER))
    return max(MIN_CHUNK_PATHS, per_chunk)


def format_time_horizon(days: int) -> str:
    """
    Format a time horizon in days to a human-readable string.

    Args:
        days (int): Number of days.

    Returns:
        str: "1D" for 1 day, "1W" for up to 7 days, "2W" for up to 14 days,
             "1M" for up to 31 days, "3M" for up to 92 days, "6M" for up to
             183 days, "1Y" for up to 366 days, or "<days>D" otherwise.
    """
    if days == 1:
        return "1D"
    elif days <= 7:
        return "1W"
    elif days <= 14:
        return "2W"
    elif days <= 31:
        return "1M"
    elif days <= 92:
        return "3M"
    elif days <= 183:
        return "6M"
    elif days <= 366:
        return "1Y"
    else:
        return f"{days}D"
