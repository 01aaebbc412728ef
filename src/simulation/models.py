"""
Geometric Brownian Motion Path Simulation
=========================================

Discrete-time GBM paths driven by a uniform shock on [-1, 1):

    price[t] = price[t-1] * exp((mu - 0.5 * sigma^2) + sigma * Z),  Z ~ U[-1, 1)

The shock is deliberately uniform rather than standard normal, so the tails of
the simulated distribution are thinner than a true Wiener increment would give.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import numpy as np
import torch

from device_coordinator import clear_memory_cache
from src.simulation.errors import InvalidParameterError
from src.simulation.estimation import Estimate
from src.simulation.utils import (
    DEVICE, TORCH_DTYPE, GPU_PATH_THRESHOLD, require_finite, require_positive_int
)

logger = logging.getLogger(__name__)


class UniformSource(Protocol):
    """Anything that draws uniforms on a half-open interval, e.g. numpy.random.Generator."""

    def uniform(self, low: float, high: float, size: Tuple[int, int]) -> np.ndarray:
        ...


@dataclass(frozen=True)
class SimulationRequest:
    """Validated inputs for one path simulation."""

    s0: float
    mu: float
    sigma: float
    horizon_days: int
    path_count: int

    def __post_init__(self):
        s0 = require_finite("s0", self.s0)
        if s0 <= 0:
            raise InvalidParameterError(f"s0 must be > 0, got {s0}")
        sigma = require_finite("sigma", self.sigma)
        if sigma < 0:
            raise InvalidParameterError(f"sigma must be >= 0, got {sigma}")

        object.__setattr__(self, "s0", s0)
        object.__setattr__(self, "mu", require_finite("mu", self.mu))
        object.__setattr__(self, "sigma", sigma)
        object.__setattr__(self, "horizon_days", require_positive_int("horizon_days", self.horizon_days))
        object.__setattr__(self, "path_count", require_positive_int("path_count", self.path_count))

    @classmethod
    def from_estimate(cls, s0: float, estimate: Estimate, horizon_days: int,
                      path_count: int) -> "SimulationRequest":
        return cls(s0=s0, mu=estimate.mu, sigma=estimate.sigma,
                   horizon_days=horizon_days, path_count=path_count)

    @property
    def drift(self) -> float:
        """Ito-corrected per-step drift."""
        return self.mu - 0.5 * self.sigma ** 2

    @property
    def size(self) -> int:
        return self.path_count * self.horizon_days


def simulate_gbm(s0: float, mu: float, sigma: float, horizon_days: int, path_count: int,
                 random_source: Optional[UniformSource] = None) -> np.ndarray:
    """
    Simulate independent GBM price paths.

    Args:
        s0: Initial price, placed in column 0 of every path
        mu: Per-step drift of the log returns
        sigma: Per-step volatility of the log returns
        horizon_days: Number of columns in the output, including day 0
        path_count: Number of independent paths (rows)
        random_source: Uniform generator; a fresh unseeded numpy Generator if omitted

    Returns:
        Array of shape (path_count, horizon_days) of strictly positive prices
    """
    request = SimulationRequest(s0=s0, mu=mu, sigma=sigma,
                                horizon_days=horizon_days, path_count=path_count)
    return simulate_request(request, random_source)


def simulate_request(request: SimulationRequest,
                     random_source: Optional[UniformSource] = None) -> np.ndarray:
    """Simulate the paths described by an already validated request."""
    # An injected source pins the draws to numpy so callers get what they seeded
    if random_source is None and DEVICE.type != 'cpu' and request.size > GPU_PATH_THRESHOLD:
        try:
            return simulate_gbm_torch(request)
        except Exception as e:
            logger.warning(f"GPU simulation failed, falling back to CPU: {e}")

    if random_source is None:
        random_source = np.random.default_rng()

    return _simulate_numpy(request, random_source)


def _simulate_numpy(request: SimulationRequest, random_source: UniformSource) -> np.ndarray:
    paths = np.empty((request.path_count, request.horizon_days), dtype=np.float64)
    paths[:, 0] = request.s0

    steps = request.horizon_days - 1
    if steps == 0:
        return paths

    z = np.asarray(random_source.uniform(-1.0, 1.0, size=(request.path_count, steps)),
                   dtype=np.float64)
    log_increments = request.drift + request.sigma * z
    paths[:, 1:] = request.s0 * np.exp(np.cumsum(log_increments, axis=1))

    return paths


def simulate_gbm_torch(request: SimulationRequest, device: Optional[torch.device] = None,
                       dtype: Optional[torch.dtype] = None,
                       generator: Optional[torch.Generator] = None) -> np.ndarray:
    """
    Torch implementation of the path simulation for accelerator devices.

    Args:
        request: Validated simulation inputs
        device: Torch device, the coordinator's device if omitted
        dtype: Torch dtype, the coordinator's dtype if omitted
        generator: Optional torch generator living on ``device``

    Returns:
        Array of shape (path_count, horizon_days) as float64 numpy
    """
    device = device if device is not None else DEVICE
    dtype = dtype if dtype is not None else TORCH_DTYPE

    steps = request.horizon_days - 1
    paths = np.empty((request.path_count, request.horizon_days), dtype=np.float64)

    if steps > 0:
        # torch.rand is on [0, 1), so this lands on [-1, 1)
        z = torch.rand(request.path_count, steps, device=device, dtype=dtype,
                       generator=generator) * 2 - 1
        log_increments = request.drift + request.sigma * z
        cumulative = torch.cumsum(log_increments, dim=1)
        tail = request.s0 * torch.exp(cumulative)
        paths[:, 1:] = tail.cpu().numpy()

        del z, log_increments, cumulative, tail
        clear_memory_cache()

    # Set after the copy so float32 devices still report S0 exactly
    paths[:, 0] = request.s0
    return paths
