import math
from unittest.mock import patch

import numpy as np
import pytest
import torch

from src.simulation.errors import InvalidParameterError
from src.simulation.models import SimulationRequest, simulate_gbm, simulate_gbm_torch, simulate_request


def test_zero_drift_and_volatility_keeps_every_path_flat():
    paths = simulate_gbm(100, 0, 0, 5, 3)
    assert paths.shape == (3, 5)
    assert np.all(paths == 100)


@pytest.mark.parametrize("horizon_days,path_count", [(1, 1), (2, 7), (30, 50), (252, 3)])
def test_shape_first_column_and_positivity(rng, horizon_days, path_count):
    paths = simulate_gbm(41.95, 0.001, 0.02, horizon_days, path_count, random_source=rng)

    assert paths.shape == (path_count, horizon_days)
    assert np.all(paths[:, 0] == 41.95)
    assert np.all(paths > 0)


def test_single_day_horizon_draws_nothing(fixed_source):
    source = fixed_source(0.5)
    paths = simulate_gbm(100, 0.01, 0.2, 1, 4, random_source=source)

    assert paths.shape == (4, 1)
    assert np.all(paths == 100)
    assert source.calls == []


def test_paths_follow_the_gbm_recursion(fixed_source):
    mu, sigma, z = 0.002, 0.05, 0.5
    source = fixed_source(z)
    paths = simulate_gbm(100, mu, sigma, 4, 2, random_source=source)

    step = (mu - 0.5 * sigma ** 2) + sigma * z
    expected = [100 * math.exp(step * t) for t in range(4)]
    for row in paths:
        assert row == pytest.approx(expected)


def test_draws_are_requested_on_minus_one_to_one(fixed_source):
    source = fixed_source(0.0)
    simulate_gbm(100, 0.0, 0.1, 6, 3, random_source=source)

    assert source.calls == [(-1.0, 1.0, (3, 5))]


def test_log_increments_stay_within_uniform_band(rng):
    mu, sigma = 0.001, 0.1
    paths = simulate_gbm(100, mu, sigma, 50, 200, random_source=rng)

    increments = np.diff(np.log(paths), axis=1)
    drift = mu - 0.5 * sigma ** 2
    assert np.all(increments >= drift - sigma - 1e-9)
    assert np.all(increments <= drift + sigma + 1e-9)


def test_seeded_sources_reproduce_paths():
    first = simulate_gbm(100, 0.0, 0.02, 10, 5, random_source=np.random.default_rng(7))
    second = simulate_gbm(100, 0.0, 0.02, 10, 5, random_source=np.random.default_rng(7))
    np.testing.assert_array_equal(first, second)


def test_paths_are_independent_rows(rng):
    paths = simulate_gbm(100, 0.0, 0.05, 20, 10, random_source=rng)
    assert len({tuple(row) for row in paths}) == 10


@pytest.mark.parametrize("kwargs", [
    dict(horizon_days=0),
    dict(path_count=0),
    dict(s0=0),
    dict(s0=-1.0),
    dict(sigma=-0.1),
    dict(horizon_days=2.5),
    dict(path_count=True),
    dict(mu=float("nan")),
    dict(s0=float("inf")),
])
def test_invalid_parameters_raise(kwargs):
    params = dict(s0=100.0, mu=0.0, sigma=0.01, horizon_days=5, path_count=3)
    params.update(kwargs)
    with pytest.raises(InvalidParameterError):
        simulate_gbm(**params)


def test_request_accepts_numpy_integers():
    request = SimulationRequest(s0=np.float64(10), mu=0, sigma=0, horizon_days=np.int64(3), path_count=np.int32(2))
    assert request.horizon_days == 3
    assert isinstance(request.path_count, int)
    assert request.size == 6


def test_torch_simulation_matches_contract():
    request = SimulationRequest(s0=41.95, mu=0.001, sigma=0.02, horizon_days=12, path_count=6)
    generator = torch.Generator().manual_seed(0)
    paths = simulate_gbm_torch(request, device=torch.device("cpu"), dtype=torch.float64, generator=generator)

    assert paths.shape == (6, 12)
    assert np.all(paths[:, 0] == 41.95)
    assert np.all(paths > 0)
    increments = np.diff(np.log(paths), axis=1)
    assert np.all(np.abs(increments - request.drift) <= request.sigma + 1e-9)


def test_torch_simulation_flat_without_drift_or_volatility():
    request = SimulationRequest(s0=100, mu=0, sigma=0, horizon_days=5, path_count=3)
    paths = simulate_gbm_torch(request, device=torch.device("cpu"), dtype=torch.float64)
    assert np.all(paths == 100)


def test_accelerator_path_used_for_large_unseeded_requests():
    request = SimulationRequest(s0=100, mu=0, sigma=0.01, horizon_days=100, path_count=100)
    sentinel = np.full((100, 100), 100.0)

    with patch("src.simulation.models.DEVICE", torch.device("cuda")), \
         patch("src.simulation.models.simulate_gbm_torch", return_value=sentinel) as mock_torch:
        assert simulate_request(request) is sentinel
        mock_torch.assert_called_once_with(request)


def test_injected_source_bypasses_accelerator(rng):
    request = SimulationRequest(s0=100, mu=0, sigma=0.01, horizon_days=100, path_count=100)

    with patch("src.simulation.models.DEVICE", torch.device("cuda")), \
         patch("src.simulation.models.simulate_gbm_torch") as mock_torch:
        paths = simulate_request(request, rng)

    mock_torch.assert_not_called()
    assert paths.shape == (100, 100)


def test_accelerator_failure_falls_back_to_numpy():
    request = SimulationRequest(s0=100, mu=0, sigma=0.01, horizon_days=100, path_count=100)

    with patch("src.simulation.models.DEVICE", torch.device("cuda")), \
         patch("src.simulation.models.simulate_gbm_torch", side_effect=RuntimeError("no device")):
        paths = simulate_request(request)

    assert paths.shape == (100, 100)
    assert np.all(paths[:, 0] == 100)


def test_torch_simulation_releases_device_memory():
    request = SimulationRequest(s0=100, mu=0, sigma=0.01, horizon_days=5, path_count=3)

    with patch("src.simulation.models.clear_memory_cache") as mock_clear:
        simulate_gbm_torch(request, device=torch.device("cpu"), dtype=torch.float64)

    mock_clear.assert_called_once_with()
