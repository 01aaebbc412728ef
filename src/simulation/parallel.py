"""
Parallel Execution Utilities for Monte Carlo Simulation
=====================================================

Paths are independent, so a large request can be split into row chunks that
run on a thread pool and are stacked back together in chunk order.
"""

import logging
import traceback
import concurrent.futures
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from src.simulation.models import SimulationRequest, simulate_request
from src.simulation.utils import CPU_COUNT, optimal_chunk_size

# Configure logging
logger = logging.getLogger(__name__)

# Requests with fewer paths than this run inline
MIN_PARALLEL_PATHS = 1000


def split_paths(path_count: int, chunk_size: int) -> List[Tuple[int, int]]:
    """Split ``path_count`` rows into consecutive (start, end) chunks."""
    chunks = []
    start = 0
    while start < path_count:
        end = min(start + chunk_size, path_count)
        chunks.append((start, end))
        start = end
    return chunks


def run_parallel_simulation(request: SimulationRequest, max_workers: Optional[int] = None,
                            seed: Optional[int] = None, show_progress: bool = False) -> np.ndarray:
    """
    Simulate a request by splitting its paths across worker threads.

    Each chunk draws from its own generator spawned from a single seed
    sequence, so a seeded run is reproducible regardless of scheduling.

    Args:
        request: Validated simulation inputs
        max_workers: Maximum number of worker threads
        seed: Optional seed for reproducible runs
        show_progress: Whether to display a progress bar

    Returns:
        Array of shape (path_count, horizon_days)
    """
    seed_sequence = np.random.SeedSequence(seed)

    if max_workers is None:
        max_workers = min(16, CPU_COUNT)

    if request.path_count < MIN_PARALLEL_PATHS or max_workers <= 1:
        return simulate_request(request, np.random.default_rng(seed_sequence))

    chunk_size = optimal_chunk_size(request.path_count, max_workers)
    chunks = split_paths(request.path_count, chunk_size)
    child_seeds = seed_sequence.spawn(len(chunks))

    logger.info(f"Simulating {request.path_count} paths in {len(chunks)} chunks "
                f"on {min(max_workers, len(chunks))} threads")

    results: List[Optional[np.ndarray]] = [None] * len(chunks)

    with concurrent.futures.ThreadPoolExecutor(max_workers=min(max_workers, len(chunks))) as executor:
        futures = {}
        for index, ((start, end), child_seed) in enumerate(zip(chunks, child_seeds)):
            chunk_request = SimulationRequest(
                s0=request.s0, mu=request.mu, sigma=request.sigma,
                horizon_days=request.horizon_days, path_count=end - start
            )
            future = executor.submit(simulate_request, chunk_request, np.random.default_rng(child_seed))
            futures[future] = index

        for future in tqdm(concurrent.futures.as_completed(futures), total=len(futures),
                           desc="Simulating paths", leave=False, disable=not show_progress):
            index = futures[future]
            try:
                results[index] = future.result()
            except Exception as e:
                logger.error(f"Error in simulation chunk {index}: {str(e)}")
                logger.error(traceback.format_exc())
                raise

    return np.vstack(results)
