"""
Pipeline
========

Load -> compute -> write for one batch run.

Every load-time check runs before the worker pool starts, and results are
written only after the pool has joined without error, so a failed run
leaves no output files behind.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .config import RunConfig
from .engine.netting import PeakMode
from .engine.workers import ResultSink, WorkDispatcher, WorkerPool, max_parallelism
from .grid.circuit_group import CircuitGroup, CircuitGroupPool
from .io.loaders import (
    check_profile_coverage,
    load_circuit_groups,
    load_demand_profiles,
    load_parcels,
    load_supply_profile,
)
from .io.writers import write_results
from .profiles.store import ProfileStore, SupplyProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedInputs:
    """Validated inputs shared by every worker."""
    supply: SupplyProfile
    store: ProfileStore
    pool: CircuitGroupPool


@dataclass
class RunSummary:
    """Outcome of a completed run."""
    groups: int
    parcels: int
    workers: int
    elapsed_sec: float
    outputs: List[Path] = field(default_factory=list)


def load_inputs(config: RunConfig) -> LoadedInputs:
    """
    Read and cross-validate all inputs.

    Raises:
        FileNotFoundError: an input file is missing
        DataValidationError: any load-time invariant is violated
    """
    logger.info("Loading data...")
    supply = load_supply_profile(config.supply_profile_path, hours=config.hours)
    store = load_demand_profiles(
        config.demand_profile_path, hours=config.hours, show_progress=config.show_progress
    )
    declared = load_circuit_groups(config.circuit_group_path)
    parcels = load_parcels(
        config.parcel_path, policy=config.scrub_policy, show_progress=config.show_progress
    )

    pool = CircuitGroupPool.build(declared, parcels)
    check_profile_coverage(store, pool.usetypes(), supply)
    return LoadedInputs(supply=supply, store=store, pool=pool)


def compute(
    inputs: LoadedInputs,
    *,
    workers: Optional[int] = None,
    peak_mode: PeakMode = PeakMode.EXPORT,
    show_progress: bool = False,
) -> List[CircuitGroup]:
    """
    Run the worker pool over every circuit group.

    Returns groups in completion order.
    """
    pool = inputs.pool
    dispatcher = WorkDispatcher.preloaded(pool.indices())

    sink = ResultSink(capacity=len(pool))
    with tqdm(total=len(pool), desc="Circuit groups", disable=not show_progress) as bar:
        workers_pool = WorkerPool(
            pool,
            inputs.supply,
            inputs.store,
            workers=workers,
            peak_mode=peak_mode,
            progress=bar,
        )
        logger.info("Beginning work on %d circuit groups...", len(pool))
        workers_pool.start(dispatcher, sink)
        results = list(sink)
        workers_pool.join()
    return results


def run(config: RunConfig) -> RunSummary:
    """Execute a full batch run described by the config."""
    start = time.perf_counter()
    inputs = load_inputs(config)

    workers = config.workers or max_parallelism()
    results = compute(
        inputs,
        workers=workers,
        peak_mode=config.peak,
        show_progress=config.show_progress,
    )
    if config.sort_output:
        results.sort(key=lambda g: inputs.pool.index_of(g.group_id))

    outputs = write_results(results, config.results_path, hours=inputs.supply.hours)
    elapsed = time.perf_counter() - start
    logger.info("Elapsed time: %.2fs", elapsed)
    return RunSummary(
        groups=len(results),
        parcels=inputs.pool.parcel_total,
        workers=workers,
        elapsed_sec=elapsed,
        outputs=outputs,
    )
