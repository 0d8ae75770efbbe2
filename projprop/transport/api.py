"""
High-Level API for projection propagation

This module provides a convenient Python API for propagating the charge
deposits of one or many events.

Each event draws from its own generator, seeded from the run seed and the
event id, so results do not depend on the order or the process in which
events are handled.

Import Policy:
    from projprop.transport.api import propagate_event, run_events
    # Or use CLI: projprop run --config detector.yaml --deposits deposits.csv

DO NOT use: from projprop.transport.api import *
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from multiprocessing import Pool
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from projprop.config import SimulationConfig, create_validated_config
from projprop.core.accounting import ConservationReport
from projprop.core.objects import ChargeDeposit
from projprop.transport.engine import ProjectionPropagator, PropagationResult
from projprop.transport.runners.trackers import PropagationTracker

logger = logging.getLogger(__name__)

# Per-process propagator of run_events worker pools
_worker_propagator: Optional[ProjectionPropagator] = None


@dataclass
class RunSummary:
    """Results of a multi-event run.

    Attributes:
        results: One PropagationResult per event, ordered by event id
        report: Charge balance summed over all events
        tracker: Merged diagnostics (only with output_plots enabled)
        runtime_seconds: Wall-clock time of the run

    """

    results: List[PropagationResult]
    report: ConservationReport = field(default_factory=ConservationReport)
    tracker: Optional[PropagationTracker] = None
    runtime_seconds: float = 0.0

    @property
    def n_events(self) -> int:
        return len(self.results)

    @property
    def conservation_valid(self) -> bool:
        return self.report.is_valid


def event_rng(seed: int, event_id: int) -> np.random.Generator:
    """Independent random generator of one event."""
    return np.random.default_rng(np.random.SeedSequence([seed, event_id]))


def create_propagator(config: Optional[SimulationConfig] = None, **overrides) -> ProjectionPropagator:
    """Create a propagator from a config, or from defaults plus overrides.

    Example:
        >>> propagator = create_propagator(charge_per_step=5, bias_voltage=-150.0)
    """
    if config is None:
        config = create_validated_config(**overrides)
    elif overrides:
        raise ValueError("Pass either a config or keyword overrides, not both")
    return ProjectionPropagator(config)


def propagate_event(
    deposits: Iterable[ChargeDeposit],
    config: Optional[SimulationConfig] = None,
    seed: int = 0,
    event_id: int = 0,
    propagator: Optional[ProjectionPropagator] = None,
) -> PropagationResult:
    """Propagate the deposits of a single event.

    Args:
        deposits: Charge deposits of the event
        config: Simulation configuration (ignored if a propagator is given)
        seed: Run seed
        event_id: Event number, combined with the seed for the event's generator
        propagator: Reuse an existing propagator instead of building one

    Returns:
        PropagationResult of the event

    Example:
        >>> result = propagate_event(deposits, config, seed=42, event_id=7)
        >>> print(result.report)
    """
    if propagator is None:
        propagator = ProjectionPropagator(config)
    return propagator.propagate(deposits, event_rng(seed, event_id), event_id=event_id)


def _init_worker(config: SimulationConfig) -> None:
    global _worker_propagator
    _worker_propagator = ProjectionPropagator(config)


def _propagate_event_static(
    deposits: Sequence[ChargeDeposit],
    seed: int,
    event_id: int,
) -> PropagationResult:
    """Propagate one event (parallel worker)."""
    return _worker_propagator.propagate(deposits, event_rng(seed, event_id), event_id=event_id)


def run_events(
    events: Mapping[int, Sequence[ChargeDeposit]] | Sequence[Sequence[ChargeDeposit]],
    config: Optional[SimulationConfig] = None,
    seed: int = 0,
    n_workers: int = 1,
) -> RunSummary:
    """Propagate many events, optionally in worker processes.

    Args:
        events: Deposits per event, either a mapping of event id to deposits
            or a sequence indexed by event id
        config: Simulation configuration (defaults if None)
        seed: Run seed
        n_workers: Number of worker processes (1 runs in-process, -1 for all CPUs)

    Returns:
        RunSummary with per-event results ordered by event id

    Example:
        >>> summary = run_events({0: deposits_a, 1: deposits_b}, config, seed=42, n_workers=4)
        >>> print(f"Conservation valid: {summary.conservation_valid}")
    """
    if not isinstance(events, Mapping):
        events = dict(enumerate(events))
    tasks: List[Tuple[Sequence[ChargeDeposit], int, int]] = [
        (list(deposits), seed, int(event_id)) for event_id, deposits in sorted(events.items())
    ]

    start_time = time.time()
    propagator = ProjectionPropagator(config)

    if n_workers == -1:
        n_workers = None
    if n_workers == 1 or len(tasks) <= 1:
        results = [
            propagator.propagate(deposits, event_rng(event_seed, event_id), event_id=event_id)
            for deposits, event_seed, event_id in tasks
        ]
    else:
        logger.info(f"Propagating {len(tasks)} events with {n_workers or 'all'} worker processes")
        with Pool(processes=n_workers, initializer=_init_worker, initargs=(propagator.config,)) as pool:
            results = pool.starmap(_propagate_event_static, tasks)

    report = ConservationReport()
    tracker = PropagationTracker() if propagator.output_plots else None
    for result in results:
        report = report.merge(result.report)
        if tracker is not None and result.tracker is not None:
            tracker.merge(result.tracker)

    runtime = time.time() - start_time
    logger.info(f"Propagated {len(results)} events in {runtime:.3f} s. {report}")
    if not report.is_valid:
        logger.error("Charge balance check failed")

    return RunSummary(results=results, report=report, tracker=tracker, runtime_seconds=runtime)


def results_by_event(summary: RunSummary) -> Dict[int, PropagationResult]:
    """Index the results of a run by event id."""
    return {result.event_id: result for result in summary.results}


__all__ = [
    "RunSummary",
    "event_rng",
    "create_propagator",
    "propagate_event",
    "run_events",
    "results_by_event",
]
