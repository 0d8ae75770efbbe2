"""Projection propagation engine and its high-level API."""

from projprop.transport.api import (
    RunSummary,
    create_propagator,
    event_rng,
    propagate_event,
    run_events,
)
from projprop.transport.engine import ProjectionPropagator, PropagationResult

__all__ = [
    "ProjectionPropagator",
    "PropagationResult",
    "RunSummary",
    "create_propagator",
    "event_rng",
    "propagate_event",
    "run_events",
]
