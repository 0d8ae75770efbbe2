"""Projection propagation engine.

Projects deposited charge carriers onto the readout surface in one
analytic step per batch:

    batch -> [undepleted: drop, or diffuse to the depletion boundary]
          -> drift time to the surface
          -> integration window cut
          -> lateral diffusion
          -> survival draw
          -> PropagatedCharge

KEY DESIGN PRINCIPLES:
1. SETUP-TIME CHECKS: non-linear fields, magnetic fields and wrong field
   polarity abort construction, never an event
2. EXPLICIT RANDOM STREAM: every draw comes from the generator passed to
   ``propagate``; the engine holds no random state
3. READ-ONLY LOOKUPS: field, mobility and lifetime are fixed after setup
4. EXACT ACCOUNTING: every carrier ends up surviving or in one loss channel

Import Policy:
    from projprop.transport.engine import ProjectionPropagator, PropagationResult

DO NOT use: from projprop.transport.engine import *
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from projprop.config.defaults import FIELD_EPSILON
from projprop.config.simulation_config import SimulationConfig, create_default_config
from projprop.config.validation import (
    ConfigurationError,
    ConfigurationWarning,
    validate_config,
    warn_if_unsafe,
)
from projprop.core.accounting import ChargeLedger, ConservationReport, LossChannel
from projprop.core.detector import SensorGeometry
from projprop.core.objects import (
    CarrierBatch,
    ChargeDeposit,
    PropagatedCharge,
    split_into_batches,
)
from projprop.physics.diffusion import diffusion_sigma, sample_lateral_offset, sample_offset_3d
from projprop.physics.drift import drift_time
from projprop.physics.field import build_field_sampler
from projprop.physics.lifetime import build_lifetime_model
from projprop.physics.mobility import CarrierMobility
from projprop.physics.survival import survives
from projprop.transport.runners.trackers import PropagationTracker

logger = logging.getLogger(__name__)

Point3 = Tuple[float, float, float]


@dataclass
class PropagationResult:
    """Output of one event.

    Attributes:
        charges: Charges arriving at the readout surface (may be empty)
        ledgers: Charge balance per propagated deposit
        report: Event-level charge balance
        tracker: Per-batch diagnostics, only with output_plots enabled
        event_id: Event number, if known

    """

    charges: List[PropagatedCharge]
    ledgers: List[ChargeLedger]
    report: ConservationReport
    tracker: Optional[PropagationTracker] = None
    event_id: Optional[int] = None

    @property
    def total_charge(self) -> int:
        return sum(charge.charge for charge in self.charges)


class ProjectionPropagator:
    """Projects charge deposits of one detector onto its readout surface.

    The propagator is built once per detector configuration and then called
    once per event with that event's random generator.

    Example:
        >>> propagator = ProjectionPropagator(config)
        >>> rng = np.random.default_rng(np.random.SeedSequence([seed, event_id]))
        >>> result = propagator.propagate(deposits, rng)
        >>> print(result.report)

    """

    def __init__(self, config: SimulationConfig | None = None):
        """Set up field, mobility and lifetime lookups.

        Args:
            config: Simulation configuration (SSOT). If None, uses defaults.

        Raises:
            ConfigurationError: If the configuration is invalid, a magnetic
                field is present without ignore_magnetic_field, or the field
                drives the propagated carriers away from the readout surface
            NonLinearFieldError: If the field model is not linear

        """
        if config is None:
            config = create_default_config()

        validate_config(config, raise_on_error=True)
        warn_if_unsafe(config)
        self.config = config

        options = config.propagation
        detector = config.detector

        if detector.has_magnetic_field:
            if not options.ignore_magnetic_field:
                raise ConfigurationError(
                    f"Detector '{detector.name}' has a magnetic field {detector.magnetic_field} T; "
                    "projection propagation does not model Lorentz drift. "
                    "Set ignore_magnetic_field to run anyway."
                )
            message = (
                f"Magnetic field {detector.magnetic_field} T in detector '{detector.name}' "
                "is ignored; Lorentz drift is not simulated"
            )
            logger.warning(message)
            warnings.warn(message, ConfigurationWarning, stacklevel=2)

        self.carrier_type = options.carrier_type
        self.geometry = SensorGeometry.from_config(detector.sensor)

        # Field along the direction this carrier type drifts in
        field = build_field_sampler(detector.electric_field, self.geometry)
        self.field = field.oriented(self.carrier_type.charge_sign)
        self.field.check_polarity(self.carrier_type.label)
        self.field.segments_between(self.field.z_min, self.geometry.top_z)

        self.mobility = CarrierMobility.for_carrier(self.carrier_type, options.temperature)
        self.lifetime_model = build_lifetime_model(detector.doping, self.geometry, self.carrier_type)

        self.charge_per_step = options.charge_per_step
        self.integration_time = options.integration_time
        self.diffuse_deposit = options.diffuse_deposit
        self.output_plots = options.output_plots

        # Undepleted regions diffuse with the zero-field mobility over the full window
        self._undepleted_sigma = diffusion_sigma(
            self.mobility.diffusion_constant(0.0), self.integration_time,
        )

        logger.info(
            f"Propagating {self.carrier_type.label}s in '{detector.name}' at "
            f"{options.temperature:.2f} K: mu_0={self.mobility.mu_0:.1f} cm^2/Vs, "
            f"E_c={self.mobility.critical_field:.1f} V/cm, "
            f"{self.charge_per_step} carriers per step, "
            f"integration time {self.integration_time:.2f} ns"
        )

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    def propagate(
        self,
        deposits: Iterable[ChargeDeposit],
        rng: np.random.Generator,
        event_id: Optional[int] = None,
    ) -> PropagationResult:
        """Project all deposits of one event.

        Deposits of the carrier type that is not propagated are skipped.

        Args:
            deposits: Deposits of one event, in deposition order
            rng: The event's random generator
            event_id: Event number for bookkeeping

        Returns:
            PropagationResult with propagated charges and charge balance

        """
        tracker = PropagationTracker() if self.output_plots else None
        charges: List[PropagatedCharge] = []
        ledgers: List[ChargeLedger] = []

        for index, deposit in enumerate(deposits):
            if deposit.carrier_type != self.carrier_type:
                continue

            ledger = ChargeLedger(deposit_index=index, deposited=deposit.charge)
            for batch in split_into_batches(deposit, self.charge_per_step):
                ledger.n_batches += 1
                propagated = self._propagate_batch(batch, deposit, index, rng, ledger, tracker)
                if propagated is not None:
                    charges.append(propagated)
            ledgers.append(ledger)

        report = ConservationReport.from_ledgers(ledgers)
        logger.debug(
            f"Event {event_id}: {len(charges)} propagated charges from "
            f"{report.n_deposits} deposits. {report}"
        )
        return PropagationResult(
            charges=charges, ledgers=ledgers, report=report, tracker=tracker, event_id=event_id,
        )

    def _propagate_batch(
        self,
        batch: CarrierBatch,
        deposit: ChargeDeposit,
        deposit_index: int,
        rng: np.random.Generator,
        ledger: ChargeLedger,
        tracker: Optional[PropagationTracker],
    ) -> Optional[PropagatedCharge]:
        """Run one batch through the pipeline; None if it is lost."""
        if tracker is not None:
            tracker.record_batch(batch.charge)

        x, y, z = batch.local_position
        time = batch.time

        # Deposits outside the sensor volume see no field and never relocate
        if not self.geometry.is_within_sensor(batch.local_position):
            self._record_loss(LossChannel.UNDEPLETED, batch.charge, ledger, tracker)
            return None

        if self.field.sample(z) is None:
            relocated = self._diffuse_to_depletion(x, y, z, rng) if self.diffuse_deposit else None
            if relocated is None:
                self._record_loss(LossChannel.UNDEPLETED, batch.charge, ledger, tracker)
                return None
            (x, y, z), elapsed = relocated
            time += elapsed
            if tracker is not None:
                tracker.record_relocation(elapsed)

        drift = self.time_to_surface(z)
        time += drift

        # A batch arriving exactly at the end of the window is still integrated
        if time > self.integration_time:
            self._record_loss(LossChannel.MISSED_INTEGRATION, batch.charge, ledger, tracker)
            return None

        sigma = diffusion_sigma(self.mobility.diffusion_constant(self.field_at(z)), drift)
        dx, dy = sample_lateral_offset(rng, sigma)
        if tracker is not None:
            tracker.record_drift(drift, sigma, dx, dy)

        if not survives(rng, drift, self.lifetime_model.lifetime(z)):
            self._record_loss(LossChannel.RECOMBINED, batch.charge, ledger, tracker)
            return None

        local_position = (x + dx, y + dy, self.geometry.top_z)
        elapsed_total = time - deposit.local_time

        ledger.record_surviving(batch.charge)
        if tracker is not None:
            tracker.record_arrival(local_position, batch.charge)

        return PropagatedCharge(
            local_position=local_position,
            global_position=self.geometry.local_to_global(local_position),
            carrier_type=batch.carrier_type,
            charge=batch.charge,
            local_time=time,
            global_time=deposit.global_time + elapsed_total,
            deposit_index=deposit_index,
            track_id=deposit.track_id,
        )

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def field_at(self, z: float) -> float:
        """Field along the drift direction at z (V/cm), zero if undepleted."""
        segment = self.field.segment_at(z)
        if segment is None:
            return 0.0
        return segment.field_at(z)

    def time_to_surface(self, z: float) -> float:
        """Drift time (ns) from z to the readout surface.

        Infinite if the field vanishes at z, which happens on the edge of a
        partially depleted sensor.
        """
        if self.field_at(z) < FIELD_EPSILON:
            return math.inf

        total = 0.0
        for segment, start, end in self.field.segments_between(z, self.geometry.top_z):
            total += drift_time(
                start, end, segment, self.mobility.mu_0, self.mobility.critical_field,
            )
        return total

    def _diffuse_to_depletion(
        self,
        x: float,
        y: float,
        z: float,
        rng: np.random.Generator,
    ) -> Optional[Tuple[Point3, float]]:
        """Diffuse a batch from an undepleted position into the depleted region.

        One 3D Gaussian step of width sqrt(2 D_0 t_int) is drawn. By the
        reflection principle the walk reaches the boundary at distance d
        within the window iff |dz| >= d, after t_int * (d / dz)^2; the
        lateral offset is scaled to that time. The batch enters the depleted
        region by the overshoot |dz| - d instead of drifting from
        the zero-field edge of an underdepleted sensor.

        Returns:
            ((x, y, z) inside the depleted region, elapsed time in ns), or
            None if the batch does not reach the depleted region in time

        """
        boundary = self.field.depletion_boundary(z)
        if boundary is None:
            return None

        dx, dy, dz = sample_offset_3d(rng, self._undepleted_sigma)
        distance = boundary - z
        if abs(dz) < distance:
            return None

        scale = distance / abs(dz) if dz else 0.0
        elapsed = self.integration_time * scale * scale
        entry = min(boundary + abs(dz) - distance, self.geometry.top_z)
        return (x + dx * scale, y + dy * scale, entry), elapsed

    @staticmethod
    def _record_loss(
        channel: LossChannel,
        charge: int,
        ledger: ChargeLedger,
        tracker: Optional[PropagationTracker],
    ) -> None:
        ledger.record_loss(channel, charge)
        if tracker is not None:
            tracker.record_loss(channel, charge)
