"""Per-batch diagnostics for the projection propagation.

PropagationTracker collects the quantities that the diagnostic histograms
are filled from:
- drift time and diffusion width of each projected batch
- lateral diffusion offsets
- relocation time of batches diffused out of undepleted regions
- arrival positions on the readout surface
- charge lost per loss channel

One tracker belongs to one event. Trackers of several events are combined
with ``merge``.
"""

from typing import Dict, List, Sequence

import numpy as np

from projprop.core.accounting import CHANNEL_NAMES, LossChannel


class PropagationTracker:
    """Collect per-batch quantities of one or more events."""

    def __init__(self):
        self.batch_charges: List[int] = []
        self.drift_times: List[float] = []
        self.diffusion_sigmas: List[float] = []
        self.offsets_x: List[float] = []
        self.offsets_y: List[float] = []
        self.relocation_times: List[float] = []
        self.arrival_x: List[float] = []
        self.arrival_y: List[float] = []
        self.arrival_charges: List[int] = []
        self.lost_charge = np.zeros(LossChannel.NUM_CHANNELS, dtype=np.int64)

    @property
    def n_batches(self) -> int:
        return len(self.batch_charges)

    @property
    def n_arrivals(self) -> int:
        return len(self.arrival_charges)

    def record_batch(self, charge: int) -> None:
        self.batch_charges.append(int(charge))

    def record_relocation(self, elapsed: float) -> None:
        self.relocation_times.append(float(elapsed))

    def record_drift(self, drift_time: float, sigma: float, dx: float, dy: float) -> None:
        """Record the drift step of a batch that passed the integration cut."""
        self.drift_times.append(float(drift_time))
        self.diffusion_sigmas.append(float(sigma))
        self.offsets_x.append(float(dx))
        self.offsets_y.append(float(dy))

    def record_arrival(self, local_position: Sequence[float], charge: int) -> None:
        self.arrival_x.append(float(local_position[0]))
        self.arrival_y.append(float(local_position[1]))
        self.arrival_charges.append(int(charge))

    def record_loss(self, channel: LossChannel, charge: int) -> None:
        self.lost_charge[int(channel)] += int(charge)

    def merge(self, other: "PropagationTracker") -> "PropagationTracker":
        """Append the records of another tracker; returns self."""
        self.batch_charges.extend(other.batch_charges)
        self.drift_times.extend(other.drift_times)
        self.diffusion_sigmas.extend(other.diffusion_sigmas)
        self.offsets_x.extend(other.offsets_x)
        self.offsets_y.extend(other.offsets_y)
        self.relocation_times.extend(other.relocation_times)
        self.arrival_x.extend(other.arrival_x)
        self.arrival_y.extend(other.arrival_y)
        self.arrival_charges.extend(other.arrival_charges)
        self.lost_charge += other.lost_charge
        return self

    def losses_by_name(self) -> Dict[str, int]:
        return {
            CHANNEL_NAMES[channel]: int(self.lost_charge[channel])
            for channel in LossChannel.channels()
        }

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """All records as numpy arrays, keyed by quantity name."""
        return {
            "batch_charge": np.asarray(self.batch_charges, dtype=np.int64),
            "drift_time": np.asarray(self.drift_times, dtype=np.float64),
            "diffusion_sigma": np.asarray(self.diffusion_sigmas, dtype=np.float64),
            "offset_x": np.asarray(self.offsets_x, dtype=np.float64),
            "offset_y": np.asarray(self.offsets_y, dtype=np.float64),
            "relocation_time": np.asarray(self.relocation_times, dtype=np.float64),
            "arrival_x": np.asarray(self.arrival_x, dtype=np.float64),
            "arrival_y": np.asarray(self.arrival_y, dtype=np.float64),
            "arrival_charge": np.asarray(self.arrival_charges, dtype=np.int64),
            "lost_charge": self.lost_charge.copy(),
        }
