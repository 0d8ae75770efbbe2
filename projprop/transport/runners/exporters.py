"""Import and export of propagation data.

This module provides functions for reading input deposits and writing results:
- CSV files of input deposits (one row per deposit)
- CSV files of propagated charges (one row per surviving batch)
- HDF5 files with one group per event
- Charge balance summary per event
"""

import csv
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import h5py
import numpy as np

from projprop.core.accounting import CHANNEL_NAMES, LossChannel
from projprop.core.objects import CarrierType, ChargeDeposit

PathLike = Union[str, Path]

DEPOSIT_COLUMNS = [
    "event",
    "local_x", "local_y", "local_z",
    "global_x", "global_y", "global_z",
    "carrier",
    "charge",
    "local_time",
    "global_time",
    "track_id",
]

PROPAGATED_COLUMNS = [
    "event",
    "local_x", "local_y", "local_z",
    "global_x", "global_y", "global_z",
    "carrier",
    "charge",
    "local_time",
    "global_time",
    "deposit_index",
    "track_id",
]


def _parse_carrier(value: str) -> CarrierType:
    try:
        return CarrierType[value.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown carrier type '{value}', expected 'electron' or 'hole'") from None


def load_deposits_csv(filename: PathLike) -> Dict[int, List[ChargeDeposit]]:
    """Read charge deposits grouped by event.

    Required columns are the local and global position, ``carrier``
    (electron or hole) and ``charge``. ``event``, ``local_time``,
    ``global_time`` and ``track_id`` are optional; rows without an event
    number belong to event 0.

    Returns:
        Deposits per event id, in file order within each event
    """
    events: Dict[int, List[ChargeDeposit]] = defaultdict(list)
    with open(filename, "r", newline="") as f:
        reader = csv.DictReader(f)
        for line, row in enumerate(reader, start=2):
            try:
                deposit = ChargeDeposit(
                    local_position=(float(row["local_x"]), float(row["local_y"]), float(row["local_z"])),
                    global_position=(float(row["global_x"]), float(row["global_y"]), float(row["global_z"])),
                    carrier_type=_parse_carrier(row["carrier"]),
                    charge=int(row["charge"]),
                    local_time=float(row.get("local_time") or 0.0),
                    global_time=float(row.get("global_time") or 0.0),
                    track_id=int(row["track_id"]) if row.get("track_id") else None,
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"{filename}, line {line}: invalid deposit row ({exc})") from exc
            events[int(row.get("event") or 0)].append(deposit)

    return dict(sorted(events.items()))


def export_deposits_csv(events: Dict[int, Iterable[ChargeDeposit]], filename: PathLike) -> PathLike:
    """Write deposits grouped by event in the format read by load_deposits_csv."""
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(DEPOSIT_COLUMNS)
        for event_id, deposits in events.items():
            for deposit in deposits:
                writer.writerow([
                    event_id,
                    *(f"{value:.8e}" for value in deposit.local_position),
                    *(f"{value:.8e}" for value in deposit.global_position),
                    deposit.carrier_type.label,
                    deposit.charge,
                    f"{deposit.local_time:.8e}",
                    f"{deposit.global_time:.8e}",
                    "" if deposit.track_id is None else deposit.track_id,
                ])
    return filename


def export_propagated_csv(results, filename: PathLike = "propagated_charges.csv") -> PathLike:
    """Export propagated charges of all events to CSV.

    Args:
        results: Iterable of PropagationResult
        filename: Output CSV filename

    Returns:
        Path to output file
    """
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(PROPAGATED_COLUMNS)
        for index, result in enumerate(results):
            event_id = index if result.event_id is None else result.event_id
            for charge in result.charges:
                writer.writerow([
                    event_id,
                    *(f"{value:.8e}" for value in charge.local_position),
                    *(f"{value:.8e}" for value in charge.global_position),
                    charge.carrier_type.label,
                    charge.charge,
                    f"{charge.local_time:.8e}",
                    f"{charge.global_time:.8e}",
                    charge.deposit_index,
                    "" if charge.track_id is None else charge.track_id,
                ])
    return filename


def export_propagated_hdf5(results, filename: PathLike = "propagated_charges.h5", config=None) -> PathLike:
    """Export propagated charges to HDF5, one group per event.

    Each group ``event_<id>`` holds the datasets local_position [N, 3],
    global_position [N, 3], charge, local_time, global_time, deposit_index
    and track_id (-1 if unknown), and the charge balance as attributes.

    Args:
        results: Iterable of PropagationResult
        filename: Output HDF5 filename
        config: Optional SimulationConfig stored as YAML text in the root attributes
    """
    with h5py.File(filename, "w") as f:
        n_events = 0
        for index, result in enumerate(results):
            event_id = index if result.event_id is None else result.event_id
            group = f.create_group(f"event_{event_id}")
            charges = result.charges

            group.create_dataset(
                "local_position",
                data=np.array([c.local_position for c in charges], dtype=np.float64).reshape(-1, 3),
            )
            group.create_dataset(
                "global_position",
                data=np.array([c.global_position for c in charges], dtype=np.float64).reshape(-1, 3),
            )
            group.create_dataset("charge", data=np.array([c.charge for c in charges], dtype=np.int64))
            group.create_dataset("local_time", data=np.array([c.local_time for c in charges], dtype=np.float64))
            group.create_dataset("global_time", data=np.array([c.global_time for c in charges], dtype=np.float64))
            group.create_dataset(
                "deposit_index", data=np.array([c.deposit_index for c in charges], dtype=np.int64),
            )
            group.create_dataset(
                "track_id",
                data=np.array([-1 if c.track_id is None else c.track_id for c in charges], dtype=np.int64),
            )

            report = result.report
            group.attrs["event_id"] = event_id
            group.attrs["deposited"] = report.deposited
            group.attrs["surviving"] = report.surviving
            for channel in LossChannel.channels():
                group.attrs[f"lost_{CHANNEL_NAMES[channel]}"] = report.losses[channel]
            group.attrs["conservation_valid"] = report.is_valid
            n_events += 1

        f.attrs["num_events"] = n_events
        if config is not None:
            import yaml
            f.attrs["config"] = yaml.safe_dump(config.to_dict(), sort_keys=False)

    return filename


def export_conservation_csv(results, filename: PathLike = "charge_balance.csv") -> PathLike:
    """Export the charge balance of every event to CSV."""
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        header = [
            "event",
            "n_deposits",
            "n_batches",
            "deposited",
            "surviving",
            *(f"lost_{CHANNEL_NAMES[channel]}" for channel in LossChannel.channels()),
            "survival_fraction",
            "conservation_valid",
        ]
        writer.writerow(header)

        for index, result in enumerate(results):
            report = result.report
            writer.writerow([
                index if result.event_id is None else result.event_id,
                report.n_deposits,
                report.n_batches,
                report.deposited,
                report.surviving,
                *(report.losses[channel] for channel in LossChannel.channels()),
                f"{report.survival_fraction:.6f}",
                report.is_valid,
            ])
    return filename


def read_propagated_hdf5(filename: PathLike, event_id: Optional[int] = None) -> Dict[int, Dict[str, np.ndarray]]:
    """Read back datasets written by export_propagated_hdf5."""
    events: Dict[int, Dict[str, np.ndarray]] = {}
    with h5py.File(filename, "r") as f:
        for name, group in f.items():
            current = int(group.attrs["event_id"])
            if event_id is not None and current != event_id:
                continue
            events[current] = {key: group[key][:] for key in group.keys()}
    return dict(sorted(events.items()))
