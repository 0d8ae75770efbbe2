"""Charge objects exchanged with the deposition and digitisation stages.

All positions are in um, all times in ns.

Import Policy:
    from projprop.core.objects import ChargeDeposit, PropagatedCharge, CarrierType
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

Point3 = Tuple[float, float, float]


class CarrierType(Enum):
    """Type of charge carrier, valued by the sign of its charge."""

    ELECTRON = -1
    HOLE = 1

    @property
    def charge_sign(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class ChargeDeposit:
    """Carriers of one type created at one point by the deposition stage.

    Attributes:
        local_position: Position in the sensor frame (um)
        global_position: Position in the global frame (um)
        carrier_type: Electron or hole
        charge: Number of carriers
        local_time: Creation time after the particle entered the sensor (ns)
        global_time: Creation time after event start (ns)
        track_id: Identifier of the originating particle, if known
    """

    local_position: Point3
    global_position: Point3
    carrier_type: CarrierType
    charge: int
    local_time: float = 0.0
    global_time: float = 0.0
    track_id: Optional[int] = None

    def __post_init__(self):
        if self.charge < 0:
            raise ValueError(f"Deposited charge must be non-negative: charge={self.charge}")


@dataclass
class CarrierBatch:
    """Group of carriers of one deposit projected together.

    Only lives for the duration of one propagation call.
    """

    carrier_type: CarrierType
    charge: int
    local_position: Point3
    global_position: Point3
    time: float
    index: int = 0


@dataclass(frozen=True)
class PropagatedCharge:
    """Carriers arriving at the readout surface.

    Attributes:
        local_position: Arrival position on the readout surface, sensor frame (um)
        global_position: Arrival position, global frame (um)
        carrier_type: Electron or hole
        charge: Number of surviving carriers (always > 0)
        local_time: Arrival time in the sensor time frame (ns)
        global_time: Arrival time after event start (ns)
        deposit_index: Index of the originating deposit within the event
        track_id: Identifier of the originating particle, if known
    """

    local_position: Point3
    global_position: Point3
    carrier_type: CarrierType
    charge: int
    local_time: float
    global_time: float
    deposit_index: int = -1
    track_id: Optional[int] = None


def split_into_batches(deposit: ChargeDeposit, charge_per_step: int) -> Iterator[CarrierBatch]:
    """Partition a deposit into sequential batches of at most charge_per_step carriers.

    A deposit of 25 carriers with charge_per_step=10 yields 10, 10, 5.
    """
    if charge_per_step <= 0:
        raise ValueError(f"charge_per_step must be positive: {charge_per_step}")

    remaining = deposit.charge
    index = 0
    while remaining > 0:
        charge = min(charge_per_step, remaining)
        yield CarrierBatch(
            carrier_type=deposit.carrier_type,
            charge=charge,
            local_position=deposit.local_position,
            global_position=deposit.global_position,
            time=deposit.local_time,
            index=index,
        )
        remaining -= charge
        index += 1
