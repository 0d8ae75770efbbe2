"""Core data structures: charge objects, sensor geometry, constants, accounting."""

from projprop.core.accounting import ChargeLedger, ConservationReport, LossChannel
from projprop.core.detector import SensorGeometry
from projprop.core.objects import (
    CarrierBatch,
    CarrierType,
    ChargeDeposit,
    PropagatedCharge,
    split_into_batches,
)

__all__ = [
    "CarrierType",
    "ChargeDeposit",
    "CarrierBatch",
    "PropagatedCharge",
    "split_into_batches",
    "SensorGeometry",
    "LossChannel",
    "ChargeLedger",
    "ConservationReport",
]
