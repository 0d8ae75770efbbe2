"""Charge Accounting for Propagation Conservation Tracking

This module is the Single Source of Truth for:
- Loss channel definitions
- Per-deposit charge ledgers
- Event-level conservation reporting

Charge Balance:
    Charge is conserved or reduced, never created. For every deposit:

        Q_deposit = Q_surviving + Q_recombined + Q_missed + Q_undepleted

    Where:
        Q_surviving: Charge emitted as propagated charge
        Q_recombined: Charge lost in the survival draw
        Q_missed: Charge arriving after the integration window
        Q_undepleted: Charge created (or diffusing) outside the depleted region

Import Policy:
    from projprop.core.accounting import LossChannel, ChargeLedger, ConservationReport

DO NOT use: from projprop.core.accounting import *
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, List


class LossChannel(IntEnum):
    """Causes of charge loss between deposition and readout.

    UNDEPLETED (0): Batch started in a field-free region and was not diffused,
        or diffused away from the depleted region
    MISSED_INTEGRATION (1): Batch arrived after the integration window
    RECOMBINED (2): Batch failed the survival draw
    """

    UNDEPLETED = 0
    MISSED_INTEGRATION = 1
    RECOMBINED = 2

    # Total number of loss channels (for array sizing)
    NUM_CHANNELS = 3

    @classmethod
    def channels(cls) -> tuple["LossChannel", ...]:
        return (cls.UNDEPLETED, cls.MISSED_INTEGRATION, cls.RECOMBINED)


# Channel name mapping for reporting
CHANNEL_NAMES = {
    LossChannel.UNDEPLETED: "undepleted",
    LossChannel.MISSED_INTEGRATION: "missed_integration",
    LossChannel.RECOMBINED: "recombined",
}


@dataclass
class ChargeLedger:
    """Charge balance of one deposit.

    Attributes:
        deposit_index: Index of the deposit within the event
        deposited: Original charge of the deposit
        surviving: Charge emitted as propagated charge
        losses: Charge lost per channel
        n_batches: Number of batches the deposit was split into

    """

    deposit_index: int
    deposited: int
    surviving: int = 0
    losses: Dict[LossChannel, int] = field(
        default_factory=lambda: {channel: 0 for channel in LossChannel.channels()},
    )
    n_batches: int = 0

    def record_surviving(self, charge: int) -> None:
        self.surviving += charge

    def record_loss(self, channel: LossChannel, charge: int) -> None:
        self.losses[channel] += charge

    @property
    def total_lost(self) -> int:
        return sum(self.losses.values())

    @property
    def accounted(self) -> int:
        return self.surviving + self.total_lost

    def is_balanced(self) -> bool:
        return self.accounted == self.deposited


@dataclass
class ConservationReport:
    """Charge balance of one event (sum over its deposit ledgers).

    Attributes:
        n_deposits: Number of propagated deposits
        n_batches: Number of batches processed
        deposited: Total deposited charge of the propagated carrier type
        surviving: Total charge reaching the readout surface
        losses: Charge lost per channel
        is_valid: Whether every deposit balances exactly

    """

    n_deposits: int = 0
    n_batches: int = 0
    deposited: int = 0
    surviving: int = 0
    losses: Dict[LossChannel, int] = field(
        default_factory=lambda: {channel: 0 for channel in LossChannel.channels()},
    )
    is_valid: bool = True

    @classmethod
    def from_ledgers(cls, ledgers: Iterable[ChargeLedger]) -> "ConservationReport":
        report = cls()
        for ledger in ledgers:
            report.n_deposits += 1
            report.n_batches += ledger.n_batches
            report.deposited += ledger.deposited
            report.surviving += ledger.surviving
            for channel, charge in ledger.losses.items():
                report.losses[channel] += charge
            report.is_valid = report.is_valid and ledger.is_balanced()
        return report

    @property
    def total_lost(self) -> int:
        return sum(self.losses.values())

    @property
    def survival_fraction(self) -> float:
        if self.deposited == 0:
            return 0.0
        return self.surviving / self.deposited

    def merge(self, other: "ConservationReport") -> "ConservationReport":
        """Combine reports of several events."""
        merged = ConservationReport(
            n_deposits=self.n_deposits + other.n_deposits,
            n_batches=self.n_batches + other.n_batches,
            deposited=self.deposited + other.deposited,
            surviving=self.surviving + other.surviving,
            is_valid=self.is_valid and other.is_valid,
        )
        for channel in LossChannel.channels():
            merged.losses[channel] = self.losses[channel] + other.losses[channel]
        return merged

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_deposits": self.n_deposits,
            "n_batches": self.n_batches,
            "deposited": self.deposited,
            "surviving": self.surviving,
            "losses": {CHANNEL_NAMES[ch]: charge for ch, charge in self.losses.items()},
            "is_valid": self.is_valid,
        }

    def __str__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        losses = ", ".join(
            f"{CHANNEL_NAMES[ch]}={charge}" for ch, charge in self.losses.items()
        )
        return (
            f"Charge balance [{status}]: deposited={self.deposited}, "
            f"surviving={self.surviving}, {losses}"
        )


def validate_conservation(ledgers: List[ChargeLedger]) -> bool:
    """Check that every ledger balances exactly (integer charge)."""
    return all(ledger.is_balanced() for ledger in ledgers)
