"""Tests for core modules: charge objects, sensor geometry, accounting."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from projprop.core.accounting import (
    CHANNEL_NAMES,
    ChargeLedger,
    ConservationReport,
    LossChannel,
    validate_conservation,
)
from projprop.core.detector import SensorGeometry
from projprop.core.objects import CarrierType, ChargeDeposit, split_into_batches


class TestChargeObjects:
    """Tests for deposits and batches."""

    def test_carrier_type(self):
        assert CarrierType.ELECTRON.charge_sign == -1
        assert CarrierType.HOLE.charge_sign == 1
        assert CarrierType.HOLE.label == "hole"

    def test_negative_charge_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            ChargeDeposit((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), CarrierType.ELECTRON, charge=-1)

    def test_split_into_batches(self, make_deposit):
        deposit = make_deposit(z=12.0, charge=25, local_time=3.0)

        batches = list(split_into_batches(deposit, 10))

        assert [batch.charge for batch in batches] == [10, 10, 5]
        assert [batch.index for batch in batches] == [0, 1, 2]
        assert all(batch.local_position == (0.0, 0.0, 12.0) for batch in batches)
        assert all(batch.time == 3.0 for batch in batches)

    def test_split_exact_multiple(self, make_deposit):
        batches = list(split_into_batches(make_deposit(charge=20), 10))
        assert [batch.charge for batch in batches] == [10, 10]

    def test_split_empty_deposit(self, make_deposit):
        assert list(split_into_batches(make_deposit(charge=0), 10)) == []

    def test_split_invalid_step(self, make_deposit):
        with pytest.raises(ValueError, match="charge_per_step"):
            list(split_into_batches(make_deposit(charge=5), 0))


class TestSensorGeometry:
    """Tests for the sensor geometry stand-in."""

    def test_surfaces(self, geometry):
        assert geometry.top_z == 150.0
        assert geometry.bottom_z == -150.0

    def test_off_center_sensor(self):
        geometry = SensorGeometry(thickness=100.0, size_x=50.0, size_y=50.0, center=(0.0, 0.0, 50.0))

        assert geometry.top_z == 100.0
        assert geometry.bottom_z == 0.0

    def test_local_to_global(self):
        rotation = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
        geometry = SensorGeometry(
            thickness=300.0, size_x=1000.0, size_y=1000.0,
            position=(5.0, -3.0, 100.0), rotation=rotation,
        )
        point = (12.0, 34.0, -56.0)

        global_point = geometry.local_to_global(point)

        assert_allclose(global_point, (5.0 - 34.0, -3.0 + 12.0, 100.0 - 56.0))

    def test_non_orthonormal_rotation_rejected(self):
        with pytest.raises(ValueError, match="orthonormal"):
            SensorGeometry(thickness=1.0, size_x=1.0, size_y=1.0, rotation=np.diag([1.0, 2.0, 1.0]))

    def test_rotation_is_read_only(self, geometry):
        with pytest.raises(ValueError):
            geometry.rotation[0, 0] = 2.0

    def test_is_within_sensor(self, geometry):
        assert geometry.is_within_sensor((0.0, 0.0, 0.0))
        assert geometry.is_within_sensor((0.0, 0.0, 150.0))
        assert not geometry.is_within_sensor((0.0, 0.0, 151.0))
        assert not geometry.is_within_sensor((6000.0, 0.0, 0.0))


class TestAccounting:
    """Tests for charge ledgers and reports."""

    def test_channels(self):
        assert LossChannel.NUM_CHANNELS == 3
        assert len(LossChannel.channels()) == 3
        assert set(CHANNEL_NAMES) == set(LossChannel.channels())

    def test_ledger_balance(self):
        ledger = ChargeLedger(deposit_index=0, deposited=25)
        ledger.record_surviving(10)
        ledger.record_loss(LossChannel.RECOMBINED, 10)
        assert not ledger.is_balanced()

        ledger.record_loss(LossChannel.MISSED_INTEGRATION, 5)

        assert ledger.is_balanced()
        assert ledger.total_lost == 15
        assert validate_conservation([ledger])

    def test_report_from_ledgers(self):
        first = ChargeLedger(deposit_index=0, deposited=10, surviving=10, n_batches=1)
        second = ChargeLedger(deposit_index=1, deposited=20, n_batches=2)
        second.record_loss(LossChannel.UNDEPLETED, 20)

        report = ConservationReport.from_ledgers([first, second])

        assert report.n_deposits == 2
        assert report.n_batches == 3
        assert report.deposited == 30
        assert report.surviving == 10
        assert report.losses[LossChannel.UNDEPLETED] == 20
        assert report.survival_fraction == pytest.approx(1.0 / 3.0)
        assert report.is_valid

    def test_unbalanced_ledger_invalidates_report(self):
        ledger = ChargeLedger(deposit_index=0, deposited=10, surviving=5)
        assert not ConservationReport.from_ledgers([ledger]).is_valid

    def test_report_merge(self):
        a = ConservationReport.from_ledgers([ChargeLedger(deposit_index=0, deposited=10, surviving=10)])
        b = ConservationReport.from_ledgers([ChargeLedger(deposit_index=0, deposited=5, surviving=5)])

        merged = a.merge(b)

        assert merged.deposited == 15
        assert merged.surviving == 15
        assert merged.n_deposits == 2

    def test_report_to_dict(self):
        data = ConservationReport().to_dict()

        assert data["deposited"] == 0
        assert set(data["losses"]) == {"undepleted", "missed_integration", "recombined"}
        assert data["is_valid"]
        assert ConservationReport().survival_fraction == 0.0
