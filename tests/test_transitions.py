"""Tests for package creation, status transitions and package deletes."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from condo_parcels.database.core import queries, transitions
from condo_parcels.database.core.errors import (
    ErrorKind,
    InvalidStatusError,
    NotFoundError,
    ValidationError,
    from_integrity_error,
)
from condo_parcels.database.daos.package_dao import PackageDao
from condo_parcels.database.daos.package_status_log_dao import PackageStatusLogDao
from condo_parcels.database.entities import Package, PackageStatus, PackageStatusLog


def _history_count(factory, package_id):
    with factory() as session:
        return PackageStatusLogDao().countEntries(session, package_id)


def _package(factory, package_id):
    with factory() as session:
        return session.get(Package, package_id)


class TestPickupTimestampPolicy:
    """The pure policy behind the derived pickup timestamp."""

    now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    earlier = datetime(2025, 2, 1, 9, 30, tzinfo=timezone.utc)

    def test_picked_up_stamps_now(self):
        assert transitions.pickup_timestamp_for(PackageStatus.PICKED_UP, None, self.now) == self.now

    def test_picked_up_overwrites_previous(self):
        assert transitions.pickup_timestamp_for(PackageStatus.PICKED_UP, self.earlier, self.now) == self.now

    def test_arrived_clears(self):
        assert transitions.pickup_timestamp_for(PackageStatus.ARRIVED, self.earlier, self.now) is None

    def test_returned_keeps_previous(self):
        assert transitions.pickup_timestamp_for(PackageStatus.RETURNED, self.earlier, self.now) == self.earlier
        assert transitions.pickup_timestamp_for(PackageStatus.RETURNED, None, self.now) is None


class TestCreatePackage:

    def test_defaults_to_arrived_with_one_entry(self, test_db, directory):
        created = transitions.create_package(
            tenant_id=directory["tenant_a_id"],
            staff_id=directory["officer_staff_id"],
            tracking_no="TH123",
            carrier="Kerry",
        )

        assert created["current_status"] == "ARRIVED"
        assert created["picked_up_at"] is None
        assert _history_count(test_db, created["package_id"]) == 1

        history = queries.list_package_history(package_id=created["package_id"])
        assert history[0]["status"] == "ARRIVED"
        assert history[0]["note"] == ""
        assert history[0]["updated_by"] == "Olivia Officer"

    def test_initial_picked_up_stamps_pickup_time(self, test_db, directory):
        before = datetime.now(timezone.utc)
        created = transitions.create_package(
            tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"], status="PICKED_UP"
        )
        assert created["current_status"] == "PICKED_UP"
        assert created["picked_up_at"] >= before

    def test_backdated_arrival_is_kept(self, test_db, directory):
        arrived = datetime(2025, 1, 5, 8, 0, tzinfo=timezone.utc)
        created = transitions.create_package(
            tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"], arrived_at=arrived
        )
        assert _package(test_db, created["package_id"]).arrived_at == arrived

    def test_first_note_is_latest_note(self, test_db, directory):
        created = transitions.create_package(
            tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"], note="fragile"
        )
        assert queries.latest_note(package_id=created["package_id"]) == "fragile"

    def test_unknown_tenant_is_a_validation_error(self, test_db, directory):
        with pytest.raises(ValidationError, match="Tenant not found"):
            transitions.create_package(tenant_id=9999, staff_id=directory["officer_staff_id"])

    def test_missing_tenant_id_is_a_validation_error(self, test_db, directory):
        with pytest.raises(ValidationError, match="tenant_id is required"):
            transitions.create_package(tenant_id=None, staff_id=directory["officer_staff_id"])

    def test_missing_staff_id_is_a_validation_error(self, test_db, directory):
        with pytest.raises(ValidationError, match="staff_id is required"):
            transitions.create_package(tenant_id=directory["tenant_a_id"], staff_id=None)

    def test_unknown_staff_is_not_found(self, test_db, directory):
        with pytest.raises(NotFoundError):
            transitions.create_package(tenant_id=directory["tenant_a_id"], staff_id=9999)

    def test_invalid_status_writes_nothing(self, test_db, directory):
        with pytest.raises(InvalidStatusError) as excinfo:
            transitions.create_package(
                tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"], status="LOST"
            )
        assert excinfo.value.kind is ErrorKind.VALIDATION_ERROR
        with test_db() as session:
            assert session.query(Package).count() == 0
            assert session.query(PackageStatusLog).count() == 0


class TestApplyTransition:

    @pytest.fixture
    def package_id(self, test_db, directory):
        return transitions.create_package(
            tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"]
        )["package_id"]

    def test_pickup_then_bogus_scenario(self, test_db, directory, package_id):
        before = datetime.now(timezone.utc)
        updated = transitions.apply_transition(
            package_id=package_id, staff_id=directory["officer_staff_id"],
            status="PICKED_UP", note="left at door",
        )
        after = datetime.now(timezone.utc)

        assert updated["current_status"] == "PICKED_UP"
        assert before <= updated["picked_up_at"] <= after
        assert _history_count(test_db, package_id) == 2
        assert queries.latest_note(package_id=package_id) == "left at door"

        with pytest.raises(InvalidStatusError):
            transitions.apply_transition(
                package_id=package_id, staff_id=directory["officer_staff_id"], status="BOGUS"
            )

        package = _package(test_db, package_id)
        assert package.current_status == "PICKED_UP"
        assert _history_count(test_db, package_id) == 2

    def test_entry_matches_applied_change(self, test_db, directory, package_id):
        transitions.apply_transition(
            package_id=package_id, staff_id=directory["admin_staff_id"], status="RETURNED", note="refused"
        )
        latest = queries.list_package_history(package_id=package_id)[0]
        assert latest["status"] == "RETURNED"
        assert latest["note"] == "refused"
        assert latest["updated_by"] == "Adam Admin"
        assert _package(test_db, package_id).current_status == "RETURNED"

    def test_arrived_clears_pickup_time(self, test_db, directory, package_id):
        transitions.apply_transition(package_id=package_id, staff_id=directory["officer_staff_id"], status="PICKED_UP")
        updated = transitions.apply_transition(
            package_id=package_id, staff_id=directory["officer_staff_id"], status="ARRIVED", note="wrong parcel"
        )
        assert updated["picked_up_at"] is None
        assert _package(test_db, package_id).picked_up_at is None

    def test_returned_leaves_pickup_time_unchanged(self, test_db, directory, package_id):
        picked = transitions.apply_transition(
            package_id=package_id, staff_id=directory["officer_staff_id"], status="PICKED_UP"
        )
        returned = transitions.apply_transition(
            package_id=package_id, staff_id=directory["officer_staff_id"], status="RETURNED"
        )
        assert returned["picked_up_at"] == picked["picked_up_at"]

    def test_any_status_may_follow_any_other(self, test_db, directory, package_id):
        for status in ("RETURNED", "ARRIVED", "PICKED_UP", "ARRIVED", "RETURNED", "PICKED_UP"):
            updated = transitions.apply_transition(
                package_id=package_id, staff_id=directory["officer_staff_id"], status=status
            )
            assert updated["current_status"] == status
        assert _history_count(test_db, package_id) == 7

    def test_omitted_status_only_logs_note(self, test_db, directory, package_id):
        picked = transitions.apply_transition(
            package_id=package_id, staff_id=directory["officer_staff_id"], status="PICKED_UP"
        )
        updated = transitions.apply_transition(
            package_id=package_id, staff_id=directory["admin_staff_id"], note="tenant called"
        )
        assert updated["current_status"] == "PICKED_UP"
        assert updated["picked_up_at"] == picked["picked_up_at"]
        latest = queries.list_package_history(package_id=package_id)[0]
        assert latest["status"] == "PICKED_UP"
        assert latest["note"] == "tenant called"

    def test_unknown_package_is_not_found(self, test_db, directory):
        with pytest.raises(NotFoundError):
            transitions.apply_transition(package_id=4242, staff_id=directory["officer_staff_id"], status="PICKED_UP")

    def test_missing_staff_changes_nothing(self, test_db, directory, package_id):
        with pytest.raises(ValidationError, match="staff_id is required"):
            transitions.apply_transition(package_id=package_id, staff_id=None, status="PICKED_UP")
        assert _package(test_db, package_id).current_status == "ARRIVED"
        assert _history_count(test_db, package_id) == 1

    def test_unknown_staff_changes_nothing(self, test_db, directory, package_id):
        with pytest.raises(NotFoundError):
            transitions.apply_transition(package_id=package_id, staff_id=777, status="RETURNED")
        assert _package(test_db, package_id).current_status == "ARRIVED"
        assert _history_count(test_db, package_id) == 1

    def test_failure_after_ledger_write_rolls_back(self, test_db, directory, package_id, monkeypatch):
        def broken_append(self, session, **kwargs):
            raise RuntimeError("log store unavailable")

        monkeypatch.setattr(PackageStatusLogDao, "appendEntry", broken_append)
        with pytest.raises(RuntimeError):
            transitions.apply_transition(
                package_id=package_id, staff_id=directory["officer_staff_id"], status="PICKED_UP"
            )
        monkeypatch.undo()

        package = _package(test_db, package_id)
        assert package.current_status == "ARRIVED"
        assert package.picked_up_at is None
        assert _history_count(test_db, package_id) == 1


class TestDeletePackage:

    def test_removes_package_and_history(self, test_db, directory):
        package_id = transitions.create_package(
            tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"]
        )["package_id"]
        transitions.apply_transition(package_id=package_id, staff_id=directory["officer_staff_id"], status="PICKED_UP")

        transitions.delete_package(package_id=package_id)

        with test_db() as session:
            assert session.get(Package, package_id) is None
            assert session.query(PackageStatusLog).filter_by(package_id=package_id).count() == 0

    def test_unknown_package_is_not_found(self, test_db, directory):
        with pytest.raises(NotFoundError):
            transitions.delete_package(package_id=31337)

    def test_store_refuses_package_delete_while_history_remains(self, test_db, directory):
        package_id = transitions.create_package(
            tenant_id=directory["tenant_a_id"], staff_id=directory["officer_staff_id"]
        )["package_id"]

        with test_db() as session:
            with pytest.raises(IntegrityError) as excinfo:
                PackageDao().deletePackages(session, [package_id])
            session.rollback()

        mapped = from_integrity_error(excinfo.value)
        assert isinstance(mapped, ValidationError)
        assert mapped.kind == ErrorKind.VALIDATION_ERROR
        assert _package(test_db, package_id) is not None
        assert _history_count(test_db, package_id) == 1

    def test_sqlite_connections_enforce_foreign_keys(self, test_db):
        with test_db() as session:
            assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1
