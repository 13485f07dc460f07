"""Tests for role-scoped package reads, timelines and the global status feed."""

from datetime import datetime, timedelta, timezone

import pytest

from condo_parcels.database.core import queries, transitions
from condo_parcels.database.core.errors import ForbiddenError, NotFoundError, ValidationError
from condo_parcels.database.core.filters import PackageListFilter


def _days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc).replace(hour=12, minute=0, second=0, microsecond=0) - timedelta(days=days)


@pytest.fixture
def parcels(test_db, directory):
    """A small ledger spread over tenants, units, carriers and arrival days."""
    officer = directory["officer_staff_id"]

    def create(tenant_key, days_ago, **fields):
        return transitions.create_package(
            tenant_id=directory[tenant_key], staff_id=officer, arrived_at=_days_ago(days_ago), **fields
        )["package_id"]

    ids = {
        "a_today": create("tenant_a_id", 0, tracking_no="TH-0001", carrier="Kerry Express"),
        "a_week": create("tenant_a_id", 5, tracking_no="TH-0002", carrier="Flash", sender_name="Shopee"),
        "a_old": create("tenant_a_id", 45, tracking_no="TH-0003", carrier="Thailand Post"),
        "b_today": create("tenant_b_id", 0, tracking_no="EMS-77", carrier="Thailand Post"),
        "c_today": create("tenant_c_id", 0, tracking_no="100%_OFF", carrier="DHL"),
    }
    transitions.apply_transition(package_id=ids["a_week"], staff_id=officer, status="PICKED_UP", note="at lobby")
    transitions.apply_transition(package_id=ids["b_today"], staff_id=officer, status="RETURNED")
    return ids


def _ids(rows):
    return [row["package_id"] for row in rows]


class TestTenantList:

    def test_only_own_packages_newest_first(self, parcels, directory):
        rows = queries.list_tenant_packages(tenant_id=directory["tenant_a_id"], filters=PackageListFilter())
        assert _ids(rows) == [parcels["a_today"], parcels["a_week"], parcels["a_old"]]
        assert {row["tenant_id"] for row in rows} == {directory["tenant_a_id"]}

    def test_status_filter(self, parcels, directory):
        rows = queries.list_tenant_packages(
            tenant_id=directory["tenant_a_id"], filters=PackageListFilter(status="PICKED_UP")
        )
        assert _ids(rows) == [parcels["a_week"]]

    def test_named_periods(self, parcels, directory):
        tenant_id = directory["tenant_a_id"]
        last7 = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(period="last7days"))
        assert _ids(last7) == [parcels["a_today"], parcels["a_week"]]

        last30 = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(period="last30"))
        assert parcels["a_old"] not in _ids(last30)

        today = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(period="today"))
        assert _ids(today) == [parcels["a_today"]]

    def test_explicit_range_wins_over_period(self, parcels, directory):
        start = _days_ago(50).date()
        end = _days_ago(40).date()
        rows = queries.list_tenant_packages(
            tenant_id=directory["tenant_a_id"],
            filters=PackageListFilter(period="today", start_date=start, end_date=end),
        )
        assert _ids(rows) == [parcels["a_old"]]

    def test_search_is_case_insensitive_substring(self, parcels, directory):
        tenant_id = directory["tenant_a_id"]
        by_sender = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(search="shop"))
        assert _ids(by_sender) == [parcels["a_week"]]

        by_status = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(search="picked"))
        assert _ids(by_status) == [parcels["a_week"]]

        by_carrier = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(search="KERRY"))
        assert _ids(by_carrier) == [parcels["a_today"]]

    def test_search_folds_non_ascii_case(self, parcels, directory):
        tenant_id = directory["tenant_a_id"]
        package_id = transitions.create_package(
            tenant_id=tenant_id, staff_id=directory["officer_staff_id"], sender_name="ÜBER Store"
        )["package_id"]

        for term in ("über", "ÜBER", "Über store"):
            rows = queries.list_tenant_packages(tenant_id=tenant_id, filters=PackageListFilter(search=term))
            assert _ids(rows) == [package_id]

    def test_limit_caps_rows(self, parcels, directory):
        rows = queries.list_tenant_packages(tenant_id=directory["tenant_a_id"], filters=PackageListFilter(), limit=2)
        assert len(rows) == 2


class TestStaffList:

    def test_officer_default_is_today(self, parcels):
        rows = queries.list_packages(filters=PackageListFilter(), default_today=True)
        assert set(_ids(rows)) == {parcels["a_today"], parcels["b_today"], parcels["c_today"]}

    def test_admin_has_no_default_window(self, parcels):
        rows = queries.list_packages(filters=PackageListFilter())
        assert len(rows) == 5

    def test_unit_filter(self, parcels):
        rows = queries.list_packages(filters=PackageListFilter(unit="A101"))
        assert _ids(rows) == [parcels["a_today"], parcels["a_week"], parcels["a_old"]]
        assert rows[0]["unit"] == "A101"
        assert rows[0]["tenant_name"] == "Alice Tenant"

    def test_single_day_filter(self, parcels):
        rows = queries.list_packages(filters=PackageListFilter(day=_days_ago(5).date()), default_today=True)
        assert _ids(rows) == [parcels["a_week"]]

    def test_like_wildcards_are_literal(self, parcels):
        rows = queries.list_packages(filters=PackageListFilter(search="%_"))
        assert _ids(rows) == [parcels["c_today"]]

    def test_filters_combine_with_and(self, parcels):
        rows = queries.list_packages(filters=PackageListFilter(status="ARRIVED", search="thailand post"))
        assert _ids(rows) == [parcels["a_old"]]

    def test_invalid_status_filter_is_rejected(self, parcels):
        with pytest.raises(ValidationError):
            queries.list_packages(filters=PackageListFilter(status="LOST"))

    def test_unknown_period_is_rejected(self, parcels):
        with pytest.raises(ValidationError, match="Unknown period"):
            queries.list_packages(filters=PackageListFilter(period="fortnight"))


class TestDetailAndHistory:

    def test_detail_carries_latest_note_and_staff(self, parcels):
        detail = queries.get_package_detail(package_id=parcels["a_week"])
        assert detail["current_status"] == "PICKED_UP"
        assert detail["latest_note"] == "at lobby"
        assert detail["handled_by_staff"] == "Olivia Officer"
        assert detail["unit"] == "A101"

    def test_detail_of_unknown_package(self, parcels):
        with pytest.raises(NotFoundError):
            queries.get_package_detail(package_id=999)

    def test_history_is_newest_first_and_heads_with_latest_note(self, parcels, directory):
        package_id = parcels["a_today"]
        for status, note in (("PICKED_UP", "one"), ("ARRIVED", "two"), ("RETURNED", "three")):
            transitions.apply_transition(
                package_id=package_id, staff_id=directory["admin_staff_id"], status=status, note=note
            )
        history = queries.list_package_history(package_id=package_id)

        assert [entry["note"] for entry in history] == ["three", "two", "one", ""]
        times = [entry["status_time"] for entry in history]
        assert times == sorted(times, reverse=True)
        assert history[0]["note"] == queries.latest_note(package_id=package_id)

    def test_latest_note_without_history_is_empty(self, test_db, directory):
        assert queries.latest_note(package_id=12345) == ""


class TestTenantPackageLogs:

    def test_owner_sees_package_and_timeline(self, parcels, directory):
        result = queries.get_tenant_package_logs(tenant_id=directory["tenant_a_id"], package_id=parcels["a_week"])
        assert result["package"]["package_id"] == parcels["a_week"]
        assert [entry["status"] for entry in result["logs"]] == ["PICKED_UP", "ARRIVED"]

    def test_other_tenant_is_forbidden(self, parcels, directory):
        with pytest.raises(ForbiddenError):
            queries.get_tenant_package_logs(tenant_id=directory["tenant_b_id"], package_id=parcels["a_week"])

    def test_missing_package_is_not_found(self, parcels, directory):
        with pytest.raises(NotFoundError):
            queries.get_tenant_package_logs(tenant_id=directory["tenant_a_id"], package_id=5555)


class TestStatusFeed:

    def test_feed_is_newest_first(self, parcels):
        feed = queries.list_status_log()
        assert len(feed) == 7
        assert feed[0]["package_id"] == parcels["b_today"]
        assert feed[0]["status"] == "RETURNED"
        assert feed[0]["unit"] == "A102"

    def test_feed_filters(self, parcels):
        picked = queries.list_status_log(status="PICKED_UP")
        assert [entry["package_id"] for entry in picked] == [parcels["a_week"]]

        unit_b = queries.list_status_log(unit="B201")
        assert {entry["package_id"] for entry in unit_b} == {parcels["c_today"]}

        today = queries.list_status_log(day=datetime.now(timezone.utc).date())
        assert len(today) == 7

    def test_feed_limit(self, parcels):
        assert len(queries.list_status_log(limit=3)) == 3
