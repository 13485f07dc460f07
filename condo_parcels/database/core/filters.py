"""
Composable, parameterized filters for package and status-log reads.

A builder collects SQLAlchemy boolean expressions; the DAOs AND them together.
User-supplied values only ever enter an expression as bound parameters.

Date handling
-------------
``resolve_date_window`` turns the request's date inputs into an inclusive
``DateWindow`` (or None for "no date filter"):

1. ``start_date`` wins over everything; ``end_date`` defaults to today.
2. otherwise a named period (``today``, ``last7days``, ``last30days``,
   ``thisMonth``, plus the short aliases ``last7``, ``last30``, ``month``).
3. otherwise a single ``day``.
4. otherwise "today" when the view asks for a default window.

Windows are evaluated against UTC calendar days.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, or_

from condo_parcels.database.core.errors import ValidationError
from condo_parcels.database.core.validation import parse_optional_status
from condo_parcels.database.daos.directory_dao import unit_label
from condo_parcels.database.entities.package import Package
from condo_parcels.database.entities.package_status_log import PackageStatusLog

PERIOD_ALIASES = {
    "today": "today",
    "last7days": "last7days",
    "last7": "last7days",
    "last30days": "last30days",
    "last30": "last30days",
    "thisMonth": "thisMonth",
    "month": "thisMonth",
}


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar days; ``end`` None means open-ended."""

    start: date
    end: date | None = None

    def bounds(self) -> tuple[datetime, datetime | None]:
        """Return ``[start, end)`` as aware UTC datetimes (end exclusive)."""
        lower = datetime.combine(self.start, time.min, tzinfo=timezone.utc)
        if self.end is None:
            return lower, None
        upper = datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=timezone.utc)
        return lower, upper


@dataclass
class PackageListFilter:
    """Request-level filter inputs shared by the tenant, officer and admin lists."""

    status: str | None = None
    unit: str | None = None
    day: date | None = None
    period: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def period_window(period: str, today: date) -> DateWindow:
    """Window of a named period relative to ``today``."""
    name = PERIOD_ALIASES.get(period)
    if name is None:
        raise ValidationError(
            f"Unknown period '{period}'; expected one of {', '.join(PERIOD_ALIASES)}"
        )
    if name == "today":
        return DateWindow(today, today)
    if name == "last7days":
        return DateWindow(today - timedelta(days=6))
    if name == "last30days":
        return DateWindow(today - timedelta(days=29))
    last_day = calendar.monthrange(today.year, today.month)[1]
    return DateWindow(today.replace(day=1), today.replace(day=last_day))


def resolve_date_window(
    filters: PackageListFilter, today: date | None = None, default_today: bool = False
) -> DateWindow | None:
    today = today or utc_today()
    if filters.start_date:
        end = filters.end_date or today
        if end < filters.start_date:
            raise ValidationError("end_date must not be before start_date")
        return DateWindow(filters.start_date, end)
    if filters.period:
        return period_window(filters.period, today)
    if filters.day:
        return DateWindow(filters.day, filters.day)
    if default_today:
        return DateWindow(today, today)
    return None


def like_pattern(text: str) -> str:
    """Lower-cased ``%text%`` with LIKE wildcards in ``text`` escaped by a backslash."""
    escaped = (
        text.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"


class PackageQuery:
    """
    Builder for package list criteria.

    Example
    -------
    >>> criteria = (
    ...     PackageQuery()
    ...     .owned_by(tenant_id)
    ...     .with_status("ARRIVED")
    ...     .matching("dhl")
    ...     .criteria
    ... )
    """

    def __init__(self):
        self.criteria = []

    def owned_by(self, tenant_id: int) -> "PackageQuery":
        self.criteria.append(Package.tenant_id == tenant_id)
        return self

    def with_status(self, status) -> "PackageQuery":
        status = parse_optional_status(status)
        if status is not None:
            self.criteria.append(Package.current_status == status.value)
        return self

    def in_unit(self, unit: str | None) -> "PackageQuery":
        if unit:
            self.criteria.append(unit_label == unit)
        return self

    def arrived_within(self, window: DateWindow | None) -> "PackageQuery":
        if window is not None:
            lower, upper = window.bounds()
            self.criteria.append(Package.arrived_at >= lower)
            if upper is not None:
                self.criteria.append(Package.arrived_at < upper)
        return self

    def matching(self, search: str | None) -> "PackageQuery":
        if search and search.strip():
            pattern = like_pattern(search)
            columns = (Package.tracking_no, Package.carrier, Package.sender_name, Package.current_status)
            self.criteria.append(
                or_(*(func.lower(func.coalesce(column, "")).like(pattern, escape="\\") for column in columns))
            )
        return self

    @classmethod
    def from_filter(
        cls, filters: PackageListFilter, default_today: bool = False, today: date | None = None
    ) -> "PackageQuery":
        """Build the full criteria list for one list request."""
        return (
            cls()
            .with_status(filters.status)
            .in_unit(filters.unit)
            .arrived_within(resolve_date_window(filters, today=today, default_today=default_today))
            .matching(filters.search)
        )


class StatusLogQuery:
    """Builder for global status-feed criteria."""

    def __init__(self):
        self.criteria = []

    def with_status(self, status) -> "StatusLogQuery":
        status = parse_optional_status(status)
        if status is not None:
            self.criteria.append(PackageStatusLog.status == status.value)
        return self

    def in_unit(self, unit: str | None) -> "StatusLogQuery":
        if unit:
            self.criteria.append(unit_label == unit)
        return self

    def on_day(self, day: date | None) -> "StatusLogQuery":
        if day is not None:
            lower, upper = DateWindow(day, day).bounds()
            self.criteria.append(PackageStatusLog.status_time >= lower)
            self.criteria.append(PackageStatusLog.status_time < upper)
        return self
