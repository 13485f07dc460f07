"""
Role-scoped package reads.

Tenant reads are always pinned to the caller's own tenant id, which the HTTP
layer resolves from the verified token. Officer and admin reads add the unit
filter, and the officer list falls back to a "today" window when no date input
is given. Every list is newest first and capped at a fixed row count.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from condo_parcels.database.config.config import settings
from condo_parcels.database.core.errors import ForbiddenError, NotFoundError
from condo_parcels.database.core.filters import (
    PackageListFilter,
    PackageQuery,
    StatusLogQuery,
    resolve_date_window,
)
from condo_parcels.database.daos.package_dao import PackageDao
from condo_parcels.database.daos.package_status_log_dao import PackageStatusLogDao
from condo_parcels.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def _package_row(row) -> dict:
    package = row.Package
    return {
        "package_id": package.package_id,
        "tenant_id": package.tenant_id,
        "tenant_name": row.tenant_name,
        "building_code": row.building_code,
        "room_no": row.room_no,
        "unit": f"{row.building_code}{row.room_no}",
        "tracking_no": package.tracking_no,
        "carrier": package.carrier,
        "sender_name": package.sender_name,
        "current_status": package.current_status,
        "arrived_at": package.arrived_at,
        "picked_up_at": package.picked_up_at,
    }


def _history_row(row) -> dict:
    entry = row.PackageStatusLog
    return {
        "log_id": entry.log_id,
        "package_id": entry.package_id,
        "status": entry.status,
        "note": entry.note or "",
        "status_time": entry.status_time,
        "updated_by": row.updated_by,
    }


@transactional
def list_packages(
    session: Session,
    filters: PackageListFilter,
    limit: int | None = None,
    default_today: bool = False,
    today: date | None = None,
) -> list[dict]:
    """
    Staff package list.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    filters : PackageListFilter
        Status, unit, date inputs and search text, combined with AND.
    limit : int | None
        Row ceiling; ``ADMIN_PACKAGE_LIMIT`` when omitted.
    default_today : bool
        Restrict to today's arrivals when no date input is given (officer view).
    today : date | None
        Reference day for relative windows; the current UTC day when omitted.
    """
    query = PackageQuery.from_filter(filters, default_today=default_today, today=today)
    rows = PackageDao().listPackages(session, query.criteria, limit or settings.ADMIN_PACKAGE_LIMIT)
    return [_package_row(row) for row in rows]


@transactional
def list_tenant_packages(
    session: Session,
    tenant_id: int,
    filters: PackageListFilter,
    limit: int | None = None,
    today: date | None = None,
) -> list[dict]:
    """
    A tenant's own packages. The unit filter does not apply here; ownership is
    the only scope.
    """
    query = (
        PackageQuery()
        .owned_by(tenant_id)
        .with_status(filters.status)
        .arrived_within(resolve_date_window(filters, today=today))
        .matching(filters.search)
    )
    rows = PackageDao().listPackages(session, query.criteria, limit or settings.TENANT_PACKAGE_LIMIT)
    return [_package_row(row) for row in rows]


@transactional
def get_package_detail(session: Session, package_id: int) -> dict:
    """
    One package with tenant, unit, receiving staff and the latest note.

    Raises
    ------
    NotFoundError
        If the package does not exist.
    """
    row = PackageDao().fetchPackageDetail(session, package_id)
    if row is None:
        raise NotFoundError(f"Package {package_id} not found")
    detail = _package_row(row)
    detail["handled_by_staff"] = row.handled_by_staff
    detail["latest_note"] = PackageStatusLogDao().fetchLatestNote(session, package_id)
    return detail


@transactional
def latest_note(session: Session, package_id: int) -> str:
    return PackageStatusLogDao().fetchLatestNote(session, package_id)


@transactional
def list_package_history(session: Session, package_id: int) -> list[dict]:
    """Full timeline of one package, newest first."""
    rows = PackageStatusLogDao().fetchEntriesByPackageId(session, package_id)
    return [_history_row(row) for row in rows]


@transactional
def get_tenant_package_logs(session: Session, tenant_id: int, package_id: int) -> dict:
    """
    A tenant's view of one package and its timeline.

    Raises
    ------
    NotFoundError
        If the package does not exist.
    ForbiddenError
        If the package belongs to another tenant.
    """
    row = PackageDao().fetchPackageDetail(session, package_id)
    if row is None:
        raise NotFoundError(f"Package {package_id} not found")
    if row.Package.tenant_id != tenant_id:
        logger.warning("Tenant %s denied access to package %s", tenant_id, package_id)
        raise ForbiddenError("You do not have access to this package")
    return {
        "package": _package_row(row),
        "logs": list_package_history(package_id=package_id, session=session),
    }


@transactional
def list_status_log(
    session: Session,
    status: str | None = None,
    unit: str | None = None,
    day: date | None = None,
    limit: int | None = None,
) -> list[dict]:
    """
    Global status-change feed, newest first, capped at ``LOG_FEED_LIMIT``.
    """
    query = StatusLogQuery().with_status(status).in_unit(unit).on_day(day)
    rows = PackageStatusLogDao().fetchGlobalFeed(session, query.criteria, limit or settings.LOG_FEED_LIMIT)
    feed = []
    for row in rows:
        item = _history_row(row)
        item.update(
            tracking_no=row.tracking_no,
            carrier=row.carrier,
            tenant_name=row.tenant_name,
            building_code=row.building_code,
            room_no=row.room_no,
            unit=f"{row.building_code}{row.room_no}",
        )
        feed.append(item)
    return feed
