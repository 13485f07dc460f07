"""
Package lifecycle operations: create, transition, delete.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts (and
uses) an injected `session: Session` provided by the decorator, so the Ledger
write and the History Log append commit together or not at all.

Transition policy
-----------------
Any status may follow any other; there is no forbidden-transition table.
The pickup timestamp follows the requested status:

- PICKED_UP: set to the current server time, overwriting any earlier value.
- ARRIVED:   cleared (re-arrival / correction).
- RETURNED:  left as it was. No return time is stamped.

Concurrency
-----------
The package row is read with ``SELECT ... FOR UPDATE`` so concurrent changes
to the same package are serialized by the database. There is no version
column: the last transaction to commit sets the final status.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from condo_parcels.database.core.errors import NotFoundError, ValidationError, from_integrity_error
from condo_parcels.database.core.validation import parse_optional_status, require_id
from condo_parcels.database.daos.directory_dao import DirectoryDao
from condo_parcels.database.daos.package_dao import PackageDao
from condo_parcels.database.daos.package_status_log_dao import PackageStatusLogDao
from condo_parcels.database.entities.package import Package, PackageStatus
from condo_parcels.database.entities.types import as_utc, utc_now
from condo_parcels.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def pickup_timestamp_for(status: PackageStatus, previous: datetime | None, now: datetime) -> datetime | None:
    """
    Pickup timestamp a package carries after moving to ``status``.

    Parameters
    ----------
    status : PackageStatus
        Status being applied.
    previous : datetime | None
        The package's pickup timestamp before the change.
    now : datetime
        Current server time.

    Returns
    -------
    datetime | None
        ``now`` for PICKED_UP, None for ARRIVED, ``previous`` for RETURNED.
    """
    if status is PackageStatus.PICKED_UP:
        return now
    if status is PackageStatus.ARRIVED:
        return None
    return previous


def _package_summary(package: Package) -> dict:
    return {
        "package_id": package.package_id,
        "current_status": package.current_status,
        "arrived_at": package.arrived_at,
        "picked_up_at": package.picked_up_at,
    }


def _require_staff(session: Session, staff_id) -> int:
    staff_id = require_id(staff_id, "staff_id")
    if DirectoryDao().fetchStaffById(session, staff_id) is None:
        raise NotFoundError(f"Staff member {staff_id} not found")
    return staff_id


@transactional
def create_package(
    session: Session,
    tenant_id: int,
    staff_id: int,
    tracking_no: str | None = None,
    carrier: str | None = None,
    sender_name: str | None = None,
    status: str | None = None,
    note: str | None = None,
    arrived_at: datetime | None = None,
) -> dict:
    """
    Register an arriving parcel and write its first history entry.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    tenant_id : int
        Owner. Must resolve to an existing tenant.
    staff_id : int
        Receiving staff member; also the actor of the first history entry.
    tracking_no, carrier, sender_name : str | None
        Optional free text; blank strings are stored as NULL.
    status : str | None
        Initial status, ARRIVED when omitted.
    note : str | None
        Note of the first history entry ("" when omitted).
    arrived_at : datetime | None
        Arrival time; defaults to now and may be backdated.

    Returns
    -------
    dict
        {'package_id', 'current_status', 'arrived_at', 'picked_up_at'}

    Raises
    ------
    ValidationError
        Missing tenant/staff id, unknown tenant, or invalid status.
    NotFoundError
        Unknown staff member.
    """
    requested = parse_optional_status(status) or PackageStatus.ARRIVED
    tenant_id = require_id(tenant_id, "tenant_id")
    if DirectoryDao().fetchTenantById(session, tenant_id) is None:
        raise ValidationError("Tenant not found")
    staff_id = _require_staff(session, staff_id)

    now = utc_now()
    package = Package(
        tenant_id=tenant_id,
        received_by_staff_id=staff_id,
        current_status=requested.value,
        arrived_at=as_utc(arrived_at) if arrived_at else now,
        picked_up_at=pickup_timestamp_for(requested, None, now),
        tracking_no=tracking_no or None,
        carrier=carrier or None,
        sender_name=sender_name or None,
    )
    try:
        PackageDao().createPackage(session, package)
    except IntegrityError as e:
        raise from_integrity_error(e) from e
    PackageStatusLogDao().appendEntry(
        session, package_id=package.package_id, staff_id=staff_id, status=requested.value, note=note or ""
    )
    logger.info(
        "Package %s created for tenant %s by staff %s with status %s",
        package.package_id, tenant_id, staff_id, requested.value,
    )
    return _package_summary(package)


@transactional
def apply_transition(
    session: Session,
    package_id: int,
    staff_id: int,
    status: str | None = None,
    note: str | None = None,
) -> dict:
    """
    Change a package's status and append the matching history entry.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    package_id : int
        Package to change.
    staff_id : int
        Acting staff member, recorded on the history entry.
    status : str | None
        Requested status. When omitted the current status is kept and only a
        new note/actor entry is logged; the pickup timestamp is untouched.
    note : str | None
        Free text stored verbatim ("" when omitted).

    Returns
    -------
    dict
        {'package_id', 'current_status', 'arrived_at', 'picked_up_at'}

    Raises
    ------
    ValidationError
        Invalid status (``InvalidStatusError``) or missing staff id.
    NotFoundError
        Unknown package or staff member.
    """
    requested = parse_optional_status(status)
    staff_id = require_id(staff_id, "staff_id")

    package_dao = PackageDao()
    package = package_dao.fetchPackageById(session, package_id, for_update=True)
    if package is None:
        raise NotFoundError(f"Package {package_id} not found")
    _require_staff(session, staff_id)

    previous_status = package.current_status
    if requested is None:
        applied = PackageStatus(previous_status)
        picked_up_at = package.picked_up_at
    else:
        applied = requested
        picked_up_at = pickup_timestamp_for(requested, package.picked_up_at, utc_now())

    package_dao.updatePackageStatus(session, package, applied.value, picked_up_at)
    PackageStatusLogDao().appendEntry(
        session, package_id=package.package_id, staff_id=staff_id, status=applied.value, note=note or ""
    )
    logger.info(
        "Package %s moved %s -> %s by staff %s",
        package.package_id, previous_status, applied.value, staff_id,
    )
    return _package_summary(package)


@transactional
def delete_package(session: Session, package_id: int) -> None:
    """
    Hard-delete a package: its history entries first, then the Ledger row.

    Raises
    ------
    NotFoundError
        If the package does not exist.
    """
    package_dao = PackageDao()
    if package_dao.fetchPackageById(session, package_id, for_update=True) is None:
        raise NotFoundError(f"Package {package_id} not found")
    removed = PackageStatusLogDao().deleteEntriesByPackageIds(session, [package_id])
    package_dao.deletePackages(session, [package_id])
    logger.info("Package %s deleted with %s history entries", package_id, removed)
