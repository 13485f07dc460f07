"""
Package Status Log DAO

Purpose
-------
Data-access layer for the `PackageStatusLog` ORM entity (the status History
Log). Provides:
- Append of a new entry (time assigned here, never by the caller)
- Latest note of a package
- Per-package timeline and the global feed, newest first
- Bulk deletes used by package/tenant/staff cascades

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- There is no update method: entries are immutable once written.
- Ordering is by `status_time` descending with `log_id` descending as the
  tie-breaker, so two entries written within the same clock tick still come
  back in write order (newest first).

Error Handling
--------------
- Methods log the failing operation with `logger.exception(...)` and re-raise.
"""

import logging

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from condo_parcels.database.entities.directory import Building, Room, Staff, Tenant
from condo_parcels.database.entities.package import Package
from condo_parcels.database.entities.package_status_log import PackageStatusLog

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (PackageStatusLog.status_time.desc(), PackageStatusLog.log_id.desc())


class PackageStatusLogDao:
    """
    Data Access Object (DAO) for the append-only package status history.
    """

    def appendEntry(self, session: Session, package_id: int, staff_id: int, status: str, note: str = "") -> PackageStatusLog:
        """
        Append one status-history entry.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        package_id : int
            Package the status was assigned to. Must exist.
        staff_id : int
            Acting staff member.
        status : str
            Status value applied.
        note : str
            Free-text note; stored verbatim, empty string when omitted.

        Returns
        -------
        PackageStatusLog
            The flushed entry, with `log_id` and `status_time` populated.
        """
        try:
            entry = PackageStatusLog(
                package_id=package_id,
                updated_by_staff_id=staff_id,
                status=status,
                note=note or "",
            )
            session.add(entry)
            session.flush()
            return entry
        except Exception:
            logger.exception("Error in PackageStatusLogDao.appendEntry (package_id=%s)", package_id)
            raise

    def fetchLatestEntry(self, session: Session, package_id: int) -> PackageStatusLog | None:
        try:
            return (
                session.query(PackageStatusLog)
                .filter(PackageStatusLog.package_id == package_id)
                .order_by(*_NEWEST_FIRST)
                .first()
            )
        except Exception:
            logger.exception("Error in PackageStatusLogDao.fetchLatestEntry (package_id=%s)", package_id)
            raise

    def fetchLatestNote(self, session: Session, package_id: int) -> str:
        """
        Return the note of the most recent entry, or "" when the package has none.
        """
        entry = self.fetchLatestEntry(session, package_id)
        return (entry.note or "") if entry else ""

    def fetchEntriesByPackageId(self, session: Session, package_id: int) -> list:
        """
        Fetch a package's full timeline, newest first.

        Returns
        -------
        list[Row]
            Rows with attributes ``PackageStatusLog`` and ``updated_by`` (staff
            full name, "Unknown" when the staff row is gone).
        """
        try:
            return (
                session.query(
                    PackageStatusLog,
                    func.coalesce(Staff.full_name, "Unknown").label("updated_by"),
                )
                .outerjoin(Staff, PackageStatusLog.updated_by_staff_id == Staff.staff_id)
                .filter(PackageStatusLog.package_id == package_id)
                .order_by(*_NEWEST_FIRST)
                .all()
            )
        except Exception:
            logger.exception("Error in PackageStatusLogDao.fetchEntriesByPackageId (package_id=%s)", package_id)
            raise

    def fetchGlobalFeed(self, session: Session, criteria: list, limit: int) -> list:
        """
        Fetch status changes across all packages, newest first.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        criteria : list
            SQLAlchemy boolean expressions, combined with AND.
        limit : int
            Row ceiling.

        Returns
        -------
        list[Row]
            Rows with attributes ``PackageStatusLog``, ``tracking_no``,
            ``carrier``, ``tenant_name``, ``building_code``, ``room_no`` and
            ``updated_by``.
        """
        try:
            return (
                session.query(
                    PackageStatusLog,
                    Package.tracking_no,
                    Package.carrier,
                    Tenant.full_name.label("tenant_name"),
                    Building.building_code,
                    Room.room_no,
                    func.coalesce(Staff.full_name, "Unknown").label("updated_by"),
                )
                .join(Package, PackageStatusLog.package_id == Package.package_id)
                .join(Tenant, Package.tenant_id == Tenant.tenant_id)
                .join(
                    Room,
                    and_(Tenant.building_id == Room.building_id, Tenant.room_no == Room.room_no),
                )
                .join(Building, Room.building_id == Building.building_id)
                .outerjoin(Staff, PackageStatusLog.updated_by_staff_id == Staff.staff_id)
                .filter(*criteria)
                .order_by(*_NEWEST_FIRST)
                .limit(limit)
                .all()
            )
        except Exception:
            logger.exception("Error in PackageStatusLogDao.fetchGlobalFeed")
            raise

    def countEntries(self, session: Session, package_id: int) -> int:
        try:
            return (
                session.query(func.count(PackageStatusLog.log_id))
                .filter(PackageStatusLog.package_id == package_id)
                .scalar()
            )
        except Exception:
            logger.exception("Error in PackageStatusLogDao.countEntries (package_id=%s)", package_id)
            raise

    def deleteEntriesByPackageIds(self, session: Session, package_ids: list[int]) -> int:
        """Delete every entry of the given packages. Returns the number of rows removed."""
        if not package_ids:
            return 0
        try:
            deleted = (
                session.query(PackageStatusLog)
                .filter(PackageStatusLog.package_id.in_(package_ids))
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted
        except Exception:
            logger.exception("Error in PackageStatusLogDao.deleteEntriesByPackageIds")
            raise

    def deleteEntriesByStaffId(self, session: Session, staff_id: int) -> int:
        """Delete every entry authored by a staff member. Returns the number of rows removed."""
        try:
            deleted = (
                session.query(PackageStatusLog)
                .filter(PackageStatusLog.updated_by_staff_id == staff_id)
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted
        except Exception:
            logger.exception("Error in PackageStatusLogDao.deleteEntriesByStaffId (staff_id=%s)", staff_id)
            raise
