"""
Package DAO

Purpose
-------
Thin data-access layer for the `Package` ORM entity (the Ledger). Provides:
- Insert of a new package row
- Point lookups, optionally row-locked for a status change
- Joined detail and list reads (tenant, room, building, receiving staff)
- Status/pickup-time updates
- Deletes by id, by tenant and by receiving staff

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Business rules (status policy, history logging, authorization) live in the
  service layer; the DAO focuses on persistence operations.
- No method deletes status-log rows. Callers must clear a package's history
  (see `PackageStatusLogDao`) before deleting the package, in the same
  transaction.
- List reads take ready-made filter criteria (SQLAlchemy expressions, see
  `condo_parcels.database.core.filters`), so every user-supplied value
  reaches the database as a bound parameter.

Usage
-----
.. code-block:: python

    from condo_parcels.database.daos.package_dao import PackageDao
    from condo_parcels.database.entities.package import Package

    dao = PackageDao()
    with session_factory() as session:
        package = dao.createPackage(session, Package(tenant_id=3, received_by_staff_id=7, current_status="ARRIVED"))
        session.commit()

        locked = dao.fetchPackageById(session, package.package_id, for_update=True)

Error Handling
--------------
- Each method logs the failing operation with `logger.exception(...)` and re-raises.
"""

import logging
from datetime import datetime

from sqlalchemy import and_
from sqlalchemy.orm import Session

from condo_parcels.database.entities.directory import Building, Room, Staff, Tenant
from condo_parcels.database.entities.package import Package

logger = logging.getLogger(__name__)


class PackageDao:
    """
    Data Access Object (DAO) for managing Package entities.
    """

    def createPackage(self, session: Session, package: Package) -> Package:
        """
        Insert a new package and flush so its `package_id` is assigned.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        package : Package
            Package entity to insert.

        Returns
        -------
        Package
            The flushed package, with `package_id` populated.

        Raises
        ------
        sqlalchemy.exc.IntegrityError
            If a foreign key or check constraint rejects the row.
        """
        try:
            session.add(package)
            session.flush()
            return package
        except Exception:
            logger.exception("Error in PackageDao.createPackage (tenant_id=%s)", package.tenant_id)
            raise

    def fetchPackageById(self, session: Session, package_id: int, for_update: bool = False) -> Package | None:
        """
        Fetch one package by id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        package_id : int
            Package identifier.
        for_update : bool
            Take a row lock (``SELECT ... FOR UPDATE``) so concurrent status
            changes on the same package are serialized by the database.
            Ignored by backends without row locks (SQLite).

        Returns
        -------
        Package | None
            The package, or None when it does not exist.
        """
        try:
            query = session.query(Package).filter(Package.package_id == package_id)
            if for_update:
                query = query.with_for_update()
            return query.one_or_none()
        except Exception:
            logger.exception("Error in PackageDao.fetchPackageById (package_id=%s)", package_id)
            raise

    def fetchPackageDetail(self, session: Session, package_id: int):
        """
        Fetch one package joined with its tenant, unit and receiving staff.

        Returns
        -------
        Row | None
            Row with attributes ``Package``, ``tenant_name``, ``building_code``,
            ``room_no`` and ``handled_by_staff`` (None if the staff row is gone).
        """
        try:
            return (
                self._joinedQuery(session)
                .add_columns(Staff.full_name.label("handled_by_staff"))
                .outerjoin(Staff, Package.received_by_staff_id == Staff.staff_id)
                .filter(Package.package_id == package_id)
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in PackageDao.fetchPackageDetail (package_id=%s)", package_id)
            raise

    def listPackages(self, session: Session, criteria: list, limit: int) -> list:
        """
        List packages matching every criterion, newest arrival first.

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
            Rows with attributes ``Package``, ``tenant_name``, ``building_code``
            and ``room_no``.
        """
        try:
            return (
                self._joinedQuery(session)
                .filter(*criteria)
                .order_by(Package.arrived_at.desc(), Package.package_id.desc())
                .limit(limit)
                .all()
            )
        except Exception:
            logger.exception("Error in PackageDao.listPackages")
            raise

    def updatePackageStatus(
        self, session: Session, package: Package, status: str, picked_up_at: datetime | None
    ) -> Package:
        """Set `current_status` and `picked_up_at` on a loaded package."""
        try:
            package.current_status = status
            package.picked_up_at = picked_up_at
            session.flush()
            return package
        except Exception:
            logger.exception("Error in PackageDao.updatePackageStatus (package_id=%s)", package.package_id)
            raise

    def fetchPackageIdsByTenantIds(self, session: Session, tenant_ids: list[int]) -> list[int]:
        if not tenant_ids:
            return []
        try:
            rows = session.query(Package.package_id).filter(Package.tenant_id.in_(tenant_ids)).all()
            return [row.package_id for row in rows]
        except Exception:
            logger.exception("Error in PackageDao.fetchPackageIdsByTenantIds")
            raise

    def fetchPackageIdsByReceivingStaff(self, session: Session, staff_id: int) -> list[int]:
        try:
            rows = session.query(Package.package_id).filter(Package.received_by_staff_id == staff_id).all()
            return [row.package_id for row in rows]
        except Exception:
            logger.exception("Error in PackageDao.fetchPackageIdsByReceivingStaff (staff_id=%s)", staff_id)
            raise

    def deletePackages(self, session: Session, package_ids: list[int]) -> int:
        """
        Delete packages by id.

        The caller must already have deleted every status-log row of these
        packages in the same transaction.

        Returns
        -------
        int
            Number of package rows deleted.
        """
        if not package_ids:
            return 0
        try:
            deleted = (
                session.query(Package)
                .filter(Package.package_id.in_(package_ids))
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted
        except Exception:
            logger.exception("Error in PackageDao.deletePackages")
            raise

    def _joinedQuery(self, session: Session):
        return (
            session.query(
                Package,
                Tenant.full_name.label("tenant_name"),
                Building.building_code,
                Room.room_no,
            )
            .join(Tenant, Package.tenant_id == Tenant.tenant_id)
            .join(
                Room,
                and_(Tenant.building_id == Room.building_id, Tenant.room_no == Room.room_no),
            )
            .join(Building, Room.building_id == Building.building_id)
        )
