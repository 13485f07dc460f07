"""
Directory DAO

Purpose
-------
Data-access layer for the directory records the package services depend on:
buildings, rooms, tenants and staff members. Provides:
- Lookups by id and by login account (identity resolution)
- Tenant profile read (joined with room and building) and contact update
- Unit labels for the unit filter
- Id enumeration and row deletes used by cascades

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- Deletes here remove only the directory row itself. Ordering of a cascade
  (history, packages, tenant, account, room, building) is decided by the
  service layer, which runs it inside one transaction.
"""

import logging

from sqlalchemy import and_
from sqlalchemy.orm import Session

from condo_parcels.database.entities.directory import Building, Room, Staff, Tenant

logger = logging.getLogger(__name__)

unit_label = Building.building_code.concat(Room.room_no)
"""SQL expression for the unit label (building code followed by room number, e.g. ``A101``)."""


class DirectoryDao:
    """
    Data Access Object (DAO) for buildings, rooms, tenants and staff.
    """

    def fetchTenantById(self, session: Session, tenant_id: int) -> Tenant | None:
        try:
            return session.get(Tenant, tenant_id)
        except Exception:
            logger.exception("Error in DirectoryDao.fetchTenantById (tenant_id=%s)", tenant_id)
            raise

    def fetchTenantProfileByUserId(self, session: Session, user_id: int):
        """
        Fetch the tenant linked to a login account, joined with its room and building.

        Returns
        -------
        Row | None
            Row with attributes ``Tenant``, ``floor`` and ``building_code``.
        """
        try:
            return (
                session.query(Tenant, Room.floor, Building.building_code)
                .join(
                    Room,
                    and_(Tenant.building_id == Room.building_id, Tenant.room_no == Room.room_no),
                )
                .join(Building, Room.building_id == Building.building_id)
                .filter(Tenant.user_id == user_id)
                .one_or_none()
            )
        except Exception:
            logger.exception("Error in DirectoryDao.fetchTenantProfileByUserId (user_id=%s)", user_id)
            raise

    def updateTenantContact(self, session: Session, tenant: Tenant, phone: str | None = None, email: str | None = None) -> Tenant:
        """Overwrite the given contact fields; a None argument leaves that field as is."""
        try:
            if phone is not None:
                tenant.phone = phone
            if email is not None:
                tenant.email = email
            session.flush()
            return tenant
        except Exception:
            logger.exception("Error in DirectoryDao.updateTenantContact (tenant_id=%s)", tenant.tenant_id)
            raise

    def fetchStaffById(self, session: Session, staff_id: int) -> Staff | None:
        try:
            return session.get(Staff, staff_id)
        except Exception:
            logger.exception("Error in DirectoryDao.fetchStaffById (staff_id=%s)", staff_id)
            raise

    def fetchStaffByUserId(self, session: Session, user_id: int) -> Staff | None:
        try:
            return session.query(Staff).filter(Staff.user_id == user_id).one_or_none()
        except Exception:
            logger.exception("Error in DirectoryDao.fetchStaffByUserId (user_id=%s)", user_id)
            raise

    def fetchUnitLabels(self, session: Session) -> list[str]:
        """Return every unit label, sorted."""
        try:
            rows = (
                session.query(unit_label.label("unit"))
                .select_from(Room)
                .join(Building, Room.building_id == Building.building_id)
                .distinct()
                .order_by("unit")
                .all()
            )
            return [row.unit for row in rows]
        except Exception:
            logger.exception("Error in DirectoryDao.fetchUnitLabels")
            raise

    def fetchTenantIdsByBuilding(self, session: Session, building_id: int) -> list[int]:
        try:
            rows = session.query(Tenant.tenant_id).filter(Tenant.building_id == building_id).all()
            return [row.tenant_id for row in rows]
        except Exception:
            logger.exception("Error in DirectoryDao.fetchTenantIdsByBuilding (building_id=%s)", building_id)
            raise

    def fetchTenantIdsByRoom(self, session: Session, building_id: int, room_no: str) -> list[int]:
        try:
            rows = (
                session.query(Tenant.tenant_id)
                .filter(Tenant.building_id == building_id, Tenant.room_no == room_no)
                .all()
            )
            return [row.tenant_id for row in rows]
        except Exception:
            logger.exception("Error in DirectoryDao.fetchTenantIdsByRoom (building_id=%s, room_no=%s)", building_id, room_no)
            raise

    def deleteTenant(self, session: Session, tenant_id: int) -> int | None:
        """
        Delete a tenant row.

        Returns
        -------
        int | None
            The tenant's `user_id` (so the caller can delete the account next),
            or None when the tenant did not exist.
        """
        try:
            tenant = session.get(Tenant, tenant_id)
            if tenant is None:
                return None
            user_id = tenant.user_id
            session.delete(tenant)
            session.flush()
            return user_id
        except Exception:
            logger.exception("Error in DirectoryDao.deleteTenant (tenant_id=%s)", tenant_id)
            raise

    def deleteStaff(self, session: Session, staff_id: int) -> int | None:
        """Delete a staff row; returns its `user_id`, or None when it did not exist."""
        try:
            staff = session.get(Staff, staff_id)
            if staff is None:
                return None
            user_id = staff.user_id
            session.delete(staff)
            session.flush()
            return user_id
        except Exception:
            logger.exception("Error in DirectoryDao.deleteStaff (staff_id=%s)", staff_id)
            raise

    def deleteRoom(self, session: Session, building_id: int, room_no: str) -> bool:
        """Delete one room. Returns False when it did not exist."""
        try:
            deleted = (
                session.query(Room)
                .filter(Room.building_id == building_id, Room.room_no == room_no)
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted > 0
        except Exception:
            logger.exception("Error in DirectoryDao.deleteRoom (building_id=%s, room_no=%s)", building_id, room_no)
            raise

    def deleteRoomsByBuilding(self, session: Session, building_id: int) -> int:
        try:
            deleted = (
                session.query(Room)
                .filter(Room.building_id == building_id)
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted
        except Exception:
            logger.exception("Error in DirectoryDao.deleteRoomsByBuilding (building_id=%s)", building_id)
            raise

    def deleteBuilding(self, session: Session, building_id: int) -> bool:
        """Delete one building. Returns False when it did not exist."""
        try:
            deleted = (
                session.query(Building)
                .filter(Building.building_id == building_id)
                .delete(synchronize_session=False)
            )
            session.flush()
            return deleted > 0
        except Exception:
            logger.exception("Error in DirectoryDao.deleteBuilding (building_id=%s)", building_id)
            raise
