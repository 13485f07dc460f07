"""
Service-layer operations over the Directory Store: login, identity resolution,
tenant profile and cascade deletes.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts (and
uses) an injected `session: Session` provided by the decorator.

Cascades
--------
Every top-level delete runs in one transaction and removes dependents before
parents: history entries, then packages, then the directory row, then the
login account. Any failure rolls the whole cascade back.
"""

import logging

from sqlalchemy.orm import Session

from condo_parcels.crypt.encrypt_decrypt import EncryptionDec
from condo_parcels.database.core.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from condo_parcels.database.core.validation import normalize_email, normalize_phone
from condo_parcels.database.daos.directory_dao import DirectoryDao
from condo_parcels.database.daos.package_dao import PackageDao
from condo_parcels.database.daos.package_status_log_dao import PackageStatusLogDao
from condo_parcels.database.daos.user_account_dao import UserAccountDao
from condo_parcels.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@transactional
def authenticate(session: Session, username: str, password: str) -> dict:
    """
    Check a username/password pair.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    username : str
        Login name.
    password : str
        Plaintext password.

    Returns
    -------
    dict
        {'user_id', 'role'} of the authenticated account.

    Raises
    ------
    UnauthorizedError
        Unknown username or wrong password (same message for both).
    ForbiddenError
        The account exists but is not ACTIVE.
    """
    user = UserAccountDao().fetchUser(session, username)
    if user is None or not EncryptionDec().check_passwords(password, user.password):
        logger.info("Failed login for username %s", username)
        raise UnauthorizedError("Invalid username or password")
    if user.status != "ACTIVE":
        raise ForbiddenError("Account is not active")
    return {"user_id": user.user_id, "role": user.role}


@transactional
def resolve_staff(session: Session, user_id: int) -> dict:
    """
    Staff member behind a login account.

    Raises
    ------
    ValidationError
        The account has no staff record, so it cannot act on packages.
    """
    staff = DirectoryDao().fetchStaffByUserId(session, user_id)
    if staff is None:
        raise ValidationError("No staff record is linked to this account")
    return {"staff_id": staff.staff_id, "full_name": staff.full_name}


@transactional
def resolve_tenant_profile(session: Session, user_id: int) -> dict:
    """Tenant behind a login account, with room and building details."""
    row = DirectoryDao().fetchTenantProfileByUserId(session, user_id)
    if row is None:
        raise NotFoundError("Tenant profile not found")
    tenant = row.Tenant
    return {
        "tenant_id": tenant.tenant_id,
        "full_name": tenant.full_name,
        "phone": tenant.phone,
        "email": tenant.email,
        "building_id": tenant.building_id,
        "building_code": row.building_code,
        "room_no": tenant.room_no,
        "floor": row.floor,
    }


@transactional
def update_tenant_profile(session: Session, user_id: int, phone: str | None = None, email: str | None = None) -> dict:
    """
    Update a tenant's own phone and/or email.

    Both values are trimmed. Phone must be 1-32 characters, email must look
    like an address. At least one of them is required.
    """
    if phone is None and email is None:
        raise ValidationError("Nothing to update")
    phone = normalize_phone(phone) if phone is not None else None
    email = normalize_email(email) if email is not None else None

    directory_dao = DirectoryDao()
    row = directory_dao.fetchTenantProfileByUserId(session, user_id)
    if row is None:
        raise NotFoundError("Tenant profile not found")
    directory_dao.updateTenantContact(session, row.Tenant, phone=phone, email=email)
    return resolve_tenant_profile(user_id=user_id, session=session)


@transactional
def list_unit_labels(session: Session) -> list[str]:
    return DirectoryDao().fetchUnitLabels(session)


def _purge_packages(session: Session, package_ids: list[int]) -> tuple[int, int]:
    entries = PackageStatusLogDao().deleteEntriesByPackageIds(session, package_ids)
    packages = PackageDao().deletePackages(session, package_ids)
    return entries, packages


def _purge_tenants(session: Session, tenant_ids: list[int]) -> int:
    """Delete tenants with their packages, history and accounts. Returns the package count."""
    directory_dao = DirectoryDao()
    account_dao = UserAccountDao()
    package_ids = PackageDao().fetchPackageIdsByTenantIds(session, tenant_ids)
    _, packages = _purge_packages(session, package_ids)
    for tenant_id in tenant_ids:
        user_id = directory_dao.deleteTenant(session, tenant_id)
        if user_id is not None:
            account_dao.deleteUser(session, user_id)
    return packages


@transactional
def delete_tenant(session: Session, tenant_id: int) -> dict:
    """
    Delete a tenant: history of their packages, the packages, the tenant row,
    then the tenant's login account.
    """
    if DirectoryDao().fetchTenantById(session, tenant_id) is None:
        raise NotFoundError(f"Tenant {tenant_id} not found")
    packages = _purge_tenants(session, [tenant_id])
    logger.info("Tenant %s deleted with %s packages", tenant_id, packages)
    return {"tenant_id": tenant_id, "packages_deleted": packages}


@transactional
def delete_staff(session: Session, staff_id: int) -> dict:
    """
    Delete a staff member: entries they authored, packages they received (with
    those packages' history), the staff row, then the login account.
    """
    directory_dao = DirectoryDao()
    if directory_dao.fetchStaffById(session, staff_id) is None:
        raise NotFoundError(f"Staff member {staff_id} not found")
    authored = PackageStatusLogDao().deleteEntriesByStaffId(session, staff_id)
    package_ids = PackageDao().fetchPackageIdsByReceivingStaff(session, staff_id)
    _, packages = _purge_packages(session, package_ids)
    user_id = directory_dao.deleteStaff(session, staff_id)
    if user_id is not None:
        UserAccountDao().deleteUser(session, user_id)
    logger.info(
        "Staff %s deleted with %s authored entries and %s received packages",
        staff_id, authored, packages,
    )
    return {"staff_id": staff_id, "entries_deleted": authored, "packages_deleted": packages}


@transactional
def delete_room(session: Session, building_id: int, room_no: str) -> dict:
    """Delete a room after running the tenant cascade for everyone living in it."""
    directory_dao = DirectoryDao()
    tenant_ids = directory_dao.fetchTenantIdsByRoom(session, building_id, room_no)
    packages = _purge_tenants(session, tenant_ids)
    if not directory_dao.deleteRoom(session, building_id, room_no):
        raise NotFoundError(f"Room {room_no} in building {building_id} not found")
    logger.info(
        "Room %s/%s deleted with %s tenants and %s packages",
        building_id, room_no, len(tenant_ids), packages,
    )
    return {"tenants_deleted": len(tenant_ids), "packages_deleted": packages}


@transactional
def delete_building(session: Session, building_id: int) -> dict:
    """Delete a building: tenant cascade for every resident, then its rooms, then the building."""
    directory_dao = DirectoryDao()
    tenant_ids = directory_dao.fetchTenantIdsByBuilding(session, building_id)
    packages = _purge_tenants(session, tenant_ids)
    rooms = directory_dao.deleteRoomsByBuilding(session, building_id)
    if not directory_dao.deleteBuilding(session, building_id):
        raise NotFoundError(f"Building {building_id} not found")
    logger.info(
        "Building %s deleted with %s rooms, %s tenants and %s packages",
        building_id, rooms, len(tenant_ids), packages,
    )
    return {"rooms_deleted": rooms, "tenants_deleted": len(tenant_ids), "packages_deleted": packages}
