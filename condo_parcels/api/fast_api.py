"""
FastAPI Router: Auth • Officer • Admin • Tenant package tracking
=================================================================

Purpose
-------
Defines the HTTP API for:
- Authentication: login (bearer JWT)
- Officers: register parcels, change status, list packages, global status feed
- Admins: everything officers can do, plus package delete and directory cascades
- Tenants: own package list, own package timeline, contact profile

Key Notes
---------
- Input validation via Pydantic models in `condo_parcels.api.models`.
- Every route except login reads `Authorization: Bearer <token>`.
- The acting staff member is always derived from the token, never from the body.
- Service errors (`DomainError`) propagate to the handlers in `main.py`, which
  map their kind to a status code.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from condo_parcels.api.models import (
    CascadeResult,
    LoginResponse,
    PackageCreate,
    PackageCreated,
    PackageDetail,
    PackageSummary,
    PackageUpdate,
    StaffProfile,
    StatusFeedEntry,
    TenantPackageLogs,
    TenantProfile,
    TenantProfileUpdate,
    UserCredentials,
)
from condo_parcels.api.utils import create_access_token, get_acting_staff, get_current_tenant, require_roles
from condo_parcels.database.config.config import settings
from condo_parcels.database.core.directory import (
    authenticate,
    delete_building,
    delete_room,
    delete_staff,
    delete_tenant,
    list_unit_labels,
    update_tenant_profile,
)
from condo_parcels.database.core.filters import PackageListFilter
from condo_parcels.database.core.queries import (
    get_package_detail,
    get_tenant_package_logs,
    list_packages,
    list_status_log,
    list_tenant_packages,
)
from condo_parcels.database.core.transitions import apply_transition, create_package, delete_package

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""

admin_only = require_roles("ADMIN")


# -----------------------
# Auth
# -----------------------
@router.post("/auth/login", response_model=LoginResponse)
def login(data: UserCredentials):
    """Authenticate a user and return a signed JWT.

    Request body:
        UserCredentials {username, password}

    Response:
        200: {'token', 'role'}
        401: unknown user or wrong password
        403: account is not active
    """
    account = authenticate(username=data.username, password=data.password)
    token = create_access_token({"sub": str(account["user_id"]), "role": account["role"]})
    return {"token": token, "role": account["role"]}


# -----------------------
# Officer (OFFICER or ADMIN)
# -----------------------
@router.get("/officer/me", response_model=StaffProfile)
def officer_me(staff: dict = Depends(get_acting_staff)):
    """Staff record behind the caller's token."""
    return staff


@router.get("/officer/units", response_model=List[str])
def officer_units(staff: dict = Depends(get_acting_staff)):
    """Unit labels (building code + room number) for the unit filter."""
    return list_unit_labels()


@router.post("/officer/packages", response_model=PackageCreated, status_code=201)
def officer_create_package(data: PackageCreate, staff: dict = Depends(get_acting_staff)):
    """Register an arriving parcel; the caller is the receiving staff member."""
    return _create(data, staff)


@router.get("/officer/packages", response_model=List[PackageSummary])
def officer_list_packages(
    status: Optional[str] = None,
    unit: Optional[str] = None,
    day: Optional[date] = Query(None, alias="date"),
    period: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    staff: dict = Depends(get_acting_staff),
):
    """Officer package list. Shows today's arrivals when no date input is given."""
    filters = PackageListFilter(
        status=status, unit=unit, day=day, period=period,
        start_date=start_date, end_date=end_date, search=search,
    )
    return list_packages(filters=filters, limit=settings.OFFICER_PACKAGE_LIMIT, default_today=True)


@router.get("/officer/packages/{package_id}", response_model=PackageDetail)
def officer_get_package(package_id: int, staff: dict = Depends(get_acting_staff)):
    """Package detail with tenant, unit, receiving staff and latest note."""
    return get_package_detail(package_id=package_id)


@router.patch("/officer/packages/{package_id}", response_model=PackageCreated)
def officer_update_package(package_id: int, data: PackageUpdate, staff: dict = Depends(get_acting_staff)):
    """Change status and/or add a note; attributed to the caller."""
    return _transition(package_id, data, staff)


@router.get("/officer/package-log", response_model=List[StatusFeedEntry])
def officer_package_log(
    status: Optional[str] = None,
    unit: Optional[str] = None,
    day: Optional[date] = Query(None, alias="date"),
    staff: dict = Depends(get_acting_staff),
):
    """Global status-change feed, newest first."""
    return list_status_log(status=status, unit=unit, day=day, limit=settings.LOG_FEED_LIMIT)


# -----------------------
# Admin (ADMIN only)
# -----------------------
@router.get("/admin/packages", response_model=List[PackageSummary], dependencies=[Depends(admin_only)])
def admin_list_packages(
    status: Optional[str] = None,
    unit: Optional[str] = None,
    period: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
):
    """Admin package list. No default date window."""
    filters = PackageListFilter(
        status=status, unit=unit, period=period,
        start_date=start_date, end_date=end_date, search=search,
    )
    return list_packages(filters=filters, limit=settings.ADMIN_PACKAGE_LIMIT)


@router.get("/admin/packages/{package_id}", response_model=PackageDetail, dependencies=[Depends(admin_only)])
def admin_get_package(package_id: int):
    return get_package_detail(package_id=package_id)


@router.post("/admin/packages", response_model=PackageCreated, status_code=201, dependencies=[Depends(admin_only)])
def admin_create_package(data: PackageCreate, staff: dict = Depends(get_acting_staff)):
    return _create(data, staff)


@router.patch("/admin/packages/{package_id}", response_model=PackageCreated, dependencies=[Depends(admin_only)])
def admin_update_package(package_id: int, data: PackageUpdate, staff: dict = Depends(get_acting_staff)):
    return _transition(package_id, data, staff)


@router.delete("/admin/packages/{package_id}", dependencies=[Depends(admin_only)])
def admin_delete_package(package_id: int):
    """Delete a package and its whole history."""
    delete_package(package_id=package_id)
    return {"package_id": package_id, "deleted": True}


@router.get("/admin/package-log", response_model=List[StatusFeedEntry], dependencies=[Depends(admin_only)])
def admin_package_log(status: Optional[str] = None):
    return list_status_log(status=status, limit=settings.LOG_FEED_LIMIT)


@router.delete("/admin/buildings/{building_id}", response_model=CascadeResult, dependencies=[Depends(admin_only)])
def admin_delete_building(building_id: int):
    """Delete a building with its rooms, tenants, their accounts, packages and history."""
    return delete_building(building_id=building_id)


@router.delete("/admin/rooms/{building_id}/{room_no}", response_model=CascadeResult, dependencies=[Depends(admin_only)])
def admin_delete_room(building_id: int, room_no: str):
    return delete_room(building_id=building_id, room_no=room_no)


@router.delete("/admin/tenants/{tenant_id}", response_model=CascadeResult, dependencies=[Depends(admin_only)])
def admin_delete_tenant(tenant_id: int):
    return delete_tenant(tenant_id=tenant_id)


@router.delete("/admin/officers/{staff_id}", response_model=CascadeResult, dependencies=[Depends(admin_only)])
def admin_delete_officer(staff_id: int):
    """Delete a staff member with the entries they wrote and the packages they received."""
    return delete_staff(staff_id=staff_id)


# -----------------------
# Tenant (TENANT only)
# -----------------------
@router.get("/tenant/packages", response_model=List[PackageSummary])
def tenant_list_packages(
    status: Optional[str] = None,
    search: Optional[str] = None,
    period: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    tenant: dict = Depends(get_current_tenant),
):
    """The caller's own packages, newest arrival first."""
    filters = PackageListFilter(
        status=status, period=period, start_date=start_date, end_date=end_date, search=search,
    )
    return list_tenant_packages(
        tenant_id=tenant["tenant_id"], filters=filters, limit=settings.TENANT_PACKAGE_LIMIT
    )


@router.get("/tenant/packages/{package_id}/logs", response_model=TenantPackageLogs)
def tenant_package_logs(package_id: int, tenant: dict = Depends(get_current_tenant)):
    """Timeline of one of the caller's packages; 403 for another tenant's package."""
    return get_tenant_package_logs(tenant_id=tenant["tenant_id"], package_id=package_id)


@router.get("/tenant/profile", response_model=TenantProfile)
def tenant_profile(tenant: dict = Depends(get_current_tenant)):
    return tenant


@router.put("/tenant/profile", response_model=TenantProfile)
def tenant_update_profile(data: TenantProfileUpdate, identity=Depends(require_roles("TENANT"))):
    """Update the caller's phone and/or email."""
    return update_tenant_profile(user_id=identity.user_id, phone=data.phone, email=data.email)


def _create(data: PackageCreate, staff: dict) -> dict:
    created = create_package(
        tenant_id=data.tenant_id,
        staff_id=staff["staff_id"],
        tracking_no=data.tracking_no,
        carrier=data.carrier,
        sender_name=data.sender_name,
        status=data.status,
        note=data.note,
        arrived_at=data.arrived_at,
    )
    return {"package_id": created["package_id"], "current_status": created["current_status"]}


def _transition(package_id: int, data: PackageUpdate, staff: dict) -> dict:
    updated = apply_transition(
        package_id=package_id, staff_id=staff["staff_id"], status=data.status, note=data.note
    )
    return {"package_id": updated["package_id"], "current_status": updated["current_status"]}
