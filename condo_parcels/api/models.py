"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation. Request bodies are checked
here, before any service function touches the store.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from condo_parcels.database.core.errors import DomainError
from condo_parcels.database.core.validation import normalize_email, normalize_phone, parse_optional_status


def _checked(check, value):
    """Run a domain validator inside a pydantic validator (pydantic expects ValueError)."""
    try:
        return check(value)
    except DomainError as e:
        raise ValueError(e.detail) from e


class Identity(BaseModel):
    """
    Caller identity decoded from a verified access token.
    """
    user_id: int
    """Login account id (`sub` claim)."""
    role: str
    """ADMIN, OFFICER or TENANT."""


class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    username: str
    """The username of the user"""
    password: str
    """The plaintext password provided for authentication."""


class LoginResponse(BaseModel):
    token: str = Field(..., description="Signed JWT to send as `Authorization: Bearer <token>`.")
    role: str = Field(..., description="Role of the authenticated account.", example="OFFICER")


class PackageCreate(BaseModel):
    """
    Body of a package registration by an officer or admin. The receiving staff
    member is always the caller.
    """
    tenant_id: Optional[int] = Field(None, description="Owner tenant (required).", example=12)
    tracking_no: Optional[str] = Field(None, example="TH0123456789")
    carrier: Optional[str] = Field(None, example="Kerry Express")
    sender_name: Optional[str] = Field(None, example="Shopee")
    status: Optional[str] = Field(None, description="Initial status, ARRIVED when omitted.")
    note: Optional[str] = Field(None, description="Note of the first history entry.")
    arrived_at: Optional[datetime] = Field(None, description="Arrival time, defaults to now.")

    @field_validator("status")
    @classmethod
    def _status(cls, value):
        parsed = _checked(parse_optional_status, value)
        return parsed.value if parsed else None


class PackageUpdate(BaseModel):
    """
    Body of a status change. Omitting `status` keeps the current one and only
    records a new note.
    """
    status: Optional[str] = None
    note: Optional[str] = None

    @field_validator("status")
    @classmethod
    def _status(cls, value):
        parsed = _checked(parse_optional_status, value)
        return parsed.value if parsed else None


class PackageCreated(BaseModel):
    package_id: int
    current_status: str


class PackageSummary(BaseModel):
    """One row of a package list."""
    package_id: int
    tenant_id: int
    tenant_name: Optional[str] = None
    building_code: Optional[str] = None
    room_no: Optional[str] = None
    unit: Optional[str] = None
    tracking_no: Optional[str] = None
    carrier: Optional[str] = None
    sender_name: Optional[str] = None
    current_status: str
    arrived_at: datetime
    picked_up_at: Optional[datetime] = None


class PackageDetail(PackageSummary):
    handled_by_staff: Optional[str] = None
    """Full name of the receiving staff member."""
    latest_note: str = ""
    """Note of the most recent history entry ("" when none)."""


class HistoryEntry(BaseModel):
    log_id: int
    package_id: int
    status: str
    note: str = ""
    status_time: datetime
    updated_by: str


class StatusFeedEntry(HistoryEntry):
    """History entry joined with its package and unit, for the global feed."""
    tracking_no: Optional[str] = None
    carrier: Optional[str] = None
    tenant_name: Optional[str] = None
    building_code: Optional[str] = None
    room_no: Optional[str] = None
    unit: Optional[str] = None


class TenantPackageLogs(BaseModel):
    package: PackageSummary
    logs: List[HistoryEntry]


class StaffProfile(BaseModel):
    staff_id: int
    full_name: str
    role: str


class TenantProfile(BaseModel):
    tenant_id: int
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    building_id: int
    building_code: str
    room_no: str
    floor: Optional[int] = None


class TenantProfileUpdate(BaseModel):
    """
    Contact fields a tenant may change. Both are trimmed; at least one is required.
    """
    phone: Optional[str] = Field(None, description="1-32 characters.", example="081-234-5678")
    email: Optional[str] = Field(None, example="tenant@example.com")

    @field_validator("phone")
    @classmethod
    def _phone(cls, value):
        return None if value is None else _checked(normalize_phone, value)

    @field_validator("email")
    @classmethod
    def _email(cls, value):
        return None if value is None else _checked(normalize_email, value)


class CascadeResult(BaseModel):
    """Counts of what a cascade delete removed."""
    tenant_id: Optional[int] = None
    staff_id: Optional[int] = None
    rooms_deleted: Optional[int] = None
    tenants_deleted: Optional[int] = None
    entries_deleted: Optional[int] = None
    packages_deleted: int = 0
