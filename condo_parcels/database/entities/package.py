"""
Package ORM Model
=================

The ``Package`` ORM model is the Ledger row of one physical parcel tracked
from arrival to pickup or return. It maps to the ``package`` table.

Key features
~~~~~~~~~~~~
- Integer primary key (``package_id``), assigned on insert and never changed
- Foreign keys to the owning tenant and to the receiving staff member
- Optional tracking number, carrier and sender name (free text)
- Timezone-aware ``arrived_at`` (may be backdated) and ``picked_up_at`` (nullable)
- ``current_status`` restricted to the three lifecycle statuses

Lifecycle
~~~~~~~~~
Rows are created and mutated only through the transition service
(``condo_parcels.database.core.transitions``). Deleting a row requires its
status log entries to be deleted first, in the same transaction.
"""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from condo_parcels.database.config.connection_engine import declarativeBase
from condo_parcels.database.entities.types import UTCDateTime, utc_now


class PackageStatus(str, enum.Enum):
    """Lifecycle stage of a package. Any status may follow any other."""

    ARRIVED = "ARRIVED"
    PICKED_UP = "PICKED_UP"
    RETURNED = "RETURNED"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


class Package(declarativeBase):
    """
    ORM model for the `package` table.

    Attributes
    ----------
    package_id : int
        Primary key.
    tenant_id : int
        Owning tenant. Required and immutable after creation.
    received_by_staff_id : int
        Staff member who registered the arrival.
    tracking_no : str | None
        Carrier tracking number.
    carrier : str | None
        Carrier name.
    sender_name : str | None
        Sender as written on the parcel.
    arrived_at : datetime
        Arrival time (UTC). Defaults to the creation time.
    picked_up_at : datetime | None
        Pickup time (UTC). Set by PICKED_UP, cleared by ARRIVED.
    current_status : str
        One of ``PackageStatus``.
    """

    __tablename__ = "package"
    __table_args__ = (
        CheckConstraint(
            "current_status IN ('ARRIVED', 'PICKED_UP', 'RETURNED')",
            name="ck_package_current_status",
        ),
        Index("ix_package_tenant_arrived", "tenant_id", "arrived_at"),
        Index("ix_package_arrived_at", "arrived_at"),
    )

    package_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Primary key."""

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenant.tenant_id"), nullable=False
    )
    """Foreign key to the owning tenant."""

    received_by_staff_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("staff.staff_id"), nullable=False
    )
    """Foreign key to the staff member who logged the arrival."""

    tracking_no: Mapped[str | None] = mapped_column(VARCHAR(128), nullable=True)
    carrier: Mapped[str | None] = mapped_column(VARCHAR(128), nullable=True)
    sender_name: Mapped[str | None] = mapped_column(TEXT, nullable=True)

    arrived_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    """Arrival timestamp (UTC)."""

    picked_up_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    """Pickup timestamp (UTC), null while the package waits at the desk."""

    current_status: Mapped[str] = mapped_column(
        VARCHAR(16), nullable=False, default=PackageStatus.ARRIVED.value
    )
    """Current lifecycle status."""

    def __init__(
        self,
        tenant_id: int,
        received_by_staff_id: int,
        current_status: str,
        arrived_at: datetime | None = None,
        picked_up_at: datetime | None = None,
        tracking_no: str | None = None,
        carrier: str | None = None,
        sender_name: str | None = None,
    ):
        self.tenant_id = tenant_id
        self.received_by_staff_id = received_by_staff_id
        self.current_status = current_status
        self.arrived_at = arrived_at or utc_now()
        self.picked_up_at = picked_up_at
        self.tracking_no = tracking_no
        self.carrier = carrier
        self.sender_name = sender_name

    def __str__(self) -> str:
        return (
            f"Package: id:{self.package_id}, tenant:{self.tenant_id}, "
            f"tracking:{self.tracking_no}, status:{self.current_status}"
        )
