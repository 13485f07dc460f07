"""
PackageStatusLog ORM Model
==========================

The ``PackageStatusLog`` ORM model is one immutable status-history entry: a
record that a staff member assigned a status to a package, with a note and a
server-assigned time. It maps to the ``package_status_log`` table.

Key features
~~~~~~~~~~~~
- Integer primary key (``log_id``); ties on ``status_time`` are broken by it
- Foreign keys to ``package.package_id`` and ``staff.staff_id``
- ``status_time`` is set when the row is written, never supplied by callers
- Indexed for "latest entry per package" and "global feed by time" reads

Entries are never updated. They are deleted only together with their package,
tenant or staff member.
"""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from condo_parcels.database.config.connection_engine import declarativeBase
from condo_parcels.database.entities.types import UTCDateTime, utc_now


class PackageStatusLog(declarativeBase):
    """
    ORM model for the `package_status_log` table.

    Attributes
    ----------
    log_id : int
        Primary key.
    package_id : int
        Package the status was assigned to.
    updated_by_staff_id : int
        Staff member who made the change.
    status : str
        Status value at that point in time.
    note : str
        Free-text note, empty string when none was given.
    status_time : datetime
        Time the entry was written (UTC).
    """

    __tablename__ = "package_status_log"
    __table_args__ = (
        Index("ix_status_log_package_time", "package_id", "status_time"),
        Index("ix_status_log_time", "status_time"),
    )

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Primary key."""

    package_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("package.package_id"), nullable=False
    )
    """Foreign key to the package."""

    updated_by_staff_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("staff.staff_id"), nullable=False
    )
    """Foreign key to the acting staff member."""

    status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False)
    note: Mapped[str] = mapped_column(TEXT, nullable=False, default="")

    status_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    """Write time of the entry (UTC)."""

    def __init__(self, package_id: int, updated_by_staff_id: int, status: str, note: str = ""):
        self.package_id = package_id
        self.updated_by_staff_id = updated_by_staff_id
        self.status = status
        self.note = note or ""
        self.status_time = utc_now()

    def __str__(self) -> str:
        return (
            f"StatusLog: package:{self.package_id}, status:{self.status}, "
            f"by:{self.updated_by_staff_id}, at:{self.status_time}"
        )
