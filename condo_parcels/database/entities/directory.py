"""
Directory ORM Models
====================

Buildings, rooms, tenants, staff members and their login accounts. The package
services only read these rows (joins, identity resolution) and delete them in
cascades; their create/update forms live outside this service.
"""

from sqlalchemy import ForeignKey, ForeignKeyConstraint, Integer, TEXT, VARCHAR
from sqlalchemy.orm import Mapped, mapped_column

from condo_parcels.database.config.connection_engine import declarativeBase


class UserAccount(declarativeBase):
    """
    ORM model for the `user_account` table: one login.

    `password` holds either a bcrypt hash or, for legacy seeds, plaintext.
    `role` is ADMIN, OFFICER or TENANT; `status` is ACTIVE or INACTIVE.
    """

    __tablename__ = "user_account"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(VARCHAR(64), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    role: Mapped[str] = mapped_column(VARCHAR(16), nullable=False)
    status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default="ACTIVE")

    def __str__(self) -> str:
        return f"UserAccount: id:{self.user_id}, username:{self.username}, role:{self.role}"


class Building(declarativeBase):
    """ORM model for the `building` table."""

    __tablename__ = "building"

    building_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_code: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, unique=True)
    building_name: Mapped[str | None] = mapped_column(TEXT, nullable=True)


class Room(declarativeBase):
    """ORM model for the `room` table, keyed by (building, room number)."""

    __tablename__ = "room"

    building_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("building.building_id"), primary_key=True
    )
    room_no: Mapped[str] = mapped_column(VARCHAR(16), primary_key=True)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(VARCHAR(16), nullable=False, default="ACTIVE")


class Tenant(declarativeBase):
    """ORM model for the `tenant` table: a resident living in one room."""

    __tablename__ = "tenant"
    __table_args__ = (
        ForeignKeyConstraint(
            ["building_id", "room_no"], ["room.building_id", "room.room_no"]
        ),
    )

    tenant_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.user_id"), nullable=False, unique=True
    )
    building_id: Mapped[int] = mapped_column(Integer, nullable=False)
    room_no: Mapped[str] = mapped_column(VARCHAR(16), nullable=False)
    full_name: Mapped[str] = mapped_column(TEXT, nullable=False)
    phone: Mapped[str | None] = mapped_column(VARCHAR(32), nullable=True)
    email: Mapped[str | None] = mapped_column(VARCHAR(255), nullable=True)


class Staff(declarativeBase):
    """ORM model for the `staff` table: an officer or an administrator."""

    __tablename__ = "staff"

    staff_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_account.user_id"), nullable=False, unique=True
    )
    full_name: Mapped[str] = mapped_column(TEXT, nullable=False)
    phone: Mapped[str | None] = mapped_column(VARCHAR(32), nullable=True)
    email: Mapped[str | None] = mapped_column(VARCHAR(255), nullable=True)
