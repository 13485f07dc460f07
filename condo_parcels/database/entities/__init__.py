"""
Entities Package: SQLAlchemy 2.0 ORM Models
============================================

The `entities` package defines the ORM models of the application, mapping
database tables to Python classes using SQLAlchemy 2.0-typed mappings.
These classes form the persistence backbone and are consumed by DAOs
(`daos` package).

Tech Stack & Conventions
------------------------
- PostgreSQL in production, SQLite for local runs and tests
- Integer surrogate keys (room uses the natural key building + room number)
- Timezone-aware UTC timestamps (`types.UTCDateTime`)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Plain foreign keys, no ORM relationship cascades: dependent rows are deleted
  explicitly by the DAOs, children first

Contents
--------
- Package (`package`)
    Ledger row of one parcel: owner tenant, receiving staff, tracking number,
    carrier, sender, arrival/pickup timestamps and `current_status`.

- PackageStatusLog (`package_status_log`)
    Append-only status history entry: package, acting staff, status, note,
    server-assigned `status_time`.

- Directory: UserAccount, Building, Room, Tenant, Staff
    Read-mostly records used for joins, identity resolution and cascades.
"""

from condo_parcels.database.entities.directory import Building, Room, Staff, Tenant, UserAccount
from condo_parcels.database.entities.package import Package, PackageStatus
from condo_parcels.database.entities.package_status_log import PackageStatusLog

__all__ = [
    "Building",
    "Package",
    "PackageStatus",
    "PackageStatusLog",
    "Room",
    "Staff",
    "Tenant",
    "UserAccount",
]
