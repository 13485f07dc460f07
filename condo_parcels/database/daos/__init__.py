"""
DAOs Package: Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer for the application.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean persistence APIs for the service layer while hiding direct query details.

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers
  (`@transactional` service functions); DAOs only add, flush, query and delete
- DAOs log and surface exceptions so upper layers decide error policy
- Filtering reads accept SQLAlchemy expressions, never SQL strings

Contents
--------
- PackageDao
    The Ledger: insert, row-locked lookup, joined detail/list reads,
    status updates and deletes of `Package` rows.

- PackageStatusLogDao
    The History Log: append-only entries, latest note, per-package timeline,
    global feed and cascade deletes.

- DirectoryDao
    Tenant/staff lookups and identity resolution, tenant contact updates,
    unit labels, and directory row deletes used by cascades.

- UserAccountDao
    Login accounts: create with hashing, lookup by username, delete.
"""
