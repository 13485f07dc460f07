"""
API Package: FastAPI Router • Models • JWT Utils
=================================================

Mission
-------
This package defines the HTTP interface of the package tracking service:
FastAPI routing, bearer-token auth and request/response validation.

Contents
--------
- fast_api
    FastAPI router with endpoints for:
      • Auth: login
      • Officer: register parcels, change status/notes, package lists with
        filters, package detail, global status feed, unit labels
      • Admin: officer operations plus package delete, admin package list,
        status feed and directory cascade deletes (building, room, tenant, officer)
      • Tenant: own package list, own package timeline, contact profile

- models
    Pydantic data contracts for request/response validation:
      • UserCredentials, LoginResponse, Identity (auth)
      • PackageCreate, PackageUpdate, PackageCreated (writes)
      • PackageSummary, PackageDetail, HistoryEntry, StatusFeedEntry,
        TenantPackageLogs (reads)
      • TenantProfile, TenantProfileUpdate, StaffProfile, CascadeResult

- utils
    JWT helpers and dependencies:
      • create_access_token(claims): issues signed JWTs with exp
      • verify_token(token): validates JWTs and returns their claims
      • get_identity / require_roles: bearer header to identity, role checks
      • get_acting_staff / get_current_tenant: identity to staff or tenant record
"""
