"""Condo parcel tracking backend: package lifecycle, status history and role-scoped queries."""
