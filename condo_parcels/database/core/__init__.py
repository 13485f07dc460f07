"""
Core service functions.

- transitions: create, change status of, and delete packages (Ledger write and
  History Log append in one transaction)
- queries: tenant, officer and admin package lists, package detail, timelines
  and the global status feed
- directory: login, staff/tenant identity resolution, tenant profile, cascades
- filters: composable parameterized criteria and date-window resolution
- validation / errors: input checks and the stable error kinds callers see
"""
