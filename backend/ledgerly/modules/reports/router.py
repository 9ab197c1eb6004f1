"""Reports module router aggregation."""
from ledgerly.routers import reports

ROUTERS = [reports.router, reports.dashboard_router]
