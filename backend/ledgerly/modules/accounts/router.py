"""Accounts module router aggregation."""
from ledgerly.routers import auth, settings

ROUTERS = [auth.router, settings.router]
