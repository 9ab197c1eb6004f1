"""Billing module router aggregation."""
from ledgerly.routers import customers, invoices, payments, projects

ROUTERS = [customers.router, projects.router, invoices.router, payments.router]
