"""Expenses module router aggregation."""
from ledgerly.routers import expense_categories, expenses

ROUTERS = [expenses.router, expense_categories.router]
