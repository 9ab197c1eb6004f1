"""Central router registry for module-oriented composition."""
from __future__ import annotations

from fastapi import FastAPI

from ledgerly.modules.accounts.router import ROUTERS as ACCOUNTS_ROUTERS
from ledgerly.modules.billing.router import ROUTERS as BILLING_ROUTERS
from ledgerly.modules.expenses.router import ROUTERS as EXPENSES_ROUTERS
from ledgerly.modules.reports.router import ROUTERS as REPORTS_ROUTERS

ALL_ROUTERS = (
    ACCOUNTS_ROUTERS
    + BILLING_ROUTERS
    + EXPENSES_ROUTERS
    + REPORTS_ROUTERS
)


def include_all_routers(app: FastAPI) -> None:
    for router in ALL_ROUTERS:
        app.include_router(router)
