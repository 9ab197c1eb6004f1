"""Re-run payment reconciliation for every live invoice."""
from __future__ import annotations

from ledgerly.core.sessions import purge_expired_sessions
from ledgerly.db.session import SessionLocal
from ledgerly.services.invoices import recompute_all_invoices


def main() -> None:
    with SessionLocal() as db:
        changed = recompute_all_invoices(db)
        purged = purge_expired_sessions(db)
        db.commit()
    print(f"Reconciled invoices: {changed} status change(s). Purged {purged} expired session revocation(s).")


if __name__ == "__main__":
    main()
