"""Metadata handle for Alembic with every model registered."""
from __future__ import annotations

import ledgerly.models  # noqa: F401
from ledgerly.db.base import Base

target_metadata = Base.metadata
