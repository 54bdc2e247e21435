"""db: ledger persistence for ``autocat`` (SQLAlchemy ORM).

Public exports
--------------
- ``Base`` and ``metadata`` of the ledger tables
- ORM models from ``autocat.db.models``
- Engine/session helpers live in ``autocat.db.client``
"""

from __future__ import annotations

from .models import Base, BkAccount, BkInvoice, BkTransaction

metadata = Base.metadata

__all__ = [
    "Base",
    "BkAccount",
    "BkInvoice",
    "BkTransaction",
    "metadata",
]
