"""Persistence integration for the recategorisation orchestrator.

Bridges the ledger tables in :mod:`autocat.db.models` and the plain records
of :mod:`autocat.models`:

- loaders that read transactions, accounts and invoices into core records;
- writers used to seed a ledger (CLI import, tests);
- :class:`SqlTransactionStore`, the SQL implementation of
  :class:`autocat.recategorise.TransactionStore`.

The classification core never imports this module.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from .db.client import session_scope
from .db.models import BkAccount, BkInvoice, BkTransaction
from .logging_setup import get_logger
from .models import Account, Invoice, Transaction

logger = get_logger("autocat.persistence")

# Columns the orchestrator is allowed to change.
UPDATABLE_FIELDS: frozenset[str] = frozenset({"account_id", "vat_rate", "notes"})


def _to_decimal_2(raw: Any) -> Decimal | None:
    if raw is None:
        return None
    try:
        d = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None
    return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _to_date(raw: Any) -> date | None:
    if raw is None or isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def _iso(d: date | None) -> str:
    return d.isoformat() if d is not None else ""


def _job_dates(notes: str | None) -> tuple[str | None, str | None]:
    if not notes:
        return None, None
    try:
        payload = json.loads(notes)
    except ValueError:
        return None, None
    if not isinstance(payload, dict):
        return None, None
    start = payload.get("job_start_date") or None
    end = payload.get("job_end_date") or None
    return (str(start) if start else None), (str(end) if end else None)


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def _to_transaction(row: BkTransaction) -> Transaction:
    return Transaction(
        id=row.id,
        description=row.description or "",
        amount=float(row.amount),
        date=_iso(row.transaction_date),
        direction="income" if row.direction == "income" else "expense",
        account_id=row.account_id,
        vat_rate=float(row.vat_rate) if row.vat_rate is not None else None,
        notes=row.notes,
    )


def load_transactions(session: Session) -> list[Transaction]:
    """All ledger transactions, newest first."""

    stmt = select(BkTransaction).order_by(
        BkTransaction.transaction_date.desc(), BkTransaction.id
    )
    return [_to_transaction(row) for row in session.scalars(stmt)]


def load_accounts(session: Session) -> list[Account]:
    """Chart of accounts ordered by type, then name."""

    stmt = select(BkAccount).order_by(BkAccount.account_type, BkAccount.name)
    return [
        Account(id=row.id, name=row.name, account_type=row.account_type)  # type: ignore[arg-type]
        for row in session.scalars(stmt)
    ]


def load_invoices(session: Session) -> list[Invoice]:
    """Invoices with their job period parsed from the JSON ``notes`` column."""

    out: list[Invoice] = []
    for row in session.scalars(select(BkInvoice).order_by(BkInvoice.invoice_date)):
        start, end = _job_dates(row.notes)
        out.append(
            Invoice(
                id=row.id,
                invoice_number=row.invoice_number,
                invoice_date=_iso(row.invoice_date),
                job_start_date=start,
                job_end_date=end,
            )
        )
    return out


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def add_accounts(session: Session, accounts: Iterable[Account]) -> None:
    for a in accounts:
        session.merge(BkAccount(id=a.id, name=a.name, account_type=a.account_type))


def add_transactions(session: Session, transactions: Iterable[Transaction]) -> None:
    for t in transactions:
        amount = _to_decimal_2(t.amount)
        if amount is None:
            raise ValueError(f"transaction {t.id!r} has a non-numeric amount: {t.amount!r}")
        session.merge(
            BkTransaction(
                id=t.id,
                description=t.description,
                amount=amount,
                transaction_date=_to_date(t.date),
                direction=t.direction,
                account_id=t.account_id,
                vat_rate=_to_decimal_2(t.vat_rate),
                notes=t.notes,
            )
        )


def add_invoices(session: Session, invoices: Iterable[Invoice]) -> None:
    for inv in invoices:
        invoice_date = _to_date(inv.invoice_date)
        if invoice_date is None:
            raise ValueError(f"invoice {inv.id!r} has no valid invoice_date")
        notes = None
        if inv.job_start_date or inv.job_end_date:
            notes = json.dumps(
                {"job_start_date": inv.job_start_date, "job_end_date": inv.job_end_date},
                sort_keys=True,
            )
        session.merge(
            BkInvoice(
                id=inv.id,
                invoice_number=inv.invoice_number,
                invoice_date=invoice_date,
                notes=notes,
            )
        )


class SqlTransactionStore:
    """``TransactionStore`` writing to ``bk_transactions``.

    Each update runs in its own transactional scope so a failure only rolls
    back that one row.
    """

    def __init__(self, *, database_url: str | None = None) -> None:
        self._database_url = database_url

    def update(self, transaction_id: str, changes: Mapping[str, Any]) -> None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update fields: {sorted(unknown)}")

        with session_scope(database_url=self._database_url) as session:
            row = session.get(BkTransaction, transaction_id)
            if row is None:
                raise LookupError(f"transaction {transaction_id!r} not found")
            if "account_id" in changes:
                row.account_id = changes["account_id"]
            if "vat_rate" in changes:
                row.vat_rate = _to_decimal_2(changes["vat_rate"])
            if "notes" in changes:
                row.notes = changes["notes"]
        logger.debug("Updated transaction %s: %s", transaction_id, sorted(changes))


__all__ = [
    "SqlTransactionStore",
    "UPDATABLE_FIELDS",
    "add_accounts",
    "add_invoices",
    "add_transactions",
    "load_accounts",
    "load_invoices",
    "load_transactions",
]
