from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


_ACCOUNT_TYPES = (
    "Income",
    "Cost of Sales",
    "Expense",
    "VAT",
    "Payroll",
    "Fixed Assets",
    "Current Assets",
    "Current Liabilities",
    "Equity",
    "bank",
)


# ---------------------------
# Reference: bk_accounts
# ---------------------------


class BkAccount(Base):
    __tablename__ = "bk_accounts"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Chart-of-Accounts section; "bank" is the default for imported bank accounts.
    account_type: Mapped[str] = mapped_column(String, nullable=False, default="bank")
    account_code: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "account_type in (" + ",".join(f"'{t}'" for t in _ACCOUNT_TYPES) + ")",
            name="ck_bk_accounts_account_type",
        ),
    )


# ---------------------------
# Core: bk_transactions
# ---------------------------


class BkTransaction(Base):
    __tablename__ = "bk_transactions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    transaction_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    direction: Mapped[str] = mapped_column(String, nullable=False)
    # Ledger allocation chosen by categorisation; NULL means uncategorised.
    account_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("bk_accounts.id"), nullable=True
    )
    vat_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("direction in ('income','expense')", name="ck_bk_tx_direction"),
        CheckConstraint(
            "vat_rate IS NULL OR (vat_rate >= 0 AND vat_rate <= 100)",
            name="ck_bk_tx_vat_rate",
        ),
    )


# ---------------------------
# Reference: bk_invoices
# ---------------------------


class BkInvoice(Base):
    __tablename__ = "bk_invoices"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    invoice_number: Mapped[str] = mapped_column(String, nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Free-form JSON notes; job_start_date / job_end_date keys bound the job period.
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


__all__ = [
    "Base",
    "BkAccount",
    "BkInvoice",
    "BkTransaction",
]
