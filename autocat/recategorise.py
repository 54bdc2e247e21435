"""Bulk recategorisation over a transaction set.

Flow
----
1. Select the transactions for ``mode``:

   - ``"uncategorised"``: no ``account_id`` yet (threshold 50)
   - ``"miscellaneous"``: currently in the miscellaneous account (threshold 40)
   - ``"all"``: every transaction (threshold 40)

2. Classification pass, in batches of ``batch_size`` run concurrently with
   per-item isolation. Each classification is mapped onto the chart of accounts
   with :func:`~autocat.accounts.find_matching_account`; a result below the
   threshold or without an account is skipped. In ``"all"`` mode a skip also
   clears the allocation and flags the row for manual review.
3. ``"all"`` mode only: trip pass. Expenses grouped into trips by
   :func:`~autocat.trips.detect_trips` move to the travel (or motor) account
   with a VAT rate by expense type and a ``[Trip]`` note.
4. ``"all"`` mode only: invoice pass. Expenses sitting in a drawings account
   and dated inside an invoice's job period move to the travel account.

The store is the only side effect. ``categorized + skipped + failed == total``
always holds for the classification pass.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from typing import Any, Literal, Protocol

from .accounts import find_matching_account
from .classify import map_vat_type_to_rate
from .logging_setup import get_logger
from .models import (
    Account,
    Classifier,
    DetectedTrip,
    Invoice,
    RecategoriseResult,
    Transaction,
    TripExpenseType,
    TripIdFactory,
)
from .pmap import p_map_settled
from .trips import classify_trip_expense, detect_trips

_logger = get_logger("autocat.recategorise")

type RecategoriseMode = Literal["uncategorised", "miscellaneous", "all"]

MODES: tuple[str, ...] = ("uncategorised", "miscellaneous", "all")

CONFIDENCE_THRESHOLDS: dict[str, float] = {
    "uncategorised": 50.0,
    "miscellaneous": 40.0,
    "all": 40.0,
}

DEFAULT_BATCH_SIZE = 20
MISC_ACCOUNT_NAME = "Miscellaneous Expenses"

REVIEW_NOTE = "Auto-categorization uncertain — needs manual review."
DRAWINGS_NOTE = "[Trip] Expense during invoice job period — reclassified from drawings."

TRAVEL_CATEGORY = "Travel & Subsistence"
MOTOR_CATEGORY = "Motor/travel"

# VAT rate applied to trip members by expense type.
TRIP_VAT_RATES: dict[str, float] = {
    "transport": 0.0,
    "accommodation": 13.5,
    "subsistence": 23.0,
}

# Days either side of the invoice date when an invoice has no job period.
INVOICE_DATE_SLACK_DAYS = 2


class TransactionStore(Protocol):
    """Write side of the ledger used by :func:`recategorise`.

    ``changes`` holds a subset of ``account_id``, ``vat_rate`` and ``notes``.
    Implementations raise on failure; the orchestrator counts the error
    against that one transaction.
    """

    def update(self, transaction_id: str, changes: dict[str, Any]) -> None: ...


# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------


def resolve_batch_size(batch_size: int | None = None) -> int:
    """Explicit ``batch_size``, else ``AUTOCAT_BATCH_SIZE``, else 20.

    Non-numeric or non-positive values fall back to the default.
    """

    if batch_size is not None:
        return batch_size if batch_size > 0 else DEFAULT_BATCH_SIZE
    raw = os.getenv("AUTOCAT_BATCH_SIZE")
    try:
        value = int(raw) if raw else None
    except ValueError:
        _logger.warning("Ignoring invalid AUTOCAT_BATCH_SIZE=%r", raw)
        value = None
    if value is None or value < 1:
        return DEFAULT_BATCH_SIZE
    return value


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def invoice_date_ranges(invoices: Iterable[Invoice]) -> list[tuple[str, str]]:
    """Inclusive ``(start, end)`` ISO date ranges during which a job was on.

    An invoice with both ``job_start_date`` and ``job_end_date`` contributes
    that period as given; otherwise the invoice date plus or minus two days.
    Invoices with neither a job period nor a parseable invoice date are
    ignored.
    """

    ranges: list[tuple[str, str]] = []
    for inv in invoices:
        if inv.job_start_date and inv.job_end_date:
            ranges.append((inv.job_start_date[:10], inv.job_end_date[:10]))
            continue
        day = _parse_day(inv.invoice_date)
        if day is None:
            _logger.debug("Invoice %s has no usable date; ignored", inv.invoice_number)
            continue
        slack = timedelta(days=INVOICE_DATE_SLACK_DAYS)
        ranges.append(((day - slack).isoformat(), (day + slack).isoformat()))
    return ranges


# ---------------------------------------------------------------------------
# Classification pass
# ---------------------------------------------------------------------------


def _select(
    transactions: Sequence[Transaction], mode: str, misc_account: Account | None
) -> list[Transaction]:
    if mode == "uncategorised":
        return [t for t in transactions if t.account_id is None]
    if mode == "miscellaneous":
        if misc_account is None:
            return []
        return [t for t in transactions if t.account_id == misc_account.id]
    return list(transactions)


def _find_account_by_name(accounts: Iterable[Account], name: str) -> Account | None:
    target = name.lower()
    for account in accounts:
        if account.name.lower() == target:
            return account
    return None


def _classify_one(
    txn: Transaction,
    *,
    classifier: Classifier,
    accounts: Sequence[Account],
    store: TransactionStore,
    mode: str,
    misc_account: Account | None,
) -> Literal["categorized", "skipped"]:
    result = classifier(txn)
    account = find_matching_account(result.category, txn.direction, result.vat_rate_tag, accounts)
    threshold = CONFIDENCE_THRESHOLDS[mode]

    if account is None or result.confidence < threshold:
        _logger.debug(
            "recategorise:skip id=%s category=%r confidence=%.1f matched=%s",
            txn.id,
            result.category,
            result.confidence,
            account is not None,
        )
        if mode == "all":
            store.update(txn.id, {"account_id": None, "notes": REVIEW_NOTE})
        return "skipped"

    if mode == "miscellaneous" and misc_account is not None and account.id == misc_account.id:
        return "skipped"

    store.update(
        txn.id,
        {
            "account_id": account.id,
            "vat_rate": map_vat_type_to_rate(result.vat_rate_tag),
            "notes": result.notes,
        },
    )
    return "categorized"


def _classification_pass(
    selected: Sequence[Transaction],
    *,
    classifier: Classifier,
    accounts: Sequence[Account],
    store: TransactionStore,
    mode: str,
    misc_account: Account | None,
    batch_size: int,
    concurrency: int,
    result: RecategoriseResult,
) -> None:
    def _run(txn: Transaction) -> Literal["categorized", "skipped"]:
        return _classify_one(
            txn,
            classifier=classifier,
            accounts=accounts,
            store=store,
            mode=mode,
            misc_account=misc_account,
        )

    for batch_index, start in enumerate(range(0, len(selected), batch_size)):
        batch = selected[start : start + batch_size]
        outcomes = p_map_settled(batch, _run, concurrency=concurrency)
        for txn, outcome in zip(batch, outcomes, strict=True):
            if not outcome.ok:
                result.failed += 1
                _logger.warning(
                    "recategorise:item_failed id=%s error=%s: %s",
                    txn.id,
                    outcome.error.__class__.__name__,
                    outcome.error,
                )
            elif outcome.value == "categorized":
                result.categorized += 1
            else:
                result.skipped += 1
        _logger.info(
            "recategorise:batch_done batch_index=%d size=%d processed=%d/%d",
            batch_index,
            len(batch),
            start + len(batch),
            len(selected),
        )


# ---------------------------------------------------------------------------
# Trip and invoice passes ("all" mode)
# ---------------------------------------------------------------------------


def _trip_expense_type(description: str) -> TripExpenseType:
    expense_type = classify_trip_expense(description)
    # Unclassified spending while away is treated as subsistence.
    return "subsistence" if expense_type == "other" else expense_type


def _safe_update(store: TransactionStore, transaction_id: str, changes: dict[str, Any]) -> bool:
    try:
        store.update(transaction_id, changes)
    except Exception as e:  # noqa: BLE001
        _logger.warning(
            "recategorise:item_failed id=%s error=%s: %s",
            transaction_id,
            e.__class__.__name__,
            e,
        )
        return False
    return True


def _trip_pass(
    transactions: Sequence[Transaction],
    *,
    accounts: Sequence[Account],
    store: TransactionStore,
    base_location: str | None,
    id_factory: TripIdFactory | None,
    result: RecategoriseResult,
) -> list[DetectedTrip]:
    trip_input = [
        Transaction(
            id=t.id,
            description=t.description,
            amount=abs(t.amount),
            date=t.date,
            direction="expense",
        )
        for t in transactions
        if t.direction == "expense" and t.date
    ]
    trips = detect_trips(trip_input, base_location, id_factory=id_factory)
    if not trips:
        return []

    travel = find_matching_account(TRAVEL_CATEGORY, "expense", None, accounts)
    motor = find_matching_account(MOTOR_CATEGORY, "expense", None, accounts) or travel
    if travel is None and motor is None:
        _logger.info("recategorise:trips_skipped reason=no_travel_account trips=%d", len(trips))
        return trips

    for trip in trips:
        note = trip.note()
        for member in trip.transactions:
            expense_type = _trip_expense_type(member.description)
            account = motor if expense_type == "transport" else travel
            if account is None:
                continue
            changes = {
                "account_id": account.id,
                "vat_rate": TRIP_VAT_RATES[expense_type],
                "notes": note,
            }
            if _safe_update(store, member.id, changes):
                result.trip_updates += 1
    return trips


def _invoice_pass(
    transactions: Sequence[Transaction],
    *,
    accounts: Sequence[Account],
    store: TransactionStore,
    invoices: Sequence[Invoice],
    result: RecategoriseResult,
) -> None:
    travel = find_matching_account(TRAVEL_CATEGORY, "expense", None, accounts)
    if travel is None or not invoices:
        return
    ranges = invoice_date_ranges(invoices)
    drawings_ids = {a.id for a in accounts if "drawing" in a.name.lower()}
    if not ranges or not drawings_ids:
        return

    for txn in transactions:
        if txn.direction != "expense" or txn.account_id not in drawings_ids or not txn.date:
            continue
        day = txn.date[:10]
        if not any(start <= day <= end for start, end in ranges):
            continue
        if _safe_update(store, txn.id, {"account_id": travel.id, "notes": DRAWINGS_NOTE}):
            result.drawings_reclassified += 1


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def recategorise(
    transactions: Sequence[Transaction],
    *,
    classifier: Classifier,
    accounts: Sequence[Account],
    store: TransactionStore,
    mode: RecategoriseMode = "uncategorised",
    base_location: str | None = None,
    invoices: Sequence[Invoice] = (),
    batch_size: int | None = None,
    concurrency: int | None = None,
    misc_account_name: str = MISC_ACCOUNT_NAME,
    id_factory: TripIdFactory | None = None,
) -> RecategoriseResult:
    """Reclassify ``transactions`` and write the outcome through ``store``.

    Parameters
    ----------
    transactions:
        The full transaction set as currently persisted. The mode decides
        which of them the classification pass visits; the trip and invoice
        passes look at all of them.
    classifier:
        Produces a :class:`~autocat.models.Classification` per transaction.
        Exceptions count as ``failed`` for that transaction.
    mode:
        ``"uncategorised"``, ``"miscellaneous"`` or ``"all"``.
    base_location:
        Home town for trip detection (``"all"`` mode).
    invoices:
        Issued invoices for the drawings pass (``"all"`` mode).
    batch_size:
        Items per batch; ``None`` reads ``AUTOCAT_BATCH_SIZE`` (default 20).
    concurrency:
        Worker threads per batch; defaults to the batch size.

    Raises
    ------
    ValueError
        When ``mode`` is unknown or ``concurrency`` is not positive.
    """

    if mode not in CONFIDENCE_THRESHOLDS:
        raise ValueError(f"unknown recategorise mode: {mode!r} (expected one of {MODES})")
    size = resolve_batch_size(batch_size)
    workers = size if concurrency is None else concurrency
    if isinstance(workers, bool) or workers < 1:
        raise ValueError("concurrency must be a positive integer")

    misc_account = _find_account_by_name(accounts, misc_account_name)
    if mode == "miscellaneous" and misc_account is None:
        _logger.info("recategorise:no_misc_account name=%r", misc_account_name)

    selected = _select(transactions, mode, misc_account)
    result = RecategoriseResult(total=len(selected))
    _logger.info(
        "recategorise:start mode=%s selected=%d batch_size=%d", mode, len(selected), size
    )

    _classification_pass(
        selected,
        classifier=classifier,
        accounts=accounts,
        store=store,
        mode=mode,
        misc_account=misc_account,
        batch_size=size,
        concurrency=workers,
        result=result,
    )
    _logger.info(
        "recategorise:classified categorized=%d skipped=%d failed=%d",
        result.categorized,
        result.skipped,
        result.failed,
    )

    if mode == "all":
        trips = _trip_pass(
            transactions,
            accounts=accounts,
            store=store,
            base_location=base_location,
            id_factory=id_factory,
            result=result,
        )
        result.trips = tuple(trips)
        result.trips_detected = len(trips)
        _logger.info(
            "recategorise:trips trips_detected=%d trip_updates=%d",
            result.trips_detected,
            result.trip_updates,
        )
        _invoice_pass(
            transactions, accounts=accounts, store=store, invoices=invoices, result=result
        )
        _logger.info("recategorise:invoices drawings_reclassified=%d", result.drawings_reclassified)

    return result


__all__ = [
    "CONFIDENCE_THRESHOLDS",
    "DEFAULT_BATCH_SIZE",
    "DRAWINGS_NOTE",
    "MISC_ACCOUNT_NAME",
    "MODES",
    "REVIEW_NOTE",
    "TRIP_VAT_RATES",
    "RecategoriseMode",
    "TransactionStore",
    "invoice_date_ranges",
    "recategorise",
    "resolve_batch_size",
]
