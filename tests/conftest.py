"""Pytest configuration and shared fixtures.

Tests must not pick up a developer's ``.env`` or shell settings: the
``AUTOCAT_*`` variables and ``DATABASE_URL`` are cleared for every test, and
cached SQLAlchemy engines are disposed afterwards so one test's SQLite file
never leaks into the next.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

import pytest

from autocat.db.client import dispose_engines
from autocat.models import Account

_ENV_VARS = ("DATABASE_URL", "AUTOCAT_BATCH_SIZE", "AUTOCAT_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    dispose_engines()


class RecordingStore:
    """In-memory ``TransactionStore`` that records every update.

    ``fail_ids`` makes ``update`` raise for those transaction ids.
    """

    def __init__(self, fail_ids: set[str] | None = None) -> None:
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_ids = set(fail_ids or ())
        self._lock = threading.Lock()

    def update(self, transaction_id: str, changes: dict[str, Any]) -> None:
        if transaction_id in self.fail_ids:
            raise RuntimeError(f"simulated write failure for {transaction_id}")
        with self._lock:
            self.updates.append((transaction_id, dict(changes)))

    def last(self, transaction_id: str) -> dict[str, Any] | None:
        """Most recent change set written for ``transaction_id``."""

        for tid, changes in reversed(self.updates):
            if tid == transaction_id:
                return changes
        return None

    def ids(self) -> set[str]:
        return {tid for tid, _ in self.updates}


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


# A small but representative Irish sole-trader chart of accounts.
CHART_OF_ACCOUNTS: tuple[Account, ...] = (
    Account("acc-sales-23", "Sales Ireland 23%", "Income"),
    Account("acc-sales-135", "Sales Ireland 13.5%", "Income"),
    Account("acc-other-income", "Other Income", "Income"),
    Account("acc-materials", "Materials Purchased", "Cost of Sales"),
    Account("acc-subcon", "Subcontractors", "Cost of Sales"),
    Account("acc-tools", "Small Tools & Equipment", "Expense"),
    Account("acc-fuel", "Motor – Fuel", "Expense"),
    Account("acc-motor-repairs", "Motor – Repairs", "Expense"),
    Account("acc-travel", "Travel & Subsistence", "Expense"),
    Account("acc-software", "Software & Subscriptions", "Expense"),
    Account("acc-phone", "Telephone & Internet", "Expense"),
    Account("acc-bank", "Bank Charges", "Expense"),
    Account("acc-general", "General Expenses", "Expense"),
    Account("acc-misc", "Miscellaneous Expenses", "Expense"),
    Account("acc-drawings", "Owner's Drawings", "Equity"),
)


@pytest.fixture
def accounts() -> list[Account]:
    return list(CHART_OF_ACCOUNTS)
