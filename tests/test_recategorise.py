from collections.abc import Callable

import pytest

from autocat.classify import rules_classifier
from autocat.models import Classification, Invoice, Transaction
from autocat.recategorise import (
    DRAWINGS_NOTE,
    REVIEW_NOTE,
    invoice_date_ranges,
    recategorise,
    resolve_batch_size,
)


def _t(
    tid: str,
    description: str,
    *,
    account_id: str | None = None,
    date: str = "2024-03-15",
    amount: float = -20.0,
    direction="expense",
) -> Transaction:
    return Transaction(
        id=tid,
        description=description,
        amount=amount,
        date=date,
        direction=direction,
        account_id=account_id,
    )


def _fixed(by_id: dict[str, Classification]) -> Callable[[Transaction], Classification]:
    def classify(txn: Transaction) -> Classification:
        return by_id[txn.id]

    return classify


# ---- Classification pass ----------------------------------------------------------


def test_uncategorised_mode_with_rules_classifier(accounts, store):
    txns = [
        _t("a", "VDP-SCREWFIX 87654321 01/06/2024"),
        _t("b", "SCREWFIX DIRECT", account_id="acc-general"),
        _t("c", "POS MURPHYS BUTCHERS"),
    ]
    result = recategorise(
        txns, classifier=rules_classifier, accounts=accounts, store=store, mode="uncategorised"
    )
    assert (result.total, result.categorized, result.skipped, result.failed) == (2, 1, 1, 0)
    assert store.last("a") == {
        "account_id": "acc-tools",
        "vat_rate": 23.0,
        "notes": "Known merchant: Screwfix",
    }
    assert store.ids() == {"a"}
    assert result.trips_detected == 0


def test_uncategorised_threshold_is_50(accounts, store):
    classify = _fixed(
        {
            "a": Classification(category="Materials", confidence=50.0),
            "b": Classification(category="Materials", confidence=49.9),
        }
    )
    txns = [_t("a", "x"), _t("b", "y")]
    result = recategorise(
        txns, classifier=classify, accounts=accounts, store=store, mode="uncategorised"
    )
    assert (result.categorized, result.skipped) == (1, 1)
    assert store.ids() == {"a"}
    assert store.last("a")["account_id"] == "acc-materials"


def test_vat_rate_and_notes_written(accounts, store):
    classify = _fixed(
        {"a": Classification(category="Fuel", confidence=90.0, vat_rate_tag="Reduced 13.5%")}
    )
    recategorise([_t("a", "x")], classifier=classify, accounts=accounts, store=store)
    assert store.last("a") == {"account_id": "acc-fuel", "vat_rate": 13.5, "notes": None}


def test_miscellaneous_mode(accounts, store):
    classify = _fixed(
        {
            "m1": Classification(category="Materials", confidence=45.0),
            "m2": Classification(category="Yacht Parts", confidence=95.0),
            "m3": Classification(category="Materials", confidence=39.0),
        }
    )
    txns = [
        _t("m1", "x", account_id="acc-misc"),
        _t("m2", "y", account_id="acc-misc"),
        _t("m3", "z", account_id="acc-misc"),
        _t("u1", "w"),
    ]
    result = recategorise(
        txns, classifier=classify, accounts=accounts, store=store, mode="miscellaneous"
    )
    assert (result.total, result.categorized, result.skipped) == (3, 1, 2)
    assert store.ids() == {"m1"}


def test_miscellaneous_mode_skips_results_back_to_misc(accounts, store):
    classify = _fixed({"g1": Classification(category="General Expenses", confidence=90.0)})
    result = recategorise(
        [_t("g1", "x", account_id="acc-general")],
        classifier=classify,
        accounts=accounts,
        store=store,
        mode="miscellaneous",
        misc_account_name="General Expenses",
    )
    assert (result.total, result.skipped, result.categorized) == (1, 1, 0)
    assert store.updates == []


def test_miscellaneous_mode_without_misc_account(accounts, store):
    result = recategorise(
        [_t("m1", "x", account_id="acc-misc")],
        classifier=rules_classifier,
        accounts=accounts,
        store=store,
        mode="miscellaneous",
        misc_account_name="Sundries",
    )
    assert result.total == 0
    assert store.updates == []


def test_all_mode_flags_uncertain_for_review(accounts, store):
    classify = _fixed({"a": Classification(category="Materials", confidence=39.9)})
    result = recategorise(
        [_t("a", "x", account_id="acc-materials")],
        classifier=classify,
        accounts=accounts,
        store=store,
        mode="all",
    )
    assert result.skipped == 1
    assert store.last("a") == {"account_id": None, "notes": REVIEW_NOTE}


def test_failures_are_isolated(accounts, store):
    store.fail_ids = {"b"}
    classify = _fixed(
        {tid: Classification(category="Materials", confidence=80.0) for tid in "abcde"}
    )
    txns = [_t(tid, tid) for tid in "abcde"]
    result = recategorise(
        txns, classifier=classify, accounts=accounts, store=store, batch_size=2
    )
    assert (result.total, result.categorized, result.failed) == (5, 4, 1)
    assert result.categorized + result.skipped + result.failed == result.total
    assert store.ids() == {"a", "c", "d", "e"}


def test_classifier_errors_count_as_failed(accounts, store):
    def classify(txn: Transaction) -> Classification:
        if txn.id == "boom":
            raise RuntimeError("classifier down")
        return Classification(category="Materials", confidence=80.0)

    result = recategorise(
        [_t("ok", "x"), _t("boom", "y")], classifier=classify, accounts=accounts, store=store
    )
    assert (result.categorized, result.failed) == (1, 1)


def test_invalid_arguments(accounts, store):
    with pytest.raises(ValueError):
        recategorise([], classifier=rules_classifier, accounts=accounts, store=store, mode="some")
    with pytest.raises(ValueError):
        recategorise(
            [], classifier=rules_classifier, accounts=accounts, store=store, concurrency=0
        )


def test_empty_input(accounts, store):
    result = recategorise([], classifier=rules_classifier, accounts=accounts, store=store)
    assert (result.total, result.categorized, result.skipped, result.failed) == (0, 0, 0, 0)


# ---- Batch size --------------------------------------------------------------------


def test_resolve_batch_size(monkeypatch: pytest.MonkeyPatch):
    assert resolve_batch_size() == 20
    assert resolve_batch_size(5) == 5
    monkeypatch.setenv("AUTOCAT_BATCH_SIZE", "7")
    assert resolve_batch_size() == 7
    assert resolve_batch_size(3) == 3
    for bad in ("abc", "0", "-4", ""):
        monkeypatch.setenv("AUTOCAT_BATCH_SIZE", bad)
        assert resolve_batch_size() == 20


# ---- Trip and invoice passes ------------------------------------------------------


def test_all_mode_trip_pass(accounts, store):
    txns = [
        _t("k1", "CENTRA KILKENNY", amount=-12.5),
        _t("k2", "KILKENNY RIVER COURT HOTEL", amount=-140.0),
        _t("k3", "PARKING KILKENNY", amount=-5.0),
        _t("n1", "SPAR NAAS", amount=-4.0),
    ]
    result = recategorise(
        txns,
        classifier=rules_classifier,
        accounts=accounts,
        store=store,
        mode="all",
        base_location="Naas",
        id_factory=lambda: "trip-x",
    )
    assert result.trips_detected == 1
    assert result.trip_updates == 3
    assert result.trips[0].id == "trip-x"
    note = "[Trip] Business trip to Kilkenny (2024-03-15)"
    assert store.last("k1") == {"account_id": "acc-travel", "vat_rate": 23.0, "notes": note}
    assert store.last("k2") == {"account_id": "acc-travel", "vat_rate": 13.5, "notes": note}
    assert store.last("k3") == {"account_id": "acc-fuel", "vat_rate": 0.0, "notes": note}
    # Home-town spend only gets the classification pass outcome
    assert store.last("n1") == {"account_id": None, "notes": REVIEW_NOTE}


def test_trip_pass_only_in_all_mode(accounts, store):
    txns = [
        _t("k1", "CENTRA KILKENNY"),
        _t("k2", "KILKENNY RIVER COURT HOTEL"),
    ]
    result = recategorise(
        txns,
        classifier=rules_classifier,
        accounts=accounts,
        store=store,
        mode="uncategorised",
        base_location="Naas",
    )
    assert result.trips_detected == 0
    assert store.updates == []


def test_all_mode_invoice_pass(accounts, store):
    txns = [
        _t("d1", "ATM WITHDRAWAL", account_id="acc-drawings", date="2024-05-10"),
        _t("d2", "ATM WITHDRAWAL", account_id="acc-drawings", date="2024-05-20"),
        _t("d3", "ATM WITHDRAWAL", account_id="acc-drawings", date="2024-06-03"),
        _t("g1", "ATM WITHDRAWAL", account_id="acc-general", date="2024-05-10"),
    ]
    invoices = [
        Invoice(id="i1", invoice_number="INV-001", invoice_date="2024-05-11"),
        Invoice(
            id="i2",
            invoice_number="INV-002",
            invoice_date="2024-06-30",
            job_start_date="2024-06-01",
            job_end_date="2024-06-05",
        ),
    ]
    result = recategorise(
        txns,
        classifier=rules_classifier,
        accounts=accounts,
        store=store,
        mode="all",
        invoices=invoices,
    )
    assert result.drawings_reclassified == 2
    moved = {"account_id": "acc-travel", "notes": DRAWINGS_NOTE}
    assert store.last("d1") == moved
    assert store.last("d3") == moved
    assert store.last("d2") == {"account_id": None, "notes": REVIEW_NOTE}
    assert store.last("g1") == {"account_id": None, "notes": REVIEW_NOTE}


def test_invoice_date_ranges():
    invoices = [
        Invoice("i1", "INV-1", "2024-03-01"),
        Invoice("i2", "INV-2", "2024-07-01", job_start_date="2024-06-10", job_end_date="2024-06-12"),
        Invoice("i3", "INV-3", "2024-12-31", job_start_date="2024-12-01"),
        Invoice("i4", "INV-4", "not a date"),
    ]
    assert invoice_date_ranges(invoices) == [
        ("2024-02-28", "2024-03-03"),
        ("2024-06-10", "2024-06-12"),
        ("2024-12-29", "2025-01-02"),
    ]
