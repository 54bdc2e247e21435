import pytest

from autocat.accounts import (
    CATEGORY_ACCOUNT_MAP,
    VAT_RATE_TO_INCOME_ACCOUNT,
    find_matching_account,
    get_account_suggestion,
    get_default_account,
)
from autocat.merchants import KNOWN_MERCHANTS
from autocat.models import Account, AccountSuggestion


def test_every_merchant_category_has_an_expense_mapping():
    mapped = {k for k, v in CATEGORY_ACCOUNT_MAP if v.expense}
    for _key, merchant in KNOWN_MERCHANTS:
        assert merchant.category in mapped, merchant.canonical_name


@pytest.mark.parametrize(
    "category,expected",
    [
        ("Materials", "Materials Purchased"),
        ("Fuel", "Motor – Fuel"),
        ("Software", "Software & Subscriptions"),
        ("Bank fees", "Bank Charges"),
        ("Sub Con", "Subcontractors"),
        ("Tools & Equipment", "Small Tools & Equipment"),
        ("Fuel & Transport", "Motor – Fuel"),
        ("Travel & Subsistence", "Travel & Subsistence"),
        ("Drawings", "Owner's Drawings"),
    ],
)
def test_expense_category_exact_match(accounts, category: str, expected: str):
    account = find_matching_account(category, "expense", None, accounts)
    assert account is not None
    assert account.name == expected


def test_category_lookup_is_case_insensitive(accounts):
    account = find_matching_account("materials", "expense", None, accounts)
    assert account is not None and account.name == "Materials Purchased"


def test_later_candidate_used_when_first_missing(accounts):
    # "Motor/travel" prefers "Motor – Fuel", then "Motor Tax & Insurance"
    without_fuel = [a for a in accounts if a.name != "Motor – Fuel"]
    account = find_matching_account("Motor/travel", "expense", None, without_fuel)
    # No exact second candidate either, so the partial rule picks a Motor account
    assert account is not None and account.name == "Motor – Repairs"


def test_type_must_match():
    wrong_type = [Account("x", "Materials Purchased", "Expense")]
    assert find_matching_account("Materials", "expense", None, wrong_type) is None


def test_partial_match_on_first_word():
    ledger = [Account("a1", "Rent & Rates", "Expense")]
    account = find_matching_account("Rent", "expense", None, ledger)
    assert account is not None and account.id == "a1"


def test_unknown_category_returns_none(accounts):
    assert find_matching_account("Yacht Parts", "expense", None, accounts) is None


def test_direction_without_candidates_returns_none(accounts):
    assert find_matching_account("Materials", "income", None, accounts) is None


def test_income_vat_tag_takes_precedence(accounts):
    account = find_matching_account("Sales", "income", "Reduced 13.5%", accounts)
    assert account is not None and account.name == "Sales Ireland 13.5%"
    account = find_matching_account("Sales", "income", "reduced_13_5", accounts)
    assert account is not None and account.name == "Sales Ireland 13.5%"


def test_income_vat_account_missing_falls_back_to_category(accounts):
    # No "Zero Rated Sales" account in the ledger
    account = find_matching_account("Sales", "income", "Zero", accounts)
    assert account is not None and account.name == "Sales Ireland 23%"


def test_vat_tag_ignored_for_expenses(accounts):
    account = find_matching_account("Materials", "expense", "Reduced 13.5%", accounts)
    assert account is not None and account.name == "Materials Purchased"


def test_rct_and_other():
    ledger = [
        Account("i1", "Sales Ireland 13.5%", "Income"),
        Account("i2", "Other Income", "Income"),
        Account("e1", "General Expenses", "Expense"),
    ]
    assert find_matching_account("RCT", "income", None, ledger).id == "i1"
    assert find_matching_account("other", "income", None, ledger).id == "i2"
    assert find_matching_account("other", "expense", None, ledger).id == "e1"


def test_vat_table_targets():
    table = dict(VAT_RATE_TO_INCOME_ACCOUNT)
    assert table["Standard 23%"] == table["standard_23"] == "Sales Ireland 23%"
    assert table["Reverse Charge"] == "Sales Ireland 13.5%"


# ---- Suggestions --------------------------------------------------------------


def test_suggestion_from_vat_tag():
    assert get_account_suggestion("Sales", "income", "Second Reduced 9%") == AccountSuggestion(
        account_name="Sales Ireland 9%", account_type="Income", confidence=85
    )


def test_suggestion_from_category():
    s = get_account_suggestion("Consulting & Accounting", "expense")
    assert s == AccountSuggestion("Accountancy Fees", "Expense", 80)
    assert s.account_code is None


def test_suggestion_requires_exact_category():
    assert get_account_suggestion("consulting & accounting", "expense") is None


def test_suggestion_none_without_candidates():
    assert get_account_suggestion("Sales", "expense") is None
    assert get_account_suggestion("Unknown", "expense") is None


# ---- Defaults -----------------------------------------------------------------


def test_default_account_prefers_named(accounts):
    assert get_default_account("expense", accounts).name == "General Expenses"
    assert get_default_account("income", accounts).name == "Other Income"


def test_default_account_falls_back_to_first_of_type():
    ledger = [Account("e1", "Rent", "Expense"), Account("e2", "Cleaning", "Expense")]
    assert get_default_account("expense", ledger).id == "e1"
    assert get_default_account("income", ledger) is None
