"""Map classification categories onto a Chart of Accounts.

Two fixed tables drive the mapping:

- ``CATEGORY_ACCOUNT_MAP``: ordered ``(category, CandidateAccounts)`` pairs.
  Each entry lists preferred account names per direction, most preferred
  first. The entries after the original bookkeeping categories cover the
  categories emitted by the merchant table so that a merchant match always has
  somewhere to land.
- ``VAT_RATE_TO_INCOME_ACCOUNT``: income account names keyed by VAT label or
  machine tag. For income it takes precedence over the category.

Resolution order in :func:`find_matching_account`
--------------------------------------------------
1. Income with a VAT tag known to the VAT table: first account whose name
   equals the target (case-insensitive), whatever its type.
2. Category lookup, exact key first, then case-insensitive.
3. Candidates in order: exact name (case-insensitive) and exact type.
4. Candidates in order: partial name match and exact type. An account
   matches when its name contains the candidate's first word or the
   candidate's name contains the account's first word.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NamedTuple

from .logging_setup import get_logger
from .models import Account, AccountSuggestion, AccountType, Direction

logger = get_logger("autocat.accounts")


class Candidate(NamedTuple):
    name: str
    account_type: AccountType


class CandidateAccounts(NamedTuple):
    expense: tuple[Candidate, ...] = ()
    income: tuple[Candidate, ...] = ()

    def for_direction(self, direction: Direction) -> tuple[Candidate, ...]:
        return self.income if direction == "income" else self.expense


def _exp(*pairs: tuple[str, AccountType]) -> CandidateAccounts:
    return CandidateAccounts(expense=tuple(Candidate(n, t) for n, t in pairs))


def _inc(*pairs: tuple[str, AccountType]) -> CandidateAccounts:
    return CandidateAccounts(income=tuple(Candidate(n, t) for n, t in pairs))


_E: AccountType = "Expense"
_COS: AccountType = "Cost of Sales"
_FA: AccountType = "Fixed Assets"
_INC: AccountType = "Income"

# fmt: off
CATEGORY_ACCOUNT_MAP: tuple[tuple[str, CandidateAccounts], ...] = (
    # Materials & supplies
    ("Materials", _exp(("Materials Purchased", _COS), ("Stock Purchases", _COS))),
    ("Tools", _exp(("Small Tools & Equipment", _E), ("Tools & Machinery", _FA))),
    ("Equipment", _exp(("Computer Equipment", _E), ("Office Equipment", _FA))),
    # Motor / travel
    ("Motor/travel", _exp(("Motor – Fuel", _E), ("Motor Tax & Insurance", _E))),
    ("Fuel", _exp(("Motor – Fuel", _E))),
    ("Motor Vehicle Expenses", _exp(("Motor – Fuel", _E), ("Motor – Repairs", _E))),
    ("Repairs and Maintenance", _exp(("Repairs & Maintenance", _E), ("Motor – Repairs", _E))),
    ("Tolls & Parking", _exp(("Motor Tax & Insurance", _E), ("Travel & Subsistence", _E))),
    ("Subsistence", _exp(("Travel & Subsistence", _E), ("Accommodation", _E))),
    # Software & tech
    ("Software", _exp(("Software & Subscriptions", _E), ("Computer Equipment", _E))),
    ("Phone", _exp(("Telephone & Internet", _E))),
    ("Marketing", _exp(("Website Hosting", _E), ("Advertising", _E))),
    # Professional services
    ("Consulting & Accounting", _exp(("Accountancy Fees", _E), ("Consultancy Fees", _E), ("Legal Fees", _E))),
    ("Insurance", _exp(("Insurance", _E))),
    # Bank & finance
    ("Bank fees", _exp(("Bank Charges", _E), ("Merchant Fees", _E))),
    ("Bank Fees", _exp(("Bank Charges", _E), ("Merchant Fees", _E))),
    # Labour & wages
    ("Labour costs", _exp(("Subcontractors", _COS), ("Direct Wages", _COS))),
    ("Sub Con", _exp(("Subcontractors", _COS))),
    ("Wages", _exp(("Wages & Salaries", _E), ("Employer PRSI", _E))),
    # Office & general
    ("Office", _exp(("Office Supplies", _E), ("Printing & Stationery", _E))),
    ("Rent", _exp(("Rent", _E))),
    ("Cleaning", _exp(("Cleaning", _E))),
    ("Training", _exp(("Staff Training", _E))),
    ("Workwear", _exp(("PPE / Protective Gear", _E), ("Uniforms", _E))),
    ("Advertising", _exp(("Advertising", _E), ("Social Media Ads", _E))),
    ("General Expenses", _exp(("General Expenses", _E))),
    ("other", CandidateAccounts(
        expense=(Candidate("General Expenses", _E),),
        income=(Candidate("Other Income", _INC),),
    )),
    ("Drawings", _exp(("Owner's Drawings", "Equity"))),
    ("Medical", _exp(("General Expenses", _E))),
    # Internal transfers
    ("Internal Transfer", CandidateAccounts(
        expense=(Candidate("Internal Transfers", "Current Assets"),),
        income=(Candidate("Internal Transfers", "Current Assets"),),
    )),
    # Income
    ("Sales", _inc(("Sales Ireland 23%", _INC), ("Other Income", _INC))),
    ("RCT", _inc(("Sales Ireland 13.5%", _INC))),
    ("Interest Income", _inc(("Other Income", _INC))),
    ("Subscription Income", _inc(("Sales Ireland 23%", _INC))),
    # Merchant-table categories
    ("Tools & Equipment", _exp(("Small Tools & Equipment", _E), ("Tools & Machinery", _FA))),
    ("Fuel & Transport", _exp(("Motor – Fuel", _E), ("Travel & Subsistence", _E))),
    ("Software & Subscriptions", _exp(("Software & Subscriptions", _E), ("Computer Equipment", _E))),
    ("Utilities", _exp(("Light & Heat", _E), ("Telephone & Internet", _E))),
    ("Office Supplies", _exp(("Office Supplies", _E), ("Printing & Stationery", _E))),
    ("Vehicle Costs", _exp(("Motor – Repairs", _E), ("Motor Tax & Insurance", _E))),
    ("Travel & Subsistence", _exp(("Travel & Subsistence", _E), ("Accommodation", _E))),
)
# fmt: on

VAT_RATE_TO_INCOME_ACCOUNT: tuple[tuple[str, str], ...] = (
    ("Standard 23%", "Sales Ireland 23%"),
    ("standard_23", "Sales Ireland 23%"),
    ("Reduced 13.5%", "Sales Ireland 13.5%"),
    ("reduced_13_5", "Sales Ireland 13.5%"),
    ("Second Reduced 9%", "Sales Ireland 9%"),
    ("second_reduced_9", "Sales Ireland 9%"),
    ("Zero", "Zero Rated Sales"),
    ("zero_rated", "Zero Rated Sales"),
    ("Exempt", "Exempt Sales"),
    ("exempt", "Exempt Sales"),
    # RCT income
    ("Reverse Charge", "Sales Ireland 13.5%"),
)

_CATEGORY_INDEX: dict[str, CandidateAccounts] = dict(CATEGORY_ACCOUNT_MAP)
_VAT_INDEX: dict[str, str] = dict(VAT_RATE_TO_INCOME_ACCOUNT)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def _lookup_category(category: str, *, case_insensitive: bool) -> CandidateAccounts | None:
    mapping = _CATEGORY_INDEX.get(category)
    if mapping is not None or not case_insensitive:
        return mapping
    lowered = category.lower()
    for key, value in CATEGORY_ACCOUNT_MAP:
        if key.lower() == lowered:
            return value
    return None


def _income_account_for_vat(direction: Direction, vat_rate_tag: str | None) -> str | None:
    if direction != "income" or not vat_rate_tag:
        return None
    return _VAT_INDEX.get(vat_rate_tag)


def _first_word(name: str) -> str:
    return name.lower().split(" ")[0]


def _is_partial_match(account: Account, candidate: Candidate) -> bool:
    if account.account_type != candidate.account_type:
        return False
    account_name = account.name.lower()
    candidate_name = candidate.name.lower()
    return _first_word(candidate.name) in account_name or _first_word(account.name) in candidate_name


def find_matching_account(
    category: str,
    direction: Direction,
    vat_rate_tag: str | None,
    accounts: Sequence[Account],
) -> Account | None:
    """Pick the best account in ``accounts`` for a classified transaction.

    Returns ``None`` when the category is unknown for ``direction`` or no
    account satisfies the candidate list (see the module docstring for the
    precedence rules).
    """

    vat_account_name = _income_account_for_vat(direction, vat_rate_tag)
    if vat_account_name:
        target = vat_account_name.lower()
        for account in accounts:
            if account.name.lower() == target:
                return account

    mapping = _lookup_category(category, case_insensitive=True)
    if mapping is None:
        logger.debug("No account mapping for category %r", category)
        return None
    candidates = mapping.for_direction(direction)

    for candidate in candidates:
        target = candidate.name.lower()
        for account in accounts:
            if account.name.lower() == target and account.account_type == candidate.account_type:
                return account

    for candidate in candidates:
        for account in accounts:
            if _is_partial_match(account, candidate):
                logger.debug(
                    "Partial account match %r -> %r for %r", candidate.name, account.name, category
                )
                return account

    return None


def get_account_suggestion(
    category: str,
    direction: Direction,
    vat_rate_tag: str | None = None,
) -> AccountSuggestion | None:
    """Suggest an account name without consulting a concrete ledger.

    VAT-driven income suggestions carry confidence 85, category-driven ones
    80. Only exact category keys are considered here.
    """

    vat_account_name = _income_account_for_vat(direction, vat_rate_tag)
    if vat_account_name:
        return AccountSuggestion(account_name=vat_account_name, account_type="Income", confidence=85)

    mapping = _lookup_category(category, case_insensitive=False)
    if mapping is None:
        return None
    candidates = mapping.for_direction(direction)
    if not candidates:
        return None
    first = candidates[0]
    return AccountSuggestion(
        account_name=first.name, account_type=first.account_type, confidence=80
    )


def get_default_account(direction: Direction, accounts: Iterable[Account]) -> Account | None:
    """Fallback account: ``Other Income`` / ``General Expenses``, else any of the type."""

    if direction == "income":
        preferred, account_type = "Other Income", "Income"
    else:
        preferred, account_type = "General Expenses", "Expense"

    fallback: Account | None = None
    for account in accounts:
        if account.account_type != account_type:
            continue
        if account.name == preferred:
            return account
        if fallback is None:
            fallback = account
    return fallback


__all__ = [
    "CATEGORY_ACCOUNT_MAP",
    "Candidate",
    "CandidateAccounts",
    "VAT_RATE_TO_INCOME_ACCOUNT",
    "find_matching_account",
    "get_account_suggestion",
    "get_default_account",
]
