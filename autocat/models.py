"""Data models and type aliases for ``autocat``.

Core records are frozen dataclasses: the classification and trip engines read
them and build new ones, they never mutate a caller's inputs. The single
pydantic model, :class:`Classification`, validates the output contract of a
classifier (rules-based here, potentially an external service elsewhere)
before the orchestrator acts on it.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Shared literals
# ---------------------------------------------------------------------------

type Direction = Literal["income", "expense"]
"""Money flow of a bank transaction relative to the business."""

type AccountType = Literal[
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
]
"""Chart-of-Accounts section. ``"bank"`` is the persistence-layer default."""

type TripExpenseType = Literal["accommodation", "transport", "subsistence", "other"]


class InvalidInputError(ValueError):
    """Raised when an external input (CLI argument, CSV row) is unusable."""


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Town:
    """A town in the Republic of Ireland.

    ``distance_from_dublin`` is the approximate road distance in whole
    kilometres from Dublin city centre.
    """

    name: str
    county: str
    distance_from_dublin: int


@dataclass(frozen=True, slots=True)
class KnownMerchant:
    """A curated Irish merchant with its default category and VAT treatment."""

    canonical_name: str
    category: str
    business_type: str
    vat_rate_tag: str
    keywords: tuple[str, ...] = ()


class MerchantMatch(NamedTuple):
    """Result of :func:`autocat.merchants.extract_merchant_name`."""

    clean_name: str
    matched_merchant: KnownMerchant | None


# ---------------------------------------------------------------------------
# Ledger records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A bank transaction as seen by the classification core.

    ``amount`` keeps whatever sign the source used; the trip engine only ever
    looks at its magnitude. ``date`` is an ISO ``YYYY-MM-DD`` string (empty
    when the source had none). ``account_id``, ``vat_rate`` and ``notes`` carry
    the currently persisted allocation and are only read by the orchestrator.
    """

    id: str
    description: str
    amount: float
    date: str
    direction: Direction
    account_id: str | None = None
    vat_rate: float | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class Account:
    """A Chart-of-Accounts entry supplied by the persistence layer."""

    id: str
    name: str
    account_type: AccountType


@dataclass(frozen=True, slots=True)
class AccountSuggestion:
    """A suggested account name for a category, independent of any ledger."""

    account_name: str
    account_type: AccountType
    confidence: int
    account_code: str | None = None


@dataclass(frozen=True, slots=True)
class Invoice:
    """An issued invoice; only its job dates matter to trip reclassification."""

    id: str
    invoice_number: str
    invoice_date: str
    job_start_date: str | None = None
    job_end_date: str | None = None


# ---------------------------------------------------------------------------
# Trips
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TripTransaction:
    """A trip member transaction tagged with its expense type."""

    id: str
    description: str
    amount: float
    date: str
    direction: Direction
    expense_type: TripExpenseType


@dataclass(frozen=True, slots=True)
class DetectedTrip:
    """A cluster of expenses inferred to be one business trip.

    Trips are built per detection run and never persisted as such; only the
    category/VAT/note changes derived from them are.
    """

    id: str
    location: str
    start_date: str
    end_date: str
    transactions: tuple[TripTransaction, ...]
    total_spend: float

    def note(self) -> str:
        """Ledger note, e.g. ``[Trip] Business trip to Cork (2024-03-15 – 2024-03-16)``."""

        span = self.start_date
        if self.end_date != self.start_date:
            span = f"{self.start_date} – {self.end_date}"
        return f"[Trip] Business trip to {self.location} ({span})"


type TripIdFactory = Callable[[], str]


# ---------------------------------------------------------------------------
# Classifier contract and orchestration results
# ---------------------------------------------------------------------------


class Classification(BaseModel):
    """Validated output of a transaction classifier.

    ``confidence`` is a 0-100 score. ``vat_rate_tag`` is either a machine tag
    (``"standard_23"``) or a human label (``"Reduced 13.5%"``).
    """

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True, str_strip_whitespace=True)

    category: str
    confidence: float
    vat_rate_tag: str | None = None
    notes: str | None = None

    @field_validator("category")
    @classmethod
    def _category_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("category must be non-empty")
        return v

    @field_validator("confidence")
    @classmethod
    def _confidence_in_range(cls, v: float) -> float:
        fv = float(v)
        if 0.0 <= fv <= 100.0:
            return fv
        raise ValueError("confidence must be within [0,100]")

    @field_validator("vat_rate_tag", "notes")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v


type Classifier = Callable[[Transaction], Classification]


@dataclass(slots=True)
class RecategoriseResult:
    """Counters reported by :func:`autocat.recategorise.recategorise`.

    ``categorized + skipped + failed == total`` always holds for the
    classification pass. Trip and invoice passes report separately.
    """

    total: int = 0
    categorized: int = 0
    skipped: int = 0
    failed: int = 0
    trips_detected: int = 0
    trip_updates: int = 0
    drawings_reclassified: int = 0
    trips: Sequence[DetectedTrip] = field(default_factory=tuple)


__all__ = [
    "Account",
    "AccountSuggestion",
    "AccountType",
    "Classification",
    "Classifier",
    "DetectedTrip",
    "Direction",
    "InvalidInputError",
    "Invoice",
    "KnownMerchant",
    "MerchantMatch",
    "RecategoriseResult",
    "Town",
    "Transaction",
    "TripExpenseType",
    "TripIdFactory",
    "TripTransaction",
]
