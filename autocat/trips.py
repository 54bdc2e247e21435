"""Business-trip detection over a user's expense history.

A trip is a run of days spent away from the user's home base, inferred from
location mentions in bank descriptions:

1. Only expenses are considered.
2. Each expense's location comes from :func:`detect_transaction_location`.
   Expenses with no location, at the base town, or in the base town's county
   are dropped.
3. Expenses are grouped by ``(date, location)``. A day-group qualifies when it
   has two or more expenses, or any expense that looks like a hotel booking.
4. Qualified groups are sorted by location then date and merged while the
   location stays the same and the gap to the previous day is at most one
   day.

Each trip transaction is tagged with an expense type from
:func:`classify_trip_expense`.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from .locations import (
    LocationDictionary,
    default_location_dictionary,
    detect_transaction_location,
    normalise_text,
)
from .logging_setup import get_logger
from .models import DetectedTrip, Transaction, TripExpenseType, TripIdFactory, TripTransaction

logger = get_logger("autocat.trips")

HOTEL_KEYWORDS: tuple[str, ...] = (
    "hotel",
    "b&b",
    "b & b",
    "guesthouse",
    "guest house",
    "hostel",
    "airbnb",
    "booking.com",
    "accommodation",
    "lodge",
    "inn",
)

ACCOMMODATION_KEYWORDS: tuple[str, ...] = HOTEL_KEYWORDS + ("dooleys", "stay")

TRANSPORT_KEYWORDS: tuple[str, ...] = (
    "port of",
    "ferry",
    "taxi",
    "freenow",
    "bolt",
    "uber",
    "bus",
    "train",
    "toll",
    "eflow",
    "parking",
    "fuel",
)

SUBSISTENCE_KEYWORDS: tuple[str, ...] = (
    "restaurant",
    "cafe",
    "coffee",
    "food",
    "lunch",
    "dinner",
    "breakfast",
    "pub",
    "bar",
    "takeaway",
    "mcdonalds",
    "subway",
    "supermacs",
    "centra",
    "spar",
    "deli",
    "uisce beatha",
    "costa",
    "insomnia",
    "starbucks",
    "greggs",
    "lidl",
    "aldi",
    "tesco",
    "dunnes",
    "supervalu",
    # Forecourt shops: small purchases there are meals, not fuel.
    "circle k",
    "applegreen",
    "maxol",
    "texaco",
    "top",
    "emo",
    "go fuel",
    "inver",
)

# Never trip expenses, whatever else the description says.
EXCLUDED_KEYWORDS: tuple[str, ...] = (
    "bank charge",
    "bank fee",
    "government stamp",
    "stamp duty",
    "revenue",
    "rev comm",
    "interest charge",
    "account fee",
    "service charge",
    "direct debit",
    "standing order",
)


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def classify_trip_expense(description: str) -> TripExpenseType:
    """Classify a trip transaction as accommodation, transport, subsistence or other.

    Exclusions are checked first, then accommodation, transport and
    subsistence keywords in that order.
    """

    norm = normalise_text(description)
    if _contains_any(norm, EXCLUDED_KEYWORDS):
        return "other"
    if _contains_any(norm, ACCOMMODATION_KEYWORDS):
        return "accommodation"
    if _contains_any(norm, TRANSPORT_KEYWORDS):
        return "transport"
    if _contains_any(norm, SUBSISTENCE_KEYWORDS):
        return "subsistence"
    return "other"


def is_hotel_booking(description: str) -> bool:
    return _contains_any(normalise_text(description), HOTEL_KEYWORDS)


def _day_diff(start: str, end: str) -> int | None:
    try:
        return (date.fromisoformat(end[:10]) - date.fromisoformat(start[:10])).days
    except ValueError:
        return None


def new_trip_id() -> str:
    return f"trip-{uuid.uuid4().hex}"


@dataclass(slots=True)
class _DayGroup:
    location: str
    date: str
    transactions: list[Transaction] = field(default_factory=list)


def _is_home(location: str, base_location: str | None, dictionary: LocationDictionary) -> bool:
    if not base_location:
        return False
    if location.lower() == base_location.lower():
        return True
    base_county = dictionary.county_of(base_location)
    return base_county is not None and base_county == dictionary.county_of(location)


def _build_trip(
    trip_id: str, location: str, start: str, end: str, txns: list[Transaction]
) -> DetectedTrip:
    members = tuple(
        TripTransaction(
            id=t.id,
            description=t.description,
            amount=t.amount,
            date=t.date,
            direction=t.direction,
            expense_type=classify_trip_expense(t.description),
        )
        for t in txns
    )
    return DetectedTrip(
        id=trip_id,
        location=location,
        start_date=start,
        end_date=end,
        transactions=members,
        total_spend=sum(abs(t.amount) for t in txns),
    )


def detect_trips(
    transactions: Iterable[Transaction],
    base_location: str | None,
    *,
    id_factory: TripIdFactory | None = None,
    dictionary: LocationDictionary | None = None,
) -> list[DetectedTrip]:
    """Cluster expenses into business trips away from ``base_location``.

    Parameters
    ----------
    transactions:
        Any mix of income and expenses; income is ignored. Dates must be ISO
        ``YYYY-MM-DD`` strings.
    base_location:
        Canonical home town (see :func:`~autocat.locations.extract_base_location`).
        ``None`` disables home filtering.
    id_factory:
        Produces trip ids. Defaults to UUID-based ``trip-<hex>`` ids.

    Returns
    -------
    list[DetectedTrip]
        Trips in location-then-date order; ``[]`` when nothing qualifies.
    """

    d = dictionary if dictionary is not None else default_location_dictionary()
    make_id = id_factory or new_trip_id

    groups: dict[tuple[str, str], _DayGroup] = {}
    for txn in transactions:
        if txn.direction != "expense":
            continue
        location = detect_transaction_location(txn.description, d)
        if not location or _is_home(location, base_location, d):
            continue
        group = groups.get((txn.date, location))
        if group is None:
            group = groups[(txn.date, location)] = _DayGroup(location=location, date=txn.date)
        group.transactions.append(txn)

    qualified = [
        g
        for g in groups.values()
        if len(g.transactions) >= 2 or any(is_hotel_booking(t.description) for t in g.transactions)
    ]
    if not qualified:
        return []
    qualified.sort(key=lambda g: (g.location, g.date))

    trips: list[DetectedTrip] = []
    current = qualified[0]
    start, end, members = current.date, current.date, list(current.transactions)
    for day in qualified[1:]:
        gap = _day_diff(end, day.date)
        if day.location == current.location and gap is not None and gap <= 1:
            end = day.date
            members.extend(day.transactions)
            continue
        trips.append(_build_trip(make_id(), current.location, start, end, members))
        current = day
        start, end, members = day.date, day.date, list(day.transactions)
    trips.append(_build_trip(make_id(), current.location, start, end, members))

    logger.debug("Detected %d trip(s) from %d day-group(s)", len(trips), len(qualified))
    return trips


__all__ = [
    "ACCOMMODATION_KEYWORDS",
    "EXCLUDED_KEYWORDS",
    "HOTEL_KEYWORDS",
    "SUBSISTENCE_KEYWORDS",
    "TRANSPORT_KEYWORDS",
    "classify_trip_expense",
    "detect_trips",
    "is_hotel_booking",
    "new_trip_id",
]
