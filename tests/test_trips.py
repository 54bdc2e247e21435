import itertools

import pytest

from autocat.models import DetectedTrip, Transaction
from autocat.trips import classify_trip_expense, detect_trips, is_hotel_booking, new_trip_id


def _t(tid: str, description: str, date: str, amount: float = -20.0, direction="expense"):
    return Transaction(id=tid, description=description, amount=amount, date=date, direction=direction)


def _counter_ids():
    counter = itertools.count(1)
    return lambda: f"trip-{next(counter)}"


# ---- Expense types --------------------------------------------------------------


@pytest.mark.parametrize(
    "description,expected",
    [
        ("Bank charge hotel Cork", "other"),
        ("STAMP DUTY", "other"),
        ("BOOKING.COM KILKENNY", "accommodation"),
        ("Dooleys Waterford", "accommodation"),
        ("STENA FERRY ROSSLARE", "transport"),
        ("FREENOW*TAXI", "transport"),
        ("PARKING EYRE SQ", "transport"),
        ("Costa coffee", "subsistence"),
        ("SUPERMACS", "subsistence"),
        ("AMAZON MARKETPLACE", "other"),
    ],
)
def test_classify_trip_expense(description: str, expected: str):
    assert classify_trip_expense(description) == expected


def test_is_hotel_booking():
    assert is_hotel_booking("Kilkenny River Court Hotel")
    assert is_hotel_booking("AIRBNB * HMXYZ")
    assert not is_hotel_booking("Dooleys Waterford")
    assert not is_hotel_booking("Costa coffee")


def test_new_trip_id_is_unique():
    a, b = new_trip_id(), new_trip_id()
    assert a != b
    assert a.startswith("trip-")


# ---- Detection ------------------------------------------------------------------


def test_two_same_day_expenses_make_one_trip():
    txns = [
        _t("t1", "CENTRA KILKENNY", "2024-03-15", -12.5),
        _t("t2", "MAXOL KILKENNY", "2024-03-15", -30.0),
    ]
    trips = detect_trips(txns, "Naas", id_factory=_counter_ids())
    assert len(trips) == 1
    trip = trips[0]
    assert isinstance(trip, DetectedTrip)
    assert trip.id == "trip-1"
    assert trip.location == "Kilkenny"
    assert (trip.start_date, trip.end_date) == ("2024-03-15", "2024-03-15")
    assert [m.id for m in trip.transactions] == ["t1", "t2"]
    assert [m.expense_type for m in trip.transactions] == ["subsistence", "subsistence"]
    assert trip.total_spend == pytest.approx(42.5)
    assert trip.note() == "[Trip] Business trip to Kilkenny (2024-03-15)"


def test_single_non_hotel_expense_is_not_a_trip():
    assert detect_trips([_t("t1", "CENTRA KILKENNY", "2024-03-15")], "Naas") == []


def test_single_hotel_expense_is_a_trip():
    trips = detect_trips([_t("h1", "KILKENNY RIVER COURT HOTEL", "2024-03-15", -140.0)], "Naas")
    assert len(trips) == 1
    assert trips[0].transactions[0].expense_type == "accommodation"
    assert trips[0].total_spend == pytest.approx(140.0)


def test_consecutive_days_merge():
    txns = [
        _t("a", "SPAR CORK", "2024-03-15"),
        _t("b", "TESCO CORK", "2024-03-15"),
        _t("c", "SPAR CORK", "2024-03-16"),
        _t("d", "CENTRA CORK", "2024-03-16"),
    ]
    trips = detect_trips(txns, "Naas")
    assert len(trips) == 1
    assert (trips[0].start_date, trips[0].end_date) == ("2024-03-15", "2024-03-16")
    assert len(trips[0].transactions) == 4
    assert trips[0].note() == "[Trip] Business trip to Cork (2024-03-15 – 2024-03-16)"


def test_two_day_gap_splits_trips():
    txns = [
        _t("a", "SPAR CORK", "2024-03-15"),
        _t("b", "TESCO CORK", "2024-03-15"),
        _t("c", "SPAR CORK", "2024-03-17"),
        _t("d", "CENTRA CORK", "2024-03-17"),
    ]
    trips = detect_trips(txns, "Naas")
    assert [(t.start_date, t.end_date) for t in trips] == [
        ("2024-03-15", "2024-03-15"),
        ("2024-03-17", "2024-03-17"),
    ]


def test_trips_ordered_by_location_then_date():
    txns = [
        _t("g1", "SPAR GALWAY", "2024-01-10"),
        _t("g2", "APPLEGREEN GALWAY", "2024-01-10"),
        _t("c1", "SPAR CORK", "2024-02-01"),
        _t("c2", "TESCO CORK", "2024-02-01"),
    ]
    trips = detect_trips(txns, "Naas", id_factory=_counter_ids())
    assert [(t.id, t.location) for t in trips] == [("trip-1", "Cork"), ("trip-2", "Galway")]


def test_same_county_as_base_is_home():
    txns = [
        _t("a", "SPAR NEWBRIDGE", "2024-03-15"),
        _t("b", "CENTRA NEWBRIDGE", "2024-03-15"),
    ]
    assert detect_trips(txns, "Naas") == []


@pytest.mark.parametrize("base", ["naas", "NAAS", " Naas "])
def test_same_county_as_base_is_home_whatever_the_case(base: str):
    txns = [
        _t("a", "SPAR NEWBRIDGE", "2024-03-15"),
        _t("b", "CENTRA NEWBRIDGE", "2024-03-15"),
    ]
    assert detect_trips(txns, base) == []


def test_base_town_is_home_case_insensitive():
    txns = [
        _t("a", "CENTRA KILKENNY", "2024-03-15"),
        _t("b", "MAXOL KILKENNY", "2024-03-15"),
    ]
    assert detect_trips(txns, "kilkenny") == []
    assert len(detect_trips(txns, None)) == 1


def test_income_and_unlocated_expenses_ignored():
    txns = [
        _t("a", "CENTRA KILKENNY", "2024-03-15"),
        _t("b", "STRIPE PAYOUT KILKENNY", "2024-03-15", 500.0, "income"),
        _t("c", "TESCO STORES", "2024-03-15"),
        _t("d", "AMAZON MARKETPLACE", "2024-03-15"),
    ]
    assert detect_trips(txns, "Naas") == []


def test_unparseable_dates_never_merge():
    txns = [
        _t("a", "SPAR CORK", "15/03/2024"),
        _t("b", "TESCO CORK", "15/03/2024"),
        _t("c", "SPAR CORK", "16/03/2024"),
        _t("d", "CENTRA CORK", "16/03/2024"),
    ]
    assert len(detect_trips(txns, "Naas")) == 2


def test_inputs_are_not_mutated():
    txns = [
        _t("t1", "CENTRA KILKENNY", "2024-03-15", -12.5),
        _t("t2", "MAXOL KILKENNY", "2024-03-15", -30.0),
    ]
    snapshot = list(txns)
    detect_trips(txns, "Naas")
    assert txns == snapshot
    assert txns[0].amount == -12.5


def test_empty_input():
    assert detect_trips([], "Naas") == []
