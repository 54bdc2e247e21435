"""Public interface for the ``autocat`` package.

Exposes the classification core (locations, vendors, merchants, accounts,
trips), the bulk recategorisation orchestrator and the public models. There
is no runtime logic here, only symbol re-exports. Persistence
(``autocat.persistence``, ``autocat.db``) is imported explicitly by callers
that need it.
"""

from .accounts import find_matching_account, get_account_suggestion, get_default_account
from .classify import classify_description, map_vat_type_to_rate, rules_classifier
from .locations import (
    LocationDictionary,
    build_location_dictionary,
    default_location_dictionary,
    detect_transaction_location,
    extract_base_location,
    extract_county_from_address,
    extract_location_from_text,
)
from .merchants import KNOWN_MERCHANTS, extract_merchant_name
from .models import (
    Account,
    AccountSuggestion,
    Classification,
    DetectedTrip,
    InvalidInputError,
    Invoice,
    KnownMerchant,
    MerchantMatch,
    RecategoriseResult,
    Town,
    Transaction,
    TripTransaction,
)
from .recategorise import TransactionStore, invoice_date_ranges, recategorise
from .towns import IRISH_TOWNS, format_town_display
from .trips import classify_trip_expense, detect_trips
from .vendors import extract_vendor_name, validate_vendor_name

__all__ = [
    # Reference data
    "IRISH_TOWNS",
    "KNOWN_MERCHANTS",
    "format_town_display",
    # Locations
    "LocationDictionary",
    "build_location_dictionary",
    "default_location_dictionary",
    "detect_transaction_location",
    "extract_base_location",
    "extract_county_from_address",
    "extract_location_from_text",
    # Descriptions
    "extract_vendor_name",
    "validate_vendor_name",
    "extract_merchant_name",
    "classify_description",
    "rules_classifier",
    "map_vat_type_to_rate",
    # Accounts
    "find_matching_account",
    "get_account_suggestion",
    "get_default_account",
    # Trips
    "classify_trip_expense",
    "detect_trips",
    # Orchestration
    "TransactionStore",
    "invoice_date_ranges",
    "recategorise",
    # Models / types
    "Account",
    "AccountSuggestion",
    "Classification",
    "DetectedTrip",
    "InvalidInputError",
    "Invoice",
    "KnownMerchant",
    "MerchantMatch",
    "RecategoriseResult",
    "Town",
    "Transaction",
    "TripTransaction",
]
