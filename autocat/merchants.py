"""Known Irish merchants and the description matcher built on them.

``KNOWN_MERCHANTS`` is an ordered tuple of ``(primary_key, merchant)`` pairs.
Matching walks it in declaration order and the first merchant whose primary
key or any keyword is a substring of the cleaned description wins; there is no
scoring. Short keys therefore shadow later entries (``"go"`` fires inside
``"google"``), which is why the fuel stations sit above the software vendors
exactly as listed here.
"""

from __future__ import annotations

import re

from .logging_setup import get_logger
from .models import KnownMerchant, MerchantMatch

logger = get_logger("autocat.merchants")


def _m(
    name: str,
    category: str,
    business_type: str,
    vat_rate_tag: str,
    *keywords: str,
) -> KnownMerchant:
    return KnownMerchant(
        canonical_name=name,
        category=category,
        business_type=business_type,
        vat_rate_tag=vat_rate_tag,
        keywords=tuple(keywords),
    )


_MATERIALS = "Materials"
_TOOLS = "Tools & Equipment"
_FUEL = "Fuel & Transport"
_SOFTWARE = "Software & Subscriptions"
_UTILITIES = "Utilities"
_OFFICE = "Office Supplies"
_INSURANCE = "Insurance"
_BANK = "Bank Fees"
_VEHICLE = "Vehicle Costs"

# fmt: off
KNOWN_MERCHANTS: tuple[tuple[str, KnownMerchant], ...] = (
    # Builders merchants
    ("chadwicks", _m("Chadwicks", _MATERIALS, "builders_merchant", "standard_23", "chadwick")),
    ("heiton buckley", _m("Heiton Buckley", _MATERIALS, "builders_merchant", "standard_23", "heiton", "buckley")),
    ("woodies", _m("Woodies", _MATERIALS, "diy_store", "standard_23", "woodie")),
    ("screwfix", _m("Screwfix", _TOOLS, "tools_store", "standard_23", "screwfix")),
    ("toolstation", _m("Toolstation", _TOOLS, "tools_store", "standard_23", "toolstation")),
    ("brooks", _m("Brooks", _MATERIALS, "builders_merchant", "standard_23", "brooks")),
    ("jewson", _m("Jewson", _MATERIALS, "builders_merchant", "standard_23", "jewson")),
    ("travis perkins", _m("Travis Perkins", _MATERIALS, "builders_merchant", "standard_23", "travis", "perkins")),
    ("buildbase", _m("Buildbase", _MATERIALS, "builders_merchant", "standard_23", "buildbase")),
    # Fuel stations
    ("circle k", _m("Circle K", _FUEL, "fuel_station", "standard_23", "circle", "circlk")),
    ("applegreen", _m("Applegreen", _FUEL, "fuel_station", "standard_23", "applegreen", "apple green")),
    ("topaz", _m("Topaz", _FUEL, "fuel_station", "standard_23", "topaz")),
    ("maxol", _m("Maxol", _FUEL, "fuel_station", "standard_23", "maxol")),
    ("texaco", _m("Texaco", _FUEL, "fuel_station", "standard_23", "texaco")),
    ("esso", _m("Esso", _FUEL, "fuel_station", "standard_23", "esso")),
    ("shell", _m("Shell", _FUEL, "fuel_station", "standard_23", "shell")),
    ("go", _m("GO", _FUEL, "fuel_station", "standard_23", "go fuel", "go station")),
    # Software & subscriptions
    ("adobe", _m("Adobe", _SOFTWARE, "software", "standard_23", "adobe", "creative cloud")),
    ("microsoft", _m("Microsoft", _SOFTWARE, "software", "standard_23", "microsoft", "msft", "office 365", "ms office")),
    ("shopify", _m("Shopify", _SOFTWARE, "software", "standard_23", "shopify")),
    ("xero", _m("Xero", _SOFTWARE, "software", "standard_23", "xero")),
    ("quickbooks", _m("QuickBooks", _SOFTWARE, "software", "standard_23", "quickbooks", "intuit")),
    ("dropbox", _m("Dropbox", _SOFTWARE, "software", "standard_23", "dropbox")),
    ("google", _m("Google", _SOFTWARE, "software", "standard_23", "google", "gsuite", "workspace")),
    ("amazon web services", _m("AWS", _SOFTWARE, "software", "standard_23", "aws", "amazon web")),
    ("zoom", _m("Zoom", _SOFTWARE, "software", "standard_23", "zoom")),
    ("slack", _m("Slack", _SOFTWARE, "software", "standard_23", "slack")),
    ("canva", _m("Canva", _SOFTWARE, "software", "standard_23", "canva")),
    # Electrical suppliers
    ("cef", _m("CEF", _MATERIALS, "electrical_supplier", "standard_23", "cef", "city electrical")),
    ("kellihers", _m("Kellihers", _MATERIALS, "electrical_supplier", "standard_23", "kelliher")),
    ("electric ireland", _m("Electric Ireland", _UTILITIES, "utility_provider", "reduced_13_5", "electric ireland")),
    # Plumbing suppliers
    ("heat merchants", _m("Heat Merchants", _MATERIALS, "plumbing_supplier", "standard_23", "heat merchant")),
    ("davies", _m("Davies", _MATERIALS, "plumbing_supplier", "standard_23", "davies")),
    ("pipelife", _m("Pipelife", _MATERIALS, "plumbing_supplier", "standard_23", "pipelife")),
    # Office supplies
    ("viking", _m("Viking", _OFFICE, "office_supplier", "standard_23", "viking")),
    ("staples", _m("Staples", _OFFICE, "office_supplier", "standard_23", "staples")),
    ("easons", _m("Easons", _OFFICE, "stationery", "standard_23", "easons", "eason")),
    # Telecoms
    ("vodafone", _m("Vodafone", _UTILITIES, "telecom", "standard_23", "vodafone")),
    ("eir", _m("Eir", _UTILITIES, "telecom", "standard_23", "eir", "eircom")),
    ("three", _m("Three", _UTILITIES, "telecom", "standard_23", "three ireland", "3 ireland")),
    # Insurance
    ("allianz", _m("Allianz", _INSURANCE, "insurance", "exempt", "allianz")),
    ("aviva", _m("Aviva", _INSURANCE, "insurance", "exempt", "aviva")),
    ("axa", _m("AXA", _INSURANCE, "insurance", "exempt", "axa")),
    ("zurich", _m("Zurich", _INSURANCE, "insurance", "exempt", "zurich")),
    # Banks and payment processors
    ("aib", _m("AIB", _BANK, "bank", "exempt", "aib", "allied irish")),
    ("bank of ireland", _m("Bank of Ireland", _BANK, "bank", "exempt", "bank of ireland", "boi")),
    ("ulster bank", _m("Ulster Bank", _BANK, "bank", "exempt", "ulster bank")),
    ("ptsb", _m("PTSB", _BANK, "bank", "exempt", "ptsb", "permanent tsb")),
    ("revolut", _m("Revolut", _BANK, "fintech", "exempt", "revolut")),
    ("stripe", _m("Stripe", _BANK, "payment_processor", "exempt", "stripe")),
    ("paypal", _m("PayPal", _BANK, "payment_processor", "exempt", "paypal")),
    ("sumup", _m("SumUp", _BANK, "payment_processor", "exempt", "sumup", "sum up")),
    # Vehicle services
    ("nct", _m("NCT", _VEHICLE, "vehicle_testing", "exempt", "nct", "national car test")),
    ("cvrt", _m("CVRT", _VEHICLE, "vehicle_testing", "exempt", "cvrt")),
    ("halfords", _m("Halfords", _VEHICLE, "vehicle_parts", "standard_23", "halfords")),
)
# fmt: on

# Applied in order to the lowercased description; none are anchored.
_NOISE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE | re.ASCII)
    for p in (
        r"pos\s+",
        r"card\s+",
        r"debit\s+",
        r"credit\s+",
        r"payment\s+to\s+",
        r"ie$",
        r"ireland$",
        r"dublin\s*\d*",
        r"\d{2}/\d{2}/\d{4}",
    )
)
_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)
_SPACE_RE = re.compile(r"\s+")


def _clean_description(description: str) -> str:
    text = description.lower()
    for pattern in _NOISE_PATTERNS:
        text = pattern.sub("", text)
    return _SPACE_RE.sub(" ", _NON_WORD_RE.sub(" ", text)).strip()


def find_known_merchant(cleaned: str) -> KnownMerchant | None:
    """Return the first merchant whose key or keyword occurs in ``cleaned``."""

    for key, merchant in KNOWN_MERCHANTS:
        if key in cleaned:
            return merchant
        for keyword in merchant.keywords:
            if keyword in cleaned:
                return merchant
    return None


def extract_merchant_name(description: str) -> MerchantMatch:
    """Match ``description`` against :data:`KNOWN_MERCHANTS`.

    Returns the merchant's canonical name on a hit. Otherwise the first three
    multi-character words of the cleaned text are title-cased; when nothing
    survives cleaning the original description is returned unchanged.
    """

    cleaned = _clean_description(description)
    merchant = find_known_merchant(cleaned)
    if merchant is not None:
        logger.debug("Merchant match %r -> %s", description, merchant.canonical_name)
        return MerchantMatch(merchant.canonical_name, merchant)

    words = [w for w in cleaned.split() if len(w) > 1][:3]
    clean_name = " ".join(w[:1].upper() + w[1:] for w in words)
    return MerchantMatch(clean_name or description, None)


__all__ = ["KNOWN_MERCHANTS", "extract_merchant_name", "find_known_merchant"]
