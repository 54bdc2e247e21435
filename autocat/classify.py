"""Deterministic rules classifier and VAT-rate helpers.

The rules classifier composes the two description stages:
``extract_vendor_name`` strips bank noise, then ``extract_merchant_name``
matches the result against the known-merchant table. Only expenses are
matched against merchants; income and unmatched expenses get a low-confidence
fallback that no orchestrator threshold accepts, so they are left for manual
review.
"""

from __future__ import annotations

from .merchants import extract_merchant_name
from .models import Classification, Direction, Transaction
from .vendors import extract_vendor_name

MERCHANT_CONFIDENCE = 85.0
FALLBACK_CONFIDENCE = 30.0

_FALLBACK_CATEGORY: dict[str, str] = {"expense": "General Expenses", "income": "Sales"}


def classify_description(description: str, direction: Direction) -> Classification:
    """Classify one bank description.

    >>> classify_description("VDP-SCREWFIX 87654321 01/06/2024", "expense").category
    'Tools & Equipment'
    """

    if direction == "expense":
        vendor = extract_vendor_name(description) or description
        match = extract_merchant_name(vendor)
        merchant = match.matched_merchant
        if merchant is not None:
            return Classification(
                category=merchant.category,
                confidence=MERCHANT_CONFIDENCE,
                vat_rate_tag=merchant.vat_rate_tag,
                notes=f"Known merchant: {merchant.canonical_name}",
            )
    return Classification(category=_FALLBACK_CATEGORY[direction], confidence=FALLBACK_CONFIDENCE)


def rules_classifier(txn: Transaction) -> Classification:
    """:data:`~autocat.models.Classifier` adapter over :func:`classify_description`."""

    return classify_description(txn.description, txn.direction)


def map_vat_type_to_rate(vat_type: str | None) -> float:
    """Translate a VAT tag or label into a numeric percentage.

    Substring rules, first hit wins: ``23`` -> 23, ``13.5``/``13,5`` -> 13.5,
    ``9`` -> 9, ``4.8``/``livestock`` -> 4.8, ``zero``/``exempt``/``n/a`` -> 0.
    Anything else (including ``None``) is treated as standard rate.
    """

    vt = (vat_type or "").lower()
    if "23" in vt:
        return 23.0
    if "13.5" in vt or "13,5" in vt or "13_5" in vt:
        return 13.5
    if "9" in vt:
        return 9.0
    if "4.8" in vt or "4_8" in vt or "livestock" in vt:
        return 4.8
    if "zero" in vt:
        return 0.0
    if "exempt" in vt or "n/a" in vt:
        return 0.0
    return 23.0


__all__ = [
    "FALLBACK_CONFIDENCE",
    "MERCHANT_CONFIDENCE",
    "classify_description",
    "map_vat_type_to_rate",
    "rules_classifier",
]
