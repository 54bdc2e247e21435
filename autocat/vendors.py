"""Recover a plausible merchant name from a raw bank-statement description.

Irish bank exports prefix descriptions with a transaction-type code
(``VDP-``, ``POS``, ``D/D`` ...) and pad them with card numbers, posting dates
and IBANs. :func:`extract_vendor_name` strips that noise in a fixed order.

The order matters: long digit runs are removed *before* IBAN-like tokens, so
``"TFR PAYMENT IE29AIBK93115212345678"`` loses its numeric tail first and the
remaining ``"IE29AIBK"`` no longer looks like an IBAN. Downstream consumers
rely on that exact output.
"""

from __future__ import annotations

import re

from .models import InvalidInputError

_MAX_VENDOR_INPUT = 500

_PREFIX_RE = re.compile(
    r"^(VDP-|VDC-|VDA-|POS |DD |D/D |STO |BGC |TFR |FPI |FPO |CHQ )", re.IGNORECASE
)
_LONG_DIGITS_RE = re.compile(r"\d{6,}", re.ASCII)
_DATE_RE = re.compile(r"\s+\d{2}/\d{2}/\d{2,4}", re.ASCII)
# Uppercase only: lowercase lookalikes are left alone.
_IBAN_RE = re.compile(r"\s+[A-Z]{2}\d{2}[A-Z0-9]{10,}", re.ASCII)
_MULTI_SPACE_RE = re.compile(r"\s{2,}")

_MAX_WORDS = 3


def extract_vendor_name(raw_description: str) -> str:
    """Strip bank noise from ``raw_description`` and keep at most three words.

    >>> extract_vendor_name("VDP-SCREWFIX 87654321 01/06/2024 PURCHASE")
    'SCREWFIX PURCHASE'
    """

    cleaned = _PREFIX_RE.sub("", raw_description, count=1)
    cleaned = _LONG_DIGITS_RE.sub("", cleaned)
    cleaned = _DATE_RE.sub("", cleaned)
    cleaned = _IBAN_RE.sub("", cleaned)
    cleaned = _MULTI_SPACE_RE.sub(" ", cleaned).strip()

    parts = cleaned.split()
    if len(parts) > _MAX_WORDS:
        cleaned = " ".join(parts[:_MAX_WORDS])
    return cleaned


def validate_vendor_name(value: object) -> str:
    """Validate a user-supplied vendor description before lookup.

    Raises :class:`~autocat.models.InvalidInputError` for non-strings, blank
    strings and anything longer than 500 characters. Returns the stripped
    value.
    """

    if not isinstance(value, str):
        raise InvalidInputError("vendor name must be a string")
    stripped = value.strip()
    if not stripped:
        raise InvalidInputError("vendor name must be non-empty")
    if len(stripped) > _MAX_VENDOR_INPUT:
        raise InvalidInputError(f"vendor name exceeds {_MAX_VENDOR_INPUT} characters")
    return stripped


__all__ = ["extract_vendor_name", "validate_vendor_name"]
