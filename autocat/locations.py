"""Irish place-name dictionary and free-text location lookup.

The dictionary maps lowercase keys (every town name plus a handful of
bank-statement abbreviations such as ``"dub"``) to canonical town names. It is
an immutable value: build one with :func:`build_location_dictionary` or use
the shared default from :func:`default_location_dictionary`.

Matching rules
--------------
- Text is normalised: lowercased, characters outside ``[a-z0-9 &.]`` become
  spaces, whitespace is collapsed.
- Keys are matched as whole words, longest key first, so ``"carrickmacross"``
  wins over ``"carrick"`` and ``"carrick on shannon"`` over ``"shannon"``.
  Keys go through the same normalisation, which lets hyphenated towns match
  statement text where the hyphens were already lost.
- Fallbacks, in order: ``port of <word>`` where ``<word>`` is a key, then a
  Dublin postal district (``D01``-``D24``, ``D6W``).
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .logging_setup import get_logger
from .models import Town
from .towns import IRISH_TOWNS

logger = get_logger("autocat.locations")

# Abbreviations seen on Irish bank statements that no town name produces.
DEFAULT_ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("dub", "Dublin"),
    ("dubln", "Dublin"),
    ("crk", "Cork"),
    ("glwy", "Galway"),
    ("lmk", "Limerick"),
    ("waterfrd", "Waterford"),
    ("wford", "Waterford"),
    ("klkny", "Kilkenny"),
    ("wxford", "Wexford"),
    ("carrick", "Carrick-on-Shannon"),
)

_STRIP_RE = re.compile(r"[^a-z0-9\s&.]")
_SPACE_RE = re.compile(r"\s+")
_PORT_OF_RE = re.compile(r"port of (\w+)")
_DUBLIN_DISTRICT_RE = re.compile(r"\bd(?:0[1-9]|1[0-9]|2[0-4]|6w)\b", re.IGNORECASE)
_COUNTY_PATTERNS = (
    re.compile(r"\bco\.?\s+(\w+)\b"),
    re.compile(r"\bcounty\s+(\w+)\b"),
)


def normalise_text(text: str | None) -> str:
    """Lowercase, blank out punctuation other than ``&``/``.``, collapse spaces."""

    if not text:
        return ""
    out = _STRIP_RE.sub(" ", text.lower())
    return _SPACE_RE.sub(" ", out).strip()


@dataclass(frozen=True, slots=True)
class LocationDictionary:
    """Read-only place-name lookup built from a town table.

    ``entries`` keeps declaration order (towns first, then abbreviations);
    ``patterns`` holds the same keys compiled as whole-word regexes, sorted
    longest first with ties in declaration order.
    """

    entries: Mapping[str, str]
    county_by_town: Mapping[str, str]
    counties: frozenset[str]
    patterns: tuple[tuple[re.Pattern[str], str], ...] = field(repr=False)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def canonical(self, key: str) -> str | None:
        return self.entries.get(key.lower())

    def county_of(self, location: str | None) -> str | None:
        """County of a town name or abbreviation, matched case-insensitively."""

        if not location:
            return None
        county = self.county_by_town.get(location)
        if county is None:
            canonical = self.canonical(location.strip())
            county = self.county_by_town.get(canonical) if canonical else None
        return county


def build_location_dictionary(
    towns: Iterable[Town] = IRISH_TOWNS,
    abbreviations: Iterable[tuple[str, str]] = DEFAULT_ABBREVIATIONS,
) -> LocationDictionary:
    """Build an immutable :class:`LocationDictionary`.

    Every town contributes ``name.lower() -> name``. Abbreviations are merged
    afterwards and never replace a key a town already produced. Duplicate town
    keys raise ``ValueError``.
    """

    entries: dict[str, str] = {}
    county_by_town: dict[str, str] = {}
    for town in towns:
        key = town.name.lower()
        if key in entries:
            raise ValueError(f"duplicate location key {key!r} for town {town.name!r}")
        entries[key] = town.name
        county_by_town[town.name] = town.county

    for raw_key, canonical in abbreviations:
        key = raw_key.lower()
        if key in entries:
            logger.debug("Abbreviation %r shadowed by town key; keeping %r", key, entries[key])
            continue
        if canonical not in county_by_town:
            raise ValueError(f"abbreviation {raw_key!r} targets unknown town {canonical!r}")
        entries[key] = canonical

    # sorted() is stable, so equal-length keys keep declaration order.
    ordered = sorted(entries.items(), key=lambda kv: -len(normalise_text(kv[0])))
    patterns = tuple(
        (re.compile(rf"\b{re.escape(normalise_text(key))}\b"), canonical)
        for key, canonical in ordered
        if normalise_text(key)
    )

    return LocationDictionary(
        entries=MappingProxyType(entries),
        county_by_town=MappingProxyType(county_by_town),
        counties=frozenset(county_by_town.values()),
        patterns=patterns,
    )


@functools.cache
def default_location_dictionary() -> LocationDictionary:
    """Shared dictionary over :data:`IRISH_TOWNS`, built on first use."""

    dictionary = build_location_dictionary()
    logger.debug("Built location dictionary with %d keys", len(dictionary))
    return dictionary


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def extract_location_from_text(
    text: str | None, dictionary: LocationDictionary | None = None
) -> str | None:
    """Return the canonical town mentioned in ``text``, or ``None``."""

    norm = normalise_text(text)
    if not norm:
        return None
    d = dictionary if dictionary is not None else default_location_dictionary()

    for pattern, canonical in d.patterns:
        if pattern.search(norm):
            return canonical

    port = _PORT_OF_RE.search(norm)
    if port:
        canonical = d.canonical(port.group(1))
        if canonical:
            return canonical

    if _DUBLIN_DISTRICT_RE.search(norm):
        return "Dublin"
    return None


def detect_transaction_location(
    description: str | None, dictionary: LocationDictionary | None = None
) -> str | None:
    """Detect the town a bank-statement description refers to."""

    return extract_location_from_text(description, dictionary)


def extract_base_location(
    address: str | None,
    fallback_address: str | None = None,
    dictionary: LocationDictionary | None = None,
) -> str | None:
    """Extract the user's home town from a profile address.

    ``fallback_address`` (for example a director's home address) is consulted
    only when ``address`` is missing or yields nothing.
    """

    primary = extract_location_from_text(address, dictionary)
    if primary:
        return primary
    return extract_location_from_text(fallback_address, dictionary)


def extract_county_from_address(
    address: str | None, dictionary: LocationDictionary | None = None
) -> str | None:
    """Extract a county from a free-text address.

    An explicit ``Co. <County>`` / ``County <County>`` wins when it names one
    of the known counties; anything else (``Co. Wonderland``) is ignored and
    the county of the first recognised town is returned instead.
    """

    norm = normalise_text(address)
    if not norm:
        return None
    d = dictionary if dictionary is not None else default_location_dictionary()

    for pattern in _COUNTY_PATTERNS:
        match = pattern.search(norm)
        if match:
            word = match.group(1)
            candidate = word[:1].upper() + word[1:]
            if candidate in d.counties:
                return candidate

    return d.county_of(extract_base_location(address, dictionary=d))


__all__ = [
    "DEFAULT_ABBREVIATIONS",
    "LocationDictionary",
    "build_location_dictionary",
    "default_location_dictionary",
    "detect_transaction_location",
    "extract_base_location",
    "extract_county_from_address",
    "extract_location_from_text",
    "normalise_text",
]
