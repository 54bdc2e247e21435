import pytest

from autocat.merchants import KNOWN_MERCHANTS, extract_merchant_name, find_known_merchant


def test_table_keys_are_unique_and_lowercase():
    keys = [k for k, _ in KNOWN_MERCHANTS]
    assert len(keys) == len(set(keys))
    assert all(k == k.lower() for k in keys)


@pytest.mark.parametrize(
    "description,name,category,vat",
    [
        ("SCREWFIX DIRECT", "Screwfix", "Tools & Equipment", "standard_23"),
        ("POS CHADWICKS SANDYFORD", "Chadwicks", "Materials", "standard_23"),
        ("Circle K Naas Rd", "Circle K", "Fuel & Transport", "standard_23"),
        ("ADOBE CREATIVE CLOUD", "Adobe", "Software & Subscriptions", "standard_23"),
        ("ELECTRIC IRELAND 01/06/2024", "Electric Ireland", "Utilities", "reduced_13_5"),
        ("ALLIANZ PLC POLICY", "Allianz", "Insurance", "exempt"),
        ("STRIPE PAYOUT", "Stripe", "Bank Fees", "exempt"),
        ("NATIONAL CAR TEST", "NCT", "Vehicle Costs", "exempt"),
        ("Payment to Vodafone", "Vodafone", "Utilities", "standard_23"),
        # Padded exports: runs of spaces collapse before multi-word keys are tried
        ("PERMANENT  TSB", "PTSB", "Bank Fees", "exempt"),
        ("ULSTER   BANK", "Ulster Bank", "Bank Fees", "exempt"),
        ("POS\tELECTRIC  IRELAND 0417", "Electric Ireland", "Utilities", "reduced_13_5"),
    ],
)
def test_known_merchants(description: str, name: str, category: str, vat: str):
    match = extract_merchant_name(description)
    assert match.clean_name == name
    assert match.matched_merchant is not None
    assert match.matched_merchant.category == category
    assert match.matched_merchant.vat_rate_tag == vat


def test_keyword_match():
    match = extract_merchant_name("MSFT *SUBSCRIPTION")
    assert match.clean_name == "Microsoft"


def test_declaration_order_wins():
    # "shell" is declared before "go", and both occur here
    assert extract_merchant_name("SHELL GO STATION").clean_name == "Shell"


def test_unknown_merchant_fallback_name():
    match = extract_merchant_name("POS MURPHYS BUTCHERS 12/03/2024")
    assert match.matched_merchant is None
    assert match.clean_name == "Murphys Butchers"


def test_fallback_keeps_three_multi_char_words():
    match = extract_merchant_name("j kelly timber and hardware")
    assert match.matched_merchant is None
    assert match.clean_name == "Kelly Timber And"


def test_fallback_returns_original_when_nothing_survives():
    assert extract_merchant_name("* 1 *") == ("* 1 *", None)


def test_find_known_merchant_expects_cleaned_text():
    assert find_known_merchant("toolstation") is not None
    assert find_known_merchant("murphys") is None
