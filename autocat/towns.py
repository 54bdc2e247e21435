"""Static reference table of towns in the Republic of Ireland.

Covers all 26 counties. Distances are approximate road kilometres from Dublin
city centre. The table is validated when the module is imported so a bad edit
fails at process start rather than on some later lookup.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Town

COUNTIES: frozenset[str] = frozenset(
    {
        "Carlow",
        "Cavan",
        "Clare",
        "Cork",
        "Donegal",
        "Dublin",
        "Galway",
        "Kerry",
        "Kildare",
        "Kilkenny",
        "Laois",
        "Leitrim",
        "Limerick",
        "Longford",
        "Louth",
        "Mayo",
        "Meath",
        "Monaghan",
        "Offaly",
        "Roscommon",
        "Sligo",
        "Tipperary",
        "Waterford",
        "Westmeath",
        "Wexford",
        "Wicklow",
    }
)

# fmt: off
IRISH_TOWNS: tuple[Town, ...] = (
    # Dublin
    Town("Dublin", "Dublin", 0),
    Town("Swords", "Dublin", 17),
    Town("Blanchardstown", "Dublin", 12),
    Town("Tallaght", "Dublin", 15),
    Town("Lucan", "Dublin", 13),
    Town("Clondalkin", "Dublin", 12),
    Town("Finglas", "Dublin", 8),
    Town("Malahide", "Dublin", 17),
    Town("Howth", "Dublin", 16),
    Town("Dun Laoghaire", "Dublin", 12),
    Town("Dundrum", "Dublin", 8),
    Town("Balbriggan", "Dublin", 35),
    Town("Skerries", "Dublin", 30),
    Town("Rush", "Dublin", 27),
    Town("Donabate", "Dublin", 22),
    Town("Rathfarnham", "Dublin", 7),
    Town("Castleknock", "Dublin", 10),
    Town("Raheny", "Dublin", 7),
    Town("Clontarf", "Dublin", 5),
    Town("Blackrock", "Dublin", 9),
    Town("Stillorgan", "Dublin", 10),
    Town("Santry", "Dublin", 7),
    Town("Lusk", "Dublin", 25),
    Town("Tyrrelstown", "Dublin", 14),

    # Cork
    Town("Cork", "Cork", 260),
    Town("Cobh", "Cork", 275),
    Town("Midleton", "Cork", 265),
    Town("Mallow", "Cork", 240),
    Town("Youghal", "Cork", 250),
    Town("Bantry", "Cork", 340),
    Town("Fermoy", "Cork", 230),
    Town("Douglas", "Cork", 262),
    Town("Ballincollig", "Cork", 265),
    Town("Carrigaline", "Cork", 270),
    Town("Kinsale", "Cork", 285),
    Town("Bandon", "Cork", 290),
    Town("Macroom", "Cork", 290),
    Town("Clonakilty", "Cork", 315),
    Town("Skibbereen", "Cork", 330),
    Town("Charleville", "Cork", 215),
    Town("Kanturk", "Cork", 260),

    # Galway
    Town("Galway", "Galway", 210),
    Town("Tuam", "Galway", 225),
    Town("Loughrea", "Galway", 190),
    Town("Ballinasloe", "Galway", 160),
    Town("Clifden", "Galway", 295),
    Town("Oranmore", "Galway", 205),
    Town("Athenry", "Galway", 200),
    Town("Gort", "Galway", 200),
    Town("Portumna", "Galway", 165),

    # Limerick
    Town("Limerick", "Limerick", 200),
    Town("Newcastle West", "Limerick", 235),
    Town("Adare", "Limerick", 215),
    Town("Kilmallock", "Limerick", 210),
    Town("Abbeyfeale", "Limerick", 260),

    # Waterford
    Town("Waterford", "Waterford", 165),
    Town("Dungarvan", "Waterford", 200),
    Town("Tramore", "Waterford", 175),
    Town("Lismore", "Waterford", 215),

    # Kilkenny
    Town("Kilkenny", "Kilkenny", 130),
    Town("Callan", "Kilkenny", 140),
    Town("Thomastown", "Kilkenny", 140),
    Town("Castlecomer", "Kilkenny", 115),

    # Wexford
    Town("Wexford", "Wexford", 150),
    Town("Gorey", "Wexford", 100),
    Town("Enniscorthy", "Wexford", 130),
    Town("New Ross", "Wexford", 150),
    Town("Bunclody", "Wexford", 115),

    # Wicklow
    Town("Wicklow", "Wicklow", 55),
    Town("Arklow", "Wicklow", 75),
    Town("Bray", "Wicklow", 22),
    Town("Greystones", "Wicklow", 28),
    Town("Blessington", "Wicklow", 35),
    Town("Rathdrum", "Wicklow", 60),
    Town("Baltinglass", "Wicklow", 65),

    # Kildare
    Town("Naas", "Kildare", 32),
    Town("Newbridge", "Kildare", 48),
    Town("Celbridge", "Kildare", 22),
    Town("Leixlip", "Kildare", 18),
    Town("Maynooth", "Kildare", 25),
    Town("Athy", "Kildare", 78),
    Town("Kildare", "Kildare", 55),
    Town("Clane", "Kildare", 30),
    Town("Kilcock", "Kildare", 28),
    Town("Monasterevin", "Kildare", 65),
    Town("Sallins", "Kildare", 33),
    Town("Prosperous", "Kildare", 38),

    # Meath
    Town("Navan", "Meath", 50),
    Town("Trim", "Meath", 55),
    Town("Kells", "Meath", 65),
    Town("Ashbourne", "Meath", 20),
    Town("Dunboyne", "Meath", 18),
    Town("Dunshaughlin", "Meath", 30),
    Town("Enfield", "Meath", 40),
    Town("Ratoath", "Meath", 22),
    Town("Bettystown", "Meath", 42),
    Town("Laytown", "Meath", 45),

    # Louth
    Town("Drogheda", "Louth", 50),
    Town("Dundalk", "Louth", 85),
    Town("Ardee", "Louth", 70),
    Town("Carlingford", "Louth", 100),
    Town("Dunleer", "Louth", 60),

    # Westmeath
    Town("Mullingar", "Westmeath", 80),
    Town("Athlone", "Westmeath", 130),
    Town("Moate", "Westmeath", 115),
    Town("Kilbeggan", "Westmeath", 95),
    Town("Castlepollard", "Westmeath", 95),

    # Offaly
    Town("Tullamore", "Offaly", 105),
    Town("Birr", "Offaly", 140),
    Town("Edenderry", "Offaly", 60),
    Town("Clara", "Offaly", 110),
    Town("Banagher", "Offaly", 145),

    # Laois
    Town("Portlaoise", "Laois", 90),
    Town("Mountmellick", "Laois", 85),
    Town("Portarlington", "Laois", 75),
    Town("Mountrath", "Laois", 105),
    Town("Abbeyleix", "Laois", 110),
    Town("Rathdowney", "Laois", 120),
    Town("Stradbally", "Laois", 95),

    # Longford
    Town("Longford", "Longford", 125),
    Town("Ballymahon", "Longford", 130),
    Town("Granard", "Longford", 115),
    Town("Edgeworthstown", "Longford", 115),

    # Tipperary
    Town("Clonmel", "Tipperary", 170),
    Town("Thurles", "Tipperary", 145),
    Town("Nenagh", "Tipperary", 160),
    Town("Tipperary", "Tipperary", 190),
    Town("Cahir", "Tipperary", 185),
    Town("Cashel", "Tipperary", 165),
    Town("Roscrea", "Tipperary", 130),
    Town("Carrick-on-Suir", "Tipperary", 170),
    Town("Templemore", "Tipperary", 140),

    # Kerry
    Town("Tralee", "Kerry", 305),
    Town("Killarney", "Kerry", 310),
    Town("Kenmare", "Kerry", 340),
    Town("Dingle", "Kerry", 350),
    Town("Listowel", "Kerry", 285),
    Town("Cahersiveen", "Kerry", 355),
    Town("Killorglin", "Kerry", 320),
    Town("Castleisland", "Kerry", 290),

    # Clare
    Town("Ennis", "Clare", 230),
    Town("Shannon", "Clare", 220),
    Town("Kilrush", "Clare", 270),
    Town("Killaloe", "Clare", 170),
    Town("Ennistymon", "Clare", 260),
    Town("Scarriff", "Clare", 185),

    # Sligo
    Town("Sligo", "Sligo", 215),
    Town("Ballymote", "Sligo", 230),
    Town("Tobercurry", "Sligo", 240),
    Town("Enniscrone", "Sligo", 255),
    Town("Strandhill", "Sligo", 220),

    # Donegal
    Town("Letterkenny", "Donegal", 240),
    Town("Donegal", "Donegal", 265),
    Town("Bundoran", "Donegal", 255),
    Town("Buncrana", "Donegal", 270),
    Town("Ballyshannon", "Donegal", 255),
    Town("Carndonagh", "Donegal", 290),
    Town("Dunfanaghy", "Donegal", 285),
    Town("Killybegs", "Donegal", 290),

    # Mayo
    Town("Castlebar", "Mayo", 265),
    Town("Westport", "Mayo", 260),
    Town("Ballina", "Mayo", 250),
    Town("Belmullet", "Mayo", 320),
    Town("Ballinrobe", "Mayo", 240),
    Town("Claremorris", "Mayo", 235),
    Town("Swinford", "Mayo", 245),
    Town("Knock", "Mayo", 235),
    Town("Foxford", "Mayo", 250),

    # Roscommon
    Town("Roscommon", "Roscommon", 160),
    Town("Boyle", "Roscommon", 195),
    Town("Castlerea", "Roscommon", 195),
    Town("Strokestown", "Roscommon", 165),
    Town("Ballaghaderreen", "Roscommon", 210),

    # Leitrim
    Town("Carrick-on-Shannon", "Leitrim", 160),
    Town("Manorhamilton", "Leitrim", 220),
    Town("Mohill", "Leitrim", 155),
    Town("Drumshanbo", "Leitrim", 170),
    Town("Ballinamore", "Leitrim", 165),

    # Cavan
    Town("Cavan", "Cavan", 115),
    Town("Virginia", "Cavan", 90),
    Town("Bailieborough", "Cavan", 100),
    Town("Kingscourt", "Cavan", 85),
    Town("Ballyconnell", "Cavan", 145),
    Town("Cootehill", "Cavan", 120),
    Town("Belturbet", "Cavan", 140),

    # Monaghan
    Town("Monaghan", "Monaghan", 130),
    Town("Carrickmacross", "Monaghan", 95),
    Town("Castleblayney", "Monaghan", 105),
    Town("Clones", "Monaghan", 150),
    Town("Ballybay", "Monaghan", 120),

    # Carlow
    Town("Carlow", "Carlow", 85),
    Town("Tullow", "Carlow", 90),
    Town("Muine Bheag", "Carlow", 100),
    Town("Borris", "Carlow", 110),
    Town("Hacketstown", "Carlow", 80),
)
# fmt: on


def validate_towns(towns: Iterable[Town]) -> None:
    """Raise ``ValueError`` when the table breaks its invariants.

    Exactly one town sits at distance 0, ``(name, county)`` pairs are unique,
    town names are unique case-insensitively, distances are non-negative
    integers and every county is one of the 26.
    """

    seen_pairs: set[tuple[str, str]] = set()
    seen_names: set[str] = set()
    origins: list[str] = []
    for town in towns:
        pair = (town.name, town.county)
        if pair in seen_pairs:
            raise ValueError(f"duplicate town entry: {town.name}, Co. {town.county}")
        seen_pairs.add(pair)
        key = town.name.lower()
        if key in seen_names:
            raise ValueError(f"duplicate town name: {town.name!r}")
        seen_names.add(key)
        dist = town.distance_from_dublin
        if isinstance(dist, bool) or not isinstance(dist, int) or dist < 0:
            raise ValueError(f"invalid distance for {town.name!r}: {dist!r}")
        if town.county not in COUNTIES:
            raise ValueError(f"unknown county for {town.name!r}: {town.county!r}")
        if dist == 0:
            origins.append(town.name)
    if len(origins) != 1:
        raise ValueError(f"expected exactly one town at distance 0, found {origins!r}")


validate_towns(IRISH_TOWNS)

_BY_NAME: dict[str, Town] = {t.name.lower(): t for t in IRISH_TOWNS}


def format_town_display(town: Town) -> str:
    """Return ``"Name, Co. County"`` for display and storage."""

    return f"{town.name}, Co. {town.county}"


def find_town(name: str | None) -> Town | None:
    """Case-insensitive lookup of a town by its exact name."""

    if not name:
        return None
    return _BY_NAME.get(name.strip().lower())


def county_for_town(name: str | None) -> str | None:
    town = find_town(name)
    return town.county if town is not None else None


__all__ = [
    "COUNTIES",
    "IRISH_TOWNS",
    "county_for_town",
    "find_town",
    "format_town_display",
    "validate_towns",
]
