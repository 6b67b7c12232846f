"""Static South African place-name table used by the alias tier."""

from __future__ import annotations

from typing import NamedTuple

from .models import normalize_alias


class AliasEntry(NamedTuple):
    city: str
    province: str
    latitude: float
    longitude: float


class CityRecord(NamedTuple):
    city: str
    province: str
    latitude: float
    longitude: float
    aliases: tuple[str, ...] = ()

    @property
    def entry(self) -> AliasEntry:
        return AliasEntry(self.city, self.province, self.latitude, self.longitude)


SA_CITIES: tuple[CityRecord, ...] = (
    CityRecord("Johannesburg", "Gauteng", -26.2041, 28.0473, ("jozi", "joburg", "jhb", "egoli")),
    CityRecord("Cape Town", "Western Cape", -33.9249, 18.4241, ("cpt", "ct", "kaapstad")),
    CityRecord("Durban", "KwaZulu-Natal", -29.8587, 31.0218, ("durbs", "dbn", "ethekwini")),
    CityRecord("Pretoria", "Gauteng", -25.7479, 28.2293, ("pta", "tshwane")),
    CityRecord("Gqeberha", "Eastern Cape", -33.9608, 25.6022, ("pe", "p.e.", "port elizabeth")),
    CityRecord("Bloemfontein", "Free State", -29.0852, 26.1596, ("bloem", "bfn")),
    CityRecord("East London", "Eastern Cape", -33.0292, 27.8546, ("el",)),
    CityRecord("Polokwane", "Limpopo", -23.9045, 29.4689, ("pietersburg",)),
    CityRecord("Mbombela", "Mpumalanga", -25.4753, 30.9694, ("nelspruit",)),
    CityRecord("Kimberley", "Northern Cape", -28.7282, 24.7499),
    CityRecord("Stellenbosch", "Western Cape", -33.9321, 18.8602, ("stellies",)),
    CityRecord("Sandton", "Gauteng", -26.1076, 28.0567),
    CityRecord("Centurion", "Gauteng", -25.8603, 28.1894),
    CityRecord("Midrand", "Gauteng", -25.9891, 28.1024),
    CityRecord("Soweto", "Gauteng", -26.2485, 27.854),
    CityRecord("Paarl", "Western Cape", -33.7342, 18.9622),
    CityRecord("Franschhoek", "Western Cape", -33.9133, 19.1169),
    CityRecord("George", "Western Cape", -33.963, 22.4617),
    CityRecord("Knysna", "Western Cape", -34.0356, 23.0488),
    CityRecord("Pietermaritzburg", "KwaZulu-Natal", -29.6006, 30.3794, ("pmb",)),
    CityRecord("Richards Bay", "KwaZulu-Natal", -28.783, 32.0377),
    CityRecord("Umhlanga", "KwaZulu-Natal", -29.7257, 31.0848),
    CityRecord("Ballito", "KwaZulu-Natal", -29.5389, 31.214),
    CityRecord("Rustenburg", "North West", -25.6715, 27.242),
    CityRecord("Potchefstroom", "North West", -26.7145, 27.0937, ("potch",)),
)

_BY_CITY = {record.city: record.entry for record in SA_CITIES}

# Flat alias map; every key is already normalized.
LOCATION_ALIASES: dict[str, AliasEntry] = {
    "cpt": _BY_CITY["Cape Town"],
    "cape town": _BY_CITY["Cape Town"],
    "ct": _BY_CITY["Cape Town"],
    "kaapstad": _BY_CITY["Cape Town"],
    "mother city": _BY_CITY["Cape Town"],
    "jozi": _BY_CITY["Johannesburg"],
    "joburg": _BY_CITY["Johannesburg"],
    "jhb": _BY_CITY["Johannesburg"],
    "johannesburg": _BY_CITY["Johannesburg"],
    "egoli": _BY_CITY["Johannesburg"],
    "pta": _BY_CITY["Pretoria"],
    "pretoria": _BY_CITY["Pretoria"],
    "tshwane": _BY_CITY["Pretoria"],
    "durbs": _BY_CITY["Durban"],
    "durban": _BY_CITY["Durban"],
    "dbn": _BY_CITY["Durban"],
    "ethekwini": _BY_CITY["Durban"],
    "pe": _BY_CITY["Gqeberha"],
    "p.e.": _BY_CITY["Gqeberha"],
    "port elizabeth": _BY_CITY["Gqeberha"],
    "gqeberha": _BY_CITY["Gqeberha"],
    "bloem": _BY_CITY["Bloemfontein"],
    "bloemfontein": _BY_CITY["Bloemfontein"],
    "bfn": _BY_CITY["Bloemfontein"],
    "el": _BY_CITY["East London"],
    "east london": _BY_CITY["East London"],
    "polokwane": _BY_CITY["Polokwane"],
    "pietersburg": _BY_CITY["Polokwane"],
    "nelspruit": _BY_CITY["Mbombela"],
    "mbombela": _BY_CITY["Mbombela"],
    "kimberley": _BY_CITY["Kimberley"],
    "stellies": _BY_CITY["Stellenbosch"],
    "stellenbosch": _BY_CITY["Stellenbosch"],
    "paarl": _BY_CITY["Paarl"],
    "franschhoek": _BY_CITY["Franschhoek"],
    "sandton": _BY_CITY["Sandton"],
    "midrand": _BY_CITY["Midrand"],
    "centurion": _BY_CITY["Centurion"],
    "soweto": _BY_CITY["Soweto"],
    "pmb": _BY_CITY["Pietermaritzburg"],
    "pietermaritzburg": _BY_CITY["Pietermaritzburg"],
    "potch": _BY_CITY["Potchefstroom"],
    "potchefstroom": _BY_CITY["Potchefstroom"],
}

# Guidance handed to the AI tier; kept in sync with the table by hand.
PROMPT_ALIAS_EXAMPLES: tuple[str, ...] = (
    '"jozi", "joburg", "jhb", "egoli", "gauteng" → Johannesburg, Gauteng',
    '"cpt", "ct", "kaapstad", "mother city" → Cape Town, Western Cape',
    '"pe", "p.e.", "port elizabeth", "the bay", "windy city" → Gqeberha (formerly Port Elizabeth), Eastern Cape',
    '"durbs", "dbn", "ethekwini", "durban" → Durban, KwaZulu-Natal',
    '"pta", "tshwane", "pretoria", "jacaranda city" → Pretoria, Gauteng',
    '"bloem", "bfn", "bloemfontein" → Bloemfontein, Free State',
    '"stellies", "stellenbosch" → Stellenbosch, Western Cape',
    '"el", "east london", "buffalo city" → East London, Eastern Cape',
    '"polokwane", "pietersburg" → Polokwane, Limpopo',
    '"nelspruit", "mbombela" → Mbombela, Mpumalanga',
    '"kimberley", "diamond city" → Kimberley, Northern Cape',
    '"potch", "potchefstroom" → Potchefstroom, North West',
    '"soweto" → Johannesburg (Soweto), Gauteng',
    '"sandton" → Johannesburg (Sandton), Gauteng',
)


def lookup_alias(text: str | None) -> AliasEntry | None:
    """Exact, case-insensitive match on a registered alias or canonical city name."""
    key = normalize_alias(text)
    if not key:
        return None

    entry = LOCATION_ALIASES.get(key)
    if entry is not None:
        return entry

    for record in SA_CITIES:
        if record.city.lower() == key or key in record.aliases:
            return record.entry
    return None
