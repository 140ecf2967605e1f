"""Countries known to the service and their default bank holidays.

Only holidays on a fixed calendar date are listed; movable feasts are added
by administrators by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from timeoff_admin.exceptions import DomainConflictError


@dataclass(frozen=True)
class Country:
    code: str
    name: str
    bank_holidays: tuple[tuple[str, str], ...]  # (MM-DD, name)


COUNTRIES: dict[str, Country] = {
    country.code: country
    for country in (
        Country(
            "AU",
            "Australia",
            (
                ("01-01", "New Year's Day"),
                ("01-26", "Australia Day"),
                ("04-25", "Anzac Day"),
                ("12-25", "Christmas Day"),
                ("12-26", "Boxing Day"),
            ),
        ),
        Country(
            "CA",
            "Canada",
            (
                ("01-01", "New Year's Day"),
                ("07-01", "Canada Day"),
                ("09-30", "National Day for Truth and Reconciliation"),
                ("11-11", "Remembrance Day"),
                ("12-25", "Christmas Day"),
                ("12-26", "Boxing Day"),
            ),
        ),
        Country(
            "DE",
            "Germany",
            (
                ("01-01", "Neujahr"),
                ("05-01", "Tag der Arbeit"),
                ("10-03", "Tag der Deutschen Einheit"),
                ("12-25", "Erster Weihnachtstag"),
                ("12-26", "Zweiter Weihnachtstag"),
            ),
        ),
        Country(
            "ES",
            "Spain",
            (
                ("01-01", "Año Nuevo"),
                ("01-06", "Epifanía del Señor"),
                ("05-01", "Fiesta del Trabajo"),
                ("08-15", "Asunción de la Virgen"),
                ("10-12", "Fiesta Nacional de España"),
                ("11-01", "Todos los Santos"),
                ("12-06", "Día de la Constitución"),
                ("12-08", "Inmaculada Concepción"),
                ("12-25", "Navidad"),
            ),
        ),
        Country(
            "FR",
            "France",
            (
                ("01-01", "Jour de l'an"),
                ("05-01", "Fête du Travail"),
                ("05-08", "Victoire 1945"),
                ("07-14", "Fête nationale"),
                ("08-15", "Assomption"),
                ("11-01", "Toussaint"),
                ("11-11", "Armistice 1918"),
                ("12-25", "Noël"),
            ),
        ),
        Country(
            "GB",
            "United Kingdom",
            (
                ("01-01", "New Year's Day"),
                ("12-25", "Christmas Day"),
                ("12-26", "Boxing Day"),
            ),
        ),
        Country(
            "IE",
            "Ireland",
            (
                ("01-01", "New Year's Day"),
                ("03-17", "St. Patrick's Day"),
                ("12-25", "Christmas Day"),
                ("12-26", "St. Stephen's Day"),
            ),
        ),
        Country(
            "IN",
            "India",
            (
                ("01-26", "Republic Day"),
                ("08-15", "Independence Day"),
                ("10-02", "Gandhi Jayanti"),
                ("12-25", "Christmas"),
            ),
        ),
        Country(
            "IT",
            "Italy",
            (
                ("01-01", "Capodanno"),
                ("01-06", "Epifania"),
                ("04-25", "Festa della Liberazione"),
                ("05-01", "Festa del Lavoro"),
                ("06-02", "Festa della Repubblica"),
                ("08-15", "Ferragosto"),
                ("11-01", "Ognissanti"),
                ("12-08", "Immacolata Concezione"),
                ("12-25", "Natale"),
                ("12-26", "Santo Stefano"),
            ),
        ),
        Country(
            "NL",
            "Netherlands",
            (
                ("01-01", "Nieuwjaarsdag"),
                ("04-27", "Koningsdag"),
                ("05-05", "Bevrijdingsdag"),
                ("12-25", "Eerste Kerstdag"),
                ("12-26", "Tweede Kerstdag"),
            ),
        ),
        Country(
            "PL",
            "Poland",
            (
                ("01-01", "Nowy Rok"),
                ("01-06", "Trzech Króli"),
                ("05-01", "Święto Pracy"),
                ("05-03", "Święto Konstytucji 3 Maja"),
                ("08-15", "Wniebowzięcie Najświętszej Maryi Panny"),
                ("11-01", "Wszystkich Świętych"),
                ("11-11", "Narodowe Święto Niepodległości"),
                ("12-25", "Boże Narodzenie"),
                ("12-26", "Drugi dzień Bożego Narodzenia"),
            ),
        ),
        Country(
            "US",
            "United States",
            (
                ("01-01", "New Year's Day"),
                ("06-19", "Juneteenth"),
                ("07-04", "Independence Day"),
                ("11-11", "Veterans Day"),
                ("12-25", "Christmas Day"),
            ),
        ),
    )
}


def default_bank_holidays(country_code: str, year: int) -> list[tuple[str, date]]:
    """Resolve a country's default bank holidays to dates in ``year``."""
    country = COUNTRIES.get(country_code.upper())
    if country is None:
        msg = f"No default bank holidays are known for country {country_code}"
        raise DomainConflictError(msg)
    holidays = []
    for month_day, name in country.bank_holidays:
        month, day = (int(part) for part in month_day.split("-"))
        holidays.append((name, date(year, month, day)))
    return holidays
