"""
Display formatting for amounts and dates.

Supports the MAD, EUR and USD currencies and the ar, fr and en languages.
"""
from datetime import date, datetime
from typing import Dict, Union

from babel.dates import format_date as babel_format_date
from babel.numbers import format_currency as babel_format_currency

SUPPORTED_CURRENCIES: Dict[str, str] = {
    "MAD": "Moroccan Dirham",
    "EUR": "Euro",
    "USD": "US Dollar",
}

# Language code -> Babel locale
LANGUAGE_LOCALES: Dict[str, str] = {
    "ar": "ar_MA",
    "fr": "fr_FR",
    "en": "en_US",
}

SUPPORTED_LANGUAGES = tuple(LANGUAGE_LOCALES)

DEFAULT_CURRENCY = "MAD"
DEFAULT_LOCALE = "en_US"


def locale_for(language: str) -> str:
    return LANGUAGE_LOCALES.get(language, DEFAULT_LOCALE)


def format_currency(amount: float, currency: str = DEFAULT_CURRENCY, language: str = "en") -> str:
    """
    Format a number as currency for the given language.

    Unknown currencies fall back to MAD and unknown languages to en_US.
    """
    if currency not in SUPPORTED_CURRENCIES:
        currency = DEFAULT_CURRENCY
    return babel_format_currency(amount, currency, locale=locale_for(language))


def format_date(value: Union[date, datetime, str], language: str = "en") -> str:
    """Format a date as short month, numeric day and year (e.g. "Oct 18, 2026")."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return babel_format_date(value, format="medium", locale=locale_for(language))
