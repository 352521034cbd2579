"""
Currency Catalog.

The closed set of currencies the core recognizes, with the symbols and
words used to detect them, their reliability thresholds, the static
default rate table and display formatting.

Rates are expressed per MAD: ``DEFAULT_EXCHANGE_RATES['USD'] == 0.1003``
means 1 MAD buys 0.1003 USD.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

BASE_CURRENCY = "MAD"


def _group(amount: float, decimals: int = 2, thousands: str = ",", decimal: str = ".") -> str:
    """Format a number with custom grouping and decimal characters."""
    formatted = f"{amount:,.{decimals}f}"
    return formatted.replace(",", "\0").replace(".", decimal).replace("\0", thousands)


@dataclass(frozen=True)
class Currency:
    """
    One catalog currency.

    Attributes:
        code: ISO 4217 code
        symbol: Primary display symbol
        name: English name
        symbols: Symbol and code spellings scanned next to an amount
        words: Spelled-out names scanned next to an amount
        alt_symbols: Strings that count as an explicit symbol in a match
        confidence_threshold: Minimum confidence for a reliable mention
        formatter: Renders an amount for display
    """
    code: str
    symbol: str
    name: str
    symbols: Tuple[str, ...]
    words: Tuple[str, ...]
    alt_symbols: Tuple[str, ...]
    confidence_threshold: float
    formatter: Callable[[float], str]

    def format(self, amount: float) -> str:
        return self.formatter(amount)


CURRENCIES: Dict[str, Currency] = {
    currency.code: currency
    for currency in (
        Currency(
            code="MAD", symbol="د.م.", name="Moroccan Dirham",
            symbols=("د.م.", "Dh", "درهم", "Dhs", "MAD", "dh."),
            words=("dirhams", "dirham"),
            alt_symbols=("Dh", "DH", "درهم", "Dhs", "MAD", "dh."),
            confidence_threshold=0.95,
            formatter=lambda amount: f"{_group(amount, thousands=' ', decimal=',')} د.م.",
        ),
        Currency(
            code="USD", symbol="$", name="US Dollar",
            symbols=("$", "US$", "USD"),
            words=("dollars", "dollar", "US dollars", "US dollar"),
            alt_symbols=("US$", "USD", "Dollar", "Dollars", "US Dollars"),
            confidence_threshold=0.9,
            formatter=lambda amount: f"${_group(amount)}",
        ),
        Currency(
            code="EUR", symbol="€", name="Euro",
            symbols=("€", "EUR", "Euro", "Euros", "Eur"),
            words=("euros", "euro"),
            alt_symbols=("EUR", "Euro", "Euros", "€", "Eur"),
            confidence_threshold=0.9,
            formatter=lambda amount: f"{_group(amount, thousands=' ', decimal=',')} €",
        ),
        Currency(
            code="GBP", symbol="£", name="British Pound",
            symbols=("£", "GBP", "Pounds", "Sterling"),
            words=("pound sterling", "pounds sterling", "pound", "pounds"),
            alt_symbols=("GBP", "Sterling", "Pounds", "UK Pounds", "UKP", "£"),
            confidence_threshold=0.9,
            formatter=lambda amount: f"£{_group(amount)}",
        ),
        Currency(
            code="CAD", symbol="C$", name="Canadian Dollar",
            symbols=("C$", "CAD", "Can$"),
            words=("Canadian dollars", "Canadian dollar"),
            alt_symbols=("CAD", "Can$", "Canadian Dollar", "Canadian Dollars"),
            confidence_threshold=0.85,
            formatter=lambda amount: f"C${_group(amount)}",
        ),
        Currency(
            code="CHF", symbol="Fr", name="Swiss Franc",
            symbols=("Fr", "CHF", "Fr.", "SFr"),
            words=("Swiss francs", "Swiss franc"),
            alt_symbols=("CHF", "Fr.", "SFr", "Swiss Franc", "Swiss Francs"),
            confidence_threshold=0.85,
            formatter=lambda amount: f"{_group(amount, thousands='’')} Fr",
        ),
        Currency(
            code="JPY", symbol="¥", name="Japanese Yen",
            symbols=("¥", "JPY", "JP¥", "Yen", "円"),
            words=("Japanese yen",),
            alt_symbols=("JPY", "JP¥", "Yen", "円"),
            confidence_threshold=0.85,
            formatter=lambda amount: f"¥{_group(math.floor(amount + 0.5), decimals=0)}",
        ),
        Currency(
            code="CNY", symbol="¥", name="Chinese Yuan",
            symbols=("CNY", "CN¥", "Yuan", "RMB", "元"),
            words=("Chinese yuan", "Renminbi"),
            alt_symbols=("CNY", "CN¥", "Yuan", "RMB", "元"),
            confidence_threshold=0.85,
            formatter=lambda amount: f"¥{_group(amount)}",
        ),
        Currency(
            code="AED", symbol="د.إ", name="UAE Dirham",
            symbols=("د.إ", "AED", "Dhs"),
            words=("UAE dirham", "Emirati dirham"),
            alt_symbols=("AED", "Dhs", "UAE Dirham", "Emirati Dirham"),
            confidence_threshold=0.85,
            formatter=lambda amount: f"{_group(amount)} د.إ",
        ),
        Currency(
            code="SAR", symbol="ر.س", name="Saudi Riyal",
            symbols=("ر.س", "SAR", "SR"),
            words=("Saudi riyal", "riyals"),
            alt_symbols=("SAR", "SR", "Saudi Riyal"),
            confidence_threshold=0.85,
            formatter=lambda amount: f"{_group(amount)} ر.س",
        ),
    )
}

SUPPORTED_CODES: Tuple[str, ...] = tuple(CURRENCIES)

# 1 MAD expressed in each currency
DEFAULT_EXCHANGE_RATES: Dict[str, float] = {
    'MAD': 1.0,
    'USD': 0.1003,
    'EUR': 0.0921,
    'GBP': 0.0786,
    'CAD': 0.1354,
    'CHF': 0.0911,
    'JPY': 15.2315,
    'CNY': 0.6483,
    'AED': 0.3683,
    'SAR': 0.3762,
}


def is_supported(code: str) -> bool:
    return code in CURRENCIES


def format_currency(amount: float, code: str) -> str:
    """
    Format an amount with the symbol placement and separators of a currency.

    Args:
        amount: Amount to format.
        code: Currency code; codes outside the catalog get a generic format.

    Returns:
        Display string.

    Example:
        >>> format_currency(1234.5, "MAD")
        '1 234,50 د.م.'
        >>> format_currency(1234.5, "USD")
        '$1,234.50'
        >>> format_currency(1234.5, "XOF")
        '1,234.50 XOF'
    """
    currency = CURRENCIES.get(code)
    if currency is None:
        return f"{amount:,.2f} {code}"
    return currency.format(amount)
