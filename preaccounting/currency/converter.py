"""
Currency Conversion Module.

Converts amounts between catalog currencies by triangulating through
MAD. When rates cannot be obtained or are unusable, conversion falls
back to the static default table and flags the result.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from preaccounting.utils.exceptions import ExchangeRateError, UnsupportedCurrencyError
from preaccounting.utils.logger import get_logger
from .catalog import BASE_CURRENCY, DEFAULT_EXCHANGE_RATES, SUPPORTED_CODES, format_currency, is_supported
from .rates import DATE_FORMAT, ExchangeRateCache

logger = get_logger(__name__)

DECIMALS = 4


@dataclass
class ConversionResult:
    """
    Outcome of one conversion.

    Attributes:
        amount: Amount in the source currency
        converted_amount: Amount in the target currency, 4 decimals
        from_currency: Source currency code
        to_currency: Target currency code
        rate: Target units per source unit
        date: ISO date of the rates
        is_historical: Whether historical rates were requested
        used_fallback: Whether the static default table was used
        formatted_original: Display form of the source amount
        formatted_converted: Display form of the converted amount
    """
    amount: float
    converted_amount: float
    from_currency: str
    to_currency: str
    rate: float
    date: str
    is_historical: bool = False
    used_fallback: bool = False
    formatted_original: Optional[str] = None
    formatted_converted: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'amount': self.amount,
            'converted_amount': self.converted_amount,
            'from_currency': self.from_currency,
            'to_currency': self.to_currency,
            'rate': self.rate,
            'date': self.date,
            'is_historical': self.is_historical,
            'used_fallback': self.used_fallback,
            'formatted_original': self.formatted_original,
            'formatted_converted': self.formatted_converted,
        }


def _today() -> str:
    return datetime.now().strftime(DATE_FORMAT)


def triangulate(amount: float, from_currency: str, to_currency: str, rates: Dict[str, float]):
    """
    Convert through the base currency.

    Args:
        amount: Amount in the source currency.
        from_currency: Source currency code.
        to_currency: Target currency code.
        rates: Units of each currency per 1 MAD.

    Returns:
        Tuple of (converted_amount, rate), unrounded.

    Raises:
        KeyError: If a needed rate is missing.
        ZeroDivisionError: If the source rate is zero.
    """
    in_base = amount if from_currency == BASE_CURRENCY else amount / rates[from_currency]
    converted = in_base if to_currency == BASE_CURRENCY else in_base * rates[to_currency]

    if to_currency == BASE_CURRENCY:
        rate = 1 / rates[from_currency]
    elif from_currency == BASE_CURRENCY:
        rate = rates[to_currency]
    else:
        rate = rates[to_currency] / rates[from_currency]

    return converted, rate


class CurrencyConverter:
    """
    Converts amounts using cached or supplied MAD rates.

    Attributes:
        cache: ExchangeRateCache used when no rates are supplied
        base_currency: Triangulation base

    Example:
        >>> converter = CurrencyConverter(ExchangeRateCache())
        >>> result = await converter.convert(100, "USD", "MAD")
        >>> result.converted_amount
        997.009
    """

    def __init__(self, cache: Optional[ExchangeRateCache] = None, base_currency: str = BASE_CURRENCY) -> None:
        self.cache = cache if cache is not None else ExchangeRateCache()
        self.base_currency = base_currency

    def _check_code(self, code: str) -> None:
        if not is_supported(code):
            raise UnsupportedCurrencyError(code, list(SUPPORTED_CODES))

    async def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        rates: Optional[Dict[str, float]] = None,
        date: Optional[str] = None
    ) -> ConversionResult:
        """
        Convert an amount between two catalog currencies.

        Args:
            amount: Amount in the source currency.
            from_currency: Source currency code.
            to_currency: Target currency code.
            rates: MAD rate table to use instead of the cache.
            date: ISO date for historical rates.

        Returns:
            ConversionResult; ``used_fallback`` is set when the default
            table had to be used.

        Raises:
            UnsupportedCurrencyError: For codes outside the catalog.
        """
        self._check_code(from_currency)
        self._check_code(to_currency)

        if from_currency == to_currency:
            return ConversionResult(
                amount=amount,
                converted_amount=amount,
                from_currency=from_currency,
                to_currency=to_currency,
                rate=1,
                date=date or _today(),
                is_historical=date is not None,
                formatted_original=format_currency(amount, from_currency),
                formatted_converted=format_currency(amount, to_currency)
            )

        try:
            if rates is None:
                rates = await self.cache.get_rates(self.base_currency, date)
            converted, rate = triangulate(amount, from_currency, to_currency, rates)
        except (ExchangeRateError, KeyError, ZeroDivisionError, TypeError) as e:
            logger.warning(
                f"Conversion {from_currency}->{to_currency} failed ({e!r}), using default rates"
            )
            return self.convert_with_defaults(amount, from_currency, to_currency, date)

        converted = round(converted, DECIMALS)
        return ConversionResult(
            amount=amount,
            converted_amount=converted,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            date=date or _today(),
            is_historical=date is not None,
            formatted_original=format_currency(amount, from_currency),
            formatted_converted=format_currency(converted, to_currency)
        )

    def convert_with_defaults(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        date: Optional[str] = None
    ) -> ConversionResult:
        """
        Convert against the static default rate table.

        The result is always flagged ``used_fallback``.
        """
        self._check_code(from_currency)
        self._check_code(to_currency)

        converted, rate = triangulate(amount, from_currency, to_currency, DEFAULT_EXCHANGE_RATES)
        converted = round(converted, DECIMALS)

        return ConversionResult(
            amount=amount,
            converted_amount=converted,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            date=date or _today(),
            is_historical=date is not None,
            used_fallback=True,
            formatted_original=format_currency(amount, from_currency),
            formatted_converted=format_currency(converted, to_currency)
        )
