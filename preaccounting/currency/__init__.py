"""
Currency Module for the Pre-Accounting Core.

This module handles multi-currency documents:
    - Currency catalog and display formatting
    - Detection and scoring of currency mentions
    - Exchange rate providers and caching
    - Conversion to the MAD reporting base
"""

from .catalog import (
    BASE_CURRENCY,
    CURRENCIES,
    DEFAULT_EXCHANGE_RATES,
    SUPPORTED_CODES,
    Currency,
    format_currency,
)
from .detector import (
    CurrencyAnalysis,
    CurrencyDetector,
    CurrencyMention,
    analyze_currencies,
    detect_currencies,
)
from .rates import (
    ExchangeRateCache,
    ExchangeRateSnapshot,
    RateProvider,
    SimulatedRateProvider,
    default_snapshot,
)
from .converter import ConversionResult, CurrencyConverter

__all__ = [
    'BASE_CURRENCY',
    'CURRENCIES',
    'DEFAULT_EXCHANGE_RATES',
    'SUPPORTED_CODES',
    'Currency',
    'format_currency',
    'CurrencyAnalysis',
    'CurrencyDetector',
    'CurrencyMention',
    'analyze_currencies',
    'detect_currencies',
    'ExchangeRateCache',
    'ExchangeRateSnapshot',
    'RateProvider',
    'SimulatedRateProvider',
    'default_snapshot',
    'ConversionResult',
    'CurrencyConverter',
]
