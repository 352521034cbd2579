"""
Exchange Rate Module.

Rate tables come from a pluggable RateProvider and are cached by an
ExchangeRateCache instance that the caller constructs and injects:

    - current snapshots, one per base currency, expire after a TTL
      (6 hours by default)
    - historical snapshots, keyed by (base currency, ISO date), are kept
      for the lifetime of the cache

Rates are "units of currency per 1 unit of base": with base MAD,
``rates['USD'] == 0.1003``.

Usage:
    from preaccounting.currency import ExchangeRateCache, SimulatedRateProvider

    cache = ExchangeRateCache(SimulatedRateProvider())
    rates = await cache.get_rates("MAD")
    march = await cache.get_rates("MAD", date="2024-03-15")
"""

import asyncio
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from config import get_config
from preaccounting.utils.exceptions import ExchangeRateError, UnsupportedCurrencyError
from preaccounting.utils.logger import get_logger
from .catalog import BASE_CURRENCY, DEFAULT_EXCHANGE_RATES, SUPPORTED_CODES, is_supported

logger = get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_TTL_MS = 6 * 60 * 60 * 1000


class RateProvider(ABC):
    """
    Abstract source of exchange rate tables.

    Implementations may be slow or networked; the cache calls them only
    on a miss. Any exception raised by ``fetch`` is reported by the cache
    as an ExchangeRateError.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short name recorded as the snapshot source."""
        pass

    @abstractmethod
    async def fetch(self, base_currency: str, date: Optional[str] = None) -> Dict[str, float]:
        """
        Fetch a rate table.

        Args:
            base_currency: Currency every rate is expressed against.
            date: ISO date for historical rates, None for current rates.

        Returns:
            Mapping of currency code to rate, including the base at 1.0.
        """
        pass


class SimulatedRateProvider(RateProvider):
    """
    Deterministic stand-in for a real FX source.

    Current rates are the static default table. Historical rates scale
    every non-base rate by ``1 + (day / 31 * 0.06 - 0.03)``, so a date
    always yields the same table, within 3% of the defaults.

    Attributes:
        latency_seconds: Artificial delay per fetch

    Example:
        >>> provider = SimulatedRateProvider()
        >>> rates = await provider.fetch("MAD", "2024-03-31")
        >>> round(rates["USD"] / 0.1003, 2)
        1.03
    """

    def __init__(self, latency_seconds: Optional[float] = None) -> None:
        if latency_seconds is None:
            latency_seconds = get_config("currency.provider.latency_seconds", 0)
        self.latency_seconds = float(latency_seconds or 0)

    @property
    def provider_name(self) -> str:
        return "simulation"

    async def fetch(self, base_currency: str, date: Optional[str] = None) -> Dict[str, float]:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        rates = rebase(DEFAULT_EXCHANGE_RATES, base_currency)

        if date is not None:
            day = datetime.strptime(date, DATE_FORMAT).day
            variation = 1 + (day / 31 * 0.06 - 0.03)
            rates = {
                code: rate if code == base_currency else rate * variation
                for code, rate in rates.items()
            }

        return rates


def rebase(rates: Dict[str, float], base_currency: str) -> Dict[str, float]:
    """
    Express a MAD-based rate table against another base currency.

    Example:
        >>> rebase({"MAD": 1.0, "EUR": 0.1}, "EUR")
        {'MAD': 10.0, 'EUR': 1.0}
    """
    if base_currency == BASE_CURRENCY:
        return dict(rates)
    if base_currency not in rates or not rates[base_currency]:
        raise UnsupportedCurrencyError(base_currency, list(SUPPORTED_CODES))

    base_rate = rates[base_currency]
    return {code: rate / base_rate for code, rate in rates.items()}


@dataclass
class ExchangeRateSnapshot:
    """
    A rate table for a base currency at a point in time.

    Attributes:
        base_currency: Currency the rates are expressed against
        rates: Currency code to rate
        timestamp: Fetch time, seconds since the epoch
        source: Provider name, or "default" for the static table
        is_historical: Whether the table is pinned to a past date
        date: ISO date the rates apply to
    """
    base_currency: str
    rates: Dict[str, float] = field(default_factory=dict)
    timestamp: float = 0.0
    source: str = "default"
    is_historical: bool = False
    date: Optional[str] = None

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.base_currency, self.date if self.is_historical else None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'base_currency': self.base_currency,
            'rates': dict(self.rates),
            'timestamp': self.timestamp,
            'source': self.source,
            'is_historical': self.is_historical,
            'date': self.date,
        }


def default_snapshot(base_currency: str = BASE_CURRENCY, date: Optional[str] = None) -> ExchangeRateSnapshot:
    """Snapshot of the static default table, used when the provider fails."""
    return ExchangeRateSnapshot(
        base_currency=base_currency,
        rates=rebase(DEFAULT_EXCHANGE_RATES, base_currency),
        timestamp=time.time(),
        source="default",
        is_historical=date is not None,
        date=date or datetime.now().strftime(DATE_FORMAT)
    )


class ExchangeRateCache:
    """
    TTL cache of rate snapshots in front of a RateProvider.

    All mutations hold a lock. Two concurrent misses for the same key
    may both call the provider; the last result wins.

    Attributes:
        provider: Source of rate tables
        ttl_seconds: Lifetime of current snapshots

    Example:
        >>> cache = ExchangeRateCache(SimulatedRateProvider(), ttl_seconds=60)
        >>> snapshot = await cache.get_snapshot("MAD")
        >>> cache.get("MAD") is snapshot
        True
    """

    def __init__(
        self,
        provider: Optional[RateProvider] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time
    ) -> None:
        self.provider = provider if provider is not None else SimulatedRateProvider()

        if ttl_seconds is None:
            ttl_seconds = get_config("currency.rate_cache_ttl_ms", DEFAULT_TTL_MS) / 1000
        self.ttl_seconds = float(ttl_seconds)

        self._clock = clock
        self._current: Dict[str, ExchangeRateSnapshot] = {}
        self._historical: Dict[Tuple[str, str], ExchangeRateSnapshot] = {}
        self._lock = threading.Lock()

        logger.debug(
            f"ExchangeRateCache initialized (provider: {self.provider.provider_name}, "
            f"ttl: {self.ttl_seconds}s)"
        )

    def get(self, base_currency: str = BASE_CURRENCY, date: Optional[str] = None) -> Optional[ExchangeRateSnapshot]:
        """
        Return a live cached snapshot, or None.

        An expired current snapshot is evicted on lookup.
        """
        with self._lock:
            if date is not None:
                return self._historical.get((base_currency, date))

            snapshot = self._current.get(base_currency)
            if snapshot is None:
                return None
            if self._clock() - snapshot.timestamp >= self.ttl_seconds:
                del self._current[base_currency]
                logger.debug(f"Current {base_currency} rates expired")
                return None
            return snapshot

    def put(self, snapshot: ExchangeRateSnapshot) -> None:
        """Store a snapshot, replacing any snapshot with the same key."""
        with self._lock:
            if snapshot.is_historical:
                self._historical[(snapshot.base_currency, snapshot.date)] = snapshot
            else:
                self._current[snapshot.base_currency] = snapshot

    def clear(self) -> None:
        """Drop every cached snapshot."""
        with self._lock:
            self._current.clear()
            self._historical.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._current) + len(self._historical)

    async def get_snapshot(self, base_currency: str = BASE_CURRENCY, date: Optional[str] = None) -> ExchangeRateSnapshot:
        """
        Return the snapshot for a base currency and optional date.

        Args:
            base_currency: Base of the rate table.
            date: ISO date for historical rates.

        Returns:
            Cached or freshly fetched snapshot.

        Raises:
            UnsupportedCurrencyError: If the base is outside the catalog.
            ExchangeRateError: If the provider fails.
        """
        if not is_supported(base_currency):
            raise UnsupportedCurrencyError(base_currency, list(SUPPORTED_CODES))

        cached = self.get(base_currency, date)
        if cached is not None:
            logger.debug(f"Using cached {'historical' if date else 'current'} rates for {base_currency}")
            return cached

        kind = 'historical' if date else 'current'
        logger.info(f"Fetching {kind} exchange rates ({base_currency}{', ' + date if date else ''})")

        try:
            rates = await self.provider.fetch(base_currency, date)
        except Exception as e:
            raise ExchangeRateError(self.provider.provider_name, str(e), date) from e

        if not rates:
            raise ExchangeRateError(self.provider.provider_name, "empty rate table", date)

        snapshot = ExchangeRateSnapshot(
            base_currency=base_currency,
            rates=dict(rates),
            timestamp=self._clock(),
            source=self.provider.provider_name,
            is_historical=date is not None,
            date=date or datetime.now().strftime(DATE_FORMAT)
        )
        self.put(snapshot)
        return snapshot

    async def get_rates(self, base_currency: str = BASE_CURRENCY, date: Optional[str] = None) -> Dict[str, float]:
        """Return a copy of the rate table for a base currency and optional date."""
        snapshot = await self.get_snapshot(base_currency, date)
        return dict(snapshot.rates)
