"""Tests for rate providers and the exchange rate cache."""

import pytest

from preaccounting.currency import (
    DEFAULT_EXCHANGE_RATES,
    ExchangeRateCache,
    SimulatedRateProvider,
    default_snapshot,
)
from preaccounting.currency.rates import rebase
from preaccounting.utils.exceptions import ExchangeRateError, UnsupportedCurrencyError
from tests.conftest import FakeRateProvider


class TestSimulatedRateProvider:
    """Tests for the deterministic rate source."""

    @pytest.mark.asyncio
    async def test_current_rates_are_defaults(self):
        rates = await SimulatedRateProvider(latency_seconds=0).fetch("MAD")
        assert rates == DEFAULT_EXCHANGE_RATES

    @pytest.mark.asyncio
    async def test_historical_rates_vary_by_day(self):
        """Should scale non-base rates by the day of the month."""
        provider = SimulatedRateProvider(latency_seconds=0)
        rates = await provider.fetch("MAD", "2024-03-31")

        assert rates["MAD"] == 1.0
        assert rates["USD"] == pytest.approx(0.1003 * 1.03)
        assert await provider.fetch("MAD", "2024-03-31") == rates

    @pytest.mark.asyncio
    async def test_other_base(self):
        """Should rebase the table on request."""
        rates = await SimulatedRateProvider(latency_seconds=0).fetch("EUR")
        assert rates["EUR"] == pytest.approx(1.0)
        assert rates["MAD"] == pytest.approx(1 / 0.0921)

    def test_rebase_unknown_currency(self):
        with pytest.raises(UnsupportedCurrencyError):
            rebase(DEFAULT_EXCHANGE_RATES, "XYZ")


class TestExchangeRateCache:
    """Tests for snapshot caching."""

    @pytest.mark.asyncio
    async def test_current_snapshot_is_cached(self, fake_provider, clock):
        """Should call the provider once for repeated lookups."""
        cache = ExchangeRateCache(fake_provider, ttl_seconds=60, clock=clock)

        first = await cache.get_snapshot("MAD")
        second = await cache.get_snapshot("MAD")

        assert first is second
        assert fake_provider.calls == [("MAD", None)]
        assert first.source == "fake"
        assert first.is_historical is False
        assert first.timestamp == 1000.0

    @pytest.mark.asyncio
    async def test_current_snapshot_expires(self, fake_provider, clock):
        """Should refetch once the TTL has elapsed."""
        cache = ExchangeRateCache(fake_provider, ttl_seconds=60, clock=clock)
        await cache.get_snapshot("MAD")

        clock.now = 1059.0
        await cache.get_snapshot("MAD")
        assert len(fake_provider.calls) == 1

        clock.now = 1060.0
        assert cache.get("MAD") is None
        await cache.get_snapshot("MAD")
        assert len(fake_provider.calls) == 2

    @pytest.mark.asyncio
    async def test_historical_snapshot_never_expires(self, fake_provider, clock):
        """Should keep dated snapshots for the lifetime of the cache."""
        cache = ExchangeRateCache(fake_provider, ttl_seconds=60, clock=clock)
        snapshot = await cache.get_snapshot("MAD", "2024-03-15")

        clock.now += 10 * 24 * 3600
        assert await cache.get_snapshot("MAD", "2024-03-15") is snapshot
        assert fake_provider.calls == [("MAD", "2024-03-15")]
        assert snapshot.is_historical is True
        assert snapshot.date == "2024-03-15"

    @pytest.mark.asyncio
    async def test_current_and_historical_are_separate(self, fake_provider, clock):
        cache = ExchangeRateCache(fake_provider, ttl_seconds=60, clock=clock)
        await cache.get_snapshot("MAD")
        await cache.get_snapshot("MAD", "2024-03-15")

        assert len(cache) == 2
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_get_rates_returns_copy(self, fake_provider, clock):
        """Should not let callers mutate the cached table."""
        cache = ExchangeRateCache(fake_provider, ttl_seconds=60, clock=clock)
        rates = await cache.get_rates("MAD")
        rates["USD"] = 99.0

        assert (await cache.get_rates("MAD"))["USD"] == pytest.approx(0.1003)

    @pytest.mark.asyncio
    async def test_unsupported_base(self, fake_provider):
        """Should reject a base outside the catalog without fetching."""
        cache = ExchangeRateCache(fake_provider, ttl_seconds=60)
        with pytest.raises(UnsupportedCurrencyError):
            await cache.get_snapshot("XYZ")
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure(self):
        """Should wrap provider errors in ExchangeRateError."""
        cache = ExchangeRateCache(FakeRateProvider(error=ConnectionError("offline")), ttl_seconds=60)

        with pytest.raises(ExchangeRateError) as exc_info:
            await cache.get_snapshot("MAD", "2024-03-15")

        assert exc_info.value.details["provider"] == "fake"
        assert exc_info.value.details["reason"] == "offline"
        assert exc_info.value.details["date"] == "2024-03-15"
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_empty_table(self):
        cache = ExchangeRateCache(FakeRateProvider(rates={}), ttl_seconds=60)
        with pytest.raises(ExchangeRateError):
            await cache.get_snapshot("MAD")

    def test_ttl_from_configuration(self, fake_provider):
        """Should default to the configured six hours."""
        assert ExchangeRateCache(fake_provider).ttl_seconds == pytest.approx(6 * 3600)

    def test_instances_are_isolated(self, fake_provider):
        first = ExchangeRateCache(fake_provider, ttl_seconds=60)
        first.put(default_snapshot("MAD"))
        assert len(ExchangeRateCache(fake_provider, ttl_seconds=60)) == 0


class TestDefaultSnapshot:

    def test_static_table(self):
        snapshot = default_snapshot("MAD", "2024-03-15")
        assert snapshot.source == "default"
        assert snapshot.rates == DEFAULT_EXCHANGE_RATES
        assert snapshot.is_historical is True
        assert snapshot.key == ("MAD", "2024-03-15")
