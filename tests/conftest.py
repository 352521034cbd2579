"""Shared fixtures for the pre-accounting test suite."""

from typing import Dict, List, Optional, Tuple

import pytest
import yaml

from config import ConfigurationManager
from preaccounting.currency import DEFAULT_EXCHANGE_RATES, RateProvider


@pytest.fixture(autouse=True)
def reset_configuration():
    """Give every test a fresh configuration singleton."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def custom_config(tmp_path):
    """Load a YAML configuration built from a dict."""

    def _load(settings: dict) -> ConfigurationManager:
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump(settings), encoding="utf-8")
        ConfigurationManager.reset()
        return ConfigurationManager(str(path))

    return _load


class FakeRateProvider(RateProvider):
    """Rate provider that records calls and can be told to fail."""

    def __init__(self, rates: Optional[Dict[str, float]] = None, error: Optional[Exception] = None):
        self.rates = dict(DEFAULT_EXCHANGE_RATES) if rates is None else rates
        self.error = error
        self.calls: List[Tuple[str, Optional[str]]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def fetch(self, base_currency, date=None):
        self.calls.append((base_currency, date))
        if self.error is not None:
            raise self.error
        return dict(self.rates)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_provider():
    return FakeRateProvider()


@pytest.fixture
def clock():
    return FakeClock()
