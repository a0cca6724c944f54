"""
Shared test fixtures for the purchase form core.

Provides rate tables, fake rate feeds / country directories,
a recording navigation sink and a valid sample field set.
"""

from decimal import Decimal

import pytest

from quoteform.form.controller import FormController
from quoteform.schemas.reference import Country
from quoteform.services.availability_service import AvailabilityResolver
from quoteform.services.rate_service import RateTable


# --- Fakes ---


class FakeRateFeed:
    """Returns the given entries and counts calls."""

    def __init__(self, entries=None):
        self.entries = entries if entries is not None else []
        self.calls = 0

    async def fetch_rates(self):
        self.calls += 1
        return self.entries


class FailingRateFeed:
    """Raises like a rate feed whose endpoint is down."""

    async def fetch_rates(self):
        raise RuntimeError("rate feed unavailable")


class FakeCountryDirectory:
    def __init__(self, names=("Canada", "France")):
        self.names = names

    async def list_countries(self):
        return [Country(id=str(i), name=name) for i, name in enumerate(self.names)]


class FailingCountryDirectory:
    async def list_countries(self):
        raise RuntimeError("country directory unavailable")


class RecordingNavigationSink:
    """Remembers every URL it was asked to open."""

    def __init__(self):
        self.urls: list[str] = []

    async def navigate(self, url: str) -> None:
        self.urls.append(url)


# --- Rate fixtures ---


@pytest.fixture
def sample_rate_entries():
    """Raw feed entries in CoinCap shape."""
    return [
        {"symbol": "EUR", "rateUsd": "1.1"},
        {"symbol": "BTC", "rateUsd": "50000"},
        {"symbol": "ETH", "rateUsd": "2500"},
    ]


@pytest.fixture
def loaded_rates(sample_rate_entries) -> RateTable:
    return RateTable.load(sample_rate_entries)


# --- Collaborator fixtures ---


@pytest.fixture
def resolver():
    """Resolver with the default Canada rule."""
    return AvailabilityResolver(rules={"Canada": ["BTC", "ETH"]}, default=["BTC"])


@pytest.fixture
def navigation_sink():
    return RecordingNavigationSink()


@pytest.fixture
def make_controller(resolver, navigation_sink, sample_rate_entries):
    """Factory fixture for controllers wired to fakes."""

    def _make(**overrides) -> FormController:
        kwargs = {
            "rate_feed": FakeRateFeed(sample_rate_entries),
            "country_directory": FakeCountryDirectory(),
            "navigation_sink": navigation_sink,
            "resolver": resolver,
            "redirect_base_url": "https://example.test/",
            "markup": Decimal("0.05"),
        }
        kwargs.update(overrides)
        return FormController(**kwargs)

    return _make


# --- Sample Data ---


@pytest.fixture
def valid_fields():
    """A field set that passes every validation rule."""
    return {
        "client_fullName": "Jane Doe",
        "client_email": "jane@x.com",
        "client_phoneNum": "+123456",
        "client_billAddress1": "1 Main St",
        "client_billCity": "Metropolis",
        "client_billZipcode": "00000",
        "client_billCountry": "France",
        "currency": "EUR",
        "cryptocurrency": "BTC",
        "fiat_amount": "100",
        "crypto_wallet": "abc123",
    }
