"""
Rate table and rate feed providers.

The rate table is an immutable snapshot of asset -> USD rates built once
from the rate feed. Lookups of unknown symbols (or any lookup before the
feed has answered) fall back to a neutral rate of 1 so quoting never stalls.

Uses the CoinCap rates endpoint or mock data for development/testing.
"""

import logging
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Protocol

import httpx
from pydantic import ValidationError

from quoteform.config import settings
from quoteform.schemas.rate import RateEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FALLBACK_RATE = Decimal("1")

# Mock rates (deterministic for testing)
MOCK_RATES = [
    {"symbol": "EUR", "rateUsd": "1.1"},
    {"symbol": "BTC", "rateUsd": "50000"},
    {"symbol": "ETH", "rateUsd": "2500"},
]


# ---------------------------------------------------------------------------
# RateTable
# ---------------------------------------------------------------------------


class RateTable:
    """Immutable symbol -> USD rate snapshot."""

    __slots__ = ("_rates", "_loaded")

    def __init__(self, rates: Mapping[str, Decimal] | None = None, loaded: bool = False):
        self._rates = MappingProxyType(dict(rates or {}))
        self._loaded = loaded

    @classmethod
    def empty(cls) -> "RateTable":
        """The unloaded table: every lookup returns the fallback rate."""
        return cls()

    @classmethod
    def load(cls, raw_entries: Iterable[Any] | None) -> "RateTable":
        """
        Build a new table from raw feed entries.

        Entries that are not mappings, have no symbol, or carry a
        non-finite / non-positive rate are discarded. The first entry
        for a symbol wins.
        """
        rates: dict[str, Decimal] = {}
        for raw in raw_entries or []:
            try:
                entry = RateEntry.model_validate(raw)
            except ValidationError:
                logger.debug("Discarding rate entry: %r", raw)
                continue
            rates.setdefault(entry.symbol, entry.rate_usd)

        logger.info("Rate table loaded with %d symbols", len(rates))
        return cls(rates, loaded=True)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def lookup(self, symbol: str | None) -> Decimal:
        """Return the USD rate for *symbol*, or the fallback rate of 1."""
        if symbol is None:
            return FALLBACK_RATE
        return self._rates.get(symbol, FALLBACK_RATE)

    def symbols(self) -> list[str]:
        return list(self._rates)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._rates

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"RateTable(loaded={self._loaded}, symbols={len(self._rates)})"


# ---------------------------------------------------------------------------
# Rate feed protocol
# ---------------------------------------------------------------------------


class RateFeed(Protocol):
    async def fetch_rates(self) -> list[dict]:
        """Fetch raw ``{symbol, rateUsd}`` entries."""
        ...


class MockRateFeed:
    """Deterministic rates for dev/testing."""

    async def fetch_rates(self) -> list[dict]:
        return [dict(entry) for entry in MOCK_RATES]


class CoinCapRateFeed:
    """Fetch live USD rates from the CoinCap ``/rates`` endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def fetch_rates(self) -> list[dict]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(self._url, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Rate feed request failed: %s", exc.response.status_code)
            return []
        except httpx.RequestError as exc:
            logger.error("Rate feed request error: %s", exc)
            return []
        except ValueError:
            logger.error("Rate feed returned an unparseable body")
            return []

        entries = data.get("data") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Rate feed response has no data list")
            return []
        return entries


# Module-level provider override (for tests)
_feed: RateFeed | None = None


def get_rate_feed() -> RateFeed:
    """Return the configured rate feed."""
    if _feed is not None:
        return _feed
    if settings.RATE_FEED_MOCK:
        logger.info("Using MockRateFeed for exchange rates")
        return MockRateFeed()
    logger.info("Using CoinCapRateFeed (live API)")
    return CoinCapRateFeed(
        url=settings.RATE_FEED_URL,
        api_key=settings.RATE_FEED_API_KEY,
        timeout=settings.RATE_FEED_TIMEOUT_SECONDS,
    )


def set_rate_feed(feed: RateFeed | None) -> None:
    """Override the rate feed (for testing)."""
    global _feed
    _feed = feed
