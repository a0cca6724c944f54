"""
Country directory: the selectable billing countries.

Architecture:
  - CountryDirectory (protocol) defines the interface
  - MockCountryDirectory returns a fixed list for development
  - RestCountriesDirectory calls the public REST Countries API
  - COUNTRY_DIRECTORY_MOCK=true (default) selects the mock directory

Country names are opaque strings; the availability rules compare
them by equality.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from quoteform.config import settings
from quoteform.schemas.reference import Country

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Directory protocol
# ---------------------------------------------------------------------------


class CountryDirectory(Protocol):
    async def list_countries(self) -> list[Country]: ...


# ---------------------------------------------------------------------------
# Mock directory (development / testing)
# ---------------------------------------------------------------------------

_MOCK_COUNTRIES: list[tuple[str, str]] = [
    ("036", "Australia"),
    ("076", "Brazil"),
    ("124", "Canada"),
    ("250", "France"),
    ("276", "Germany"),
    ("380", "Italy"),
    ("528", "Netherlands"),
    ("724", "Spain"),
    ("826", "United Kingdom"),
    ("840", "United States"),
]


class MockCountryDirectory:
    """Returns a short deterministic country list."""

    async def list_countries(self) -> list[Country]:
        return [Country(id=code, name=name) for code, name in _MOCK_COUNTRIES]


# ---------------------------------------------------------------------------
# REST Countries directory
# ---------------------------------------------------------------------------


class RestCountriesDirectory:
    """Fetches country names from restcountries.com, sorted by name."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def list_countries(self) -> list[Country]:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(self._url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Country directory request failed: %s", exc.response.status_code)
            return []
        except httpx.RequestError as exc:
            logger.error("Country directory request error: %s", exc)
            return []
        except ValueError:
            logger.error("Country directory returned an unparseable body")
            return []

        if not isinstance(data, list):
            return []

        countries: list[Country] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            if isinstance(name, dict):
                name = name.get("common")
            if not isinstance(name, str) or not name:
                continue
            code = entry.get("ccn3") or name
            countries.append(Country(id=str(code), name=name))

        countries.sort(key=lambda c: c.name)
        return countries


# ---------------------------------------------------------------------------
# Factory: selects directory based on config
# ---------------------------------------------------------------------------

_directory: CountryDirectory | None = None


def get_country_directory() -> CountryDirectory:
    """Return the configured country directory (cached after first call)."""
    global _directory
    if _directory is not None:
        return _directory

    if settings.COUNTRY_DIRECTORY_MOCK:
        logger.info("Using MockCountryDirectory for billing countries")
        _directory = MockCountryDirectory()
    else:
        logger.info("Using RestCountriesDirectory (live API)")
        _directory = RestCountriesDirectory(
            url=settings.COUNTRY_DIRECTORY_URL,
            timeout=settings.COUNTRY_DIRECTORY_TIMEOUT_SECONDS,
        )
    return _directory


def set_country_directory(directory: CountryDirectory | None) -> None:
    """Override the country directory (used in tests)."""
    global _directory
    _directory = directory
