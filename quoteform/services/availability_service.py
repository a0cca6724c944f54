"""
Crypto availability by billing country.

Country-specific rules live in configuration so new countries can be
enabled without code changes. Countries without a rule (and the
"no country chosen" state) get the default list.
"""

import logging
from typing import Mapping, Sequence

from quoteform.catalog import CRYPTO_ASSETS
from quoteform.config import settings
from quoteform.schemas.reference import Asset

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """Maps a billing country to the ordered list of purchasable assets."""

    def __init__(
        self,
        rules: Mapping[str, Sequence[str]],
        default: Sequence[str],
        assets: Mapping[str, Asset] = CRYPTO_ASSETS,
    ):
        self._assets = dict(assets)
        self._default = self._to_assets(default)
        self._rules = {
            country: self._to_assets(symbols) for country, symbols in rules.items()
        }

    def _to_assets(self, symbols: Sequence[str]) -> tuple[Asset, ...]:
        resolved = []
        for symbol in symbols:
            asset = self._assets.get(symbol)
            if asset is None:
                logger.warning("Availability rule names unknown asset %s", symbol)
                continue
            if asset not in resolved:
                resolved.append(asset)
        return tuple(resolved)

    def resolve(self, billing_country: str | None) -> tuple[Asset, ...]:
        """Return purchasable assets for *billing_country*, in rule order."""
        if billing_country is None:
            return self._default
        return self._rules.get(billing_country, self._default)

    def symbols(self, billing_country: str | None) -> list[str]:
        return [asset.name for asset in self.resolve(billing_country)]


_resolver: AvailabilityResolver | None = None


def get_availability_resolver() -> AvailabilityResolver:
    """Return the resolver built from settings (cached after first call)."""
    global _resolver
    if _resolver is None:
        _resolver = AvailabilityResolver(
            rules=settings.CRYPTO_AVAILABILITY,
            default=settings.DEFAULT_CRYPTOS,
        )
    return _resolver


def set_availability_resolver(resolver: AvailabilityResolver | None) -> None:
    """Override the availability resolver (for testing)."""
    global _resolver
    _resolver = resolver
