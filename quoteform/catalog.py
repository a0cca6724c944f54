"""
Reference lists shown in the purchase form's select fields.

Kept as plain data so deployments can swap them without touching
the quoting or availability logic.
"""

from quoteform.schemas.reference import Asset

FIAT_CURRENCIES: tuple[Asset, ...] = (
    Asset(id=4, name="EUR"),
)

# Offered to every billing country
BASE_CRYPTOS: tuple[Asset, ...] = (
    Asset(id=0, name="BTC"),
)

# Every crypto asset an availability rule may refer to, keyed by symbol
CRYPTO_ASSETS: dict[str, Asset] = {
    "BTC": Asset(id=0, name="BTC"),
    "ETH": Asset(id=1, name="ETH"),
}
