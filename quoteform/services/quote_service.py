"""
Quote calculator: converts a fiat amount into the crypto amount offered.

The crypto rate is marked up by a fixed percentage (the service margin)
before conversion. Inputs that cannot be quoted (empty, zero, non-numeric
or too large to express at 7 places) produce a zero quote instead of an
error.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, DecimalException, localcontext

from quoteform.config import settings
from quoteform.parser import parse_amount
from quoteform.services.rate_service import RateTable

logger = logging.getLogger(__name__)

# Service margin added to the crypto rate
MARKUP = settings.QUOTE_MARKUP

# Crypto amounts are quoted to 7 decimal places
CRYPTO_PRECISION = Decimal("0.0000001")

# Significant digits carried through a conversion
QUOTE_DIGITS = 100

ZERO = Decimal("0")


@dataclass(frozen=True)
class Quote:
    """Derived quote for the current amount/currency/crypto selection."""
    fiat_amount_usd: Decimal
    crypto_amount_usd: Decimal
    crypto_amount: Decimal

    @property
    def display_amount(self) -> str:
        """Fixed 7-place text shown in the form and submitted as-is."""
        return format_crypto_amount(self.crypto_amount)


ZERO_QUOTE = Quote(
    fiat_amount_usd=ZERO,
    crypto_amount_usd=ZERO,
    crypto_amount=ZERO.quantize(CRYPTO_PRECISION),
)


def format_crypto_amount(amount: Decimal) -> str:
    """Render a crypto amount with exactly 7 decimal places."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 9)
        return format(amount.quantize(CRYPTO_PRECISION, rounding=ROUND_HALF_UP), "f")


def _convert(
    amount: Decimal,
    fiat_rate: Decimal,
    crypto_rate: Decimal,
    markup: Decimal,
) -> tuple[Decimal, Decimal]:
    """(fiat_usd, crypto_amount) for a positive amount; crypto is 0 if not quotable."""
    with localcontext() as ctx:
        ctx.prec = QUOTE_DIGITS
        # Truncate intermediates so the final half-up rounding is the only one
        ctx.rounding = ROUND_DOWN
        try:
            fiat_usd = amount * Decimal(fiat_rate)
            effective_rate = Decimal(crypto_rate) * (1 + Decimal(markup))
            if effective_rate <= 0:
                return fiat_usd, ZERO_QUOTE.crypto_amount
            crypto = (fiat_usd / effective_rate).quantize(CRYPTO_PRECISION, rounding=ROUND_HALF_UP)
        except DecimalException:
            logger.debug("Amount %s cannot be quoted at 7 places", amount)
            return ZERO, ZERO_QUOTE.crypto_amount
    return fiat_usd, crypto


def compute_crypto_amount(
    fiat_amount,
    fiat_rate: Decimal,
    crypto_rate: Decimal,
    markup: Decimal = MARKUP,
) -> Decimal:
    """
    Convert *fiat_amount* into crypto units.

    fiat_usd = fiat_amount * fiat_rate
    effective_rate = crypto_rate * (1 + markup)
    crypto_amount = round(fiat_usd / effective_rate, 7)

    Empty, zero, negative or non-numeric amounts give 0, as do results
    too large to hold at 7 decimal places.
    """
    amount = parse_amount(fiat_amount)
    if amount is None or amount <= 0:
        return ZERO_QUOTE.crypto_amount
    return _convert(amount, fiat_rate, crypto_rate, markup)[1]


def build_quote(
    fiat_amount,
    currency: str,
    cryptocurrency: str,
    rates: RateTable,
    markup: Decimal = MARKUP,
) -> Quote:
    """
    Quote the current selection using rates from *rates* (fallback 1).

    ``crypto_amount_usd`` is the markup-adjusted conversion
    ``fiat_usd / effective_rate`` at 7 places, the same value as
    ``crypto_amount``.
    """
    amount = parse_amount(fiat_amount)
    if amount is None or amount <= 0:
        return ZERO_QUOTE

    fiat_usd, crypto_amount = _convert(
        amount, rates.lookup(currency), rates.lookup(cryptocurrency), markup
    )
    return Quote(
        fiat_amount_usd=fiat_usd,
        crypto_amount_usd=crypto_amount,
        crypto_amount=crypto_amount,
    )
