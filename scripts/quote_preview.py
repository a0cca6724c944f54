"""
Quote preview: prints the crypto amount a fiat amount buys right now.

Usage:
    python scripts/quote_preview.py 100 --currency EUR --crypto BTC

Uses the configured rate feed (mock unless RATE_FEED_MOCK=false).
"""

import argparse
import asyncio
import json
import logging

from quoteform.config import settings
from quoteform.services.quote_service import MARKUP, build_quote
from quoteform.services.rate_service import RateTable, get_rate_feed


async def main(amount: str, currency: str, crypto: str):
    """Fetch rates once and print the quote breakdown."""
    rates = RateTable.load(await get_rate_feed().fetch_rates())
    quote = build_quote(amount, currency, crypto, rates)

    print("\n=== Quote ===")
    print(json.dumps({
        "fiat_amount": amount,
        "currency": currency,
        "cryptocurrency": crypto,
        "fiat_rate_usd": str(rates.lookup(currency)),
        "crypto_rate_usd": str(rates.lookup(crypto)),
        "markup": str(MARKUP),
        "fiat_amount_usd": str(quote.fiat_amount_usd),
        "crypto_amount_usd": str(quote.crypto_amount_usd),
    }, indent=2))
    print(f"\nYou receive: {quote.display_amount} {crypto}")
    if currency not in rates or crypto not in rates:
        print("Warning: a rate was missing, fallback rate 1 was used.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("amount")
    parser.add_argument("--currency", default="EUR")
    parser.add_argument("--crypto", default="BTC")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(main(args.amount, args.currency, args.crypto))
