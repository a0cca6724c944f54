"""
Build the purchase redirect for a saved form: validates a JSON field set
and prints the URL the form would navigate to.

Usage:
    python scripts/build_redirect.py form.json
    python scripts/build_redirect.py form.json --query "affiliateId=AFF-1"

The JSON file maps field keys to values; crypto_amount is recomputed.
"""

import argparse
import asyncio
import json
import logging
import sys

from quoteform.config import settings
from quoteform.form.controller import FormController


class PrintNavigationSink:
    """Writes the redirect URL to stdout instead of opening it."""

    async def navigate(self, url: str) -> None:
        print(url)


async def main(path: str, query: str) -> int:
    with open(path, encoding="utf-8") as fh:
        values = json.load(fh)

    controller = FormController.from_query(query, navigation_sink=PrintNavigationSink())
    await controller.start()

    # Country first so the crypto selection is checked against its rules
    if "client_billCountry" in values:
        controller.set_field("client_billCountry", values.pop("client_billCountry"))
    for key, value in values.items():
        if key == "crypto_amount":
            continue
        controller.set_field(key, value)

    result = await controller.submit()
    if not result.is_valid:
        for key, message in result.errors.items():
            print(f"{key}: {message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Validate a form and print its redirect URL.")
    parser.add_argument("path")
    parser.add_argument("--query", default="")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL)
    sys.exit(asyncio.run(main(args.path, args.query)))
