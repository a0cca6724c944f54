"""
Amount parser for values typed into the fiat amount field.

The field is a numeric input, so accepted forms are the ones a number
input produces:

  - "100"      -> 100
  - "100.50"   -> 100.50
  - " 75 "     -> 75
  - "1e2"      -> 100
  - "-5"       -> -5  (numeric, rejected later by the range check)

Anything else ("", "abc", "NaN", "Infinity") is not a number.
"""

import re
from decimal import Decimal, InvalidOperation

# Plain decimal literal with optional sign and exponent
AMOUNT_PATTERN = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def parse_amount(value) -> Decimal | None:
    """
    Parse a fiat amount into a Decimal.

    Accepts strings, ints and Decimals. Returns None if the input is
    empty, non-numeric or non-finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = repr(value)

    cleaned = str(value).strip()
    if not AMOUNT_PATTERN.match(cleaned):
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None
