"""
Pydantic schemas for the purchase form: the live field set and the
submission schema that gates the outbound redirect.
"""

import re

from pydantic import BaseModel, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from quoteform.catalog import FIAT_CURRENCIES
from quoteform.config import settings
from quoteform.parser import parse_amount


# ---------------------------------------------------------------------------
# Field vocabulary (order is the outbound query string order)
# ---------------------------------------------------------------------------

FIELD_KEYS: tuple[str, ...] = (
    "client_fullName",
    "client_email",
    "client_phoneNum",
    "client_idNum",
    "client_billAddress1",
    "client_billAddress2",
    "client_billCity",
    "client_billZipcode",
    "client_billState",
    "client_billCountry",
    "currency",
    "cryptocurrency",
    "fiat_amount",
    "crypto_amount",
    "client_affiliateId",
    "crypto_wallet",
)

# Placeholder the select widget shows before a country is picked
COUNTRY_PLACEHOLDER = "Country"

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
PHONE_PATTERN = re.compile(r"^\+?[0-9]+$")

# Required fields and the label used in their "is required" message
REQUIRED_LABELS: dict[str, str] = {
    "client_fullName": "Full Name",
    "client_email": "Email",
    "client_phoneNum": "Phone Number",
    "client_billAddress1": "Billing Address 1",
    "client_billCity": "Billing City",
    "client_billZipcode": "Billing Zipcode",
    "client_billCountry": "Billing Country",
    "cryptocurrency": "Cryptocurrency",
    "currency": "Currency",
    "fiat_amount": "Fiat amount",
    "crypto_wallet": "Crypto wallet",
}


def normalize_country(value: str | None) -> str | None:
    """Map the placeholder and blank input to ``None`` (no country chosen)."""
    if value is None:
        return None
    if not value.strip() or value == COUNTRY_PLACEHOLDER:
        return None
    return value


# ---------------------------------------------------------------------------
# Live field set
# ---------------------------------------------------------------------------


class FormFields(BaseModel):
    """Current value of every form field. Replaced, never mutated."""
    client_fullName: str = ""
    client_email: str = ""
    client_phoneNum: str = ""
    client_idNum: str = ""
    client_billAddress1: str = ""
    client_billAddress2: str = ""
    client_billCity: str = ""
    client_billZipcode: str = ""
    client_billState: str = ""
    client_billCountry: str | None = None
    currency: str = ""
    cryptocurrency: str = ""
    fiat_amount: str = ""
    crypto_amount: str = ""
    client_affiliateId: str = ""
    crypto_wallet: str = ""

    model_config = {"frozen": True}

    def items(self) -> list[tuple[str, str | None]]:
        """(key, value) pairs in field vocabulary order."""
        return [(key, getattr(self, key)) for key in FIELD_KEYS]


# ---------------------------------------------------------------------------
# Submission schema
# ---------------------------------------------------------------------------


class PurchaseRequest(BaseModel):
    """
    Validation schema for a purchase form submission.

    Each field is checked independently so a single pass reports
    every failing field with exactly one message.
    """
    client_fullName: str = ""
    client_email: str = ""
    client_phoneNum: str = ""
    client_idNum: str = ""
    client_billAddress1: str = ""
    client_billAddress2: str = ""
    client_billCity: str = ""
    client_billZipcode: str = ""
    client_billState: str = ""
    client_billCountry: str | None = None
    currency: str = ""
    cryptocurrency: str = ""
    fiat_amount: str = ""
    crypto_amount: str = ""
    client_affiliateId: str = ""
    crypto_wallet: str = ""

    # Missing keys must still fail their required rule
    model_config = {"validate_default": True}

    @field_validator(*REQUIRED_LABELS)
    @classmethod
    def validate_required(cls, v: str | None, info: ValidationInfo) -> str | None:
        if info.field_name == "client_billCountry":
            v = normalize_country(v)
        if v is None or not v.strip():
            raise PydanticCustomError(
                "required",
                "{label} is required",
                {"label": REQUIRED_LABELS[info.field_name]},
            )
        return v

    @field_validator("client_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.fullmatch(v):
            raise PydanticCustomError("email", "Invalid email format")
        return v

    @field_validator("client_phoneNum")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not PHONE_PATTERN.fullmatch(v):
            raise PydanticCustomError("phone", "Invalid phone number format")
        return v

    @field_validator("fiat_amount")
    @classmethod
    def validate_fiat_amount(cls, v: str, info: ValidationInfo) -> str:
        amount = parse_amount(v)
        if amount is None:
            raise PydanticCustomError("number", "Fiat amount must be a number")

        unit = info.data.get("currency") or FIAT_CURRENCIES[0].name
        if amount < settings.FIAT_AMOUNT_MIN:
            raise PydanticCustomError(
                "min",
                "Minimum fiat amount allowed is {limit} {unit}",
                {"limit": str(settings.FIAT_AMOUNT_MIN), "unit": unit},
            )
        if amount > settings.FIAT_AMOUNT_MAX:
            raise PydanticCustomError(
                "max",
                "Maximum fiat amount allowed is {limit} {unit}",
                {"limit": str(settings.FIAT_AMOUNT_MAX), "unit": unit},
            )
        return v
