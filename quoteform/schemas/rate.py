"""
Pydantic schemas for rate feed entries.
"""

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field


class RateEntry(BaseModel):
    """One asset's USD rate as delivered by the rate feed."""
    symbol: str = Field(..., min_length=1, examples=["BTC"])
    rate_usd: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("rateInUSD", "rateUsd", "rate_usd"),
        description="Value of one unit of the asset in USD",
    )
