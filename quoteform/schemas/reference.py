"""
Pydantic schemas for reference data: tradeable assets and countries.
"""

from pydantic import BaseModel


class Asset(BaseModel):
    """A fiat currency or cryptocurrency offered in a select list."""
    id: int
    name: str

    model_config = {"frozen": True}


class Country(BaseModel):
    """A billing country as returned by the country directory."""
    id: str
    name: str

    model_config = {"frozen": True}
