"""Models for the Financial Modeling Prep quote endpoint."""
from pydantic import BaseModel


class FmpQuoteParams(BaseModel):
    """Query params for /quote/{symbols}."""

    apikey: str
