"""
API Schemas

Pydantic models used to expose ticker state over HTTP and WebSocket.

Models:
    - CurrencyInfo: One catalog currency
    - CurrencyPairs: One base currency and the quotes traded against it
    - ExchangeInfo: One supported exchange site
    - PriceEvent / MatrixEvent: Messages published on the event bus
    - TickerSnapshot: Current exchange, selection, matrix and price
    - CurrencySelection: Request body for changing base/quote
    - IntervalSelection: Request body for changing the polling interval
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix, sort_base_currencies


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CurrencyInfo(BaseModel):
    code: str = Field(..., examples=["BTC"])
    display_name: str = Field(..., examples=["Bitcoin"])

    @classmethod
    def from_currency(cls, currency: Currency) -> "CurrencyInfo":
        return cls(code=currency.code, display_name=currency.display_name)


class CurrencyPairs(BaseModel):
    base: CurrencyInfo
    quotes: List[CurrencyInfo]


def matrix_to_pairs(matrix: Optional[CurrencyMatrix]) -> List[CurrencyPairs]:
    """Serialize a matrix in base-selection order, quotes in matrix order."""
    if not matrix:
        return []
    return [
        CurrencyPairs(
            base=CurrencyInfo.from_currency(base),
            quotes=[CurrencyInfo.from_currency(q) for q in matrix[base]]
        )
        for base in sort_base_currencies(matrix.keys())
    ]


class ExchangeInfo(BaseModel):
    site: str = Field(..., description="Lowercase site identifier", examples=["kraken"])
    index: int = Field(..., description="Stable numeric identifier", examples=[250])
    display_name: str = Field(..., examples=["Kraken"])


class PriceEvent(BaseModel):
    """
    Price notification.

    price is None while no price is available yet or after a failed fetch;
    it never stands for zero.
    """

    type: Literal["price"] = "price"
    exchange: str
    base: Optional[str] = None
    quote: Optional[str] = None
    price: Optional[float] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class MatrixEvent(BaseModel):
    type: Literal["matrix"] = "matrix"
    exchange: str
    base: str
    quote: str
    pairs: List[CurrencyPairs]
    timestamp: datetime = Field(default_factory=_utcnow)


class TickerSnapshot(BaseModel):
    exchange: Optional[ExchangeInfo] = None
    state: str = "idle"
    base: Optional[CurrencyInfo] = None
    quote: Optional[CurrencyInfo] = None
    price: Optional[float] = None
    updated_at: Optional[datetime] = None
    pairs: List[CurrencyPairs] = Field(default_factory=list)
    update_interval: int


class CurrencySelection(BaseModel):
    base: str = Field(..., min_length=1, examples=["BTC"])
    quote: Optional[str] = Field(default=None, examples=["USD"])

    @field_validator("base", "quote")
    @classmethod
    def validate_code(cls, v: Optional[str]) -> Optional[str]:
        """Codes are matched uppercase"""
        return v.strip().upper() if v else v


class IntervalSelection(BaseModel):
    # Range is validated by the preference store
    update_interval: int = Field(..., description="Seconds between two price fetches", examples=[30])
