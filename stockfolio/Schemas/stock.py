import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# tickers travel as a single URL path segment, e.g. BRK.B, ^GSPC, EURUSD=X
TICKER_PATTERN = re.compile(r"^[A-Z0-9.\-^=]+$")


def normalize_ticker(value: str) -> str:
    symbol = value.upper().strip()
    if not symbol:
        raise ValueError("ticker symbol must not be blank")
    if not TICKER_PATTERN.match(symbol):
        raise ValueError("ticker symbol may only contain letters, digits and . - ^ =")
    return symbol


class StockCreate(BaseModel):
    # username, id and unknown keys are dropped; the owner always comes from the token
    model_config = ConfigDict(extra="ignore")

    ticker_symbol: str = Field(..., max_length=20, examples=["AAPL"])
    display_name: str = Field(..., max_length=200, examples=["Apple Inc."])
    chart_id: str = Field("", max_length=64)
    is_interesting: bool = False
    bookmark_color: str = Field("", max_length=40, examples=["text-green-500"])
    # normalized by the service, anything unparseable is replaced
    created_at: Optional[Any] = None

    @field_validator("ticker_symbol")
    @classmethod
    def _ticker(cls, value: str) -> str:
        return normalize_ticker(value)

    @field_validator("display_name")
    @classmethod
    def _display_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("display name must not be blank")
        return value.strip()


class StockUpdate(BaseModel):
    """Fields a client may merge into an existing stock."""

    model_config = ConfigDict(extra="ignore")

    display_name: Optional[str] = Field(None, max_length=200)
    chart_id: Optional[str] = Field(None, max_length=64)
    is_interesting: Optional[bool] = None
    bookmark_color: Optional[str] = Field(None, max_length=40)

    @field_validator("display_name")
    @classmethod
    def _display_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("display name must not be blank")
        return value.strip() if value is not None else None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)
