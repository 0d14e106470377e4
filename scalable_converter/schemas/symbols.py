"""Pydantic schemas for ISIN resolution and symbol validation endpoints.

Request and response bodies use the camelCase keys of the browser client
(``apiKey``, ``preferredSuffix``, ``validSymbol``); snake_case is accepted
on input as well.
"""

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base model accepting both field names and camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class ResolveIsinRequest(CamelModel):
    isins: list[str]
    api_key: str | None = Field(None, alias="apiKey")


class ResolvedSymbolResponse(CamelModel):
    ticker: str
    exchange: str
    exch_code: str = Field(..., alias="exchCode")
    full_symbol: str = Field(..., alias="fullSymbol")
    yahoo_symbol: str | None = Field(None, alias="yahooSymbol")
    tradingview_symbol: str | None = Field(None, alias="tradingViewSymbol")
    security_type: str | None = Field(None, alias="securityType")
    security_type2: str | None = Field(None, alias="securityType2")
    market_sector: str | None = Field(None, alias="marketSector")


class ResolveIsinResponse(CamelModel):
    results: dict[str, ResolvedSymbolResponse | None]


class YahooValidationRequest(CamelModel):
    ticker: str = Field(..., min_length=1)
    preferred_suffix: str | None = Field(None, alias="preferredSuffix")


class TradingViewValidationRequest(CamelModel):
    ticker: str = Field(..., min_length=1)
    preferred_exchange: str | None = Field(None, alias="preferredExchange")


class YahooBatchRequest(CamelModel):
    symbols: list[YahooValidationRequest]


class TradingViewBatchRequest(CamelModel):
    symbols: list[TradingViewValidationRequest]


class YahooValidationResponse(CamelModel):
    ticker: str
    valid_symbol: str | None = Field(None, alias="validSymbol")
    tested_suffixes: list[str] = Field(default_factory=list, alias="testedSuffixes")


class TradingViewValidationResponse(CamelModel):
    ticker: str
    valid_symbol: str | None = Field(None, alias="validSymbol")
    tested_exchanges: list[str] = Field(default_factory=list, alias="testedExchanges")


class YahooBatchResponse(CamelModel):
    results: list[YahooValidationResponse]


class TradingViewBatchResponse(CamelModel):
    results: list[TradingViewValidationResponse]
