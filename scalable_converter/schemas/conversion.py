"""Pydantic schemas for the conversion endpoint."""

from pydantic import BaseModel, Field


class ConversionErrorResponse(BaseModel):
    """A row that could not be converted."""

    row: int = Field(..., description="1-based CSV line number (header is line 1)")
    isin: str = Field("", description="ISIN of the row, empty when missing")
    description: str
    error: str


class SkippedTransactionResponse(BaseModel):
    """A row intentionally left out of the output."""

    row: int
    type: str
    description: str
    reason: str


class ConversionStats(BaseModel):
    """Counters of one conversion run."""

    records: int
    errors: int
    skipped: int
    parse_errors: int = 0
    isins: int = 0


class ConversionResponse(BaseModel):
    """Response for the conversion endpoint."""

    target_format: str = Field(..., description="tradingview or wealthfolio")
    mode: str = Field(..., description="detailed or aggregated")
    csv: str = Field(..., description="Import file content, empty when nothing converted")
    records: list[dict[str, str]] = Field(default_factory=list)
    errors: list[ConversionErrorResponse] = Field(default_factory=list)
    skipped: list[SkippedTransactionResponse] = Field(default_factory=list)
    parse_errors: list[str] = Field(default_factory=list)
    stats: ConversionStats


class FormatInfoResponse(BaseModel):
    """A supported output format."""

    type: str
    name: str
    columns: list[str]
