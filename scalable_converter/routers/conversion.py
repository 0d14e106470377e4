"""Conversion API router.

Accepts a Scalable Capital CSV export as multipart upload and returns the
TradingView or Wealthfolio import file together with per-row diagnostics.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from scalable_converter.rate_limiter import LOOKUP_RATE_LIMIT, limiter
from scalable_converter.schemas.conversion import (
    ConversionResponse,
    ConversionStats,
    FormatInfoResponse,
)
from scalable_converter.services.conversion_service import ConversionService
from scalable_converter.services.converter_registry import ConverterRegistry
from scalable_converter.services.openfigi_client import OpenFigiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["conversion"])


def get_conversion_service() -> ConversionService:
    """Dependency provider, overridden in tests."""
    return ConversionService()


@router.get("/formats", response_model=list[FormatInfoResponse])
async def list_formats() -> list[FormatInfoResponse]:
    """List the supported output formats and their columns."""
    return [
        FormatInfoResponse(**asdict(info)) for info in ConverterRegistry.get_supported_formats()
    ]


@router.post("/convert", response_model=ConversionResponse)
@limiter.limit(LOOKUP_RATE_LIMIT)
async def convert_export(
    request: Request,
    file: UploadFile = File(...),
    target_format: str = Form(...),
    mode: str = Form("detailed"),
    api_key: str | None = Form(None),
    validate_symbols: bool = Form(False),
    service: ConversionService = Depends(get_conversion_service),
) -> ConversionResponse:
    """Convert an uploaded Scalable Capital export.

    Args:
        file: Scalable Capital CSV export
        target_format: 'tradingview' or 'wealthfolio'
        mode: 'detailed' keeps every trade, 'aggregated' merges consecutive trades
        api_key: Optional OpenFIGI API key
        validate_symbols: Check resolved symbols against the target platform

    Returns:
        Import CSV, converted records, errors, skipped rows and stats
    """
    if not ConverterRegistry.is_supported(target_format):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported target format: {target_format}",
        )

    content = await file.read()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty file uploaded",
        )

    try:
        outcome = await run_in_threadpool(
            service.convert,
            content,
            target_format,
            mode,
            api_key=api_key,
            validate_symbols=validate_symbols,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OpenFigiError as e:
        logger.error(f"ISIN resolution failed for {file.filename}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    result = outcome.result
    return ConversionResponse(
        target_format=outcome.target_format.value,
        mode=outcome.mode.value,
        csv=outcome.csv,
        records=outcome.rows,
        errors=[asdict(error) for error in result.errors],
        skipped=[asdict(skipped) for skipped in result.skipped],
        parse_errors=outcome.parse_errors,
        stats=ConversionStats(**outcome.stats),
    )
