"""ISIN resolution and symbol validation API router."""

import logging
from collections.abc import Callable, Iterator

from fastapi import APIRouter, Depends, HTTPException, Request, status

from scalable_converter.config import settings
from scalable_converter.rate_limiter import LOOKUP_RATE_LIMIT, limiter
from scalable_converter.schemas.symbols import (
    ResolvedSymbolResponse,
    ResolveIsinRequest,
    ResolveIsinResponse,
    TradingViewBatchRequest,
    TradingViewBatchResponse,
    TradingViewValidationRequest,
    TradingViewValidationResponse,
    YahooBatchRequest,
    YahooBatchResponse,
    YahooValidationRequest,
    YahooValidationResponse,
)
from scalable_converter.services.openfigi_client import OpenFigiClient, OpenFigiError
from scalable_converter.services.symbol_validation import (
    TradingViewSymbolValidator,
    ValidationResult,
    YahooSymbolValidator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["symbols"])

ResolverFactory = Callable[[str | None], OpenFigiClient]


def get_resolver_factory() -> ResolverFactory:
    """Dependency provider for OpenFIGI clients (one per API key)."""
    return OpenFigiClient


def get_yahoo_validator() -> Iterator[YahooSymbolValidator]:
    with YahooSymbolValidator() as validator:
        yield validator


def get_tradingview_validator() -> Iterator[TradingViewSymbolValidator]:
    with TradingViewSymbolValidator() as validator:
        yield validator


def _check_batch_size(count: int) -> None:
    if count > settings.max_symbols_per_batch:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {settings.max_symbols_per_batch} symbols per batch",
        )


def _yahoo_response(result: ValidationResult) -> YahooValidationResponse:
    return YahooValidationResponse(
        ticker=result.ticker, valid_symbol=result.valid_symbol, tested_suffixes=result.tested
    )


def _tradingview_response(result: ValidationResult) -> TradingViewValidationResponse:
    return TradingViewValidationResponse(
        ticker=result.ticker, valid_symbol=result.valid_symbol, tested_exchanges=result.tested
    )


@router.post("/resolve-isin", response_model=ResolveIsinResponse)
@limiter.limit(LOOKUP_RATE_LIMIT)
def resolve_isins(
    request: Request,
    data: ResolveIsinRequest,
    resolver_factory: ResolverFactory = Depends(get_resolver_factory),
) -> ResolveIsinResponse:
    """Resolve ISINs to German exchange tickers via OpenFIGI."""
    if not data.isins:
        return ResolveIsinResponse(results={})

    if len(data.isins) > settings.max_isins_per_request:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Too many ISINs. Maximum {settings.max_isins_per_request} "
                "allowed per request."
            ),
        )

    try:
        with resolver_factory(data.api_key) as resolver:
            symbol_map = resolver.resolve_isins(data.isins)
    except OpenFigiError as e:
        logger.error(f"Error resolving ISINs: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return ResolveIsinResponse(
        results={
            isin: ResolvedSymbolResponse(**resolved.to_dict()) if resolved else None
            for isin, resolved in symbol_map.items()
        }
    )


@router.post("/validate-yahoo", response_model=YahooValidationResponse)
@limiter.limit(LOOKUP_RATE_LIMIT)
def validate_yahoo(
    request: Request,
    data: YahooValidationRequest,
    validator: YahooSymbolValidator = Depends(get_yahoo_validator),
) -> YahooValidationResponse:
    """Find the Yahoo Finance suffix under which a ticker is quoted."""
    return _yahoo_response(validator.validate(data.ticker, data.preferred_suffix))


@router.put("/validate-yahoo", response_model=YahooBatchResponse)
@limiter.limit(LOOKUP_RATE_LIMIT)
def validate_yahoo_batch(
    request: Request,
    data: YahooBatchRequest,
    validator: YahooSymbolValidator = Depends(get_yahoo_validator),
) -> YahooBatchResponse:
    """Validate up to max_symbols_per_batch tickers sequentially."""
    _check_batch_size(len(data.symbols))
    results = validator.validate_batch([item.model_dump() for item in data.symbols])
    return YahooBatchResponse(results=[_yahoo_response(result) for result in results])


@router.post("/validate-tradingview", response_model=TradingViewValidationResponse)
@limiter.limit(LOOKUP_RATE_LIMIT)
def validate_tradingview(
    request: Request,
    data: TradingViewValidationRequest,
    validator: TradingViewSymbolValidator = Depends(get_tradingview_validator),
) -> TradingViewValidationResponse:
    """Find the TradingView exchange on which a ticker is listed."""
    return _tradingview_response(validator.validate(data.ticker, data.preferred_exchange))


@router.put("/validate-tradingview", response_model=TradingViewBatchResponse)
@limiter.limit(LOOKUP_RATE_LIMIT)
def validate_tradingview_batch(
    request: Request,
    data: TradingViewBatchRequest,
    validator: TradingViewSymbolValidator = Depends(get_tradingview_validator),
) -> TradingViewBatchResponse:
    """Validate up to max_symbols_per_batch tickers sequentially."""
    _check_batch_size(len(data.symbols))
    results = validator.validate_batch([item.model_dump() for item in data.symbols])
    return TradingViewBatchResponse(results=[_tradingview_response(result) for result in results])
