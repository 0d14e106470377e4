"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from scalable_converter.main import app
from scalable_converter.rate_limiter import limiter
from scalable_converter.services.csv_parser import RawTransaction
from scalable_converter.services.symbol_resolver import ResolvedSymbol

COPPER_ISIN = "DE000A0KRJS4"
APPLE_ISIN = "US0378331005"
UNKNOWN_ISIN = "XS0000000000"


def make_transaction(**overrides: str) -> RawTransaction:
    """Build an executed EUR row, overriding any column."""
    values = {
        "date": "2024-01-15",
        "time": "10:30:00",
        "status": "Executed",
        "reference": "REF-1",
        "description": "Test row",
        "asset_type": "Security",
        "type": "Buy",
        "isin": "",
        "shares": "",
        "price": "",
        "amount": "",
        "fee": "",
        "tax": "",
        "currency": "EUR",
    }
    values.update(overrides)
    return RawTransaction(**values)


@pytest.fixture
def copper_symbol() -> ResolvedSymbol:
    """WisdomTree Copper resolved on XETRA."""
    return ResolvedSymbol(
        ticker="4COP",
        exchange="XETR",
        exchange_code="GR",
        full_symbol="XETR:4COP",
    )


@pytest.fixture
def apple_symbol() -> ResolvedSymbol:
    """Apple as traded in Germany."""
    return ResolvedSymbol(
        ticker="APC",
        exchange="XETR",
        exchange_code="GR",
        full_symbol="XETR:APC",
    )


@pytest.fixture
def symbol_map(copper_symbol, apple_symbol) -> dict:
    """Resolver output for the sample export (one ISIN unresolved)."""
    return {
        COPPER_ISIN: copper_symbol,
        APPLE_ISIN: apple_symbol,
        UNKNOWN_ISIN: None,
    }


@pytest.fixture
def sample_csv_content() -> bytes:
    """Load the sample Scalable Capital export."""
    fixture_path = Path(__file__).parent / "fixtures" / "scalable_export_sample.csv"
    return fixture_path.read_bytes()


@pytest.fixture
def api_client():
    """Test client with a fresh rate limiter and no dependency overrides left behind."""
    limiter.reset()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
