"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # OpenFIGI (ISIN -> ticker resolution)
    openfigi_api_key: str = ""
    openfigi_url: str = "https://api.openfigi.com/v3/mapping"
    openfigi_delay_with_key: float = 0.15  # seconds between ISINs
    openfigi_delay_without_key: float = 1.2
    openfigi_rate_limit_wait: float = 2.0  # seconds to wait after HTTP 429

    # Symbol validation endpoints
    yahoo_chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    tradingview_search_url: str = "https://symbol-search.tradingview.com/symbol_search/"
    validation_delay: float = 0.1

    # Request limits
    max_isins_per_request: int = 100
    max_symbols_per_batch: int = 50
    http_timeout: float = 30.0

    # Conversion defaults
    default_currency: str = "EUR"

    # Application
    log_level: str = "INFO"
    debug: bool = True

    # CORS
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


settings = Settings()
