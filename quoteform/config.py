"""
Application settings loaded from environment variables.

Uses pydantic-settings for type-safe configuration with .env file support.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global quote form settings."""

    # App
    APP_NAME: str = "Crypto Purchase Form"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Rate feed (USD rates per symbol)
    RATE_FEED_URL: str = "https://api.coincap.io/v2/rates"
    RATE_FEED_API_KEY: str = ""
    RATE_FEED_MOCK: bool = True  # set False in production to call real API
    RATE_FEED_TIMEOUT_SECONDS: float = 10.0

    # Country directory
    COUNTRY_DIRECTORY_URL: str = "https://restcountries.com/v3.1/all?fields=name,ccn3"
    COUNTRY_DIRECTORY_MOCK: bool = True
    COUNTRY_DIRECTORY_TIMEOUT_SECONDS: float = 10.0

    # Quoting
    QUOTE_MARKUP: Decimal = Decimal("0.05")
    FIAT_AMOUNT_MIN: Decimal = Decimal("50")
    FIAT_AMOUNT_MAX: Decimal = Decimal("700")

    # Availability policy: billing country -> purchasable crypto symbols
    CRYPTO_AVAILABILITY: dict[str, list[str]] = {"Canada": ["BTC", "ETH"]}
    DEFAULT_CRYPTOS: list[str] = ["BTC"]

    # Submission
    REDIRECT_BASE_URL: str = "https://digitalcoinranker.com/"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
