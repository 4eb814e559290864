from functools import lru_cache
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from catalog import __version__

FYERS_SYMBOL_MASTER_URL = "https://public.fyers.in/sym_details/{name}_sym_master.json"

DEFAULT_INSTRUMENT_SOURCES = {
    f"{name}_sym_master.json": FYERS_SYMBOL_MASTER_URL.format(name=name)
    for name in ("NSE_CM", "BSE_CM", "NSE_FO", "BSE_FO", "NSE_CD", "MCX_COM")
}


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Instrument Catalog"
    VERSION: str = __version__
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Reference data
    DATA_DIR: str = "data"
    INSTRUMENT_SOURCES: dict[str, str] = DEFAULT_INSTRUMENT_SOURCES
    DOWNLOAD_TIMEOUT: int = 120
    INGEST_PRUNE_STALE: bool = False

    # Demo price feed
    PRICE_FEED_ENABLED: bool = True
    PRICE_FEED_INTERVAL: float = 3.0
    PRICE_FEED_SYMBOLS: list[str] = ["AAPL", "GOOGL", "MSFT", "AMZN", "TSLA"]

    SHUTDOWN_GRACE_PERIOD: float = 5.0

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
