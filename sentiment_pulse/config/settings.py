"""
SENTIMENT PULSE — Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Dict, List, Optional


class DataSourceSettings(BaseSettings):
    """Data source API keys, endpoints and transport behaviour."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional credentials; a missing key only disables that upstream
    alpha_vantage_key: str = ""
    fred_api_key: str = ""
    rapidapi_key: str = ""

    alpha_vantage_url: str = "https://www.alphavantage.co/query"
    fred_url: str = "https://api.stlouisfed.org/fred/series/observations"
    yahoo_hosts: List[str] = [
        "https://query1.finance.yahoo.com",
        "https://query2.finance.yahoo.com",
    ]
    rapidapi_fear_greed_url: str = "https://fear-and-greed-index.p.rapidapi.com/v1/fgi"
    alternative_me_url: str = "https://api.alternative.me/fng/"

    request_timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_base_seconds: float = 2.0
    backoff_jitter_seconds: float = 1.0
    rate_limit_delay_seconds: float = 2.0
    max_failures: int = 3
    user_agent: str = "Mozilla/5.0 (compatible; SentimentPulse/1.0)"


class CacheSettings(BaseSettings):
    """On-disk cache location and validity windows (minutes) per key category."""
    model_config = SettingsConfigDict(env_prefix="CACHE_", env_file=".env", extra="ignore")

    directory: str = "data/cache"
    memory_entries: int = 256
    fear_greed_minutes: float = 30.0
    options_minutes: float = 15.0
    major_index_minutes: float = 5.0
    default_minutes: float = 60.0
    major_index_tickers: List[str] = ["SPY", "QQQ", "IWM"]


class SymbolSettings(BaseSettings):
    """Ticker baskets for each indicator family."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    market_basket: List[str] = ["SPY", "QQQ", "IWM"]
    options_basket: List[str] = ["SPY", "QQQ", "IWM"]
    volatility_symbol: str = "^VIX"
    fred_volatility_series: str = "VIXCLS"
    safe_haven: List[str] = ["GLD", "TLT", "SHY"]
    risk_on: List[str] = ["QQQ", "ARKK", "EEM", "HYG"]
    risk_off: List[str] = ["SPLV", "LQD", "TLT", "GLD"]
    crypto_proxy: str = "BITO"
    benchmark: str = "SPY"


class ScoringSettings(BaseSettings):
    """Composite weights and strategy selection."""
    model_config = SettingsConfigDict(env_prefix="SCORING_", env_file=".env", extra="ignore")

    strategy: str = "baseline"  # baseline | extended
    baseline_weights: Dict[str, float] = {
        "fear_greed": 0.35,
        "market": 0.25,
        "volatility": 0.20,
        "options": 0.20,
    }
    extended_weights: Dict[str, float] = {
        "volatility": 0.25,
        "safe_haven": 0.20,
        "risk_appetite": 0.20,
        "fear_greed": 0.20,
        "crypto_correlation": 0.15,
    }
    timeframe_weights: Dict[str, float] = {
        "fear_greed": 0.40,
        "market": 0.40,
        "volatility": 0.20,
    }
    correlation_lookback: int = 20
    default_volatility_level: float = 20.0


class AppSettings(BaseSettings):
    """Top-level application settings."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "SENTIMENT PULSE"
    version: str = "1.0.0"
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    output_dir: str = Field(default="public/data")
    deterministic_fallback: bool = Field(default=False)

    data: DataSourceSettings = DataSourceSettings()
    cache: CacheSettings = CacheSettings()
    symbols: SymbolSettings = SymbolSettings()
    scoring: ScoringSettings = ScoringSettings()


# Singleton
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
