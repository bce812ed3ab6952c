"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with TYCOON_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="TYCOON_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///./tycoon.db"
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Auth ---
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    jwt_issuer: str = "bitcoin-tycoon"

    # --- Store ---
    store_backend: str = "memory"  # memory | sql
    store_max_retries: int = 5
    random_seed: int | None = None

    # --- Ledger ---
    initial_btc_balance: float = 10.0
    initial_usd_balance: float = 10_000.0
    initial_avatar: str = "icon1"

    # --- Mining ---
    btc_per_th_per_day: float = 0.01

    # --- Market ---
    market_start_price: float = 45_230.0
    market_tick_seconds: int = 5
    market_volatility: float = 0.05
    market_min_price: float = 1.0
    market_max_catchup_ticks: int = 720

    # --- Heist ---
    heist_prison_hours: int = 24

    # --- Companion ---
    neon_quest_hours: int = 48
    shadow_cooldown_hours: int = 24

    # --- Arena ---
    arena_entry_shards: int = 10
    arena_cooldown_hours: int = 24
    arena_tick_seconds: float = 0.1
    arena_idle_timeout_seconds: float = 300.0


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
