from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # SQLite by default; only used when CUSTOMER_STORE=sql
    DATABASE_URL: str = "sqlite:///./tierpoints.db"
    CUSTOMER_STORE: str = "memory"  # memory | sql

    # --- Earn rules ---
    # 1 point per POINTS_CURRENCY_UNIT spent, before the tier multiplier
    POINTS_CURRENCY_UNIT: int = 10

    MULTIPLIER_BRONZE: float = 1.0
    MULTIPLIER_SILVER: float = 1.0
    MULTIPLIER_GOLD: float = 1.2
    MULTIPLIER_PLATINUM: float = 2.0

    # --- Promotion thresholds (cumulative points) ---
    TIER_SILVER_FROM: int = 500
    TIER_GOLD_FROM: int = 750
    TIER_PLATINUM_FROM: int = 1000

    SEED_DEMO_CUSTOMERS: bool = True
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
