from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Backlog Finance API"
    api_prefix: str = "/api/v1"
    debug: bool = False
    auto_create_schema: bool = True
    seed_demo_data: bool = True

    database_url: str = "sqlite+pysqlite:///" + str(
        Path(__file__).resolve().parents[2] / "storage" / "finance.db"
    )
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    reports_dir: str = str(Path(__file__).resolve().parents[2] / "storage" / "reports")
    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60

    anomaly_z_threshold: Decimal = Decimal("2.0")
    forecast_periods: int = 3
    percentage_tolerance: Decimal = Decimal("0.01")
    low_fund_threshold_pct: Decimal = Decimal("10")
    fund_warning_remaining_pct: Decimal = Decimal("20")

    # Empty disables the remote tier; reports then read the local store only.
    remote_records_url: str = ""
    remote_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
