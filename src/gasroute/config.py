"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GASROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Gas Delivery Route Planner API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for exported files.")

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service. Haversine estimates are used when unset.",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(default="driving")
    osrm_max_retries: int = Field(default=3, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)
    solver_time_limit_seconds: int = Field(default=5, ge=1)

    default_country: str = "South Africa"
    default_region: str = "Western Cape"

    min_optimize_stops: int = Field(default=3, ge=1)
    max_cylinders: int = Field(default=230, ge=1, description="Vehicle capacity in cylinders.")
    cylinder_weight_kg: float = Field(default=14.5, gt=0)
    fuel_price_per_litre: float = Field(default=21.95, ge=0)
    base_fuel_consumption_l_per_100km: float = Field(default=12.0, ge=0)
    fuel_load_factor: float = Field(default=0.02, ge=0, description="Consumption increase per 100kg of load.")
    maintenance_cost_per_km: float = Field(default=0.85, ge=0)
    service_minutes_per_stop: float = Field(default=5.0, ge=0)
    haversine_speed_kmh: float = Field(default=40.0, gt=0)

    # Drilldown duration heuristic
    drilldown_average_speed_kmh: float = Field(default=40.0, gt=0)
    drilldown_minutes_per_stop: float = Field(default=15.0, ge=0)
    drilldown_km_per_stop: float = Field(default=20.0, gt=0)
    drilldown_min_duration_minutes: float = Field(default=15.0, ge=0)
    drilldown_default_days: int = Field(default=7, ge=0)

    framing_default_zoom: int = Field(default=11, ge=1, le=20)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
