"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="COWTRACK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "COW Movement Analytics API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    movements_file: Path = Field(
        default=Path("data/movement-data.json"),
        description="Movement sheet export (.json snapshot, .csv or .xlsx).",
    )
    sheet_csv_url: Optional[str] = Field(
        default=None,
        description="Published Google Sheets CSV URL; takes precedence over movements_file when set.",
    )
    sheet_max_retries: int = Field(default=3, ge=0)
    sheet_backoff_seconds: float = Field(default=1.0, ge=0.0)
    sheet_timeout_seconds: float = Field(default=30.0, gt=0.0)
    top_n_default: int = Field(default=10, ge=1)
    excluded_warehouse_names: tuple[str, ...] = Field(
        default=("Bajda",),
        description="Location names that carry a WH marker but are not warehouses (e.g. repeaters).",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", "movements_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "excluded_warehouse_names", mode="before")
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
