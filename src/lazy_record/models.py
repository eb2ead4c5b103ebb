"""
Pydantic models for lazy-record settings.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_BASE = "https://jsonplaceholder.typicode.com/"


class LazyRecordSettings(BaseModel):
    """Settings consumed by the demo clients and the CLI."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
    )

    api_base: str = Field(
        default=DEFAULT_API_BASE,
        min_length=1,
        description="Base URL of the JSONPlaceholder-style REST API",
    )
    timeout: float = Field(
        default=30.0, gt=0, description="HTTP request timeout in seconds"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level for the CLI"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("api_base")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        # httpx joins relative paths onto base_url; keep it a directory
        return value if value.endswith("/") else f"{value}/"
