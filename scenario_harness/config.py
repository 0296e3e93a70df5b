"""Harness configuration.

Values come from defaults, overridden by HARNESS_* environment variables
(e.g. HARNESS_HEADLESS=false, HARNESS_WORKERS=4).
"""

import os
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "HARNESS_"

DEFAULT_BASE_URL = "https://playwright.dev/"
DEFAULT_API_URL = "https://jsonplaceholder.typicode.com"


class HarnessConfig(BaseModel):
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    launch_args: List[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )
    scenario_timeout: float = Field(default=30.0, gt=0)
    expect_timeout: float = Field(default=5.0, gt=0)
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "load"
    workers: int = Field(default=1, ge=1)
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    base_url: str = DEFAULT_BASE_URL
    api_url: str = DEFAULT_API_URL

    @field_validator("launch_args", mode="before")
    @classmethod
    def _split_args(cls, value):
        if isinstance(value, str):
            return [arg.strip() for arg in value.split(",") if arg.strip()]
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HarnessConfig":
        """Load configuration, letting HARNESS_* variables override defaults"""
        environ = os.environ if environ is None else environ
        overrides = {}
        for field_name in cls.model_fields:
            key = ENV_PREFIX + field_name.upper()
            if key in environ:
                overrides[field_name] = environ[key]
        return cls(**overrides)
