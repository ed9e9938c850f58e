from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BddySettings(BaseSettings):
    """Runner configuration loaded from BDDY_* environment variables."""

    show_status: bool = Field(default=True, description="Report status flags (IGNORE/SKIP/WIP) as categories")
    report_dir: str = Field(default="report", description="Directory for the JSON report")
    report_file: str = Field(default="report.json", description="JSON report file name")
    log_level: str = Field(default="WARNING", description="Log level of the command line")

    # Discovery
    feature_globs: List[str] = Field(
        default_factory=lambda: [
            "*_feature.py",
            "features/**/*.py",
        ]
    )
    ignore_globs: List[str] = Field(
        default_factory=lambda: [
            "**/.git/**",
            "**/.venv/**",
            "**/node_modules/**",
            "**/__pycache__/**",
            "**/report/**",
        ]
    )

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BDDY_", extra="ignore")
