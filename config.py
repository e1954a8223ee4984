"""
config.py
Runtime settings (environment variables prefixed WYC_, optional .env file).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Club admin settings"""

    model_config = SettingsConfigDict(env_prefix="WYC_", case_sensitive=False)

    db_file: Path = Field(default=Path(__file__).with_name("wyc.db"), description="SQLite database file")

    # Sessions
    session_max_age: int = Field(default=3600, description="Idle session lifetime (seconds)")

    # Listings
    default_page_size: int = 10
    max_page_size: int = 100

    # Passwords
    password_scheme: Literal["legacy", "bcrypt"] = Field(
        default="legacy", description="Scheme used for newly stored password hashes"
    )
    bcrypt_rounds: int = 12

    log_level: str = "INFO"
    timezone: str = "America/Los_Angeles"


@lru_cache
def get_settings() -> Settings:
    return Settings()
