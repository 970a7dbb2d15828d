"""
Nova Assistant — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from nova/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # LLM: groq, openai or anthropic
    LLM_PROVIDER: str = "groq"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str
    LLM_BASE_URL: str = ""       # empty → provider default endpoint
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 512
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Conversation
    HISTORY_WINDOW: int = 10

    # Batch dispatch: "continue" runs every intent, "abort" stops at the first failure
    BATCH_POLICY: str = "continue"

    # Presentation
    CURRENCY_SYMBOL: str = "৳"
    TIMEZONE: str = "Asia/Dhaka"

    @field_validator("LLM_TEMPERATURE", "LLM_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_float(cls, v: str | float) -> float:
        return float(v)

    @field_validator("LLM_MAX_TOKENS", "HISTORY_WINDOW", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("BATCH_POLICY", mode="before")
    @classmethod
    def parse_batch_policy(cls, v: str) -> str:
        policy = str(v).strip().lower() or "continue"
        if policy not in ("continue", "abort"):
            raise ValueError(f"BATCH_POLICY must be 'continue' or 'abort', got {v!r}")
        return policy


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    llm_api_key = os.getenv("LLM_API_KEY", "")

    if not llm_api_key or llm_api_key.startswith("your-"):
        print("ERROR: LLM_API_KEY is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "groq"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=llm_api_key,
        LLM_BASE_URL=os.getenv("LLM_BASE_URL", ""),
        LLM_TEMPERATURE=os.getenv("LLM_TEMPERATURE", "0.3"),
        LLM_MAX_TOKENS=os.getenv("LLM_MAX_TOKENS", "512"),
        LLM_TIMEOUT_SECONDS=os.getenv("LLM_TIMEOUT_SECONDS", "30"),
        HISTORY_WINDOW=os.getenv("HISTORY_WINDOW", "10"),
        BATCH_POLICY=os.getenv("BATCH_POLICY", "continue"),
        CURRENCY_SYMBOL=os.getenv("CURRENCY_SYMBOL", "৳"),
        TIMEZONE=os.getenv("TIMEZONE", "Asia/Dhaka"),
    )


# Imported by all other modules as:
#   from nova.config import settings
settings = _load_settings()
