"""Configuration management via environment variables and .env file."""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Config(BaseModel):
    """Application configuration loaded from environment."""

    # Places API credentials (name -> key), in GOOGLE_API_KEYS_ACTIVE order
    google_api_keys: dict[str, str] = Field(default_factory=dict)
    places_rate_limit_per_key: float = 8.0  # Google allows 10/sec, stay under

    # LLM (copy generation)
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    copy_model: str = "claude-sonnet-4-20250514"
    openai_copy_model: str = "gpt-4o"
    copy_max_tokens: int = 8192

    # Storage
    db_path: str = ".lead_pipeline.db"
    object_store_dir: str = ".lead_objects"
    search_cache_ttl_days: int = 30

    # Scrape task resources
    task_memory_mib: int = 4096
    task_cpu_units: int = 1024
    browser_executable_path: str = ""

    # Default per-stage concurrency when the job input has none
    default_concurrency: int = 5


def parse_active_key_names(raw: str) -> list[str]:
    """Split GOOGLE_API_KEYS_ACTIVE into trimmed, lower-cased names."""
    return [name.strip().lower() for name in raw.split(",") if name.strip()]


def load_google_api_keys() -> dict[str, str]:
    """Resolve GOOGLE_API_KEY_<NAME> for every active key name.

    Names without a matching variable are silently dropped.
    """
    keys: dict[str, str] = {}
    for name in parse_active_key_names(os.getenv("GOOGLE_API_KEYS_ACTIVE", "original")):
        value = os.getenv(f"GOOGLE_API_KEY_{name.upper()}", "")
        if value:
            keys[name] = value
    return keys


def load_config(require_places: bool = False, require_llm: bool = False) -> Config:
    """Load configuration from .env file and environment variables.

    Environment variables override .env values.
    Exits with an error message if keys required by the caller are missing.
    """
    load_dotenv()

    google_keys = load_google_api_keys()
    anthropic_key = os.getenv("ANTHROPIC_API_KEY", "") or os.getenv("CLAUDE_API_KEY", "")
    openai_key = os.getenv("OPENAI_API_KEY", "")

    errors = []
    if require_places and not google_keys:
        errors.append(
            "  - No active Google API keys: set GOOGLE_API_KEYS_ACTIVE and GOOGLE_API_KEY_<NAME>"
        )
    if require_llm and not anthropic_key and not openai_key:
        errors.append("  - At least one LLM key required: ANTHROPIC_API_KEY or OPENAI_API_KEY")

    if errors:
        print("Configuration error:", file=sys.stderr)
        for line in errors:
            print(line, file=sys.stderr)
        print("\nSet these in a .env file or as environment variables.", file=sys.stderr)
        sys.exit(1)

    return Config(
        google_api_keys=google_keys,
        places_rate_limit_per_key=float(os.getenv("PLACES_RATE_LIMIT_PER_KEY", "8")),
        anthropic_api_key=anthropic_key,
        openai_api_key=openai_key,
        copy_model=os.getenv("COPY_MODEL", "claude-sonnet-4-20250514"),
        openai_copy_model=os.getenv("OPENAI_COPY_MODEL", "gpt-4o"),
        copy_max_tokens=int(os.getenv("COPY_MAX_TOKENS", "8192")),
        db_path=os.getenv("LEAD_DB_PATH", ".lead_pipeline.db"),
        object_store_dir=os.getenv("OBJECT_STORE_DIR", ".lead_objects"),
        search_cache_ttl_days=int(os.getenv("SEARCH_CACHE_TTL_DAYS", "30")),
        task_memory_mib=int(os.getenv("TASK_MEMORY_MIB", "4096")),
        task_cpu_units=int(os.getenv("TASK_CPU_UNITS", "1024")),
        browser_executable_path=os.getenv("BROWSER_EXECUTABLE_PATH", ""),
        default_concurrency=int(os.getenv("DEFAULT_CONCURRENCY", "5")),
    )
