"""
Configuration loader.

- Reads env vars (.env loaded via python-dotenv)
- Provides strongly-typed Settings for the backend and the client pipeline
- Holds completion limits, rate limit knobs and the offline/fallback switches
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv


def _get(name: str, default: Optional[str] = None) -> str:
    v = os.environ.get(name, default)
    if v is None:
        raise RuntimeError(f"Missing required env: {name}")
    return v


@dataclass(frozen=True)
class Settings:
    SECRET_KEY: str

    # Completion API
    OPENAI_API_KEY: str | None
    OPENAI_MODEL: str
    OPENAI_TEMPERATURE: float
    OPENAI_PRESENCE_PENALTY: float
    OPENAI_FREQUENCY_PENALTY: float

    # Backend limits
    MAX_INPUT_TOKENS: int
    MAX_OUTPUT_TOKENS: int
    TOKENS_PER_WORD: float

    # HTTP surface
    CORS_ORIGINS: Tuple[str, ...]
    RATE_LIMIT_PER_MIN: int
    RATE_LIMIT_BURST: int
    PORT: int
    LOG_DIR: str

    # Client pipeline
    BACKEND_URL: str
    OFFLINE_MODE: bool
    FALLBACK_POLICY: str         # degrade | fail_fast
    REQUEST_TIMEOUT: float


_DEFAULT_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:3000",
)


def _to_bool(s: str | None, default: bool = False) -> bool:
    if s is None:
        return default
    if isinstance(s, bool):
        return s
    return str(s).strip().lower() in {"1", "true", "yes", "on"}


def _to_list(s, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if s is None:
        return default
    if isinstance(s, (list, tuple)):
        return tuple(s)
    return tuple(x.strip() for x in str(s).split(",") if x.strip())


def load_settings(override: dict | None = None) -> Settings:
    load_dotenv()
    o = override or {}
    return Settings(
        SECRET_KEY=o.get("SECRET_KEY", _get("SECRET_KEY", "change-me")),

        OPENAI_API_KEY=o.get("OPENAI_API_KEY", os.environ.get("OPENAI_API_KEY")) or None,
        OPENAI_MODEL=o.get("OPENAI_MODEL", _get("OPENAI_MODEL", "gpt-3.5-turbo")),
        OPENAI_TEMPERATURE=float(o.get("OPENAI_TEMPERATURE", os.environ.get("OPENAI_TEMPERATURE", 0.7))),
        OPENAI_PRESENCE_PENALTY=float(o.get("OPENAI_PRESENCE_PENALTY", os.environ.get("OPENAI_PRESENCE_PENALTY", 0.1))),
        OPENAI_FREQUENCY_PENALTY=float(o.get("OPENAI_FREQUENCY_PENALTY", os.environ.get("OPENAI_FREQUENCY_PENALTY", 0.1))),

        MAX_INPUT_TOKENS=int(o.get("MAX_INPUT_TOKENS", os.environ.get("MAX_INPUT_TOKENS", 16000))),
        MAX_OUTPUT_TOKENS=int(o.get("MAX_OUTPUT_TOKENS", os.environ.get("MAX_OUTPUT_TOKENS", 4000))),
        TOKENS_PER_WORD=float(o.get("TOKENS_PER_WORD", os.environ.get("TOKENS_PER_WORD", 1.3))),

        CORS_ORIGINS=_to_list(o.get("CORS_ORIGINS", os.environ.get("CORS_ORIGINS")), _DEFAULT_ORIGINS),
        RATE_LIMIT_PER_MIN=int(o.get("RATE_LIMIT_PER_MIN", os.environ.get("RATE_LIMIT_PER_MIN", 60))),
        RATE_LIMIT_BURST=int(o.get("RATE_LIMIT_BURST", os.environ.get("RATE_LIMIT_BURST", 30))),
        PORT=int(o.get("PORT", os.environ.get("PORT", 3000))),
        LOG_DIR=o.get("LOG_DIR", os.environ.get("LOG_DIR", "logs")),

        BACKEND_URL=o.get("BACKEND_URL", _get("BACKEND_URL", "http://localhost:3000")),
        OFFLINE_MODE=_to_bool(o.get("OFFLINE_MODE", os.environ.get("OFFLINE_MODE")), False),
        FALLBACK_POLICY=o.get("FALLBACK_POLICY", os.environ.get("FALLBACK_POLICY", "degrade")),
        REQUEST_TIMEOUT=float(o.get("REQUEST_TIMEOUT", os.environ.get("REQUEST_TIMEOUT", 30))),
    )
