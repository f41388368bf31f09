"""
Runtime configuration loaded once at process start.

All values come from the environment (optionally seeded from a ``.env``
file). Nothing here is mutated after startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from dotenv import load_dotenv
from loguru import logger


DEFAULT_DIFY_API_URL = "https://api.dify.ai/v1"
DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

# Substrings in an upstream body meaning the judge's model provider has no credentials.
DEFAULT_CONFIGURATION_ERROR_MARKERS: Tuple[str, ...] = (
    "provider_not_initialize",
    "model provider credentials",
)


def load_env_file(env_path: Optional[Path] = None) -> bool:
    """Load a .env file from the project root if present."""
    env_path = env_path or Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded .env from {env_path}")
        return True
    logger.debug(f"No .env file found at {env_path}")
    return False


def _as_bool(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


def _as_optional_float(raw: Optional[str]) -> Optional[float]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric JUDGE_UPSTREAM_TIMEOUT_SECONDS={raw!r}")
        return None


@dataclass(frozen=True)
class Settings:
    dify_api_url: str = DEFAULT_DIFY_API_URL
    webhook_url: str = ""
    public_base_url: str = ""
    registry_config_path: Optional[str] = None
    # None keeps the HTTP client's own default timeout.
    upstream_timeout_seconds: Optional[float] = None
    production: bool = False
    allowed_origins: List[str] = field(default_factory=lambda: DEFAULT_ALLOWED_ORIGINS.split(","))
    database_url: str = ""
    configuration_error_markers: Tuple[str, ...] = DEFAULT_CONFIGURATION_ERROR_MARKERS

    @property
    def archive_enabled(self) -> bool:
        return bool(self.database_url)

    def endpoint_url(self, path: str) -> str:
        base = self.public_base_url.rstrip("/")
        return f"{base}{path}" if base else path

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        origins = [o.strip() for o in (env.get("JUDGE_ALLOWED_ORIGINS") or DEFAULT_ALLOWED_ORIGINS).split(",") if o.strip()]
        markers = tuple(
            m.strip().lower()
            for m in (env.get("JUDGE_CONFIG_ERROR_MARKERS") or "").split(",")
            if m.strip()
        )

        return cls(
            dify_api_url=(env.get("DIFY_API_URL") or DEFAULT_DIFY_API_URL).rstrip("/"),
            webhook_url=(env.get("JUDGE_WEBHOOK_URL") or "").strip(),
            public_base_url=(env.get("JUDGE_PUBLIC_BASE_URL") or "").strip(),
            registry_config_path=(env.get("JUDGE_REGISTRY_CONFIG") or "").strip() or None,
            upstream_timeout_seconds=_as_optional_float(env.get("JUDGE_UPSTREAM_TIMEOUT_SECONDS")),
            production=_as_bool(env.get("JUDGE_PRODUCTION")),
            allowed_origins=origins,
            database_url=(env.get("DATABASE_URL") or "").strip(),
            configuration_error_markers=markers or DEFAULT_CONFIGURATION_ERROR_MARKERS,
        )
