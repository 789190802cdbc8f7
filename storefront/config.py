"""
Application configuration — loaded once at startup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_SESSION_FILE = Path.home() / ".storefront" / "session.json"


@dataclass(frozen=True, slots=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 10.0
    purchase_timeout: float | None = None
    session_file: Path = DEFAULT_SESSION_FILE
    catalog_limit: int = 100
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        purchase_timeout = env.get("STOREFRONT_PURCHASE_TIMEOUT")
        return cls(
            api_url=env.get("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
            request_timeout=float(env.get("STOREFRONT_REQUEST_TIMEOUT", "10")),
            purchase_timeout=float(purchase_timeout) if purchase_timeout else None,
            session_file=Path(
                env.get("STOREFRONT_SESSION_FILE", str(DEFAULT_SESSION_FILE))
            ).expanduser(),
            catalog_limit=int(env.get("STOREFRONT_CATALOG_LIMIT", "100")),
            log_level=env.get("STOREFRONT_LOG_LEVEL", "WARNING").upper(),
        )


__all__ = ("Settings", "DEFAULT_API_URL", "DEFAULT_SESSION_FILE")
