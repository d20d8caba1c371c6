"""
Settings — environment-driven client configuration.

    from cartflow.config import Settings

    settings = Settings.from_env()           # reads .env + CARTFLOW_* vars
    settings = Settings(api_url="http://shop.local/api", retry_wait=0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_STORAGE_PATH = Path(".cartflow.json")


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Client settings.

    request_timeout bounds every remote call; a timeout is reported as a
    retryable network failure, never as a validation outcome.
    retry_attempts / retry_wait apply to idempotent reads only.
    """

    api_url: str = DEFAULT_API_URL
    api_token: str | None = None
    request_timeout: float = 10.0
    retry_attempts: int = 3
    retry_wait: float = 0.3
    storage_path: Path = DEFAULT_STORAGE_PATH

    @classmethod
    def from_env(cls, env_file: str | os.PathLike[str] | None = None) -> Settings:
        load_dotenv(env_file)
        return cls(
            api_url=os.getenv("CARTFLOW_API_URL", DEFAULT_API_URL),
            api_token=os.getenv("CARTFLOW_API_TOKEN") or None,
            request_timeout=float(os.getenv("CARTFLOW_REQUEST_TIMEOUT", "10")),
            retry_attempts=int(os.getenv("CARTFLOW_RETRY_ATTEMPTS", "3")),
            retry_wait=float(os.getenv("CARTFLOW_RETRY_WAIT", "0.3")),
            storage_path=Path(os.getenv("CARTFLOW_STORAGE_PATH", str(DEFAULT_STORAGE_PATH))),
        )

    def with_token(self, token: str | None) -> Settings:
        """Copy with a different bearer token (e.g. after re-login)."""
        return replace(self, api_token=token)


__all__ = (
    "DEFAULT_API_URL",
    "DEFAULT_STORAGE_PATH",
    "Settings",
)
