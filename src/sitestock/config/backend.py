"""REST backend configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

BACKEND_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class BackendConfig:
    """Holds inventory backend configuration values."""

    base_url: str
    token: str | None
    resilience: ResilienceConfig


def backend_configured() -> bool:
    return optional_env("SITESTOCK_API_URL") is not None


def get_backend_config(*, resilience: ResilienceConfig | None = None) -> BackendConfig:
    values = require_env_vars(("SITESTOCK_API_URL",))
    base_url = values["SITESTOCK_API_URL"].strip().rstrip("/") + "/"
    return BackendConfig(
        base_url=base_url,
        token=optional_env("SITESTOCK_API_TOKEN"),
        resilience=resilience
        or ResilienceConfig(
            name="sitestock-backend",
            base_url=base_url,
            timeout_seconds=BACKEND_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
