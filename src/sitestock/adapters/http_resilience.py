"""Rate-limited, retrying httpx client shared by the HTTP adapters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from sitestock.config.http_resilience import ResilienceConfig, RetryPolicy

log = logging.getLogger(__name__)


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: float
    headers: Mapping[str, str]
    transport: httpx.AsyncBaseTransport


def retry_for(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


class ResilientClient:
    """Async client that retries idempotent calls and honours a rate limit.

    Retries happen inside the transport, so a returned response is the final
    attempt. The rate limiter wraps the whole attempt chain.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        options: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(retry=retry_for(config.retry)),
        }
        if config.base_url is not None:
            options["base_url"] = config.base_url
        if config.default_headers:
            options["headers"] = dict(config.default_headers)

        self._client = httpx.AsyncClient(**options)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: object = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.request(method, url, json=json, params=params)
        else:
            async with self._limiter:
                response = await self._client.request(method, url, json=json, params=params)
        if response.status_code in self.config.retry.status_forcelist:
            log.warning(
                "%s: %s %s still failing with %s after retries",
                self.config.name,
                method,
                response.request.url,
                response.status_code,
            )
        else:
            log.debug("%s: %s %s -> %s", self.config.name, method, url, response.status_code)
        return response
