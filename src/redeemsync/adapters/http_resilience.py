"""Async HTTP client with pacing, per-host rate limiting and bounded retries.

A retry happens on transport errors (connect failures, resets, the overall
per-attempt deadline of ``timeout_seconds``) and on responses whose status
the ``RetryPolicy`` marks as retryable. Once attempts run out the last
response is handed back unchanged, so callers decide what a non-2xx status
means to them; the last transport error is re-raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        AuthTypes,
        CookieTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestData,
        RequestExtensions,
        RequestFiles,
        TimeoutTypes,
        URLTypes,
    )

    from redeemsync.config.http_resilience import ResilienceConfig, RetryPolicy

    type Sleep = Callable[[float], Awaitable[None]]

log = logging.getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    data: RequestData | None
    files: RequestFiles | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    cookies: CookieTypes | None
    auth: AuthTypes | UseClientDefault | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    follow_redirects: bool
    transport: httpx.AsyncBaseTransport


def _return_last_outcome(retry_state: RetryCallState) -> httpx.Response:
    outcome = retry_state.outcome
    if outcome is None:  # pragma: no cover - tenacity always sets it before stopping
        raise RuntimeError("retry stopped without an outcome")
    return outcome.result()


class ResilientClient:
    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._limiters: dict[str, AsyncLimiter] = {}

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "follow_redirects": True,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

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
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            await self._pace(url)
            # httpx times each phase separately; this bounds the whole attempt, body included.
            try:
                async with asyncio.timeout(self.config.timeout_seconds):
                    return await self._client.request(method, url, **kwargs)
            except TimeoutError as exc:
                raise httpx.TimeoutException(
                    f"{method} {url} exceeded {self.config.timeout_seconds}s"
                ) from exc

        retrying = self._build_retrying(self.config.retry)
        return await retrying(do_request)

    async def get(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    def _build_retrying(self, policy: RetryPolicy) -> AsyncRetrying:
        def is_retryable(response: httpx.Response) -> bool:
            return policy.is_retryable_status(response.status_code)

        return AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(policy.max_retries + 1),
            wait=wait_exponential(
                multiplier=policy.base_backoff_seconds,
                exp_base=2,
                max=policy.max_backoff_wait,
            )
            + wait_random(0, policy.jitter_seconds),
            retry=retry_if_result(is_retryable) | retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log(log, logging.WARNING),
            retry_error_callback=_return_last_outcome,
        )

    async def _pace(self, url: URLTypes) -> None:
        if self.config.pacing_delay_seconds > 0:
            await self._sleep(self.config.pacing_delay_seconds)
        limiter = self._limiter_for(url)
        if limiter is not None:
            await limiter.acquire()

    def _limiter_for(self, url: URLTypes) -> AsyncLimiter | None:
        ratelimit = self.config.ratelimit
        if ratelimit is None:
            return None
        host = self._client.build_request("GET", url).url.host
        limiter = self._limiters.get(host)
        if limiter is None:
            limiter = AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)
            self._limiters[host] = limiter
        return limiter

