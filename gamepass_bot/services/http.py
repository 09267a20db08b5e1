"""Outbound HTTP access to the Roblox APIs.

Every request the bot makes goes through RateLimitedFetcher so that Roblox
throttling (HTTP 429) is handled in one place: the fetcher waits for the
server-provided Retry-After hint, or an escalating fallback, and retries a
bounded number of times before handing the last throttled response back to
the caller.
"""

import asyncio
import json
import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any, Final

import aiohttp
from pydantic import BaseModel, Field

from ..config import config

logger = logging.getLogger(__name__)

THROTTLED_STATUS: Final[int] = 429
MIN_RETRY_WAIT_MS: Final[int] = 1000
FALLBACK_WAIT_STEP_MS: Final[int] = 1500

SleepFunc = Callable[[float], Awaitable[None]]


class UpstreamError(Exception):
    """Roblox endpoint answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class FetchResult(BaseModel):
    """Fully read HTTP response.

    Attributes:
        status: HTTP status code.
        headers: Response headers with lower-cased names.
        body: Raw response body.
    """

    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def throttled(self) -> bool:
        return self.status == THROTTLED_STATUS

    def json_body(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body) if self.body else None


def retry_wait_ms(retry_after: str | None, attempt: int) -> int:
    """Compute how long to wait before retrying a throttled request.

    Args:
        retry_after: Raw Retry-After header value in seconds, if sent.
        attempt: Zero-based number of the attempt that was throttled.

    Returns:
        Wait time in milliseconds, never below one second when hinted.
    """
    if retry_after:
        try:
            seconds = float(retry_after)
        except ValueError:
            # HTTP-date form is not used by Roblox
            logger.debug("Ignoring non-numeric Retry-After header: %s", retry_after)
        else:
            if math.isfinite(seconds):
                return max(MIN_RETRY_WAIT_MS, math.ceil(seconds * 1000))

    return FALLBACK_WAIT_STEP_MS * (attempt + 1)


def create_session() -> aiohttp.ClientSession:
    """Create configured aiohttp session for Roblox API calls.

    Returns:
        aiohttp.ClientSession: Session with timeouts, connection limits and JSON headers.
    """
    connector = aiohttp.TCPConnector(limit=20, limit_per_host=10)
    timeout = aiohttp.ClientTimeout(total=config.bot.timeout)

    headers = {
        "User-Agent": "Mozilla/5.0",
        "Accept": "application/json",
    }

    return aiohttp.ClientSession(connector=connector, timeout=timeout, headers=headers)


class RateLimitedFetcher:
    """HTTP client with bounded retry on Roblox throttling.

    Only HTTP 429 triggers a retry. Any other response, including error
    statuses, is returned on the first attempt. Network errors propagate.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        max_retries: int = 3,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize fetcher.

        Args:
            session: Shared HTTP session; created lazily when omitted.
            max_retries: Default number of extra attempts after a 429.
            sleep: Coroutine used to wait between attempts.
        """
        self._session = session
        self._owns_session = session is None
        self.max_retries = max_retries
        self._sleep = sleep

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_session()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(self, method: str, url: str, **kwargs: Any) -> FetchResult:
        session = self._get_session()
        async with session.request(method, url, **kwargs) as response:
            body = await response.read()
            headers = {name.lower(): value for name, value in response.headers.items()}
            return FetchResult(status=response.status, headers=headers, body=body)

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        max_retries: int | None = None,
        **kwargs: Any,
    ) -> FetchResult:
        """Perform a request, retrying while the server signals throttling.

        Args:
            url: Absolute request URL.
            method: HTTP method.
            max_retries: Extra attempts after a 429; 0 means a single attempt.
            **kwargs: Passed through to aiohttp (headers, json, params...).

        Returns:
            The first non-throttled result, or the last throttled one when
            retries are exhausted.

        Raises:
            aiohttp.ClientError: On connection level failures.
            asyncio.TimeoutError: When the request exceeds the session timeout.
        """
        retries = self.max_retries if max_retries is None else max_retries
        attempt = 0

        while True:
            result = await self._request(method, url, **kwargs)
            if not result.throttled:
                return result

            if attempt >= retries:
                logger.warning(f"Still rate limited after {attempt + 1} attempts: {url}")
                return result

            wait_ms = retry_wait_ms(result.headers.get("retry-after"), attempt)
            logger.warning(
                "Rate limited on %s (attempt %d/%d), retrying in %dms",
                url,
                attempt + 1,
                retries + 1,
                wait_ms,
            )
            await self._sleep(wait_ms / 1000)
            attempt += 1
