"""Tests for Roblox throttling backoff in RateLimitedFetcher."""

from unittest.mock import call

import aiohttp
import pytest

from gamepass_bot.services.http import FetchResult, retry_wait_ms
from tests.utils.fakes import respond

URL = "https://apis.roblox.com/game-passes/v1/game-passes/1/details"


class TestRetryWait:
    def test_retry_after_hint_converted_to_ms(self) -> None:
        assert retry_wait_ms("2", attempt=0) == 2000
        assert retry_wait_ms("2.5", attempt=3) == 2500

    def test_retry_after_hint_has_one_second_floor(self) -> None:
        assert retry_wait_ms("0", attempt=0) == 1000
        assert retry_wait_ms("0.2", attempt=1) == 1000

    def test_fallback_escalates_per_attempt(self) -> None:
        assert retry_wait_ms(None, attempt=0) == 1500
        assert retry_wait_ms(None, attempt=1) == 3000
        assert retry_wait_ms(None, attempt=2) == 4500

    def test_unparseable_hint_uses_fallback(self) -> None:
        assert retry_wait_ms("Wed, 21 Oct 2015 07:28:00 GMT", attempt=1) == 3000
        assert retry_wait_ms("nan", attempt=0) == 1500


def test_fetch_result_ok_range() -> None:
    assert FetchResult(status=200).ok
    assert FetchResult(status=204).ok
    assert not FetchResult(status=404).ok
    assert FetchResult(status=429).throttled


@pytest.mark.asyncio
async def test_success_returned_on_first_attempt(fetcher, dummy_session, fake_sleep) -> None:
    dummy_session.add(URL, respond(200, {"ok": True}))

    result = await fetcher.fetch(URL)

    assert result.status == 200
    assert result.json_body() == {"ok": True}
    assert len(dummy_session.calls) == 1
    fake_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_error_status_is_not_retried(fetcher, dummy_session, fake_sleep) -> None:
    dummy_session.add(URL, respond(500), respond(200))

    result = await fetcher.fetch(URL)

    assert result.status == 500
    assert len(dummy_session.calls) == 1
    fake_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_throttled_then_success(fetcher, dummy_session, fake_sleep) -> None:
    dummy_session.add(URL, respond(429), respond(429), respond(200, {"ok": True}))

    result = await fetcher.fetch(URL)

    assert result.status == 200
    assert len(dummy_session.calls) == 3
    assert fake_sleep.await_args_list == [call(1.5), call(3.0)]


@pytest.mark.asyncio
async def test_retry_after_header_drives_wait(fetcher, dummy_session, fake_sleep) -> None:
    dummy_session.add(URL, respond(429, headers={"Retry-After": "4"}), respond(200))

    await fetcher.fetch(URL)

    fake_sleep.assert_awaited_once_with(4.0)


@pytest.mark.asyncio
async def test_exhausted_retries_return_last_throttled_response(
    fetcher, dummy_session, fake_sleep
) -> None:
    dummy_session.add(URL, respond(429))

    result = await fetcher.fetch(URL, max_retries=3)

    assert result.status == 429
    assert len(dummy_session.calls) == 4
    assert fake_sleep.await_count == 3


@pytest.mark.asyncio
async def test_zero_retries_is_single_attempt(fetcher, dummy_session, fake_sleep) -> None:
    dummy_session.add(URL, respond(429), respond(200))

    result = await fetcher.fetch(URL, max_retries=0)

    assert result.status == 429
    assert len(dummy_session.calls) == 1
    fake_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_request_kwargs_passed_through(fetcher, dummy_session) -> None:
    dummy_session.add(URL, respond(200))

    await fetcher.fetch(URL, method="POST", json={"usernames": ["builder"]})

    method, url, kwargs = dummy_session.calls[0]
    assert method == "POST"
    assert url == URL
    assert kwargs["json"] == {"usernames": ["builder"]}


@pytest.mark.asyncio
async def test_network_error_propagates(fetcher, dummy_session) -> None:
    dummy_session.add(URL, aiohttp.ClientConnectionError("connection reset"))

    with pytest.raises(aiohttp.ClientConnectionError):
        await fetcher.fetch(URL)


@pytest.mark.asyncio
async def test_close_leaves_injected_session_open(fetcher, dummy_session) -> None:
    await fetcher.close()

    assert dummy_session.closed is False
