"""Tests for sequential scan orchestration."""

from unittest.mock import AsyncMock, call

import pytest

from gamepass_bot.bot.listing_resolver import ListingResolver
from gamepass_bot.bot.scan_orchestrator import ScanOrchestrator
from gamepass_bot.models import ListingQuoteResult

TEXT = (
    "https://www.roblox.com/game-pass/1/A https://www.roblox.com/game-pass/2/B "
    "https://www.roblox.com/game-pass/3/C https://www.roblox.com/game-pass/1/A"
)


def quote_for(reference: str) -> ListingQuoteResult:
    price = int(reference) * 100
    return ListingQuoteResult(reference=reference, price=price, net_payout=price * 7 // 10)


@pytest.fixture
def pricing_client():
    client = AsyncMock()
    client.quote.side_effect = quote_for
    return client


@pytest.mark.asyncio
async def test_scan_quotes_unique_links_in_order(pricing_client, fake_sleep) -> None:
    orchestrator = ScanOrchestrator(ListingResolver(), pricing_client, request_delay=0.35, sleep=fake_sleep)

    results = await orchestrator.scan(TEXT)

    assert [r.reference for r in results] == ["1", "2", "3"]
    assert [r.net_payout for r in results] == [70, 140, 210]
    assert pricing_client.quote.await_args_list == [call("1"), call("2"), call("3")]


@pytest.mark.asyncio
async def test_delay_between_quotes_only(pricing_client, fake_sleep) -> None:
    orchestrator = ScanOrchestrator(ListingResolver(), pricing_client, request_delay=0.35, sleep=fake_sleep)

    await orchestrator.scan(TEXT)

    assert fake_sleep.await_args_list == [call(0.35), call(0.35)]


@pytest.mark.asyncio
async def test_single_link_has_no_delay(pricing_client, fake_sleep) -> None:
    orchestrator = ScanOrchestrator(ListingResolver(), pricing_client, sleep=fake_sleep)

    results = await orchestrator.scan("https://www.roblox.com/game-pass/7")

    assert len(results) == 1
    fake_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_no_links_makes_no_calls(pricing_client, fake_sleep) -> None:
    orchestrator = ScanOrchestrator(ListingResolver(), pricing_client, sleep=fake_sleep)

    assert await orchestrator.scan("nothing to see") == []
    assert await orchestrator.scan(None) == []
    pricing_client.quote.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_listing_does_not_stop_scan(pricing_client, fake_sleep) -> None:
    def quote(reference: str) -> ListingQuoteResult:
        if reference == "2":
            return ListingQuoteResult(reference=reference, error="Failed to fetch gamepass info (404)")
        return quote_for(reference)

    pricing_client.quote.side_effect = quote
    orchestrator = ScanOrchestrator(ListingResolver(), pricing_client, sleep=fake_sleep)

    results = await orchestrator.scan(TEXT)

    assert [r.success for r in results] == [True, False, True]
