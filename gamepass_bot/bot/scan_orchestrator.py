"""Scan orchestration for game pass price lookups.

Turns the text of a scanned message into one pricing quote per referenced game
pass. Quotes are fetched one after another with a fixed pause in between so a
scan stays under Roblox rate limits instead of only reacting to them.
"""

import asyncio
import logging
from datetime import datetime

from ..models import ListingQuoteResult
from ..services.http import SleepFunc
from ..services.pricing import PricingClient
from .listing_resolver import ListingResolver

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """Coordinates link resolution and sequential pricing for one scan.

    Responsibilities:
    - Extract unique game pass ids from the scanned message
    - Quote every game pass strictly in link order
    - Space out Roblox calls with a fixed inter-request delay
    - Isolate per-listing failures so the rest of the scan proceeds
    """

    def __init__(
        self,
        resolver: ListingResolver,
        pricing_client: PricingClient,
        request_delay: float = 0.35,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize scan orchestrator.

        Args:
            resolver: Game pass link extractor.
            pricing_client: Client used to quote each game pass.
            request_delay: Seconds to wait between two quotes.
            sleep: Coroutine used for the inter-request pause.
        """
        self.resolver = resolver
        self.pricing_client = pricing_client
        self.request_delay = request_delay
        self._sleep = sleep

    async def quote_all(self, references: list[str]) -> list[ListingQuoteResult]:
        """Quote game passes sequentially, preserving input order.

        Args:
            references: Game pass ids.

        Returns:
            One result per reference, in the same order.
        """
        results: list[ListingQuoteResult] = []

        for index, reference in enumerate(references):
            if index:
                await self._sleep(self.request_delay)

            results.append(await self.pricing_client.quote(reference))

        return results

    async def scan(self, text: str | None) -> list[ListingQuoteResult]:
        """Run a full scan over a message.

        Args:
            text: Text of the message the scan trigger replied to.

        Returns:
            Quote results in link order; empty when the text holds no game pass links.
        """
        references = self.resolver.extract_references(text)
        if not references:
            logger.info("Scan requested on a message without game pass links")
            return []

        start_time = datetime.now()
        logger.info(f"Scanning {len(references)} game pass(es): {', '.join(references)}")

        results = await self.quote_all(references)

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        priced = sum(1 for result in results if result.success)
        logger.info(f"Scan finished: {priced}/{len(results)} priced in {processing_time}ms")

        return results
