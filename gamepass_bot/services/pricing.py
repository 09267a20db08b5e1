"""Roblox game pass pricing service.

Resolves a game pass id to its listed price, the seller's net payout after
the marketplace fee, and whether the pass is enrolled in a regional pricing
experiment. The experiment check needs an authenticated session cookie and is
best-effort: when it cannot be completed the quote is still returned with the
regional flag left unknown.
"""

import asyncio
import logging
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Final

import aiohttp

from ..config import PricingConfig, RobloxConfig, config
from ..models import ListingQuoteResult
from .http import RateLimitedFetcher, UpstreamError

logger = logging.getLogger(__name__)

PRICE_UNREADABLE: Final[str] = "price unreadable"


def net_payout(price: int, rate: Decimal = Decimal("0.7")) -> int:
    """Robux the seller receives for a sale at the given price.

    Args:
        price: Listed price in Robux.
        rate: Share kept by the seller.

    Returns:
        floor(price * rate), computed exactly.
    """
    return int((Decimal(price) * rate).to_integral_value(rounding=ROUND_FLOOR))


def parse_price(info: Any, fields: list[str]) -> int | None:
    """Read the price from a product-info payload.

    Args:
        info: Decoded product-info JSON.
        fields: Candidate keys, first present one wins.

    Returns:
        Positive integer price, None if missing, zero or not numeric.
    """
    if not isinstance(info, dict):
        return None

    raw = next((info[field] for field in fields if info.get(field) is not None), None)
    if raw is None or isinstance(raw, bool):
        return None

    try:
        price = int(Decimal(str(raw)))
    except (ArithmeticError, ValueError):
        return None

    return price if price > 0 else None


def has_regional_pricing(details: Any, flags: list[str], features: list[str]) -> bool:
    """Check a details payload for regional pricing / price optimization.

    Args:
        details: Decoded details JSON.
        flags: priceInformation keys that signal an experiment when True.
        features: enabledFeatures tokens that signal an experiment.

    Returns:
        True if any flag is True or any token is enabled.
    """
    if not isinstance(details, dict):
        return False

    price_info = details.get("priceInformation")
    if not isinstance(price_info, dict):
        return False

    if any(price_info.get(flag) is True for flag in flags):
        return True

    enabled = price_info.get("enabledFeatures")
    if not isinstance(enabled, list):
        return False

    return any(str(feature) in features for feature in enabled)


class PricingClient:
    """Quotes Roblox game passes."""

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        pricing: PricingConfig | None = None,
        roblox: RobloxConfig | None = None,
        max_retries: int = 3,
    ) -> None:
        self.fetcher = fetcher
        self.pricing = pricing or config.pricing
        self.roblox = roblox or config.roblox
        self.max_retries = max_retries

    async def fetch_product_info(self, reference: str) -> Any:
        """Fetch public product info for a game pass (single attempt).

        Raises:
            UpstreamError: On a non-success status.
        """
        url = f"{self.roblox.game_passes_url}/{reference}/product-info"
        result = await self.fetcher.fetch(url, max_retries=0)
        if not result.ok:
            raise UpstreamError(f"Failed to fetch gamepass info ({result.status})", result.status)
        return result.json_body()

    async def fetch_details(self, reference: str) -> Any:
        """Fetch authenticated game pass details, retrying on throttling.

        Raises:
            UpstreamError: If the cookie is not configured or the status is not a success.
        """
        cookie = self.roblox.security_cookie
        if not cookie:
            raise UpstreamError("ROBLOSECURITY is not configured")

        url = f"{self.roblox.game_passes_url}/{reference}/details"
        result = await self.fetcher.fetch(
            url,
            max_retries=self.max_retries,
            headers={"Cookie": f".ROBLOSECURITY={cookie}"},
        )
        if not result.ok:
            raise UpstreamError(f"Failed to fetch gamepass details ({result.status})", result.status)
        return result.json_body()

    async def check_regional_pricing(self, reference: str) -> bool | None:
        """Detect a regional pricing experiment.

        Returns:
            True/False when the details lookup succeeded, None when it could not be completed.
        """
        try:
            details = await self.fetch_details(reference)
        except (UpstreamError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.info(f"Regional detection failed for {reference}: {e}")
            return None

        return has_regional_pricing(
            details, self.pricing.experiment_flags, self.pricing.experiment_features
        )

    async def quote(self, reference: str) -> ListingQuoteResult:
        """Quote a single game pass.

        Args:
            reference: Game pass id.

        Returns:
            ListingQuoteResult. Failures are reported through ``error`` and never raised.
        """
        try:
            info = await self.fetch_product_info(reference)
        except (UpstreamError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Product info lookup failed for {reference}: {e}")
            return ListingQuoteResult(reference=reference, error=str(e) or "request failed")

        price = parse_price(info, self.pricing.price_fields)
        if price is None:
            logger.warning(f"Could not read price for gamepass {reference}")
            return ListingQuoteResult(reference=reference, error=PRICE_UNREADABLE)

        regional = await self.check_regional_pricing(reference)

        return ListingQuoteResult(
            reference=reference,
            price=price,
            net_payout=net_payout(price, self.pricing.payout_rate),
            regional_pricing=regional,
        )
