"""Response formatting for scan and eligibility reports.

Formats per-listing pricing results into Telegram-sized message chunks and
group membership results into a single eligibility report.
"""

import logging

from telegram.helpers import escape_markdown

from ..models import EligibilityReport, GroupRegistry, ListingQuoteResult
from ..services.membership import match_memberships
from ..services.pricing import PRICE_UNREADABLE
from .messages import (
    ELIGIBILITY_FOOTER,
    ELIGIBILITY_MEMBER_LINE,
    ELIGIBILITY_NOT_MEMBER_LINE,
    ELIGIBILITY_SUBTITLE,
    ELIGIBILITY_TITLE,
    PAYOUT_LINE,
    PRICE_LINE,
    QUOTE_FETCH_FAILED,
    QUOTE_PRICE_UNREADABLE,
    REGIONAL_PRICING_DETECTED,
    REGIONAL_PRICING_UNKNOWN,
)

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"


class ReportBuilder:
    """Formats scan results into length-bounded message chunks."""

    def __init__(self, chunk_limit: int = 3500) -> None:
        """Initialize report builder.

        Args:
            chunk_limit: Maximum characters per chunk, below the transport limit.
        """
        self.chunk_limit = chunk_limit

    def format_block(self, result: ListingQuoteResult) -> str:
        """Format the report block for one game pass.

        Args:
            result: Pricing result.

        Returns:
            Multi-line block starting with the game pass link.
        """
        lines = [result.link]

        if not result.success:
            if result.error == PRICE_UNREADABLE:
                lines.append(QUOTE_PRICE_UNREADABLE)
            else:
                logger.debug(f"Reporting failed quote for {result.reference}: {result.error}")
                lines.append(QUOTE_FETCH_FAILED)
            return "\n".join(lines)

        lines.append(PRICE_LINE.format(price=result.price))

        # Payout is meaningless while a regional price experiment is running
        if result.regional_pricing:
            lines.append(REGIONAL_PRICING_DETECTED)
            return "\n".join(lines)

        lines.append(PAYOUT_LINE.format(payout=result.net_payout))
        if result.regional_pricing is None:
            lines.append(REGIONAL_PRICING_UNKNOWN)

        return "\n".join(lines)

    def render(self, results: list[ListingQuoteResult]) -> list[str]:
        """Pack result blocks into chunks without splitting a block.

        Args:
            results: Pricing results in report order.

        Returns:
            Ordered message chunks, each at most ``chunk_limit`` characters.
        """
        chunks: list[str] = []
        current = ""

        for result in results:
            block = self.format_block(result)
            if len(block) > self.chunk_limit:
                logger.warning(f"Report block for {result.reference} truncated to {self.chunk_limit} chars")
                block = block[: self.chunk_limit]

            candidate = f"{current}{BLOCK_SEPARATOR}{block}" if current else block
            if len(candidate) <= self.chunk_limit:
                current = candidate
                continue

            chunks.append(current)
            current = block

        if current:
            chunks.append(current)

        return chunks


class EligibilityReportBuilder:
    """Formats group membership into an eligibility report."""

    def render(
        self, username: str, user_id: int, registry: GroupRegistry, group_ids: set[str]
    ) -> EligibilityReport:
        """Build the report for one user.

        Args:
            username: Roblox username as requested.
            user_id: Resolved Roblox user id.
            registry: Registered groups, reported in registry order.
            group_ids: Ids of the groups the user belongs to.

        Returns:
            EligibilityReport with one line per registered group.
        """
        result = match_memberships(username, user_id, registry, group_ids)

        lines = []
        for membership in result.memberships:
            template = (
                ELIGIBILITY_MEMBER_LINE if membership.is_member else ELIGIBILITY_NOT_MEMBER_LINE
            )
            name = escape_markdown(membership.group.display_name, version=1)
            lines.append(template.format(name=name, link=membership.group.link))

        return EligibilityReport(
            title=ELIGIBILITY_TITLE.format(username=escape_markdown(username, version=1)),
            subtitle=ELIGIBILITY_SUBTITLE,
            lines=lines,
            footer=ELIGIBILITY_FOOTER,
        )
