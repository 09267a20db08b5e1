"""Game pass link extraction for scan requests."""

from __future__ import annotations

import logging
import re
from typing import Final

logger = logging.getLogger(__name__)


class ListingResolver:
    """Finds Roblox game pass ids in free-form message text."""

    GAME_PASS_PATTERN: Final[re.Pattern[str]] = re.compile(
        r"roblox\.com/game-pass/(\d+)", re.IGNORECASE
    )

    def extract_references(self, text: str | None) -> list[str]:
        """Extract unique game pass ids in order of first appearance."""
        if not text:
            return []

        references = list(dict.fromkeys(self.GAME_PASS_PATTERN.findall(text)))
        logger.debug("Extracted %d game pass references from text", len(references))
        return references
