"""Data models for the gamepass bot application.

Defines Pydantic models for the data structures used throughout the
application: registered Roblox groups and their on-disk registry, per-listing
pricing quotes, and membership check results. All models include validation
and type checking.
"""

import re
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

GROUP_LINK_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"roblox\.com/(?:communities|groups)/(\d+)", re.IGNORECASE
)

DEFAULT_WAIT_DAYS: Final[int] = 14


def extract_group_id(link: str) -> str | None:
    """Extract the numeric Roblox group id from a group/community link.

    Args:
        link: Group URL, e.g. https://www.roblox.com/communities/14638702/Nexus-Arc.

    Returns:
        Group id as a string, None if the link does not match.
    """
    match = GROUP_LINK_PATTERN.search(link)
    return match.group(1) if match else None


class GroupRecord(BaseModel):
    """Registered Roblox group used for eligibility checks.

    Attributes:
        name: Display name shown in eligibility reports.
        link: Group URL; the group id extracted from it is the record identity.
        wait_days: Days a member must wait before eligibility (stored, not enforced).
    """

    name: str = ""
    link: str
    wait_days: int = Field(default=DEFAULT_WAIT_DAYS, alias="waitDays")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def group_id(self) -> str | None:
        """Group id extracted from the link."""
        return extract_group_id(self.link)

    @property
    def display_name(self) -> str:
        """Name to show in reports, derived from the id when blank."""
        if self.name:
            return self.name
        gid = self.group_id
        return f"Group {gid}" if gid else "Group"


class GroupRegistry(BaseModel):
    """Persisted set of registered groups, in insertion order."""

    groups: list[GroupRecord] = Field(default_factory=list)

    def find_index(self, group_id: str) -> int | None:
        """Return the position of the record with this group id, if any."""
        for idx, group in enumerate(self.groups):
            if group.group_id == group_id:
                return idx
        return None

    def upsert(self, record: GroupRecord) -> bool:
        """Add a record or replace the one sharing its group id.

        Args:
            record: Record to store. Its link must contain a group id.

        Returns:
            True if an existing record was replaced, False if appended.

        Raises:
            ValueError: If the record link has no extractable group id.
        """
        group_id = record.group_id
        if group_id is None:
            raise ValueError(f"Not a Roblox group link: {record.link}")

        idx = self.find_index(group_id)
        if idx is None:
            self.groups.append(record)
            return False

        self.groups[idx] = record
        return True


class ListingQuoteResult(BaseModel):
    """Pricing outcome for a single game pass.

    Exactly one of ``price`` and ``error`` is meaningful. ``regional_pricing``
    is None when the details lookup could not be completed, which is distinct
    from False (checked, no experiment found).

    Attributes:
        reference: Game pass id.
        price: Listed price in Robux.
        net_payout: Robux the seller receives after the marketplace fee.
        regional_pricing: Whether a regional pricing experiment is active.
        error: Failure description when the price could not be obtained.
    """

    reference: str
    price: int | None = None
    net_payout: int | None = None
    regional_pricing: bool | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.price is not None

    @property
    def link(self) -> str:
        return f"https://roblox.com/game-pass/{self.reference}"


class GroupMembership(BaseModel):
    """Membership flag for one registered group."""

    group: GroupRecord
    is_member: bool


class MembershipResult(BaseModel):
    """Membership of one Roblox user across all registered groups.

    Attributes:
        username: Roblox username as typed by the requester.
        user_id: Resolved Roblox user id.
        memberships: One entry per registered group, in registry order.
    """

    username: str
    user_id: int
    memberships: list[GroupMembership] = Field(default_factory=list)


class EligibilityReport(BaseModel):
    """Structured eligibility report ready for the chat transport."""

    title: str
    subtitle: str = ""
    lines: list[str]
    footer: str

    def to_text(self) -> str:
        header = [self.title, self.subtitle] if self.subtitle else [self.title]
        return "\n".join([*header, "", *self.lines, "", self.footer])
