"""Roblox user and group membership lookups.

Both calls are single attempts: eligibility checks serve one interactive
requester, who is told to retry on failure instead of waiting through backoff.
"""

import logging
from typing import Any

from ..config import RobloxConfig, config
from ..models import GroupMembership, GroupRegistry, MembershipResult
from .http import RateLimitedFetcher, UpstreamError

logger = logging.getLogger(__name__)


class MembershipClient:
    """Resolves Roblox usernames and their group memberships."""

    def __init__(self, fetcher: RateLimitedFetcher, roblox: RobloxConfig | None = None) -> None:
        self.fetcher = fetcher
        self.roblox = roblox or config.roblox

    async def resolve_user(self, username: str) -> int | None:
        """Resolve a username to a Roblox user id.

        Args:
            username: Roblox username.

        Returns:
            User id, or None if no such user exists.

        Raises:
            UpstreamError: On a non-success status or an unexpected payload.
        """
        result = await self.fetcher.fetch(
            f"{self.roblox.users_url}/usernames/users",
            method="POST",
            max_retries=0,
            json={"usernames": [username], "excludeBannedUsers": False},
        )
        if not result.ok:
            raise UpstreamError(f"Failed to resolve username ({result.status})", result.status)

        users = _data_entries(result.json_body(), "username lookup")
        if not users:
            logger.info(f"Roblox user not found: {username}")
            return None

        first = users[0]
        user_id = first.get("id") if isinstance(first, dict) else None
        if isinstance(user_id, bool) or not isinstance(user_id, int | str):
            raise UpstreamError("Unexpected username lookup response")
        return int(user_id)

    async def list_user_groups(self, user_id: int) -> set[str]:
        """List ids of all groups a user belongs to.

        Raises:
            UpstreamError: On a non-success status or an unexpected payload.
        """
        result = await self.fetcher.fetch(
            f"{self.roblox.groups_url}/users/{user_id}/groups/roles",
            max_retries=0,
        )
        if not result.ok:
            raise UpstreamError(f"Failed to fetch user groups ({result.status})", result.status)

        group_ids = set()
        for entry in _data_entries(result.json_body(), "user groups"):
            group = entry.get("group") if isinstance(entry, dict) else None
            if isinstance(group, dict) and group.get("id") is not None:
                group_ids.add(str(group["id"]))
        return group_ids


def _data_entries(payload: Any, what: str) -> list[Any]:
    """Return the ``data`` list of a Roblox list response.

    Raises:
        UpstreamError: If the payload is not shaped like ``{"data": [...]}``.
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if data is None and isinstance(payload, dict):
        return []
    if not isinstance(data, list):
        raise UpstreamError(f"Unexpected {what} response")
    return data


def match_memberships(
    username: str, user_id: int, registry: GroupRegistry, group_ids: set[str]
) -> MembershipResult:
    """Cross-reference a user's groups with the registry.

    Matching is by group id only; display names and raw link text are ignored.
    """
    memberships = [
        GroupMembership(group=group, is_member=group.group_id is not None and group.group_id in group_ids)
        for group in registry.groups
    ]
    return MembershipResult(username=username, user_id=user_id, memberships=memberships)
