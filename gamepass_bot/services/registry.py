"""Group registry storage.

Keeps the administrator-configured Roblox groups in a small JSON file. Older
files stored bare group links instead of records; those are migrated to full
records every time the file is loaded.
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..config import config
from ..models import DEFAULT_WAIT_DAYS, GroupRecord, GroupRegistry, extract_group_id

logger = logging.getLogger(__name__)

SEED_GROUP = GroupRecord(
    name="Nexus Arc",
    link="https://www.roblox.com/communities/14638702/Nexus-Arc#!/about",
    wait_days=DEFAULT_WAIT_DAYS,
)


def _default_name(link: str) -> str:
    group_id = extract_group_id(link)
    return f"Group {group_id}" if group_id else "Group"


def _migrate_entry(entry: Any) -> GroupRecord | None:
    """Map one stored entry (legacy link string or record dict) to a GroupRecord."""
    if isinstance(entry, str):
        if not entry:
            return None
        return GroupRecord(name=_default_name(entry), link=entry, wait_days=DEFAULT_WAIT_DAYS)

    if not isinstance(entry, dict):
        return None

    link = str(entry.get("link") or "")
    if not link:
        return None

    try:
        wait_days = int(entry.get("waitDays", entry.get("wait_days", DEFAULT_WAIT_DAYS)))
    except (TypeError, ValueError):
        wait_days = DEFAULT_WAIT_DAYS

    name = str(entry.get("name") or _default_name(link))
    return GroupRecord(name=name, link=link, wait_days=wait_days)


def normalize(raw: Any) -> GroupRegistry:
    """Build a registry from raw stored data.

    Legacy string entries become records with the default wait period and a
    name derived from the group id. Entries without a usable link are dropped.

    Args:
        raw: Decoded JSON content of the registry file.

    Returns:
        GroupRegistry with only canonical records.
    """
    entries = raw.get("groups") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        entries = []

    groups = [record for record in map(_migrate_entry, entries) if record is not None]
    dropped = len(entries) - len(groups)
    if dropped:
        logger.warning(f"Dropped {dropped} registry entries without a usable link")

    return GroupRegistry(groups=groups)


class RegistryStore:
    """JSON file backed group registry."""

    def __init__(self, db_path: str | Path | None = None):
        """Initialize store.

        Args:
            db_path: Registry file location, defaults to GROUPS_DB_PATH.
        """
        self.db_path = Path(db_path or config.registry.db_path)

    def load(self) -> GroupRegistry:
        """Load and normalize the registry, seeding it on first use."""
        if not self.db_path.exists():
            registry = GroupRegistry(groups=[SEED_GROUP.model_copy()])
            self.save(registry)
            logger.info(f"Initialized group registry at {self.db_path}")
            return registry

        with open(self.db_path, encoding="utf-8") as f:
            raw = json.load(f)

        return normalize(raw)

    def save(self, registry: GroupRegistry) -> None:
        """Persist the full registry."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        data = registry.model_dump(by_alias=True)
        with open(self.db_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def upsert(self, record: GroupRecord) -> bool:
        """Add or replace a group keyed by its group id and save.

        Returns:
            True if an existing group was replaced.

        Raises:
            ValueError: If the record link has no group id.
        """
        registry = self.load()
        replaced = registry.upsert(record)
        self.save(registry)
        logger.info(f"{'Updated' if replaced else 'Added'} group {record.group_id}: {record.name}")
        return replaced
