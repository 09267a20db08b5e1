"""Telegram bot handlers.

Thin handlers that delegate to injected components for listing resolution,
pricing, membership lookups and report formatting. Scans go through the
per-user cooldown and the process-wide scan queue; eligibility checks run
directly on the request path.
"""

import asyncio
import logging

import aiohttp
from dependency_injector.wiring import Provide, inject
from telegram import Message, Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from ..config import config
from ..core.container import Container
from ..models import DEFAULT_WAIT_DAYS, GroupRecord, extract_group_id
from ..services.http import UpstreamError
from ..services.membership import MembershipClient
from ..services.registry import RegistryStore
from .messages import (
    ADD_GROUP_INVALID_LINK,
    ADD_GROUP_OWNER_ONLY,
    ADD_GROUP_SAVED,
    ADD_GROUP_USAGE,
    ELIGIBLE_CHECKING,
    ELIGIBLE_GROUPS_FAILED,
    ELIGIBLE_LOOKUP_FAILED,
    ELIGIBLE_NO_GROUPS,
    ELIGIBLE_USAGE,
    ELIGIBLE_USER_NOT_FOUND,
    ELIGIBLE_WRONG_CHAT,
    SCAN_COOLDOWN,
    SCAN_FAILED,
    SCAN_NO_LINKS,
    START_MESSAGE,
)
from .response_formatter import EligibilityReportBuilder, ReportBuilder
from .scan_orchestrator import ScanOrchestrator
from .scan_queue import CooldownGate, ScanQueue

logger = logging.getLogger(__name__)

LOOKUP_ERRORS = (UpstreamError, aiohttp.ClientError, asyncio.TimeoutError, ValueError)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    if update.message:
        await update.message.reply_text(
            START_MESSAGE, parse_mode="Markdown", disable_web_page_preview=True
        )


@inject
async def handle_scan_trigger(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    cooldown_gate: CooldownGate = Provide[Container.cooldown_gate],
    scan_queue: ScanQueue = Provide[Container.scan_queue],
    scan_orchestrator: ScanOrchestrator = Provide[Container.scan_orchestrator],
    report_builder: ReportBuilder = Provide[Container.report_builder],
) -> None:
    """Handle a `scan` reply in the scan chat.

    The replied-to message is scanned for game pass links. Requests pass the
    per-user cooldown first and then wait their turn in the scan queue.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    message = update.message
    user = update.effective_user
    if not message or not user or not update.effective_chat or user.is_bot:
        return

    if not _in_configured_chat(update, config.bot.scan_chat_id):
        return

    if (message.text or "").strip().lower() != config.scan.trigger_word.lower():
        return

    replied = message.reply_to_message
    if replied is None:
        return

    if not cooldown_gate.admit(user.id):
        logger.info(f"Scan from user {user.id} rejected by cooldown")
        await message.reply_text(SCAN_COOLDOWN)
        return

    text = replied.text or replied.caption or ""

    async def run_scan() -> None:
        try:
            results = await scan_orchestrator.scan(text)
            if not results:
                await message.reply_text(SCAN_NO_LINKS)
                return

            for chunk in report_builder.render(results):
                await message.reply_text(
                    chunk, parse_mode="Markdown", disable_web_page_preview=True
                )
        except Exception:
            logger.exception(f"Scan failed for user {user.id}")
            await _reply_quietly(message, SCAN_FAILED)

    scan_queue.enqueue(run_scan)
    logger.info(f"Scan from user {user.id} queued ({scan_queue.pending} pending)")


@inject
async def eligible(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    membership_client: MembershipClient = Provide[Container.membership_client],
    registry_store: RegistryStore = Provide[Container.registry_store],
    eligibility_report_builder: EligibilityReportBuilder = Provide[
        Container.eligibility_report_builder
    ],
) -> None:
    """Handle /eligible <username>: report membership in every registered group.

    Args:
        update: Telegram update object containing message data.
        context: Bot context holding command arguments.
    """
    message = update.message
    if not message or not update.effective_chat:
        return

    if not _in_configured_chat(update, config.bot.eligible_chat_id):
        await message.reply_text(ELIGIBLE_WRONG_CHAT)
        return

    if not context.args:
        await message.reply_text(ELIGIBLE_USAGE)
        return

    username = context.args[0].strip()
    safe_username = escape_markdown(username, version=1)

    # Deferred reply: placeholder first, edited once Roblox answers
    placeholder = await message.reply_text(ELIGIBLE_CHECKING.format(username=username))

    try:
        user_id = await membership_client.resolve_user(username)
    except LOOKUP_ERRORS as e:
        logger.warning(f"Roblox user lookup failed for {username}: {e}")
        await placeholder.edit_text(ELIGIBLE_LOOKUP_FAILED)
        return

    if user_id is None:
        await placeholder.edit_text(
            ELIGIBLE_USER_NOT_FOUND.format(username=safe_username), parse_mode="Markdown"
        )
        return

    registry = registry_store.load()
    if not registry.groups:
        await placeholder.edit_text(ELIGIBLE_NO_GROUPS)
        return

    try:
        group_ids = await membership_client.list_user_groups(user_id)
    except LOOKUP_ERRORS as e:
        logger.warning(f"Group lookup failed for Roblox user {user_id}: {e}")
        await placeholder.edit_text(ELIGIBLE_GROUPS_FAILED)
        return

    report = eligibility_report_builder.render(username, user_id, registry, group_ids)
    await placeholder.edit_text(
        report.to_text(), parse_mode="Markdown", disable_web_page_preview=True
    )


@inject
async def add_group(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    registry_store: RegistryStore = Provide[Container.registry_store],
) -> None:
    """Handle /add_group <link> [name] [wait days] for the owner.

    Args:
        update: Telegram update object containing message data.
        context: Bot context holding command arguments.
    """
    message = update.message
    if not message:
        return

    if not _check_owner_permissions(update):
        await message.reply_text(ADD_GROUP_OWNER_ONLY)
        return

    args = list(context.args or [])
    if not args:
        await message.reply_text(ADD_GROUP_USAGE)
        return

    link = args.pop(0).strip()
    wait_days = DEFAULT_WAIT_DAYS
    if args and args[-1].isdigit():
        wait_days = int(args.pop())

    group_id = extract_group_id(link)
    if not group_id:
        await message.reply_text(ADD_GROUP_INVALID_LINK)
        return

    name = " ".join(args).strip() or f"Group {group_id}"
    registry_store.upsert(GroupRecord(name=name, link=link, wait_days=wait_days))

    await message.reply_text(
        ADD_GROUP_SAVED.format(name=escape_markdown(name, version=1)), parse_mode="Markdown"
    )


# === HELPER FUNCTIONS ===


def _check_owner_permissions(update: Update) -> bool:
    """Check if user is the configured owner.

    Args:
        update: Telegram update object.

    Returns:
        True if user is the owner, False otherwise.
    """
    if not update.effective_user:
        return False

    if not config.bot.owner_id:
        return False

    return update.effective_user.id == config.bot.owner_id


def _in_configured_chat(update: Update, chat_id: int | None) -> bool:
    """Check the update comes from the given chat; unset means any chat."""
    if chat_id is None:
        return True
    return update.effective_chat is not None and update.effective_chat.id == chat_id


async def _reply_quietly(message: Message, text: str) -> None:
    """Send a reply, logging instead of raising on transport errors."""
    try:
        await message.reply_text(text)
    except TelegramError as e:
        logger.warning(f"Failed to send reply: {e}")
